import json

import pytest

from track_synth.leaderboard import (
    LEADERBOARD_COLUMNS,
    ScenarioMetrics,
    leaderboard_frame,
    segment_summary_frame,
)
from track_synth.main import main
from track_synth.scenario import ScenarioBuilder, ScenarioResult
from track_synth.utils import format_time, new_id


@pytest.fixture
def scenario(start_time):
    return (
        ScenarioBuilder()
        .with_seed(7)
        .with_users(8)
        .with_start_time(start_time)
        .with_activities_per_user(2, 3)
        .with_segment(0.2, 0.6, "Hill")
        .with_efforts_per_user(1, 3)
        .build_data()
    )


def test_leaderboard_ranks_best_effort_per_user(scenario):
    segment = scenario.segments[0]
    board = leaderboard_frame(scenario, segment.id)
    assert list(board.columns) == LEADERBOARD_COLUMNS
    assert len(board) == len(scenario.users)
    assert board["Rank"].iloc[0] == 1
    assert board["Fastest Time (sec)"].is_monotonic_increasing
    efforts = scenario.efforts_for(segment.id)
    assert board["Attempts"].sum() == len(efforts)
    assert board["Fastest Time (sec)"].iloc[0] == pytest.approx(
        min(e.elapsed_time_seconds for e in efforts)
    )
    first = board.iloc[0]
    assert first["Fastest Time (h:mm:ss)"] == format_time(first["Fastest Time (sec)"])


def test_leaderboard_unknown_segment_is_empty(scenario, rng):
    board = leaderboard_frame(scenario, new_id(rng))
    assert board.empty
    assert list(board.columns) == LEADERBOARD_COLUMNS
    assert leaderboard_frame(ScenarioResult(), new_id(rng)).empty


def test_metrics_from_result(scenario):
    metrics = ScenarioMetrics.from_result(scenario)
    assert metrics.users == 8
    assert metrics.segments == 1
    assert metrics.efforts == len(scenario.efforts)
    assert metrics.fastest_seconds <= metrics.median_seconds <= metrics.slowest_seconds
    assert metrics.to_dict()["activities"] == len(scenario.activities)


def test_metrics_for_empty_result():
    metrics = ScenarioMetrics.from_result(ScenarioResult())
    assert metrics.efforts == 0
    assert metrics.fastest_seconds is None
    assert metrics.mean_seconds is None


def test_segment_summary(scenario):
    summary = segment_summary_frame(scenario)
    assert list(summary["segment"]) == ["Hill"]
    assert summary["efforts"].iloc[0] == len(scenario.efforts)


def test_format_time():
    assert format_time(3725.4) == "1:02:05"
    assert format_time(59.6) == "0:01:00"


def test_cli_prints_json_metrics(capsys):
    code = main(
        [
            "--preset",
            "segment_overlap",
            "--users",
            "3",
            "--seed",
            "5",
            "--start-time",
            "2025-01-01T00:00:00",
            "--json",
        ]
    )
    assert code == 0
    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["users"] == 3
    assert payload["segments"] == 3


def test_cli_rejects_invalid_configuration():
    assert main(["--preset", "leaderboard", "--users", "-1"]) == 2


def test_cli_rejects_negative_seed():
    assert main(["--preset", "leaderboard", "--seed", "-1"]) == 2
