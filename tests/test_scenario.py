import numpy as np
import pytest

from track_synth.coverage import EffortCoverage
from track_synth.efforts import EffortGenConfig, SkillDistribution
from track_synth.errors import ConfigurationError
from track_synth.models import Region
from track_synth.paths import RoutePattern
from track_synth.profiles import AthleteProfile
from track_synth.scenario import PRESETS, ScenarioBuilder
from track_synth.segments import SegmentExtractConfig
from track_synth.utils import new_id


def _three_segment_builder(users, start_time):
    return (
        ScenarioBuilder()
        .with_seed(42)
        .with_users(users)
        .with_start_time(start_time)
        .with_track_distance(5000.0)
        .with_activities_per_user(1, 2)
        .with_segment(0.1, 0.4, "A")
        .with_segment(0.3, 0.6, "B")
        .with_segment(0.5, 0.9, "C")
        .with_efforts_per_user(1, 1)
    )


def test_end_to_end_single_segment(start_time):
    result = (
        ScenarioBuilder()
        .with_seed(42)
        .with_users(5)
        .with_start_time(start_time)
        .with_segment(0.2, 0.8, "Test")
        .build_data()
    )
    assert len(result.users) == 5
    assert 5 <= len(result.activities) <= 15
    assert len(result.segments) == 1
    assert result.efforts
    for effort in result.efforts:
        assert effort.elapsed_time_seconds > 0
        assert effort.average_speed_mps > 0
        assert (effort.start_fraction, effort.end_fraction) == (0.2, 0.8)
        assert effort.segment_id == result.segments[0].id


def test_build_is_reproducible(start_time):
    first = _three_segment_builder(5, start_time).build_data()
    second = _three_segment_builder(5, start_time).build_data()
    assert [s.id for s in first.segments] == [s.id for s in second.segments]
    assert [e.elapsed_time_seconds for e in first.efforts] == [
        e.elapsed_time_seconds for e in second.efforts
    ]


def test_activities_are_staggered_by_day(start_time):
    result = _three_segment_builder(4, start_time).build_data()
    starts = [activity.submitted_at for activity in result.activities]
    assert starts[0] == start_time
    assert all((b - a).days == 1 for a, b in zip(starts, starts[1:]))
    for activity in result.activities:
        assert 1 <= len(result.activities_for(activity.user_id)) <= 2


def test_full_coverage_cardinality(start_time):
    result = _three_segment_builder(20, start_time).build_data()
    assert len(result.segments) == 3
    assert len(result.efforts) == len(result.segments) * len(result.users)


def test_sparse_coverage_cardinality(start_time):
    full = len(_three_segment_builder(30, start_time).build_data().efforts)
    sparse = (
        _three_segment_builder(30, start_time)
        .with_coverage(EffortCoverage.sparse(0.5))
        .build_data()
    )
    assert 0.3 * full <= len(sparse.efforts) <= 0.7 * full


def test_zipf_coverage_favours_first_segment(start_time):
    result = (
        ScenarioBuilder.zipf_coverage_test()
        .with_users(30)
        .with_activities_per_user(1, 1)
        .with_start_time(start_time)
        .build_data()
    )
    assert len(result.segments) == 5
    counts = [len(result.efforts_for(segment.id)) for segment in result.segments]
    average = sum(counts) / len(counts)
    assert counts[0] >= average / 2
    assert counts[0] == 30


def test_user_ids_and_profile_override(start_time):
    rng = np.random.default_rng(3)
    ids = [new_id(rng) for _ in range(3)]
    result = (
        ScenarioBuilder()
        .with_user_ids(ids)
        .with_profile(AthleteProfile.hiker())
        .with_route_pattern(RoutePattern.LOOP)
        .with_track_distance(2000.0)
        .with_start_time(start_time)
        .with_segment(0.1, 0.5, "Loop Start")
        .build_data(np.random.default_rng(8))
    )
    assert [user.id for user in result.users] == ids
    assert {activity.user_id for activity in result.activities} <= set(ids)
    # Hikers move slowly: 2 km takes well over ten minutes.
    assert all(activity.duration_seconds > 600 for activity in result.activities)


def test_auto_climbs_keep_fractions_in_range(start_time):
    result = (
        ScenarioBuilder.climb_category_test()
        .with_users(3)
        .with_activities_per_user(1, 1)
        .with_start_time(start_time)
        .build_data()
    )
    assert 1 <= len(result.segments) <= 6
    for effort in result.efforts:
        assert 0.0 <= effort.start_fraction < effort.end_fraction <= 1.0
    for point in result.activities[0].track_points:
        assert Region.RENO_TAHOE.contains(point.lat, point.lon, tolerance=1e-9)


def test_no_users_yields_empty_scenario(start_time):
    result = (
        ScenarioBuilder().with_users(0).with_segment(0.2, 0.8, "X").with_start_time(start_time).build_data()
    )
    assert result.users == []
    assert result.segments == []
    assert result.efforts == []


def test_presets_configuration():
    leaderboard = ScenarioBuilder.leaderboard_test()
    assert leaderboard.user_count == 200
    assert len(leaderboard.segments) == 1
    overlap = ScenarioBuilder.segment_overlap_test()
    assert [s.name for s in overlap.segments][1] == "Segment B (overlaps A)"
    assert ScenarioBuilder.climb_category_test().region == Region.RENO_TAHOE
    assert set(PRESETS) == {
        "leaderboard",
        "segment_overlap",
        "climb_category",
        "sparse_coverage",
        "zipf_coverage",
    }


@pytest.mark.parametrize(
    "configure",
    [
        lambda b: b.with_segment(0.6, 0.4, "bad"),
        lambda b: b.with_users(-1),
        lambda b: b.with_efforts_per_user(3, 1),
        lambda b: b.with_track_distance(0.0),
        lambda b: b.with_seed(-1),
    ],
)
def test_invalid_builder_configuration(configure):
    with pytest.raises(ConfigurationError):
        configure(ScenarioBuilder())


def test_segment_config_reaches_extraction(start_time):
    result = (
        ScenarioBuilder()
        .with_seed(42)
        .with_users(3)
        .with_start_time(start_time)
        .with_segment_config(SegmentExtractConfig(min_length_m=100.0, max_length_m=150.0))
        .with_segment(0.2, 0.8, "Too Long")
        .build_data()
    )
    assert result.segments == []
    assert result.efforts == []


def test_effort_config_reaches_synthesis(start_time):
    builder = (
        ScenarioBuilder()
        .with_seed(42)
        .with_users(4)
        .with_start_time(start_time)
        .with_effort_config(EffortGenConfig(pause_probability=0.0))
        .with_skill_distribution(SkillDistribution.uniform())
        .with_segment(0.2, 0.6, "Steady")
    )
    assert builder.effort_config.pause_probability == 0.0
    assert builder.effort_config.skill_distribution == SkillDistribution.uniform()
    result = builder.build_data()
    assert result.efforts
    for effort in result.efforts:
        assert effort.moving_time_seconds == effort.elapsed_time_seconds
