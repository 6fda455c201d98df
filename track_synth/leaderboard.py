"""Leaderboard and summary helpers.

Pure functions that turn an in-memory :class:`ScenarioResult` into pandas
DataFrames and summary metrics. Nothing here touches randomness.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional
from uuid import UUID

import pandas as pd

from .scenario import ScenarioResult
from .utils import format_time

USER_COL = "User"
USER_ID_COL = "User ID"
ATTEMPTS_COL = "Attempts"
FASTEST_SEC_COL = "Fastest Time (sec)"
FASTEST_FMT_COL = "Fastest Time (h:mm:ss)"
FASTEST_DATE_COL = "Fastest Date"
SPEED_COL = "Average Speed (m/s)"
RANK_COL = "Rank"

LEADERBOARD_COLUMNS = [
    RANK_COL,
    USER_COL,
    USER_ID_COL,
    ATTEMPTS_COL,
    FASTEST_SEC_COL,
    FASTEST_FMT_COL,
    FASTEST_DATE_COL,
    SPEED_COL,
]


def efforts_frame(result: ScenarioResult) -> pd.DataFrame:
    """Return one row per effort with segment and user attribution."""

    segment_names = {segment.id: segment.name for segment in result.segments}
    user_names = {user.id: user.name for user in result.users}
    rows = [
        {
            "effort_id": effort.id,
            "segment_id": effort.segment_id,
            "segment": segment_names.get(effort.segment_id),
            "user_id": effort.user_id,
            "user": user_names.get(effort.user_id),
            "activity_id": effort.activity_id,
            "started_at": effort.started_at,
            "elapsed_time_seconds": effort.elapsed_time_seconds,
            "moving_time_seconds": effort.moving_time_seconds,
            "average_speed_mps": effort.average_speed_mps,
            "max_speed_mps": effort.max_speed_mps,
        }
        for effort in result.efforts
    ]
    return pd.DataFrame(rows)


def leaderboard_frame(result: ScenarioResult, segment_id: UUID) -> pd.DataFrame:
    """Rank users on one segment by their best elapsed time.

    Ties share the same (minimum) rank. Returns an empty frame with the
    leaderboard columns when the segment has no efforts.
    """

    df = efforts_frame(result)
    if df.empty:
        return pd.DataFrame(columns=LEADERBOARD_COLUMNS)
    df = df[df["segment_id"] == segment_id]
    if df.empty:
        return pd.DataFrame(columns=LEADERBOARD_COLUMNS)

    attempts = df.groupby("user_id").size()
    best = df.loc[df.groupby("user_id")["elapsed_time_seconds"].idxmin()]
    best = best.reset_index(drop=True)
    board = pd.DataFrame(
        {
            USER_COL: best["user"],
            USER_ID_COL: best["user_id"],
            ATTEMPTS_COL: best["user_id"].map(attempts).astype(int),
            FASTEST_SEC_COL: best["elapsed_time_seconds"],
            FASTEST_DATE_COL: best["started_at"],
            SPEED_COL: best["average_speed_mps"],
        }
    )
    board[FASTEST_FMT_COL] = board[FASTEST_SEC_COL].map(format_time)
    board[RANK_COL] = board[FASTEST_SEC_COL].rank(method="min", ascending=True).astype(int)
    board.sort_values(by=[RANK_COL, USER_COL], inplace=True)
    board.reset_index(drop=True, inplace=True)
    return board[LEADERBOARD_COLUMNS]


@dataclass(slots=True, frozen=True)
class ScenarioMetrics:
    """Counts and effort-time statistics of a generated scenario."""

    users: int
    activities: int
    segments: int
    efforts: int
    categorized_segments: int
    fastest_seconds: Optional[float]
    median_seconds: Optional[float]
    slowest_seconds: Optional[float]
    mean_seconds: Optional[float]

    @classmethod
    def from_result(cls, result: ScenarioResult) -> "ScenarioMetrics":
        times = pd.Series(
            [effort.elapsed_time_seconds for effort in result.efforts], dtype=float
        )

        def stat(value: Any) -> Optional[float]:
            return None if times.empty else float(value)

        return cls(
            users=len(result.users),
            activities=len(result.activities),
            segments=len(result.segments),
            efforts=len(result.efforts),
            categorized_segments=sum(
                1 for segment in result.segments if segment.climb_category is not None
            ),
            fastest_seconds=stat(times.min()),
            median_seconds=stat(times.median()),
            slowest_seconds=stat(times.max()),
            mean_seconds=stat(times.mean()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def segment_summary_frame(result: ScenarioResult) -> pd.DataFrame:
    """Return one row per segment with its stats and effort count."""

    counts = pd.Series(
        [effort.segment_id for effort in result.efforts], dtype=object
    ).value_counts()
    rows = []
    for segment in result.segments:
        rows.append(
            {
                "segment": segment.name,
                "distance_m": round(segment.distance_meters, 1),
                "gain_m": segment.elevation_gain_meters,
                "average_grade": segment.average_grade,
                "category": (
                    segment.climb_category.label
                    if segment.climb_category is not None
                    else None
                ),
                "visibility": segment.visibility.value,
                "efforts": int(counts.get(segment.id, 0)),
            }
        )
    return pd.DataFrame(rows)


__all__ = [
    "LEADERBOARD_COLUMNS",
    "ScenarioMetrics",
    "efforts_frame",
    "leaderboard_frame",
    "segment_summary_frame",
]
