"""Activity generation from timed tracks."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import List, Sequence, Tuple
from uuid import UUID

import numpy as np

from .activity_types import ActivityType
from .config import (
    ACTIVITY_MOVING_SPEED_THRESHOLD_MPS,
    ACTIVITY_NAME_SUFFIX_PROBABILITY,
    ACTIVITY_PUBLIC_PROBABILITY,
)
from .geo import step_distances
from .models import GeneratedActivity, TrackPoint, Visibility
from .utils import new_id


@dataclass(slots=True)
class ActivityNameConfig:
    """Word lists used to name generated activities."""

    running_prefixes: List[str] = field(
        default_factory=lambda: [
            "Morning Run",
            "Evening Run",
            "Trail Run",
            "Easy Run",
            "Tempo Run",
            "Long Run",
        ]
    )
    cycling_prefixes: List[str] = field(
        default_factory=lambda: [
            "Morning Ride",
            "Evening Ride",
            "Mountain Bike",
            "Road Ride",
            "Gravel Ride",
        ]
    )
    hiking_prefixes: List[str] = field(
        default_factory=lambda: [
            "Morning Hike",
            "Afternoon Hike",
            "Summit Attempt",
            "Trail Hike",
            "Nature Walk",
        ]
    )
    dig_prefixes: List[str] = field(
        default_factory=lambda: ["Trail Work", "Trail Maintenance", "Dig Day"]
    )
    location_suffixes: List[str] = field(
        default_factory=lambda: [
            "on the Flatirons",
            "at the Mesa",
            "by the Lake",
            "in the Mountains",
            "through the Park",
        ]
    )

    def prefixes_for(self, activity_type: ActivityType) -> List[str]:
        if activity_type in (ActivityType.CYCLING, ActivityType.MOUNTAIN_BIKING):
            return self.cycling_prefixes
        if activity_type in (ActivityType.HIKING, ActivityType.WALKING):
            return self.hiking_prefixes
        if activity_type is ActivityType.DIG:
            return self.dig_prefixes
        return self.running_prefixes


def track_times(points: Sequence[TrackPoint]) -> Tuple[float, float]:
    """Return ``(duration_s, moving_time_s)`` for a timed track.

    Moving time sums the intervals covered faster than the stop threshold.
    Points without timestamps contribute nothing.
    """

    if len(points) < 2:
        return 0.0, 0.0

    first, last = points[0].timestamp, points[-1].timestamp
    duration = (last - first).total_seconds() if first and last else 0.0

    moving = 0.0
    for (p1, p2), distance in zip(zip(points, points[1:]), step_distances(points)):
        if p1.timestamp is None or p2.timestamp is None:
            continue
        interval = (p2.timestamp - p1.timestamp).total_seconds()
        if interval > 0 and distance / interval > ACTIVITY_MOVING_SPEED_THRESHOLD_MPS:
            moving += interval
    return duration, moving


def elevation_gain(points: Sequence[TrackPoint]) -> float:
    """Sum of positive elevation deltas, skipping points without elevation."""

    gain = 0.0
    for p1, p2 in zip(points, points[1:]):
        if p1.elevation is None or p2.elevation is None:
            continue
        if p2.elevation > p1.elevation:
            gain += p2.elevation - p1.elevation
    return gain


class ActivityGenerator:
    """Wraps generated tracks into named activities with summary stats."""

    def __init__(self, name_config: ActivityNameConfig | None = None) -> None:
        self.name_config = name_config or ActivityNameConfig()
        self._log = logging.getLogger(self.__class__.__name__)

    def generate_name(
        self, activity_type: ActivityType, rng: np.random.Generator
    ) -> str:
        prefixes = self.name_config.prefixes_for(activity_type)
        prefix = prefixes[int(rng.integers(len(prefixes)))]
        if rng.random() < ACTIVITY_NAME_SUFFIX_PROBABILITY:
            suffixes = self.name_config.location_suffixes
            return f"{prefix} {suffixes[int(rng.integers(len(suffixes)))]}"
        return prefix

    def from_track(
        self,
        user_id: UUID,
        activity_type: ActivityType | str,
        track_points: Sequence[TrackPoint],
        rng: np.random.Generator,
    ) -> GeneratedActivity:
        """Create an activity owned by ``user_id`` from ``track_points``."""

        activity_type = ActivityType.parse(activity_type)
        activity_id = new_id(rng)
        name = self.generate_name(activity_type, rng)
        points = list(track_points)

        distance = float(np.sum(step_distances(points)))
        duration, moving = track_times(points)
        submitted_at = (
            points[0].timestamp
            if points and points[0].timestamp is not None
            else datetime.now(timezone.utc)
        )
        visibility = (
            Visibility.PUBLIC
            if rng.random() < ACTIVITY_PUBLIC_PROBABILITY
            else Visibility.PRIVATE
        )

        activity = GeneratedActivity(
            id=activity_id,
            user_id=user_id,
            name=name,
            activity_type=activity_type,
            visibility=visibility,
            submitted_at=submitted_at,
            track_points=points,
            distance_meters=distance,
            duration_seconds=duration,
            moving_time_seconds=moving,
            elevation_gain_meters=elevation_gain(points),
        )
        self._log.debug(
            "Activity %r: %.0f m in %.0fs (%d points)",
            name,
            distance,
            duration,
            len(points),
        )
        return activity


__all__ = [
    "ActivityGenerator",
    "ActivityNameConfig",
    "elevation_gain",
    "track_times",
]
