"""Segment extraction, statistics and climb categorisation."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence

import numpy as np
from polyline import encode as polyline_encode
from shapely.geometry import LineString, Point

from .activity_types import ActivityType
from .config import (
    CLIMB_CATEGORY_THRESHOLDS,
    SEGMENT_GRADE_EPSILON,
    SEGMENT_MAX_LENGTH_M,
    SEGMENT_MIN_CLIMB_GAIN_M,
    SEGMENT_MIN_GRADE_STEP_M,
    SEGMENT_MIN_LENGTH_M,
    SEGMENT_PUBLIC_PROBABILITY,
)
from .errors import ConfigurationError
from .geo import step_distances
from .models import ClimbCategory, GeneratedSegment, TrackPoint, Visibility
from .utils import new_id

_CATEGORIES = (
    ClimbCategory.HC,
    ClimbCategory.CAT1,
    ClimbCategory.CAT2,
    ClimbCategory.CAT3,
    ClimbCategory.CAT4,
)


@dataclass(slots=True)
class SegmentExtractConfig:
    """Length gate and climb threshold used when deriving segments."""

    min_length_m: float = SEGMENT_MIN_LENGTH_M
    max_length_m: float = SEGMENT_MAX_LENGTH_M
    min_climb_gain_m: float = SEGMENT_MIN_CLIMB_GAIN_M

    def __post_init__(self) -> None:
        if self.min_length_m < 0 or self.max_length_m <= 0:
            raise ConfigurationError("Segment length limits must be positive")
        if self.min_length_m > self.max_length_m:
            raise ConfigurationError(
                f"min_length_m ({self.min_length_m}) exceeds max_length_m ({self.max_length_m})"
            )
        if self.min_climb_gain_m < 0:
            raise ConfigurationError("min_climb_gain_m must not be negative")


@dataclass(slots=True, frozen=True)
class SegmentStats:
    """Distance, elevation and grade summary of a point sequence."""

    distance_m: float
    gain_m: float
    loss_m: float
    average_grade: float
    max_grade: float


def calculate_stats(points: Sequence[TrackPoint]) -> SegmentStats:
    """Compute distance, gain/loss and grades for ``points``.

    ``average_grade`` is the net displacement grade
    ``(end_elevation - start_elevation) / distance``. ``max_grade`` is the
    steepest signed per-step grade among steps longer than one metre.
    """

    if len(points) < 2:
        return SegmentStats(0.0, 0.0, 0.0, 0.0, 0.0)

    distances = step_distances(points)
    total_distance = float(np.sum(distances))
    total_gain = 0.0
    total_loss = 0.0
    max_grade = 0.0

    for (p1, p2), step in zip(zip(points, points[1:]), distances):
        if p1.elevation is None or p2.elevation is None:
            continue
        delta = p2.elevation - p1.elevation
        if delta > 0:
            total_gain += delta
        else:
            total_loss += -delta
        if step > SEGMENT_MIN_GRADE_STEP_M:
            grade = delta / float(step)
            if abs(grade) > abs(max_grade):
                max_grade = grade

    if total_distance > 0:
        start_elev = points[0].elevation or 0.0
        end_elev = points[-1].elevation or 0.0
        avg_grade = (end_elev - start_elev) / total_distance
    else:
        avg_grade = 0.0

    return SegmentStats(total_distance, total_gain, total_loss, avg_grade, max_grade)


def climb_category(
    elevation_gain_m: float,
    distance_m: float,
    average_grade: float,
    min_climb_gain_m: float = SEGMENT_MIN_CLIMB_GAIN_M,
) -> Optional[ClimbCategory]:
    """Categorise a climb.

    score = gain * (distance / 1000) * (1 + 10 * |average_grade|); HC from
    320 points, then Cat 1..4 at 160/80/40/20. Climbs gaining less than
    ``min_climb_gain_m`` are never categorised.
    """

    if elevation_gain_m < min_climb_gain_m:
        return None
    grade_factor = 1.0 + abs(average_grade) * 10.0
    score = elevation_gain_m * (distance_m / 1000.0) * grade_factor
    for category, threshold in zip(_CATEGORIES, CLIMB_CATEGORY_THRESHOLDS):
        if score >= threshold:
            return category
    return None


def _optional(value: float, epsilon: float = 0.0) -> Optional[float]:
    return value if abs(value) > epsilon else None


class SegmentGenerator:
    """Derives segments from tracks."""

    def __init__(self, config: SegmentExtractConfig | None = None) -> None:
        self.config = config or SegmentExtractConfig()
        self._log = logging.getLogger(self.__class__.__name__)

    def extract_from_track(
        self,
        creator_id,
        points: Sequence[TrackPoint],
        start_fraction: float,
        end_fraction: float,
        activity_type: ActivityType,
        name: str,
        rng: np.random.Generator,
    ) -> Optional[GeneratedSegment]:
        """Cut ``points`` at the given fractions of their length and build a segment.

        Returns ``None`` for contradictory fractions, slices with fewer than
        two points, or slices outside the length gate.
        """

        if len(points) < 2 or start_fraction >= end_fraction:
            return None
        count = len(points)
        start_idx = max(int(start_fraction * count), 0)
        end_idx = min(max(int(end_fraction * count), 0), count)
        if end_idx <= start_idx + 1:
            return None
        return self.from_points(
            creator_id, points[start_idx:end_idx], activity_type, name, rng
        )

    def from_points(
        self,
        creator_id,
        points: Sequence[TrackPoint],
        activity_type: ActivityType,
        name: str,
        rng: np.random.Generator,
    ) -> Optional[GeneratedSegment]:
        """Build a segment from ``points`` or ``None`` if it fails the length gate."""

        if len(points) < 2:
            return None

        stats = calculate_stats(points)
        if not self.config.min_length_m <= stats.distance_m <= self.config.max_length_m:
            self._log.debug(
                "Rejected segment %r: %.1f m outside [%.0f, %.0f]",
                name,
                stats.distance_m,
                self.config.min_length_m,
                self.config.max_length_m,
            )
            return None

        category = climb_category(
            stats.gain_m,
            stats.distance_m,
            stats.average_grade,
            self.config.min_climb_gain_m,
        )
        visibility = (
            Visibility.PUBLIC
            if rng.random() < SEGMENT_PUBLIC_PROBABILITY
            else Visibility.PRIVATE
        )
        lonlat = [(p.lon, p.lat) for p in points]
        return GeneratedSegment(
            id=new_id(rng),
            creator_id=creator_id,
            name=name,
            activity_type=ActivityType.parse(activity_type),
            visibility=visibility,
            points=tuple(points),
            geo_wkt=LineString(lonlat).wkt,
            start_wkt=Point(lonlat[0]).wkt,
            end_wkt=Point(lonlat[-1]).wkt,
            polyline=polyline_encode([(p.lat, p.lon) for p in points]),
            distance_meters=stats.distance_m,
            elevation_gain_meters=_optional(stats.gain_m),
            elevation_loss_meters=_optional(stats.loss_m),
            average_grade=_optional(stats.average_grade, SEGMENT_GRADE_EPSILON),
            max_grade=_optional(stats.max_grade, SEGMENT_GRADE_EPSILON),
            climb_category=category,
        )

    def extract_climbs(
        self,
        creator_id,
        points: Sequence[TrackPoint],
        activity_type: ActivityType,
        rng: np.random.Generator,
    ) -> List[GeneratedSegment]:
        """Find uphill sections in a single forward pass.

        A run of ascent closes once the descent accumulated since it began
        exceeds half of ``min_climb_gain_m``; it becomes a segment when its
        gain reaches ``min_climb_gain_m`` and it passes the length gate. The
        scan is greedy: short climbs separated by a shallow dip merge.
        """

        if len(points) < 3:
            return []

        min_gain = self.config.min_climb_gain_m
        segments: List[GeneratedSegment] = []
        climb_start: Optional[int] = None
        current_gain = 0.0
        current_loss = 0.0

        def close(start: int, stop: Optional[int]) -> None:
            if current_gain < min_gain:
                return
            climb_points = points[start:stop]
            segment = self.from_points(
                creator_id,
                climb_points,
                activity_type,
                f"Climb {len(segments) + 1}",
                rng,
            )
            if segment is not None:
                segments.append(segment)

        for i in range(1, len(points)):
            delta = (points[i].elevation or 0.0) - (points[i - 1].elevation or 0.0)
            if delta > 0:
                if climb_start is None:
                    climb_start = i - 1
                    current_gain = 0.0
                    current_loss = 0.0
                current_gain += delta
            elif delta < 0:
                current_loss += -delta
                if current_loss > min_gain / 2.0:
                    if climb_start is not None:
                        close(climb_start, i)
                    climb_start = None
                    current_gain = 0.0
                    current_loss = 0.0

        if climb_start is not None:
            close(climb_start, None)

        self._log.debug("Detected %d climbs over %d points", len(segments), len(points))
        return segments


__all__ = [
    "SegmentExtractConfig",
    "SegmentGenerator",
    "SegmentStats",
    "calculate_stats",
    "climb_category",
]
