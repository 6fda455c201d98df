"""Dataclasses describing generated tracks, segments, activities and efforts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple
from uuid import UUID

import numpy as np

from .activity_types import ActivityType
from .errors import ConfigurationError

LatLon = Tuple[float, float]


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class ClimbCategory(int, Enum):
    """Discrete climb difficulty tier. Lower values are harder."""

    HC = 0
    CAT1 = 1
    CAT2 = 2
    CAT3 = 3
    CAT4 = 4

    @property
    def label(self) -> str:
        if self is ClimbCategory.HC:
            return "HC"
        return f"Cat {self.value}"


@dataclass(slots=True, frozen=True)
class TrackPoint:
    """Single GPS sample: position plus optional elevation and timestamp."""

    lat: float
    lon: float
    elevation: Optional[float] = None
    timestamp: Optional[datetime] = None

    @property
    def latlon(self) -> LatLon:
        return (self.lat, self.lon)


@dataclass(slots=True, frozen=True)
class BoundingBox:
    """Geographic box defined by its south-west and north-east corners."""

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    def __post_init__(self) -> None:
        if not self.min_lat < self.max_lat:
            raise ConfigurationError(
                f"Bounding box latitude range is empty: {self.min_lat}..{self.max_lat}"
            )
        if not self.min_lon < self.max_lon:
            raise ConfigurationError(
                f"Bounding box longitude range is empty: {self.min_lon}..{self.max_lon}"
            )

    def center(self) -> LatLon:
        return (
            (self.min_lat + self.max_lat) / 2.0,
            (self.min_lon + self.max_lon) / 2.0,
        )

    def contains(self, lat: float, lon: float, tolerance: float = 0.0) -> bool:
        return (
            self.min_lat - tolerance <= lat <= self.max_lat + tolerance
            and self.min_lon - tolerance <= lon <= self.max_lon + tolerance
        )

    def clamp(self, lat: float, lon: float) -> LatLon:
        """Return the nearest coordinate inside the box."""
        return (
            min(max(lat, self.min_lat), self.max_lat),
            min(max(lon, self.min_lon), self.max_lon),
        )

    def random_point(self, rng: np.random.Generator) -> LatLon:
        """Return a uniformly sampled point within the box."""
        lat = float(rng.uniform(self.min_lat, self.max_lat))
        lon = float(rng.uniform(self.min_lon, self.max_lon))
        return (lat, lon)


class Region:
    """Pre-defined regions used for track generation."""

    # Mountain trails with significant elevation changes.
    RENO_TAHOE = BoundingBox(39.0, -120.5, 39.6, -119.5)

    # Popular fitness trails with varied terrain.
    BOULDER = BoundingBox(39.9, -105.5, 40.1, -105.2)


@dataclass(slots=True, frozen=True)
class GeneratedUser:
    """Placeholder athlete used to attribute activities and efforts."""

    id: UUID
    name: str


@dataclass(slots=True)
class GeneratedActivity:
    """Activity derived from a generated track."""

    id: UUID
    user_id: UUID
    name: str
    activity_type: ActivityType
    visibility: Visibility
    submitted_at: datetime
    track_points: List[TrackPoint] = field(default_factory=list)
    distance_meters: float = 0.0
    duration_seconds: float = 0.0
    moving_time_seconds: float = 0.0
    elevation_gain_meters: float = 0.0


@dataclass(slots=True, frozen=True)
class GeneratedSegment:
    """Named sub-route with derived statistics and climb category."""

    id: UUID
    creator_id: UUID
    name: str
    activity_type: ActivityType
    visibility: Visibility
    points: Tuple[TrackPoint, ...]
    geo_wkt: str
    start_wkt: str
    end_wkt: str
    polyline: str
    distance_meters: float
    elevation_gain_meters: Optional[float] = None
    elevation_loss_meters: Optional[float] = None
    average_grade: Optional[float] = None
    max_grade: Optional[float] = None
    climb_category: Optional[ClimbCategory] = None
    description: Optional[str] = None


@dataclass(slots=True, frozen=True)
class GeneratedEffort:
    """One user's timed traversal of a segment during one activity."""

    id: UUID
    segment_id: UUID
    activity_id: UUID
    user_id: UUID
    started_at: datetime
    elapsed_time_seconds: float
    moving_time_seconds: Optional[float]
    average_speed_mps: Optional[float]
    max_speed_mps: Optional[float]
    start_fraction: float = 0.0
    end_fraction: float = 1.0


__all__ = [
    "BoundingBox",
    "ClimbCategory",
    "GeneratedActivity",
    "GeneratedEffort",
    "GeneratedSegment",
    "GeneratedUser",
    "LatLon",
    "Region",
    "TrackPoint",
    "Visibility",
]
