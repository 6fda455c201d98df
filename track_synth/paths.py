"""Procedural track generation.

Produces bounded coordinate sequences that approximate a target distance under
one of several route patterns, then attaches elevation and timestamps using a
:class:`~track_synth.terrain.TerrainField` and an
:class:`~track_synth.profiles.AthleteProfile`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
import logging
import math
from typing import List, Optional, Tuple

import numpy as np

from .config import (
    BOUNDS_MAX_CORRECTION_DEG,
    LOOP_HEADING_NOISE,
    LOOP_REVOLUTION_FRACTION,
    METERS_PER_DEGREE,
    OUT_AND_BACK_HEADING_NOISE,
    OUT_AND_BACK_RETURN_JITTER_DEG,
    RANDOM_WALK_HEADING_NOISE,
    TRACK_DISTANCE_M,
    TRACK_ELEVATION_JITTER_M,
    TRACK_GPS_JITTER_M,
    TRACK_PAUSE_DURATION_RANGE,
    TRACK_PAUSE_PROBABILITY,
    TRACK_POINT_SPACING_M,
)
from .errors import ConfigurationError
from .geo import haversine_distance, latlon_distance
from .models import BoundingBox, LatLon, Region, TrackPoint
from .profiles import AthleteProfile, sample_variance, speed_at_grade
from .terrain import TerrainField, add_elevation_jitter

TAU = 2.0 * math.pi

# Smallest interval between two emitted timestamps.
_MIN_INTERVAL_S = 0.001


class RoutePattern(str, Enum):
    RANDOM_WALK = "random_walk"
    OUT_AND_BACK = "out_and_back"
    LOOP = "loop"


@dataclass(slots=True)
class TrackConfig:
    """Configuration for procedural track generation."""

    distance_m: float = TRACK_DISTANCE_M
    # Starting point (lat, lon); random within bounds when None.
    start_point: Optional[LatLon] = None
    bounds: BoundingBox = Region.BOULDER
    gps_jitter_m: float = TRACK_GPS_JITTER_M
    elevation_jitter_m: float = TRACK_ELEVATION_JITTER_M
    point_spacing_m: float = TRACK_POINT_SPACING_M
    pause_probability: float = TRACK_PAUSE_PROBABILITY
    pause_duration_range: Tuple[float, float] = TRACK_PAUSE_DURATION_RANGE

    def __post_init__(self) -> None:
        if self.distance_m <= 0:
            raise ConfigurationError("distance_m must be greater than zero")
        if self.point_spacing_m <= 0:
            raise ConfigurationError("point_spacing_m must be greater than zero")
        if self.gps_jitter_m < 0 or self.elevation_jitter_m < 0:
            raise ConfigurationError("Jitter magnitudes must not be negative")
        if not 0.0 <= self.pause_probability <= 1.0:
            raise ConfigurationError("pause_probability must be within [0, 1]")
        low, high = self.pause_duration_range
        if low < 0 or high < low:
            raise ConfigurationError(
                f"Invalid pause_duration_range: {self.pause_duration_range}"
            )
        if self.start_point is not None and not self.bounds.contains(*self.start_point):
            raise ConfigurationError(
                f"start_point {self.start_point} lies outside the bounding box"
            )


class ProceduralGenerator:
    """Generates synthetic GPS tracks with realistic characteristics."""

    def __init__(
        self,
        config: TrackConfig | None = None,
        terrain: TerrainField | None = None,
        seed: int = 42,
    ) -> None:
        self.config = config or TrackConfig()
        self.terrain = terrain or TerrainField.boulder(seed)
        self._log = logging.getLogger(self.__class__.__name__)

    @classmethod
    def for_region(cls, bounds: BoundingBox, seed: int) -> "ProceduralGenerator":
        return cls(TrackConfig(bounds=bounds), TerrainField.for_bounds(bounds, seed))

    def _with_config(self, **changes) -> "ProceduralGenerator":
        return ProceduralGenerator(replace(self.config, **changes), self.terrain)

    def with_distance(self, meters: float) -> "ProceduralGenerator":
        return self._with_config(distance_m=meters)

    def with_start(self, lat: float, lon: float) -> "ProceduralGenerator":
        return self._with_config(start_point=(lat, lon))

    def with_gps_jitter(self, meters: float) -> "ProceduralGenerator":
        return self._with_config(gps_jitter_m=meters)

    def with_elevation_jitter(self, meters: float) -> "ProceduralGenerator":
        return self._with_config(elevation_jitter_m=meters)

    def with_point_spacing(self, meters: float) -> "ProceduralGenerator":
        return self._with_config(point_spacing_m=meters)

    def with_pauses(
        self, probability: float, min_sec: float, max_sec: float
    ) -> "ProceduralGenerator":
        return self._with_config(
            pause_probability=probability, pause_duration_range=(min_sec, max_sec)
        )

    def with_terrain(self, terrain: TerrainField) -> "ProceduralGenerator":
        return ProceduralGenerator(self.config, terrain)

    def generate(
        self,
        profile: AthleteProfile,
        rng: np.random.Generator,
        pattern: RoutePattern | str = RoutePattern.RANDOM_WALK,
        start_time: datetime | None = None,
    ) -> List[TrackPoint]:
        """Generate a timed track using ``profile`` for grade-dependent speeds.

        ``start_time`` stamps the first point; it defaults to the current UTC
        time when omitted.
        """

        start = self.config.start_point or self.config.bounds.random_point(rng)
        path = self.generate_path(start, rng, pattern)
        track = self.apply_timing(path, profile, rng, start_time=start_time)
        self._log.debug(
            "Generated %s track: %d points for %.0f m target",
            RoutePattern(pattern).value,
            len(track),
            self.config.distance_m,
        )
        return track

    def generate_path(
        self,
        start: LatLon,
        rng: np.random.Generator,
        pattern: RoutePattern | str = RoutePattern.RANDOM_WALK,
    ) -> List[LatLon]:
        """Generate the bare coordinate sequence (no elevation or timing)."""

        pattern = RoutePattern(pattern)
        if pattern is RoutePattern.OUT_AND_BACK:
            return self._out_and_back(start, rng)
        if pattern is RoutePattern.LOOP:
            return self._loop(start, rng)
        return self._walk(
            start, rng, self.config.distance_m, RANDOM_WALK_HEADING_NOISE
        )

    def _walk(
        self,
        start: LatLon,
        rng: np.random.Generator,
        distance_m: float,
        heading_noise: float,
        turn_rate: float = 0.0,
    ) -> List[LatLon]:
        # Random walk with momentum: the heading drifts instead of jumping.
        path = [start]
        current = start
        total_distance = 0.0
        heading = float(rng.uniform(0.0, TAU))
        while total_distance < distance_m:
            heading += turn_rate + float(rng.uniform(-heading_noise, heading_noise))
            step = self.config.point_spacing_m * float(rng.uniform(0.8, 1.2))
            lat_delta = step * math.cos(heading) / METERS_PER_DEGREE
            lon_delta = step * math.sin(heading) / (
                METERS_PER_DEGREE * math.cos(math.radians(current[0]))
            )
            lat, lon, heading = self.apply_bounds(
                current[0] + lat_delta, current[1] + lon_delta, heading
            )
            current = (lat, lon)
            path.append(current)
            total_distance += step
        return path

    def _out_and_back(
        self, start: LatLon, rng: np.random.Generator
    ) -> List[LatLon]:
        outbound = self._walk(
            start, rng, self.config.distance_m / 2.0, OUT_AND_BACK_HEADING_NOISE
        )
        bounds = self.config.bounds
        path = list(outbound)
        # Retrace the outbound leg, nudged so the two legs never coincide.
        for lat, lon in reversed(outbound[:-1]):
            jittered_lat = lat + float(rng.normal(0.0, OUT_AND_BACK_RETURN_JITTER_DEG))
            jittered_lon = lon + float(rng.normal(0.0, OUT_AND_BACK_RETURN_JITTER_DEG))
            path.append(bounds.clamp(jittered_lat, jittered_lon))
        return path

    def _loop(self, start: LatLon, rng: np.random.Generator) -> List[LatLon]:
        spacing = self.config.point_spacing_m
        turn_rate = TAU / (self.config.distance_m / spacing)
        path = self._walk(
            start,
            rng,
            self.config.distance_m * LOOP_REVOLUTION_FRACTION,
            LOOP_HEADING_NOISE,
            turn_rate=turn_rate,
        )
        end = path[-1]
        gap = latlon_distance(end, start)
        if gap > 2.0 * spacing:
            steps = int(math.ceil(gap / spacing))
            for i in range(1, steps + 1):
                t = i / steps
                path.append(
                    (
                        end[0] + (start[0] - end[0]) * t,
                        end[1] + (start[1] - end[1]) * t,
                    )
                )
        return path

    def apply_bounds(
        self, lat: float, lon: float, heading: float
    ) -> Tuple[float, float, float]:
        """Keep a step inside the box, reflecting the heading on a breach."""

        b = self.config.bounds
        new_heading = heading

        if lat < b.min_lat:
            new_heading = math.pi - heading
            lat = b.min_lat + min(b.min_lat - lat, BOUNDS_MAX_CORRECTION_DEG)
        elif lat > b.max_lat:
            new_heading = math.pi - heading
            lat = b.max_lat - min(lat - b.max_lat, BOUNDS_MAX_CORRECTION_DEG)

        if lon < b.min_lon:
            new_heading = -heading
            lon = b.min_lon + min(b.min_lon - lon, BOUNDS_MAX_CORRECTION_DEG)
        elif lon > b.max_lon:
            new_heading = -heading
            lon = b.max_lon - min(lon - b.max_lon, BOUNDS_MAX_CORRECTION_DEG)

        lat, lon = b.clamp(lat, lon)
        return lat, lon, new_heading

    def apply_timing(
        self,
        path: List[LatLon],
        profile: AthleteProfile,
        rng: np.random.Generator,
        start_time: datetime | None = None,
    ) -> List[TrackPoint]:
        """Attach jittered elevation and profile-driven timestamps to a path."""

        if not path:
            return []

        cfg = self.config
        bounds = cfg.bounds
        position_sigma = cfg.gps_jitter_m / METERS_PER_DEGREE
        elevation_sigma = cfg.elevation_jitter_m
        pause_low, pause_high = cfg.pause_duration_range
        elevations = self.terrain.elevation_profile(path)
        timestamp = start_time or datetime.now(timezone.utc)

        def emit(index: int, when: datetime) -> TrackPoint:
            lat, lon = path[index]
            elevation = add_elevation_jitter(elevations[index], rng, elevation_sigma)
            jittered = bounds.clamp(
                lat + float(rng.normal(0.0, position_sigma)),
                lon + float(rng.normal(0.0, position_sigma)),
            )
            return TrackPoint(jittered[0], jittered[1], elevation, when)

        result = [emit(0, timestamp)]
        for i in range(1, len(path)):
            prev_lat, prev_lon = path[i - 1]
            lat, lon = path[i]
            distance = haversine_distance(prev_lat, prev_lon, lat, lon)
            grade = (
                (elevations[i] - elevations[i - 1]) / distance if distance > 0 else 0.0
            )

            variance = sample_variance(profile, rng)
            speed = speed_at_grade(profile, grade, variance)
            seconds = distance / speed

            if rng.random() < cfg.pause_probability:
                seconds += float(rng.uniform(pause_low, pause_high))

            timestamp += timedelta(seconds=max(seconds, _MIN_INTERVAL_S))
            result.append(emit(i, timestamp))
        return result


__all__ = ["ProceduralGenerator", "RoutePattern", "TrackConfig"]
