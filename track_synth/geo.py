"""Great-circle distance helpers shared by the generators."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .config import EARTH_RADIUS_M
from .models import LatLon, TrackPoint

MetricArray = NDArray[np.float64]


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance in metres between two coordinates."""

    sin = math.sin
    cos = math.cos
    radians = math.radians
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = radians(lon2 - lon1)
    sin_half_lat = sin(delta_lat / 2.0)
    sin_half_lon = sin(delta_lon / 2.0)
    a = sin_half_lat**2 + cos(lat1_rad) * cos(lat2_rad) * sin_half_lon**2
    c = 2.0 * math.asin(math.sqrt(min(a, 1.0)))
    return EARTH_RADIUS_M * c


def latlon_distance(first: LatLon, second: LatLon) -> float:
    return haversine_distance(first[0], first[1], second[0], second[1])


def step_distances(points: Sequence[TrackPoint]) -> MetricArray:
    """Return haversine lengths of every consecutive step along ``points``."""

    if len(points) < 2:
        return np.zeros(0, dtype=float)
    coords = np.radians(np.asarray([(p.lat, p.lon) for p in points], dtype=float))
    lat = coords[:, 0]
    delta = np.diff(coords, axis=0)
    a = (
        np.sin(delta[:, 0] / 2.0) ** 2
        + np.cos(lat[:-1]) * np.cos(lat[1:]) * np.sin(delta[:, 1] / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def path_distance(points: Sequence[TrackPoint]) -> float:
    """Return the summed haversine length of a track in metres."""

    return float(np.sum(step_distances(points)))


__all__ = [
    "haversine_distance",
    "latlon_distance",
    "path_distance",
    "step_distances",
]
