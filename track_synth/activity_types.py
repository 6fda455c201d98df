"""Utilities for classifying activity types."""

from __future__ import annotations

from enum import Enum
from typing import Any

__all__ = ["ActivityType", "normalize_activity_type"]


def normalize_activity_type(value: Any) -> str | None:
    """Return a lowercase activity type string or ``None`` when missing.

    Upstream sources spell the same type in several ways ("Run", "running",
    "Mountain Bike"). Normalising once keeps downstream comparisons cheap and
    deterministic.
    """

    if value is None:
        return None
    normalized = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    return normalized or None


_ALIASES = {
    "run": "running",
    "trail_run": "running",
    "ride": "cycling",
    "road": "cycling",
    "road_cycling": "cycling",
    "gravel": "cycling",
    "mtb": "mountain_biking",
    "mountain_bike": "mountain_biking",
    "emtb": "mountain_biking",
    "walk": "walking",
    "hike": "hiking",
    "trail_work": "dig",
}


class ActivityType(str, Enum):
    RUNNING = "running"
    CYCLING = "cycling"
    MOUNTAIN_BIKING = "mountain_biking"
    WALKING = "walking"
    HIKING = "hiking"
    DIG = "dig"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "ActivityType":
        """Return the matching type, or ``UNKNOWN`` for unrecognised values."""

        if isinstance(value, cls):
            return value
        normalized = normalize_activity_type(value)
        if normalized is None:
            return cls.UNKNOWN
        normalized = _ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN
