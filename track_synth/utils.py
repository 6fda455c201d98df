"""General utility helpers shared across modules."""

from __future__ import annotations

import json
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

import numpy as np


def new_id(rng: np.random.Generator) -> UUID:
    """Return a UUID4 whose bytes come from ``rng`` so ids are reproducible."""

    return UUID(bytes=rng.bytes(16), version=4)


def format_time(seconds: float) -> str:
    """Format seconds into an ``h:mm:ss`` string."""

    total = int(round(seconds))
    hours, remainder = divmod(total, 3600)
    mins, sec = divmod(remainder, 60)
    return f"{hours}:{mins:02d}:{sec:02d}"


def _normalise_value(value: Any) -> Any:
    """Convert objects to JSON-friendly representations."""

    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return _normalise_value(value.value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="ignore")
    if isinstance(value, set):
        return sorted(_normalise_value(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [_normalise_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _normalise_value(val) for key, val in value.items()}
    return value


def json_dumps_sorted(value: Any) -> str:
    """Return canonical JSON for hashing / comparisons."""

    normalised = _normalise_value(value)
    return json.dumps(normalised, sort_keys=True, separators=(",", ":"))
