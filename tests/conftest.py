"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable fixtures (seeded random
sources, synthetic tracks and segments) shared across test modules.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import numpy as np

from track_synth.activity_types import ActivityType
from track_synth.models import GeneratedSegment, TrackPoint, Visibility
from track_synth.utils import new_id

START = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)

# ~11.1 m between consecutive points at this latitude step.
LAT_STEP = 0.0001


# --- Factory helpers -------------------------------------------------
def make_track(elevations, lat0=40.0, lon0=-105.3, seconds_per_point=4.0):
    """Straight northbound track with the given elevation profile."""
    return [
        TrackPoint(
            lat0 + i * LAT_STEP,
            lon0,
            elevation,
            START + timedelta(seconds=i * seconds_per_point),
        )
        for i, elevation in enumerate(elevations)
    ]


def make_segment(
    distance=1000.0,
    gain=50.0,
    loss=10.0,
    average_grade=0.05,
    rng=None,
    name="Test Climb",
):
    rng = rng or np.random.default_rng(0)
    return GeneratedSegment(
        id=new_id(rng),
        creator_id=new_id(rng),
        name=name,
        activity_type=ActivityType.RUNNING,
        visibility=Visibility.PUBLIC,
        points=(),
        geo_wkt="LINESTRING (0 0, 1 1)",
        start_wkt="POINT (0 0)",
        end_wkt="POINT (1 1)",
        polyline="",
        distance_meters=distance,
        elevation_gain_meters=gain,
        elevation_loss_meters=loss,
        average_grade=average_grade,
        max_grade=None,
        climb_category=None,
    )


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def start_time():
    return START


@pytest.fixture
def climb_track():
    """Flat approach, 60 m climb, 30 m descent, 40 m climb, flat finish."""
    elevations = (
        [100.0] * 10
        + [100.0 + 1.5 * i for i in range(1, 41)]  # to 160 m
        + [160.0 - 1.5 * i for i in range(1, 21)]  # down to 130 m
        + [130.0 + 1.0 * i for i in range(1, 41)]  # up to 170 m
        + [170.0] * 10
    )
    return make_track(elevations)


@pytest.fixture
def flat_segment():
    return make_segment(gain=None, loss=None, average_grade=None, name="Flat Sprint")


@pytest.fixture
def hill_segment():
    return make_segment()
