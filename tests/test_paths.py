from datetime import datetime, timezone
import math

import numpy as np
import pytest

from track_synth import paths
from track_synth.errors import ConfigurationError
from track_synth.geo import haversine_distance, path_distance
from track_synth.models import BoundingBox, Region
from track_synth.paths import ProceduralGenerator, RoutePattern, TrackConfig
from track_synth.profiles import AthleteProfile

TOL = 1e-9


def _generator(distance=3000.0, bounds=Region.BOULDER, seed=42):
    return ProceduralGenerator.for_region(bounds, seed).with_distance(distance)


def test_identical_seeds_produce_identical_tracks(start_time):
    gen = _generator()
    profile = AthleteProfile.runner()
    first = gen.generate(profile, np.random.default_rng(7), start_time=start_time)
    second = gen.generate(profile, np.random.default_rng(7), start_time=start_time)
    assert first == second


def test_different_seeds_diverge(start_time):
    gen = _generator()
    profile = AthleteProfile.runner()
    first = gen.generate(profile, np.random.default_rng(1), start_time=start_time)
    second = gen.generate(profile, np.random.default_rng(2), start_time=start_time)
    assert first != second


@pytest.mark.parametrize("pattern", list(RoutePattern))
def test_points_stay_inside_small_box(pattern, start_time):
    # A box much smaller than the route forces repeated boundary reflections.
    box = BoundingBox(40.0, -105.3, 40.01, -105.29)
    gen = _generator(distance=6000.0, bounds=box)
    track = gen.generate(AthleteProfile.runner(), np.random.default_rng(3), pattern, start_time)
    assert len(track) > 100
    for point in track:
        assert box.contains(point.lat, point.lon, tolerance=TOL)


@pytest.mark.parametrize("pattern", [RoutePattern.OUT_AND_BACK, RoutePattern.LOOP])
@pytest.mark.parametrize("seed", [1, 2, 3])
def test_closed_patterns_return_to_origin(pattern, seed):
    gen = _generator(distance=5000.0)
    start = Region.BOULDER.center()
    path = gen.generate_path(start, np.random.default_rng(seed), pattern)
    end = path[-1]
    assert haversine_distance(start[0], start[1], end[0], end[1]) <= 50.0


@pytest.mark.parametrize("pattern", list(RoutePattern))
def test_timestamps_strictly_increase(pattern, start_time):
    gen = _generator().with_pauses(0.2, 30.0, 60.0)
    track = gen.generate(AthleteProfile.cyclist(), np.random.default_rng(11), pattern, start_time)
    assert track[0].timestamp == start_time
    for prev, cur in zip(track, track[1:]):
        assert cur.timestamp > prev.timestamp


def test_default_start_time_is_current_utc():
    before = datetime.now(timezone.utc)
    track = _generator(distance=200.0).generate(AthleteProfile.runner(), np.random.default_rng(0))
    after = datetime.now(timezone.utc)
    assert before <= track[0].timestamp <= after


def test_random_walk_covers_target_distance():
    gen = _generator(distance=2000.0).with_gps_jitter(0.0)
    start = Region.BOULDER.center()
    path = gen.generate_path(start, np.random.default_rng(5), RoutePattern.RANDOM_WALK)
    # Step lengths are spacing * U(0.8, 1.2).
    assert 2000.0 / 12.0 <= len(path) - 1 <= 2000.0 / 8.0 + 1


def test_track_attaches_terrain_elevation_without_jitter(start_time):
    gen = _generator(distance=500.0).with_gps_jitter(0.0).with_elevation_jitter(0.0)
    track = gen.generate(AthleteProfile.runner(), np.random.default_rng(9), start_time=start_time)
    for point in track[:20]:
        assert point.elevation == pytest.approx(gen.terrain.elevation_at(point.lat, point.lon))


def test_slower_profile_takes_longer(start_time):
    gen = _generator(distance=1000.0).with_pauses(0.0, 0.0, 0.0)
    start = (40.0, -105.3)
    gen = gen.with_start(*start)
    runner = gen.generate(AthleteProfile.runner(), np.random.default_rng(4), start_time=start_time)
    hiker = gen.generate(AthleteProfile.hiker(), np.random.default_rng(4), start_time=start_time)
    assert hiker[-1].timestamp - hiker[0].timestamp > runner[-1].timestamp - runner[0].timestamp


def test_apply_bounds_reflects_heading():
    gen = _generator(bounds=BoundingBox(40.0, -105.3, 40.1, -105.2))
    lat, lon, heading = gen.apply_bounds(40.2, -105.25, 0.0)
    assert lat <= 40.1
    assert heading == pytest.approx(math.pi)
    lat, lon, heading = gen.apply_bounds(40.05, -105.5, 1.0)
    assert -105.3 <= lon <= -105.29
    assert heading == pytest.approx(-1.0)


def test_track_config_validation():
    with pytest.raises(ConfigurationError):
        TrackConfig(point_spacing_m=0.0)
    with pytest.raises(ConfigurationError):
        TrackConfig(start_point=(0.0, 0.0))
    with pytest.raises(ConfigurationError):
        TrackConfig(pause_duration_range=(10.0, 5.0))
    with pytest.raises(ConfigurationError):
        BoundingBox(40.1, -105.0, 40.0, -104.0)


def test_path_distance_matches_haversine_sum(start_time):
    track = _generator(distance=800.0).generate(
        AthleteProfile.runner(), np.random.default_rng(21), start_time=start_time
    )
    manual = sum(
        haversine_distance(a.lat, a.lon, b.lat, b.lon) for a, b in zip(track, track[1:])
    )
    assert path_distance(track) == pytest.approx(manual)


def test_elevation_jitter_applied_once_per_point(monkeypatch, start_time):
    calls = []

    def recording_jitter(elevation, rng, std_dev):
        calls.append(std_dev)
        return elevation

    monkeypatch.setattr(paths, "add_elevation_jitter", recording_jitter)
    gen = _generator(distance=500.0).with_elevation_jitter(4.0)
    track = gen.generate(AthleteProfile.runner(), np.random.default_rng(2), start_time=start_time)
    assert len(calls) == len(track)
    assert set(calls) == {4.0}
