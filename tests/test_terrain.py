import numpy as np
import pytest

from track_synth.errors import ConfigurationError
from track_synth.models import BoundingBox, Region
from track_synth.terrain import TerrainField, add_elevation_jitter


def test_elevation_is_deterministic_for_seed():
    a = TerrainField.boulder(42)
    b = TerrainField.boulder(42)
    for lat, lon in [(40.0, -105.3), (40.05, -105.25), (39.95, -105.45)]:
        assert a.elevation_at(lat, lon) == b.elevation_at(lat, lon)
        assert a.elevation_at(lat, lon) == a.elevation_at(lat, lon)


def test_different_seeds_give_different_terrain():
    a = TerrainField.boulder(1)
    b = TerrainField.boulder(2)
    samples = [(40.0 + i * 0.01, -105.3 + i * 0.01) for i in range(10)]
    assert a.elevation_profile(samples) != b.elevation_profile(samples)


def test_elevation_stays_within_height_scale():
    terrain = TerrainField.reno_tahoe(7)
    lats = np.linspace(39.0, 39.6, 25)
    lons = np.linspace(-120.5, -119.5, 25)
    coords = [(lat, lon) for lat in lats for lon in lons]
    values = terrain.elevation_profile(coords)
    assert min(values) >= terrain.base_elevation - terrain.height_scale - 1e-9
    assert max(values) <= terrain.base_elevation + terrain.height_scale + 1e-9
    # Terrain should not be flat at this scale.
    assert max(values) - min(values) > 50.0


def test_presets_and_fluent_overrides():
    flat = TerrainField.flat(3)
    assert (flat.base_elevation, flat.height_scale, flat.octaves) == (300.0, 50.0, 2)
    custom = TerrainField.default(3).with_base_elevation(100.0).with_octaves(2)
    assert custom.base_elevation == 100.0
    assert custom.octaves == 2
    # Original instance untouched.
    assert TerrainField.default(3).base_elevation == 1500.0


def test_for_bounds_picks_regional_preset():
    assert TerrainField.for_bounds(Region.RENO_TAHOE, 1).base_elevation == 1900.0
    assert TerrainField.for_bounds(Region.BOULDER, 1).base_elevation == 1650.0
    elsewhere = BoundingBox(51.4, -0.2, 51.6, 0.1)
    assert TerrainField.for_bounds(elsewhere, 1).base_elevation == 1650.0


def test_smooth_profile_length():
    terrain = TerrainField.default(5)
    coords = [(40.0, -105.3), (40.001, -105.3), (40.002, -105.301)]
    smooth = terrain.smooth_elevation_profile(coords, 3)
    assert len(smooth) == len(coords) + (len(coords) - 1) * 3
    assert smooth[0] == pytest.approx(terrain.elevation_at(*coords[0]))
    assert smooth[-1] == pytest.approx(terrain.elevation_at(*coords[-1]))


@pytest.mark.parametrize(
    "kwargs",
    [{"octaves": 0}, {"frequency": 0.0}, {"height_scale": -1.0}],
)
def test_invalid_terrain_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        TerrainField(1, **kwargs)


def test_elevation_jitter(rng):
    assert add_elevation_jitter(100.0, rng, 0.0) == 100.0
    jittered = [add_elevation_jitter(100.0, rng, 5.0) for _ in range(200)]
    assert 95.0 < float(np.mean(jittered)) < 105.0
