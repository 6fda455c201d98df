"""Noise-based elevation generation.

The terrain field sums several octaves of seeded 2-D gradient (Perlin) noise,
fractal Brownian motion style, to create natural-looking terrain with both
large-scale features and small-scale variation. It is a pure function of
``(seed, lat, lon)``: the permutation table is derived from the seed once and
never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Sequence

import numpy as np
from numpy.typing import NDArray

from .config import METERS_PER_DEGREE
from .errors import ConfigurationError
from .models import BoundingBox, LatLon, Region

MetricArray = NDArray[np.float64]

_GRADIENTS = np.array(
    [
        (1.0, 1.0),
        (-1.0, 1.0),
        (1.0, -1.0),
        (-1.0, -1.0),
        (1.0, 0.0),
        (-1.0, 0.0),
        (0.0, 1.0),
        (0.0, -1.0),
    ],
    dtype=float,
)


def _permutation_table(seed: int) -> NDArray[np.int64]:
    perm = np.random.default_rng(seed & 0xFFFFFFFF).permutation(256).astype(np.int64)
    return np.concatenate((perm, perm))


def _fade(t: MetricArray) -> MetricArray:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _gradient_noise(
    perm: NDArray[np.int64], x: MetricArray, y: MetricArray
) -> MetricArray:
    """Evaluate 2-D Perlin noise at each (x, y); output lies in [-1, 1]."""

    x0 = np.floor(x)
    y0 = np.floor(y)
    dx = x - x0
    dy = y - y0
    xi = x0.astype(np.int64) & 255
    yi = y0.astype(np.int64) & 255
    u = _fade(dx)
    v = _fade(dy)

    def corner(hash_x: NDArray[np.int64], hash_y: NDArray[np.int64], ox: float, oy: float):
        gradient = _GRADIENTS[perm[perm[hash_x] + hash_y] & 7]
        return gradient[..., 0] * (dx - ox) + gradient[..., 1] * (dy - oy)

    n00 = corner(xi, yi, 0.0, 0.0)
    n10 = corner(xi + 1, yi, 1.0, 0.0)
    n01 = corner(xi, yi + 1, 0.0, 1.0)
    n11 = corner(xi + 1, yi + 1, 1.0, 1.0)
    nx0 = n00 + u * (n10 - n00)
    nx1 = n01 + u * (n11 - n01)
    return np.clip(nx0 + v * (nx1 - nx0), -1.0, 1.0)


@dataclass(slots=True, frozen=True)
class TerrainField:
    """Deterministic elevation function of latitude and longitude.

    Coordinates are scaled to metres (``METERS_PER_DEGREE``) before the noise
    lookup, so ``frequency`` is expressed in cycles per metre: ``1e-4`` gives
    terrain features with a wavelength of roughly ten kilometres.
    """

    seed: int
    # Base elevation in metres (e.g. valley floor).
    base_elevation: float = 1500.0
    # Half-range of the terrain height variation in metres.
    height_scale: float = 500.0
    # Spatial frequency of the first octave.
    frequency: float = 0.0001
    octaves: int = 4
    _perm: NDArray[np.int64] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.octaves < 1:
            raise ConfigurationError("Terrain requires at least one noise octave")
        if self.frequency <= 0:
            raise ConfigurationError("Terrain frequency must be greater than zero")
        if self.height_scale < 0:
            raise ConfigurationError("Terrain height_scale must not be negative")
        object.__setattr__(self, "_perm", _permutation_table(int(self.seed)))

    @classmethod
    def default(cls, seed: int) -> "TerrainField":
        return cls(seed)

    @classmethod
    def reno_tahoe(cls, seed: int) -> "TerrainField":
        """Sierra Nevada terrain around Lake Tahoe (~1900 m)."""
        return cls(seed, base_elevation=1900.0, height_scale=800.0, frequency=0.00008, octaves=5)

    @classmethod
    def boulder(cls, seed: int) -> "TerrainField":
        """Front Range foothills around Boulder, CO (~1650 m)."""
        return cls(seed, base_elevation=1650.0, height_scale=600.0, frequency=0.0001, octaves=4)

    @classmethod
    def flat(cls, seed: int) -> "TerrainField":
        """Rolling hills with minimal variation."""
        return cls(seed, base_elevation=300.0, height_scale=50.0, frequency=0.0002, octaves=2)

    @classmethod
    def for_bounds(cls, bounds: BoundingBox, seed: int) -> "TerrainField":
        """Pick a regional preset from the location of the box centre."""
        if Region.RENO_TAHOE.contains(*bounds.center()):
            return cls.reno_tahoe(seed)
        return cls.boulder(seed)

    def with_base_elevation(self, elevation: float) -> "TerrainField":
        return replace(self, base_elevation=elevation)

    def with_height_scale(self, scale: float) -> "TerrainField":
        return replace(self, height_scale=scale)

    def with_frequency(self, frequency: float) -> "TerrainField":
        return replace(self, frequency=frequency)

    def with_octaves(self, octaves: int) -> "TerrainField":
        return replace(self, octaves=octaves)

    def elevation_at(self, lat: float, lon: float) -> float:
        """Return the elevation in metres at a coordinate."""
        values = self._elevations(np.array([lat], dtype=float), np.array([lon], dtype=float))
        return float(values[0])

    def elevation_profile(self, coords: Sequence[LatLon]) -> List[float]:
        """Return the elevation for each coordinate."""
        if not coords:
            return []
        array = np.asarray(coords, dtype=float)
        return self._elevations(array[:, 0], array[:, 1]).tolist()

    def smooth_elevation_profile(
        self, coords: Sequence[LatLon], points_between: int
    ) -> List[float]:
        """Return elevations with ``points_between`` interpolated samples per step."""

        if len(coords) < 2 or points_between <= 0:
            return self.elevation_profile(coords)
        array = np.asarray(coords, dtype=float)
        t = np.arange(points_between + 1, dtype=float) / (points_between + 1)
        starts = array[:-1]
        deltas = np.diff(array, axis=0)
        lats = (starts[:, 0:1] + deltas[:, 0:1] * t).ravel()
        lons = (starts[:, 1:2] + deltas[:, 1:2] * t).ravel()
        lats = np.append(lats, array[-1, 0])
        lons = np.append(lons, array[-1, 1])
        return self._elevations(lats, lons).tolist()

    def _elevations(self, lats: MetricArray, lons: MetricArray) -> MetricArray:
        x = lats * METERS_PER_DEGREE
        y = lons * METERS_PER_DEGREE
        total = np.zeros_like(x)
        amplitude = 1.0
        frequency = self.frequency
        max_amplitude = 0.0
        for _ in range(self.octaves):
            total += _gradient_noise(self._perm, x * frequency, y * frequency) * amplitude
            max_amplitude += amplitude
            amplitude *= 0.5
            frequency *= 2.0
        normalized = total / max_amplitude
        return self.base_elevation + normalized * self.height_scale


def add_elevation_jitter(
    elevation: float, rng: np.random.Generator, std_dev: float
) -> float:
    """Add GPS-style elevation noise (real devices are off by 3-20 m)."""

    if std_dev <= 0:
        return elevation
    return elevation + float(rng.normal(0.0, std_dev))


__all__ = ["TerrainField", "add_elevation_jitter"]
