"""Coverage policies deciding which (segment, user) pairs get efforts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from .errors import ConfigurationError


class CoverageKind(str, Enum):
    FULL = "full"
    SPARSE = "sparse"
    ZIPF = "zipf"


@dataclass(slots=True, frozen=True)
class EffortCoverage:
    """How efforts are spread across segments.

    ``full`` gives every user an effort on every segment. ``sparse`` admits
    each pair with a fixed probability. ``zipf`` favours segments created
    early: segment ``i`` gets weight ``1 / (i + 1) ** alpha`` and an inclusion
    probability of ``min(1, weight / sum(weights) * segment_count)``.
    """

    kind: CoverageKind = CoverageKind.FULL
    fraction: float = 0.7
    alpha: float = 1.5

    def __post_init__(self) -> None:
        if self.kind is CoverageKind.SPARSE and not 0.0 <= self.fraction <= 1.0:
            raise ConfigurationError("Sparse coverage fraction must be within [0, 1]")
        if self.kind is CoverageKind.ZIPF and self.alpha <= 0:
            raise ConfigurationError("Zipf coverage alpha must be greater than zero")

    @classmethod
    def full(cls) -> "EffortCoverage":
        return cls(CoverageKind.FULL)

    @classmethod
    def sparse(cls, fraction: float = 0.7) -> "EffortCoverage":
        return cls(CoverageKind.SPARSE, fraction=fraction)

    @classmethod
    def zipf(cls, alpha: float = 1.5) -> "EffortCoverage":
        return cls(CoverageKind.ZIPF, alpha=alpha)

    def inclusion_probabilities(self, segment_count: int) -> NDArray[np.float64]:
        """Return the per-segment probability that a user gets an effort."""

        if segment_count <= 0:
            return np.zeros(0, dtype=float)
        if self.kind is CoverageKind.FULL:
            return np.ones(segment_count, dtype=float)
        if self.kind is CoverageKind.SPARSE:
            return np.full(segment_count, self.fraction, dtype=float)
        ranks = np.arange(1, segment_count + 1, dtype=float)
        weights = 1.0 / ranks**self.alpha
        return np.minimum(1.0, weights / weights.sum() * segment_count)

    def includes(
        self, segment_index: int, segment_count: int, rng: np.random.Generator
    ) -> bool:
        """Decide whether one user gets an effort on segment ``segment_index``."""

        if self.kind is CoverageKind.FULL:
            return True
        probability = self.inclusion_probabilities(segment_count)[segment_index]
        return bool(rng.random() < probability)


__all__ = ["CoverageKind", "EffortCoverage"]
