import numpy as np
import pytest

from track_synth.coverage import CoverageKind, EffortCoverage
from track_synth.errors import ConfigurationError


def test_full_coverage_consumes_no_randomness(rng):
    coverage = EffortCoverage.full()
    state = rng.bit_generator.state
    assert all(coverage.includes(i, 4, rng) for i in range(4))
    assert rng.bit_generator.state == state
    assert coverage.inclusion_probabilities(3).tolist() == [1.0, 1.0, 1.0]


def test_sparse_defaults_and_rate(rng):
    assert EffortCoverage.sparse().fraction == 0.7
    coverage = EffortCoverage.sparse(0.5)
    hits = sum(coverage.includes(0, 1, rng) for _ in range(2000))
    assert 0.45 <= hits / 2000 <= 0.55


def test_zipf_probabilities():
    coverage = EffortCoverage.zipf()
    assert coverage.kind is CoverageKind.ZIPF
    assert coverage.alpha == 1.5
    probs = coverage.inclusion_probabilities(5)
    weights = 1.0 / np.arange(1, 6) ** 1.5
    expected = np.minimum(1.0, weights / weights.sum() * 5)
    assert probs == pytest.approx(expected)
    assert probs[0] == 1.0
    assert all(a >= b for a, b in zip(probs, probs[1:]))
    assert ((probs >= 0.0) & (probs <= 1.0)).all()


def test_zipf_first_segment_is_popular(rng):
    coverage = EffortCoverage.zipf(2.0)
    counts = [sum(coverage.includes(i, 6, rng) for _ in range(300)) for i in range(6)]
    assert counts[0] == 300
    assert counts[0] >= (sum(counts) / 6) / 2
    assert counts[-1] < counts[0]


def test_empty_segment_list():
    assert EffortCoverage.zipf().inclusion_probabilities(0).size == 0


def test_invalid_coverage_rejected():
    with pytest.raises(ConfigurationError):
        EffortCoverage.sparse(1.5)
    with pytest.raises(ConfigurationError):
        EffortCoverage.zipf(0.0)
