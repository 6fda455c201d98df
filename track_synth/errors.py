"""Central error types used across the application."""

from __future__ import annotations


class TrackSynthError(RuntimeError):
    """Base error for synthetic data generation failures."""


class ConfigurationError(TrackSynthError, ValueError):
    """Raised when a generator is configured with contradictory or empty values."""


__all__ = [
    "ConfigurationError",
    "TrackSynthError",
]
