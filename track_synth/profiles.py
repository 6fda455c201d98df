"""Athletic performance profiles.

Profiles define realistic speeds and grade factors for the supported activity
archetypes. They are used by the track generator to produce timestamps and by
the effort synthesizer to derive expected segment times.

The set of variants is closed (runner, cyclist, hiker, dig); each profile is a
single frozen value tagged with its :class:`ProfileKind`, and every operation
dispatches on that tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

import numpy as np

from .activity_types import ActivityType
from .config import MIN_SPEED_MPS, VARIANCE_FACTOR_RANGE
from .errors import ConfigurationError


class ProfileKind(str, Enum):
    RUNNER = "runner"
    CYCLIST = "cyclist"
    HIKER = "hiker"
    DIG = "dig"


class _GradeModel(NamedTuple):
    uphill_penalty: float
    downhill_boost: float
    min_factor: float
    max_factor: float


# Speed change per unit grade (0.01 grade = 1%) and the allowed factor range.
_GRADE_MODELS = {
    ProfileKind.RUNNER: _GradeModel(15.0, 8.0, 0.2, 1.5),
    ProfileKind.CYCLIST: _GradeModel(25.0, 15.0, 0.15, 2.5),
    ProfileKind.HIKER: _GradeModel(12.0, 5.0, 0.25, 1.3),
}


@dataclass(slots=True, frozen=True)
class AthleteProfile:
    """Base speed, grade response and day-to-day variance of one archetype."""

    kind: ProfileKind
    base_speed: float
    variance_cv: float

    def __post_init__(self) -> None:
        if self.base_speed <= 0:
            raise ConfigurationError("base_speed must be greater than zero")
        if self.variance_cv < 0:
            raise ConfigurationError("variance_cv must not be negative")

    # -- runners ---------------------------------------------------------
    @classmethod
    def runner(cls) -> "AthleteProfile":
        """Recreational-to-competitive runner at ~5:00/km."""
        return cls(ProfileKind.RUNNER, 3.5, 0.08)

    @classmethod
    def runner_with_pace(cls, pace_min_per_km: float) -> "AthleteProfile":
        if pace_min_per_km <= 0:
            raise ConfigurationError("pace_min_per_km must be greater than zero")
        return cls(ProfileKind.RUNNER, 1000.0 / (pace_min_per_km * 60.0), 0.08)

    @classmethod
    def elite_runner(cls) -> "AthleteProfile":
        return cls.runner_with_pace(3.5)

    @classmethod
    def recreational_runner(cls) -> "AthleteProfile":
        return cls.runner_with_pace(6.0)

    # -- cyclists --------------------------------------------------------
    @classmethod
    def cyclist(cls) -> "AthleteProfile":
        """Road cyclist at ~28 km/h."""
        return cls(ProfileKind.CYCLIST, 8.0, 0.10)

    @classmethod
    def cyclist_with_speed(cls, speed_kmh: float) -> "AthleteProfile":
        if speed_kmh <= 0:
            raise ConfigurationError("speed_kmh must be greater than zero")
        return cls(ProfileKind.CYCLIST, speed_kmh / 3.6, 0.10)

    @classmethod
    def elite_cyclist(cls) -> "AthleteProfile":
        return cls.cyclist_with_speed(35.0)

    @classmethod
    def recreational_cyclist(cls) -> "AthleteProfile":
        return cls.cyclist_with_speed(22.0)

    @classmethod
    def mountain_biker(cls) -> "AthleteProfile":
        # Technical terrain: slower and less consistent.
        return cls(ProfileKind.CYCLIST, 5.0, 0.15)

    # -- hikers ----------------------------------------------------------
    @classmethod
    def hiker(cls) -> "AthleteProfile":
        """Recreational hiker at ~5.5 km/h."""
        return cls(ProfileKind.HIKER, 1.5, 0.12)

    @classmethod
    def hiker_with_speed(cls, speed_kmh: float) -> "AthleteProfile":
        if speed_kmh <= 0:
            raise ConfigurationError("speed_kmh must be greater than zero")
        return cls(ProfileKind.HIKER, speed_kmh / 3.6, 0.12)

    @classmethod
    def fast_hiker(cls) -> "AthleteProfile":
        return cls.hiker_with_speed(6.5)

    @classmethod
    def leisurely_hiker(cls) -> "AthleteProfile":
        return cls.hiker_with_speed(4.0)

    @classmethod
    def backpacker(cls) -> "AthleteProfile":
        return cls(ProfileKind.HIKER, 1.2, 0.15)

    # -- stationary ------------------------------------------------------
    @classmethod
    def dig(cls) -> "AthleteProfile":
        """Trail work: essentially stationary, speed is GPS drift."""
        return cls(ProfileKind.DIG, 0.2, 0.5)

    # -- capability set --------------------------------------------------
    def base_speed_mps(self) -> float:
        """Speed on flat terrain in metres per second."""
        return self.base_speed

    def grade_factor(self, grade: float) -> float:
        """Return the speed multiplier for a signed fractional grade.

        Values below 1.0 mean slower than base (uphill), above 1.0 faster
        (downhill). The result is always inside the variant's clamp range.
        Dig ignores grade entirely.
        """

        if self.kind is ProfileKind.DIG:
            return 1.0
        model = _GRADE_MODELS[self.kind]
        if grade >= 0.0:
            return max(1.0 - grade * model.uphill_penalty, model.min_factor)
        # grade is negative, so this adds speed
        return min(1.0 - grade * model.downhill_boost, model.max_factor)

    def variance(self) -> float:
        """Day-to-day performance variance as a coefficient of variation."""
        return self.variance_cv


def speed_at_grade(
    profile: AthleteProfile, grade: float, variance_factor: float
) -> float:
    """Return travel speed for ``grade`` with a pre-sampled variance factor."""

    target = profile.base_speed_mps() * profile.grade_factor(grade)
    return max(target * variance_factor, MIN_SPEED_MPS)


def sample_variance(profile: AthleteProfile, rng: np.random.Generator) -> float:
    """Sample a multiplier around 1.0 from the profile's variance."""

    std_dev = profile.variance()
    if std_dev <= 0.0:
        return 1.0
    low, high = VARIANCE_FACTOR_RANGE
    return float(np.clip(rng.normal(1.0, std_dev), low, high))


def profile_for_activity(activity_type: ActivityType | str) -> AthleteProfile:
    """Return the default profile for an activity type."""

    kind = ActivityType.parse(activity_type)
    if kind is ActivityType.CYCLING:
        return AthleteProfile.cyclist()
    if kind is ActivityType.MOUNTAIN_BIKING:
        return AthleteProfile.mountain_biker()
    if kind in (ActivityType.HIKING, ActivityType.WALKING):
        return AthleteProfile.hiker()
    if kind is ActivityType.DIG:
        return AthleteProfile.dig()
    return AthleteProfile.runner()


__all__ = [
    "AthleteProfile",
    "ProfileKind",
    "profile_for_activity",
    "sample_variance",
    "speed_at_grade",
]
