"""Segment effort synthesis with realistic time distributions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
import logging
import math
from typing import List, Sequence, Tuple
from uuid import UUID

import numpy as np

from .config import (
    EFFORT_DAY_VARIANCE_RANGE,
    EFFORT_MAX_SPEED_FACTOR,
    EFFORT_PAUSE_FRACTION_RANGE,
    EFFORT_PAUSE_PROBABILITY,
    EFFORT_PAUSED_MAX_SPEED_FACTOR,
    EFFORT_TIME_VARIANCE,
    MIN_SPEED_MPS,
    SKILL_NORMAL_CLAMP,
    SKILL_POWER_LAW_CLAMP,
    SKILL_UNIFORM_RANGE,
)
from .errors import ConfigurationError
from .models import GeneratedEffort, GeneratedSegment
from .profiles import AthleteProfile
from .utils import new_id

# Below this speed a terrain share is treated as walked at MIN_SPEED_MPS.
_STALL_SPEED_MPS = 0.1


class SkillKind(str, Enum):
    UNIFORM = "uniform"
    NORMAL = "normal"
    POWER_LAW = "power_law"


@dataclass(slots=True, frozen=True)
class SkillDistribution:
    """Distribution of athlete skill factors across a population.

    A factor below 1.0 means faster than expected, above 1.0 slower.
    """

    kind: SkillKind
    mean: float = 1.0
    std_dev: float = 0.2
    alpha: float = 2.0

    def __post_init__(self) -> None:
        if self.kind is SkillKind.NORMAL and self.std_dev <= 0:
            raise ConfigurationError("Normal skill distribution needs std_dev > 0")
        if self.kind is SkillKind.POWER_LAW and self.alpha <= 0:
            raise ConfigurationError("Power-law skill distribution needs alpha > 0")

    @classmethod
    def uniform(cls) -> "SkillDistribution":
        return cls(SkillKind.UNIFORM)

    @classmethod
    def normal(cls, mean: float = 1.0, std_dev: float = 0.2) -> "SkillDistribution":
        return cls(SkillKind.NORMAL, mean=mean, std_dev=std_dev)

    @classmethod
    def power_law(cls, alpha: float = 2.0) -> "SkillDistribution":
        """Heavy right tail: a few fast athletes, most near average."""
        return cls(SkillKind.POWER_LAW, alpha=alpha)

    def sample(self, rng: np.random.Generator) -> float:
        if self.kind is SkillKind.UNIFORM:
            low, high = SKILL_UNIFORM_RANGE
            return float(rng.uniform(low, high))
        if self.kind is SkillKind.NORMAL:
            low, high = SKILL_NORMAL_CLAMP
            return float(np.clip(rng.normal(self.mean, self.std_dev), low, high))
        # Log-normal with mu = -sigma^2 / 2 keeps the mean at 1.0.
        sigma = 0.4 / math.sqrt(self.alpha)
        mu = -0.5 * sigma * sigma
        low, high = SKILL_POWER_LAW_CLAMP
        return float(np.clip(rng.lognormal(mu, sigma), low, high))


class TerrainModel(str, Enum):
    AVERAGE_GRADE = "average_grade"
    GAIN_LOSS = "gain_loss"


@dataclass(slots=True)
class EffortGenConfig:
    """Tunables for effort synthesis."""

    skill_distribution: SkillDistribution = field(
        default_factory=SkillDistribution.power_law
    )
    # Coefficient of variation of day-to-day performance.
    time_variance: float = EFFORT_TIME_VARIANCE
    # Probability that moving time is shorter than elapsed time.
    pause_probability: float = EFFORT_PAUSE_PROBABILITY
    pause_fraction_range: Tuple[float, float] = EFFORT_PAUSE_FRACTION_RANGE
    terrain_model: TerrainModel = TerrainModel.AVERAGE_GRADE

    def __post_init__(self) -> None:
        if self.time_variance < 0:
            raise ConfigurationError("time_variance must not be negative")
        if not 0.0 <= self.pause_probability <= 1.0:
            raise ConfigurationError("pause_probability must be within [0, 1]")
        low, high = self.pause_fraction_range
        if not 0.0 <= low <= high < 1.0:
            raise ConfigurationError(
                f"Invalid pause_fraction_range: {self.pause_fraction_range}"
            )
        self.terrain_model = TerrainModel(self.terrain_model)


class EffortGenerator:
    """Generates segment efforts whose times follow a skill distribution."""

    def __init__(self, config: EffortGenConfig | None = None) -> None:
        self.config = config or EffortGenConfig()
        self._log = logging.getLogger(self.__class__.__name__)

    def expected_time(
        self, segment: GeneratedSegment, profile: AthleteProfile
    ) -> float:
        """Seconds an average athlete of ``profile`` needs for ``segment``."""

        if self.config.terrain_model is TerrainModel.GAIN_LOSS:
            return self._gain_loss_time(segment, profile)
        grade = segment.average_grade or 0.0
        speed = profile.base_speed_mps() * profile.grade_factor(grade)
        return segment.distance_meters / speed

    def _gain_loss_time(
        self, segment: GeneratedSegment, profile: AthleteProfile
    ) -> float:
        # Climbing and descending are timed separately; the distance is split
        # in proportion to gain and loss.
        base_speed = profile.base_speed_mps()
        distance = segment.distance_meters
        gain = segment.elevation_gain_meters or 0.0
        loss = segment.elevation_loss_meters or 0.0
        if gain == 0.0 and loss == 0.0:
            return distance / base_speed

        uphill_distance = distance * gain / (gain + loss)
        downhill_distance = distance - uphill_distance
        uphill_grade = gain / uphill_distance if uphill_distance > 1.0 else 0.0
        downhill_grade = -loss / downhill_distance if downhill_distance > 1.0 else 0.0

        total = 0.0
        for share, grade in ((uphill_distance, uphill_grade), (downhill_distance, downhill_grade)):
            speed = base_speed * profile.grade_factor(grade)
            if speed <= _STALL_SPEED_MPS:
                speed = MIN_SPEED_MPS
            total += share / speed
        return total

    def sample_skill_factor(self, rng: np.random.Generator) -> float:
        return self.config.skill_distribution.sample(rng)

    def sample_day_variance(self, rng: np.random.Generator) -> float:
        low, high = EFFORT_DAY_VARIANCE_RANGE
        return float(np.clip(rng.normal(1.0, self.config.time_variance), low, high))

    def generate_single(
        self,
        segment: GeneratedSegment,
        user_id: UUID,
        activity_id: UUID,
        expected_time: float,
        started_at: datetime,
        rng: np.random.Generator,
    ) -> GeneratedEffort:
        """Sample one effort around ``expected_time``."""

        skill = self.sample_skill_factor(rng)
        day = self.sample_day_variance(rng)
        elapsed = expected_time * skill * day
        average_speed = segment.distance_meters / elapsed

        if rng.random() < self.config.pause_probability:
            low, high = self.config.pause_fraction_range
            pause_fraction = float(rng.uniform(low, high))
            moving = elapsed * (1.0 - pause_fraction)
            max_speed = segment.distance_meters / moving * EFFORT_PAUSED_MAX_SPEED_FACTOR
        else:
            moving = elapsed
            max_speed = average_speed * EFFORT_MAX_SPEED_FACTOR

        return GeneratedEffort(
            id=new_id(rng),
            segment_id=segment.id,
            activity_id=activity_id,
            user_id=user_id,
            started_at=started_at,
            elapsed_time_seconds=elapsed,
            moving_time_seconds=moving,
            average_speed_mps=average_speed,
            max_speed_mps=max_speed,
        )

    def generate_for_segment(
        self,
        segment: GeneratedSegment,
        user_ids: Sequence[UUID],
        activity_ids: Sequence[UUID],
        profile: AthleteProfile,
        base_time: datetime,
        rng: np.random.Generator,
    ) -> List[GeneratedEffort]:
        """Generate one effort per ``(user, activity)`` pair, an hour apart."""

        if len(user_ids) != len(activity_ids):
            raise ValueError(
                f"user_ids ({len(user_ids)}) and activity_ids ({len(activity_ids)}) differ in length"
            )
        expected = self.expected_time(segment, profile)
        efforts = [
            self.generate_single(
                segment,
                user_id,
                activity_id,
                expected,
                base_time + timedelta(hours=index),
                rng,
            )
            for index, (user_id, activity_id) in enumerate(zip(user_ids, activity_ids))
        ]
        self._log.debug(
            "Generated %d efforts on %r (expected %.1fs)",
            len(efforts),
            segment.name,
            expected,
        )
        return efforts


__all__ = [
    "EffortGenConfig",
    "EffortGenerator",
    "SkillDistribution",
    "SkillKind",
    "TerrainModel",
]
