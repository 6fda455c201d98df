"""Fluent builder for reproducible synthetic scenarios.

A scenario is a set of placeholder users, one or more timed activities per
user, segments cut from the first generated (reference) track, and efforts on
those segments for the (segment, user) pairs admitted by the coverage policy.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
import logging
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

import numpy as np

from .activities import ActivityGenerator
from .activity_types import ActivityType
from .config import (
    SCENARIO_ACTIVITIES_PER_USER,
    SCENARIO_EFFORTS_PER_USER,
    SCENARIO_SEED,
    SCENARIO_USER_COUNT,
    SCENARIO_VERBOSE_SEGMENTS,
    TRACK_DISTANCE_M,
)
from .coverage import EffortCoverage
from .efforts import EffortGenConfig, EffortGenerator, SkillDistribution
from .errors import ConfigurationError
from .models import (
    BoundingBox,
    GeneratedActivity,
    GeneratedEffort,
    GeneratedSegment,
    GeneratedUser,
    Region,
    TrackPoint,
)
from .paths import ProceduralGenerator, RoutePattern
from .profiles import AthleteProfile, profile_for_activity
from .segments import SegmentExtractConfig, SegmentGenerator
from .utils import new_id

_FIRST_NAMES = (
    "Alex", "Sam", "Jordan", "Taylor", "Morgan", "Casey", "Riley", "Jamie",
    "Avery", "Quinn", "Drew", "Rowan", "Emerson", "Parker", "Reese", "Skyler",
)
_LAST_NAMES = (
    "Rivera", "Chen", "Novak", "Okafor", "Lindqvist", "Garcia", "Tanaka",
    "Moreau", "Singh", "Kowalski", "Haddad", "Brennan", "Silva", "Ito",
)


@dataclass(slots=True, frozen=True)
class SegmentSpec:
    """Segment cut from the reference track between two length fractions."""

    start_fraction: float
    end_fraction: float
    name: str


@dataclass(slots=True)
class ScenarioResult:
    users: List[GeneratedUser] = field(default_factory=list)
    activities: List[GeneratedActivity] = field(default_factory=list)
    segments: List[GeneratedSegment] = field(default_factory=list)
    efforts: List[GeneratedEffort] = field(default_factory=list)

    def efforts_for(self, segment_id: UUID) -> List[GeneratedEffort]:
        return [effort for effort in self.efforts if effort.segment_id == segment_id]

    def activities_for(self, user_id: UUID) -> List[GeneratedActivity]:
        return [activity for activity in self.activities if activity.user_id == user_id]


def _check_range(name: str, value: Tuple[int, int]) -> Tuple[int, int]:
    low, high = value
    if low < 0 or high < low:
        raise ConfigurationError(f"Invalid {name} range: {value}")
    return (int(low), int(high))


class ScenarioBuilder:
    """Builder for complete synthetic scenarios.

    Example::

        result = (
            ScenarioBuilder()
            .with_users(50)
            .with_region(Region.BOULDER)
            .with_activity_type(ActivityType.RUNNING)
            .with_track_distance(5000.0)
            .with_segment(0.2, 0.6, "Hill Climb")
            .with_efforts_per_user(1, 3)
            .build_data()
        )
    """

    def __init__(self) -> None:
        self.user_count: int = SCENARIO_USER_COUNT
        self.user_ids: Optional[List[UUID]] = None
        self.region: BoundingBox = Region.BOULDER
        self.activity_type: ActivityType = ActivityType.RUNNING
        self.profile: Optional[AthleteProfile] = None
        self.track_distance: float = TRACK_DISTANCE_M
        self.route_pattern: RoutePattern = RoutePattern.RANDOM_WALK
        self.activities_per_user: Tuple[int, int] = SCENARIO_ACTIVITIES_PER_USER
        self.segments: List[SegmentSpec] = []
        self.auto_climbs: int = 0
        self.efforts_per_user: Tuple[int, int] = SCENARIO_EFFORTS_PER_USER
        self.segment_config: SegmentExtractConfig = SegmentExtractConfig()
        self.effort_config: EffortGenConfig = EffortGenConfig()
        self.coverage: EffortCoverage = EffortCoverage.full()
        self.start_time: Optional[datetime] = None
        self.seed: int = SCENARIO_SEED
        self._log = logging.getLogger(self.__class__.__name__)

    # -- configuration ---------------------------------------------------
    def with_users(self, count: int) -> "ScenarioBuilder":
        if count < 0:
            raise ConfigurationError("User count must not be negative")
        self.user_count = count
        return self

    def with_user_ids(self, user_ids: Sequence[UUID]) -> "ScenarioBuilder":
        """Attribute activities to existing user ids instead of generating users."""
        self.user_ids = list(user_ids)
        self.user_count = len(self.user_ids)
        return self

    def with_region(self, region: BoundingBox) -> "ScenarioBuilder":
        self.region = region
        return self

    def with_activity_type(self, activity_type: ActivityType | str) -> "ScenarioBuilder":
        self.activity_type = ActivityType.parse(activity_type)
        return self

    def with_profile(self, profile: AthleteProfile) -> "ScenarioBuilder":
        """Override the profile otherwise derived from the activity type."""
        self.profile = profile
        return self

    def with_track_distance(self, meters: float) -> "ScenarioBuilder":
        if meters <= 0:
            raise ConfigurationError("Track distance must be greater than zero")
        self.track_distance = meters
        return self

    def with_route_pattern(self, pattern: RoutePattern | str) -> "ScenarioBuilder":
        self.route_pattern = RoutePattern(pattern)
        return self

    def with_activities_per_user(self, low: int, high: int) -> "ScenarioBuilder":
        self.activities_per_user = _check_range("activities_per_user", (low, high))
        return self

    def with_segment(
        self, start_fraction: float, end_fraction: float, name: str
    ) -> "ScenarioBuilder":
        """Add a segment cut from the reference (first generated) track."""
        if not 0.0 <= start_fraction < end_fraction <= 1.0:
            raise ConfigurationError(
                f"Segment fractions must satisfy 0 <= start < end <= 1: "
                f"{start_fraction}, {end_fraction}"
            )
        self.segments.append(SegmentSpec(start_fraction, end_fraction, name))
        return self

    def with_auto_climbs(self, max_count: int) -> "ScenarioBuilder":
        """Also add up to ``max_count`` climbs detected on the reference track."""
        if max_count < 0:
            raise ConfigurationError("max_count must not be negative")
        self.auto_climbs = max_count
        return self

    def with_efforts_per_user(self, low: int, high: int) -> "ScenarioBuilder":
        self.efforts_per_user = _check_range("efforts_per_user", (low, high))
        return self

    def with_skill_distribution(self, dist: SkillDistribution) -> "ScenarioBuilder":
        self.effort_config = replace(self.effort_config, skill_distribution=dist)
        return self

    def with_segment_config(self, config: SegmentExtractConfig) -> "ScenarioBuilder":
        """Length gate and climb threshold used for every extracted segment."""
        self.segment_config = config
        return self

    def with_effort_config(self, config: EffortGenConfig) -> "ScenarioBuilder":
        self.effort_config = config
        return self

    def with_coverage(self, coverage: EffortCoverage) -> "ScenarioBuilder":
        self.coverage = coverage
        return self

    def with_start_time(self, start_time: datetime) -> "ScenarioBuilder":
        self.start_time = start_time
        return self

    def with_seed(self, seed: int) -> "ScenarioBuilder":
        if seed < 0:
            raise ConfigurationError(f"Seed must not be negative: {seed}")
        self.seed = seed
        return self

    def resolve_profile(self) -> AthleteProfile:
        return self.profile or profile_for_activity(self.activity_type)

    # -- generation ------------------------------------------------------
    def build_data(self, rng: np.random.Generator | None = None) -> ScenarioResult:
        """Generate the scenario in memory.

        ``rng`` defaults to ``numpy.random.default_rng(seed)``; the terrain is
        always seeded from ``seed`` so a caller-supplied ``rng`` only changes
        the sampled paths and statistics.
        """

        if rng is None:
            rng = np.random.default_rng(self.seed)
        start_time = self.start_time or datetime.now(timezone.utc)
        profile = self.resolve_profile()

        users = self._users(rng)
        activities, reference_track = self._activities(users, profile, start_time, rng)
        segments, fractions = self._segments(users, reference_track, rng)
        efforts = self._efforts(users, activities, segments, fractions, profile, rng)

        self._log.info(
            "Built scenario: users=%d activities=%d segments=%d efforts=%d",
            len(users),
            len(activities),
            len(segments),
            len(efforts),
        )
        return ScenarioResult(users, activities, segments, efforts)

    def _users(self, rng: np.random.Generator) -> List[GeneratedUser]:
        if self.user_ids is not None:
            return [
                GeneratedUser(user_id, f"Athlete {index + 1}")
                for index, user_id in enumerate(self.user_ids)
            ]
        users = []
        for _ in range(self.user_count):
            user_id = new_id(rng)
            first = _FIRST_NAMES[int(rng.integers(len(_FIRST_NAMES)))]
            last = _LAST_NAMES[int(rng.integers(len(_LAST_NAMES)))]
            users.append(GeneratedUser(user_id, f"{first} {last}"))
        return users

    def _activities(
        self,
        users: Sequence[GeneratedUser],
        profile: AthleteProfile,
        start_time: datetime,
        rng: np.random.Generator,
    ) -> Tuple[List[GeneratedActivity], Optional[List[TrackPoint]]]:
        track_gen = ProceduralGenerator.for_region(self.region, self.seed).with_distance(
            self.track_distance
        )
        activity_gen = ActivityGenerator()
        low, high = self.activities_per_user

        activities: List[GeneratedActivity] = []
        reference_track: Optional[List[TrackPoint]] = None
        for user in users:
            count = int(rng.integers(low, high + 1))
            for _ in range(count):
                # Each activity starts one day after the previous one.
                track_start = start_time + timedelta(days=len(activities))
                points = track_gen.generate(
                    profile, rng, self.route_pattern, start_time=track_start
                )
                if reference_track is None:
                    reference_track = points
                activities.append(
                    activity_gen.from_track(user.id, self.activity_type, points, rng)
                )
        return activities, reference_track

    def _segments(
        self,
        users: Sequence[GeneratedUser],
        reference_track: Optional[List[TrackPoint]],
        rng: np.random.Generator,
    ) -> Tuple[List[GeneratedSegment], List[Tuple[float, float]]]:
        if reference_track is None or not users:
            if self.segments or self.auto_climbs:
                self._log.warning("No reference track generated; skipping segments")
            return [], []

        segment_gen = SegmentGenerator(self.segment_config)
        segments: List[GeneratedSegment] = []
        fractions: List[Tuple[float, float]] = []

        for wanted in self.segments:
            creator = users[int(rng.integers(len(users)))]
            segment = segment_gen.extract_from_track(
                creator.id,
                reference_track,
                wanted.start_fraction,
                wanted.end_fraction,
                self.activity_type,
                wanted.name,
                rng,
            )
            if segment is None:
                self._log.warning(
                    "Segment %r (%.2f-%.2f) rejected by extraction",
                    wanted.name,
                    wanted.start_fraction,
                    wanted.end_fraction,
                )
                continue
            segments.append(segment)
            fractions.append((wanted.start_fraction, wanted.end_fraction))

        if self.auto_climbs:
            creator = users[int(rng.integers(len(users)))]
            climbs = segment_gen.extract_climbs(
                creator.id, reference_track, self.activity_type, rng
            )
            count = len(reference_track)
            for climb in climbs[: self.auto_climbs]:
                start_idx = reference_track.index(climb.points[0])
                fractions.append((start_idx / count, (start_idx + len(climb.points)) / count))
                segments.append(climb)

        log = self._log.info if SCENARIO_VERBOSE_SEGMENTS else self._log.debug
        for segment in segments:
            log(
                "Segment %r: %.0f m, gain=%s, category=%s",
                segment.name,
                segment.distance_meters,
                segment.elevation_gain_meters,
                segment.climb_category.label if segment.climb_category is not None else "-",
            )
        return segments, fractions

    def _efforts(
        self,
        users: Sequence[GeneratedUser],
        activities: Sequence[GeneratedActivity],
        segments: Sequence[GeneratedSegment],
        fractions: Sequence[Tuple[float, float]],
        profile: AthleteProfile,
        rng: np.random.Generator,
    ) -> List[GeneratedEffort]:
        effort_gen = EffortGenerator(self.effort_config)
        by_user: dict[UUID, List[GeneratedActivity]] = {}
        for activity in activities:
            by_user.setdefault(activity.user_id, []).append(activity)

        low, high = self.efforts_per_user
        efforts: List[GeneratedEffort] = []
        for index, (segment, (start_fraction, end_fraction)) in enumerate(
            zip(segments, fractions)
        ):
            expected = effort_gen.expected_time(segment, profile)
            for user in users:
                if not self.coverage.includes(index, len(segments), rng):
                    continue
                count = int(rng.integers(low, high + 1))
                for activity in by_user.get(user.id, [])[:count]:
                    effort = effort_gen.generate_single(
                        segment,
                        user.id,
                        activity.id,
                        expected,
                        activity.submitted_at,
                        rng,
                    )
                    efforts.append(
                        _with_fractions(effort, start_fraction, end_fraction)
                    )
        return efforts

    # -- presets ---------------------------------------------------------
    @classmethod
    def leaderboard_test(cls) -> "ScenarioBuilder":
        """200 runners with power-law times on one primary segment."""
        return (
            cls()
            .with_users(200)
            .with_region(Region.BOULDER)
            .with_activity_type(ActivityType.RUNNING)
            .with_track_distance(5000.0)
            .with_segment(0.2, 0.7, "Test Leaderboard Segment")
            .with_efforts_per_user(1, 3)
            .with_skill_distribution(SkillDistribution.power_law())
        )

    @classmethod
    def segment_overlap_test(cls) -> "ScenarioBuilder":
        """Three overlapping segments on the same track."""
        return (
            cls()
            .with_users(20)
            .with_region(Region.BOULDER)
            .with_activity_type(ActivityType.RUNNING)
            .with_track_distance(8000.0)
            .with_segment(0.1, 0.4, "Segment A")
            .with_segment(0.3, 0.6, "Segment B (overlaps A)")
            .with_segment(0.5, 0.9, "Segment C (overlaps B)")
            .with_efforts_per_user(2, 3)
        )

    @classmethod
    def climb_category_test(cls) -> "ScenarioBuilder":
        """Cycling in the Reno/Tahoe region for pronounced grade effects."""
        return (
            cls()
            .with_users(30)
            .with_region(Region.RENO_TAHOE)
            .with_activity_type(ActivityType.CYCLING)
            .with_track_distance(10000.0)
            .with_segment(0.1, 0.3, "Cat 4 Climb")
            .with_segment(0.4, 0.7, "Cat 3 Climb")
            .with_segment(0.7, 0.95, "Cat 2 Climb")
            .with_auto_climbs(3)
            .with_efforts_per_user(1, 2)
        )

    @classmethod
    def sparse_coverage_test(cls) -> "ScenarioBuilder":
        return (
            cls()
            .with_users(100)
            .with_track_distance(8000.0)
            .with_segment(0.05, 0.3, "Sparse A")
            .with_segment(0.35, 0.6, "Sparse B")
            .with_segment(0.65, 0.9, "Sparse C")
            .with_efforts_per_user(1, 1)
            .with_coverage(EffortCoverage.sparse())
        )

    @classmethod
    def zipf_coverage_test(cls) -> "ScenarioBuilder":
        """Popular early segments, long tail of rarely ridden ones."""
        builder = (
            cls()
            .with_users(100)
            .with_track_distance(10000.0)
            .with_efforts_per_user(1, 1)
            .with_coverage(EffortCoverage.zipf())
        )
        for index in range(5):
            start = 0.05 + index * 0.18
            builder.with_segment(start, start + 0.15, f"Zipf Segment {index + 1}")
        return builder


PRESETS = {
    "leaderboard": ScenarioBuilder.leaderboard_test,
    "segment_overlap": ScenarioBuilder.segment_overlap_test,
    "climb_category": ScenarioBuilder.climb_category_test,
    "sparse_coverage": ScenarioBuilder.sparse_coverage_test,
    "zipf_coverage": ScenarioBuilder.zipf_coverage_test,
}


def _with_fractions(
    effort: GeneratedEffort, start_fraction: float, end_fraction: float
) -> GeneratedEffort:
    return replace(effort, start_fraction=start_fraction, end_fraction=end_fraction)


__all__ = [
    "PRESETS",
    "ScenarioBuilder",
    "ScenarioResult",
    "SegmentSpec",
]
