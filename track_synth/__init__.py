"""Deterministic synthetic GPS track, segment and effort generation."""

from .activities import ActivityGenerator
from .activity_types import ActivityType
from .coverage import EffortCoverage
from .efforts import EffortGenConfig, EffortGenerator, SkillDistribution
from .errors import ConfigurationError, TrackSynthError
from .leaderboard import ScenarioMetrics, leaderboard_frame
from .main import main
from .models import (
    BoundingBox,
    ClimbCategory,
    GeneratedActivity,
    GeneratedEffort,
    GeneratedSegment,
    GeneratedUser,
    Region,
    TrackPoint,
    Visibility,
)
from .paths import ProceduralGenerator, RoutePattern, TrackConfig
from .profiles import AthleteProfile, profile_for_activity
from .scenario import ScenarioBuilder, ScenarioResult
from .segments import SegmentExtractConfig, SegmentGenerator, climb_category
from .terrain import TerrainField

__all__ = [
    "main",
    "ActivityGenerator",
    "ActivityType",
    "AthleteProfile",
    "BoundingBox",
    "ClimbCategory",
    "ConfigurationError",
    "EffortCoverage",
    "EffortGenConfig",
    "EffortGenerator",
    "GeneratedActivity",
    "GeneratedEffort",
    "GeneratedSegment",
    "GeneratedUser",
    "ProceduralGenerator",
    "Region",
    "RoutePattern",
    "ScenarioBuilder",
    "ScenarioMetrics",
    "ScenarioResult",
    "SegmentExtractConfig",
    "SegmentGenerator",
    "SkillDistribution",
    "TerrainField",
    "TrackConfig",
    "TrackPoint",
    "TrackSynthError",
    "Visibility",
    "climb_category",
    "leaderboard_frame",
    "profile_for_activity",
]
