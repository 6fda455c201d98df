"""Central configuration for the synthetic track generator.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Most values can be overridden through environment
variables (optionally via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Geometry constants
# ---------------------------------------------------------------------------
# Mean Earth radius used by the haversine distance.
EARTH_RADIUS_M = 6_371_000.0

# Planar approximation used when stepping a path: metres per degree latitude.
METERS_PER_DEGREE = 111_000.0

# Largest correction (degrees) applied when a step leaves the bounding box.
BOUNDS_MAX_CORRECTION_DEG = 0.001


# ---------------------------------------------------------------------------
# Track generation
# ---------------------------------------------------------------------------
# Target track distance in metres.
TRACK_DISTANCE_M = _env_float("TRACK_DISTANCE_M", 5000.0)

# Approximate spacing between generated points in metres.
TRACK_POINT_SPACING_M = _env_float("TRACK_POINT_SPACING_M", 10.0)

# Standard deviation of GPS position noise (metres).
TRACK_GPS_JITTER_M = _env_float("TRACK_GPS_JITTER_M", 3.0)

# Standard deviation of GPS elevation noise (metres).
TRACK_ELEVATION_JITTER_M = _env_float("TRACK_ELEVATION_JITTER_M", 5.0)

# Probability of a pause between two consecutive points.
TRACK_PAUSE_PROBABILITY = _env_float("TRACK_PAUSE_PROBABILITY", 0.02)

# Pause duration range (seconds).
TRACK_PAUSE_DURATION_RANGE = (
    _env_float("TRACK_PAUSE_MIN_SECONDS", 30.0),
    _env_float("TRACK_PAUSE_MAX_SECONDS", 180.0),
)

# Heading noise (radians) per step for each route pattern.
RANDOM_WALK_HEADING_NOISE = 0.3
OUT_AND_BACK_HEADING_NOISE = 0.2
LOOP_HEADING_NOISE = 0.1

# Fraction of the target distance over which a loop completes one revolution.
LOOP_REVOLUTION_FRACTION = 0.95

# Standard deviation (degrees) of the jitter separating return and outbound legs.
OUT_AND_BACK_RETURN_JITTER_DEG = 0.00001

# Floor applied to any sampled travel speed (m/s).
MIN_SPEED_MPS = 0.5

# Bounds applied to the per-step variance factor.
VARIANCE_FACTOR_RANGE = (0.7, 1.4)


# ---------------------------------------------------------------------------
# Segment extraction
# ---------------------------------------------------------------------------
SEGMENT_MIN_LENGTH_M = _env_float("SEGMENT_MIN_LENGTH_M", 200.0)
SEGMENT_MAX_LENGTH_M = _env_float("SEGMENT_MAX_LENGTH_M", 5000.0)
SEGMENT_MIN_CLIMB_GAIN_M = _env_float("SEGMENT_MIN_CLIMB_GAIN_M", 10.0)

# Steps shorter than this (metres) are ignored when computing max grade.
SEGMENT_MIN_GRADE_STEP_M = 1.0

# Grades with a smaller magnitude are stored as "no grade".
SEGMENT_GRADE_EPSILON = 0.001

# Climb score thresholds, hardest first.
CLIMB_CATEGORY_THRESHOLDS = (320.0, 160.0, 80.0, 40.0, 20.0)


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------
SEGMENT_PUBLIC_PROBABILITY = _env_float("SEGMENT_PUBLIC_PROBABILITY", 0.95)
ACTIVITY_PUBLIC_PROBABILITY = _env_float("ACTIVITY_PUBLIC_PROBABILITY", 0.90)


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------
# Intervals slower than this are counted as stopped time.
ACTIVITY_MOVING_SPEED_THRESHOLD_MPS = 0.5

# Chance that an activity name gets a location suffix.
ACTIVITY_NAME_SUFFIX_PROBABILITY = 0.3


# ---------------------------------------------------------------------------
# Effort synthesis
# ---------------------------------------------------------------------------
EFFORT_TIME_VARIANCE = _env_float("EFFORT_TIME_VARIANCE", 0.15)
EFFORT_PAUSE_PROBABILITY = _env_float("EFFORT_PAUSE_PROBABILITY", 0.1)
EFFORT_PAUSE_FRACTION_RANGE = (0.02, 0.15)

# Clamp applied to the day-to-day variance multiplier.
EFFORT_DAY_VARIANCE_RANGE = (0.8, 1.3)

# Skill factor ranges per distribution.
SKILL_UNIFORM_RANGE = (0.7, 1.5)
SKILL_NORMAL_CLAMP = (0.5, 2.0)
SKILL_POWER_LAW_CLAMP = (0.5, 3.0)

# Max speed multipliers relative to the moving / average speed.
EFFORT_PAUSED_MAX_SPEED_FACTOR = 1.2
EFFORT_MAX_SPEED_FACTOR = 1.15


# ---------------------------------------------------------------------------
# Scenario defaults
# ---------------------------------------------------------------------------
SCENARIO_SEED = _env_int("SCENARIO_SEED", 42)
SCENARIO_USER_COUNT = _env_int("SCENARIO_USER_COUNT", 50)
SCENARIO_ACTIVITIES_PER_USER = (1, 3)
SCENARIO_EFFORTS_PER_USER = (1, 2)

# Log every generated segment at INFO level rather than DEBUG.
SCENARIO_VERBOSE_SEGMENTS = _env_bool("SCENARIO_VERBOSE_SEGMENTS", False)
