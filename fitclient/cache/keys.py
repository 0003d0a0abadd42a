"""Cache key rules, one per logical resource.

A key is a pure function of the resource type and its parameters, so the
same request always maps to the same key and distinct requests never share one.
"""

CACHE_KEY_PREFIX = "cache_"

AVAILABLE_CONTENT = f"{CACHE_KEY_PREFIX}available_content"
USER_CALENDAR = f"{CACHE_KEY_PREFIX}user_calendar"
USER_WORKOUT_HISTORY = f"{CACHE_KEY_PREFIX}user_workout_history"
USER_PROFILE = f"{CACHE_KEY_PREFIX}user_profile"

PROGRAM_PREFIX = f"{CACHE_KEY_PREFIX}program_"
EXERCISE_PREFIX = f"{CACHE_KEY_PREFIX}exercise_"
TEST_WORKOUT_PREFIX = f"{CACHE_KEY_PREFIX}test_workout_"


def _require_id(resource: str, resource_id: str) -> str:
    value = str(resource_id).strip()
    if not value:
        raise ValueError(f"{resource} id must not be empty")
    return value


def available_content_key() -> str:
    return AVAILABLE_CONTENT


def user_calendar_key() -> str:
    return USER_CALENDAR


def user_workout_history_key() -> str:
    return USER_WORKOUT_HISTORY


def user_profile_key() -> str:
    return USER_PROFILE


def program_key(program_id: str) -> str:
    return f"{PROGRAM_PREFIX}{_require_id('program', program_id)}"


def exercise_key(exercise_id: str) -> str:
    return f"{EXERCISE_PREFIX}{_require_id('exercise', exercise_id)}"


def onboarding_workout_key(goal_id: int, level_id: int) -> str:
    return f"{TEST_WORKOUT_PREFIX}{goal_id}_{level_id}"


def is_content_key(key: str) -> bool:
    """Return True for keys owned by the content service (cleared together)."""
    return key in {AVAILABLE_CONTENT, USER_CALENDAR, USER_WORKOUT_HISTORY} or key.startswith((PROGRAM_PREFIX, EXERCISE_PREFIX))
