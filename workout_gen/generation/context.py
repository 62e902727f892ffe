"""Context transformer: raw profile and preferences to canonical variables.

Both generators consume the same CanonicalVariables so the internal
template and the external prompt always agree on the user's situation.
Pure and synchronous; structural problems are raised as typed errors.
"""

import re
from dataclasses import asdict, dataclass, field

from loguru import logger

from workout_gen.generation.errors import InsufficientDataError, InvalidDataError
from workout_gen.generation.fitness_level import FITNESS_LEVELS, calculate_fitness_level
from workout_gen.generation.types import GenerationRequest

MAX_DURATION_MINUTES = 240
DEFAULT_DURATION_MINUTES = 30
DEFAULT_ENERGY_LEVEL = 3

EXPERIENCE_MAPPING = {
    "New to Exercise": "beginner",
    "Some Experience": "intermediate",
    "Advanced Athlete": "advanced",
}

ACTIVITY_MAPPING = {
    "sedentary": "low",
    "light": "low_moderate",
    "moderate": "moderate",
    "very": "moderate_high",
    "extremely": "high",
    "varies": "variable",
}

PREFERRED_DURATION_MINUTES = {
    "15-30 min": 30,
    "30-45 min": 45,
    "45-60 min": 60,
    "60+ min": 75,
}

_NO_INJURY_VALUES = {"no injuries", "none", "no_injuries"}


@dataclass(frozen=True)
class CanonicalVariables:
    """Canonical variable set shared by both generators.

    Every field has a default so a minimal instance is still a valid
    input to the internal template engine.
    """

    experience_level: str = "intermediate"
    fitness_level: str = "intermediate"
    activity_level: str = "moderate"
    primary_goal: str = "general_health"
    focus: str = "general"
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    duration_category: str = "moderate"
    energy_level: int = DEFAULT_ENERGY_LEVEL
    energy_category: str = "moderate"
    intensity: str = "moderate"
    soreness_rating: int = 0
    soreness_areas: tuple[str, ...] = ()
    soreness_category: str = "none"
    equipment: tuple[str, ...] = ()
    locations: tuple[str, ...] = ()
    preferred_activities: tuple[str, ...] = ()
    injuries: tuple[str, ...] = ()
    excluded_exercises: tuple[str, ...] = ()
    workout_type: str = "quick"
    extra_context: str | None = None
    provided_fields: frozenset[str] = field(default_factory=frozenset)

    @property
    def completeness(self) -> float:
        """Share of optional signals the user actually supplied, in [0, 1]."""
        return len(self.provided_fields & _OPTIONAL_SIGNALS) / len(_OPTIONAL_SIGNALS)

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop("provided_fields")
        return data


_OPTIONAL_SIGNALS = frozenset({
    "physical_activity",
    "duration",
    "energy_level",
    "soreness_rating",
    "equipment",
    "focus",
    "injuries",
    "preferred_activities",
})


def slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", value.strip().lower())


def _slugify_all(values: list[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for value in values:
        if value and value.strip():
            seen.setdefault(slugify(value), None)
    return tuple(seen)


def duration_category(minutes: int) -> str:
    if minutes <= 15:
        return "short"
    if minutes <= 30:
        return "moderate"
    if minutes <= 45:
        return "standard"
    if minutes <= 60:
        return "extended"
    return "long"


def energy_category(level: int) -> str:
    if level <= 2:
        return "low"
    if level == 3:
        return "moderate"
    return "high"


def intensity_for_energy(level: int) -> str:
    if level <= 2:
        return "light"
    if level == 3:
        return "moderate"
    return "intense"


def soreness_category(rating: int) -> str:
    if rating == 0:
        return "none"
    if rating <= 2:
        return "minimal"
    if rating <= 4:
        return "mild"
    if rating <= 6:
        return "moderate"
    if rating <= 8:
        return "significant"
    return "severe"


def build_canonical_variables(request: GenerationRequest) -> CanonicalVariables:
    """Convert a generation request into canonical variables.

    Args:
        request: Raw profile, preferences and workout type

    Returns:
        CanonicalVariables for both generators

    Raises:
        InsufficientDataError: If the profile or preferences section is missing,
            or the profile lacks experience level or primary goal
        InvalidDataError: If a supplied value is out of range or unknown
    """
    profile = request.profile
    preferences = request.preferences

    if profile is None:
        raise InsufficientDataError("Profile data is required to generate a workout")
    if preferences is None:
        raise InsufficientDataError("Workout preferences are required to generate a workout")

    missing = [name for name in ("experience_level", "primary_goal") if not getattr(profile, name)]
    if missing:
        raise InsufficientDataError(f"Profile is missing required fields: {', '.join(missing)}")

    experience = EXPERIENCE_MAPPING.get(profile.experience_level)
    if experience is None:
        raise InvalidDataError(f"Unknown experience level: {profile.experience_level!r}")

    provided: set[str] = set()

    if profile.physical_activity:
        activity = ACTIVITY_MAPPING.get(profile.physical_activity)
        if activity is None:
            raise InvalidDataError(f"Unknown physical activity level: {profile.physical_activity!r}")
        provided.add("physical_activity")
    else:
        activity = "moderate"

    if profile.calculated_fitness_level in FITNESS_LEVELS:
        fitness_level = profile.calculated_fitness_level
    else:
        fitness_level = calculate_fitness_level(profile.experience_level, profile.physical_activity)

    if preferences.duration_minutes is not None:
        duration = preferences.duration_minutes
        if duration <= 0 or duration > MAX_DURATION_MINUTES:
            raise InvalidDataError(f"Duration must be between 1 and {MAX_DURATION_MINUTES} minutes, got {duration}")
        provided.add("duration")
    elif profile.preferred_duration in PREFERRED_DURATION_MINUTES:
        duration = PREFERRED_DURATION_MINUTES[profile.preferred_duration]
        provided.add("duration")
    else:
        duration = DEFAULT_DURATION_MINUTES

    if preferences.energy_level is not None:
        energy = preferences.energy_level
        if not 1 <= energy <= 5:
            raise InvalidDataError(f"Energy level must be between 1 and 5, got {energy}")
        provided.add("energy_level")
    else:
        energy = DEFAULT_ENERGY_LEVEL

    if preferences.soreness_rating is not None:
        soreness = preferences.soreness_rating
        if not 0 <= soreness <= 10:
            raise InvalidDataError(f"Soreness rating must be between 0 and 10, got {soreness}")
        provided.add("soreness_rating")
    else:
        soreness = 0

    equipment = _slugify_all(preferences.equipment or profile.available_equipment)
    if equipment:
        provided.add("equipment")

    focus = slugify(preferences.focus) if preferences.focus and preferences.focus.strip() else "general"
    if focus != "general":
        provided.add("focus")

    injuries = _slugify_all([injury for injury in profile.injuries if injury.strip().lower() not in _NO_INJURY_VALUES])
    if profile.injuries:
        provided.add("injuries")

    activities = _slugify_all(profile.preferred_activities)
    if activities:
        provided.add("preferred_activities")

    variables = CanonicalVariables(
        experience_level=experience,
        fitness_level=fitness_level,
        activity_level=activity,
        primary_goal=slugify(profile.primary_goal),
        focus=focus,
        duration_minutes=duration,
        duration_category=duration_category(duration),
        energy_level=energy,
        energy_category=energy_category(energy),
        intensity=intensity_for_energy(energy),
        soreness_rating=soreness,
        soreness_areas=_slugify_all(preferences.soreness_areas),
        soreness_category=soreness_category(soreness),
        equipment=equipment,
        locations=_slugify_all(profile.available_locations),
        preferred_activities=activities,
        injuries=injuries,
        excluded_exercises=tuple(name.strip().lower() for name in preferences.exclude_exercises if name.strip()),
        workout_type=request.workout_type,
        extra_context=request.extra_context,
        provided_fields=frozenset(provided),
    )

    logger.debug(
        "Canonical variables built",
        fitness_level=variables.fitness_level,
        focus=variables.focus,
        duration_minutes=variables.duration_minutes,
        completeness=round(variables.completeness, 2),
    )
    return variables
