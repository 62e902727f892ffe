"""Request, option and state types for the generation orchestrator."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from workout_gen.config.settings import GenerationSettings, settings
from workout_gen.generation.errors import ClassifiedError
from workout_gen.generation.models import GeneratedWorkout

ExperienceLevel = Literal["New to Exercise", "Some Experience", "Advanced Athlete"]
ActivityLevel = Literal["sedentary", "light", "moderate", "very", "extremely", "varies"]
FitnessLevel = Literal["beginner", "novice", "intermediate", "advanced", "adaptive"]
PreferredDuration = Literal["15-30 min", "30-45 min", "45-60 min", "60+ min"]
WorkoutType = Literal["quick", "detailed"]


# -----------------------------
# Request
# -----------------------------
class ProfileData(BaseModel):
    """Long-lived user profile.

    Every field is optional at the type level; the context transformer
    decides which ones are required for generation.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    experience_level: str | None = None
    physical_activity: str | None = None
    calculated_fitness_level: str | None = None
    preferred_duration: str | None = None
    primary_goal: str | None = None
    preferred_activities: list[str] = Field(default_factory=list)
    available_equipment: list[str] = Field(default_factory=list)
    available_locations: list[str] = Field(default_factory=list)
    injuries: list[str] = Field(default_factory=list)
    age: str | None = None


class WorkoutFocusData(BaseModel):
    """Per-workout selections made just before generating."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    focus: str | None = None
    duration_minutes: int | None = None
    energy_level: int | None = None
    soreness_rating: int | None = None
    soreness_areas: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)
    exclude_exercises: list[str] = Field(default_factory=list)


class GenerationRequest(BaseModel):
    """Immutable input of one generation attempt."""

    model_config = ConfigDict(frozen=True)

    profile: ProfileData | None = None
    preferences: WorkoutFocusData | None = None
    workout_type: WorkoutType = "quick"
    extra_context: str | None = None


class GenerationOptions(BaseModel):
    """Per-call options for external generation and fallback."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timeout_seconds: float = Field(default=30.0, gt=0)
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay_seconds: float = Field(default=1.0, ge=0)
    use_external_ai: bool = True
    fallback_to_internal: bool = Field(
        default=True,
        validation_alias=AliasChoices("fallback_to_internal", "use_fallback"),
    )
    enable_detailed_logging: bool = False

    @classmethod
    def from_settings(cls, config: GenerationSettings | None = None, **overrides: Any) -> "GenerationOptions":
        """Build options whose defaults come from settings."""
        config = config or settings
        values: dict[str, Any] = {
            "timeout_seconds": config.timeout_seconds,
            "retry_attempts": config.retry_attempts,
            "retry_delay_seconds": config.retry_delay_seconds,
        }
        values.update(overrides)
        return cls(**values)


# -----------------------------
# State
# -----------------------------
class GenerationStatus(StrEnum):
    IDLE = "idle"
    VALIDATING = "validating"
    GENERATING = "generating"
    ENHANCING = "enhancing"
    COMPLETE = "complete"
    ERROR = "error"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = frozenset({GenerationStatus.VALIDATING, GenerationStatus.GENERATING, GenerationStatus.ENHANCING})


@dataclass(frozen=True)
class GenerationSnapshot:
    """Read-only view of the orchestrator state.

    Attributes:
        status: Current status
        generation_progress: Progress percentage in [0, 100]
        error: Current error, set only while status is error
        last_error: Most recent error, kept until the next success or clear
        message: User-facing status message
        retry_count: Manual retries since the last success
        generated_workout: Last successful workout, kept across failures
        last_generated: When generated_workout was produced
    """

    status: GenerationStatus = GenerationStatus.IDLE
    generation_progress: int = 0
    error: ClassifiedError | None = None
    last_error: ClassifiedError | None = None
    message: str | None = None
    retry_count: int = 0
    generated_workout: GeneratedWorkout | None = None
    last_generated: datetime | None = None

    @property
    def result(self) -> GeneratedWorkout | None:
        """The attempt's result, present only once complete."""
        if self.status == GenerationStatus.COMPLETE:
            return self.generated_workout
        return None

    @property
    def is_generating(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def has_error(self) -> bool:
        return self.error is not None
