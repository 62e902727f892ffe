"""Result models for workout generation.

This module defines the immutable structures produced by both generators:
- Exercises and workout phases
- The generated workout itself (origin tagged)
- Internal recommendations and the internal generation result

Workouts are frozen: enhancement and regeneration build new instances.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class WorkoutOrigin(StrEnum):
    """Which generator produced a workout."""

    EXTERNAL = "external"
    INTERNAL = "internal"


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RecommendationType(StrEnum):
    ENERGY = "energy"
    SORENESS = "soreness"
    FOCUS = "focus"
    DURATION = "duration"
    EQUIPMENT = "equipment"
    INJURY = "injury"
    GOAL = "goal"


# -----------------------------
# Workout structure
# -----------------------------
class Exercise(BaseModel):
    """Single exercise within a workout phase."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = ""
    sets: int | None = Field(default=None, ge=1)
    reps: int | None = Field(default=None, ge=1)
    duration_seconds: int | None = Field(default=None, gt=0, description="Timed exercises only")
    rest_between_sets: int | None = Field(default=None, ge=0, description="Seconds")
    equipment: list[str] = Field(default_factory=list)
    form: str = ""
    modifications: list[str] = Field(default_factory=list)
    intensity: str | None = None


class WorkoutPhase(BaseModel):
    """Warm-up, main or cool-down block."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    duration: int = Field(..., gt=0, description="Phase duration in seconds")
    exercises: list[Exercise] = Field(..., min_length=1)
    instructions: str = ""
    tips: list[str] = Field(default_factory=list)


class GeneratedWorkout(BaseModel):
    """A complete multi-phase workout.

    Created once per successful attempt and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    total_duration: int = Field(..., gt=0, description="Total duration in seconds")
    warmup: WorkoutPhase
    main_workout: WorkoutPhase
    cooldown: WorkoutPhase
    reasoning: str = ""
    personalized_notes: list[str] = Field(default_factory=list)
    progression_tips: list[str] = Field(default_factory=list)
    safety_reminders: list[str] = Field(default_factory=list)
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    generated_at: datetime | None = None
    origin: WorkoutOrigin
    ai_model: str = ""
    estimated_calories: int | None = Field(default=None, ge=0)
    difficulty: str = "intermediate"
    equipment: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    @property
    def phases(self) -> tuple[WorkoutPhase, WorkoutPhase, WorkoutPhase]:
        return (self.warmup, self.main_workout, self.cooldown)

    @property
    def phase_duration_total(self) -> int:
        return sum(phase.duration for phase in self.phases)


# -----------------------------
# Internal generation
# -----------------------------
@dataclass(frozen=True)
class Recommendation:
    """Rule-based recommendation derived from canonical variables.

    Attributes:
        type: Domain the recommendation comes from
        content: Recommendation text
        confidence: Rule confidence in [0, 1]
        priority: Derived from confidence (>=0.8 high, >=0.6 medium, else low)
        source: Producer label
    """

    type: RecommendationType
    content: str
    confidence: float
    priority: Priority
    source: str = "internal"


@dataclass(frozen=True)
class InternalGenerationResult:
    """Output of the internal template engine.

    Attributes:
        template: Baseline workout, usable as the fallback result
        recommendations: Filtered, ordered recommendations
        prompt: Prompt augmentation for the external generator
    """

    template: GeneratedWorkout
    recommendations: list[Recommendation] = field(default_factory=list)
    prompt: str = ""
