"""Pydantic schemas for LLM interaction.

These schemas validate the structured output of the external generator.
Identifiers, timestamps and origin are never left to the model: they are
attached when the schema is converted to a GeneratedWorkout.
"""

import uuid

from pydantic import BaseModel, Field

from workout_gen.generation.models import Exercise, GeneratedWorkout, WorkoutOrigin, WorkoutPhase


class ExerciseSchema(BaseModel):
    """Schema for a single exercise in LLM output."""

    name: str = Field(..., min_length=1, description="Exercise name")
    description: str = Field("", description="Short description of the movement")
    sets: int | None = Field(None, ge=1, description="Number of sets")
    reps: int | None = Field(None, ge=1, description="Repetitions per set")
    duration_seconds: int | None = Field(None, gt=0, description="Duration for timed exercises, in seconds")
    rest_between_sets: int | None = Field(None, ge=0, description="Rest between sets, in seconds")
    equipment: list[str] = Field(default_factory=list, description="Equipment needed")
    form: str = Field("", description="Key form cue")
    modifications: list[str] = Field(default_factory=list, description="Easier or harder variations")


class PhaseSchema(BaseModel):
    """Schema for a workout phase in LLM output."""

    name: str = Field(..., min_length=1, description="Phase name")
    duration_minutes: int = Field(..., gt=0, description="Phase duration in minutes")
    exercises: list[ExerciseSchema] = Field(..., min_length=1, description="Exercises in order")
    instructions: str = Field("", description="How to perform this phase")
    tips: list[str] = Field(default_factory=list)


class GeneratedWorkoutSchema(BaseModel):
    """Schema for a complete workout from the LLM."""

    title: str = Field(..., min_length=1, description="Workout title")
    description: str = Field("", description="One or two sentence summary")
    warmup: PhaseSchema
    main_workout: PhaseSchema
    cooldown: PhaseSchema
    reasoning: str = Field("", description="Why this workout fits the user today")
    personalized_notes: list[str] = Field(default_factory=list)
    progression_tips: list[str] = Field(default_factory=list)
    safety_reminders: list[str] = Field(default_factory=list)
    confidence: float | None = Field(None, ge=0.0, le=1.0, description="Self-assessed fit in [0, 1]")
    estimated_calories: int | None = Field(None, ge=0)
    difficulty: str = Field("intermediate", description="beginner, intermediate or advanced")
    equipment: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    def to_workout(self, ai_model: str) -> GeneratedWorkout:
        """Convert to an external-origin GeneratedWorkout.

        The total duration is derived from the phases so the sum always
        matches.
        """
        phases = [
            WorkoutPhase(
                name=phase.name,
                duration=phase.duration_minutes * 60,
                exercises=[Exercise(**exercise.model_dump()) for exercise in phase.exercises],
                instructions=phase.instructions,
                tips=phase.tips,
            )
            for phase in (self.warmup, self.main_workout, self.cooldown)
        ]
        return GeneratedWorkout(
            id=f"external-{uuid.uuid4().hex[:12]}",
            title=self.title,
            description=self.description,
            total_duration=sum(phase.duration for phase in phases),
            warmup=phases[0],
            main_workout=phases[1],
            cooldown=phases[2],
            reasoning=self.reasoning,
            personalized_notes=self.personalized_notes,
            progression_tips=self.progression_tips,
            safety_reminders=self.safety_reminders,
            confidence=self.confidence,
            origin=WorkoutOrigin.EXTERNAL,
            ai_model=ai_model,
            estimated_calories=self.estimated_calories,
            difficulty=self.difficulty,
            equipment=self.equipment,
            tags=self.tags,
        )
