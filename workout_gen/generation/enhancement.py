"""Metadata enhancement applied to every successful workout."""

from datetime import UTC, datetime

from workout_gen.generation.models import GeneratedWorkout, WorkoutOrigin


def duration_tag(total_seconds: int) -> str:
    minutes = total_seconds // 60
    if minutes < 20:
        return "under_20_min"
    if minutes <= 45:
        return "20_to_45_min"
    return "over_45_min"


def derive_tags(workout: GeneratedWorkout) -> list[str]:
    """Existing tags plus origin, difficulty and duration tags, deduplicated in order."""
    derived = [
        "ai_generated" if workout.origin == WorkoutOrigin.EXTERNAL else "template_generated",
        workout.difficulty,
        duration_tag(workout.total_duration),
    ]
    if not workout.equipment or workout.equipment == ["body weight"]:
        derived.append("no_equipment")
    return list(dict.fromkeys([*workout.tags, *derived]))


def enhance_workout(
    workout: GeneratedWorkout,
    *,
    default_confidence: float,
    now: datetime | None = None,
) -> GeneratedWorkout:
    """Attach generation metadata.

    Args:
        workout: Workout from either generator
        default_confidence: Used when the workout carries no confidence
        now: Generation timestamp (current UTC time by default)

    Returns:
        New GeneratedWorkout with timestamp, confidence and tags set
    """
    return workout.model_copy(
        update={
            "generated_at": now or datetime.now(UTC),
            "confidence": workout.confidence if workout.confidence is not None else default_confidence,
            "tags": derive_tags(workout),
        }
    )
