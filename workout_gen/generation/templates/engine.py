"""Internal template engine.

Deterministically turns canonical variables into recommendations, a prompt
augmentation and a baseline workout. The baseline doubles as the fallback
result whenever external generation is skipped or fails.

Structural guarantees for any input:
- warm-up, main and cool-down each have at least one exercise
- every phase duration is positive
- phase durations sum exactly to the total duration
"""

import uuid

from loguru import logger

from workout_gen.config.models import INTERNAL_MODEL_LABEL
from workout_gen.config.settings import GenerationSettings, settings
from workout_gen.generation.context import MAX_DURATION_MINUTES, CanonicalVariables
from workout_gen.generation.models import (
    Exercise,
    GeneratedWorkout,
    InternalGenerationResult,
    Priority,
    Recommendation,
    WorkoutOrigin,
    WorkoutPhase,
)
from workout_gen.generation.templates.exercise_library import (
    CARDIO,
    COOLDOWN,
    FLEXIBILITY,
    FOCUS_CATEGORIES,
    STRENGTH,
    WARMUP,
    ExerciseTemplate,
    equipment_tags,
    focus_category,
    select_exercises,
)
from workout_gen.generation.templates.prompt import build_prompt
from workout_gen.generation.templates.recommendations import generate_recommendations

MIN_DURATION_MINUTES = 5
MIN_PHASE_SECONDS = 300
MIN_MAIN_EXERCISES = 4

_EXERCISE_CAPS = {"beginner": 8, "intermediate": 12, "advanced": 15}
_BASE_REST = {"beginner": 90, "intermediate": 60, "advanced": 45}
_INTENSITY_REST_FACTOR = {"light": 1.2, "moderate": 1.0, "intense": 0.8}
_SETS_REPS = {"beginner": (2, 10), "intermediate": (3, 12), "advanced": (4, 10)}
_TIMED_SECONDS = {"beginner": 30, "intermediate": 40, "advanced": 45}

_DIFFICULTY = {
    "beginner": "beginner",
    "novice": "beginner",
    "intermediate": "intermediate",
    "adaptive": "intermediate",
    "advanced": "advanced",
}

_WORKOUT_LABELS = {
    STRENGTH: "Strength",
    CARDIO: "Cardio",
    FLEXIBILITY: "Flexibility & Mobility",
    "hiit": "HIIT",
}


def clamp_duration(minutes: int) -> int:
    return max(MIN_DURATION_MINUTES, min(MAX_DURATION_MINUTES, minutes))


def split_phases(total_seconds: int) -> tuple[int, int, int]:
    """Split a session into warm-up, main and cool-down seconds.

    Warm-up is 10% and cool-down 8% of the session with 5-minute floors.
    When the floors would eat more than half the session, both shrink to a
    fifth of it instead.

    Returns:
        (warmup, main, cooldown), summing exactly to total_seconds
    """
    warmup = max(MIN_PHASE_SECONDS, round(total_seconds * 0.10))
    cooldown = max(MIN_PHASE_SECONDS, round(total_seconds * 0.08))
    if warmup + cooldown > total_seconds // 2:
        warmup = cooldown = max(1, total_seconds // 5)
    return warmup, total_seconds - warmup - cooldown, cooldown


def target_exercise_count(duration_minutes: int, experience_level: str) -> int:
    cap = _EXERCISE_CAPS.get(experience_level, 10)
    return max(MIN_MAIN_EXERCISES, min(duration_minutes // 5, cap))


def rest_periods(experience_level: str, intensity: str) -> tuple[int, int]:
    """Rest between sets and between exercises, in seconds."""
    base = _BASE_REST.get(experience_level, 60) * _INTENSITY_REST_FACTOR.get(intensity, 1.0)
    return round(base * 0.7), round(base)


def estimate_calories(duration_minutes: int, energy_level: int) -> int:
    return round(duration_minutes * 7 * energy_level / 3)


def fallback_confidence(variables: CanonicalVariables, cap: float) -> float:
    return round(min(cap, 0.5 + 0.15 * variables.completeness), 3)


def workout_kind(variables: CanonicalVariables) -> str:
    category = focus_category(variables.focus)
    if category in (CARDIO, FLEXIBILITY):
        return category
    if variables.intensity == "intense":
        return "hiit"
    return STRENGTH


class InternalTemplateEngine:
    """Rule-based generator used to enrich external calls and as fallback."""

    def __init__(self, config: GenerationSettings | None = None) -> None:
        self.config = config or settings

    def generate(
        self,
        variables: CanonicalVariables,
        *,
        confidence_threshold: float | None = None,
        max_recommendations: int | None = None,
        use_external: bool = True,
    ) -> InternalGenerationResult:
        """Produce recommendations, prompt and baseline workout.

        Args:
            variables: Canonical variables
            confidence_threshold: Minimum recommendation confidence (settings default)
            max_recommendations: Maximum recommendation count (settings default)
            use_external: Whether an external call will follow; the prompt is
                only built when it will

        Returns:
            InternalGenerationResult with an internal-origin template
        """
        threshold = self.config.confidence_threshold if confidence_threshold is None else confidence_threshold
        max_count = self.config.max_recommendations if max_recommendations is None else max_recommendations

        recommendations = generate_recommendations(variables, threshold, max_count)
        prompt = build_prompt(variables, recommendations) if use_external else ""
        template = self.build_workout(variables, recommendations)

        logger.debug(
            "Internal template generated",
            workout_id=template.id,
            recommendation_count=len(recommendations),
            main_exercise_count=len(template.main_workout.exercises),
        )
        return InternalGenerationResult(template=template, recommendations=recommendations, prompt=prompt)

    def generate_fallback(self, variables: CanonicalVariables) -> GeneratedWorkout:
        """Produce the final fallback workout for the given variables."""
        return self.generate(variables, use_external=False).template

    def build_workout(self, variables: CanonicalVariables, recommendations: list[Recommendation]) -> GeneratedWorkout:
        minutes = clamp_duration(variables.duration_minutes)
        total_seconds = minutes * 60
        warmup_seconds, main_seconds, cooldown_seconds = split_phases(total_seconds)

        tags = equipment_tags(variables.equipment)
        category = focus_category(variables.focus)
        kind = workout_kind(variables)

        warmup_templates = select_exercises(
            WARMUP, equipment=tags, injuries=variables.injuries, excluded=variables.excluded_exercises, limit=3
        )
        main_templates = self._select_main(variables, category, tags, target_exercise_count(minutes, variables.experience_level))
        cooldown_templates = select_exercises(
            COOLDOWN, equipment=tags, injuries=variables.injuries, excluded=variables.excluded_exercises, limit=3
        )

        between_sets, between_exercises = rest_periods(variables.experience_level, variables.intensity)

        warmup = WorkoutPhase(
            name="Warm-up",
            duration=warmup_seconds,
            exercises=self._timed_block(warmup_templates, warmup_seconds),
            instructions="Move continuously at an easy pace to raise your heart rate.",
            tips=["Start slow and build gradually."],
        )
        main = WorkoutPhase(
            name="Main Workout",
            duration=main_seconds,
            exercises=[self._main_exercise(template, variables, between_sets) for template in main_templates],
            instructions=f"Rest about {between_exercises} seconds between exercises.",
            tips=["Stop any exercise that causes sharp pain."],
        )
        cooldown = WorkoutPhase(
            name="Cool-down",
            duration=cooldown_seconds,
            exercises=self._timed_block(cooldown_templates, cooldown_seconds),
            instructions="Slow your breathing and hold each stretch without bouncing.",
            tips=["Breathe out as you ease deeper into each stretch."],
        )

        equipment = sorted({label for template in main_templates for label in template.equipment_label})
        label = _WORKOUT_LABELS[kind]

        return GeneratedWorkout(
            id=f"internal-{uuid.uuid4().hex[:12]}",
            title=f"{minutes}-Minute {label} Workout",
            description=f"A {variables.intensity} {label.lower()} session built for your {variables.fitness_level} fitness level.",
            total_duration=total_seconds,
            warmup=warmup,
            main_workout=main,
            cooldown=cooldown,
            reasoning=(
                f"Built from your {variables.focus.replace('_', ' ')} focus, {minutes}-minute window "
                f"and {variables.energy_category} energy, using {', '.join(equipment)}."
            ),
            personalized_notes=self._notes(variables, recommendations),
            progression_tips=self._progression_tips(variables),
            safety_reminders=self._safety_reminders(variables),
            confidence=fallback_confidence(variables, self.config.fallback_confidence_cap),
            origin=WorkoutOrigin.INTERNAL,
            ai_model=INTERNAL_MODEL_LABEL,
            estimated_calories=estimate_calories(minutes, variables.energy_level),
            difficulty=_DIFFICULTY.get(variables.fitness_level, "intermediate"),
            equipment=equipment,
            tags=list(dict.fromkeys(["internal", kind, variables.focus, variables.intensity, variables.duration_category])),
        )

    def _select_main(
        self,
        variables: CanonicalVariables,
        category: str,
        tags: frozenset[str],
        target: int,
    ) -> list[ExerciseTemplate]:
        # Top up from the other focus categories when the primary one runs short
        selected: list[ExerciseTemplate] = []
        order = [category] + [other for other in FOCUS_CATEGORIES if other != category]
        for current in order:
            if len(selected) >= target:
                break
            for template in select_exercises(
                current,
                equipment=tags,
                injuries=variables.injuries,
                excluded=variables.excluded_exercises,
                limit=target,
            ):
                if template not in selected and len(selected) < target:
                    selected.append(template)
        return selected

    def _main_exercise(self, template: ExerciseTemplate, variables: CanonicalVariables, rest: int) -> Exercise:
        sets, reps = _SETS_REPS.get(variables.experience_level, (3, 12))
        if variables.intensity == "light":
            sets = max(1, sets - 1)
        return Exercise(
            name=template.name,
            description=template.description,
            sets=sets,
            reps=None if template.timed else reps,
            duration_seconds=_TIMED_SECONDS.get(variables.experience_level, 40) if template.timed else None,
            rest_between_sets=rest,
            equipment=template.equipment_label,
            form=template.form,
            intensity=variables.intensity,
        )

    @staticmethod
    def _timed_block(templates: list[ExerciseTemplate], phase_seconds: int) -> list[Exercise]:
        per_exercise = max(1, phase_seconds // len(templates))
        return [
            Exercise(
                name=template.name,
                description=template.description,
                duration_seconds=per_exercise,
                equipment=template.equipment_label,
                form=template.form,
                intensity="light",
            )
            for template in templates
        ]

    @staticmethod
    def _notes(variables: CanonicalVariables, recommendations: list[Recommendation]) -> list[str]:
        notes: list[str] = []
        if variables.injuries:
            notes.extend([
                "Modify exercises as needed based on your injuries.",
                "Stop any exercise that causes pain.",
            ])
        if variables.soreness_rating >= 7:
            notes.extend([
                "High soreness detected: focus on form and reduced intensity.",
                "Take extra time to warm up affected areas.",
            ])
        notes.extend(rec.content for rec in recommendations if rec.priority == Priority.HIGH and rec.confidence >= 0.9)
        if variables.experience_level == "beginner":
            notes.extend([
                "Focus on proper form rather than speed or weight.",
                "Take breaks as needed between exercises.",
            ])
        return list(dict.fromkeys(notes))

    @staticmethod
    def _progression_tips(variables: CanonicalVariables) -> list[str]:
        if variables.experience_level == "beginner":
            return [
                "Repeat this workout until every rep feels controlled.",
                "Add one rep per set each week before adding sets.",
            ]
        if variables.experience_level == "advanced":
            return [
                "Increase load by 2.5-5% once all sets feel strong.",
                "Shorten rest periods to raise training density.",
            ]
        return [
            "Add a set or a few reps when the current volume feels comfortable.",
            "Progress one variable at a time.",
        ]

    @staticmethod
    def _safety_reminders(variables: CanonicalVariables) -> list[str]:
        reminders = [
            "Stay hydrated throughout the workout.",
            "Stop immediately if you feel dizzy, faint or short of breath.",
        ]
        reminders.extend(
            f"Protect your {injury.replace('_', ' ')}: skip or modify any movement that loads it painfully."
            for injury in variables.injuries
        )
        return reminders
