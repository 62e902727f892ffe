"""Prompt augmentation built from canonical variables and recommendations."""

from workout_gen.generation.context import CanonicalVariables
from workout_gen.generation.fitness_level import describe_fitness_level, intensity_range
from workout_gen.generation.models import Recommendation


def _listing(values: tuple[str, ...], empty: str) -> str:
    return ", ".join(value.replace("_", " ") for value in values) if values else empty


def build_prompt(variables: CanonicalVariables, recommendations: list[Recommendation]) -> str:
    """Build the prompt augmentation sent alongside the external request.

    Args:
        variables: Canonical variables
        recommendations: Filtered recommendations, highest priority first

    Returns:
        Multi-line prompt text
    """
    level_range = intensity_range(variables.fitness_level)
    lines = [
        "User profile:",
        f"- Experience: {variables.experience_level}",
        f"- Fitness level: {variables.fitness_level} ({describe_fitness_level(variables.fitness_level)})",
        f"- Recommended intensity range: {level_range.minimum}-{level_range.maximum} ({level_range.description})",
        f"- Activity level: {variables.activity_level}",
        f"- Primary goal: {variables.primary_goal.replace('_', ' ')}",
        f"- Preferred activities: {_listing(variables.preferred_activities, 'none stated')}",
        f"- Injuries: {_listing(variables.injuries, 'none')}",
        "",
        "Today's workout:",
        f"- Type: {variables.workout_type}",
        f"- Focus: {variables.focus.replace('_', ' ')}",
        f"- Duration: {variables.duration_minutes} minutes ({variables.duration_category})",
        f"- Energy: {variables.energy_level}/5 ({variables.energy_category}), intensity {variables.intensity}",
        f"- Soreness: {variables.soreness_rating}/10 ({variables.soreness_category})"
        + (f" in {_listing(variables.soreness_areas, '')}" if variables.soreness_areas else ""),
        f"- Equipment: {_listing(variables.equipment, 'body weight only')}",
        f"- Locations: {_listing(variables.locations, 'any')}",
        f"- Exclude exercises: {_listing(variables.excluded_exercises, 'none')}",
    ]

    if recommendations:
        lines.extend(["", "Recommendations (highest priority first):"])
        lines.extend(f"- [{rec.priority.value}] {rec.content}" for rec in recommendations)

    if variables.extra_context:
        lines.extend(["", f"Additional context: {variables.extra_context}"])

    return "\n".join(lines)
