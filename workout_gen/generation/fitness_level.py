"""Fitness level calculation.

Five-level model combining training experience with current activity:
beginner, novice, intermediate, advanced and adaptive (activity varies
day to day, so intensity follows the per-workout energy and soreness).
"""

from dataclasses import dataclass

FITNESS_LEVELS = ("beginner", "novice", "intermediate", "advanced", "adaptive")

_DESCRIPTIONS = {
    "beginner": "Minimal current fitness. Foundational movements at low intensity.",
    "novice": "Basic fitness with some foundational skills or regular gentle activity.",
    "intermediate": "Established routine. Moderate-to-high intensity is manageable.",
    "advanced": "High fitness, accustomed to intense training.",
    "adaptive": "Intensity adapts day to day based on energy and soreness.",
}


@dataclass(frozen=True)
class IntensityRange:
    minimum: int
    maximum: int
    description: str


_INTENSITY_RANGES = {
    "beginner": IntensityRange(1, 4, "Low intensity, focus on form and building habits"),
    "novice": IntensityRange(2, 6, "Moderate intensity, gradual progression"),
    "intermediate": IntensityRange(4, 8, "Moderate-to-high intensity, structured progression"),
    "advanced": IntensityRange(6, 10, "High intensity, advanced training methods"),
    "adaptive": IntensityRange(1, 10, "Variable intensity based on daily assessment"),
}


def calculate_fitness_level(experience_level: str | None, activity_level: str | None) -> str:
    """Calculate fitness level from experience and activity level.

    Args:
        experience_level: Profile experience ("New to Exercise", "Some Experience",
            "Advanced Athlete")
        activity_level: Profile activity ("sedentary" ... "extremely", or "varies")

    Returns:
        One of FITNESS_LEVELS; unknown combinations map to intermediate
    """
    if activity_level == "varies":
        return "adaptive"

    low_activity = activity_level in {"sedentary", "light"}

    if experience_level == "New to Exercise":
        if low_activity:
            return "beginner"
        if activity_level == "moderate":
            return "novice"
    elif experience_level == "Some Experience":
        if low_activity:
            return "novice"
        if activity_level in {"moderate", "very"}:
            return "intermediate"
        if activity_level == "extremely":
            return "advanced"
    elif experience_level == "Advanced Athlete":
        return "advanced"

    return "intermediate"


def describe_fitness_level(level: str) -> str:
    return _DESCRIPTIONS.get(level, _DESCRIPTIONS["intermediate"])


def intensity_range(level: str) -> IntensityRange:
    return _INTENSITY_RANGES.get(level, _INTENSITY_RANGES["intermediate"])
