"""Tests for the context transformer and fitness level calculation."""

import pytest

from workout_gen.generation.context import (
    CanonicalVariables,
    build_canonical_variables,
    duration_category,
    slugify,
    soreness_category,
)
from workout_gen.generation.errors import InsufficientDataError, InvalidDataError
from workout_gen.generation.fitness_level import calculate_fitness_level
from workout_gen.generation.types import GenerationRequest, ProfileData, WorkoutFocusData


def test_build_canonical_variables(sample_request: GenerationRequest) -> None:
    """Test that a full request is transformed into canonical variables."""
    variables = build_canonical_variables(sample_request)

    assert variables.experience_level == "intermediate"
    assert variables.fitness_level == "intermediate"
    assert variables.activity_level == "moderate"
    assert variables.primary_goal == "strength"
    assert variables.focus == "strength_training"
    assert variables.duration_minutes == 30
    assert variables.duration_category == "moderate"
    assert variables.energy_category == "moderate"
    assert variables.intensity == "moderate"
    assert variables.soreness_category == "minimal"
    assert variables.soreness_areas == ("legs",)
    assert variables.equipment == ("dumbbells",)
    assert variables.injuries == ()
    assert variables.preferred_activities == ("yoga", "running_jogging")
    assert variables.workout_type == "detailed"


def test_transformation_is_deterministic(sample_request: GenerationRequest) -> None:
    """Test that the same request always yields equal variables."""
    assert build_canonical_variables(sample_request) == build_canonical_variables(sample_request)


def test_missing_profile_is_insufficient(sample_preferences: WorkoutFocusData) -> None:
    with pytest.raises(InsufficientDataError):
        build_canonical_variables(GenerationRequest(profile=None, preferences=sample_preferences))


def test_missing_preferences_is_insufficient(sample_profile: ProfileData) -> None:
    with pytest.raises(InsufficientDataError):
        build_canonical_variables(GenerationRequest(profile=sample_profile, preferences=None))


def test_missing_required_profile_fields_are_named(sample_preferences: WorkoutFocusData) -> None:
    """Test that the error names the missing required fields."""
    request = GenerationRequest(profile=ProfileData(physical_activity="light"), preferences=sample_preferences)

    with pytest.raises(InsufficientDataError, match="experience_level, primary_goal"):
        build_canonical_variables(request)


@pytest.mark.parametrize(
    "preferences",
    [
        WorkoutFocusData(duration_minutes=0),
        WorkoutFocusData(duration_minutes=241),
        WorkoutFocusData(energy_level=0),
        WorkoutFocusData(energy_level=6),
        WorkoutFocusData(soreness_rating=-1),
        WorkoutFocusData(soreness_rating=11),
    ],
)
def test_out_of_range_values_are_invalid(sample_profile: ProfileData, preferences: WorkoutFocusData) -> None:
    with pytest.raises(InvalidDataError):
        build_canonical_variables(GenerationRequest(profile=sample_profile, preferences=preferences))


def test_unknown_experience_level_is_invalid(sample_preferences: WorkoutFocusData) -> None:
    profile = ProfileData(experience_level="Olympian", primary_goal="Strength")

    with pytest.raises(InvalidDataError):
        build_canonical_variables(GenerationRequest(profile=profile, preferences=sample_preferences))


def test_minimal_request_uses_defaults(minimal_request: GenerationRequest) -> None:
    """Test defaults when only required fields are present."""
    variables = build_canonical_variables(minimal_request)

    assert variables.experience_level == "beginner"
    assert variables.focus == "general"
    assert variables.duration_minutes == 30
    assert variables.energy_level == 3
    assert variables.soreness_rating == 0
    assert variables.soreness_category == "none"
    assert variables.equipment == ()
    assert variables.completeness == 0.0


def test_preferred_duration_used_when_duration_absent(sample_profile: ProfileData) -> None:
    request = GenerationRequest(profile=sample_profile, preferences=WorkoutFocusData())

    variables = build_canonical_variables(request)

    assert variables.duration_minutes == 45
    # Falls back to profile equipment when none selected for this workout
    assert variables.equipment == ("dumbbells", "resistance_bands")


def test_injuries_exclude_no_injury_marker() -> None:
    profile = ProfileData(
        experience_level="Advanced Athlete",
        primary_goal="Muscle Gain",
        injuries=["No Injuries", "Lower Back", "Wrist or Elbow"],
    )

    variables = build_canonical_variables(GenerationRequest(profile=profile, preferences=WorkoutFocusData()))

    assert variables.injuries == ("lower_back", "wrist_or_elbow")


def test_completeness_grows_with_supplied_signals(sample_request: GenerationRequest, minimal_request: GenerationRequest) -> None:
    full = build_canonical_variables(sample_request)
    minimal = build_canonical_variables(minimal_request)

    assert 0.0 <= minimal.completeness < full.completeness <= 1.0


def test_default_variables_are_usable() -> None:
    variables = CanonicalVariables()

    assert variables.completeness == 0.0
    assert "provided_fields" not in variables.to_dict()


def test_slugify() -> None:
    assert slugify("Cardio Machines (Treadmill, Bike)") == "cardio_machines__treadmill__bike_"
    assert slugify(" Body Weight ") == "body_weight"


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [(10, "short"), (15, "short"), (30, "moderate"), (45, "standard"), (60, "extended"), (90, "long")],
)
def test_duration_category(minutes: int, expected: str) -> None:
    assert duration_category(minutes) == expected


@pytest.mark.parametrize(
    ("rating", "expected"),
    [(0, "none"), (2, "minimal"), (4, "mild"), (6, "moderate"), (8, "significant"), (10, "severe")],
)
def test_soreness_category(rating: int, expected: str) -> None:
    assert soreness_category(rating) == expected


@pytest.mark.parametrize(
    ("experience", "activity", "expected"),
    [
        ("New to Exercise", "sedentary", "beginner"),
        ("New to Exercise", "light", "beginner"),
        ("New to Exercise", "moderate", "novice"),
        ("Some Experience", "light", "novice"),
        ("Some Experience", "very", "intermediate"),
        ("Some Experience", "extremely", "advanced"),
        ("Advanced Athlete", "sedentary", "advanced"),
        ("Advanced Athlete", "varies", "adaptive"),
        ("New to Exercise", "extremely", "intermediate"),
        (None, None, "intermediate"),
    ],
)
def test_calculate_fitness_level(experience: str | None, activity: str | None, expected: str) -> None:
    assert calculate_fitness_level(experience, activity) == expected
