"""Root conftest for all tests.

This file makes shared fixtures available across all test modules:
fast settings, sample requests and a scriptable fake provider.
"""

import asyncio
import sys
from pathlib import Path

import pytest

# Add project root to path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from workout_gen.config.settings import GenerationSettings
from workout_gen.generation.context import CanonicalVariables
from workout_gen.generation.models import Exercise, GeneratedWorkout, Recommendation, WorkoutOrigin, WorkoutPhase
from workout_gen.generation.types import GenerationOptions, GenerationRequest, ProfileData, WorkoutFocusData


def make_external_workout(title: str = "Remote Strength Session", confidence: float | None = 0.9) -> GeneratedWorkout:
    """Build a valid external-origin workout."""

    def phase(name: str, minutes: int, exercise: str) -> WorkoutPhase:
        return WorkoutPhase(name=name, duration=minutes * 60, exercises=[Exercise(name=exercise, sets=3, reps=10)])

    return GeneratedWorkout(
        id="external-test",
        title=title,
        total_duration=30 * 60,
        warmup=phase("Warm-up", 5, "Jog in place"),
        main_workout=phase("Main", 20, "Goblet Squat"),
        cooldown=phase("Cool-down", 5, "Hamstring Stretch"),
        confidence=confidence,
        origin=WorkoutOrigin.EXTERNAL,
        ai_model="test-model",
    )


class FakeProvider:
    """Scriptable WorkoutProvider.

    Each call pops the next outcome: an exception instance is raised, a
    workout is returned. The last outcome repeats once the list runs out.
    An optional delay or gate holds the call open.
    """

    def __init__(self, outcomes=None, delay: float = 0.0, gate: asyncio.Event | None = None) -> None:
        self.outcomes = list(outcomes) if outcomes is not None else [make_external_workout()]
        self.delay = delay
        self.gate = gate
        self.calls: list[tuple[CanonicalVariables, list[Recommendation], str]] = []
        self.started = asyncio.Event()

    async def generate_workout(self, variables, recommendations, prompt):
        self.calls.append((variables, recommendations, prompt))
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture
def fast_settings() -> GenerationSettings:
    """Settings with near-zero delays so tests run instantly."""
    return GenerationSettings(
        _env_file=None,
        timeout_seconds=1.0,
        retry_attempts=3,
        retry_delay_seconds=0.001,
        max_manual_retries=3,
        manual_retry_base_seconds=0.001,
        internal_progress_seconds=0.0,
        external_progress_seconds=0.0,
        progress_steps=4,
    )


@pytest.fixture
def fast_options() -> GenerationOptions:
    return GenerationOptions(timeout_seconds=1.0, retry_attempts=3, retry_delay_seconds=0.001)


@pytest.fixture
def sample_profile() -> ProfileData:
    return ProfileData(
        experience_level="Some Experience",
        physical_activity="moderate",
        preferred_duration="30-45 min",
        primary_goal="Strength",
        preferred_activities=["Yoga", "Running/Jogging"],
        available_equipment=["Dumbbells", "Resistance Bands"],
        available_locations=["Home"],
        injuries=["No Injuries"],
    )


@pytest.fixture
def sample_preferences() -> WorkoutFocusData:
    return WorkoutFocusData(
        focus="Strength Training",
        duration_minutes=30,
        energy_level=3,
        soreness_rating=2,
        soreness_areas=["Legs"],
        equipment=["Dumbbells"],
    )


@pytest.fixture
def sample_request(sample_profile: ProfileData, sample_preferences: WorkoutFocusData) -> GenerationRequest:
    return GenerationRequest(profile=sample_profile, preferences=sample_preferences, workout_type="detailed")


@pytest.fixture
def minimal_request() -> GenerationRequest:
    return GenerationRequest(
        profile=ProfileData(experience_level="New to Exercise", primary_goal="General Health"),
        preferences=WorkoutFocusData(),
    )
