"""Tests for workout metadata enhancement."""

from datetime import UTC, datetime

import pytest
from conftest import make_external_workout

from workout_gen.generation.enhancement import derive_tags, duration_tag, enhance_workout
from workout_gen.generation.models import WorkoutOrigin


def test_enhance_sets_timestamp_and_default_confidence() -> None:
    now = datetime(2025, 3, 1, 8, 30, tzinfo=UTC)
    workout = make_external_workout(confidence=None)

    enhanced = enhance_workout(workout, default_confidence=0.8, now=now)

    assert enhanced.generated_at == now
    assert enhanced.confidence == 0.8
    assert enhanced is not workout
    assert workout.generated_at is None


def test_enhance_keeps_existing_confidence() -> None:
    enhanced = enhance_workout(make_external_workout(confidence=0.93), default_confidence=0.8)

    assert enhanced.confidence == 0.93
    assert enhanced.generated_at is not None


def test_tags_reflect_origin_and_duration() -> None:
    external = make_external_workout()
    internal = external.model_copy(update={"origin": WorkoutOrigin.INTERNAL, "tags": ["strength"]})

    assert derive_tags(external)[0] == "ai_generated"
    tags = derive_tags(internal)
    assert tags[0] == "strength"
    assert "template_generated" in tags
    assert "20_to_45_min" in tags
    assert "no_equipment" in tags


def test_tags_are_deduplicated() -> None:
    workout = make_external_workout().model_copy(update={"tags": ["ai_generated", "intermediate"]})

    tags = derive_tags(workout)

    assert len(tags) == len(set(tags))


@pytest.mark.parametrize(("seconds", "expected"), [(600, "under_20_min"), (1800, "20_to_45_min"), (3600, "over_45_min")])
def test_duration_tag(seconds: int, expected: str) -> None:
    assert duration_tag(seconds) == expected
