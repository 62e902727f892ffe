"""Tests for generation observability helpers."""

from unittest.mock import patch

import pytest

from workout_gen.generation.observability import GenerationStage, log_event, log_stage_event, timing


def test_log_stage_event_rejects_unknown_status() -> None:
    with pytest.raises(ValueError, match="Status must be one of"):
        log_stage_event(GenerationStage.VALIDATE, "done")


def test_log_stage_event_fields() -> None:
    with patch("workout_gen.generation.observability.log_event") as log_event_mock:
        log_stage_event(GenerationStage.EXTERNAL, "fail", "attempt-1", {"error_code": "NETWORK_ERROR"})

    log_event_mock.assert_called_once_with(
        "generation_stage",
        level="WARNING",
        stage="external_generation",
        status="fail",
        attempt_id="attempt-1",
        error_code="NETWORK_ERROR",
    )


def test_log_event_never_raises() -> None:
    """Test that a broken sink does not propagate into generation."""
    with patch("workout_gen.generation.observability.logger") as logger_mock:
        logger_mock.log.side_effect = RuntimeError("sink closed")

        log_event("generation_attempt_started", attempt_id="attempt-1")

    logger_mock.log.assert_called_once()


def test_timing_logs_duration_even_on_error() -> None:
    with patch("workout_gen.generation.observability.log_event") as log_event_mock:
        with pytest.raises(KeyError):
            with timing("generation.stage.external", "attempt-2"):
                raise KeyError("boom")

    kwargs = log_event_mock.call_args.kwargs
    assert log_event_mock.call_args.args[0] == "generation_timing"
    assert kwargs["metric"] == "generation.stage.external"
    assert kwargs["attempt_id"] == "attempt-2"
    assert kwargs["duration_seconds"] >= 0
