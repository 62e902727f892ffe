"""Tests for error classification.

Tests verify that:
- Every code maps to the documented retry/fallback metadata
- Typed errors keep their code from the throw site
- Third-party failures are classified by their signature
- Classification never raises
"""

import pytest

from workout_gen.generation.errors import (
    ApiError,
    ErrorCode,
    GenerationCancelledError,
    GenerationError,
    GenerationTimeoutError,
    InsufficientDataError,
    InvalidDataError,
    NetworkError,
    RateLimitedError,
    ServiceUnavailableError,
    classify_error,
    infer_error_code,
)


@pytest.mark.parametrize(
    ("code", "retryable", "fallback_available", "retry_after"),
    [
        (ErrorCode.INVALID_DATA, False, False, None),
        (ErrorCode.INSUFFICIENT_DATA, False, True, None),
        (ErrorCode.API_ERROR, True, True, 15.0),
        (ErrorCode.NETWORK_ERROR, True, True, 5.0),
        (ErrorCode.TIMEOUT_ERROR, True, True, 10.0),
        (ErrorCode.RATE_LIMITED, True, True, 60.0),
        (ErrorCode.SERVICE_UNAVAILABLE, True, True, 30.0),
        (ErrorCode.GENERATION_FAILED, True, True, 5.0),
    ],
)
def test_classification_table(code: ErrorCode, retryable: bool, fallback_available: bool, retry_after: float | None) -> None:
    """Test that each code carries its documented metadata."""
    classified = classify_error(ValueError("boom"), code)

    assert classified.code == code
    assert classified.retryable is retryable
    assert classified.fallback_available is fallback_available
    assert classified.retry_after == retry_after
    assert classified.message
    assert classified.recovery_suggestion
    assert classified.details == "boom"


def test_typed_errors_carry_their_code() -> None:
    """Test that typed errors are classified by their own code."""
    assert InvalidDataError("x").classified.code == ErrorCode.INVALID_DATA
    assert InsufficientDataError("x").classified.code == ErrorCode.INSUFFICIENT_DATA
    assert ApiError("x").classified.code == ErrorCode.API_ERROR
    assert NetworkError("x").classified.code == ErrorCode.NETWORK_ERROR
    assert GenerationTimeoutError("x").classified.code == ErrorCode.TIMEOUT_ERROR
    assert RateLimitedError("x").classified.code == ErrorCode.RATE_LIMITED
    assert ServiceUnavailableError("x").classified.code == ErrorCode.SERVICE_UNAVAILABLE
    assert GenerationError("x").classified.code == ErrorCode.GENERATION_FAILED


def test_typed_error_wins_over_message_text() -> None:
    """Test that a typed error is not reclassified by misleading text."""
    error = InvalidDataError("network timed out while rate limited")

    assert infer_error_code(error) == ErrorCode.INVALID_DATA


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (TimeoutError(), ErrorCode.TIMEOUT_ERROR),
        (ConnectionResetError("reset by peer"), ErrorCode.NETWORK_ERROR),
        (RuntimeError("Request was aborted"), ErrorCode.NETWORK_ERROR),
        (RuntimeError("The read operation timed out"), ErrorCode.TIMEOUT_ERROR),
        (RuntimeError("Rate limit reached for requests"), ErrorCode.RATE_LIMITED),
        (RuntimeError("Error code: 429"), ErrorCode.RATE_LIMITED),
        (RuntimeError("You exceeded your current quota"), ErrorCode.RATE_LIMITED),
        (RuntimeError("503 Service Unavailable"), ErrorCode.SERVICE_UNAVAILABLE),
        (RuntimeError("Bad gateway 502"), ErrorCode.SERVICE_UNAVAILABLE),
        (RuntimeError("Failed to fetch"), ErrorCode.NETWORK_ERROR),
        (RuntimeError("Internal server error 500"), ErrorCode.API_ERROR),
        (RuntimeError("something odd"), ErrorCode.GENERATION_FAILED),
    ],
)
def test_infer_error_code_from_signature(error: Exception, expected: ErrorCode) -> None:
    """Test textual classification of third-party failures."""
    assert infer_error_code(error) == expected


def test_infer_error_code_from_type_name() -> None:
    """Test that provider SDK error types are recognized by name."""

    class RateLimitError(Exception):
        pass

    class APIConnectionError(Exception):
        pass

    assert infer_error_code(RateLimitError("slow down")) == ErrorCode.RATE_LIMITED
    assert infer_error_code(APIConnectionError("")) == ErrorCode.NETWORK_ERROR


def test_status_code_match_requires_word_boundary() -> None:
    """Test that numbers merely containing 500 are not treated as status codes."""
    assert infer_error_code(RuntimeError("processed 15000 tokens")) == ErrorCode.GENERATION_FAILED


def test_classify_never_raises() -> None:
    """Test that classification tolerates odd inputs."""

    class Unprintable(Exception):
        def __str__(self) -> str:
            raise RuntimeError("cannot print")

    assert classify_error(None).code == ErrorCode.GENERATION_FAILED
    assert classify_error(ValueError("x"), "NOT_A_CODE").code == ErrorCode.GENERATION_FAILED
    assert classify_error(Unprintable()).details == "Unprintable"


def test_from_exception_wraps_and_preserves_cause() -> None:
    """Test that third-party failures are wrapped in the matching typed error."""
    original = RuntimeError("Rate limit exceeded")

    wrapped = GenerationError.from_exception(original)

    assert isinstance(wrapped, RateLimitedError)
    assert wrapped.__cause__ is original
    assert GenerationError.from_exception(wrapped) is wrapped


def test_cancellation_is_not_a_generation_error() -> None:
    """Test that cancellation sits outside the classified hierarchy."""
    error = GenerationCancelledError()

    assert not isinstance(error, GenerationError)
    assert str(error) == "Generation was cancelled"
