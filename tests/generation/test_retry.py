"""Tests for the retry/timeout wrapper and cancellation tokens."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from workout_gen.generation.cancellation import CancellationToken
from workout_gen.generation.errors import (
    ErrorCode,
    GenerationCancelledError,
    GenerationTimeoutError,
    InvalidDataError,
    NetworkError,
    RateLimitedError,
)
from workout_gen.generation.retry import calculate_backoff_delay, with_retry_and_timeout


class _Operation:
    """Operation failing with scripted errors before succeeding."""

    def __init__(self, failures: list[Exception], result: str = "ok", delay: float = 0.0) -> None:
        self.failures = list(failures)
        self.result = result
        self.delay = delay
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.failures:
            raise self.failures.pop(0)
        return self.result


@pytest.mark.asyncio
async def test_returns_first_success() -> None:
    operation = _Operation([])

    assert await with_retry_and_timeout(operation, attempts=3, base_delay=0.001) == "ok"
    assert operation.calls == 1


@pytest.mark.asyncio
async def test_retries_retryable_failures_then_succeeds() -> None:
    operation = _Operation([NetworkError("down"), RuntimeError("Service Unavailable")])
    on_retry = MagicMock()

    result = await with_retry_and_timeout(operation, attempts=3, base_delay=0.001, on_retry=on_retry)

    assert result == "ok"
    assert operation.calls == 3
    assert on_retry.call_count == 2
    assert [call.args[0] for call in on_retry.call_args_list] == [1, 2]


@pytest.mark.asyncio
async def test_non_retryable_failure_propagates_immediately() -> None:
    operation = _Operation([InvalidDataError("bad input")])
    on_retry = MagicMock()

    with pytest.raises(InvalidDataError):
        await with_retry_and_timeout(operation, attempts=3, base_delay=0.001, on_retry=on_retry)

    assert operation.calls == 1
    on_retry.assert_not_called()


@pytest.mark.asyncio
async def test_exhausted_attempts_raise_last_error() -> None:
    operation = _Operation([NetworkError("first"), NetworkError("second"), RateLimitedError("third")])

    with pytest.raises(RateLimitedError, match="third"):
        await with_retry_and_timeout(operation, attempts=3, base_delay=0.001)

    assert operation.calls == 3


@pytest.mark.asyncio
async def test_third_party_errors_are_classified() -> None:
    original = RuntimeError("Rate limit exceeded")
    operation = _Operation([original])

    with pytest.raises(RateLimitedError) as exc_info:
        await with_retry_and_timeout(operation, attempts=1)

    assert exc_info.value.__cause__ is original


@pytest.mark.asyncio
async def test_late_result_is_a_timeout() -> None:
    """Test that a result arriving after the deadline counts as a failed attempt."""
    operation = _Operation([], delay=0.2)

    with pytest.raises(GenerationTimeoutError, match="too slow") as exc_info:
        await with_retry_and_timeout(operation, attempts=2, base_delay=0.001, timeout=0.01, timeout_message="too slow")

    assert exc_info.value.classified.code == ErrorCode.TIMEOUT_ERROR
    assert operation.calls == 2


@pytest.mark.asyncio
async def test_backoff_delays_grow_exponentially() -> None:
    """Test delay = base * 2^(attempt-1) + jitter."""
    operation = _Operation([NetworkError("a"), NetworkError("b"), NetworkError("c")])
    delays: list[float] = []

    with patch("workout_gen.generation.retry._jitter", return_value=0.0):
        with pytest.raises(NetworkError):
            await with_retry_and_timeout(
                operation,
                attempts=3,
                base_delay=0.01,
                on_retry=lambda attempt, error, delay: delays.append(delay),
            )

    assert delays == [0.01, 0.02]


def test_backoff_jitter_is_bounded() -> None:
    for attempt in (1, 2, 3):
        delay = calculate_backoff_delay(attempt, 1.0)
        assert 2 ** (attempt - 1) <= delay <= 2 ** (attempt - 1) + 1.0


@pytest.mark.asyncio
async def test_cancel_during_backoff_stops_retries() -> None:
    token = CancellationToken()
    operation = _Operation([NetworkError("a"), NetworkError("b")])
    on_retry = MagicMock(side_effect=lambda *args: token.cancel())

    with pytest.raises(GenerationCancelledError):
        await with_retry_and_timeout(operation, attempts=3, base_delay=10.0, token=token, on_retry=on_retry)

    assert operation.calls == 1
    assert on_retry.call_count == 1


@pytest.mark.asyncio
async def test_cancel_during_attempt_aborts_at_once() -> None:
    token = CancellationToken()
    operation = _Operation([], delay=10.0)

    task = asyncio.create_task(with_retry_and_timeout(operation, attempts=3, timeout=30.0, token=token))
    await asyncio.sleep(0.01)
    token.cancel()

    with pytest.raises(GenerationCancelledError):
        await asyncio.wait_for(task, timeout=1.0)
    assert operation.calls == 1


@pytest.mark.asyncio
async def test_cancelled_token_prevents_any_attempt() -> None:
    token = CancellationToken()
    token.cancel()
    operation = _Operation([])

    with pytest.raises(GenerationCancelledError):
        await with_retry_and_timeout(operation, token=token)

    assert operation.calls == 0


@pytest.mark.asyncio
async def test_token_sleep_is_cancellable() -> None:
    token = CancellationToken("sleep")

    task = asyncio.create_task(token.sleep(10.0))
    await asyncio.sleep(0.01)
    token.cancel()

    with pytest.raises(GenerationCancelledError):
        await asyncio.wait_for(task, timeout=1.0)


@pytest.mark.asyncio
async def test_token_guard_returns_result() -> None:
    token = CancellationToken()

    async def compute() -> int:
        await asyncio.sleep(0)
        return 42

    assert await token.guard(compute()) == 42
    assert not token.is_cancelled
