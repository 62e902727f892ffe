"""Retry and timeout wrapper for remote operations.

Each attempt races the operation against a deadline. Retryable failures
are retried with exponential backoff plus jitter; non-retryable ones
propagate immediately. A cancellation token aborts everything at once.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

from workout_gen.generation.cancellation import CancellationToken
from workout_gen.generation.errors import GenerationCancelledError, GenerationError, GenerationTimeoutError

T = TypeVar("T")

RetryCallback = Callable[[int, GenerationError, float], None]


def _jitter(base_delay: float) -> float:
    return random.uniform(0, base_delay)


def calculate_backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before the attempt following `attempt` (1-indexed).

    Args:
        attempt: The attempt that just failed
        base_delay: Base delay in seconds

    Returns:
        base_delay * 2^(attempt-1) + uniform(0, base_delay)
    """
    return base_delay * (2 ** (attempt - 1)) + _jitter(base_delay)


async def _with_deadline(
    operation: Callable[[], Awaitable[T]],
    timeout: float,
    timeout_message: str,
) -> T:
    try:
        return await asyncio.wait_for(operation(), timeout=timeout)
    except TimeoutError as e:
        raise GenerationTimeoutError(timeout_message) from e


async def with_retry_and_timeout(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    base_delay: float = 1.0,
    timeout: float = 30.0,
    timeout_message: str = "Operation timed out",
    token: CancellationToken | None = None,
    on_retry: RetryCallback | None = None,
    name: str = "operation",
) -> T:
    """Run an operation with a per-attempt deadline and bounded retries.

    Args:
        operation: Zero-argument factory returning a fresh awaitable per attempt
        attempts: Maximum number of attempts (at least 1)
        base_delay: Base backoff delay in seconds
        timeout: Per-attempt deadline in seconds
        timeout_message: Message of the timeout error
        token: Cancellation token checked around every suspension point
        on_retry: Called with (failed attempt, error, delay) before each wait
        name: Operation name for logs

    Returns:
        The operation's result

    Raises:
        GenerationCancelledError: If the token is cancelled
        GenerationError: The first non-retryable error, or the last error
            once attempts are exhausted
    """
    token = token or CancellationToken(name)
    max_attempts = max(1, attempts)
    last_error: GenerationError | None = None

    for attempt in range(1, max_attempts + 1):
        token.raise_if_cancelled()
        try:
            return await token.guard(_with_deadline(operation, timeout, timeout_message))
        except GenerationCancelledError:
            raise
        except Exception as e:
            error = GenerationError.from_exception(e)
            last_error = error

        token.raise_if_cancelled()
        classified = error.classified

        if not classified.retryable:
            logger.warning(
                "Non-retryable failure",
                operation=name,
                attempt=attempt,
                error_code=classified.code.value,
                error=str(error),
            )
            raise error

        if attempt >= max_attempts:
            break

        delay = calculate_backoff_delay(attempt, base_delay)
        logger.warning(
            "retry_scheduled",
            operation=name,
            attempt=attempt,
            max_attempts=max_attempts,
            error_code=classified.code.value,
            delay_seconds=round(delay, 3),
        )
        if on_retry is not None:
            on_retry(attempt, error, delay)
        await token.sleep(delay)

    logger.error(
        "Retries exhausted",
        operation=name,
        attempts=max_attempts,
        error_code=last_error.code.value if last_error else None,
    )
    if last_error is None:
        raise GenerationError(f"{name} failed without an error")
    raise last_error
