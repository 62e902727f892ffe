"""Simulated progress reporting.

Progress is advisory: it runs as a second task next to the real work and
never affects the work's outcome. Values follow a piecewise-linear curve
between the stage boundaries chosen by the orchestrator.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

from workout_gen.generation.cancellation import CancellationToken
from workout_gen.generation.errors import GenerationCancelledError

T = TypeVar("T")

ProgressCallback = Callable[[int], None]


def progress_schedule(start: int, end: int, steps: int) -> list[int]:
    """Evenly spaced progress values after `start`, ending exactly at `end`."""
    steps = max(1, steps)
    return [round(start + (end - start) * step / steps) for step in range(1, steps + 1)]


async def simulate_progress(
    on_progress: ProgressCallback,
    *,
    start: int,
    end: int,
    duration: float,
    steps: int = 8,
    token: CancellationToken | None = None,
) -> None:
    """Emit progress values from start to end over `duration` seconds.

    Stops silently as soon as the token is cancelled.

    Args:
        on_progress: Receives each progress value
        start: Value already reached (not re-emitted)
        end: Final value
        duration: Total time for the curve, in seconds
        steps: Number of emissions
        token: Cancellation token
    """
    token = token or CancellationToken("progress")
    interval = duration / max(1, steps)
    try:
        for value in progress_schedule(start, end, steps):
            await token.sleep(interval)
            try:
                on_progress(value)
            except Exception as e:
                logger.warning("Progress callback failed", progress=value, error=str(e))
    except GenerationCancelledError:
        return


async def run_with_progress(
    work: Awaitable[T],
    on_progress: ProgressCallback,
    *,
    start: int,
    end: int,
    duration: float,
    steps: int = 8,
    token: CancellationToken | None = None,
) -> T:
    """Await `work` and the simulated progress curve together.

    Only the work's result or error propagates. A successful stage waits
    for the curve to reach `end`; a failed one stops the curve at once.
    """
    progress_task = asyncio.ensure_future(
        simulate_progress(on_progress, start=start, end=end, duration=duration, steps=steps, token=token)
    )
    try:
        result = await work
    except BaseException:
        progress_task.cancel()
        raise
    await progress_task
    return result
