"""Cooperative cancellation for generation attempts.

A CancellationToken is created per attempt (and per pending manual retry)
and passed by reference into every suspension point: the remote call, the
timeout race, retry delays and progress ticks.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from workout_gen.generation.errors import GenerationCancelledError

T = TypeVar("T")


def _consume_result(task: asyncio.Future) -> None:
    # Late results of abandoned work are dropped without "never retrieved" warnings
    if not task.cancelled():
        task.exception()


class CancellationToken:
    """Cancellation signal shared by all awaits of one attempt."""

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        self._event = asyncio.Event()

    def __repr__(self) -> str:
        return f"CancellationToken(name={self.name!r}, cancelled={self.is_cancelled})"

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled:
            raise GenerationCancelledError()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await an awaitable, aborting as soon as the token is cancelled.

        The inner task is cancelled on abort so no timers or requests
        outlive the attempt.

        Args:
            awaitable: Coroutine or future to race against the token

        Returns:
            The awaitable's result

        Raises:
            GenerationCancelledError: If the token is cancelled before or
                while the awaitable runs
        """
        if self.is_cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise GenerationCancelledError()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            waiter.cancel()
            raise
        waiter.cancel()

        if self.is_cancelled:
            if not task.done():
                task.cancel()
            task.add_done_callback(_consume_result)
            raise GenerationCancelledError()

        return task.result()

    async def sleep(self, delay: float) -> None:
        """Cancellable timer."""
        await self.guard(asyncio.sleep(max(0.0, delay)))
