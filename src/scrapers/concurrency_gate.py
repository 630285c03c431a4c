# src/scrapers/concurrency_gate.py

"""Bounded-parallelism gate for outbound site fetches."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from src.config.settings import Settings

logger = logging.getLogger("price_scout.gate")

T = TypeVar("T")


@dataclass
class GateOutcome(Generic[T]):
    """Result of one gated task: a value, or the error that ended it."""

    label: str
    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """True when the task finished without raising."""
        return self.error is None


class ConcurrencyGate:
    """Admit at most ``limit`` tasks at once, queueing the rest FIFO.

    ``asyncio.Semaphore`` wakes waiters in acquisition order, so
    excess work runs in submission order. A task keeps its slot until
    it returns, raises, or its own timeout fires.
    """

    def __init__(self, limit: int | None = None) -> None:
        self.limit = (
            Settings.MAX_CONCURRENT_REQUESTS if limit is None else limit
        )
        if self.limit < 1:
            msg = f"Concurrency limit must be >= 1, got {self.limit}"
            raise ValueError(msg)
        self._semaphore = asyncio.Semaphore(self.limit)
        self._active = 0

    @property
    def active(self) -> int:
        """Number of tasks currently holding a slot."""
        return self._active

    async def run(
        self,
        task: Callable[[], Awaitable[T]],
        label: str = "task",
        timeout: float | None = None,
    ) -> GateOutcome[T]:
        """Run *task* once a slot is free; never raises.

        *task* is a zero-argument coroutine factory so that no work
        starts before admission.
        """
        async with self._semaphore:
            self._active += 1
            try:
                if timeout is not None:
                    value = await asyncio.wait_for(task(), timeout)
                else:
                    value = await task()
                return GateOutcome(label=label, value=value)
            except asyncio.TimeoutError as exc:
                logger.warning(
                    "[%s] Task timed out after %.1fs", label, timeout or 0.0
                )
                return GateOutcome(label=label, error=exc)
            except Exception as exc:
                logger.error(
                    "[%s] Task failed: %s", label, exc, exc_info=True
                )
                return GateOutcome(label=label, error=exc)
            finally:
                self._active -= 1
