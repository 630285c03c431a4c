# tests/test_concurrency_gate.py

"""Tests for the bounded-parallelism fetch gate."""

import asyncio
import unittest

from src.scrapers.concurrency_gate import ConcurrencyGate, GateOutcome


class TestConcurrencyGate(unittest.IsolatedAsyncioTestCase):
    """ConcurrencyGate.run behaviour."""

    async def test_never_exceeds_limit(self) -> None:
        """At most ``limit`` tasks hold a slot at the same time."""
        gate = ConcurrencyGate(limit=2)
        peak = 0

        async def task() -> int:
            nonlocal peak
            peak = max(peak, gate.active)
            await asyncio.sleep(0.01)
            return gate.active

        outcomes = await asyncio.gather(
            *(gate.run(task, label=f"t{i}") for i in range(6))
        )
        self.assertEqual(len(outcomes), 6)
        self.assertLessEqual(peak, 2)
        self.assertEqual(peak, 2)
        self.assertEqual(gate.active, 0)

    async def test_fifo_admission(self) -> None:
        """Queued tasks start in submission order."""
        gate = ConcurrencyGate(limit=1)
        started: list[int] = []

        def factory(index: int):
            async def task() -> int:
                started.append(index)
                await asyncio.sleep(0)
                return index
            return task

        outcomes = await asyncio.gather(
            *(gate.run(factory(i)) for i in range(5))
        )
        self.assertEqual(started, [0, 1, 2, 3, 4])
        self.assertEqual([o.value for o in outcomes], [0, 1, 2, 3, 4])

    async def test_error_captured(self) -> None:
        """A raising task yields an error outcome and frees its slot."""
        gate = ConcurrencyGate(limit=1)

        async def boom() -> None:
            raise RuntimeError("site down")

        async def fine() -> str:
            return "ok"

        failed, succeeded = await asyncio.gather(
            gate.run(boom, label="bad"), gate.run(fine, label="good")
        )
        self.assertFalse(failed.ok)
        self.assertIsInstance(failed.error, RuntimeError)
        self.assertEqual(failed.label, "bad")
        self.assertTrue(succeeded.ok)
        self.assertEqual(succeeded.value, "ok")
        self.assertEqual(gate.active, 0)

    async def test_timeout_releases_slot(self) -> None:
        """A task exceeding its timeout fails without blocking others."""
        gate = ConcurrencyGate(limit=1)

        async def slow() -> str:
            await asyncio.sleep(5)
            return "late"

        async def quick() -> str:
            return "done"

        slow_outcome, quick_outcome = await asyncio.gather(
            gate.run(slow, timeout=0.01), gate.run(quick)
        )
        self.assertIsInstance(slow_outcome.error, asyncio.TimeoutError)
        self.assertIsNone(slow_outcome.value)
        self.assertEqual(quick_outcome.value, "done")

    async def test_task_not_started_before_admission(self) -> None:
        """The factory is only called once a slot is granted."""
        gate = ConcurrencyGate(limit=1)
        calls: list[str] = []
        release = asyncio.Event()

        async def holder() -> None:
            calls.append("holder")
            await release.wait()

        def waiting_factory():
            calls.append("waiter")

            async def task() -> None:
                return None
            return task()

        first = asyncio.create_task(gate.run(holder))
        await asyncio.sleep(0)
        second = asyncio.create_task(gate.run(waiting_factory))
        await asyncio.sleep(0)
        self.assertEqual(calls, ["holder"])
        release.set()
        await asyncio.gather(first, second)
        self.assertEqual(calls, ["holder", "waiter"])


class TestGateConfiguration(unittest.TestCase):
    """Construction and outcome helpers."""

    def test_default_limit_from_settings(self) -> None:
        """Without an explicit limit, the configured default is used."""
        self.assertEqual(ConcurrencyGate().limit, 5)

    def test_invalid_limit(self) -> None:
        """Negative limits are rejected."""
        with self.assertRaises(ValueError):
            ConcurrencyGate(limit=-1)

    def test_zero_limit_rejected(self) -> None:
        """An explicit zero is rejected rather than replaced."""
        with self.assertRaises(ValueError):
            ConcurrencyGate(limit=0)

    def test_outcome_ok(self) -> None:
        """An outcome without an error is ok."""
        self.assertTrue(GateOutcome(label="x", value=1).ok)
        self.assertFalse(GateOutcome(label="x", error=ValueError()).ok)


if __name__ == "__main__":
    unittest.main()
