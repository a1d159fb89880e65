from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from vmstats.errors import VmStatsError

logger = logging.getLogger(__name__)

SampleFn = Callable[[], Awaitable[object]]


class Cadence:
    """A named sampling operation and the period it runs at."""

    def __init__(self, name: str, interval: float, sample: SampleFn) -> None:
        if interval <= 0:
            raise ValueError(f"cadence {name!r} needs a positive interval")
        self.name = name
        self.interval = interval
        self.sample = sample

    def __repr__(self) -> str:
        return f"Cadence({self.name!r}, interval={self.interval})"


class Scheduler:
    """Drives several cadences from one loop, one sampling call at a time.

    Each due cadence runs under a fresh ``api_timeout`` deadline. A cadence
    never overlaps itself or another cadence. Ticks missed while a call was
    running collapse into a single catch-up tick. Errors are logged and the
    loop moves on to the next tick.
    """

    def __init__(self, cadences: list[Cadence], api_timeout: float = 5.0) -> None:
        if not cadences:
            raise ValueError("scheduler needs at least one cadence")
        self.cadences = cadences
        self.api_timeout = api_timeout
        self._running = False
        self._task: asyncio.Task | None = None

    # ── lifecycle ────────────────────────────────────────

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "Scheduler started (%s, timeout=%.1fs)",
            ", ".join(f"{c.name}={c.interval:.1f}s" for c in self.cadences),
            self.api_timeout,
        )

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Scheduler stopped")

    async def run(self) -> None:
        """Start the loop and block until it is cancelled."""
        await self.start()
        try:
            if self._task:
                await self._task
        finally:
            await self.stop()

    # ── internals ───────────────────────────────────────

    async def _loop(self) -> None:
        loop = asyncio.get_running_loop()
        start = loop.time()
        due = [start + c.interval for c in self.cadences]
        while self._running:
            # min() keeps the first listed cadence on ties
            index = min(range(len(self.cadences)), key=due.__getitem__)
            cadence = self.cadences[index]
            delay = due[index] - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)

            await self.run_once(cadence)

            now = loop.time()
            due[index] += cadence.interval
            if due[index] < now:
                due[index] = now

    async def run_once(self, cadence: Cadence) -> bool:
        """Run one sampling call under the deadline. Returns True on success."""
        try:
            async with asyncio.timeout(self.api_timeout):
                await cadence.sample()
        except asyncio.CancelledError:
            raise
        except TimeoutError:
            logger.warning(
                "Sampling [%s] timed out after %.1fs", cadence.name, self.api_timeout
            )
        except VmStatsError as exc:
            logger.error(
                "Sampling [%s] failed: %s: %s", cadence.name, type(exc).__name__, exc
            )
        except Exception:
            logger.exception("Sampling [%s] failed", cadence.name)
        else:
            return True
        return False

    @property
    def running(self) -> bool:
        return self._running
