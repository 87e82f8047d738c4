"""
Tick schedulers for the countdown and match timers.

A scheduler calls a callback once per interval until the returned
handle is cancelled. Two implementations are provided: one driven by
an asyncio event loop, and a manual one advanced explicitly.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


# ============================================================================
# Interfaces
# ============================================================================

class TimerHandle(ABC):
    """A running periodic timer."""

    @abstractmethod
    def cancel(self) -> None:
        """
        Stop the timer.

        Idempotent. Once this returns the callback never fires again.
        """

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        """Whether the timer has been stopped."""


class Scheduler(ABC):
    """Source of once-per-interval ticks."""

    @abstractmethod
    def every(self, callback: TickCallback) -> TimerHandle:
        """
        Start calling ``callback`` once per interval.

        The first call happens one interval after starting.
        """


# ============================================================================
# Asyncio Scheduler
# ============================================================================

class _AsyncioTimer(TimerHandle):

    def __init__(self, callback: TickCallback, interval: float) -> None:
        self._callback = callback
        self._interval = interval
        self._cancelled = False
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            if self._cancelled:
                return
            try:
                self._callback()
            except Exception:
                logger.exception("Timer callback failed; stopping timer")
                self._cancelled = True
                return

    def cancel(self) -> None:
        self._cancelled = True
        self._task.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler(Scheduler):
    """
    Runs each timer as a task on the running asyncio loop.

    Callers must start timers and deliver player actions from that same
    loop, which serializes every mutation of a match with its ticks.
    """

    def __init__(self, interval: float = 1.0) -> None:
        """
        Initialize the scheduler.

        Args:
            interval: Seconds between ticks.
        """
        if interval <= 0:
            raise ValueError("Interval must be positive")
        self.interval = interval

    def every(self, callback: TickCallback) -> TimerHandle:
        return _AsyncioTimer(callback, self.interval)


# ============================================================================
# Manual Scheduler
# ============================================================================

class _ManualTimer(TimerHandle):

    def __init__(self, callback: TickCallback) -> None:
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """
    Deterministic scheduler advanced by hand.

    Used for simulations and tests. Timers created while a tick is
    being delivered first fire on the following second.
    """

    def __init__(self) -> None:
        self._timers: List[_ManualTimer] = []
        self.elapsed = 0

    def every(self, callback: TickCallback) -> TimerHandle:
        timer = _ManualTimer(callback)
        self._timers.append(timer)
        return timer

    @property
    def active_timers(self) -> int:
        """Number of timers that have not been cancelled."""
        return sum(1 for timer in self._timers if not timer.cancelled)

    def advance(self, seconds: int = 1) -> None:
        """
        Deliver ``seconds`` rounds of ticks.

        Args:
            seconds: Number of simulated seconds to pass.
        """
        for _ in range(seconds):
            self.elapsed += 1
            self._timers = [t for t in self._timers if not t.cancelled]
            for timer in list(self._timers):
                if not timer.cancelled:
                    timer.callback()

    def run_until(
        self, predicate: Callable[[], bool], limit: Optional[int] = None
    ) -> int:
        """
        Advance one second at a time until ``predicate`` holds.

        Args:
            predicate: Condition to wait for.
            limit: Maximum seconds to advance (unbounded when None).

        Returns:
            Seconds advanced.
        """
        advanced = 0
        while not predicate():
            if limit is not None and advanced >= limit:
                break
            self.advance()
            advanced += 1
        return advanced
