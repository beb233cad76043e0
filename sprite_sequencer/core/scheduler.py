"""
Cancellable timers for the editing session

Everything asynchronous in the core (debounced re-slicing, playback ticks,
drag auto-scroll) goes through a Scheduler and holds on to the returned
ScheduledHandle so it can be cancelled when its trigger condition ends.

Two implementations:
    AsyncioScheduler  - real time, on an asyncio event loop
    VirtualScheduler  - virtual clock advanced by hand (CLI, tests)
"""

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple


logger = logging.getLogger(__name__)

# One animation frame at 60 Hz
FRAME_INTERVAL_MS = 1000.0 / 60.0


class ScheduledHandle:
    """A pending callback that can be cancelled"""

    def __init__(self, label: str = ""):
        self.label = label
        self._cancelled = False
        self._done = False
        self._on_cancel: Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._done)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if not self.active:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()
        logger.debug("Cancelled %s", self.label or "callback")

    def _fire(self, callback: Callable[[], None]) -> None:
        if not self.active:
            return
        self._done = True
        callback()


class Scheduler(ABC):
    """Source of delayed and per-frame callbacks"""

    @abstractmethod
    def call_later(self, delay_ms: float, callback: Callable[[], None],
                   label: str = "") -> ScheduledHandle:
        """Run callback once after delay_ms milliseconds"""

    def request_frame(self, callback: Callable[[], None],
                      label: str = "") -> ScheduledHandle:
        """Run callback once on the next animation frame"""
        return self.call_later(FRAME_INTERVAL_MS, callback, label=label)

    @abstractmethod
    def now(self) -> float:
        """Current time in milliseconds"""


class AsyncioScheduler(Scheduler):
    """Scheduler backed by an asyncio event loop"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay_ms, callback, label=""):
        handle = ScheduledHandle(label)
        timer = self.loop.call_later(max(delay_ms, 0) / 1000.0, handle._fire, callback)
        handle._on_cancel = timer.cancel
        return handle

    def now(self):
        return self.loop.time() * 1000.0


class VirtualScheduler(Scheduler):
    """
    Deterministic scheduler driven by advance().

    Example:
        scheduler = VirtualScheduler()
        scheduler.call_later(300, on_quiet)
        scheduler.advance(299)   # nothing yet
        scheduler.advance(1)     # on_quiet runs
    """

    def __init__(self):
        self._now = 0.0
        self._counter = itertools.count()
        self._queue: List[Tuple[float, int, ScheduledHandle, Callable[[], None]]] = []

    def call_later(self, delay_ms, callback, label=""):
        handle = ScheduledHandle(label)
        heapq.heappush(
            self._queue,
            (self._now + max(delay_ms, 0), next(self._counter), handle, callback)
        )
        return handle

    def now(self):
        return self._now

    @property
    def pending(self) -> int:
        """Number of callbacks still waiting to run"""
        return sum(1 for _, _, handle, _ in self._queue if handle.active)

    def advance(self, ms: float) -> int:
        """
        Move the clock forward, running everything that comes due.

        Callbacks scheduled by other callbacks run too if they fall inside
        the window. Returns how many callbacks ran.
        """
        target = self._now + ms
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            self._now = due
            if handle.active:
                handle._fire(callback)
                ran += 1
        self._now = target
        return ran

    def run_frames(self, count: int) -> None:
        """Advance by a number of animation frames"""
        for _ in range(count):
            self.advance(FRAME_INTERVAL_MS)


class Debouncer:
    """
    Collapses a burst of triggers into one call after a quiet period.

    Each trigger() cancels the pending call and starts the wait again, so
    the callback runs once, wait_ms after the last trigger.
    """

    def __init__(self, scheduler: Scheduler, wait_ms: float, callback: Callable[[], None],
                 label: str = "debounce"):
        self.scheduler = scheduler
        self.wait_ms = wait_ms
        self.callback = callback
        self.label = label
        self._handle: Optional[ScheduledHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None and self._handle.active

    def trigger(self) -> None:
        self.cancel()
        self._handle = self.scheduler.call_later(self.wait_ms, self._run, label=self.label)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Run a pending call right now"""
        if self.pending:
            self.cancel()
            self.callback()

    def _run(self) -> None:
        self._handle = None
        self.callback()
