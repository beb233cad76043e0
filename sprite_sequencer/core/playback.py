"""
Playback Clock - Loops the current frame index while playing

Each tick works out its own delay from the current rate, so a rate change
is picked up on the next tick. The chain is a series of one-shot timers,
never a fixed-period timer.
"""

import logging
import math
from typing import Callable, List, Optional

from .scheduler import Scheduler, ScheduledHandle


logger = logging.getLogger(__name__)

BASE_RATE = 8  # frames per second at play_rate 1.0


def effective_rate(play_rate: float, base_rate: int = BASE_RATE) -> int:
    """Frames per second actually used for playback and export"""
    # Half-up rounding, so 2.5 fps becomes 3
    return int(math.floor(max(1, base_rate * play_rate) + 0.5))


def frame_delay_ms(play_rate: float, base_rate: int = BASE_RATE) -> float:
    return 1000 / effective_rate(play_rate, base_rate)


class PlaybackClock:
    """
    Advances current_frame_index through [0, frame_count).

    Args:
        scheduler: Timer source
        frame_count: Callable returning how many frames there are right now
        play_rate: Speed multiplier
        on_play: Called when playback starts (the session switches to the
            preview view here)
    """

    def __init__(
        self,
        scheduler: Scheduler,
        frame_count: Callable[[], int],
        play_rate: float = 1.0,
        base_rate: int = BASE_RATE,
        on_play: Optional[Callable[[], None]] = None,
    ):
        self.scheduler = scheduler
        self.frame_count = frame_count
        self.play_rate = play_rate
        self.base_rate = base_rate
        self.on_play = on_play

        self.is_playing = False
        self.current_frame_index = 0
        self._listeners: List[Callable[[int], None]] = []
        self._handle: Optional[ScheduledHandle] = None

    @property
    def effective_rate(self) -> int:
        return effective_rate(self.play_rate, self.base_rate)

    @property
    def delay_ms(self) -> float:
        return 1000 / self.effective_rate

    def on_frame(self, listener: Callable[[int], None]) -> None:
        """Register a callback receiving the new index after every change"""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Play / stop
    # ------------------------------------------------------------------

    def play(self) -> None:
        """Start playing, or restart the tick chain if already playing"""
        if self.on_play is not None:
            self.on_play()
        self.is_playing = True
        self._restart()

    def stop(self) -> None:
        self.is_playing = False
        self._cancel()

    def toggle(self) -> bool:
        if self.is_playing:
            self.stop()
        else:
            self.play()
        return self.is_playing

    def set_play_rate(self, play_rate: float) -> None:
        self.play_rate = play_rate
        logger.debug("Play rate %.2f -> %d fps", play_rate, self.effective_rate)
        if self.is_playing:
            self._restart()

    # ------------------------------------------------------------------
    # Index
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Advance one frame, wrapping around; no-op without frames"""
        count = self.frame_count()
        if count <= 0:
            return
        self._set_index((self.current_frame_index + 1) % count)

    def step(self, delta: int) -> None:
        """Move by delta frames, wrapping in both directions"""
        count = self.frame_count()
        if count <= 0:
            return
        self._set_index((self.current_frame_index + delta) % count)

    def clamp_index(self) -> None:
        """Reset to 0 if the index no longer points at a frame"""
        if self.current_frame_index >= self.frame_count():
            self._set_index(0)

    def _set_index(self, index: int) -> None:
        self.current_frame_index = index
        for listener in self._listeners:
            listener(index)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _restart(self) -> None:
        self._cancel()
        self._schedule()

    def _schedule(self) -> None:
        self._handle = self.scheduler.call_later(self.delay_ms, self._on_tick, label="playback tick")

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _on_tick(self) -> None:
        if not self.is_playing:
            return
        self._schedule()
        self.tick()
