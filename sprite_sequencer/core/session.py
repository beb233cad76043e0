"""
Editor Session - One sprite sheet being turned into an animation

Owns all mutable state of the editor and wires the pieces together:

    load_image / set_grid  --(debounced)-->  slice_frames
        --> FrameReorderEngine (order)  --> PlaybackClock / ExportPipeline

All state changes happen on the thread that drives the scheduler.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional, Union

import numpy as np

from .config import SessionConfig
from .errors import ImageDecodeError
from .exporter import DirectorySaver, ExportPipeline, ExportResult, GifEncoder, PillowGifEncoder
from .grid import Frame, GridConfig, GridRect, grid_rects, slice_frames
from .parser import SheetParser, SpriteSheet
from .playback import PlaybackClock
from .reorder import FrameReorderEngine, PointerTracker, ScrollContainer
from .scheduler import AsyncioScheduler, Debouncer, Scheduler
from .viewport import ViewMode, ViewportController


logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes, np.ndarray, SpriteSheet]


class EditorSession:
    """
    Editing state for one sprite sheet.

    Example:
        session = EditorSession(scheduler=VirtualScheduler(), save=DirectorySaver("out"))
        session.load_image("walk.png")
        session.update_grid(rows=2, cols=4)
        session.flush()                # or wait 300 ms
        session.reorder.activate_handle()
        session.reorder.move(3, 0)
        session.reorder.finalize()
        result = await session.export(scale=2)
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        scheduler: Optional[Scheduler] = None,
        container: Optional[ScrollContainer] = None,
        save: Optional[Callable[[bytes, str], object]] = None,
        notify: Optional[Callable[[str], None]] = None,
        encoder_factory: Callable[..., GifEncoder] = PillowGifEncoder,
    ):
        self.config = config or SessionConfig()
        self.scheduler = scheduler or AsyncioScheduler()
        self.sheet: Optional[SpriteSheet] = None
        self.notices: List[str] = []
        self._notify = notify

        self.viewport = ViewportController(self.config.viewport)
        self.tracker = PointerTracker()
        self.reorder = FrameReorderEngine(
            self.scheduler,
            tracker=self.tracker,
            container=container,
            environment=self.config.pointer_environment,
            config=self.config.auto_scroll,
        )
        self.playback = PlaybackClock(
            self.scheduler,
            frame_count=lambda: len(self.reorder.frames),
            play_rate=self.config.play_rate,
            on_play=lambda: self.viewport.set_mode(ViewMode.PREVIEW),
        )
        self.exporter = ExportPipeline(
            save=save or DirectorySaver(Path.cwd()),
            notify=self.notify,
            encoder_factory=encoder_factory,
            encoder_config=self.config.encoder,
        )
        self._reslice = Debouncer(self.scheduler, self.config.debounce_ms, self.reslice, label="reslice")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def frames(self) -> List[Frame]:
        return self.reorder.frames

    @property
    def grid(self) -> GridConfig:
        return self.config.grid

    @property
    def mode(self) -> ViewMode:
        return self.viewport.mode

    @property
    def current_frame(self) -> Optional[Frame]:
        frames = self.frames
        if not frames:
            return None
        return frames[self.playback.current_frame_index]

    @property
    def exporting(self) -> bool:
        return self.exporter.exporting

    def notify(self, message: str) -> None:
        """Show a message to the user"""
        self.notices.append(message)
        if self._notify is not None:
            self._notify(message)

    def set_mode(self, mode: ViewMode) -> None:
        self.viewport.set_mode(mode)

    # ------------------------------------------------------------------
    # Inputs that trigger re-slicing
    # ------------------------------------------------------------------

    def load_image(self, source: ImageSource, name: str = "sheet") -> bool:
        """
        Make an image the active sheet.

        Returns False when it cannot be decoded; the previous sheet and
        frames stay as they were.
        """
        try:
            if isinstance(source, SpriteSheet):
                sheet = source
            elif isinstance(source, np.ndarray):
                sheet = SheetParser.from_array(source, name=name)
            elif isinstance(source, bytes):
                sheet = SheetParser.from_bytes(source, name=name)
            else:
                sheet = SheetParser.parse(source)
        except ImageDecodeError as e:
            logger.warning("Image not loaded: %s", e)
            return False

        self.sheet = sheet
        logger.debug("Loaded sheet %s (%dx%d)", sheet.name, sheet.width, sheet.height)
        self._reslice.trigger()
        return True

    def set_grid(self, grid: GridConfig) -> None:
        if grid == self.config.grid:
            return
        self.config.grid = grid
        self._reslice.trigger()

    def update_grid(self, **fields) -> None:
        """Change some grid fields, e.g. update_grid(rows=3)"""
        self.set_grid(replace(self.config.grid, **fields))

    @property
    def reslice_pending(self) -> bool:
        return self._reslice.pending

    def flush(self) -> None:
        """Run a pending re-slice now instead of waiting for the quiet period"""
        self._reslice.flush()

    def reslice(self) -> bool:
        """
        Slice the active sheet with the current grid.

        Returns True if the frame list was replaced. An invalid grid leaves
        it untouched.
        """
        if self.sheet is None:
            return False

        frames = slice_frames(self.sheet, self.config.grid)
        if frames is None:
            return False

        self.reorder.set_frames(frames)
        self.playback.clamp_index()
        return True

    def grid_rects(self) -> List[GridRect]:
        """Cell outlines for the editor overlay"""
        if self.sheet is None:
            return []
        return grid_rects(self.sheet.width, self.sheet.height, self.config.grid)

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def toggle_play(self) -> bool:
        return self.playback.toggle()

    def set_play_rate(self, play_rate: float) -> None:
        self.config.play_rate = play_rate
        self.playback.set_play_rate(play_rate)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    async def export(self, scale: Optional[float] = None) -> ExportResult:
        """Export the committed frame order as a GIF"""
        if scale is None:
            scale = self.config.export_scale
        return await self.exporter.export(self.reorder.committed, scale=scale, playback=self.playback)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Cancel every pending timer"""
        self._reslice.cancel()
        self.playback.stop()
        self.reorder.cancel()
        logger.debug("Session closed")
