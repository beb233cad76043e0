"""
Sprite Sequencer - Core
"""

from .errors import SequencerError, ImageDecodeError, ExportError
from .parser import SheetParser, SpriteSheet
from .grid import (
    GridConfig, Frame, GridRect,
    cell_size, grid_rects, slice_frames,
    MAX_OVERLAY_CELLS,
)
from .scheduler import (
    ScheduledHandle, Scheduler, AsyncioScheduler, VirtualScheduler, Debouncer,
    FRAME_INTERVAL_MS,
)
from .viewport import (
    ViewMode, ZoomDirection, TransformState, ViewportConfig, ViewportController,
)
from .reorder import (
    PointerEnvironment, Axis, scroll_axis_for,
    AutoScrollConfig, Rect, ScrollContainer, PointerTracker,
    edge_scroll_speed, DragSession, FrameReorderEngine,
)
from .playback import BASE_RATE, effective_rate, frame_delay_ms, PlaybackClock
from .exporter import (
    EncoderConfig, GifEncoder, PillowGifEncoder,
    export_filename, scaled_size, prepare_frame,
    DirectorySaver, ExportResult, ExportPipeline,
)
from .config import SessionConfig, load_config, save_config
from .session import EditorSession

__all__ = [
    # Errors
    'SequencerError', 'ImageDecodeError', 'ExportError',
    # Input
    'SheetParser', 'SpriteSheet',
    # Grid slicing
    'GridConfig', 'Frame', 'GridRect',
    'cell_size', 'grid_rects', 'slice_frames', 'MAX_OVERLAY_CELLS',
    # Timers
    'ScheduledHandle', 'Scheduler', 'AsyncioScheduler', 'VirtualScheduler', 'Debouncer',
    'FRAME_INTERVAL_MS',
    # Viewport
    'ViewMode', 'ZoomDirection', 'TransformState', 'ViewportConfig', 'ViewportController',
    # Reordering
    'PointerEnvironment', 'Axis', 'scroll_axis_for',
    'AutoScrollConfig', 'Rect', 'ScrollContainer', 'PointerTracker',
    'edge_scroll_speed', 'DragSession', 'FrameReorderEngine',
    # Playback
    'BASE_RATE', 'effective_rate', 'frame_delay_ms', 'PlaybackClock',
    # Export
    'EncoderConfig', 'GifEncoder', 'PillowGifEncoder',
    'export_filename', 'scaled_size', 'prepare_frame',
    'DirectorySaver', 'ExportResult', 'ExportPipeline',
    # Configuration
    'SessionConfig', 'load_config', 'save_config',
    # Session
    'EditorSession',
]
