"""
Sprite Sequencer - Slice sprite sheets into frames, reorder, preview, export GIFs
"""

from .core import (
    SheetParser, SpriteSheet, GridConfig, Frame,
    slice_frames, grid_rects,
    EditorSession, SessionConfig, VirtualScheduler,
    ExportPipeline, DirectorySaver, ExportResult,
)

__version__ = "0.1.0"
__all__ = [
    'SheetParser',
    'SpriteSheet',
    'GridConfig',
    'Frame',
    'slice_frames',
    'grid_rects',
    'EditorSession',
    'SessionConfig',
    'VirtualScheduler',
    'ExportPipeline',
    'DirectorySaver',
    'ExportResult',
    'slice_sheet',
    'export_gif',
]


def slice_sheet(image_path: str, rows: int, cols: int, **grid) -> list:
    """
    Slice a sprite sheet file into frames.

    Args:
        image_path: Path to the sprite sheet
        rows: Grid rows
        cols: Grid columns
        **grid: offset_x, offset_y, gap_x, gap_y

    Returns:
        List of Frame objects in row-major order (empty if the grid does
        not fit the image)
    """
    sheet = SheetParser.parse(image_path)
    frames = slice_frames(sheet, GridConfig(rows=rows, cols=cols, **grid))
    return frames or []


def export_gif(
    frames: list,
    output_dir: str,
    scale: float = 1.0,
    play_rate: float = 1.0,
) -> ExportResult:
    """
    Export frames as a GIF into output_dir.

    Args:
        frames: Frames in playback order
        output_dir: Directory the GIF is written to
        scale: Nearest-neighbour export scale
        play_rate: Speed multiplier (1.0 = 8 fps)

    Returns:
        ExportResult; result.filename is the name of the written file
    """
    import asyncio

    pipeline = ExportPipeline(save=DirectorySaver(output_dir))
    return asyncio.run(pipeline.export(frames, scale=scale, play_rate=play_rate))
