"""
Grid Slicer - Cuts a sprite sheet into ordered animation frames

Cells are laid out as:

    offset_x | cell | gap_x | cell | gap_x | cell | offset_x

and the same vertically. Frames come out in row-major order: row 0 left to
right, then row 1, and so on.
"""

import uuid
import logging
import numpy as np
from dataclasses import dataclass, field, asdict
from typing import List, Optional, Tuple, Dict, Any

from .parser import SpriteSheet


logger = logging.getLogger(__name__)

# Overlay rendering gives up past this many rows or columns
MAX_OVERLAY_CELLS = 50


@dataclass
class GridConfig:
    """Grid laid over a sprite sheet"""
    rows: int = 1
    cols: int = 1
    offset_x: int = 0
    offset_y: int = 0
    gap_x: int = 0
    gap_y: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GridConfig':
        """Create from dictionary, ignoring unknown keys"""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        return cls(**{k: int(v) for k, v in data.items() if k in valid_fields})


@dataclass
class Frame:
    """One extracted grid cell"""
    pixels: np.ndarray  # RGBA numpy array
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]


@dataclass(frozen=True)
class GridRect:
    """Source rectangle of a single cell"""
    x: int
    y: int
    width: int
    height: int
    row: int
    col: int


def cell_size(width: int, height: int, config: GridConfig) -> Optional[Tuple[int, int]]:
    """
    Size of one cell, or None when the grid does not fit the image.

    Returns None for rows/cols below 1, offsets that eat the whole image,
    and gaps that leave no room for a cell.
    """
    if config.rows <= 0 or config.cols <= 0:
        return None

    safe_width = width - 2 * config.offset_x
    safe_height = height - 2 * config.offset_y
    if safe_width <= 0 or safe_height <= 0:
        return None

    # Floor division, matching Math.floor for negative numerators too
    cell_width = (safe_width - (config.cols - 1) * config.gap_x) // config.cols
    cell_height = (safe_height - (config.rows - 1) * config.gap_y) // config.rows
    if cell_width <= 0 or cell_height <= 0:
        return None

    return cell_width, cell_height


def _cells(width: int, height: int, config: GridConfig) -> List[GridRect]:
    size = cell_size(width, height, config)
    if size is None:
        return []

    cell_width, cell_height = size
    rects = []
    for row in range(config.rows):
        for col in range(config.cols):
            rects.append(GridRect(
                x=config.offset_x + col * (cell_width + config.gap_x),
                y=config.offset_y + row * (cell_height + config.gap_y),
                width=cell_width,
                height=cell_height,
                row=row,
                col=col,
            ))
    return rects


def grid_rects(width: int, height: int, config: GridConfig) -> List[GridRect]:
    """Cell rectangles for drawing the grid overlay, without extracting pixels"""
    if config.rows > MAX_OVERLAY_CELLS or config.cols > MAX_OVERLAY_CELLS:
        return []
    return _cells(width, height, config)


def slice_frames(sheet: SpriteSheet, config: GridConfig) -> Optional[List[Frame]]:
    """
    Extract every grid cell of the sheet as a new Frame.

    Args:
        sheet: Decoded source image
        config: Grid parameters

    Returns:
        Frames in row-major order, each with a fresh id, or None when the
        config is invalid for this sheet. None means "keep what you had".
    """
    rects = _cells(sheet.width, sheet.height, config)
    if not rects:
        logger.debug(
            "Grid %dx%d does not fit %dx%d sheet, keeping previous frames",
            config.rows, config.cols, sheet.width, sheet.height
        )
        return None

    frames = [
        Frame(pixels=sheet.region(r.x, r.y, r.width, r.height))
        for r in rects
    ]
    logger.debug(
        "Sliced %s into %d frames of %dx%d",
        sheet.name, len(frames), rects[0].width, rects[0].height
    )
    return frames
