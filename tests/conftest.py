import numpy as np
import pytest

from sprite_sequencer.core import GridConfig, SheetParser, VirtualScheduler, slice_frames


def cell_color(index):
    """Distinct opaque RGBA color for cell number index"""
    return (10 + index * 20, 200 - index * 10, index * 5, 255)


def make_sheet_pixels(width, height, rows, cols):
    """
    RGBA sheet where every cell of a rows x cols grid (no offset, no gap)
    is filled with cell_color(row * cols + col).
    """
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    cell_w, cell_h = width // cols, height // rows
    for row in range(rows):
        for col in range(cols):
            y, x = row * cell_h, col * cell_w
            pixels[y:y + cell_h, x:x + cell_w] = cell_color(row * cols + col)
    return pixels


@pytest.fixture
def scheduler():
    return VirtualScheduler()


@pytest.fixture
def quad_sheet():
    """400x400 sheet with four 200x200 colored quadrants"""
    return SheetParser.from_array(make_sheet_pixels(400, 400, 2, 2), name="quad")


@pytest.fixture
def three_frames():
    sheet = SheetParser.from_array(make_sheet_pixels(30, 10, 1, 3), name="strip")
    return slice_frames(sheet, GridConfig(rows=1, cols=3))
