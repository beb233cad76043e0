"""
Tests for the grid slicer and overlay rectangles.
"""

import numpy as np
import pytest

from sprite_sequencer.core import (
    GridConfig, SheetParser, cell_size, grid_rects, slice_frames, MAX_OVERLAY_CELLS,
)

from conftest import cell_color, make_sheet_pixels


class TestCellSize:
    """Cell geometry and invalid configs."""

    def test_even_split(self):
        assert cell_size(400, 400, GridConfig(rows=2, cols=2)) == (200, 200)

    def test_offsets_and_gaps(self):
        config = GridConfig(rows=2, cols=3, offset_x=5, offset_y=4, gap_x=2, gap_y=3)
        # (100 - 10 - 4) // 3 = 28, (60 - 8 - 3) // 2 = 24
        assert cell_size(100, 60, config) == (28, 24)

    def test_floor_rounding(self):
        assert cell_size(10, 10, GridConfig(rows=3, cols=3)) == (3, 3)

    @pytest.mark.parametrize("config", [
        GridConfig(rows=0, cols=2),
        GridConfig(rows=2, cols=0),
        GridConfig(rows=-1, cols=2),
        GridConfig(rows=1, cols=1, offset_x=50),
        GridConfig(rows=1, cols=1, offset_y=60),
        GridConfig(rows=1, cols=4, gap_x=40),
        GridConfig(rows=200, cols=1),
    ])
    def test_invalid_configs(self, config):
        """Configs that leave no room for a cell give None."""
        assert cell_size(100, 100, config) is None


class TestSliceFrames:
    """Frame extraction from a sheet."""

    def test_quadrants_row_major(self, quad_sheet):
        """2x2 over 400x400 gives 200x200 frames TL, TR, BL, BR."""
        frames = slice_frames(quad_sheet, GridConfig(rows=2, cols=2))

        assert len(frames) == 4
        for index, frame in enumerate(frames):
            assert frame.pixels.shape == (200, 200, 4)
            assert tuple(frame.pixels[0, 0]) == cell_color(index)
            assert tuple(frame.pixels[-1, -1]) == cell_color(index)

    def test_frame_count_and_order(self):
        rows, cols = 3, 4
        sheet = SheetParser.from_array(make_sheet_pixels(40, 30, rows, cols))
        frames = slice_frames(sheet, GridConfig(rows=rows, cols=cols))

        assert len(frames) == rows * cols
        for k, frame in enumerate(frames):
            row, col = divmod(k, cols)
            assert tuple(frame.pixels[5, 5]) == cell_color(row * cols + col)

    def test_ids_are_unique_and_fresh(self, quad_sheet):
        config = GridConfig(rows=2, cols=2)
        first = slice_frames(quad_sheet, config)
        second = slice_frames(quad_sheet, config)

        ids = [f.id for f in first]
        assert len(set(ids)) == 4
        assert not set(ids) & {f.id for f in second}

    def test_offset_and_gap_origins(self):
        pixels = np.zeros((20, 20, 4), dtype=np.uint8)
        # Mark the origin of each expected cell
        for x, y in [(2, 1), (10, 1), (2, 10), (10, 10)]:
            pixels[y, x] = (255, 0, 0, 255)
        sheet = SheetParser.from_array(pixels)
        config = GridConfig(rows=2, cols=2, offset_x=2, offset_y=1, gap_x=1, gap_y=1)

        frames = slice_frames(sheet, config)

        # cell = (20 - 4 - 1) // 2 = 7 wide, (20 - 2 - 1) // 2 = 8 high
        assert all(f.pixels.shape == (8, 7, 4) for f in frames)
        assert all(tuple(f.pixels[0, 0]) == (255, 0, 0, 255) for f in frames)

    def test_pixels_are_copies(self, quad_sheet):
        frames = slice_frames(quad_sheet, GridConfig(rows=2, cols=2))
        frames[0].pixels[:] = 0
        assert tuple(quad_sheet.pixels[0, 0]) == cell_color(0)

    @pytest.mark.parametrize("config", [
        GridConfig(rows=0, cols=2),
        GridConfig(rows=2, cols=-3),
        GridConfig(rows=1, cols=1, offset_x=200),
        GridConfig(rows=1, cols=3, gap_x=300),
    ])
    def test_invalid_config_returns_none(self, quad_sheet, config):
        assert slice_frames(quad_sheet, config) is None

    def test_negative_offset_clips_to_transparent(self):
        sheet = SheetParser.from_array(make_sheet_pixels(10, 10, 1, 1))
        # cell = (10 + 4) // 2 = 7; the first cell starts at x=-2
        frames = slice_frames(sheet, GridConfig(rows=1, cols=2, offset_x=-2))

        assert [f.pixels.shape for f in frames] == [(10, 7, 4), (10, 7, 4)]
        assert frames[0].pixels[0, 0, 3] == 0
        assert tuple(frames[0].pixels[0, 2]) == cell_color(0)


class TestGridRects:
    """Overlay geometry."""

    def test_matches_slicing_geometry(self):
        config = GridConfig(rows=2, cols=3, offset_x=5, offset_y=4, gap_x=2, gap_y=3)
        rects = grid_rects(100, 60, config)

        assert len(rects) == 6
        assert (rects[0].x, rects[0].y) == (5, 4)
        assert (rects[1].x, rects[1].y) == (5 + 30, 4)
        assert (rects[3].x, rects[3].y, rects[3].row, rects[3].col) == (5, 4 + 27, 1, 0)
        assert all((r.width, r.height) == (28, 24) for r in rects)

    def test_sanity_bound(self):
        assert grid_rects(1000, 1000, GridConfig(rows=MAX_OVERLAY_CELLS + 1, cols=1)) == []
        assert grid_rects(1000, 1000, GridConfig(rows=1, cols=MAX_OVERLAY_CELLS + 1)) == []
        assert len(grid_rects(1000, 1000, GridConfig(rows=MAX_OVERLAY_CELLS, cols=1))) == 50

    def test_invalid_config_is_empty(self):
        assert grid_rects(10, 10, GridConfig(rows=0, cols=1)) == []


class TestGridConfig:

    def test_from_dict_ignores_unknown_keys(self):
        config = GridConfig.from_dict({'rows': '3', 'cols': 4, 'color': 'red'})
        assert config == GridConfig(rows=3, cols=4)
