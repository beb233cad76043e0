#!/usr/bin/env python
"""
Sprite Sequencer CLI - Slice a sprite sheet and export it as a GIF

Usage:
    python main.py <sheet_image> --rows R --cols C [options]

Examples:
    python main.py walk.png --rows 1 --cols 8                 # 8-frame strip
    python main.py hero.png --rows 4 --cols 4 --scale 4       # upscale 4x
    python main.py hero.png --rows 2 --cols 2 --order 3,0,1,2 # custom order
    python main.py hero.png --config hero.yaml --list-frames  # just show cells
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path


def parse_order(text: str) -> list:
    """'3,0,1,2' -> [3, 0, 1, 2]"""
    try:
        return [int(part) for part in text.split(',') if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Order must be comma-separated frame numbers: {text}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Slice sprite sheets into frames and export looping GIFs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Grid layout (per axis):
  offset | cell | gap | cell | gap | cell | offset

Frames are numbered row by row, starting at 0 in the top-left corner.
Playback speed is 8 fps times --rate.

Examples:
  %(prog)s walk.png --rows 1 --cols 8
  %(prog)s hero.png --rows 4 --cols 4 --gap-x 2 --gap-y 2 --scale 3
  %(prog)s hero.png --config hero.yaml --save-config hero.yaml
        """
    )

    parser.add_argument('input', type=str, help='Sprite sheet image (PNG, GIF, etc.)')
    parser.add_argument('-o', '--output', type=str, default='.',
                        help='Output directory (default: current directory)')
    parser.add_argument('-c', '--config', type=str, default=None, metavar='PATH',
                        help='YAML session config; command line values override it')
    parser.add_argument('--save-config', type=str, default=None, metavar='PATH',
                        help='Write the effective config as YAML')

    grid = parser.add_argument_group('grid')
    grid.add_argument('-r', '--rows', type=int, default=None, help='Grid rows')
    grid.add_argument('-C', '--cols', type=int, default=None, help='Grid columns')
    grid.add_argument('--offset-x', type=int, default=None, help='Left/right margin in pixels')
    grid.add_argument('--offset-y', type=int, default=None, help='Top/bottom margin in pixels')
    grid.add_argument('--gap-x', type=int, default=None, help='Horizontal gap between cells')
    grid.add_argument('--gap-y', type=int, default=None, help='Vertical gap between cells')

    parser.add_argument('--order', type=parse_order, default=None,
                        help='Frame order as comma-separated numbers, e.g. 3,0,1,2')
    parser.add_argument('--rate', type=float, default=None,
                        help='Playback speed multiplier (default: 1.0 = 8 fps)')
    parser.add_argument('-s', '--scale', type=float, default=None,
                        help='Export scale, nearest-neighbour (default: 1.0)')
    parser.add_argument('--list-frames', action='store_true',
                        help="List the grid cells and exit without exporting")
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    return parser


def apply_args(config, args):
    """Overlay command line values on a SessionConfig"""
    from dataclasses import replace

    grid_fields = {
        'rows': args.rows, 'cols': args.cols,
        'offset_x': args.offset_x, 'offset_y': args.offset_y,
        'gap_x': args.gap_x, 'gap_y': args.gap_y,
    }
    config.grid = replace(config.grid, **{k: v for k, v in grid_fields.items() if v is not None})
    if args.rate is not None:
        config.play_rate = args.rate
    if args.scale is not None:
        config.export_scale = args.scale
    return config


def reorder(session, order: list) -> None:
    """Apply a full frame order through the drag engine"""
    frames = session.frames
    if sorted(order) != list(range(len(frames))):
        raise ValueError(f"--order must list each of the {len(frames)} frames exactly once")

    session.reorder.activate_handle()
    session.reorder.consider([frames[i] for i in order])
    session.reorder.finalize()


def main():
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {args.input}")
        sys.exit(1)

    # Import here to avoid slow startup for --help
    from sprite_sequencer.core import (
        EditorSession, SessionConfig, VirtualScheduler, DirectorySaver,
        load_config, save_config,
    )

    try:
        config = load_config(args.config) if args.config else SessionConfig()
        config = apply_args(config, args)

        if args.save_config:
            save_config(config, args.save_config)
            print(f"Saved config: {args.save_config}")

        session = EditorSession(
            config=config,
            scheduler=VirtualScheduler(),
            save=DirectorySaver(args.output),
            notify=lambda message: print(f"Error: {message}"),
        )

        if not session.load_image(input_path):
            print(f"Error: Could not decode image: {args.input}")
            sys.exit(1)

        session.flush()
        if not session.frames:
            g = config.grid
            print(f"Error: A {g.rows}x{g.cols} grid does not fit "
                  f"{session.sheet.width}x{session.sheet.height} pixels")
            sys.exit(1)

        if args.list_frames:
            print(f"Sheet: {input_path.name} ({session.sheet.width}x{session.sheet.height})")
            for i, rect in enumerate(session.grid_rects()):
                print(f"  {i:3d}  row {rect.row} col {rect.col}  "
                      f"x={rect.x} y={rect.y} {rect.width}x{rect.height}")
            print(f"Total: {len(session.frames)} frames")
            return

        if args.order:
            reorder(session, args.order)

        print(f"Exporting {len(session.frames)} frames "
              f"at {session.playback.effective_rate} fps, {config.export_scale:g}x")
        result = asyncio.run(session.export())
        session.close()

        if not result.ok:
            sys.exit(1)

        width, height = result.frame_size
        print(f"Output: {Path(args.output) / result.filename} ({width}x{height} per frame)")
        print("Done!")

    except Exception as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
