#!/usr/bin/env python3
"""
Render a generated level to an image file for visual inspection.

Each tile becomes a flat coloured square: walls grey, floor dark, doorway
tiles green. Room outlines and doors are drawn on top.

Useful for:
- Designing new room templates
- Checking that unused doorways were sealed
- Debugging the layout search

Usage:
    python tools/render_dungeon_image.py                    # random seed
    python tools/render_dungeon_image.py --seed 42          # Reproducible dungeon
    python tools/render_dungeon_image.py --output my.png    # Custom output path
"""

import argparse
import sys
from pathlib import Path

import cv2
import numpy as np

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import levels.first_level  # noqa: F401  (registers the level)
from levels import get_level, list_levels
from labyrinth.dungeon_gen import LayoutConfig, compose_layer
from labyrinth.levels import create_dungeon
from labyrinth.tiles import DOOR_TILES, GROUND_LAYER, Tile

PIXELS_PER_TILE = 16

# BGR colours
COLOUR_NOTHING = (0, 0, 0)
COLOUR_FLOOR = (40, 40, 40)
COLOUR_WALL = (150, 150, 150)
COLOUR_DOORWAY = (60, 160, 60)
COLOUR_OUTLINE = (200, 120, 40)
COLOUR_DOOR = (40, 200, 240)
COLOUR_LOCKED_DOOR = (40, 40, 220)


def tile_colour(tile: int):
    if tile == Tile.NOTHING:
        return COLOUR_NOTHING
    if tile == Tile.FLOOR:
        return COLOUR_FLOOR
    if tile in DOOR_TILES:
        return COLOUR_DOORWAY
    return COLOUR_WALL


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Render a dungeon level to an image file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--level", default="first_level", choices=list_levels(), help="Level to build")
    parser.add_argument("--seed", "-s", type=int, default=None, help="Random seed for reproducible dungeons")
    parser.add_argument(
        "--output", "-o",
        type=str,
        default="dungeon_render.png",
        help="Output image path (default: dungeon_render.png)",
    )
    args = parser.parse_args()

    level = get_level(args.level)()
    dungeon = create_dungeon(level, LayoutConfig(seed=args.seed, padding=1))
    dungeon_map, origin = compose_layer(dungeon.rooms, GROUND_LAYER)
    rows, cols = dungeon_map.shape
    print(f"Dungeon size: {cols}x{rows} tiles, graph '{dungeon.rooms.graph_name}'")

    image = np.zeros((rows * PIXELS_PER_TILE, cols * PIXELS_PER_TILE, 3), dtype=np.uint8)
    for row in range(rows):
        for col in range(cols):
            top = row * PIXELS_PER_TILE
            left = col * PIXELS_PER_TILE
            image[top : top + PIXELS_PER_TILE, left : left + PIXELS_PER_TILE] = tile_colour(
                int(dungeon_map[row, col])
            )

    # Room outlines
    for room in dungeon.rooms:
        top_left = (
            (room.lower_bounds.column - origin.column) * PIXELS_PER_TILE,
            (room.lower_bounds.row - origin.row) * PIXELS_PER_TILE,
        )
        bottom_right = (
            (room.upper_bounds.column - origin.column + 1) * PIXELS_PER_TILE - 1,
            (room.upper_bounds.row - origin.row + 1) * PIXELS_PER_TILE - 1,
        )
        cv2.rectangle(image, top_left, bottom_right, COLOUR_OUTLINE, 1)

    # Doors, scaled from world units to image pixels
    scale = PIXELS_PER_TILE / dungeon.tile_size
    for room in dungeon.rooms:
        for door in room.doors:
            centre = (
                int(door.x * scale) - origin.column * PIXELS_PER_TILE,
                int(door.y * scale) - origin.row * PIXELS_PER_TILE,
            )
            colour = COLOUR_LOCKED_DOOR if door.is_locked else COLOUR_DOOR
            cv2.circle(image, centre, PIXELS_PER_TILE // 3, colour, -1)

    output_path = Path(args.output)
    cv2.imwrite(str(output_path), image)
    print(f"Saved to: {output_path.absolute()}")

    print(f"\nRooms ({len(dungeon.rooms)}):")
    for room in dungeon.rooms:
        print(
            f"  {room.node.label}: '{room.template.name}' at tile "
            f"({room.lower_bounds.column}, {room.lower_bounds.row}), size {room.template.width}x{room.template.height}"
        )


if __name__ == "__main__":
    main()
