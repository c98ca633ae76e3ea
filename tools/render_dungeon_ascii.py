#!/usr/bin/env python3
"""
Render a generated level as ASCII art for debugging.

Usage:
    python tools/render_dungeon_ascii.py [--level NAME] [--seed S] [--policy first-fit|random]
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path so we can import labyrinth and levels
sys.path.insert(0, str(Path(__file__).parent.parent))

import levels.first_level  # noqa: F401  (registers the level)
from levels import get_level, list_levels
from labyrinth.dungeon_gen import CandidatePolicy, LayoutConfig, compose_layer
from labyrinth.levels import create_dungeon
from labyrinth.tiles import GROUND_LAYER, render_tiles_ascii


def main():
    parser = argparse.ArgumentParser(description="Render a dungeon level as ASCII art")
    parser.add_argument("--level", default="first_level", choices=list_levels(), help="Level to build")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible generation")
    parser.add_argument(
        "--policy",
        choices=["first-fit", "random"],
        default="random",
        help="Order in which placement candidates are tried",
    )
    parser.add_argument("--padding", type=int, default=1, help="Gap kept between unconnected rooms")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log the layout search")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    policy = CandidatePolicy.FIRST_FIT if args.policy == "first-fit" else CandidatePolicy.RANDOM
    config = LayoutConfig(seed=args.seed, policy=policy, padding=args.padding)

    level = get_level(args.level)()
    level.validate()
    dungeon = create_dungeon(level, config)

    dungeon_map, origin = compose_layer(dungeon.rooms, GROUND_LAYER)
    print(render_tiles_ascii(dungeon_map))

    # Print some debug info
    print(f"\n--- Debug Info ---")
    print(f"Graph: {dungeon.rooms.graph_name}")
    print(f"Map size: {dungeon_map.shape[1]}x{dungeon_map.shape[0]} tiles, origin {origin}")
    for room in dungeon.rooms:
        connected = sum(1 for d in room.doorways if d.connected)
        print(
            f"  {room.node.label:<10} '{room.template.name}' at {room.lower_bounds}, "
            f"{connected}/{len(room.doorways)} doorways connected, {len(room.doors)} doors"
        )


if __name__ == "__main__":
    main()
