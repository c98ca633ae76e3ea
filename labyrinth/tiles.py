from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Tuple

import numpy as np


class Tile(IntEnum):
    """Tile ids used by ASCII-authored room templates."""

    NOTHING = 0

    # Walkable tiles
    FLOOR = 1

    # Walls (non-walkable)
    # Walls are named for the side of the room they are on,
    # so a WEST_WALL is on the west side of a room, facing east.
    NORTH_WALL = 10
    SOUTH_WALL = 11
    WEST_WALL = 12
    EAST_WALL = 13

    # Corners (non-walkable)
    NW_CORNER = 20
    NE_CORNER = 21
    SW_CORNER = 22
    SE_CORNER = 23

    # Pillar (non-walkable)
    PILLAR = 40

    # Doorway tiles (walkable). Sealed doorways are overwritten with wall tiles.
    # NORTH_DOORs are on the north (topmost) wall
    NORTH_DOOR_WEST = 50
    NORTH_DOOR_EAST = 51
    SOUTH_DOOR_WEST = 52
    SOUTH_DOOR_EAST = 53
    WEST_DOOR_NORTH = 54
    WEST_DOOR_SOUTH = 55
    EAST_DOOR_NORTH = 56
    EAST_DOOR_SOUTH = 57


# Layer names, in the order they are sealed.
COLLISION_LAYER = "collision"
GROUND_LAYER = "ground"
DECORATION1_LAYER = "decoration1"
DECORATION2_LAYER = "decoration2"
FRONT_LAYER = "front"
MINIMAP_LAYER = "minimap"

LAYER_NAMES: Tuple[str, ...] = (
    COLLISION_LAYER,
    GROUND_LAYER,
    DECORATION1_LAYER,
    DECORATION2_LAYER,
    FRONT_LAYER,
    MINIMAP_LAYER,
)

# Values of the collision layer
PASSABLE = 0
BLOCKED = 1


# ASCII Art Dialect for Rooms
# ===========================
#
# Characters:
#   Corners:  1 = NW, 2 = NE, 3 = SW, 4 = SE
#   Walls:    - = north, _ = south, [ = west, ] = east
#   Floor:    . = floor, * = floor with a spawn point
#   Pillar:   P
#   Doorways: n/N north, s/S south, w/W west, e/E east
#             (lowercase is the west/north half, uppercase the east/south half)
#   Void:     (space) = nothing outside the room
#
# Example room:
#
#   1---nN---2
#   [........]
#   w...*....e
#   W........E
#   [........]
#   3---sS---4
#
# A run of door characters along a wall is one doorway. The tile just before
# the run (west of a north/south doorway, north of an east/west doorway) must
# be wall: it is copied across the doorway when the doorway is sealed.

ASCII_TO_TILE: Dict[str, Tile] = {
    " ": Tile.NOTHING,
    "1": Tile.NW_CORNER,
    "2": Tile.NE_CORNER,
    "3": Tile.SW_CORNER,
    "4": Tile.SE_CORNER,
    "-": Tile.NORTH_WALL,
    "_": Tile.SOUTH_WALL,
    "[": Tile.WEST_WALL,
    "]": Tile.EAST_WALL,
    ".": Tile.FLOOR,
    "*": Tile.FLOOR,
    "P": Tile.PILLAR,
    "n": Tile.NORTH_DOOR_WEST,
    "N": Tile.NORTH_DOOR_EAST,
    "s": Tile.SOUTH_DOOR_WEST,
    "S": Tile.SOUTH_DOOR_EAST,
    "w": Tile.WEST_DOOR_NORTH,
    "W": Tile.WEST_DOOR_SOUTH,
    "e": Tile.EAST_DOOR_NORTH,
    "E": Tile.EAST_DOOR_SOUTH,
}

SPAWN_CHAR = "*"

# Reverse mapping for rendering. "*" is not listed: spawn points render as floor.
TILE_TO_ASCII: Dict[int, str] = {
    tile: char for char, tile in ASCII_TO_TILE.items() if char != SPAWN_CHAR
}

WALKABLE_TILES = {
    Tile.FLOOR,
    Tile.NORTH_DOOR_WEST,
    Tile.NORTH_DOOR_EAST,
    Tile.SOUTH_DOOR_WEST,
    Tile.SOUTH_DOOR_EAST,
    Tile.WEST_DOOR_NORTH,
    Tile.WEST_DOOR_SOUTH,
    Tile.EAST_DOOR_NORTH,
    Tile.EAST_DOOR_SOUTH,
}

DOOR_TILES = WALKABLE_TILES - {Tile.FLOOR}


@dataclass
class TileLayer:
    """
    One tile layer of a room: tile ids plus a per-tile transform.

    Transforms are quarter turns (0-3) clockwise, kept with the tile whenever
    it is copied.
    """

    tiles: np.ndarray
    transforms: np.ndarray

    @classmethod
    def from_tiles(cls, tiles: np.ndarray) -> "TileLayer":
        tiles = np.asarray(tiles, dtype=int)
        return cls(tiles=tiles, transforms=np.zeros(tiles.shape, dtype=np.int8))

    @property
    def shape(self) -> Tuple[int, int]:
        return self.tiles.shape

    def copy(self) -> "TileLayer":
        return TileLayer(tiles=self.tiles.copy(), transforms=self.transforms.copy())


@dataclass
class ParseError:
    """Error found during ASCII art parsing."""

    row: int
    column: int
    message: str


def parse_ascii_room(ascii_art: List[str]) -> Tuple[np.ndarray, List[ParseError]]:
    """
    Parse ASCII art into a 2D array of Tile values.

    Short rows are padded with NOTHING.

    Returns:
        A tuple of (tiles, errors) where errors lists unknown characters.
    """
    if not ascii_art:
        return np.zeros((0, 0), dtype=int), [ParseError(0, 0, "Empty ASCII art")]

    width = max(len(line) for line in ascii_art)
    tiles = np.zeros((len(ascii_art), width), dtype=int)
    errors: List[ParseError] = []

    for row_idx, line in enumerate(ascii_art):
        for col_idx, char in enumerate(line):
            if char not in ASCII_TO_TILE:
                errors.append(ParseError(row_idx, col_idx, f"Unknown character: '{char}'"))
                continue
            tiles[row_idx, col_idx] = ASCII_TO_TILE[char]

    return tiles, errors


def collision_from_tiles(tiles: np.ndarray) -> np.ndarray:
    """BLOCKED wherever the tile is a wall, corner or pillar."""
    walkable = np.isin(tiles, [int(t) for t in WALKABLE_TILES])
    collision = np.full(tiles.shape, BLOCKED, dtype=int)
    collision[walkable] = PASSABLE
    collision[tiles == Tile.NOTHING] = PASSABLE
    return collision


def render_tiles_ascii(tiles: np.ndarray) -> str:
    """
    Convert a 2D array of Tile values to an ASCII string.

    Unknown tile ids render as '?'.
    """
    lines = []
    rows, cols = tiles.shape
    for row in range(rows):
        lines.append("".join(TILE_TO_ASCII.get(int(tiles[row, col]), "?") for col in range(cols)))
    return "\n".join(lines)
