"""Grid positions, directions and rectangles, measured in tiles."""

from dataclasses import dataclass
from enum import Enum, auto


@dataclass(frozen=True)
class Position:
    """A position in the dungeon grid, measured in tiles."""

    row: int
    column: int

    def __add__(self, other: "Position") -> "Position":
        return Position(row=self.row + other.row, column=self.column + other.column)

    def __sub__(self, other: "Position") -> "Position":
        return Position(row=self.row - other.row, column=self.column - other.column)


class Direction(Enum):
    """Cardinal directions for doorway placement and room connections."""

    NORTH = auto()
    SOUTH = auto()
    EAST = auto()
    WEST = auto()

    def opposite(self) -> "Direction":
        """Returns the opposite direction."""
        opposites = {
            Direction.NORTH: Direction.SOUTH,
            Direction.SOUTH: Direction.NORTH,
            Direction.EAST: Direction.WEST,
            Direction.WEST: Direction.EAST,
        }
        return opposites[self]

    def step(self) -> Position:
        """Returns the Position offset for moving one step in this direction."""
        steps = {
            Direction.NORTH: Position(row=-1, column=0),
            Direction.SOUTH: Position(row=1, column=0),
            Direction.EAST: Position(row=0, column=1),
            Direction.WEST: Position(row=0, column=-1),
        }
        return steps[self]

    @property
    def is_horizontal_wall(self) -> bool:
        """North and south doorways sit in a horizontal wall."""
        return self in (Direction.NORTH, Direction.SOUTH)


@dataclass(frozen=True)
class Bounds:
    """
    An axis-aligned rectangle of tiles.

    Both corners are inclusive: a single tile has lower == upper.
    """

    lower: Position
    upper: Position

    @property
    def width(self) -> int:
        return self.upper.column - self.lower.column + 1

    @property
    def height(self) -> int:
        return self.upper.row - self.lower.row + 1

    def translate(self, offset: Position) -> "Bounds":
        return Bounds(lower=self.lower + offset, upper=self.upper + offset)

    def contains(self, position: Position) -> bool:
        return (
            self.lower.row <= position.row <= self.upper.row
            and self.lower.column <= position.column <= self.upper.column
        )

    def overlaps(self, other: "Bounds", padding: int = 0) -> bool:
        """
        Check if two rectangles share a tile.

        With padding > 0, rectangles closer than `padding` tiles apart also
        count as overlapping. Rectangles that merely touch edge to edge do not
        overlap at zero padding.
        """
        return not (
            self.upper.row + padding < other.lower.row
            or other.upper.row + padding < self.lower.row
            or self.upper.column + padding < other.lower.column
            or other.upper.column + padding < self.lower.column
        )
