"""
Room templates: concrete, reusable room blueprints.

Each template is tagged with the room node type it can stand in for and lists
its doorways. Templates are never mutated; whether a doorway ended up
connected is recorded on the placed room instead.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import numpy as np

from .geometry import Bounds, Direction, Position
from .room_node_types import RoomNodeType
from .tiles import (
    GROUND_LAYER,
    COLLISION_LAYER,
    MINIMAP_LAYER,
    SPAWN_CHAR,
    Tile,
    TileLayer,
    WALKABLE_TILES,
    ParseError,
    collision_from_tiles,
    parse_ascii_room,
)


@dataclass(frozen=True)
class Doorway:
    """
    A connection point on a room template's boundary.

    position is the doorway's anchor tile (its north-most or west-most tile)
    in template coordinates. copy_start, copy_width and copy_height describe
    the block of wall that is stretched across the doorway to seal it when
    nothing connects to it. door names the door object to create when it is
    connected, if any.
    """

    orientation: Direction
    position: Position
    copy_start: Position
    copy_width: int
    copy_height: int
    door: Optional[str] = None

    @property
    def span(self) -> int:
        """Number of tiles the doorway covers along its wall."""
        return self.copy_width if self.orientation.is_horizontal_wall else self.copy_height


@dataclass(frozen=True, eq=False)
class RoomTemplate:
    """
    A room blueprint.

    Bounds, doorway positions and spawn positions are all in the template's
    own tile coordinates; tile layers are indexed from lower_bounds.
    """

    name: str
    room_node_type: RoomNodeType
    lower_bounds: Position
    upper_bounds: Position
    doorways: Tuple[Doorway, ...] = ()
    spawn_positions: Tuple[Position, ...] = ()
    tile_layers: Mapping[str, TileLayer] = field(default_factory=dict)

    def __post_init__(self) -> None:
        bounds = self.bounds
        if bounds.width <= 0 or bounds.height <= 0:
            raise ValueError(f"Template '{self.name}' has empty bounds")
        for doorway in self.doorways:
            if not _on_edge(bounds, doorway):
                raise ValueError(
                    f"Template '{self.name}': {doorway.orientation.name.lower()} doorway at "
                    f"{doorway.position} is not on the {doorway.orientation.name.lower()} edge"
                )
        for spawn in self.spawn_positions:
            if not bounds.contains(spawn):
                raise ValueError(f"Template '{self.name}': spawn position {spawn} is outside the room")
        for layer_name, layer in self.tile_layers.items():
            if layer.shape != (bounds.height, bounds.width):
                raise ValueError(
                    f"Template '{self.name}': layer '{layer_name}' is {layer.shape}, "
                    f"expected {(bounds.height, bounds.width)}"
                )

    @property
    def bounds(self) -> Bounds:
        return Bounds(lower=self.lower_bounds, upper=self.upper_bounds)

    @property
    def width(self) -> int:
        return self.bounds.width

    @property
    def height(self) -> int:
        return self.bounds.height

    def doorways_facing(self, direction: Direction) -> List[int]:
        """Indexes of the doorways on the given side of the room."""
        return [i for i, d in enumerate(self.doorways) if d.orientation == direction]

    def has_doorway(self, direction: Direction) -> bool:
        return bool(self.doorways_facing(direction))

    @classmethod
    def from_ascii(
        cls,
        name: str,
        room_node_type: RoomNodeType,
        ascii_art: List[str],
        door: Optional[str] = "door",
    ) -> "RoomTemplate":
        """
        Build a template from the ASCII room dialect (see tiles.py).

        Doorways come from runs of door characters, spawn points from '*'.
        The ground and minimap layers hold the parsed tiles and the collision
        layer marks walls, corners and pillars as blocked.

        Raises:
            ValueError: if the art has unknown characters or a doorway with no
                wall beside it to seal from.
        """
        tiles, errors = parse_ascii_room(ascii_art)
        lines = [line.ljust(tiles.shape[1]) for line in ascii_art]

        doorways: List[Doorway] = []
        for direction in (Direction.NORTH, Direction.SOUTH, Direction.EAST, Direction.WEST):
            for anchor, span in _find_door_runs(lines, direction):
                if direction.is_horizontal_wall:
                    copy_start = Position(row=anchor.row, column=anchor.column - 1)
                    copy_width, copy_height = span, 1
                else:
                    copy_start = Position(row=anchor.row - 1, column=anchor.column)
                    copy_width, copy_height = 1, span
                if not _is_wall(tiles, copy_start):
                    errors.append(
                        ParseError(anchor.row, anchor.column, "Doorway has no wall to seal from")
                    )
                    continue
                doorways.append(
                    Doorway(
                        orientation=direction,
                        position=anchor,
                        copy_start=copy_start,
                        copy_width=copy_width,
                        copy_height=copy_height,
                        door=door,
                    )
                )

        if errors:
            details = "; ".join(f"({e.row}, {e.column}) {e.message}" for e in errors)
            raise ValueError(f"Template '{name}' does not parse: {details}")

        spawn_positions = tuple(
            Position(row=row_idx, column=col_idx)
            for row_idx, line in enumerate(lines)
            for col_idx, char in enumerate(line)
            if char == SPAWN_CHAR
        )

        rows, cols = tiles.shape
        return cls(
            name=name,
            room_node_type=room_node_type,
            lower_bounds=Position(row=0, column=0),
            upper_bounds=Position(row=rows - 1, column=cols - 1),
            doorways=tuple(doorways),
            spawn_positions=spawn_positions,
            tile_layers={
                COLLISION_LAYER: TileLayer.from_tiles(collision_from_tiles(tiles)),
                GROUND_LAYER: TileLayer.from_tiles(tiles),
                MINIMAP_LAYER: TileLayer.from_tiles(tiles.copy()),
            },
        )


def _on_edge(bounds: Bounds, doorway: Doorway) -> bool:
    position = doorway.position
    if not bounds.contains(position):
        return False
    edges = {
        Direction.NORTH: position.row == bounds.lower.row,
        Direction.SOUTH: position.row == bounds.upper.row,
        Direction.WEST: position.column == bounds.lower.column,
        Direction.EAST: position.column == bounds.upper.column,
    }
    return edges[doorway.orientation]


# Each direction has two door characters (e.g., 'n' and 'N' for north)
DOOR_CHARS: Dict[Direction, Tuple[str, str]] = {
    Direction.NORTH: ("n", "N"),
    Direction.SOUTH: ("s", "S"),
    Direction.EAST: ("e", "E"),
    Direction.WEST: ("w", "W"),
}


def _find_door_runs(lines: List[str], direction: Direction) -> List[Tuple[Position, int]]:
    """Find (anchor, span) for every run of door characters facing `direction`."""
    target_chars = DOOR_CHARS[direction]
    step = Position(row=0, column=1) if direction.is_horizontal_wall else Position(row=1, column=0)
    seen = set()
    runs = []

    for row_idx, line in enumerate(lines):
        for col_idx, char in enumerate(line):
            if char not in target_chars or (row_idx, col_idx) in seen:
                continue
            anchor = Position(row=row_idx, column=col_idx)
            span = 0
            current = anchor
            while (
                current.row < len(lines)
                and current.column < len(lines[current.row])
                and lines[current.row][current.column] in target_chars
            ):
                seen.add((current.row, current.column))
                span += 1
                current = current + step
            runs.append((anchor, span))

    return runs


def _is_wall(tiles: np.ndarray, position: Position) -> bool:
    rows, cols = tiles.shape
    if not (0 <= position.row < rows and 0 <= position.column < cols):
        return False
    tile = tiles[position.row, position.column]
    return tile != Tile.NOTHING and tile not in WALKABLE_TILES


class RoomTemplateLibrary:
    """The room templates a level may be built from."""

    def __init__(self, templates: Iterable[RoomTemplate] = ()) -> None:
        self._templates: List[RoomTemplate] = []
        for template in templates:
            self.add(template)

    def add(self, template: RoomTemplate) -> None:
        self._templates.append(template)

    def __iter__(self) -> Iterator[RoomTemplate]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def by_name(self, name: str) -> RoomTemplate:
        for template in self._templates:
            if template.name == name:
                return template
        raise KeyError(f"No room template named '{name}'")

    def for_type(self, room_node_type: RoomNodeType) -> List[RoomTemplate]:
        """Templates tagged with exactly this type."""
        return [t for t in self._templates if t.room_node_type == room_node_type]

    def candidates(self, room_node_type: RoomNodeType, orientation: Direction) -> List[RoomTemplate]:
        """
        Templates that can realise a node of `room_node_type` entered through a
        doorway on their `orientation` side.
        """
        return [
            t
            for t in self._templates
            if room_node_type.accepts(t.room_node_type, orientation) and t.has_doorway(orientation)
        ]

    def entrance_templates(self) -> List[RoomTemplate]:
        return [t for t in self._templates if t.room_node_type.is_entrance]

    def has_template_for(self, room_node_type: RoomNodeType) -> bool:
        return any(
            room_node_type.accepts(t.room_node_type, direction)
            for t in self._templates
            for direction in Direction
        )
