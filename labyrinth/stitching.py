"""
Doorway stitching: finish placed rooms once the layout is committed.

Every placed room gets its own copy of its template's tile layers. Doorways
nothing connected to are sealed by stretching the wall beside them across the
gap, on every layer the room has. Connected doorways get a door object, except
in corridors; boss room doors are created locked.
"""

import logging
from typing import Iterable, List, Tuple

from .door import Door
from .dungeon_gen import PlacedDoorway, PlacedRoom
from .geometry import Direction
from .settings import TILE_SIZE
from .tiles import LAYER_NAMES, TileLayer

logger = logging.getLogger(__name__)


def instantiate_room(room: PlacedRoom) -> None:
    """Give the room private copies of its template's tile layers."""
    room.tile_layers = {name: layer.copy() for name, layer in room.template.tile_layers.items()}


def seal_doorway(layer: TileLayer, room: PlacedRoom, doorway: PlacedDoorway) -> None:
    """
    Seal one doorway on one layer.

    North/south doorways: the column of copy_height tiles at copy_start is
    copied into each of the copy_width columns east of it. East/west doorways:
    the row of copy_width tiles at copy_start is copied into each of the
    copy_height rows south of it. Tile ids and transforms move together.

    The source strip is read once, before anything is written, so a copy never
    reads a tile it has already overwritten.
    """
    row, col = room.layer_index(doorway.copy_start)
    width = doorway.doorway.copy_width
    height = doorway.doorway.copy_height
    rows, cols = layer.shape

    if doorway.orientation in (Direction.NORTH, Direction.SOUTH):
        if not (0 <= row and row + height <= rows and 0 <= col and col + 1 + width <= cols):
            raise ValueError(f"Seal for {doorway.orientation.name} doorway leaves room '{room.template.name}'")
        source_tiles = layer.tiles[row : row + height, col].copy()
        source_transforms = layer.transforms[row : row + height, col].copy()
        layer.tiles[row : row + height, col + 1 : col + 1 + width] = source_tiles[:, None]
        layer.transforms[row : row + height, col + 1 : col + 1 + width] = source_transforms[:, None]
    else:
        if not (0 <= row and row + 1 + height <= rows and 0 <= col and col + width <= cols):
            raise ValueError(f"Seal for {doorway.orientation.name} doorway leaves room '{room.template.name}'")
        source_tiles = layer.tiles[row, col : col + width].copy()
        source_transforms = layer.transforms[row, col : col + width].copy()
        layer.tiles[row + 1 : row + 1 + height, col : col + width] = source_tiles[None, :]
        layer.transforms[row + 1 : row + 1 + height, col : col + width] = source_transforms[None, :]


def sealing_order(layer_names: Iterable[str]) -> List[str]:
    """Every layer name present: the standard layers first, then the rest as given."""
    present = list(layer_names)
    standard = [name for name in LAYER_NAMES if name in present]
    return standard + [name for name in present if name not in LAYER_NAMES]


def door_position(doorway: PlacedDoorway, tile_size: float = TILE_SIZE) -> Tuple[float, float]:
    """
    World position (x, y) of the door for a doorway.

    Doors sit on the outer edge of the doorway tiles, centred along the
    doorway's span.
    """
    x = doorway.position.column * tile_size
    y = doorway.position.row * tile_size
    half_span = doorway.doorway.span * tile_size / 2

    offsets = {
        Direction.NORTH: (half_span, 0.0),
        Direction.SOUTH: (half_span, tile_size),
        Direction.EAST: (tile_size, half_span),
        Direction.WEST: (0.0, half_span),
    }
    dx, dy = offsets[doorway.orientation]
    return x + dx, y + dy


def stitch_room(room: PlacedRoom, tile_size: float = TILE_SIZE) -> None:
    """Seal the room's unused doorways and put doors in the used ones."""
    if room.is_stitched:
        return

    instantiate_room(room)

    for doorway in room.doorways:
        if doorway.connected:
            continue
        for layer_name in sealing_order(room.tile_layers):
            seal_doorway(room.tile_layers[layer_name], room, doorway)

    if not room.room_node_type.is_corridor:
        for doorway in room.connected_doorways():
            if doorway.doorway.door is None:
                continue
            x, y = door_position(doorway, tile_size)
            door = Door(x=x, y=y, orientation=doorway.orientation, kind=doorway.doorway.door)
            if room.room_node_type.is_boss_room:
                door.is_boss_room_door = True
                door.lock()
            doorway.door = door
            room.doors.append(door)

    room.is_stitched = True


def stitch_rooms(rooms: Iterable[PlacedRoom], tile_size: float = TILE_SIZE) -> None:
    """Stitch every room of a committed layout."""
    sealed = 0
    doors = 0
    for room in rooms:
        stitch_room(room, tile_size)
        sealed += sum(1 for d in room.doorways if not d.connected)
        doors += len(room.doors)
    logger.debug("Stitched rooms: %d doorways sealed, %d doors created", sealed, doors)
