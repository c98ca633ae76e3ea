import math
import logging
from typing import Any, List, Optional, Tuple

from .door import Door
from .dungeon_gen import PlacedRoom, PlacedRoomSet
from .event_system import Event, EventBus
from .settings import TILE_SIZE

logger = logging.getLogger(__name__)


class Dungeon:
    """
    One play session of a laid-out level.

    Owns the current/previous room state and the event bus, so several
    sessions (tests, replays, simulations) can run side by side. Call
    update() every tick with the player's world position; it notifies
    listeners when the player walks into a different room.
    """

    def __init__(
        self,
        rooms: PlacedRoomSet,
        event_bus: Optional[EventBus] = None,
        tile_size: float = TILE_SIZE,
        level_name: str = "",
    ) -> None:
        self.rooms: PlacedRoomSet = rooms
        self.tile_size: float = tile_size
        self.level_name: str = level_name

        self.current_room: Optional[PlacedRoom] = None
        self.previous_room: Optional[PlacedRoom] = None

        self.event_bus: EventBus = event_bus if event_bus is not None else EventBus()

    def set_event_bus(self, bus: EventBus) -> None:
        """Set the event bus for this dungeon."""
        self.event_bus = bus

    def _emit(self, event: Event, **kwargs: Any) -> None:
        self.event_bus.emit(event, **kwargs)

    def start(self) -> Tuple[float, float]:
        """
        Begin the level: announce it and put the player in the entrance.

        Returns the player's start position in world units.
        """
        self._emit(Event.LEVEL_START, dungeon=self)
        start = self.player_start_position()
        self.update(*start)
        return start

    def end(self) -> None:
        self._emit(Event.LEVEL_END, dungeon=self)

    def get_room_at(self, x: float, y: float) -> Optional[PlacedRoom]:
        """Returns the room containing a world position, or None between rooms."""
        for room in self.rooms:
            if room.contains_point(x, y, self.tile_size):
                return room
        return None

    def update(self, x: float, y: float) -> Optional[PlacedRoom]:
        """
        Track the player's room. Call once per tick.

        Returns the room just entered, or None if the player stayed put (or
        is outside every room, which keeps the current room).
        """
        room = self.get_room_at(x, y)
        if room is None or room is self.current_room:
            return None
        self.set_current_room(room)
        return room

    def set_current_room(self, room: PlacedRoom) -> None:
        """Make `room` current, mark it visited and tell every listener."""
        self.previous_room = self.current_room
        self.current_room = room
        room.is_previously_visited = True
        logger.debug("Entered room %s", room.node.label)
        self._emit(Event.ROOM_CHANGED, room=room, previous_room=self.previous_room)

    def get_current_room(self) -> Optional[PlacedRoom]:
        return self.current_room

    def room_center(self, room: PlacedRoom) -> Tuple[float, float]:
        left, top, right, bottom = room.world_bounds(self.tile_size)
        return (left + right) / 2, (top + bottom) / 2

    def spawn_positions_world(self, room: PlacedRoom) -> List[Tuple[float, float]]:
        """Centres of the room's spawn tiles, in world units."""
        return [
            ((spawn.column + 0.5) * self.tile_size, (spawn.row + 0.5) * self.tile_size)
            for spawn in room.spawn_positions
        ]

    def nearest_spawn_position(
        self, x: float, y: float, room: Optional[PlacedRoom] = None
    ) -> Tuple[float, float]:
        """
        The spawn point of `room` (default: the current room) closest to (x, y).

        Raises:
            RuntimeError: if there is no such room or it has no spawn points.
        """
        if room is None:
            room = self.current_room
        if room is None:
            raise RuntimeError("No current room to spawn in")

        spawns = self.spawn_positions_world(room)
        if not spawns:
            raise RuntimeError(f"Room {room.node.label} has no spawn positions")

        return min(spawns, key=lambda spawn: math.hypot(spawn[0] - x, spawn[1] - y))

    def player_start_position(self) -> Tuple[float, float]:
        """Middle of the entrance, moved to its nearest spawn point if it has any."""
        entrance = self.rooms.entrance
        x, y = self.room_center(entrance)
        if entrance.spawn_positions:
            return self.nearest_spawn_position(x, y, entrance)
        return x, y

    def boss_room_doors(self) -> List[Tuple[PlacedRoom, Door]]:
        return [
            (room, door) for room in self.rooms for door in room.doors if door.is_boss_room_door
        ]

    def unlock_boss_doors(self) -> None:
        """Unlock every boss room door (e.g. once the level is cleared)."""
        for room, door in self.boss_room_doors():
            if door.is_locked:
                door.unlock()
                self._emit(Event.DOOR_UNLOCKED, door=door, room=room)

    def lock_boss_doors(self) -> None:
        for room, door in self.boss_room_doors():
            if not door.is_locked:
                door.lock()
                self._emit(Event.DOOR_LOCKED, door=door, room=room)
