"""
Room and door lighting.

Rooms start dimmed and fade in the first time the player enters them. A fade
is a plain function of elapsed time: the renderer samples it once per tick,
nothing runs in the background.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from .door import Door
from .dungeon_gen import PlacedRoom
from .event_system import Event, EventData
from .settings import FADE_IN_TIME, FADE_START_ALPHA
from .world import Dungeon

Lightable = Union[PlacedRoom, Door]


@dataclass
class Fade:
    """Linear alpha ramp from start_alpha to 1.0 over `duration` seconds."""

    duration: float = FADE_IN_TIME
    start_alpha: float = FADE_START_ALPHA
    started_at: Optional[float] = None
    finished: bool = False

    def start(self, now: float) -> None:
        self.started_at = now
        self.finished = False

    def stop(self) -> None:
        """Jump to fully lit."""
        self.started_at = None
        self.finished = True

    @property
    def is_running(self) -> bool:
        return self.started_at is not None and not self.finished

    def sample(self, now: float) -> float:
        if self.finished:
            return 1.0
        if self.started_at is None:
            return self.start_alpha
        if self.duration <= 0:
            self.stop()
            return 1.0

        progress = (now - self.started_at) / self.duration
        if progress >= 1.0:
            self.stop()
            return 1.0
        progress = max(progress, 0.0)
        return self.start_alpha + (1.0 - self.start_alpha) * progress


class RoomLighting:
    """
    Lights rooms, and the doors in them, when the player first enters.

    Subscribes to ROOM_CHANGED on the dungeon's event bus.
    """

    def __init__(
        self,
        dungeon: Dungeon,
        clock: Callable[[], float] = time.monotonic,
        fade_in_time: float = FADE_IN_TIME,
    ) -> None:
        self.dungeon = dungeon
        self.clock = clock
        self.fade_in_time = fade_in_time
        self._fades: Dict[Lightable, Fade] = {}
        dungeon.event_bus.subscribe(Event.ROOM_CHANGED, self.on_room_changed)

    def detach(self) -> None:
        self.dungeon.event_bus.unsubscribe(Event.ROOM_CHANGED, self.on_room_changed)

    def on_room_changed(self, event_data: EventData) -> None:
        room: PlacedRoom = event_data.kwargs["room"]
        if room.is_lit:
            return

        now = self.clock()
        self._start_fade(room, now)
        for door in room.doors:
            self.light_door(door, now)
        room.is_lit = True

    def light_door(self, door: Door, now: Optional[float] = None) -> None:
        """Fade a door in, e.g. when the player touches it from a dark room."""
        if door.is_lit:
            return
        self._start_fade(door, self.clock() if now is None else now)
        door.is_lit = True

    def _start_fade(self, target: Lightable, now: float) -> None:
        fade = Fade(duration=self.fade_in_time)
        fade.start(now)
        self._fades[target] = fade

    def alpha(self, target: Lightable, now: Optional[float] = None) -> float:
        """Current alpha of a room or door for the renderer."""
        fade = self._fades.get(target)
        if fade is None:
            return 1.0 if target.is_lit else FADE_START_ALPHA
        return fade.sample(self.clock() if now is None else now)
