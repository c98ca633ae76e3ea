"""
Doors created in connected doorways.

A door opens when the player walks into it unless it is locked. Boss room
doors start locked and stay that way until game logic unlocks them.
"""

from dataclasses import dataclass

from .geometry import Direction


@dataclass(eq=False)
class Door:
    # Position in world units (pixels) of the door's anchor point
    x: float
    y: float

    orientation: Direction

    # Key of the door object to spawn (e.g. which sprite/prefab to use)
    kind: str = "door"

    is_boss_room_door: bool = False
    is_locked: bool = False
    is_open: bool = False

    # Rendering state, see lighting.py
    is_lit: bool = False

    def lock(self) -> None:
        self.is_locked = True
        self.is_open = False

    def unlock(self) -> None:
        self.is_locked = False

    def try_open(self) -> bool:
        """Open the door unless it is locked. Returns True if it is open."""
        if not self.is_locked:
            self.is_open = True
        return self.is_open
