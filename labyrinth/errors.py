"""Errors raised while validating graphs and laying out dungeons."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .room_node_types import RoomNodeType


class LayoutError(RuntimeError):
    """Base class for everything generate_layout() can raise."""


class MalformedGraph(LayoutError):
    """The room node graph cannot be laid out (cycle, untyped node, bad entrance)."""


class MissingTemplateForType(LayoutError):
    """No room template in the library can realise a room node type."""

    def __init__(self, room_node_type: "RoomNodeType") -> None:
        super().__init__(f"No room template for room node type '{room_node_type.name}'")
        self.room_node_type = room_node_type


class NoEntranceTemplate(MissingTemplateForType):
    """The template library has no entrance template."""


class NoValidPlacement(LayoutError):
    """
    The search ran out of candidates for a node.

    Recovered by backtracking inside the layout engine; never raised to callers.
    """


class ExhaustedAttempts(LayoutError):
    """Every layout attempt failed."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Could not lay out the dungeon in {attempts} attempts")
        self.attempts = attempts
