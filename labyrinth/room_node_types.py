"""
Room node types: the fixed vocabulary of roles a room can play in a level.

A room node graph is drawn with these types, and every room template is tagged
with one of them. The registry replaces a hard-coded enum so levels can add
their own room flavours.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from .geometry import Direction


@dataclass(frozen=True)
class RoomNodeType:
    """
    An immutable room role.

    Facets are not mutually exclusive: a north/south corridor is both
    is_corridor_ns and is_corridor.
    """

    name: str
    is_entrance: bool = False
    is_corridor_ns: bool = False
    is_corridor_ew: bool = False
    # Generic corridor drawn in the graph editor. The concrete template is a
    # north/south or east/west corridor depending on the doorway it joins.
    is_corridor_any: bool = False
    is_boss_room: bool = False
    is_none: bool = False
    display_in_node_graph_editor: bool = True

    @property
    def is_corridor(self) -> bool:
        return self.is_corridor_any or self.is_corridor_ns or self.is_corridor_ew

    @property
    def is_corridor_or_entrance(self) -> bool:
        return self.is_corridor or self.is_entrance

    def accepts(self, template_type: "RoomNodeType", orientation: Direction) -> bool:
        """
        Check if a template of `template_type` can realise a node of this type.

        `orientation` is the side of the new room the connecting doorway is on.
        """
        if template_type == self:
            return True
        if self.is_corridor_any:
            if orientation.is_horizontal_wall:
                return template_type.is_corridor_ns
            return template_type.is_corridor_ew
        return False

    def __str__(self) -> str:
        return self.name


class RoomNodeTypeList:
    """Ordered registry of every room node type a game uses."""

    def __init__(self, types: Optional[List[RoomNodeType]] = None) -> None:
        self._types: Dict[str, RoomNodeType] = {}
        for room_node_type in types or []:
            self.add(room_node_type)

    @classmethod
    def standard(cls) -> "RoomNodeTypeList":
        """The room roles used by the stock levels."""
        return cls(
            [
                RoomNodeType("none", is_none=True, display_in_node_graph_editor=False),
                RoomNodeType("entrance", is_entrance=True),
                RoomNodeType("corridor", is_corridor_any=True),
                RoomNodeType(
                    "corridor_ns", is_corridor_ns=True, display_in_node_graph_editor=False
                ),
                RoomNodeType(
                    "corridor_ew", is_corridor_ew=True, display_in_node_graph_editor=False
                ),
                RoomNodeType("room"),
                RoomNodeType("small_room"),
                RoomNodeType("medium_room"),
                RoomNodeType("large_room"),
                RoomNodeType("chest_room"),
                RoomNodeType("boss_room", is_boss_room=True),
            ]
        )

    def add(self, room_node_type: RoomNodeType) -> None:
        if room_node_type.name in self._types:
            raise ValueError(f"Duplicate room node type '{room_node_type.name}'")
        self._types[room_node_type.name] = room_node_type

    def get(self, name: str) -> RoomNodeType:
        if name not in self._types:
            raise KeyError(f"Unknown room node type: {name}")
        return self._types[name]

    def __getitem__(self, name: str) -> RoomNodeType:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[RoomNodeType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def displayable(self) -> List[RoomNodeType]:
        """Types offered when drawing a graph."""
        return [t for t in self._types.values() if t.display_in_node_graph_editor]

    def _first(self, facet: str) -> RoomNodeType:
        for room_node_type in self._types.values():
            if getattr(room_node_type, facet):
                return room_node_type
        raise KeyError(f"No room node type with {facet}")

    @property
    def none(self) -> RoomNodeType:
        return self._first("is_none")

    @property
    def entrance(self) -> RoomNodeType:
        return self._first("is_entrance")

    @property
    def corridor(self) -> RoomNodeType:
        return self._first("is_corridor_any")

    @property
    def corridor_ns(self) -> RoomNodeType:
        return self._first("is_corridor_ns")

    @property
    def corridor_ew(self) -> RoomNodeType:
        return self._first("is_corridor_ew")

    @property
    def boss_room(self) -> RoomNodeType:
        return self._first("is_boss_room")
