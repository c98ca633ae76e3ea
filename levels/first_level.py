"""
First Level

A small level built from the stock room templates.

Two graphs are drawn for it; each build picks one:
- "fork": the entrance splits into a treasure wing and a boss wing
- "gauntlet": a longer run of rooms ending in the boss, with a side chest room
"""

from labyrinth.levels import DungeonLevel
from labyrinth.room_library import ROOM_NODE_TYPES, default_library
from labyrinth.room_node_graph import RoomNodeGraph

FORK = [
    {"id": "entrance", "type": "entrance", "parents": [], "children": ["c1", "c2"]},
    {"id": "c1", "type": "corridor", "parents": ["entrance"], "children": ["hall"]},
    {"id": "hall", "type": "room", "parents": ["c1"], "children": ["c3"]},
    {"id": "c3", "type": "corridor", "parents": ["hall"], "children": ["boss"]},
    {"id": "boss", "type": "boss_room", "parents": ["c3"], "children": []},
    {"id": "c2", "type": "corridor", "parents": ["entrance"], "children": ["small"]},
    {"id": "small", "type": "small_room", "parents": ["c2"], "children": ["c4"]},
    {"id": "c4", "type": "corridor", "parents": ["small"], "children": ["chest"]},
    {"id": "chest", "type": "chest_room", "parents": ["c4"], "children": []},
]

GAUNTLET = [
    {"id": "entrance", "type": "entrance", "parents": [], "children": ["c1"]},
    {"id": "c1", "type": "corridor", "parents": ["entrance"], "children": ["medium"]},
    {"id": "medium", "type": "medium_room", "parents": ["c1"], "children": ["c2", "c5"]},
    {"id": "c2", "type": "corridor", "parents": ["medium"], "children": ["hall"]},
    {"id": "hall", "type": "large_room", "parents": ["c2"], "children": ["c3"]},
    {"id": "c3", "type": "corridor", "parents": ["hall"], "children": ["boss"]},
    {"id": "boss", "type": "boss_room", "parents": ["c3"], "children": []},
    {"id": "c5", "type": "corridor", "parents": ["medium"], "children": ["chest"]},
    {"id": "chest", "type": "chest_room", "parents": ["c5"], "children": []},
]


def create_level() -> DungeonLevel:
    """Create the first level."""
    return DungeonLevel(
        name="first_level",
        room_templates=default_library(),
        room_node_graphs=[
            RoomNodeGraph.from_descriptions(FORK, ROOM_NODE_TYPES, name="fork"),
            RoomNodeGraph.from_descriptions(GAUNTLET, ROOM_NODE_TYPES, name="gauntlet"),
        ],
    )


# Register this level
from levels import register_level
register_level("first_level", create_level)
