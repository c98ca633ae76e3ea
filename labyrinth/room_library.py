"""
The stock room templates.

Doorways are two tiles wide everywhere so any two templates can be joined.
Rooms connect to each other through corridors; corridors have no doors.
"""

from typing import List

from .room_node_types import RoomNodeTypeList
from .room_templates import RoomTemplate, RoomTemplateLibrary

ROOM_NODE_TYPES = RoomNodeTypeList.standard()

ROOM_TEMPLATES: List[RoomTemplate] = [
    RoomTemplate.from_ascii(
        "entrance",
        ROOM_NODE_TYPES.entrance,
        [
            "1---nN---2",
            "[........]",
            "[..*..*..]",
            "w........e",
            "W........E",
            "[..*..*..]",
            "[........]",
            "3___sS___4",
        ],
    ),
    RoomTemplate.from_ascii(
        "corridor-ns",
        ROOM_NODE_TYPES.corridor_ns,
        [
            "[nN]",
            "[..]",
            "[..]",
            "[..]",
            "[..]",
            "[sS]",
        ],
        door=None,
    ),
    RoomTemplate.from_ascii(
        "corridor-ew",
        ROOM_NODE_TYPES.corridor_ew,
        [
            "-------",
            "w.....e",
            "W.....E",
            "_______",
        ],
        door=None,
    ),
    RoomTemplate.from_ascii(
        "large",
        ROOM_NODE_TYPES["room"],
        [
            "1----nN----2",
            "[..........]",
            "[.*......*.]",
            "[..........]",
            "w..........e",
            "W..........E",
            "[..........]",
            "[.*......*.]",
            "[..........]",
            "3____sS____4",
        ],
    ),
    RoomTemplate.from_ascii(
        "pillars",
        ROOM_NODE_TYPES["room"],
        [
            "1--nN--2",
            "[......]",
            "[..P...]",
            "w*....*e",
            "W...P..E",
            "[......]",
            "[......]",
            "3__sS__4",
        ],
    ),
    RoomTemplate.from_ascii(
        "small",
        ROOM_NODE_TYPES["small_room"],
        [
            "1-nN-2",
            "[....]",
            "w.*..e",
            "W....E",
            "[....]",
            "3_sS_4",
        ],
    ),
    RoomTemplate.from_ascii(
        "medium",
        ROOM_NODE_TYPES["medium_room"],
        [
            "1---nN---2",
            "[........]",
            "[.*....*.]",
            "w........e",
            "W........E",
            "[.*....*.]",
            "3___sS___4",
        ],
    ),
    RoomTemplate.from_ascii(
        "hall",
        ROOM_NODE_TYPES["large_room"],
        [
            "1------nN------2",
            "[..............]",
            "[.*..........*.]",
            "[..............]",
            "w..............e",
            "W..............E",
            "[..............]",
            "[.*..........*.]",
            "[..............]",
            "3______sS______4",
        ],
    ),
    RoomTemplate.from_ascii(
        "chest",
        ROOM_NODE_TYPES["chest_room"],
        [
            "1--nN--2",
            "[......]",
            "w..*...e",
            "W......E",
            "[......]",
            "3__sS__4",
        ],
    ),
    RoomTemplate.from_ascii(
        "boss",
        ROOM_NODE_TYPES.boss_room,
        [
            "1-------nN-------2",
            "[................]",
            "[..P..........P..]",
            "[................]",
            "[.......*........]",
            "w................e",
            "W................E",
            "[................]",
            "[..P..........P..]",
            "3_______sS_______4",
        ],
    ),
]


def default_library() -> RoomTemplateLibrary:
    return RoomTemplateLibrary(ROOM_TEMPLATES)
