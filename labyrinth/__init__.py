"""Dungeon assembly from room node graphs and room templates."""

from labyrinth.geometry import Bounds, Direction, Position
from labyrinth.room_node_types import RoomNodeType, RoomNodeTypeList
from labyrinth.room_node_graph import RoomNode, RoomNodeGraph
from labyrinth.room_templates import Doorway, RoomTemplate, RoomTemplateLibrary
from labyrinth.errors import (
    LayoutError,
    MalformedGraph,
    MissingTemplateForType,
    NoEntranceTemplate,
    ExhaustedAttempts,
)
from labyrinth.dungeon_gen import (
    CandidatePolicy,
    LayoutConfig,
    PlacedDoorway,
    PlacedRoom,
    PlacedRoomSet,
    generate_layout,
    compose_layer,
)
from labyrinth.stitching import stitch_rooms
from labyrinth.event_system import EventBus, Event, EventData
from labyrinth.world import Dungeon
from labyrinth.levels import DungeonLevel, create_dungeon
