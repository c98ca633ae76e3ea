"""Tests for laying out room node graphs."""

import itertools
from collections import deque
from typing import Deque, Optional, Set, Tuple

import numpy as np
import pytest

from labyrinth.dungeon_gen import (
    CandidatePolicy,
    LayoutConfig,
    PlacedDoorway,
    PlacedRoom,
    PlacedRoomSet,
    compose_layer,
    generate_layout,
)
from labyrinth.errors import (
    ExhaustedAttempts,
    LayoutError,
    MalformedGraph,
    MissingTemplateForType,
    NoEntranceTemplate,
)
from labyrinth.geometry import Direction, Position
from labyrinth.room_library import ROOM_NODE_TYPES, ROOM_TEMPLATES, default_library
from labyrinth.room_node_graph import RoomNodeGraph
from labyrinth.room_templates import RoomTemplate, RoomTemplateLibrary
from labyrinth.stitching import stitch_rooms
from labyrinth.tiles import GROUND_LAYER, WALKABLE_TILES
from levels.first_level import FORK, GAUNTLET

SEEDS = range(20)

BOSS_RUN = [
    {"id": "entrance", "type": "entrance", "parents": [], "children": ["corridor"]},
    {"id": "corridor", "type": "corridor_ew", "parents": ["entrance"], "children": ["boss"]},
    {"id": "boss", "type": "boss_room", "parents": ["corridor"], "children": []},
]


def graph_from(descriptions, name: str = "test") -> RoomNodeGraph:
    return RoomNodeGraph.from_descriptions(descriptions, ROOM_NODE_TYPES, name=name)


def joining_doorways(
    parent: PlacedRoom, child: PlacedRoom
) -> Optional[Tuple[PlacedDoorway, PlacedDoorway]]:
    """The connected doorway pair that joins two rooms, if any."""
    for parent_doorway in parent.connected_doorways():
        target = parent_doorway.position + parent_doorway.orientation.step()
        for child_doorway in child.connected_doorways():
            if (
                child_doorway.orientation == parent_doorway.orientation.opposite()
                and child_doorway.position == target
            ):
                return parent_doorway, child_doorway
    return None


def assert_valid_layout(graph: RoomNodeGraph, rooms: PlacedRoomSet, padding: int = 0) -> None:
    assert len(rooms) == len(graph)

    for node in graph:
        room = rooms.room_for_node(node.index)
        assert room.template.room_node_type == node.room_node_type or (
            node.room_node_type.is_corridor_any and room.template.room_node_type.is_corridor
        )
        # One connected doorway per graph edge
        assert len(room.connected_doorways()) == len(node.parents) + len(node.children)
        for child in node.children:
            assert joining_doorways(room, rooms.room_for_node(child)) is not None, (
                f"{node.label} is not joined to {graph.node(child).label}"
            )

    for a, b in itertools.combinations(rooms, 2):
        related = a.node.index in b.node.parents or b.node.index in a.node.parents
        assert not a.bounds.overlaps(b.bounds, 0 if related else padding), (a, b)


def get_walkable_tiles(dungeon_map: np.ndarray) -> Set[Tuple[int, int]]:
    rows, cols = dungeon_map.shape
    return {
        (row, col)
        for row in range(rows)
        for col in range(cols)
        if dungeon_map[row, col] in WALKABLE_TILES
    }


def flood_fill_from(start: Tuple[int, int], walkable_tiles: Set[Tuple[int, int]]) -> Set[Tuple[int, int]]:
    """BFS over 4-connected walkable tiles."""
    visited: Set[Tuple[int, int]] = {start}
    queue: Deque[Tuple[int, int]] = deque([start])

    while queue:
        row, col = queue.popleft()
        for neighbor in ((row - 1, col), (row + 1, col), (row, col - 1), (row, col + 1)):
            if neighbor in walkable_tiles and neighbor not in visited:
                visited.add(neighbor)
                queue.append(neighbor)

    return visited


class TestBossRun:
    """entrance -> east/west corridor -> boss room."""

    def test_three_rooms_joined_in_a_line(self):
        graph = graph_from(BOSS_RUN)
        rooms = generate_layout(graph, default_library(), LayoutConfig(seed=7))

        assert len(rooms) == 3
        entrance = rooms.room_named("entrance")
        corridor = rooms.room_named("corridor")
        boss = rooms.room_named("boss")

        assert entrance.template.name == "entrance"
        assert corridor.template.name == "corridor-ew"
        assert boss.template.name == "boss"

        parent_end, child_end = joining_doorways(entrance, corridor)
        assert parent_end.orientation in (Direction.EAST, Direction.WEST)
        assert child_end.orientation == parent_end.orientation.opposite()
        assert joining_doorways(corridor, boss) is not None

    def test_entrance_is_at_the_origin(self):
        rooms = generate_layout(graph_from(BOSS_RUN), default_library(), LayoutConfig(seed=1))
        assert rooms.entrance.lower_bounds == Position(0, 0)
        assert rooms.entrance.parent_index is None

    def test_parent_index(self):
        graph = graph_from(BOSS_RUN)
        rooms = generate_layout(graph, default_library(), LayoutConfig(seed=3))
        assert rooms.room_named("boss").parent_index == graph.node_named("corridor").index

    def test_unused_doorways_are_unconnected(self):
        rooms = generate_layout(graph_from(BOSS_RUN), default_library(), LayoutConfig(seed=2))
        entrance = rooms.room_named("entrance")
        assert len(entrance.doorways) == 4
        assert len(entrance.connected_doorways()) == 1

    def test_stitching_locks_the_boss_door(self):
        rooms = generate_layout(graph_from(BOSS_RUN), default_library(), LayoutConfig(seed=5))
        stitch_rooms(rooms)

        boss = rooms.room_named("boss")
        assert len(boss.doors) == 1
        assert boss.doors[0].is_locked
        assert boss.doors[0].is_boss_room_door
        assert rooms.room_named("corridor").doors == []
        (entrance_door,) = rooms.room_named("entrance").doors
        assert not entrance_door.is_locked

    def test_single_doorway_templates(self):
        """With one way to join each pair of rooms the layout is fully determined."""
        library = RoomTemplateLibrary(
            [
                RoomTemplate.from_ascii(
                    "east-only",
                    ROOM_NODE_TYPES.entrance,
                    ["1---2", "[...]", "[...e", "[...E", "3___4"],
                ),
                RoomTemplate.from_ascii(
                    "tunnel",
                    ROOM_NODE_TYPES.corridor_ew,
                    ["-------", "w.....e", "W.....E", "_______"],
                    door=None,
                ),
                RoomTemplate.from_ascii(
                    "west-only",
                    ROOM_NODE_TYPES.boss_room,
                    ["1---2", "w...]", "W...]", "[...]", "3___4"],
                ),
            ]
        )
        rooms = generate_layout(graph_from(BOSS_RUN), library, LayoutConfig(seed=0))
        stitch_rooms(rooms)

        entrance = rooms.room_named("entrance")
        corridor = rooms.room_named("corridor")
        boss = rooms.room_named("boss")
        assert len(rooms) == 3
        assert entrance.lower_bounds == Position(0, 0)
        assert corridor.lower_bounds == Position(1, 5)
        assert boss.lower_bounds == Position(1, 12)

        parent_end, child_end = joining_doorways(entrance, corridor)
        assert (parent_end.orientation, child_end.orientation) == (Direction.EAST, Direction.WEST)
        parent_end, child_end = joining_doorways(corridor, boss)
        assert (parent_end.orientation, child_end.orientation) == (Direction.EAST, Direction.WEST)

        (door,) = boss.doors
        assert door.is_locked

    @pytest.mark.parametrize("seed", SEEDS)
    def test_valid_for_any_seed(self, seed: int):
        graph = graph_from(BOSS_RUN)
        assert_valid_layout(graph, generate_layout(graph, default_library(), LayoutConfig(seed=seed)))


class TestLayoutProperties:
    @pytest.mark.parametrize("seed", SEEDS)
    @pytest.mark.parametrize("descriptions", [FORK, GAUNTLET], ids=["fork", "gauntlet"])
    def test_layout_is_valid(self, descriptions, seed: int):
        graph = graph_from(descriptions)
        rooms = generate_layout(graph, default_library(), LayoutConfig(seed=seed))
        assert_valid_layout(graph, rooms)

    @pytest.mark.parametrize("seed", range(10))
    def test_padding_between_unrelated_rooms(self, seed: int):
        graph = graph_from(FORK)
        rooms = generate_layout(graph, default_library(), LayoutConfig(seed=seed, padding=2))
        assert_valid_layout(graph, rooms, padding=2)

    def test_generic_corridor_matches_doorway(self):
        graph = graph_from(FORK)
        rooms = generate_layout(graph, default_library(), LayoutConfig(seed=11))
        for room in rooms:
            if not room.room_node_type.is_corridor:
                continue
            orientations = {d.orientation for d in room.connected_doorways()}
            if room.template.room_node_type.is_corridor_ns:
                assert orientations == {Direction.NORTH, Direction.SOUTH}
            else:
                assert orientations == {Direction.EAST, Direction.WEST}

    def test_rooms_are_ordered_by_node(self):
        graph = graph_from(GAUNTLET)
        rooms = generate_layout(graph, default_library(), LayoutConfig(seed=4))
        assert [room.node.index for room in rooms] == list(range(len(graph)))

    def test_room_at_tile(self):
        rooms = generate_layout(graph_from(BOSS_RUN), default_library(), LayoutConfig(seed=4))
        assert rooms.room_at_tile(Position(1, 1)) is rooms.entrance
        assert rooms.room_at_tile(Position(500, 500)) is None


class TestDeterminism:
    @pytest.mark.parametrize("descriptions", [FORK, GAUNTLET], ids=["fork", "gauntlet"])
    def test_same_seed_same_layout(self, descriptions):
        first = generate_layout(graph_from(descriptions), default_library(), LayoutConfig(seed=42))
        second = generate_layout(graph_from(descriptions), default_library(), LayoutConfig(seed=42))
        assert first.signature() == second.signature()

    def test_seeds_give_variety(self):
        graph = graph_from(FORK)
        signatures = {
            generate_layout(graph, default_library(), LayoutConfig(seed=seed)).signature()
            for seed in SEEDS
        }
        assert len(signatures) > 1

    def test_first_fit_needs_no_seed(self):
        config = LayoutConfig(policy=CandidatePolicy.FIRST_FIT)
        first = generate_layout(graph_from(GAUNTLET), default_library(), config)
        second = generate_layout(graph_from(GAUNTLET), default_library(), config)
        assert first.signature() == second.signature()

    def test_templates_are_not_mutated(self):
        before = [(t.name, t.doorways, t.tile_layers[GROUND_LAYER].tiles.copy()) for t in ROOM_TEMPLATES]
        rooms = generate_layout(graph_from(FORK), default_library(), LayoutConfig(seed=9))
        stitch_rooms(rooms)
        for (name, doorways, tiles), template in zip(before, ROOM_TEMPLATES):
            assert template.doorways == doorways, name
            assert np.array_equal(template.tile_layers[GROUND_LAYER].tiles, tiles), name


class TestMultipleParents:
    """A node with two parents must line up with a doorway of each."""

    SQUARE = [
        "1-nN-2",
        "[....]",
        "w.*..e",
        "W....E",
        "[....]",
        "3_sS_4",
    ]

    def library(self) -> RoomTemplateLibrary:
        return RoomTemplateLibrary(
            [
                RoomTemplate.from_ascii("square-entrance", ROOM_NODE_TYPES.entrance, self.SQUARE),
                RoomTemplate.from_ascii("square", ROOM_NODE_TYPES["room"], self.SQUARE),
            ]
        )

    def graph(self) -> RoomNodeGraph:
        return graph_from(
            [
                {"id": "entrance", "type": "entrance", "parents": [], "children": ["a", "b"]},
                {"id": "a", "type": "room", "parents": ["entrance"], "children": ["join"]},
                {"id": "b", "type": "room", "parents": ["entrance"], "children": ["join"]},
                {"id": "join", "type": "room", "parents": ["a", "b"], "children": []},
            ]
        )

    @pytest.mark.parametrize("policy", list(CandidatePolicy), ids=lambda p: p.name)
    def test_join_touches_both_parents(self, policy: CandidatePolicy):
        graph = self.graph()
        rooms = generate_layout(graph, self.library(), LayoutConfig(seed=0, policy=policy))
        assert_valid_layout(graph, rooms)

        join = rooms.room_named("join")
        assert joining_doorways(rooms.room_named("a"), join) is not None
        assert joining_doorways(rooms.room_named("b"), join) is not None
        assert len(join.connected_doorways()) == 2


class TestFailures:
    def test_too_many_exits_exhausts_attempts(self):
        """The entrance has four doorways; five corridors can never fit."""
        descriptions = [
            {"id": "entrance", "type": "entrance", "parents": [], "children": [f"c{i}" for i in range(5)]}
        ]
        for i in range(5):
            descriptions.append(
                {"id": f"c{i}", "type": "corridor", "parents": ["entrance"], "children": [f"r{i}"]}
            )
            descriptions.append({"id": f"r{i}", "type": "small_room", "parents": [f"c{i}"], "children": []})

        with pytest.raises(ExhaustedAttempts) as exc_info:
            generate_layout(graph_from(descriptions), default_library(), LayoutConfig(seed=0, max_attempts=3))
        assert exc_info.value.attempts == 3

    def test_step_budget_abandons_attempts(self):
        config = LayoutConfig(seed=0, max_attempts=2, max_search_steps=1)
        with pytest.raises(ExhaustedAttempts):
            generate_layout(graph_from(BOSS_RUN), default_library(), config)

    def test_missing_template_for_type(self):
        library = RoomTemplateLibrary(t for t in ROOM_TEMPLATES if not t.room_node_type.is_boss_room)
        with pytest.raises(MissingTemplateForType) as exc_info:
            generate_layout(graph_from(BOSS_RUN), library, LayoutConfig(seed=0))
        assert exc_info.value.room_node_type == ROOM_NODE_TYPES.boss_room

    def test_missing_corridor_template(self):
        library = RoomTemplateLibrary(t for t in ROOM_TEMPLATES if not t.room_node_type.is_corridor_ew)
        with pytest.raises(MissingTemplateForType):
            generate_layout(graph_from(BOSS_RUN), library, LayoutConfig(seed=0))

    def test_no_entrance_template(self):
        library = RoomTemplateLibrary(t for t in ROOM_TEMPLATES if not t.room_node_type.is_entrance)
        with pytest.raises(NoEntranceTemplate):
            generate_layout(graph_from(BOSS_RUN), library, LayoutConfig(seed=0))

    def test_malformed_graph(self):
        graph = graph_from(BOSS_RUN)
        graph.add_node(ROOM_NODE_TYPES["room"])
        with pytest.raises(MalformedGraph):
            generate_layout(graph, default_library(), LayoutConfig(seed=0))

    def test_errors_share_a_base_class(self):
        for error in (ExhaustedAttempts, MalformedGraph, MissingTemplateForType, NoEntranceTemplate):
            assert issubclass(error, LayoutError)

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_attempts": 0}, {"padding": -1}, {"max_search_steps": 0}],
    )
    def test_bad_config(self, kwargs):
        with pytest.raises(ValueError):
            LayoutConfig(**kwargs)


class TestComposedMap:
    def test_origin_and_shape(self):
        rooms = generate_layout(graph_from(GAUNTLET), default_library(), LayoutConfig(seed=8))
        dungeon_map, origin = compose_layer(rooms)
        bounds = rooms.bounds()
        assert origin == bounds.lower
        assert dungeon_map.shape == (bounds.height, bounds.width)

    def test_rooms_are_pasted_at_their_offset(self):
        rooms = generate_layout(graph_from(BOSS_RUN), default_library(), LayoutConfig(seed=8))
        dungeon_map, origin = compose_layer(rooms)
        for room in rooms:
            tiles = room.template.tile_layers[GROUND_LAYER].tiles
            top = room.lower_bounds.row - origin.row
            left = room.lower_bounds.column - origin.column
            rows, cols = tiles.shape
            assert np.array_equal(dungeon_map[top : top + rows, left : left + cols], tiles)

    @pytest.mark.parametrize("seed", SEEDS)
    @pytest.mark.parametrize("descriptions", [FORK, GAUNTLET], ids=["fork", "gauntlet"])
    def test_stitched_dungeon_is_connected(self, descriptions, seed: int):
        """Every walkable tile is reachable, and no sealed doorway opens into the void."""
        rooms = generate_layout(graph_from(descriptions), default_library(), LayoutConfig(seed=seed, padding=1))
        stitch_rooms(rooms)
        dungeon_map, _ = compose_layer(rooms)

        walkable_tiles = get_walkable_tiles(dungeon_map)
        assert walkable_tiles
        reachable_tiles = flood_fill_from(next(iter(walkable_tiles)), walkable_tiles)
        unreachable = walkable_tiles - reachable_tiles
        assert not unreachable, f"{len(unreachable)} of {len(walkable_tiles)} walkable tiles unreachable"

        rows, cols = dungeon_map.shape
        for row, col in walkable_tiles:
            assert 0 < row < rows - 1 and 0 < col < cols - 1, "walkable tile on the map edge"
