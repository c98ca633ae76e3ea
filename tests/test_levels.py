"""Tests for dungeon levels and the level registry."""

import logging

import pytest

from labyrinth.dungeon_gen import LayoutConfig
from labyrinth.errors import ExhaustedAttempts
from labyrinth.event_system import Event, EventBus
from labyrinth.levels import DungeonLevel, create_dungeon
from labyrinth.room_library import ROOM_NODE_TYPES, ROOM_TEMPLATES, default_library
from labyrinth.room_node_graph import RoomNodeGraph
from labyrinth.room_templates import RoomTemplateLibrary
from labyrinth.world import Dungeon
from levels import register_level, get_level, list_levels

BOSS_RUN = [
    {"id": "entrance", "type": "entrance", "parents": [], "children": ["corridor"]},
    {"id": "corridor", "type": "corridor", "parents": ["entrance"], "children": ["boss"]},
    {"id": "boss", "type": "boss_room", "parents": ["corridor"], "children": []},
]


def boss_run_level(templates=None) -> DungeonLevel:
    return DungeonLevel(
        name="boss_run",
        room_templates=templates if templates is not None else default_library(),
        room_node_graphs=[RoomNodeGraph.from_descriptions(BOSS_RUN, ROOM_NODE_TYPES, name="boss-run")],
    )


def without(predicate) -> RoomTemplateLibrary:
    return RoomTemplateLibrary(t for t in ROOM_TEMPLATES if not predicate(t.room_node_type))


class TestValidate:
    def test_complete_level_has_no_issues(self):
        assert boss_run_level().validate() == []

    def test_missing_corridors(self):
        issues = boss_run_level(without(lambda t: t.is_corridor)).validate()
        assert any("E/W corridor" in issue for issue in issues)
        assert any("N/S corridor" in issue for issue in issues)

    def test_missing_entrance(self):
        issues = boss_run_level(without(lambda t: t.is_entrance)).validate()
        assert any("no entrance template" in issue for issue in issues)

    def test_missing_room_type(self):
        issues = boss_run_level(without(lambda t: t.is_boss_room)).validate()
        assert issues == ["Level 'boss_run': no room template 'boss_room' for node graph 'boss-run'"]

    def test_empty_level(self):
        issues = DungeonLevel(name="", room_templates=RoomTemplateLibrary()).validate()
        assert "Level name is empty" in issues
        assert any("no room templates" in issue for issue in issues)
        assert any("no room node graphs" in issue for issue in issues)

    def test_issues_are_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="labyrinth.levels"):
            boss_run_level(without(lambda t: t.is_boss_room)).validate()
        assert "boss_room" in caplog.text


class TestCreateDungeon:
    def test_returns_unstarted_stitched_dungeon(self):
        dungeon = create_dungeon(boss_run_level(), LayoutConfig(seed=1))
        assert isinstance(dungeon, Dungeon)
        assert dungeon.level_name == "boss_run"
        assert dungeon.current_room is None
        assert all(room.is_stitched for room in dungeon.rooms)
        ((_, door),) = dungeon.boss_room_doors()
        assert door.is_locked

    def test_uses_given_event_bus(self):
        bus = EventBus()
        received = []
        bus.subscribe(Event.LEVEL_START, received.append)
        dungeon = create_dungeon(boss_run_level(), LayoutConfig(seed=1), event_bus=bus)
        dungeon.start()
        assert len(received) == 1

    def test_same_seed_same_dungeon(self):
        import levels.first_level

        level = levels.first_level.create_level()
        first = create_dungeon(level, LayoutConfig(seed=21))
        second = create_dungeon(level, LayoutConfig(seed=21))
        assert first.rooms.graph_name == second.rooms.graph_name
        assert first.rooms.signature() == second.rooms.signature()

    def test_level_without_graphs_raises(self):
        level = DungeonLevel(name="empty", room_templates=default_library())
        with pytest.raises(ValueError, match="no room node graphs"):
            create_dungeon(level)

    def test_impossible_level_exhausts_attempts(self):
        config = LayoutConfig(seed=0, max_attempts=2, max_search_steps=1)
        with pytest.raises(ExhaustedAttempts) as exc_info:
            create_dungeon(boss_run_level(), config)
        assert exc_info.value.attempts == 2


class TestRegistry:
    def test_level_registry(self):
        """Should be able to register and retrieve levels."""
        # Clean registry for test isolation
        from levels import _LEVELS

        original_levels = _LEVELS.copy()
        _LEVELS.clear()

        try:
            register_level("test", boss_run_level)
            assert get_level("test") is boss_run_level
            assert "test" in list_levels()
        finally:
            # Restore original registry
            _LEVELS.clear()
            _LEVELS.update(original_levels)

    def test_get_unknown_level_raises(self):
        """Getting an unknown level should raise ValueError."""
        with pytest.raises(ValueError, match="Unknown level"):
            get_level("nonexistent_level_name")

    def test_first_level(self):
        """first_level should validate and build for a range of seeds."""
        # Import to register the level
        import levels.first_level  # noqa: F401

        level = get_level("first_level")()
        assert level.validate() == []
        assert {graph.name for graph in level.room_node_graphs} == {"fork", "gauntlet"}

        for seed in range(10):
            dungeon = create_dungeon(level, LayoutConfig(seed=seed, padding=1))
            assert len(dungeon.rooms) == 9
            start = dungeon.start()
            assert dungeon.get_room_at(*start) is dungeon.rooms.entrance
