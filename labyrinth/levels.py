"""
Dungeon levels: the templates and graphs a level is built from.

A level lists several room node graphs; each layout attempt picks one of them
at random, so the same level can come out with different shapes.
"""

import logging
import random
from dataclasses import dataclass, field, replace
from typing import List, Optional

from .dungeon_gen import LayoutConfig, generate_layout
from .errors import ExhaustedAttempts
from .event_system import EventBus
from .room_node_graph import RoomNodeGraph
from .room_templates import RoomTemplateLibrary
from .settings import TILE_SIZE
from .stitching import stitch_rooms
from .world import Dungeon

logger = logging.getLogger(__name__)


@dataclass
class DungeonLevel:
    name: str
    room_templates: RoomTemplateLibrary
    room_node_graphs: List[RoomNodeGraph] = field(default_factory=list)

    def validate(self) -> List[str]:
        """
        Check the level is complete. Returns a list of problems, each also
        logged as a warning; an empty list means the level looks buildable.
        """
        issues: List[str] = []

        if not self.name:
            issues.append("Level name is empty")
        if not len(self.room_templates):
            issues.append(f"Level '{self.name}' has no room templates")
        if not self.room_node_graphs:
            issues.append(f"Level '{self.name}' has no room node graphs")

        templates = list(self.room_templates)
        if templates:
            if not any(t.room_node_type.is_corridor_ew for t in templates):
                issues.append(f"Level '{self.name}': no E/W corridor template")
            if not any(t.room_node_type.is_corridor_ns for t in templates):
                issues.append(f"Level '{self.name}': no N/S corridor template")
            if not any(t.room_node_type.is_entrance for t in templates):
                issues.append(f"Level '{self.name}': no entrance template")

        for graph in self.room_node_graphs:
            for node in graph:
                room_node_type = node.room_node_type
                # Corridors and entrances are checked above
                if room_node_type is None or room_node_type.is_corridor_or_entrance or room_node_type.is_none:
                    continue
                if not self.room_templates.has_template_for(room_node_type):
                    issues.append(
                        f"Level '{self.name}': no room template '{room_node_type.name}' "
                        f"for node graph '{graph.name}'"
                    )

        for issue in issues:
            logger.warning(issue)
        return issues


def create_dungeon(
    level: DungeonLevel,
    config: LayoutConfig = LayoutConfig(),
    event_bus: Optional[EventBus] = None,
    tile_size: float = TILE_SIZE,
) -> Dungeon:
    """
    Build a playable dungeon for a level.

    Every attempt picks one of the level's graphs at random and lays it out;
    the first success is stitched and returned as a Dungeon, not yet started
    so listeners can subscribe before Dungeon.start().

    Raises:
        ValueError: if the level has no graphs.
        MalformedGraph, MissingTemplateForType: the chosen graph can never work.
        ExhaustedAttempts: no attempt produced a layout.
    """
    if not level.room_node_graphs:
        raise ValueError(f"Level '{level.name}' has no room node graphs")

    rng = random.Random(config.seed)
    single_attempt = replace(config, max_attempts=1)

    for attempt in range(1, config.max_attempts + 1):
        graph = rng.choice(level.room_node_graphs)
        try:
            rooms = generate_layout(graph, level.room_templates, single_attempt, rng=rng)
        except ExhaustedAttempts:
            logger.info(
                "Level '%s' attempt %d/%d with graph '%s' failed",
                level.name,
                attempt,
                config.max_attempts,
                graph.name,
            )
            continue

        stitch_rooms(rooms, tile_size)
        return Dungeon(rooms, event_bus=event_bus, tile_size=tile_size, level_name=level.name)

    raise ExhaustedAttempts(config.max_attempts)
