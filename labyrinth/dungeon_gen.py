"""
Dungeon Layout Algorithm
========================

We lay the level out by walking the room node graph from the entrance and
giving every node a room template and a place on the grid, joining rooms
through their doorways.

1. Validate the graph and check every room node type has a template.
2. Put an entrance template at the origin.
3. Visit the remaining nodes in breadth-first topological order (a node comes
   after all of its parents). For each node:
   a. Pick one of its parent's unused doorways, and a template for the node
      with a doorway on the opposite side (north to south, east to west).
   b. Place the template so that its doorway is the tile right next to the
      parent's doorway.
   c. If it would overlap a room already placed, try the next combination.
   d. If the node has more parents, the room must also line up with an unused
      doorway of each of them.
   e. If nothing fits, undo the previous node and try its next combination.
4. If the whole search fails, or takes too many steps, start over, up to
   max_attempts times.
5. Every doorway not used by a graph edge is left unconnected; stitching
   seals those afterwards.
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional, Set, Tuple, TYPE_CHECKING

import numpy as np

from .errors import ExhaustedAttempts, MissingTemplateForType, NoEntranceTemplate, NoValidPlacement
from .geometry import Bounds, Direction, Position
from .room_node_graph import RoomNode, RoomNodeGraph
from .room_node_types import RoomNodeType
from .room_templates import Doorway, RoomTemplate, RoomTemplateLibrary
from .settings import TILE_SIZE
from .tiles import GROUND_LAYER, TileLayer

if TYPE_CHECKING:
    from .door import Door

logger = logging.getLogger(__name__)


class CandidatePolicy(Enum):
    """Order in which placement candidates are tried."""

    # Library order, parent doorway order: the same layout every time
    FIRST_FIT = auto()
    # Shuffled with the layout's random source, for level variety
    RANDOM = auto()


@dataclass(frozen=True)
class LayoutConfig:
    """
    Knobs for generate_layout().

    max_attempts: full restarts before giving up with ExhaustedAttempts.
    padding: minimum gap, in tiles, between rooms that are not connected.
    seed: seed for the layout's random source. None means unpredictable.
    policy: candidate ordering, see CandidatePolicy.
    max_search_steps: candidates one attempt may try before it is abandoned.
    """

    max_attempts: int = 10
    padding: int = 0
    seed: Optional[int] = None
    policy: CandidatePolicy = CandidatePolicy.RANDOM
    max_search_steps: int = 20000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.padding < 0:
            raise ValueError("padding must not be negative")
        if self.max_search_steps < 1:
            raise ValueError("max_search_steps must be at least 1")


@dataclass(eq=False)
class PlacedDoorway:
    """A template doorway at its final world position."""

    doorway: Doorway
    position: Position
    copy_start: Position
    connected: bool = False
    door: Optional["Door"] = None

    @property
    def orientation(self) -> Direction:
        return self.doorway.orientation


@dataclass(eq=False)
class PlacedRoom:
    """
    A room node realised by a template at a fixed world position.

    offset translates template coordinates into world tile coordinates.
    tile_layers and doors are filled in by stitching; the visited and lit
    flags are maintained at runtime by the dungeon session.
    """

    node: RoomNode
    template: RoomTemplate
    offset: Position
    doorways: List[PlacedDoorway]
    parent_index: Optional[int] = None
    is_previously_visited: bool = False
    is_lit: bool = False
    tile_layers: Dict[str, TileLayer] = field(default_factory=dict)
    doors: List["Door"] = field(default_factory=list)
    is_stitched: bool = False

    @property
    def room_node_type(self) -> RoomNodeType:
        return self.node.room_node_type

    @property
    def bounds(self) -> Bounds:
        return self.template.bounds.translate(self.offset)

    @property
    def lower_bounds(self) -> Position:
        return self.bounds.lower

    @property
    def upper_bounds(self) -> Position:
        return self.bounds.upper

    @property
    def spawn_positions(self) -> List[Position]:
        """Candidate spawn tiles in world coordinates."""
        return [spawn + self.offset for spawn in self.template.spawn_positions]

    def contains_tile(self, position: Position) -> bool:
        return self.bounds.contains(position)

    def world_bounds(self, tile_size: float = TILE_SIZE) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) in world units; right and bottom are exclusive."""
        bounds = self.bounds
        return (
            bounds.lower.column * tile_size,
            bounds.lower.row * tile_size,
            (bounds.upper.column + 1) * tile_size,
            (bounds.upper.row + 1) * tile_size,
        )

    def contains_point(self, x: float, y: float, tile_size: float = TILE_SIZE) -> bool:
        left, top, right, bottom = self.world_bounds(tile_size)
        return left <= x < right and top <= y < bottom

    def layer_index(self, position: Position) -> Tuple[int, int]:
        """Array index into this room's tile layers for a world tile position."""
        local = position - self.offset - self.template.lower_bounds
        return local.row, local.column

    def connected_doorways(self) -> List[PlacedDoorway]:
        return [d for d in self.doorways if d.connected]

    def __repr__(self) -> str:
        return (
            f"PlacedRoom({self.node.label}, '{self.template.name}', "
            f"{self.lower_bounds}..{self.upper_bounds})"
        )


class PlacedRoomSet:
    """A committed layout: one placed room per graph node, ordered by node index."""

    def __init__(self, rooms: List[PlacedRoom], graph_name: str = "") -> None:
        self._rooms: List[PlacedRoom] = sorted(rooms, key=lambda room: room.node.index)
        self.graph_name = graph_name

    def __iter__(self) -> Iterator[PlacedRoom]:
        return iter(self._rooms)

    def __len__(self) -> int:
        return len(self._rooms)

    def room_for_node(self, index: int) -> PlacedRoom:
        for room in self._rooms:
            if room.node.index == index:
                return room
        raise KeyError(f"No room placed for node {index}")

    def room_named(self, name: str) -> PlacedRoom:
        for room in self._rooms:
            if room.node.name == name:
                return room
        raise KeyError(f"No room placed for node '{name}'")

    @property
    def entrance(self) -> PlacedRoom:
        for room in self._rooms:
            if room.room_node_type.is_entrance:
                return room
        raise KeyError("Layout has no entrance room")

    def room_at_tile(self, position: Position) -> Optional[PlacedRoom]:
        for room in self._rooms:
            if room.contains_tile(position):
                return room
        return None

    def bounds(self) -> Bounds:
        """The smallest rectangle holding every room."""
        return Bounds(
            lower=Position(
                row=min(room.lower_bounds.row for room in self._rooms),
                column=min(room.lower_bounds.column for room in self._rooms),
            ),
            upper=Position(
                row=max(room.upper_bounds.row for room in self._rooms),
                column=max(room.upper_bounds.column for room in self._rooms),
            ),
        )

    def signature(self) -> Tuple:
        """
        Hashable description of the layout, room for room and doorway for
        doorway. Two layouts are the same iff their signatures are equal.
        """
        return tuple(
            (
                room.node.index,
                room.template.name,
                room.lower_bounds,
                room.upper_bounds,
                tuple((d.orientation, d.position, d.connected) for d in room.doorways),
            )
            for room in self._rooms
        )


@dataclass(frozen=True)
class _Placement:
    template: RoomTemplate
    offset: Position

    @property
    def bounds(self) -> Bounds:
        return self.template.bounds.translate(self.offset)

    def doorway_position(self, doorway_index: int) -> Position:
        return self.template.doorways[doorway_index].position + self.offset


# (node index, doorway index) pairs for both ends of a graph edge
_Link = Tuple[Tuple[int, int], Tuple[int, int]]


class _LayoutSearch:
    """
    Working state of one layout attempt.

    Nothing here is visible outside generate_layout() until commit().
    """

    def __init__(
        self,
        graph: RoomNodeGraph,
        templates: RoomTemplateLibrary,
        order: List[int],
        config: LayoutConfig,
        rng: random.Random,
    ) -> None:
        self.graph = graph
        self.templates = templates
        self.order = order
        self.config = config
        self.rng = rng
        self.placements: Dict[int, _Placement] = {}
        self.used_doorways: Set[Tuple[int, int]] = set()
        self.steps = 0

    def run(self) -> None:
        """
        Raises:
            NoValidPlacement: if the graph cannot be placed, or the attempt
                runs past its step budget.
        """
        if not self._place(0):
            raise NoValidPlacement("Search exhausted every candidate")

    def _place(self, depth: int) -> bool:
        if depth == len(self.order):
            return True

        node = self.graph.node(self.order[depth])
        for placement, links in self._candidates(node):
            self._apply(node.index, placement, links)
            if self._place(depth + 1):
                return True
            self._undo(node.index, links)
            logger.debug("Backtracking from node %s ('%s')", node.label, placement.template.name)

        return False

    def _apply(self, index: int, placement: _Placement, links: List[_Link]) -> None:
        self.placements[index] = placement
        for parent_end, child_end in links:
            self.used_doorways.add(parent_end)
            self.used_doorways.add(child_end)

    def _undo(self, index: int, links: List[_Link]) -> None:
        del self.placements[index]
        for parent_end, child_end in links:
            self.used_doorways.discard(parent_end)
            self.used_doorways.discard(child_end)

    def _tick(self) -> None:
        self.steps += 1
        if self.steps > self.config.max_search_steps:
            raise NoValidPlacement(f"Search abandoned after {self.config.max_search_steps} steps")

    def _ordered(self, candidates: list) -> list:
        if self.config.policy == CandidatePolicy.RANDOM:
            self.rng.shuffle(candidates)
        return candidates

    def _candidates(self, node: RoomNode) -> Iterator[Tuple[_Placement, List[_Link]]]:
        if not node.parents:
            for template in self._ordered(self.templates.entrance_templates()):
                self._tick()
                # Entrance goes at the origin
                origin = Position(row=0, column=0) - template.lower_bounds
                yield _Placement(template=template, offset=origin), []
            return

        anchor_index = node.parents[0]
        anchor = self.placements[anchor_index]

        combinations: List[Tuple[int, RoomTemplate, int]] = []
        for parent_doorway_index, parent_doorway in enumerate(anchor.template.doorways):
            if (anchor_index, parent_doorway_index) in self.used_doorways:
                continue
            facing = parent_doorway.orientation.opposite()
            for template in self.templates.candidates(node.room_node_type, facing):
                for child_doorway_index in template.doorways_facing(facing):
                    if template.doorways[child_doorway_index].span != parent_doorway.span:
                        continue
                    combinations.append((parent_doorway_index, template, child_doorway_index))

        for parent_doorway_index, template, child_doorway_index in self._ordered(combinations):
            self._tick()
            placement = _Placement(
                template=template,
                offset=_calculate_room_offset(
                    anchor.doorway_position(parent_doorway_index),
                    anchor.template.doorways[parent_doorway_index].orientation,
                    template.doorways[child_doorway_index],
                ),
            )
            if self._would_overlap(node, placement):
                continue

            links: List[_Link] = [
                ((anchor_index, parent_doorway_index), (node.index, child_doorway_index))
            ]
            if not self._link_other_parents(node, placement, links):
                continue
            yield placement, links

    def _would_overlap(self, node: RoomNode, placement: _Placement) -> bool:
        bounds = placement.bounds
        for index, placed in self.placements.items():
            # Rooms we join may touch us at the doorway seam, but not overlap
            padding = 0 if index in node.parents else self.config.padding
            if bounds.overlaps(placed.bounds, padding):
                return True
        return False

    def _link_other_parents(
        self, node: RoomNode, placement: _Placement, links: List[_Link]
    ) -> bool:
        """
        Find a lined-up doorway pair for every parent after the first.

        Appends the pairs to `links` and returns False if any parent has none.
        """
        claimed = {child_end for _, child_end in links}
        for parent_index in node.parents[1:]:
            parent = self.placements[parent_index]
            link = self._find_aligned_doorways(parent_index, parent, node.index, placement, claimed)
            if link is None:
                return False
            links.append(link)
            claimed.add(link[1])
        return True

    def _find_aligned_doorways(
        self,
        parent_index: int,
        parent: _Placement,
        child_index: int,
        child: _Placement,
        claimed: Set[Tuple[int, int]],
    ) -> Optional[_Link]:
        for parent_doorway_index, parent_doorway in enumerate(parent.template.doorways):
            if (parent_index, parent_doorway_index) in self.used_doorways:
                continue
            target = parent.doorway_position(parent_doorway_index) + parent_doorway.orientation.step()
            facing = parent_doorway.orientation.opposite()
            for child_doorway_index in child.template.doorways_facing(facing):
                if (child_index, child_doorway_index) in claimed:
                    continue
                child_doorway = child.template.doorways[child_doorway_index]
                if child_doorway.span != parent_doorway.span:
                    continue
                if child.doorway_position(child_doorway_index) == target:
                    return (parent_index, parent_doorway_index), (child_index, child_doorway_index)
        return None

    def commit(self) -> PlacedRoomSet:
        rooms = []
        for index, placement in self.placements.items():
            node = self.graph.node(index)
            doorways = [
                PlacedDoorway(
                    doorway=doorway,
                    position=doorway.position + placement.offset,
                    copy_start=doorway.copy_start + placement.offset,
                    connected=(index, doorway_index) in self.used_doorways,
                )
                for doorway_index, doorway in enumerate(placement.template.doorways)
            ]
            rooms.append(
                PlacedRoom(
                    node=node,
                    template=placement.template,
                    offset=placement.offset,
                    doorways=doorways,
                    parent_index=node.parents[0] if node.parents else None,
                )
            )
        return PlacedRoomSet(rooms, graph_name=self.graph.name)


def _calculate_room_offset(
    parent_door_position: Position, direction: Direction, child_doorway: Doorway
) -> Position:
    """
    Calculate where a new room goes so its doorway meets an existing one.

    Args:
        parent_door_position: World position of the existing doorway's anchor
        direction: The side of the existing room that doorway is on
        child_doorway: The new room's doorway on the opposite side

    Returns: offset from the new template's coordinates to world coordinates
    """
    target = parent_door_position + direction.step()
    return target - child_doorway.position


def check_templates_cover_graph(graph: RoomNodeGraph, templates: RoomTemplateLibrary) -> None:
    """
    Raises:
        NoEntranceTemplate: if there is no entrance template.
        MissingTemplateForType: for the first node type with no template.
    """
    entrance_templates = templates.entrance_templates()
    if not entrance_templates:
        raise NoEntranceTemplate(graph.entrance().room_node_type)

    for node in graph:
        if not templates.has_template_for(node.room_node_type):
            raise MissingTemplateForType(node.room_node_type)


def generate_layout(
    graph: RoomNodeGraph,
    templates: RoomTemplateLibrary,
    config: LayoutConfig = LayoutConfig(),
    rng: Optional[random.Random] = None,
) -> PlacedRoomSet:
    """
    Lay out every node of `graph` using rooms from `templates`.

    The same graph, templates and seed always give the same layout.
    `rng` overrides the random source built from config.seed; it is used by
    callers that share one random source across several steps.

    Returns:
        The committed layout.

    Raises:
        MalformedGraph: the graph is not a valid level graph.
        NoEntranceTemplate: the library has no entrance template.
        MissingTemplateForType: some node type has no template.
        ExhaustedAttempts: no attempt produced a layout.
    """
    order = graph.validate()
    check_templates_cover_graph(graph, templates)

    if rng is None:
        rng = random.Random(config.seed)

    for attempt in range(1, config.max_attempts + 1):
        search = _LayoutSearch(graph, templates, order, config, rng)
        try:
            search.run()
        except NoValidPlacement as e:
            logger.info(
                "Layout attempt %d/%d for graph '%s' failed: %s",
                attempt,
                config.max_attempts,
                graph.name,
                e,
            )
            continue

        logger.debug(
            "Laid out graph '%s' in attempt %d after %d steps", graph.name, attempt, search.steps
        )
        return search.commit()

    raise ExhaustedAttempts(config.max_attempts)


def compose_layer(
    rooms: PlacedRoomSet, layer_name: str = GROUND_LAYER
) -> Tuple[np.ndarray, Position]:
    """
    Paste one tile layer of every room into a single world map.

    Rooms that have been stitched contribute their own (sealed) layer, others
    their template's. Tile 0 is treated as empty and never overwrites.

    Returns: (map, origin) where origin is the world position of map[0, 0]
    """
    bounds = rooms.bounds()
    canvas = np.zeros((bounds.height, bounds.width), dtype=int)

    for room in rooms:
        layer = room.tile_layers.get(layer_name) or room.template.tile_layers.get(layer_name)
        if layer is None:
            continue
        top = room.lower_bounds.row - bounds.lower.row
        left = room.lower_bounds.column - bounds.lower.column
        rows, cols = layer.shape
        target = canvas[top : top + rows, left : left + cols]
        mask = layer.tiles != 0
        target[mask] = layer.tiles[mask]

    return canvas, bounds.lower
