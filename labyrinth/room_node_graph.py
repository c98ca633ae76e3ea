"""
Room node graphs: the designer-authored shape of a level.

Nodes live in one arena and refer to each other by integer index, so the
parent/child relation can be walked (and checked for cycles) without any
string lookups. Authoring tools still hand us string ids with parent and child
back-references; from_descriptions() resolves those once, up front.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from .errors import MalformedGraph
from .room_node_types import RoomNodeType, RoomNodeTypeList


@dataclass
class RoomNode:
    """One role in the level, connected to the rooms before and after it."""

    index: int
    room_node_type: Optional[RoomNodeType]
    name: Optional[str] = None
    parents: List[int] = field(default_factory=list)
    children: List[int] = field(default_factory=list)

    @property
    def label(self) -> str:
        """Human readable name for logs and error messages."""
        return self.name if self.name is not None else f"#{self.index}"


# A node as exported by the authoring tool
NodeDescription = Mapping[str, Any]


class RoomNodeGraph:
    """A directed acyclic graph of room nodes, rooted at the entrance."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._nodes: List[RoomNode] = []

    def add_node(self, room_node_type: Optional[RoomNodeType], name: Optional[str] = None) -> int:
        """Add a node and return its index."""
        index = len(self._nodes)
        self._nodes.append(RoomNode(index=index, room_node_type=room_node_type, name=name))
        return index

    def connect(self, parent: int, child: int) -> bool:
        """
        Link parent -> child.

        Returns True if the link was added, False if it was refused: self links,
        duplicate links, links into the entrance and links that would close a
        cycle are refused.
        """
        parent_node = self.node(parent)
        child_node = self.node(child)

        if parent == child or child in parent_node.children:
            return False
        if child_node.room_node_type is not None and child_node.room_node_type.is_entrance:
            return False
        if self._reaches(child, parent):
            return False

        parent_node.children.append(child)
        child_node.parents.append(parent)
        return True

    def _reaches(self, start: int, target: int) -> bool:
        stack = [start]
        seen = {start}
        while stack:
            current = stack.pop()
            if current == target:
                return True
            for child in self._nodes[current].children:
                if child not in seen:
                    seen.add(child)
                    stack.append(child)
        return False

    def node(self, index: int) -> RoomNode:
        if not 0 <= index < len(self._nodes):
            raise IndexError(f"No room node {index} in graph '{self.name}'")
        return self._nodes[index]

    def node_named(self, name: str) -> RoomNode:
        for node in self._nodes:
            if node.name == name:
                return node
        raise KeyError(f"No room node named '{name}' in graph '{self.name}'")

    def __iter__(self) -> Iterator[RoomNode]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def entrance(self) -> RoomNode:
        entrances = [
            node
            for node in self._nodes
            if node.room_node_type is not None and node.room_node_type.is_entrance
        ]
        if len(entrances) != 1:
            raise MalformedGraph(
                f"Graph '{self.name}' has {len(entrances)} entrance nodes, expected exactly one"
            )
        return entrances[0]

    @classmethod
    def from_descriptions(
        cls,
        descriptions: Iterable[NodeDescription],
        room_node_types: Optional[RoomNodeTypeList] = None,
        name: str = "",
    ) -> "RoomNodeGraph":
        """
        Build a graph from the authoring format.

        Each description has an "id", a "type" (a RoomNodeType, a type name
        looked up in `room_node_types`, or None), and "parents"/"children"
        lists of ids. Both directions of every link must be present.

        Raises:
            MalformedGraph: duplicate or unknown ids, repeated links, or one-sided links.
        """
        graph = cls(name=name)
        descriptions = list(descriptions)
        index_by_id: Dict[str, int] = {}

        for description in descriptions:
            node_id = str(description["id"])
            if node_id in index_by_id:
                raise MalformedGraph(f"Duplicate room node id '{node_id}'")
            index_by_id[node_id] = graph.add_node(
                _resolve_type(description.get("type"), room_node_types), name=node_id
            )

        def resolve(node_id: str, referenced_from: str) -> int:
            if node_id not in index_by_id:
                raise MalformedGraph(
                    f"Room node '{referenced_from}' refers to unknown node '{node_id}'"
                )
            return index_by_id[node_id]

        def resolve_links(description: NodeDescription, node_id: str, key: str) -> List[int]:
            links = [str(link) for link in description.get(key, [])]
            for link in links:
                if links.count(link) > 1:
                    raise MalformedGraph(
                        f"Room node '{node_id}' has duplicate link to '{link}' in its {key}"
                    )
            return [resolve(link, node_id) for link in links]

        for description in descriptions:
            node_id = str(description["id"])
            node = graph.node(index_by_id[node_id])
            node.parents = resolve_links(description, node_id, "parents")
            node.children = resolve_links(description, node_id, "children")

        graph.check_symmetric()
        return graph

    def check_symmetric(self) -> None:
        """Raise MalformedGraph unless every link is recorded on both ends."""
        for node in self._nodes:
            for child in node.children:
                if node.index not in self.node(child).parents:
                    raise MalformedGraph(
                        f"Room node {node.label} lists {self.node(child).label} as a child, "
                        f"but not the other way round"
                    )
            for parent in node.parents:
                if node.index not in self.node(parent).children:
                    raise MalformedGraph(
                        f"Room node {node.label} lists {self.node(parent).label} as a parent, "
                        f"but not the other way round"
                    )

    def topological_order(self) -> List[int]:
        """
        Breadth-first topological order (Kahn's algorithm).

        A node appears only after all of its parents.

        Raises:
            MalformedGraph: if the graph has a cycle.
        """
        in_degree = [len(node.parents) for node in self._nodes]
        queue: Deque[int] = deque(i for i, degree in enumerate(in_degree) if degree == 0)
        order: List[int] = []

        while queue:
            current = queue.popleft()
            order.append(current)
            for child in self._nodes[current].children:
                in_degree[child] -= 1
                if in_degree[child] == 0:
                    queue.append(child)

        if len(order) != len(self._nodes):
            raise MalformedGraph(f"Graph '{self.name}' contains a cycle")
        return order

    def validate(self) -> List[int]:
        """
        Check the graph can be laid out, and return its placement order.

        Raises:
            MalformedGraph: empty graph, untyped nodes, missing or duplicated
                entrance, one-sided links, cycles, nodes unreachable from the
                entrance, or corridors without exactly one parent and one child.
        """
        if not self._nodes:
            raise MalformedGraph(f"Graph '{self.name}' has no room nodes")

        for node in self._nodes:
            if node.room_node_type is None or node.room_node_type.is_none:
                raise MalformedGraph(f"Room node {node.label} has no room node type")

        entrance = self.entrance()
        if entrance.parents:
            raise MalformedGraph(f"Entrance {entrance.label} must not have parents")

        self.check_symmetric()
        order = self.topological_order()

        if order[0] != entrance.index or not self._all_reachable_from(entrance.index):
            raise MalformedGraph(f"Graph '{self.name}' has rooms unreachable from the entrance")

        for node in self._nodes:
            if node.room_node_type.is_corridor and (
                len(node.parents) != 1 or len(node.children) != 1
            ):
                raise MalformedGraph(
                    f"Corridor {node.label} must have exactly one parent and one child"
                )

        return order

    def _all_reachable_from(self, start: int) -> bool:
        stack = [start]
        seen = {start}
        while stack:
            for child in self._nodes[stack.pop()].children:
                if child not in seen:
                    seen.add(child)
                    stack.append(child)
        return len(seen) == len(self._nodes)


def _resolve_type(
    value: Union[RoomNodeType, str, None], room_node_types: Optional[RoomNodeTypeList]
) -> Optional[RoomNodeType]:
    if value is None or isinstance(value, RoomNodeType):
        return value
    if room_node_types is None:
        raise MalformedGraph(f"Room node type '{value}' given by name but no type list supplied")
    if value not in room_node_types:
        raise MalformedGraph(f"Unknown room node type '{value}'")
    return room_node_types.get(value)
