"""
DAG container for the layout pipeline.

Provides the node and link records the layout annotates, plus the traversal
orders the layering operators rely on.
"""

from collections import deque
from typing import Any, Dict, Hashable, Iterable, Iterator, List, Optional, Tuple

import networkx as nx

Point = Tuple[float, float]


class DagNode:
    """A node of the DAG, annotated in place by the layout."""

    def __init__(self, id: Hashable, data: Any = None):
        self.id = id
        self.data = data
        self.children: List["DagNode"] = []
        self.parents: List["DagNode"] = []
        self.layer: Optional[int] = None
        self.x: Optional[float] = None
        self.y: Optional[float] = None

    def __repr__(self) -> str:
        return f"DagNode({self.id!r})"


class DagLink:
    """A parent to child edge and the waypoints it should be drawn along."""

    def __init__(self, source: DagNode, target: DagNode):
        self.source = source
        self.target = target
        self.points: List[Point] = []

    def __repr__(self) -> str:
        return f"DagLink({self.source.id!r} -> {self.target.id!r})"


class Dag:
    """Directed acyclic graph of DagNodes kept in insertion order."""

    ORDERS = ("before", "after", "depth", "breadth")

    def __init__(self):
        self._nodes: Dict[Hashable, DagNode] = {}
        self._links: Dict[Tuple[Hashable, Hashable], DagLink] = {}

    def add_node(self, id: Hashable, data: Any = None) -> DagNode:
        """Add a node, or return the existing node with this id."""
        node = self._nodes.get(id)
        if node is None:
            node = DagNode(id, data)
            self._nodes[id] = node
        return node

    def add_edge(self, source: Hashable, target: Hashable) -> DagLink:
        """Add a directed edge from source to target, creating nodes as needed."""
        key = (source, target)
        if key in self._links:
            return self._links[key]
        parent = self.add_node(source)
        child = self.add_node(target)
        parent.children.append(child)
        child.parents.append(parent)
        link = DagLink(parent, child)
        self._links[key] = link
        return link

    def __iter__(self) -> Iterator[DagNode]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, id: Hashable) -> bool:
        return id in self._nodes

    def node(self, id: Hashable) -> DagNode:
        """Look up a node by id."""
        return self._nodes[id]

    def nodes(self) -> List[DagNode]:
        """Return all nodes in insertion order."""
        return list(self._nodes.values())

    def roots(self) -> List[DagNode]:
        """Get nodes with no parents."""
        return [node for node in self if not node.parents]

    def leaves(self) -> List[DagNode]:
        """Get nodes with no children."""
        return [node for node in self if not node.children]

    def links(self) -> List[DagLink]:
        """Return all links, grouped by source in node order."""
        return [
            self._links[(node.id, child.id)] for node in self for child in node.children
        ]

    def link(self, source: Hashable, target: Hashable) -> DagLink:
        """Look up the link from source to target."""
        return self._links[(source, target)]

    def descendants(self, order: str = "before") -> List[DagNode]:
        """
        Return every node in the requested traversal order.

        Args:
            order: One of
                "before" - parents before children (Kahn's algorithm),
                "after" - children before parents,
                "depth" - depth-first preorder from the roots,
                "breadth" - breadth-first from the roots.

        Returns:
            List of nodes, each appearing once.
        """
        if order == "before":
            return self._parents_first()
        if order == "after":
            return list(reversed(self._parents_first()))
        if order == "depth":
            return self._depth_first()
        if order == "breadth":
            return self._breadth_first()
        raise ValueError(f"unknown order {order!r}, expected one of {self.ORDERS}")

    def _parents_first(self) -> List[DagNode]:
        in_degree = {node: len(node.parents) for node in self}
        queue = deque(node for node in self if in_degree[node] == 0)
        result = []

        while queue:
            node = queue.popleft()
            result.append(node)

            for child in node.children:
                in_degree[child] -= 1
                if in_degree[child] == 0:
                    queue.append(child)

        return result

    def _depth_first(self) -> List[DagNode]:
        visited = set()
        result = []
        stack = list(reversed(self.roots()))

        while stack:
            node = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            result.append(node)
            stack.extend(reversed(node.children))

        return result

    def _breadth_first(self) -> List[DagNode]:
        visited = set()
        result = []
        queue = deque(self.roots())

        while queue:
            node = queue.popleft()
            if node in visited:
                continue
            visited.add(node)
            result.append(node)
            queue.extend(node.children)

        return result

    def to_networkx(self) -> nx.DiGraph:
        """Return a networkx view keyed by node id, in insertion order."""
        graph = nx.DiGraph()
        for node in self:
            graph.add_node(node.id, node=node)
        graph.add_edges_from(
            (link.source.id, link.target.id) for link in self.links()
        )
        return graph


def create_dag(connections: Iterable[Tuple[Hashable, Hashable]]) -> Dag:
    """
    Create a Dag from a list of connections.

    Args:
        connections: List of (source, target) id tuples

    Returns:
        Dag object
    """
    dag = Dag()
    for source, target in connections:
        dag.add_edge(source, target)
    return dag


def dag_from_nodes(
    ids: Iterable[Hashable],
    connections: Iterable[Tuple[Hashable, Hashable]] = (),
) -> Dag:
    """Create a Dag with the given nodes (in order) and connections."""
    dag = Dag()
    for id in ids:
        dag.add_node(id)
    for source, target in connections:
        dag.add_edge(source, target)
    return dag
