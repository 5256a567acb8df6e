"""
Layering operators: assign every DAG node an integer layer.

An operator is any callable taking the Dag and setting ``node.layer`` on
every node so that each edge points from a lower to a strictly higher layer.

Uses networkx for:
- Topological sorting
- Weakly connected components (network simplex works per component)
"""

import logging
import math
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Set, Tuple

import networkx as nx

from .dag import Dag, DagNode
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

Edge = Tuple[Hashable, Hashable]


@dataclass(frozen=True)
class TopologicalLayering:
    """Give every node its own layer, following a topological sort."""

    def __call__(self, dag: Dag) -> None:
        graph = dag.to_networkx()
        for layer, node_id in enumerate(nx.topological_sort(graph)):
            graph.nodes[node_id]["node"].layer = layer


@dataclass(frozen=True)
class LongestPathLayering:
    """
    Layer nodes by their longest path.

    With ``top_down`` every node sits at the length of the longest path from
    any root, so roots are on layer 0. Otherwise nodes are pushed as far down
    as possible and every sink lands on the last layer.
    """

    top_down: bool = True

    def __call__(self, dag: Dag) -> None:
        graph = dag.to_networkx()
        topo_order = list(nx.topological_sort(graph))

        if self.top_down:
            depth: Dict[Hashable, int] = {}
            for node_id in topo_order:
                depth[node_id] = max(
                    (depth[p] + 1 for p in graph.predecessors(node_id)), default=0
                )
            for node_id, layer in depth.items():
                graph.nodes[node_id]["node"].layer = layer
            return

        height: Dict[Hashable, int] = {}
        for node_id in reversed(topo_order):
            height[node_id] = max(
                (height[s] + 1 for s in graph.successors(node_id)), default=0
            )
        bottom = max(height.values(), default=0)
        for node_id, h in height.items():
            graph.nodes[node_id]["node"].layer = bottom - h

    def with_top_down(self, top_down: bool) -> "LongestPathLayering":
        return LongestPathLayering(top_down=top_down)


@dataclass(frozen=True)
class CoffmanGrahamLayering:
    """
    Bounded-width layering after Coffman and Graham.

    Nodes are first labelled so that a node is only labelled after all of its
    parents, preferring the node whose parents carry the smallest labels.
    Nodes are then placed from the highest label down, each on the lowest
    level above all of its children that still has room.

    Attributes:
        width: Maximum number of nodes per layer. 0 uses the square root of
            the number of nodes.
    """

    width: int = 0

    def __call__(self, dag: Dag) -> None:
        nodes = dag.nodes()
        if not nodes:
            return
        width = self.width or math.ceil(math.sqrt(len(nodes)))

        labels = self._label(nodes)

        levels: Dict[DagNode, int] = {}
        counts: Dict[int, int] = defaultdict(int)
        for node in sorted(nodes, key=labels.__getitem__, reverse=True):
            level = max((levels[child] + 1 for child in node.children), default=0)
            while counts[level] >= width:
                level += 1
            levels[node] = level
            counts[level] += 1

        top = max(levels.values())
        for node, level in levels.items():
            node.layer = top - level

    @staticmethod
    def _label(nodes: List[DagNode]) -> Dict[DagNode, int]:
        labels: Dict[DagNode, int] = {}
        unlabelled_parents = {node: len(node.parents) for node in nodes}
        ready = [node for node in nodes if not node.parents]

        for label in range(1, len(nodes) + 1):
            best = min(
                ready,
                key=lambda n: sorted((labels[p] for p in n.parents), reverse=True),
            )
            ready.remove(best)
            labels[best] = label
            for child in best.children:
                unlabelled_parents[child] -= 1
                if unlabelled_parents[child] == 0:
                    ready.append(child)

        return labels

    def with_width(self, width: int) -> "CoffmanGrahamLayering":
        if width < 0:
            raise ValueError(f"width must be non-negative, but got {width}")
        return CoffmanGrahamLayering(width=width)


@dataclass(frozen=True)
class SimplexLayering:
    """
    Minimize total edge span with the network simplex method.

    Solves ``min sum(layer(child) - layer(parent))`` subject to every edge
    spanning at least one layer, independently for every weakly connected
    component (Gansner, Koutsofios, North and Vo, 1993).

    Attributes:
        max_iterations: Cap on tree exchanges per component. None bounds it
            by nodes times edges. Stopping early still gives a valid layering.
    """

    max_iterations: Optional[int] = None

    def __call__(self, dag: Dag) -> None:
        graph = dag.to_networkx()
        order = {node_id: i for i, node_id in enumerate(graph.nodes)}
        edges = list(graph.edges)

        for component in nx.weakly_connected_components(graph):
            members = sorted(component, key=order.__getitem__)
            component_edges = [e for e in edges if e[0] in component]
            ranks = _NetworkSimplex(
                graph, members, component_edges, self.max_iterations
            ).solve()
            for node_id, rank in ranks.items():
                graph.nodes[node_id]["node"].layer = rank

    def with_max_iterations(self, max_iterations: Optional[int]) -> "SimplexLayering":
        return SimplexLayering(max_iterations=max_iterations)


class _NetworkSimplex:
    """Network simplex over one weakly connected component."""

    def __init__(
        self,
        graph: nx.DiGraph,
        nodes: List[Hashable],
        edges: List[Edge],
        max_iterations: Optional[int],
    ):
        self.graph = graph
        self.nodes = nodes
        self.edges = edges
        self.max_iterations = (
            max_iterations
            if max_iterations is not None
            else len(nodes) * len(edges) + 1
        )
        self.rank: Dict[Hashable, int] = {}
        self.tree_nodes: Set[Hashable] = set()
        self.tree_order: List[Hashable] = []
        self.tree_edges: List[Edge] = []
        self.incident: Dict[Hashable, List[Edge]] = defaultdict(list)
        for edge in edges:
            self.incident[edge[0]].append(edge)
            self.incident[edge[1]].append(edge)

    def slack(self, edge: Edge) -> int:
        return self.rank[edge[1]] - self.rank[edge[0]] - 1

    def solve(self) -> Dict[Hashable, int]:
        if len(self.nodes) == 1:
            return {self.nodes[0]: 0}

        self._init_rank()
        self._feasible_tree()

        start = 0
        iterations = 0
        while iterations < self.max_iterations:
            leaving = self._leave_edge(start)
            if leaving is None:
                break
            index, tail = leaving
            entering = self._enter_edge(tail)
            self.tree_edges[index] = entering
            self._update_ranks()
            start = index + 1
            iterations += 1
        else:
            logger.debug(
                "network simplex stopped after %d iterations", self.max_iterations
            )

        low = min(self.rank.values())
        return {node_id: self.rank[node_id] - low for node_id in self.nodes}

    def _init_rank(self) -> None:
        members = set(self.nodes)
        for node_id in nx.topological_sort(self.graph.subgraph(members)):
            self.rank[node_id] = max(
                (self.rank[p] + 1 for p in self.graph.predecessors(node_id)),
                default=0,
            )

    def _tight_tree(self) -> None:
        stack = list(self.tree_order)
        while stack:
            node_id = stack.pop()
            for edge in self.incident[node_id]:
                other = edge[1] if edge[0] == node_id else edge[0]
                if other not in self.tree_nodes and self.slack(edge) == 0:
                    self.tree_nodes.add(other)
                    self.tree_order.append(other)
                    self.tree_edges.append(edge)
                    stack.append(other)

    def _feasible_tree(self) -> None:
        self.tree_nodes = {self.nodes[0]}
        self.tree_order = [self.nodes[0]]
        self._tight_tree()

        while len(self.tree_nodes) < len(self.nodes):
            best = min(
                (
                    edge
                    for edge in self.edges
                    if (edge[0] in self.tree_nodes) != (edge[1] in self.tree_nodes)
                ),
                key=self.slack,
            )
            delta = self.slack(best)
            if best[1] in self.tree_nodes:
                delta = -delta
            for node_id in self.tree_nodes:
                self.rank[node_id] += delta
            self._tight_tree()

    def _tail_component(self, removed: Edge) -> Set[Hashable]:
        """Nodes still connected to the tail of ``removed`` within the tree."""
        adjacency: Dict[Hashable, List[Hashable]] = defaultdict(list)
        for edge in self.tree_edges:
            if edge != removed:
                adjacency[edge[0]].append(edge[1])
                adjacency[edge[1]].append(edge[0])

        component = {removed[0]}
        queue = deque([removed[0]])
        while queue:
            node_id = queue.popleft()
            for other in adjacency[node_id]:
                if other not in component:
                    component.add(other)
                    queue.append(other)
        return component

    def _cut_value(self, tail: Set[Hashable]) -> int:
        value = 0
        for source, target in self.edges:
            if source in tail and target not in tail:
                value += 1
            elif source not in tail and target in tail:
                value -= 1
        return value

    def _leave_edge(self, start: int) -> Optional[Tuple[int, Set[Hashable]]]:
        count = len(self.tree_edges)
        for offset in range(count):
            index = (start + offset) % count
            tail = self._tail_component(self.tree_edges[index])
            if self._cut_value(tail) < 0:
                return index, tail
        return None

    def _enter_edge(self, tail: Set[Hashable]) -> Edge:
        tree = set(self.tree_edges)
        return min(
            (
                edge
                for edge in self.edges
                if edge not in tree and edge[0] not in tail and edge[1] in tail
            ),
            key=self.slack,
        )

    def _update_ranks(self) -> None:
        adjacency: Dict[Hashable, List[Tuple[Hashable, int]]] = defaultdict(list)
        for source, target in self.tree_edges:
            adjacency[source].append((target, 1))
            adjacency[target].append((source, -1))

        root = self.nodes[0]
        seen = {root}
        queue = deque([root])
        while queue:
            node_id = queue.popleft()
            for other, step in adjacency[node_id]:
                if other not in seen:
                    self.rank[other] = self.rank[node_id] + step
                    seen.add(other)
                    queue.append(other)


def layering_topological(*args) -> TopologicalLayering:
    """Create a topological layering operator."""
    if args:
        raise ConfigurationError("topological")
    return TopologicalLayering()


def layering_longest_path(*args) -> LongestPathLayering:
    """Create a longest path layering operator."""
    if args:
        raise ConfigurationError("longestPath")
    return LongestPathLayering()


def layering_coffman_graham(*args) -> CoffmanGrahamLayering:
    """Create a Coffman-Graham layering operator."""
    if args:
        raise ConfigurationError("coffmanGraham")
    return CoffmanGrahamLayering()


def layering_simplex(*args) -> SimplexLayering:
    """Create a network simplex layering operator."""
    if args:
        raise ConfigurationError("simplex")
    return SimplexLayering()
