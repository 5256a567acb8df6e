"""
Layered graph construction for the decross and coord stages.

Links spanning more than one layer are split into chains of dummy nodes so
every edge of the layered graph joins adjacent layers. After coordinates are
assigned the chains are folded back into link waypoints.
"""

from bisect import bisect_right, insort
from typing import Dict, List, Tuple

from .dag import Dag, DagLink, DagNode
from .models import LayoutNode

Layers = List[List[LayoutNode]]


def _connect(parent: LayoutNode, child: LayoutNode) -> None:
    parent.children.append(child)
    child.parents.append(parent)


def _dummy_id(link: DagLink, index: int, count: int, debug: bool) -> str:
    if debug:
        return f"{link.source.id}->({index})->{link.target.id}"
    return f"dummy-{count}"


def build_layers(
    dag: Dag,
    sizes: Dict[DagNode, Tuple[float, float]],
    debug: bool = False,
) -> Layers:
    """
    Build the ordered layers, inserting dummy nodes for long links.

    Args:
        dag: A layered DAG (every node has a valid layer).
        sizes: Width and height of every real node.
        debug: Give dummies descriptive ids instead of opaque ones.

    Returns:
        One list per layer index, real nodes in DAG order followed by dummies
        in link order. Empty layers are kept.
    """
    wrapped: Dict[DagNode, LayoutNode] = {}
    for node in dag:
        width, height = sizes[node]
        wrapped[node] = LayoutNode(
            id=node.id, layer=node.layer, width=width, height=height, node=node
        )

    num_layers = max((node.layer for node in dag), default=-1) + 1
    layers: Layers = [[] for _ in range(num_layers)]
    for entry in wrapped.values():
        layers[entry.layer].append(entry)

    count = 0
    for link in dag.links():
        previous = wrapped[link.source]
        target = wrapped[link.target]
        for index, layer in enumerate(range(previous.layer + 1, target.layer), 1):
            dummy = LayoutNode(
                id=_dummy_id(link, index, count, debug),
                layer=layer,
                link=link,
                index=index,
            )
            count += 1
            _connect(previous, dummy)
            layers[layer].append(dummy)
            previous = dummy
        _connect(previous, target)

    return layers


def remove_dummies(dag: Dag, layers: Layers) -> None:
    """
    Copy coordinates back to the DAG and turn dummy chains into link points.

    Every link gets its source centre, the centre of each of its dummies in
    chain order, and its target centre.
    """
    chains: Dict[DagLink, List[LayoutNode]] = {}
    for layer in layers:
        for entry in layer:
            if entry.is_dummy:
                chains.setdefault(entry.link, []).append(entry)
            else:
                entry.node.x = entry.x
                entry.node.y = entry.y

    for link in dag.links():
        chain = sorted(chains.get(link, []), key=lambda dummy: dummy.index)
        link.points = (
            [(link.source.x, link.source.y)]
            + [(dummy.x, dummy.y) for dummy in chain]
            + [(link.target.x, link.target.y)]
        )


def count_crossings(layers: Layers) -> int:
    """Count edge crossings between every pair of adjacent layers."""
    total = 0
    for upper, lower in zip(layers, layers[1:]):
        upper_pos = {entry: i for i, entry in enumerate(upper)}
        lower_pos = {entry: i for i, entry in enumerate(lower)}
        edges = sorted(
            (upper_pos[entry], lower_pos[child])
            for entry in upper
            for child in entry.children
        )

        # Inversions of the lower endpoints once edges are sorted by upper.
        seen: List[int] = []
        for _, target in edges:
            total += len(seen) - bisect_right(seen, target)
            insort(seen, target)

    return total
