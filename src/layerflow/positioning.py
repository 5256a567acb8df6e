"""
Geometric bookkeeping around the coord stage.

This module handles the calculations the orchestrator owns rather than the
pluggable operators:
- Node size measurement and validation
- Layer heights and vertical positions
- Rescaling to a requested output size
"""

from typing import Callable, Dict, List, Optional, Tuple

from .dag import Dag, DagNode
from .errors import NodeSizeError, ZeroHeightError
from .layers import Layers

NodeSize = Callable[[DagNode], Tuple[float, float]]


def default_node_size(node: DagNode) -> Tuple[float, float]:
    """Every node is a unit square."""
    return (1, 1)


def measure_nodes(dag: Dag, node_size: NodeSize) -> Dict[DagNode, Tuple[float, float]]:
    """
    Call the node size accessor once per node and validate the result.

    Args:
        dag: The DAG being laid out.
        node_size: Accessor returning (width, height) for a node.

    Returns:
        Dictionary mapping nodes to their (width, height).

    Raises:
        NodeSizeError: If a node has a negative width or height.
        ZeroHeightError: If no node has a positive height.
    """
    sizes: Dict[DagNode, Tuple[float, float]] = {}
    for node in dag:
        width, height = node_size(node)
        if width < 0 or height < 0:
            raise NodeSizeError(node.id, width, height)
        sizes[node] = (width, height)

    if not any(height > 0 for _, height in sizes.values()):
        raise ZeroHeightError()
    return sizes


def layer_heights(layers: Layers) -> List[float]:
    """Height of each layer: the tallest entry in it."""
    return [max((entry.height for entry in layer), default=0) for layer in layers]


def assign_y(layers: Layers) -> float:
    """
    Center every entry vertically in its layer.

    Returns:
        The total height, the sum of all layer heights.
    """
    top = 0.0
    for layer, height in zip(layers, layer_heights(layers)):
        for entry in layer:
            entry.y = top + height / 2
        top += height
    return top


def rescale(
    layers: Layers,
    width: float,
    height: float,
    size: Optional[Tuple[float, float]],
) -> Tuple[float, float]:
    """
    Scale all coordinates to the requested output size.

    Args:
        layers: Layered graph with x and y assigned.
        width: Natural width from the coord operator.
        height: Natural height from the layer heights.
        size: Requested (width, height), or None to keep the natural size.

    Returns:
        The final (width, height).
    """
    if size is None:
        return width, height

    out_width, out_height = size
    for layer in layers:
        for entry in layer:
            if width:
                entry.x = entry.x * out_width / width
            else:
                entry.x = out_width / 2
            entry.y = entry.y * out_height / height
    return out_width, out_height
