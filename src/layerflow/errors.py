"""
Error types raised by the layout pipeline.

Every error keeps the offending values as attributes and renders the
message callers pattern-match on through ``str()``. The orchestrator is the
only place these are raised from, except ``ConfigurationError`` which the
operator factories raise themselves.
"""

from typing import Any


def format_number(value: Any) -> str:
    """Render a number the way the messages expect (``2.0`` becomes ``2``)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class LayoutError(Exception):
    """Base class for all layout errors."""

    pass


class ConfigurationError(LayoutError):
    """Raised when a zero-argument factory is called with arguments."""

    def __init__(self, factory: str):
        self.factory = factory
        super().__init__(f"got arguments to {factory}")


class NodeSizeError(LayoutError):
    """Raised when the node size accessor returns a negative dimension."""

    def __init__(self, node_id: Any, width: float, height: float):
        self.node_id = node_id
        self.width = width
        self.height = height
        super().__init__(
            "all node sizes must be non-negative, but got width "
            f"{format_number(width)} and height {format_number(height)} "
            f"for node id: {node_id}"
        )


class ZeroHeightError(LayoutError):
    """Raised when no node has a positive height."""

    def __init__(self):
        super().__init__(
            "at least one node must have positive height, "
            "but total height was zero"
        )


class LayeringError(LayoutError):
    """Raised when a layering operator leaves an invalid layering."""

    pass


class MissingLayerError(LayeringError):
    def __init__(self, node_id: Any):
        self.node_id = node_id
        super().__init__(f"layering did not assign layer to node '{node_id}'")


class NonIntegerLayerError(LayeringError):
    def __init__(self, node_id: Any, layer: Any):
        self.node_id = node_id
        self.layer = layer
        super().__init__(
            f"layering assigned a non-integer layer ({layer!r}) to node '{node_id}'"
        )


class NegativeLayerError(LayeringError):
    def __init__(self, node_id: Any, layer: int):
        self.node_id = node_id
        self.layer = layer
        super().__init__(
            f"layering assigned a negative layer ({format_number(layer)}) "
            f"to node '{node_id}'"
        )


class LayerOrderError(LayeringError):
    """Raised when an edge does not point to a strictly higher layer."""

    def __init__(
        self, parent_id: Any, parent_layer: int, child_id: Any, child_layer: int
    ):
        self.parent_id = parent_id
        self.parent_layer = parent_layer
        self.child_id = child_id
        self.child_layer = child_layer
        super().__init__(
            f'layering left child node "{child_id}" ({format_number(child_layer)}) '
            "with a greater or equal layer to parent node "
            f'"{parent_id}" ({format_number(parent_layer)})'
        )


class CoordError(LayoutError):
    """Raised when a coordinate operator leaves invalid x values."""

    pass


class MissingCoordError(CoordError):
    def __init__(self, node_id: Any):
        self.node_id = node_id
        super().__init__(f"coord didn't assign an x to node '{node_id}'")


class CoordBoundsError(CoordError):
    def __init__(self, node_id: Any, x: float, width: float):
        self.node_id = node_id
        self.x = x
        self.width = width
        super().__init__(
            f"coord assgined an x ({format_number(x)}) outside of "
            f"[0, {format_number(width)}]"
        )
