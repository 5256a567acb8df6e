"""
Data models for the layout pipeline.

Classes:
    LayoutNode: An entry of the layered graph, either a real node or a dummy.
    LayoutResult: The annotated DAG and the drawing extent.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Hashable, Iterator, List, Optional

if TYPE_CHECKING:
    from .dag import Dag, DagLink, DagNode
    from .tracer import LayoutTrace


@dataclass(eq=False)
class LayoutNode:
    """
    A node of the layered graph seen by the decross and coord operators.

    Real nodes wrap a DagNode. Dummy nodes stand in for one intermediate
    layer of a link spanning several layers and only live between dummy
    insertion and removal.

    Attributes:
        id: Node id, or a generated id for dummies.
        layer: Layer index.
        width: Width from the node size accessor (0 for dummies).
        height: Height from the node size accessor (0 for dummies).
        node: The wrapped DagNode, None for dummies.
        link: For dummies, the link this dummy belongs to.
        index: For dummies, position in the chain starting at 1.
        children: Neighbours in the next layer.
        parents: Neighbours in the previous layer.
        x: Horizontal position, set by the coord operator.
        y: Vertical position, set by the orchestrator.
    """

    id: Hashable
    layer: int
    width: float = 0.0
    height: float = 0.0
    node: Optional["DagNode"] = None
    link: Optional["DagLink"] = None
    index: int = 0
    children: List["LayoutNode"] = field(default_factory=list, repr=False)
    parents: List["LayoutNode"] = field(default_factory=list, repr=False)
    x: Optional[float] = None
    y: Optional[float] = None

    @property
    def is_dummy(self) -> bool:
        return self.node is None


@dataclass
class LayoutResult:
    """Result of the layout: the annotated DAG and its overall size."""

    dag: "Dag"
    width: float
    height: float
    trace: Optional["LayoutTrace"] = None

    def __iter__(self) -> Iterator:
        return iter((self.dag, self.width, self.height))
