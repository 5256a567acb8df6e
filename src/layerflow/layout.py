"""
Layout module: the Sugiyama pipeline.

Runs the pluggable stages in order and owns everything between them:
- Node size validation
- Layering validation
- Dummy node insertion and removal
- Coordinate validation
- Vertical positions and rescaling
"""

import logging
from dataclasses import dataclass, field, replace
from numbers import Integral
from typing import Callable, List, Optional, Tuple

from .coord import VertCoord
from .dag import Dag
from .decross import TwoLayerDecross
from .errors import (
    ConfigurationError,
    CoordBoundsError,
    LayerOrderError,
    LayoutError,
    MissingCoordError,
    MissingLayerError,
    NegativeLayerError,
    NonIntegerLayerError,
)
from .layering import SimplexLayering
from .layers import Layers, build_layers, count_crossings, remove_dummies
from .models import LayoutNode, LayoutResult
from .positioning import NodeSize, assign_y, default_node_size, measure_nodes, rescale
from .tracer import LayoutTrace

logger = logging.getLogger(__name__)

LayeringOperator = Callable[[Dag], None]
DecrossOperator = Callable[[List[List[LayoutNode]]], None]
CoordOperator = Callable[[List[List[LayoutNode]]], float]


@dataclass(frozen=True)
class SugiyamaLayout:
    """
    Layered DAG layout.

    An immutable configuration: read an attribute to get the configured
    value, use the matching ``with_*`` method to get a new layout with that
    value replaced. Instances hold no per-graph state and can be reused.

    Attributes:
        layering: Operator assigning ``node.layer`` on the DAG.
        decross: Operator reordering the layers in place.
        coord: Operator assigning ``x`` on the layers and returning the width.
        node_size: Accessor returning (width, height) for a DagNode.
        size: Output (width, height) to rescale to, or None for natural size.
        debug: Record a trace and give dummy nodes descriptive ids.
    """

    layering: LayeringOperator = field(default_factory=SimplexLayering)
    decross: DecrossOperator = field(default_factory=TwoLayerDecross)
    coord: CoordOperator = field(default_factory=VertCoord)
    node_size: NodeSize = default_node_size
    size: Optional[Tuple[float, float]] = None
    debug: bool = False

    def __post_init__(self):
        if self.size is not None:
            width, height = self.size
            if width <= 0 or height <= 0:
                raise ValueError(f"size must be positive, but got {self.size}")

    def with_layering(self, layering: LayeringOperator) -> "SugiyamaLayout":
        return replace(self, layering=layering)

    def with_decross(self, decross: DecrossOperator) -> "SugiyamaLayout":
        return replace(self, decross=decross)

    def with_coord(self, coord: CoordOperator) -> "SugiyamaLayout":
        return replace(self, coord=coord)

    def with_node_size(self, node_size: NodeSize) -> "SugiyamaLayout":
        return replace(self, node_size=node_size)

    def with_size(self, size: Optional[Tuple[float, float]]) -> "SugiyamaLayout":
        if size is not None:
            width, height = size
            size = (width, height)
        return replace(self, size=size)

    def with_debug(self, debug: bool) -> "SugiyamaLayout":
        return replace(self, debug=bool(debug))

    def __call__(self, dag: Dag) -> LayoutResult:
        return self.layout(dag)

    def layout(self, dag: Dag) -> LayoutResult:
        """
        Compute the layout of a DAG.

        Every node of the DAG gets ``layer``, ``x`` and ``y`` and every link
        gets ``points``.

        Args:
            dag: The DAG to lay out. It is annotated in place.

        Returns:
            LayoutResult with the DAG and the overall width and height.

        Raises:
            NodeSizeError, ZeroHeightError: If node sizes are invalid.
            LayeringError: If the layering operator left an invalid layering.
            CoordError: If the coord operator left invalid x values.
        """
        try:
            return self._run(dag)
        except LayoutError as error:
            logger.warning("layout failed: %s", error)
            raise

    def _run(self, dag: Dag) -> LayoutResult:
        trace = LayoutTrace() if self.debug else None

        sizes = measure_nodes(dag, self.node_size)
        self._record(trace, "validate_sizes", {"nodes": len(sizes)})

        self.layering(dag)
        self._record(trace, "layering", {"layering": type(self.layering).__name__})
        num_layers = self._validate_layers(dag)
        logger.debug("layered %d nodes into %d layers", len(dag), num_layers)
        self._record(trace, "validate_layers", {"layers": num_layers})

        layers = build_layers(dag, sizes, self.debug)
        dummies = sum(entry.is_dummy for layer in layers for entry in layer)
        logger.debug("inserted %d dummy nodes", dummies)
        self._record(trace, "insert_dummies", {"dummies": dummies}, layers)

        if trace is not None:
            before = count_crossings(layers)
        self.decross(layers)
        if trace is not None:
            trace.add_stage(
                "decross",
                {"before": before, "after": count_crossings(layers)},
                layers,
            )

        width = self.coord(layers)
        self._record(trace, "coord", {"width": width})
        self._validate_coords(layers, width)
        self._record(trace, "validate_coords", {})

        height = assign_y(layers)
        width, height = rescale(layers, width, height, self.size)
        logger.debug("layout size %s x %s", width, height)
        self._record(trace, "rescale", {"width": width, "height": height})

        remove_dummies(dag, layers)
        self._record(trace, "remove_dummies", {"links": len(dag.links())})

        return LayoutResult(dag=dag, width=width, height=height, trace=trace)

    @staticmethod
    def _record(
        trace: Optional[LayoutTrace],
        name: str,
        data: dict,
        layers: Optional[Layers] = None,
    ) -> None:
        if trace is not None:
            trace.add_stage(name, data, layers)

    @staticmethod
    def _validate_layers(dag: Dag) -> int:
        """Check every node has an integer layer and every edge points down."""
        for node in dag:
            if node.layer is None:
                raise MissingLayerError(node.id)
            if isinstance(node.layer, bool) or not isinstance(node.layer, Integral):
                raise NonIntegerLayerError(node.id, node.layer)
            if node.layer < 0:
                raise NegativeLayerError(node.id, node.layer)

        for node in dag:
            for child in node.children:
                if child.layer <= node.layer:
                    raise LayerOrderError(node.id, node.layer, child.id, child.layer)

        return max((node.layer for node in dag), default=-1) + 1

    @staticmethod
    def _validate_coords(layers: Layers, width: float) -> None:
        """Check every entry has an x within [0, width]."""
        for layer in layers:
            for entry in layer:
                if entry.x is None:
                    raise MissingCoordError(entry.id)
                if not 0 <= entry.x <= width:
                    raise CoordBoundsError(entry.id, entry.x, width)


def sugiyama(*args) -> SugiyamaLayout:
    """Create a layout with the default operators."""
    if args:
        raise ConfigurationError("sugiyama")
    return SugiyamaLayout()
