"""
layerflow - Layered DAG layout

A Python library computing Sugiyama-style layouts of directed acyclic
graphs: layer assignment, crossing reduction and coordinate assignment,
each with interchangeable operators.

Example:
    >>> from layerflow import create_dag, sugiyama
    >>> dag = create_dag([("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])
    >>> result = sugiyama()(dag)
    >>> for node in result.dag:
    ...     print(node.id, node.x, node.y)

Debug Mode Example:
    >>> result = sugiyama().with_debug(True)(dag)
    >>> print(result.trace.summary())
"""

from .coord import (
    CenterCoord,
    GreedyCoord,
    MinCurveCoord,
    TopologicalCoord,
    VertCoord,
    coord_center,
    coord_greedy,
    coord_min_curve,
    coord_topological,
    coord_vert,
)
from .dag import Dag, DagLink, DagNode, create_dag, dag_from_nodes
from .decross import OptimalDecross, TwoLayerDecross, decross_opt, decross_two_layer
from .errors import (
    ConfigurationError,
    CoordBoundsError,
    CoordError,
    LayerOrderError,
    LayeringError,
    LayoutError,
    MissingCoordError,
    MissingLayerError,
    NegativeLayerError,
    NodeSizeError,
    NonIntegerLayerError,
    ZeroHeightError,
)
from .layering import (
    CoffmanGrahamLayering,
    LongestPathLayering,
    SimplexLayering,
    TopologicalLayering,
    layering_coffman_graham,
    layering_longest_path,
    layering_simplex,
    layering_topological,
)
from .layers import count_crossings
from .layout import SugiyamaLayout, sugiyama
from .models import LayoutNode, LayoutResult
from .tracer import LayoutTrace, PipelineStage

__version__ = "0.4.0"

__all__ = [
    # Main API
    "sugiyama",
    "SugiyamaLayout",
    "LayoutResult",
    "LayoutNode",
    # DAG
    "Dag",
    "DagNode",
    "DagLink",
    "create_dag",
    "dag_from_nodes",
    # Layering
    "layering_topological",
    "layering_longest_path",
    "layering_coffman_graham",
    "layering_simplex",
    "TopologicalLayering",
    "LongestPathLayering",
    "CoffmanGrahamLayering",
    "SimplexLayering",
    # Decross
    "decross_two_layer",
    "decross_opt",
    "TwoLayerDecross",
    "OptimalDecross",
    "count_crossings",
    # Coord
    "coord_center",
    "coord_vert",
    "coord_min_curve",
    "coord_greedy",
    "coord_topological",
    "CenterCoord",
    "VertCoord",
    "MinCurveCoord",
    "GreedyCoord",
    "TopologicalCoord",
    # Errors
    "LayoutError",
    "ConfigurationError",
    "NodeSizeError",
    "ZeroHeightError",
    "LayeringError",
    "MissingLayerError",
    "NegativeLayerError",
    "NonIntegerLayerError",
    "LayerOrderError",
    "CoordError",
    "MissingCoordError",
    "CoordBoundsError",
    # Debug/Tracing
    "LayoutTrace",
    "PipelineStage",
]
