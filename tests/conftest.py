"""Pytest configuration and shared fixtures for layerflow tests."""

import pytest

from layerflow import create_dag, dag_from_nodes
from layerflow.layers import build_layers


def to_layers(dag):
    """Group node ids by layer, each layer sorted."""
    num_layers = max(node.layer for node in dag) + 1
    layers = [[] for _ in range(num_layers)]
    for node in dag:
        layers[node.layer].append(node.id)
    return [sorted(layer) for layer in layers]


def layered(dag, layering, size=(1, 1)):
    """Run a layering operator and build the layered graph with fixed sizes."""
    layering(dag)
    return build_layers(dag, {node: size for node in dag})


@pytest.fixture
def single():
    """One isolated node."""
    return dag_from_nodes(["0"])


@pytest.fixture
def doub():
    """Two isolated nodes."""
    return dag_from_nodes(["0", "1"])


@pytest.fixture
def trip():
    """Three isolated nodes."""
    return dag_from_nodes(["0", "1", "2"])


@pytest.fixture
def dummy():
    """A triangle whose long edge needs one dummy node."""
    return create_dag([("0", "1"), ("1", "2"), ("0", "2")])


@pytest.fixture
def three():
    """One root fanning out to three nodes that join again."""
    return create_dag(
        [("0", "1"), ("0", "2"), ("0", "3"), ("1", "4"), ("2", "4"), ("3", "4")]
    )


@pytest.fixture
def square():
    """A diamond."""
    return create_dag([("0", "1"), ("0", "2"), ("1", "3"), ("2", "3")])


@pytest.fixture
def crossed():
    """Two edges that cross in insertion order."""
    return dag_from_nodes(["a", "b", "c", "d"], [("a", "d"), ("b", "c")])


@pytest.fixture
def zhere():
    """A larger graph with long edges and crossings in insertion order."""
    return create_dag(
        [
            ("0", "2"),
            ("0", "3"),
            ("1", "4"),
            ("1", "5"),
            ("2", "5"),
            ("3", "4"),
            ("4", "6"),
            ("5", "6"),
            ("0", "6"),
            ("1", "6"),
        ]
    )


@pytest.fixture
def pulled():
    """A node whose best layer is below where longest path puts it."""
    return create_dag(
        [
            ("r", "p1"),
            ("p1", "p2"),
            ("p2", "p3"),
            ("p2", "z"),
            ("r", "u"),
            ("u", "p3"),
            ("u", "z"),
        ]
    )
