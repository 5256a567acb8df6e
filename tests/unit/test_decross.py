"""Unit tests for the decross module."""

import random
import time
from itertools import permutations, product

import pytest

from conftest import layered
from layerflow import (
    ConfigurationError,
    OptimalDecross,
    TwoLayerDecross,
    create_dag,
    dag_from_nodes,
    decross_opt,
    decross_two_layer,
    layering_longest_path,
    layering_simplex,
    sugiyama,
)
from layerflow.layers import count_crossings


def ids(layers):
    return [[entry.id for entry in layer] for layer in layers]


def random_dag(seed, size, probability):
    """Random DAG whose edges only go from lower to higher node numbers."""
    rng = random.Random(seed)
    ids = [str(i) for i in range(size)]
    connections = [
        (ids[i], ids[j])
        for i in range(size)
        for j in range(i + 1, size)
        if rng.random() < probability
    ]
    return dag_from_nodes(ids, connections)


def random_three_layers(seed):
    """Three layers of 3, 4 and 3 nodes with random edges between neighbours."""
    rng = random.Random(seed)
    upper = [f"u{i}" for i in range(3)]
    middle = [f"v{i}" for i in range(4)]
    lower = [f"w{i}" for i in range(3)]
    connections = [(upper[i % 3], node) for i, node in enumerate(middle)]
    connections += [(middle[i], node) for i, node in enumerate(lower)]
    connections += [
        (parent, child)
        for parents, children in ((upper, middle), (middle, lower))
        for parent in parents
        for child in children
        if rng.random() < 0.4
    ]
    return dag_from_nodes(upper + middle + lower, connections)


def fewest_crossings(layers):
    """Exhaustive minimum over every ordering of every layer."""
    return min(
        count_crossings([list(order) for order in orders])
        for orders in product(*(permutations(layer) for layer in layers))
    )


@pytest.fixture
def tangled():
    """Three parallel chains attached in reverse order."""
    return create_dag(
        [
            ("a", "z3"),
            ("b", "z2"),
            ("c", "z1"),
            ("z1", "y3"),
            ("z2", "y1"),
            ("z3", "y2"),
        ]
    )


class TestTwoLayerDecross:
    """Tests for the sweep heuristic."""

    def test_uncrosses_pair(self, crossed):
        """A single crossing between two edges is removed."""
        layers = layered(crossed, layering_simplex())
        decross_two_layer()(layers)
        assert count_crossings(layers) == 0
        assert ids(layers) == [["a", "b"], ["d", "c"]]

    def test_mean_order(self, crossed):
        """The barycenter variant also removes the crossing."""
        layers = layered(crossed, layering_simplex())
        decross_two_layer().with_order("mean")(layers)
        assert count_crossings(layers) == 0

    def test_never_worse_than_input(self, zhere, tangled):
        """The best ordering seen is kept, so crossings never increase."""
        for dag in (zhere, tangled):
            layers = layered(dag, layering_simplex())
            before = count_crossings(layers)
            decross_two_layer()(layers)
            assert count_crossings(layers) <= before

    def test_keeps_layer_membership(self, zhere):
        """Only the order within a layer changes."""
        layers = layered(zhere, layering_simplex())
        before = [set(layer) for layer in layers]
        decross_two_layer()(layers)
        assert [set(layer) for layer in layers] == before

    def test_zero_passes_is_noop(self, crossed):
        """With no passes the input order is kept."""
        layers = layered(crossed, layering_simplex())
        TwoLayerDecross(passes=0)(layers)
        assert ids(layers) == [["a", "b"], ["c", "d"]]

    def test_invalid_order(self):
        """Unknown aggregates are rejected."""
        with pytest.raises(ValueError, match="unknown order"):
            TwoLayerDecross(order="mode")

    def test_factory_rejects_arguments(self):
        """Passing an argument to the factory is a configuration error."""
        with pytest.raises(ConfigurationError, match="got arguments to twoLayer"):
            decross_two_layer(None)


class TestOptimalDecross:
    """Tests for the branch and bound search."""

    def test_uncrosses_pair(self, crossed):
        """The optimum for two crossing edges is zero."""
        layers = layered(crossed, layering_simplex())
        decross_opt()(layers)
        assert count_crossings(layers) == 0

    def test_untangles_chains(self, tangled):
        """Parallel chains can always be drawn without crossings."""
        layers = layered(tangled, layering_simplex())
        assert count_crossings(layers) > 0
        decross_opt()(layers)
        assert count_crossings(layers) == 0

    def test_complete_bipartite_minimum(self):
        """K(2, 2) cannot do better than one crossing."""
        dag = create_dag([("u0", "v0"), ("u0", "v1"), ("u1", "v0"), ("u1", "v1")])
        layers = layered(dag, layering_simplex())
        decross_opt()(layers)
        assert count_crossings(layers) == 1

    def test_at_least_as_good_as_heuristic(self, zhere, tangled):
        """The exact search never loses to the heuristic."""
        for dag in (zhere, tangled):
            heuristic = layered(dag, layering_simplex())
            decross_two_layer()(heuristic)
            exact = layered(dag, layering_simplex())
            decross_opt()(exact)
            assert count_crossings(exact) <= count_crossings(heuristic)

    def test_no_expansions_keeps_input(self, tangled):
        """With no expansions allowed the best known ordering is the input."""
        layers = layered(tangled, layering_simplex())
        before = ids(layers)
        OptimalDecross(max_nodes=0)(layers)
        assert ids(layers) == before

    def test_expansion_limit_never_worse(self, zhere):
        """A partial search still returns a valid ordering no worse than input."""
        layers = layered(zhere, layering_simplex())
        before_sets = [set(layer) for layer in layers]
        before = count_crossings(layers)
        decross_opt().with_max_nodes(10)(layers)
        assert count_crossings(layers) <= before
        assert [set(layer) for layer in layers] == before_sets

    def test_deterministic(self, zhere):
        """The same input always gives the same ordering."""
        first = layered(zhere, layering_simplex())
        decross_opt()(first)
        second = layered(zhere, layering_simplex())
        decross_opt()(second)
        assert ids(first) == ids(second)

    @pytest.mark.parametrize("seed", range(5))
    def test_matches_exhaustive_search(self, seed):
        """The pruned search finds the true minimum on small layered graphs."""
        layers = layered(random_three_layers(seed), layering_longest_path())
        expected = fewest_crossings(layers)
        decross_opt()(layers)
        assert count_crossings(layers) == expected

    def test_default_limit_finishes_quickly(self):
        """The default expansion limit keeps a 40 node graph to seconds."""
        dag = random_dag(seed=1, size=40, probability=0.15)
        layout = sugiyama().with_decross(decross_opt()).with_debug(True)

        start = time.perf_counter()
        result = layout(dag)
        elapsed = time.perf_counter() - start

        assert elapsed < 10
        stage = result.trace.get_stage("decross")
        assert stage.data["after"] <= stage.data["before"]

    def test_factory_rejects_arguments(self):
        """Passing an argument to the factory is a configuration error."""
        with pytest.raises(ConfigurationError, match="got arguments to opt"):
            decross_opt(None)
