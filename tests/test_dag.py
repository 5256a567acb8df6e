"""Unit tests for the dag module."""

import networkx as nx
import pytest

from layerflow import Dag, create_dag, dag_from_nodes


class TestDag:
    """Tests for the Dag class."""

    def test_add_edge(self):
        """Add an edge to the dag."""
        dag = Dag()
        link = dag.add_edge("A", "B")
        assert "A" in dag
        assert "B" in dag
        assert link.source is dag.node("A")
        assert link.target is dag.node("B")

    def test_add_edge_links_parents_and_children(self):
        """Edges are visible from both ends."""
        dag = create_dag([("A", "B"), ("A", "C")])
        assert dag.node("A").children == [dag.node("B"), dag.node("C")]
        assert dag.node("C").parents == [dag.node("A")]

    def test_duplicate_edge_ignored(self):
        """Adding the same edge twice keeps one link."""
        dag = create_dag([("A", "B"), ("A", "B")])
        assert len(dag.links()) == 1
        assert dag.node("B").parents == [dag.node("A")]

    def test_add_node_idempotent(self):
        """Adding an existing id returns the same node."""
        dag = Dag()
        first = dag.add_node("A", data={"label": "a"})
        assert dag.add_node("A") is first
        assert first.data == {"label": "a"}

    def test_iteration_follows_insertion(self):
        """Iterating yields nodes in insertion order."""
        dag = dag_from_nodes(["c", "a", "b"])
        assert [node.id for node in dag] == ["c", "a", "b"]
        assert len(dag) == 3

    def test_node_missing(self):
        """Looking up an unknown id raises KeyError."""
        with pytest.raises(KeyError):
            Dag().node("missing")

    def test_roots_and_leaves(self, square):
        """Roots have no parents, leaves have no children."""
        assert [node.id for node in square.roots()] == ["0"]
        assert [node.id for node in square.leaves()] == ["3"]

    def test_isolated_node_is_root_and_leaf(self, doub):
        """Isolated nodes are both roots and leaves."""
        assert len(doub.roots()) == 2
        assert len(doub.leaves()) == 2

    def test_links_in_node_order(self, dummy):
        """Links are grouped by source in node order."""
        pairs = [(link.source.id, link.target.id) for link in dummy.links()]
        assert pairs == [("0", "1"), ("0", "2"), ("1", "2")]

    def test_link_lookup(self, dummy):
        """A link can be looked up by its endpoint ids."""
        link = dummy.link("0", "2")
        assert link.points == []

    def test_fresh_nodes_unassigned(self, single):
        """Layout attributes start unset."""
        [node] = single
        assert node.layer is None
        assert node.x is None
        assert node.y is None


class TestDescendants:
    """Tests for the traversal orders."""

    def test_before_puts_parents_first(self, three):
        """Parents come before children."""
        order = [node.id for node in three.descendants("before")]
        assert order == ["0", "1", "2", "3", "4"]

    def test_after_puts_children_first(self, three):
        """Children come before parents."""
        order = [node.id for node in three.descendants("after")]
        assert order == ["4", "3", "2", "1", "0"]

    def test_depth_first(self, three):
        """Depth-first preorder from the roots."""
        order = [node.id for node in three.descendants("depth")]
        assert order == ["0", "1", "4", "2", "3"]

    def test_breadth_first(self, three):
        """Breadth-first from the roots."""
        order = [node.id for node in three.descendants("breadth")]
        assert order == ["0", "1", "2", "3", "4"]

    def test_every_order_visits_each_node_once(self, dummy):
        """No order repeats or drops a node."""
        for order in Dag.ORDERS:
            ids = [node.id for node in dummy.descendants(order)]
            assert sorted(ids) == ["0", "1", "2"]

    def test_unknown_order(self, dummy):
        """Unknown orders are rejected."""
        with pytest.raises(ValueError, match="unknown order"):
            dummy.descendants("sideways")


class TestToNetworkx:
    """Tests for the networkx view."""

    def test_structure(self, square):
        """Nodes and edges carry over by id."""
        graph = square.to_networkx()
        assert list(graph.nodes) == ["0", "1", "2", "3"]
        assert set(graph.edges) == {("0", "1"), ("0", "2"), ("1", "3"), ("2", "3")}
        assert nx.is_directed_acyclic_graph(graph)

    def test_node_attribute(self, square):
        """Each networkx node points back at its DagNode."""
        graph = square.to_networkx()
        assert graph.nodes["2"]["node"] is square.node("2")
