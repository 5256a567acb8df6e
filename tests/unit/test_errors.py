"""Unit tests for the error types."""

import pytest

from layerflow import (
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
from layerflow.errors import format_number


class TestFormatNumber:
    """Tests for format_number."""

    @pytest.mark.parametrize(
        "value, expected",
        [(2, "2"), (2.0, "2"), (-1.0, "-1"), (0.5, "0.5"), ("x", "x")],
    )
    def test_format(self, value, expected):
        assert format_number(value) == expected


class TestMessages:
    """Every error renders its fixed message."""

    def test_configuration(self):
        error = ConfigurationError("sugiyama")
        assert str(error) == "got arguments to sugiyama"
        assert error.factory == "sugiyama"

    def test_node_size(self):
        error = NodeSizeError("a", 1.0, -2.5)
        assert str(error) == (
            "all node sizes must be non-negative, "
            "but got width 1 and height -2.5 for node id: a"
        )

    def test_zero_height(self):
        assert str(ZeroHeightError()) == (
            "at least one node must have positive height, but total height was zero"
        )

    def test_missing_layer(self):
        assert str(MissingLayerError("0")) == "layering did not assign layer to node '0'"

    def test_negative_layer(self):
        error = NegativeLayerError("0", -1)
        assert str(error) == "layering assigned a negative layer (-1) to node '0'"
        assert error.layer == -1

    def test_non_integer_layer(self):
        error = NonIntegerLayerError("0", 1.5)
        assert str(error) == "layering assigned a non-integer layer (1.5) to node '0'"
        assert error.layer == 1.5

    def test_layer_order(self):
        error = LayerOrderError("0", 1, "2", 1)
        assert str(error) == (
            'layering left child node "2" (1) with a greater or equal layer '
            'to parent node "0" (1)'
        )

    def test_missing_coord(self):
        assert str(MissingCoordError("0")) == "coord didn't assign an x to node '0'"

    def test_coord_bounds(self):
        error = CoordBoundsError("0", 2.0, 1.0)
        assert str(error) == "coord assgined an x (2) outside of [0, 1]"
        assert (error.x, error.width) == (2.0, 1.0)


class TestHierarchy:
    """Errors can be caught by family."""

    @pytest.mark.parametrize(
        "error, family",
        [
            (MissingLayerError("a"), LayeringError),
            (NegativeLayerError("a", -1), LayeringError),
            (NonIntegerLayerError("a", 0.5), LayeringError),
            (LayerOrderError("a", 0, "b", 0), LayeringError),
            (MissingCoordError("a"), CoordError),
            (CoordBoundsError("a", 1, 0), CoordError),
        ],
    )
    def test_family(self, error, family):
        assert isinstance(error, family)
        assert isinstance(error, LayoutError)

    def test_all_are_layout_errors(self):
        for error in (ConfigurationError("x"), NodeSizeError("a", -1, 1), ZeroHeightError()):
            assert isinstance(error, LayoutError)
