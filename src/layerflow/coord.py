"""
Coord operators: assign horizontal positions within the ordered layers.

An operator is any callable taking the ordered layers, setting ``x`` on
every entry (real and dummy) and returning the total width. Adjacent entries
of a layer are kept at least the sum of their half widths apart, and the
built-in operators shift the result so the leftmost edge sits at 0.
"""

import logging
from dataclasses import dataclass
from statistics import median
from typing import Dict, List, Sequence

import numpy as np
from scipy.optimize import lsq_linear

from .errors import ConfigurationError
from .layers import Layers
from .models import LayoutNode

logger = logging.getLogger(__name__)


def separation(left: LayoutNode, right: LayoutNode) -> float:
    """Minimum distance between two adjacent entries of a layer."""
    return (left.width + right.width) / 2


def _packed(layer: Sequence[LayoutNode]) -> List[float]:
    """Positions of a layer packed tightly with its left edge at 0."""
    positions: List[float] = []
    for i, entry in enumerate(layer):
        if i == 0:
            positions.append(entry.width / 2)
        else:
            positions.append(positions[-1] + separation(layer[i - 1], entry))
    return positions


def _finish(layers: Layers) -> float:
    """Shift every x so the leftmost edge is at 0 and return the width."""
    entries = [entry for layer in layers for entry in layer]
    if not entries:
        return 0.0
    left = min(entry.x - entry.width / 2 for entry in entries)
    for entry in entries:
        entry.x -= left
    return max(entry.x + entry.width / 2 for entry in entries)


@dataclass(frozen=True)
class CenterCoord:
    """Pack every layer and center it within the widest layer."""

    def __call__(self, layers: Layers) -> float:
        packed = [_packed(layer) for layer in layers]
        extents = [
            positions[-1] + layer[-1].width / 2 if layer else 0.0
            for layer, positions in zip(layers, packed)
        ]
        width = max(extents, default=0.0)

        for layer, positions, extent in zip(layers, packed, extents):
            offset = (width - extent) / 2
            for entry, x in zip(layer, positions):
                entry.x = x + offset
        return width


def _isotonic(values: Sequence[float]) -> List[float]:
    """Least absolute deviations non-decreasing fit (pool adjacent violators)."""
    blocks: List[List[float]] = []
    for value in values:
        blocks.append([value])
        while len(blocks) > 1 and median(blocks[-2]) > median(blocks[-1]):
            last = blocks.pop()
            blocks[-1].extend(last)

    fitted: List[float] = []
    for block in blocks:
        fitted.extend([median(block)] * len(block))
    return fitted


@dataclass(frozen=True)
class VertCoord:
    """
    Pull every node toward the median x of its neighbours.

    Alternates downward sweeps (toward parents) and upward sweeps (toward
    children). Each layer moves to the positions closest to its targets, in
    total absolute distance, that keep its order and spacing. Pooling at
    medians rather than means keeps a node and the neighbours it follows
    from drifting together round after round.

    Attributes:
        iterations: Maximum number of down and up rounds.
    """

    iterations: int = 64
    tolerance: float = 1e-9

    def __call__(self, layers: Layers) -> float:
        for layer in layers:
            for entry, x in zip(layer, _packed(layer)):
                entry.x = x

        for round_ in range(self.iterations):
            moved = 0.0
            for i in range(1, len(layers)):
                moved = max(moved, self._relax(layers[i], use_parents=True))
            for i in range(len(layers) - 2, -1, -1):
                moved = max(moved, self._relax(layers[i], use_parents=False))
            if moved < self.tolerance:
                logger.debug("vert coord converged after %d rounds", round_ + 1)
                break

        return _finish(layers)

    @staticmethod
    def _relax(layer: List[LayoutNode], use_parents: bool) -> float:
        if not layer:
            return 0.0

        targets = []
        for entry in layer:
            neighbours = entry.parents if use_parents else entry.children
            if neighbours:
                targets.append(median(n.x for n in neighbours))
            else:
                targets.append(entry.x)

        offsets = [0.0]
        for left, right in zip(layer, layer[1:]):
            offsets.append(offsets[-1] + separation(left, right))

        fitted = _isotonic([t - o for t, o in zip(targets, offsets)])
        moved = 0.0
        for entry, value, offset in zip(layer, fitted, offsets):
            x = value + offset
            moved = max(moved, abs(x - entry.x))
            entry.x = x
        return moved

    def with_iterations(self, iterations: int) -> "VertCoord":
        return VertCoord(iterations=iterations, tolerance=self.tolerance)


@dataclass(frozen=True)
class MinCurveCoord:
    """
    Minimize edge curvature with a bounded least squares problem.

    Every x is written as the first position of its layer plus the
    separations and non-negative slacks to its left, which turns the
    ordering constraints into simple bounds. The objective is
    ``weight * sum((x_p - 2 x_n + x_c)^2)`` over every parent, node, child
    path plus ``(1 - weight) * sum((x_p - x_c)^2)`` over every edge.

    Attributes:
        weight: Share of the objective spent on curvature, in [0, 1].
    """

    weight: float = 0.5
    regularization: float = 1e-6

    def __post_init__(self):
        if not 0 <= self.weight <= 1:
            raise ValueError(f"weight must be in [0, 1], but got {self.weight}")

    def __call__(self, layers: Layers) -> float:
        entries = [entry for layer in layers for entry in layer]
        if not entries:
            return 0.0
        index: Dict[LayoutNode, int] = {entry: i for i, entry in enumerate(entries)}
        size = len(entries)

        # x = basis @ z + offsets, z = [first x of layer, slacks...]
        basis = np.zeros((size, size))
        offsets = np.zeros(size)
        lower = np.zeros(size)
        for layer in layers:
            if not layer:
                continue
            first = index[layer[0]]
            lower[first] = -np.inf
            offset = 0.0
            for j, entry in enumerate(layer):
                row = index[entry]
                if j:
                    offset += separation(layer[j - 1], entry)
                basis[row, first : row + 1] = 1.0
                offsets[row] = offset

        terms: List[np.ndarray] = []
        weights: List[float] = []

        def add_term(coefficients: Dict[LayoutNode, float], weight: float) -> None:
            term = np.zeros(size)
            for entry, coefficient in coefficients.items():
                term[index[entry]] += coefficient
            terms.append(term)
            weights.append(weight)

        for entry in entries:
            for child in entry.children:
                if self.weight < 1:
                    add_term({entry: 1.0, child: -1.0}, 1 - self.weight)
                if self.weight > 0:
                    for parent in entry.parents:
                        add_term({parent: 1.0, entry: -2.0, child: 1.0}, self.weight)
        for entry in entries:
            add_term({entry: 1.0}, self.regularization)

        scale = np.sqrt(np.array(weights))[:, None]
        rows = np.array(terms) * scale
        system = rows @ basis
        target = -(rows @ offsets)

        solution = lsq_linear(
            system, target, bounds=(lower, np.full(size, np.inf)), method="bvls"
        )
        if not solution.success:
            logger.debug("min curve solver stopped: %s", solution.message)

        for entry, x in zip(entries, basis @ solution.x + offsets):
            entry.x = float(x)
        return _finish(layers)

    def with_weight(self, weight: float) -> "MinCurveCoord":
        return MinCurveCoord(weight=weight, regularization=self.regularization)


@dataclass(frozen=True)
class GreedyCoord:
    """
    Single left-to-right placement.

    The first layer is packed. Every later entry goes to the mean x of its
    parents, or its packed position if it has none, pushed right as far as
    needed to clear the entry before it.
    """

    def __call__(self, layers: Layers) -> float:
        for depth, layer in enumerate(layers):
            packed = _packed(layer)
            for i, entry in enumerate(layer):
                if depth and entry.parents:
                    desired = sum(p.x for p in entry.parents) / len(entry.parents)
                else:
                    desired = packed[i]
                if i:
                    previous = layer[i - 1]
                    desired = max(desired, previous.x + separation(previous, entry))
                entry.x = desired
        return _finish(layers)


@dataclass(frozen=True)
class TopologicalCoord:
    """Give every entry its own column, in layer-major order."""

    def __call__(self, layers: Layers) -> float:
        offset = 0.0
        for layer in layers:
            for entry in layer:
                entry.x = offset + entry.width / 2
                offset += entry.width
        return offset


def coord_center(*args) -> CenterCoord:
    """Create a centering coord operator."""
    if args:
        raise ConfigurationError("center")
    return CenterCoord()


def coord_vert(*args) -> VertCoord:
    """Create a vertical alignment coord operator."""
    if args:
        raise ConfigurationError("vert")
    return VertCoord()


def coord_min_curve(*args) -> MinCurveCoord:
    """Create a minimum curvature coord operator."""
    if args:
        raise ConfigurationError("minCurve")
    return MinCurveCoord()


def coord_greedy(*args) -> GreedyCoord:
    """Create a greedy coord operator."""
    if args:
        raise ConfigurationError("greedy")
    return GreedyCoord()


def coord_topological(*args) -> TopologicalCoord:
    """Create a topological coord operator."""
    if args:
        raise ConfigurationError("topological")
    return TopologicalCoord()
