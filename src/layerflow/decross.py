"""
Decross operators: reorder nodes within layers to reduce edge crossings.

An operator is any callable taking the ordered layers and reordering each
inner list in place. Only edges between adjacent layers exist at this stage.
"""

import logging
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple

from .errors import ConfigurationError
from .layers import Layers, count_crossings
from .models import LayoutNode

logger = logging.getLogger(__name__)

ORDERS = ("median", "mean")


def _median(values: Sequence[int]) -> float:
    middle = len(values) // 2
    if len(values) % 2:
        return float(values[middle])
    return (values[middle - 1] + values[middle]) / 2


def _mean(values: Sequence[int]) -> float:
    return sum(values) / len(values)


@dataclass(frozen=True)
class TwoLayerDecross:
    """
    Layer-by-layer sweep heuristic.

    Sweeps alternate downward (ordering each layer by its parents) and upward
    (ordering each layer by its children). The best ordering seen is kept,
    and sweeping stops once a full down and up round brings no improvement,
    crossings reach zero, or ``passes`` sweeps have run.

    Attributes:
        order: "median" or "mean" (barycenter) of neighbour positions.
        passes: Maximum number of sweeps.
    """

    order: str = "median"
    passes: int = 24

    def __post_init__(self):
        if self.order not in ORDERS:
            raise ValueError(f"unknown order {self.order!r}, expected one of {ORDERS}")

    def __call__(self, layers: Layers) -> None:
        if len(layers) < 2:
            return

        best = [list(layer) for layer in layers]
        best_count = count_crossings(layers)
        stale = 0

        for sweep in range(self.passes):
            if best_count == 0 or stale >= 2:
                break

            if sweep % 2 == 0:
                for i in range(1, len(layers)):
                    self._reorder(layers[i], layers[i - 1], use_parents=True)
            else:
                for i in range(len(layers) - 2, -1, -1):
                    self._reorder(layers[i], layers[i + 1], use_parents=False)

            count = count_crossings(layers)
            if count < best_count:
                best = [list(layer) for layer in layers]
                best_count = count
                stale = 0
            else:
                stale += 1

        logger.debug("two layer decross kept %d crossings", best_count)
        for layer, order in zip(layers, best):
            layer[:] = order

    def _reorder(
        self,
        layer: List[LayoutNode],
        reference: List[LayoutNode],
        use_parents: bool,
    ) -> None:
        """Stable sort of a layer by the aggregate position of its neighbours."""
        ref_positions = {entry: i for i, entry in enumerate(reference)}
        current = {entry: i for i, entry in enumerate(layer)}
        aggregate = _median if self.order == "median" else _mean

        def key(entry: LayoutNode) -> float:
            neighbours = entry.parents if use_parents else entry.children
            positions = sorted(ref_positions[n] for n in neighbours)
            if not positions:
                # Keep original order for nodes with no connections to ref layer
                return current[entry]
            return aggregate(positions)

        layer.sort(key=key)

    def with_order(self, order: str) -> "TwoLayerDecross":
        return TwoLayerDecross(order=order, passes=self.passes)

    def with_passes(self, passes: int) -> "TwoLayerDecross":
        return TwoLayerDecross(order=self.order, passes=passes)


class _SearchState(NamedTuple):
    """
    A partial ordering of the layer at ``depth``.

    ``pending`` is the entry placed last. Its effect on ``remaining``,
    ``cross``, ``rows`` and ``mins`` is applied only when the state is
    expanded, so pushing a child costs O(1) besides copying ``placed``.
    """

    depth: int
    done: Tuple[Tuple[int, ...], ...]
    placed: Tuple[int, ...]
    cost: int
    pair_costs: List[List[int]]
    remaining: Tuple[int, ...]
    # cross[r]: crossings of r against every placed entry if r goes next
    cross: Tuple[int, ...]
    # rows[r]: crossings of r against the remaining entries if r goes next
    rows: Tuple[int, ...]
    # mins[r]: sum of the cheaper pair order between r and each remaining entry
    mins: Tuple[int, ...]
    pending: Optional[int] = None


@dataclass(frozen=True)
class OptimalDecross:
    """
    Exact crossing minimization by branch and bound.

    Layers are fixed from the top down and nodes placed one at a time, so the
    crossings a placement adds are known exactly from the layer above. A
    branch is cut when its cost plus a lower bound on the rest of the current
    layer cannot beat the best ordering found so far. The search starts from
    the current ordering, so stopping at ``max_nodes`` expansions still
    leaves a valid ordering no worse than the input.

    The bound terms are kept per entry and updated as entries are placed, so
    an expansion of a layer with k entries costs O(k log k).

    Attributes:
        max_nodes: Maximum number of search states to expand. None is
            unbounded.
    """

    max_nodes: Optional[int] = 20000

    def __call__(self, layers: Layers) -> None:
        if len(layers) < 2:
            return

        best_cost = count_crossings(layers)
        if best_cost == 0:
            return
        best: Optional[Tuple[Tuple[int, ...], ...]] = None

        first = [[0] * len(layers[0]) for _ in layers[0]]
        stack = [self._start(0, (), 0, first)]
        expanded = 0

        while stack:
            if self.max_nodes is not None and expanded >= self.max_nodes:
                logger.debug(
                    "optimal decross stopped after %d expansions with %d crossings",
                    expanded,
                    best_cost,
                )
                break
            state = stack.pop()
            if state.cost >= best_cost:
                continue
            state = self._apply(state)
            expanded += 1

            if not state.remaining:
                done = state.done + (state.placed,)
                if state.depth + 1 == len(layers):
                    if state.cost < best_cost:
                        best_cost = state.cost
                        best = done
                    continue
                order = [layers[state.depth][i] for i in state.placed]
                pair_costs = self._pair_costs(layers[state.depth + 1], order)
                stack.append(self._start(state.depth + 1, done, state.cost, pair_costs))
                continue

            stack.extend(reversed(self._branch(state, best_cost)))

        if best is None:
            return
        for layer, placed in zip(layers, best):
            layer[:] = [layer[i] for i in placed]

    @staticmethod
    def _pair_costs(
        entries: List[LayoutNode], upper: List[LayoutNode]
    ) -> List[List[int]]:
        """``costs[u][v]``: crossings between u's and v's edges if u is left of v."""
        positions = {entry: i for i, entry in enumerate(upper)}
        parent_positions = [[positions[p] for p in entry.parents] for entry in entries]
        return [
            [
                sum(1 for a in left for b in right if a > b) if u != v else 0
                for v, right in enumerate(parent_positions)
            ]
            for u, left in enumerate(parent_positions)
        ]

    @staticmethod
    def _start(
        depth: int,
        done: Tuple[Tuple[int, ...], ...],
        cost: int,
        costs: List[List[int]],
    ) -> _SearchState:
        """Root state of a layer with nothing placed."""
        size = len(costs)
        rows = tuple(sum(row) for row in costs)
        mins = tuple(
            sum(min(costs[a][b], costs[b][a]) for b in range(size))
            for a in range(size)
        )
        return _SearchState(
            depth, done, (), cost, costs, tuple(range(size)), (0,) * size, rows, mins
        )

    @staticmethod
    def _apply(state: _SearchState) -> _SearchState:
        """Move the pending entry out of the remaining ones in O(k)."""
        placed = state.pending
        if placed is None:
            return state
        costs = state.pair_costs
        return state._replace(
            remaining=tuple(r for r in state.remaining if r != placed),
            cross=tuple(c + costs[placed][r] for r, c in enumerate(state.cross)),
            rows=tuple(c - costs[r][placed] for r, c in enumerate(state.rows)),
            mins=tuple(
                c - min(costs[r][placed], costs[placed][r])
                for r, c in enumerate(state.mins)
            ),
            pending=None,
        )

    @staticmethod
    def _branch(state: _SearchState, best_cost: int) -> List[_SearchState]:
        """Children of a state in best-first order, pruned against best_cost."""
        cross_total = sum(state.cross[r] for r in state.remaining)
        pair_total = sum(state.mins[r] for r in state.remaining) // 2
        children = []

        for entry in state.remaining:
            # placed-before-rest crossings, entry-before-rest crossings and the
            # cheapest order of every pair still to place
            bound = (
                state.cost
                + cross_total
                + state.rows[entry]
                + pair_total
                - state.mins[entry]
            )
            if bound >= best_cost:
                continue
            added = state.cross[entry]
            children.append(
                (
                    added,
                    entry,
                    state._replace(
                        placed=state.placed + (entry,),
                        cost=state.cost + added,
                        pending=entry,
                    ),
                )
            )

        children.sort(key=lambda child: child[:2])
        return [child for _, _, child in children]

    def with_max_nodes(self, max_nodes: Optional[int]) -> "OptimalDecross":
        return OptimalDecross(max_nodes=max_nodes)


def decross_two_layer(*args) -> TwoLayerDecross:
    """Create a two layer sweep decross operator."""
    if args:
        raise ConfigurationError("twoLayer")
    return TwoLayerDecross()


def decross_opt(*args) -> OptimalDecross:
    """Create an optimal decross operator."""
    if args:
        raise ConfigurationError("opt")
    return OptimalDecross()
