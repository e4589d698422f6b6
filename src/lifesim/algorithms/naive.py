"""
NaiveEvolver: brute-force stepping over the explicit alive-cell set.

Each generation:
1. Count alive neighbours of every cell adjacent to an alive cell
2. Keep the alive cells themselves as candidates (they may have 0 neighbours)
3. Apply the rule to every candidate

Cost is proportional to the population per generation. This is the
reference the HashLife evolver has to match exactly.
"""

from __future__ import annotations
from collections import Counter

from lifesim.algorithms.base import Evolver
from lifesim.core.cell_state import Cell, CellState
from lifesim.core.errors import check_steps


NEIGHBOUR_OFFSETS = tuple(
    (dx, dy)
    for dy in (-1, 0, 1)
    for dx in (-1, 0, 1)
    if (dx, dy) != (0, 0)
)


class NaiveEvolver(Evolver):

    name = "naive"

    def advance(self, cell_state: CellState, steps: int) -> CellState:
        check_steps(steps)
        if steps == 0:
            return cell_state

        alive = cell_state.alive_cells
        for _ in range(steps):
            if not alive:
                break
            alive = self._step(alive)
        return CellState(alive)

    def _step(self, alive: frozenset[Cell]) -> frozenset[Cell]:
        """Advance one generation."""
        counts = Counter(
            (x + dx, y + dy)
            for x, y in alive
            for dx, dy in NEIGHBOUR_OFFSETS
        )
        candidates = counts.keys() | alive
        is_alive_next = self.rule.is_alive_next
        return frozenset(
            cell for cell in candidates
            if is_alive_next(cell in alive, counts.get(cell, 0))
        )
