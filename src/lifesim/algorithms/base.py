"""
Evolver: the capability "advance a CellState by N generations".

Concrete evolvers only implement `advance`. The lazy generation stream and
the single-step helper are shared here, so every evolver exposes the same
contract and can be swapped for another at any time.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterator

from lifesim.core.cell_state import CellState
from lifesim.core.errors import check_steps
from lifesim.core.rules import Rule, CONWAY_LIFE


class Evolver(ABC):
    """Base class for generation-computing algorithms."""

    name = ""  # e.g. "naive", "hashlife"

    def __init__(self, rule: Rule = CONWAY_LIFE):
        self.rule = rule

    @abstractmethod
    def advance(self, cell_state: CellState, steps: int) -> CellState:
        """
        Return `cell_state` advanced by `steps` generations.

        Args:
            cell_state: The state to evolve (never mutated)
            steps: Non-negative number of generations; 0 returns the input

        Raises:
            InvalidArgument: if steps is negative or not an int
        """

    def next_generation(self, cell_state: CellState) -> CellState:
        return self.advance(cell_state, 1)

    def generations(self, seed: CellState, step: int = 1) -> Iterator[CellState]:
        """
        Lazily yield seed + step, seed + 2 * step, ... forever.

        The seed itself is not yielded. Nothing is computed until the
        consumer asks for the next element.
        """
        check_steps(step, "step")
        return self._generations(seed, step)

    def _generations(self, cell_state: CellState, step: int) -> Iterator[CellState]:
        while True:
            cell_state = self.advance(cell_state, step)
            yield cell_state

    def __repr__(self) -> str:
        return f"{type(self).__name__}(rule={self.rule})"
