"""
ConfigurableEvolver: delegate to whichever algorithm is currently preferred.

The preference is read on every call, never cached, so flipping it between
two advance() calls takes effect on the second one. Any zero-argument
callable returning an AlgorithmChoice works as the signal; AlgorithmPreference
is a thread-safe in-memory holder for it.
"""

from __future__ import annotations
import logging
import threading
from enum import Enum
from typing import Callable, Mapping

from lifesim.algorithms.base import Evolver
from lifesim.algorithms.hashlife import HashLifeEvolver
from lifesim.algorithms.naive import NaiveEvolver
from lifesim.core.cell_state import CellState
from lifesim.core.errors import InvalidArgument
from lifesim.core.rules import Rule, CONWAY_LIFE

logger = logging.getLogger(__name__)


class AlgorithmChoice(Enum):
    NAIVE = "naive"
    HASHLIFE = "hashlife"


class AlgorithmPreference:
    """Mutable, thread-safe holder of the selected algorithm."""

    def __init__(self, choice: AlgorithmChoice = AlgorithmChoice.HASHLIFE):
        self._lock = threading.Lock()
        self.algorithm_choice = choice

    @property
    def algorithm_choice(self) -> AlgorithmChoice:
        with self._lock:
            return self._choice

    @algorithm_choice.setter
    def algorithm_choice(self, choice: AlgorithmChoice) -> None:
        try:
            choice = AlgorithmChoice(choice)
        except ValueError as exc:
            raise InvalidArgument(f"Unknown algorithm: {choice!r}") from exc
        with self._lock:
            self._choice = choice

    def __call__(self) -> AlgorithmChoice:
        return self.algorithm_choice


def default_evolvers(rule: Rule = CONWAY_LIFE) -> dict[AlgorithmChoice, Evolver]:
    return {
        AlgorithmChoice.NAIVE: NaiveEvolver(rule),
        AlgorithmChoice.HASHLIFE: HashLifeEvolver(rule),
    }


class ConfigurableEvolver(Evolver):
    """
    Evolver that switches implementation per call.

    Args:
        choice: Zero-arg callable returning the AlgorithmChoice to use
        evolvers: Implementation per choice (default: naive + hashlife)
        rule: Rule shared by every delegate
    """

    name = "configurable"

    def __init__(
        self,
        choice: Callable[[], AlgorithmChoice],
        evolvers: Mapping[AlgorithmChoice, Evolver] | None = None,
        rule: Rule = CONWAY_LIFE,
    ):
        super().__init__(rule)
        if evolvers is None:
            evolvers = default_evolvers(rule)
        for evolver in evolvers.values():
            if evolver.rule != rule:
                raise InvalidArgument(
                    f"{evolver!r} computes {evolver.rule}, configurable evolver uses {rule}"
                )
        self.choice = choice
        self.evolvers = dict(evolvers)
        self._last_used: str | None = None

    @property
    def current(self) -> Evolver:
        """The evolver selected right now."""
        choice = self.choice()
        try:
            return self.evolvers[choice]
        except KeyError:
            raise InvalidArgument(f"No evolver registered for {choice!r}") from None

    def advance(self, cell_state: CellState, steps: int) -> CellState:
        evolver = self.current
        if evolver.name != self._last_used:
            logger.debug("Evolving with %s", evolver.name)
            self._last_used = evolver.name
        return evolver.advance(cell_state, steps)
