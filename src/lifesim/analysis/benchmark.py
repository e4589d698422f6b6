"""
Wall-clock benchmarks of evolvers.

Times `evolver.advance(seed, generations)` several times and summarises:
- mean and standard error of the run time (scipy.stats.sem)
- generations per second at the mean

HashLife memoizes across calls on a shared cache, so its first repeat is
usually far slower than the rest. Pass a fresh NodeCache to time cold runs.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Callable, Mapping

import numpy as np
from scipy import stats

from lifesim.algorithms.base import Evolver
from lifesim.core.cell_state import CellState
from lifesim.core.errors import ComputationFailure, InvalidArgument, check_steps

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkResult:
    """Timings of one evolver on one seed."""

    name: str
    generations: int
    timings: np.ndarray       # Seconds per repeat
    final_state: CellState    # Result of the last repeat

    @property
    def population(self) -> int:
        return self.final_state.population

    @property
    def mean(self) -> float:
        return float(np.mean(self.timings))

    @property
    def stderr(self) -> float:
        """Standard error of the mean; 0.0 for a single repeat."""
        if len(self.timings) < 2:
            return 0.0
        return float(stats.sem(self.timings))

    @property
    def best(self) -> float:
        return float(np.min(self.timings))

    @property
    def generations_per_second(self) -> float:
        if self.mean <= 0:
            return float("inf")
        return self.generations / self.mean


def benchmark_evolver(
    evolver: Evolver,
    seed: CellState,
    generations: int,
    repeats: int = 5,
    clock: Callable[[], float] = time.perf_counter,
) -> BenchmarkResult:
    """
    Time `repeats` independent advances of `seed` by `generations`.

    Raises:
        InvalidArgument: if generations is negative or repeats < 1
    """
    check_steps(generations, "generations")
    if isinstance(repeats, bool) or not isinstance(repeats, int) or repeats < 1:
        raise InvalidArgument(f"repeats must be a positive int, got {repeats!r}")

    timings = np.empty(repeats, dtype=np.float64)
    result = seed
    for i in range(repeats):
        start = clock()
        result = evolver.advance(seed, generations)
        timings[i] = clock() - start

    name = evolver.name or type(evolver).__name__
    logger.debug("%s: %d generations x %d repeats, mean %.6fs", name, generations, repeats, timings.mean())
    return BenchmarkResult(name, generations, timings, result)


def compare_evolvers(
    evolvers: Mapping[str, Evolver],
    seed: CellState,
    generations: int,
    repeats: int = 5,
) -> dict[str, BenchmarkResult]:
    """
    Benchmark several evolvers on the same seed.

    Raises:
        ComputationFailure: if the evolvers end in different states
    """
    results: dict[str, BenchmarkResult] = {}
    for label, evolver in evolvers.items():
        result = benchmark_evolver(evolver, seed, generations, repeats)
        result.name = label
        results[label] = result

    states = [r.final_state for r in results.values()]
    if any(state != states[0] for state in states[1:]):
        raise ComputationFailure(f"Evolvers disagree after {generations} generations")
    return results
