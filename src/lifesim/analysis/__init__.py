"""
Analysis tools.

- benchmark_evolver: repeated wall-clock timing of one evolver
- compare_evolvers: same seed, several evolvers, results cross-checked
"""

from lifesim.analysis.benchmark import BenchmarkResult, benchmark_evolver, compare_evolvers

__all__ = [
    "BenchmarkResult",
    "benchmark_evolver",
    "compare_evolvers",
]
