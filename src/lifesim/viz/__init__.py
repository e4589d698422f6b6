"""
Visualization utilities.

- Benchmark comparisons
- Driver throughput history
"""

from lifesim.viz.throughput import (
    plot_benchmark_results,
    plot_throughput_history,
    save_figure,
)

__all__ = [
    "plot_benchmark_results",
    "plot_throughput_history",
    "save_figure",
]
