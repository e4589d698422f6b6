"""
Plots of evolver performance.

- Benchmark bar charts with standard-error bars
- Throughput history of a running driver (generations per tick over time)

Cells themselves are never drawn here; rendering is left to the caller.
"""

from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Sequence

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

if TYPE_CHECKING:
    from lifesim.analysis.benchmark import BenchmarkResult
    from lifesim.temporal.throughput import ComputationRecord


def plot_benchmark_results(
    results: Mapping[str, "BenchmarkResult"],
    title: str = "",
    log_scale: bool = True,
    ax: Axes | None = None,
    figsize: tuple[float, float] = (8, 5),
) -> tuple[Figure, Axes]:
    """
    Bar chart of mean run time per evolver.

    Args:
        results: Label -> BenchmarkResult (e.g. from compare_evolvers)
        title: Axes title; defaults to the generation count
        log_scale: Use a logarithmic time axis
        ax: Existing axes (creates new if None)
        figsize: Figure size if creating new figure

    Returns:
        (fig, ax) tuple
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    labels = list(results)
    means = np.array([results[k].mean for k in labels])
    errors = np.array([results[k].stderr for k in labels])
    positions = np.arange(len(labels))

    ax.bar(positions, means, yerr=errors, capsize=4, color="tab:blue", alpha=0.8)
    ax.set_xticks(positions)
    ax.set_xticklabels(labels)
    ax.set_ylabel("Time per run (s)")
    if log_scale and np.all(means > 0):
        ax.set_yscale("log")
    ax.grid(True, axis="y", alpha=0.3)

    if not title and labels:
        title = f"{results[labels[0]].generations} generations"
    ax.set_title(title)

    return fig, ax


def plot_throughput_history(
    records: Sequence["ComputationRecord"],
    title: str = "Throughput",
    ax: Axes | None = None,
    figsize: tuple[float, float] = (8, 5),
) -> tuple[Figure, Axes]:
    """
    Generations per second of each tick, against tick end time.

    Times are relative to the start of the first record.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    if records:
        t0 = records[0].start_time
        ends = np.array([r.end_time - t0 for r in records])
        durations = np.array([r.duration for r in records])
        generations = np.array([r.generations for r in records], dtype=np.float64)
        rates = np.divide(
            generations, durations,
            out=np.zeros_like(generations), where=durations > 0,
        )
        ax.plot(ends, rates, "o-", label="per tick")

        total = ends[-1]
        if total > 0:
            ax.axhline(generations.sum() / total, color="tab:orange", linestyle="--", label="window average")
        ax.legend()

    ax.set_xlabel("Time (s)")
    ax.set_ylabel("Generations per second")
    ax.set_title(title)
    ax.grid(True, alpha=0.3)

    return fig, ax


def save_figure(fig: Figure, path: str | Path, dpi: int = 150, **kwargs) -> None:
    """Save figure to file."""
    fig.savefig(path, dpi=dpi, bbox_inches="tight", **kwargs)
