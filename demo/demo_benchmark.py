#!/usr/bin/env python3
"""
Demo: Naive vs HashLife

Benchmarks both evolvers on the Gosper glider gun for increasing generation
counts. The naive evolver scales with generations x population; HashLife
reuses memoized blocks and jumps in powers of two, so its cost grows far
more slowly once the gun's period has been seen.

Output: output/demo_benchmark/benchmark_<generations>.png
"""

import os

import matplotlib.pyplot as plt

from lifesim.algorithms import HashLifeEvolver, NaiveEvolver, NodeCache
from lifesim.analysis import compare_evolvers
from lifesim.patterns import GOSPER_GLIDER_GUN
from lifesim.viz import plot_benchmark_results, save_figure


def main():
    print("=" * 60)
    print("  NAIVE vs HASHLIFE BENCHMARK")
    print("=" * 60)

    os.makedirs("output/demo_benchmark", exist_ok=True)

    for generations in (100, 1000):
        evolvers = {
            "naive": NaiveEvolver(),
            "hashlife": HashLifeEvolver(cache=NodeCache()),
        }
        print(f"\n{generations} generations, 5 repeats each")
        results = compare_evolvers(evolvers, GOSPER_GLIDER_GUN, generations, repeats=5)
        for label, result in results.items():
            print(f"   {label:10s} mean {result.mean * 1e3:9.2f} ms  ± {result.stderr * 1e3:7.2f}  "
                  f"best {result.best * 1e3:9.2f} ms  population {result.population}")

        stats = evolvers["hashlife"].cache.stats()
        print(f"   hashlife cache: {stats.nodes} nodes, {stats.memo_hits} hits, {stats.memo_misses} misses")

        fig, ax = plot_benchmark_results(results)
        path = f"output/demo_benchmark/benchmark_{generations}.png"
        save_figure(fig, path)
        plt.close(fig)
        print(f"   Saved: {path}")

    print("\n" + "=" * 60)
    print("  Benchmark complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
