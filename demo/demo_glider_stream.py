#!/usr/bin/env python3
"""
Demo: A Paced Glider Stream

Runs a Gosper glider gun through the temporal driver for a few seconds:

1. The driver advances 4 generations per tick at 20 ticks per second
2. Every published snapshot is printed as it arrives
3. Halfway through, the pace is doubled; the in-flight tick is abandoned
4. The throughput history is plotted at the end

Output: output/demo_glider_stream/throughput.png
"""

import asyncio
import os

import matplotlib.pyplot as plt

from lifesim.algorithms import HashLifeEvolver
from lifesim.patterns import GOSPER_GLIDER_GUN
from lifesim.temporal import PacingConfig, Running, TemporalGameOfLifeState
from lifesim.viz import plot_throughput_history, save_figure


async def run_stream(state: TemporalGameOfLifeState, seconds: float) -> list:
    records = []

    def on_snapshot(snapshot):
        status = snapshot.status
        rate = status.average_generations_per_second if isinstance(status, Running) else 0.0
        print(f"   gen {snapshot.generation:5d}  population {snapshot.cell_state.population:5d}  "
              f"{rate:7.1f} gen/s")

    state.add_listener(on_snapshot)
    evolve_task = asyncio.create_task(state.evolve())

    await asyncio.sleep(seconds / 2)
    records.extend(state.records)
    print("\n   Doubling target_ticks_per_second...\n")
    state.target_ticks_per_second *= 2
    await asyncio.sleep(seconds / 2)
    records.extend(state.records)

    evolve_task.cancel()
    try:
        await evolve_task
    except asyncio.CancelledError:
        pass
    state.remove_listener(on_snapshot)
    return records


def main():
    print("=" * 60)
    print("  PACED GLIDER STREAM")
    print("=" * 60)

    config = PacingConfig(generations_per_tick=4, target_ticks_per_second=20.0)
    state = TemporalGameOfLifeState(HashLifeEvolver(), GOSPER_GLIDER_GUN, config=config)
    print(f"\n1. Seed population {GOSPER_GLIDER_GUN.population}, "
          f"{config.generations_per_tick} generations per tick at {config.target_ticks_per_second} Hz\n")

    records = asyncio.run(run_stream(state, seconds=2.0))

    print(f"\n2. Reached generation {state.generation}, population {state.cell_state.population}")
    print(f"   Bounding box: {state.cell_state.bounding_box}")

    fig, ax = plot_throughput_history(records, title="Glider gun throughput")
    os.makedirs("output/demo_glider_stream", exist_ok=True)
    save_figure(fig, "output/demo_glider_stream/throughput.png")
    plt.close(fig)
    print("\n   Saved: output/demo_glider_stream/throughput.png")

    print("\n" + "=" * 60)
    print("  Stream demonstration complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
