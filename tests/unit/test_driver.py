"""
Unit tests for the temporal driver.

Each test runs its own event loop with asyncio.run and real time, with
tick intervals small enough to keep the suite fast.
"""

import asyncio
import time

import pytest

from lifesim.algorithms import Evolver, HashLifeEvolver, NaiveEvolver, NodeCache
from lifesim.core import CellState, ComputationFailure, InvalidArgument
from lifesim.patterns import BLINKER, BLOCK, GLIDER
from lifesim.temporal import (
    PAUSED, PacingConfig, Paused, Running, Snapshot, Stopped, TemporalGameOfLifeState,
)


class SlowEvolver(Evolver):
    """NaiveEvolver that blocks its worker thread first."""

    def __init__(self, delay):
        super().__init__()
        self.delay = delay
        self._naive = NaiveEvolver()

    def advance(self, cell_state, steps):
        time.sleep(self.delay)
        return self._naive.advance(cell_state, steps)


class FailingEvolver(Evolver):
    def advance(self, cell_state, steps):
        raise RuntimeError("boom")


async def run_for(state, seconds):
    """Run state.evolve() for `seconds`, then cancel it."""
    task = asyncio.create_task(state.evolve())
    await asyncio.sleep(seconds)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


def collect(state):
    snapshots = []
    state.add_listener(snapshots.append)
    return snapshots


class TestPacingConfig:
    """Tests for PacingConfig validation."""

    def test_defaults(self):
        config = PacingConfig()
        assert config.generations_per_tick == 1
        assert config.target_ticks_per_second == 60.0
        assert config.history_size == 10
        assert config.tick_interval == pytest.approx(1 / 60)

    @pytest.mark.parametrize("kwargs", [
        {"generations_per_tick": 0},
        {"generations_per_tick": -2},
        {"generations_per_tick": 1.5},
        {"generations_per_tick": True},
        {"target_ticks_per_second": 0},
        {"target_ticks_per_second": -1.0},
        {"target_ticks_per_second": float("inf")},
        {"target_ticks_per_second": float("nan")},
        {"history_size": 0},
    ])
    def test_rejects_invalid(self, kwargs):
        with pytest.raises(InvalidArgument):
            PacingConfig(**kwargs)


class TestInitialState:
    """Tests for a driver that has not started evolving."""

    def test_running_by_default(self):
        state = TemporalGameOfLifeState(NaiveEvolver(), BLINKER.seed_cell_state)
        assert state.is_running
        assert state.status == Running(0.0)
        assert state.generation == 0
        assert state.session == 0
        assert state.cell_state == BLINKER.seed_cell_state
        assert state.seed_cell_state == BLINKER.seed_cell_state

    def test_paused(self):
        state = TemporalGameOfLifeState(NaiveEvolver(), is_running=False)
        assert state.status is PAUSED
        assert state.cell_state.is_empty

    def test_paused_and_stopped_are_distinct(self):
        assert Paused() != Stopped(RuntimeError())
        assert not isinstance(PAUSED, Stopped)

    def test_setters_validate(self):
        state = TemporalGameOfLifeState(NaiveEvolver())
        with pytest.raises(InvalidArgument):
            state.generations_per_tick = 0
        with pytest.raises(InvalidArgument):
            state.target_ticks_per_second = -5
        with pytest.raises(InvalidArgument):
            state.cell_state = {(0, 0)}
        assert state.generations_per_tick == 1
        assert state.target_ticks_per_second == 60.0


class TestEvolve:
    """Tests for paced evolution."""

    def test_generation_increments_by_k(self):
        config = PacingConfig(generations_per_tick=3, target_ticks_per_second=100.0)
        state = TemporalGameOfLifeState(NaiveEvolver(), GLIDER.seed_cell_state, config=config)
        snapshots = collect(state)

        asyncio.run(run_for(state, 0.2))

        generations = [s.generation for s in snapshots]
        assert len(generations) >= 3
        assert generations == [3 * (i + 1) for i in range(len(generations))]
        for snap in snapshots:
            assert snap.cell_state == NaiveEvolver().advance(GLIDER.seed_cell_state, snap.generation)
            assert isinstance(snap.status, Running)

    def test_pacing_interval(self):
        config = PacingConfig(generations_per_tick=1, target_ticks_per_second=50.0)
        state = TemporalGameOfLifeState(NaiveEvolver(), BLINKER.seed_cell_state, config=config)

        asyncio.run(run_for(state, 0.3))

        records = state.records
        assert len(records) >= 3
        for record in records:
            assert record.duration >= config.tick_interval
        for earlier, later in zip(records, records[1:]):
            assert later.start_time >= earlier.end_time

    def test_throughput_capped_by_target(self):
        config = PacingConfig(generations_per_tick=2, target_ticks_per_second=40.0)
        state = TemporalGameOfLifeState(NaiveEvolver(), BLINKER.seed_cell_state, config=config)

        asyncio.run(run_for(state, 0.3))

        average = state.status.average_generations_per_second
        assert 0 < average <= 2 * 40.0 + 1e-9

    def test_hashlife_driver(self):
        config = PacingConfig(generations_per_tick=64, target_ticks_per_second=100.0)
        evolver = HashLifeEvolver(cache=NodeCache(max_nodes=None))
        state = TemporalGameOfLifeState(evolver, GLIDER.seed_cell_state, config=config)

        asyncio.run(run_for(state, 0.15))

        n = state.generation // 4
        assert state.generation % 64 == 0
        assert state.cell_state == GLIDER.seed_cell_state.offset_by(n, n)

    def test_single_evolve_at_a_time(self):
        config = PacingConfig(generations_per_tick=1, target_ticks_per_second=100.0)
        state = TemporalGameOfLifeState(NaiveEvolver(), GLIDER.seed_cell_state, config=config)
        snapshots = collect(state)

        async def main():
            first = asyncio.create_task(state.evolve())
            second = asyncio.create_task(state.evolve())
            await asyncio.sleep(0.15)
            for task in (first, second):
                task.cancel()
            await asyncio.gather(first, second, return_exceptions=True)

        asyncio.run(main())

        generations = [s.generation for s in snapshots]
        assert generations == list(range(1, len(generations) + 1))


class TestReconfiguration:
    """Tests for pausing, reseeding and retuning while evolving."""

    def test_pause_stops_generations(self):
        config = PacingConfig(target_ticks_per_second=100.0)
        state = TemporalGameOfLifeState(NaiveEvolver(), GLIDER.seed_cell_state, config=config)

        async def main():
            task = asyncio.create_task(state.evolve())
            await asyncio.sleep(0.1)
            state.set_is_running(False)
            paused_at = state.generation
            await asyncio.sleep(0.1)
            assert state.generation == paused_at
            assert state.status is PAUSED
            assert state.records == ()

            state.is_running = True
            await asyncio.sleep(0.1)
            assert state.generation > paused_at
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        asyncio.run(main())

    def test_reseed_starts_new_session(self):
        config = PacingConfig(target_ticks_per_second=100.0)
        state = TemporalGameOfLifeState(NaiveEvolver(), GLIDER.seed_cell_state, config=config)
        snapshots = collect(state)

        async def main():
            task = asyncio.create_task(state.evolve())
            await asyncio.sleep(0.1)
            state.cell_state = BLOCK.seed_cell_state
            await asyncio.sleep(0.1)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        asyncio.run(main())

        assert state.session == 1
        assert state.seed_cell_state == BLOCK.seed_cell_state
        new_session = [s for s in snapshots if s.session == 1]
        assert new_session[0].generation == 0
        assert [s.generation for s in new_session] == list(range(len(new_session)))
        assert all(s.cell_state == BLOCK.seed_cell_state for s in new_session)

    def test_stale_tick_never_published(self):
        config = PacingConfig(target_ticks_per_second=100.0)
        state = TemporalGameOfLifeState(SlowEvolver(0.1), BLINKER.seed_cell_state, config=config)
        snapshots = collect(state)

        async def main():
            task = asyncio.create_task(state.evolve())
            await asyncio.sleep(0.03)
            # The first tick is still inside the evolver
            state.cell_state = BLOCK.seed_cell_state
            await asyncio.sleep(0.35)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        asyncio.run(main())

        assert not any(s.session == 0 for s in snapshots)
        assert all(s.cell_state == BLOCK.seed_cell_state for s in snapshots)
        assert state.generation >= 1

    def test_retune_restarts_timing(self):
        config = PacingConfig(generations_per_tick=1, target_ticks_per_second=100.0)
        state = TemporalGameOfLifeState(NaiveEvolver(), GLIDER.seed_cell_state, config=config)
        snapshots = collect(state)

        async def main():
            task = asyncio.create_task(state.evolve())
            await asyncio.sleep(0.1)
            state.generations_per_tick = 4
            switched_at = state.generation
            await asyncio.sleep(0.1)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            return switched_at

        switched_at = asyncio.run(main())

        later = [s.generation for s in snapshots if s.generation > switched_at]
        assert later
        assert [b - a for a, b in zip([switched_at] + later, later)] == [4] * len(later)
        assert state.cell_state == NaiveEvolver().advance(GLIDER.seed_cell_state, state.generation)


class TestFaults:
    """Tests for evolver failures."""

    def test_failure_stops_driver(self, caplog):
        state = TemporalGameOfLifeState(FailingEvolver(), GLIDER.seed_cell_state)
        snapshots = collect(state)

        with caplog.at_level("ERROR", logger="lifesim.temporal.driver"):
            asyncio.run(run_for(state, 0.1))

        assert isinstance(state.status, Stopped)
        error = state.status.error
        assert isinstance(error, ComputationFailure)
        assert isinstance(error.__cause__, RuntimeError)
        assert state.cell_state == GLIDER.seed_cell_state
        assert [type(s.status) for s in snapshots] == [Stopped]
        assert "Evolution stopped" in caplog.text

    def test_resume_after_failure(self):
        state = TemporalGameOfLifeState(FailingEvolver(), GLIDER.seed_cell_state)

        async def main():
            task = asyncio.create_task(state.evolve())
            await asyncio.sleep(0.05)
            assert isinstance(state.status, Stopped)
            state.evolver = NaiveEvolver()
            state.set_is_running(True)
            await asyncio.sleep(0.1)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        asyncio.run(main())

        assert isinstance(state.status, Running)
        assert state.generation > 0

    def test_reseed_clears_failure(self):
        state = TemporalGameOfLifeState(FailingEvolver(), GLIDER.seed_cell_state, is_running=False)

        async def main():
            await state.step()
            assert isinstance(state.status, Stopped)
            state.cell_state = BLOCK.seed_cell_state

        asyncio.run(main())
        assert state.status is PAUSED


class TestStep:
    """Tests for manual stepping."""

    def test_step_pauses_and_advances_one_tick(self):
        config = PacingConfig(generations_per_tick=4)
        state = TemporalGameOfLifeState(NaiveEvolver(), GLIDER.seed_cell_state, config=config)

        snapshot = asyncio.run(state.step())

        assert not state.is_running
        assert snapshot.status is PAUSED
        assert snapshot.generation == 4
        assert snapshot.cell_state == GLIDER.seed_cell_state.offset_by(1, 1)

    def test_repeated_steps(self):
        state = TemporalGameOfLifeState(NaiveEvolver(), BLINKER.seed_cell_state, is_running=False)

        async def main():
            for _ in range(3):
                await state.step()

        asyncio.run(main())
        assert state.generation == 3
        assert state.cell_state == BLINKER.cell_states[0]

    def test_overlapping_steps_run_one_after_another(self):
        state = TemporalGameOfLifeState(NaiveEvolver(), GLIDER.seed_cell_state, is_running=False)

        async def main():
            return await asyncio.gather(state.step(), state.step())

        first, second = asyncio.run(main())
        assert first.generation == 1
        assert first.cell_state == GLIDER.cell_states[0]
        assert second.generation == 2
        assert second.cell_state == GLIDER.cell_states[1]
        assert state.snapshot is second


class TestObservation:
    """Tests for listeners and the snapshot stream."""

    def test_remove_listener(self):
        state = TemporalGameOfLifeState(NaiveEvolver(), is_running=False)
        snapshots = collect(state)
        state.remove_listener(snapshots.append)
        state.cell_state = BLOCK.seed_cell_state
        assert snapshots == []

    def test_failing_listener_does_not_break_publishing(self):
        state = TemporalGameOfLifeState(NaiveEvolver(), is_running=False)

        def broken(snapshot):
            raise ValueError("listener bug")

        state.add_listener(broken)
        snapshots = collect(state)
        state.cell_state = BLOCK.seed_cell_state
        assert len(snapshots) == 1

    def test_snapshots_stream(self):
        config = PacingConfig(target_ticks_per_second=100.0)
        state = TemporalGameOfLifeState(NaiveEvolver(), GLIDER.seed_cell_state, config=config)

        async def main():
            task = asyncio.create_task(state.evolve())
            received = []
            async for snapshot in state.snapshots():
                received.append(snapshot)
                if len(received) == 4:
                    break
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            return received

        received = asyncio.run(main())

        assert all(isinstance(s, Snapshot) for s in received)
        assert received[0].generation == 0
        generations = [s.generation for s in received]
        assert generations == sorted(generations)
        assert len(set(generations)) == 4

    def test_snapshots_conflate(self):
        state = TemporalGameOfLifeState(NaiveEvolver(), is_running=False)

        async def main():
            stream = state.snapshots()
            first = await stream.__anext__()
            state.cell_state = BLINKER.seed_cell_state
            state.cell_state = BLOCK.seed_cell_state
            latest = await stream.__anext__()
            await stream.aclose()
            return first, latest

        first, latest = asyncio.run(main())
        assert first.cell_state.is_empty
        assert latest.session == 2
        assert latest.cell_state == BLOCK.seed_cell_state
