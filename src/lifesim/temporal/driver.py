"""
TemporalGameOfLifeState: paced, observable evolution over time.

The driver owns the current CellState and advances it in ticks:

1. Record the start time
2. Advance by generations_per_tick on a worker thread
3. Wait until at least 1 / target_ticks_per_second has elapsed since start
4. Record the end time, publish the new Snapshot, append a ComputationRecord

Any reconfiguration (new seed, pause, a new pacing parameter) cancels the
in-flight tick synchronously and starts over from the current state, so a
tick computed under stale parameters is never published. Evolver faults stop
the driver with Stopped(error) until it is resumed or reseeded.

Everything except the evolver call runs on the event loop thread; setters
must be called from that thread (or before evolve() starts).
"""

from __future__ import annotations
import asyncio
import logging
import math
import time
from dataclasses import dataclass, replace
from typing import AsyncIterator, Callable

from lifesim.algorithms.base import Evolver
from lifesim.core.cell_state import CellState
from lifesim.core.errors import ComputationFailure, InvalidArgument
from lifesim.temporal.throughput import ComputationRecord, ThroughputTracker

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Configuration and published values
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PacingConfig:
    """Pacing parameters for the driver."""
    generations_per_tick: int = 1            # Generations computed per tick (k)
    target_ticks_per_second: float = 60.0    # Upper bound on tick rate (T)
    history_size: int = 10                   # Ticks averaged for throughput

    def __post_init__(self):
        k = self.generations_per_tick
        if isinstance(k, bool) or not isinstance(k, int) or k < 1:
            raise InvalidArgument(f"generations_per_tick must be a positive int, got {k!r}")
        t = self.target_ticks_per_second
        if isinstance(t, bool) or not isinstance(t, (int, float)) or not (t > 0 and math.isfinite(t)):
            raise InvalidArgument(f"target_ticks_per_second must be positive and finite, got {t!r}")
        n = self.history_size
        if isinstance(n, bool) or not isinstance(n, int) or n < 1:
            raise InvalidArgument(f"history_size must be a positive int, got {n!r}")

    @property
    def tick_interval(self) -> float:
        """Minimum seconds between the start and end of a tick."""
        return 1.0 / self.target_ticks_per_second


class EvolutionStatus:
    """Base class of the driver's status variants."""


@dataclass(frozen=True)
class Paused(EvolutionStatus):
    pass


@dataclass(frozen=True)
class Running(EvolutionStatus):
    average_generations_per_second: float = 0.0


@dataclass(frozen=True)
class Stopped(EvolutionStatus):
    error: BaseException


PAUSED = Paused()


@dataclass(frozen=True)
class Snapshot:
    """What observers see after every change."""
    cell_state: CellState
    status: EvolutionStatus
    generation: int    # Generations since the seed of this session
    session: int       # Incremented on every new seed


# ═══════════════════════════════════════════════════════════════════════════
# Driver
# ═══════════════════════════════════════════════════════════════════════════

class TemporalGameOfLifeState:
    """
    Holds the evolving CellState and paces its evolution.

    Run `await state.evolve()` in a task; cancel that task to stop for good.
    Observe through add_listener() or `async for snap in state.snapshots()`.
    """

    def __init__(
        self,
        evolver: Evolver,
        cell_state: CellState | None = None,
        is_running: bool = True,
        config: PacingConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.evolver = evolver
        self._config = config if config is not None else PacingConfig()
        self._clock = clock
        self._tracker = ThroughputTracker(self._config.history_size)

        self._seed = cell_state if cell_state is not None else CellState.empty()
        self._session = 0
        self._is_running = bool(is_running)
        self._error: ComputationFailure | None = None
        self._snapshot = Snapshot(self._seed, self._current_status(), 0, self._session)

        self._listeners: list[Callable[[Snapshot], None]] = []
        self._version = 0
        self._published: asyncio.Event | None = None
        self._wakeup: asyncio.Event | None = None

        # Bumped on every reconfiguration; a tick only publishes under its own epoch
        self._epoch = 0
        self._tick_task: asyncio.Task | None = None
        self._evolve_lock = asyncio.Lock()
        self._step_lock = asyncio.Lock()

    # ─── Observable state ──────────────────────────────────────────────

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def cell_state(self) -> CellState:
        return self._snapshot.cell_state

    @cell_state.setter
    def cell_state(self, cell_state: CellState) -> None:
        """Start a new session from `cell_state`."""
        if not isinstance(cell_state, CellState):
            raise InvalidArgument(f"Expected a CellState, got {type(cell_state).__name__}")
        self._seed = cell_state
        self._session += 1
        self._error = None
        self._restart()
        logger.info(
            "Session %d started with population %d", self._session, cell_state.population,
        )
        self._publish(Snapshot(cell_state, self._current_status(), 0, self._session))

    @property
    def seed_cell_state(self) -> CellState:
        return self._seed

    @property
    def status(self) -> EvolutionStatus:
        return self._snapshot.status

    @property
    def generation(self) -> int:
        return self._snapshot.generation

    @property
    def session(self) -> int:
        return self._session

    @property
    def average_generations_per_second(self) -> float:
        return self._tracker.average_generations_per_second

    @property
    def records(self) -> tuple[ComputationRecord, ...]:
        return self._tracker.records

    # ─── Controls ──────────────────────────────────────────────────────

    @property
    def config(self) -> PacingConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return self._is_running

    @is_running.setter
    def is_running(self, flag: bool) -> None:
        self.set_is_running(flag)

    def set_is_running(self, flag: bool) -> None:
        """Pause or resume. Resuming also clears a Stopped state."""
        flag = bool(flag)
        if flag == self._is_running and self._error is None:
            return
        self._is_running = flag
        self._error = None
        self._restart()
        self._publish(replace(self._snapshot, status=self._current_status()))

    @property
    def generations_per_tick(self) -> int:
        return self._config.generations_per_tick

    @generations_per_tick.setter
    def generations_per_tick(self, value: int) -> None:
        self._config = replace(self._config, generations_per_tick=value)
        self._restart()

    @property
    def target_ticks_per_second(self) -> float:
        return self._config.target_ticks_per_second

    @target_ticks_per_second.setter
    def target_ticks_per_second(self, value: float) -> None:
        self._config = replace(self._config, target_ticks_per_second=value)
        self._restart()

    # ─── Observation ───────────────────────────────────────────────────

    def add_listener(self, callback: Callable[[Snapshot], None]) -> None:
        """Call `callback(snapshot)` on every publish, on the event loop thread."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[Snapshot], None]) -> None:
        self._listeners.remove(callback)

    async def snapshots(self) -> AsyncIterator[Snapshot]:
        """
        Yield the current snapshot, then every later one.

        Conflated: a slow consumer skips intermediate snapshots and always
        receives the latest.
        """
        seen = -1
        while True:
            if self._version != seen:
                seen = self._version
                yield self._snapshot
                continue
            if self._published is None:
                self._published = asyncio.Event()
            await self._published.wait()

    # ─── Evolution ─────────────────────────────────────────────────────

    async def evolve(self) -> None:
        """
        Drive the evolution until cancelled.

        Only one evolve() runs at a time; a second caller waits for the
        first to be cancelled.
        """
        async with self._evolve_lock:
            try:
                while True:
                    if not self._is_running or self._error is not None:
                        await self._wait_for_change()
                        continue
                    self._tick_task = asyncio.create_task(self._tick(self._epoch))
                    # wait() leaves the tick alone when evolve() itself is cancelled
                    await asyncio.wait({self._tick_task})
                    task, self._tick_task = self._tick_task, None
                    if not task.cancelled():
                        task.result()
            finally:
                if self._tick_task is not None:
                    self._tick_task.cancel()
                    self._tick_task = None

    async def step(self) -> Snapshot:
        """
        Pause, then compute exactly one tick of generations_per_tick.

        Overlapping calls queue up; each starts from the state the previous
        one published.
        """
        async with self._step_lock:
            self.set_is_running(False)
            epoch = self._epoch
            generations = self._config.generations_per_tick
            current = self._snapshot.cell_state
            try:
                next_state = await asyncio.to_thread(self.evolver.advance, current, generations)
            except Exception as exc:
                if epoch == self._epoch:
                    self._fail(exc)
                return self._snapshot
            if epoch == self._epoch:
                self._publish(Snapshot(
                    next_state, PAUSED, self._snapshot.generation + generations, self._session,
                ))
            return self._snapshot

    async def _tick(self, epoch: int) -> None:
        config = self._config
        current = self._snapshot.cell_state

        start = self._clock()
        try:
            next_state = await asyncio.to_thread(
                self.evolver.advance, current, config.generations_per_tick,
            )
        except Exception as exc:
            if epoch == self._epoch:
                self._fail(exc)
            return
        await self._pace(start, config.tick_interval)
        end = self._clock()

        if epoch != self._epoch:
            return
        self._tracker.append(ComputationRecord(config.generations_per_tick, start, end))
        self._publish(Snapshot(
            next_state,
            Running(self._tracker.average_generations_per_second),
            self._snapshot.generation + config.generations_per_tick,
            self._session,
        ))

    async def _pace(self, start: float, interval: float) -> None:
        """Sleep until `interval` seconds have passed since `start`."""
        while True:
            remaining = interval - (self._clock() - start)
            if remaining <= 0:
                return
            await asyncio.sleep(remaining)

    # ─── Internals ─────────────────────────────────────────────────────

    def _current_status(self) -> EvolutionStatus:
        if self._error is not None:
            return Stopped(self._error)
        if not self._is_running:
            return PAUSED
        return Running(self._tracker.average_generations_per_second)

    def _restart(self) -> None:
        """Abandon the in-flight tick and start timing over."""
        self._epoch += 1
        if self._tick_task is not None:
            self._tick_task.cancel()
        self._tracker.clear()
        if self._wakeup is not None:
            self._wakeup.set()
            self._wakeup = None

    async def _wait_for_change(self) -> None:
        if self._wakeup is None:
            self._wakeup = asyncio.Event()
        await self._wakeup.wait()

    def _fail(self, exc: Exception) -> None:
        error = ComputationFailure(
            f"{type(self.evolver).__name__} failed at generation {self._snapshot.generation}: {exc}"
        )
        error.__cause__ = exc
        logger.exception("Evolution stopped in session %d", self._session)
        self._error = error
        self._tracker.clear()
        self._publish(replace(self._snapshot, status=Stopped(error)))

    def _publish(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot
        self._version += 1
        if self._published is not None:
            self._published.set()
            self._published = None
        for callback in list(self._listeners):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Snapshot listener %r failed", callback)
