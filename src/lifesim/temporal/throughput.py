"""
Throughput tracking for the pacing driver.

Each completed tick leaves a ComputationRecord. The tracker keeps the last
few and reports generations per second over the window they span:

    average = sum(generations) / (newest.end_time - oldest.start_time)

The window includes the time spent waiting out the tick interval, so the
figure is the rate the observer actually sees, not raw evolver speed.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass

from lifesim.core.errors import InvalidArgument


@dataclass(frozen=True)
class ComputationRecord:
    """One completed tick."""
    generations: int     # Generations computed in the tick
    start_time: float    # Clock reading before the evolver call
    end_time: float      # Clock reading after pacing

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


class ThroughputTracker:
    """Bounded history of ComputationRecords."""

    def __init__(self, history_size: int = 10):
        if isinstance(history_size, bool) or not isinstance(history_size, int) or history_size < 1:
            raise InvalidArgument(f"history_size must be a positive int, got {history_size!r}")
        self._records: deque[ComputationRecord] = deque(maxlen=history_size)

    @property
    def history_size(self) -> int:
        return self._records.maxlen

    @property
    def records(self) -> tuple[ComputationRecord, ...]:
        """Oldest first."""
        return tuple(self._records)

    def append(self, record: ComputationRecord) -> None:
        self._records.append(record)

    def clear(self) -> None:
        self._records.clear()

    @property
    def average_generations_per_second(self) -> float:
        """0.0 while the history is empty or spans no time."""
        if not self._records:
            return 0.0
        elapsed = self._records[-1].end_time - self._records[0].start_time
        if elapsed <= 0:
            return 0.0
        return sum(r.generations for r in self._records) / elapsed

    def __len__(self) -> int:
        return len(self._records)
