"""
Evolution over wall-clock time.

- TemporalGameOfLifeState: paced driver publishing Snapshots
- PacingConfig: generations per tick and target tick rate
- ThroughputTracker: rolling generations-per-second estimate
"""

from lifesim.temporal.throughput import ComputationRecord, ThroughputTracker
from lifesim.temporal.driver import (
    PacingConfig,
    EvolutionStatus,
    Paused,
    Running,
    Stopped,
    PAUSED,
    Snapshot,
    TemporalGameOfLifeState,
)

__all__ = [
    "ComputationRecord",
    "ThroughputTracker",
    "PacingConfig",
    "EvolutionStatus",
    "Paused",
    "Running",
    "Stopped",
    "PAUSED",
    "Snapshot",
    "TemporalGameOfLifeState",
]
