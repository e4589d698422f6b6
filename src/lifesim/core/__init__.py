"""
Core model primitives.

This layer knows NOTHING about algorithms or timing. It only knows:
- Which cells are alive (CellState)
- Which neighbour counts give birth or survival (Rule)
- How failures are classified (InvalidArgument, ComputationFailure)
"""

from lifesim.core.errors import LifeSimError, InvalidArgument, ComputationFailure, check_steps
from lifesim.core.rules import Rule, CONWAY_LIFE, HIGHLIFE, DAY_AND_NIGHT
from lifesim.core.cell_state import CellState, BoundingBox, EMPTY_BOX

__all__ = [
    "LifeSimError",
    "InvalidArgument",
    "ComputationFailure",
    "check_steps",
    "Rule",
    "CONWAY_LIFE",
    "HIGHLIFE",
    "DAY_AND_NIGHT",
    "CellState",
    "BoundingBox",
    "EMPTY_BOX",
]
