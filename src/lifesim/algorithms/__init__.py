"""
Generation-computing algorithms.

- NaiveEvolver: steps the explicit alive set one generation at a time
- HashLifeEvolver: memoized quadtree evolution, exponential jumps
- ConfigurableEvolver: picks one of the above on every call
"""

from lifesim.algorithms.base import Evolver
from lifesim.algorithms.naive import NaiveEvolver
from lifesim.algorithms.macrocell import Node, NodeCache, CacheStats, ALIVE, DEAD
from lifesim.algorithms.hashlife import HashLifeEvolver, HashLifeCellState
from lifesim.algorithms.configurable import (
    AlgorithmChoice,
    AlgorithmPreference,
    ConfigurableEvolver,
    default_evolvers,
)

__all__ = [
    "Evolver",
    "NaiveEvolver",
    "Node",
    "NodeCache",
    "CacheStats",
    "ALIVE",
    "DEAD",
    "HashLifeEvolver",
    "HashLifeCellState",
    "AlgorithmChoice",
    "AlgorithmPreference",
    "ConfigurableEvolver",
    "default_evolvers",
]
