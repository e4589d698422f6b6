"""
Patterns with known evolutions.

- Still lifes and oscillators: BLOCK, BLINKER, BEACON
- GLIDER: period 4, moves (+1, +1)
- SIX_LONG_LINE: the standard acceptance seed
- EMPTY: stays empty forever
- GOSPER_GLIDER_GUN: seed only, used for benchmarks
"""

from lifesim.patterns.library import (
    GameOfLifeTestPattern,
    BLOCK,
    BLINKER,
    BEACON,
    GLIDER,
    SIX_LONG_LINE,
    EMPTY,
    GOSPER_GLIDER_GUN,
    TEST_PATTERNS,
    get_pattern,
)

__all__ = [
    "GameOfLifeTestPattern",
    "BLOCK",
    "BLINKER",
    "BEACON",
    "GLIDER",
    "SIX_LONG_LINE",
    "EMPTY",
    "GOSPER_GLIDER_GUN",
    "TEST_PATTERNS",
    "get_pattern",
]
