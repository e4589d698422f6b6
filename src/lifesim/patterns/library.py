"""
Known patterns and their exact evolutions.

Each GameOfLifeTestPattern pairs a seed with the states that follow it
under Conway's rule. They serve as acceptance checks for every evolver and,
because every isometry of the plane maps Life to Life, for every flipped or
translated copy of themselves as well.
"""

from __future__ import annotations
from dataclasses import dataclass

from lifesim.core.cell_state import CellState
from lifesim.core.errors import InvalidArgument


@dataclass(frozen=True)
class GameOfLifeTestPattern:
    """A seed and the generations after it; cell_states[i] is generation i + 1."""

    name: str
    seed_cell_state: CellState
    cell_states: tuple[CellState, ...]

    @property
    def generations(self) -> int:
        return len(self.cell_states)

    def transformed(self, fn) -> GameOfLifeTestPattern:
        """Apply the same cell map to the seed and every expected state."""
        return GameOfLifeTestPattern(
            self.name,
            self.seed_cell_state.transformed(fn),
            tuple(state.transformed(fn) for state in self.cell_states),
        )


def _pattern(text: str, offset=(0, 0)) -> CellState:
    return CellState.from_pattern(text, offset)


# ═══════════════════════════════════════════════════════════════════════════
# Still lifes and oscillators
# ═══════════════════════════════════════════════════════════════════════════

_BLOCK = _pattern("""
    OO
    OO
""")

BLOCK = GameOfLifeTestPattern("block", _BLOCK, (_BLOCK, _BLOCK))

_BLINKER_H = _pattern("""
    ...
    OOO
    ...
""")
_BLINKER_V = _pattern("""
    .O.
    .O.
    .O.
""")

BLINKER = GameOfLifeTestPattern("blinker", _BLINKER_H, (_BLINKER_V, _BLINKER_H, _BLINKER_V))

_BEACON_FULL = _pattern("""
    OO..
    OO..
    ..OO
    ..OO
""")
_BEACON_HOLLOW = _pattern("""
    OO..
    O...
    ...O
    ..OO
""")

BEACON = GameOfLifeTestPattern("beacon", _BEACON_FULL, (_BEACON_HOLLOW, _BEACON_FULL))

# ═══════════════════════════════════════════════════════════════════════════
# Spaceships and methuselah-like seeds
# ═══════════════════════════════════════════════════════════════════════════

# Moves by (+1, +1) every 4 generations
GLIDER = GameOfLifeTestPattern(
    "glider",
    _pattern("""
        .O.
        ..O
        OOO
    """),
    (
        _pattern("""
            O.O
            .OO
            .O.
        """, offset=(0, 1)),
        _pattern("""
            ..O
            O.O
            .OO
        """, offset=(0, 1)),
        _pattern("""
            O..
            .OO
            OO.
        """, offset=(1, 1)),
        _pattern("""
            .O.
            ..O
            OOO
        """, offset=(1, 1)),
    ),
)

SIX_LONG_LINE = GameOfLifeTestPattern(
    "six long line",
    _pattern("OOOOOO"),
    (
        _pattern("""
            .OOOO.
            .OOOO.
            .OOOO.
        """, offset=(0, -1)),
        _pattern("""
            ..OO..
            .O..O.
            O....O
            .O..O.
            ..OO..
        """, offset=(0, -2)),
    ),
)

EMPTY = GameOfLifeTestPattern("empty", CellState.empty(), (CellState.empty(),) * 3)

# Emits a glider every 30 generations; the usual benchmark seed
GOSPER_GLIDER_GUN = _pattern("""
    ........................O...........
    ......................O.O...........
    ............OO......OO............OO
    ...........O...O....OO............OO
    OO........O.....O...OO..............
    OO........O...O.OO....O.O...........
    ..........O.....O.......O...........
    ...........O...O....................
    ............OO......................
""")


TEST_PATTERNS = (BLOCK, BLINKER, BEACON, GLIDER, SIX_LONG_LINE, EMPTY)


def get_pattern(name: str) -> GameOfLifeTestPattern:
    """Look up a pattern by name (case-insensitive)."""
    for pattern in TEST_PATTERNS:
        if pattern.name == name.lower():
            return pattern
    known = ", ".join(p.name for p in TEST_PATTERNS)
    raise InvalidArgument(f"Unknown pattern {name!r}; known patterns: {known}")
