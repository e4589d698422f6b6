"""
CellState: the set of alive cells for a single generation.

The grid is infinite in principle; only a finite set of integer (x, y)
coordinates is ever alive. x grows to the right, y grows downward.

A CellState is never mutated. Every operation that "changes" cells returns
a new CellState, and two CellStates are equal iff their alive sets are
equal, regardless of which evolver produced them.
"""

from __future__ import annotations
from dataclasses import dataclass
from operator import index
from textwrap import dedent
from typing import Callable, Iterable, Iterator

import numpy as np

from lifesim.core.errors import InvalidArgument


Cell = tuple[int, int]

ALIVE_CHARS = frozenset("O*X")
DEAD_CHARS = frozenset(". _")


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive rectangle of cells: left <= x <= right, top <= y <= bottom."""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @property
    def height(self) -> int:
        return self.bottom - self.top + 1

    def contains(self, cell: Cell) -> bool:
        x, y = cell
        return self.left <= x <= self.right and self.top <= y <= self.bottom


EMPTY_BOX = BoundingBox(0, 0, 0, 0)


def _to_cell(cell) -> Cell:
    try:
        x, y = cell
        return index(x), index(y)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"Not an integer (x, y) cell: {cell!r}") from exc


class CellState:
    """
    Immutable set of alive cells.

    Subclasses may store cells differently (see HashLifeCellState) but must
    expose the same alive set through `alive_cells`.
    """

    def __init__(self, cells: Iterable[Cell] = ()):
        self._alive_cells = frozenset(_to_cell(c) for c in cells)

    # ─── Construction ──────────────────────────────────────────────────

    @classmethod
    def empty(cls) -> CellState:
        return CellState()

    @classmethod
    def from_pattern(cls, text: str, offset: Cell = (0, 0)) -> CellState:
        """
        Build a CellState from a literal pattern.

        'O', '*' or 'X' mark alive cells, '.', '_' or space mark dead ones.
        Lines starting with '!' are comments. Common indentation and
        surrounding blank lines are ignored. The first character of the
        first row sits at `offset`.
        """
        lines = [
            line for line in dedent(text).splitlines()
            if not line.lstrip().startswith("!")
        ]
        while lines and not lines[0].strip():
            lines.pop(0)
        while lines and not lines[-1].strip():
            lines.pop()

        ox, oy = _to_cell(offset)
        cells = []
        for y, line in enumerate(lines):
            for x, char in enumerate(line.rstrip()):
                if char in ALIVE_CHARS:
                    cells.append((x + ox, y + oy))
                elif char not in DEAD_CHARS:
                    raise InvalidArgument(f"Unexpected character {char!r} in pattern row {y}")
        return CellState(cells)

    @classmethod
    def from_array(cls, array, offset: Cell = (0, 0)) -> CellState:
        """Build a CellState from a 2D array; truthy entries are alive, row index is y."""
        array = np.asarray(array)
        if array.ndim != 2:
            raise InvalidArgument(f"Expected a 2D array, got shape {array.shape}")
        ox, oy = _to_cell(offset)
        ys, xs = np.nonzero(array)
        return CellState((int(x) + ox, int(y) + oy) for x, y in zip(xs, ys))

    # ─── Queries ──────────────────────────────────────────────────────

    @property
    def alive_cells(self) -> frozenset[Cell]:
        """The set of all cells alive at this generation."""
        return self._alive_cells

    @property
    def population(self) -> int:
        return len(self.alive_cells)

    @property
    def is_empty(self) -> bool:
        return self.population == 0

    @property
    def bounding_box(self) -> BoundingBox:
        """Minimal box enclosing all alive cells; EMPTY_BOX for the empty state."""
        cells = self.alive_cells
        if not cells:
            return EMPTY_BOX
        xs = [x for x, _ in cells]
        ys = [y for _, y in cells]
        return BoundingBox(min(xs), min(ys), max(xs), max(ys))

    def cells_in_window(self, box: BoundingBox) -> list[Cell]:
        """Alive cells inside `box`, sorted row by row."""
        return sorted(
            (c for c in self.alive_cells if box.contains(c)),
            key=lambda c: (c[1], c[0]),
        )

    def to_array(self, box: BoundingBox | None = None) -> np.ndarray:
        """
        Dense boolean view of a window, indexed [y - top, x - left].

        Defaults to the bounding box; the empty state gives a (0, 0) array.
        """
        if box is None:
            if self.is_empty:
                return np.zeros((0, 0), dtype=bool)
            box = self.bounding_box
        grid = np.zeros((box.height, box.width), dtype=bool)
        for x, y in self.alive_cells:
            if box.contains((x, y)):
                grid[y - box.top, x - box.left] = True
        return grid

    # ─── Derived states ───────────────────────────────────────────────

    def transformed(self, fn: Callable[[int, int], Cell]) -> CellState:
        """Apply a cell-wise coordinate map."""
        return CellState(fn(x, y) for x, y in self.alive_cells)

    def offset_by(self, dx: int, dy: int) -> CellState:
        return self.transformed(lambda x, y: (x + dx, y + dy))

    def flip_x(self) -> CellState:
        """Reflect across the x-axis."""
        return self.transformed(lambda x, y: (x, -y))

    def flip_y(self) -> CellState:
        """Reflect across the y-axis."""
        return self.transformed(lambda x, y: (-x, y))

    def transpose(self) -> CellState:
        """Reflect across the diagonal x = y."""
        return self.transformed(lambda x, y: (y, x))

    def union(self, other: CellState) -> CellState:
        return CellState(self.alive_cells | other.alive_cells)

    def with_cell(self, cell: Cell, alive: bool) -> CellState:
        cell = _to_cell(cell)
        if alive:
            return CellState(self.alive_cells | {cell})
        return CellState(self.alive_cells - {cell})

    def equals_modulo_offset(self, other: CellState) -> bool:
        """True if the two states differ only by a translation."""
        if self.population != other.population:
            return False
        if self.is_empty:
            return True
        mine, theirs = self.bounding_box, other.bounding_box
        return self.offset_by(theirs.left - mine.left, theirs.top - mine.top) == other

    # ─── Set protocol ─────────────────────────────────────────────────

    def __contains__(self, cell) -> bool:
        return cell in self.alive_cells

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.alive_cells)

    def __len__(self) -> int:
        return self.population

    def __eq__(self, other) -> bool:
        if not isinstance(other, CellState):
            return NotImplemented
        if self is other:
            return True
        return self.alive_cells == other.alive_cells

    def __hash__(self) -> int:
        return hash(self.alive_cells)

    def __repr__(self) -> str:
        cells = sorted(self.alive_cells, key=lambda c: (c[1], c[0]))
        if len(cells) > 8:
            return f"{type(self).__name__}(population={len(cells)}, box={self.bounding_box})"
        return f"{type(self).__name__}({cells})"
