"""
Two-state neighbour-count rules in B/S notation.

- B3/S23: Conway's Game of Life
- B36/S23: HighLife (self-replicating)
- B3678/S34678: Day & Night

Rules with birth on 0 neighbours are rejected: they switch on the infinite
dead background, which a sparse alive-cell set cannot represent.
"""

from __future__ import annotations
from dataclasses import dataclass

from lifesim.core.errors import InvalidArgument


@dataclass(frozen=True)
class Rule:
    """Outer-totalistic Moore-neighbourhood rule."""

    birth: frozenset[int]     # Neighbour counts that bring a dead cell alive
    survival: frozenset[int]  # Neighbour counts that keep an alive cell alive

    def __post_init__(self):
        object.__setattr__(self, "birth", frozenset(self.birth))
        object.__setattr__(self, "survival", frozenset(self.survival))
        for count in self.birth | self.survival:
            if isinstance(count, bool) or not isinstance(count, int) or not 0 <= count <= 8:
                raise InvalidArgument(f"Neighbour count out of range: {count!r}")
        if 0 in self.birth:
            raise InvalidArgument("Rules with B0 are not supported on an infinite grid")

    @classmethod
    def parse(cls, rule_str: str) -> Rule:
        """Parse B/S notation like 'B3/S23' into a Rule."""
        birth: set[int] = set()
        survival: set[int] = set()
        seen = set()
        for part in rule_str.upper().replace(" ", "").split("/"):
            if not part or part[0] not in "BS" or part[0] in seen:
                raise InvalidArgument(f"Cannot parse rule: {rule_str!r}")
            seen.add(part[0])
            digits = part[1:]
            if not set(digits) <= set("0123456789"):
                raise InvalidArgument(f"Cannot parse rule: {rule_str!r}")
            counts = {int(c) for c in digits}
            if part[0] == "B":
                birth = counts
            else:
                survival = counts
        if seen != {"B", "S"}:
            raise InvalidArgument(f"Cannot parse rule: {rule_str!r}")
        return cls(frozenset(birth), frozenset(survival))

    def is_alive_next(self, alive: bool, neighbours: int) -> bool:
        """Whether a cell is alive next generation."""
        if alive:
            return neighbours in self.survival
        return neighbours in self.birth

    def __str__(self) -> str:
        birth = "".join(str(c) for c in sorted(self.birth))
        survival = "".join(str(c) for c in sorted(self.survival))
        return f"B{birth}/S{survival}"


CONWAY_LIFE = Rule(frozenset({3}), frozenset({2, 3}))
HIGHLIFE = Rule(frozenset({3, 6}), frozenset({2, 3}))
DAY_AND_NIGHT = Rule(frozenset({3, 6, 7, 8}), frozenset({3, 4, 6, 7, 8}))
