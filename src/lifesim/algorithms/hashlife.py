"""
HashLifeEvolver: memoized evolution of canonical quadtrees.

For a node of level k, the successor is its central 2^(k-1) block advanced
by 2^j generations (j <= k - 2). It is built from the nine overlapping
level k-1 sub-blocks:

    c1 c2 c3
    c4 c5 c6      each advanced recursively, then recombined
    c7 c8 c9      into four level k-1 nodes whose centres form the result

When j == k - 2 the recombined nodes are advanced a second time, doubling
the jump at every level. The recursion bottoms out at level 2, where the
rule is applied to a 4x4 block directly.

Arbitrary step counts are decomposed in binary: one exact power-of-two jump
per set bit, largest first. Before each jump of 2^j the universe is
re-embedded until it is at least level j + 3 with every alive cell in its
central quarter, so the pattern can never outgrow the returned block.
"""

from __future__ import annotations
import logging

from lifesim.algorithms.base import Evolver
from lifesim.algorithms.macrocell import (
    ALIVE, DEAD, MIN_ROOT_LEVEL, Node, NodeCache, iter_alive,
)
from lifesim.core.cell_state import Cell, CellState
from lifesim.core.errors import InvalidArgument, check_steps
from lifesim.core.rules import Rule, CONWAY_LIFE

logger = logging.getLogger(__name__)


class HashLifeCellState(CellState):
    """
    A CellState backed by a canonical quadtree.

    The alive set is decoded lazily, so chaining advance() calls on the
    same cache never leaves the quadtree representation.
    """

    def __init__(self, root: Node, origin: Cell, cache: NodeCache):
        self.root = root
        self.origin = origin
        self.cache = cache
        self._alive_cells = None
        cache.register(self)

    @property
    def alive_cells(self) -> frozenset[Cell]:
        if self._alive_cells is None:
            ox, oy = self.origin
            self._alive_cells = frozenset(iter_alive(self.root, ox, oy))
        return self._alive_cells

    @property
    def population(self) -> int:
        return self.root.population


class HashLifeEvolver(Evolver):
    """
    Evolver backed by a NodeCache.

    By default every HashLifeEvolver for a given rule shares the
    process-wide cache, so memoized results carry over between instances.
    """

    name = "hashlife"

    def __init__(self, rule: Rule = CONWAY_LIFE, cache: NodeCache | None = None):
        super().__init__(rule)
        if cache is None:
            cache = NodeCache.shared(rule)
        elif cache.rule != rule:
            raise InvalidArgument(f"Cache computes {cache.rule}, evolver needs {rule}")
        self.cache = cache

    def advance(self, cell_state: CellState, steps: int) -> CellState:
        check_steps(steps)
        if steps == 0 or cell_state.is_empty:
            return cell_state

        cache = self.cache
        with cache.session():
            root, (ox, oy) = self._encode(cell_state)
            for jump in reversed(range(steps.bit_length())):
                if not (steps >> jump) & 1:
                    continue
                root, ox, oy = self._pad(root, ox, oy, jump)
                quarter = 1 << (root.level - 2)
                root = self.successor(root, jump)
                ox += quarter
                oy += quarter
                cache.maybe_collect(roots=(root,))
            root, ox, oy = self._crop(root, ox, oy)
            return HashLifeCellState(root, (ox, oy), cache)

    def successor(self, node: Node, jump: int) -> Node:
        """
        The central half of `node` advanced by 2^jump generations.

        Memoized on the node; requires node.level >= 2 and jump <= level - 2.
        """
        if node.population == 0:
            return node.nw
        cached = node.cached_result(jump)
        if cached is not None:
            self.cache.memo_hits += 1
            return cached
        self.cache.memo_misses += 1

        if node.level == 2:
            result = self._step_4x4(node)
        else:
            result = self._recurse(node, jump)
        return self.cache.remember(node, jump, result)

    def _recurse(self, node: Node, jump: int) -> Node:
        join = self.cache.join
        sub_jump = min(jump, node.level - 3)
        nw, ne, sw, se = node.nw, node.ne, node.sw, node.se

        c1 = self.successor(nw, sub_jump)
        c2 = self.successor(join(nw.ne, ne.nw, nw.se, ne.sw), sub_jump)
        c3 = self.successor(ne, sub_jump)
        c4 = self.successor(join(nw.sw, nw.se, sw.nw, sw.ne), sub_jump)
        c5 = self.successor(join(nw.se, ne.sw, sw.ne, se.nw), sub_jump)
        c6 = self.successor(join(ne.sw, ne.se, se.nw, se.ne), sub_jump)
        c7 = self.successor(sw, sub_jump)
        c8 = self.successor(join(sw.ne, se.nw, sw.se, se.sw), sub_jump)
        c9 = self.successor(se, sub_jump)

        if jump < node.level - 2:
            # Already advanced by 2^jump: only the centres are needed
            return join(
                join(c1.se, c2.sw, c4.ne, c5.nw),
                join(c2.se, c3.sw, c5.ne, c6.nw),
                join(c4.se, c5.sw, c7.ne, c8.nw),
                join(c5.se, c6.sw, c8.ne, c9.nw),
            )
        return join(
            self.successor(join(c1, c2, c4, c5), sub_jump),
            self.successor(join(c2, c3, c5, c6), sub_jump),
            self.successor(join(c4, c5, c7, c8), sub_jump),
            self.successor(join(c5, c6, c8, c9), sub_jump),
        )

    def _step_4x4(self, node: Node) -> Node:
        """One generation of the central 2x2 block of a 4x4 node."""
        rows = (
            (node.nw.nw, node.nw.ne, node.ne.nw, node.ne.ne),
            (node.nw.sw, node.nw.se, node.ne.sw, node.ne.se),
            (node.sw.nw, node.sw.ne, node.se.nw, node.se.ne),
            (node.sw.sw, node.sw.se, node.se.sw, node.se.se),
        )
        bits = [[leaf.population for leaf in row] for row in rows]
        is_alive_next = self.rule.is_alive_next

        def next_cell(x: int, y: int) -> Node:
            count = sum(
                bits[y + dy][x + dx]
                for dy in (-1, 0, 1)
                for dx in (-1, 0, 1)
            ) - bits[y][x]
            return ALIVE if is_alive_next(bool(bits[y][x]), count) else DEAD

        return self.cache.join(next_cell(1, 1), next_cell(2, 1), next_cell(1, 2), next_cell(2, 2))

    def _encode(self, cell_state: CellState) -> tuple[Node, Cell]:
        if isinstance(cell_state, HashLifeCellState) and cell_state.cache is self.cache:
            return cell_state.root, cell_state.origin
        return self.cache.build(cell_state.alive_cells)

    def _pad(self, root: Node, ox: int, oy: int, jump: int) -> tuple[Node, int, int]:
        """Re-embed one level higher until a 2^jump step cannot clip anything."""
        while root.level < jump + 3 or not self.cache.is_padded(root):
            shift = 1 << (root.level - 1)
            root = self.cache.centre(root)
            ox -= shift
            oy -= shift
        return root, ox, oy

    def _crop(self, root: Node, ox: int, oy: int) -> tuple[Node, int, int]:
        """Strip empty margins so the next advance starts from a small root."""
        while root.level > MIN_ROOT_LEVEL and self.cache.is_padded(root):
            shift = 1 << (root.level - 2)
            root = self.cache.inner(root)
            ox += shift
            oy += shift
        return root, ox, oy
