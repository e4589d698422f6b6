"""
Quadtree nodes and the hash-consing store behind HashLife.

A node of level k covers a 2^k x 2^k block of cells:
- Level 0 nodes are the two leaves ALIVE and DEAD
- Interior nodes hold four children (nw, ne, sw, se) of level k - 1

Nodes are immutable and canonical: NodeCache.join() returns the same object
for the same child quadruple, so structurally identical regions share one
node. Equality is object identity; the precomputed content hash only
spreads nodes across the table. Memoized evolution results hang off the
node itself, which is what lets one computation serve every occurrence of a
region, anywhere and at any time.

Memory is bounded by mark-and-sweep: when the table outgrows max_nodes,
everything unreachable from the live quadtrees is dropped.
"""

from __future__ import annotations
import logging
import threading
import weakref
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator

from lifesim.core.cell_state import Cell
from lifesim.core.errors import InvalidArgument
from lifesim.core.rules import Rule, CONWAY_LIFE

logger = logging.getLogger(__name__)


# Smallest root the evolver works with (8x8): every root has grandchildren
MIN_ROOT_LEVEL = 3

# Default table bound, in nodes
DEFAULT_MAX_NODES = 1 << 20

_HASH_MASK = (1 << 63) - 1


class Node:
    """Canonical quadtree node. Compare with `is`, never by contents."""

    __slots__ = (
        "level", "nw", "ne", "sw", "se", "population",
        "_hash", "_result", "_jumps",
    )

    def __init__(self, level: int, nw, ne, sw, se, population: int, node_hash: int):
        self.level = level
        self.nw = nw
        self.ne = ne
        self.sw = sw
        self.se = se
        self.population = population
        self._hash = node_hash
        # Centre advanced by 2^(level - 2) generations, filled lazily
        self._result: Node | None = None
        # Centre advanced by 2^j generations for j < level - 2
        self._jumps: dict[int, Node] | None = None

    @property
    def size(self) -> int:
        """Side length in cells."""
        return 1 << self.level

    def cached_result(self, jump: int) -> Node | None:
        """Memoized centre advanced by 2^jump generations, if computed."""
        if jump == self.level - 2:
            return self._result
        if self._jumps is None:
            return None
        return self._jumps.get(jump)

    def __hash__(self) -> int:
        return self._hash

    def __repr__(self) -> str:
        return f"Node(level={self.level}, {self.size}x{self.size}, population={self.population})"


ALIVE = Node(0, None, None, None, None, 1, 1)
DEAD = Node(0, None, None, None, None, 0, 0)


@dataclass
class CacheStats:
    """Counters describing a NodeCache."""

    nodes: int
    memo_hits: int
    memo_misses: int
    collections: int
    evicted: int


class NodeCache:
    """
    Canonical node table for one rule.

    Lookups are lock-free; creating a node takes the lock, so two threads
    building the same quadruple converge on one shared node.
    """

    _shared: dict[Rule, NodeCache] = {}
    _shared_lock = threading.Lock()

    def __init__(self, rule: Rule = CONWAY_LIFE, max_nodes: int | None = DEFAULT_MAX_NODES):
        """
        Args:
            rule: The rule memoized results are computed under
            max_nodes: Table size that triggers a collection (None = unbounded)
        """
        if max_nodes is not None and (isinstance(max_nodes, bool) or max_nodes < 1):
            raise InvalidArgument(f"max_nodes must be positive or None, got {max_nodes!r}")
        self.rule = rule
        self.max_nodes = max_nodes

        self._table: dict[tuple[Node, Node, Node, Node], Node] = {}
        self._lock = threading.RLock()
        self._empties: list[Node] = [DEAD]

        # States handed out to callers; their roots survive every collection
        self._live_states: weakref.WeakValueDictionary = weakref.WeakValueDictionary()
        self._active = 0
        self._collect_threshold = max_nodes

        self.memo_hits = 0
        self.memo_misses = 0
        self.collections = 0
        self.evicted = 0

    @classmethod
    def shared(cls, rule: Rule = CONWAY_LIFE) -> NodeCache:
        """The process-wide cache for `rule`."""
        with cls._shared_lock:
            cache = cls._shared.get(rule)
            if cache is None:
                cache = cls(rule)
                cls._shared[rule] = cache
            return cache

    # ─── Canonical construction ─────────────────────────────────────────

    def join(self, nw: Node, ne: Node, sw: Node, se: Node) -> Node:
        """The canonical node with these four children."""
        key = (nw, ne, sw, se)
        node = self._table.get(key)
        if node is not None:
            return node
        with self._lock:
            node = self._table.get(key)
            if node is None:
                if not nw.level == ne.level == sw.level == se.level:
                    raise InvalidArgument("Children of a node must share one level")
                node_hash = (
                    nw.level + 2
                    + 5131830419411 * nw._hash
                    + 3758991985019 * ne._hash
                    + 8973110871315 * sw._hash
                    + 4318490180473 * se._hash
                ) & _HASH_MASK
                population = nw.population + ne.population + sw.population + se.population
                node = Node(nw.level + 1, nw, ne, sw, se, population, node_hash)
                self._table[key] = node
            return node

    def empty(self, level: int) -> Node:
        """The canonical all-dead node of `level`."""
        empties = self._empties
        if level < len(empties):
            return empties[level]
        with self._lock:
            while len(self._empties) <= level:
                z = self._empties[-1]
                self._empties.append(self.join(z, z, z, z))
            return self._empties[level]

    def centre(self, node: Node) -> Node:
        """Embed `node` in the middle of an otherwise empty node one level up."""
        z = self.empty(node.level - 1)
        return self.join(
            self.join(z, z, z, node.nw),
            self.join(z, z, node.ne, z),
            self.join(z, node.sw, z, z),
            self.join(node.se, z, z, z),
        )

    def inner(self, node: Node) -> Node:
        """The central half of `node` (inverse of centre)."""
        return self.join(node.nw.se, node.ne.sw, node.sw.ne, node.se.nw)

    @staticmethod
    def is_padded(node: Node) -> bool:
        """True if every alive cell lies in the central quarter of `node`."""
        return (
            node.nw.population == node.nw.se.se.population
            and node.ne.population == node.ne.sw.sw.population
            and node.sw.population == node.sw.ne.ne.population
            and node.se.population == node.se.nw.nw.population
        )

    def build(self, cells: Iterable[Cell]) -> tuple[Node, Cell]:
        """
        Encode alive cells bottom-up into a canonical root.

        Returns:
            (root, origin) where origin is the cell at the root's top-left
        """
        cells = list(cells)
        if not cells:
            return self.empty(MIN_ROOT_LEVEL), (0, 0)

        min_x = min(x for x, _ in cells)
        min_y = min(y for _, y in cells)
        nodes: dict[Cell, Node] = {(x - min_x, y - min_y): ALIVE for x, y in cells}

        level = 0
        while len(nodes) > 1 or level < MIN_ROOT_LEVEL:
            z = self.empty(level)
            parents = {(x >> 1, y >> 1) for x, y in nodes}
            nodes = {
                (px, py): self.join(
                    nodes.get((2 * px, 2 * py), z),
                    nodes.get((2 * px + 1, 2 * py), z),
                    nodes.get((2 * px, 2 * py + 1), z),
                    nodes.get((2 * px + 1, 2 * py + 1), z),
                )
                for px, py in parents
            }
            level += 1

        # The cells touching min_x and min_y keep the last key at (0, 0)
        return nodes[(0, 0)], (min_x, min_y)

    # ─── Memoization ────────────────────────────────────────────────────

    def remember(self, node: Node, jump: int, result: Node) -> Node:
        """Store a computed result on `node`; the first write wins."""
        with self._lock:
            if jump == node.level - 2:
                if node._result is None:
                    node._result = result
                return node._result
            if node._jumps is None:
                node._jumps = {}
            return node._jumps.setdefault(jump, result)

    # ─── Bounded mode ───────────────────────────────────────────────────

    def register(self, state) -> None:
        """Pin `state.root` for as long as `state` is referenced."""
        # Keyed by identity: hashing a state would decode its cells
        self._live_states[id(state)] = state

    @contextmanager
    def session(self):
        """Mark an advance() as in flight; collection waits for a lone caller."""
        with self._lock:
            self._active += 1
        try:
            yield self
        finally:
            with self._lock:
                self._active -= 1

    def maybe_collect(self, roots: Iterable[Node] = ()) -> bool:
        """Collect if the table is over its bound and no other advance is running."""
        threshold = self._collect_threshold
        if threshold is None or len(self._table) <= threshold:
            return False
        with self._lock:
            if self._active > 1:
                return False
            self._sweep(roots)
            # Avoid collecting on every jump when the live tree itself is large
            self._collect_threshold = max(self.max_nodes, 2 * len(self._table))
            return True

    def collect(self, roots: Iterable[Node] = ()) -> int:
        """
        Drop every node not reachable from the live roots.

        Roots are `roots`, every registered state still referenced and the
        canonical empty nodes. Memo entries pointing at dropped nodes are
        cleared so no kept node refers outside the table.

        Skipped while an advance() is in flight: its working nodes are not
        reachable from any root yet.

        Returns:
            Number of evicted nodes, 0 when skipped
        """
        with self._lock:
            if self._active > 0:
                logger.debug(
                    "Node cache collection for %s skipped: %d advance(s) in flight",
                    self.rule, self._active,
                )
                return 0
            return self._sweep(roots)

    def _sweep(self, roots: Iterable[Node]) -> int:
        with self._lock:
            stack = list(roots)
            stack.extend(state.root for state in list(self._live_states.values()))
            stack.extend(self._empties)

            marked: set[Node] = set()
            while stack:
                node = stack.pop()
                if node.level == 0 or node in marked:
                    continue
                marked.add(node)
                stack.extend((node.nw, node.ne, node.sw, node.se))

            for node in marked:
                if node._result is not None and node._result not in marked:
                    node._result = None
                if node._jumps:
                    node._jumps = {
                        jump: result for jump, result in node._jumps.items()
                        if result in marked
                    } or None

            before = len(self._table)
            self._table = {key: node for key, node in self._table.items() if node in marked}
            evicted = before - len(self._table)
            self.collections += 1
            self.evicted += evicted

        logger.debug(
            "Node cache collection for %s: kept %d, evicted %d",
            self.rule, len(self._table), evicted,
        )
        return evicted

    def clear(self) -> int:
        """Drop every node not pinned by a live state, regardless of the bound."""
        return self.collect()

    def stats(self) -> CacheStats:
        return CacheStats(
            nodes=len(self._table),
            memo_hits=self.memo_hits,
            memo_misses=self.memo_misses,
            collections=self.collections,
            evicted=self.evicted,
        )

    def __len__(self) -> int:
        return len(self._table)


def iter_alive(node: Node, x: int = 0, y: int = 0) -> Iterator[Cell]:
    """Yield the alive cells of `node`, whose top-left cell sits at (x, y)."""
    stack = [(node, x, y)]
    while stack:
        node, x, y = stack.pop()
        if node.population == 0:
            continue
        if node.level == 0:
            yield x, y
            continue
        half = 1 << (node.level - 1)
        stack.append((node.nw, x, y))
        stack.append((node.ne, x + half, y))
        stack.append((node.sw, x, y + half))
        stack.append((node.se, x + half, y + half))
