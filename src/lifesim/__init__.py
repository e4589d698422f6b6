"""
lifesim: Game of Life on an unbounded grid, streamed in real time.

Computes generations of sparse, potentially huge two-state automata and
paces them against a wall-clock target rate.

Core concepts:
- CellState is the set of alive cells, nothing more
- Evolvers advance a CellState by N generations
- NaiveEvolver counts neighbours cell by cell
- HashLifeEvolver memoizes canonical quadtree nodes and jumps in powers of two
- ConfigurableEvolver delegates to whichever algorithm is currently chosen
- TemporalGameOfLifeState turns an evolver into a live, cancellable stream
"""

__version__ = "0.1.0"
