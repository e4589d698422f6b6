"""
Pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


def random_soup(rng, width: int = 16, height: int = 16, density: float = 0.35, offset=(0, 0)):
    """Random CellState inside a width x height box."""
    from lifesim.core import CellState
    return CellState.from_array(rng.random((height, width)) < density, offset=offset)


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)


@pytest.fixture
def soup(rng):
    """A 16x16 random soup."""
    return random_soup(rng)


@pytest.fixture
def make_soup(rng):
    """Factory for further random soups drawn from the shared rng."""
    def make(width=16, height=16, density=0.35, offset=(0, 0)):
        return random_soup(rng, width, height, density, offset)
    return make


@pytest.fixture
def node_cache():
    """Private, unbounded node cache so tests never share memo state."""
    from lifesim.algorithms import NodeCache
    return NodeCache(max_nodes=None)


@pytest.fixture
def naive():
    from lifesim.algorithms import NaiveEvolver
    return NaiveEvolver()


@pytest.fixture
def hashlife(node_cache):
    from lifesim.algorithms import HashLifeEvolver
    return HashLifeEvolver(cache=node_cache)


@pytest.fixture(params=["naive", "hashlife", "configurable"])
def evolver(request):
    """Every evolver implementation in turn."""
    from lifesim.algorithms import (
        AlgorithmChoice, AlgorithmPreference, ConfigurableEvolver,
        HashLifeEvolver, NaiveEvolver, NodeCache,
    )
    if request.param == "naive":
        return NaiveEvolver()
    if request.param == "hashlife":
        return HashLifeEvolver(cache=NodeCache(max_nodes=None))
    preference = AlgorithmPreference(AlgorithmChoice.HASHLIFE)
    return ConfigurableEvolver(preference, {
        AlgorithmChoice.NAIVE: NaiveEvolver(),
        AlgorithmChoice.HASHLIFE: HashLifeEvolver(cache=NodeCache(max_nodes=None)),
    })
