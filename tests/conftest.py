# tests/conftest.py
import matplotlib

matplotlib.use("Agg")

import pytest

from config import load_biomes, load_seeds
from sim.engine import create_state
from sim.placement import seed_base_node
from sim.state import Settings


@pytest.fixture(scope="session")
def biomes():
    return load_biomes()


@pytest.fixture(scope="session")
def seeds():
    return load_seeds()


@pytest.fixture
def make_state(biomes, seeds):
    """Factory: make_state('desert', 'cactus', rng=3, weather_events=False)."""
    def _make(biome="plains", seed="oak", rng=7, params=None, **toggles):
        return create_state(biomes[biome], seeds[seed], Settings(**toggles), params, rng=rng)
    return _make


@pytest.fixture
def state(make_state):
    return make_state()


@pytest.fixture
def sprouted(state):
    """Oak with its base trunk node already in place."""
    state.unlocked.trunk = True
    seed_base_node(state)
    return state
