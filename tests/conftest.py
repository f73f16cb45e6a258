import matplotlib

matplotlib.use("Agg")

import pytest

from definitions import SimulationConfig


@pytest.fixture
def make_config():
    """Small, fast configs; keyword arguments override the defaults."""
    def _make(**overrides):
        params = dict(n_simulations = 2_000, n_steps = 20, seed = 7)
        params.update(overrides)
        return SimulationConfig(**params)
    return _make
