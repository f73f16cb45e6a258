import numpy as np
import pytest

from definitions import (MonteCarloEstimate, PayoffSample, PricePathEnsemble,
                         PricingResult, SimulationConfig, TerminalStatistics)
from errors import ConfigError


def test_defaults_match_reference_run():
    cfg = SimulationConfig()
    assert (cfg.n_simulations, cfg.n_steps) == (10_000, 252)
    assert (cfg.S0, cfg.K, cfg.r, cfg.sigma, cfg.mu, cfg.T) == (100, 105, 0.05, 0.2, 0.08, 1)
    assert cfg.seed == 123
    assert cfg.dt == pytest.approx(1 / 252)
    assert not cfg.is_risk_neutral


def test_time_grid_spans_zero_to_maturity():
    cfg = SimulationConfig(n_steps = 4, T = 2.0)
    np.testing.assert_allclose(cfg.time_grid, [0.0, 0.5, 1.0, 1.5, 2.0])


@pytest.mark.parametrize("field, value", [
    ("S0", -5.0),
    ("S0", 0.0),
    ("K", 0.0),
    ("sigma", -0.1),
    ("T", 0.0),
    ("n_steps", 0),
    ("n_simulations", -1),
    ("n_simulations", 10.5),
    ("r", float("nan")),
    ("mu", float("inf")),
    ("seed", 1.5),
    ("seed", "123"),
    ("seed", -1),
])
def test_invalid_parameter_raises_config_error(field, value):
    with pytest.raises(ConfigError, match = field):
        SimulationConfig(**{field: value})


def test_zero_volatility_is_allowed():
    assert SimulationConfig(sigma = 0.0).sigma == 0.0


def test_config_is_immutable_and_overrides_are_validated():
    cfg = SimulationConfig()
    with pytest.raises(AttributeError):
        cfg.S0 = 50.0

    assert cfg.with_overrides(mu = 0.05).is_risk_neutral
    with pytest.raises(ConfigError):
        cfg.with_overrides(K = -1.0)


def test_ensemble_is_read_only():
    ensemble = PricePathEnsemble(paths = np.ones((3, 4)), time_grid = [0.0, 0.5, 1.0])
    assert ensemble.n_steps == 2
    assert ensemble.n_simulations == 4
    with pytest.raises(ValueError):
        ensemble.paths[0, 0] = 2.0


def test_ensemble_rejects_mismatched_grid():
    with pytest.raises(ValueError):
        PricePathEnsemble(paths = np.ones((3, 4)), time_grid = [0.0, 1.0])


def test_ensemble_sample_is_a_subset_of_columns():
    paths = np.tile(np.arange(10.0), (3, 1))
    ensemble = PricePathEnsemble(paths = paths, time_grid = [0.0, 0.5, 1.0])

    sample = ensemble.sample(4, seed = 1)
    assert sample.shape == (3, 4)
    assert len(set(sample[0])) == 4
    assert ensemble.sample(50).shape == (3, 10)


def test_payoff_sample_requires_parallel_arrays():
    with pytest.raises(ValueError):
        PayoffSample(call = [1.0, 2.0], put = [0.0])
    assert PayoffSample(call = [1.0, 0.0], put = [0.0, 3.0]).size == 2


def test_confidence_interval():
    low, high = MonteCarloEstimate(price = 10.0, std_error = 0.5, n = 100).confidence_interval()
    assert (low, high) == pytest.approx((9.02, 10.98))


def test_pricing_result_errors():
    stats = TerminalStatistics(mean = 100.0, std = 1.0, min = 90.0, max = 110.0,
                               prob_itm_call = 0.4, prob_itm_put = 0.6)
    result = PricingResult(mc_call_price = 8.5, mc_put_price = 0.0,
                           bs_call_price = 8.0, bs_put_price = 0.0,
                           sample_statistics = stats)
    assert result.call_abs_error == pytest.approx(0.5)
    assert result.call_rel_error == pytest.approx(0.0625)
    assert np.isnan(result.put_rel_error)
