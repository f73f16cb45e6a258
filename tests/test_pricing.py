import numpy as np
import pytest

from black_scholes import (AnalyticBlackScholesPricer, black_scholes,
                           black_scholes_or_limit, deterministic_limit,
                           intrinsic_value)
from definitions import SimulationConfig
from errors import DomainError, NumericalWarning
from path_generation import generate_price_paths
from payoffs import OptionPayoffEvaluator, compute_payoffs
from pricing_methods import MonteCarloPricer, price_monte_carlo, terminal_statistics


def test_payoffs():
    sample = compute_payoffs(np.array([90.0, 105.0, 120.0]), K = 105.0)
    np.testing.assert_allclose(sample.call, [0.0, 0.0, 15.0])
    np.testing.assert_allclose(sample.put, [15.0, 0.0, 0.0])


def test_payoffs_are_non_negative(make_config):
    cfg = make_config(sigma = 0.5)
    sample = OptionPayoffEvaluator(cfg.K).evaluate(generate_price_paths(cfg))
    assert sample.size == cfg.n_simulations
    assert np.all(sample.call >= 0)
    assert np.all(sample.put >= 0)


def test_price_monte_carlo_discounts_mean_payoff():
    estimate = price_monte_carlo(np.array([0.0, 2.0, 4.0]), r = 0.05, T = 1.0)
    discount = np.exp(-0.05)
    assert estimate.price == pytest.approx(2.0 * discount)
    assert estimate.std_error == pytest.approx(discount * 2.0 / np.sqrt(3))
    assert estimate.n == 3


def test_single_payoff_has_zero_standard_error():
    assert price_monte_carlo(np.array([3.0]), r = 0.0, T = 1.0).std_error == 0.0


def test_empty_payoffs_rejected():
    with pytest.raises(ValueError):
        price_monte_carlo(np.array([]), r = 0.05, T = 1.0)


def test_terminal_statistics():
    stats = terminal_statistics(np.array([90.0, 100.0, 110.0, 120.0]), K = 105.0)
    assert stats.mean == pytest.approx(105.0)
    assert stats.std == pytest.approx(np.std([90, 100, 110, 120], ddof = 1))
    assert (stats.min, stats.max) == (90.0, 120.0)
    assert stats.prob_itm_call == 0.5
    assert stats.prob_itm_put == 0.5


def test_black_scholes_reference_values():
    call, put = black_scholes(100.0, 105.0, 0.05, 0.2, 1.0)
    assert call == pytest.approx(8.0214, abs = 1e-3)
    assert put == pytest.approx(7.9004, abs = 1e-3)


def test_black_scholes_put_call_parity():
    S0, K, r, sigma, T = 80.0, 95.0, 0.03, 0.35, 0.75
    call, put = black_scholes(S0, K, r, sigma, T)
    assert call - put == pytest.approx(S0 - K * np.exp(-r * T))


@pytest.mark.parametrize("sigma, T", [(0.0, 1.0), (0.2, 0.0)])
def test_black_scholes_singular_points(sigma, T):
    with pytest.raises(DomainError):
        black_scholes(100.0, 105.0, 0.05, sigma, T)


def test_black_scholes_rejects_non_positive_price():
    with pytest.raises(DomainError):
        black_scholes(-1.0, 105.0, 0.05, 0.2, 1.0)


def test_limits():
    assert intrinsic_value(110.0, 100.0) == (10.0, 0.0)
    assert intrinsic_value(90.0, 100.0) == (0.0, 10.0)
    call, put = deterministic_limit(100.0, 105.0, 0.05, 1.0)
    assert call == pytest.approx(100.0 - 105.0 * np.exp(-0.05))
    assert put == 0.0
    assert black_scholes_or_limit(100.0, 105.0, 0.05, 0.2, 0.0) == (0.0, 5.0)


def test_black_scholes_approaches_limits():
    near_expiry = black_scholes(110.0, 100.0, 0.05, 0.2, 1e-10)
    assert near_expiry == pytest.approx(intrinsic_value(110.0, 100.0), abs = 1e-6)

    low_vol = black_scholes(100.0, 90.0, 0.05, 1e-8, 1.0)
    assert low_vol == pytest.approx(deterministic_limit(100.0, 90.0, 0.05, 1.0), abs = 1e-6)


def test_analytic_pricer_uses_limit_for_zero_volatility():
    cfg = SimulationConfig(sigma = 0.0)
    assert AnalyticBlackScholesPricer(cfg).price() == deterministic_limit(cfg.S0, cfg.K, cfg.r, cfg.T)


def _mc_prices(cfg):
    sample = OptionPayoffEvaluator(cfg.K).evaluate(generate_price_paths(cfg))
    return MonteCarloPricer(cfg.r, cfg.T).price(sample)


def test_reference_scenario_within_three_standard_errors():
    cfg = SimulationConfig(n_simulations = 100_000, n_steps = 1, mu = 0.05, seed = 123)
    call, put = _mc_prices(cfg)
    bs_call, bs_put = AnalyticBlackScholesPricer(cfg).price()

    assert bs_call == pytest.approx(8.02, abs = 0.01)
    assert bs_put == pytest.approx(7.90, abs = 0.02)
    assert abs(call.price - bs_call) <= 3 * call.std_error
    assert abs(put.price - bs_put) <= 3 * put.std_error


def test_put_call_parity_under_risk_neutral_drift(make_config):
    cfg = make_config(n_simulations = 50_000, n_steps = 4, mu = 0.05, r = 0.05)
    call, put = _mc_prices(cfg)

    parity = cfg.S0 - cfg.K * np.exp(-cfg.r * cfg.T)
    assert call.price - put.price == pytest.approx(parity, abs = 3 * (call.std_error + put.std_error))


def test_real_world_drift_is_not_risk_neutral(make_config):
    # mu > r inflates the call and deflates the put relative to Black-Scholes.
    cfg = make_config(n_simulations = 50_000, n_steps = 4, mu = 0.20, r = 0.05)
    call, put = _mc_prices(cfg)
    bs_call, bs_put = AnalyticBlackScholesPricer(cfg).price()

    assert call.price - bs_call > 5 * call.std_error
    assert bs_put - put.price > 5 * put.std_error


def test_zero_volatility_warns_and_has_no_variance(make_config):
    cfg = make_config(sigma = 0.0, mu = 0.05, r = 0.05)
    sample = OptionPayoffEvaluator(cfg.K).evaluate(generate_price_paths(cfg))

    with pytest.warns(NumericalWarning):
        call, put = MonteCarloPricer(cfg.r, cfg.T).price(sample)

    assert call.std_error == 0.0
    assert call.price == pytest.approx(AnalyticBlackScholesPricer(cfg).price()[0], abs = 1e-9)


def test_short_horizon_converges_to_intrinsic_value(make_config):
    cfg = make_config(S0 = 110.0, K = 100.0, T = 1e-8, mu = 0.05)
    call, put = _mc_prices(cfg)
    bs_call, bs_put = AnalyticBlackScholesPricer(cfg).price()

    assert call.price == pytest.approx(10.0, abs = 1e-3)
    assert put.price == pytest.approx(0.0, abs = 1e-3)
    assert (bs_call, bs_put) == pytest.approx((10.0, 0.0), abs = 1e-3)
