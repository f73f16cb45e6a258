from typing import Tuple

import numpy as np
from scipy import stats

from definitions import SimulationConfig
from errors import DomainError


def black_scholes(S0: float, K: float, r: float, sigma: float, T: float) -> Tuple[float, float]:
    """
    Compute the Black-Scholes prices of a European call and put.

        d1 = (ln(S0/K) + (r + sigma^2/2) * T) / (sigma * sqrt(T))
        d2 = d1 - sigma * sqrt(T)

        call = S0 * N(d1) - K * exp(-rT) * N(d2)
        put  = K * exp(-rT) * N(-d2) - S0 * N(-d1)

    Raises:
        DomainError: if sigma = 0 or T = 0 (d1 is undefined there), or for
            non-positive prices and negative sigma or T. Use intrinsic_value
            and deterministic_limit for the degenerate cases.
    """
    if S0 <= 0 or K <= 0:
        raise DomainError(f"S0 and K must be positive, got S0={S0}, K={K}")
    if sigma < 0 or T < 0:
        raise DomainError(f"sigma and T must be non-negative, got sigma={sigma}, T={T}")
    if sigma == 0 or T == 0:
        raise DomainError(
            f"Black-Scholes formula is singular at sigma={sigma}, T={T}"
        )

    sqrt_T = np.sqrt(T)
    discount = np.exp(-r * T)

    d1 = (np.log(S0 / K) + (r + 0.5 * sigma ** 2) * T) / (sigma * sqrt_T)
    d2 = d1 - sigma * sqrt_T

    call_price = S0 * stats.norm.cdf(d1) - K * discount * stats.norm.cdf(d2)
    put_price = K * discount * stats.norm.cdf(-d2) - S0 * stats.norm.cdf(-d1)

    return float(call_price), float(put_price)


def intrinsic_value(S0: float, K: float) -> Tuple[float, float]:
    """Option values at expiry (T = 0), undiscounted."""
    return max(S0 - K, 0.0), max(K - S0, 0.0)


def deterministic_limit(S0: float, K: float, r: float, T: float) -> Tuple[float, float]:
    """
    The sigma -> 0 limit: under risk-neutral drift S_T = S0 * exp(rT) with
    certainty, so each option is worth its discounted terminal payoff.
    """
    discounted_strike = K * np.exp(-r * T)
    return float(max(S0 - discounted_strike, 0.0)), float(max(discounted_strike - S0, 0.0))


def black_scholes_or_limit(S0: float, K: float, r: float, sigma: float, T: float) -> Tuple[float, float]:
    if T == 0:
        return intrinsic_value(S0, K)
    if sigma == 0:
        return deterministic_limit(S0, K, r, T)
    return black_scholes(S0, K, r, sigma, T)


class AnalyticBlackScholesPricer:

    def __init__(self, config: SimulationConfig):
        self.config = config

    def price(self) -> Tuple[float, float]:
        """
        Returns:
            Tuple of (call_price, put_price), falling back to the
            deterministic limit when sigma = 0
        """
        cfg = self.config
        return black_scholes_or_limit(cfg.S0, cfg.K, cfg.r, cfg.sigma, cfg.T)
