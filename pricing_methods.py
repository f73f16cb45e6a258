import warnings
from typing import Tuple

import numpy as np

from definitions import MonteCarloEstimate, PayoffSample, TerminalStatistics
from errors import NumericalWarning


def price_monte_carlo(payoffs: np.ndarray, r: float, T: float) -> MonteCarloEstimate:
    """
    Discount the mean payoff to a present value.

    Estimator:
        Price = exp(-rT) * (1/n) * sum(payoffs)

    Standard Error:
        SE = exp(-rT) * sd(payoffs) / sqrt(n)

    The estimate is a risk-neutral value only when the paths were simulated
    with mu = r; otherwise it is the discounted real-world expectation.
    """
    payoffs = np.asarray(payoffs, dtype = float)
    n = payoffs.shape[0]
    if n == 0:
        raise ValueError("Cannot price an empty payoff sample")

    discount_factor = np.exp(-r * T)
    price = discount_factor * np.mean(payoffs)

    if n > 1 and np.ptp(payoffs) > 0:
        std_error = discount_factor * np.std(payoffs, ddof = 1) / np.sqrt(n)
    else:
        std_error = 0.0

    return MonteCarloEstimate(price = float(price), std_error = float(std_error), n = n)


class MonteCarloPricer:

    def __init__(self, r: float, T: float):
        self.r = r
        self.T = T

    def price(self, sample: PayoffSample) -> Tuple[MonteCarloEstimate, MonteCarloEstimate]:
        """
        Returns:
            Tuple of (call_estimate, put_estimate)
        """
        call = price_monte_carlo(sample.call, self.r, self.T)
        put = price_monte_carlo(sample.put, self.r, self.T)

        if sample.size > 1 and call.std_error == 0.0 and put.std_error == 0.0:
            warnings.warn(
                f"Payoff sample of {sample.size} paths has zero variance; "
                "the paths are likely identical (sigma = 0)",
                NumericalWarning,
                stacklevel = 2,
            )

        return call, put


def terminal_statistics(terminal_prices: np.ndarray, K: float) -> TerminalStatistics:
    S_T = np.asarray(terminal_prices, dtype = float)
    std = np.std(S_T, ddof = 1) if S_T.shape[0] > 1 else 0.0

    return TerminalStatistics(
        mean = float(np.mean(S_T)),
        std = float(std),
        min = float(np.min(S_T)),
        max = float(np.max(S_T)),
        prob_itm_call = float(np.mean(S_T > K)),
        prob_itm_put = float(np.mean(S_T < K)),
    )
