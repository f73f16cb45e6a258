import numpy as np

from definitions import PayoffSample, PricePathEnsemble


def compute_payoffs(terminal_prices: np.ndarray, K: float) -> PayoffSample:
    """
    Compute European call and put payoffs from terminal prices.
    """
    S_T = np.asarray(terminal_prices, dtype = float)

    call_payoff = np.maximum(S_T - K, 0.0)
    put_payoff = np.maximum(K - S_T, 0.0)

    return PayoffSample(call = call_payoff, put = put_payoff)


class OptionPayoffEvaluator:

    def __init__(self, K: float):
        self.K = K

    def evaluate(self, ensemble: PricePathEnsemble) -> PayoffSample:
        return compute_payoffs(ensemble.terminal_prices, self.K)
