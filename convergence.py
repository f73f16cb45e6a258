from typing import List, Sequence

import numpy as np

from definitions import ConvergencePoint
from pricing_methods import price_monte_carlo


def _clean_schedule(sizes: np.ndarray, n_max: int) -> List[int]:
    sizes = np.unique(np.clip(sizes.astype(int), 1, n_max))
    return [int(n) for n in sizes]


def linear_checkpoints(n_max: int, n_min: int = 100, n_points: int = 20) -> List[int]:
    """Evenly spaced sample sizes from n_min to n_max (inclusive)."""
    if n_max < 1 or n_points < 1:
        raise ValueError("n_max and n_points must be positive")
    n_min = min(max(n_min, 1), n_max)
    sizes = np.linspace(n_min, n_max, n_points)
    sizes[-1] = n_max
    return _clean_schedule(sizes, n_max)


def log_checkpoints(n_max: int, n_min: int = 100, n_points: int = 20) -> List[int]:
    """Logarithmically spaced sample sizes from n_min to n_max (inclusive)."""
    if n_max < 1 or n_points < 1:
        raise ValueError("n_max and n_points must be positive")
    n_min = min(max(n_min, 1), n_max)
    sizes = np.logspace(np.log10(n_min), np.log10(n_max), n_points)
    sizes[-1] = n_max
    return _clean_schedule(np.rint(sizes), n_max)


def convergence_series(payoffs: np.ndarray, r: float, T: float,
                       checkpoints: Sequence[int]) -> List[ConvergencePoint]:
    """
    Monte Carlo price using only the first n payoffs, for each checkpoint n.

    Paths are i.i.d., so any prefix of the sample is itself a valid
    Monte Carlo sample of that size; nothing is re-simulated.
    """
    payoffs = np.asarray(payoffs, dtype = float)
    series = []
    previous = 0

    for n in checkpoints:
        n = int(n)
        if n < 1 or n > payoffs.shape[0]:
            raise ValueError(f"Checkpoint {n} outside [1, {payoffs.shape[0]}]")
        if n <= previous:
            raise ValueError("Checkpoints must be strictly increasing")
        previous = n

        estimate = price_monte_carlo(payoffs[:n], r, T)
        series.append(ConvergencePoint(n = n, price = estimate.price, std_error = estimate.std_error))

    return series


class ConvergenceTracker:
    """
    Running Monte Carlo estimate at increasing sample sizes.

    Args:
        r: Discount rate
        T: Time to maturity
        schedule: "linear" or "log" checkpoint spacing
        n_min: Smallest checkpoint
        n_points: Number of checkpoints
    """
    SCHEDULES = {"linear": linear_checkpoints, "log": log_checkpoints}

    def __init__(self, r: float, T: float, schedule: str = "linear",
                 n_min: int = 100, n_points: int = 20):
        if schedule not in self.SCHEDULES:
            raise ValueError(f"schedule must be one of {sorted(self.SCHEDULES)}, got {schedule!r}")
        self.r = r
        self.T = T
        self.schedule = schedule
        self.n_min = n_min
        self.n_points = n_points

    def checkpoints(self, n_max: int) -> List[int]:
        return self.SCHEDULES[self.schedule](n_max, self.n_min, self.n_points)

    def track(self, payoffs: np.ndarray) -> List[ConvergencePoint]:
        payoffs = np.asarray(payoffs, dtype = float)
        return convergence_series(payoffs, self.r, self.T, self.checkpoints(payoffs.shape[0]))

    @staticmethod
    def errors_against(series: Sequence[ConvergencePoint], reference: float) -> np.ndarray:
        return np.array([abs(point.price - reference) for point in series])
