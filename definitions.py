import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np

from errors import ConfigError


def _read_only(values) -> np.ndarray:
    array = np.asarray(values, dtype = float)
    array.setflags(write = False)
    return array


@dataclass(frozen = True)
class SimulationConfig:
    """
    Attributes:
        n_simulations: Number of Monte Carlo paths
        n_steps: Number of time steps per path
        S0: Initial asset price
        K: Strike price
        r: Risk-free interest rate (annualized), used for discounting
        sigma: Volatility (annualized)
        mu: Drift used for path generation (annualized)
        T: Time to maturity (years)
        seed: Seed for the random number streams
    """
    n_simulations: int = 10_000
    n_steps: int = 252
    S0: float = 100.0
    K: float = 105.0
    r: float = 0.05
    sigma: float = 0.2
    mu: float = 0.08
    T: float = 1.0
    seed: Optional[int] = 123

    def __post_init__(self):
        for name in ("n_simulations", "n_steps"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise ConfigError(f"{name} must be positive, got {value}")

        for name in ("S0", "K", "r", "sigma", "mu", "T"):
            value = getattr(self, name)
            if not isinstance(value, (int, float, np.number)) or not math.isfinite(value):
                raise ConfigError(f"{name} must be a finite number, got {value!r}")

        if self.S0 <= 0:
            raise ConfigError(f"Initial asset price S0 must be positive, got {self.S0}")
        if self.K <= 0:
            raise ConfigError(f"Strike price K must be positive, got {self.K}")
        if self.sigma < 0:
            raise ConfigError(f"Volatility sigma must be non-negative, got {self.sigma}")
        if self.T <= 0:
            raise ConfigError(f"Time to maturity T must be positive, got {self.T}")
        if self.seed is not None and (isinstance(self.seed, bool)
                                      or not isinstance(self.seed, (int, np.integer))
                                      or self.seed < 0):
            raise ConfigError(f"seed must be a non-negative integer, got {self.seed!r}")

    @property
    def dt(self) -> float:
        return self.T / self.n_steps

    @property
    def time_grid(self) -> np.ndarray:
        return np.linspace(0.0, self.T, self.n_steps + 1)

    @property
    def is_risk_neutral(self) -> bool:
        return self.mu == self.r

    def with_overrides(self, **changes) -> "SimulationConfig":
        """Return a validated copy with some fields replaced."""
        return replace(self, **changes)


@dataclass(frozen = True)
class PricePathEnsemble:
    """
    Simulated price paths on a shared time grid.

    Attributes:
        paths: Array of shape (n_steps + 1, n_simulations); column i is path i
        time_grid: Array of shape (n_steps + 1,) with the time points 0, dt, ..., T
    """
    paths: np.ndarray
    time_grid: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "paths", _read_only(self.paths))
        object.__setattr__(self, "time_grid", _read_only(self.time_grid))
        if self.paths.ndim != 2 or self.paths.shape[0] != self.time_grid.shape[0]:
            raise ValueError(
                f"paths of shape {self.paths.shape} do not match "
                f"a time grid of {self.time_grid.shape[0]} points"
            )

    @property
    def n_steps(self) -> int:
        return self.paths.shape[0] - 1

    @property
    def n_simulations(self) -> int:
        return self.paths.shape[1]

    @property
    def terminal_prices(self) -> np.ndarray:
        return self.paths[-1]

    def path(self, i: int) -> np.ndarray:
        return self.paths[:, i]

    def sample(self, n: int, seed: Optional[int] = None) -> np.ndarray:
        """
        Draw a representative subset of paths (without replacement) for plotting.

        Returns:
            Array of shape (n_steps + 1, min(n, n_simulations))
        """
        n = min(n, self.n_simulations)
        rng = np.random.default_rng(seed)
        columns = np.sort(rng.choice(self.n_simulations, size = n, replace = False))
        return self.paths[:, columns]


@dataclass(frozen = True)
class PayoffSample:
    """Per-path call and put payoffs, in path order."""
    call: np.ndarray
    put: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "call", _read_only(self.call))
        object.__setattr__(self, "put", _read_only(self.put))
        if self.call.shape != self.put.shape or self.call.ndim != 1:
            raise ValueError("call and put payoffs must be parallel 1-d arrays")

    @property
    def size(self) -> int:
        return self.call.shape[0]


@dataclass(frozen = True)
class MonteCarloEstimate:
    price: float
    std_error: float
    n: int

    def confidence_interval(self, z: float = 1.96) -> Tuple[float, float]:
        half_width = z * self.std_error
        return self.price - half_width, self.price + half_width


@dataclass(frozen = True)
class TerminalStatistics:
    """Summary of the simulated terminal prices."""
    mean: float
    std: float
    min: float
    max: float
    prob_itm_call: float
    prob_itm_put: float


@dataclass(frozen = True)
class ConvergencePoint:
    n: int
    price: float
    std_error: float


@dataclass(frozen = True)
class PricingResult:
    """
    Monte Carlo and Black-Scholes prices of one simulation run.

    Attributes:
        mc_call_price: Discounted mean call payoff
        mc_put_price: Discounted mean put payoff
        bs_call_price: Analytic call price
        bs_put_price: Analytic put price
        sample_statistics: Terminal price statistics and in-the-money probabilities
        mc_call_std_error: Standard error of mc_call_price
        mc_put_std_error: Standard error of mc_put_price
    """
    mc_call_price: float
    mc_put_price: float
    bs_call_price: float
    bs_put_price: float
    sample_statistics: TerminalStatistics
    mc_call_std_error: float = 0.0
    mc_put_std_error: float = 0.0

    @property
    def call_abs_error(self) -> float:
        return abs(self.mc_call_price - self.bs_call_price)

    @property
    def put_abs_error(self) -> float:
        return abs(self.mc_put_price - self.bs_put_price)

    @property
    def call_rel_error(self) -> float:
        return _relative_error(self.call_abs_error, self.bs_call_price)

    @property
    def put_rel_error(self) -> float:
        return _relative_error(self.put_abs_error, self.bs_put_price)


def _relative_error(abs_error: float, reference: float) -> float:
    if reference == 0:
        return float("nan")
    return abs_error / abs(reference)
