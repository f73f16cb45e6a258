from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple

import numpy as np

from definitions import PricePathEnsemble, SimulationConfig
from errors import ConfigError

# Paths per random stream; fixed so the ensemble does not depend on n_workers.
DEFAULT_BLOCK_SIZE = 4096


class RandomPathSimulator:
    """
    Vectorized GBM path generator.

    Paths follow the exact lognormal transition
        S_t = S_{t-1} * exp((mu - 0.5*sigma^2)*dt + sigma*sqrt(dt)*Z),  Z ~ N(0,1)
    evaluated in log space: S_t = S0 * exp(cumsum of log-returns).

    The paths are cut into contiguous blocks of `block_size` columns. Block b
    draws its normals from a generator seeded with the b-th child of
    SeedSequence(seed), so every block has its own non-overlapping stream and
    the ensemble is the same for any number of workers.
    """
    def __init__(self, config: SimulationConfig, n_workers: int = 1,
                 block_size: int = DEFAULT_BLOCK_SIZE):
        if n_workers < 1:
            raise ConfigError(f"n_workers must be positive, got {n_workers}")
        if block_size < 1:
            raise ConfigError(f"block_size must be positive, got {block_size}")

        self.config = config
        self.n_workers = n_workers
        self.block_size = block_size

        self.dt = config.dt
        self.drift = (config.mu - 0.5 * config.sigma ** 2) * self.dt
        self.diffusion = config.sigma * np.sqrt(self.dt)

    def blocks(self) -> List[Tuple[int, int]]:
        """Column ranges [start, stop) of each random stream."""
        n = self.config.n_simulations
        return [(start, min(start + self.block_size, n))
                for start in range(0, n, self.block_size)]

    def _fill_block(self, paths: np.ndarray, start: int, stop: int,
                    seed_seq: np.random.SeedSequence) -> None:
        rng = np.random.default_rng(seed_seq)
        Z = rng.standard_normal((self.config.n_steps, stop - start))
        log_returns = self.drift + self.diffusion * Z
        paths[1:, start:stop] = self.config.S0 * np.exp(np.cumsum(log_returns, axis = 0))

    def generate_paths(self) -> PricePathEnsemble:
        """
        Generate asset price paths.

        Returns:
            PricePathEnsemble with paths of shape (n_steps + 1, n_simulations);
            the first row is S0 for every path.
        """
        cfg = self.config
        paths = np.empty((cfg.n_steps + 1, cfg.n_simulations))
        paths[0] = cfg.S0

        blocks = self.blocks()
        seeds = np.random.SeedSequence(cfg.seed).spawn(len(blocks))

        if self.n_workers == 1 or len(blocks) == 1:
            for (start, stop), seed_seq in zip(blocks, seeds):
                self._fill_block(paths, start, stop, seed_seq)
        else:
            # Blocks write disjoint column ranges of the shared buffer.
            with ThreadPoolExecutor(max_workers = self.n_workers) as pool:
                futures = [pool.submit(self._fill_block, paths, start, stop, seed_seq)
                           for (start, stop), seed_seq in zip(blocks, seeds)]
                for future in futures:
                    future.result()

        return PricePathEnsemble(paths = paths, time_grid = cfg.time_grid)


def generate_price_paths(config: SimulationConfig, n_workers: int = 1) -> PricePathEnsemble:
    return RandomPathSimulator(config, n_workers = n_workers).generate_paths()
