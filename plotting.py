from pathlib import Path
from typing import Dict, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
from scipy import stats

from definitions import ConvergencePoint, PricePathEnsemble, SimulationConfig


def _new_axes(ax, figsize):
    if ax is None:
        fig, ax = plt.subplots(figsize = figsize)
    else:
        fig = ax.figure
    return fig, ax


def plot_sample_paths(ensemble: PricePathEnsemble, config: SimulationConfig,
                      n_paths: int = 100, ax: Optional[plt.Axes] = None,
                      seed: Optional[int] = None) -> plt.Figure:
    """
    Plot a random subset of the simulated paths with the strike and initial price.
    """
    fig, ax = _new_axes(ax, (12, 7))
    sample = ensemble.sample(n_paths, seed = config.seed if seed is None else seed)

    ax.plot(ensemble.time_grid, sample, alpha = 0.3, linewidth = 0.8, color = 'steelblue')
    ax.axhline(y = config.K, color = 'red', linestyle = '--',
               linewidth = 2, label = f'Strike Price ({config.K})', zorder = 5)
    ax.axhline(y = config.S0, color = 'green', linestyle = '--',
               linewidth = 2, label = f'Initial Price ({config.S0})', zorder = 5)

    ax.set_xlabel('Time (Years)', fontsize = 12, fontweight = 'bold')
    ax.set_ylabel('Stock Price', fontsize = 12, fontweight = 'bold')
    ax.set_title(f'Monte Carlo Option Pricing Simulation\n'
                 f'{config.n_simulations:,} simulations | Strike: {config.K} | Initial: {config.S0}',
                 fontsize = 14, fontweight = 'bold', pad = 20)
    ax.legend(loc = 'upper left', fontsize = 11, framealpha = 0.9)
    ax.grid(True, alpha = 0.3)
    fig.tight_layout()
    return fig


def plot_terminal_distribution(ensemble: PricePathEnsemble, config: SimulationConfig,
                               bins: int = 50, ax: Optional[plt.Axes] = None) -> plt.Figure:
    """
    Histogram of terminal prices with a kernel density estimate of the sample.
    """
    fig, ax = _new_axes(ax, (10, 6))
    S_T = ensemble.terminal_prices

    ax.hist(S_T, bins = bins, alpha = 0.7, color = 'lightblue',
            edgecolor = 'black', density = True, label = 'Simulated')
    ax.axvline(config.K, color = 'red', linestyle = '--', linewidth = 2,
               label = f'Strike K={config.K}')

    # A KDE needs spread; identical paths (sigma = 0) only get the histogram.
    if S_T.shape[0] > 1 and np.ptp(S_T) > 0:
        grid = np.linspace(S_T.min(), S_T.max(), 400)
        density = stats.gaussian_kde(S_T)(grid)
        ax.plot(grid, density, color = 'darkblue', linewidth = 2, label = 'Density')

    ax.set_xlabel('Final Stock Price', fontsize = 12, fontweight = 'bold')
    ax.set_ylabel('Density', fontsize = 12, fontweight = 'bold')
    ax.set_title('Distribution of Final Stock Prices', fontsize = 14, fontweight = 'bold')
    ax.legend(fontsize = 10)
    ax.grid(True, alpha = 0.3)
    fig.tight_layout()
    return fig


def plot_convergence(series: Sequence[ConvergencePoint], bs_price: float,
                     ax: Optional[plt.Axes] = None) -> plt.Figure:
    """
    Running Monte Carlo call price with a 95% band against the Black-Scholes price.
    """
    fig, ax = _new_axes(ax, (10, 6))
    sizes = np.array([point.n for point in series])
    prices = np.array([point.price for point in series])
    errors = np.array([point.std_error for point in series])

    ax.plot(sizes, prices, 'o-', linewidth = 2, markersize = 5,
            color = 'steelblue', label = 'Monte Carlo')
    ax.fill_between(sizes, prices - 1.96 * errors, prices + 1.96 * errors,
                    color = 'steelblue', alpha = 0.2, label = '95% CI')
    ax.axhline(y = bs_price, color = 'red', linestyle = '--', linewidth = 2,
               label = f'Black-Scholes ({bs_price:.4f})')

    ax.set_xlabel('Number of Simulations', fontsize = 12, fontweight = 'bold')
    ax.set_ylabel('Call Option Price', fontsize = 12, fontweight = 'bold')
    ax.set_title('Monte Carlo Convergence Analysis', fontsize = 14, fontweight = 'bold')
    ax.legend(fontsize = 10, loc = 'best')
    ax.grid(True, alpha = 0.3)
    fig.tight_layout()
    return fig


def save_all_plots(run, plot_dir: Path, dpi: int = 150) -> Dict[str, Path]:
    """
    Render the path, distribution and convergence figures to PNG files.

    Args:
        run: SimulationRun from results.run_simulation
        plot_dir: Existing output directory

    Returns:
        Mapping of figure name to written file
    """
    plot_dir = Path(plot_dir)
    figures = {
        "price_paths": plot_sample_paths(run.ensemble, run.config),
        "payoff_distribution": plot_terminal_distribution(run.ensemble, run.config),
        "convergence_analysis": plot_convergence(run.convergence, run.result.bs_call_price),
    }

    written = {}
    for name, fig in figures.items():
        path = plot_dir / f"{name}.png"
        fig.savefig(path, dpi = dpi, bbox_inches = 'tight')
        plt.close(fig)
        written[name] = path
    return written
