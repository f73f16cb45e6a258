import datetime
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np

from black_scholes import AnalyticBlackScholesPricer
from convergence import ConvergenceTracker
from definitions import (ConvergencePoint, MonteCarloEstimate, PayoffSample,
                         PricePathEnsemble, PricingResult, SimulationConfig)
from path_generation import RandomPathSimulator
from payoffs import OptionPayoffEvaluator
from pricing_methods import MonteCarloPricer, terminal_statistics


@dataclass(frozen = True)
class SimulationRun:
    """Everything one run produces, handed to the report and plot writers."""
    config: SimulationConfig
    ensemble: PricePathEnsemble
    payoffs: PayoffSample
    result: PricingResult
    convergence: List[ConvergencePoint]


def run_simulation(config: SimulationConfig, n_workers: int = 1,
                   schedule: str = "linear", verbose: bool = False) -> SimulationRun:
    """
    Run the complete pricing pipeline:
    paths -> payoffs -> Monte Carlo prices, Black-Scholes prices, convergence.

    Args:
        config: Validated simulation parameters
        n_workers: Threads used for path generation (does not change the result)
        schedule: Convergence checkpoint spacing, "linear" or "log"
        verbose: Print progress and the results summary

    Returns:
        SimulationRun with the ensemble, payoffs, PricingResult and the
        call-price convergence series
    """
    if verbose:
        print("=" * 80)
        print("EUROPEAN OPTION PRICING: MONTE CARLO VS BLACK-SCHOLES")
        print("=" * 80)
        print("\n[1/4] Generating price paths...")

    start = time.time()
    ensemble = RandomPathSimulator(config, n_workers = n_workers).generate_paths()
    path_time = time.time() - start
    if verbose:
        print(f"      Generated {config.n_simulations:,} paths with {config.n_steps} steps "
              f"in {path_time:.3f}s")
        print("\n[2/4] Computing payoffs and Monte Carlo prices...")

    payoffs = OptionPayoffEvaluator(config.K).evaluate(ensemble)
    call_mc, put_mc = MonteCarloPricer(config.r, config.T).price(payoffs)
    statistics = terminal_statistics(ensemble.terminal_prices, config.K)

    if verbose:
        print("\n[3/4] Computing analytical Black-Scholes prices...")
    call_bs, put_bs = AnalyticBlackScholesPricer(config).price()
    if verbose:
        print(f"      Black-Scholes Call: ${call_bs:.6f}   Put: ${put_bs:.6f}")
        print("\n[4/4] Running convergence analysis...")

    tracker = ConvergenceTracker(config.r, config.T, schedule = schedule)
    convergence = tracker.track(payoffs.call)

    result = PricingResult(
        mc_call_price = call_mc.price,
        mc_put_price = put_mc.price,
        bs_call_price = call_bs,
        bs_put_price = put_bs,
        sample_statistics = statistics,
        mc_call_std_error = call_mc.std_error,
        mc_put_std_error = put_mc.std_error,
    )

    if verbose:
        display_results(result, config)

    return SimulationRun(config = config, ensemble = ensemble, payoffs = payoffs,
                         result = result, convergence = convergence)


def display_parameters(config: SimulationConfig) -> None:
    print("\nSIMULATION PARAMETERS")
    print("-" * 80)
    print(f"Initial Price (S0):            ${config.S0:.2f}")
    print(f"Strike Price (K):              ${config.K:.2f}")
    print(f"Time to Maturity (T):          {config.T:.2f} years")
    print(f"Risk-Free Rate (r):            {config.r:.2%}")
    print(f"Drift (mu):                    {config.mu:.2%}")
    print(f"Volatility (sigma):            {config.sigma:.2%}")
    print(f"Time Steps:                    {config.n_steps:,}")
    print(f"Monte Carlo Simulations:       {config.n_simulations:,}")
    print(f"Seed:                          {config.seed}")


def display_results(result: PricingResult, config: SimulationConfig) -> None:
    """Display formatted results table."""
    print("\n" + "=" * 80)
    print("RESULTS SUMMARY")
    print("=" * 80)

    print(f"\n{'Option':<10} {'Monte Carlo':<14} {'Std Error':<12} {'95% CI':<20} "
          f"{'Black-Scholes':<15} {'Abs Error'}")
    print("-" * 80)

    rows = [
        ("Call", result.mc_call_price, result.mc_call_std_error,
         result.bs_call_price, result.call_abs_error),
        ("Put", result.mc_put_price, result.mc_put_std_error,
         result.bs_put_price, result.put_abs_error),
    ]
    for name, mc, se, bs, err in rows:
        estimate = MonteCarloEstimate(price = mc, std_error = se, n = config.n_simulations)
        low, high = estimate.confidence_interval()
        print(f"{name:<10} "
              f"${mc:>10.6f}   "
              f"${se:>8.6f}   "
              f"[{low:>8.4f}, {high:<8.4f}] "
              f"${bs:>10.6f}     "
              f"${err:.6f}")

    stats = result.sample_statistics
    print("\n" + "=" * 80)
    print("TERMINAL PRICE STATISTICS")
    print("=" * 80)
    print(f"\nMean:                          {stats.mean:>10.4f}")
    print(f"Std Dev:                       {stats.std:>10.4f}")
    print(f"Min / Max:                     {stats.min:>10.4f} / {stats.max:.4f}")
    print(f"P(in the money) Call / Put:    {stats.prob_itm_call:>10.4f} / {stats.prob_itm_put:.4f}")

    if not config.is_risk_neutral:
        print(f"\nNote: paths simulated with mu={config.mu} but discounted at r={config.r}; "
              "Monte Carlo prices are not risk-neutral values.")
    print("=" * 80)


def _report_lines(name: str, mc: float, bs: float, abs_error: float,
                  rel_error: float, prob_itm: float) -> List[str]:
    return [
        f"{name} OPTION:",
        f"Monte Carlo price: {mc:.4f}",
        f"Black-Scholes price: {bs:.4f}",
        f"Absolute error: {abs_error:.4f}",
        f"Relative error: {rel_error * 100:.2f} %",
        f"Probability in-the-money: {prob_itm:.4f}",
    ]


def format_report(run: SimulationRun, date: Optional[datetime.date] = None) -> str:
    """Human-readable summary of a run."""
    cfg, result = run.config, run.result
    stats = result.sample_statistics
    date = date or datetime.date.today()

    lines = [
        "MONTE CARLO OPTION PRICING RESULTS",
        "==================================",
        f"Simulation date: {date.isoformat()}",
        f"Number of simulations: {cfg.n_simulations}",
        f"Number of time steps: {cfg.n_steps}",
        f"Initial stock price: {cfg.S0}",
        f"Strike price: {cfg.K}",
        f"Risk-free rate: {cfg.r}",
        f"Drift: {cfg.mu}",
        f"Volatility: {cfg.sigma}",
        f"Time to expiration: {cfg.T} years",
        f"Seed: {cfg.seed}",
        "",
    ]
    lines += _report_lines("CALL", result.mc_call_price, result.bs_call_price,
                           result.call_abs_error, result.call_rel_error, stats.prob_itm_call)
    lines.append("")
    lines += _report_lines("PUT", result.mc_put_price, result.bs_put_price,
                           result.put_abs_error, result.put_rel_error, stats.prob_itm_put)
    lines += [
        "",
        "STATISTICS:",
        f"Mean final price: {stats.mean:.4f}",
        f"Std dev final price: {stats.std:.4f}",
        f"Minimum final price: {stats.min:.4f}",
        f"Maximum final price: {stats.max:.4f}",
    ]
    return "\n".join(lines) + "\n"


def write_report(run: SimulationRun, path: Path) -> Path:
    path = Path(path)
    path.write_text(format_report(run))
    return path


SIMULATION_DATA_COLUMNS = ("Simulation", "Final_Price", "Call_Payoff", "Put_Payoff",
                           "In_The_Money_Call", "In_The_Money_Put")


def save_simulation_data(run: SimulationRun, path: Path) -> Path:
    """Write one CSV row per simulated path."""
    path = Path(path)
    final_prices = run.ensemble.terminal_prices
    K = run.config.K

    table = np.column_stack([
        np.arange(1, final_prices.shape[0] + 1),
        final_prices,
        run.payoffs.call,
        run.payoffs.put,
        final_prices > K,
        final_prices < K,
    ])
    np.savetxt(path, table, delimiter = ",", header = ",".join(SIMULATION_DATA_COLUMNS),
               comments = "", fmt = ["%d", "%.6f", "%.6f", "%.6f", "%d", "%d"])
    return path


def prepare_output_dirs(root: Path, data_root: Path = Path("data")) -> Dict[str, Path]:
    """
    Create results/{plots,tables,reports} and data/processed.

    Returns:
        Mapping of "plots", "tables", "reports" and "processed" to directories
    """
    root = Path(root)
    dirs = {name: root / name for name in ("plots", "tables", "reports")}
    dirs["processed"] = Path(data_root) / "processed"
    for directory in dirs.values():
        directory.mkdir(parents = True, exist_ok = True)
    return dirs
