import argparse
import sys
from pathlib import Path

from definitions import SimulationConfig
from errors import PricingError
from plotting import save_all_plots
from results import (display_parameters, prepare_output_dirs, run_simulation,
                     save_simulation_data, write_report)

DEFAULTS = SimulationConfig()


def parse_args(argv = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description = "Price European options by Monte Carlo simulation of GBM "
                      "and compare against Black-Scholes."
    )
    parser.add_argument("--simulations", type = int, default = DEFAULTS.n_simulations,
                        help = f"Number of simulations (default: {DEFAULTS.n_simulations})")
    parser.add_argument("--steps", type = int, default = DEFAULTS.n_steps,
                        help = f"Number of time steps (default: {DEFAULTS.n_steps})")
    parser.add_argument("--price", type = float, default = DEFAULTS.S0,
                        help = f"Initial stock price (default: {DEFAULTS.S0:g})")
    parser.add_argument("--strike", type = float, default = DEFAULTS.K,
                        help = f"Strike price (default: {DEFAULTS.K:g})")
    parser.add_argument("--rate", type = float, default = DEFAULTS.r,
                        help = f"Risk-free rate (default: {DEFAULTS.r})")
    parser.add_argument("--volatility", type = float, default = DEFAULTS.sigma,
                        help = f"Volatility (default: {DEFAULTS.sigma})")
    parser.add_argument("--drift", type = float, default = DEFAULTS.mu,
                        help = f"Drift used for the paths (default: {DEFAULTS.mu})")
    parser.add_argument("--maturity", type = float, default = DEFAULTS.T,
                        help = f"Time to expiration in years (default: {DEFAULTS.T:g})")
    parser.add_argument("--seed", type = int, default = DEFAULTS.seed,
                        help = f"Random seed (default: {DEFAULTS.seed})")
    parser.add_argument("--workers", type = int, default = 1,
                        help = "Threads used for path generation (default: 1)")
    parser.add_argument("--output-dir", type = Path, default = Path("results"),
                        help = "Directory for plots, tables and reports (default: results)")
    parser.add_argument("--data-dir", type = Path, default = Path("data"),
                        help = "Directory for the per-path CSV, under processed/ (default: data)")
    parser.add_argument("--no-plots", action = "store_true", help = "Skip figure rendering")
    parser.add_argument("--no-save", action = "store_true", help = "Do not write any files")
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    return SimulationConfig(
        n_simulations = args.simulations,
        n_steps = args.steps,
        S0 = args.price,
        K = args.strike,
        r = args.rate,
        sigma = args.volatility,
        mu = args.drift,
        T = args.maturity,
        seed = args.seed,
    )


def main(argv = None) -> int:
    args = parse_args(argv)

    try:
        config = config_from_args(args)
        display_parameters(config)
        run = run_simulation(config, n_workers = args.workers, verbose = True)
    except PricingError as exc:
        print(f"error: {exc}", file = sys.stderr)
        return 2

    if args.no_save:
        return 0

    dirs = prepare_output_dirs(args.output_dir, args.data_dir)
    save_simulation_data(run, dirs["processed"] / "simulation_data.csv")
    write_report(run, dirs["reports"] / "simulation_results.txt")

    if not args.no_plots:
        save_all_plots(run, dirs["plots"])

    print("\nSimulation completed successfully!")
    print(f"Results saved in '{args.output_dir}' directory")
    return 0


if __name__ == "__main__":
    sys.exit(main())
