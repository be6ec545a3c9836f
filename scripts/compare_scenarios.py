"""
Scenario Comparison — Cumulative Profit with Uncertainty Bands

Runs every built-in scenario N times with different seeds and plots mean
cumulative profit ± 95% confidence interval over the 60-month horizon.
Scenarios with zero volatility get a volatility floor so the bands show how
sensitive each business shape is to growth noise.

Usage:
    python scripts/compare_scenarios.py
    python scripts/compare_scenarios.py --runs 100 --volatility 15 --out output/scenarios.png
"""

import sys
import argparse
import logging
import os
import time
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

sys.path.insert(0, str(Path(__file__).parent.parent))
from landshare_backtest import ParameterSet, SCENARIOS, MAX_MONTHS, BacktestModel


# Colour palette — one per scenario, order matches SCENARIOS dict
PALETTE = {
    "default":      "#1a56db",
    "aggressive":   "#dc2626",
    "bootstrap":    "#059669",
    "subscription": "#d97706",
    "marketplace":  "#7c3aed",
}


def scenario_params(scenario_id: str, volatility_floor: float) -> ParameterSet:
    params = ParameterSet.from_dict(SCENARIOS[scenario_id]["params"])
    if params.market_volatility < volatility_floor:
        params = params.replace(market_volatility=volatility_floor)
    return params


def run_scenario(scenario_id: str, runs: int, volatility_floor: float, metric: str) -> np.ndarray:
    """
    Run one scenario N times.
    Returns array of shape (runs, MAX_MONTHS).
    """
    params = scenario_params(scenario_id, volatility_floor)
    matrix = np.zeros((runs, MAX_MONTHS))

    for r in range(runs):
        model = BacktestModel(params, seed=r * 31337)
        model.run(MAX_MONTHS)
        series = np.array(model.get_history()[metric], dtype=float)
        matrix[r] = np.cumsum(series) if metric == "profit" else series

    return matrix


def plot(
    results: dict,
    runs: int,
    out_path: str,
    metric_label: str,
):
    fig, ax = plt.subplots(figsize=(12, 6))

    months = list(range(1, MAX_MONTHS + 1))
    handles = []

    for scenario_id, matrix in results.items():
        title = SCENARIOS[scenario_id]["title"]
        color = PALETTE.get(scenario_id, "#64748b")

        mean = matrix.mean(axis=0)
        std = matrix.std(axis=0)
        ci = 1.96 * std / np.sqrt(runs)

        ax.plot(months, mean, color=color, linewidth=2, label=title)
        ax.fill_between(months, mean - ci, mean + ci, color=color, alpha=0.15)

        handles.append(mpatches.Patch(color=color, label=title))

    ax.axhline(0, color="#888", linewidth=1, linestyle="--")
    ax.set_xlabel("Month", fontsize=12)
    ax.set_ylabel(metric_label, fontsize=12)
    ax.set_title(
        f"Landshare Backtest — Scenario Comparison\n"
        f"{metric_label} — mean ± 95% CI across {runs} runs per scenario",
        fontsize=13, fontweight="bold",
    )
    ax.set_xlim(1, MAX_MONTHS)
    ax.legend(handles=handles, loc="upper left", fontsize=10, framealpha=0.9)
    ax.grid(axis="y", alpha=0.3)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)

    plt.tight_layout()
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_path, dpi=150, bbox_inches="tight")
    print(f"  Saved → {out_path}")
    plt.show()


def main():
    parser = argparse.ArgumentParser(description="Compare built-in scenarios with uncertainty bands")
    parser.add_argument("--runs", type=int, default=50, help="Runs per scenario")
    parser.add_argument("--volatility", type=float, default=10.0,
                        help="Minimum market volatility (%%) applied to every scenario")
    parser.add_argument("--out", type=str, default="output/scenario_comparison.png")
    parser.add_argument("--quick", action="store_true", help="Fast preview (10 runs)")
    args = parser.parse_args()

    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "WARNING").upper())

    runs = 10 if args.quick else args.runs

    print(f"Scenario comparison")
    print(f"  Scenarios: {list(SCENARIOS.keys())}")
    print(f"  {runs} runs × {MAX_MONTHS} months × {len(SCENARIOS)} scenarios, volatility ≥ {args.volatility}%")
    print()

    profit_results = {}
    user_results = {}
    t0 = time.time()

    for i, scenario_id in enumerate(SCENARIOS):
        title = SCENARIOS[scenario_id]["title"]
        print(f"  [{i+1}/{len(SCENARIOS)}] {title} ...", end="", flush=True)
        profit_results[scenario_id] = run_scenario(scenario_id, runs, args.volatility, "profit")
        user_results[scenario_id] = run_scenario(scenario_id, runs, args.volatility, "users")
        final = profit_results[scenario_id][:, -1]
        print(f" cumulative profit M{MAX_MONTHS}: ${final.mean():,.0f} ± {final.std():,.0f}")

    print(f"\n  Done in {time.time() - t0:.1f}s")
    print()

    plot(profit_results, runs, args.out, metric_label="Cumulative profit ($)")
    plot(user_results, runs, args.out.replace(".png", "_users.png"), metric_label="Users")


if __name__ == "__main__":
    main()
