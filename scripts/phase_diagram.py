"""
Phase Diagram — User Growth × Churn → Break-even Month and LTV:CAC

Sweeps growth and churn rates across their slider ranges for one scenario and
plots two heatmaps: the month the business first breaks even (blank if it
never does within 60 months) and the steady-state LTV:CAC ratio.

Usage:
    python scripts/phase_diagram.py
    python scripts/phase_diagram.py --scenario marketplace --runs 5 --volatility 10
"""

import sys
import argparse
import logging
import os
import time
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt

sys.path.insert(0, str(Path(__file__).parent.parent))
from landshare_backtest import ParameterSet, SCENARIOS, MAX_MONTHS, build_history, compute_kpis


def run_single(base: ParameterSet, growth: float, churn: float, seed: int) -> dict:
    """Run one backtest, return break-even month (NaN if never) and LTV:CAC."""
    params = base.replace(user_growth_rate=growth, churn_rate=churn)
    kpis = compute_kpis(params, build_history(params, seed=seed))
    return {
        "break_even": kpis.break_even_month if kpis.break_even_month > 0 else np.nan,
        "ratio": kpis.ratio,
    }


def sweep(
    base: ParameterSet,
    growth_values: list,
    churn_values: list,
    runs_per_combo: int,
) -> tuple:
    """
    Sweep user_growth_rate × churn_rate.
    Returns (break_even_grid, ratio_grid) shaped (len(growth), len(churn)).
    """
    break_even_grid = np.zeros((len(growth_values), len(churn_values)))
    ratio_grid = np.zeros((len(growth_values), len(churn_values)))

    total = len(growth_values) * len(churn_values) * runs_per_combo
    done = 0
    t0 = time.time()

    for i, growth in enumerate(growth_values):
        for j, churn in enumerate(churn_values):
            be_samples = []
            for run in range(runs_per_combo):
                result = run_single(base, growth, churn, seed=i * 10000 + j * 100 + run)
                be_samples.append(result["break_even"])
                done += 1
            # LTV is parameter-only, so one sample is enough
            ratio_grid[i, j] = result["ratio"]
            break_even_grid[i, j] = np.nan if np.isnan(be_samples).all() else np.nanmean(be_samples)

            elapsed = time.time() - t0
            print(f"\r  {done}/{total} runs  [{elapsed:.0f}s elapsed]", end="", flush=True)

    print()
    return break_even_grid, ratio_grid


def plot(
    break_even_grid: np.ndarray,
    ratio_grid: np.ndarray,
    growth_values: list,
    churn_values: list,
    title: str,
    out_path: str,
):
    fig, axes = plt.subplots(1, 2, figsize=(14, 6))
    fig.suptitle(
        f"Landshare Backtest — Parameter Space ({title})\n"
        f"User growth × churn over a {MAX_MONTHS}-month horizon",
        fontsize=13, fontweight="bold", y=1.01,
    )
    extent = [
        churn_values[0] - 0.25, churn_values[-1] + 0.25,
        growth_values[0] - 0.5, growth_values[-1] + 0.5,
    ]

    # --- Break-even heatmap ---
    ax = axes[0]
    im = ax.imshow(
        np.ma.masked_invalid(break_even_grid),
        origin="lower", aspect="auto", cmap="RdYlGn_r",
        vmin=1, vmax=MAX_MONTHS, extent=extent,
    )
    plt.colorbar(im, ax=ax, label="Break-even month")
    ax.set_xlabel("Churn rate (%/mo)", fontsize=11)
    ax.set_ylabel("User growth rate (%/mo)", fontsize=11)
    ax.set_title("Break-even Month (blank = never)", fontsize=12, fontweight="bold")

    for i in range(len(growth_values)):
        for j in range(len(churn_values)):
            value = break_even_grid[i, j]
            ax.text(
                churn_values[j], growth_values[i],
                "–" if np.isnan(value) else f"{value:.0f}",
                ha="center", va="center", fontsize=7,
            )

    # --- LTV:CAC heatmap (inf clipped for display) ---
    ax = axes[1]
    finite = ratio_grid[np.isfinite(ratio_grid)]
    vmax = max(3.0, float(finite.max())) if finite.size else 3.0
    im2 = ax.imshow(
        np.clip(ratio_grid, 0, vmax),
        origin="lower", aspect="auto", cmap="RdYlGn",
        vmin=0, vmax=vmax, extent=extent,
    )
    plt.colorbar(im2, ax=ax, label="LTV:CAC")
    ax.set_xlabel("Churn rate (%/mo)", fontsize=11)
    ax.set_ylabel("User growth rate (%/mo)", fontsize=11)
    ax.set_title("LTV:CAC Ratio", fontsize=12, fontweight="bold")

    plt.tight_layout()
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_path, dpi=150, bbox_inches="tight")
    print(f"  Saved → {out_path}")
    plt.show()


def main():
    parser = argparse.ArgumentParser(description="Phase diagram: growth × churn → break-even, LTV:CAC")
    parser.add_argument("--scenario", type=str, default="default", choices=list(SCENARIOS.keys()))
    parser.add_argument("--runs", type=int, default=1, help="Runs per parameter combo")
    parser.add_argument("--volatility", type=float, default=None, help="Override market volatility (%%)")
    parser.add_argument("--out", type=str, default="output/phase_diagram.png")
    parser.add_argument("--quick", action="store_true", help="Fast preview (coarse grid)")
    args = parser.parse_args()

    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "WARNING").upper())

    base = ParameterSet.from_dict(SCENARIOS[args.scenario]["params"])
    if args.volatility is not None:
        base = base.replace(market_volatility=args.volatility)

    if args.quick:
        growth_values = list(range(0, 31, 6))            # 6 values
        churn_values = [float(c) for c in range(0, 11, 2)]  # 6 values
    else:
        growth_values = list(range(0, 31, 3))            # 11 values
        churn_values = [c / 2 for c in range(0, 21)]     # 0.0 … 10.0 by 0.5

    total = len(growth_values) * len(churn_values) * args.runs
    print(f"Phase diagram sweep ({SCENARIOS[args.scenario]['title']})")
    print(f"  user_growth_rate: {growth_values}")
    print(f"  churn_rate:       {churn_values}")
    print(f"  {len(growth_values)} × {len(churn_values)} combos × {args.runs} runs = {total} simulations")
    print()

    break_even_grid, ratio_grid = sweep(base, growth_values, churn_values, args.runs)

    reached = np.count_nonzero(~np.isnan(break_even_grid))
    print()
    print(f"  Break-even reached in {reached}/{break_even_grid.size} combos")
    print()

    plot(break_even_grid, ratio_grid, growth_values, churn_values,
         SCENARIOS[args.scenario]["title"], args.out)


if __name__ == "__main__":
    main()
