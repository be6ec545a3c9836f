"""
Interactive 3D Phase Surface — User Growth × Churn → Break-even, LTV:CAC

Same sweep as phase_diagram.py, rendered as an interactive Plotly 3D surface.
Saves as a self-contained HTML file — no server required.

Combos that never break even are left as holes in the left surface; infinite
LTV:CAC (zero churn) is clipped to the top of the right one.

Usage:
    python scripts/phase_diagram_3d.py
    python scripts/phase_diagram_3d.py --scenario aggressive --quick --out output/phase_3d.html
"""

import sys
import argparse
import logging
import os
from pathlib import Path

import numpy as np
import plotly.graph_objects as go
import plotly.io as pio
from plotly.subplots import make_subplots

sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))
from landshare_backtest import ParameterSet, SCENARIOS, MAX_MONTHS
from phase_diagram import sweep


def build_html(break_even_grid, ratio_grid, growth_values, churn_values, title, runs, out_path):
    C = np.array(churn_values)
    G = np.array(growth_values)

    finite = ratio_grid[np.isfinite(ratio_grid)]
    ratio_max = max(3.0, float(finite.max())) if finite.size else 3.0

    fig = make_subplots(
        rows=1, cols=2,
        specs=[[{"type": "surface"}, {"type": "surface"}]],
        subplot_titles=["Break-even Month", "LTV:CAC"],
        horizontal_spacing=0.05,
    )

    fig.add_trace(go.Surface(
        z=break_even_grid,
        x=C, y=G,
        colorscale="RdYlGn_r",
        cmin=1, cmax=MAX_MONTHS,
        colorbar=dict(title="Month", x=0.45, len=0.8),
        name="Break-even",
    ), row=1, col=1)

    fig.add_trace(go.Surface(
        z=np.clip(ratio_grid, 0, ratio_max),
        x=C, y=G,
        colorscale="RdYlGn",
        cmin=0, cmax=ratio_max,
        colorbar=dict(title="LTV:CAC", x=1.02, len=0.8),
        name="LTV:CAC",
    ), row=1, col=2)

    camera = dict(eye=dict(x=1.6, y=-1.6, z=1.2))
    axis_style = dict(tickfont=dict(size=10), title_font=dict(size=11))

    fig.update_layout(
        title=dict(
            text=(
                f"<b>Landshare Backtest — Parameter Space ({title})</b><br>"
                f"<sup>{runs} run(s) per combo × {MAX_MONTHS} months  ·  "
                f"{len(growth_values) * len(churn_values) * runs:,} total simulations</sup>"
            ),
            x=0.5, xanchor="center",
        ),
        scene=dict(
            xaxis=dict(title="Churn rate (%/mo)", **axis_style),
            yaxis=dict(title="User growth rate (%/mo)", **axis_style),
            zaxis=dict(title="Break-even month", **axis_style),
            camera=camera,
        ),
        scene2=dict(
            xaxis=dict(title="Churn rate (%/mo)", **axis_style),
            yaxis=dict(title="User growth rate (%/mo)", **axis_style),
            zaxis=dict(title="LTV:CAC", **axis_style),
            camera=camera,
        ),
        height=650,
        margin=dict(l=0, r=0, t=100, b=0),
    )

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    pio.write_html(fig, out_path, full_html=True, include_plotlyjs=True)
    print(f"  Saved → {out_path}")
    print(f"  Open in browser: open {out_path}")


def main():
    parser = argparse.ArgumentParser(description="Interactive 3D phase surface (Plotly HTML)")
    parser.add_argument("--scenario", type=str, default="default", choices=list(SCENARIOS.keys()))
    parser.add_argument("--runs", type=int, default=1)
    parser.add_argument("--volatility", type=float, default=None, help="Override market volatility (%%)")
    parser.add_argument("--out", type=str, default="output/phase_3d.html")
    parser.add_argument("--quick", action="store_true", help="Coarse grid")
    args = parser.parse_args()

    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "WARNING").upper())

    base = ParameterSet.from_dict(SCENARIOS[args.scenario]["params"])
    if args.volatility is not None:
        base = base.replace(market_volatility=args.volatility)

    if args.quick:
        growth_values = list(range(0, 31, 6))
        churn_values = [float(c) for c in range(0, 11, 2)]
    else:
        growth_values = list(range(0, 31, 2))
        churn_values = [c / 2 for c in range(0, 21)]

    total = len(growth_values) * len(churn_values) * args.runs
    print("3D phase surface")
    print(f"  {len(growth_values)} × {len(churn_values)} combos × {args.runs} runs = {total} simulations")
    print()

    break_even_grid, ratio_grid = sweep(base, growth_values, churn_values, args.runs)
    print()
    build_html(break_even_grid, ratio_grid, growth_values, churn_values,
               SCENARIOS[args.scenario]["title"], args.runs, args.out)


if __name__ == "__main__":
    main()
