"""
Reproducibility Receipt — Run a scenario and get a verifiable output

Runs the 60-month backtest with a fixed seed, exports the monthly history as
JSON, and prints a receipt: everything needed to recreate exactly the same
run, plus the headline unit economics.

Usage:
    python scripts/run.py
    python scripts/run.py --scenario aggressive --seed 42
    python scripts/run.py --scenario marketplace --seed 99 --volatility 15 --out results/
"""

import sys
import argparse
import hashlib
import json
import logging
import os
import platform
import time
from datetime import datetime, timezone
from pathlib import Path

import mesa

sys.path.insert(0, str(Path(__file__).parent.parent))
from landshare_backtest import (
    ParameterSet, SCENARIOS, BacktestModel, build_annual, compute_kpis, history_to_json,
)


def sha256_file(path: str) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        h.update(f.read())
    return h.hexdigest()


def run(scenario_id: str, seed: int, out_dir: str, volatility: float = None) -> dict:
    """Run simulation, export JSON, return receipt dict."""
    scenario = SCENARIOS[scenario_id]
    params = ParameterSet.from_dict(scenario["params"])
    if volatility is not None:
        params = params.replace(market_volatility=volatility)

    t0 = time.time()
    model = BacktestModel(params, seed=seed)
    history = model.run()
    annual = build_annual(history)
    kpis = compute_kpis(params, history)
    elapsed = time.time() - t0

    Path(out_dir).mkdir(parents=True, exist_ok=True)
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    json_path = Path(out_dir) / f"{scenario_id}_seed{seed}_{ts}.json"
    with open(json_path, "w") as f:
        f.write(history_to_json(history))

    csv_path = Path(out_dir) / f"{scenario_id}_seed{seed}_{ts}_timeseries.csv"
    columns = model.get_history()
    names = list(columns.keys())
    with open(csv_path, "w") as f:
        f.write(",".join(names) + "\n")
        for i in range(len(columns[names[0]])):
            row = []
            for col in names:
                v = columns[col][i]
                row.append(f"{v:.2f}" if isinstance(v, float) else str(v))
            f.write(",".join(row) + "\n")

    final = history[-1]
    receipt = {
        "scenario_id":    scenario_id,
        "scenario_title": scenario["title"],
        "seed":           seed,
        "months":         len(history),
        "params":         params.to_dict(),
        "mesa_version":   mesa.__version__,
        "python":         platform.python_version(),
        "platform":       platform.system(),
        "timestamp_utc":  datetime.now(timezone.utc).isoformat(),
        "elapsed_s":      round(elapsed, 3),
        "output_json":    str(json_path),
        "output_csv":     str(csv_path),
        "sha256":         sha256_file(str(json_path)),
        "final_users":    final.users,
        "final_revenue":  final.revenue,
        "final_profit":   final.profit,
        "annual_profit":  [a.profit for a in annual],
        "kpis":           kpis.to_dict(),
    }
    return receipt


def _fmt_money(value) -> str:
    return "∞" if value is None else f"${value:,.2f}"


def print_receipt(r: dict):
    w = 60
    k = r["kpis"]
    print()
    print("=" * w)
    print(f"  REPRODUCIBILITY RECEIPT")
    print("=" * w)
    print(f"  Scenario : {r['scenario_title']}")
    print(f"  Seed     : {r['seed']}")
    print(f"  Months   : {r['months']}")
    print(f"  Mesa     : {r['mesa_version']}")
    print(f"  Python   : {r['python']}  ({r['platform']})")
    print(f"  Run time : {r['elapsed_s']}s")
    print()
    print(f"  Parameters:")
    for key, v in r["params"].items():
        print(f"    {key:<30} {v}")
    print()
    print(f"  Final month:")
    print(f"    Users              {r['final_users']:,}")
    print(f"    Revenue            {_fmt_money(r['final_revenue'])}")
    print(f"    Profit             {_fmt_money(r['final_profit'])}")
    print()
    print(f"  Unit economics:")
    print(f"    CAC                {_fmt_money(k['cac'])}")
    print(f"    LTV                {_fmt_money(k['ltv'])}")
    ratio = "∞" if k["ratio"] is None else f"{k['ratio']:.2f}x"
    print(f"    LTV:CAC            {ratio}")
    print(f"    Break-even         {k['break_even_label']}")
    print()
    print(f"  Output JSON : {r['output_json']}")
    print(f"  Output CSV  : {r['output_csv']}")
    print(f"  SHA-256     : {r['sha256']}")
    print("=" * w)
    print()
    print("  To reproduce this exact run:")
    print(f"    python scripts/run.py \\")
    print(f"      --scenario {r['scenario_id']} \\")
    print(f"      --seed {r['seed']}")
    print()


def main():
    parser = argparse.ArgumentParser(description="Run a scenario and print a reproducibility receipt")
    parser.add_argument("--scenario", type=str, default="default",
                        choices=list(SCENARIOS.keys()),
                        help="Scenario to run")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--volatility", type=float, default=None,
                        help="Override market volatility (%%)")
    parser.add_argument("--out", type=str, default="results/", help="Output directory")
    parser.add_argument("--json", action="store_true", help="Also write receipt as JSON")
    args = parser.parse_args()

    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

    print(f"Running {SCENARIOS[args.scenario]['title']} · seed={args.seed} …")
    receipt = run(args.scenario, args.seed, args.out, args.volatility)
    print_receipt(receipt)

    if args.json:
        json_path = Path(args.out) / f"receipt_{args.scenario}_seed{args.seed}.json"
        with open(json_path, "w") as f:
            json.dump(receipt, f, indent=2)
        print(f"  Receipt JSON → {json_path}")


if __name__ == "__main__":
    main()
