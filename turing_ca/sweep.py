#!/usr/bin/env python3
"""
sweep.py

Random parameter sweep driver for the Turing-pattern automaton.

Features:
 - Random sampling of d_a, d_b, f, k, r in configurable ranges
 - Parallel execution with multiprocessing
 - Each run stored under: <base_outdir>/<config hash>/
 - Post-hoc summary runs_summary.csv with, per run:
     * the sampled parameters
     * final mean_a, mean_b, mean_color, color_entropy, activated_fraction
     * mean color over the run, final out_of_range count

Usage:
  python -m turing_ca.sweep --runs 40 --workers 4 --rows 128 --cols 128 --steps 300
"""

import argparse
import os
import sys
from multiprocessing import Pool
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from turing_ca.simulate import run_simulation
from turing_ca.storage import config_hash, load_json, load_metrics


# ------------------------------------------------------------
# Config sampling
# ------------------------------------------------------------

PARAM_SPACE: List[Tuple[str, float, float]] = [
    ("d_a", 0.2, 1.0),
    ("d_b", 0.05, 0.6),
    ("f", 0.01, 0.3),
    ("k", 0.01, 0.3),
    ("r", 0.1, 1.0),
]


def build_random_config(rng: np.random.Generator, base: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build a single random configuration on top of `base`.
    The seed for the initial cells is drawn from `rng` as well.
    """
    cfg = dict(base or {})
    for name, lo, hi in PARAM_SPACE:
        cfg[name] = float(rng.uniform(lo, hi))
    cfg["seed"] = int(rng.integers(0, 2**31 - 1))
    return cfg


# ------------------------------------------------------------
# Worker
# ------------------------------------------------------------

def worker(args):
    """
    Worker function for multiprocessing.
    """
    idx, cfg, base_outdir = args
    h = config_hash(cfg)
    outdir = os.path.join(base_outdir, h)
    print(f"→ [{idx}] Running {outdir}")
    run_simulation(cfg, outdir)
    print(f"✓ [{idx}] Done {outdir}")
    return outdir


# ------------------------------------------------------------
# Post-hoc summary
# ------------------------------------------------------------

def summarize_run(run_dir: str) -> Optional[Dict[str, Any]]:
    meta = load_json(os.path.join(run_dir, "meta.json"))
    if meta is None:
        print(f"[warn] skipping (no meta.json): {run_dir}", file=sys.stderr)
        return None
    df = load_metrics(run_dir)
    if df is None or len(df) == 0:
        print(f"[warn] skipping (no metrics): {run_dir}", file=sys.stderr)
        return None

    last = df.iloc[-1]
    row = {
        "run_dir": str(run_dir),
        "config_hash": meta.get("config_hash"),
        "rows": meta.get("rows"),
        "cols": meta.get("cols"),
        "accumulation": meta.get("accumulation"),
        "generations": int(last["generation"]),
    }
    for name, _, _ in PARAM_SPACE:
        row[name] = meta.get(name)
    row.update({
        "final_mean_a": float(last["mean_a"]),
        "final_mean_b": float(last["mean_b"]),
        "final_mean_color": float(last["mean_color"]),
        "final_color_entropy": float(last["color_entropy"]),
        "final_activated_fraction": float(last["activated_fraction"]),
        "final_out_of_range": int(last["out_of_range"]),
        "mean_color": float(df["mean_color"].mean()),
    })
    return row


def summarize_runs(run_dirs: Sequence[str], summary_outdir: str) -> Optional[Path]:
    """
    Build runs_summary.csv from a list of run_dirs.
    """
    rows = []
    for rd in run_dirs:
        try:
            row = summarize_run(rd)
        except (OSError, ValueError, KeyError, pd.errors.ParserError) as e:
            print(f"[warn] error reading {rd}: {e}", file=sys.stderr)
            continue
        if row is not None:
            rows.append(row)

    if not rows:
        print("No valid runs to summarise.")
        return None

    summary_df = pd.DataFrame(rows)
    summary_outdir = Path(summary_outdir)
    summary_outdir.mkdir(parents=True, exist_ok=True)
    out_csv = summary_outdir / "runs_summary.csv"
    summary_df.to_csv(out_csv, index=False)
    print("Wrote", out_csv, "with", len(summary_df), "runs.")
    return out_csv


# ------------------------------------------------------------
# Main
# ------------------------------------------------------------

def run_sweep(
    runs: int,
    base_outdir: str,
    workers: int = 1,
    seed: Optional[int] = None,
    base_cfg: Optional[Dict[str, Any]] = None,
    summarize: bool = True,
) -> List[str]:
    rng = np.random.default_rng(seed)
    os.makedirs(base_outdir, exist_ok=True)

    jobs = []
    for i in range(runs):
        cfg = build_random_config(rng, base_cfg)
        jobs.append((i, cfg, base_outdir))

    print(f"Total simulations: {len(jobs)}")
    run_dirs = []
    if workers > 1:
        with Pool(workers) as P:
            for outdir in P.map(worker, jobs):
                run_dirs.append(outdir)
    else:
        for j in jobs:
            run_dirs.append(worker(j))

    print("\nSweep complete.")

    if summarize:
        summarize_runs(run_dirs, base_outdir)
    return run_dirs


def main(argv: Optional[List[str]] = None) -> List[str]:
    parser = argparse.ArgumentParser()
    parser.add_argument("--runs", type=int, default=20,
                        help="Number of random configurations to run.")
    parser.add_argument("--workers", type=int, default=4,
                        help="Number of parallel worker processes.")
    parser.add_argument("--base_outdir", type=str, default="outputs/turing_ca_sweep",
                        help="Base directory for simulation outputs.")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for parameter sampling (and per-run seeds).")
    parser.add_argument("--rows", type=int, default=128)
    parser.add_argument("--cols", type=int, default=128)
    parser.add_argument("--steps", type=int, default=300)
    parser.add_argument("--seeding", choices=["fixed_count", "per_cell_probability"], default="fixed_count")
    parser.add_argument("--accumulation", choices=["sequential", "simultaneous"], default="sequential")
    parser.add_argument("--no_summarize", action="store_true",
                        help="Skip post-hoc summary CSV.")
    args = parser.parse_args(argv)

    base_cfg = {
        "rows": args.rows,
        "cols": args.cols,
        "steps": args.steps,
        "seeding": args.seeding,
        "accumulation": args.accumulation,
        "verbose": False,
    }
    return run_sweep(
        args.runs,
        args.base_outdir,
        workers=args.workers,
        seed=args.seed,
        base_cfg=base_cfg,
        summarize=not args.no_summarize,
    )


if __name__ == "__main__":
    main()
