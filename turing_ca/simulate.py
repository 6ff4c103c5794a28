#!/usr/bin/env python3
"""
simulate.py

Single run of the Turing-pattern automaton with outputs on disk.

Outputs (under outdir)
----------------------
- meta.json            full cfg + config_hash (+ generations completed)
- metrics.csv          metrics every `log_every` generations (and the last one)
- state_initial.npz, state_mid.npz, state_final.npz   when save_states
- color_XXXXXX.png + montage.png                      when save_snapshots

Usage:
  python -m turing_ca.simulate --rows 200 --cols 200 --steps 300 --save_snapshots
  python -m turing_ca.simulate --config run.json --outdir outputs/run_a
"""

import argparse
import os
from typing import Any, Dict, List, Optional

from turing_ca.config import SimulationConfig, load_config
from turing_ca.driver import run
from turing_ca.metrics import METRIC_COLUMNS, summarize
from turing_ca.seeding import initialize
from turing_ca.storage import (
    append_metrics,
    config_hash,
    init_metrics,
    load_state_npz,
    save_state_npz,
    write_meta,
)
from turing_ca.viz import montage, save_color_png


def _quiet(*args, **kwargs):
    pass


def run_simulation(cfg: Dict[str, Any], outdir: str) -> str:
    """
    Run one simulation described by `cfg` and write its outputs.

    Parameters
    ----------
    cfg : dict
        Flat configuration, see `turing_ca.config`. Missing keys take the
        reference-run defaults.
    outdir : str
        Output directory. Will be created if it does not exist.

    Returns
    -------
    outdir : str
    """
    config = SimulationConfig.from_cfg(cfg)
    full_cfg = config.to_cfg()
    say = print if config.verbose else _quiet

    os.makedirs(outdir, exist_ok=True)
    write_meta(outdir, full_cfg)

    if config.resume_from:
        grid, color_map, start_gen = load_state_npz(config.resume_from)
        if grid.dimensions != config.dimensions:
            raise ValueError(
                f"resume_from state is {grid.dimensions.shape}, cfg asks for {config.dimensions.shape}"
            )
        say(f"[run] resuming {config.resume_from} at generation {start_gen}")
    else:
        grid, color_map = initialize(config.dimensions, config.seeding, config.seed)
        start_gen = 0

    rows, cols = config.dimensions.shape
    say(f"[run] {rows}x{cols}, {config.steps} generations, {config.accumulation} diffusion -> {outdir}")

    metrics_path = os.path.join(outdir, "metrics.csv")
    init_metrics(metrics_path, METRIC_COLUMNS)
    append_metrics(metrics_path, METRIC_COLUMNS, summarize(start_gen, grid, color_map))

    snapshots: List[str] = []

    def snapshot(generation, color_map):
        path = os.path.join(outdir, f"color_{generation:06d}.png")
        snapshots.append(save_color_png(path, color_map, config.cmap))

    if config.save_states:
        save_state_npz(outdir, "state_initial.npz", grid, color_map, start_gen)
    if config.save_snapshots:
        snapshot(start_gen, color_map)

    completed = 0

    def on_generation(gen, current, cmap_values):
        nonlocal completed
        completed = gen
        t = start_gen + gen
        last = gen == config.steps
        if gen % config.log_every == 0 or last:
            row = summarize(t, current, cmap_values)
            append_metrics(metrics_path, METRIC_COLUMNS, row)
            say(
                f"[run] gen {t:6d}  mean_a={row['mean_a']:.4f}  mean_b={row['mean_b']:.4f}  "
                f"mean_color={row['mean_color']:.4f}  out_of_range={row['out_of_range']}"
            )
        if config.save_snapshots and (gen % config.snap_every == 0 or last):
            snapshot(t, cmap_values)
        if config.save_states and gen == config.mid_state_step:
            save_state_npz(outdir, "state_mid.npz", current, cmap_values, t)

    final = run(
        config.steps,
        config.parameters,
        config.dimensions,
        grid,
        color_map,
        accumulation=config.accumulation,
        clamp=config.clamp,
        sweep=config.sweep,
        workers=config.workers,
        on_generation=on_generation,
    )

    if config.save_states:
        save_state_npz(outdir, "state_final.npz", final, color_map, start_gen + completed)
    if snapshots:
        montage(snapshots, os.path.join(outdir, "montage.png"))

    write_meta(outdir, full_cfg, generations_completed=completed, final_generation=start_gen + completed)
    say(f"[run] done ({completed} generations)")
    return outdir


# ------------------------------------------------------------
# CLI
# ------------------------------------------------------------

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Run the Turing-pattern cellular automaton.")
    ap.add_argument("--config", type=str, default=None, help="JSON file with a cfg dict.")
    ap.add_argument("--outdir", type=str, default=None,
                    help="Output directory (default: outputs/turing_ca/<config hash>).")

    ap.add_argument("--rows", type=int, default=None)
    ap.add_argument("--cols", type=int, default=None)
    ap.add_argument("--steps", type=int, default=None, help="Number of generations.")

    ap.add_argument("--d_a", type=float, default=None, help="Diffusion rate of A.")
    ap.add_argument("--d_b", type=float, default=None, help="Diffusion rate of B.")
    ap.add_argument("--f", type=float, default=None, help="Feed rate of A.")
    ap.add_argument("--k", type=float, default=None, help="Death rate of B.")
    ap.add_argument("--r", type=float, default=None, help="Reproduction rate.")

    ap.add_argument("--seeding", choices=["fixed_count", "per_cell_probability"], default=None)
    ap.add_argument("--seed_count", type=int, default=None)
    ap.add_argument("--seed_probability", type=float, default=None)
    ap.add_argument("--seed", type=int, default=None, help="RNG seed for the initial cells.")

    ap.add_argument("--accumulation", choices=["sequential", "simultaneous"], default=None)
    ap.add_argument("--clamp", action="store_true", default=None,
                    help="Clip concentrations to [0, 1] after each generation.")
    ap.add_argument("--sweep", choices=["array", "cell"], default=None)
    ap.add_argument("--workers", type=int, default=None)

    ap.add_argument("--log_every", type=int, default=None)
    ap.add_argument("--snap_every", type=int, default=None)
    ap.add_argument("--save_snapshots", action="store_true", default=None)
    ap.add_argument("--no_states", action="store_true", help="Do not write state_*.npz files.")
    ap.add_argument("--resume_from", type=str, default=None, help="state_*.npz to continue from.")
    ap.add_argument("--cmap", type=str, default=None)
    ap.add_argument("--quiet", action="store_true")
    return ap.parse_args(argv)


def cfg_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    cfg: Dict[str, Any] = load_config(args.config) if args.config else {}
    for key in (
        "rows", "cols", "steps", "d_a", "d_b", "f", "k", "r",
        "seeding", "seed_count", "seed_probability", "seed",
        "accumulation", "clamp", "sweep", "workers",
        "log_every", "snap_every", "save_snapshots", "resume_from", "cmap",
    ):
        v = getattr(args, key)
        if v is not None:
            cfg[key] = v
    if args.no_states:
        cfg["save_states"] = False
    if args.quiet:
        cfg["verbose"] = False
    return cfg


def main(argv: Optional[List[str]] = None) -> str:
    args = parse_args(argv)
    cfg = cfg_from_args(args)
    outdir = args.outdir or os.path.join("outputs", "turing_ca", config_hash(SimulationConfig.from_cfg(cfg).to_cfg()))
    return run_simulation(cfg, outdir)


if __name__ == "__main__":
    main()
