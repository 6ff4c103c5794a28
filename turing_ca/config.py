"""
config.py

Run configuration.

Runs are described by flat cfg dicts (the form written to meta.json and
accepted on the command line / from JSON files). `SimulationConfig.from_cfg`
reads such a dict with `cfg.get` defaults taken from the reference run
(600x600 grid, 700 generations, d_a=0.6, d_b=0.3, f=0.2, k=0.1, r=0.5,
three seeded cells) and validates everything up front.

cfg keys
--------
- rows, cols, steps
- d_a, d_b, f, k, r
- seeding: "fixed_count" | "per_cell_probability"
- seed_count (fixed_count), seed_probability (per_cell_probability)
- seed: int or None (None -> fresh entropy)
- accumulation: "sequential" | "simultaneous"
- clamp: bool, clip concentrations to [0, 1] after each generation
- sweep: "array" | "cell"
- workers: int >= 1, processes for the row-range sweep
- log_every, snap_every: generation intervals for metrics / snapshots
- save_snapshots, save_states: bool
- mid_state_step: generation of state_mid.npz (default steps // 2)
- resume_from: path of a state_*.npz to continue from
- cmap: matplotlib colormap used for PNG snapshots
- verbose: bool, print progress lines
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from turing_ca.diffusion import check_accumulation
from turing_ca.engine import check_sweep
from turing_ca.grid import Dimensions
from turing_ca.params import REFERENCE_PARAMETERS, Parameters
from turing_ca.seeding import FixedCount, PerCellProbability, Seeding, seeding_from_cfg

DEFAULT_CFG: Dict[str, Any] = {
    "rows": 600,
    "cols": 600,
    "steps": 700,
    **REFERENCE_PARAMETERS.to_cfg(),
    "seeding": "fixed_count",
    "seed_count": 3,
    "seed_probability": 0.005,
    "seed": 0,
    "accumulation": "sequential",
    "clamp": False,
    "sweep": "array",
    "workers": 1,
    "log_every": 10,
    "snap_every": 100,
    "save_snapshots": False,
    "save_states": True,
    "mid_state_step": None,
    "resume_from": None,
    "cmap": "viridis",
    "verbose": True,
}


@dataclass(frozen=True)
class SimulationConfig:
    dimensions: Dimensions
    steps: int
    parameters: Parameters
    seeding: Seeding
    seed: Optional[int] = 0
    accumulation: str = "sequential"
    clamp: bool = False
    sweep: str = "array"
    workers: int = 1
    log_every: int = 10
    snap_every: int = 100
    save_snapshots: bool = False
    save_states: bool = True
    mid_state_step: Optional[int] = None
    resume_from: Optional[str] = None
    cmap: str = "viridis"
    verbose: bool = True

    def __post_init__(self):
        if self.steps < 0:
            raise ValueError(f"steps must be >= 0, got {self.steps}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.log_every <= 0:
            raise ValueError(f"log_every must be positive, got {self.log_every}")
        if self.snap_every <= 0:
            raise ValueError(f"snap_every must be positive, got {self.snap_every}")
        object.__setattr__(self, "accumulation", check_accumulation(self.accumulation))
        object.__setattr__(self, "sweep", check_sweep(self.sweep))
        if self.mid_state_step is None:
            object.__setattr__(self, "mid_state_step", self.steps // 2)

    @classmethod
    def from_cfg(cls, cfg: Dict[str, Any]) -> "SimulationConfig":
        seed = cfg.get("seed", DEFAULT_CFG["seed"])
        mid = cfg.get("mid_state_step")
        return cls(
            dimensions=Dimensions(int(cfg.get("rows", DEFAULT_CFG["rows"])), int(cfg.get("cols", DEFAULT_CFG["cols"]))),
            steps=int(cfg.get("steps", DEFAULT_CFG["steps"])),
            parameters=Parameters.from_cfg(cfg),
            seeding=seeding_from_cfg(cfg),
            seed=None if seed is None else int(seed),
            accumulation=str(cfg.get("accumulation", "sequential")),
            clamp=bool(cfg.get("clamp", False)),
            sweep=str(cfg.get("sweep", "array")),
            workers=int(cfg.get("workers", 1)),
            log_every=int(cfg.get("log_every", DEFAULT_CFG["log_every"])),
            snap_every=int(cfg.get("snap_every", DEFAULT_CFG["snap_every"])),
            save_snapshots=bool(cfg.get("save_snapshots", False)),
            save_states=bool(cfg.get("save_states", True)),
            mid_state_step=None if mid is None else int(mid),
            resume_from=cfg.get("resume_from"),
            cmap=str(cfg.get("cmap", DEFAULT_CFG["cmap"])),
            verbose=bool(cfg.get("verbose", True)),
        )

    def to_cfg(self) -> Dict[str, Any]:
        """Flat dict form, suitable for meta.json and for `from_cfg`."""
        cfg: Dict[str, Any] = {
            "rows": self.dimensions.rows,
            "cols": self.dimensions.cols,
            "steps": self.steps,
            **self.parameters.to_cfg(),
        }
        if isinstance(self.seeding, FixedCount):
            cfg["seeding"] = "fixed_count"
            cfg["seed_count"] = self.seeding.n
        elif isinstance(self.seeding, PerCellProbability):
            cfg["seeding"] = "per_cell_probability"
            cfg["seed_probability"] = self.seeding.p
        cfg.update(
            seed=self.seed,
            accumulation=self.accumulation,
            clamp=self.clamp,
            sweep=self.sweep,
            workers=self.workers,
            log_every=self.log_every,
            snap_every=self.snap_every,
            save_snapshots=self.save_snapshots,
            save_states=self.save_states,
            mid_state_step=self.mid_state_step,
            resume_from=self.resume_from,
            cmap=self.cmap,
            verbose=self.verbose,
        )
        return cfg


def load_config(path: str) -> Dict[str, Any]:
    """Read a cfg dict from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        cfg = json.load(f)
    if not isinstance(cfg, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(cfg).__name__}")
    return cfg
