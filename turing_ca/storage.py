"""
storage.py

Run outputs on disk:

  <outdir>/meta.json          cfg + config_hash
  <outdir>/metrics.csv        one row per logged generation
  <outdir>/state_*.npz        a, b, color, generation
"""

import hashlib
import json
import os
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from turing_ca.grid import Grid


# -------------------------
# JSON helpers
# -------------------------

def _json_sanitize(o: Any):
    if isinstance(o, (np.integer,)):
        return int(o)
    if isinstance(o, (np.floating,)):
        return float(o)
    if isinstance(o, (np.bool_,)):
        return bool(o)
    if isinstance(o, (np.ndarray,)):
        return o.tolist()
    return str(o)


def save_json(path: str, obj: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, sort_keys=True, default=_json_sanitize)


def load_json(path: str) -> Optional[dict]:
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def config_hash(cfg: Dict[str, Any]) -> str:
    """Deterministic short hash of a config, used for run directory names."""
    s = json.dumps(cfg, sort_keys=True, default=_json_sanitize)
    return hashlib.sha1(s.encode("utf-8")).hexdigest()[:10]


def write_meta(outdir: str, cfg: Dict[str, Any], **extra: Any) -> str:
    meta = dict(cfg)
    meta["config_hash"] = config_hash(cfg)
    meta.update(extra)
    path = os.path.join(outdir, "meta.json")
    save_json(path, meta)
    return path


# -------------------------
# States
# -------------------------

def save_state_npz(outdir: str, name: str, grid: Grid, color_map: np.ndarray, generation: int) -> str:
    path = os.path.join(outdir, name)
    np.savez_compressed(path, a=grid.a, b=grid.b, color=color_map, generation=np.int64(generation))
    return path


def load_state_npz(path: str) -> Tuple[Grid, np.ndarray, int]:
    """Inverse of `save_state_npz`: (grid, color_map, generation)."""
    with np.load(path) as data:
        grid = Grid(data["a"], data["b"])
        color_map = np.array(data["color"], dtype=np.float64)
        generation = int(data["generation"]) if "generation" in data.files else 0
    if color_map.shape != grid.dimensions.shape:
        raise ValueError(f"{path}: color map {color_map.shape} does not match grid {grid.dimensions.shape}")
    return grid, color_map, generation


# -------------------------
# Metrics
# -------------------------

def init_metrics(path: str, columns: List[str]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(",".join(columns) + "\n")


def append_metrics(path: str, columns: List[str], row: Dict[str, Any]) -> None:
    with open(path, "a", encoding="utf-8") as f:
        f.write(",".join(str(row[c]) for c in columns) + "\n")


def load_metrics(run_dir: str) -> Optional[pd.DataFrame]:
    metrics_path = os.path.join(run_dir, "metrics.csv")
    if not os.path.exists(metrics_path):
        return None
    return pd.read_csv(metrics_path)
