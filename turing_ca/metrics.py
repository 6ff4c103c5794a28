"""
metrics.py

Scalar summaries of a generation, logged to metrics.csv.
"""

from typing import Dict

import numpy as np

from turing_ca.grid import Grid

METRIC_COLUMNS = [
    "generation",
    "mean_a",
    "mean_b",
    "min_a",
    "max_a",
    "min_b",
    "max_b",
    "mean_color",
    "color_entropy",
    "activated_fraction",
    "out_of_range",
]


def entropy(field: np.ndarray, bins: int = 64) -> float:
    """Shannon entropy of the histogram of a [0, 1] field."""
    hist, _ = np.histogram(np.clip(field, 0.0, 1.0).ravel(), bins=bins, range=(0.0, 1.0))
    total = hist.sum()
    if total == 0:
        return 0.0
    p = hist[hist > 0] / total
    return float(-np.sum(p * np.log(p)))


def activated_fraction(color_map: np.ndarray, threshold: float = 0.5) -> float:
    """Share of cells where B makes up at least `threshold` of the mass."""
    return float(np.mean(color_map >= threshold))


def out_of_range(grid: Grid) -> int:
    """Number of concentrations outside [0, 1] (they are not clamped by default)."""
    bad = (grid.a < 0.0) | (grid.a > 1.0) | (grid.b < 0.0) | (grid.b > 1.0)
    return int(np.count_nonzero(bad))


def summarize(generation: int, grid: Grid, color_map: np.ndarray) -> Dict[str, float]:
    return {
        "generation": int(generation),
        "mean_a": float(np.mean(grid.a)),
        "mean_b": float(np.mean(grid.b)),
        "min_a": float(np.min(grid.a)),
        "max_a": float(np.max(grid.a)),
        "min_b": float(np.min(grid.b)),
        "max_b": float(np.max(grid.b)),
        "mean_color": float(np.mean(color_map)),
        "color_entropy": entropy(color_map),
        "activated_fraction": activated_fraction(color_map),
        "out_of_range": out_of_range(grid),
    }
