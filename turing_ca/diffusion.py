"""
diffusion.py

Diffusion over the 8-cell Moore neighbourhood.

Each in-bounds neighbour exchanges a share of A and B with the cell, scaled
by the substance's diffusion rate and an angular weight: 0.2 for orthogonal
neighbours, 0.05 for diagonal ones. Cells on the border simply have fewer
neighbours (no wraparound, no reflection).

Two accumulation policies are available:

  sequential    neighbours are visited NW, N, NE, E, SE, S, SW, W and each
                exchange is applied to the running value of the cell:
                    v = v - rate * v
                    v = v + rate * neighbour
                The result depends on the visiting order. This is the
                reference behaviour.

  simultaneous  every exchange is taken against the cell's value at the
                start of the step:
                    v = v0 + sum(rate * (neighbour - v0))

In both cases neighbour values are always read from the previous
generation. `diffuse_cell` and `diffuse_field` use the same arithmetic, so a
whole-array sweep is bit-identical to a cell-by-cell sweep.
"""

from typing import Iterator, Tuple

import numpy as np

from turing_ca.grid import Cell, Dimensions, Grid, Position
from turing_ca.params import Parameters

ORTHOGONAL_WEIGHT = 0.2
DIAGONAL_WEIGHT = 0.05

# (d_row, d_col, weight), in visiting order.
NEIGHBOUR_OFFSETS: Tuple[Tuple[int, int, float], ...] = (
    (-1, -1, DIAGONAL_WEIGHT),    # NW
    (-1, 0, ORTHOGONAL_WEIGHT),   # N
    (-1, 1, DIAGONAL_WEIGHT),     # NE
    (0, 1, ORTHOGONAL_WEIGHT),    # E
    (1, 1, DIAGONAL_WEIGHT),      # SE
    (1, 0, ORTHOGONAL_WEIGHT),    # S
    (1, -1, DIAGONAL_WEIGHT),     # SW
    (0, -1, ORTHOGONAL_WEIGHT),   # W
)

ACCUMULATION_MODES = ("sequential", "simultaneous")


def check_accumulation(mode: str) -> str:
    mode = str(mode).lower()
    if mode not in ACCUMULATION_MODES:
        raise ValueError(f"Unknown accumulation={mode!r} (expected 'sequential' or 'simultaneous')")
    return mode


def _exchange(value, neighbour, rate):
    # outflow on the running value, then inflow from the frozen neighbour
    value = value - rate * value
    return value + rate * neighbour


def _exchange_frozen(value, neighbour, start, rate):
    return value + rate * (neighbour - start)


def neighbours(position, dimensions: Dimensions) -> Iterator[Tuple[Position, float]]:
    """In-bounds neighbours of `position` with their angular weights, in visiting order."""
    row, col = position
    for dr, dc, weight in NEIGHBOUR_OFFSETS:
        q = Position(row + dr, col + dc)
        if dimensions.contains(q):
            yield q, weight


def diffuse_cell(
    parameters: Parameters,
    grid: Grid,
    position,
    accumulation: str = "sequential",
) -> Cell:
    """Diffused state of the cell at `position`; `grid` is only read."""
    mode = check_accumulation(accumulation)
    start = grid[position]
    a, b = start
    for q, weight in neighbours(position, grid.dimensions):
        nbr = grid[q]
        rate_a = weight * parameters.d_a
        rate_b = weight * parameters.d_b
        if mode == "sequential":
            a = _exchange(a, nbr.a, rate_a)
            b = _exchange(b, nbr.b, rate_b)
        else:
            a = _exchange_frozen(a, nbr.a, start.a, rate_a)
            b = _exchange_frozen(b, nbr.b, start.b, rate_b)
    return Cell(a, b)


# ------------------------------------------------------------
# Whole-array form
# ------------------------------------------------------------

def _shift_slices(n: int, d: int) -> Tuple[slice, slice]:
    """(destination, source) slices so that out[i] = field[i + d] where in bounds."""
    return slice(max(-d, 0), n - max(d, 0)), slice(max(d, 0), n - max(-d, 0))


def shifted(field: np.ndarray, dr: int, dc: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Neighbour view of a 2D field without wraparound.

    Returns (values, mask): values[r, c] = field[r + dr, c + dc] where that
    position exists (mask True), 0 elsewhere.
    """
    rows, cols = field.shape
    dst_r, src_r = _shift_slices(rows, dr)
    dst_c, src_c = _shift_slices(cols, dc)
    values = np.zeros_like(field)
    mask = np.zeros(field.shape, dtype=bool)
    values[dst_r, dst_c] = field[src_r, src_c]
    mask[dst_r, dst_c] = True
    return values, mask


def diffuse_field(
    parameters: Parameters,
    a: np.ndarray,
    b: np.ndarray,
    accumulation: str = "sequential",
) -> Tuple[np.ndarray, np.ndarray]:
    """Diffuse every cell of the (a, b) fields at once; inputs are not modified."""
    mode = check_accumulation(accumulation)
    da = a.astype(np.float64, copy=True)
    db = b.astype(np.float64, copy=True)
    for dr, dc, weight in NEIGHBOUR_OFFSETS:
        na, mask = shifted(a, dr, dc)
        nb, _ = shifted(b, dr, dc)
        rate_a = weight * parameters.d_a
        rate_b = weight * parameters.d_b
        if mode == "sequential":
            da = np.where(mask, _exchange(da, na, rate_a), da)
            db = np.where(mask, _exchange(db, nb, rate_b), db)
        else:
            da = np.where(mask, _exchange_frozen(da, na, a, rate_a), da)
            db = np.where(mask, _exchange_frozen(db, nb, b, rate_b), db)
    return da, db
