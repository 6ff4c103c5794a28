"""
engine.py

One generation of the automaton: diffusion followed by reaction for every
cell, read from the frozen previous grid and written into a new one.

Three equivalent sweeps are provided:

  sweep="cell"    row-major loop calling `transition` per cell
  sweep="array"   the same arithmetic on whole numpy arrays
  pool=<Pool>     the array sweep split into row ranges, one task per range;
                  each task gets its rows plus one halo row on either side
                  and returns only its own rows

All three produce bit-identical grids.
"""

from typing import List, Optional, Tuple

import numpy as np

from turing_ca.color import color_of
from turing_ca.diffusion import check_accumulation, diffuse_cell, diffuse_field
from turing_ca.grid import Cell, Dimensions, Grid
from turing_ca.params import Parameters
from turing_ca.reaction import react

SWEEP_MODES = ("array", "cell")


def check_sweep(sweep: str) -> str:
    sweep = str(sweep).lower()
    if sweep not in SWEEP_MODES:
        raise ValueError(f"Unknown sweep={sweep!r} (expected 'array' or 'cell')")
    return sweep


def _clip_unit(x: float) -> float:
    return min(max(x, 0.0), 1.0)


def transition(
    parameters: Parameters,
    grid: Grid,
    position,
    accumulation: str = "sequential",
    clamp: bool = False,
) -> Cell:
    """Next-generation state of a single cell."""
    original = grid[position]
    diffused = diffuse_cell(parameters, grid, position, accumulation)
    a, b = react(parameters, diffused.a, diffused.b, original.a, original.b)
    if clamp:
        a, b = _clip_unit(a), _clip_unit(b)
    return Cell(a, b)


def evolve_fields(
    parameters: Parameters,
    a: np.ndarray,
    b: np.ndarray,
    accumulation: str = "sequential",
    clamp: bool = False,
) -> Tuple[np.ndarray, np.ndarray]:
    """Array form of `transition` for every cell of (a, b)."""
    da, db = diffuse_field(parameters, a, b, accumulation)
    na, nb = react(parameters, da, db, a, b)
    if clamp:
        na = np.clip(na, 0.0, 1.0)
        nb = np.clip(nb, 0.0, 1.0)
    return na, nb


# ------------------------------------------------------------
# Row-range workers
# ------------------------------------------------------------

def row_ranges(rows: int, parts: int) -> List[Tuple[int, int]]:
    """Split [0, rows) into at most `parts` contiguous, non-empty ranges."""
    parts = max(1, min(int(parts), rows))
    bounds = np.linspace(0, rows, parts + 1).astype(int)
    return [(int(lo), int(hi)) for lo, hi in zip(bounds[:-1], bounds[1:]) if hi > lo]


def _evolve_slab(job):
    """
    Worker function for multiprocessing.

    job = (parameters, a_slab, b_slab, offset, n_rows, accumulation, clamp)
    where the slab holds the task's rows plus halo rows and `offset` is the
    index of the task's first row inside the slab.
    """
    parameters, a_slab, b_slab, offset, n_rows, accumulation, clamp = job
    na, nb = evolve_fields(parameters, a_slab, b_slab, accumulation, clamp)
    return na[offset:offset + n_rows], nb[offset:offset + n_rows]


def _evolve_pooled(pool, parameters, grid: Grid, accumulation, clamp, chunks) -> Grid:
    rows = grid.dimensions.rows
    jobs = []
    for r0, r1 in row_ranges(rows, chunks):
        lo, hi = max(r0 - 1, 0), min(r1 + 1, rows)
        jobs.append((parameters, grid.a[lo:hi], grid.b[lo:hi], r0 - lo, r1 - r0, accumulation, clamp))
    pieces = pool.map(_evolve_slab, jobs)
    return Grid(np.concatenate([p[0] for p in pieces]), np.concatenate([p[1] for p in pieces]))


# ------------------------------------------------------------
# Step
# ------------------------------------------------------------

def check_state(dimensions: Dimensions, grid: Grid, color_map: np.ndarray) -> None:
    if grid.dimensions != dimensions:
        raise ValueError(f"grid is {grid.dimensions.shape}, expected {dimensions.shape}")
    if np.shape(color_map) != dimensions.shape:
        raise ValueError(f"color map is {np.shape(color_map)}, expected {dimensions.shape}")


def step(
    parameters: Parameters,
    dimensions: Dimensions,
    grid: Grid,
    color_map: np.ndarray,
    *,
    accumulation: str = "sequential",
    clamp: bool = False,
    sweep: str = "array",
    pool=None,
    chunks: Optional[int] = None,
) -> Grid:
    """
    Evolve `grid` by one generation.

    Parameters
    ----------
    parameters : Parameters
        Rate constants, shared by every cell.
    dimensions : Dimensions
        Extents `grid` and `color_map` must have.
    grid : Grid
        Current generation. Only read.
    color_map : np.ndarray
        Updated in place to the colours of the returned grid, after the whole
        generation has been computed.
    accumulation : str
        'sequential' (reference) or 'simultaneous' diffusion.
    clamp : bool
        Clip concentrations to [0, 1] after the reaction.
    sweep : str
        'array' or 'cell'; ignored when `pool` is given.
    pool : multiprocessing.pool.Pool, optional
        Pool used to evolve row ranges in parallel.
    chunks : int, optional
        Number of row ranges for the pool (defaults to 4).

    Returns
    -------
    Grid
        The next generation.
    """
    mode = check_accumulation(accumulation)
    sweep = check_sweep(sweep)
    check_state(dimensions, grid, color_map)

    if pool is not None:
        evolved = _evolve_pooled(pool, parameters, grid, mode, clamp, chunks or 4)
        colors = evolved.colors()
    elif sweep == "cell":
        evolved = Grid.zeros(dimensions)
        colors = np.zeros(dimensions.shape, dtype=np.float64)
        for pos in dimensions.positions():
            cell = transition(parameters, grid, pos, mode, clamp)
            evolved[pos] = cell
            colors[pos] = color_of(cell)
    else:
        evolved = Grid(*evolve_fields(parameters, grid.a, grid.b, mode, clamp))
        colors = evolved.colors()

    color_map[...] = colors
    return evolved
