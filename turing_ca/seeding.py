"""
seeding.py

Initial conditions: a zero universe with a few activated cells (a = b = 1).

Two seeding strategies are available:

  FixedCount(n)            exactly n distinct cells, picked by shuffling the
                           full row-major position list and taking the first n
  PerCellProbability(p)    every cell activated independently with probability p

Randomness always comes from the generator passed in, so runs are
reproducible from a seed.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from turing_ca.color import color_of
from turing_ca.grid import Cell, Dimensions, Grid, Position, new_color_map

ACTIVATED = Cell(1.0, 1.0)

SEEDING_MODES = ("fixed_count", "per_cell_probability")


@dataclass(frozen=True)
class FixedCount:
    n: int = 3

    def __post_init__(self):
        if int(self.n) < 0:
            raise ValueError(f"seed count must be >= 0, got {self.n}")
        object.__setattr__(self, "n", int(self.n))

    def select(self, dimensions: Dimensions, rng: np.random.Generator) -> List[Position]:
        if self.n > dimensions.size:
            raise ValueError(
                f"cannot activate {self.n} cells on a {dimensions.rows}x{dimensions.cols} grid"
            )
        positions = list(dimensions.positions())
        order = np.arange(len(positions))
        rng.shuffle(order)
        return [positions[i] for i in order[: self.n]]


@dataclass(frozen=True)
class PerCellProbability:
    p: float = 0.005

    def __post_init__(self):
        if not 0.0 <= float(self.p) <= 1.0:
            raise ValueError(f"seed probability must be in [0, 1], got {self.p}")
        object.__setattr__(self, "p", float(self.p))

    def select(self, dimensions: Dimensions, rng: np.random.Generator) -> List[Position]:
        hits = rng.random(dimensions.shape) < self.p
        return [Position(int(r), int(c)) for r, c in np.argwhere(hits)]


Seeding = Union[FixedCount, PerCellProbability]


def seeding_from_cfg(cfg: Dict[str, Any]) -> Seeding:
    mode = str(cfg.get("seeding", "fixed_count")).lower()
    if mode == "fixed_count":
        return FixedCount(int(cfg.get("seed_count", 3)))
    if mode == "per_cell_probability":
        return PerCellProbability(float(cfg.get("seed_probability", 0.005)))
    raise ValueError(f"Unknown seeding={mode!r} (expected 'fixed_count' or 'per_cell_probability')")


def make_rng(rng: Union[None, int, np.random.Generator]) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def initialize(
    dimensions: Dimensions,
    seeding: Optional[Seeding] = None,
    rng: Union[None, int, np.random.Generator] = None,
) -> Tuple[Grid, np.ndarray]:
    """
    Zero universe plus activated cells chosen by `seeding`.

    Parameters
    ----------
    dimensions : Dimensions
        Grid extents.
    seeding : FixedCount or PerCellProbability
        Defaults to FixedCount(3).
    rng : numpy.random.Generator or int, optional
        Random source; an int is used as a seed for `np.random.default_rng`.

    Returns
    -------
    (Grid, color_map)
    """
    if seeding is None:
        seeding = FixedCount()
    rng = make_rng(rng)

    universe = Grid.zeros(dimensions)
    color_map = new_color_map(dimensions)
    for pos in seeding.select(dimensions, rng):
        universe[pos] = ACTIVATED
        color_map[pos] = color_of(ACTIVATED)
    return universe, color_map
