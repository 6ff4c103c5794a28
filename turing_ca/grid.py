"""
grid.py

Cell state, positions and the grid ("universe") the automaton lives on.

A grid stores the two concentrations as same-shaped float64 arrays `a` and
`b` of shape (rows, cols). Cells are read and written through `Position`
lookups, which are bounds checked. The colour map is a plain float64 array
with the grid's shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, NamedTuple

import numpy as np

from turing_ca.color import color_field


class Cell(NamedTuple):
    """Pair of concentrations (A, B), nominally in [0, 1]."""

    a: float
    b: float


class Position(NamedTuple):
    row: int
    col: int


@dataclass(frozen=True)
class Dimensions:
    """Fixed (rows, cols) extents of a grid."""

    rows: int
    cols: int

    def __post_init__(self):
        for name in ("rows", "cols"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
                raise ValueError(f"{name} must be an integer, got {v!r}")
            if v <= 0:
                raise ValueError(f"{name} must be positive, got {v}")
        object.__setattr__(self, "rows", int(self.rows))
        object.__setattr__(self, "cols", int(self.cols))

    @property
    def shape(self):
        return (self.rows, self.cols)

    @property
    def size(self) -> int:
        return self.rows * self.cols

    def contains(self, position) -> bool:
        row, col = position
        return 0 <= row < self.rows and 0 <= col < self.cols

    def positions(self) -> Iterator[Position]:
        """Every position, row-major."""
        for r in range(self.rows):
            for c in range(self.cols):
                yield Position(r, c)


def new_color_map(dimensions: Dimensions) -> np.ndarray:
    return np.zeros(dimensions.shape, dtype=np.float64)


class Grid:
    """
    Fully populated rows x cols container of cells.

    Grids are treated as values: the step engine reads one grid and builds
    a new one. Writing through `grid[pos] = cell` is meant for building an
    initial state, not for evolving one.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, a: np.ndarray, b: np.ndarray):
        a = np.array(a, dtype=np.float64)
        b = np.array(b, dtype=np.float64)
        if a.ndim != 2 or b.ndim != 2:
            raise ValueError(f"concentration fields must be 2D, got {a.shape} and {b.shape}")
        if a.shape != b.shape:
            raise ValueError(f"concentration fields differ in shape: {a.shape} vs {b.shape}")
        if a.size == 0:
            raise ValueError("grid must hold at least one cell")
        self.a = a
        self.b = b
        self.dimensions = Dimensions(*a.shape)

    @classmethod
    def zeros(cls, dimensions: Dimensions) -> "Grid":
        return cls(np.zeros(dimensions.shape), np.zeros(dimensions.shape))

    @classmethod
    def from_cells(cls, rows) -> "Grid":
        """Build a grid from nested lists of (a, b) pairs."""
        arr = np.array(rows, dtype=np.float64)
        if arr.ndim != 3 or arr.shape[-1] != 2:
            raise ValueError("expected a rows x cols x 2 nested sequence of (a, b) pairs")
        return cls(arr[..., 0], arr[..., 1])

    def _check(self, position) -> Position:
        row, col = position
        if not self.dimensions.contains((row, col)):
            raise IndexError(
                f"position ({row}, {col}) outside grid of {self.dimensions.rows}x{self.dimensions.cols}"
            )
        return Position(int(row), int(col))

    def __getitem__(self, position) -> Cell:
        r, c = self._check(position)
        return Cell(float(self.a[r, c]), float(self.b[r, c]))

    def __setitem__(self, position, cell) -> None:
        r, c = self._check(position)
        a, b = cell
        self.a[r, c] = a
        self.b[r, c] = b

    def __eq__(self, other):
        if not isinstance(other, Grid):
            return NotImplemented
        return np.array_equal(self.a, other.a) and np.array_equal(self.b, other.b)

    def __repr__(self):
        return f"Grid({self.dimensions.rows}x{self.dimensions.cols})"

    def positions(self) -> Iterator[Position]:
        return self.dimensions.positions()

    def copy(self) -> "Grid":
        return Grid(self.a.copy(), self.b.copy())

    def colors(self) -> np.ndarray:
        return color_field(self.a, self.b)
