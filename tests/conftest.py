import numpy as np
import pytest

from turing_ca.grid import Cell, Dimensions, Grid
from turing_ca.params import REFERENCE_PARAMETERS


@pytest.fixture
def params():
    return REFERENCE_PARAMETERS


@pytest.fixture
def centre_grid():
    """3x3 universe with only the centre cell activated."""
    grid = Grid.zeros(Dimensions(3, 3))
    grid[1, 1] = Cell(1.0, 1.0)
    return grid


@pytest.fixture
def noisy_grid():
    rng = np.random.default_rng(7)
    return Grid(rng.random((9, 13)), rng.random((9, 13)))
