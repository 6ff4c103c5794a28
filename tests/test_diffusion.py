import numpy as np
import pytest

from turing_ca.diffusion import (
    NEIGHBOUR_OFFSETS,
    diffuse_cell,
    diffuse_field,
    neighbours,
    shifted,
)
from turing_ca.grid import Cell, Dimensions, Grid, Position
from turing_ca.params import Parameters


def test_offset_table_order_and_weights():
    assert [(dr, dc) for dr, dc, _ in NEIGHBOUR_OFFSETS] == [
        (-1, -1), (-1, 0), (-1, 1), (0, 1), (1, 1), (1, 0), (1, -1), (0, -1),
    ]
    assert [w for _, _, w in NEIGHBOUR_OFFSETS] == [0.05, 0.2] * 4


def test_corner_has_three_neighbours_without_wraparound():
    found = list(neighbours(Position(0, 0), Dimensions(4, 5)))
    assert found == [
        (Position(0, 1), 0.2),   # E
        (Position(1, 1), 0.05),  # SE
        (Position(1, 0), 0.2),   # S
    ]


def test_edge_and_interior_neighbour_counts():
    dims = Dimensions(4, 5)
    assert len(list(neighbours((0, 2), dims))) == 5
    assert len(list(neighbours((3, 4), dims))) == 3
    assert len(list(neighbours((2, 2), dims))) == 8
    assert list(neighbours((0, 0), Dimensions(1, 1))) == []


def test_isolated_cell_does_not_diffuse(params):
    grid = Grid.from_cells([[(0.4, 0.7)]])
    assert diffuse_cell(params, grid, (0, 0)) == Cell(0.4, 0.7)


def test_corner_only_exchanges_with_in_bounds_neighbours(params):
    # the far corner holds mass; a wrapping stencil would pull it into (0, 0)
    grid = Grid.zeros(Dimensions(3, 3))
    grid[2, 2] = Cell(1.0, 1.0)
    assert diffuse_cell(params, grid, (0, 0)) == Cell(0.0, 0.0)


def test_sequential_applies_exchanges_to_running_value(params):
    grid = Grid.zeros(Dimensions(3, 3))
    grid[1, 1] = Cell(1.0, 1.0)
    # (0, 1): S brings 0.12 / 0.06, then SW and W outflows act on it
    cell = diffuse_cell(params, grid, (0, 1), "sequential")
    assert cell.a == pytest.approx(0.12 * (1 - 0.03) * (1 - 0.12), abs=1e-15)
    assert cell.b == pytest.approx(0.06 * (1 - 0.015) * (1 - 0.06), abs=1e-15)
    # (1, 2): W is the last neighbour visited, nothing flows out afterwards
    cell = diffuse_cell(params, grid, (1, 2), "sequential")
    assert cell.a == pytest.approx(0.12, abs=1e-15)
    assert cell.b == pytest.approx(0.06, abs=1e-15)


def test_simultaneous_uses_start_values(params):
    grid = Grid.zeros(Dimensions(3, 3))
    grid[1, 1] = Cell(1.0, 1.0)
    for pos in [(0, 1), (1, 0), (1, 2), (2, 1)]:
        cell = diffuse_cell(params, grid, pos, "simultaneous")
        assert cell.a == pytest.approx(0.12, abs=1e-15)
        assert cell.b == pytest.approx(0.06, abs=1e-15)
    for pos in [(0, 0), (0, 2), (2, 0), (2, 2)]:
        cell = diffuse_cell(params, grid, pos, "simultaneous")
        assert cell.a == pytest.approx(0.03, abs=1e-15)
        assert cell.b == pytest.approx(0.015, abs=1e-15)
    centre = diffuse_cell(params, grid, (1, 1), "simultaneous")
    assert centre.a == pytest.approx(0.4, abs=1e-12)
    assert centre.b == pytest.approx(0.7, abs=1e-12)


def test_simultaneous_conserves_mass_on_uniform_weights():
    params = Parameters(d_a=0.5, d_b=0.25, f=0.0, k=0.0, r=0.0)
    rng = np.random.default_rng(11)
    a = rng.random((8, 8))
    b = rng.random((8, 8))
    da, db = diffuse_field(params, a, b, "simultaneous")
    # pairwise exchanges are symmetric, so totals are preserved
    assert da.sum() == pytest.approx(a.sum(), rel=1e-12)
    assert db.sum() == pytest.approx(b.sum(), rel=1e-12)


def test_unknown_accumulation_is_rejected(params, centre_grid):
    with pytest.raises(ValueError):
        diffuse_cell(params, centre_grid, (1, 1), "lagged")
    with pytest.raises(ValueError):
        diffuse_field(params, centre_grid.a, centre_grid.b, "lagged")


def test_shifted_view_without_wraparound():
    field = np.arange(12, dtype=float).reshape(3, 4)
    values, mask = shifted(field, -1, 1)  # NE neighbour
    assert not mask[0].any()
    assert not mask[:, 3].any()
    assert values[1, 0] == field[0, 1]
    assert values[2, 2] == field[1, 3]
    assert values[0, 0] == 0.0


@pytest.mark.parametrize("mode", ["sequential", "simultaneous"])
def test_field_is_bit_identical_to_cellwise(params, noisy_grid, mode):
    da, db = diffuse_field(params, noisy_grid.a, noisy_grid.b, mode)
    for pos in noisy_grid.positions():
        cell = diffuse_cell(params, noisy_grid, pos, mode)
        assert da[pos] == cell.a
        assert db[pos] == cell.b


def test_field_does_not_touch_its_inputs(params, noisy_grid):
    a, b = noisy_grid.a.copy(), noisy_grid.b.copy()
    diffuse_field(params, noisy_grid.a, noisy_grid.b)
    np.testing.assert_array_equal(noisy_grid.a, a)
    np.testing.assert_array_equal(noisy_grid.b, b)
