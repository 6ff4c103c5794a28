import numpy as np

from turing_ca.color import color_field, color_of
from turing_ca.grid import Cell


def test_empty_cell_is_black():
    assert color_of(Cell(0.0, 0.0)) == 0.0


def test_non_positive_total_maps_to_zero():
    assert color_of(Cell(-0.5, 0.2)) == 0.0


def test_share_of_b():
    assert color_of(Cell(1.0, 1.0)) == 0.5
    assert color_of(Cell(0.0, 0.3)) == 1.0
    assert color_of(Cell(0.3, 0.0)) == 0.0
    assert color_of(Cell(0.75, 0.25)) == 0.25


def test_color_stays_in_unit_interval_for_non_negative_cells():
    rng = np.random.default_rng(3)
    a = rng.random(500) * 3.0
    b = rng.random(500) * 3.0
    a[:20] = 0.0
    b[10:30] = 0.0
    for x, y in zip(a, b):
        assert 0.0 <= color_of((x, y)) <= 1.0


def test_field_matches_cellwise_mapping():
    rng = np.random.default_rng(4)
    a = rng.normal(0.5, 0.6, (6, 7))
    b = rng.normal(0.5, 0.6, (6, 7))
    a[0, 0] = b[0, 0] = 0.0
    field = color_field(a, b)
    expected = np.array([[color_of((a[r, c], b[r, c])) for c in range(7)] for r in range(6)])
    np.testing.assert_array_equal(field, expected)
