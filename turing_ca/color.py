"""Colour reading of a cell: the share of B in the total concentration."""

import numpy as np


def color_of(cell) -> float:
    a, b = cell
    if a + b <= 0.0:
        return 0.0
    return b / (a + b)


def color_field(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Array form of `color_of`, element for element identical."""
    total = a + b
    out = np.zeros(np.shape(total), dtype=np.float64)
    np.divide(b, total, out=out, where=total > 0.0)
    return out
