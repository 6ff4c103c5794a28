"""
reaction.py

Local kinetics applied after diffusion:

  feed of A            a += f * (1 - a0)
  death of B           b -= k * b0
  reproduction         A + 2B -> 3B at rate r * a0 * b0^2

All terms are driven by the cell's values at the start of the step (a0, b0),
not by the diffused intermediate. Nothing is clamped.
"""

from turing_ca.grid import Cell
from turing_ca.params import Parameters


def react(parameters: Parameters, a, b, a0, b0):
    """Apply the kinetics to diffused values (a, b); works on floats and numpy arrays."""
    a = a + parameters.f * (1.0 - a0)
    b = b - parameters.k * b0
    reproduction = parameters.r * a0 * b0 * b0
    a = a - reproduction
    b = b + reproduction
    return a, b


def react_cell(parameters: Parameters, diffused: Cell, original: Cell) -> Cell:
    return Cell(*react(parameters, diffused.a, diffused.b, original.a, original.b))
