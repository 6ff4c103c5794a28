"""Turing-pattern cellular automaton (discrete Gray-Scott-style reaction-diffusion)."""

from turing_ca.color import color_field, color_of
from turing_ca.config import DEFAULT_CFG, SimulationConfig, load_config
from turing_ca.diffusion import NEIGHBOUR_OFFSETS, diffuse_cell, diffuse_field, neighbours
from turing_ca.driver import Simulation, run
from turing_ca.engine import step, transition
from turing_ca.grid import Cell, Dimensions, Grid, Position, new_color_map
from turing_ca.params import REFERENCE_PARAMETERS, Parameters
from turing_ca.reaction import react, react_cell
from turing_ca.seeding import FixedCount, PerCellProbability, initialize, seeding_from_cfg

__all__ = [
    "Cell",
    "DEFAULT_CFG",
    "Dimensions",
    "FixedCount",
    "Grid",
    "NEIGHBOUR_OFFSETS",
    "Parameters",
    "PerCellProbability",
    "Position",
    "REFERENCE_PARAMETERS",
    "Simulation",
    "SimulationConfig",
    "color_field",
    "color_of",
    "diffuse_cell",
    "diffuse_field",
    "initialize",
    "load_config",
    "neighbours",
    "new_color_map",
    "react",
    "react_cell",
    "run",
    "seeding_from_cfg",
    "step",
    "transition",
]
