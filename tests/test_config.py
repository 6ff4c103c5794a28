import json

import pytest

from turing_ca.config import DEFAULT_CFG, SimulationConfig, load_config
from turing_ca.grid import Dimensions
from turing_ca.params import REFERENCE_PARAMETERS
from turing_ca.seeding import FixedCount, PerCellProbability


def test_defaults_are_the_reference_run():
    config = SimulationConfig.from_cfg({})
    assert config.dimensions == Dimensions(600, 600)
    assert config.steps == 700
    assert config.parameters == REFERENCE_PARAMETERS
    assert config.seeding == FixedCount(3)
    assert config.accumulation == "sequential"
    assert config.clamp is False
    assert config.mid_state_step == 350


def test_round_trip_through_flat_cfg():
    cfg = {
        "rows": 40, "cols": 30, "steps": 12, "f": 0.05, "k": 0.07,
        "seeding": "per_cell_probability", "seed_probability": 0.02,
        "seed": None, "accumulation": "simultaneous", "clamp": True,
        "workers": 2, "log_every": 3, "snap_every": 4, "save_snapshots": True,
    }
    config = SimulationConfig.from_cfg(cfg)
    assert config.seeding == PerCellProbability(0.02)
    assert config.seed is None
    again = SimulationConfig.from_cfg(config.to_cfg())
    assert again == config
    assert set(DEFAULT_CFG) - {"seed_count"} <= set(config.to_cfg())


@pytest.mark.parametrize("bad", [
    {"rows": 0},
    {"cols": -3},
    {"steps": -1},
    {"d_a": 1.2},
    {"r": -0.5},
    {"accumulation": "lagged"},
    {"sweep": "gpu"},
    {"workers": 0},
    {"log_every": 0},
    {"snap_every": -5},
    {"seeding": "fixed_count", "seed_count": -2},
    {"seeding": "per_cell_probability", "seed_probability": 2.0},
])
def test_bad_configuration_rejected_up_front(bad):
    with pytest.raises(ValueError):
        SimulationConfig.from_cfg(bad)


def test_load_config(tmp_path):
    path = tmp_path / "run.json"
    path.write_text(json.dumps({"rows": 5, "cols": 6, "steps": 2}))
    cfg = load_config(str(path))
    assert SimulationConfig.from_cfg(cfg).dimensions == Dimensions(5, 6)

    path.write_text("[1, 2, 3]")
    with pytest.raises(ValueError):
        load_config(str(path))
