import json
import os

import numpy as np
import pandas as pd
import pytest

from turing_ca.config import SimulationConfig
from turing_ca.driver import run
from turing_ca.seeding import initialize
from turing_ca.simulate import cfg_from_args, main, parse_args, run_simulation
from turing_ca.storage import load_state_npz

SMALL = {"rows": 16, "cols": 12, "steps": 6, "seed": 4, "log_every": 2, "snap_every": 3, "verbose": False}


def test_run_simulation_outputs(tmp_path):
    outdir = run_simulation({**SMALL, "save_snapshots": True}, str(tmp_path / "run"))
    files = set(os.listdir(outdir))
    assert {"meta.json", "metrics.csv", "state_initial.npz", "state_mid.npz", "state_final.npz"} <= files
    assert {"color_000000.png", "color_000003.png", "color_000006.png", "montage.png"} <= files

    meta = json.load(open(os.path.join(outdir, "meta.json")))
    assert meta["generations_completed"] == 6
    assert meta["rows"] == 16 and meta["cols"] == 12
    assert len(meta["config_hash"]) == 10

    df = pd.read_csv(os.path.join(outdir, "metrics.csv"))
    assert list(df["generation"]) == [0, 2, 4, 6]


def test_final_state_matches_direct_run(tmp_path):
    outdir = run_simulation(SMALL, str(tmp_path / "run"))
    grid, cm, gen = load_state_npz(os.path.join(outdir, "state_final.npz"))
    assert gen == 6

    config = SimulationConfig.from_cfg(SMALL)
    start, start_cm = initialize(config.dimensions, config.seeding, config.seed)
    direct = run(6, config.parameters, config.dimensions, start, start_cm)
    assert grid == direct
    np.testing.assert_array_equal(cm, start_cm)

    _, _, mid_gen = load_state_npz(os.path.join(outdir, "state_mid.npz"))
    assert mid_gen == 3


def test_resume_continues_a_run(tmp_path):
    full = run_simulation({**SMALL, "steps": 6}, str(tmp_path / "full"))
    first = run_simulation({**SMALL, "steps": 4}, str(tmp_path / "first"))
    resumed = run_simulation(
        {**SMALL, "steps": 2, "resume_from": os.path.join(first, "state_final.npz")},
        str(tmp_path / "resumed"),
    )
    g_full, _, _ = load_state_npz(os.path.join(full, "state_final.npz"))
    g_res, _, gen = load_state_npz(os.path.join(resumed, "state_final.npz"))
    assert gen == 6
    assert g_res == g_full


def test_resume_rejects_other_shapes(tmp_path):
    first = run_simulation(SMALL, str(tmp_path / "first"))
    with pytest.raises(ValueError):
        run_simulation({**SMALL, "rows": 5, "resume_from": os.path.join(first, "state_final.npz")},
                       str(tmp_path / "bad"))


def test_invalid_cfg_fails_before_any_output(tmp_path):
    with pytest.raises(ValueError):
        run_simulation({**SMALL, "d_b": 3.0}, str(tmp_path / "never"))
    assert not (tmp_path / "never").exists()


def test_cli_arguments_override_config_file(tmp_path):
    cfg_path = tmp_path / "cfg.json"
    cfg_path.write_text(json.dumps({"rows": 50, "cols": 50, "steps": 9, "f": 0.1}))
    args = parse_args(["--config", str(cfg_path), "--rows", "8", "--clamp", "--no_states", "--quiet"])
    cfg = cfg_from_args(args)
    assert cfg["rows"] == 8
    assert cfg["cols"] == 50
    assert cfg["f"] == 0.1
    assert cfg["clamp"] is True
    assert cfg["save_states"] is False
    assert cfg["verbose"] is False
    assert "d_a" not in cfg


def test_main_runs_end_to_end(tmp_path, capsys):
    outdir = main(["--rows", "6", "--cols", "7", "--steps", "3", "--seed", "1",
                   "--log_every", "1", "--outdir", str(tmp_path / "cli")])
    assert os.path.exists(os.path.join(outdir, "state_final.npz"))
    out = capsys.readouterr().out
    assert "[run] done (3 generations)" in out
