from __future__ import annotations

import argparse
import io
import json
import logging
from pathlib import Path

import pytest

from dvsim.cli.main import main, play
from dvsim.cli.validate import validate_config


def _write(path: Path, text: str) -> Path:
    path.write_text(text.strip() + "\n", encoding="utf-8")
    return path


def test_validate_accepts_reference_config(tmp_path: Path, capsys) -> None:
    cfg = _write(tmp_path / "ok.yaml", "topology:\n  type: default\n")

    assert main(["validate", "--config", str(cfg)]) == 0
    assert json.loads(capsys.readouterr().out) == {"ok": True}


def test_validate_reports_errors(tmp_path: Path, capsys) -> None:
    cfg = _write(
        tmp_path / "bad.yaml",
        """
topology:
  type: torus
router:
  mailbox_capacity: 0
""",
    )

    assert main(["validate", "--config", str(cfg)]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is False
    assert any("topology.type" in e for e in out["errors"])
    assert any("mailbox_capacity" in e for e in out["errors"])


def test_validate_config_surfaces_topology_errors() -> None:
    errors = validate_config({"topology": {"type": "edges", "nodes": ["A", "B"], "links": [["A", "A", 1]]}})
    assert errors and "itself" in errors[0]


@pytest.mark.parametrize(
    "cfg, fragment",
    [
        ({"topology": {"type": "ring", "n_nodes": "many"}}, "n_nodes"),
        ({"topology": {"type": "star", "n_nodes": 4, "center": [1]}}, "center"),
        ({"topology": {"type": "default", "cost_sequence": 5}}, "cost_sequence"),
        ({"topology": {"type": "default", "costs": ["A-B"]}}, "costs"),
        ({"topology": {"type": "line", "n_nodes": 3, "names": 7}}, "names"),
        ({"router": 5}, "router"),
        ({"engine": "fast"}, "engine"),
        ({"topology": {"type": "edges", "nodes": ["A", "B"], "links": [5]}}, "link"),
        ({"topology": {"type": "edges", "nodes": "AB", "links": []}}, "nodes"),
    ],
)
def test_validate_config_reports_malformed_values_instead_of_raising(cfg, fragment) -> None:
    errors = validate_config(cfg)
    assert errors
    assert any(fragment in e for e in errors)


def test_validate_subcommand_reports_malformed_sections(tmp_path: Path, capsys) -> None:
    cfg = _write(
        tmp_path / "bad.yaml",
        """
topology:
  type: edges
  nodes: [A, B]
  links: [5]
router: 5
""",
    )

    assert main(["validate", "--config", str(cfg)]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is False
    assert any("router" in e for e in out["errors"])


def test_run_prints_json_report(tmp_path: Path, capsys) -> None:
    cfg = _write(
        tmp_path / "run.yaml",
        f"""
name: cli_run
seed: 3
output_dir: {tmp_path / "runs"}
topology:
  type: edges
  nodes: [A, B, C]
  links:
    - [A, B, 1]
    - [B, C, 1]
    - [A, C, 5]
""",
    )

    assert main(["run", "--config", str(cfg), "--seed", "4"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["seed"] == 4
    assert report["converged_step"] is not None
    assert report["optimal"] is True
    route_a_to_c = report["route_tables"]["0"][2]
    assert route_a_to_c == {"destination": 2, "next_hop": 1, "cost": 2}


def test_run_rejects_invalid_config(tmp_path: Path, caplog, capsys) -> None:
    cfg = _write(tmp_path / "bad.yaml", "engine:\n  static_threshold: 0\n")

    with caplog.at_level(logging.ERROR, logger="dvsim.cli"):
        assert main(["run", "--config", str(cfg)]) == 2

    assert "Invalid config" in caplog.text
    assert "static_threshold" in caplog.text
    assert capsys.readouterr().out == ""


def test_play_interactive_session() -> None:
    answers = iter(["2", "two", "3", "0"])
    out = io.StringIO()
    args = argparse.Namespace(config=None, seed=1, delay=0.0, interactive=True)

    assert play(args, input_fn=lambda prompt: next(answers), stream=out) == 0

    text = out.getvalue()
    assert "not an integer: 'two'" in text
    assert "Filling the remaining link costs with 1." in text
    assert "18 costs defined." in text
    assert "9 links present." in text
    assert "C(A,B)=2 via B" in text
    assert "Done. Optimal costs found after" in text


def test_summarize_subcommand(tmp_path: Path, capsys) -> None:
    cfg = _write(tmp_path / "run.yaml", f"name: s\noutput_dir: {tmp_path / 'runs'}\n")
    main(["run", "--config", str(cfg)])
    capsys.readouterr()

    out_csv = tmp_path / "summary.csv"
    assert main(["summarize", "--runs", str(tmp_path / "runs"), "--out", str(out_csv)]) == 0
    assert json.loads(capsys.readouterr().out)["runs"] == 1
    assert out_csv.read_text(encoding="utf-8").startswith("run_id,name,seed,converged_step")
