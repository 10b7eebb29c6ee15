from __future__ import annotations

import json

from dvsim.backends.emu import EmuBackend


def build_cfg(tmp_path):
    return {
        "name": "deterministic_order",
        "seed": 123,
        "topology": {"type": "default", "cost_sequence": [3, 1, 3, 2, 2, 0]},
        "router": {"infinity_hops": 8, "mailbox_capacity": 2},
        "engine": {"static_threshold": 20, "max_steps": 400},
        "output_dir": str(tmp_path),
    }


def test_backend_runs_are_deterministic(tmp_path):
    backend = EmuBackend()
    cfg = build_cfg(tmp_path)

    run1 = backend.run(cfg)
    run2 = backend.run(cfg)

    assert run1["route_hashes"] == run2["route_hashes"]
    assert run1["route_tables"] == run2["route_tables"]
    assert run1["dropped_messages"] == run2["dropped_messages"]


def test_backend_writes_run_artifacts(tmp_path):
    run = EmuBackend().run(build_cfg(tmp_path))

    run_dir = tmp_path / run["run_id"]
    result = json.loads((run_dir / "result.json").read_text(encoding="utf-8"))
    events = [json.loads(line) for line in (run_dir / "events.jsonl").read_text(encoding="utf-8").splitlines()]

    assert result["converged_step"] == run["converged_step"]
    assert result["node_names"]["0"] == "A"
    assert len(result["route_tables"]["0"]) == 6
    assert len(result["topology_edges"]) == 9
    assert events[0]["event"] == "run_start"
    assert events[-1]["event"] == "converged"
    assert (run_dir / "config.effective.json").exists()
