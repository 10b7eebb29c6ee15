from __future__ import annotations

from typing import Dict, List


def compute_metrics(run: Dict) -> Dict:
    deltas = run.get("step_deltas", [])
    return {
        "run_id": run.get("run_id"),
        "name": run.get("name"),
        "seed": run.get("seed"),
        "converged_step": run.get("converged_step"),
        "settled_step": run.get("settled_step"),
        "steps_run": run.get("steps_run", len(deltas)),
        "total_changes": run.get("total_changes", sum(deltas)),
        "dropped_messages": run.get("dropped_messages", 0),
        "active_steps": sum(1 for d in deltas if d > 0),
        "hash_changes": _count_hash_changes(run.get("route_hashes", [])),
        "optimal": run.get("optimal"),
    }


def _count_hash_changes(hashes: List[str]) -> int:
    return sum(1 for prev, cur in zip(hashes, hashes[1:]) if cur != prev)
