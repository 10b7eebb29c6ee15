from __future__ import annotations

import argparse
import csv
import json
from pathlib import Path

from dvsim.eval.metrics import compute_metrics

FIELDS = [
    "run_id",
    "name",
    "seed",
    "converged_step",
    "settled_step",
    "steps_run",
    "total_changes",
    "dropped_messages",
    "active_steps",
    "hash_changes",
    "optimal",
]


def summarize_runs(runs_dir: str | Path, out_csv: str | Path) -> int:
    """Write one CSV row per ``result.json`` found under ``runs_dir``."""
    rows = []
    for result_file in sorted(Path(runs_dir).rglob("result.json")):
        with result_file.open("r", encoding="utf-8") as f:
            rows.append(compute_metrics(json.load(f)))

    out_path = Path(out_csv)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDS)
        writer.writeheader()
        writer.writerows(rows)
    return len(rows)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Summarize run results into CSV")
    parser.add_argument("--runs", required=True, help="Directory containing run folders")
    parser.add_argument("--out", required=True, help="Output CSV path")
    args = parser.parse_args()
    summarize_runs(args.runs, args.out)
