from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Callable, List, Optional, TextIO

from dvsim.backends.emu import build_driver
from dvsim.cli.prompt import acquire_topology
from dvsim.cli.render import DEFAULT_DIAGRAM, clear_screen, format_step_header, format_tables
from dvsim.cli.run_emu import run_emu
from dvsim.cli.validate import validate_config
from dvsim.core.clock import SleepClock
from dvsim.core.topology import Topology, TopologyBuilder
from dvsim.core.types import StepReport
from dvsim.eval.summarize import summarize_runs
from dvsim.runtime.config import load_effective_config, sim_config_from_dict

log = logging.getLogger("dvsim.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dvsim", description="Distance-vector routing simulator")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="Run a simulation to convergence and print the JSON report")
    p_run.add_argument("--config", required=True)
    p_run.add_argument("--seed", type=int, default=None)

    p_play = sub.add_parser("play", help="Animate a simulation in the terminal")
    p_play.add_argument("--config", default=None)
    p_play.add_argument("--seed", type=int, default=None)
    p_play.add_argument("--delay", type=float, default=None, help="Seconds between steps.")
    p_play.add_argument("--interactive", action="store_true", help="Type the link costs by hand.")

    p_validate = sub.add_parser("validate", help="Validate a config file")
    p_validate.add_argument("--config", required=True)

    p_sum = sub.add_parser("summarize", help="Summarize run results into CSV")
    p_sum.add_argument("--runs", required=True, help="Directory containing run folders")
    p_sum.add_argument("--out", required=True, help="Output CSV path")

    return parser


def play(
    args: argparse.Namespace,
    input_fn: Callable[[str], str] = input,
    stream: TextIO = sys.stdout,
) -> int:
    raw = load_effective_config(args.config) if args.config else {}
    if args.seed is not None:
        raw["seed"] = args.seed
    cfg = sim_config_from_dict(raw)

    def write(text: str) -> None:
        print(text, file=stream)

    write("Distance-vector routing simulator\n")
    if args.interactive:
        builder = TopologyBuilder.from_config(cfg.topology)
        if str(cfg.topology.get("type", "default")).lower() == "default":
            write(DEFAULT_DIAGRAM)
        write("Enter the transmission cost between each pair of routers:")
        topology = acquire_topology(builder, input_fn=input_fn, write=write)
    else:
        topology = Topology.from_config(cfg.topology)

    delay = cfg.engine.step_delay if args.delay is None else args.delay

    def show(report: StepReport) -> None:
        clear_screen(stream)
        write(format_step_header(report))
        write(format_tables(report.tables, topology.names, cfg.router.infinity_hops))

    driver = build_driver(cfg, topology=topology, clock=SleepClock(delay), on_step=show)
    try:
        result = driver.run(max_steps=cfg.engine.max_steps)
    finally:
        driver.close()
    if result.converged_step is None:
        write(f"No convergence after {result.steps_run} steps.")
        return 1
    write(
        f"Done. Optimal costs found after {result.settled_step} steps "
        f"(converged at step {result.converged_step}, {result.dropped_messages} advertisements dropped)."
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.cmd == "run":
            overrides = {} if args.seed is None else {"seed": args.seed}
            result = run_emu(args.config, overrides=overrides)
            print(json.dumps(result, indent=2, ensure_ascii=False, sort_keys=True))
            return 0

        if args.cmd == "play":
            return play(args)

        if args.cmd == "validate":
            cfg = load_effective_config(args.config)
            errors = validate_config(cfg)
            if errors:
                print(json.dumps({"ok": False, "errors": errors}, ensure_ascii=False, indent=2))
                return 1
            print(json.dumps({"ok": True}, ensure_ascii=False, indent=2))
            return 0

        if args.cmd == "summarize":
            count = summarize_runs(args.runs, args.out)
            print(json.dumps({"runs": count, "out": args.out}, ensure_ascii=False, indent=2))
            return 0
    except ValueError as exc:
        log.error("configuration error: %s", exc)
        return 2
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
