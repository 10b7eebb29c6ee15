from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Optional

from dvsim.backends.base import Backend
from dvsim.core.clock import NullClock, SleepClock, StepClock
from dvsim.core.engine_tick import SimulationDriver
from dvsim.core.logging import JsonlLogger
from dvsim.core.topology import Topology
from dvsim.core.types import RouteTables, StepReport
from dvsim.runtime.config import SimConfig, sim_config_from_dict
from dvsim.utils.io import dump_json, ensure_dir, now_tag


def tables_payload(tables: RouteTables) -> Dict[str, Any]:
    return {str(node): [r.to_dict() for r in routes] for node, routes in sorted(tables.items())}


def build_driver(
    cfg: SimConfig,
    topology: Optional[Topology] = None,
    clock: Optional[StepClock] = None,
    logger: Optional[JsonlLogger] = None,
    on_step: Optional[Callable[[StepReport], None]] = None,
) -> SimulationDriver:
    topology = topology or Topology.from_config(cfg.topology)
    if clock is None:
        clock = SleepClock(cfg.engine.step_delay) if cfg.engine.step_delay > 0 else NullClock()
    return SimulationDriver(
        topology=topology,
        seed=cfg.seed,
        infinity_hops=cfg.router.infinity_hops,
        mailbox_capacity=cfg.router.mailbox_capacity,
        max_countdown=cfg.router.max_countdown,
        static_threshold=cfg.engine.static_threshold,
        clock=clock,
        logger=logger,
        workers=cfg.engine.workers,
        on_step=on_step,
    )


class EmuBackend(Backend):
    """Runs the in-memory simulation and writes its artifacts to a run folder."""

    def run(self, config: Dict[str, Any]) -> Dict[str, Any]:
        cfg = sim_config_from_dict(config)
        topology = Topology.from_config(cfg.topology)

        run_id = f"{cfg.name}_{now_tag()}"
        run_dir = ensure_dir(Path(cfg.output_dir) / run_id)
        logger = JsonlLogger(run_dir / "events.jsonl")

        driver = build_driver(cfg, topology=topology, clock=NullClock(), logger=logger)
        try:
            result = driver.run(max_steps=cfg.engine.max_steps)
        finally:
            driver.close()

        result_payload = {
            "run_id": run_id,
            "name": cfg.name,
            "seed": cfg.seed,
            "converged_step": result.converged_step,
            "settled_step": result.settled_step,
            "steps_run": result.steps_run,
            "dropped_messages": result.dropped_messages,
            "total_changes": result.total_changes,
            "step_deltas": result.step_deltas,
            "route_hashes": result.route_hashes,
            "route_tables": tables_payload(result.route_tables),
            "optimal": result.optimal,
            "node_names": {str(n): name for n, name in topology.names.items()},
            "topology_edges": [e.__dict__ for e in topology.edge_list()],
        }
        dump_json(run_dir / "result.json", result_payload)
        dump_json(run_dir / "config.effective.json", dict(config))
        return result_payload
