from __future__ import annotations

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional, TypeVar

from dvsim.core.clock import NullClock, StepClock
from dvsim.core.convergence import ConvergenceDetector, hash_tables
from dvsim.core.errors import ConfigurationError
from dvsim.core.logging import JsonlLogger
from dvsim.core.reference import tables_match_reference
from dvsim.core.router import Router
from dvsim.core.topology import Topology
from dvsim.core.types import (
    INFINITY_HOPS,
    MAILBOX_CAPACITY,
    MAX_COUNTDOWN,
    STATIC_THRESHOLD,
    Cost,
    NodeId,
    RouteTables,
    RunResult,
    StepReport,
)

log = logging.getLogger("dvsim.engine")

T = TypeVar("T")


class DriverState(str, Enum):
    CONFIGURING = "configuring"
    RUNNING = "running"
    CONVERGED = "converged"


def router_seed(seed: int, node: NodeId) -> int:
    return int(seed) * 1_000_003 + int(node)


class SimulationDriver:
    """Advances all routers in lock-step until their tables stop changing.

    Every step is a send phase for all routers followed by a receive phase
    for all routers; no receive starts before every send of the step is done.
    With ``workers > 0`` each phase is fanned out over a thread pool and the
    phase ends when every router call has returned.
    """

    def __init__(
        self,
        topology: Topology,
        seed: int = 0,
        infinity_hops: Cost = INFINITY_HOPS,
        mailbox_capacity: int = MAILBOX_CAPACITY,
        max_countdown: int = MAX_COUNTDOWN,
        static_threshold: int = STATIC_THRESHOLD,
        clock: Optional[StepClock] = None,
        logger: Optional[JsonlLogger] = None,
        workers: int = 0,
        initial_countdowns: Optional[Mapping[NodeId, int]] = None,
        on_step: Optional[Callable[[StepReport], None]] = None,
    ) -> None:
        if int(workers) < 0:
            raise ConfigurationError(f"workers must be >= 0, got {workers}")
        self.state = DriverState.CONFIGURING
        self.topology = topology
        self.seed = int(seed)
        self.infinity_hops = int(infinity_hops)
        self.clock = clock or NullClock()
        self.logger = logger or JsonlLogger(path=None)
        self.on_step = on_step
        self.detector = ConvergenceDetector(static_threshold)

        countdowns = dict(initial_countdowns or {})
        self.routers: Dict[NodeId, Router] = {
            node: Router(
                node_id=node,
                topology=topology,
                mailbox_capacity=mailbox_capacity,
                infinity_hops=infinity_hops,
                max_countdown=max_countdown,
                rng=random.Random(router_seed(self.seed, node)),
                countdown=countdowns.get(node),
            )
            for node in topology.nodes()
        }
        self.mailboxes = {node: r.mailbox for node, r in self.routers.items()}
        self._order: List[Router] = [self.routers[n] for n in sorted(self.routers)]
        self._executor = ThreadPoolExecutor(max_workers=int(workers)) if int(workers) > 0 else None

        self.current_step = 0
        self.dropped_messages = 0
        self.total_changes = 0
        self.step_deltas: List[int] = []
        self.route_hashes: List[str] = []

    @property
    def converged_step(self) -> Optional[int]:
        return self.detector.converged_step

    @property
    def static_threshold(self) -> int:
        return self.detector.threshold

    @property
    def route_tables(self) -> RouteTables:
        return {n: r.table_snapshot() for n, r in self.routers.items()}

    def _run_phase(self, fn: Callable[[Router], T]) -> List[T]:
        if self._executor is None:
            return [fn(r) for r in self._order]
        return list(self._executor.map(fn, self._order))

    def step(self) -> StepReport:
        if self.state is DriverState.CONVERGED:
            raise RuntimeError(f"simulation already converged at step {self.converged_step}")
        if self.state is DriverState.CONFIGURING:
            self.state = DriverState.RUNNING
            log.info(
                "simulation start: nodes=%s links=%s seed=%s threshold=%s",
                len(self.topology),
                len(self.topology.edge_list()),
                self.seed,
                self.static_threshold,
            )
            self.logger.log(
                "run_start",
                nodes=self.topology.nodes(),
                names=self.topology.names,
                seed=self.seed,
                countdowns={n: r.countdown for n, r in self.routers.items()},
            )

        step = self.current_step
        drops = sum(self._run_phase(lambda r: r.send(step, self.mailboxes)))
        router_deltas = dict(zip(sorted(self.routers), self._run_phase(lambda r: r.receive())))
        delta = sum(router_deltas.values())

        self.dropped_messages += drops
        self.total_changes += delta
        self.step_deltas.append(delta)
        tables = self.route_tables
        table_hash = hash_tables(tables)
        self.route_hashes.append(table_hash)
        converged = self.detector.observe(step, delta)

        report = StepReport(
            step=step,
            delta=delta,
            router_deltas=router_deltas,
            senders=tuple(n for n, r in sorted(self.routers.items()) if r.last_sent_step == step),
            drops=drops,
            dropped_total=self.dropped_messages,
            tables=tables,
            table_hash=table_hash,
            converged=converged,
        )
        log.debug("step %s: delta=%s drops=%s senders=%s", step, delta, drops, list(report.senders))
        self.logger.log(
            "step",
            step=step,
            delta=delta,
            drops=drops,
            dropped_total=self.dropped_messages,
            senders=list(report.senders),
            table_hash=table_hash,
        )
        if self.on_step is not None:
            self.on_step(report)

        if converged:
            self.state = DriverState.CONVERGED
            log.info(
                "converged at step %s (last change at step %s, drops=%s)",
                step,
                self.detector.last_change_step,
                self.dropped_messages,
            )
            self.logger.log(
                "converged",
                step=step,
                last_change_step=self.detector.last_change_step,
                dropped_total=self.dropped_messages,
            )
        else:
            self.current_step += 1
            self.clock.wait()
        return report

    def run(self, max_steps: Optional[int] = None) -> RunResult:
        """Step until converged, or until ``max_steps`` steps have run in total.

        Convergence releases the thread pool and the logger. A run cut short by
        ``max_steps`` keeps both open so a later ``run()`` carries on logging from
        the same step; call ``close()`` when giving up on it instead.
        """
        try:
            while self.state is not DriverState.CONVERGED:
                if max_steps is not None and len(self.step_deltas) >= max_steps:
                    log.warning("no convergence after %s steps", max_steps)
                    self.logger.log("max_steps_reached", steps=max_steps)
                    break
                self.step()
        except BaseException:
            self.close()
            raise
        if self.state is DriverState.CONVERGED:
            self.close()
        return self.result()

    def result(self) -> RunResult:
        tables = self.route_tables
        converged = self.converged_step
        return RunResult(
            converged_step=converged,
            settled_step=None if converged is None else converged - self.static_threshold,
            steps_run=len(self.step_deltas),
            dropped_messages=self.dropped_messages,
            total_changes=self.total_changes,
            route_tables=tables,
            step_deltas=list(self.step_deltas),
            route_hashes=list(self.route_hashes),
            optimal=tables_match_reference(tables, self.topology, self.infinity_hops),
        )

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self.logger.close()
