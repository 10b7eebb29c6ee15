from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

NodeId = int
Cost = int

# Routes at or beyond this cost are unreachable; caps count-to-infinity.
INFINITY_HOPS = 5
# Quiet steps required before the run is declared converged.
STATIC_THRESHOLD = 5
MAILBOX_CAPACITY = 10
AUTO_FILL_COST = 1
MAX_COUNTDOWN = 4


@dataclass(frozen=True)
class Route:
    destination: NodeId
    next_hop: Optional[NodeId]
    cost: Cost

    @classmethod
    def unreachable(cls, destination: NodeId, infinity: Cost = INFINITY_HOPS) -> "Route":
        return cls(destination=destination, next_hop=None, cost=infinity)

    @classmethod
    def direct(cls, destination: NodeId, cost: Cost, infinity: Cost = INFINITY_HOPS) -> "Route":
        if cost >= infinity:
            return cls.unreachable(destination, infinity)
        return cls(destination=destination, next_hop=destination, cost=int(cost))

    def is_reachable(self, infinity: Cost = INFINITY_HOPS) -> bool:
        return self.next_hop is not None and self.cost < infinity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "destination": int(self.destination),
            "next_hop": None if self.next_hop is None else int(self.next_hop),
            "cost": int(self.cost),
        }


@dataclass(frozen=True)
class Advertisement:
    """Value snapshot of a sender's whole table, one route per destination."""

    sender: NodeId
    routes: Tuple[Route, ...]
    step: int = 0


RouteTables = Dict[NodeId, List[Route]]


@dataclass(frozen=True)
class StepReport:
    step: int
    delta: int
    router_deltas: Dict[NodeId, int]
    senders: Tuple[NodeId, ...]
    drops: int
    dropped_total: int
    tables: RouteTables
    table_hash: str
    converged: bool = False


@dataclass
class RunResult:
    converged_step: Optional[int]
    settled_step: Optional[int]
    steps_run: int
    dropped_messages: int
    total_changes: int
    route_tables: RouteTables
    step_deltas: List[int] = field(default_factory=list)
    route_hashes: List[str] = field(default_factory=list)
    optimal: bool = False
