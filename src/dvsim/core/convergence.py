from __future__ import annotations

import hashlib
import json
from typing import Iterable, Mapping, Optional, Sequence

from dvsim.core.errors import ConfigurationError
from dvsim.core.types import STATIC_THRESHOLD, NodeId, Route


def hash_tables(route_tables: Mapping[NodeId, Sequence[Route]]) -> str:
    normalized: dict[str, dict[str, list]] = {}
    for node, routes in sorted(route_tables.items()):
        normalized[str(node)] = {
            str(r.destination): [int(r.cost), r.next_hop]
            for r in sorted(routes, key=lambda r: r.destination)
        }
    payload = json.dumps(normalized, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ConvergenceDetector:
    """Declares convergence once ``threshold`` steps pass without a table change.

    Both counters start at step 0, so a run in which nothing ever changes
    converges at step ``threshold``.
    """

    def __init__(self, threshold: int = STATIC_THRESHOLD) -> None:
        if int(threshold) < 1:
            raise ConfigurationError(f"static threshold must be >= 1, got {threshold}")
        self.threshold = int(threshold)
        self.last_change_step = 0
        self.converged_step: Optional[int] = None

    @property
    def done(self) -> bool:
        return self.converged_step is not None

    def observe(self, step: int, delta: int) -> bool:
        if delta > 0:
            self.last_change_step = step
        if self.converged_step is None and step - self.last_change_step >= self.threshold:
            self.converged_step = step
        return self.done


def replay_convergence(deltas: Iterable[int], threshold: int = STATIC_THRESHOLD) -> Optional[int]:
    """Step at which a recorded delta stream converges, or None."""
    detector = ConvergenceDetector(threshold)
    for step, delta in enumerate(deltas):
        if detector.observe(step, delta):
            return detector.converged_step
    return None
