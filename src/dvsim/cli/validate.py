from __future__ import annotations

from typing import Any, Dict

from dvsim.core.errors import ConfigurationError
from dvsim.core.topology import TOPOLOGY_TYPES, Topology
from dvsim.runtime.config import sim_config_from_dict


def validate_config(cfg: Dict[str, Any]) -> list[str]:
    errors: list[str] = []

    topo = cfg.get("topology", {"type": "default"})
    if not isinstance(topo, dict):
        return ["'topology' must be a dict"]
    if str(topo.get("type", "default")).lower() not in TOPOLOGY_TYPES:
        errors.append(f"topology.type must be one of {list(TOPOLOGY_TYPES)}")

    try:
        sim = sim_config_from_dict(cfg)
    except ConfigurationError as exc:
        return errors + [str(exc)]

    if sim.router.infinity_hops < 1:
        errors.append("router.infinity_hops must be >= 1")
    if sim.router.mailbox_capacity < 1:
        errors.append("router.mailbox_capacity must be >= 1")
    if sim.router.max_countdown < 0:
        errors.append("router.max_countdown must be >= 0")
    if sim.engine.static_threshold < 1:
        errors.append("engine.static_threshold must be >= 1")
    if sim.engine.max_steps <= 0:
        errors.append("engine.max_steps must be > 0")
    if sim.engine.workers < 0:
        errors.append("engine.workers must be >= 0")
    if sim.engine.step_delay < 0:
        errors.append("engine.step_delay must be >= 0")

    if not errors:
        try:
            Topology.from_config(sim.topology)
        except (ConfigurationError, TypeError, ValueError) as exc:
            errors.append(f"topology: {exc}")

    return errors
