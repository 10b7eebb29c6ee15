from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping

from dvsim.core.errors import ConfigurationError
from dvsim.core.types import INFINITY_HOPS, MAILBOX_CAPACITY, MAX_COUNTDOWN, STATIC_THRESHOLD
from dvsim.utils.io import deep_merge, load_yaml


@dataclass(frozen=True)
class RouterConfig:
    infinity_hops: int = INFINITY_HOPS
    mailbox_capacity: int = MAILBOX_CAPACITY
    max_countdown: int = MAX_COUNTDOWN


@dataclass(frozen=True)
class EngineConfig:
    static_threshold: int = STATIC_THRESHOLD
    max_steps: int = 500
    workers: int = 0
    step_delay: float = 0.0


@dataclass(frozen=True)
class SimConfig:
    name: str
    seed: int
    topology: Dict[str, Any]
    router: RouterConfig = field(default_factory=RouterConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    output_dir: str = "results/runs"


def load_effective_config(config_path: str | Path) -> Dict[str, Any]:
    """Experiment file merged over ``configs/defaults.yaml`` when one is found."""
    cfg_path = Path(config_path).resolve()
    parts = cfg_path.parts
    if "configs" in parts:
        idx = parts.index("configs")
        root = Path(*parts[:idx]) if idx > 0 else Path("/")
    else:
        root = cfg_path.parent
    defaults_path = root / "configs" / "defaults.yaml"

    cfg: Dict[str, Any] = {}
    if defaults_path.exists() and defaults_path != cfg_path:
        cfg = load_yaml(defaults_path)
    return deep_merge(cfg, load_yaml(cfg_path))


def _section(raw: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{key}' must be a dict, got {value!r}")
    return dict(value)


def sim_config_from_dict(raw: Mapping[str, Any]) -> SimConfig:
    router_raw = _section(raw, "router")
    engine_raw = _section(raw, "engine")
    topology = raw.get("topology", {"type": "default"})
    if not isinstance(topology, dict):
        raise ConfigurationError("'topology' must be a dict")

    try:
        router = RouterConfig(
            infinity_hops=int(router_raw.get("infinity_hops", INFINITY_HOPS)),
            mailbox_capacity=int(router_raw.get("mailbox_capacity", MAILBOX_CAPACITY)),
            max_countdown=int(router_raw.get("max_countdown", MAX_COUNTDOWN)),
        )
        engine = EngineConfig(
            static_threshold=int(engine_raw.get("static_threshold", STATIC_THRESHOLD)),
            max_steps=int(engine_raw.get("max_steps", 500)),
            workers=int(engine_raw.get("workers", 0)),
            step_delay=float(engine_raw.get("step_delay", 0.0)),
        )
        seed = int(raw.get("seed", 42))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid numeric setting: {exc}") from exc

    return SimConfig(
        name=str(raw.get("name", "run")),
        seed=seed,
        topology=dict(topology),
        router=router,
        engine=engine,
        output_dir=str(raw.get("output_dir", "results/runs")),
    )


def load_sim_config(path: str | Path) -> SimConfig:
    return sim_config_from_dict(load_effective_config(path))
