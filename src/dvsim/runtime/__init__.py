"""Configuration loading for simulation runs."""

from dvsim.runtime.config import (
    EngineConfig,
    RouterConfig,
    SimConfig,
    load_effective_config,
    load_sim_config,
    sim_config_from_dict,
)
from dvsim.utils.io import deep_merge, load_yaml

__all__ = [
    "EngineConfig",
    "RouterConfig",
    "SimConfig",
    "deep_merge",
    "load_effective_config",
    "load_sim_config",
    "load_yaml",
    "sim_config_from_dict",
]
