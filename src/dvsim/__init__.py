"""Distance-vector routing table simulator."""

from dvsim.core.engine_tick import DriverState, SimulationDriver
from dvsim.core.errors import ConfigurationError
from dvsim.core.topology import Topology, TopologyBuilder
from dvsim.core.types import Advertisement, Route, RunResult, StepReport

__version__ = "0.1.0"

__all__ = [
    "Advertisement",
    "ConfigurationError",
    "DriverState",
    "Route",
    "RunResult",
    "SimulationDriver",
    "StepReport",
    "Topology",
    "TopologyBuilder",
]
