"""Interactive link-cost entry for the terminal front-end."""

from __future__ import annotations

from typing import Callable, Mapping

from dvsim.core.topology import CostProvider, Topology, TopologyBuilder
from dvsim.core.types import Cost, NodeId

InputFn = Callable[[str], str]
WriteFn = Callable[[str], None]


def prompt_cost_provider(names: Mapping[NodeId, str], input_fn: InputFn = input, write: WriteFn = print) -> CostProvider:
    """Ask for each ``C(src,dst)`` until a non-negative integer is typed."""

    def provide(src: NodeId, dst: NodeId) -> Cost:
        while True:
            raw = input_fn(f"C({names[src]},{names[dst]})=")
            try:
                cost = int(raw.strip())
            except ValueError:
                write(f"not an integer: {raw.strip()!r}")
                continue
            if cost < 0:
                write("cost must be positive (0 fills the remaining links)")
                continue
            return cost

    return provide


def acquire_topology(builder: TopologyBuilder, input_fn: InputFn = input, write: WriteFn = print) -> Topology:
    names = builder.names
    write(
        f"\n\tTIP: enter cost 0 at any time to fill the remaining links with cost {builder.auto_fill_cost}.\n"
    )
    announced = False

    def on_cost(src: NodeId, dst: NodeId, cost: Cost, auto: bool) -> None:
        nonlocal announced
        if not auto:
            return
        if not announced:
            write(f"Filling the remaining link costs with {builder.auto_fill_cost}.")
            announced = True
        write(f"C({names[src]},{names[dst]})={cost}")

    topology = builder.build(prompt_cost_provider(names, input_fn, write), on_cost=on_cost)
    count = len(builder.pairs())
    write(f"\n{count} costs defined.\n{count // 2} links present.\n")
    return topology
