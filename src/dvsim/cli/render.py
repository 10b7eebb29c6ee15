"""Plain-text rendering of routing tables for the terminal animation."""

from __future__ import annotations

import sys
from typing import Mapping, TextIO

from dvsim.core.types import INFINITY_HOPS, Cost, NodeId, RouteTables, StepReport

DEFAULT_DIAGRAM = r"""
             B ------ D
            /| \      |\
           / |  \     | \
          /  |   \    |  \
         A   |    \   |   F
          \  |     \  |  /
           \ |      \ | /
            \|       \|/
             C ------ E
"""

CLEAR_SCREEN = "\x1b[2J\x1b[H"


def format_tables(
    tables: RouteTables,
    names: Mapping[NodeId, str],
    infinity: Cost = INFINITY_HOPS,
) -> str:
    """One ``C(src,dst)=cost via hop`` line per ordered pair, own entries omitted."""
    blocks = []
    for node, routes in sorted(tables.items()):
        lines = []
        for route in routes:
            if route.destination == node:
                continue
            label = f"C({names[node]},{names[route.destination]})"
            if route.is_reachable(infinity):
                lines.append(f"{label}={route.cost} via {names[route.next_hop]}")
            else:
                lines.append(f"{label}=INF")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


def format_step_header(report: StepReport) -> str:
    return f"step {report.step} (drops: {report.dropped_total}) (delta: {report.delta})"


def clear_screen(stream: TextIO = sys.stdout) -> None:
    if stream.isatty():
        stream.write(CLEAR_SCREEN)
        stream.flush()
