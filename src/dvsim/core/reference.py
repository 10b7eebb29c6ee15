"""Reference shortest-path costs for checking converged tables."""

from __future__ import annotations

import heapq
from typing import Dict, List, Mapping, Sequence, Tuple

from dvsim.core.topology import Topology
from dvsim.core.types import INFINITY_HOPS, Cost, NodeId, Route


def shortest_costs(topology: Topology, start: NodeId) -> Dict[NodeId, Cost]:
    """Dijkstra over directional link costs from ``start``."""
    distances: Dict[NodeId, Cost] = {start: 0}
    pq: List[Tuple[Cost, NodeId]] = [(0, start)]
    while pq:
        dist_u, u = heapq.heappop(pq)
        if dist_u > distances.get(u, dist_u):
            continue
        for v in sorted(topology.neighbors(u)):
            nd = dist_u + topology.cost(u, v)
            if v not in distances or nd < distances[v]:
                distances[v] = nd
                heapq.heappush(pq, (nd, v))
    return distances


def expected_costs(topology: Topology, infinity: Cost = INFINITY_HOPS) -> Dict[NodeId, Dict[NodeId, Cost]]:
    """Converged table costs: true shortest cost, capped at ``infinity``.

    The own entry is expected at ``infinity`` since it is never relaxed.
    """
    out: Dict[NodeId, Dict[NodeId, Cost]] = {}
    for u in topology.nodes():
        dist = shortest_costs(topology, u)
        out[u] = {
            v: infinity if v == u else min(dist.get(v, infinity), infinity)
            for v in topology.nodes()
        }
    return out


def tables_match_reference(
    route_tables: Mapping[NodeId, Sequence[Route]],
    topology: Topology,
    infinity: Cost = INFINITY_HOPS,
) -> bool:
    expected = expected_costs(topology, infinity)
    for node, routes in route_tables.items():
        got = {r.destination: r.cost for r in routes}
        if got != expected.get(node):
            return False
    return True
