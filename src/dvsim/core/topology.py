from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from dvsim.core.errors import ConfigurationError
from dvsim.core.types import AUTO_FILL_COST, Cost, NodeId

CostProvider = Callable[[NodeId, NodeId], Cost]
CostObserver = Callable[[NodeId, NodeId, Cost, bool], None]

DEFAULT_NAMES: Tuple[str, ...] = ("A", "B", "C", "D", "E", "F")

# Neighbor lists in prompt order for the six-node reference diagram:
#
#       B ------ D
#      /| \      |\
#     A |   \    | F
#      \|     \  |/
#       C ------ E
DEFAULT_ADJACENCY: Dict[NodeId, Tuple[NodeId, ...]] = {
    0: (1, 2),
    1: (0, 2, 3, 4),
    2: (0, 1, 4),
    3: (1, 4, 5),
    4: (2, 1, 3, 5),
    5: (4, 3),
}

TOPOLOGY_TYPES = ("default", "line", "ring", "star", "fullmesh", "edges")


@dataclass(frozen=True)
class Edge:
    u: NodeId
    v: NodeId
    cost_uv: Cost
    cost_vu: Cost


def default_names(nodes: Iterable[NodeId]) -> Dict[NodeId, str]:
    ids = sorted(int(n) for n in nodes)
    if ids and ids[-1] < len(string.ascii_uppercase) and ids[0] >= 0:
        return {n: string.ascii_uppercase[n] for n in ids}
    return {n: str(n) for n in ids}


def _check_cost(u: Any, v: Any, cost: Any) -> Cost:
    if isinstance(cost, bool) or not isinstance(cost, int):
        raise ConfigurationError(f"cost for link {u}->{v} must be an integer, got {cost!r}")
    if cost <= 0:
        raise ConfigurationError(f"cost for link {u}->{v} must be positive, got {cost}")
    return cost


class Topology:
    """Immutable adjacency relation with a directional cost per adjacent pair.

    Adjacency must be symmetric and irreflexive; the cost of ``u -> v`` may
    differ from ``v -> u``. Nodes without links are allowed and stay isolated.
    """

    def __init__(
        self,
        nodes: Iterable[NodeId],
        costs: Mapping[Tuple[NodeId, NodeId], Cost],
        names: Optional[Mapping[NodeId, str]] = None,
    ) -> None:
        adj: Dict[NodeId, Dict[NodeId, Cost]] = {int(n): {} for n in nodes}
        for (u, v), cost in costs.items():
            u, v = int(u), int(v)
            if u == v:
                raise ConfigurationError(f"node {u} cannot be adjacent to itself")
            if u not in adj or v not in adj:
                raise ConfigurationError(f"link {u}->{v} references an unknown node")
            adj[u][v] = _check_cost(u, v, cost)
        for u, nbrs in adj.items():
            for v in nbrs:
                if u not in adj[v]:
                    raise ConfigurationError(f"adjacency is not symmetric: {u}->{v} has no reverse link")

        labels = default_names(adj)
        labels.update({int(n): str(name) for n, name in dict(names or {}).items() if int(n) in adj})
        if len(set(labels.values())) != len(labels):
            raise ConfigurationError(f"node names must be unique: {sorted(labels.values())}")

        self._adj = adj
        self._nodes: Tuple[NodeId, ...] = tuple(sorted(adj))
        self._names = labels

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node: object) -> bool:
        return node in self._adj

    def __repr__(self) -> str:
        return f"Topology(nodes={len(self._nodes)}, links={len(self.edge_list())})"

    def nodes(self) -> List[NodeId]:
        return list(self._nodes)

    def neighbors(self, node: NodeId) -> FrozenSet[NodeId]:
        return frozenset(self._adj.get(node, {}))

    def cost(self, u: NodeId, v: NodeId) -> Cost:
        try:
            return self._adj[u][v]
        except KeyError:
            raise KeyError(f"node {u} is not adjacent to {v}") from None

    def name(self, node: NodeId) -> str:
        return self._names[node]

    @property
    def names(self) -> Dict[NodeId, str]:
        return dict(self._names)

    def links(self) -> List[Tuple[NodeId, NodeId, Cost]]:
        return [(u, v, c) for u in self._nodes for v, c in sorted(self._adj[u].items())]

    def edge_list(self) -> List[Edge]:
        edges: List[Edge] = []
        for u in self._nodes:
            for v, cost in sorted(self._adj[u].items()):
                if u < v:
                    edges.append(Edge(u=u, v=v, cost_uv=cost, cost_vu=self._adj[v][u]))
        return edges

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[Sequence[Any]],
        nodes: Optional[Iterable[NodeId]] = None,
        names: Optional[Mapping[NodeId, str]] = None,
    ) -> "Topology":
        """Build from ``(u, v, cost)`` or ``(u, v, cost_uv, cost_vu)`` rows."""
        costs: Dict[Tuple[NodeId, NodeId], Cost] = {}
        seen = set(int(n) for n in nodes or [])
        for row in edges:
            if len(row) not in (3, 4):
                raise ConfigurationError(f"link must be [u, v, cost] or [u, v, cost_uv, cost_vu], got {row!r}")
            u, v = int(row[0]), int(row[1])
            costs[(u, v)] = row[2]
            costs[(v, u)] = row[3] if len(row) == 4 else row[2]
            seen.update((u, v))
        return cls(nodes=seen, costs=costs, names=names)

    @classmethod
    def default(cls, cost: Cost = AUTO_FILL_COST) -> "Topology":
        return TopologyBuilder.default().build(fixed_cost_provider(cost))

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "Topology":
        tp = str(cfg.get("type", "default")).lower()
        if tp == "edges":
            return _edges_from_config(cfg)
        builder = TopologyBuilder.from_config(cfg)
        return builder.build(provider_from_config(cfg, builder))


class TopologyBuilder:
    """Acquires a cost for every ordered adjacent pair, then freezes a Topology.

    Pairs are requested in row order: each node in id order, its neighbors in
    the order given by ``adjacency``. A provider answering ``0`` switches the
    builder to auto-fill: that pair and every later one get ``auto_fill_cost``
    and the provider is not consulted again.
    """

    def __init__(
        self,
        adjacency: Mapping[NodeId, Sequence[NodeId]],
        names: Optional[Mapping[NodeId, str]] = None,
        auto_fill_cost: Cost = AUTO_FILL_COST,
    ) -> None:
        adj: Dict[NodeId, Tuple[NodeId, ...]] = {}
        for node, nbrs in adjacency.items():
            adj[int(node)] = tuple(int(n) for n in nbrs)
        for nbrs in list(adj.values()):
            for n in nbrs:
                adj.setdefault(n, ())
        self.adjacency = adj
        self.names = default_names(adj)
        self.names.update({int(n): str(v) for n, v in dict(names or {}).items()})
        self.auto_fill_cost = _check_cost("*", "*", auto_fill_cost)

    def nodes(self) -> List[NodeId]:
        return sorted(self.adjacency)

    def pairs(self) -> List[Tuple[NodeId, NodeId]]:
        return [(u, v) for u in self.nodes() for v in self.adjacency[u]]

    def resolve(self, label: Any) -> NodeId:
        return _resolve_label(label, self.names)

    def build(self, provider: CostProvider, on_cost: Optional[CostObserver] = None) -> Topology:
        costs: Dict[Tuple[NodeId, NodeId], Cost] = {}
        auto_fill = False
        for src, dst in self.pairs():
            if auto_fill:
                cost = self.auto_fill_cost
            else:
                cost = provider(src, dst)
                if cost == 0:
                    auto_fill = True
                    cost = self.auto_fill_cost
            if on_cost is not None:
                on_cost(src, dst, cost, auto_fill)
            costs[(src, dst)] = cost
        return Topology(nodes=self.nodes(), costs=costs, names=self.names)

    @classmethod
    def default(cls, auto_fill_cost: Cost = AUTO_FILL_COST) -> "TopologyBuilder":
        return cls(
            DEFAULT_ADJACENCY,
            names=dict(enumerate(DEFAULT_NAMES)),
            auto_fill_cost=auto_fill_cost,
        )

    @classmethod
    def from_pairs(cls, n_nodes: int, pairs: Iterable[Tuple[int, int]], **kwargs: Any) -> "TopologyBuilder":
        nbrs: Dict[NodeId, set[NodeId]] = {i: set() for i in range(max(0, n_nodes))}
        for u, v in pairs:
            if u == v:
                continue
            nbrs[u].add(v)
            nbrs[v].add(u)
        return cls({n: sorted(vs) for n, vs in nbrs.items()}, **kwargs)

    @classmethod
    def line(cls, n_nodes: int, **kwargs: Any) -> "TopologyBuilder":
        return cls.from_pairs(n_nodes, [(i, i + 1) for i in range(n_nodes - 1)], **kwargs)

    @classmethod
    def ring(cls, n_nodes: int, **kwargs: Any) -> "TopologyBuilder":
        return cls.from_pairs(n_nodes, [(i, (i + 1) % n_nodes) for i in range(n_nodes)], **kwargs)

    @classmethod
    def star(cls, n_nodes: int, center: int = 0, **kwargs: Any) -> "TopologyBuilder":
        center = max(0, min(center, n_nodes - 1))
        return cls.from_pairs(n_nodes, [(center, i) for i in range(n_nodes)], **kwargs)

    @classmethod
    def fullmesh(cls, n_nodes: int, **kwargs: Any) -> "TopologyBuilder":
        pairs = [(u, v) for u in range(n_nodes) for v in range(u + 1, n_nodes)]
        return cls.from_pairs(n_nodes, pairs, **kwargs)

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "TopologyBuilder":
        tp = str(cfg.get("type", "default")).lower()
        auto_fill_cost = cfg.get("auto_fill_cost", AUTO_FILL_COST)
        if tp == "default":
            return cls.default(auto_fill_cost=auto_fill_cost)
        n_nodes = _config_int(cfg, "n_nodes", 6)
        if n_nodes <= 0:
            raise ConfigurationError(f"topology.n_nodes must be > 0, got {n_nodes}")
        names = _names_from_config(cfg)
        if tp == "line":
            return cls.line(n_nodes, names=names, auto_fill_cost=auto_fill_cost)
        if tp == "ring":
            return cls.ring(n_nodes, names=names, auto_fill_cost=auto_fill_cost)
        if tp == "star":
            center = _config_int(cfg, "center", 0)
            return cls.star(n_nodes, center=center, names=names, auto_fill_cost=auto_fill_cost)
        if tp == "fullmesh":
            return cls.fullmesh(n_nodes, names=names, auto_fill_cost=auto_fill_cost)
        raise ConfigurationError(f"Unsupported topology type: {tp}. Available: {list(TOPOLOGY_TYPES)}")


def fixed_cost_provider(cost: Cost) -> CostProvider:
    def provide(src: NodeId, dst: NodeId) -> Cost:
        return cost

    return provide


def mapping_cost_provider(
    costs: Mapping[Tuple[NodeId, NodeId], Cost],
    default: Optional[Cost] = None,
) -> CostProvider:
    table = {(int(u), int(v)): c for (u, v), c in costs.items()}

    def provide(src: NodeId, dst: NodeId) -> Cost:
        if (src, dst) in table:
            return table[(src, dst)]
        if default is None:
            raise ConfigurationError(f"no cost given for link {src}->{dst}")
        return default

    return provide


def sequence_cost_provider(values: Iterable[Cost]) -> CostProvider:
    """Hand out costs in request order; an exhausted sequence answers 0 (auto-fill)."""
    it: Iterator[Cost] = iter(values)

    def provide(src: NodeId, dst: NodeId) -> Cost:
        return next(it, 0)

    return provide


def provider_from_config(cfg: Mapping[str, Any], builder: TopologyBuilder) -> CostProvider:
    default_cost = cfg.get("default_cost", builder.auto_fill_cost)
    if cfg.get("cost_sequence") is not None:
        return sequence_cost_provider(_config_list(cfg, "cost_sequence"))
    raw_costs = cfg.get("costs")
    if raw_costs:
        if not isinstance(raw_costs, Mapping):
            raise ConfigurationError(f"topology.costs must be a mapping of 'A-B' keys, got {raw_costs!r}")
        return mapping_cost_provider(_parse_cost_keys(raw_costs, builder.resolve), default=default_cost)
    return fixed_cost_provider(default_cost)


def _config_int(cfg: Mapping[str, Any], key: str, default: int) -> int:
    value = cfg.get(key, default)
    if isinstance(value, bool):
        raise ConfigurationError(f"topology.{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"topology.{key} must be an integer, got {value!r}") from None


def _config_list(cfg: Mapping[str, Any], key: str) -> List[Any]:
    value = cfg.get(key)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError(f"topology.{key} must be a list, got {value!r}")
    return list(value)


def _parse_cost_keys(raw: Mapping[str, Cost], resolve: Callable[[Any], NodeId]) -> Dict[Tuple[NodeId, NodeId], Cost]:
    out: Dict[Tuple[NodeId, NodeId], Cost] = {}
    for key, cost in raw.items():
        parts = str(key).split("-")
        if len(parts) != 2:
            raise ConfigurationError(f"cost key must look like 'A-B', got {key!r}")
        out[(resolve(parts[0].strip()), resolve(parts[1].strip()))] = cost
    return out


def _names_from_config(cfg: Mapping[str, Any]) -> Optional[Dict[NodeId, str]]:
    names = _config_list(cfg, "names")
    if not names:
        return None
    return {i: str(name) for i, name in enumerate(names)}


def _edges_from_config(cfg: Mapping[str, Any]) -> Topology:
    raw_nodes = _config_list(cfg, "nodes")
    if not raw_nodes:
        raise ConfigurationError("topology.nodes is required for type 'edges'")
    names = {i: str(n) for i, n in enumerate(raw_nodes)}
    rows = []
    for row in _config_list(cfg, "links"):
        if not isinstance(row, (list, tuple)):
            raise ConfigurationError(f"link must be [u, v, cost] or [u, v, cost_uv, cost_vu], got {row!r}")
        row = list(row)
        if len(row) < 3:
            raise ConfigurationError(f"link must be [u, v, cost] or [u, v, cost_uv, cost_vu], got {row!r}")
        rows.append([_resolve_label(row[0], names), _resolve_label(row[1], names), *row[2:]])
    return Topology.from_edges(rows, nodes=names.keys(), names=names)


def _resolve_label(label: Any, names: Mapping[NodeId, str]) -> NodeId:
    text = str(label)
    for node, name in names.items():
        if name == text:
            return node
    if text.lstrip("-").isdigit() and int(text) in names:
        return int(text)
    raise ConfigurationError(f"unknown node: {label!r}")
