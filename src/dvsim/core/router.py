from __future__ import annotations

import logging
import random
from typing import Dict, List, Mapping, Optional

from dvsim.core.errors import ConfigurationError
from dvsim.core.mailbox import Mailbox
from dvsim.core.topology import Topology
from dvsim.core.types import (
    INFINITY_HOPS,
    MAILBOX_CAPACITY,
    MAX_COUNTDOWN,
    Advertisement,
    Cost,
    NodeId,
    Route,
)

log = logging.getLogger("dvsim.router")


class Router:
    """One distance-vector node: routing table, bounded inbox and send timer.

    The table holds one route per node of the topology, the router's own id
    included. Every entry starts unreachable except direct neighbors, which
    start at the link cost (clamped to ``infinity_hops``). The own entry is
    never relaxed and stays at ``infinity_hops`` for the whole run.
    """

    def __init__(
        self,
        node_id: NodeId,
        topology: Topology,
        mailbox_capacity: int = MAILBOX_CAPACITY,
        infinity_hops: Cost = INFINITY_HOPS,
        max_countdown: int = MAX_COUNTDOWN,
        rng: Optional[random.Random] = None,
        countdown: Optional[int] = None,
    ) -> None:
        if node_id not in topology:
            raise ConfigurationError(f"router {node_id} is not a node of the topology")
        if int(infinity_hops) < 1:
            raise ConfigurationError(f"infinity_hops must be >= 1, got {infinity_hops}")
        if int(max_countdown) < 0:
            raise ConfigurationError(f"max_countdown must be >= 0, got {max_countdown}")
        self.node_id = node_id
        self.topology = topology
        self.infinity_hops = int(infinity_hops)
        self.max_countdown = int(max_countdown)
        self.rng = rng or random.Random(node_id)
        self.mailbox = Mailbox(mailbox_capacity)
        self.neighbors: List[NodeId] = sorted(topology.neighbors(node_id))

        self.table: Dict[NodeId, Route] = {
            dst: Route.unreachable(dst, self.infinity_hops) for dst in topology.nodes()
        }
        for nbr in self.neighbors:
            self.table[nbr] = Route.direct(nbr, topology.cost(node_id, nbr), self.infinity_hops)

        self.countdown = self._draw_countdown() if countdown is None else int(countdown)
        if self.countdown < 0:
            raise ConfigurationError(f"countdown must be >= 0, got {self.countdown}")
        self.last_sent_step: Optional[int] = None
        self.drops_caused = 0

    def __repr__(self) -> str:
        return f"Router(node_id={self.node_id}, countdown={self.countdown})"

    def _draw_countdown(self) -> int:
        return self.rng.randint(0, self.max_countdown)

    def advertisement(self, step: int = 0) -> Advertisement:
        routes = tuple(self.table[dst] for dst in sorted(self.table))
        return Advertisement(sender=self.node_id, routes=routes, step=step)

    def send(self, step: int, mailboxes: Mapping[NodeId, Mailbox]) -> int:
        """Advertise to every neighbor if the timer expired, else count down.

        Returns the number of advertisements dropped because a neighbor's
        mailbox was full.
        """
        if self.countdown > 0:
            self.countdown -= 1
            return 0

        adv = self.advertisement(step)
        drops = 0
        for nbr in self.neighbors:
            if not mailboxes[nbr].try_push(adv):
                drops += 1
                log.debug("step %s: MailboxFullDrop %s -> %s", step, self.node_id, nbr)
        self.countdown = self._draw_countdown()
        self.last_sent_step = step
        self.drops_caused += drops
        return drops

    def receive(self) -> int:
        """Drain the mailbox in arrival order and relax the table.

        Returns the number of entries improved.
        """
        delta = 0
        for adv in self.mailbox.drain_all():
            delta += self.relax(adv)
        return delta

    def relax(self, adv: Advertisement) -> int:
        sender = adv.sender
        if sender not in self.table:
            return 0
        delta = 0
        for route in adv.routes:
            dst = route.destination
            if dst == self.node_id or dst not in self.table:
                continue
            # Always through our current route to the sender, not its advertised self-cost.
            candidate = route.cost + self.table[sender].cost
            if candidate < self.table[dst].cost:
                self.table[dst] = Route(destination=dst, next_hop=sender, cost=candidate)
                delta += 1
        return delta

    def table_snapshot(self) -> List[Route]:
        return [self.table[dst] for dst in sorted(self.table)]

    def route_to(self, destination: NodeId) -> Route:
        return self.table[destination]
