from __future__ import annotations

import pytest

from dvsim.core.errors import ConfigurationError
from dvsim.core.mailbox import Mailbox
from dvsim.core.types import Advertisement, Route


def _adv(sender: int) -> Advertisement:
    return Advertisement(sender=sender, routes=(Route(destination=sender, next_hop=None, cost=5),))


def test_mailbox_drops_when_full() -> None:
    box = Mailbox(capacity=2)

    assert box.try_push(_adv(0)) is True
    assert box.try_push(_adv(1)) is True
    assert box.is_full
    assert box.try_push(_adv(2)) is False
    assert len(box) == 2
    assert box.accepted == 2
    assert box.dropped == 1


def test_drain_returns_arrival_order_and_empties() -> None:
    box = Mailbox(capacity=3)
    for sender in (4, 1, 3):
        box.try_push(_adv(sender))

    drained = box.drain_all()

    assert [a.sender for a in drained] == [4, 1, 3]
    assert len(box) == 0
    assert box.drain_all() == []
    assert box.try_push(_adv(2)) is True


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ConfigurationError):
        Mailbox(capacity=0)
