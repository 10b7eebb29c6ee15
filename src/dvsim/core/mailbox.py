from __future__ import annotations

import threading
from collections import deque
from typing import Deque, List

from dvsim.core.errors import ConfigurationError
from dvsim.core.types import MAILBOX_CAPACITY, Advertisement


class Mailbox:
    """Bounded FIFO inbox of advertisements owned by one router.

    Pushes from several senders are serialized by a lock; only the owner drains.
    """

    def __init__(self, capacity: int = MAILBOX_CAPACITY) -> None:
        if int(capacity) < 1:
            raise ConfigurationError(f"mailbox capacity must be >= 1, got {capacity}")
        self.capacity = int(capacity)
        self._items: Deque[Advertisement] = deque()
        self._lock = threading.Lock()
        self.accepted = 0
        self.dropped = 0

    def __len__(self) -> int:
        return len(self._items)

    @property
    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def try_push(self, advertisement: Advertisement) -> bool:
        with self._lock:
            if len(self._items) >= self.capacity:
                self.dropped += 1
                return False
            self._items.append(advertisement)
            self.accepted += 1
            return True

    def drain_all(self) -> List[Advertisement]:
        with self._lock:
            out = list(self._items)
            self._items.clear()
        return out
