from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Callable


class StepClock(ABC):
    """Paces the gap between two simulation steps."""

    @abstractmethod
    def wait(self) -> None:
        raise NotImplementedError


class NullClock(StepClock):
    def wait(self) -> None:
        return None


class SleepClock(StepClock):
    def __init__(self, interval: float, sleep: Callable[[float], None] = time.sleep) -> None:
        self.interval = max(0.0, float(interval))
        self._sleep = sleep

    def wait(self) -> None:
        if self.interval > 0:
            self._sleep(self.interval)
