#!/usr/bin/env python3
"""
Load samplers feeding the simulated autoscaler
"""

import random
import threading
from abc import ABC, abstractmethod
from typing import Iterable, Optional


class LoadSampler(ABC):
    """Supplies one load value (percent, 0-100) per autoscaler tick"""

    @abstractmethod
    def sample(self) -> float:
        """Return the current load"""


class RandomLoadSampler(LoadSampler):
    """Synthetic CPU load drawn uniformly from [low, high)"""

    def __init__(self, low: float = 20.0, high: float = 100.0, seed: Optional[int] = None):
        if not 0 <= low < high <= 100:
            raise ValueError(f"Invalid load range [{low}, {high})")
        self.low = low
        self.high = high
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def sample(self) -> float:
        with self._lock:
            return self._rng.random() * (self.high - self.low) + self.low


class SequenceLoadSampler(LoadSampler):
    """Replays a fixed sequence of load values, optionally cycling"""

    def __init__(self, values: Iterable[float], cycle: bool = False):
        self.values = list(values)
        if not self.values:
            raise ValueError("SequenceLoadSampler needs at least one value")
        self.cycle = cycle
        self._index = 0
        self._lock = threading.Lock()

    def sample(self) -> float:
        with self._lock:
            if self._index >= len(self.values):
                if not self.cycle:
                    raise IndexError("Load sequence exhausted")
                self._index = 0
            value = self.values[self._index]
            self._index += 1
            return value
