"""Randomness behind fabricated activity, swappable for deterministic tests."""

import random
import string
from collections.abc import Sequence
from typing import Protocol, TypeVar

T = TypeVar("T")


class EventSource(Protocol):
    """Every random decision the simulation driver makes."""

    def uniform(self, low: float, high: float) -> float: ...

    def chance(self, probability: float) -> bool: ...

    def choice(self, items: Sequence[T]) -> T: ...

    def jitter(self, span: float) -> float: ...

    def device_id(self) -> str: ...


class RandomEventSource:
    """EventSource backed by a seeded ``random.Random``."""

    def __init__(self, seed: int | None = None):
        self._rng = random.Random(seed)

    @property
    def rng(self) -> random.Random:
        return self._rng

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)

    def chance(self, probability: float) -> bool:
        return self._rng.random() < probability

    def choice(self, items: Sequence[T]) -> T:
        return self._rng.choice(items)

    def jitter(self, span: float) -> float:
        """Offset in ``[-span/2, span/2)``."""
        return (self._rng.random() - 0.5) * span

    def device_id(self) -> str:
        alphabet = string.ascii_lowercase + string.digits
        return "device_" + "".join(self._rng.choices(alphabet, k=9))
