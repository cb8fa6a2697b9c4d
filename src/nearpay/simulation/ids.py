"""Monotonic identifier allocation for generated requests and transfers."""

from nearpay.core.clock import Clock


class IdAllocator:
    """Issues integer ids seeded from the clock in epoch milliseconds.

    Ids are strictly increasing even when several are requested within the
    same millisecond or the clock is read before an id already issued.
    """

    def __init__(self, clock: Clock, floor: int = 0):
        self._clock = clock
        self._last = floor

    @property
    def last(self) -> int:
        return self._last

    def observe(self, existing_id: int) -> None:
        """Never hand out an id at or below one already in use."""
        if existing_id > self._last:
            self._last = existing_id

    def next_id(self) -> int:
        candidate = self._clock.now_ms()
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate

    def next_txn_id(self) -> str:
        return f"TXN{self.next_id()}"
