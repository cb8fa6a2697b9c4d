"""Time sources shared by the registry, sync engine and simulation driver."""

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    import simpy


class Clock(Protocol):
    def now(self) -> datetime: ...

    def now_ms(self) -> int: ...


def to_epoch_ms(dt: datetime) -> int:
    """Convert an aware datetime to integer epoch milliseconds."""
    return int(dt.astimezone(UTC).timestamp() * 1000)


def from_epoch_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=UTC)


class SimClock:
    """Maps SimPy simulated seconds onto a fixed UTC start time."""

    def __init__(self, env: "simpy.Environment", start_time: datetime):
        self._env = env
        self._start_time = start_time.astimezone(UTC)

    @property
    def start_time(self) -> datetime:
        return self._start_time

    def now(self) -> datetime:
        return self._start_time + timedelta(seconds=float(self._env.now))

    def now_ms(self) -> int:
        return to_epoch_ms(self._start_time) + int(float(self._env.now) * 1000)


class ManualClock:
    """Clock advanced explicitly by the caller."""

    def __init__(self, start_time: datetime | None = None):
        self._current = (start_time or datetime(2025, 1, 15, 10, 0, 0, tzinfo=UTC)).astimezone(
            UTC
        )

    def now(self) -> datetime:
        return self._current

    def now_ms(self) -> int:
        return to_epoch_ms(self._current)

    def advance(self, seconds: float = 0.0, *, ms: int = 0) -> None:
        if seconds < 0 or ms < 0:
            raise ValueError("Clock cannot move backwards")
        self._current += timedelta(seconds=seconds, milliseconds=ms)
