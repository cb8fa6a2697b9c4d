"""Shared local registry faking state visible to every simulated device."""

import json
import logging
from typing import TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from nearpay.core.clock import Clock
from nearpay.core.exceptions import StorageError
from nearpay.models import (
    ExternalLogin,
    NewRequestUpdate,
    PendingUpdate,
    RecentLogin,
    RemovedRequestRef,
    RemovedRequestUpdate,
    Request,
    Transaction,
    Transfer,
    UserRating,
)
from nearpay.registry import keys
from nearpay.registry.store import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

_REQUESTS: TypeAdapter[list[Request]] = TypeAdapter(list[Request])
_PENDING_UPDATE: TypeAdapter[PendingUpdate] = TypeAdapter(PendingUpdate)
_PENDING_UPDATES: TypeAdapter[list[PendingUpdate]] = TypeAdapter(list[PendingUpdate])
_LOGINS: TypeAdapter[list[RecentLogin]] = TypeAdapter(list[RecentLogin])
_EXTERNAL_LOGINS: TypeAdapter[list[ExternalLogin]] = TypeAdapter(list[ExternalLogin])
_TRANSFERS: TypeAdapter[list[Transfer]] = TypeAdapter(list[Transfer])
_TRANSACTIONS: TypeAdapter[list[Transaction]] = TypeAdapter(list[Transaction])
_RATINGS: TypeAdapter[dict[str, list[UserRating]]] = TypeAdapter(
    dict[str, list[UserRating]]
)
_MARKS: TypeAdapter[dict[str, int]] = TypeAdapter(dict[str, int])
_INT: TypeAdapter[int] = TypeAdapter(int)

DEFAULT_RECENT_LOGIN_CAPACITY = 10
DEFAULT_EXTERNAL_LOGIN_CAPACITY = 20


class SharedRegistry:
    """Typed view over a KeyValueStore.

    Reads never fail the caller: a missing key, unreadable backend or
    corrupt JSON yields the empty/default value and a warning. Writes
    propagate StorageError.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Clock,
        recent_login_capacity: int = DEFAULT_RECENT_LOGIN_CAPACITY,
        external_login_capacity: int = DEFAULT_EXTERNAL_LOGIN_CAPACITY,
    ):
        if recent_login_capacity < 1 or external_login_capacity < 1:
            raise ValueError("Buffer capacities must be positive")
        self._store = store
        self._clock = clock
        self._recent_login_capacity = recent_login_capacity
        self._external_login_capacity = external_login_capacity

    @property
    def store(self) -> KeyValueStore:
        return self._store

    # -- global request list -------------------------------------------------

    def get_all_requests(self) -> list[Request]:
        return self._read(keys.GLOBAL_REQUESTS, _REQUESTS, [])

    def save_all_requests(self, requests: list[Request]) -> None:
        self._write(keys.GLOBAL_REQUESTS, _REQUESTS, requests)

    def add_global_request(self, request: Request) -> bool:
        """Queue a new_request update for other devices, then append the request.

        Returns False without side effects if the id is already present. If
        the list write fails after queueing, the next merge restores the
        request locally.
        """
        requests = self.get_all_requests()
        if any(existing.id == request.id for existing in requests):
            logger.debug(f"Request {request.id} already in global list, skipping")
            return False

        self.enqueue_update(NewRequestUpdate(payload=request, timestamp=self._clock.now_ms()))
        requests.append(request)
        self.save_all_requests(requests)
        return True

    def remove_global_request(self, request_id: int) -> bool:
        """Delete a request by id and queue a removed_request update.

        The update is queued even when the id is unknown locally so other
        devices holding the request drop it as well.
        """
        self.enqueue_update(
            RemovedRequestUpdate(
                payload=RemovedRequestRef(id=request_id),
                timestamp=self._clock.now_ms(),
            )
        )

        requests = self.get_all_requests()
        remaining = [r for r in requests if r.id != request_id]
        removed = len(remaining) != len(requests)
        if removed:
            self.save_all_requests(remaining)
        return removed

    # -- pending-update queue ------------------------------------------------

    def enqueue_update(self, update: PendingUpdate) -> None:
        updates = self.peek_pending_updates()
        updates.append(update)
        self._write(keys.PENDING_UPDATES, _PENDING_UPDATES, updates)

    def peek_pending_updates(self) -> list[PendingUpdate]:
        return self._parse_updates(self._safe_get(keys.PENDING_UPDATES))

    def drain_pending_updates(self) -> list[PendingUpdate]:
        """Return every queued update and empty the queue in one step."""
        try:
            raw = self._store.pop(keys.PENDING_UPDATES)
        except StorageError as e:
            logger.warning(f"Could not drain pending updates: {e.message}")
            return []
        return self._parse_updates(raw)

    def _parse_updates(self, raw: str | None) -> list[PendingUpdate]:
        if raw is None:
            return []
        try:
            items = json.loads(raw)
        except ValueError:
            logger.warning("Pending update queue is not valid JSON, treating as empty")
            return []
        if not isinstance(items, list):
            logger.warning("Pending update queue is not a list, treating as empty")
            return []

        updates: list[PendingUpdate] = []
        for item in items:
            try:
                updates.append(_PENDING_UPDATE.validate_python(item))
            except PydanticValidationError:
                logger.warning(f"Dropping malformed pending update: {item!r}")
        return updates

    # -- sync bookkeeping ----------------------------------------------------

    def get_last_sync_ms(self) -> int | None:
        return self._read(keys.LAST_SYNC, _INT, None)

    def set_last_sync_ms(self, timestamp_ms: int) -> None:
        self._write(keys.LAST_SYNC, _INT, timestamp_ms)

    # -- recent logins (ring buffer) -----------------------------------------

    def record_login(self, login: RecentLogin) -> None:
        logins = self._read(keys.RECENT_LOGINS, _LOGINS, [])
        logins.append(login)
        if len(logins) > self._recent_login_capacity:
            logins = logins[-self._recent_login_capacity :]
        self._write(keys.RECENT_LOGINS, _LOGINS, logins)

    def get_all_logins(self) -> list[RecentLogin]:
        return self._read(keys.RECENT_LOGINS, _LOGINS, [])

    def get_recent_logins(self, now_ms: int, window_ms: int) -> list[RecentLogin]:
        """Logins younger than ``window_ms`` at ``now_ms``."""
        return [login for login in self.get_all_logins() if now_ms - login.timestamp < window_ms]

    # -- notification suppression marks -------------------------------------

    def get_notified_marks(self) -> dict[str, int]:
        return self._read(keys.NOTIFIED_MARKS, _MARKS, {})

    def save_notified_marks(self, marks: dict[str, int]) -> None:
        self._write(keys.NOTIFIED_MARKS, _MARKS, marks)

    # -- location counter ----------------------------------------------------

    def get_location_count(self) -> int:
        return self._read(keys.LOCATION_COUNT, _INT, 0)

    def increment_location_count(self) -> int:
        count = self.get_location_count() + 1
        self._write(keys.LOCATION_COUNT, _INT, count)
        return count

    # -- external login log --------------------------------------------------

    def record_external_login(self, login: ExternalLogin) -> None:
        logins = self.get_external_logins()
        logins.append(login)
        if len(logins) > self._external_login_capacity:
            logins = logins[-self._external_login_capacity :]
        self._write(keys.EXTERNAL_LOGINS, _EXTERNAL_LOGINS, logins)

    def get_external_logins(self) -> list[ExternalLogin]:
        return self._read(keys.EXTERNAL_LOGINS, _EXTERNAL_LOGINS, [])

    # -- transfers and history -----------------------------------------------

    def add_proximity_transfer(self, transfer: Transfer) -> None:
        transfers = self.get_proximity_transfers()
        transfers.append(transfer)
        self._write(keys.PROXIMITY_TRANSFERS, _TRANSFERS, transfers)

    def get_proximity_transfers(self) -> list[Transfer]:
        return self._read(keys.PROXIMITY_TRANSFERS, _TRANSFERS, [])

    def add_transaction(self, txn: Transaction) -> None:
        history = self._read(keys.TRANSACTION_HISTORY, _TRANSACTIONS, [])
        history.append(txn)
        self._write(keys.TRANSACTION_HISTORY, _TRANSACTIONS, history)

    def get_transaction_history(self) -> list[Transaction]:
        """History ordered newest first."""
        history = self._read(keys.TRANSACTION_HISTORY, _TRANSACTIONS, [])
        return sorted(history, key=lambda t: t.timestamp, reverse=True)

    # -- user ratings --------------------------------------------------------

    def add_user_rating(self, username: str, rating: UserRating) -> None:
        ratings = self._read(keys.USER_RATINGS, _RATINGS, {})
        ratings.setdefault(username, []).append(rating)
        self._write(keys.USER_RATINGS, _RATINGS, ratings)

    def get_user_ratings(self, username: str) -> list[UserRating]:
        """Ratings received by ``username``, oldest first."""
        return self._read(keys.USER_RATINGS, _RATINGS, {}).get(username, [])

    def clear(self) -> None:
        for key in keys.ALL_KEYS:
            self._store.delete(key)

    # -- helpers -------------------------------------------------------------

    def _safe_get(self, key: str) -> str | None:
        try:
            return self._store.get(key)
        except StorageError as e:
            logger.warning(f"Registry read failed for {key}: {e.message}")
            return None

    def _read(self, key: str, adapter: TypeAdapter[T], default: T) -> T:
        raw = self._safe_get(key)
        if raw is None:
            return default
        try:
            return adapter.validate_json(raw)
        except PydanticValidationError:
            logger.warning(f"Corrupt registry value under {key}, using default")
            return default

    def _write(self, key: str, adapter: TypeAdapter[T], value: T) -> None:
        self._store.set(key, adapter.dump_json(value).decode())
