"""Raising, listing and completing money/service/goods requests."""

import logging
from collections import Counter
from dataclasses import dataclass, field

from nearpay.core.clock import Clock, to_epoch_ms
from nearpay.core.exceptions import (
    LocationRequiredError,
    MissingFieldError,
    ValidationError,
)
from nearpay.models import Request, RequestKind, Transaction, Urgency
from nearpay.proximity import ProximityBand, ProximityEngine
from nearpay.registry import SharedRegistry
from nearpay.services.validation import parse_amount, require_session
from nearpay.session import UserSession
from nearpay.simulation.ids import IdAllocator
from nearpay.sim_logging import log_session_context
from nearpay.sync import SyncEngine

logger = logging.getLogger(__name__)

RECENT_REQUEST_MS = 300_000
NEW_USER_REQUEST_WINDOW_MS = 600_000


@dataclass(frozen=True)
class RequestEntry:
    """One row of the outstanding-requests list with its badges."""

    request: Request
    distance_m: float | None
    in_range: bool
    band: ProximityBand | None
    is_recent: bool
    from_new_user: bool

    @property
    def is_external(self) -> bool:
        return self.request.is_external

    @property
    def display_distance(self) -> str:
        return "Unknown" if self.distance_m is None else f"{round(self.distance_m)}m"


@dataclass(frozen=True)
class RequestAnalytics:
    total_requests: int = 0
    by_kind: dict[str, int] = field(default_factory=dict)
    by_urgency: dict[str, int] = field(default_factory=dict)
    total_amount: float = 0.0
    average_amount: float = 0.0


class RequestService:
    """Operations the current user performs on the global request list.

    Mutations go through the shared registry, which queues the matching
    pending update, and are followed by a forced sync so the change is
    reconciled immediately.
    """

    def __init__(
        self,
        registry: SharedRegistry,
        proximity: ProximityEngine,
        sync: SyncEngine,
        clock: Clock,
        ids: IdAllocator,
        recent_login_window_ms: int = 300_000,
        new_user_request_window_ms: int = NEW_USER_REQUEST_WINDOW_MS,
        require_location_fix: bool = False,
    ):
        self._registry = registry
        self._proximity = proximity
        self._sync = sync
        self._clock = clock
        self._ids = ids
        self._recent_login_window_ms = recent_login_window_ms
        self._new_user_request_window_ms = new_user_request_window_ms
        self._require_location_fix = require_location_fix

    def raise_request(
        self,
        session: UserSession | None,
        amount: float | str | None,
        kind: RequestKind | str | None,
        urgency: Urgency | str | None,
        category: str | None,
        description: str = "",
    ) -> Request:
        """Create a request at the user's location and publish it.

        Raises:
            NotLoggedInError: No session.
            MissingFieldError: amount, kind, urgency or category is empty.
            InvalidAmountError: amount is not a positive number.
            LocationRequiredError: No position is known.
        """
        session = require_session(session)

        missing = [
            name
            for name, value in (
                ("amount", amount),
                ("kind", kind),
                ("urgency", urgency),
                ("category", category),
            )
            if value is None or value == ""
        ]
        if missing:
            raise MissingFieldError(
                "Please fill in all required fields", details={"missing": missing}
            )

        parsed_amount = parse_amount(amount)

        location = session.fix if self._require_location_fix else session.location
        if location is None:
            raise LocationRequiredError("Location access required to raise requests")

        try:
            request = Request(
                id=self._ids.next_id(),
                amount=parsed_amount,
                kind=RequestKind(kind),
                description=description,
                requester=session.username,
                timestamp=self._clock.now(),
                location=location,
                urgency=Urgency(urgency),
                category=str(category),
                user_rating=session.rating or 5.0,
            )
        except ValueError as e:
            raise ValidationError(
                f"Invalid request: {e}", details={"kind": kind, "urgency": urgency}
            ) from e

        with log_session_context(session.username, request_id=request.id):
            self._registry.add_global_request(request)
            logger.info(f"Raised {request.kind.value} request for ${request.amount:.2f}")
            self._sync.sync_with_other_devices(session, force=True)

        return request

    def delete_request(self, session: UserSession | None, request_id: int) -> bool:
        """Withdraw one of the current user's own requests."""
        session = require_session(session)
        for request in self._registry.get_all_requests():
            if request.id == request_id and request.requester != session.username:
                raise ValidationError(
                    "Only the requester can delete a request", details={"request_id": request_id}
                )

        with log_session_context(session.username, request_id=request_id):
            removed = self._registry.remove_global_request(request_id)
            self._sync.sync_with_other_devices(session, force=True)
        return removed

    def find_request(self, request_id: int) -> Request | None:
        for request in self._registry.get_all_requests():
            if request.id == request_id:
                return request
        return None

    def outstanding_entries(self, session: UserSession | None) -> list[RequestEntry]:
        """Other users' requests, nearby ones first, each with its badges."""
        session = require_session(session)
        entries = []
        for ranked in self._proximity.outstanding_requests(session.location, session.username):
            band = (
                None
                if ranked.distance_m is None
                else self._proximity.proximity_band(ranked.distance_m)
            )
            entries.append(
                RequestEntry(
                    request=ranked.request,
                    distance_m=ranked.distance_m,
                    in_range=ranked.in_range,
                    band=band,
                    is_recent=self.is_recent_request(ranked.request),
                    from_new_user=self.is_from_newly_logged_in_user(ranked.request),
                )
            )
        return entries

    def badge_count(self, session: UserSession | None) -> int:
        if session is None:
            return 0
        return sum(1 for r in self._registry.get_all_requests() if r.requester != session.username)

    def is_recent_request(self, request: Request) -> bool:
        return self._clock.now_ms() - to_epoch_ms(request.timestamp) < RECENT_REQUEST_MS

    def is_from_newly_logged_in_user(self, request: Request) -> bool:
        logins = self._registry.get_recent_logins(
            self._clock.now_ms(), self._recent_login_window_ms
        )
        login = next((entry for entry in logins if entry.username == request.requester), None)
        if login is None:
            return False
        return to_epoch_ms(request.timestamp) - login.timestamp < self._new_user_request_window_ms

    def request_analytics(self, session: UserSession | None) -> RequestAnalytics:
        """Counts and amounts over other users' requests."""
        session = require_session(session)
        others = [r for r in self._registry.get_all_requests() if r.requester != session.username]
        if not others:
            return RequestAnalytics()

        total = sum(r.amount for r in others)
        return RequestAnalytics(
            total_requests=len(others),
            by_kind=dict(Counter(r.kind.value for r in others)),
            by_urgency=dict(Counter(r.urgency.value for r in others)),
            total_amount=total,
            average_amount=total / len(others),
        )

    def complete_request(
        self, session: UserSession | None, request_id: int, rating: int | None = 5
    ) -> Transaction:
        """Fulfil another user's request and append it to the history."""
        session = require_session(session)
        request = self.find_request(request_id)
        if request is None:
            raise ValidationError("Request no longer available", details={"request_id": request_id})
        if request.requester == session.username:
            raise ValidationError(
                "Cannot fulfil your own request", details={"request_id": request_id}
            )

        txn = Transaction(
            id=self._ids.next_txn_id(),
            amount=request.amount,
            kind=request.kind.value,
            requester=request.requester,
            responder=session.username,
            timestamp=self._clock.now(),
            rating=rating,
        )
        with log_session_context(session.username, request_id=request_id):
            self._registry.add_transaction(txn)
            logger.info(f"Completed request from {request.requester} ({txn.id})")
        return txn

