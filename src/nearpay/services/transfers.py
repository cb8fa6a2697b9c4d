"""Proximity money transfers to users within range."""

import logging
from dataclasses import dataclass

from nearpay.core.clock import Clock
from nearpay.core.exceptions import MissingFieldError, RecipientOutOfRangeError
from nearpay.models import Notification, NotificationKind, Transaction, Transfer
from nearpay.notifications import NotificationFeed
from nearpay.proximity import ProximityBand, ProximityEngine, UserWithDistance
from nearpay.registry import SharedRegistry
from nearpay.services.validation import parse_amount, require_session
from nearpay.session import UserSession
from nearpay.simulation.ids import IdAllocator
from nearpay.sim_logging import log_session_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferPreview:
    recipient: str
    amount: float
    distance_m: int
    band: ProximityBand
    rating: float


class TransferService:
    """Sends money to a nearby user.

    The recipient list shown to the user can be stale; proximity is
    checked again when the transfer is submitted.
    """

    def __init__(
        self,
        registry: SharedRegistry,
        proximity: ProximityEngine,
        feed: NotificationFeed,
        clock: Clock,
        ids: IdAllocator,
    ):
        self._registry = registry
        self._proximity = proximity
        self._feed = feed
        self._clock = clock
        self._ids = ids

    def transfer_candidates(self, session: UserSession | None) -> list[UserWithDistance]:
        """Users who can currently receive a transfer, closest first."""
        session = require_session(session)
        return self._proximity.nearby_users(session.location, session.username)

    def preview(
        self, session: UserSession | None, recipient: str, amount: float | str
    ) -> TransferPreview | None:
        session = require_session(session)
        entry = self._proximity.find_in_range(recipient, session.location, session.username)
        if entry is None:
            return None
        return TransferPreview(
            recipient=recipient,
            amount=parse_amount(amount),
            distance_m=entry.rounded_distance,
            band=self._proximity.proximity_band(entry.distance_m),
            rating=entry.user.rating,
        )

    def submit_transfer(
        self,
        session: UserSession | None,
        recipient: str | None,
        amount: float | str | None,
        reason: str = "",
        description: str = "",
    ) -> Transfer:
        """Validate and record a completed proximity transfer.

        Raises:
            NotLoggedInError: No session.
            MissingFieldError: amount or recipient is empty.
            InvalidAmountError: amount is not a positive number.
            RecipientOutOfRangeError: recipient is no longer within range.
        """
        session = require_session(session)

        if amount is None or amount == "" or not recipient:
            raise MissingFieldError(
                "Please fill in all required fields",
                details={"amount": amount, "recipient": recipient},
            )
        parsed_amount = parse_amount(amount)

        current = session.location
        entry = self._proximity.find_in_range(recipient, current, session.username)
        if entry is None:
            raise RecipientOutOfRangeError(
                "Recipient is not within proximity range",
                details={"recipient": recipient, "radius_m": self._proximity.radius_m},
            )

        now = self._clock.now()
        transfer = Transfer(
            id=self._ids.next_id(),
            amount=parsed_amount,
            sender=session.username,
            recipient=recipient,
            reason=reason,
            description=description,
            timestamp=now,
            sender_location=current,
            recipient_location=entry.user.location,
            distance_m=entry.distance_m,
        )

        with log_session_context(session.username, transfer_id=transfer.id):
            self._registry.add_proximity_transfer(transfer)
            self._registry.add_transaction(
                Transaction(
                    id=self._ids.next_txn_id(),
                    amount=parsed_amount,
                    kind="proximity_transfer",
                    requester=session.username,
                    responder=recipient,
                    timestamp=now,
                )
            )
            logger.info(
                f"Transferred ${parsed_amount:.2f} to {recipient} "
                f"({entry.rounded_distance}m away)"
            )

        self._feed.publish(
            Notification(
                kind=NotificationKind.TRANSFER_COMPLETED,
                message=f"Transfer of ${parsed_amount:.2f} to {recipient} completed",
                subject=recipient,
                timestamp=now,
                distance_m=entry.distance_m,
            )
        )
        return transfer
