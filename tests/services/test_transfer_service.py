import pytest

from nearpay.core.exceptions import (
    InvalidAmountError,
    MissingFieldError,
    NotLoggedInError,
    RecipientOutOfRangeError,
)
from nearpay.fixtures import DEMO_CENTER
from nearpay.models import NotificationKind
from nearpay.notifications import NotificationFeed
from nearpay.proximity import ProximityBand
from nearpay.registry import SharedRegistry
from nearpay.services import TransferService
from nearpay.session import UserSession
from tests.factories import north_of


@pytest.mark.unit
class TestCandidates:
    def test_candidates_exclude_self(
        self, transfer_service: TransferService, session: UserSession
    ) -> None:
        names = [c.username for c in transfer_service.transfer_candidates(session)]
        assert "DemoUser" not in names
        assert names[0] == "John Doe"
        assert len(names) == 9

    def test_preview(self, transfer_service: TransferService, session: UserSession) -> None:
        preview = transfer_service.preview(session, "Jane Smith", "7.5")
        assert preview is not None
        assert preview.amount == 7.5
        assert preview.distance_m == 0
        assert preview.band is ProximityBand.NEAR
        assert preview.rating == 4.9

    def test_preview_out_of_range(
        self, transfer_service: TransferService, session: UserSession
    ) -> None:
        session.set_location(north_of(DEMO_CENTER, 5000))
        assert transfer_service.preview(session, "Jane Smith", 5) is None


@pytest.mark.unit
class TestSubmitTransfer:
    def test_successful_transfer(
        self,
        transfer_service: TransferService,
        session: UserSession,
        registry: SharedRegistry,
        feed: NotificationFeed,
    ) -> None:
        transfer = transfer_service.submit_transfer(session, "Alex Chen", "15", reason="Lunch")

        assert transfer.sender == "DemoUser"
        assert transfer.recipient == "Alex Chen"
        assert transfer.amount == 15.0
        assert transfer.status == "completed"
        assert registry.get_proximity_transfers() == [transfer]

        txn = registry.get_transaction_history()[0]
        assert txn.kind == "proximity_transfer"
        assert txn.requester == "DemoUser"
        assert txn.responder == "Alex Chen"
        assert feed.items[-1].kind is NotificationKind.TRANSFER_COMPLETED

    def test_recipient_moved_out_of_range(
        self,
        transfer_service: TransferService,
        session: UserSession,
        registry: SharedRegistry,
    ) -> None:
        candidates = transfer_service.transfer_candidates(session)
        assert "John Doe" in [c.username for c in candidates]

        session.set_location(north_of(DEMO_CENTER, 800))

        with pytest.raises(RecipientOutOfRangeError) as exc_info:
            transfer_service.submit_transfer(session, "John Doe", 10)

        assert exc_info.value.details == {"recipient": "John Doe", "radius_m": 700.0}
        assert registry.get_proximity_transfers() == []
        assert len(registry.get_transaction_history()) == 0

    def test_unknown_recipient_out_of_range(
        self, transfer_service: TransferService, session: UserSession
    ) -> None:
        with pytest.raises(RecipientOutOfRangeError):
            transfer_service.submit_transfer(session, "Nobody", 10)

    def test_cannot_transfer_to_self(
        self, transfer_service: TransferService, session: UserSession
    ) -> None:
        with pytest.raises(RecipientOutOfRangeError):
            transfer_service.submit_transfer(session, "DemoUser", 10)

    @pytest.mark.parametrize("recipient,amount", [("", 10), ("John Doe", ""), (None, None)])
    def test_missing_fields(
        self,
        transfer_service: TransferService,
        session: UserSession,
        recipient: str | None,
        amount: object,
    ) -> None:
        with pytest.raises(MissingFieldError):
            transfer_service.submit_transfer(session, recipient, amount)

    @pytest.mark.parametrize("amount", ["ten", 0, "-1", "inf", "-inf", "1e309"])
    def test_invalid_amount(
        self, transfer_service: TransferService, session: UserSession, amount: object
    ) -> None:
        with pytest.raises(InvalidAmountError):
            transfer_service.submit_transfer(session, "John Doe", amount)

    def test_non_finite_amount_keeps_transfer_history(
        self,
        transfer_service: TransferService,
        session: UserSession,
        registry: SharedRegistry,
    ) -> None:
        first = transfer_service.submit_transfer(session, "Alex Chen", 12)

        with pytest.raises(InvalidAmountError):
            transfer_service.submit_transfer(session, "John Doe", "1e309")

        assert registry.get_proximity_transfers() == [first]
        assert len(registry.get_transaction_history()) == 1

    def test_requires_login(self, transfer_service: TransferService) -> None:
        with pytest.raises(NotLoggedInError):
            transfer_service.submit_transfer(None, "John Doe", 10)
