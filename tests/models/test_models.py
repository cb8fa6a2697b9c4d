"""Tests for domain entities and registry records."""

import pytest
from pydantic import ValidationError

from nearpay.models import (
    PENDING_UPDATES_ADAPTER,
    DeviceType,
    Location,
    NewRequestUpdate,
    RecentLogin,
    RemovedRequestUpdate,
    Transaction,
    Transfer,
)
from tests.factories import (
    DEFAULT_TIME,
    make_external_user,
    make_request,
    make_user,
    new_request_update,
    removed_request_update,
)


@pytest.mark.unit
class TestLocation:
    def test_bounds_enforced(self) -> None:
        with pytest.raises(ValidationError):
            Location(lat=91.0, lng=0.0)
        with pytest.raises(ValidationError):
            Location(lat=0.0, lng=-180.5)

    def test_frozen(self) -> None:
        location = Location(lat=1.0, lng=2.0)
        with pytest.raises(ValidationError):
            location.lat = 3.0  # type: ignore[misc]


@pytest.mark.unit
class TestUsers:
    def test_rating_range(self) -> None:
        with pytest.raises(ValidationError):
            make_user(rating=5.1)

    def test_external_user_flags(self) -> None:
        external = make_external_user(device_type=DeviceType.TABLET)
        assert external.is_external is True
        assert external.login_source == "external_device"
        assert make_user().is_external is False


@pytest.mark.unit
class TestRequest:
    def test_amount_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            make_request(amount=0)

    @pytest.mark.parametrize("amount", [float("inf"), float("nan")])
    def test_amount_must_be_finite(self, amount: float) -> None:
        with pytest.raises(ValidationError):
            make_request(amount=amount)

    def test_optional_metadata_defaults(self) -> None:
        request = make_request()
        assert request.is_external is False
        assert request.device_type is None
        assert request.user_rating is None
        assert request.category == "food"

    def test_json_round_trip_keeps_kind_and_urgency(self) -> None:
        request = make_request(kind="service", urgency="high")
        restored = type(request).model_validate_json(request.model_dump_json())
        assert restored == request


@pytest.mark.unit
class TestPendingUpdates:
    def test_discriminated_by_kind(self) -> None:
        raw = [
            new_request_update(make_request(5)).model_dump(mode="json"),
            {"kind": "removed_request", "payload": {"id": 5}, "timestamp": 1},
        ]
        updates = PENDING_UPDATES_ADAPTER.validate_python(raw)

        assert isinstance(updates[0], NewRequestUpdate)
        assert isinstance(updates[1], RemovedRequestUpdate)
        assert updates[1].payload.id == 5

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PENDING_UPDATES_ADAPTER.validate_python(
                [{"kind": "edited_request", "payload": {"id": 1}, "timestamp": 1}]
            )

    def test_removed_payload_only_carries_id(self) -> None:
        update = removed_request_update(7, timestamp=10)
        assert update.model_dump(mode="json") == {
            "kind": "removed_request",
            "payload": {"id": 7},
            "timestamp": 10,
        }


@pytest.mark.unit
class TestRecords:
    def test_recent_login_notification_key(self) -> None:
        login = RecentLogin(
            username="Jane Smith",
            location=Location(lat=1.0, lng=1.0),
            timestamp=1_700_000_000_000,
            device_id="device_abc",
        )
        assert login.notification_key == "Jane Smith:1700000000000"

    def test_transfer_status_is_always_completed(self) -> None:
        with pytest.raises(ValidationError):
            Transfer(
                id=1,
                amount=5.0,
                sender="a",
                recipient="b",
                timestamp=DEFAULT_TIME,
                sender_location=Location(lat=0, lng=0),
                recipient_location=Location(lat=0, lng=0),
                distance_m=0.0,
                status="pending",  # type: ignore[arg-type]
            )

    def test_transfer_distance_non_negative(self) -> None:
        with pytest.raises(ValidationError):
            Transfer(
                id=1,
                amount=5.0,
                sender="a",
                recipient="b",
                timestamp=DEFAULT_TIME,
                sender_location=Location(lat=0, lng=0),
                recipient_location=Location(lat=0, lng=0),
                distance_m=-1.0,
            )

    def test_transaction_rating_range(self) -> None:
        with pytest.raises(ValidationError):
            Transaction(
                id="TXN1",
                amount=1.0,
                kind="money",
                requester="a",
                responder="b",
                timestamp=DEFAULT_TIME,
                rating=6,
            )
