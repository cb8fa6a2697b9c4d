"""Records exchanged through the shared registry to fake other devices."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from nearpay.models.entities import DeviceType, Location, Request


class NewRequestUpdate(BaseModel):
    """Another device raised a request."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["new_request"] = "new_request"
    payload: Request
    timestamp: int


class RemovedRequestRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int


class RemovedRequestUpdate(BaseModel):
    """Another device deleted a request."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["removed_request"] = "removed_request"
    payload: RemovedRequestRef
    timestamp: int


PendingUpdate = Annotated[
    NewRequestUpdate | RemovedRequestUpdate,
    Field(discriminator="kind"),
]

PENDING_UPDATES_ADAPTER: TypeAdapter[list[PendingUpdate]] = TypeAdapter(list[PendingUpdate])


class RecentLogin(BaseModel):
    """A simulated login observed from another device."""

    model_config = ConfigDict(frozen=True)

    username: str
    location: Location
    timestamp: int  # epoch millis
    device_id: str

    @property
    def notification_key(self) -> str:
        return f"{self.username}:{self.timestamp}"


class ExternalLogin(BaseModel):
    """Sighting of an external user within range."""

    model_config = ConfigDict(frozen=True)

    username: str
    location: Location
    distance_m: float = Field(ge=0.0)
    timestamp: int  # epoch millis
    device_type: DeviceType
    login_source: str
    rating: float
    completed_transactions: int


class NotificationKind(str, Enum):
    NEW_REQUEST = "new_request"
    REQUEST_FROM_NEARBY_USER = "request_from_nearby_user"
    NEARBY_REQUEST = "nearby_request"
    NEW_USER_NEARBY = "new_user_nearby"
    EXTERNAL_USER_NEARBY = "external_user_nearby"
    EXTERNAL_USER_DETECTED = "external_user_detected"
    TRANSFER_COMPLETED = "transfer_completed"


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: NotificationKind
    message: str
    subject: str
    timestamp: datetime
    distance_m: float | None = None
