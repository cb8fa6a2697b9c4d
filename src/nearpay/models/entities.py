"""Domain entities: users, requests, transfers and transaction history."""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class RequestKind(str, Enum):
    MONEY = "money"
    SERVICE = "service"
    GOODS = "goods"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DeviceType(str, Enum):
    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


class Location(BaseModel):
    """Geographic point in degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)


class User(BaseModel):
    """Synthetic user standing in for another device.

    Only ``location`` and ``last_seen`` change during a run, and only
    through the simulation driver (which swaps in an updated copy).
    """

    model_config = ConfigDict(frozen=True)

    id: int
    username: str = Field(min_length=1)
    phone: str
    location: Location
    rating: float = Field(ge=0.0, le=5.0)
    completed_transactions: int = Field(default=0, ge=0)
    is_online: bool = True
    last_seen: datetime
    is_external: bool = False


class ExternalUser(User):
    """User appearing to log in from another device or credential set."""

    is_external: bool = True
    device_type: DeviceType
    login_source: str = "external_device"


class Request(BaseModel):
    """A money/service/goods request raised by a user.

    Immutable once created; removed from the global list only by id.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    amount: float = Field(gt=0, allow_inf_nan=False)
    kind: RequestKind
    description: str = ""
    requester: str = Field(min_length=1)
    timestamp: datetime
    location: Location
    urgency: Urgency
    category: str = "general"
    is_external: bool = False
    device_type: DeviceType | None = None
    login_source: str | None = None
    user_rating: float | None = Field(default=None, ge=0.0, le=5.0)


class Transfer(BaseModel):
    """A completed proximity money transfer."""

    model_config = ConfigDict(frozen=True)

    id: int
    amount: float = Field(gt=0, allow_inf_nan=False)
    sender: str
    recipient: str
    reason: str = ""
    description: str = ""
    timestamp: datetime
    sender_location: Location
    recipient_location: Location
    distance_m: float = Field(ge=0.0)
    status: Literal["completed"] = "completed"


class Transaction(BaseModel):
    """Append-only history record."""

    model_config = ConfigDict(frozen=True)

    id: str
    amount: float = Field(gt=0, allow_inf_nan=False)
    kind: Literal["money", "service", "goods", "proximity_transfer"]
    requester: str
    responder: str
    status: Literal["completed"] = "completed"
    timestamp: datetime
    rating: int | None = Field(default=None, ge=1, le=5)


class UserRating(BaseModel):
    """One rating left for a user by another user."""

    model_config = ConfigDict(frozen=True)

    rating: int = Field(ge=1, le=5)
    comment: str = ""
    rater: str = Field(min_length=1)
    timestamp: datetime


class SafeMeetupSpot(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    location: Location
    safety: Literal["high", "medium", "low"]


class NearbyPlace(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    distance_m: int = Field(ge=0)
    type: str
