from nearpay.models.entities import (
    DeviceType,
    ExternalUser,
    Location,
    NearbyPlace,
    Request,
    RequestKind,
    SafeMeetupSpot,
    Transaction,
    Transfer,
    Urgency,
    User,
    UserRating,
)
from nearpay.models.sync import (
    PENDING_UPDATES_ADAPTER,
    ExternalLogin,
    NewRequestUpdate,
    Notification,
    NotificationKind,
    PendingUpdate,
    RecentLogin,
    RemovedRequestRef,
    RemovedRequestUpdate,
)

__all__ = [
    "DeviceType",
    "ExternalUser",
    "Location",
    "NearbyPlace",
    "Request",
    "RequestKind",
    "SafeMeetupSpot",
    "Transaction",
    "Transfer",
    "Urgency",
    "User",
    "UserRating",
    "PENDING_UPDATES_ADAPTER",
    "ExternalLogin",
    "NewRequestUpdate",
    "Notification",
    "NotificationKind",
    "PendingUpdate",
    "RecentLogin",
    "RemovedRequestRef",
    "RemovedRequestUpdate",
]
