from nearpay.core.clock import Clock, ManualClock, SimClock
from nearpay.core.exceptions import (
    InvalidAmountError,
    InvalidRatingError,
    LocationRequiredError,
    LocationUnavailableError,
    MissingFieldError,
    NearpayError,
    NotLoggedInError,
    RecipientOutOfRangeError,
    StorageError,
    ValidationError,
)

__all__ = [
    "Clock",
    "ManualClock",
    "SimClock",
    "NearpayError",
    "StorageError",
    "LocationUnavailableError",
    "ValidationError",
    "MissingFieldError",
    "InvalidAmountError",
    "InvalidRatingError",
    "RecipientOutOfRangeError",
    "LocationRequiredError",
    "NotLoggedInError",
]
