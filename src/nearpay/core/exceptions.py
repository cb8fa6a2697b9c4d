"""Exception hierarchy for the proximity exchange simulation."""

from typing import Any


class NearpayError(Exception):
    """Base exception for all nearpay errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StorageError(NearpayError):
    """Writing to the backing key/value store failed."""

    pass


class LocationUnavailableError(NearpayError):
    """A location provider could not produce a position."""

    pass


class ValidationError(NearpayError):
    """Base class for named rejections surfaced to the caller."""

    pass


class MissingFieldError(ValidationError):
    """A required field was empty or absent."""

    pass


class InvalidAmountError(ValidationError):
    """Amount is not a positive number."""

    pass


class RecipientOutOfRangeError(ValidationError):
    """Transfer recipient is not within the proximity radius."""

    pass


class InvalidRatingError(ValidationError):
    """Rating is not a whole number from 1 to 5, or targets the rater."""

    pass


class LocationRequiredError(ValidationError):
    """Operation needs the current location but none is set."""

    pass


class NotLoggedInError(ValidationError):
    """Operation needs a logged-in user."""

    pass
