"""Input checks shared by the request and transfer services."""

import math

from nearpay.core.exceptions import InvalidAmountError, NotLoggedInError
from nearpay.session import UserSession


def require_session(session: UserSession | None) -> UserSession:
    if session is None:
        raise NotLoggedInError("Log in to continue")
    return session


def parse_amount(amount: float | str | None) -> float:
    """Parse a form amount; anything that is not a positive number is rejected."""
    try:
        value = float(amount)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise InvalidAmountError("Amount must be a number", details={"amount": amount}) from e
    if not math.isfinite(value):
        raise InvalidAmountError("Amount must be a finite number", details={"amount": amount})
    if value <= 0:
        raise InvalidAmountError("Amount must be greater than zero", details={"amount": amount})
    return value
