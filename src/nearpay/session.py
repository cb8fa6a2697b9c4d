"""Per-login state of the single user persona."""

from dataclasses import dataclass
from datetime import datetime

from nearpay.geo.location import FallbackLocationProvider, StaticLocationProvider
from nearpay.models import ExternalUser, Location


@dataclass(frozen=True)
class DetectedExternalUser:
    user: ExternalUser
    distance_m: float
    detected_at: datetime


class UserSession:
    """The logged-in persona: identity plus a position with fallback.

    ``location`` never raises; when no fix has been set the fallback
    coordinate is returned so the rest of the simulation can proceed.
    """

    def __init__(
        self,
        username: str,
        phone: str = "",
        rating: float = 5.0,
        completed_transactions: int = 0,
        location: Location | None = None,
        fallback: Location | None = None,
    ):
        if not username:
            raise ValueError("username is required")
        self.username = username
        self.phone = phone
        self.rating = rating
        self.completed_transactions = completed_transactions
        self._fix = StaticLocationProvider(location)
        self._provider = (
            FallbackLocationProvider(self._fix, fallback)
            if fallback is not None
            else FallbackLocationProvider(self._fix)
        )
        self.detected_external_users: dict[str, DetectedExternalUser] = {}

    @property
    def location(self) -> Location:
        return self._provider.current_location()

    @property
    def fix(self) -> Location | None:
        """The last real position fix, without fallback substitution."""
        return self._fix.location

    @property
    def using_fallback_location(self) -> bool:
        return self._provider.using_fallback

    def set_location(self, location: Location | None) -> None:
        self._fix.set_location(location)

    def remember_external_user(self, detected: DetectedExternalUser) -> None:
        self.detected_external_users[detected.user.username] = detected
