"""Current-location providers with a fixed fallback coordinate."""

import logging
from typing import Protocol

from nearpay.core.exceptions import LocationUnavailableError
from nearpay.models import Location

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_LOCATION = Location(lat=16.922251, lng=82.000117)


class LocationProvider(Protocol):
    def current_location(self) -> Location: ...


class StaticLocationProvider:
    """Returns whatever position was last set; raises when none is known."""

    def __init__(self, location: Location | None = None):
        self._location = location

    @property
    def location(self) -> Location | None:
        return self._location

    def set_location(self, location: Location | None) -> None:
        self._location = location

    def current_location(self) -> Location:
        if self._location is None:
            raise LocationUnavailableError("No position fix available")
        return self._location


class FallbackLocationProvider:
    """Wraps a provider and substitutes a fixed coordinate on failure."""

    def __init__(
        self,
        inner: LocationProvider,
        fallback: Location = DEFAULT_FALLBACK_LOCATION,
    ):
        self._inner = inner
        self._fallback = fallback
        self._using_fallback = False

    @property
    def using_fallback(self) -> bool:
        return self._using_fallback

    def current_location(self) -> Location:
        try:
            location = self._inner.current_location()
        except LocationUnavailableError as e:
            if not self._using_fallback:
                logger.warning(
                    f"Location unavailable ({e.message}), using fallback "
                    f"{self._fallback.lat:.6f},{self._fallback.lng:.6f}"
                )
            self._using_fallback = True
            return self._fallback
        self._using_fallback = False
        return location
