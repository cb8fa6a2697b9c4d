"""Distance filtering and ranking of users, requests and meetup spots."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from nearpay.fixtures import DemoCatalogue
from nearpay.geo.distance import distance_between
from nearpay.models import Location, Request, SafeMeetupSpot, User
from nearpay.registry import SharedRegistry

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_M = 700.0
DEFAULT_NEAR_M = 100.0
DEFAULT_MID_M = 300.0


class ProximityBand(str, Enum):
    NEAR = "near"
    MID = "mid"
    EDGE = "edge"
    FAR = "far"


@dataclass(frozen=True)
class UserWithDistance:
    user: User
    distance_m: float

    @property
    def username(self) -> str:
        return self.user.username

    @property
    def rounded_distance(self) -> int:
        return round(self.distance_m)


@dataclass(frozen=True)
class RankedRequest:
    request: Request
    distance_m: float | None
    in_range: bool


@dataclass(frozen=True)
class MeetupSpotDistance:
    spot: SafeMeetupSpot
    distance_m: int


class ProximityEngine:
    """Answers "who and what is within the radius of this point".

    Membership is the closed interval [0, radius] in meters. Every listing
    is sorted ascending by distance with a stable sort, so entities at the
    same distance keep their catalogue (or list) order.
    """

    def __init__(
        self,
        catalogue: DemoCatalogue,
        registry: SharedRegistry,
        radius_m: float = DEFAULT_RADIUS_M,
        near_m: float = DEFAULT_NEAR_M,
        mid_m: float = DEFAULT_MID_M,
    ):
        if radius_m < 0:
            raise ValueError("radius_m must be non-negative")
        self._catalogue = catalogue
        self._registry = registry
        self._radius_m = radius_m
        self._near_m = near_m
        self._mid_m = mid_m

    @property
    def radius_m(self) -> float:
        return self._radius_m

    def nearby_users(
        self,
        current: Location,
        exclude_username: str | None,
        radius_m: float | None = None,
        include_external: bool = True,
    ) -> list[UserWithDistance]:
        candidates: list[User] = list(self._catalogue.users)
        if include_external:
            candidates.extend(self._catalogue.external_users)
        return self._within(candidates, current, exclude_username, radius_m)

    def nearby_external_users(
        self,
        current: Location,
        exclude_username: str | None,
        radius_m: float | None = None,
    ) -> list[UserWithDistance]:
        return self._within(self._catalogue.external_users, current, exclude_username, radius_m)

    def find_in_range(
        self,
        username: str,
        current: Location,
        exclude_username: str | None,
        radius_m: float | None = None,
    ) -> UserWithDistance | None:
        """Recompute the candidate list and look up one username in it."""
        for entry in self.nearby_users(current, exclude_username, radius_m):
            if entry.username == username:
                return entry
        return None

    def nearby_requests(
        self,
        current: Location,
        current_username: str | None,
        radius_m: float | None = None,
    ) -> list[RankedRequest]:
        radius = self._radius(radius_m)
        ranked = []
        for request in self._registry.get_all_requests():
            if request.requester == current_username:
                continue
            distance = distance_between(current, request.location)
            if distance <= radius:
                ranked.append(RankedRequest(request=request, distance_m=distance, in_range=True))
        ranked.sort(key=lambda r: r.distance_m)
        return ranked

    def rank_requests(
        self,
        requests: Iterable[Request],
        current: Location | None,
        current_username: str | None,
        radius_m: float | None = None,
    ) -> list[RankedRequest]:
        """Order outstanding requests for display.

        In-range requests come first regardless of recency; each group is
        sorted by ascending distance. Without a location the input order
        is kept and no request is marked in range.
        """
        radius = self._radius(radius_m)
        ranked = []
        for request in requests:
            if request.requester == current_username:
                continue
            if current is None:
                ranked.append(RankedRequest(request=request, distance_m=None, in_range=False))
                continue
            distance = distance_between(current, request.location)
            ranked.append(
                RankedRequest(request=request, distance_m=distance, in_range=distance <= radius)
            )

        if current is not None:
            ranked.sort(key=lambda r: (0 if r.in_range else 1, r.distance_m))
        return ranked

    def outstanding_requests(
        self,
        current: Location | None,
        current_username: str | None,
        radius_m: float | None = None,
    ) -> list[RankedRequest]:
        return self.rank_requests(
            self._registry.get_all_requests(), current, current_username, radius_m
        )

    def safe_meetup_spots(self, current: Location) -> list[MeetupSpotDistance]:
        spots = [
            MeetupSpotDistance(spot=spot, distance_m=round(distance_between(current, spot.location)))
            for spot in self._catalogue.safe_meetup_spots
        ]
        spots.sort(key=lambda s: s.distance_m)
        return spots

    def proximity_band(self, distance_m: float) -> ProximityBand:
        if distance_m <= self._near_m:
            return ProximityBand.NEAR
        if distance_m <= self._mid_m:
            return ProximityBand.MID
        if distance_m <= self._radius_m:
            return ProximityBand.EDGE
        return ProximityBand.FAR

    def _radius(self, radius_m: float | None) -> float:
        return self._radius_m if radius_m is None else radius_m

    def _within(
        self,
        candidates: Iterable[User],
        current: Location,
        exclude_username: str | None,
        radius_m: float | None,
    ) -> list[UserWithDistance]:
        radius = self._radius(radius_m)
        result = []
        for user in candidates:
            if user.username == exclude_username:
                continue
            distance = distance_between(current, user.location)
            if distance <= radius:
                result.append(UserWithDistance(user=user, distance_m=distance))
        result.sort(key=lambda u: u.distance_m)
        logger.debug(f"{len(result)} users within {radius:.0f}m")
        return result
