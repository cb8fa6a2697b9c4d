"""SimPy processes fabricating activity from other devices."""

import logging
from collections.abc import Callable, Generator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import simpy
from simpy.events import Initialize

from nearpay.core.clock import Clock
from nearpay.fixtures import REQUEST_CATEGORIES, REQUEST_DESCRIPTIONS, DemoCatalogue
from nearpay.models import (
    ExternalUser,
    Location,
    RecentLogin,
    Request,
    RequestKind,
    Urgency,
    User,
)
from nearpay.registry import SharedRegistry
from nearpay.session import UserSession
from nearpay.simulation.event_source import EventSource
from nearpay.simulation.ids import IdAllocator
from nearpay.simulation.statistics import SimulationStatistics
from nearpay.sync import SyncEngine

if TYPE_CHECKING:
    from nearpay.settings import Settings

logger = logging.getLogger(__name__)

Range = tuple[float, float]


@dataclass(frozen=True)
class DriverTimings:
    """Cadences (simulated seconds) and odds of fabricated events."""

    sync_interval: float = 3.0
    movement_interval: float = 15.0
    movement_jitter_deg: float = 0.0001
    location_drift_interval: float = 30.0
    proximity_check_interval: float = 10.0
    external_detection_interval: float = 10.0
    promotion_delay: Range = (5.0, 15.0)
    login_first_delay: Range = (10.0, 30.0)
    login_interval: Range = (30.0, 60.0)
    login_request_chance: float = 0.7
    login_request_delay: Range = (5.0, 15.0)
    external_first_delay: Range = (15.0, 45.0)
    external_interval: Range = (45.0, 90.0)
    external_request_chance: float = 0.8
    external_request_delay: Range = (5.0, 20.0)
    external_distance_m: Range = (100.0, 600.0)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DriverTimings":
        sim = settings.simulation
        return cls(
            sync_interval=settings.sync.interval_seconds,
            movement_interval=sim.movement_interval_seconds,
            movement_jitter_deg=sim.movement_jitter_deg,
            location_drift_interval=sim.location_drift_interval_seconds,
            proximity_check_interval=sim.proximity_check_interval_seconds,
            external_detection_interval=sim.external_detection_interval_seconds,
        )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def offset_location(location: Location, d_lat: float, d_lng: float) -> Location:
    return Location(
        lat=_clamp(location.lat + d_lat, -90.0, 90.0),
        lng=_clamp(location.lng + d_lng, -180.0, 180.0),
    )


class SimulationDriver:
    """Runs the periodic fabrication processes for one logged-in session.

    All randomness comes from the injected EventSource. ``stop()`` interrupts
    every process so no further timer fires after logout.
    """

    def __init__(
        self,
        env: simpy.Environment,
        session: UserSession,
        catalogue: DemoCatalogue,
        registry: SharedRegistry,
        sync: SyncEngine,
        clock: Clock,
        source: EventSource,
        ids: IdAllocator,
        timings: DriverTimings | None = None,
    ):
        self._env = env
        self._session = session
        self._catalogue = catalogue
        self._registry = registry
        self._sync = sync
        self._clock = clock
        self._source = source
        self._ids = ids
        self._timings = timings or DriverTimings()
        self._processes: list[simpy.Process] = []
        self._running = False
        self.statistics = SimulationStatistics()

    @property
    def running(self) -> bool:
        return self._running

    @property
    def timings(self) -> DriverTimings:
        return self._timings

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        t = self._timings
        self._spawn(self._every(t.sync_interval, self.sync_tick))
        self._spawn(self._every(t.movement_interval, self.move_users))
        self._spawn(self._every(t.location_drift_interval, self.drift_own_location))
        self._spawn(self._every(t.proximity_check_interval, self.check_proximity_requests))
        self._spawn(self._every(t.external_detection_interval, self.detect_external_users))
        self._spawn(self._login_loop())
        self._spawn(self._external_login_loop())
        self.promote_demo_requests()
        logger.info(f"Simulation driver started for {self._session.username}")

    def stop(self) -> None:
        """Interrupt every pending process."""
        if not self._running:
            return
        self._running = False
        for process in self._processes:
            # unstarted processes see _running on their first wake-up instead
            if (
                process.is_alive
                and process is not self._env.active_process
                and not isinstance(process.target, Initialize)
            ):
                process.interrupt("stopped")
        self._processes.clear()
        logger.info(f"Simulation driver stopped for {self._session.username}")

    # -- periodic work -------------------------------------------------------

    def sync_tick(self) -> None:
        report = self._sync.sync_with_other_devices(self._session)
        self.statistics.record_sync(report.skipped)

    def move_users(self) -> None:
        """Jitter every synthetic user's position and refresh ``last_seen``."""
        span = self._timings.movement_jitter_deg
        now = self._clock.now()
        for user in self._catalogue.users:
            if user.username == self._session.username:
                continue
            moved = user.model_copy(
                update={
                    "location": offset_location(
                        user.location, self._source.jitter(span), self._source.jitter(span)
                    ),
                    "last_seen": now,
                }
            )
            self._catalogue.replace_user(moved)
        self.statistics.movement_ticks += 1

    def drift_own_location(self) -> None:
        """Nudge the user's own fix, when one exists, by the same offset on both axes."""
        fix = self._session.fix
        if fix is None:
            return
        change = self._source.jitter(self._timings.movement_jitter_deg)
        self._session.set_location(offset_location(fix, change, change))

    def check_proximity_requests(self) -> None:
        if self._sync.check_proximity_requests(self._session) is not None:
            self.statistics.proximity_alerts += 1

    def detect_external_users(self) -> None:
        self.statistics.external_detections += self._sync.detect_external_users(self._session)

    # -- fabricated events ---------------------------------------------------

    def promote_demo_requests(self) -> int:
        """Schedule fixture requests not yet in the registry for delayed insertion."""
        known = {r.id for r in self._registry.get_all_requests()}
        scheduled = 0
        for request in self._catalogue.sample_requests:
            if request.id in known:
                continue
            delay = self._source.uniform(*self._timings.promotion_delay)
            self._spawn(self._after(delay, self._promote, request))
            scheduled += 1
        return scheduled

    def simulate_other_device_login(self) -> User | None:
        """Record a login of a random synthetic user and check it immediately."""
        candidates = [u for u in self._catalogue.users if u.username != self._session.username]
        if not candidates:
            return None
        user = self._source.choice(candidates)
        self._registry.record_login(
            RecentLogin(
                username=user.username,
                location=user.location,
                timestamp=self._clock.now_ms(),
                device_id=self._source.device_id(),
            )
        )
        self.statistics.logins_simulated += 1
        logger.debug(f"Simulated login from {user.username}")
        self._sync.check_new_user_logins(self._session)
        return user

    def simulate_external_login(self) -> ExternalUser | None:
        """Report a random external user at a random in-range distance."""
        candidates = self._catalogue.external_users
        if not candidates:
            return None
        user = self._source.choice(candidates)
        distance = self._source.uniform(*self._timings.external_distance_m)
        self._sync.handle_external_user_in_range(self._session, user, distance)
        self.statistics.external_logins_simulated += 1
        logger.debug(f"Simulated external login from {user.username}")
        return user

    def request_from_user(self, user: User) -> Request:
        """Manufacture a random request attributed to ``user`` and publish it.

        The user is told about it when the requester is within range.
        """
        description = self._source.choice(REQUEST_DESCRIPTIONS)
        amount = round(self._source.uniform(5.0, 55.0) * 100) / 100
        extra: dict[str, Any] = {}
        if isinstance(user, ExternalUser):
            description = f"External request from {user.username} - {description}"
            extra = {
                "is_external": True,
                "device_type": user.device_type,
                "login_source": user.login_source,
            }
        else:
            description = f"Request from {user.username} - {description}"

        request = Request(
            id=self._ids.next_id(),
            amount=amount,
            kind=self._source.choice(list(RequestKind)),
            description=description,
            requester=user.username,
            timestamp=self._clock.now(),
            location=user.location,
            urgency=self._source.choice(list(Urgency)),
            category=self._source.choice(REQUEST_CATEGORIES),
            user_rating=user.rating,
            **extra,
        )
        self._registry.add_global_request(request)
        self.statistics.record_request(external=isinstance(user, ExternalUser))
        if self._sync.announce_request(self._session, request):
            self.statistics.request_alerts += 1
        logger.debug(f"Generated request {request.id} from {user.username}")
        return request

    # -- process plumbing ----------------------------------------------------

    def _spawn(self, generator: Generator[Any, Any]) -> simpy.Process:
        process = self._env.process(generator)
        self._processes = [p for p in self._processes if p.is_alive]
        self._processes.append(process)
        return process

    def _every(self, interval: float, action: Callable[[], Any]) -> Generator[Any, Any]:
        try:
            while True:
                yield self._env.timeout(interval)
                if not self._running:
                    return
                action()
        except simpy.Interrupt:
            return

    def _after(
        self, delay: float, action: Callable[..., Any], *args: Any
    ) -> Generator[Any, Any]:
        try:
            yield self._env.timeout(delay)
            if self._running:
                action(*args)
        except simpy.Interrupt:
            return

    def _promote(self, request: Request) -> None:
        if self._registry.add_global_request(request):
            self._ids.observe(request.id)
            self.statistics.requests_promoted += 1

    def _current_user(self, username: str) -> User | None:
        return self._catalogue.find_user(username)

    def _login_loop(self) -> Generator[Any, Any]:
        t = self._timings
        try:
            yield self._env.timeout(self._source.uniform(*t.login_first_delay))
            while True:
                if not self._running:
                    return
                user = self.simulate_other_device_login()
                if user is not None and self._source.chance(t.login_request_chance):
                    delay = self._source.uniform(*t.login_request_delay)
                    self._spawn(self._after(delay, self._request_from, user.username))
                yield self._env.timeout(self._source.uniform(*t.login_interval))
        except simpy.Interrupt:
            return

    def _external_login_loop(self) -> Generator[Any, Any]:
        t = self._timings
        try:
            yield self._env.timeout(self._source.uniform(*t.external_first_delay))
            while True:
                if not self._running:
                    return
                user = self.simulate_external_login()
                if user is not None and self._source.chance(t.external_request_chance):
                    delay = self._source.uniform(*t.external_request_delay)
                    self._spawn(self._after(delay, self._request_from, user.username))
                yield self._env.timeout(self._source.uniform(*t.external_interval))
        except simpy.Interrupt:
            return

    def _request_from(self, username: str) -> None:
        user = self._current_user(username)
        if user is not None:
            self.request_from_user(user)
