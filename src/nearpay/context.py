"""Application context: owns the registry and wires every engine together."""

import logging
from datetime import UTC, datetime
from typing import Any

import simpy

from nearpay.core.clock import SimClock
from nearpay.db import init_database
from nearpay.fixtures import DEMO_CENTER, DemoCatalogue, build_demo_catalogue
from nearpay.fixtures.faker_provider import create_faker_instance, generate_population
from nearpay.models import Location, RecentLogin
from nearpay.notifications import NotificationFeed
from nearpay.proximity import ProximityEngine
from nearpay.registry import InMemoryStore, KeyValueStore, SharedRegistry, SqliteStore
from nearpay.services import RatingService, RequestService, TransferService
from nearpay.session import UserSession
from nearpay.settings import Settings, get_settings
from nearpay.simulation import (
    DriverTimings,
    EventSource,
    IdAllocator,
    RandomEventSource,
    SimulationDriver,
)
from nearpay.sim_logging import log_session_context
from nearpay.sync import SyncEngine

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> KeyValueStore:
    if settings.storage.backend == "memory":
        return InMemoryStore()
    return SqliteStore(init_database(settings.storage.db_path))


class AppContext:
    """One registry, one catalogue and at most one logged-in session.

    Engines receive the registry explicitly; nothing reaches for shared
    global state. ``login`` starts the simulation driver and ``logout``
    stops it.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        env: simpy.Environment | None = None,
        store: KeyValueStore | None = None,
        source: EventSource | None = None,
        catalogue: DemoCatalogue | None = None,
        start_time: datetime | None = None,
    ):
        self.settings = settings or get_settings()
        self.env = env or simpy.Environment()
        self.clock = SimClock(self.env, start_time or datetime.now(UTC))
        self.source = source or RandomEventSource(self.settings.simulation.seed)

        sync_cfg = self.settings.sync
        prox_cfg = self.settings.proximity

        self.registry = SharedRegistry(
            store if store is not None else create_store(self.settings),
            self.clock,
            recent_login_capacity=sync_cfg.recent_login_capacity,
            external_login_capacity=sync_cfg.external_login_capacity,
        )
        self.catalogue = catalogue or self._build_catalogue()
        self.feed = NotificationFeed()
        self.ids = IdAllocator(self.clock)
        for request in self.registry.get_all_requests():
            self.ids.observe(request.id)
        if not self.registry.get_transaction_history():
            for txn in self.catalogue.transaction_history:
                self.registry.add_transaction(txn)

        self.proximity = ProximityEngine(
            self.catalogue,
            self.registry,
            radius_m=prox_cfg.radius_m,
            near_m=prox_cfg.near_m,
            mid_m=prox_cfg.mid_m,
        )
        self.sync = SyncEngine(
            self.registry,
            self.proximity,
            self.feed,
            self.clock,
            min_interval_ms=sync_cfg.min_interval_ms,
            login_window_ms=sync_cfg.recent_login_window_ms,
            notification_ttl_ms=sync_cfg.notification_ttl_ms,
        )
        self.requests = RequestService(
            self.registry,
            self.proximity,
            self.sync,
            self.clock,
            self.ids,
            recent_login_window_ms=sync_cfg.recent_login_window_ms,
            new_user_request_window_ms=sync_cfg.new_user_request_window_ms,
        )
        self.transfers = TransferService(
            self.registry, self.proximity, self.feed, self.clock, self.ids
        )
        self.ratings = RatingService(self.registry, self.clock)

        self.session: UserSession | None = None
        self.driver: SimulationDriver | None = None

    def _build_catalogue(self) -> DemoCatalogue:
        catalogue = build_demo_catalogue(self.clock.now())
        extra = self.settings.simulation.extra_population
        if extra:
            fake = create_faker_instance(self.settings.simulation.seed)
            catalogue.add_users(
                generate_population(
                    fake,
                    extra,
                    DEMO_CENTER,
                    self.clock.now(),
                    max_offset_m=self.settings.proximity.radius_m * 1.5,
                )
            )
            logger.info(f"Added {extra} generated users to the catalogue")
        return catalogue

    @property
    def logged_in(self) -> bool:
        return self.session is not None

    def login(
        self,
        username: str,
        phone: str = "",
        location: Location | None = None,
        rating: float = 5.0,
        completed_transactions: int = 0,
        start_driver: bool = True,
    ) -> UserSession:
        """Start a session, announce the login to other devices and start the driver."""
        if self.session is not None:
            self.logout()

        session = UserSession(
            username=username,
            phone=phone,
            rating=rating,
            completed_transactions=completed_transactions,
            location=location,
            fallback=self.settings.proximity.fallback_location,
        )
        self.session = session

        with log_session_context(username):
            self.register_login(session)
            self.sync.sync_with_other_devices(session, force=True)

            if start_driver:
                self.driver = SimulationDriver(
                    self.env,
                    session,
                    self.catalogue,
                    self.registry,
                    self.sync,
                    self.clock,
                    self.source,
                    self.ids,
                    DriverTimings.from_settings(self.settings),
                )
                self.driver.start()
            logger.info(f"{username} logged in")

        return session

    def register_login(self, session: UserSession) -> RecentLogin:
        """Record this device's login so other devices can notice it."""
        login = RecentLogin(
            username=session.username,
            location=session.location,
            timestamp=self.clock.now_ms(),
            device_id=self.source.device_id(),
        )
        self.registry.record_login(login)
        self.sync.check_new_user_logins(session)
        return login

    def logout(self) -> None:
        """Stop every timer and drop per-session state."""
        if self.driver is not None:
            self.driver.stop()
            self.driver = None
        if self.session is not None:
            logger.info(f"{self.session.username} logged out")
        self.session = None
        self.feed.clear()

    def reset(self) -> None:
        """Log out and wipe the shared registry."""
        self.logout()
        self.registry.clear()
        logger.info("Demo state reset")

    def run(self, seconds: float) -> None:
        """Advance simulated time by ``seconds``."""
        if seconds <= 0:
            return
        self.env.run(until=self.env.now + seconds)

    def summary(self) -> dict[str, Any]:
        stats = self.driver.statistics.as_dict() if self.driver else {}
        return {
            "simulated_seconds": self.env.now,
            "username": self.session.username if self.session else None,
            "global_requests": len(self.registry.get_all_requests()),
            "pending_updates": len(self.registry.peek_pending_updates()),
            "recent_logins": len(self.registry.get_all_logins()),
            "external_logins": len(self.registry.get_external_logins()),
            "location_count": self.registry.get_location_count(),
            "proximity_transfers": len(self.registry.get_proximity_transfers()),
            "transactions": len(self.registry.get_transaction_history()),
            "notifications": len(self.feed.items),
            **stats,
        }
