from pathlib import Path

import pytest
import simpy

from nearpay.core.clock import ManualClock, SimClock
from nearpay.fixtures import DEMO_CENTER, DemoCatalogue, build_demo_catalogue
from nearpay.notifications import NotificationFeed
from nearpay.proximity import ProximityEngine
from nearpay.registry import InMemoryStore, SharedRegistry
from nearpay.services import RatingService, RequestService, TransferService
from nearpay.session import UserSession
from nearpay.sim_logging import LogContext
from nearpay.simulation import IdAllocator, SimulationDriver
from nearpay.sync import SyncEngine
from tests.factories import DEFAULT_TIME, ScriptedEventSource


@pytest.fixture(autouse=True)
def clear_log_context():
    """Keep thread-local log fields from leaking between tests."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(DEFAULT_TIME)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def registry(store: InMemoryStore, clock: ManualClock) -> SharedRegistry:
    return SharedRegistry(store, clock)


@pytest.fixture
def catalogue(clock: ManualClock) -> DemoCatalogue:
    return build_demo_catalogue(clock.now())


@pytest.fixture
def proximity(catalogue: DemoCatalogue, registry: SharedRegistry) -> ProximityEngine:
    return ProximityEngine(catalogue, registry)


@pytest.fixture
def feed() -> NotificationFeed:
    return NotificationFeed()


@pytest.fixture
def sync_engine(
    registry: SharedRegistry,
    proximity: ProximityEngine,
    feed: NotificationFeed,
    clock: ManualClock,
) -> SyncEngine:
    return SyncEngine(registry, proximity, feed, clock)


@pytest.fixture
def session() -> UserSession:
    """Logged-in persona standing at the demo center."""
    return UserSession("DemoUser", phone="+1-555-0199", location=DEMO_CENTER)


@pytest.fixture
def ids(clock: ManualClock) -> IdAllocator:
    return IdAllocator(clock)


@pytest.fixture
def temp_sqlite_db(tmp_path: Path) -> str:
    """Path to a fresh SQLite file for registry persistence tests."""
    return str(tmp_path / "registry" / "nearpay.db")


@pytest.fixture
def request_service(
    registry: SharedRegistry,
    proximity: ProximityEngine,
    sync_engine: SyncEngine,
    clock: ManualClock,
    ids: IdAllocator,
) -> RequestService:
    return RequestService(registry, proximity, sync_engine, clock, ids)


@pytest.fixture
def transfer_service(
    registry: SharedRegistry,
    proximity: ProximityEngine,
    feed: NotificationFeed,
    clock: ManualClock,
    ids: IdAllocator,
) -> TransferService:
    return TransferService(registry, proximity, feed, clock, ids)


@pytest.fixture
def rating_service(registry: SharedRegistry, clock: ManualClock) -> RatingService:
    return RatingService(registry, clock)


@pytest.fixture
def sim_env() -> simpy.Environment:
    return simpy.Environment()


@pytest.fixture
def sim_clock(sim_env: simpy.Environment) -> SimClock:
    return SimClock(sim_env, DEFAULT_TIME)


@pytest.fixture
def sim_registry(sim_clock: SimClock) -> SharedRegistry:
    return SharedRegistry(InMemoryStore(), sim_clock)


@pytest.fixture
def sim_catalogue() -> DemoCatalogue:
    return build_demo_catalogue(DEFAULT_TIME)


@pytest.fixture
def sim_feed() -> NotificationFeed:
    return NotificationFeed()


@pytest.fixture
def sim_sync(
    sim_registry: SharedRegistry,
    sim_catalogue: DemoCatalogue,
    sim_feed: NotificationFeed,
    sim_clock: SimClock,
) -> SyncEngine:
    return SyncEngine(sim_registry, ProximityEngine(sim_catalogue, sim_registry), sim_feed, sim_clock)


@pytest.fixture
def driver_factory(
    sim_env: simpy.Environment,
    session: UserSession,
    sim_catalogue: DemoCatalogue,
    sim_registry: SharedRegistry,
    sim_sync: SyncEngine,
    sim_clock: SimClock,
):
    def _create(source: ScriptedEventSource | None = None, **kwargs) -> SimulationDriver:
        return SimulationDriver(
            sim_env,
            session,
            sim_catalogue,
            sim_registry,
            sim_sync,
            sim_clock,
            source or ScriptedEventSource(),
            IdAllocator(sim_clock),
            **kwargs,
        )

    return _create
