import pytest

from nearpay.core.clock import ManualClock
from nearpay.fixtures import DEMO_CENTER
from nearpay.models import NotificationKind, RecentLogin
from nearpay.notifications import NotificationFeed, View
from nearpay.registry import SharedRegistry
from nearpay.session import UserSession
from nearpay.sync import SyncEngine
from tests.factories import (
    make_external_user,
    make_request,
    new_request_update,
    north_of,
    removed_request_update,
)


def _kinds(feed: NotificationFeed) -> list[NotificationKind]:
    return [n.kind for n in feed.items]


@pytest.mark.unit
class TestSyncThrottle:
    def test_first_sync_runs(
        self, sync_engine: SyncEngine, session: UserSession, registry: SharedRegistry
    ) -> None:
        report = sync_engine.sync_with_other_devices(session)
        assert report.skipped is False
        assert registry.get_last_sync_ms() is not None

    def test_skipped_within_min_interval(
        self,
        sync_engine: SyncEngine,
        session: UserSession,
        registry: SharedRegistry,
        clock: ManualClock,
    ) -> None:
        sync_engine.sync_with_other_devices(session)
        registry.enqueue_update(new_request_update(make_request(5)))
        clock.advance(ms=3000)

        report = sync_engine.sync_with_other_devices(session)

        assert report.skipped is True
        assert len(registry.peek_pending_updates()) == 1

    def test_runs_after_min_interval(
        self, sync_engine: SyncEngine, session: UserSession, clock: ManualClock
    ) -> None:
        sync_engine.sync_with_other_devices(session)
        clock.advance(ms=3001)
        assert sync_engine.sync_with_other_devices(session).skipped is False

    def test_force_ignores_interval(self, sync_engine: SyncEngine, session: UserSession) -> None:
        sync_engine.sync_with_other_devices(session)
        assert sync_engine.sync_with_other_devices(session, force=True).skipped is False

    def test_sync_without_session_still_merges(
        self, sync_engine: SyncEngine, registry: SharedRegistry, feed: NotificationFeed
    ) -> None:
        registry.enqueue_update(new_request_update(make_request(5)))

        report = sync_engine.sync_with_other_devices(None)

        assert report.merge.added_ids == (5,)
        assert "(Unknown away)" in feed.items[0].message


@pytest.mark.unit
class TestMerge:
    def test_new_then_removed_leaves_nothing(
        self, sync_engine: SyncEngine, session: UserSession, registry: SharedRegistry
    ) -> None:
        registry.enqueue_update(new_request_update(make_request(5)))
        registry.enqueue_update(removed_request_update(5))

        report = sync_engine.sync_with_other_devices(session)

        assert registry.get_all_requests() == []
        assert report.merge.added_ids == (5,)
        assert report.merge.removed_ids == (5,)
        assert registry.peek_pending_updates() == []

    def test_duplicate_new_request_kept_once(
        self, sync_engine: SyncEngine, session: UserSession, registry: SharedRegistry
    ) -> None:
        registry.enqueue_update(new_request_update(make_request(5)))
        registry.enqueue_update(new_request_update(make_request(5)))

        sync_engine.sync_with_other_devices(session)

        assert [r.id for r in registry.get_all_requests()] == [5]

    def test_update_for_request_already_present_is_noop(
        self,
        sync_engine: SyncEngine,
        session: UserSession,
        registry: SharedRegistry,
        feed: NotificationFeed,
    ) -> None:
        registry.add_global_request(make_request(5))

        report = sync_engine.sync_with_other_devices(session)

        assert report.drained == 1
        assert report.changed is False
        assert [r.id for r in registry.get_all_requests()] == [5]
        assert NotificationKind.NEW_REQUEST not in _kinds(feed)

    def test_removal_of_unknown_id_is_noop(
        self, sync_engine: SyncEngine, session: UserSession, registry: SharedRegistry
    ) -> None:
        registry.save_all_requests([make_request(1)])
        registry.enqueue_update(removed_request_update(99))

        report = sync_engine.sync_with_other_devices(session)

        assert report.changed is False
        assert [r.id for r in registry.get_all_requests()] == [1]

    def test_updates_applied_in_order(self, sync_engine: SyncEngine, registry: SharedRegistry) -> None:
        result = sync_engine.apply_updates(
            [
                new_request_update(make_request(1)),
                new_request_update(make_request(2)),
                removed_request_update(1),
                new_request_update(make_request(3)),
            ]
        )
        assert result.added_ids == (1, 2, 3)
        assert [r.id for r in registry.get_all_requests()] == [2, 3]

    def test_new_request_notification_with_distance(
        self, sync_engine: SyncEngine, session: UserSession, feed: NotificationFeed
    ) -> None:
        sync_engine.apply_updates(
            [new_request_update(make_request(5, location=north_of(DEMO_CENTER, 120)))], session
        )
        assert feed.items[0].kind is NotificationKind.NEW_REQUEST
        assert feed.items[0].message == "New request nearby: $20.00 from John Doe (120m away)"

    def test_change_triggers_view_refresh(
        self, sync_engine: SyncEngine, session: UserSession, registry: SharedRegistry, feed: NotificationFeed
    ) -> None:
        feed.set_active_view(View.TRANSFER)
        registry.enqueue_update(new_request_update(make_request(5)))

        sync_engine.sync_with_other_devices(session)

        assert feed.badge_deferred
        assert feed.list_deferred

    def test_no_change_no_refresh(
        self, sync_engine: SyncEngine, session: UserSession, feed: NotificationFeed
    ) -> None:
        sync_engine.sync_with_other_devices(session)
        assert not feed.badge_deferred


@pytest.mark.unit
class TestLoginNotifications:
    def test_nearby_login_notified_once(
        self,
        sync_engine: SyncEngine,
        session: UserSession,
        registry: SharedRegistry,
        feed: NotificationFeed,
        clock: ManualClock,
    ) -> None:
        registry.record_login(
            RecentLogin(
                username="Jane Smith",
                location=north_of(DEMO_CENTER, 200),
                timestamp=clock.now_ms(),
                device_id="device_a",
            )
        )

        assert sync_engine.check_new_user_logins(session) == 1
        assert sync_engine.check_new_user_logins(session) == 0
        assert feed.items[0].message == (
            "New user nearby: Jane Smith logged in from another device (200m away)"
        )

    def test_own_and_far_logins_ignored(
        self,
        sync_engine: SyncEngine,
        session: UserSession,
        registry: SharedRegistry,
        clock: ManualClock,
    ) -> None:
        now = clock.now_ms()
        registry.record_login(RecentLogin(username="DemoUser", location=DEMO_CENTER, timestamp=now, device_id="d1"))
        registry.record_login(
            RecentLogin(
                username="Far Away",
                location=north_of(DEMO_CENTER, 1500),
                timestamp=now,
                device_id="d2",
            )
        )
        assert sync_engine.check_new_user_logins(session) == 0

    def test_stale_logins_ignored(
        self,
        sync_engine: SyncEngine,
        session: UserSession,
        registry: SharedRegistry,
        clock: ManualClock,
    ) -> None:
        registry.record_login(
            RecentLogin(
                username="Jane Smith", location=DEMO_CENTER, timestamp=clock.now_ms(), device_id="d"
            )
        )
        clock.advance(301)
        assert sync_engine.check_new_user_logins(session) == 0

    def test_new_login_of_same_user_notifies_again(
        self,
        sync_engine: SyncEngine,
        session: UserSession,
        registry: SharedRegistry,
        clock: ManualClock,
    ) -> None:
        registry.record_login(
            RecentLogin(username="Jane Smith", location=DEMO_CENTER, timestamp=clock.now_ms(), device_id="d")
        )
        sync_engine.check_new_user_logins(session)
        clock.advance(10)
        registry.record_login(
            RecentLogin(username="Jane Smith", location=DEMO_CENTER, timestamp=clock.now_ms(), device_id="d")
        )
        assert sync_engine.check_new_user_logins(session) == 1


@pytest.mark.unit
class TestExternalUsers:
    def test_handle_external_user_suppressed_for_five_minutes(
        self,
        sync_engine: SyncEngine,
        session: UserSession,
        registry: SharedRegistry,
        feed: NotificationFeed,
        clock: ManualClock,
    ) -> None:
        user = make_external_user("ExternalUser9")

        assert sync_engine.handle_external_user_in_range(session, user, 150.4) is True
        clock.advance(299)
        assert sync_engine.handle_external_user_in_range(session, user, 150.4) is False
        clock.advance(1)
        assert sync_engine.handle_external_user_in_range(session, user, 150.4) is True

        assert registry.get_location_count() == 2
        assert len(registry.get_external_logins()) == 2
        assert feed.items[0].message == (
            "External user nearby: ExternalUser9 logged in with different credentials (150m away)"
        )

    def test_handle_external_requires_session(self, sync_engine: SyncEngine) -> None:
        assert sync_engine.handle_external_user_in_range(None, make_external_user(), 10.0) is False

    def test_sync_checks_catalogue_external_users(
        self,
        sync_engine: SyncEngine,
        session: UserSession,
        feed: NotificationFeed,
    ) -> None:
        report = sync_engine.sync_with_other_devices(session)

        assert report.external_notifications == 3
        assert _kinds(feed).count(NotificationKind.EXTERNAL_USER_NEARBY) == 3

    def test_detect_external_users(
        self,
        sync_engine: SyncEngine,
        session: UserSession,
        registry: SharedRegistry,
        feed: NotificationFeed,
    ) -> None:
        assert sync_engine.detect_external_users(session) == 3
        assert sync_engine.detect_external_users(session) == 0

        assert set(session.detected_external_users) == {
            "ExternalUser1",
            "ExternalUser2",
            "ExternalUser3",
        }
        assert registry.get_location_count() == 3
        assert _kinds(feed) == [NotificationKind.EXTERNAL_USER_DETECTED] * 3


@pytest.mark.unit
class TestProximityRequests:
    def test_latest_in_range_request_announced(
        self,
        sync_engine: SyncEngine,
        session: UserSession,
        registry: SharedRegistry,
        feed: NotificationFeed,
        clock: ManualClock,
    ) -> None:
        registry.add_global_request(make_request(1, timestamp=clock.now()))
        clock.advance(60)
        registry.add_global_request(make_request(2, requester="Jane Smith", timestamp=clock.now()))
        clock.advance(60)
        registry.add_global_request(
            make_request(3, timestamp=clock.now(), location=north_of(DEMO_CENTER, 2000))
        )

        request = sync_engine.check_proximity_requests(session)

        assert request is not None
        assert request.id == 2
        assert feed.items[-1].kind is NotificationKind.NEARBY_REQUEST

    def test_none_when_nothing_nearby(self, sync_engine: SyncEngine, session: UserSession) -> None:
        assert sync_engine.check_proximity_requests(session) is None
        assert sync_engine.check_proximity_requests(None) is None


@pytest.mark.unit
class TestAnnounceRequest:
    def test_in_range_request_announced(
        self, sync_engine: SyncEngine, session: UserSession, feed: NotificationFeed
    ) -> None:
        request = make_request(7, amount=12.5, location=north_of(DEMO_CENTER, 400))

        assert sync_engine.announce_request(session, request) is True

        item = feed.items[-1]
        assert item.kind is NotificationKind.REQUEST_FROM_NEARBY_USER
        assert item.message.startswith("New request from nearby user: $12.50 from John Doe (")
        assert item.distance_m == pytest.approx(400, abs=1)

    def test_external_request_labelled(
        self, sync_engine: SyncEngine, session: UserSession, feed: NotificationFeed
    ) -> None:
        request = make_request(8, requester="ExternalUser1", is_external=True)

        sync_engine.announce_request(session, request)

        assert feed.items[-1].message == (
            "External user request: $20.00 from ExternalUser1 (0m away)"
        )

    def test_out_of_range_or_own_request_ignored(
        self, sync_engine: SyncEngine, session: UserSession, feed: NotificationFeed
    ) -> None:
        far = make_request(9, location=north_of(DEMO_CENTER, 900))
        own = make_request(10, requester="DemoUser")

        assert sync_engine.announce_request(session, far) is False
        assert sync_engine.announce_request(session, own) is False
        assert sync_engine.announce_request(None, make_request(11)) is False
        assert feed.items == []
