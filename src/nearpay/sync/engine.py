"""Cross-device synchronization faked through the shared registry."""

import logging
from dataclasses import dataclass, field

from nearpay.core.clock import Clock
from nearpay.geo.distance import distance_between
from nearpay.models import (
    ExternalLogin,
    ExternalUser,
    NewRequestUpdate,
    Notification,
    NotificationKind,
    PendingUpdate,
    RemovedRequestUpdate,
    Request,
)
from nearpay.notifications import NotificationFeed, SuppressionWindow
from nearpay.proximity import ProximityEngine
from nearpay.registry import SharedRegistry
from nearpay.session import DetectedExternalUser, UserSession
from nearpay.sim_logging import log_session_context

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_MS = 3_000
DEFAULT_LOGIN_WINDOW_MS = 300_000
DEFAULT_NOTIFICATION_TTL_MS = 300_000


@dataclass(frozen=True)
class MergeResult:
    added_ids: tuple[int, ...] = ()
    removed_ids: tuple[int, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.added_ids or self.removed_ids)


@dataclass(frozen=True)
class SyncReport:
    skipped: bool
    drained: int = 0
    merge: MergeResult = field(default_factory=MergeResult)
    login_notifications: int = 0
    external_notifications: int = 0

    @property
    def changed(self) -> bool:
        return self.merge.changed


class SyncEngine:
    """Reconciles the pending-update queue and raises proximity notifications.

    One sync cycle drains the queue, applies every update to the global
    request list, writes the list back once, and only then asks the
    notification feed to refresh dependent views.
    """

    def __init__(
        self,
        registry: SharedRegistry,
        proximity: ProximityEngine,
        feed: NotificationFeed,
        clock: Clock,
        min_interval_ms: int = DEFAULT_MIN_INTERVAL_MS,
        login_window_ms: int = DEFAULT_LOGIN_WINDOW_MS,
        notification_ttl_ms: int = DEFAULT_NOTIFICATION_TTL_MS,
    ):
        self._registry = registry
        self._proximity = proximity
        self._feed = feed
        self._clock = clock
        self._min_interval_ms = min_interval_ms
        self._login_window_ms = login_window_ms
        self._login_marks = SuppressionWindow(registry, "login", notification_ttl_ms)
        self._external_marks = SuppressionWindow(registry, "external", notification_ttl_ms)
        self._detection_marks = SuppressionWindow(registry, "detected", notification_ttl_ms)

    def sync_with_other_devices(
        self, session: UserSession | None, force: bool = False
    ) -> SyncReport:
        """Run one sync cycle if the minimum interval has elapsed.

        Args:
            session: Logged-in persona, or None before login. Login and
                external-user checks need a session; the merge does not.
            force: Ignore the minimum interval (used after local mutations).

        Returns:
            SyncReport describing what was drained, merged and notified.
        """
        now_ms = self._clock.now_ms()
        last_ms = self._registry.get_last_sync_ms()
        if not force and last_ms is not None and now_ms - last_ms <= self._min_interval_ms:
            return SyncReport(skipped=True)

        updates = self._registry.drain_pending_updates()
        merge = self.apply_updates(updates, session)

        login_count = self.check_new_user_logins(session)
        external_count = self.check_external_user_logins(session)

        self._registry.set_last_sync_ms(now_ms)

        if merge.changed:
            self._feed.requests_changed()

        if updates or login_count or external_count:
            logger.debug(
                f"Sync: drained={len(updates)} added={len(merge.added_ids)} "
                f"removed={len(merge.removed_ids)} logins={login_count} "
                f"external={external_count}"
            )

        return SyncReport(
            skipped=False,
            drained=len(updates),
            merge=merge,
            login_notifications=login_count,
            external_notifications=external_count,
        )

    def apply_updates(
        self, updates: list[PendingUpdate], session: UserSession | None = None
    ) -> MergeResult:
        """Apply updates in order; duplicates and unknown removals are no-ops."""
        if not updates:
            return MergeResult()

        requests = self._registry.get_all_requests()
        added: list[int] = []
        removed: list[int] = []

        for update in updates:
            if isinstance(update, NewRequestUpdate):
                request = update.payload
                if any(existing.id == request.id for existing in requests):
                    continue
                requests.append(request)
                added.append(request.id)
                self._notify_new_request(request, session)
            elif isinstance(update, RemovedRequestUpdate):
                for index, existing in enumerate(requests):
                    if existing.id == update.payload.id:
                        del requests[index]
                        removed.append(update.payload.id)
                        break

        result = MergeResult(added_ids=tuple(added), removed_ids=tuple(removed))
        if result.changed:
            self._registry.save_all_requests(requests)
        return result

    def check_new_user_logins(self, session: UserSession | None) -> int:
        """Notify about other users who logged in recently within range."""
        if session is None:
            return 0

        now_ms = self._clock.now_ms()
        current = session.location
        notified = 0

        with log_session_context(session.username):
            for login in self._registry.get_recent_logins(now_ms, self._login_window_ms):
                if login.username == session.username:
                    continue
                distance = distance_between(current, login.location)
                if distance > self._proximity.radius_m:
                    continue
                if not self._login_marks.try_acquire(login.notification_key, now_ms):
                    continue

                self._feed.publish(
                    Notification(
                        kind=NotificationKind.NEW_USER_NEARBY,
                        message=(
                            f"New user nearby: {login.username} logged in from another "
                            f"device ({round(distance)}m away)"
                        ),
                        subject=login.username,
                        timestamp=self._clock.now(),
                        distance_m=distance,
                    )
                )
                notified += 1

        return notified

    def check_external_user_logins(self, session: UserSession | None) -> int:
        """Notify about external users within range, once per suppression window."""
        if session is None:
            return 0

        notified = 0
        for entry in self._proximity.nearby_external_users(session.location, session.username):
            user = entry.user
            if isinstance(user, ExternalUser) and self.handle_external_user_in_range(
                session, user, entry.distance_m
            ):
                notified += 1
        return notified

    def handle_external_user_in_range(
        self, session: UserSession | None, external_user: ExternalUser, distance_m: float
    ) -> bool:
        """Record and announce an external login unless recently announced.

        Returns True when a notification was raised.
        """
        if session is None or external_user.username == session.username:
            return False

        now_ms = self._clock.now_ms()
        if not self._external_marks.try_acquire(external_user.username, now_ms):
            return False

        distance_m = max(0.0, distance_m)
        self._feed.publish(
            Notification(
                kind=NotificationKind.EXTERNAL_USER_NEARBY,
                message=(
                    f"External user nearby: {external_user.username} logged in with "
                    f"different credentials ({round(distance_m)}m away)"
                ),
                subject=external_user.username,
                timestamp=self._clock.now(),
                distance_m=distance_m,
            )
        )
        self._registry.record_external_login(
            ExternalLogin(
                username=external_user.username,
                location=external_user.location,
                distance_m=distance_m,
                timestamp=now_ms,
                device_type=external_user.device_type,
                login_source=external_user.login_source,
                rating=external_user.rating,
                completed_transactions=external_user.completed_transactions,
            )
        )
        count = self._registry.increment_location_count()
        logger.debug(f"Location count increased to {count}")
        return True

    def detect_external_users(self, session: UserSession | None) -> int:
        """Periodic external-user detection pass, separate from login checks."""
        if session is None:
            return 0

        now_ms = self._clock.now_ms()
        detected = 0
        for entry in self._proximity.nearby_external_users(session.location, session.username):
            user = entry.user
            if not isinstance(user, ExternalUser):
                continue
            if not self._detection_marks.try_acquire(user.username, now_ms):
                continue

            session.remember_external_user(
                DetectedExternalUser(
                    user=user, distance_m=entry.distance_m, detected_at=self._clock.now()
                )
            )
            self._registry.increment_location_count()
            self._feed.publish(
                Notification(
                    kind=NotificationKind.EXTERNAL_USER_DETECTED,
                    message=(
                        f"External user detected: {user.username} "
                        f"({entry.rounded_distance}m away)"
                    ),
                    subject=user.username,
                    timestamp=self._clock.now(),
                    distance_m=entry.distance_m,
                )
            )
            detected += 1
        return detected

    def check_proximity_requests(self, session: UserSession | None) -> Request | None:
        """Announce the most recent in-range request of another user, if any."""
        if session is None:
            return None

        nearby = self._proximity.nearby_requests(session.location, session.username)
        if not nearby:
            return None

        latest = max(nearby, key=lambda r: r.request.timestamp)
        request = latest.request
        self._feed.publish(
            Notification(
                kind=NotificationKind.NEARBY_REQUEST,
                message=(
                    f"New request nearby: ${request.amount:.2f} from {request.requester} "
                    f"({round(latest.distance_m or 0.0)}m away)"
                ),
                subject=request.requester,
                timestamp=self._clock.now(),
                distance_m=latest.distance_m,
            )
        )
        return request

    def announce_request(self, session: UserSession | None, request: Request) -> bool:
        """Tell the user about a request just raised by someone within range.

        Returns True when a notification was published.
        """
        if session is None or request.requester == session.username:
            return False

        distance = distance_between(session.location, request.location)
        if distance > self._proximity.radius_m:
            return False

        label = "External user request" if request.is_external else "New request from nearby user"
        self._feed.publish(
            Notification(
                kind=NotificationKind.REQUEST_FROM_NEARBY_USER,
                message=(
                    f"{label}: ${request.amount:.2f} from {request.requester} "
                    f"({round(distance)}m away)"
                ),
                subject=request.requester,
                timestamp=self._clock.now(),
                distance_m=distance,
            )
        )
        return True

    def _notify_new_request(self, request: Request, session: UserSession | None) -> None:
        distance: float | None = None
        where = "Unknown"
        if session is not None:
            distance = distance_between(session.location, request.location)
            where = f"{round(distance)}m"

        self._feed.publish(
            Notification(
                kind=NotificationKind.NEW_REQUEST,
                message=(
                    f"New request nearby: ${request.amount:.2f} from {request.requester} "
                    f"({where} away)"
                ),
                subject=request.requester,
                timestamp=self._clock.now(),
                distance_m=distance,
            )
        )
