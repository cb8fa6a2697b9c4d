"""Notification feed and view refresh bookkeeping."""

import logging
from collections import deque
from collections.abc import Callable
from enum import Enum
from typing import Protocol

from nearpay.models import Notification

logger = logging.getLogger(__name__)

DEFAULT_FEED_CAPACITY = 100


class View(str, Enum):
    """Screens whose contents depend on the global request list."""

    MAIN_HUB = "main_hub"
    NOTIFICATIONS = "notifications"
    TRANSFER = "transfer"
    OTHER = "other"


class ViewObserver(Protocol):
    def refresh_badge(self) -> None: ...

    def refresh_list(self) -> None: ...


class NotificationFeed:
    """Collects user-visible notifications and drives view refreshes.

    When the request list changes, the badge is refreshed if the main hub
    is showing and the list is refreshed if the notifications screen is
    showing. Otherwise the refresh is deferred until that view is
    activated.
    """

    def __init__(self, capacity: int = DEFAULT_FEED_CAPACITY):
        self._items: deque[Notification] = deque(maxlen=capacity)
        self._listeners: list[Callable[[Notification], None]] = []
        self._observers: list[ViewObserver] = []
        self._active_view = View.OTHER
        self._badge_deferred = False
        self._list_deferred = False

    @property
    def active_view(self) -> View:
        return self._active_view

    @property
    def items(self) -> list[Notification]:
        return list(self._items)

    @property
    def badge_deferred(self) -> bool:
        return self._badge_deferred

    @property
    def list_deferred(self) -> bool:
        return self._list_deferred

    def subscribe(self, listener: Callable[[Notification], None]) -> None:
        self._listeners.append(listener)

    def attach(self, observer: ViewObserver) -> None:
        self._observers.append(observer)

    def publish(self, notification: Notification) -> None:
        self._items.append(notification)
        logger.info(notification.message)
        for listener in self._listeners:
            listener(notification)

    def set_active_view(self, view: View) -> None:
        self._active_view = view
        if view == View.MAIN_HUB and self._badge_deferred:
            self._refresh_badge()
        if view == View.NOTIFICATIONS and self._list_deferred:
            self._refresh_list()

    def requests_changed(self) -> None:
        if self._active_view == View.MAIN_HUB:
            self._refresh_badge()
        else:
            self._badge_deferred = True

        if self._active_view == View.NOTIFICATIONS:
            self._refresh_list()
        else:
            self._list_deferred = True

    def clear(self) -> None:
        self._items.clear()
        self._badge_deferred = False
        self._list_deferred = False

    def _refresh_badge(self) -> None:
        self._badge_deferred = False
        for observer in self._observers:
            observer.refresh_badge()

    def _refresh_list(self) -> None:
        self._list_deferred = False
        for observer in self._observers:
            observer.refresh_list()
