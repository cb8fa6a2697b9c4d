from nearpay.notifications.feed import NotificationFeed, View, ViewObserver
from nearpay.notifications.suppression import SuppressionWindow

__all__ = ["NotificationFeed", "SuppressionWindow", "View", "ViewObserver"]
