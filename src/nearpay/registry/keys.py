"""Storage keys of the persisted registry contract."""

KEY_PREFIX = "nearpay:"

GLOBAL_REQUESTS = f"{KEY_PREFIX}global_requests"
LAST_SYNC = f"{KEY_PREFIX}last_sync"
PENDING_UPDATES = f"{KEY_PREFIX}pending_updates"
RECENT_LOGINS = f"{KEY_PREFIX}recent_logins"
NOTIFIED_MARKS = f"{KEY_PREFIX}notified_marks"
LOCATION_COUNT = f"{KEY_PREFIX}location_count"
EXTERNAL_LOGINS = f"{KEY_PREFIX}external_logins"
PROXIMITY_TRANSFERS = f"{KEY_PREFIX}proximity_transfers"
TRANSACTION_HISTORY = f"{KEY_PREFIX}transaction_history"
USER_RATINGS = f"{KEY_PREFIX}user_ratings"

ALL_KEYS = (
    GLOBAL_REQUESTS,
    LAST_SYNC,
    PENDING_UPDATES,
    RECENT_LOGINS,
    NOTIFIED_MARKS,
    LOCATION_COUNT,
    EXTERNAL_LOGINS,
    PROXIMITY_TRANSFERS,
    TRANSACTION_HISTORY,
    USER_RATINGS,
)
