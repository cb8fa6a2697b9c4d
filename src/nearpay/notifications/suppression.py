"""Expiring per-subject notification marks."""

import logging

from nearpay.registry import SharedRegistry

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 300_000  # 5 minutes


class SuppressionWindow:
    """Allows one notification per key within ``ttl_ms``.

    Marks live in the registry as ``{namespace:key: last_notified_ms}``.
    Entries of this namespace older than the TTL are pruned on every write
    so the map cannot grow without bound.
    """

    def __init__(self, registry: SharedRegistry, namespace: str, ttl_ms: int = DEFAULT_TTL_MS):
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be positive")
        self._registry = registry
        self._namespace = namespace
        self._ttl_ms = ttl_ms

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def _full_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def is_suppressed(self, key: str, now_ms: int) -> bool:
        last = self._registry.get_notified_marks().get(self._full_key(key))
        return last is not None and now_ms - last < self._ttl_ms

    def try_acquire(self, key: str, now_ms: int) -> bool:
        """Record a notification for ``key`` unless one is still live.

        Returns True when the caller should notify.
        """
        marks = self._registry.get_notified_marks()
        full_key = self._full_key(key)
        last = marks.get(full_key)
        if last is not None and now_ms - last < self._ttl_ms:
            return False

        marks = self._prune(marks, now_ms)
        marks[full_key] = now_ms
        self._registry.save_notified_marks(marks)
        return True

    def _prune(self, marks: dict[str, int], now_ms: int) -> dict[str, int]:
        prefix = f"{self._namespace}:"
        kept = {
            k: ts
            for k, ts in marks.items()
            if not k.startswith(prefix) or now_ms - ts < self._ttl_ms
        }
        pruned = len(marks) - len(kept)
        if pruned:
            logger.debug(f"Pruned {pruned} expired {self._namespace} marks")
        return kept
