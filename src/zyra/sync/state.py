"""Client-side state for dashboard sync: cache, pending mutations, guards."""

import copy
import enum
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from zyra.common.models import utcnow


class QueryCache:
    """Keyed cache of server payloads.

    Values are deep-copied on the way in and out, so a caller holding a
    snapshot can never alias (and silently edit) what the cache holds.
    """

    def __init__(self):
        self._data: dict[str, Any] = {}
        self._stale: set[str] = set()

    def get(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
        self._stale.discard(key)

    def clear(self, key: str) -> None:
        self._data.pop(key, None)
        self._stale.discard(key)

    def invalidate(self, key: str) -> None:
        self._stale.add(key)

    def is_stale(self, key: str) -> bool:
        return key in self._stale or key not in self._data

    def __contains__(self, key: str) -> bool:
        return key in self._data


class MutationState(str, enum.Enum):
    IDLE = "idle"
    OPTIMISTIC_APPLIED = "optimistic_applied"
    PENDING = "pending"
    RECONCILED = "reconciled"
    ROLLED_BACK = "rolled_back"


def _restore(snapshot: Any) -> Any:
    return snapshot


@dataclass(frozen=True)
class PendingMutation:
    """An optimistic edit and the exact state to return to if it fails.

    ``previous_snapshot`` is captured in the same step that applies the
    edit, and rollback is computed from it alone.
    """

    key: str
    previous_snapshot: Any
    apply_fn: Callable[[Any], Any]
    rollback_fn: Callable[[Any], Any] = _restore

    @classmethod
    def begin(cls, cache: QueryCache, key: str, apply_fn: Callable[[Any], Any]) -> "PendingMutation":
        previous = cache.get(key)
        mutation = cls(key=key, previous_snapshot=previous, apply_fn=apply_fn)
        if previous is not None:
            cache.set(key, apply_fn(copy.deepcopy(previous)))
        return mutation

    def rollback(self, cache: QueryCache) -> None:
        if self.previous_snapshot is None:
            cache.clear(self.key)
            return
        cache.set(self.key, self.rollback_fn(copy.deepcopy(self.previous_snapshot)))


class DebounceGuard:
    """Rejects a trigger that arrives within ``min_interval`` seconds of the last accepted one."""

    def __init__(self, min_interval: float = 2.0, clock: Callable[[], float] = time.monotonic):
        self.min_interval = min_interval
        self._clock = clock
        self._last: Optional[float] = None

    def try_acquire(self) -> bool:
        now = self._clock()
        if self._last is not None and now - self._last < self.min_interval:
            return False
        self._last = now
        return True

    @property
    def remaining(self) -> float:
        if self._last is None:
            return 0.0
        return max(0.0, self.min_interval - (self._clock() - self._last))


class ConnectionMonitor:
    """Online/offline indicator. Observes traffic; never blocks it."""

    def __init__(self):
        self.is_online = True
        self.last_online: datetime = utcnow()
        self._listeners: list[Callable[[bool], None]] = []

    def subscribe(self, listener: Callable[[bool], None]) -> None:
        self._listeners.append(listener)

    def mark_online(self) -> None:
        was_online = self.is_online
        self.is_online = True
        self.last_online = utcnow()
        if not was_online:
            self._emit()

    def mark_offline(self) -> None:
        if self.is_online:
            self.is_online = False
            self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self.is_online)


@dataclass
class Notice:
    """A user-visible message.

    ``source`` tells action failures ("action") apart from guard
    rejections ("guard") and informational results ("info").
    """

    level: str
    title: str
    message: str
    source: str = "action"
    created_at: datetime = field(default_factory=utcnow)
