"""In-process record store backed by dicts and bounded deques."""

import copy
import dataclasses
from collections import defaultdict, deque
from datetime import datetime
from typing import Any

from zyra.common.models import utcnow
from zyra.store.base import R, RecordStore
from zyra.store.records import (
    STAT_FIELDS,
    ActivityLogEntry,
    RealtimeMetric,
    ToolAccess,
    UsageStats,
)


def _copy(record):
    return copy.deepcopy(record)


class MemoryStore(RecordStore):
    """Single-process store. Nothing survives a restart.

    Every method runs to completion without awaiting, so a read-modify-write
    on one event loop cannot interleave with another request.
    """

    backend = "memory"

    def __init__(self, activity_limit: int = 50, metrics_limit: int = 20):
        super().__init__(activity_limit=activity_limit, metrics_limit=metrics_limit)
        self._tables: dict[type, dict[str, Any]] = defaultdict(dict)
        self._usage: dict[str, UsageStats] = {}
        self._activity: dict[str, deque[ActivityLogEntry]] = {}
        self._tools: dict[str, dict[str, ToolAccess]] = defaultdict(dict)
        self._metrics: dict[str, deque[RealtimeMetric]] = {}

    # ── Primitives ──

    async def _get(self, kind: type[R], record_id: str) -> R | None:
        record = self._tables[kind].get(record_id)
        return _copy(record) if record is not None else None

    async def _find(
        self,
        kind: type[R],
        order_by: str | None = None,
        descending: bool = False,
        **filters: Any,
    ) -> list[R]:
        rows = [
            r for r in self._tables[kind].values()
            if all(getattr(r, k) == v for k, v in filters.items())
        ]
        if order_by:
            rows.sort(key=lambda r: getattr(r, order_by), reverse=descending)
        return [_copy(r) for r in rows]

    async def _add(self, record: R) -> R:
        self._tables[type(record)][record.id] = _copy(record)
        return record

    async def _patch(self, kind: type[R], record_id: str, changes: dict[str, Any]) -> R | None:
        current = self._tables[kind].get(record_id)
        if current is None:
            return None
        updated = dataclasses.replace(current, **changes)
        self._tables[kind][record_id] = updated
        return _copy(updated)

    async def _remove(self, kind: type, record_id: str) -> bool:
        return self._tables[kind].pop(record_id, None) is not None

    async def _remove_where(self, kind: type, **filters: Any) -> int:
        table = self._tables[kind]
        doomed = [
            rid for rid, r in table.items()
            if all(getattr(r, k) == v for k, v in filters.items())
        ]
        for rid in doomed:
            del table[rid]
        return len(doomed)

    # ── Usage counters and feeds ──

    async def get_usage_stats(self, user_id: str) -> UsageStats | None:
        stats = self._usage.get(user_id)
        return _copy(stats) if stats is not None else None

    async def create_usage_stats(self, stats: UsageStats) -> tuple[UsageStats, bool]:
        existing = self._usage.get(stats.user_id)
        if existing is not None:
            return _copy(existing), False
        self._usage[stats.user_id] = _copy(stats)
        return _copy(stats), True

    async def increment_usage_stat(
        self, user_id: str, field: str, delta: int, now: datetime | None = None,
    ) -> UsageStats:
        if field not in STAT_FIELDS:
            raise KeyError(field)
        stats = self._usage.get(user_id)
        if stats is None:
            stats = UsageStats(user_id=user_id)
            self._usage[user_id] = stats
        setattr(stats, field, getattr(stats, field) + delta)
        stats.last_updated = now or utcnow()
        return _copy(stats)

    async def append_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        log = self._activity.get(entry.user_id)
        if log is None:
            log = deque(maxlen=self.activity_limit)
            self._activity[entry.user_id] = log
        # Full deque drops from the right, i.e. the oldest entry.
        log.appendleft(_copy(entry))
        return entry

    async def list_activity(self, user_id: str, limit: int | None = None) -> list[ActivityLogEntry]:
        entries = list(self._activity.get(user_id, ()))
        if limit is not None:
            entries = entries[:limit]
        return [_copy(e) for e in entries]

    async def upsert_tool_access(
        self, user_id: str, tool_name: str, now: datetime | None = None,
    ) -> ToolAccess:
        now = now or utcnow()
        tools = self._tools[user_id]
        existing = tools.get(tool_name)
        if existing is not None:
            existing.access_count += 1
            existing.last_accessed = max(now, existing.last_accessed)
            return _copy(existing)
        row = ToolAccess(
            user_id=user_id, tool_name=tool_name,
            access_count=1, first_accessed=now, last_accessed=now,
        )
        tools[tool_name] = row
        return _copy(row)

    async def list_tool_access(self, user_id: str) -> list[ToolAccess]:
        return [_copy(t) for t in self._tools.get(user_id, {}).values()]

    async def append_metrics(self, samples: list[RealtimeMetric]) -> None:
        for sample in samples:
            buf = self._metrics.get(sample.user_id)
            if buf is None:
                buf = deque(maxlen=self.metrics_limit)
                self._metrics[sample.user_id] = buf
            buf.append(_copy(sample))

    async def list_metrics(
        self, user_id: str, since: datetime | None = None,
    ) -> list[RealtimeMetric]:
        return [
            _copy(m) for m in self._metrics.get(user_id, ())
            if since is None or m.timestamp >= since
        ]
