"""Usage service: per-user counters, activity log, tool access and metric feed."""

import random
from datetime import timedelta
from typing import Any

from pydantic.alias_generators import to_camel

from zyra.auth.schemas import UserOut
from zyra.common.config import ZyraSettings
from zyra.common.exceptions import ValidationError
from zyra.common.logging import get_logger
from zyra.common.models import utcnow
from zyra.store.base import RecordStore
from zyra.store.records import (
    STAT_FIELDS,
    ActivityLogEntry,
    RealtimeMetric,
    ToolAccess,
    UsageStats,
    User,
)
from zyra.usage.metrics import sample_metrics, seed_usage_stats
from zyra.usage.schemas import (
    ActivityLogOut,
    DashboardData,
    ProfileOut,
    RealtimeMetricOut,
    ToolAccessOut,
    UsageStatsOut,
)

logger = get_logger("usage")

# Accept both wire (camelCase) and storage (snake_case) counter names.
_STAT_ALIASES: dict[str, str] = {
    **{name: name for name in STAT_FIELDS},
    **{to_camel(name): name for name in STAT_FIELDS},
}


def resolve_stat_field(name: str) -> str:
    """Map a counter name to its storage field or raise ValidationError."""
    try:
        return _STAT_ALIASES[name]
    except KeyError:
        raise ValidationError(f"Unknown usage stat: {name}") from None


class UsageService:
    """Usage counter and dashboard feed operations."""

    def __init__(self, settings: ZyraSettings, store: RecordStore, rng: random.Random | None = None):
        self.settings = settings
        self.store = store
        self.rng = rng or random.Random()

    async def increment_stat(self, user_id: str, stat_field: str, delta: int = 1) -> UsageStats:
        """Add ``delta`` to one counter. A user with no aggregate starts from zero."""
        field = resolve_stat_field(stat_field)
        stats = await self.store.increment_usage_stat(user_id, field, delta)
        logger.info(
            "Usage stat %s += %d", field, delta,
            extra={"user_id": user_id, "operation": "increment_stat"},
        )
        return stats

    async def record_activity(
        self,
        user_id: str,
        action: str,
        description: str,
        tool_used: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ActivityLogEntry:
        entry = ActivityLogEntry(
            user_id=user_id,
            action=action,
            description=description,
            tool_used=tool_used,
            metadata=metadata or {},
        )
        await self.store.append_activity(entry)
        logger.debug(
            "Activity recorded: %s", action,
            extra={"user_id": user_id, "tool": tool_used},
        )
        return entry

    async def track_tool_access(self, user_id: str, tool_name: str) -> ToolAccess:
        return await self.store.upsert_tool_access(user_id, tool_name)

    async def initialize(self, user_id: str) -> tuple[UsageStats, bool]:
        """Seed the aggregate on first visit. Returns ``(stats, created)``.

        Running it again leaves existing counters untouched. The login entry
        is only written while the user's activity log is still empty.
        """
        stats, created = await self.store.create_usage_stats(
            seed_usage_stats(user_id, self.rng)
        )
        if created:
            logger.info("Usage stats seeded", extra={"user_id": user_id, "operation": "initialize"})

        if not await self.store.list_activity(user_id, limit=1):
            await self.record_activity(
                user_id, "user_login", "User logged into dashboard", tool_used="dashboard",
            )
        return stats, created

    async def generate_sample_metrics(self, user_id: str) -> list[RealtimeMetric]:
        samples = sample_metrics(user_id, self.rng)
        await self.store.append_metrics(samples)
        return samples

    async def get_usage_stats(self, user_id: str) -> UsageStats | None:
        return await self.store.get_usage_stats(user_id)

    async def get_dashboard(self, user: User) -> DashboardData:
        """Everything the dashboard paints in one payload."""
        since = utcnow() - timedelta(hours=self.settings.metrics_window_hours)
        stats = await self.store.get_usage_stats(user.id)
        activity = await self.store.list_activity(
            user.id, limit=self.settings.dashboard_activity_count,
        )
        tools = await self.store.list_tool_access(user.id)
        metrics = await self.store.list_metrics(user.id, since=since)

        return DashboardData(
            user=UserOut.model_validate(user),
            profile=ProfileOut(
                user_id=user.id, name=user.full_name, email=user.email, plan=user.plan,
            ),
            usage_stats=UsageStatsOut.model_validate(stats) if stats else None,
            activity_logs=[ActivityLogOut.model_validate(a) for a in activity],
            tools_access=[ToolAccessOut.model_validate(t) for t in tools],
            realtime_metrics=[RealtimeMetricOut.model_validate(m) for m in metrics],
        )
