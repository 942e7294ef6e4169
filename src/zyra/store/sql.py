"""SQLAlchemy-backed record store."""

from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import fields
from datetime import datetime, timezone
from typing import Any, AsyncGenerator

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from zyra.common.database import DatabaseManager
from zyra.common.exceptions import StorageError
from zyra.common.logging import get_logger
from zyra.common.models import utcnow
from zyra.store.base import R, RecordStore
from zyra.store.models import (
    ActivityLogModel,
    CampaignModel,
    InvoiceModel,
    NotificationModel,
    PaymentMethodModel,
    ProductModel,
    RealtimeMetricModel,
    SubscriptionModel,
    SubscriptionPlanModel,
    ToolAccessModel,
    UsageStatsModel,
    UserModel,
)
from zyra.store.records import (
    STAT_FIELDS,
    ActivityLogEntry,
    Campaign,
    Invoice,
    Notification,
    PaymentMethod,
    Product,
    RealtimeMetric,
    Subscription,
    SubscriptionPlan,
    ToolAccess,
    UsageStats,
    User,
)

logger = get_logger("store.sql")

_MODELS: dict[type, type] = {
    User: UserModel,
    Product: ProductModel,
    Campaign: CampaignModel,
    UsageStats: UsageStatsModel,
    ActivityLogEntry: ActivityLogModel,
    ToolAccess: ToolAccessModel,
    RealtimeMetric: RealtimeMetricModel,
    Notification: NotificationModel,
    SubscriptionPlan: SubscriptionPlanModel,
    Subscription: SubscriptionModel,
    Invoice: InvoiceModel,
    PaymentMethod: PaymentMethodModel,
}

# Record field -> mapped attribute, where ``metadata`` clashes with Base.metadata.
_ATTR_ALIASES = {"metadata": "metadata_"}


def _attr(name: str) -> str:
    return _ATTR_ALIASES.get(name, name)


def _aware(value: Any) -> Any:
    # SQLite hands datetimes back without tzinfo; everything is stored in UTC.
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_model(record: Any) -> Any:
    model = _MODELS[type(record)]
    return model(**{_attr(f.name): getattr(record, f.name) for f in fields(record)})


def _to_record(kind: type[R], row: Any) -> R:
    return kind(**{f.name: _aware(getattr(row, _attr(f.name))) for f in fields(kind)})


class SQLStore(RecordStore):
    """Record store over a :class:`DatabaseManager`.

    Each public call runs in its own session and commits on exit. Counter
    increments are single ``UPDATE ... SET col = col + :delta`` statements,
    so concurrent increments for one user never lose an update.
    """

    backend = "sql"

    def __init__(
        self,
        db: DatabaseManager,
        activity_limit: int = 50,
        metrics_limit: int = 20,
    ):
        super().__init__(activity_limit=activity_limit, metrics_limit=metrics_limit)
        self.db = db

    async def open(self) -> None:
        if not self.db.initialized:
            await self.db.init()
        await self.db.create_all()

    async def close(self) -> None:
        await self.db.close()

    @asynccontextmanager
    async def _operation(self, name: str) -> AsyncGenerator[AsyncSession, None]:
        logger.debug("Storage operation started", extra={"operation": name})
        try:
            async with self.db.get_session() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(
                "Storage operation failed: %s", e, extra={"operation": name},
            )
            raise StorageError(name, str(e)) from e
        logger.debug("Storage operation completed", extra={"operation": name})

    # ── Primitives ──

    async def _get(self, kind: type[R], record_id: str) -> R | None:
        async with self._operation(f"get {kind.__name__}") as session:
            row = await session.get(_MODELS[kind], record_id)
            return _to_record(kind, row) if row is not None else None

    async def _find(
        self,
        kind: type[R],
        order_by: str | None = None,
        descending: bool = False,
        **filters: Any,
    ) -> list[R]:
        model = _MODELS[kind]
        stmt = select(model)
        for name, value in filters.items():
            stmt = stmt.where(getattr(model, _attr(name)) == value)
        if order_by:
            column = getattr(model, _attr(order_by))
            stmt = stmt.order_by(column.desc() if descending else column)
        async with self._operation(f"list {kind.__name__}") as session:
            result = await session.execute(stmt)
            return [_to_record(kind, row) for row in result.scalars().all()]

    async def _add(self, record: R) -> R:
        async with self._operation(f"create {type(record).__name__}") as session:
            session.add(_to_model(record))
            await session.flush()
        return record

    async def _patch(self, kind: type[R], record_id: str, changes: dict[str, Any]) -> R | None:
        async with self._operation(f"update {kind.__name__}") as session:
            row = await session.get(_MODELS[kind], record_id)
            if row is None:
                return None
            for name, value in changes.items():
                setattr(row, _attr(name), value)
            await session.flush()
            return _to_record(kind, row)

    async def _remove(self, kind: type, record_id: str) -> bool:
        async with self._operation(f"delete {kind.__name__}") as session:
            row = await session.get(_MODELS[kind], record_id)
            if row is None:
                return False
            await session.delete(row)
            return True

    async def _remove_where(self, kind: type, **filters: Any) -> int:
        model = _MODELS[kind]
        stmt = delete(model).execution_options(synchronize_session=False)
        for name, value in filters.items():
            stmt = stmt.where(getattr(model, _attr(name)) == value)
        async with self._operation(f"delete {kind.__name__}") as session:
            result = await session.execute(stmt)
            return result.rowcount or 0

    # ── Usage counters and feeds ──

    async def _select_usage(self, session: AsyncSession, user_id: str) -> UsageStatsModel | None:
        result = await session.execute(
            select(UsageStatsModel)
            .where(UsageStatsModel.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_usage_stats(self, user_id: str) -> UsageStats | None:
        async with self._operation("get usage stats") as session:
            row = await self._select_usage(session, user_id)
            return _to_record(UsageStats, row) if row is not None else None

    async def create_usage_stats(self, stats: UsageStats) -> tuple[UsageStats, bool]:
        existing = await self.get_usage_stats(stats.user_id)
        if existing is not None:
            return existing, False
        try:
            async with self._operation("create usage stats") as session:
                session.add(_to_model(stats))
        except StorageError as e:
            if not isinstance(e.__cause__, IntegrityError):
                raise
            # A concurrent initialize inserted the row first.
            return await self.get_usage_stats(stats.user_id), False
        return stats, True

    async def increment_usage_stat(
        self, user_id: str, field: str, delta: int, now: datetime | None = None,
    ) -> UsageStats:
        if field not in STAT_FIELDS:
            raise KeyError(field)
        now = now or utcnow()
        column = getattr(UsageStatsModel, field)
        stmt = (
            update(UsageStatsModel)
            .where(UsageStatsModel.user_id == user_id)
            .values({column: column + delta, UsageStatsModel.last_updated: now})
            .execution_options(synchronize_session=False)
        )
        async with self._operation("increment usage stat") as session:
            result = await session.execute(stmt)
            if not result.rowcount:
                session.add(UsageStatsModel(user_id=user_id, last_updated=now, **{field: delta}))
                await session.flush()
            row = await self._select_usage(session, user_id)
            return _to_record(UsageStats, row)

    async def _next_seq(self, session: AsyncSession, model: type, user_id: str) -> int:
        result = await session.execute(
            select(func.coalesce(func.max(model.seq), 0)).where(model.user_id == user_id)
        )
        return result.scalar_one() + 1

    async def _trim(self, session: AsyncSession, model: type, user_id: str, keep: int) -> None:
        stale = await session.execute(
            select(model.id)
            .where(model.user_id == user_id)
            .order_by(model.seq.desc())
            .offset(keep)
        )
        ids = list(stale.scalars().all())
        if ids:
            await session.execute(
                delete(model)
                .where(model.id.in_(ids))
                .execution_options(synchronize_session=False)
            )

    async def append_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        async with self._operation("append activity") as session:
            row = _to_model(entry)
            row.seq = await self._next_seq(session, ActivityLogModel, entry.user_id)
            session.add(row)
            await session.flush()
            await self._trim(session, ActivityLogModel, entry.user_id, self.activity_limit)
        return entry

    async def list_activity(self, user_id: str, limit: int | None = None) -> list[ActivityLogEntry]:
        stmt = (
            select(ActivityLogModel)
            .where(ActivityLogModel.user_id == user_id)
            .order_by(ActivityLogModel.seq.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._operation("list activity") as session:
            result = await session.execute(stmt)
            return [_to_record(ActivityLogEntry, r) for r in result.scalars().all()]

    async def _bump_tool(
        self, session: AsyncSession, user_id: str, tool_name: str, now: datetime,
    ) -> ToolAccess:
        result = await session.execute(
            select(ToolAccessModel).where(
                ToolAccessModel.user_id == user_id,
                ToolAccessModel.tool_name == tool_name,
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = ToolAccessModel(
                user_id=user_id, tool_name=tool_name,
                access_count=1, first_accessed=now, last_accessed=now,
            )
            session.add(row)
            await session.flush()
            return _to_record(ToolAccess, row)

        await session.execute(
            update(ToolAccessModel)
            .where(ToolAccessModel.id == row.id)
            .values(
                access_count=ToolAccessModel.access_count + 1,
                last_accessed=max(now, _aware(row.last_accessed)),
            )
            .execution_options(synchronize_session=False)
        )
        await session.refresh(row)
        return _to_record(ToolAccess, row)

    async def upsert_tool_access(
        self, user_id: str, tool_name: str, now: datetime | None = None,
    ) -> ToolAccess:
        now = now or utcnow()
        try:
            async with self._operation("upsert tool access") as session:
                return await self._bump_tool(session, user_id, tool_name, now)
        except StorageError as e:
            if not isinstance(e.__cause__, IntegrityError):
                raise
        # Lost an insert race; the row exists now.
        async with self._operation("upsert tool access") as session:
            return await self._bump_tool(session, user_id, tool_name, now)

    async def list_tool_access(self, user_id: str) -> list[ToolAccess]:
        async with self._operation("list tool access") as session:
            result = await session.execute(
                select(ToolAccessModel)
                .where(ToolAccessModel.user_id == user_id)
                .order_by(ToolAccessModel.last_accessed.desc())
            )
            return [_to_record(ToolAccess, r) for r in result.scalars().all()]

    async def append_metrics(self, samples: list[RealtimeMetric]) -> None:
        by_user: dict[str, list[RealtimeMetric]] = defaultdict(list)
        for sample in samples:
            by_user[sample.user_id].append(sample)
        async with self._operation("append metrics") as session:
            for user_id, batch in by_user.items():
                seq = await self._next_seq(session, RealtimeMetricModel, user_id)
                for offset, sample in enumerate(batch):
                    row = _to_model(sample)
                    row.seq = seq + offset
                    session.add(row)
                await session.flush()
                await self._trim(session, RealtimeMetricModel, user_id, self.metrics_limit)

    async def list_metrics(
        self, user_id: str, since: datetime | None = None,
    ) -> list[RealtimeMetric]:
        stmt = (
            select(RealtimeMetricModel)
            .where(RealtimeMetricModel.user_id == user_id)
            .order_by(RealtimeMetricModel.seq)
        )
        if since is not None:
            stmt = stmt.where(RealtimeMetricModel.timestamp >= since)
        async with self._operation("list metrics") as session:
            result = await session.execute(stmt)
            return [_to_record(RealtimeMetric, r) for r in result.scalars().all()]
