"""Record store interface shared by the memory and SQL backends."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, TypeVar

from zyra.common.models import utcnow
from zyra.store.records import (
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

R = TypeVar("R")


class RecordStore(ABC):
    """Typed accessors over the Zyra table set.

    Backends implement a handful of generic primitives (``_get``, ``_find``,
    ``_add``, ``_patch``, ``_remove``, ``_remove_where``) and the counter/feed
    operations; the per-entity accessors below are built on those.

    Aggregate counters are never overwritten through ``_patch``; they only
    move through :meth:`increment_usage_stat`.
    """

    backend: str = ""

    def __init__(self, activity_limit: int = 50, metrics_limit: int = 20):
        self.activity_limit = activity_limit
        self.metrics_limit = metrics_limit

    async def open(self) -> None:
        """Acquire backend resources. Called once at startup."""

    async def close(self) -> None:
        """Release backend resources."""

    # ── Primitives ──

    @abstractmethod
    async def _get(self, kind: type[R], record_id: str) -> R | None: ...

    @abstractmethod
    async def _find(
        self,
        kind: type[R],
        order_by: str | None = None,
        descending: bool = False,
        **filters: Any,
    ) -> list[R]: ...

    @abstractmethod
    async def _add(self, record: R) -> R: ...

    @abstractmethod
    async def _patch(self, kind: type[R], record_id: str, changes: dict[str, Any]) -> R | None: ...

    @abstractmethod
    async def _remove(self, kind: type, record_id: str) -> bool: ...

    @abstractmethod
    async def _remove_where(self, kind: type, **filters: Any) -> int: ...

    async def _get_owned(self, kind: type[R], user_id: str, record_id: str) -> R | None:
        record = await self._get(kind, record_id)
        if record is None or getattr(record, "user_id", None) != user_id:
            return None
        return record

    # ── Usage counters and feeds ──

    @abstractmethod
    async def get_usage_stats(self, user_id: str) -> UsageStats | None: ...

    @abstractmethod
    async def create_usage_stats(self, stats: UsageStats) -> tuple[UsageStats, bool]:
        """Insert ``stats`` unless the user already has a row.

        Returns ``(row, created)``.
        """

    @abstractmethod
    async def increment_usage_stat(
        self, user_id: str, field: str, delta: int, now: datetime | None = None,
    ) -> UsageStats:
        """Add ``delta`` to one counter; a missing row counts as all-zero."""

    @abstractmethod
    async def append_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        """Prepend an entry and evict the oldest beyond ``activity_limit``."""

    @abstractmethod
    async def list_activity(self, user_id: str, limit: int | None = None) -> list[ActivityLogEntry]:
        """Newest first."""

    @abstractmethod
    async def upsert_tool_access(
        self, user_id: str, tool_name: str, now: datetime | None = None,
    ) -> ToolAccess: ...

    @abstractmethod
    async def list_tool_access(self, user_id: str) -> list[ToolAccess]: ...

    @abstractmethod
    async def append_metrics(self, samples: list[RealtimeMetric]) -> None:
        """Append samples in order and evict the oldest beyond ``metrics_limit``."""

    @abstractmethod
    async def list_metrics(
        self, user_id: str, since: datetime | None = None,
    ) -> list[RealtimeMetric]:
        """Oldest first."""

    # ── Users ──

    async def get_user(self, user_id: str) -> User | None:
        return await self._get(User, user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        users = await self._find(User, email=email.lower())
        return users[0] if users else None

    async def create_user(self, user: User) -> User:
        user.email = user.email.lower()
        return await self._add(user)

    async def update_user(self, user_id: str, **changes: Any) -> User | None:
        if "email" in changes and changes["email"]:
            changes["email"] = changes["email"].lower()
        return await self._patch(User, user_id, changes)

    # ── Products ──

    async def list_products(self, user_id: str) -> list[Product]:
        return await self._find(Product, order_by="updated_at", descending=True, user_id=user_id)

    async def get_product(self, user_id: str, product_id: str) -> Product | None:
        return await self._get_owned(Product, user_id, product_id)

    async def create_product(self, product: Product) -> Product:
        return await self._add(product)

    async def update_product(self, user_id: str, product_id: str, **changes: Any) -> Product | None:
        if await self._get_owned(Product, user_id, product_id) is None:
            return None
        changes["updated_at"] = utcnow()
        return await self._patch(Product, product_id, changes)

    async def delete_product(self, user_id: str, product_id: str) -> bool:
        if await self._get_owned(Product, user_id, product_id) is None:
            return False
        return await self._remove(Product, product_id)

    # ── Campaigns ──

    async def list_campaigns(self, user_id: str) -> list[Campaign]:
        return await self._find(Campaign, order_by="created_at", descending=True, user_id=user_id)

    async def get_campaign(self, user_id: str, campaign_id: str) -> Campaign | None:
        return await self._get_owned(Campaign, user_id, campaign_id)

    async def create_campaign(self, campaign: Campaign) -> Campaign:
        return await self._add(campaign)

    async def update_campaign(self, user_id: str, campaign_id: str, **changes: Any) -> Campaign | None:
        if await self._get_owned(Campaign, user_id, campaign_id) is None:
            return None
        return await self._patch(Campaign, campaign_id, changes)

    # ── Notifications ──

    async def list_notifications(self, user_id: str, **filters: Any) -> list[Notification]:
        return await self._find(
            Notification, order_by="created_at", descending=True, user_id=user_id, **filters,
        )

    async def get_notification(self, user_id: str, notification_id: str) -> Notification | None:
        return await self._get_owned(Notification, user_id, notification_id)

    async def create_notification(self, notification: Notification) -> Notification:
        return await self._add(notification)

    async def update_notification(
        self, user_id: str, notification_id: str, **changes: Any,
    ) -> Notification | None:
        if await self._get_owned(Notification, user_id, notification_id) is None:
            return None
        return await self._patch(Notification, notification_id, changes)

    async def delete_notification(self, user_id: str, notification_id: str) -> bool:
        if await self._get_owned(Notification, user_id, notification_id) is None:
            return False
        return await self._remove(Notification, notification_id)

    async def clear_notifications(self, user_id: str) -> int:
        return await self._remove_where(Notification, user_id=user_id)

    # ── Billing ──

    async def list_plans(self, active_only: bool = True) -> list[SubscriptionPlan]:
        filters = {"is_active": True} if active_only else {}
        return await self._find(SubscriptionPlan, order_by="price", **filters)

    async def get_plan(self, plan_id: str) -> SubscriptionPlan | None:
        return await self._get(SubscriptionPlan, plan_id)

    async def get_plan_by_name(self, plan_name: str) -> SubscriptionPlan | None:
        plans = await self._find(SubscriptionPlan, plan_name=plan_name)
        return plans[0] if plans else None

    async def create_plan(self, plan: SubscriptionPlan) -> SubscriptionPlan:
        return await self._add(plan)

    async def get_current_subscription(self, user_id: str) -> Subscription | None:
        subs = await self._find(Subscription, order_by="created_at", descending=True, user_id=user_id)
        return subs[0] if subs else None

    async def create_subscription(self, subscription: Subscription) -> Subscription:
        return await self._add(subscription)

    async def update_subscription(self, subscription_id: str, **changes: Any) -> Subscription | None:
        changes["updated_at"] = utcnow()
        return await self._patch(Subscription, subscription_id, changes)

    async def list_invoices(self, user_id: str) -> list[Invoice]:
        return await self._find(Invoice, order_by="created_at", descending=True, user_id=user_id)

    async def get_invoice_by_stripe_id(self, stripe_invoice_id: str) -> Invoice | None:
        invoices = await self._find(Invoice, stripe_invoice_id=stripe_invoice_id)
        return invoices[0] if invoices else None

    async def create_invoice(self, invoice: Invoice) -> Invoice:
        return await self._add(invoice)

    async def list_payment_methods(self, user_id: str) -> list[PaymentMethod]:
        return await self._find(PaymentMethod, order_by="created_at", user_id=user_id)

    async def get_payment_method(self, user_id: str, method_id: str) -> PaymentMethod | None:
        return await self._get_owned(PaymentMethod, user_id, method_id)

    async def create_payment_method(self, method: PaymentMethod) -> PaymentMethod:
        return await self._add(method)

    async def update_payment_method(
        self, user_id: str, method_id: str, **changes: Any,
    ) -> PaymentMethod | None:
        if await self._get_owned(PaymentMethod, user_id, method_id) is None:
            return None
        return await self._patch(PaymentMethod, method_id, changes)

    async def delete_payment_method(self, user_id: str, method_id: str) -> bool:
        if await self._get_owned(PaymentMethod, user_id, method_id) is None:
            return False
        return await self._remove(PaymentMethod, method_id)
