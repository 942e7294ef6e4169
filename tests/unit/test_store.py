"""Tests for both record store backends: counters, capped feeds, tool access."""

from datetime import timedelta

import pytest

from zyra.common.models import utcnow
from zyra.store.records import (
    ActivityLogEntry,
    Notification,
    Product,
    RealtimeMetric,
    SubscriptionPlan,
    UsageStats,
    User,
)


async def _user(store, email="owner@example.com") -> User:
    return await store.create_user(User(email=email, password_hash="x", full_name="Owner"))


class TestUsageCounters:
    async def test_create_is_idempotent(self, store):
        first, created = await store.create_usage_stats(UsageStats(user_id="u1", total_revenue=123))
        again, created_again = await store.create_usage_stats(UsageStats(user_id="u1", total_revenue=999))
        assert created is True
        assert created_again is False
        assert again.id == first.id
        assert again.total_revenue == 123

    async def test_increment_missing_row_starts_from_zero(self, store):
        stats = await store.increment_usage_stat("u1", "emails_sent", 3)
        assert stats.emails_sent == 3
        assert stats.total_revenue == 0

    async def test_increments_sum(self, store):
        await store.create_usage_stats(UsageStats(user_id="u1"))
        for d in (1, 2, 3, 4, 5):
            await store.increment_usage_stat("u1", "products_optimized", d)
        stats = await store.get_usage_stats("u1")
        assert stats.products_optimized == 15

    async def test_increment_touches_last_updated(self, store):
        before = utcnow() - timedelta(seconds=1)
        stats = await store.increment_usage_stat("u1", "sms_sent", 1)
        assert stats.last_updated >= before


class TestActivityFeed:
    async def test_newest_first(self, store):
        for i in range(3):
            await store.append_activity(ActivityLogEntry(user_id="u1", action=f"a{i}", description="d"))
        entries = await store.list_activity("u1")
        assert [e.action for e in entries] == ["a2", "a1", "a0"]

    async def test_capped_at_limit(self, store):
        for i in range(51):
            await store.append_activity(ActivityLogEntry(user_id="u1", action=f"a{i}", description="d"))
        entries = await store.list_activity("u1")
        assert len(entries) == 50
        assert entries[0].action == "a50"
        assert "a0" not in {e.action for e in entries}

    async def test_limit_argument(self, store):
        for i in range(5):
            await store.append_activity(ActivityLogEntry(user_id="u1", action=f"a{i}", description="d"))
        assert len(await store.list_activity("u1", limit=2)) == 2

    async def test_metadata_round_trips(self, store):
        await store.append_activity(ActivityLogEntry(
            user_id="u1", action="x", description="d", metadata={"count": 2},
        ))
        entries = await store.list_activity("u1")
        assert entries[0].metadata == {"count": 2}

    async def test_returned_metadata_is_a_copy(self, store):
        await store.append_activity(ActivityLogEntry(
            user_id="u1", action="x", description="d", metadata={"count": 2},
        ))
        (await store.list_activity("u1"))[0].metadata["count"] = 99
        assert (await store.list_activity("u1"))[0].metadata == {"count": 2}

    async def test_feeds_are_per_user(self, store):
        await store.append_activity(ActivityLogEntry(user_id="u1", action="mine", description="d"))
        assert await store.list_activity("u2") == []


class TestMetricFeed:
    async def test_capped_at_limit(self, store):
        for _ in range(10):
            await store.append_metrics([
                RealtimeMetric(user_id="u1", metric_name=name, value="1")
                for name in ("revenue_change", "orders_change", "conversion_change")
            ])
        assert len(await store.list_metrics("u1")) == 20

    async def test_since_filters_old_samples(self, store):
        now = utcnow()
        await store.append_metrics([
            RealtimeMetric(user_id="u1", metric_name="old", value="1", timestamp=now - timedelta(hours=30)),
            RealtimeMetric(user_id="u1", metric_name="new", value="2", timestamp=now),
        ])
        recent = await store.list_metrics("u1", since=now - timedelta(hours=24))
        assert [m.metric_name for m in recent] == ["new"]


class TestToolAccess:
    async def test_first_access_then_bump(self, store):
        first = await store.upsert_tool_access("u1", "ai-generator")
        second = await store.upsert_tool_access("u1", "ai-generator")
        assert first.access_count == 1
        assert second.access_count == 2
        assert second.first_accessed == first.first_accessed
        assert second.last_accessed >= first.last_accessed

    async def test_single_row_per_tool(self, store):
        for _ in range(4):
            await store.upsert_tool_access("u1", "seo-tools")
        rows = await store.list_tool_access("u1")
        assert len(rows) == 1
        assert rows[0].access_count == 4

    async def test_last_accessed_never_goes_backwards(self, store):
        now = utcnow()
        await store.upsert_tool_access("u1", "products", now=now)
        row = await store.upsert_tool_access("u1", "products", now=now - timedelta(minutes=5))
        assert row.last_accessed >= now


class TestOwnedRecords:
    async def test_product_of_other_user_not_visible(self, store):
        owner = await _user(store)
        other = await _user(store, "other@example.com")
        product = await store.create_product(Product(user_id=owner.id, name="Mug", price="9.00", category="home"))
        assert await store.get_product(other.id, product.id) is None
        assert await store.delete_product(other.id, product.id) is False
        assert await store.get_product(owner.id, product.id) is not None

    async def test_clear_notifications(self, store):
        for i in range(3):
            await store.create_notification(Notification(user_id="u1", title=f"t{i}", message="m"))
        await store.create_notification(Notification(user_id="u2", title="keep", message="m"))
        assert await store.clear_notifications("u1") == 3
        assert await store.list_notifications("u1") == []
        assert len(await store.list_notifications("u2")) == 1

    async def test_user_lookup_by_email(self, store):
        user = await _user(store)
        found = await store.get_user_by_email("owner@example.com")
        assert found.id == user.id
        assert await store.get_user_by_email("nobody@example.com") is None


@pytest.mark.parametrize("backend", ["mongo", ""])
def test_unknown_backend_rejected(backend):
    from zyra.common.config import ZyraSettings
    from zyra.store import build_store

    settings = ZyraSettings(storage_backend=backend)
    with pytest.raises(RuntimeError):
        build_store(settings)


class TestPlans:
    async def test_returned_plan_lists_are_copies(self, store):
        plan = await store.create_plan(SubscriptionPlan(
            plan_name="Pro", price=4900, features=["AI copy"], limits={"products": 500},
        ))
        fetched = await store.get_plan(plan.id)
        fetched.features.append("Unlimited")
        fetched.limits["products"] = 0

        again = await store.get_plan(plan.id)
        assert again.features == ["AI copy"]
        assert again.limits == {"products": 500}
