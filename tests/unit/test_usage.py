"""Tests for usage service: seeding, counters, dashboard aggregation."""

import random

import pytest

from zyra.common.config import ZyraSettings
from zyra.common.exceptions import ValidationError
from zyra.store.memory import MemoryStore
from zyra.store.records import User
from zyra.usage.metrics import SEED_RANGES, format_stats, sample_metrics, seed_usage_stats
from zyra.usage.service import UsageService, resolve_stat_field


def make_settings(**overrides) -> ZyraSettings:
    defaults = {"storage_backend": "memory"}
    defaults.update(overrides)
    return ZyraSettings(**defaults)


@pytest.fixture
def svc():
    return UsageService(make_settings(), MemoryStore(), rng=random.Random(7))


@pytest.fixture
async def user(svc):
    return await svc.store.create_user(User(email="m@example.com", password_hash="x", full_name="Mia"))


class TestSeeding:
    def test_seed_values_within_ranges(self):
        rng = random.Random(1)
        for _ in range(200):
            stats = seed_usage_stats("u1", rng)
            for name, (low, high) in SEED_RANGES.items():
                assert low <= getattr(stats, name) < high
            assert stats.products_optimized == 0
            assert stats.ai_generations_used == 0

    def test_sample_metrics_shape(self):
        samples = sample_metrics("u1", random.Random(3))
        assert [s.metric_name for s in samples] == [
            "revenue_change", "orders_change", "conversion_change",
        ]
        assert samples[0].value.startswith("$")
        assert samples[0].is_positive is True
        assert samples[1].is_positive is True
        assert samples[2].value.endswith("%")
        assert len({s.timestamp for s in samples}) == 1

    def test_conversion_direction_matches_sign(self):
        rng = random.Random(11)
        for _ in range(50):
            conversion = sample_metrics("u1", rng)[2]
            assert conversion.change_percent.startswith("+" if conversion.is_positive else "-")


class TestFormatStats:
    def test_formats_tiles(self):
        tiles = format_stats({
            "totalRevenue": 1234567,
            "totalOrders": 42,
            "conversionRate": 346,
            "cartRecoveryRate": 7099,
        })
        assert tiles == {
            "revenue": "$12,345",
            "orders": "42",
            "conversion_rate": "3.5%",
            "cart_recovery": "70%",
        }

    def test_large_orders_grouped(self):
        tiles = format_stats({"totalRevenue": 100, "totalOrders": 1234567})
        assert tiles["revenue"] == "$1"
        assert tiles["orders"] == "1,234,567"

    def test_missing_stats_render_zero(self):
        assert format_stats(None)["revenue"] == "$0"


class TestStatFieldNames:
    def test_accepts_both_spellings(self):
        assert resolve_stat_field("productsOptimized") == "products_optimized"
        assert resolve_stat_field("products_optimized") == "products_optimized"

    def test_rejects_unknown(self):
        with pytest.raises(ValidationError):
            resolve_stat_field("password_hash")


class TestUsageService:
    async def test_initialize_seeds_once(self, svc, user):
        stats, created = await svc.initialize(user.id)
        again, created_again = await svc.initialize(user.id)
        assert created is True
        assert created_again is False
        assert again.total_revenue == stats.total_revenue

    async def test_initialize_logs_login_once(self, svc, user):
        await svc.initialize(user.id)
        await svc.initialize(user.id)
        entries = await svc.store.list_activity(user.id)
        assert [e.action for e in entries] == ["user_login"]
        assert entries[0].tool_used == "dashboard"

    async def test_initialize_keeps_counters(self, svc, user):
        await svc.initialize(user.id)
        await svc.increment_stat(user.id, "emailsSent", 4)
        stats, _ = await svc.initialize(user.id)
        assert stats.emails_sent == 4

    async def test_increment_unknown_field(self, svc, user):
        with pytest.raises(ValidationError):
            await svc.increment_stat(user.id, "bogus", 1)

    async def test_dashboard_before_initialize(self, svc, user):
        data = await svc.get_dashboard(user)
        assert data.usage_stats is None
        assert data.activity_logs == []
        assert data.profile.email == user.email

    async def test_dashboard_limits_activity(self, svc, user):
        for i in range(15):
            await svc.record_activity(user.id, f"a{i}", "d")
        data = await svc.get_dashboard(user)
        assert len(data.activity_logs) == 10
        assert data.activity_logs[0].action == "a14"

    async def test_refresh_appends_three_samples(self, svc, user):
        await svc.generate_sample_metrics(user.id)
        await svc.generate_sample_metrics(user.id)
        data = await svc.get_dashboard(user)
        assert len(data.realtime_metrics) == 6
