"""Synthetic dashboard numbers: seeded aggregates, metric samples, display tiles."""

import random
from datetime import datetime
from typing import Any, Mapping

from zyra.common.models import utcnow
from zyra.store.records import RealtimeMetric, UsageStats

# Half-open seed ranges, [low, high).
SEED_RANGES: dict[str, tuple[int, int]] = {
    "total_revenue": (10000, 60000),
    "total_orders": (200, 700),
    "conversion_rate": (250, 550),
    "cart_recovery_rate": (6000, 8000),
}

METRIC_NAMES = ("revenue_change", "orders_change", "conversion_change")


def seed_usage_stats(user_id: str, rng: random.Random | None = None) -> UsageStats:
    """Build a first-visit aggregate with plausible business numbers and zero usage."""
    rng = rng or random
    values = {name: rng.randrange(low, high) for name, (low, high) in SEED_RANGES.items()}
    return UsageStats(user_id=user_id, **values)


def _pct(value: float, positive: bool = True) -> str:
    return f"{'+' if positive else '-'}{value:.1f}%"


def sample_metrics(
    user_id: str,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[RealtimeMetric]:
    """Three samples in fixed order: revenue, orders, conversion."""
    rng = rng or random
    now = now or utcnow()

    conversion_up = rng.random() > 0.3
    return [
        RealtimeMetric(
            user_id=user_id,
            metric_name="revenue_change",
            value=f"${rng.randrange(1000, 6000)}",
            change_percent=_pct(rng.uniform(5, 25)),
            is_positive=True,
            timestamp=now,
        ),
        RealtimeMetric(
            user_id=user_id,
            metric_name="orders_change",
            value=str(rng.randrange(50, 150)),
            change_percent=_pct(rng.uniform(3, 18)),
            is_positive=True,
            timestamp=now,
        ),
        RealtimeMetric(
            user_id=user_id,
            metric_name="conversion_change",
            value=f"{rng.uniform(2, 4):.1f}%",
            change_percent=_pct(rng.uniform(1, 6), conversion_up),
            is_positive=conversion_up,
            timestamp=now,
        ),
    ]


def format_stats(stats: Mapping[str, Any] | None) -> dict[str, str]:
    """Display tiles for the four headline numbers.

    ``stats`` uses wire (camelCase) keys. Revenue is whole currency units
    and, like orders, carries thousands separators. Conversion keeps one
    decimal and cart recovery is truncated to a whole percent. Missing stats
    render as zeros.
    """
    stats = stats or {}
    revenue = int(stats.get("totalRevenue", 0) or 0)
    orders = int(stats.get("totalOrders", 0) or 0)
    conversion = int(stats.get("conversionRate", 0) or 0)
    recovery = int(stats.get("cartRecoveryRate", 0) or 0)
    return {
        "revenue": f"${revenue // 100:,}",
        "orders": f"{orders:,}",
        "conversion_rate": f"{conversion / 100:.1f}%",
        "cart_recovery": f"{recovery // 100}%",
    }
