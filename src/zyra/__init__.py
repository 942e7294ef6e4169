"""Zyra: merchant dashboard API, usage tracking and sync client."""

from zyra.sync.client import DashboardSyncClient
from zyra.usage.metrics import format_stats

__all__ = [
    "DashboardSyncClient",
    "format_stats",
]
__version__ = "0.1.0"
