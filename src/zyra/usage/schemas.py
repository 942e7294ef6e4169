"""Pydantic schemas for dashboard and usage endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from zyra.auth.schemas import UserOut
from zyra.common.schemas import CamelModel


class UsageStatsOut(CamelModel):
    total_revenue: int = 0
    total_orders: int = 0
    conversion_rate: int = 0
    cart_recovery_rate: int = 0
    products_optimized: int = 0
    emails_sent: int = 0
    sms_sent: int = 0
    ai_generations_used: int = 0
    seo_optimizations_used: int = 0
    last_updated: Optional[datetime] = None


class ActivityLogOut(CamelModel):
    id: str
    user_id: str
    action: str
    description: str
    tool_used: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class ToolAccessOut(CamelModel):
    id: str
    user_id: str
    tool_name: str
    access_count: int
    first_accessed: datetime
    last_accessed: datetime


class RealtimeMetricOut(CamelModel):
    id: str
    user_id: str
    metric_name: str
    value: str
    change_percent: Optional[str] = None
    is_positive: bool = True
    timestamp: datetime


class ProfileOut(CamelModel):
    user_id: str
    name: str
    email: str
    plan: str


class DashboardData(CamelModel):
    user: UserOut
    profile: ProfileOut
    usage_stats: Optional[UsageStatsOut] = None
    activity_logs: list[ActivityLogOut] = Field(default_factory=list)
    tools_access: list[ToolAccessOut] = Field(default_factory=list)
    realtime_metrics: list[RealtimeMetricOut] = Field(default_factory=list)


class InitializeResponse(CamelModel):
    success: bool = True
    created: bool
    usage_stats: UsageStatsOut


class TrackToolRequest(CamelModel):
    tool_name: str = Field(..., min_length=1, max_length=100)


class LogActivityRequest(CamelModel):
    action: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    tool_used: Optional[str] = Field(None, max_length=100)
    metadata: Optional[dict[str, Any]] = None


class UpdateUsageRequest(CamelModel):
    stat_field: str = Field(..., min_length=1)
    increment: int = Field(default=1, ge=0)


class RefreshMetricsResponse(CamelModel):
    success: bool = True
    metrics: list[RealtimeMetricOut]
    dashboard_data: DashboardData
