"""Dashboard and usage API router."""

from typing import Optional

from fastapi import APIRouter, Depends

from zyra.common.security import require_user
from zyra.store.records import User
from zyra.usage.schemas import (
    ActivityLogOut,
    DashboardData,
    InitializeResponse,
    LogActivityRequest,
    RealtimeMetricOut,
    RefreshMetricsResponse,
    ToolAccessOut,
    TrackToolRequest,
    UpdateUsageRequest,
    UsageStatsOut,
)

router = APIRouter()


def _get_service():
    from zyra.deps import get_usage_service
    return get_usage_service()


@router.get("/dashboard", response_model=DashboardData)
async def get_dashboard(user: User = Depends(require_user)):
    return await _get_service().get_dashboard(user)


@router.post("/dashboard/initialize", response_model=InitializeResponse)
async def initialize_dashboard(user: User = Depends(require_user)):
    stats, created = await _get_service().initialize(user.id)
    return InitializeResponse(
        created=created, usage_stats=UsageStatsOut.model_validate(stats),
    )


@router.post("/dashboard/track-tool-access", response_model=ToolAccessOut)
async def track_tool_access(body: TrackToolRequest, user: User = Depends(require_user)):
    row = await _get_service().track_tool_access(user.id, body.tool_name)
    return ToolAccessOut.model_validate(row)


@router.post("/dashboard/log-activity", response_model=ActivityLogOut)
async def log_activity(body: LogActivityRequest, user: User = Depends(require_user)):
    entry = await _get_service().record_activity(
        user.id,
        action=body.action,
        description=body.description,
        tool_used=body.tool_used,
        metadata=body.metadata,
    )
    return ActivityLogOut.model_validate(entry)


@router.post("/dashboard/update-usage", response_model=UsageStatsOut)
async def update_usage(body: UpdateUsageRequest, user: User = Depends(require_user)):
    stats = await _get_service().increment_stat(user.id, body.stat_field, body.increment)
    return UsageStatsOut.model_validate(stats)


@router.post("/dashboard/refresh-metrics", response_model=RefreshMetricsResponse)
async def refresh_metrics(user: User = Depends(require_user)):
    svc = _get_service()
    samples = await svc.generate_sample_metrics(user.id)
    return RefreshMetricsResponse(
        metrics=[RealtimeMetricOut.model_validate(s) for s in samples],
        dashboard_data=await svc.get_dashboard(user),
    )


@router.get("/usage-stats", response_model=Optional[UsageStatsOut])
async def get_usage_stats(user: User = Depends(require_user)):
    stats = await _get_service().get_usage_stats(user.id)
    return UsageStatsOut.model_validate(stats) if stats else None
