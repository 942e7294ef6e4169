"""Notification API router."""

from fastapi import APIRouter, Depends, Query

from zyra.common.schemas import MessageResponse
from zyra.common.security import require_user
from zyra.notifications.schemas import (
    BulkResult,
    NotificationCreate,
    NotificationOut,
    UnreadCount,
)
from zyra.store.records import User

router = APIRouter()


def _get_service():
    from zyra.deps import get_notification_service
    return get_notification_service()


@router.get("/notifications", response_model=list[NotificationOut])
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    user: User = Depends(require_user),
):
    rows = await _get_service().list_notifications(user.id, unread_only=unread_only)
    return [NotificationOut.model_validate(n) for n in rows]


@router.get("/notifications/unread-count", response_model=UnreadCount)
async def unread_count(user: User = Depends(require_user)):
    return UnreadCount(count=await _get_service().unread_count(user.id))


@router.post("/notifications", response_model=NotificationOut)
async def create_notification(body: NotificationCreate, user: User = Depends(require_user)):
    notification = await _get_service().create_notification(user.id, **body.model_dump())
    return NotificationOut.model_validate(notification)


@router.patch("/notifications/read-all", response_model=BulkResult)
async def mark_all_read(user: User = Depends(require_user)):
    return BulkResult(affected=await _get_service().mark_all_read(user.id))


@router.patch("/notifications/{notification_id}/read", response_model=NotificationOut)
async def mark_read(notification_id: str, user: User = Depends(require_user)):
    notification = await _get_service().mark_read(user.id, notification_id)
    return NotificationOut.model_validate(notification)


@router.delete("/notifications/clear-all", response_model=BulkResult)
async def clear_all(user: User = Depends(require_user)):
    return BulkResult(affected=await _get_service().clear_all(user.id))


@router.delete("/notifications/{notification_id}", response_model=MessageResponse)
async def delete_notification(notification_id: str, user: User = Depends(require_user)):
    await _get_service().delete_notification(user.id, notification_id)
    return MessageResponse(message="Notification deleted")
