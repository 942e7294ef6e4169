"""Pydantic schemas for notification endpoints."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from zyra.common.schemas import CamelModel

NotificationType = Literal["info", "success", "warning", "error"]


class NotificationCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    type: NotificationType = "info"
    action_url: Optional[str] = None
    action_label: Optional[str] = Field(None, max_length=100)


class NotificationOut(CamelModel):
    id: str
    user_id: str
    title: str
    message: str
    type: str
    is_read: bool
    action_url: Optional[str] = None
    action_label: Optional[str] = None
    created_at: datetime
    read_at: Optional[datetime] = None


class UnreadCount(CamelModel):
    count: int


class BulkResult(CamelModel):
    success: bool = True
    affected: int
