"""In-app notification service."""

from typing import Any

from zyra.common.exceptions import NotFoundError
from zyra.common.models import utcnow
from zyra.store.base import RecordStore
from zyra.store.records import Notification


class NotificationService:
    """Notification CRUD scoped to the owning user."""

    def __init__(self, store: RecordStore):
        self.store = store

    async def list_notifications(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        if unread_only:
            return await self.store.list_notifications(user_id, is_read=False)
        return await self.store.list_notifications(user_id)

    async def unread_count(self, user_id: str) -> int:
        return len(await self.store.list_notifications(user_id, is_read=False))

    async def create_notification(self, user_id: str, **fields: Any) -> Notification:
        return await self.store.create_notification(Notification(user_id=user_id, **fields))

    async def mark_read(self, user_id: str, notification_id: str) -> Notification:
        current = await self.store.get_notification(user_id, notification_id)
        if current is None:
            raise NotFoundError("Notification not found")
        if current.is_read:
            return current
        return await self.store.update_notification(
            user_id, notification_id, is_read=True, read_at=utcnow(),
        )

    async def mark_all_read(self, user_id: str) -> int:
        now = utcnow()
        unread = await self.store.list_notifications(user_id, is_read=False)
        for notification in unread:
            await self.store.update_notification(
                user_id, notification.id, is_read=True, read_at=now,
            )
        return len(unread)

    async def delete_notification(self, user_id: str, notification_id: str) -> None:
        if not await self.store.delete_notification(user_id, notification_id):
            raise NotFoundError("Notification not found")

    async def clear_all(self, user_id: str) -> int:
        return await self.store.clear_notifications(user_id)
