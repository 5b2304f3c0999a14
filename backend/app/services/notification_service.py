"""
Notification Service - in-app notifications.

Notifications are rows the client polls; nothing is pushed. Writers add rows
to the caller's session and leave committing to the request (or to the
surrounding transaction, as in contest approval).
"""
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select, update, delete, func, insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import utcnow
from app.core.config import settings
from app.core.exceptions import NotificationNotFoundError, NotOwnerError
from app.core.types import generate_uuid, is_valid_uuid
from app.models.notification import Notification, NotificationType


class NotificationService:

    def __init__(self, db: AsyncSession):
        self.db = db

    def notify(
        self,
        user_id: str,
        type: NotificationType,
        message: str,
        sender_id: Optional[str] = None,
        related_project_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            sender_id=sender_id,
            type=type,
            message=message,
            related_project_id=related_project_id,
            extra_data=metadata,
        )
        self.db.add(notification)
        return notification

    async def notify_many(
        self,
        user_ids: Iterable[str],
        type: NotificationType,
        message: str,
        sender_id: Optional[str] = None,
        related_project_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Bulk insert one notification per recipient; returns how many were written"""
        now = utcnow()
        rows = [
            {
                "id": generate_uuid(),
                "user_id": user_id,
                "sender_id": sender_id,
                "type": type,
                "message": message,
                "is_read": False,
                "related_project_id": related_project_id,
                "extra_data": metadata,
                "created_at": now,
            }
            for user_id in user_ids
        ]
        if not rows:
            return 0
        await self.db.execute(insert(Notification), rows)
        return len(rows)

    async def list_for_user(self, user_id: str, limit: Optional[int] = None) -> List[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit or settings.NOTIFICATION_PAGE_SIZE)
        )
        return list(result.scalars().all())

    async def unread_count(self, user_id: str) -> int:
        count = await self.db.scalar(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        )
        return count or 0

    async def mark_read(self, notification_id: str, user_id: str) -> Notification:
        notification = await self.db.get(Notification, notification_id) if is_valid_uuid(notification_id) else None
        if not notification:
            raise NotificationNotFoundError(notification_id)
        if notification.user_id != user_id:
            raise NotOwnerError("Not authorized to update this notification")
        notification.is_read = True
        await self.db.commit()
        return notification

    async def mark_all_read(self, user_id: str) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        await self.db.commit()
        return result.rowcount

    async def delete_friend_request_notice(self, sender_id: str, receiver_id: str) -> None:
        """Remove the pending FRIEND_REQUEST notice when the request is withdrawn"""
        await self.db.execute(
            delete(Notification).where(
                Notification.user_id == receiver_id,
                Notification.sender_id == sender_id,
                Notification.type == NotificationType.FRIEND_REQUEST,
            )
        )
