"""In-app notifications for job seekers."""
import logging
from typing import List

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFound
from app.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: int, message: str) -> Notification:
        notification = Notification(user_id=user_id, message=message, seen=False)
        self.db.add(notification)
        await self.db.flush()
        logger.info(f"Notification {notification.id} created for user {user_id}")
        return notification

    async def list_for_user(self, user_id: int, limit: int = 50) -> List[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def mark_seen(self, notification_id: int, user_id: int) -> Notification:
        notification = await self.db.get(Notification, notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFound("Notification not found")
        notification.seen = True
        await self.db.flush()
        return notification

    async def mark_all_seen(self, user_id: int) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.seen.is_(False))
            .values(seen=True)
        )
        return result.rowcount or 0

    async def unseen_count(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id, Notification.seen.is_(False)
            )
        )
        return result.scalar_one()
