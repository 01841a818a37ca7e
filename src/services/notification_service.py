"""
Notification service: the in-app message sink.

Other services call ``create`` / ``notify_many`` inside their own
transaction; the notifications are committed together with the change
that caused them.
"""

import logging
import uuid
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from src.exceptions import NotFoundError, RequiredFieldError
from src.models.enums import ParentType
from src.models.notification import Notification
from src.repositories.notification_repository import NotificationRepository
from src.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Service class for notification operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.notification_repo = NotificationRepository(session)
        self.user_repo = UserRepository(session)

    def _build(
        self,
        user_id: uuid.UUID,
        title: str,
        message: str,
        related_id: str | None = None,
        related_type: ParentType | None = None,
    ) -> Notification:
        return Notification(
            user_id=user_id,
            title=title,
            message=message,
            is_read=False,
            related_id=related_id,
            related_type=related_type,
        )

    async def create(
        self,
        user_id: uuid.UUID,
        title: str,
        message: str,
        related_id: str | None = None,
        related_type: ParentType | None = None,
    ) -> Notification:
        """Add one notification to the current transaction (no commit)."""
        notification = await self.notification_repo.add(
            self._build(user_id, title, message, related_id, related_type)
        )
        logger.debug(f"Notification for {user_id}: {title}")
        return notification

    async def notify_many(
        self,
        user_ids: Iterable[uuid.UUID],
        title: str,
        message: str,
        related_id: str | None = None,
        related_type: ParentType | None = None,
    ) -> list[Notification]:
        """
        Notify several users at once, one notification each.

        Recipients are de-duplicated and the rows are flushed together.
        """
        recipients = list(dict.fromkeys(user_ids))
        if not recipients:
            return []

        notifications = [
            self._build(user_id, title, message, related_id, related_type)
            for user_id in recipients
        ]
        return await self.notification_repo.add_all(notifications)

    # -------------------------------------------------------------------------
    # Endpoint operations
    # -------------------------------------------------------------------------

    async def send(
        self,
        user_id: uuid.UUID | None,
        title: str | None,
        message: str | None,
        related_id: str | None = None,
        related_type: ParentType | None = None,
    ) -> Notification:
        """
        Create a notification on behalf of an API caller.

        Raises:
            RequiredFieldError: If userId, title or message is missing
            NotFoundError: If the recipient does not exist
        """
        missing = [
            name
            for name, value in (("userId", user_id), ("title", title), ("message", message))
            if not value
        ]
        if missing:
            raise RequiredFieldError(*missing)

        if not await self.user_repo.exists(user_id):
            raise NotFoundError("User")

        notification = await self.create(user_id, title, message, related_id, related_type)
        await self.session.commit()
        return notification

    async def list_for_user(
        self,
        user_id: uuid.UUID,
        unread_only: bool = False,
        limit: int = 50,
    ) -> tuple[list[Notification], int]:
        """Notifications newest first, plus the unread count."""
        notifications = await self.notification_repo.list_for_user(
            user_id, unread_only=unread_only, limit=limit
        )
        unread = await self.notification_repo.count_unread(user_id)
        return notifications, unread

    async def mark_read(self, user_id: uuid.UUID, notification_id: uuid.UUID) -> Notification:
        notification = await self.notification_repo.get_owned(notification_id, user_id)
        if notification is None:
            raise NotFoundError("Notification")

        notification.is_read = True
        notification = await self.notification_repo.update(notification)
        await self.session.commit()
        return notification

    async def mark_all_read(self, user_id: uuid.UUID) -> int:
        count = await self.notification_repo.mark_all_read(user_id)
        await self.session.commit()

        logger.info(f"Marked {count} notification(s) read for {user_id}")
        return count

    async def delete(self, user_id: uuid.UUID, notification_id: uuid.UUID) -> None:
        notification = await self.notification_repo.get_owned(notification_id, user_id)
        if notification is None:
            raise NotFoundError("Notification")

        await self.notification_repo.delete(notification)
        await self.session.commit()
