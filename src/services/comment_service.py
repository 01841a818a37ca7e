"""
Comment service shared by reports and tickets.

This module provides:
- Comment listing for a work item
- Comment creation with fan-out notifications to the people involved
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from src.exceptions import RequiredFieldError
from src.models.comment import Comment
from src.models.enums import ParentType
from src.models.user import User
from src.repositories.comment_repository import CommentRepository
from src.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

_LABELS = {ParentType.REPORT: "report", ParentType.TICKET: "ticket"}


class CommentService:
    """Service class for comment operations. Callers commit."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.comment_repo = CommentRepository(session)
        self.notification_service = NotificationService(session)

    async def list_comments(self, parent_type: ParentType, parent_id: str) -> list[Comment]:
        return await self.comment_repo.list_for_parent(parent_type, parent_id)

    async def add_comment(
        self,
        parent_type: ParentType,
        parent,
        author: User,
        content: str | None,
    ) -> Comment:
        """
        Add a comment to a report or ticket and notify the people involved.

        Recipients are the creator, the assignee and everyone who commented
        before, minus the author; each is notified once.

        Raises:
            RequiredFieldError: If content is missing or blank
        """
        content = (content or "").strip()
        if not content:
            raise RequiredFieldError("content")

        recipients: dict[uuid.UUID, None] = {}
        for user_id in (parent.creator_id, parent.assignee_id):
            if user_id:
                recipients[user_id] = None
        for user_id in sorted(
            await self.comment_repo.get_commenter_ids(parent_type, parent.id), key=str
        ):
            recipients[user_id] = None
        recipients.pop(author.id, None)

        comment = Comment(content=content, user_id=author.id)
        if parent_type == ParentType.REPORT:
            comment.report_id = parent.id
        else:
            comment.ticket_id = parent.id
        comment = await self.comment_repo.add(comment)

        label = _LABELS[parent_type]
        await self.notification_service.notify_many(
            recipients,
            title=f"New comment on {label} {parent.id}",
            message=f"{author.name or author.email} commented on {label} \"{parent.title}\"",
            related_id=parent.id,
            related_type=parent_type,
        )

        logger.info(f"Comment {comment.id} added to {label} {parent.id} by {author.id}")
        return comment
