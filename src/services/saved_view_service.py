"""
Saved view service.

This module provides:
- CRUD for a user's saved views, scoped to the owner
- The atomic default swap (one default per user and list screen)
- Bulk reconciliation of stored filters into the canonical key set
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.db_errors import translate_integrity_error
from src.exceptions import AlreadyExistsError, NotFoundError, RequiredFieldError
from src.models.enums import SavedViewType
from src.models.saved_view import DEFAULT_VIEW_INDEX, VIEW_NAME_CONSTRAINT, SavedView
from src.models.user import User
from src.repositories.saved_view_repository import SavedViewRepository
from src.services.view_filters import reconcile_filters

logger = logging.getLogger(__name__)

DUPLICATE_NAME_MESSAGE = "A view with this name already exists"
DUPLICATE_DEFAULT_MESSAGE = "Only one default view is allowed"

CONSTRAINT_MESSAGES = {
    VIEW_NAME_CONSTRAINT: DUPLICATE_NAME_MESSAGE,
    DEFAULT_VIEW_INDEX: DUPLICATE_DEFAULT_MESSAGE,
}


@dataclass
class MigrationSummary:
    """Counts reported by migrate_all_views."""

    total: int = 0
    migrated: int = 0
    unchanged: int = 0
    skipped: int = 0
    dry_run: bool = False


class SavedViewService:
    """Service class for saved view operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.view_repo = SavedViewRepository(session)

    def _canonical(self, filters: dict[str, Any], view_type: SavedViewType) -> dict[str, Any]:
        return reconcile_filters(
            filters, view_type, preserve_unknown=settings.saved_view_preserve_unknown_keys
        ).filters

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(e, CONSTRAINT_MESSAGES) from e

    async def list_views(
        self, user: User, view_type: SavedViewType | None = None
    ) -> list[SavedView]:
        return await self.view_repo.list_for_user(user.id, view_type)

    async def get_view(self, user: User, view_id: uuid.UUID) -> SavedView:
        """A view owned by ``user``; anyone else's view is reported as missing."""
        view = await self.view_repo.get_owned(view_id, user.id)
        if view is None:
            raise NotFoundError("Saved view")
        return view

    async def create_view(
        self,
        user: User,
        name: str | None,
        view_type: SavedViewType,
        filters: dict[str, Any] | None,
        is_default: bool = False,
    ) -> SavedView:
        """
        Create a saved view.

        Filters are reconciled before they are stored. ``is_default=True``
        swaps the default in the same transaction.

        Raises:
            RequiredFieldError: If name or filters is missing
            AlreadyExistsError: If the user already has a view of that name
                for the same list screen
        """
        name = (name or "").strip()
        missing = []
        if not name:
            missing.append("name")
        if filters is None:
            missing.append("filters")
        if missing:
            raise RequiredFieldError(*missing)

        if await self.view_repo.name_taken(user.id, name, view_type):
            logger.warning(f"User {user.id} already has a {view_type.value} view named {name!r}")
            raise AlreadyExistsError(message=DUPLICATE_NAME_MESSAGE)

        try:
            view = await self.view_repo.add(
                SavedView(
                    user_id=user.id,
                    name=name,
                    view_type=view_type,
                    filters=self._canonical(filters, view_type),
                    is_default=False,
                )
            )
            if is_default:
                await self.view_repo.swap_default(user.id, view_type, view.id)
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(e, CONSTRAINT_MESSAGES) from e
        await self._commit()

        if is_default:
            await self.session.refresh(view)

        logger.info(f"Saved view {view.id} ({view_type.value}) created by {user.id}")
        return view

    async def update_view(
        self,
        user: User,
        view_id: uuid.UUID,
        name: str | None = None,
        filters: dict[str, Any] | None = None,
        is_default: bool | None = None,
    ) -> SavedView:
        """Partially update an owned view."""
        view = await self.get_view(user, view_id)

        if name is not None:
            name = name.strip()
            if not name:
                raise RequiredFieldError("name")
            if name != view.name and await self.view_repo.name_taken(
                user.id, name, view.view_type, exclude_id=view.id
            ):
                raise AlreadyExistsError(message=DUPLICATE_NAME_MESSAGE)
            view.name = name

        if filters is not None:
            view.filters = self._canonical(filters, view.view_type)

        try:
            await self.view_repo.update(view)
            if is_default is True and not view.is_default:
                await self.view_repo.swap_default(user.id, view.view_type, view.id)
            elif is_default is False and view.is_default:
                await self.view_repo.swap_default(user.id, view.view_type, None)
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(e, CONSTRAINT_MESSAGES) from e
        await self._commit()
        await self.session.refresh(view)

        logger.info(f"Saved view {view.id} updated by {user.id}")
        return view

    async def delete_view(self, user: User, view_id: uuid.UUID) -> None:
        view = await self.get_view(user, view_id)
        await self.view_repo.delete(view)
        await self.session.commit()

        logger.info(f"Saved view {view_id} deleted by {user.id}")

    async def set_default(self, user: User, view_id: uuid.UUID) -> SavedView:
        """
        Make an owned view the default of its list screen.

        The previous default is cleared and the new one set in one transaction; the
        partial unique index turns a concurrent second default into a 409.
        """
        view = await self.get_view(user, view_id)

        try:
            await self.view_repo.swap_default(user.id, view.view_type, view.id)
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(e, CONSTRAINT_MESSAGES) from e
        await self._commit()
        await self.session.refresh(view)

        logger.info(f"Saved view {view.id} is now the default {view.view_type.value} view")
        return view

    async def migrate_all_views(
        self, dry_run: bool = False, preserve_unknown: bool | None = None
    ) -> MigrationSummary:
        """
        Reconcile the filters of every stored view.

        A view counts as migrated when reconciliation renamed a key or
        dropped one. Views whose stored filters are not an object are logged
        and skipped. With ``dry_run`` nothing is written.
        """
        if preserve_unknown is None:
            preserve_unknown = settings.saved_view_preserve_unknown_keys

        summary = MigrationSummary(dry_run=dry_run)
        async for view in self.view_repo.iter_all():
            summary.total += 1
            if not isinstance(view.filters, Mapping):
                summary.skipped += 1
                logger.warning(
                    f"Saved view {view.id}: filters are not an object, skipping"
                )
                continue

            result = reconcile_filters(view.filters, view.view_type, preserve_unknown)
            if not result.migrated and result.filters == view.filters:
                summary.unchanged += 1
                continue

            summary.migrated += 1
            logger.info(f"Saved view {view.id}: {view.filters} -> {result.filters}")
            if not dry_run:
                view.filters = result.filters

        if dry_run:
            await self.session.rollback()
        else:
            await self.session.commit()

        logger.info(
            f"Saved view migration finished: total={summary.total} "
            f"migrated={summary.migrated} unchanged={summary.unchanged} "
            f"skipped={summary.skipped} dry_run={dry_run}"
        )
        return summary
