"""
Category service for the three-level category tree.
"""

import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.db_errors import translate_integrity_error
from src.exceptions import ConflictError, NotFoundError, RequiredFieldError, ValidationError
from src.models.category import CATEGORY_NAME_CONSTRAINT, MAX_CATEGORY_LEVEL, Category
from src.repositories.category_repository import CategoryRepository
from src.schemas.reference import CategoryTreeNode, SortOrderItem

logger = logging.getLogger(__name__)

DUPLICATE_CATEGORY_MESSAGE = "A category with this name already exists at this level"


class CategoryService:
    """Service class for category operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.category_repo = CategoryRepository(session)

    async def _get_or_404(self, category_id: uuid.UUID) -> Category:
        category = await self.category_repo.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category")
        return category

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(
                e, {CATEGORY_NAME_CONSTRAINT: DUPLICATE_CATEGORY_MESSAGE}
            ) from e

    async def get_tree(self) -> list[CategoryTreeNode]:
        """
        The full tree, children nested under their parent.

        Nodes are ordered by sort_order (then name) at every level.
        """
        nodes: dict[uuid.UUID, CategoryTreeNode] = {}
        roots: list[CategoryTreeNode] = []
        # list_all orders by level, so a parent is always seen before its children
        for category in await self.category_repo.list_all():
            node = CategoryTreeNode.model_validate(category)
            nodes[category.id] = node
            parent = nodes.get(category.parent_id) if category.parent_id else None
            if parent is not None:
                parent.children.append(node)
            else:
                roots.append(node)
        return roots

    async def create_category(
        self, name: str | None, parent_id: uuid.UUID | None = None
    ) -> Category:
        """
        Create a category under ``parent_id`` (top level when None).

        Raises:
            RequiredFieldError: If name is missing
            NotFoundError: If the parent does not exist
            ValidationError: If the new node would be deeper than three levels
            ConflictError: If a sibling has the same name
        """
        name = (name or "").strip()
        if not name:
            raise RequiredFieldError("name")

        level = 1
        if parent_id is not None:
            parent = await self._get_or_404(parent_id)
            level = parent.level + 1
            if level > MAX_CATEGORY_LEVEL:
                raise ValidationError(
                    f"Categories can be nested at most {MAX_CATEGORY_LEVEL} levels deep",
                    error_code="MAX_DEPTH_EXCEEDED",
                )

        if await self.category_repo.name_taken(name, parent_id):
            logger.warning(f"Duplicate category name {name!r} under {parent_id}")
            raise ConflictError(DUPLICATE_CATEGORY_MESSAGE)

        category = Category(
            name=name,
            parent_id=parent_id,
            level=level,
            sort_order=await self.category_repo.next_sort_order(parent_id),
        )
        try:
            category = await self.category_repo.add(category)
        except IntegrityError as e:
            await self.session.rollback()
            raise translate_integrity_error(
                e, {CATEGORY_NAME_CONSTRAINT: DUPLICATE_CATEGORY_MESSAGE}
            ) from e
        await self._commit()

        logger.info(f"Category {category.id} ({name}) created at level {level}")
        return category

    async def rename_category(self, category_id: uuid.UUID, name: str | None) -> Category:
        category = await self._get_or_404(category_id)
        name = (name or "").strip()
        if not name:
            raise RequiredFieldError("name")

        if name != category.name and await self.category_repo.name_taken(
            name, category.parent_id, exclude_id=category.id
        ):
            raise ConflictError(DUPLICATE_CATEGORY_MESSAGE)

        category.name = name
        category = await self.category_repo.update(category)
        await self._commit()
        return category

    async def delete_category(self, category_id: uuid.UUID) -> None:
        """
        Delete a leaf category no report uses.

        Raises:
            ConflictError: If it has children or reports reference it
        """
        category = await self._get_or_404(category_id)

        if await self.category_repo.has_children(category.id):
            raise ConflictError("Category has subcategories")
        if await self.category_repo.is_referenced_by_reports(category.id):
            raise ConflictError("Category is used by reports")

        await self.category_repo.delete(category)
        await self.session.commit()

        logger.info(f"Category {category_id} deleted")

    async def reorder(self, items: list[SortOrderItem]) -> list[Category]:
        """Apply new sort orders in one transaction; any unknown id aborts all."""
        categories = {
            c.id: c for c in await self.category_repo.get_by_ids([item.id for item in items])
        }
        missing = [str(item.id) for item in items if item.id not in categories]
        if missing:
            raise NotFoundError("Category", details={"ids": missing})

        for item in items:
            categories[item.id].sort_order = item.sort_order
        await self.session.commit()
        return [categories[item.id] for item in items]
