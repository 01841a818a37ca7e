"""
Category repository.

The category tree is shallow (three levels), so descendant expansion is
done with a recursive CTE rather than by walking the tree in Python.
"""

import uuid
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.category import Category
from src.models.report import Report
from src.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category model operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Category, session)

    async def list_all(self) -> list[Category]:
        """Every node, ordered for tree assembly."""
        result = await self.session.execute(
            select(Category).order_by(Category.level, Category.sort_order, Category.name)
        )
        return list(result.scalars().all())

    async def name_taken(
        self,
        name: str,
        parent_id: uuid.UUID | None,
        exclude_id: uuid.UUID | None = None,
    ) -> bool:
        """
        True if a sibling already uses ``name``.

        The unique constraint treats NULL parents as distinct, so top-level
        duplicates are only caught here.
        """
        query = select(Category.id).where(func.lower(Category.name) == name.strip().lower())
        if parent_id is None:
            query = query.where(Category.parent_id.is_(None))
        else:
            query = query.where(Category.parent_id == parent_id)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)

        result = await self.session.execute(query.limit(1))
        return result.first() is not None

    async def next_sort_order(self, parent_id: uuid.UUID | None) -> int:
        query = select(func.coalesce(func.max(Category.sort_order), -1))
        if parent_id is None:
            query = query.where(Category.parent_id.is_(None))
        else:
            query = query.where(Category.parent_id == parent_id)
        return (await self.session.execute(query)).scalar_one() + 1

    async def get_descendant_ids(self, category_ids: Iterable[uuid.UUID]) -> set[uuid.UUID]:
        """
        The given ids plus every category below them.

        Example:
            ids = await category_repo.get_descendant_ids([plumbing_id])
            # plumbing, its subcategories and their children
        """
        roots = list(category_ids)
        if not roots:
            return set()

        tree = (
            select(Category.id)
            .where(Category.id.in_(roots))
            .cte(name="category_tree", recursive=True)
        )
        tree = tree.union_all(select(Category.id).where(Category.parent_id == tree.c.id))

        result = await self.session.execute(select(tree.c.id))
        return set(result.scalars().all())

    async def has_children(self, category_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(Category.id).where(Category.parent_id == category_id).limit(1)
        )
        return result.first() is not None

    async def is_referenced_by_reports(self, category_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(Report.id).where(Report.category_id == category_id).limit(1)
        )
        return result.first() is not None

    async def ids_by_names(self, names: Iterable[str]) -> list[uuid.UUID]:
        """Ids of the categories with any of the given names, at any level."""
        wanted = [name.strip().lower() for name in names if name.strip()]
        if not wanted:
            return []
        result = await self.session.execute(
            select(Category.id).where(func.lower(Category.name).in_(wanted))
        )
        return list(result.scalars().all())
