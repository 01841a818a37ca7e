"""
Unit tests for CategoryService.
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from src.exceptions import ConflictError, NotFoundError, RequiredFieldError, ValidationError
from src.models.category import Category
from src.schemas.reference import SortOrderItem
from src.services.category_service import DUPLICATE_CATEGORY_MESSAGE, CategoryService


def make_category(name, level=1, parent=None, sort_order=0):
    return Category(
        id=uuid.uuid4(),
        name=name,
        level=level,
        parent_id=parent.id if parent else None,
        sort_order=sort_order,
    )


@pytest.fixture
def mock_session():
    return AsyncMock()


@pytest.fixture
def mock_category_repo():
    repo = AsyncMock()
    repo.add.side_effect = lambda c: c
    repo.update.side_effect = lambda c: c
    repo.name_taken.return_value = False
    repo.next_sort_order.return_value = 0
    return repo


@pytest.fixture
def category_service(mock_session, mock_category_repo):
    with patch(
        "src.services.category_service.CategoryRepository", return_value=mock_category_repo
    ):
        service = CategoryService(mock_session)
    return service


class TestCreateCategory:
    @pytest.mark.asyncio
    async def test_top_level(self, category_service, mock_category_repo, mock_session):
        mock_category_repo.next_sort_order.return_value = 4

        category = await category_service.create_category(" Plumbing ")

        assert category.name == "Plumbing"
        assert category.level == 1
        assert category.sort_order == 4
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_child_is_one_level_deeper(self, category_service, mock_category_repo):
        parent = make_category("Plumbing")
        mock_category_repo.get_by_id.return_value = parent

        category = await category_service.create_category("Leaks", parent.id)

        assert category.level == 2
        assert category.parent_id == parent.id

    @pytest.mark.asyncio
    async def test_fourth_level_rejected(self, category_service, mock_category_repo):
        mock_category_repo.get_by_id.return_value = make_category("Drips", level=3)

        with pytest.raises(ValidationError) as exc_info:
            await category_service.create_category("Too deep", uuid.uuid4())

        assert exc_info.value.error_code == "MAX_DEPTH_EXCEEDED"
        mock_category_repo.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_parent(self, category_service, mock_category_repo):
        mock_category_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await category_service.create_category("Orphan", uuid.uuid4())

    @pytest.mark.asyncio
    async def test_duplicate_sibling(self, category_service, mock_category_repo):
        mock_category_repo.name_taken.return_value = True

        with pytest.raises(ConflictError) as exc_info:
            await category_service.create_category("Plumbing")

        assert exc_info.value.message == DUPLICATE_CATEGORY_MESSAGE

    @pytest.mark.asyncio
    async def test_name_required(self, category_service):
        with pytest.raises(RequiredFieldError):
            await category_service.create_category(None)


class TestDeleteCategory:
    @pytest.mark.asyncio
    async def test_with_children(self, category_service, mock_category_repo):
        mock_category_repo.get_by_id.return_value = make_category("Plumbing")
        mock_category_repo.has_children.return_value = True

        with pytest.raises(ConflictError):
            await category_service.delete_category(uuid.uuid4())

        mock_category_repo.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_used_by_reports(self, category_service, mock_category_repo):
        mock_category_repo.get_by_id.return_value = make_category("Plumbing")
        mock_category_repo.has_children.return_value = False
        mock_category_repo.is_referenced_by_reports.return_value = True

        with pytest.raises(ConflictError) as exc_info:
            await category_service.delete_category(uuid.uuid4())

        assert exc_info.value.message == "Category is used by reports"

    @pytest.mark.asyncio
    async def test_unused_leaf(self, category_service, mock_category_repo, mock_session):
        category = make_category("Plumbing")
        mock_category_repo.get_by_id.return_value = category
        mock_category_repo.has_children.return_value = False
        mock_category_repo.is_referenced_by_reports.return_value = False

        await category_service.delete_category(category.id)

        mock_category_repo.delete.assert_awaited_once_with(category)
        mock_session.commit.assert_awaited_once()


class TestTreeAndOrder:
    @pytest.mark.asyncio
    async def test_tree_nests_children(self, category_service, mock_category_repo):
        plumbing = make_category("Plumbing")
        electric = make_category("Electric", sort_order=1)
        leaks = make_category("Leaks", level=2, parent=plumbing)
        drips = make_category("Drips", level=3, parent=leaks)
        mock_category_repo.list_all.return_value = [plumbing, electric, leaks, drips]

        tree = await category_service.get_tree()

        assert [n.name for n in tree] == ["Plumbing", "Electric"]
        assert tree[0].children[0].name == "Leaks"
        assert tree[0].children[0].children[0].name == "Drips"
        assert tree[1].children == []

    @pytest.mark.asyncio
    async def test_reorder_unknown_id_changes_nothing(
        self, category_service, mock_category_repo, mock_session
    ):
        known = make_category("Plumbing")
        unknown = uuid.uuid4()
        mock_category_repo.get_by_ids.return_value = [known]

        with pytest.raises(NotFoundError) as exc_info:
            await category_service.reorder(
                [SortOrderItem(id=known.id, sort_order=3), SortOrderItem(id=unknown, sort_order=0)]
            )

        assert exc_info.value.details == {"ids": [str(unknown)]}
        assert known.sort_order == 0
        mock_session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_reorder(self, category_service, mock_category_repo):
        a, b = make_category("A"), make_category("B", sort_order=1)
        mock_category_repo.get_by_ids.return_value = [a, b]

        await category_service.reorder(
            [SortOrderItem(id=a.id, sort_order=1), SortOrderItem(id=b.id, sort_order=0)]
        )

        assert (a.sort_order, b.sort_order) == (1, 0)
