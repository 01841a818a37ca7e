"""
Unit tests for ReportService.

All tests are fully mocked - no database or external dependencies.
"""

import uuid
from datetime import UTC, datetime
from io import BytesIO
from unittest.mock import AsyncMock, patch

import pytest
from openpyxl import load_workbook

from src.core.config import settings
from src.models.attachment import Attachment
from src.exceptions import NotFoundError, RequiredFieldError, ValidationError
from src.models.enums import AttachmentParentType, ParentType, Priority, ReportStatus
from src.models.report import Report
from src.schemas.common import PaginationParams
from src.schemas.report import ReportCreate, ReportFilterParams, ReportUpdate
from src.services.report_service import ReportService

MODULE = "src.services.report_service"


@pytest.fixture
def mock_session():
    return AsyncMock()


@pytest.fixture
def mocks():
    """Every collaborator of ReportService, keyed by attribute name."""
    collaborators = {
        "report_repo": ("ReportRepository", AsyncMock()),
        "ticket_repo": ("TicketRepository", AsyncMock()),
        "category_repo": ("CategoryRepository", AsyncMock()),
        "user_repo": ("UserRepository", AsyncMock()),
        "id_service": ("IdService", AsyncMock()),
        "notification_service": ("NotificationService", AsyncMock()),
        "activity_service": ("ActivityLogService", AsyncMock()),
        "attachment_service": ("AttachmentService", AsyncMock()),
        "comment_service": ("CommentService", AsyncMock()),
    }
    collaborators["report_repo"][1].add.side_effect = lambda report: report
    collaborators["report_repo"][1].update.side_effect = lambda report: report
    collaborators["id_service"][1].generate_id.return_value = "R26101800001"
    collaborators["ticket_repo"][1].existing_ids.return_value = set()
    collaborators["user_repo"][1].exists.return_value = True
    return {name: mock for name, (_, mock) in collaborators.items()}, collaborators


@pytest.fixture
def report_service(mock_session, mocks):
    by_name, collaborators = mocks
    patches = [
        patch(f"{MODULE}.{class_name}", return_value=mock)
        for class_name, mock in collaborators.values()
    ]
    for p in patches:
        p.start()
    try:
        service = ReportService(mock_session)
    finally:
        for p in patches:
            p.stop()
    return service


@pytest.fixture
def m(mocks):
    return mocks[0]


def make_report(creator, assignee=None, status=ReportStatus.UNCONFIRMED) -> Report:
    report = Report(
        id="R26101800001",
        title="Leaking pipe",
        status=status,
        priority=Priority.MEDIUM,
        creator_id=creator.id,
        assignee_id=assignee.id if assignee else None,
    )
    report.assignee = assignee
    return report


class TestCreateReport:
    @pytest.mark.asyncio
    async def test_requires_title(self, report_service, m, regular_user):
        with pytest.raises(RequiredFieldError):
            await report_service.create_report(ReportCreate(title="  "), regular_user)

        m["id_service"].generate_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_starts_unconfirmed_with_sequential_id(
        self, report_service, m, mock_session, regular_user
    ):
        report = await report_service.create_report(
            ReportCreate(title=" Leaking pipe ", priority=Priority.HIGH), regular_user
        )

        m["id_service"].generate_id.assert_awaited_once_with("R")
        assert report.id == "R26101800001"
        assert report.title == "Leaking pipe"
        assert report.status == ReportStatus.UNCONFIRMED
        assert report.creator_id == regular_user.id
        m["activity_service"].record.assert_awaited_once()
        m["notification_service"].create.assert_not_called()
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_assignee_gets_exactly_one_notification(
        self, report_service, m, regular_user, user_factory
    ):
        assignee = user_factory(email="worker@example.com", role="STAFF")

        await report_service.create_report(
            ReportCreate(title="Broken light", assignee_id=assignee.id), regular_user
        )

        m["notification_service"].create.assert_awaited_once()
        call = m["notification_service"].create.call_args
        assert call.args[0] == assignee.id
        assert call.kwargs["related_id"] == "R26101800001"
        assert call.kwargs["related_type"] == ParentType.REPORT

    @pytest.mark.asyncio
    async def test_unknown_assignee(self, report_service, m, regular_user):
        m["user_repo"].exists.return_value = False

        with pytest.raises(ValidationError) as exc_info:
            await report_service.create_report(
                ReportCreate(title="Broken light", assignee_id=uuid.uuid4()), regular_user
            )

        assert exc_info.value.error_code == "INVALID_REFERENCE"
        m["report_repo"].add.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_ticket_link(self, report_service, m, regular_user):
        m["ticket_repo"].existing_ids.return_value = {"W26101800001"}

        with pytest.raises(ValidationError) as exc_info:
            await report_service.create_report(
                ReportCreate(title="Broken light", ticket_ids=["W26101800001", "W26101800002"]),
                regular_user,
            )

        assert exc_info.value.details == {"ticketIds": ["W26101800002"]}

    @pytest.mark.asyncio
    async def test_links_tickets(self, report_service, m, regular_user):
        m["ticket_repo"].existing_ids.return_value = {"W26101800001"}

        await report_service.create_report(
            ReportCreate(title="Broken light", ticket_ids=["W26101800001"]), regular_user
        )

        m["report_repo"].replace_ticket_links.assert_awaited_once_with(
            "R26101800001", ["W26101800001"]
        )


class TestUpdateReport:
    @pytest.mark.asyncio
    async def test_missing_report(self, report_service, m, regular_user):
        m["report_repo"].get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await report_service.update_report("R00000000000", ReportUpdate(), regular_user)

    @pytest.mark.asyncio
    async def test_status_change_notifies_creator(
        self, report_service, m, regular_user, admin_user_model
    ):
        report = make_report(regular_user)
        m["report_repo"].get_by_id.return_value = report

        await report_service.update_report(
            report.id, ReportUpdate(status=ReportStatus.PROCESSING), admin_user_model
        )

        assert report.status == ReportStatus.PROCESSING
        m["notification_service"].create.assert_awaited_once()
        assert m["notification_service"].create.call_args.args[0] == regular_user.id
        entry = m["activity_service"].record.call_args.args[2]
        assert entry == "Status changed from UNCONFIRMED to PROCESSING"

    @pytest.mark.asyncio
    async def test_reassignment_notifies_new_assignee(
        self, report_service, m, regular_user, admin_user_model, user_factory
    ):
        worker = user_factory(email="worker@example.com", name="Worker", role="STAFF")
        report = make_report(regular_user)
        m["report_repo"].get_by_id.return_value = report

        def apply(updated):
            updated.assignee = worker
            return updated

        m["report_repo"].update.side_effect = apply

        await report_service.update_report(
            report.id, ReportUpdate(assignee_id=worker.id), admin_user_model
        )

        m["notification_service"].create.assert_awaited_once()
        assert m["notification_service"].create.call_args.args[0] == worker.id
        assert m["activity_service"].record.call_args.args[2] == "Assigned to Worker"

    @pytest.mark.asyncio
    async def test_unchanged_fields_are_silent(
        self, report_service, m, regular_user, admin_user_model
    ):
        report = make_report(regular_user)
        m["report_repo"].get_by_id.return_value = report

        await report_service.update_report(
            report.id, ReportUpdate(priority=Priority.URGENT), admin_user_model
        )

        assert report.priority == Priority.URGENT
        m["notification_service"].create.assert_not_called()
        m["activity_service"].record.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, report_service, m, regular_user):
        m["report_repo"].get_by_id.return_value = make_report(regular_user)

        with pytest.raises(RequiredFieldError):
            await report_service.update_report("R26101800001", ReportUpdate(title=""), regular_user)


class TestListReports:
    @pytest.mark.asyncio
    async def test_category_filter_includes_descendants(self, report_service, m):
        parent, child = uuid.uuid4(), uuid.uuid4()
        m["category_repo"].get_descendant_ids.return_value = [parent, child]
        m["report_repo"].search_reports.return_value = ([], 0)

        await report_service.list_reports(
            ReportFilterParams(category_ids=[parent]), PaginationParams(page=2, page_size=10)
        )

        kwargs = m["report_repo"].search_reports.call_args.kwargs
        assert kwargs["category_ids"] == [parent, child]
        assert kwargs["offset"] == 10
        assert kwargs["limit"] == 10
        assert kwargs["sort_field"] == "createdAt"
        assert kwargs["sort_order"] == "desc"


class TestDeleteAndComments:
    @pytest.mark.asyncio
    async def test_delete_removes_dependents(
        self, report_service, m, mock_session, regular_user
    ):
        report = make_report(regular_user)
        m["report_repo"].get_by_id.return_value = report

        await report_service.delete_report(report.id, regular_user)

        m["comment_service"].comment_repo.delete_for_parent.assert_awaited_once_with(
            ParentType.REPORT, report.id
        )
        m["notification_service"].notification_repo.delete_for_related.assert_awaited_once()
        m["report_repo"].replace_ticket_links.assert_awaited_once_with(report.id, [])
        m["report_repo"].delete.assert_awaited_once_with(report)
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_add_comment_commits(self, report_service, m, mock_session, regular_user):
        report = make_report(regular_user)
        m["report_repo"].get_by_id.return_value = report

        await report_service.add_comment(report.id, "On it", regular_user)

        m["comment_service"].add_comment.assert_awaited_once_with(
            ParentType.REPORT, report, regular_user, "On it"
        )
        mock_session.commit.assert_awaited_once()


class TestExportReports:
    @pytest.mark.asyncio
    async def test_exports_all_matches_unpaginated(self, report_service, m, regular_user):
        report = make_report(regular_user)
        report.creator = regular_user
        report.created_at = datetime(2026, 10, 18, 8, 0, tzinfo=UTC)
        m["report_repo"].search_reports.return_value = ([report], 1)
        end = datetime(2026, 10, 19, tzinfo=UTC)

        content = await report_service.export_reports(
            ReportFilterParams(end_date=end), regular_user
        )

        kwargs = m["report_repo"].search_reports.call_args.kwargs
        assert kwargs["limit"] is None
        assert kwargs["created_to"] == end
        assert "offset" not in kwargs

        rows = list(load_workbook(BytesIO(content)).active.iter_rows(values_only=True))
        assert rows[0][:3] == ("ID", "Title", "Description")
        assert rows[1][0] == report.id
        assert rows[1][2] == "N/A"
        assert rows[1][3] == "Unconfirmed"
        assert rows[1][7] == regular_user.name
        assert rows[1][8] == "N/A"


class TestPublicReports:
    @pytest.mark.asyncio
    async def test_no_public_category_means_empty_feed(self, report_service, m):
        m["category_repo"].ids_by_names.return_value = []

        reports, total = await report_service.list_public_reports(PaginationParams())

        assert (reports, total) == ([], 0)
        m["category_repo"].ids_by_names.assert_awaited_once_with(
            settings.public_report_category_names
        )
        m["report_repo"].search_public.assert_not_called()

    @pytest.mark.asyncio
    async def test_feed_covers_subcategories_and_attaches_files(
        self, report_service, m, regular_user
    ):
        root, child = uuid.uuid4(), uuid.uuid4()
        report = make_report(regular_user)
        report.created_at = datetime(2026, 10, 18, 8, 0, tzinfo=UTC)
        photo = Attachment(
            id=uuid.uuid4(),
            filename="wallet.jpg",
            url="https://files.example.com/wallet.jpg",
            parent_id=report.id,
            parent_type=AttachmentParentType.REPORT,
        )
        photo.created_at = report.created_at
        m["category_repo"].ids_by_names.return_value = [root]
        m["category_repo"].get_descendant_ids.return_value = [root, child]
        m["report_repo"].search_public.return_value = ([report], 1)
        m["attachment_service"].list_for.return_value = [photo]
        location = uuid.uuid4()

        reports, total = await report_service.list_public_reports(
            PaginationParams(page=1, page_size=10),
            location_ids=[location],
            sort_field="location",
            sort_order="asc",
        )

        m["report_repo"].search_public.assert_awaited_once_with(
            [root, child],
            location_ids=[location],
            offset=0,
            limit=10,
            sort_field="location",
            sort_order="asc",
        )
        assert total == 1
        assert reports[0].id == report.id
        assert [a.filename for a in reports[0].attachments] == ["wallet.jpg"]
        assert "creator" not in reports[0].model_dump(by_alias=True)
