"""
Taskboard Backend — Service Unit Tests
=======================================

What:  Orchestration logic with a mocked Database (no real storage).

What we test:
    ✅ Mutations write through the transaction and audit in the same transaction
    ✅ Bulk import size checks happen before any storage call
    ✅ Bulk import defaults missing status to todo and audits once
    ✅ Partial updates keep stored values for empty fields
    ✅ Tasks are only reachable through their own project
    ✅ A failing write never commits
"""

from datetime import datetime, timezone

import pytest

from taskboard.exceptions import ConflictError, NotFoundError, NotFoundInRecycleBinError, ValidationError
from taskboard.schemas.audit import AuditContext
from taskboard.schemas.common import PaginationParams
from taskboard.schemas.project import Project, ProjectRequest, ProjectUpdateRequest, RecycledProject
from taskboard.schemas.task import (
    BulkImportRequest,
    RecycledTask,
    Task,
    TaskRequest,
    TaskStatus,
    TaskUpdateRequest,
)
from taskboard.schemas.user import User, UserRole
from taskboard.services.project_service import ProjectService
from taskboard.services.recycle_bin_service import RecycleBinService
from taskboard.services.task_service import TaskService
from taskboard.services.user_service import UserService

NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
AUDIT = AuditContext(actor_id=7, ip_address="10.0.0.1", user_agent="pytest")


def make_project(**overrides):
    data = {"id": 1, "name": "Alpha", "description": "x", "owner_id": 7,
            "created_at": NOW, "updated_at": NOW}
    data.update(overrides)
    return Project(**data)


def make_task(**overrides):
    data = {"id": 10, "project_id": 1, "title": "Write report", "created_at": NOW, "updated_at": NOW}
    data.update(overrides)
    return Task(**data)


class TestProjectService:

    def setup_method(self):
        self.service = ProjectService()

    @pytest.mark.asyncio
    async def test_create_audits_in_same_transaction(self, mock_db):
        created = make_project()
        mock_db.tx.projects.create.return_value = created

        result = await self.service.create_project(
            mock_db, ProjectRequest(name="Alpha", description="x"), owner_id=7, audit=AUDIT
        )

        assert result is created
        stored = mock_db.tx.projects.create.await_args.args[0]
        assert stored.owner_id == 7
        mock_db.tx.audit_log.log_action.assert_awaited_once()
        kwargs = mock_db.tx.audit_log.log_action.await_args.kwargs
        assert kwargs["action"] == "create"
        assert kwargs["entity_type"] == "project"
        assert kwargs["user_id"] == 7
        assert kwargs["ip_address"] == "10.0.0.1"
        mock_db.tx.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_partial_update_keeps_empty_fields(self, mock_db):
        mock_db.tx.projects.get_by_id.return_value = make_project()
        mock_db.tx.projects.update.side_effect = lambda project: project

        result = await self.service.update_project(
            mock_db, 1, ProjectUpdateRequest(name="Beta", description=""), audit=AUDIT
        )

        assert result.name == "Beta"
        assert result.description == "x"

    @pytest.mark.asyncio
    async def test_delete_not_found_never_commits(self, mock_db):
        mock_db.tx.projects.get_by_id.side_effect = NotFoundError("project", 99)

        with pytest.raises(NotFoundError):
            await self.service.delete_project(mock_db, 99, audit=AUDIT)

        mock_db.tx.projects.delete.assert_not_awaited()
        mock_db.tx.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_by_owner_uses_owner_query(self, mock_db):
        mock_db.projects.list_by_owner.return_value = ([make_project()], 1)

        projects, meta = await self.service.list_projects(
            mock_db, PaginationParams(page=1, page_size=10), owner_id=7
        )

        mock_db.projects.list_by_owner.assert_awaited_once_with(7, 10, 0)
        assert meta.total == 1
        assert len(projects) == 1


class TestTaskServiceBulkImport:

    def setup_method(self):
        self.service = TaskService(max_bulk_import=1000)

    @pytest.mark.asyncio
    async def test_empty_batch_rejected_without_storage(self, mock_db):
        with pytest.raises(ValidationError):
            await self.service.bulk_import(mock_db, 1, BulkImportRequest(tasks=[]))

        mock_db.transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_oversized_batch_rejected_without_storage(self, mock_db):
        batch = BulkImportRequest(tasks=[TaskRequest(title=f"t{i}") for i in range(1500)])

        with pytest.raises(ValidationError) as exc_info:
            await self.service.bulk_import(mock_db, 1, batch)

        assert exc_info.value.context["received"] == 1500
        mock_db.transaction.assert_not_called()
        mock_db.tx.tasks.bulk_create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_configured_cap_tightens_the_limit(self, mock_db):
        batch = BulkImportRequest(tasks=[TaskRequest(title=f"t{i}") for i in range(3)])

        with pytest.raises(ValidationError) as exc_info:
            await self.service.bulk_import(mock_db, 1, batch, max_tasks=2)

        assert exc_info.value.context["limit"] == 2
        mock_db.transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_configured_cap_never_raises_the_limit(self, mock_db):
        batch = BulkImportRequest(tasks=[TaskRequest(title=f"t{i}") for i in range(1001)])

        with pytest.raises(ValidationError) as exc_info:
            await self.service.bulk_import(mock_db, 1, batch, max_tasks=5000)

        assert exc_info.value.context["limit"] == 1000

    @pytest.mark.asyncio
    async def test_import_defaults_status_and_audits_once(self, mock_db):
        mock_db.tx.projects.get_by_id.return_value = make_project()
        mock_db.tx.tasks.bulk_create.side_effect = lambda tasks: [
            task.model_copy(update={"id": 100 + i}) for i, task in enumerate(tasks)
        ]
        batch = BulkImportRequest(
            tasks=[
                TaskRequest(title="first"),
                TaskRequest(title="second", status=TaskStatus.IN_PROGRESS),
            ]
        )

        result = await self.service.bulk_import(mock_db, 1, batch, audit=AUDIT)

        submitted = mock_db.tx.tasks.bulk_create.await_args.args[0]
        assert [t.status for t in submitted] == [TaskStatus.TODO, TaskStatus.IN_PROGRESS]
        assert result.total_tasks == 2
        assert result.success_count == 2
        assert result.failure_count == 0
        assert result.imported_tasks == [100, 101]

        mock_db.tx.audit_log.log_action.assert_awaited_once()
        kwargs = mock_db.tx.audit_log.log_action.await_args.kwargs
        assert kwargs["action"] == "bulk_import"
        assert kwargs["entity_type"] == "project"
        assert kwargs["entity_id"] == 1
        mock_db.tx.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_mid_batch_never_commits(self, mock_db):
        mock_db.tx.projects.get_by_id.return_value = make_project()
        mock_db.tx.tasks.bulk_create.side_effect = ValidationError("Field 'title' is required")

        with pytest.raises(ValidationError):
            await self.service.bulk_import(
                mock_db, 1, BulkImportRequest(tasks=[TaskRequest(title="only")])
            )

        mock_db.tx.audit_log.log_action.assert_not_awaited()
        mock_db.tx.commit.assert_not_awaited()


class TestTaskServiceScoping:

    def setup_method(self):
        self.service = TaskService()

    @pytest.mark.asyncio
    async def test_task_of_other_project_is_not_found(self, mock_db):
        mock_db.projects.get_by_id.return_value = make_project(id=2)
        mock_db.tasks.get_by_id.return_value = make_task(project_id=1)

        with pytest.raises(NotFoundError):
            await self.service.get_task(mock_db, 2, 10)

    @pytest.mark.asyncio
    async def test_deleted_project_hides_its_tasks(self, mock_db):
        mock_db.projects.get_by_id.side_effect = NotFoundError("project", 1)

        with pytest.raises(NotFoundError):
            await self.service.get_task(mock_db, 1, 10)
        mock_db.tasks.get_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_with_status_filter(self, mock_db):
        mock_db.projects.get_by_id.return_value = make_project()
        mock_db.tasks.get_by_project_and_status.return_value = ([], 0)

        tasks, meta = await self.service.list_tasks(
            mock_db, 1, PaginationParams(), status=TaskStatus.COMPLETED
        )

        mock_db.tasks.get_by_project_and_status.assert_awaited_once_with(
            1, TaskStatus.COMPLETED, 20, 0
        )
        mock_db.tasks.get_by_project_id.assert_not_awaited()
        assert tasks == []
        assert meta.total_pages == 0

    @pytest.mark.asyncio
    async def test_partial_update_ignores_absent_fields(self, mock_db):
        mock_db.tx.projects.get_by_id.return_value = make_project()
        mock_db.tx.tasks.get_by_id.return_value = make_task(tags=["keep"], description="old")
        mock_db.tx.tasks.update.side_effect = lambda task: task

        result = await self.service.update_task(
            mock_db, 1, 10, TaskUpdateRequest(title="New title", description=""), audit=AUDIT
        )

        assert result.title == "New title"
        assert result.description == "old"
        assert result.tags == ["keep"]
        mock_db.tx.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_status_audits_new_status(self, mock_db):
        mock_db.tx.projects.get_by_id.return_value = make_project()
        mock_db.tx.tasks.get_by_id.return_value = make_task()
        mock_db.tx.tasks.update_status.return_value = make_task(status=TaskStatus.COMPLETED)

        await self.service.update_status(mock_db, 1, 10, "completed", audit=AUDIT)

        kwargs = mock_db.tx.audit_log.log_action.await_args.kwargs
        assert kwargs["action"] == "update_status"
        assert kwargs["entity_data"] == {"status": "completed"}


class TestRecycleBinService:

    def setup_method(self):
        self.service = RecycleBinService()

    @pytest.mark.asyncio
    async def test_restore_project_audits_restored_row(self, mock_db):
        restored = make_project()
        mock_db.tx.projects.get_by_id.return_value = restored

        result = await self.service.restore_project(mock_db, 1, audit=AUDIT)

        assert result is restored
        mock_db.tx.recycle_bin.restore_project.assert_awaited_once_with(1)
        kwargs = mock_db.tx.audit_log.log_action.await_args.kwargs
        assert kwargs["action"] == "restore"
        mock_db.tx.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_hard_delete_task_audits_last_state(self, mock_db):
        recycled = RecycledTask(**make_task(id=5, deleted_at=NOW).model_dump(), project_name="Alpha")
        mock_db.tx.recycle_bin.get_recycled_task.return_value = recycled

        await self.service.hard_delete_task(mock_db, 5, audit=AUDIT)

        mock_db.tx.recycle_bin.get_recycled_task.assert_awaited_once_with(5)
        mock_db.tx.recycle_bin.hard_delete_task.assert_awaited_once_with(5)
        kwargs = mock_db.tx.audit_log.log_action.await_args.kwargs
        assert kwargs["action"] == "hard_delete"
        assert kwargs["entity_type"] == "task"
        assert kwargs["entity_data"].title == "Write report"

    @pytest.mark.asyncio
    async def test_hard_delete_project_audits_last_state(self, mock_db):
        recycled = RecycledProject(**make_project(deleted_at=NOW).model_dump(), deleted_tasks_count=2)
        mock_db.tx.recycle_bin.get_recycled_project.return_value = recycled

        await self.service.hard_delete_project(mock_db, 1, audit=AUDIT)

        mock_db.tx.recycle_bin.hard_delete_project.assert_awaited_once_with(1)
        kwargs = mock_db.tx.audit_log.log_action.await_args.kwargs
        assert kwargs["entity_data"] is recycled
        mock_db.tx.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_hard_delete_of_live_task_writes_nothing(self, mock_db):
        mock_db.tx.recycle_bin.get_recycled_task.side_effect = NotFoundInRecycleBinError("task", 5)

        with pytest.raises(NotFoundInRecycleBinError):
            await self.service.hard_delete_task(mock_db, 5, audit=AUDIT)

        mock_db.tx.recycle_bin.hard_delete_task.assert_not_awaited()
        mock_db.tx.audit_log.log_action.assert_not_awaited()


class TestUserService:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_register_self_audits_as_new_user(self, mock_db):
        mock_db.tx.users.create.return_value = User(
            id=3, username="gina", password_hash="h", created_at=NOW, updated_at=NOW
        )

        user = await self.service.register(mock_db, "gina", "h")

        assert user.id == 3
        kwargs = mock_db.tx.audit_log.log_action.await_args.kwargs
        assert kwargs["user_id"] == 3
        assert kwargs["action"] == "create"

    @pytest.mark.asyncio
    async def test_register_conflict_propagates(self, mock_db):
        mock_db.tx.users.create.side_effect = ConflictError()

        with pytest.raises(ConflictError):
            await self.service.register(mock_db, "gina", "h")
        mock_db.tx.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_role_rejected(self, mock_db):
        with pytest.raises(ValidationError):
            await self.service.register(mock_db, "gina", "h", role="superuser")

    @pytest.mark.asyncio
    async def test_change_role(self, mock_db):
        mock_db.tx.users.get_by_id.return_value = User(id=3, username="gina", password_hash="h")
        mock_db.tx.users.update.side_effect = lambda user: user

        user = await self.service.change_role(mock_db, 3, "admin", audit=AUDIT)

        assert user.role == UserRole.ADMIN
        mock_db.tx.commit.assert_awaited_once()
