"""
Taskboard Backend — Entity Repository Tests
============================================

What we test (real SQLite database):
    ✅ create returns generated id and timestamps
    ✅ soft delete hides rows; a second delete is NotFound
    ✅ update replaces writable fields, refreshes updated_at, skips deleted rows
    ✅ list totals are independent of limit/offset
    ✅ unique and required-field violations
    ✅ JSON documents round-trip; NULL documents decode to empty values
    ✅ update_status changes only status and updated_at
    ✅ bulk_create: prefix persists when pooled, nothing persists on rollback
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import insert

from taskboard.exceptions import ConflictError, NotFoundError, ValidationError
from taskboard.models import TaskRecord, utcnow
from taskboard.schemas.project import Project
from taskboard.schemas.task import Task, TaskStatus
from taskboard.schemas.user import User, UserRole


class TestUserRepository:

    @pytest.mark.asyncio
    async def test_create_and_get_by_username(self, database):
        user = await database.users.create(
            User(username="dave", password_hash="h", role=UserRole.ADMIN)
        )
        assert user.id > 0
        assert user.created_at is not None

        found = await database.users.get_by_username("dave")
        assert found.id == user.id
        assert found.role == UserRole.ADMIN

    @pytest.mark.asyncio
    async def test_duplicate_username_is_conflict(self, database, owner):
        with pytest.raises(ConflictError):
            await database.users.create(User(username=owner.username, password_hash="other"))

    @pytest.mark.asyncio
    async def test_missing_password_hash_is_validation_error(self, database):
        with pytest.raises(ValidationError) as exc_info:
            await database.users.create(User(username="erin", password_hash=""))
        assert exc_info.value.field == "password_hash"

    @pytest.mark.asyncio
    async def test_hard_delete(self, database, owner):
        await database.users.delete(owner.id)
        with pytest.raises(NotFoundError):
            await database.users.get_by_id(owner.id)
        with pytest.raises(NotFoundError):
            await database.users.delete(owner.id)

    @pytest.mark.asyncio
    async def test_unknown_username_is_not_found(self, database):
        with pytest.raises(NotFoundError):
            await database.users.get_by_username("nobody")


class TestProjectRepository:

    @pytest.mark.asyncio
    async def test_create_returns_live_project(self, project, owner):
        assert project.id > 0
        assert project.name == "Alpha"
        assert project.owner_id == owner.id
        assert project.deleted_at is None

    @pytest.mark.asyncio
    async def test_delete_then_get_is_not_found(self, database, project):
        await database.projects.delete(project.id)
        with pytest.raises(NotFoundError):
            await database.projects.get_by_id(project.id)

    @pytest.mark.asyncio
    async def test_second_delete_is_not_found(self, database, project):
        await database.projects.delete(project.id)
        with pytest.raises(NotFoundError):
            await database.projects.delete(project.id)

    @pytest.mark.asyncio
    async def test_delete_missing_project_is_not_found(self, database):
        with pytest.raises(NotFoundError):
            await database.projects.delete(404)

    @pytest.mark.asyncio
    async def test_update_replaces_fields_and_refreshes_updated_at(self, database, project):
        updated = await database.projects.update(
            project.model_copy(update={"name": "Beta", "description": "new"})
        )
        assert updated.name == "Beta"
        assert updated.description == "new"
        assert updated.created_at == project.created_at
        assert updated.updated_at >= project.updated_at

    @pytest.mark.asyncio
    async def test_update_of_deleted_project_is_not_found(self, database, project):
        await database.projects.delete(project.id)
        with pytest.raises(NotFoundError):
            await database.projects.update(project.model_copy(update={"name": "Beta"}))

    @pytest.mark.asyncio
    async def test_blank_name_is_validation_error(self, database, owner):
        with pytest.raises(ValidationError):
            await database.projects.create(Project(name="  ", owner_id=owner.id))

    @pytest.mark.asyncio
    async def test_list_total_independent_of_window(self, database, owner):
        created = []
        for name in ("one", "two", "three", "four"):
            created.append(await database.projects.create(Project(name=name, owner_id=owner.id)))
        await database.projects.delete(created[0].id)

        first_page, total = await database.projects.list(limit=1, offset=0)
        assert total == 3
        assert [p.name for p in first_page] == ["four"]

        empty_page, total = await database.projects.list(limit=10, offset=50)
        assert empty_page == []
        assert total == 3

    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, database, owner):
        for name in ("one", "two", "three"):
            await database.projects.create(Project(name=name, owner_id=owner.id))
        projects, _ = await database.projects.list(limit=10, offset=0)
        assert [p.name for p in projects] == ["three", "two", "one"]

    @pytest.mark.asyncio
    async def test_list_by_owner(self, database, owner, project):
        other = await database.users.create(User(username="frank", password_hash="h"))
        await database.projects.create(Project(name="Other", owner_id=other.id))

        projects, total = await database.projects.list_by_owner(owner.id, limit=10, offset=0)
        assert total == 1
        assert projects[0].id == project.id

    @pytest.mark.asyncio
    async def test_negative_window_is_validation_error(self, database):
        with pytest.raises(ValidationError):
            await database.projects.list(limit=-1, offset=0)


class TestTaskRepository:

    @pytest.mark.asyncio
    async def test_json_documents_round_trip(self, database, project):
        task = await database.tasks.create(
            Task(
                project_id=project.id,
                title="Write report",
                custom_fields={"key": "value", "nested": {"n": 1}},
                tags=["urgent", "q3"],
                metadata={"source": "import"},
            )
        )
        found = await database.tasks.get_by_id(task.id)
        assert found.custom_fields == {"key": "value", "nested": {"n": 1}}
        assert found.tags == ["urgent", "q3"]
        assert found.metadata == {"source": "import"}

    @pytest.mark.asyncio
    async def test_task_without_documents_decodes_to_empty_values(self, database, project):
        task = await database.tasks.create(Task(project_id=project.id, title="Plain"))
        found = await database.tasks.get_by_id(task.id)
        assert found.custom_fields == {}
        assert found.tags == []
        assert found.metadata == {}

    @pytest.mark.asyncio
    async def test_null_documents_decode_to_empty_values(self, database, project):
        now = utcnow()
        await database.context.execute(
            insert(TaskRecord.__table__).values(
                project_id=project.id,
                title="Raw row",
                status="todo",
                created_at=now,
                updated_at=now,
            )
        )
        tasks, total = await database.tasks.get_by_project_id(project.id, limit=10, offset=0)
        assert total == 1
        assert tasks[0].custom_fields == {}
        assert tasks[0].tags == []
        assert tasks[0].metadata == {}

    @pytest.mark.asyncio
    async def test_update_status_changes_only_status_and_updated_at(self, database, project):
        task = await database.tasks.create(
            Task(
                project_id=project.id,
                title="Ship it",
                tags=["release"],
                due_date=datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc),
                custom_fields={"points": 3},
            )
        )
        before = await database.tasks.get_by_id(task.id)

        after = await database.tasks.update_status(task.id, "completed")

        assert after.status == TaskStatus.COMPLETED
        assert after.updated_at >= before.updated_at
        unchanged = {"status", "updated_at"}
        assert after.model_dump(exclude=unchanged) == before.model_dump(exclude=unchanged)

    @pytest.mark.asyncio
    async def test_update_status_rejects_unknown_status(self, database, project):
        task = await database.tasks.create(Task(project_id=project.id, title="t"))
        with pytest.raises(ValidationError) as exc_info:
            await database.tasks.update_status(task.id, "done-ish")
        assert exc_info.value.field == "status"

    @pytest.mark.asyncio
    async def test_update_status_of_deleted_task_is_not_found(self, database, project):
        task = await database.tasks.create(Task(project_id=project.id, title="t"))
        await database.tasks.delete(task.id)
        with pytest.raises(NotFoundError):
            await database.tasks.update_status(task.id, TaskStatus.IN_PROGRESS)

    @pytest.mark.asyncio
    async def test_get_by_status(self, database, project):
        await database.tasks.create(Task(project_id=project.id, title="a"))
        done = await database.tasks.create(
            Task(project_id=project.id, title="b", status=TaskStatus.COMPLETED)
        )
        tasks, total = await database.tasks.get_by_status("completed", limit=10, offset=0)
        assert total == 1
        assert tasks[0].id == done.id

    @pytest.mark.asyncio
    async def test_get_by_project_id_excludes_deleted(self, database, project):
        keep = await database.tasks.create(Task(project_id=project.id, title="keep"))
        gone = await database.tasks.create(Task(project_id=project.id, title="gone"))
        await database.tasks.delete(gone.id)

        tasks, total = await database.tasks.get_by_project_id(project.id, limit=10, offset=0)
        assert total == 1
        assert tasks[0].id == keep.id

    @pytest.mark.asyncio
    async def test_bulk_create_pooled_keeps_prefix_on_failure(self, database, project):
        batch = [
            Task(project_id=project.id, title="first"),
            Task(project_id=project.id, title="   "),
            Task(project_id=project.id, title="third"),
        ]
        with pytest.raises(ValidationError):
            await database.tasks.bulk_create(batch)

        tasks, total = await database.tasks.get_by_project_id(project.id, limit=10, offset=0)
        assert total == 1
        assert tasks[0].title == "first"

    @pytest.mark.asyncio
    async def test_bulk_create_in_transaction_rolls_back_entirely(self, database, project):
        batch = [
            Task(project_id=project.id, title="first"),
            Task(project_id=project.id, title=""),
        ]
        with pytest.raises(ValidationError):
            async with database.transaction() as tx:
                await tx.tasks.bulk_create(batch)
                await tx.commit()

        _, total = await database.tasks.get_by_project_id(project.id, limit=10, offset=0)
        assert total == 0

    @pytest.mark.asyncio
    async def test_deleting_project_cascades_to_live_tasks(self, database, project):
        task = await database.tasks.create(Task(project_id=project.id, title="child"))
        await database.projects.delete(project.id)

        with pytest.raises(NotFoundError):
            await database.tasks.get_by_id(task.id)
