"""TaskTrack core engine - task mutations and audit trail."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.config import settings
from tasktrack.db.repositories import AuditLogRepository, TaskRepository, UserRepository
from tasktrack.engine.diff import diff_tracked_fields, is_reassignment
from tasktrack.engine.errors import TaskNotFound, UserNotFound, ValidationError
from tasktrack.models import (
    AuditAction,
    Task,
    TaskCreate,
    TaskFilter,
    TaskUpdate,
    TaskUpdateResult,
    User,
)
from tasktrack.utils.time import utc_now

logger = logging.getLogger(__name__)


class TaskEngine:
    """Core engine implementing task CRUD with change tracking.

    The engine flushes but never commits; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.tasks = TaskRepository(session)
        self.users = UserRepository(session)
        self.audits = AuditLogRepository(session)

    async def _get_actor(self, user_id: str) -> User:
        user = await self.users.get(user_id)
        if not user:
            raise UserNotFound(user_id)
        return user

    async def _ensure_assignee_exists(self, assignee_id: str) -> None:
        if not await self.users.get(assignee_id):
            raise ValidationError("assignee not found")

    async def _get_task_or_raise(self, task_id: str) -> Task:
        task = await self.tasks.get(task_id)
        if not task:
            raise TaskNotFound(task_id)
        return task

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create_task(self, data: TaskCreate, creator_id: str) -> Task:
        """
        Create a new task.

        Writes exactly one CREATED audit entry attributed to the creator.
        """
        creator = await self._get_actor(creator_id)
        if data.assigned_to_id:
            await self._ensure_assignee_exists(data.assigned_to_id)

        task = await self.tasks.create(
            title=data.title,
            description=data.description,
            due_date=data.due_date,
            priority=data.priority,
            status=data.status,
            creator_id=creator.id,
            assigned_to_id=data.assigned_to_id,
        )

        await self.audits.create(
            task_id=task.id,
            action=AuditAction.CREATED,
            user_id=creator.id,
            user_name=creator.name,
        )

        logger.info(f"Task {task.id} created by {creator.id}")
        return task

    async def update_task(
        self,
        task_id: str,
        patch: TaskUpdate,
        actor_id: str,
    ) -> TaskUpdateResult:
        """
        Apply a partial update and record tracked-field changes.

        Every lookup happens before the write, so a failed validation leaves
        the task and its audit trail untouched.
        """
        existing = await self._get_task_or_raise(task_id)
        actor = await self._get_actor(actor_id)

        changes: dict[str, Any] = patch.changes()
        new_assignee_id = changes.get("assigned_to_id")
        if new_assignee_id is not None:
            await self._ensure_assignee_exists(new_assignee_id)

        task = await self.tasks.update(task_id, changes) if changes else existing
        if task is None:
            # Deleted between the read and the write
            raise TaskNotFound(task_id)

        # Diff against the snapshot with exactly this patch applied, so the
        # audit reflects this update and not a concurrent one.
        field_changes = diff_tracked_fields(existing, existing.model_copy(update=changes))
        if field_changes:
            await self.audits.create_many(
                {
                    "task_id": task_id,
                    "action": AuditAction.UPDATED,
                    "field": change.field,
                    "old_value": change.old_value,
                    "new_value": change.new_value,
                    "user_id": actor.id,
                    "user_name": actor.name,
                }
                for change in field_changes
            )

        was_reassigned = is_reassignment(
            existing.assigned_to_id,
            patch.supplies("assigned_to_id"),
            new_assignee_id,
        )
        if was_reassigned:
            logger.info(
                f"Task {task_id} reassigned from {existing.assigned_to_id} "
                f"to {new_assignee_id} by {actor.id}"
            )

        logger.info(
            f"Task {task_id} updated by {actor.id} "
            f"({len(changes)} fields, {len(field_changes)} audited)"
        )
        return TaskUpdateResult(
            task=task,
            was_reassigned=was_reassigned,
            new_assignee_id=new_assignee_id,
        )

    async def delete_task(self, task_id: str) -> None:
        """Delete a task together with its audit trail."""
        await self._get_task_or_raise(task_id)
        await self.tasks.delete(task_id)
        logger.info(f"Task {task_id} deleted")

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_task(self, task_id: str) -> Task:
        """Get a task by ID, including its most recent audit entries."""
        task = await self._get_task_or_raise(task_id)
        audit_logs = await self.audits.list_for_task(task_id, settings.audit_detail_limit)
        return task.model_copy(update={"audit_logs": audit_logs})

    async def list_tasks(self, filters: TaskFilter | None = None) -> list[Task]:
        """List tasks with optional status/priority filters."""
        return await self.tasks.list(filters or TaskFilter())

    async def list_assigned_to(self, user_id: str) -> list[Task]:
        return await self.tasks.list_by_assignee(user_id)

    async def list_created_by(self, user_id: str) -> list[Task]:
        return await self.tasks.list_by_creator(user_id)

    async def list_overdue(self) -> list[Task]:
        """Overdue tasks for every user; callers scope them."""
        return await self.tasks.list_overdue(utc_now())
