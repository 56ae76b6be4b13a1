"""Database repositories for TaskTrack entities."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable
from uuid import uuid4

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tasktrack.db.tables import AuditLogTable, TaskTable, UserTable
from tasktrack.models import (
    AuditAction,
    AuditLog,
    Priority,
    SortField,
    SortOrder,
    Task,
    TaskFilter,
    TaskStatus,
    User,
    UserSummary,
)
from tasktrack.utils.time import ensure_utc, utc_now


class UserRepository:
    """Repository for user operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, email: str, name: str, password_hash: str) -> User:
        """Create a new user."""
        now = utc_now()
        row = UserTable(
            id=str(uuid4()),
            email=email,
            name=name,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        self.session.add(row)
        await self.session.flush()
        return self._row_to_model(row)

    async def get(self, user_id: str) -> User | None:
        """Get a user by ID."""
        row = await self.session.get(UserTable, user_id)
        return self._row_to_model(row) if row else None

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by their unique email."""
        result = await self.session.execute(
            select(UserTable).where(UserTable.email == email)
        )
        row = result.scalar_one_or_none()
        return self._row_to_model(row) if row else None

    async def update(self, user_id: str, values: dict[str, Any]) -> User | None:
        """Apply a partial update."""
        if values:
            await self.session.execute(
                update(UserTable)
                .where(UserTable.id == user_id)
                .values(**values, updated_at=utc_now())
            )
        result = await self.session.execute(
            select(UserTable)
            .where(UserTable.id == user_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return self._row_to_model(row) if row else None

    async def list_all(self) -> list[UserSummary]:
        """List every user for assignment pickers."""
        result = await self.session.execute(
            select(UserTable).order_by(UserTable.name.asc(), UserTable.id.asc())
        )
        return [
            UserSummary(id=row.id, name=row.name, email=row.email)
            for row in result.scalars().all()
        ]

    def _row_to_model(self, row: UserTable) -> User:
        """Convert database row to model."""
        return User(
            id=row.id,
            email=row.email,
            name=row.name,
            password_hash=row.password_hash,
            created_at=ensure_utc(row.created_at),
            updated_at=ensure_utc(row.updated_at),
        )


# Enum columns sort by declaration rank, never alphabetically.
_PRIORITY_RANK = case({p: p.rank for p in Priority}, value=TaskTable.priority)
_STATUS_RANK = case({s: s.rank for s in TaskStatus}, value=TaskTable.status)

_SORT_COLUMNS = {
    SortField.DUE_DATE: TaskTable.due_date,
    SortField.CREATED_AT: TaskTable.created_at,
    SortField.PRIORITY: _PRIORITY_RANK,
    SortField.STATUS: _STATUS_RANK,
}


class TaskRepository:
    """Repository for task operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _select(self):
        return select(TaskTable).options(
            selectinload(TaskTable.creator),
            selectinload(TaskTable.assigned_to),
        )

    async def create(
        self,
        title: str,
        description: str,
        due_date: datetime,
        priority: Priority,
        status: TaskStatus,
        creator_id: str,
        assigned_to_id: str | None = None,
    ) -> Task:
        """Create a new task."""
        now = utc_now()
        row = TaskTable(
            id=str(uuid4()),
            title=title,
            description=description,
            due_date=due_date,
            priority=priority,
            status=status,
            creator_id=creator_id,
            assigned_to_id=assigned_to_id,
            created_at=now,
            updated_at=now,
        )
        self.session.add(row)
        await self.session.flush()
        return await self.get(row.id)

    async def get(self, task_id: str) -> Task | None:
        """Get a task by ID, with creator and assignee."""
        result = await self.session.execute(
            self._select()
            .where(TaskTable.id == task_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return self._row_to_model(row) if row else None

    async def list(self, filters: TaskFilter) -> list[Task]:
        """List tasks with optional equality filters and a single sort key."""
        query = self._select()

        # Absent filters add no clause at all, never an IS NULL test.
        if filters.status is not None:
            query = query.where(TaskTable.status == filters.status)
        if filters.priority is not None:
            query = query.where(TaskTable.priority == filters.priority)

        column = _SORT_COLUMNS[filters.sort_by]
        primary = column.asc() if filters.order == SortOrder.ASC else column.desc()
        query = query.order_by(primary, TaskTable.id.asc())

        return await self._all(query)

    async def list_by_assignee(self, user_id: str) -> list[Task]:
        """Tasks assigned to a user, soonest due first."""
        query = (
            self._select()
            .where(TaskTable.assigned_to_id == user_id)
            .order_by(TaskTable.due_date.asc(), TaskTable.id.asc())
        )
        return await self._all(query)

    async def list_by_creator(self, user_id: str) -> list[Task]:
        """Tasks created by a user, newest first."""
        query = (
            self._select()
            .where(TaskTable.creator_id == user_id)
            .order_by(TaskTable.created_at.desc(), TaskTable.id.asc())
        )
        return await self._all(query)

    async def list_overdue(self, now: datetime) -> list[Task]:
        """All incomplete tasks past their due date, for every user."""
        query = (
            self._select()
            .where(
                TaskTable.due_date < now,
                TaskTable.status != TaskStatus.COMPLETED,
            )
            .order_by(TaskTable.due_date.asc(), TaskTable.id.asc())
        )
        return await self._all(query)

    async def update(self, task_id: str, values: dict[str, Any]) -> Task | None:
        """Apply a partial update. Last write wins; there is no version check."""
        await self.session.execute(
            update(TaskTable)
            .where(TaskTable.id == task_id)
            .values(**values, updated_at=utc_now())
        )
        return await self.get(task_id)

    async def delete(self, task_id: str) -> bool:
        """Delete a task and its audit trail."""
        await self.session.execute(
            delete(AuditLogTable).where(AuditLogTable.task_id == task_id)
        )
        result = await self.session.execute(
            delete(TaskTable).where(TaskTable.id == task_id)
        )
        return result.rowcount > 0

    async def _all(self, query) -> list[Task]:
        result = await self.session.execute(query)
        return [self._row_to_model(r) for r in result.scalars().all()]

    def _row_to_model(self, row: TaskTable) -> Task:
        """Convert database row to model."""
        return Task(
            id=row.id,
            title=row.title,
            description=row.description,
            due_date=ensure_utc(row.due_date),
            priority=row.priority,
            status=row.status,
            creator_id=row.creator_id,
            assigned_to_id=row.assigned_to_id,
            created_at=ensure_utc(row.created_at),
            updated_at=ensure_utc(row.updated_at),
            creator=_summary(row.creator),
            assigned_to=_summary(row.assigned_to),
        )


class AuditLogRepository:
    """Repository for the append-only audit trail."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        task_id: str,
        action: AuditAction,
        user_id: str,
        user_name: str,
        field: str | None = None,
        old_value: str | None = None,
        new_value: str | None = None,
    ) -> AuditLog:
        """Append one audit entry."""
        entries = await self.create_many(
            [
                {
                    "task_id": task_id,
                    "action": action,
                    "user_id": user_id,
                    "user_name": user_name,
                    "field": field,
                    "old_value": old_value,
                    "new_value": new_value,
                }
            ]
        )
        return entries[0]

    async def create_many(self, entries: Iterable[dict[str, Any]]) -> list[AuditLog]:
        """Append a batch of audit entries with a single flush."""
        rows = []
        for entry in entries:
            row = AuditLogTable(id=str(uuid4()), created_at=utc_now(), **entry)
            self.session.add(row)
            rows.append(row)

        if rows:
            await self.session.flush()
        return [self._row_to_model(r) for r in rows]

    async def list_for_task(self, task_id: str, limit: int) -> list[AuditLog]:
        """Most recent audit entries for a task, newest first."""
        result = await self.session.execute(
            select(AuditLogTable)
            .where(AuditLogTable.task_id == task_id)
            .order_by(AuditLogTable.created_at.desc(), AuditLogTable.id.asc())
            .limit(limit)
        )
        return [self._row_to_model(r) for r in result.scalars().all()]

    async def count_for_task(self, task_id: str) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(AuditLogTable)
            .where(AuditLogTable.task_id == task_id)
        )
        return result.scalar_one()

    def _row_to_model(self, row: AuditLogTable) -> AuditLog:
        """Convert database row to model."""
        return AuditLog(
            id=row.id,
            task_id=row.task_id,
            action=row.action,
            field=row.field,
            old_value=row.old_value,
            new_value=row.new_value,
            user_id=row.user_id,
            user_name=row.user_name,
            created_at=ensure_utc(row.created_at),
        )


def _summary(row: UserTable | None) -> UserSummary | None:
    if row is None:
        return None
    return UserSummary(id=row.id, name=row.name, email=row.email)
