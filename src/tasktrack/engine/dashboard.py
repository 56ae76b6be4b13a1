"""Per-user dashboard aggregation."""

import asyncio
from typing import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasktrack.engine.core import TaskEngine
from tasktrack.models import DashboardData, DashboardStats, Task, TaskStatus
from tasktrack.utils.time import utc_now


class DashboardAggregator:
    """
    Compose assigned/created/overdue views for one user.

    The three reads are independent and run concurrently, each on its own
    session since an AsyncSession does not allow concurrent operations.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _read(self, query: Callable[[TaskEngine], Awaitable[list[Task]]]) -> list[Task]:
        async with self.session_factory() as session:
            return await query(TaskEngine(session))

    async def get_dashboard(self, user_id: str) -> DashboardData:
        assigned, created, overdue = await asyncio.gather(
            self._read(lambda engine: engine.list_assigned_to(user_id)),
            self._read(lambda engine: engine.list_created_by(user_id)),
            self._read(lambda engine: engine.list_overdue()),
        )

        # The overdue read is user-agnostic; scope it here.
        now = utc_now()
        user_overdue = [
            task
            for task in overdue
            if task.is_overdue(now)
            and (task.assigned_to_id == user_id or task.creator_id == user_id)
        ]

        return DashboardData(
            assigned_tasks=assigned,
            created_tasks=created,
            overdue_tasks=user_overdue,
            stats=DashboardStats(
                total_assigned=len(assigned),
                total_created=len(created),
                total_overdue=len(user_overdue),
                completed_tasks=sum(1 for t in assigned if t.status == TaskStatus.COMPLETED),
            ),
        )
