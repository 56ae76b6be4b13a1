"""Dashboard view models."""

from pydantic import BaseModel

from tasktrack.models.task import Task


class DashboardStats(BaseModel):
    total_assigned: int
    total_created: int
    total_overdue: int
    completed_tasks: int


class DashboardData(BaseModel):
    """Per-user cross-cutting view of tasks."""

    assigned_tasks: list[Task]
    created_tasks: list[Task]
    overdue_tasks: list[Task]
    stats: DashboardStats
