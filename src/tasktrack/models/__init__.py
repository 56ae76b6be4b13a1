"""TaskTrack data models."""

from tasktrack.models.enums import (
    AuditAction,
    EventType,
    Priority,
    SortField,
    SortOrder,
    TaskStatus,
)
from tasktrack.models.audit import AuditLog, FieldChange
from tasktrack.models.user import (
    LoginInput,
    ProfileUpdate,
    RegisterInput,
    User,
    UserProfile,
    UserSummary,
)
from tasktrack.models.task import Task, TaskCreate, TaskFilter, TaskUpdate, TaskUpdateResult
from tasktrack.models.dashboard import DashboardData, DashboardStats

__all__ = [
    "AuditAction",
    "AuditLog",
    "DashboardData",
    "DashboardStats",
    "EventType",
    "FieldChange",
    "LoginInput",
    "Priority",
    "ProfileUpdate",
    "RegisterInput",
    "SortField",
    "SortOrder",
    "Task",
    "TaskCreate",
    "TaskFilter",
    "TaskStatus",
    "TaskUpdate",
    "TaskUpdateResult",
    "User",
    "UserProfile",
    "UserSummary",
]
