"""TaskTrack engine - task mutations, audit diffing and dashboard views."""

from tasktrack.engine.core import TaskEngine
from tasktrack.engine.dashboard import DashboardAggregator
from tasktrack.engine.diff import NO_ASSIGNEE, TRACKED_FIELDS, diff_tracked_fields
from tasktrack.engine.errors import (
    AuthError,
    InvalidCredentials,
    InvalidToken,
    NotFoundError,
    TaskNotFound,
    TaskTrackError,
    UserNotFound,
    ValidationError,
)

__all__ = [
    "AuthError",
    "DashboardAggregator",
    "InvalidCredentials",
    "InvalidToken",
    "NO_ASSIGNEE",
    "NotFoundError",
    "TRACKED_FIELDS",
    "TaskEngine",
    "TaskNotFound",
    "TaskTrackError",
    "UserNotFound",
    "ValidationError",
    "diff_tracked_fields",
]
