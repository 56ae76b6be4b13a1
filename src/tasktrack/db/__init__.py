"""TaskTrack database layer."""

from tasktrack.db.base import Base, close_db, init_db
from tasktrack.db.tables import AuditLogTable, TaskTable, UserTable

__all__ = [
    "Base",
    "close_db",
    "init_db",
    "AuditLogTable",
    "TaskTable",
    "UserTable",
]
