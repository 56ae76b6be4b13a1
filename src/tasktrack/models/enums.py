"""TaskTrack enumerations."""

from enum import Enum


class Priority(str, Enum):
    """Task priority, declared from least to most urgent."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)


class TaskStatus(str, Enum):
    """Task workflow status, declared in workflow order."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    COMPLETED = "COMPLETED"

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)


class AuditAction(str, Enum):
    """Audit log actions."""

    CREATED = "CREATED"
    UPDATED = "UPDATED"


class SortField(str, Enum):
    """Sortable task attributes."""

    DUE_DATE = "dueDate"
    CREATED_AT = "createdAt"
    PRIORITY = "priority"
    STATUS = "status"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class EventType(str, Enum):
    """Push channel event names."""

    # Broadcast to every connection
    TASK_CREATED = "task:created"
    TASK_UPDATED = "task:updated"
    TASK_DELETED = "task:deleted"
    # Targeted at the new assignee's connections
    TASK_ASSIGNED = "task:assigned"
    # Relayed from one client to all others
    USER_TYPING = "user:typing"
    # Client-sent; rebroadcast to everyone as task:updated
    TASK_UPDATE = "task:update"
