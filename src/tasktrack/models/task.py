"""Task model - core work unit."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from tasktrack.models.audit import AuditLog
from tasktrack.models.enums import Priority, SortField, SortOrder, TaskStatus
from tasktrack.models.user import UserSummary
from tasktrack.utils.time import ensure_utc


class Task(BaseModel):
    """Task with creator and assignee denormalized for display."""

    id: str
    title: str
    description: str
    due_date: datetime
    priority: Priority
    status: TaskStatus

    # Ownership (creator is immutable after creation)
    creator_id: str
    assigned_to_id: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    creator: Optional[UserSummary] = None
    assigned_to: Optional[UserSummary] = None

    # Only populated by the detail read, newest first
    audit_logs: list[AuditLog] = Field(default_factory=list)

    def is_overdue(self, now: datetime) -> bool:
        return self.status != TaskStatus.COMPLETED and self.due_date < now


class TaskCreate(BaseModel):
    """Input for creating a task."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    due_date: datetime
    priority: Priority
    status: TaskStatus = TaskStatus.TODO
    assigned_to_id: Optional[str] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("assigned_to_id")
    @classmethod
    def blank_assignee_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class TaskUpdate(BaseModel):
    """
    Partial task update.

    Only fields present in the payload are applied. For assigned_to_id an
    explicit null means "unassign", which is different from leaving the field
    out; use ``changes()`` rather than reading attributes directly.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1)
    due_date: Optional[datetime] = None
    priority: Optional[Priority] = None
    status: Optional[TaskStatus] = None
    assigned_to_id: Optional[str] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v) if v is not None else None

    @field_validator("assigned_to_id")
    @classmethod
    def blank_assignee_is_none(cls, v: Optional[str]) -> Optional[str]:
        # Still counts as supplied, so "" unassigns like an explicit null
        return v or None

    @model_validator(mode="after")
    def reject_null_for_required_fields(self) -> "TaskUpdate":
        for name in self.model_fields_set:
            if name != "assigned_to_id" and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields supplied by the caller, with explicit nulls preserved."""
        return self.model_dump(exclude_unset=True)

    def supplies(self, field: str) -> bool:
        return field in self.model_fields_set


class TaskFilter(BaseModel):
    """List options. Absent status/priority impose no constraint."""

    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    sort_by: SortField = SortField.CREATED_AT
    order: SortOrder = SortOrder.DESC


class TaskUpdateResult(BaseModel):
    """Outcome of an update, used to decide which events to emit."""

    task: Task
    was_reassigned: bool
    new_assignee_id: Optional[str] = None
