"""Audit log models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from tasktrack.models.enums import AuditAction


class AuditLog(BaseModel):
    """Immutable record of a task creation or of one tracked field change.

    user_id/user_name are a snapshot of the actor, not a live reference.
    """

    id: str
    task_id: str
    action: AuditAction
    field: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    user_id: str
    user_name: str
    created_at: datetime


class FieldChange(BaseModel):
    """One tracked field that differs between two task states."""

    field: str
    old_value: str
    new_value: str
