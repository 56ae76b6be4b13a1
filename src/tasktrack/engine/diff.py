"""Tracked-field diffing for the audit trail.

Only workflow fields are audited on update. Title, description and due date
changes are persisted but never produce audit entries.
"""

from typing import Any, Optional

from tasktrack.models import FieldChange, Task

# Sentinel written for an absent assignee. Existing audit history uses it,
# so it must stay a string rather than a real null.
NO_ASSIGNEE = "none"

# Task attribute -> audit field name
TRACKED_FIELDS: dict[str, str] = {
    "status": "status",
    "priority": "priority",
    "assigned_to_id": "assignedTo",
}


def render_value(attribute: str, value: Any) -> str:
    """String-encode a tracked value for the audit log."""
    if value is None:
        return NO_ASSIGNEE if attribute == "assigned_to_id" else ""
    if hasattr(value, "value"):
        return str(value.value)
    return str(value)


def diff_tracked_fields(old: Task, new: Task) -> list[FieldChange]:
    """Return one change per tracked field that differs, in a fixed order."""
    changes = []
    for attribute, field in TRACKED_FIELDS.items():
        before = getattr(old, attribute)
        after = getattr(new, attribute)
        if before == after:
            continue
        changes.append(
            FieldChange(
                field=field,
                old_value=render_value(attribute, before),
                new_value=render_value(attribute, after),
            )
        )
    return changes


def is_reassignment(
    previous_assignee: Optional[str],
    patch_supplied: bool,
    new_assignee: Optional[str],
) -> bool:
    """True when the patch names an assignee different from the stored one.

    Transitions to and from null count; repeating the current value does not.
    """
    return patch_supplied and new_assignee != previous_assignee
