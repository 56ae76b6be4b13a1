"""
Tracked-field diff tests. Pure functions, no database.
"""

from datetime import timedelta

from tasktrack.engine.diff import (
    NO_ASSIGNEE,
    diff_tracked_fields,
    is_reassignment,
    render_value,
)
from tasktrack.models import Priority, Task, TaskStatus
from tasktrack.utils.time import utc_now


def _task(**overrides) -> Task:
    now = utc_now()
    values = {
        "id": "task-1",
        "title": "Fix login bug",
        "description": "Users are logged out on refresh",
        "due_date": now + timedelta(days=1),
        "priority": Priority.MEDIUM,
        "status": TaskStatus.TODO,
        "creator_id": "user-1",
        "assigned_to_id": None,
        "created_at": now,
        "updated_at": now,
    }
    values.update(overrides)
    return Task(**values)


def test_identical_tasks_have_no_changes():
    task = _task()
    assert diff_tracked_fields(task, task.model_copy()) == []


def test_untracked_fields_are_ignored():
    old = _task()
    new = old.model_copy(
        update={
            "title": "Another title",
            "description": "Another description",
            "due_date": old.due_date + timedelta(days=7),
        }
    )
    assert diff_tracked_fields(old, new) == []


def test_changes_come_in_fixed_order():
    old = _task()
    new = old.model_copy(
        update={
            "assigned_to_id": "user-2",
            "priority": Priority.URGENT,
            "status": TaskStatus.COMPLETED,
        }
    )

    changes = diff_tracked_fields(old, new)

    assert [(c.field, c.old_value, c.new_value) for c in changes] == [
        ("status", "TODO", "COMPLETED"),
        ("priority", "MEDIUM", "URGENT"),
        ("assignedTo", NO_ASSIGNEE, "user-2"),
    ]


def test_unassign_renders_sentinel():
    old = _task(assigned_to_id="user-2")
    new = old.model_copy(update={"assigned_to_id": None})

    (change,) = diff_tracked_fields(old, new)

    assert change.field == "assignedTo"
    assert change.old_value == "user-2"
    assert change.new_value == "none"


def test_render_value():
    assert render_value("status", TaskStatus.IN_PROGRESS) == "IN_PROGRESS"
    assert render_value("priority", Priority.LOW) == "LOW"
    assert render_value("assigned_to_id", None) == NO_ASSIGNEE
    assert render_value("assigned_to_id", "user-9") == "user-9"


def test_reassignment_rules():
    # Patch without assignee is never a reassignment
    assert is_reassignment("user-1", False, None) is False
    # Same value repeated
    assert is_reassignment("user-1", True, "user-1") is False
    assert is_reassignment(None, True, None) is False
    # Real changes, including to and from null
    assert is_reassignment("user-1", True, "user-2") is True
    assert is_reassignment(None, True, "user-2") is True
    assert is_reassignment("user-1", True, None) is True


def test_is_overdue():
    now = utc_now()
    past = now - timedelta(hours=1)

    assert _task(due_date=past).is_overdue(now) is True
    assert _task(due_date=past, status=TaskStatus.REVIEW).is_overdue(now) is True
    assert _task(due_date=past, status=TaskStatus.COMPLETED).is_overdue(now) is False
    assert _task(due_date=now + timedelta(hours=1)).is_overdue(now) is False
