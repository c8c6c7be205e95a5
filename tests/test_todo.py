from datetime import datetime, timedelta

import pytest

from guidebook_todo.errors import InvalidValueError, ValidationError
from guidebook_todo.todo import (
    Priority,
    Status,
    Todo,
    parse_priority,
    parse_status,
    validate_and_normalize_tags,
    validate_category,
    validate_notes,
    validate_project,
    validate_title,
)


def test_new_validated_uses_defaults():
    todo = Todo.new_validated("  Write release notes  ")

    assert todo.id == 0
    assert todo.title == "Write release notes"
    assert todo.priority is Priority.P2
    assert todo.status is Status.TODO
    assert todo.tags == []
    assert todo.category is None
    assert todo.project is None
    assert todo.notes is None
    assert todo.finished_date is None
    assert todo.created_date.tzinfo is not None


@pytest.mark.parametrize("title", ["", "   ", "x" * 201, " " + "y" * 201])
def test_new_validated_rejects_bad_titles(title):
    with pytest.raises(ValidationError) as excinfo:
        Todo.new_validated(title)

    assert excinfo.value.error.code == "VALIDATION_ERROR"


def test_validate_title_accepts_boundary_and_reports_length():
    assert validate_title("x" * 200) == "x" * 200

    with pytest.raises(ValidationError) as excinfo:
        validate_title("x" * 205)

    assert excinfo.value.message == "Title cannot exceed 200 characters (current: 205)"


def test_validate_optional_field_lengths():
    validate_category("c" * 50)
    validate_project("p" * 100)
    validate_notes("n" * 2000)

    with pytest.raises(ValidationError):
        validate_category("c" * 51)
    with pytest.raises(ValidationError):
        validate_project("p" * 101)
    with pytest.raises(ValidationError):
        validate_notes("n" * 2001)


def test_tags_are_normalized_and_deduplicated():
    assert validate_and_normalize_tags("Bug Fix, urgent, urgent") == ["bug_fix", "urgent"]
    assert validate_and_normalize_tags(" , Backend ,,") == ["backend"]


def test_tags_reject_long_entries():
    with pytest.raises(ValidationError) as excinfo:
        validate_and_normalize_tags("ok," + "t" * 31)

    assert excinfo.value.message == f"Tag '{'t' * 31}' cannot exceed 30 characters"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("todo", Status.TODO),
        ("InProgress", Status.IN_PROGRESS),
        ("in-progress", Status.IN_PROGRESS),
        ("in_progress", Status.IN_PROGRESS),
        ("DONE", Status.DONE),
        ("archived", Status.ARCHIVED),
    ],
)
def test_parse_status(raw, expected):
    assert parse_status(raw) is expected


def test_parse_status_rejects_unknown():
    with pytest.raises(InvalidValueError) as excinfo:
        parse_status("bogus")

    assert excinfo.value.error.code == "INVALID_VALUE"
    assert excinfo.value.message == (
        "Invalid status: bogus. Valid values: todo, inprogress, done, archived"
    )


def test_parse_priority():
    assert parse_priority("p0") is Priority.P0
    assert parse_priority("P5") is Priority.P5
    with pytest.raises(InvalidValueError):
        parse_priority("p9")


def test_priority_ordering_helpers():
    todo = Todo(id=1, title="A", priority=Priority.P3)

    assert todo.priority_value() == 3
    assert Priority.P0.raised() is Priority.P0
    assert Priority.P3.raised() is Priority.P2
    assert Priority.P5.lowered() is Priority.P5
    assert Priority.P1.lowered() is Priority.P2
    assert Priority.P1.label == "Must have"


def test_is_active():
    assert Todo(id=1, title="a").is_active()
    assert Todo(id=1, title="a", status=Status.IN_PROGRESS).is_active()
    assert not Todo(id=1, title="a", status=Status.DONE).is_active()
    assert not Todo(id=1, title="a", status=Status.ARCHIVED).is_active()


def test_status_transitions_manage_finished_date():
    now = datetime(2024, 5, 1, 12, 0).astimezone()
    todo = Todo(id=1, title="a")

    todo.set_status(Status.DONE, now=now)
    assert todo.finished_date == now

    todo.set_status(Status.IN_PROGRESS)
    assert todo.finished_date is None

    later = now + timedelta(hours=1)
    todo.set_status(Status.DONE, now=later)
    assert todo.finished_date == later


def test_archived_transitions_leave_finished_date_alone():
    now = datetime(2024, 5, 1, 12, 0).astimezone()
    todo = Todo(id=1, title="a")
    todo.set_status(Status.DONE, now=now)

    todo.set_status(Status.ARCHIVED)
    assert todo.finished_date == now

    todo.set_status(Status.TODO)
    assert todo.finished_date == now

    open_todo = Todo(id=2, title="b")
    open_todo.set_status(Status.ARCHIVED)
    open_todo.set_status(Status.DONE)
    assert open_todo.finished_date is None


def test_update_with_validation_clears_blank_fields():
    todo = Todo(id=1, title="a", category="work", project="site", notes="n")

    todo.update_with_validation(
        title=" Renamed ", category="  ", project=" docs ", notes="", tags=["A b", "a_b"]
    )

    assert todo.title == "Renamed"
    assert todo.category is None
    assert todo.project == "docs"
    assert todo.notes is None
    assert todo.tags == ["a_b"]


def test_update_with_validation_is_all_or_nothing():
    todo = Todo(id=1, title="a", category="work")

    with pytest.raises(ValidationError):
        todo.update_with_validation(category="home", project="p" * 101)

    assert todo.category == "work"
    assert todo.project is None


def test_tag_delta_is_idempotent():
    todo = Todo(id=1, title="a", tags=["foo"])

    todo.apply_tag_delta("+foo")
    assert todo.tags == ["foo"]

    todo.apply_tag_delta("-bar")
    assert todo.tags == ["foo"]

    todo.apply_tag_delta("+Bar, -foo, baz")
    assert todo.tags == ["bar"]


@pytest.mark.parametrize(
    ("delta", "expected"),
    [
        ("-x,+x", ["x"]),
        ("+x,-x", []),
        ("+x,-x,+x", ["x"]),
        ("+y,-y,+z", ["z"]),
    ],
)
def test_tag_delta_applies_tokens_in_order(delta, expected):
    todo = Todo(id=1, title="a")

    todo.apply_tag_delta(delta)

    assert todo.tags == expected


def test_tag_delta_rejects_long_tag_before_changing_anything():
    todo = Todo(id=1, title="a", tags=["keep"])

    with pytest.raises(ValidationError):
        todo.apply_tag_delta("-keep,+new," + "+" + "x" * 31)

    assert todo.tags == ["keep"]
