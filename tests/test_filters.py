from datetime import datetime, timedelta

from guidebook_todo.filters import (
    filter_by_special_syntax,
    get_active_todos,
    get_all_todos_including_archived,
    search_todos,
    sort_todos_by_date,
    sort_todos_by_priority,
)
from guidebook_todo.todo import Priority, Status, Todo

BASE = datetime(2024, 1, 1, 9, 0).astimezone()


def _todo(todo_id, title, minutes=0, **fields):
    return Todo(id=todo_id, title=title, created_date=BASE + timedelta(minutes=minutes), **fields)


def _sample():
    return [
        _todo(1, "Fix login bug", tags=["bug", "auth"], category="Work", priority=Priority.P0),
        _todo(2, "Buy groceries", notes="milk and BREAD", category="home"),
        _todo(3, "Plan trip", project="Holiday", status=Status.IN_PROGRESS),
        _todo(4, "Old bug report", tags=["bug"], status=Status.ARCHIVED),
        _todo(5, "Debug tests", tags=["bugfix"], status=Status.DONE, priority=Priority.P1),
    ]


def _ids(todos):
    return [todo.id for todo in todos]


def test_search_matches_any_field_case_insensitively():
    todos = _sample()

    assert _ids(search_todos(todos, "BREAD")) == [2]
    assert _ids(search_todos(todos, "holiday")) == [3]
    assert _ids(search_todos(todos, "work")) == [1]
    assert _ids(search_todos(todos, "bug")) == [1, 5]


def test_search_never_returns_archived():
    assert 4 not in _ids(search_todos(_sample(), "old bug"))
    assert _ids(search_todos(_sample(), "")) == [1, 2, 3, 5]


def test_tag_prefix_uses_equality():
    assert _ids(filter_by_special_syntax(_sample(), "#BUG")) == [1, 4]


def test_category_prefix_is_case_insensitive():
    assert _ids(filter_by_special_syntax(_sample(), "@work")) == [1]
    assert _ids(filter_by_special_syntax(_sample(), "@HOME")) == [2]


def test_status_and_priority_prefixes():
    assert _ids(filter_by_special_syntax(_sample(), "!inprogress")) == [3]
    assert _ids(filter_by_special_syntax(_sample(), "!done")) == [5]
    assert _ids(filter_by_special_syntax(_sample(), "p0")) == [1]
    assert _ids(filter_by_special_syntax(_sample(), "P1")) == [5]


def test_unparsable_prefixes_fall_through_to_text_search():
    todos = _sample() + [_todo(6, "Read !bogus notes"), _todo(7, "Fix px widget")]

    assert _ids(filter_by_special_syntax(todos, "!bogus")) == [6]
    assert _ids(filter_by_special_syntax(todos, "px")) == [7]
    assert _ids(filter_by_special_syntax(todos, "plan")) == [3]


def test_sort_by_priority_breaks_ties_by_newest():
    todos = [
        _todo(1, "a", minutes=0, priority=Priority.P2),
        _todo(2, "b", minutes=5, priority=Priority.P2),
        _todo(3, "c", minutes=1, priority=Priority.P0),
        _todo(4, "d", minutes=9, priority=Priority.P5),
    ]

    assert _ids(sort_todos_by_priority(todos)) == [3, 2, 1, 4]


def test_sort_by_date_newest_first():
    todos = [_todo(1, "a", minutes=3), _todo(2, "b", minutes=7), _todo(3, "c", minutes=1)]

    assert _ids(sort_todos_by_date(todos)) == [2, 1, 3]


def test_priority_scenario_orders_urgent_first():
    todos = [
        _todo(1, "A", priority=Priority.P0),
        _todo(2, "B", priority=Priority.P2, status=Status.DONE),
    ]

    assert _ids(sort_todos_by_priority(todos)) == [1, 2]


def test_active_and_all_views():
    todos = _sample()

    assert _ids(get_active_todos(todos)) == [1, 2, 3]
    assert _ids(get_all_todos_including_archived(todos)) == [1, 2, 3, 4, 5]
