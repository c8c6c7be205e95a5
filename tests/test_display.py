from datetime import datetime, timedelta

from prompt_toolkit.formatted_text import fragment_list_to_text

from guidebook_todo import display
from guidebook_todo.todo import Priority, Status, Todo, TodoList

BASE = datetime(2024, 3, 1, 9, 30).astimezone()


def _todo(todo_id, title="task", **fields):
    return Todo(
        id=todo_id,
        title=title,
        created_date=BASE + timedelta(minutes=todo_id),
        **fields,
    )


def test_render_list_empty():
    assert fragment_list_to_text(display.render_list([])) == "No TODOs found."


def test_render_list_rows_and_footer():
    todos = [
        _todo(1, "Fix login", priority=Priority.P0, category="work", tags=["bug", "auth"]),
        _todo(12, "x" * 50, status=Status.IN_PROGRESS),
    ]

    text = fragment_list_to_text(display.render_list(todos))
    lines = text.splitlines()

    assert lines[0].startswith("ID   │ PRI │ S │ Category")
    assert "1    │ P0  │ T │ work       │ Fix login" in lines[2]
    assert "bug,auth" in lines[2]
    assert "12   │ P2  │ W │ -" in lines[3]
    assert "x" * 37 + "..." in lines[3]
    assert text.endswith("Showing 2 TODOs")


def test_render_detail_includes_optional_fields_only_when_set():
    todo = _todo(
        3,
        "Write report",
        status=Status.DONE,
        priority=Priority.P1,
        project="q1",
        notes="first line\nsecond line",
        finished_date=BASE + timedelta(hours=2),
    )

    text = fragment_list_to_text(display.render_detail(todo))

    assert text.startswith("TODO #3\nTitle: Write report\nStatus: Done\n")
    assert "Priority: P1 (Must have)" in text
    assert "Project: q1" in text
    assert "Category" not in text
    assert "Tags" not in text
    assert "Finished: " + (BASE + timedelta(hours=2)).strftime("%Y-%m-%d %H:%M:%S") in text
    assert text.endswith("Notes:\n  first line\n  second line")


def test_render_detail_unfinished_task():
    text = fragment_list_to_text(display.render_detail(_todo(1, status=Status.IN_PROGRESS)))

    assert "Status: In Progress" in text
    assert "Finished: -" in text


def test_render_stats():
    todo_list = TodoList(
        next_id=4,
        todos=[
            _todo(1, category="work"),
            _todo(2, category="work", status=Status.DONE),
            _todo(3, priority=Priority.P0),
        ],
    )

    text = fragment_list_to_text(display.render_stats(todo_list.show_stats()))

    assert text.startswith("TODO Statistics\n")
    assert "Total TODOs: 3" in text
    assert "  Todo: 2\n" in text
    assert "  Done: 1\n" in text
    assert "  P0: 1\n" in text
    assert "  P2: 2\n" in text
    assert "By Category:\n  work: 2\n" in text


def test_select_overview_picks_urgent_then_spaced_sample():
    todos = [_todo(todo_id) for todo_id in range(1, 11)]
    todos[0].priority = Priority.P0
    todos[1].priority = Priority.P1
    todos.append(_todo(11, status=Status.DONE, priority=Priority.P0))
    todos.append(_todo(12, status=Status.ARCHIVED, priority=Priority.P0))

    top, others = display.select_overview(TodoList(next_id=13, todos=todos))

    assert [todo.id for todo in top] == [1, 2, 10, 9]
    assert [todo.id for todo in others] == [3, 5, 7]


def test_render_overview_without_active_tasks():
    todo_list = TodoList(next_id=2, todos=[_todo(1, status=Status.DONE)])

    text = fragment_list_to_text(display.render_overview(todo_list))

    assert "No active TODOs found!" in text


def test_render_overview_summary_and_icons():
    todo_list = TodoList(
        next_id=4,
        todos=[
            _todo(1, "Ship it", priority=Priority.P0),
            _todo(2, "Working", status=Status.IN_PROGRESS),
            _todo(3, "Finished", status=Status.DONE),
        ],
    )

    text = fragment_list_to_text(display.render_overview(todo_list))

    assert "Priority Tasks (2):" in text
    assert "[001] P0 | general  | Ship it" in text
    assert "Other Tasks" not in text
    assert "2 total active • 1 completed • 1 in progress" in text


def test_overview_icon_precedence():
    assert display.overview_icon(_todo(1, priority=Priority.P0, notes="n")) == "!"
    assert display.overview_icon(_todo(2, priority=Priority.P1)) == "*"
    assert display.overview_icon(_todo(3, status=Status.IN_PROGRESS)) == ">"
    assert display.overview_icon(_todo(4, notes="n")) == "N"
    assert display.overview_icon(_todo(5)) == " "


def test_render_list_truncates_long_categories():
    todos = [_todo(1, "Short", category="c" * 50), _todo(2, "Other", category="home")]

    lines = fragment_list_to_text(display.render_list(todos)).splitlines()

    assert "│ ccccccc... │ Short" in lines[2]
    assert lines[2].index("Short") == lines[3].index("Other")
