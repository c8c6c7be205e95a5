"""Styled plain-terminal renderings of tasks, shared by the CLI commands."""

from __future__ import annotations

import sys
from typing import Iterable

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText, StyleAndTextTuples
from prompt_toolkit.styles import Style

from guidebook_todo.constants import DETAIL_DATE_FORMAT
from guidebook_todo.filters import get_active_todos, sort_todos_by_priority
from guidebook_todo.todo import Priority, Status, Todo, TodoList, TodoStats

# Apollo palette.
STYLE = Style.from_dict(
    {
        "header": "#e7d5b3 bold",
        "heading": "#4f8fba bold",
        "label": "bold",
        "dim": "#8b9bb4",
        "cream": "#d7b594",
        "title": "#e7d5b3",
        "success": "#75a743",
        "warning": "#e8c170",
        "error": "#de7277",
        "priority.p0": "#a22c40 bold",
        "priority.p1": "#de9e41 bold",
        "priority.p2": "#e8c170",
        "priority.p3": "#d0da91",
        "priority.p4": "#d0da91",
        "priority.p5": "#8b9bb4",
        "status.todo": "#4f8fba",
        "status.inprogress": "#e8c170",
        "status.done": "#468232",
        "status.archived": "#8b9bb4",
    }
)

STATUS_LETTERS = {
    Status.TODO: "T",
    Status.IN_PROGRESS: "W",
    Status.DONE: "D",
    Status.ARCHIVED: "A",
}

OVERVIEW_PRIORITY_COUNT = 4
OVERVIEW_OTHER_COUNT = 3


def priority_class(priority: Priority) -> str:
    return f"class:priority.{priority.value.lower()}"


def status_class(status: Status) -> str:
    return f"class:status.{status.value.lower()}"


def truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def echo(fragments: StyleAndTextTuples) -> None:
    """Print styled fragments; colors are dropped when stdout is not a tty."""
    print_formatted_text(FormattedText(fragments), style=STYLE, file=sys.stdout)


def render_message(text: str, style: str = "class:success") -> StyleAndTextTuples:
    return [(style, text)]


def render_list(todos: Iterable[Todo]) -> StyleAndTextTuples:
    todos = list(todos)
    if not todos:
        return [("", "No TODOs found.")]

    sep = ("class:dim", " │ ")
    fragments: StyleAndTextTuples = [
        (
            "class:header",
            f"{'ID':<4} │ {'PRI':<3} │ {'S':<1} │ {'Category':<10} │ "
            f"{'Title':<40} │ {'Tags':<15}\n",
        ),
        ("class:dim", "─" * 80 + "\n"),
    ]
    for todo in todos:
        tags = ",".join(todo.tags) if todo.tags else "-"
        fragments.extend(
            [
                ("class:dim", f"{todo.id:<4}"),
                sep,
                (priority_class(todo.priority), f"{todo.priority.value:<3}"),
                sep,
                (status_class(todo.status), STATUS_LETTERS[todo.status]),
                sep,
                ("class:cream", f"{truncate(todo.category or '-', 10):<10}"),
                sep,
                ("class:title", f"{truncate(todo.title, 40):<40}"),
                sep,
                ("class:cream", f"{tags:<15}\n"),
            ]
        )
    fragments.append(("class:cream", f"\nShowing {len(todos)} TODOs"))
    return fragments


def render_detail(todo: Todo) -> StyleAndTextTuples:
    fragments: StyleAndTextTuples = [
        ("class:heading", f"TODO #{todo.id}\n"),
        ("class:label", "Title"),
        ("", f": {todo.title}\n"),
        ("class:label", "Status"),
        ("", ": "),
        (status_class(todo.status), f"{todo.status.label}\n"),
        ("class:label", "Priority"),
        ("", ": "),
        (priority_class(todo.priority), f"{todo.priority.value} ({todo.priority.label})\n"),
    ]
    if todo.category:
        fragments += [("class:label", "Category"), ("", f": {todo.category}\n")]
    if todo.project:
        fragments += [("class:label", "Project"), ("", f": {todo.project}\n")]
    if todo.tags:
        fragments += [("class:label", "Tags"), ("", f": {', '.join(todo.tags)}\n")]

    finished = (
        todo.finished_date.strftime(DETAIL_DATE_FORMAT) if todo.finished_date else "-"
    )
    fragments += [
        ("class:label", "Created"),
        ("", f": {todo.created_date.strftime(DETAIL_DATE_FORMAT)}\n"),
        ("class:label", "Finished"),
        ("", f": {finished}"),
    ]
    if todo.notes:
        fragments += [("class:label", "\nNotes"), ("", ":")]
        fragments += [("", f"\n  {line}") for line in todo.notes.splitlines()]
    return fragments


def render_stats(stats: TodoStats) -> StyleAndTextTuples:
    fragments: StyleAndTextTuples = [
        ("class:heading", "TODO Statistics\n"),
        ("class:dim", "==================\n"),
        ("", f"Total TODOs: {stats.total}\n\n"),
        ("class:label", "By Status:\n"),
    ]
    for status, count in stats.by_status.items():
        fragments.append((status_class(status), f"  {status.label}: {count}\n"))
    fragments.append(("class:label", "\nBy Priority:\n"))
    for priority, count in stats.by_priority.items():
        fragments.append((priority_class(priority), f"  {priority.value}: {count}\n"))
    if stats.by_category:
        fragments.append(("class:label", "\nBy Category:\n"))
        for category, count in stats.by_category.items():
            fragments.append(("class:cream", f"  {category}: {count}\n"))
    return fragments


def select_overview(todo_list: TodoList) -> tuple[list[Todo], list[Todo]]:
    """Pick the most urgent active tasks plus an evenly spaced sample of the rest."""
    active = get_active_todos(todo_list.todos)
    top = sort_todos_by_priority(active)[:OVERVIEW_PRIORITY_COUNT]
    top_ids = {todo.id for todo in top}
    remaining = sorted(
        (todo for todo in active if todo.id not in top_ids), key=lambda todo: todo.id
    )
    step = len(remaining) // OVERVIEW_OTHER_COUNT if len(remaining) > OVERVIEW_OTHER_COUNT else 1
    return top, remaining[::step][:OVERVIEW_OTHER_COUNT]


def overview_icon(todo: Todo) -> str:
    if todo.priority is Priority.P0:
        return "!"
    if todo.priority is Priority.P1:
        return "*"
    if todo.status is Status.IN_PROGRESS:
        return ">"
    if todo.notes:
        return "N"
    return " "


def _overview_rows(todos: list[Todo]) -> StyleAndTextTuples:
    fragments: StyleAndTextTuples = []
    for todo in todos:
        fragments += [
            ("class:dim", f"  [{todo.id:03}] "),
            (priority_class(todo.priority), f"{todo.priority.value:2}"),
            ("class:dim", " | "),
            ("class:cream", f"{todo.category or 'general':8}"),
            ("class:dim", " | "),
            ("class:title", f"{truncate(todo.title, 30):<30} "),
            ("class:warning", f"{overview_icon(todo)}\n"),
        ]
    return fragments


def render_overview(todo_list: TodoList) -> StyleAndTextTuples:
    top, others = select_overview(todo_list)
    if not top:
        return [
            ("class:header", "Your TODOs\n\n"),
            ("", "No active TODOs found!\n"),
            ("class:dim", "Use 'todo add' to create your first TODO"),
        ]

    fragments: StyleAndTextTuples = [("class:header", "Your TODOs\n\n")]
    fragments.append(("class:label", f"Priority Tasks ({len(top)}):\n"))
    fragments += _overview_rows(top)
    if others:
        fragments.append(("class:label", f"\nOther Tasks ({len(others)}):\n"))
        fragments += _overview_rows(others)

    active = sum(1 for todo in todo_list.todos if todo.is_active())
    done = sum(1 for todo in todo_list.todos if todo.status is Status.DONE)
    in_progress = sum(
        1 for todo in todo_list.todos if todo.status is Status.IN_PROGRESS
    )
    summary = f"\n{active} total active • {done} completed • {in_progress} in progress\n\n"
    fragments += [
        ("class:cream", summary),
        ("class:dim", "Use 'todo search' to find tasks, 'todo add' to create new ones"),
    ]
    return fragments
