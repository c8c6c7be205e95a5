"""Read-only search and filter helpers over task sequences."""

from __future__ import annotations

from typing import Iterable

from guidebook_todo.errors import InvalidValueError
from guidebook_todo.todo import Status, Todo, parse_priority, parse_status


def _matches_text(todo: Todo, needle: str) -> bool:
    if needle in todo.title.lower():
        return True
    if todo.notes and needle in todo.notes.lower():
        return True
    if any(needle in tag.lower() for tag in todo.tags):
        return True
    if todo.category and needle in todo.category.lower():
        return True
    return bool(todo.project and needle in todo.project.lower())


def search_todos(todos: Iterable[Todo], query: str) -> list[Todo]:
    """Case-insensitive substring search; archived tasks never match."""
    needle = query.lower()
    return [
        todo
        for todo in todos
        if todo.status is not Status.ARCHIVED and _matches_text(todo, needle)
    ]


def filter_by_special_syntax(todos: Iterable[Todo], query: str) -> list[Todo]:
    """Dispatch on ``#tag``, ``@category``, ``!status`` and ``pN`` prefixes.

    A ``!`` or ``pN`` query whose value does not parse falls through to a
    plain text search of the whole query.
    """
    todos = list(todos)
    if query.startswith("#"):
        tag = query[1:].lower()
        return [todo for todo in todos if tag in todo.tags]
    if query.startswith("@"):
        category = query[1:].lower()
        return [
            todo
            for todo in todos
            if todo.category is not None and todo.category.lower() == category
        ]
    if query.startswith("!"):
        try:
            status = parse_status(query[1:])
        except InvalidValueError:
            pass
        else:
            return [todo for todo in todos if todo.status is status]
    if len(query) == 2 and query[0] in {"p", "P"}:
        try:
            priority = parse_priority(query)
        except InvalidValueError:
            pass
        else:
            return [todo for todo in todos if todo.priority is priority]
    return search_todos(todos, query)


def sort_todos_by_priority(todos: Iterable[Todo]) -> list[Todo]:
    """Most urgent first; newest first within the same priority."""
    by_date = sorted(todos, key=lambda todo: todo.created_date, reverse=True)
    return sorted(by_date, key=lambda todo: todo.priority_value())


def sort_todos_by_date(todos: Iterable[Todo]) -> list[Todo]:
    return sorted(todos, key=lambda todo: todo.created_date, reverse=True)


def get_active_todos(todos: Iterable[Todo]) -> list[Todo]:
    return [todo for todo in todos if todo.is_active()]


def get_all_todos_including_archived(todos: Iterable[Todo]) -> list[Todo]:
    return list(todos)
