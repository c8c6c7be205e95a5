"""Load and save the task collection as a YAML document."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from guidebook_todo.errors import StorageError
from guidebook_todo.todo import TodoList
from guidebook_todo.utils import _atomic_write

logger = logging.getLogger(__name__)


def load_todos(path: Path) -> TodoList:
    """Read the collection at ``path``.

    A missing file yields an empty collection that is written out right away;
    an empty file yields an empty collection without touching the disk.
    """
    if not path.exists():
        todo_list = TodoList()
        logger.info("Creating new TODO file at %s", path)
        save_todos(todo_list, path)
        return todo_list

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StorageError(
            "Failed to read TODO file", {"path": str(path), "reason": str(exc)}
        ) from exc

    if not content.strip():
        return TodoList()

    try:
        data = yaml.safe_load(content)
        if not isinstance(data, dict):
            raise TypeError("top-level document must be a mapping")
        return TodoList.from_dict(data)
    except (yaml.YAMLError, KeyError, TypeError, ValueError) as exc:
        raise StorageError(
            "Failed to parse TODO file", {"path": str(path), "reason": str(exc)}
        ) from exc


def save_todos(todo_list: TodoList, path: Path) -> None:
    """Rewrite the whole file; the last writer wins."""
    content = yaml.safe_dump(
        todo_list.to_dict(), sort_keys=False, allow_unicode=True
    )
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _atomic_write(path, content)
    except OSError as exc:
        raise StorageError(
            "Failed to write TODO file", {"path": str(path), "reason": str(exc)}
        ) from exc
    logger.debug("Saved %d TODOs to %s", len(todo_list.todos), path)
