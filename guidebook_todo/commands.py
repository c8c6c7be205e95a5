"""CLI operations over the task file.

Each command loads the collection, performs one operation, saves when it
mutated anything and prints its outcome. Failures propagate as TodoError.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from guidebook_todo import display, tui
from guidebook_todo.config import AppConfig
from guidebook_todo.constants import EMPTY_TODO_FILE
from guidebook_todo.editor import open_in_editor
from guidebook_todo.errors import ValidationError
from guidebook_todo.filters import filter_by_special_syntax, sort_todos_by_priority
from guidebook_todo.git_sync import add_remote, ensure_git_repo, get_git_status, push_changes
from guidebook_todo.paths import data_todo_path, pretty_path, resolve_todo_path
from guidebook_todo.storage import load_todos, save_todos
from guidebook_todo.todo import Todo
from guidebook_todo.utils import _atomic_write

logger = logging.getLogger(__name__)


def todo_path(config: AppConfig) -> Path:
    return resolve_todo_path(config.data_dir)


def init_storage(config: AppConfig, remote_url: str | None = None) -> bool:
    """Create the data directory, its git repository and an empty task file."""
    if config.data_dir.exists():
        display.echo(
            display.render_message(
                f"TODO system already initialized at {pretty_path(config.data_dir)}",
                "class:warning",
            )
        )
        return False

    todo_file = data_todo_path(config.data_dir)
    todo_file.parent.mkdir(parents=True)
    with ensure_git_repo(config.data_dir) as repo:
        if remote_url:
            add_remote(repo, config.git_remote, remote_url)
    _atomic_write(todo_file, EMPTY_TODO_FILE)
    logger.info("Initialized TODO storage at %s", config.data_dir)
    display.echo(
        display.render_message(
            f"✓ Local TODO repository created at {pretty_path(config.data_dir)}"
        )
    )
    return True


def quick_add(
    config: AppConfig,
    title: str | None,
    prompt: Callable[[str], str] = input,
) -> Todo:
    if title is None:
        title = prompt("Enter TODO title: ")
    if not title.strip():
        raise ValidationError("TODO title cannot be empty", {"field": "title"})

    path = todo_path(config)
    todo_list = load_todos(path)
    todo = todo_list.create_todo(title)
    todo_list.add_todo(todo)
    save_todos(todo_list, path)
    display.echo(display.render_message(f"✓ TODO added successfully (#{todo.id})"))
    return todo


def add(config: AppConfig, title: str | None, quick: bool) -> None:
    if quick:
        quick_add(config, title)
        return
    tui.run_add(todo_path(config), title)


def list_todos(
    config: AppConfig,
    *,
    status: str | None = None,
    category: str | None = None,
    priority: str | None = None,
    tags: str | None = None,
    include_archived: bool = False,
) -> list[Todo]:
    todo_list = load_todos(todo_path(config))
    todos = sort_todos_by_priority(
        todo_list.filter_todos(
            status=status,
            category=category,
            priority=priority,
            tags=tags,
            include_archived=include_archived,
        )
    )
    display.echo(display.render_list(todos))
    return todos


def update(config: AppConfig, todo_id: int, **changes: str | None) -> Todo:
    path = todo_path(config)
    todo_list = load_todos(path)
    todo = todo_list.update_todo(todo_id, **changes)
    save_todos(todo_list, path)
    display.echo(display.render_message("✓ TODO updated successfully"))
    return todo


def delete(
    config: AppConfig,
    todo_id: int | None = None,
    *,
    category: str | None = None,
    status: str | None = None,
) -> int:
    path = todo_path(config)
    todo_list = load_todos(path)
    if todo_id is not None:
        todo_list.delete_todo(todo_id)
        message = "✓ TODO deleted successfully"
        removed = 1
    elif category is not None:
        removed = todo_list.delete_by_category(category)
        message = f"✓ Deleted {removed} TODOs in category '{category}'"
    elif status is not None:
        removed = todo_list.delete_by_status(status)
        message = f"✓ Deleted {removed} TODOs with status '{status}'"
    else:
        raise ValidationError("Must specify either ID, category, or status")
    save_todos(todo_list, path)
    display.echo(display.render_message(message))
    return removed


def search(config: AppConfig, query: str | None, *, print_only: bool = False) -> None:
    path = todo_path(config)
    if print_only:
        todo_list = load_todos(path)
        display.echo(display.render_list(filter_by_special_syntax(todo_list.todos, query or "")))
        return
    tui.run_search(path, query=query or "", git_status=get_git_status(config.data_dir))


def edit(config: AppConfig, todo_id: int) -> None:
    tui.run_edit(todo_path(config), todo_id)


def show(config: AppConfig, todo_id: int) -> Todo:
    todo = load_todos(todo_path(config)).require_todo(todo_id)
    display.echo(display.render_detail(todo))
    return todo


def stats(config: AppConfig) -> None:
    display.echo(display.render_stats(load_todos(todo_path(config)).show_stats()))


def push(config: AppConfig, *, message: str | None = None, force: bool = False) -> None:
    result = push_changes(
        config.data_dir,
        message=message,
        force=force,
        remote=config.git_remote,
        branch=config.git_branch,
    )
    if not result.pushed:
        display.echo(
            display.render_message(
                "No changes to push. Use --force to push anyway.", "class:warning"
            )
        )
        return
    if result.commit_message:
        display.echo(display.render_message(f"✓ Changes committed: {result.commit_message}"))
    if result.upstream_set:
        display.echo(
            display.render_message(
                f"Upstream set to {config.git_remote}/{result.branch}", "class:dim"
            )
        )
    display.echo(display.render_message(f"✓ Successfully pushed to {config.git_remote}!"))


def code(config: AppConfig) -> None:
    path = todo_path(config)
    if not path.exists():
        load_todos(path)
    display.echo(display.render_message(f"Opening {pretty_path(path)}", "class:dim"))
    open_in_editor(path, config.editor)


def overview(config: AppConfig) -> None:
    display.echo(display.render_overview(load_todos(todo_path(config))))
