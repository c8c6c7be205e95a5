"""Interactive search state machine and the session that persists its actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

from guidebook_todo.constants import DONE_GRACE_SECONDS
from guidebook_todo.errors import TodoError
from guidebook_todo.fields import TextInput
from guidebook_todo.filters import filter_by_special_syntax
from guidebook_todo.git_sync import GitStatus
from guidebook_todo.storage import load_todos, save_todos
from guidebook_todo.todo import Status, Todo

logger = logging.getLogger(__name__)

EXIT_KEYS = {"c-x", "escape", "c-c"}

HELP_TEXT = (
    "Search: #tag @category !status p0-p5 • ↑↓ Navigate • ⏎ Edit • "
    "+/= Higher Priority • - Lower Priority • ⌃R Archive • ⌃D Done • "
    "⌃A Add TODO • F1 Toggle Help"
)
SEARCH_HINT = "Type to search • ↓/⏎ Navigate to results • / Refocus • ⌃A Add TODO • F1 Help • ⌃X Exit"
RESULTS_HINT = (
    "↑↓ Navigate • ⏎ Edit • +/= Higher Priority • - Lower Priority • "
    "⌃R Archive • ⌃D Done • ⌃A Add TODO • F1 Help • ⌃X Exit"
)


class SignalKind(Enum):
    EXIT = "exit"
    ADD_TODO = "add_todo"
    EDIT = "edit"
    INCREASE_PRIORITY = "increase_priority"
    DECREASE_PRIORITY = "decrease_priority"
    ARCHIVE = "archive"
    MARK_DONE = "mark_done"
    CONTINUE = "continue"


@dataclass(frozen=True)
class Signal:
    kind: SignalKind
    todo_id: int | None = None


CONTINUE = Signal(SignalKind.CONTINUE)

TASK_ACTIONS = {
    SignalKind.INCREASE_PRIORITY: "increase priority",
    SignalKind.DECREASE_PRIORITY: "decrease priority",
    SignalKind.ARCHIVE: "archive TODO",
    SignalKind.MARK_DONE: "mark TODO as done",
}


class Focus(Enum):
    SEARCH = "search"
    RESULTS = "results"


def _now() -> datetime:
    return datetime.now().astimezone()


def is_visible_in_search(todo: Todo, now: datetime) -> bool:
    """Hide archived tasks and tasks finished more than a few seconds ago."""
    if todo.status is Status.ARCHIVED:
        return False
    if todo.status is Status.DONE and todo.finished_date is not None:
        return (now - todo.finished_date).total_seconds() <= DONE_GRACE_SECONDS
    return True


def search_results(todos: Iterable[Todo], query: str, now: datetime) -> list[Todo]:
    visible = [todo for todo in todos if is_visible_in_search(todo, now)]
    if not query:
        return visible
    return filter_by_special_syntax(visible, query)


class SearchViewModel:
    """Focus, selection and query state over the filtered task list."""

    def __init__(
        self,
        todos: Iterable[Todo],
        *,
        query: str = "",
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self.clock = clock
        self.search = TextInput("Search", query)
        self.search.focused = True
        self.focus = Focus.SEARCH
        self.show_help = False
        self.selected_index = 0
        self.status_message: str | None = None
        self.todos = list(todos)
        self.results: list[Todo] = []
        self.refilter()

    @property
    def query(self) -> str:
        return self.search.value

    @property
    def selected(self) -> Todo | None:
        if self.focus is not Focus.RESULTS or not self.results:
            return None
        return self.results[self.selected_index]

    def refilter(self) -> None:
        self.results = search_results(self.todos, self.query, self.clock())
        self.selected_index = 0

    def reload(self, todos: Iterable[Todo], preserve_id: int | None = None) -> None:
        """Replace the task set, re-run the query and keep ``preserve_id`` selected."""
        self.todos = list(todos)
        self.refilter()
        if preserve_id is None:
            return
        for index, todo in enumerate(self.results):
            if todo.id == preserve_id:
                self.selected_index = index
                break

    def _set_focus(self, focus: Focus) -> None:
        self.focus = focus
        self.search.focused = focus is Focus.SEARCH

    def handle_key(self, key: str) -> Signal:
        if key in EXIT_KEYS:
            return Signal(SignalKind.EXIT)
        if key == "c-a":
            return Signal(SignalKind.ADD_TODO)
        if key == "f1":
            self.show_help = not self.show_help
            return CONTINUE
        if key == "/":
            self._set_focus(Focus.SEARCH)
            return CONTINUE
        if self.focus is Focus.SEARCH:
            return self._handle_search_key(key)
        return self._handle_results_key(key)

    def _handle_search_key(self, key: str) -> Signal:
        if key in {"down", "enter"}:
            if self.results:
                self._set_focus(Focus.RESULTS)
                self.selected_index = 0
            return CONTINUE
        before = self.search.value
        self.search.handle_key(key)
        if self.search.value != before:
            self.refilter()
        return CONTINUE

    def _handle_results_key(self, key: str) -> Signal:
        if key == "up":
            if self.selected_index == 0:
                self._set_focus(Focus.SEARCH)
            else:
                self.selected_index -= 1
            return CONTINUE
        if key == "down":
            if self.results:
                self.selected_index = min(self.selected_index + 1, len(self.results) - 1)
            return CONTINUE

        selected = self.selected
        if selected is None:
            return CONTINUE
        if key == "enter":
            return Signal(SignalKind.EDIT, selected.id)
        if key in {"+", "="}:
            return Signal(SignalKind.INCREASE_PRIORITY, selected.id)
        if key == "-":
            return Signal(SignalKind.DECREASE_PRIORITY, selected.id)
        if key == "c-r":
            return Signal(SignalKind.ARCHIVE, selected.id)
        if key == "c-d":
            return Signal(SignalKind.MARK_DONE, selected.id)
        return CONTINUE


class SearchSession:
    """Bind a view-model to the task file and persist its task actions.

    Task actions are saved before the next key is processed. A failing action
    is logged and reported in the status line; the session carries on.
    """

    def __init__(
        self,
        path: Path,
        *,
        query: str = "",
        git_status: GitStatus | None = None,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self.path = path
        self.git_status = git_status
        self.clock = clock
        self.view = SearchViewModel(load_todos(path).todos, query=query, clock=clock)

    def handle_key(self, key: str) -> Signal:
        signal = self.view.handle_key(key)
        if signal.kind in TASK_ACTIONS:
            self.apply(signal)
            return CONTINUE
        return signal

    def reload(self, preserve_id: int | None = None) -> None:
        try:
            todos = load_todos(self.path).todos
        except TodoError as exc:
            self.report_error("reload TODOs", exc)
            return
        self.view.reload(todos, preserve_id)


    def report_error(self, action: str, exc: TodoError) -> None:
        logger.error("Failed to %s: %s", action, exc.message)
        self.view.status_message = f"Failed to {action}: {exc.message}"

    def apply(self, signal: Signal) -> None:
        action = TASK_ACTIONS[signal.kind]
        try:
            todo_list = load_todos(self.path)
            todo = todo_list.get_todo(signal.todo_id)
            if todo is None:
                logger.warning("TODO #%s disappeared before %s", signal.todo_id, action)
            else:
                if signal.kind is SignalKind.INCREASE_PRIORITY:
                    todo.priority = todo.priority.raised()
                elif signal.kind is SignalKind.DECREASE_PRIORITY:
                    todo.priority = todo.priority.lowered()
                elif signal.kind is SignalKind.ARCHIVE:
                    todo.set_status(Status.ARCHIVED)
                else:
                    todo.set_status(Status.DONE, now=self.clock())
                save_todos(todo_list, self.path)
            self.view.status_message = None
            preserve = None if signal.kind is SignalKind.ARCHIVE else signal.todo_id
            self.view.reload(todo_list.todos, preserve)
        except TodoError as exc:
            self.report_error(action, exc)
