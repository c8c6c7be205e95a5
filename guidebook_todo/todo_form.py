"""Task creation and edit form state, independent of the terminal backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from guidebook_todo.errors import TodoError
from guidebook_todo.fields import ChoiceField, TextArea, TextInput
from guidebook_todo.storage import load_todos, save_todos
from guidebook_todo.todo import (
    Priority,
    Status,
    Todo,
    validate_and_normalize_tags,
    validate_category,
    validate_notes,
    validate_project,
    validate_title,
)

logger = logging.getLogger(__name__)

PRIORITY_OPTIONS = [(f"{priority.value} - {priority.label}", priority) for priority in Priority]
STATUS_OPTIONS = [(status.label, status) for status in Status]

EXIT_KEYS = {"c-x", "escape", "c-c"}


def _optional(raw: str, validator) -> str | None:
    value = raw.strip()
    if not value:
        return None
    validator(value)
    return value


@dataclass(frozen=True)
class TodoFormData:
    title: str
    priority: Priority
    status: Status
    category: str | None
    project: str | None
    tags: list[str]
    notes: str | None

    @classmethod
    def from_form(cls, form: TodoForm) -> TodoFormData:
        """Validate every field of ``form``; raises ValidationError on the first failure."""
        tags_raw = form.tags.value
        return cls(
            title=validate_title(form.title.value),
            priority=form.priority.value,
            status=form.status.value,
            category=_optional(form.category.value, validate_category),
            project=_optional(form.project.value, validate_project),
            tags=validate_and_normalize_tags(tags_raw) if tags_raw.strip() else [],
            notes=_optional(form.notes.value, validate_notes),
        )

    def apply_to(self, todo: Todo) -> None:
        todo.update_with_validation(
            title=self.title,
            category=self.category,
            project=self.project,
            notes=self.notes,
            tags=self.tags,
        )
        todo.priority = self.priority
        todo.set_status(self.status)


class TodoForm:
    """Seven fields with a single focus, cyclic Tab navigation and save rules.

    ``handle_key`` returns True once the form should close. Enter on the
    title field and ``c-s`` close only after a successful save; the exit keys
    attempt a save, log any failure and close regardless.
    """

    def __init__(
        self,
        on_save: Callable[[TodoFormData], object],
        *,
        heading: str = "Add TODO",
        allow_archive: bool = False,
    ) -> None:
        self.on_save = on_save
        self.heading = heading
        self.allow_archive = allow_archive
        self.error: str | None = None

        self.title = TextInput("Title")
        self.priority = ChoiceField("Priority", PRIORITY_OPTIONS)
        self.priority.select_value(Priority.P2)
        self.status = ChoiceField("Status", STATUS_OPTIONS)
        self.category = TextInput("Category")
        self.project = TextInput("Project")
        self.tags = TextInput("Tags (comma-separated)")
        self.notes = TextArea("Notes")
        self.fields = [
            self.title,
            self.priority,
            self.status,
            self.category,
            self.project,
            self.tags,
            self.notes,
        ]
        self.focus_index = 0
        self.title.focused = True

    @classmethod
    def for_todo(cls, todo: Todo, on_save: Callable[[TodoFormData], object]) -> TodoForm:
        form = cls(on_save, heading=f"Edit TODO #{todo.id}", allow_archive=True)
        form.title.set_value(todo.title)
        form.priority.select_value(todo.priority)
        form.status.select_value(todo.status)
        form.category.set_value(todo.category or "")
        form.project.set_value(todo.project or "")
        form.tags.set_value(", ".join(todo.tags))
        form.notes.set_value(todo.notes or "")
        return form

    @property
    def focused_field(self):
        return self.fields[self.focus_index]

    def _move_focus(self, step: int) -> None:
        self.focused_field.focused = False
        self.focus_index = (self.focus_index + step) % len(self.fields)
        self.focused_field.focused = True

    def save(self) -> bool:
        try:
            self.on_save(TodoFormData.from_form(self))
        except TodoError as exc:
            self.error = exc.message
            logger.error("Failed to save TODO: %s", exc.message)
            return False
        self.error = None
        return True

    def handle_key(self, key: str) -> bool:
        if key in EXIT_KEYS:
            self.save()
            return True
        if key == "c-s":
            return self.save()
        if key == "enter" and self.focused_field is self.title:
            return self.save()
        if key == "tab":
            self._move_focus(1)
        elif key == "s-tab":
            self._move_focus(-1)
        elif key == "c-r" and self.allow_archive:
            self.status.select_value(Status.ARCHIVED)
        else:
            self.focused_field.handle_key(key)
        return False


def save_new_todo(path: Path, data: TodoFormData) -> Todo:
    todo_list = load_todos(path)
    todo = todo_list.create_todo(data.title)
    data.apply_to(todo)
    todo_list.add_todo(todo)
    save_todos(todo_list, path)
    logger.info("Added TODO #%d", todo.id)
    return todo


def save_existing_todo(path: Path, todo_id: int, data: TodoFormData) -> Todo:
    todo_list = load_todos(path)
    todo = todo_list.require_todo(todo_id)
    data.apply_to(todo)
    save_todos(todo_list, path)
    logger.info("Updated TODO #%d", todo.id)
    return todo


def new_todo_form(path: Path, title: str | None = None) -> TodoForm:
    form = TodoForm(lambda data: save_new_todo(path, data))
    if title:
        form.title.set_value(title)
    return form


def edit_todo_form(path: Path, todo_id: int) -> TodoForm:
    todo = load_todos(path).require_todo(todo_id)
    return TodoForm.for_todo(todo, lambda data: save_existing_todo(path, todo_id, data))
