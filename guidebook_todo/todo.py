"""Task records, the task collection and their validation rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import StrEnum
from typing import Any, Iterable

from guidebook_todo.constants import (
    CATEGORY_MAX_LENGTH,
    NOTES_MAX_LENGTH,
    PRIORITY_LABELS,
    PROJECT_MAX_LENGTH,
    TAG_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)
from guidebook_todo.errors import InvalidValueError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class Priority(StrEnum):
    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"
    P5 = "P5"

    @property
    def rank(self) -> int:
        return int(self.value[1])

    @property
    def label(self) -> str:
        return PRIORITY_LABELS[self.value]

    def raised(self) -> Priority:
        """One step more urgent, saturating at P0."""
        return _PRIORITIES[max(self.rank - 1, 0)]

    def lowered(self) -> Priority:
        """One step less urgent, saturating at P5."""
        return _PRIORITIES[min(self.rank + 1, len(_PRIORITIES) - 1)]


_PRIORITIES = list(Priority)


class Status(StrEnum):
    TODO = "Todo"
    IN_PROGRESS = "InProgress"
    DONE = "Done"
    ARCHIVED = "Archived"

    @property
    def label(self) -> str:
        if self is Status.IN_PROGRESS:
            return "In Progress"
        return self.value


_STATUS_NAMES = {
    "todo": Status.TODO,
    "inprogress": Status.IN_PROGRESS,
    "in-progress": Status.IN_PROGRESS,
    "in_progress": Status.IN_PROGRESS,
    "done": Status.DONE,
    "archived": Status.ARCHIVED,
}
_OPEN_STATUSES = {Status.TODO, Status.IN_PROGRESS}


def parse_status(raw: str) -> Status:
    status = _STATUS_NAMES.get(raw.strip().lower())
    if status is None:
        raise InvalidValueError(
            f"Invalid status: {raw}. Valid values: todo, inprogress, done, archived",
            {"field": "status", "value": raw},
        )
    return status


def parse_priority(raw: str) -> Priority:
    normalized = raw.strip().upper()
    try:
        return Priority(normalized)
    except ValueError:
        raise InvalidValueError(
            f"Invalid priority: {raw}. Valid values: p0, p1, p2, p3, p4, p5",
            {"field": "priority", "value": raw},
        ) from None


def validate_title(title: str) -> str:
    """Return the trimmed title or raise ValidationError."""
    trimmed = title.strip()
    if not trimmed:
        raise ValidationError("Title cannot be empty", {"field": "title"})
    if len(trimmed) > TITLE_MAX_LENGTH:
        raise ValidationError(
            f"Title cannot exceed {TITLE_MAX_LENGTH} characters "
            f"(current: {len(trimmed)})",
            {"field": "title", "length": len(trimmed)},
        )
    return trimmed


def _validate_length(name: str, value: str, limit: int) -> None:
    if len(value) > limit:
        raise ValidationError(
            f"{name.capitalize()} cannot exceed {limit} characters "
            f"(current: {len(value)})",
            {"field": name, "length": len(value)},
        )


def validate_category(category: str) -> None:
    _validate_length("category", category, CATEGORY_MAX_LENGTH)


def validate_project(project: str) -> None:
    _validate_length("project", project, PROJECT_MAX_LENGTH)


def validate_notes(notes: str) -> None:
    _validate_length("notes", notes, NOTES_MAX_LENGTH)


def normalize_tag(raw: str) -> str:
    return raw.strip().lower().replace(" ", "_")


def _validated_tag(raw: str) -> str:
    tag = normalize_tag(raw)
    if len(tag) > TAG_MAX_LENGTH:
        raise ValidationError(
            f"Tag '{tag}' cannot exceed {TAG_MAX_LENGTH} characters",
            {"field": "tags", "tag": tag},
        )
    if " " in tag:
        raise ValidationError(
            f"Tag '{tag}' cannot contain spaces", {"field": "tags", "tag": tag}
        )
    return tag


def insert_tag(tags: list[str], tag: str) -> bool:
    """Append ``tag`` unless it is empty or already present."""
    if not tag or tag in tags:
        return False
    tags.append(tag)
    return True


def validate_and_normalize_tags(raw: str) -> list[str]:
    """Split a comma-separated tag string into normalized, unique tags."""
    tags: list[str] = []
    for item in raw.split(","):
        insert_tag(tags, _validated_tag(item))
    return tags


def _clean_optional(value: str | None, validator) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    validator(trimmed)
    return trimmed


def _now() -> datetime:
    return datetime.now().astimezone()


_UNSET: Any = object()


@dataclass
class Todo:
    id: int
    title: str
    priority: Priority = Priority.P2
    status: Status = Status.TODO
    tags: list[str] = field(default_factory=list)
    category: str | None = None
    project: str | None = None
    created_date: datetime = field(default_factory=_now)
    finished_date: datetime | None = None
    notes: str | None = None

    @classmethod
    def new_validated(cls, title: str) -> Todo:
        """Build an unnumbered task with default fields from a validated title."""
        return cls(id=0, title=validate_title(title))

    def priority_value(self) -> int:
        return self.priority.rank

    def is_active(self) -> bool:
        return self.status in _OPEN_STATUSES

    def set_status(self, status: Status, now: datetime | None = None) -> None:
        """Change status, stamping or clearing finished_date on Done transitions."""
        if status is Status.DONE and self.status in _OPEN_STATUSES:
            self.finished_date = now or _now()
        elif status in _OPEN_STATUSES and self.status is Status.DONE:
            self.finished_date = None
        self.status = status

    def update_with_validation(
        self,
        *,
        title: str | None = None,
        category: str | None = _UNSET,
        project: str | None = _UNSET,
        notes: str | None = _UNSET,
        tags: Iterable[str] | None = None,
    ) -> None:
        """Validate every provided field, then assign them together.

        Optional text fields that are blank after trimming are cleared. Pass
        ``None`` explicitly to clear a field; omit the argument to keep it.
        """
        updates: dict[str, Any] = {}
        if title is not None:
            updates["title"] = validate_title(title)
        if category is not _UNSET:
            updates["category"] = _clean_optional(category, validate_category)
        if project is not _UNSET:
            updates["project"] = _clean_optional(project, validate_project)
        if notes is not _UNSET:
            updates["notes"] = _clean_optional(notes, validate_notes)
        if tags is not None:
            normalized: list[str] = []
            for tag in tags:
                insert_tag(normalized, _validated_tag(tag))
            updates["tags"] = normalized
        for name, value in updates.items():
            setattr(self, name, value)

    def apply_tag_delta(self, delta: str) -> None:
        """Apply a ``+tag,-tag`` delta token by token; unprefixed tokens are ignored."""
        tokens = [token.strip() for token in delta.split(",")]
        for token in tokens:
            if token.startswith("+"):
                _validated_tag(token[1:])
        for token in tokens:
            if token.startswith("+"):
                insert_tag(self.tags, _validated_tag(token[1:]))
            elif token.startswith("-"):
                removed = normalize_tag(token[1:])
                self.tags = [tag for tag in self.tags if tag != removed]
            elif token:
                logger.debug("Ignoring tag token without +/- prefix: %s", token)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "priority": self.priority.value,
            "status": self.status.value,
            "tags": list(self.tags),
            "category": self.category,
            "project": self.project,
            "created_date": self.created_date.isoformat(),
            "finished_date": (
                self.finished_date.isoformat() if self.finished_date else None
            ),
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> Todo:
        finished = record.get("finished_date")
        return cls(
            id=int(record["id"]),
            title=str(record["title"]),
            priority=Priority(record.get("priority") or Priority.P2),
            status=Status(record.get("status") or Status.TODO),
            tags=[str(tag) for tag in record.get("tags") or []],
            category=record.get("category"),
            project=record.get("project"),
            created_date=_coerce_datetime(record["created_date"]),
            finished_date=_coerce_datetime(finished) if finished else None,
            notes=record.get("notes"),
        )


def _coerce_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


@dataclass(frozen=True)
class TodoStats:
    total: int
    by_status: dict[Status, int]
    by_priority: dict[Priority, int]
    by_category: dict[str, int]


@dataclass
class TodoList:
    next_id: int = 1
    todos: list[Todo] = field(default_factory=list)

    def create_todo(self, title: str) -> Todo:
        """Allocate the next id for a new task; the caller adds it with add_todo."""
        todo = Todo.new_validated(title)
        todo.id = self.next_id
        self.next_id += 1
        return todo

    def add_todo(self, todo: Todo) -> None:
        self.todos.append(todo)

    def get_todo(self, todo_id: int) -> Todo | None:
        for todo in self.todos:
            if todo.id == todo_id:
                return todo
        return None

    def require_todo(self, todo_id: int) -> Todo:
        todo = self.get_todo(todo_id)
        if todo is None:
            raise NotFoundError(f"TODO with ID {todo_id} not found", {"id": todo_id})
        return todo

    def delete_todo(self, todo_id: int) -> Todo:
        todo = self.require_todo(todo_id)
        self.todos.remove(todo)
        return todo

    def delete_by_category(self, category: str) -> int:
        kept = [todo for todo in self.todos if todo.category != category]
        removed = len(self.todos) - len(kept)
        self.todos = kept
        return removed

    def delete_by_status(self, status: str) -> int:
        parsed = parse_status(status)
        kept = [todo for todo in self.todos if todo.status is not parsed]
        removed = len(self.todos) - len(kept)
        self.todos = kept
        return removed

    def update_todo(
        self,
        todo_id: int,
        *,
        status: str | None = None,
        priority: str | None = None,
        tags: str | None = None,
        category: str | None = None,
        project: str | None = None,
        notes: str | None = None,
    ) -> Todo:
        """Apply a partial update; nothing changes unless every argument is valid."""
        todo = self.require_todo(todo_id)
        new_status = parse_status(status) if status is not None else None
        new_priority = parse_priority(priority) if priority is not None else None

        # Validate on a scratch copy so a late failure leaves the task untouched.
        draft = replace(todo, tags=list(todo.tags))
        changes: dict[str, Any] = {}
        if category is not None:
            changes["category"] = category
        if project is not None:
            changes["project"] = project
        if notes is not None:
            changes["notes"] = notes
        draft.update_with_validation(**changes)
        if tags is not None:
            draft.apply_tag_delta(tags)

        if new_status is not None:
            draft.set_status(new_status)
        if new_priority is not None:
            draft.priority = new_priority
        for item in fields(Todo):
            setattr(todo, item.name, getattr(draft, item.name))
        return todo

    def filter_todos(
        self,
        *,
        status: str | None = None,
        category: str | None = None,
        priority: str | None = None,
        tags: str | None = None,
        include_archived: bool = False,
    ) -> list[Todo]:
        """Field-equality filter; unparsable status/priority clauses are ignored."""
        status_filter = _parse_or_ignore(parse_status, status)
        priority_filter = _parse_or_ignore(parse_priority, priority)
        required_tags = (
            [tag.strip() for tag in tags.split(",") if tag.strip()] if tags else []
        )

        filtered: list[Todo] = []
        for todo in self.todos:
            if not include_archived and todo.status is Status.ARCHIVED:
                continue
            if status_filter is not None and todo.status is not status_filter:
                continue
            if category is not None and todo.category != category:
                continue
            if priority_filter is not None and todo.priority is not priority_filter:
                continue
            if any(tag not in todo.tags for tag in required_tags):
                continue
            filtered.append(todo)
        return filtered

    def show_stats(self) -> TodoStats:
        by_status: dict[Status, int] = {}
        by_priority: dict[Priority, int] = {}
        by_category: dict[str, int] = {}
        for todo in self.todos:
            by_status[todo.status] = by_status.get(todo.status, 0) + 1
            by_priority[todo.priority] = by_priority.get(todo.priority, 0) + 1
            if todo.category is not None:
                by_category[todo.category] = by_category.get(todo.category, 0) + 1
        return TodoStats(
            total=len(self.todos),
            by_status=by_status,
            by_priority=by_priority,
            by_category=by_category,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"next_id": self.next_id, "todos": [todo.to_dict() for todo in self.todos]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TodoList:
        records = data.get("todos") or []
        if not isinstance(records, list):
            raise TypeError("'todos' must be a list")
        for record in records:
            if not isinstance(record, dict):
                raise TypeError(f"TODO record must be a mapping, got {record!r}")
        return cls(
            next_id=int(data["next_id"]),
            todos=[Todo.from_dict(record) for record in records],
        )


def _parse_or_ignore(parser, raw: str | None):
    if raw is None:
        return None
    try:
        return parser(raw)
    except InvalidValueError:
        logger.debug("Ignoring unparsable filter value: %s", raw)
        return None
