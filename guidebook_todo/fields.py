"""Editable field models used by the interactive search box and task form.

Keys are plain strings: a single printable character for text input, or a
named key such as ``left``, ``home``, ``backspace``, ``enter`` or ``c-a``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class TextInput:
    """Single-line text with a cursor."""

    label: str
    value: str = ""
    cursor: int = 0
    focused: bool = False

    def __post_init__(self) -> None:
        self.cursor = len(self.value)

    def set_value(self, value: str) -> None:
        self.value = value
        self.cursor = len(value)

    def insert(self, text: str) -> None:
        self.value = self.value[: self.cursor] + text + self.value[self.cursor :]
        self.cursor += len(text)

    def handle_key(self, key: str) -> bool:
        """Apply ``key``; return True when the key was consumed."""
        if len(key) == 1 and key.isprintable():
            self.insert(key)
        elif key == "backspace":
            if self.cursor > 0:
                self.value = self.value[: self.cursor - 1] + self.value[self.cursor :]
                self.cursor -= 1
        elif key == "delete":
            self.value = self.value[: self.cursor] + self.value[self.cursor + 1 :]
        elif key == "left":
            self.cursor = max(self.cursor - 1, 0)
        elif key == "right":
            self.cursor = min(self.cursor + 1, len(self.value))
        elif key in {"home", "c-a"}:
            self.cursor = 0
        elif key in {"end", "c-e"}:
            self.cursor = len(self.value)
        else:
            return False
        return True


@dataclass
class TextArea(TextInput):
    """Multi-line text; Enter inserts a newline."""

    def handle_key(self, key: str) -> bool:
        if key == "enter":
            self.insert("\n")
            return True
        return super().handle_key(key)


@dataclass
class ChoiceField(Generic[T]):
    """Single choice from a fixed list of ``(label, value)`` options."""

    label: str
    options: list[tuple[str, T]]
    selected: int = 0
    focused: bool = False

    @property
    def value(self) -> T:
        return self.options[self.selected][1]

    def select_value(self, value: T) -> None:
        for index, (_, option) in enumerate(self.options):
            if option == value:
                self.selected = index
                return
        raise ValueError(f"{value!r} is not an option of {self.label}")

    def handle_key(self, key: str) -> bool:
        if key == "up":
            self.selected = max(self.selected - 1, 0)
        elif key == "down":
            self.selected = min(self.selected + 1, len(self.options) - 1)
        else:
            return False
        return True
