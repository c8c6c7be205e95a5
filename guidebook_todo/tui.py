"""prompt_toolkit front end for the interactive search view and task form."""

from __future__ import annotations

import logging
from pathlib import Path

from prompt_toolkit.application import Application
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension
from prompt_toolkit.styles import Style, merge_styles

from guidebook_todo.constants import REFRESH_INTERVAL_SECONDS
from guidebook_todo.display import STYLE, overview_icon, priority_class, status_class, truncate
from guidebook_todo.errors import TodoError
from guidebook_todo.fields import ChoiceField, TextInput
from guidebook_todo.git_sync import GitStatus
from guidebook_todo.search_view import (
    HELP_TEXT,
    RESULTS_HINT,
    SEARCH_HINT,
    Focus,
    SearchSession,
    SignalKind,
)
from guidebook_todo.todo_form import TodoForm, edit_todo_form, new_todo_form

logger = logging.getLogger(__name__)

TUI_STYLE = merge_styles(
    [
        STYLE,
        Style.from_dict(
            {
                "selected": "bg:#253a5e bold",
                "cursor": "reverse",
                "focused": "#73bed3 bold",
                "muted": "#5a6988",
            }
        ),
    ]
)

_KEY_ALIASES = {
    "c-m": "enter",
    "c-j": "enter",
    "c-i": "tab",
    "c-h": "backspace",
}
_IGNORED_KEYS = {Keys.CPRResponse, Keys.Ignore, Keys.Vt100MouseEvent}
_ESCAPE_TIMEOUT = 0.05


def key_names(event: KeyPressEvent) -> list[str]:
    """Translate a prompt_toolkit key event into the plain key vocabulary."""
    names: list[str] = []
    for key_press in event.key_sequence:
        key = key_press.key
        if key in _IGNORED_KEYS:
            continue
        if key == Keys.BracketedPaste:
            for char in key_press.data:
                names.append("enter" if char in {"\r", "\n"} else char)
        elif isinstance(key, Keys):
            names.append(_KEY_ALIASES.get(key.value, key.value))
        else:
            names.append(key)
    return names


def _application(root, key_bindings: KeyBindings) -> Application:
    app = Application(
        layout=Layout(root),
        key_bindings=key_bindings,
        style=TUI_STYLE,
        full_screen=True,
        refresh_interval=REFRESH_INTERVAL_SECONDS,
    )
    app.ttimeoutlen = _ESCAPE_TIMEOUT
    return app


def _text_line(field: TextInput) -> StyleAndTextTuples:
    if not field.focused:
        return [("", field.value.replace("\n", " ⏎ ") or " ")]
    before = field.value[: field.cursor]
    under = field.value[field.cursor : field.cursor + 1]
    after = field.value[field.cursor + 1 :]
    if under == "\n":
        return [("", before), ("class:cursor", " "), ("", "\n" + after)]
    return [("", before), ("[SetCursorPosition]", ""), ("class:cursor", under or " "), ("", after)]


def _choice_lines(field: ChoiceField) -> StyleAndTextTuples:
    if not field.focused:
        return [("", field.options[field.selected][0])]
    fragments: StyleAndTextTuples = []
    for index, (label, _) in enumerate(field.options):
        marker = "▸ " if index == field.selected else "  "
        style = "class:selected" if index == field.selected else ""
        fragments.append((style, f"{marker}{label}\n"))
    return fragments


def render_form(form: TodoForm) -> StyleAndTextTuples:
    fragments: StyleAndTextTuples = [("class:heading", f"{form.heading}\n\n")]
    for field in form.fields:
        label_style = "class:focused" if field.focused else "class:label"
        fragments.append((label_style, f"{field.label}\n"))
        if isinstance(field, ChoiceField):
            fragments += _choice_lines(field)
        else:
            fragments += _text_line(field)
        fragments.append(("", "\n\n"))
    if form.error:
        fragments.append(("class:error", f"Error: {form.error}\n"))
    hints = "Tab/Shift-Tab Move • ⌃S Save • ⌃X/Esc Save & Exit"
    if form.allow_archive:
        hints += " • ⌃R Archive"
    fragments.append(("class:muted", hints))
    return fragments


def run_form(form: TodoForm) -> None:
    key_bindings = KeyBindings()

    @key_bindings.add(Keys.Any, eager=True)
    def _(event: KeyPressEvent) -> None:
        for name in key_names(event):
            if form.handle_key(name):
                event.app.exit()
                return

    root = Window(FormattedTextControl(lambda: render_form(form), show_cursor=False))
    _application(root, key_bindings).run()


def run_add(path: Path, title: str | None = None) -> None:
    run_form(new_todo_form(path, title))


def run_edit(path: Path, todo_id: int) -> None:
    run_form(edit_todo_form(path, todo_id))


def _header(git_status: GitStatus | None) -> StyleAndTextTuples:
    if git_status is None:
        return [("class:muted", "data dir: unknown • git status: unavailable")]
    return [
        (
            "class:muted",
            f"data dir: {git_status.pretty_path} • git status: {git_status.status_message}",
        )
    ]


def _search_line(session: SearchSession) -> StyleAndTextTuples:
    view = session.view
    label_style = "class:focused" if view.focus is Focus.SEARCH else "class:label"
    return [(label_style, "Search: ")] + _text_line(view.search)


def render_results(session: SearchSession) -> StyleAndTextTuples:
    view = session.view
    fragments: StyleAndTextTuples = [
        ("class:cream", f"{len(view.results)} results found\n")
    ]
    for index, todo in enumerate(view.results):
        selected = view.focus is Focus.RESULTS and index == view.selected_index
        row_style = "class:selected " if selected else ""
        if selected:
            fragments.append(("[SetCursorPosition]", ""))
        fragments += [
            (row_style + "class:dim", f"{todo.id:03} "),
            (row_style + priority_class(todo.priority), f"{todo.priority.value:2} "),
            (row_style + status_class(todo.status), f"{overview_icon(todo)} "),
            (row_style + "class:muted", "│ "),
            (row_style + "class:cream", f"{todo.category or 'general':8} "),
            (row_style + "class:muted", "│ "),
            (row_style + "class:title", f"{truncate(todo.title, 60)}\n"),
        ]
    return fragments


def _footer(session: SearchSession) -> StyleAndTextTuples:
    view = session.view
    fragments: StyleAndTextTuples = []
    if view.status_message:
        fragments.append(("class:error", f"{view.status_message}\n"))
    if view.show_help:
        fragments.append(("class:muted", HELP_TEXT))
    elif view.focus is Focus.SEARCH:
        fragments.append(("class:muted", "● Search focused - ↓ to navigate results\n" + SEARCH_HINT))
    else:
        fragments.append(("class:muted", "● Results focused - ↑ to return to search\n" + RESULTS_HINT))
    return fragments


def _search_application(session: SearchSession) -> Application:
    key_bindings = KeyBindings()

    @key_bindings.add(Keys.Any, eager=True)
    def _(event: KeyPressEvent) -> None:
        for name in key_names(event):
            signal = session.handle_key(name)
            if signal.kind is not SignalKind.CONTINUE:
                event.app.exit(result=signal)
                return

    root = HSplit(
        [
            Window(FormattedTextControl([("class:heading", "Search TODOs")]), height=1),
            Window(FormattedTextControl(lambda: _header(session.git_status)), height=1),
            Window(FormattedTextControl(lambda: _search_line(session)), height=1),
            Window(char="─", height=1, style="class:muted"),
            Window(FormattedTextControl(lambda: render_results(session), show_cursor=False)),
            Window(
                FormattedTextControl(lambda: _footer(session)),
                height=Dimension(min=2, max=4),
                wrap_lines=True,
            ),
        ]
    )
    return _application(root, key_bindings)


def run_search(path: Path, *, query: str = "", git_status: GitStatus | None = None) -> None:
    """Run the search view until exit, suspending it for the add and edit forms."""
    session = SearchSession(path, query=query, git_status=git_status)
    while True:
        signal = _search_application(session).run()
        if signal is None or signal.kind is SignalKind.EXIT:
            return
        if signal.kind is SignalKind.ADD_TODO:
            run_add(path)
            session.reload()
        elif signal.kind is SignalKind.EDIT:
            try:
                run_edit(path, signal.todo_id)
            except TodoError as exc:
                session.report_error("edit TODO", exc)
            session.reload(preserve_id=signal.todo_id)
