from guidebook_todo.storage import load_todos, save_todos
from guidebook_todo.todo import Priority, Status, TodoList
from guidebook_todo.todo_form import TodoForm, TodoFormData, edit_todo_form, new_todo_form


def _type(form, text):
    for char in text:
        form.handle_key(char)


def _recording_form():
    saved = []
    return TodoForm(saved.append), saved


def test_form_starts_on_title_with_defaults():
    form, _ = _recording_form()

    assert form.focused_field is form.title
    assert form.priority.value is Priority.P2
    assert form.status.value is Status.TODO
    assert [field.label for field in form.fields] == [
        "Title",
        "Priority",
        "Status",
        "Category",
        "Project",
        "Tags (comma-separated)",
        "Notes",
    ]


def test_tab_navigation_is_cyclic():
    form, _ = _recording_form()

    form.handle_key("s-tab")
    assert form.focused_field is form.notes
    assert form.notes.focused and not form.title.focused

    form.handle_key("tab")
    form.handle_key("tab")
    assert form.focused_field is form.priority


def test_enter_on_title_saves_valid_form():
    form, saved = _recording_form()
    _type(form, "Write docs")
    form.handle_key("tab")
    form.handle_key("up")
    form.handle_key("tab")
    form.handle_key("tab")
    _type(form, "work")
    form.handle_key("tab")
    form.handle_key("tab")
    _type(form, "Docs, urgent")
    form.handle_key("s-tab")
    form.handle_key("s-tab")
    form.handle_key("s-tab")
    form.handle_key("s-tab")
    form.handle_key("s-tab")

    assert form.handle_key("enter") is True
    assert saved == [
        TodoFormData(
            title="Write docs",
            priority=Priority.P1,
            status=Status.TODO,
            category="work",
            project=None,
            tags=["docs", "urgent"],
            notes=None,
        )
    ]


def test_explicit_save_with_invalid_data_keeps_form_open():
    form, saved = _recording_form()

    assert form.handle_key("c-s") is False
    assert form.error == "Title cannot be empty"
    assert saved == []

    _type(form, "Fixed")
    assert form.handle_key("c-s") is True
    assert form.error is None


def test_enter_outside_title_edits_the_field():
    form, saved = _recording_form()
    _type(form, "Title")
    for _ in range(6):
        form.handle_key("tab")
    _type(form, "a")
    form.handle_key("enter")
    _type(form, "b")

    assert saved == []
    assert form.notes.value == "a\nb"


def test_exit_key_closes_even_when_save_fails():
    form, saved = _recording_form()

    assert form.handle_key("escape") is True
    assert saved == []
    assert form.error == "Title cannot be empty"


def test_exit_key_auto_saves_valid_form():
    form, saved = _recording_form()
    _type(form, "Keep me")

    assert form.handle_key("c-x") is True
    assert saved[0].title == "Keep me"


def test_new_todo_form_persists_task(tmp_path):
    path = tmp_path / "todo.yaml"
    form = new_todo_form(path, "Prefilled")
    form.handle_key("tab")
    form.handle_key("tab")
    form.handle_key("down")
    form.handle_key("down")

    assert form.handle_key("c-s") is True
    todo = load_todos(path).get_todo(1)
    assert todo.title == "Prefilled"
    assert todo.status is Status.DONE
    assert todo.finished_date is not None
    assert load_todos(path).next_id == 2


def test_edit_form_loads_and_archives(tmp_path):
    path = tmp_path / "todo.yaml"
    todo_list = TodoList()
    todo = todo_list.create_todo("Existing")
    todo.update_with_validation(category="home", tags=["a", "b"], notes="note")
    todo_list.add_todo(todo)
    save_todos(todo_list, path)

    form = edit_todo_form(path, 1)
    assert form.heading == "Edit TODO #1"
    assert form.tags.value == "a, b"
    assert form.category.value == "home"

    form.handle_key("c-r")
    form.handle_key("end")
    _type(form, " item")
    assert form.handle_key("enter") is True

    saved = load_todos(path).get_todo(1)
    assert saved.title == "Existing item"
    assert saved.status is Status.ARCHIVED
    assert saved.tags == ["a", "b"]
    assert saved.notes == "note"


def test_edit_form_replaces_tags(tmp_path):
    path = tmp_path / "todo.yaml"
    todo_list = TodoList()
    todo = todo_list.create_todo("Tagged")
    todo.update_with_validation(tags=["old"])
    todo_list.add_todo(todo)
    save_todos(todo_list, path)

    form = edit_todo_form(path, 1)
    for _ in range(5):
        form.handle_key("tab")
    form.tags.set_value("New Tag")
    assert form.handle_key("c-s") is True

    assert load_todos(path).get_todo(1).tags == ["new_tag"]
