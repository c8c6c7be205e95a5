"""Resolution of the task file and data directory locations."""

from __future__ import annotations

from pathlib import Path

from guidebook_todo.constants import DATA_FILENAME, DATA_SUBDIR, LOCAL_TODO_FILENAMES


def find_local_todo_file(cwd: Path | None = None) -> Path | None:
    """Return the first project-local task file in ``cwd``, if any."""
    base = cwd or Path.cwd()
    for name in LOCAL_TODO_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def data_todo_path(data_dir: Path) -> Path:
    return data_dir / DATA_SUBDIR / DATA_FILENAME


def resolve_todo_path(data_dir: Path, cwd: Path | None = None) -> Path:
    """Prefer a project-local task file, otherwise the one under ``data_dir``."""
    local = find_local_todo_file(cwd)
    if local is not None:
        return local
    return data_todo_path(data_dir)


def pretty_path(path: Path) -> str:
    """Render ``path`` with the home directory shortened to ``~``."""
    try:
        relative = path.relative_to(Path.home())
    except ValueError:
        return str(path)
    return str(Path("~") / relative)
