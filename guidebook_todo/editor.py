"""Launch an external editor on the task file."""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from guidebook_todo.errors import ExternalToolError

logger = logging.getLogger(__name__)


def open_in_editor(path: Path, editor: str) -> None:
    command = [*shlex.split(editor), str(path)]
    logger.debug("Running %s", command)
    try:
        result = subprocess.run(command, capture_output=True, text=True)
    except OSError as exc:
        raise ExternalToolError(
            f"Failed to execute '{command[0]}'. Is it installed and on PATH?",
            {"command": command, "stderr": str(exc)},
        ) from exc
    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise ExternalToolError(
            f"Failed to open file in editor (exit code {result.returncode})",
            {"command": command, "stderr": stderr, "returncode": result.returncode},
        )
