"""Shared constants for task storage and display."""

from __future__ import annotations

TITLE_MAX_LENGTH = 200
CATEGORY_MAX_LENGTH = 50
PROJECT_MAX_LENGTH = 100
NOTES_MAX_LENGTH = 2000
TAG_MAX_LENGTH = 30

LOCAL_TODO_FILENAMES = ["TODO.yaml", "TODO.yml", "todo.yaml", "todo.yml"]
DATA_SUBDIR = "guidebook-todo"
DATA_FILENAME = "todo.yaml"
DEFAULT_DATA_DIR = "~/.local/share/guidebook"
EMPTY_TODO_FILE = "next_id: 1\ntodos: []\n"

DATE_FORMAT = "%Y-%m-%d %H:%M"
DETAIL_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Done tasks stay visible in interactive search for this long after completion.
DONE_GRACE_SECONDS = 3.0
REFRESH_INTERVAL_SECONDS = 0.1

PRIORITY_LABELS = {
    "P0": "Urgent",
    "P1": "Must have",
    "P2": "Should do",
    "P3": "Nice to have",
    "P4": "Wishlist",
    "P5": "Worth considering",
}
