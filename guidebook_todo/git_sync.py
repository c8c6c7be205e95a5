"""Git helpers for the task data directory."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from dulwich import porcelain
from dulwich.repo import Repo

from guidebook_todo.constants import DATE_FORMAT
from guidebook_todo.errors import ExternalToolError, NotInitializedError
from guidebook_todo.paths import pretty_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitStatus:
    has_changes: bool
    pretty_path: str
    status_message: str


@dataclass(frozen=True)
class PushResult:
    pushed: bool
    commit_message: str | None = None
    commit_sha: str | None = None
    branch: str | None = None
    upstream_set: bool = False


def _decode(value: str | bytes) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _changed_paths(repo: Repo) -> list[str]:
    status = porcelain.status(repo, untracked_files="all")
    paths: set[str] = set()
    for group in status.staged.values():
        paths.update(_decode(path) for path in group)
    paths.update(_decode(path) for path in status.unstaged)
    paths.update(_decode(path) for path in status.untracked)
    return sorted(paths)


def get_git_status(data_dir: Path) -> GitStatus:
    """Summarize the working tree state of ``data_dir`` for display."""
    display_path = pretty_path(data_dir)
    if not (data_dir / ".git").exists():
        return GitStatus(False, display_path, "not a git repository")
    try:
        with Repo(str(data_dir)) as repo:
            changed = _changed_paths(repo)
    except Exception:
        logger.debug("Git status failed for %s", data_dir, exc_info=True)
        return GitStatus(False, display_path, "git error")
    if changed:
        return GitStatus(True, display_path, "modified")
    return GitStatus(False, display_path, "up to date")


def ensure_git_repo(data_dir: Path) -> Repo:
    git_dir = data_dir / ".git"
    try:
        if git_dir.exists():
            return Repo(str(data_dir))
        return porcelain.init(str(data_dir))
    except Exception as exc:
        raise ExternalToolError(
            "Git repository could not be initialized.",
            {"path": str(data_dir), "stderr": str(exc)},
        ) from exc


def add_remote(repo: Repo, name: str, url: str) -> None:
    try:
        porcelain.remote_add(repo, name, url)
    except Exception as exc:
        raise ExternalToolError(
            f"Failed to add remote '{name}'", {"url": url, "stderr": str(exc)}
        ) from exc


def _commit_all(repo: Repo, paths: list[str], message: str) -> str:
    repo.get_worktree().stage(paths)
    commit_sha = porcelain.commit(repo, message=message)
    if isinstance(commit_sha, bytes):
        return commit_sha.decode("ascii")
    return str(commit_sha)


def _active_branch(repo: Repo) -> str:
    try:
        return _decode(porcelain.active_branch(repo))
    except Exception as exc:
        raise ExternalToolError(
            "Could not determine the current branch", {"stderr": str(exc)}
        ) from exc


def _upstream_remote(repo: Repo, branch: str) -> str | None:
    config = repo.get_config()
    try:
        return _decode(config.get((b"branch", branch.encode()), b"remote"))
    except KeyError:
        return None


def _set_upstream(repo: Repo, remote: str, branch: str) -> None:
    config = repo.get_config()
    section = (b"branch", branch.encode())
    config.set(section, b"remote", remote.encode())
    config.set(section, b"merge", f"refs/heads/{branch}".encode())
    config.write_to_path()


def _push(repo: Repo, remote: str, branch: str) -> None:
    outstream = io.BytesIO()
    errstream = io.BytesIO()
    try:
        porcelain.push(
            repo,
            remote,
            refspecs=[f"refs/heads/{branch}".encode()],
            outstream=outstream,
            errstream=errstream,
        )
    except Exception as exc:
        stderr = errstream.getvalue().decode("utf-8", errors="replace").strip()
        raise ExternalToolError(
            f"Failed to push to {remote}/{branch}",
            {"remote": remote, "branch": branch, "stderr": stderr or str(exc)},
        ) from exc


def push_changes(
    data_dir: Path,
    *,
    message: str | None = None,
    force: bool = False,
    remote: str = "origin",
    branch: str | None = None,
    now: datetime | None = None,
) -> PushResult:
    """Commit any pending changes in ``data_dir`` and push them to ``remote``.

    Without changes nothing happens unless ``force`` is set. A branch without
    a configured upstream is pushed by explicit refspec and the upstream is
    recorded afterwards.
    """
    if not data_dir.exists():
        raise NotInitializedError(
            "TODO directory not found. Run 'todo init' first.",
            {"path": str(data_dir)},
        )
    if not (data_dir / ".git").exists():
        raise NotInitializedError(
            "TODO directory is not a git repository. Run 'todo init' first.",
            {"path": str(data_dir)},
        )

    with Repo(str(data_dir)) as repo:
        changed = _changed_paths(repo)
        if not changed and not force:
            return PushResult(pushed=False)

        commit_message = None
        commit_sha = None
        if changed:
            commit_message = message or (
                f"Update TODOs - {(now or datetime.now()).strftime(DATE_FORMAT)}"
            )
            try:
                commit_sha = _commit_all(repo, changed, commit_message)
            except Exception as exc:
                raise ExternalToolError(
                    "Git commit failed", {"path": str(data_dir), "stderr": str(exc)}
                ) from exc
            logger.info("Committed %d path(s): %s", len(changed), commit_message)

        branch_name = branch or _active_branch(repo)
        upstream_set = False
        if _upstream_remote(repo, branch_name) is None:
            logger.info("Setting up upstream branch %s/%s", remote, branch_name)
            _push(repo, remote, branch_name)
            _set_upstream(repo, remote, branch_name)
            upstream_set = True
        else:
            _push(repo, remote, branch_name)

    return PushResult(
        pushed=True,
        commit_message=commit_message,
        commit_sha=commit_sha,
        branch=branch_name,
        upstream_set=upstream_set,
    )
