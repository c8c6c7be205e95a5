"""Command-line entry point."""

from __future__ import annotations

import argparse
import logging
import sys

from guidebook_todo import commands
from guidebook_todo.config import ConfigError, load_config
from guidebook_todo.errors import TodoError
from guidebook_todo.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="todo",
        description="Personal TODO tracker with an interactive terminal view.",
    )
    subparsers = parser.add_subparsers(dest="command")

    init_parser = subparsers.add_parser("init", help="Initialize the TODO data directory.")
    init_parser.add_argument("--remote", help="Git remote URL to push TODOs to.")

    add_parser = subparsers.add_parser("add", help="Add a new TODO.")
    add_parser.add_argument("title", nargs="?", help="Title of the TODO.")
    add_parser.add_argument(
        "-q", "--quick", action="store_true", help="Skip the form and use defaults."
    )

    list_parser = subparsers.add_parser("list", help="List TODOs.")
    list_parser.add_argument("-s", "--status", help="Filter by status.")
    list_parser.add_argument("-c", "--category", help="Filter by category.")
    list_parser.add_argument("-p", "--priority", help="Filter by priority (p0-p5).")
    list_parser.add_argument("-t", "--tags", help="Require all comma-separated tags.")
    list_parser.add_argument(
        "-a", "--all", action="store_true", help="Include archived TODOs."
    )

    update_parser = subparsers.add_parser("update", help="Update fields of a TODO.")
    update_parser.add_argument("id", type=int)
    update_parser.add_argument("-s", "--status")
    update_parser.add_argument("-p", "--priority")
    update_parser.add_argument("-t", "--tags", help="Tag changes such as '+new,-old'.")
    update_parser.add_argument("-c", "--category", help="Empty string clears it.")
    update_parser.add_argument("--project", help="Empty string clears it.")
    update_parser.add_argument("-n", "--notes", help="Empty string clears them.")

    delete_parser = subparsers.add_parser("delete", help="Delete TODOs.")
    delete_parser.add_argument("id", type=int, nargs="?")
    delete_parser.add_argument("-c", "--category", help="Delete all TODOs in a category.")
    delete_parser.add_argument("-s", "--status", help="Delete all TODOs with a status.")

    search_parser = subparsers.add_parser("search", help="Search TODOs interactively.")
    search_parser.add_argument("query", nargs="?")
    search_parser.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print matches instead of opening the interactive view.",
    )

    edit_parser = subparsers.add_parser("edit", help="Edit a TODO interactively.")
    edit_parser.add_argument("id", type=int)

    show_parser = subparsers.add_parser("show", help="Show TODO details.")
    show_parser.add_argument("id", type=int)

    subparsers.add_parser("stats", help="Show TODO statistics.")

    push_parser = subparsers.add_parser("push", help="Commit and push the TODO data directory.")
    push_parser.add_argument("-m", "--message", help="Commit message.")
    push_parser.add_argument(
        "-f", "--force", action="store_true", help="Push even without changes."
    )

    subparsers.add_parser("code", help="Open the TODO file in the configured editor.")
    return parser


def run_command(args: argparse.Namespace, config) -> None:
    command = args.command
    if command is None:
        commands.overview(config)
    elif command == "init":
        commands.init_storage(config, args.remote)
    elif command == "add":
        commands.add(config, args.title, args.quick)
    elif command == "list":
        commands.list_todos(
            config,
            status=args.status,
            category=args.category,
            priority=args.priority,
            tags=args.tags,
            include_archived=args.all,
        )
    elif command == "update":
        commands.update(
            config,
            args.id,
            status=args.status,
            priority=args.priority,
            tags=args.tags,
            category=args.category,
            project=args.project,
            notes=args.notes,
        )
    elif command == "delete":
        commands.delete(config, args.id, category=args.category, status=args.status)
    elif command == "search":
        commands.search(config, args.query, print_only=args.print_only)
    elif command == "edit":
        commands.edit(config, args.id)
    elif command == "show":
        commands.show(config, args.id)
    elif command == "stats":
        commands.stats(config)
    elif command == "push":
        commands.push(config, message=args.message, force=args.force)
    elif command == "code":
        commands.code(config)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    setup_logging(console_level=config.log_level, log_file=config.log_file)

    try:
        run_command(args, config)
    except TodoError as exc:
        logger.debug("Command %s failed: %s", args.command, exc.error.to_dict())
        print(f"Error: {exc.message}", file=sys.stderr)
        stderr = exc.error.details.get("stderr")
        if stderr:
            print(stderr, file=sys.stderr)
        return 1
    except (KeyboardInterrupt, EOFError):
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
