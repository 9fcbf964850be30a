"""CLI entrypoint for the task list prototype."""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from task_list_prototype import __version__
from task_list_prototype.journey.config import PrototypeSettings
from task_list_prototype.journey.logging import configure_logging
from task_list_prototype.journey.registry import RegistryError, TaskRegistry
from task_list_prototype.server.config import ServerSettings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="task-list-prototype",
        description="Multi-task form journey prototype",
    )
    parser.add_argument(
        "--version", action="version", version=f"task-list-prototype {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the prototype web server")
    serve.add_argument("--host", default=None, help="Bind address (default: TASKLIST_HOST)")
    serve.add_argument(
        "--port", type=int, default=None, help="Bind port (default: TASKLIST_PORT)"
    )
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    subparsers.add_parser("tasks", help="Validate and print the configured task list")

    return parser


def format_registry(registry: TaskRegistry) -> list[str]:
    lines: list[str] = []
    for task in registry:
        entry = ", ".join(task.entry_routes) or "-"
        deps = ", ".join(sorted(task.depends_on)) or "-"
        lines.append(
            f"{task.key}\t{task.display_title}\tentry: {entry}\t"
            f"complete: {task.completion_route}\tdepends on: {deps}"
        )
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = PrototypeSettings()
        server_settings = ServerSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        registry = settings.load_registry()
    except RegistryError as e:
        print(f"Task list error: {e}", file=sys.stderr)
        return 2

    if args.command == "tasks":
        for line in format_registry(registry):
            print(line)
        print(f"{len(registry)} tasks")
        return 0

    if args.command == "serve":
        import uvicorn

        host = args.host or server_settings.host
        port = args.port or server_settings.port
        logger.info("Starting server", extra={"host": host, "port": port})
        uvicorn.run(
            "task_list_prototype.server.app:serve_app",
            factory=True,
            host=host,
            port=port,
            reload=args.reload,
            log_config=None,
        )
        return 0

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
