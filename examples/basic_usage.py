#!/usr/bin/env python3
"""Programmatic journey example.

This drives the task state machine directly, without the web server:

* load the configured task list (built-in, or `TASKLIST_REGISTRY_FILE`)
* replay a sequence of task events against a plain dict session
* print the resulting task list
"""

from __future__ import annotations

import argparse
from typing import Sequence

from task_list_prototype.journey.config import PrototypeSettings
from task_list_prototype.journey.logging import configure_logging
from task_list_prototype.journey.state_machine import TaskSession, TaskStateMachine


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay task events and print the task list.")
    parser.add_argument(
        "--start", default="", help='Comma-separated task keys to start, e.g. "task-1,task-2"'
    )
    parser.add_argument(
        "--complete", default="", help='Comma-separated task keys to complete, e.g. "task-3"'
    )
    return parser.parse_args(argv)


def _keys(value: str) -> list[str]:
    return [k.strip() for k in value.split(",") if k.strip()]


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = PrototypeSettings()
    configure_logging(settings.log_level)

    machine = TaskStateMachine(settings.load_registry())
    session = TaskSession({})

    for key in _keys(args.start):
        machine.mark_started(session, key)
    for key in _keys(args.complete):
        machine.mark_completed(session, key)

    for key, status in machine.get_all_statuses(session).items():
        print(f"{key:<10} {status.label}")
    print(f"Completed {machine.count_completed(session)} of {len(machine.registry)} tasks")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
