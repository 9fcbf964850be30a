from __future__ import annotations

import logging
from collections.abc import MutableMapping
from enum import Enum
from typing import Any

from .registry import TaskRegistry

logger = logging.getLogger(__name__)

SESSION_DATA_KEY = "data"
COMPLETED_TASKS_KEY = "completedTasks"
STARTED_SUFFIX = "_started"


class TaskStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANNOT_START_YET = "cannot-start-yet"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.NOT_STARTED: "Not yet started",
    TaskStatus.IN_PROGRESS: "In progress",
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.CANNOT_START_YET: "Cannot start yet",
}


class TaskSession:
    """Task state held in one user's session.

    Wraps the host's session mapping (e.g. Starlette's `request.session`).
    Everything lives under the `data` field so other session users are left
    alone:

    - `<key>_started`: bool flag, set once a task has been entered
    - `completedTasks`: ordered list of completed keys, no duplicates

    Missing fields read as empty; nothing here raises on absent data.
    """

    def __init__(self, store: MutableMapping[str, Any]) -> None:
        self._store = store

    def _peek(self) -> dict[str, Any]:
        data = self._store.get(SESSION_DATA_KEY)
        return data if isinstance(data, dict) else {}

    def _write(self, field: str, value: Any) -> None:
        # Host sessions only track top-level assignment; replace `data`, never
        # edit it in place.
        data = dict(self._peek())
        data[field] = value
        self._store[SESSION_DATA_KEY] = data

    @property
    def completed_tasks(self) -> list[str]:
        raw = self._peek().get(COMPLETED_TASKS_KEY)
        if not isinstance(raw, list):
            return []
        return [k for k in raw if isinstance(k, str)]

    def is_completed(self, key: str) -> bool:
        return key in self.completed_tasks

    def is_started(self, key: str) -> bool:
        return self._peek().get(key + STARTED_SUFFIX) is True

    def set_started(self, key: str) -> None:
        self._write(key + STARTED_SUFFIX, True)

    def add_completed(self, key: str) -> None:
        completed = self.completed_tasks
        if key in completed:
            return
        self._write(COMPLETED_TASKS_KEY, [*completed, key])

    def remove_completed(self, key: str) -> None:
        completed = self.completed_tasks
        if key not in completed:
            return
        self._write(COMPLETED_TASKS_KEY, [k for k in completed if k != key])

    def clear(self) -> None:
        self._store.pop(SESSION_DATA_KEY, None)


class TaskStateMachine:
    """Derive and mutate task status for a session.

    Status is never stored: every read recomputes it from the registry and the
    session flags. `cannot-start-yet` is an overlay on top of the stored flags,
    so it lifts as soon as the dependencies are completed.
    """

    def __init__(self, registry: TaskRegistry) -> None:
        self.registry = registry

    def get_status(self, session: TaskSession, task_key: str) -> TaskStatus:
        task = self.registry.get(task_key)
        if task is None:
            logger.debug("Status requested for unknown task", extra={"task": task_key})
        elif task.depends_on:
            completed = set(session.completed_tasks)
            if not task.depends_on.issubset(completed):
                return TaskStatus.CANNOT_START_YET

        if session.is_completed(task_key):
            return TaskStatus.COMPLETED
        if session.is_started(task_key):
            return TaskStatus.IN_PROGRESS
        return TaskStatus.NOT_STARTED

    def mark_started(self, session: TaskSession, task_key: str) -> None:
        session.set_started(task_key)
        logger.debug("Task started", extra={"task": task_key})

    def mark_completed(self, session: TaskSession, task_key: str) -> None:
        session.add_completed(task_key)
        logger.debug("Task completed", extra={"task": task_key})

    def mark_in_progress(self, session: TaskSession, task_key: str) -> None:
        """Reopen a task whose answers are being revised."""

        session.remove_completed(task_key)
        session.set_started(task_key)
        logger.debug("Task reopened", extra={"task": task_key})

    def get_all_statuses(self, session: TaskSession) -> dict[str, TaskStatus]:
        return {task.key: self.get_status(session, task.key) for task in self.registry}

    def count_completed(self, session: TaskSession) -> int:
        statuses = self.get_all_statuses(session)
        return sum(1 for status in statuses.values() if status is TaskStatus.COMPLETED)

    def reset(self, session: TaskSession) -> None:
        session.clear()
        logger.debug("Session task data cleared")
