"""Test configuration and fixtures."""

import logging
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from task_list_prototype.journey.registry import TaskDefinition, TaskRegistry, default_registry
from task_list_prototype.journey.state_machine import TaskSession, TaskStateMachine
from task_list_prototype.server.app import create_app


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of the settings under test."""
    for name in (
        "LOG_LEVEL",
        "TASKLIST_REGISTRY_FILE",
        "TASKLIST_SESSION_SECRET",
        "TASKLIST_SESSION_COOKIE",
        "TASKLIST_SESSION_MAX_AGE",
        "TASKLIST_TASK_LIST_PATH",
        "TASKLIST_TEMPLATES_DIR",
        "TASKLIST_HOST",
        "TASKLIST_PORT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """Undo `configure_logging` side effects on the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def registry() -> TaskRegistry:
    """Provide a small registry covering dependencies and multi-page tasks."""
    return TaskRegistry(
        [
            TaskDefinition(
                key="task-3",
                entry_routes=("/task-3",),
                completion_route="/check-answers-task-3",
            ),
            TaskDefinition(
                key="task-4",
                entry_routes=("/task-4",),
                completion_route="/check-answers-task-4",
                depends_on=frozenset({"task-3"}),
            ),
            TaskDefinition(
                key="task-6",
                entry_routes=("/task-6", "/task-6-question-2"),
                completion_route="/check-answers-task-6",
            ),
            TaskDefinition(
                key="task-7",
                entry_routes=("/task-7",),
                completion_route="/check-answers-task-7",
            ),
            TaskDefinition(
                key="task-8",
                entry_routes=("/task-8",),
                completion_route="/check-answers-task-8",
                depends_on=frozenset({"task-6", "task-7"}),
            ),
        ]
    )


@pytest.fixture
def machine(registry: TaskRegistry) -> TaskStateMachine:
    """Provide a state machine over the test registry."""
    return TaskStateMachine(registry)


@pytest.fixture
def session() -> TaskSession:
    """Provide an empty session."""
    return TaskSession({})


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Provide a test client over the built-in journey."""
    with TestClient(create_app(default_registry())) as test_client:
        yield test_client
