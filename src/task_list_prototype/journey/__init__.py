"""Task journey domain: the registry, the status state machine and settings.

Nothing here knows about HTTP. The server package binds these to routes.
"""

from task_list_prototype.journey.registry import (
    RegistryError,
    TaskDefinition,
    TaskRegistry,
    default_registry,
    load_registry,
    validate_registry,
)
from task_list_prototype.journey.state_machine import TaskSession, TaskStateMachine, TaskStatus

__all__ = [
    "RegistryError",
    "TaskDefinition",
    "TaskRegistry",
    "TaskSession",
    "TaskStateMachine",
    "TaskStatus",
    "default_registry",
    "load_registry",
    "validate_registry",
]
