"""Task List Prototype.

A multi-task form journey:
- a declarative task registry with dependencies between tasks
- session-backed task status (not started, in progress, completed, cannot start yet)
- HTTP routes generated from the registry
"""

__version__ = "0.1.0"

from task_list_prototype.journey.config import PrototypeSettings

__all__ = ["__version__", "PrototypeSettings"]
