"""FastAPI server adapter for task-list-prototype.

Design intent:
- Keep task status logic in `task_list_prototype.journey.*`
- Keep server-specific concerns (sessions, templates, routing) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from task_list_prototype.server.app import create_app
