"""Route generation from the task registry.

Every task gets the same three roles, bound to its own paths:

- start:    GET  first question page   -> mark started, render
- advance:  POST second question page  -> reopen if completed, else mark started, render
- complete: POST check-answers page    -> mark completed, redirect to the task list

Handlers close over their :class:`TaskDefinition`; nothing is looked up from
ambient state at request time except the session.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from task_list_prototype.journey.registry import TaskDefinition
from task_list_prototype.journey.state_machine import TaskSession, TaskStateMachine, TaskStatus

logger = logging.getLogger(__name__)

Endpoint = Callable[[Request], Response]


def template_for_route(route: str) -> str:
    """Template name for a route path: leading slash stripped, `.html` added."""

    return route.removeprefix("/") + ".html"


def session_for(request: Request) -> TaskSession:
    return TaskSession(request.session)


def render_page(
    templates: Jinja2Templates,
    request: Request,
    route: str,
    context: dict[str, Any] | None = None,
) -> Response:
    return templates.TemplateResponse(request, template_for_route(route), context or {})


def _start_handler(
    task: TaskDefinition, route: str, machine: TaskStateMachine, templates: Jinja2Templates
) -> Endpoint:
    def start(request: Request) -> Response:
        machine.mark_started(session_for(request), task.key)
        return render_page(templates, request, route, {"task": task})

    start.__name__ = f"start_{task.key}"
    return start


def _advance_handler(
    task: TaskDefinition, route: str, machine: TaskStateMachine, templates: Jinja2Templates
) -> Endpoint:
    def advance(request: Request) -> Response:
        session = session_for(request)
        if machine.get_status(session, task.key) is TaskStatus.COMPLETED:
            machine.mark_in_progress(session, task.key)
        else:
            machine.mark_started(session, task.key)
        return render_page(templates, request, route, {"task": task})

    advance.__name__ = f"advance_{task.key}"
    return advance


def _complete_handler(
    task: TaskDefinition, machine: TaskStateMachine, task_list_path: str
) -> Endpoint:
    def complete(request: Request) -> Response:
        machine.mark_completed(session_for(request), task.key)
        return RedirectResponse(url=task_list_path, status_code=302)

    complete.__name__ = f"complete_{task.key}"
    return complete


def build_task_router(
    machine: TaskStateMachine,
    templates: Jinja2Templates,
    *,
    task_list_path: str = "/task-list",
) -> APIRouter:
    """Bind the task list page and the per-task handlers for every registry entry.

    Duplicate routes across tasks are not detected here; routes match in
    registration order, so the first binding shadows later ones. Use
    `validate_registry` at configuration time.
    """

    router = APIRouter(include_in_schema=False)
    registry = machine.registry

    @router.get(task_list_path, response_model=None)
    def task_list(request: Request) -> Response:
        session = session_for(request)
        statuses = machine.get_all_statuses(session)
        return render_page(
            templates,
            request,
            task_list_path,
            {
                "tasks": list(registry),
                "taskStatuses": statuses,
                "completedCount": machine.count_completed(session),
                "totalTasks": len(registry),
            },
        )

    for task in registry:
        first = task.first_entry_route
        if first is not None:
            router.add_api_route(
                first,
                _start_handler(task, first, machine, templates),
                methods=["GET"],
                response_model=None,
            )
        second = task.second_entry_route
        if second is not None:
            router.add_api_route(
                second,
                _advance_handler(task, second, machine, templates),
                methods=["POST"],
                response_model=None,
            )
        router.add_api_route(
            task.completion_route,
            _complete_handler(task, machine, task_list_path),
            methods=["POST"],
            response_model=None,
        )
        logger.debug(
            "Task routes bound",
            extra={"task": task.key, "routes": list(task.routes())},
        )

    return router
