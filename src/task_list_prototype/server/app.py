"""FastAPI app factory.

Task state transitions live in `task_list_prototype.journey.*`; this module
only wires sessions, templates and the generated task routes together.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from task_list_prototype import __version__
from task_list_prototype.journey.config import PrototypeSettings
from task_list_prototype.journey.logging import configure_logging
from task_list_prototype.journey.registry import RegistryError, TaskRegistry, validate_registry
from task_list_prototype.journey.state_machine import TaskStateMachine
from task_list_prototype.server.config import ServerSettings
from task_list_prototype.server.models import ApiTask, ApiTaskList
from task_list_prototype.server.task_router import (
    build_task_router,
    render_page,
    session_for,
    template_for_route,
)

logger = logging.getLogger(__name__)


def check_templates(registry: TaskRegistry, templates_dir: Path, task_list_path: str) -> None:
    """Fail fast when a page the generated routes render has no template.

    Completion routes only redirect, so they need no template of their own.

    Raises:
        RegistryError: naming every missing template.
    """

    routes = [task_list_path]
    for task in registry:
        routes.extend(task.entry_routes)
    missing = [
        template_for_route(route)
        for route in routes
        if not (templates_dir / template_for_route(route)).is_file()
    ]
    if missing:
        raise RegistryError(f"Missing templates in {templates_dir}: " + ", ".join(missing))


def create_app(registry: TaskRegistry | None = None) -> FastAPI:
    settings = ServerSettings()
    if registry is None:
        registry = PrototypeSettings().load_registry()
    else:
        validate_registry(registry)
    check_templates(registry, settings.templates_dir, settings.task_list_path)

    app = FastAPI(
        title="Task List Prototype",
        version=__version__,
        description="Multi-task form journey with session-backed task status.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url=None,
    )

    # Expose settings and the state machine for request handlers that want them.
    app.state.settings = settings
    machine = TaskStateMachine(registry)
    app.state.machine = machine

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
    )

    templates = Jinja2Templates(directory=settings.templates_dir)
    task_list_path = settings.task_list_path

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/tasks", response_model=ApiTaskList)
    def list_tasks(request: Request) -> ApiTaskList:
        session = session_for(request)
        statuses = machine.get_all_statuses(session)
        return ApiTaskList(
            tasks=[
                ApiTask(
                    key=task.key,
                    title=task.display_title,
                    status=statuses[task.key],
                    depends_on=sorted(task.depends_on),
                )
                for task in registry
            ],
            completed_count=machine.count_completed(session),
            total_tasks=len(registry),
        )

    @app.get("/", include_in_schema=False, response_model=None)
    def index(request: Request) -> Response:
        return render_page(templates, request, "/index", {"taskListPath": task_list_path})

    @app.get("/clear-data", include_in_schema=False, response_model=None)
    def clear_data(request: Request) -> Response:
        machine.reset(session_for(request))
        return RedirectResponse(url=task_list_path, status_code=302)

    app.include_router(build_task_router(machine, templates, task_list_path=task_list_path))

    @app.get("/{page}", include_in_schema=False, response_model=None)
    def page_fallback(request: Request, page: str) -> Response:
        # Plain content pages (check answers, guidance). Partials start with "_".
        route = "/" + page
        candidate = settings.templates_dir / template_for_route(route)
        if page.startswith("_") or not candidate.is_file():
            raise HTTPException(status_code=404, detail="Not Found")
        return render_page(templates, request, route, {"taskListPath": task_list_path})

    logger.info(
        "Task list prototype ready",
        extra={"tasks": len(registry), "path": task_list_path},
    )
    return app


def serve_app() -> FastAPI:
    """App factory for uvicorn.

    Configures logging first, so reload workers (which never run the CLI)
    log the same way as the parent process.
    """

    configure_logging(PrototypeSettings().log_level)
    return create_app()
