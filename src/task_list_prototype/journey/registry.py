"""Declarative task registry.

The registry is pure configuration: an ordered, read-only list of task
definitions. Routes for every task are generated from it, and the state
machine consults it to resolve dependencies.

Constructing a registry only checks that keys are unique. File loading and
app start-up also run :func:`validate_registry`, which rejects configuration
that would otherwise only show up at request time (dependency cycles,
shadowed routes).
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from graphlib import CycleError, TopologicalSorter
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

MAX_ENTRY_ROUTES = 2


class RegistryError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class TaskDefinition:
    """One task of the journey.

    `entry_routes` are the question pages in traversal order (zero, one or two).
    `completion_route` is the check-answers page that finalizes the task.
    """

    key: str
    completion_route: str
    entry_routes: tuple[str, ...] = ()
    depends_on: frozenset[str] = field(default_factory=frozenset)
    title: str = ""

    @property
    def display_title(self) -> str:
        return self.title or self.key

    @property
    def first_entry_route(self) -> str | None:
        return self.entry_routes[0] if self.entry_routes else None

    @property
    def second_entry_route(self) -> str | None:
        return self.entry_routes[1] if len(self.entry_routes) > 1 else None

    def routes(self) -> tuple[str, ...]:
        return (*self.entry_routes, self.completion_route)


class TaskRegistry:
    """Ordered, immutable collection of :class:`TaskDefinition`."""

    def __init__(self, tasks: Iterable[TaskDefinition]) -> None:
        ordered = tuple(tasks)
        by_key: dict[str, TaskDefinition] = {}
        for task in ordered:
            if task.key in by_key:
                raise RegistryError(f"Duplicate task key: {task.key}")
            by_key[task.key] = task
        self._tasks = ordered
        self._by_key = by_key

    def __iter__(self) -> Iterator[TaskDefinition]:
        return iter(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def get(self, key: str) -> TaskDefinition | None:
        return self._by_key.get(key)

    def keys(self) -> list[str]:
        return [t.key for t in self._tasks]


def _find_cycle(registry: TaskRegistry) -> list[str] | None:
    graph = {task.key: set(task.depends_on) for task in registry}
    try:
        tuple(TopologicalSorter(graph).static_order())
    except CycleError as e:
        return list(e.args[1])
    return None


def validate_registry(registry: TaskRegistry) -> None:
    """Check the invariants a registry must hold before routes are generated.

    Raises:
        RegistryError: on the first problem found.
    """

    seen_routes: dict[str, str] = {}
    for task in registry:
        if len(task.entry_routes) > MAX_ENTRY_ROUTES:
            raise RegistryError(
                f"Task {task.key} has {len(task.entry_routes)} entry routes "
                f"(at most {MAX_ENTRY_ROUTES} supported)"
            )
        for route in task.routes():
            if not route.startswith("/"):
                raise RegistryError(f"Task {task.key}: route must start with '/': {route!r}")
            owner = seen_routes.get(route)
            if owner is not None:
                raise RegistryError(f"Route {route} is bound by both {owner} and {task.key}")
            seen_routes[route] = task.key
        for dep in sorted(task.depends_on):
            if dep not in registry:
                raise RegistryError(f"Task {task.key} depends on unknown task {dep}")

    cycle = _find_cycle(registry)
    if cycle is not None:
        raise RegistryError("Dependency cycle: " + " -> ".join(cycle))


class TaskDefinitionModel(BaseModel):
    """On-disk shape of a task definition (camelCase, as in the prototype kit)."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    key: str = Field(min_length=1)
    title: str = ""
    entry_routes: list[str] = Field(default_factory=list, alias="entryRoutes")
    completion_route: str = Field(min_length=1, alias="completionRoute")
    depends_on: list[str] = Field(default_factory=list, alias="dependsOn")

    def to_definition(self) -> TaskDefinition:
        return TaskDefinition(
            key=self.key,
            title=self.title,
            entry_routes=tuple(self.entry_routes),
            completion_route=self.completion_route,
            depends_on=frozenset(self.depends_on),
        )


def registry_from_json(raw: object) -> TaskRegistry:
    if not isinstance(raw, list):
        raise RegistryError("Registry document must be a JSON list of tasks")
    try:
        models = [TaskDefinitionModel.model_validate(item) for item in raw]
    except ValidationError as e:
        raise RegistryError(f"Invalid task definition: {e}") from e
    registry = TaskRegistry(m.to_definition() for m in models)
    validate_registry(registry)
    return registry


def load_registry(path: Path) -> TaskRegistry:
    """Load and validate a registry from a JSON file."""

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise RegistryError(f"Registry file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise RegistryError(f"Registry file is not valid JSON: {path}: {e}") from e
    return registry_from_json(raw)


def _task(
    n: int,
    title: str,
    *,
    pages: int = 1,
    depends_on: Sequence[int] = (),
) -> TaskDefinition:
    key = f"task-{n}"
    entry = [f"/{key}"]
    if pages > 1:
        entry.append(f"/{key}-question-2")
    return TaskDefinition(
        key=key,
        title=title,
        entry_routes=tuple(entry),
        completion_route=f"/check-answers-{key}",
        depends_on=frozenset(f"task-{d}" for d in depends_on),
    )


def default_registry() -> TaskRegistry:
    """The built-in nine-task journey."""

    return TaskRegistry(
        [
            _task(1, "Your details"),
            _task(2, "Contact details", pages=2),
            _task(3, "Your organisation"),
            _task(4, "Organisation address", depends_on=[3]),
            _task(5, "Funding", pages=2),
            _task(6, "Project summary"),
            _task(7, "Project costs"),
            _task(8, "Project plan", depends_on=[6, 7]),
            _task(9, "Declaration"),
        ]
    )
