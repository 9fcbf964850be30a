from __future__ import annotations

import re
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from task_list_prototype.journey.registry import (
    RegistryError,
    TaskDefinition,
    TaskRegistry,
    default_registry,
)
from task_list_prototype.server.app import create_app
from task_list_prototype.server.task_router import template_for_route


def _statuses(client: TestClient) -> dict[str, str]:
    body = client.get("/api/tasks").json()
    return {t["key"]: t["status"] for t in body["tasks"]}


def _html_status(html: str, key: str) -> str:
    match = re.search(rf'id="{re.escape(key)}" data-status="([a-z-]+)"', html)
    assert match is not None, f"{key} not on task list"
    return match.group(1)


def test_template_for_route() -> None:
    assert template_for_route("/task-1") == "task-1.html"
    assert template_for_route("/check-answers-task-1") == "check-answers-task-1.html"


def test_health(client: TestClient) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}


def test_task_list_for_fresh_session(client: TestClient) -> None:
    resp = client.get("/task-list")
    assert resp.status_code == 200
    assert "You have completed 0 of 9 sections." in resp.text
    assert _html_status(resp.text, "task-3") == "not-started"
    assert _html_status(resp.text, "task-4") == "cannot-start-yet"
    assert _html_status(resp.text, "task-8") == "cannot-start-yet"
    assert "Cannot start yet" in resp.text


def test_api_tasks_payload(client: TestClient) -> None:
    body = client.get("/api/tasks").json()
    assert body["completedCount"] == 0
    assert body["totalTasks"] == 9
    task_8 = next(t for t in body["tasks"] if t["key"] == "task-8")
    assert task_8 == {
        "key": "task-8",
        "title": "Project plan",
        "status": "cannot-start-yet",
        "dependsOn": ["task-6", "task-7"],
    }


def test_first_question_marks_task_started(client: TestClient) -> None:
    resp = client.get("/task-1")
    assert resp.status_code == 200
    assert "Your details" in resp.text
    assert _statuses(client)["task-1"] == "in-progress"


def test_completion_redirects_to_task_list(client: TestClient) -> None:
    client.get("/task-3")
    resp = client.post("/check-answers-task-3", follow_redirects=False)

    assert resp.status_code == 302
    assert resp.headers["location"] == "/task-list"

    task_list = client.get("/task-list").text
    assert _html_status(task_list, "task-3") == "completed"
    assert _html_status(task_list, "task-4") == "not-started"
    assert "You have completed 1 of 9 sections." in task_list


def test_second_question_starts_task(client: TestClient) -> None:
    resp = client.post("/task-2-question-2")
    assert resp.status_code == 200
    assert _statuses(client)["task-2"] == "in-progress"


def test_revising_completed_task_reopens_it(client: TestClient) -> None:
    client.get("/task-2")
    client.post("/task-2-question-2")
    client.post("/check-answers-task-2")
    assert _statuses(client)["task-2"] == "completed"

    resp = client.post("/task-2-question-2")

    assert resp.status_code == 200
    assert _statuses(client)["task-2"] == "in-progress"
    assert client.get("/api/tasks").json()["completedCount"] == 0


def test_task_without_second_question_completes_directly(client: TestClient) -> None:
    resp = client.post("/check-answers-task-9", follow_redirects=False)
    assert resp.status_code == 302
    assert _statuses(client)["task-9"] == "completed"


def test_dependent_task_unlocks_after_both_dependencies(client: TestClient) -> None:
    client.post("/check-answers-task-6")
    assert _statuses(client)["task-8"] == "cannot-start-yet"

    client.post("/check-answers-task-7")
    assert _statuses(client)["task-8"] == "not-started"


def test_check_answers_page_is_served(client: TestClient) -> None:
    resp = client.get("/check-answers-task-1")
    assert resp.status_code == 200
    assert 'action="/check-answers-task-1"' in resp.text
    # Viewing the page does not complete the task.
    assert _statuses(client)["task-1"] == "not-started"


@pytest.mark.parametrize("path", ["/no-such-page", "/_layout"])
def test_unknown_pages_404(client: TestClient, path: str) -> None:
    assert client.get(path).status_code == 404


def test_index_links_to_task_list(client: TestClient) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert 'href="/task-list"' in resp.text


def test_pages_served_by_name_get_task_list_path(client: TestClient) -> None:
    resp = client.get("/index")
    assert resp.status_code == 200
    assert 'href="/task-list"' in resp.text
    assert 'href=""' not in resp.text


def test_clear_data_resets_session(client: TestClient) -> None:
    client.get("/task-1")
    client.post("/check-answers-task-3")

    resp = client.get("/clear-data", follow_redirects=False)

    assert resp.status_code == 302
    assert resp.headers["location"] == "/task-list"
    assert set(_statuses(client).values()) == {"not-started", "cannot-start-yet"}


def test_sessions_are_isolated() -> None:
    app = create_app()
    with TestClient(app) as first, TestClient(app) as second:
        first.post("/check-answers-task-1")
        assert _statuses(first)["task-1"] == "completed"
        assert _statuses(second)["task-1"] == "not-started"


def test_task_with_no_entry_routes_only_binds_completion() -> None:
    registry = TaskRegistry(
        [TaskDefinition(key="declaration", title="Declaration", completion_route="/declare")]
    )
    app = create_app(registry)
    with TestClient(app) as client:
        resp = client.post("/declare", follow_redirects=False)
        assert resp.status_code == 302
        assert _statuses(client) == {"declaration": "completed"}

        task_list = client.get("/task-list").text
        assert _html_status(task_list, "declaration") == "completed"
        assert "You have completed 1 of 1 sections." in task_list

        # No start handler is bound: a GET neither renders nor changes state.
        assert client.get("/declare").status_code in (404, 405)
        assert _statuses(client) == {"declaration": "completed"}


def test_invalid_registry_fails_at_startup() -> None:
    registry = TaskRegistry(
        [TaskDefinition(key="a", completion_route="/a", depends_on=frozenset({"missing"}))]
    )
    with pytest.raises(RegistryError):
        create_app(registry)


def test_missing_entry_template_fails_at_startup() -> None:
    registry = TaskRegistry(
        [
            TaskDefinition(
                key="extra",
                entry_routes=("/task-1", "/no-such-question"),
                completion_route="/check-answers-extra",
            )
        ]
    )
    with pytest.raises(RegistryError, match="no-such-question.html"):
        create_app(registry)


def test_missing_task_list_template_fails_at_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKLIST_TASK_LIST_PATH", "/overview")
    with pytest.raises(RegistryError, match="overview.html"):
        create_app(default_registry())


def test_example_journey_serves_every_page(monkeypatch: pytest.MonkeyPatch) -> None:
    examples = Path(__file__).resolve().parents[2] / "examples"
    monkeypatch.setenv("TASKLIST_REGISTRY_FILE", str(examples / "registry.json"))
    monkeypatch.setenv("TASKLIST_TEMPLATES_DIR", str(examples / "templates"))

    with TestClient(create_app()) as client:
        assert _statuses(client) == {
            "eligibility": "not-started",
            "applicant": "cannot-start-yet",
            "declaration": "cannot-start-yet",
        }
        assert client.get("/").status_code == 200
        assert client.get("/eligibility").status_code == 200
        assert client.get("/check-answers-eligibility").status_code == 200
        client.post("/check-answers-eligibility")

        assert client.get("/applicant").status_code == 200
        assert client.post("/applicant-address").status_code == 200
        client.post("/check-answers-applicant")

        task_list = client.get("/task-list").text
        assert _html_status(task_list, "declaration") == "not-started"
        assert 'href="/declaration"' in task_list
        assert client.get("/declaration").status_code == 200
        client.post("/declaration")
        assert client.get("/api/tasks").json()["completedCount"] == 3


def test_custom_task_list_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "overview.html").write_text(
        "{% for key, status in taskStatuses.items() %}{{ key }}={{ status.value }};{% endfor %}"
        "{{ completedCount }}/{{ totalTasks }}",
        encoding="utf-8",
    )
    monkeypatch.setenv("TASKLIST_TEMPLATES_DIR", str(templates))
    monkeypatch.setenv("TASKLIST_TASK_LIST_PATH", "/overview")

    registry = TaskRegistry(
        [
            TaskDefinition(key="a", completion_route="/a-done"),
            TaskDefinition(key="b", completion_route="/b-done", depends_on=frozenset({"a"})),
        ]
    )
    with TestClient(create_app(registry)) as client:
        resp = client.post("/a-done", follow_redirects=False)
        assert resp.headers["location"] == "/overview"
        assert client.get("/overview").text == "a=completed;b=not-started;1/2"
