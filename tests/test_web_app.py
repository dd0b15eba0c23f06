# tests/test_web_app.py

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from duoserver.core.state import AppState
from duoserver.web.app import create_app
from duoserver.workflow import workflow_store as workflow_store_mod

from .fakes import FailingWriter


def _client(state: AppState) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=create_app(state))
    return httpx.AsyncClient(transport=transport, base_url="http://testserver")


def _submission(**over) -> dict[str, str]:
    body = {"filename": "main.py", "typed": "print(1)", "pasted": "", "real": "print(1)\n"}
    body.update(over)
    return body


@pytest.mark.asyncio
async def test_home_and_ping(state: AppState) -> None:
    async with _client(state) as client:
        r = await client.get("/")
        assert r.status_code == 200
        assert r.text.strip() == "welcome to duoserver"

        r = await client.get("/ping")
        assert r.text.strip() == "pong"


@pytest.mark.asyncio
async def test_project_list_and_status(state: AppState) -> None:
    async with _client(state) as client:
        r = await client.get("/api/projectlist")
        assert r.status_code == 200
        projects = r.json()["projects"]
        assert [p["id"] for p in projects] == ["p1", "p2"]
        assert projects[0]["tasks"][0] == {
            "id": "t1",
            "title": "Hello",
            "description": "print hello",
            "status": "todo",
        }

        r = await client.get("/taskstatus")
        assert r.json() == {
            "p1": {"t1": "todo", "t2": "todo", "t3": "checking"},
            "p2": {"t1": "done"},
        }


@pytest.mark.asyncio
async def test_about_task(state: AppState) -> None:
    async with _client(state) as client:
        r = await client.get("/api/abouttask", params={"project": "p2", "task": "t1"})
        assert r.status_code == 200
        assert r.json()["status"] == "done"
        assert r.json()["done"] is True

        r = await client.get("/api/abouttask", params={"project": "p1", "task": "zzz"})
        assert r.status_code == 404

        r = await client.get("/api/abouttask")
        assert r.status_code == 404


@pytest.mark.asyncio
async def test_checkme_flow(state: AppState) -> None:
    async with _client(state) as client:
        r = await client.post("/checkme", json={"project_id": "p1", "task_id": "t1"})
        assert r.status_code == 200
        assert r.json()["outcome"] == "submitted"
        assert r.json()["message"] == "submitted for review"
        assert r.json()["status"] == "checking"

        r = await client.post("/checkme", json={"project_id": "p1", "task_id": "t1"})
        assert r.status_code == 200
        assert r.json()["outcome"] == "already_submitted"
        assert r.json()["message"] == "already submitted"
        assert r.json()["status"] == "checking"

        r = await client.get("/taskstatus")
        assert r.json()["p1"]["t1"] == "checking"


@pytest.mark.asyncio
async def test_checkme_rejections(state: AppState) -> None:
    async with _client(state) as client:
        r = await client.post("/checkme", content=b"{oops", headers={"content-type": "application/json"})
        assert r.status_code == 400
        assert r.json()["detail"] == "invalid json"

        r = await client.post("/checkme", json={"project_id": "p1"})
        assert r.status_code == 400
        assert r.json()["detail"] == "project_id and task_id required"

        r = await client.post("/checkme", json={"project_id": "p9", "task_id": "t1"})
        assert r.status_code == 404

        r = await client.get("/checkme")
        assert r.status_code == 405


@pytest.mark.asyncio
async def test_checkme_persistence_failure_is_500(state: AppState, monkeypatch) -> None:
    monkeypatch.setattr(workflow_store_mod, "write_json_atomic", FailingWriter())
    async with _client(state) as client:
        r = await client.post("/checkme", json={"project_id": "p1", "task_id": "t1"})
        assert r.status_code == 500

        r = await client.get("/taskstatus")
        assert r.json()["p1"]["t1"] == "todo"


@pytest.mark.asyncio
async def test_concurrent_checkme_single_transition(state: AppState) -> None:
    async with _client(state) as client:
        responses = await asyncio.gather(
            *[client.post("/checkme", json={"project_id": "p1", "task_id": "t2"}) for _ in range(8)]
        )
    outcomes = [r.json()["outcome"] for r in responses]
    assert outcomes.count("submitted") == 1
    assert outcomes.count("already_submitted") == 7


@pytest.mark.asyncio
async def test_submit_and_read_back(state: AppState, seeded) -> None:
    async with _client(state) as client:
        r = await client.post("/submit", json=_submission())
        assert r.status_code == 200
        assert r.json() == {"status": "received"}

        r = await client.get("/api/submissions/main.py")
        assert r.json() == _submission()

        r = await client.get("/dashboard")
        assert r.status_code == 200
        assert "main.py" in r.text

    on_disk = json.loads(seeded.submissions_path.read_text("utf-8"))
    assert on_disk == {"main.py": _submission()}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"filename": "a.py", "typed": "", "pasted": ""},
        {**_submission(), "extra": "nope"},
        {**_submission(), "typed": 5},
        {**_submission(), "filename": ""},
    ],
)
async def test_submit_validation(state: AppState, body) -> None:
    async with _client(state) as client:
        r = await client.post("/submit", json=body)
        assert r.status_code == 400

        r = await client.get("/api/submissions/a.py")
        assert r.status_code == 404


@pytest.mark.asyncio
async def test_submit_requires_json_content_type(state: AppState) -> None:
    async with _client(state) as client:
        r = await client.post(
            "/submit",
            content=json.dumps(_submission()),
            headers={"content-type": "text/plain"},
        )
        assert r.status_code == 400
        assert r.json()["detail"] == "expected application/json"


@pytest.mark.asyncio
async def test_streak_read_and_replace(state: AppState, seeded) -> None:
    async with _client(state) as client:
        r = await client.get("/streakstatus")
        assert r.json() == {"current_streak": 4, "last_completed": "2026-10-18", "streak_freeze": 1}

        new = {"current_streak": 5, "last_completed": "2026-10-19", "streak_freeze": 1}
        r = await client.put("/streakstatus", json=new)
        assert r.status_code == 200
        assert r.json() == new

        r = await client.put("/streakstatus", json={**new, "current_streak": -1})
        assert r.status_code == 400

        r = await client.get("/streakstatus")
        assert r.json() == new

    assert json.loads(seeded.streak_path.read_text("utf-8")) == new


@pytest.mark.asyncio
async def test_checkme_on_accepted_task_reports_its_status(state: AppState) -> None:
    async with _client(state) as client:
        r = await client.post("/checkme", json={"project_id": "p2", "task_id": "t1"})
    assert r.status_code == 200
    assert r.json() == {
        "outcome": "already_submitted",
        "message": "already submitted",
        "status": "done",
    }
