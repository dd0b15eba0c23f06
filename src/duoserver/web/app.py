# src/duoserver/web/app.py

"""
HTTP surface.

Maps routes to store operations and the error taxonomy to status codes.
Store calls block on a lock and on disk writes, so they run in the worker
thread pool (plain `def` endpoints, or run_in_threadpool from async ones).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool

from ..core.state import AppState
from ..errors import NotFound, PersistenceFailure, ValidationError
from ..streak.streak_store import StreakRecord
from ..submissions.submission_ledger import SubmissionRecord
from ..workflow.workflow_store import ReviewOutcome
from .schemas import CheckMeIn, StreakIn, SubmissionIn, parse_body

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


async def _json_body(request: Request) -> Any:
    raw = await request.body()
    try:
        return json.loads(raw)
    except ValueError:
        raise ValidationError("invalid json") from None


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFound)
    async def _not_found(request: Request, exc: NotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def _invalid(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(PersistenceFailure)
    async def _persist_failed(request: Request, exc: PersistenceFailure):
        logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "internal error: could not persist"})

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": f"Unhandled error: {type(exc).__name__}"},
        )


def create_app(state: AppState) -> FastAPI:
    """Build the FastAPI app around already-loaded stores."""
    app_name = str(getattr(state.settings, "app_name", "duoserver"))
    app = FastAPI(title=app_name)
    app.state.duo = state
    _install_error_handlers(app)

    # ---- pages ----

    @app.get("/", response_class=PlainTextResponse)
    def home() -> str:
        return f"welcome to {app_name}\n"

    @app.get("/ping", response_class=PlainTextResponse)
    def ping() -> str:
        logger.debug("pong")
        return "pong\n"

    @app.get("/dashboard", response_class=HTMLResponse)
    def dashboard(request: Request):
        return templates.TemplateResponse(
            request,
            "dashboard.html",
            {
                "app_name": app_name,
                "submissions": state.submissions.list(),
                "statuses": state.workflow.status_snapshot(),
            },
        )

    # ---- plugin routes ----

    @app.post("/submit")
    async def submit(request: Request) -> dict[str, str]:
        if "application/json" not in (request.headers.get("content-type") or ""):
            raise ValidationError("expected application/json")

        body = parse_body(SubmissionIn, await _json_body(request))
        record = SubmissionRecord(
            filename=body.filename,
            typed=body.typed,
            pasted=body.pasted,
            real=body.real,
        )
        await run_in_threadpool(state.submissions.put, record.filename, record)
        logger.info("submission: %s", record.filename)
        return {"status": "received"}

    @app.post("/checkme")
    async def checkme(request: Request) -> dict[str, str]:
        body = parse_body(CheckMeIn, await _json_body(request))
        if not body.project_id or not body.task_id:
            raise ValidationError("project_id and task_id required")

        def _review() -> tuple[ReviewOutcome, str]:
            outcome = state.workflow.request_review(body.project_id, body.task_id)
            # Status only moves forward, so a read right after is the post-review state.
            task = state.workflow.get_task(body.project_id, body.task_id)
            return outcome, task.status.value

        outcome, status = await run_in_threadpool(_review)
        return {
            "outcome": outcome.value,
            "message": outcome.message,
            "status": status,
        }

    # ---- api ----

    @app.get("/api/projectlist")
    def project_list() -> dict[str, Any]:
        return {"projects": [p.to_dict() for p in state.workflow.list_projects()]}

    @app.get("/api/abouttask")
    def about_task(project: str = "", task: str = "") -> dict[str, Any]:
        return state.workflow.get_task(project, task).to_public_dict()

    @app.get("/api/submissions/{filename}")
    def submission_detail(filename: str) -> dict[str, str]:
        return state.submissions.get(filename).to_dict()

    @app.get("/taskstatus")
    def task_status() -> dict[str, dict[str, str]]:
        return state.workflow.status_snapshot()

    @app.get("/streakstatus")
    def streak_status() -> dict[str, Any]:
        return state.streak.get().to_dict()

    @app.put("/streakstatus")
    async def streak_update(request: Request) -> dict[str, Any]:
        body = parse_body(StreakIn, await _json_body(request))
        record = StreakRecord(
            current_streak=body.current_streak,
            last_completed=body.last_completed,
            streak_freeze=body.streak_freeze,
        )
        saved = await run_in_threadpool(state.streak.set, record)
        return saved.to_dict()

    return app
