from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from habitup import (
    ConnectionRegistry,
    HabitService,
    HabitUpError,
    build_service,
    configure_logging,
    ensure_data_root,
    load_settings,
)

app = FastAPI(title="HabitUP API", version="0.1.0")

security = HTTPBasic(auto_error=False)

# Live client channels; shared by every service built in this process.
registry = ConnectionRegistry()

_services: dict[Path, HabitService] = {}


def get_service() -> HabitService:
    root = ensure_data_root()
    service = _services.get(root)
    if service is None:
        configure_logging(load_settings(root).log_level)
        service = _services[root] = build_service(root, registry)
    return service


@app.exception_handler(HabitUpError)
async def habitup_error_handler(request: Request, exc: HabitUpError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


# ── Auth ──────────────────────────────────────────────────────


def get_current_user(
    credentials: HTTPBasicCredentials | None = Depends(security),
    service: HabitService = Depends(get_service),
) -> str:
    """Resolve the owner id; with no users configured everyone is 'guest'."""
    users = service.settings.users

    if not users:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    expected_password = users.get(credentials.username, "")
    correct_password = secrets.compare_digest(
        credentials.password.encode("utf-8"), expected_password.encode("utf-8"),
    )

    if not expected_password or not correct_password:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# ── Habits ────────────────────────────────────────────────────


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/api/habits")
def api_list_habits(
    owner: str = Depends(get_current_user),
    service: HabitService = Depends(get_service),
) -> dict[str, Any]:
    """All habits of the owner, newest first."""
    habits = service.list_habits(owner)
    return {"success": True, "data": [h.to_dict() for h in habits], "count": len(habits)}


@app.post("/api/habits", status_code=status.HTTP_201_CREATED)
def api_create_habit(
    payload: dict[str, Any] = Body(...),
    owner: str = Depends(get_current_user),
    service: HabitService = Depends(get_service),
) -> dict[str, Any]:
    habit = service.create_habit(owner, payload)
    return {"success": True, "message": "Habit created successfully", "data": habit.to_dict()}


@app.get("/api/habits/{habit_id}")
def api_get_habit(
    habit_id: int,
    owner: str = Depends(get_current_user),
    service: HabitService = Depends(get_service),
) -> dict[str, Any]:
    return {"success": True, "data": service.get_habit(owner, habit_id).to_dict()}


@app.put("/api/habits/{habit_id}")
def api_update_habit(
    habit_id: int,
    payload: dict[str, Any] = Body(...),
    owner: str = Depends(get_current_user),
    service: HabitService = Depends(get_service),
) -> dict[str, Any]:
    habit = service.update_habit(owner, habit_id, payload)
    return {"success": True, "message": "Habit updated successfully", "data": habit.to_dict()}


@app.delete("/api/habits/{habit_id}")
def api_delete_habit(
    habit_id: int,
    owner: str = Depends(get_current_user),
    service: HabitService = Depends(get_service),
) -> dict[str, Any]:
    """Delete a habit and all of its progress."""
    service.delete_habit(owner, habit_id)
    return {"success": True, "message": "Habit deleted successfully"}


# ── Completion & reports ──────────────────────────────────────


@app.post("/api/habits/{habit_id}/complete")
def api_mark_complete(
    habit_id: int,
    payload: dict[str, Any] = Body(default={}),
    owner: str = Depends(get_current_user),
    service: HabitService = Depends(get_service),
) -> dict[str, Any]:
    """Log today's (or a past day's) completion and return the new streak."""
    state = service.on_habit_marked_complete(
        owner,
        habit_id,
        day=payload.get("date"),
        status=payload.get("status", "COMPLETED"),
        mood=payload.get("mood"),
        effort=payload.get("effortLevel"),
        notes=payload.get("notes"),
        time_of_day=payload.get("completionTime"),
    )
    return {"success": True, "message": "Habit marked as completed", "data": state.to_dict()}


@app.get("/api/habits/{habit_id}/progress")
def api_habit_progress(
    habit_id: int,
    days: int | None = Query(default=None),
    owner: str = Depends(get_current_user),
    service: HabitService = Depends(get_service),
) -> dict[str, Any]:
    habit, records, stats = service.on_progress_requested(owner, habit_id, days)
    return {
        "success": True,
        "data": {
            "habit": habit.to_dict(),
            "progress": [r.to_dict() for r in records],
            "statistics": stats.to_dict(),
        },
    }


@app.get("/api/habits/{habit_id}/analytics")
def api_habit_analytics(
    habit_id: int,
    time_range: int | None = Query(default=None, alias="timeRange"),
    owner: str = Depends(get_current_user),
    service: HabitService = Depends(get_service),
) -> dict[str, Any]:
    """Rolling-window analytics and insights for one habit."""
    report = service.on_analytics_requested(owner, habit_id, time_range)
    habit = service.get_habit(owner, habit_id)
    return {"success": True, "data": {"habit": habit.to_dict(), **report.to_dict()}}


@app.get("/api/suggestions")
def api_suggestions(
    owner: str = Depends(get_current_user),
    service: HabitService = Depends(get_service),
) -> dict[str, Any]:
    habits = service.list_habits(owner)
    suggestions = service.on_suggestions_requested(owner)
    return {
        "success": True,
        "data": {
            "suggestions": [s.to_dict() for s in suggestions],
            "userHabitCount": len(habits),
            "categoriesCovered": sorted({h.category.value for h in habits}),
        },
    }


@app.get("/api/summary/weekly")
def api_weekly_summary(
    owner: str = Depends(get_current_user),
    service: HabitService = Depends(get_service),
) -> dict[str, Any]:
    return {"success": True, "data": service.weekly_summary(owner).to_dict()}


@app.get("/api/reminders")
def api_reminders(
    owner: str = Depends(get_current_user),
    service: HabitService = Depends(get_service),
) -> dict[str, Any]:
    """Reminder-enabled habits still open today."""
    habits = service.pending_reminders(owner)
    return {"success": True, "data": [h.to_dict() for h in habits], "count": len(habits)}


# ── Entry point ───────────────────────────────────────────────


def main() -> None:
    """Serve the API; HABITUP_HOST / HABITUP_PORT pick the address."""
    host = os.environ.get("HABITUP_HOST", "127.0.0.1")
    port = int(os.environ.get("HABITUP_PORT", "8000"))
    settings = load_settings(ensure_data_root())
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
