"""Calendar view API routes."""
from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Request

from yearpeer.api.deps import get_goal_repository, get_task_repository
from yearpeer.api.schemas.calendar import MonthCalendarResponse, MonthViewResponse, YearCalendarResponse
from yearpeer.core.auth import get_current_user_id
from yearpeer.observability.metrics import log_metric
from yearpeer.observability.tracing import trace
from yearpeer.services.calendar_view import build_month_view, build_year_view
from yearpeer.services.dates import month_bounds, year_bounds
from yearpeer.services.repositories import SqlGoalRepository, SqlTaskRepository

router = APIRouter()


@router.get("/calendar/{year}", response_model=YearCalendarResponse, tags=["calendar"])
def get_year_calendar(
    http_request: Request,
    year: int = Path(..., ge=1, le=9998),
    user_id: UUID = Depends(get_current_user_id),
    goals: SqlGoalRepository = Depends(get_goal_repository),
    tasks: SqlTaskRepository = Depends(get_task_repository),
) -> YearCalendarResponse:
    """Twelve month grids with each day's goals, color and task counts."""
    request_id = getattr(http_request.state, "request_id", None)
    start, end = year_bounds(year)
    with trace(
        "calendar.year",
        metadata={"route": f"/calendar/{year}", "year": year},
        user_id=str(user_id),
        request_id=request_id,
    ):
        goal_records = goals.list_goals_for_user(user_id, start, end)
        task_records = tasks.list_tasks_for_user_in_range(user_id, start, end)
        months = build_year_view(year, goal_records, task_records, today=date.today())

    log_metric("calendar.year.goals", len(goal_records), metadata={"user_id": str(user_id), "year": year})
    return YearCalendarResponse(
        year=year,
        months=[MonthViewResponse.from_view(view) for view in months],
        request_id=request_id or "",
    )


@router.get("/calendar/{year}/{month}", response_model=MonthCalendarResponse, tags=["calendar"])
def get_month_calendar(
    http_request: Request,
    year: int = Path(..., ge=1, le=9998),
    month: int = Path(..., ge=1, le=12),
    user_id: UUID = Depends(get_current_user_id),
    goals: SqlGoalRepository = Depends(get_goal_repository),
    tasks: SqlTaskRepository = Depends(get_task_repository),
) -> MonthCalendarResponse:
    request_id = getattr(http_request.state, "request_id", None)
    start, end = month_bounds(month, year)
    with trace(
        "calendar.month",
        metadata={"route": f"/calendar/{year}/{month}", "year": year, "month": month},
        user_id=str(user_id),
        request_id=request_id,
    ):
        view = build_month_view(
            month,
            year,
            goals.list_goals_for_user(user_id, start, end),
            tasks.list_tasks_for_user_in_range(user_id, start, end),
            today=date.today(),
        )

    return MonthCalendarResponse(month=MonthViewResponse.from_view(view), request_id=request_id or "")
