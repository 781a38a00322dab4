"""Goal API routes."""
from __future__ import annotations

from datetime import date
from time import perf_counter
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status

from yearpeer.api.deps import get_goal_repository
from yearpeer.api.schemas.errors import ErrorResponse
from yearpeer.api.schemas.goal import GoalEnvelope, GoalListResponse, GoalPayload, GoalResponse
from yearpeer.core.auth import get_current_user_id
from yearpeer.observability.metrics import log_metric
from yearpeer.observability.tracing import annotate, trace
from yearpeer.services.dates import year_bounds
from yearpeer.services.entities import SubmitMode
from yearpeer.services.goal_rules import delete_goal, submit_goal
from yearpeer.services.repositories import SqlGoalRepository
from yearpeer.services.results import NotFoundError

router = APIRouter()

ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


@router.get("/goals", response_model=GoalListResponse, tags=["goals"])
def list_goals(
    http_request: Request,
    year: Optional[int] = Query(default=None, ge=1, le=9998, description="Calendar year; defaults to the current one"),
    user_id: UUID = Depends(get_current_user_id),
    goals: SqlGoalRepository = Depends(get_goal_repository),
) -> GoalListResponse:
    """List the caller's goals that touch the given year, with their tasks."""
    request_id = getattr(http_request.state, "request_id", None)
    year = year or date.today().year
    start, end = year_bounds(year)

    with trace(
        "goal.list",
        metadata={"route": "/goals", "year": year},
        user_id=str(user_id),
        request_id=request_id,
    ):
        records = goals.list_goals_for_user(user_id, start, end)

    log_metric("goal.list.count", len(records), metadata={"user_id": str(user_id), "year": year})
    return GoalListResponse(
        year=year,
        goals=[GoalResponse.from_record(record) for record in records],
        request_id=request_id or "",
    )


@router.get("/goals/{goal_id}", response_model=GoalEnvelope, responses=ERROR_RESPONSES, tags=["goals"])
def get_goal(
    goal_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    goals: SqlGoalRepository = Depends(get_goal_repository),
) -> GoalEnvelope:
    request_id = getattr(http_request.state, "request_id", None)
    record = goals.get_goal(goal_id, user_id)
    if record is None:
        raise NotFoundError("Goal not found")
    return GoalEnvelope(goal=GoalResponse.from_record(record), request_id=request_id or "")


@router.post(
    "/goals",
    response_model=GoalEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["goals"],
)
def create_goal(
    payload: GoalPayload,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    goals: SqlGoalRepository = Depends(get_goal_repository),
) -> GoalEnvelope:
    """Create a goal unless it breaks a field rule or overlaps an existing goal."""
    return _submit(payload, http_request, user_id, goals, SubmitMode.CREATE)


@router.put("/goals/{goal_id}", response_model=GoalEnvelope, responses=ERROR_RESPONSES, tags=["goals"])
def update_goal(
    goal_id: UUID,
    payload: GoalPayload,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    goals: SqlGoalRepository = Depends(get_goal_repository),
) -> GoalEnvelope:
    """Replace a goal's fields; the goal never overlaps with itself."""
    return _submit(payload, http_request, user_id, goals, SubmitMode.UPDATE, goal_id)


@router.delete(
    "/goals/{goal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    tags=["goals"],
)
def remove_goal(
    goal_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    goals: SqlGoalRepository = Depends(get_goal_repository),
) -> Response:
    """Delete a goal; its tasks stay on the calendar without a goal."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "goal.delete",
        metadata={"route": f"/goals/{goal_id}", "goal_id": str(goal_id)},
        user_id=str(user_id),
        request_id=request_id,
    ):
        result = delete_goal(goals, user_id, goal_id)

    log_metric("goal.delete.success", 1 if result.ok else 0, metadata={"user_id": str(user_id)})
    if not result.ok:
        raise result.error
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _submit(
    payload: GoalPayload,
    http_request: Request,
    user_id: UUID,
    goals: SqlGoalRepository,
    mode: SubmitMode,
    goal_id: Optional[UUID] = None,
) -> GoalEnvelope:
    request_id = getattr(http_request.state, "request_id", None)
    candidate = payload.to_draft()
    base_metadata: Dict[str, Any] = {
        "route": "/goals" if goal_id is None else f"/goals/{goal_id}",
        "mode": mode.value,
        "start_date": candidate.start_date.isoformat(),
        "end_date": candidate.end_date.isoformat(),
        "impact": candidate.impact,
    }

    start_time = perf_counter()
    outcome = "error"
    try:
        with trace(
            f"goal.{mode.value}",
            metadata=base_metadata,
            user_id=str(user_id),
            request_id=request_id,
        ) as span:
            existing = goals.list_goals_for_user(user_id, candidate.start_date, candidate.end_date)
            result = submit_goal(goals, user_id, candidate, existing, mode=mode, exclude_id=goal_id)
            outcome = "success" if result.ok else result.error.code
            annotate(span, **base_metadata, outcome=outcome, existing_in_range=len(existing))
    finally:
        latency_ms = (perf_counter() - start_time) * 1000
        metric_metadata = {"user_id": str(user_id), "mode": mode.value, "outcome": outcome}
        log_metric(f"goal.{mode.value}.success", 1 if outcome == "success" else 0, metadata=metric_metadata)
        log_metric(f"goal.{mode.value}.latency_ms", latency_ms, metadata=metric_metadata)

    if not result.ok:
        raise result.error
    return GoalEnvelope(goal=GoalResponse.from_record(result.value), request_id=request_id or "")
