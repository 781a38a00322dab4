"""Task API routes."""
from __future__ import annotations

from datetime import date
from time import perf_counter
from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status

from yearpeer.api.deps import get_task_repository
from yearpeer.api.schemas.errors import ErrorResponse
from yearpeer.api.schemas.task import (
    TaskCompletionRequest,
    TaskEnvelope,
    TaskListResponse,
    TaskPatch,
    TaskPayload,
    TaskRangeResponse,
    TaskResponse,
)
from yearpeer.core.auth import get_current_user_id
from yearpeer.observability.metrics import log_metric
from yearpeer.observability.tracing import annotate, trace
from yearpeer.services.calendar_view import group_tasks_by_day
from yearpeer.services.entities import SubmitMode
from yearpeer.services.repositories import SqlTaskRepository
from yearpeer.services.results import DateOrderError, NotFoundError
from yearpeer.services.task_rules import delete_task, submit_task, toggle_completion

router = APIRouter()

ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


@router.get("/tasks", response_model=TaskListResponse, tags=["tasks"])
def list_tasks_on_date(
    http_request: Request,
    on: date = Query(..., alias="date", description="Calendar day, YYYY-MM-DD"),
    user_id: UUID = Depends(get_current_user_id),
    tasks: SqlTaskRepository = Depends(get_task_repository),
) -> TaskListResponse:
    """List the caller's tasks on one day in creation order."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "task.list",
        metadata={"route": "/tasks", "date": on.isoformat()},
        user_id=str(user_id),
        request_id=request_id,
    ):
        records = tasks.list_tasks_for_user_on_date(user_id, on)

    log_metric("task.list.count", len(records), metadata={"user_id": str(user_id)})
    return TaskListResponse(
        date=on,
        tasks=[TaskResponse.from_record(record) for record in records],
        request_id=request_id or "",
    )


@router.get("/tasks/range", response_model=TaskRangeResponse, responses=ERROR_RESPONSES, tags=["tasks"])
def list_tasks_in_range(
    http_request: Request,
    from_: date = Query(..., alias="from"),
    to: date = Query(...),
    user_id: UUID = Depends(get_current_user_id),
    tasks: SqlTaskRepository = Depends(get_task_repository),
) -> TaskRangeResponse:
    """List the caller's tasks between two days (inclusive), grouped by day."""
    if to < from_:
        raise DateOrderError()
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "task.list_range",
        metadata={"route": "/tasks/range", "from": from_.isoformat(), "to": to.isoformat()},
        user_id=str(user_id),
        request_id=request_id,
    ):
        records = tasks.list_tasks_for_user_in_range(user_id, from_, to)

    log_metric("task.list_range.count", len(records), metadata={"user_id": str(user_id)})
    grouped = group_tasks_by_day(records)
    return TaskRangeResponse(
        start=from_,
        end=to,
        days={key: [TaskResponse.from_record(task) for task in day_tasks] for key, day_tasks in grouped.items()},
        request_id=request_id or "",
    )


@router.post(
    "/tasks",
    response_model=TaskEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    tags=["tasks"],
)
def create_task(
    payload: TaskPayload,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    tasks: SqlTaskRepository = Depends(get_task_repository),
) -> TaskEnvelope:
    """Create a task unless its day is already full."""
    request_id = getattr(http_request.state, "request_id", None)
    candidate = payload.to_draft()
    base_metadata: Dict[str, Any] = {
        "route": "/tasks",
        "date": candidate.date.isoformat(),
        "has_goal": candidate.goal_id is not None,
    }

    start_time = perf_counter()
    outcome = "error"
    try:
        with trace("task.create", metadata=base_metadata, user_id=str(user_id), request_id=request_id) as span:
            existing = tasks.list_tasks_for_user_on_date(user_id, candidate.date)
            result = submit_task(tasks, user_id, candidate, existing, mode=SubmitMode.CREATE)
            outcome = "success" if result.ok else result.error.code
            annotate(span, **base_metadata, outcome=outcome, tasks_on_day=len(existing))
    finally:
        _record_outcome("task.create", user_id, outcome, start_time)

    if not result.ok:
        raise result.error
    return TaskEnvelope(task=TaskResponse.from_record(result.value), request_id=request_id or "")


@router.patch("/tasks/{task_id}", response_model=TaskEnvelope, responses=ERROR_RESPONSES, tags=["tasks"])
def update_task(
    task_id: UUID,
    payload: TaskPatch,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    tasks: SqlTaskRepository = Depends(get_task_repository),
) -> TaskEnvelope:
    """Change any subset of a task's fields; moving it re-checks the daily quota."""
    request_id = getattr(http_request.state, "request_id", None)
    stored = tasks.get_task(task_id, user_id)
    if stored is None:
        raise NotFoundError("Task not found")
    candidate = payload.apply_to(stored.to_draft())
    base_metadata: Dict[str, Any] = {
        "route": f"/tasks/{task_id}",
        "task_id": str(task_id),
        "fields": sorted(payload.model_fields_set),
        "date_changed": candidate.date != stored.date,
    }

    start_time = perf_counter()
    outcome = "error"
    try:
        with trace("task.update", metadata=base_metadata, user_id=str(user_id), request_id=request_id) as span:
            existing = tasks.list_tasks_for_user_on_date(user_id, candidate.date)
            result = submit_task(
                tasks,
                user_id,
                candidate,
                existing,
                mode=SubmitMode.UPDATE,
                exclude_id=task_id,
            )
            outcome = "success" if result.ok else result.error.code
            annotate(span, **base_metadata, outcome=outcome)
    finally:
        _record_outcome("task.update", user_id, outcome, start_time)

    if not result.ok:
        raise result.error
    return TaskEnvelope(task=TaskResponse.from_record(result.value), request_id=request_id or "")


@router.patch(
    "/tasks/{task_id}/completion",
    response_model=TaskEnvelope,
    responses=ERROR_RESPONSES,
    tags=["tasks"],
)
def update_task_completion(
    task_id: UUID,
    payload: TaskCompletionRequest,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    tasks: SqlTaskRepository = Depends(get_task_repository),
) -> TaskEnvelope:
    """Mark a task complete or incomplete."""
    request_id = getattr(http_request.state, "request_id", None)
    start_time = perf_counter()
    outcome = "error"
    try:
        with trace(
            "task.complete",
            metadata={"route": f"/tasks/{task_id}/completion", "task_id": str(task_id), "completed": payload.completed},
            user_id=str(user_id),
            request_id=request_id,
        ):
            result = toggle_completion(tasks, user_id, task_id, payload.completed)
            outcome = "success" if result.ok else result.error.code
    finally:
        _record_outcome("task.complete", user_id, outcome, start_time)

    if not result.ok:
        raise result.error
    return TaskEnvelope(task=TaskResponse.from_record(result.value), request_id=request_id or "")


@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
    tags=["tasks"],
)
def remove_task(
    task_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    tasks: SqlTaskRepository = Depends(get_task_repository),
) -> Response:
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "task.delete",
        metadata={"route": f"/tasks/{task_id}", "task_id": str(task_id)},
        user_id=str(user_id),
        request_id=request_id,
    ):
        result = delete_task(tasks, user_id, task_id)

    log_metric("task.delete.success", 1 if result.ok else 0, metadata={"user_id": str(user_id)})
    if not result.ok:
        raise result.error
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _record_outcome(name: str, user_id: UUID, outcome: str, start_time: float) -> None:
    latency_ms = (perf_counter() - start_time) * 1000
    metadata = {"user_id": str(user_id), "outcome": outcome}
    log_metric(f"{name}.success", 1 if outcome == "success" else 0, metadata=metadata)
    log_metric(f"{name}.latency_ms", latency_ms, metadata=metadata)
