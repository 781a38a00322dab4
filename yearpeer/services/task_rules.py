"""Validation and daily quota rules for tasks."""
from __future__ import annotations

import logging
from typing import Optional, Sequence
from uuid import UUID

from yearpeer.core.config import settings
from yearpeer.services.dates import DateLike, is_same_calendar_day, normalize_to_midnight
from yearpeer.services.entities import SubmitMode, TaskDraft, TaskRecord
from yearpeer.services.goal_rules import validate_title
from yearpeer.services.repositories import TaskRepository
from yearpeer.services.results import (
    Failure,
    FieldError,
    NotFoundError,
    PersistenceError,
    QuotaExceededError,
    Result,
    Success,
)

logger = logging.getLogger(__name__)


def validate_task_fields(task: TaskDraft) -> Optional[FieldError]:
    return validate_title(task.title)


def count_tasks_on_date(
    existing_tasks: Sequence[TaskRecord],
    day: DateLike,
    exclude_id: Optional[UUID] = None,
) -> int:
    target = normalize_to_midnight(day)
    return sum(
        1
        for task in existing_tasks
        if normalize_to_midnight(task.date) == target and (exclude_id is None or task.id != exclude_id)
    )


def within_quota(
    existing_tasks: Sequence[TaskRecord],
    day: DateLike,
    exclude_id: Optional[UUID] = None,
    quota: Optional[int] = None,
) -> bool:
    limit = settings.max_tasks_per_day if quota is None else quota
    return count_tasks_on_date(existing_tasks, day, exclude_id) < limit


def submit_task(
    repository: TaskRepository,
    user_id: UUID,
    candidate: TaskDraft,
    existing_tasks: Sequence[TaskRecord],
    mode: SubmitMode = SubmitMode.CREATE,
    exclude_id: Optional[UUID] = None,
    quota: Optional[int] = None,
) -> Result[TaskRecord]:
    """Validate a task create/update and persist it when every rule passes.

    The quota is only checked when the task lands on a new day: always for a
    create, and for an update only if its date moves.
    """
    if mode == SubmitMode.UPDATE and exclude_id is None:
        raise ValueError("exclude_id is required when updating a task")
    limit = settings.max_tasks_per_day if quota is None else quota

    field_error = validate_task_fields(candidate)
    if field_error:
        return _reject(user_id, field_error)

    check_quota = True
    if mode == SubmitMode.UPDATE:
        try:
            stored = repository.get_task(exclude_id, user_id)
        except PersistenceError as exc:
            return Failure(exc)
        if stored is None:
            return _reject(user_id, NotFoundError("Task not found"))
        check_quota = not is_same_calendar_day(stored.date, candidate.date)

    if check_quota and not within_quota(existing_tasks, candidate.date, exclude_id, limit):
        return _reject(user_id, QuotaExceededError(limit))

    try:
        if mode == SubmitMode.CREATE:
            task = repository.create_task(user_id, candidate)
        else:
            task = repository.update_task(exclude_id, user_id, candidate)
    except (NotFoundError, PersistenceError) as exc:
        return Failure(exc)
    return Success(task)


def toggle_completion(
    repository: TaskRepository,
    user_id: UUID,
    task_id: UUID,
    completed: bool,
) -> Result[TaskRecord]:
    """Set a task's completion flag. Repeating the same value is not an error."""
    try:
        task = repository.set_task_completed(task_id, user_id, completed)
    except (NotFoundError, PersistenceError) as exc:
        return Failure(exc)
    return Success(task)


def delete_task(repository: TaskRepository, user_id: UUID, task_id: UUID) -> Result[None]:
    try:
        repository.delete_task(task_id, user_id)
    except (NotFoundError, PersistenceError) as exc:
        return Failure(exc)
    return Success(None)


def _reject(user_id: UUID, error) -> Failure:
    logger.info("Task rejected for user %s: %s", user_id, error.code)
    return Failure(error)
