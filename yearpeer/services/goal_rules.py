"""Validation and overlap rules for goals.

A user's goals never share a calendar day: intervals are closed, so a goal
ending on the 10th and another starting on the 10th overlap.
"""
from __future__ import annotations

import logging
import re
from datetime import date
from typing import List, Optional, Sequence
from uuid import UUID

from yearpeer.services.dates import DateLike, as_calendar_day
from yearpeer.services.entities import GoalDraft, GoalRecord, SubmitMode
from yearpeer.services.repositories import GoalRepository
from yearpeer.services.results import (
    DateOrderError,
    Failure,
    FieldError,
    NotFoundError,
    OverlapError,
    PersistenceError,
    Result,
    Success,
)

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255
COLOR_PATTERN = re.compile(r"#[0-9A-Fa-f]{6}")
IMPACT_MIN = 1
IMPACT_MAX = 5


def validate_title(title: object) -> Optional[FieldError]:
    """Shared title rule for goals and tasks."""
    if not isinstance(title, str) or not title.strip():
        return FieldError("title", "Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        return FieldError("title", "Title is too long")
    return None


def validate_goal_fields(goal: GoalDraft) -> Optional[FieldError]:
    error = validate_title(goal.title)
    if error:
        return error
    if not isinstance(goal.color, str) or not COLOR_PATTERN.fullmatch(goal.color):
        return FieldError("color", "Invalid color format")
    impact = goal.impact
    if isinstance(impact, bool) or not isinstance(impact, int) or not IMPACT_MIN <= impact <= IMPACT_MAX:
        return FieldError("impact", f"Impact must be a whole number from {IMPACT_MIN} to {IMPACT_MAX}")
    return None


def validate_date_order(start: DateLike, end: DateLike) -> Optional[DateOrderError]:
    if as_calendar_day(end) < as_calendar_day(start):
        return DateOrderError()
    return None


def has_overlap(
    existing_goals: Sequence[GoalRecord],
    candidate_start: DateLike,
    candidate_end: DateLike,
    exclude_id: Optional[UUID] = None,
) -> bool:
    start = as_calendar_day(candidate_start)
    end = as_calendar_day(candidate_end)
    return any(
        goal.start_date <= end and goal.end_date >= start
        for goal in existing_goals
        if exclude_id is None or goal.id != exclude_id
    )


def submit_goal(
    repository: GoalRepository,
    user_id: UUID,
    candidate: GoalDraft,
    existing_goals: Sequence[GoalRecord],
    mode: SubmitMode = SubmitMode.CREATE,
    exclude_id: Optional[UUID] = None,
) -> Result[GoalRecord]:
    """Validate a goal create/update and persist it when every rule passes.

    ``existing_goals`` is the caller's snapshot of the user's goals; it only
    needs to cover the candidate's date range. During an update ``exclude_id``
    names the goal being edited so it does not collide with itself.
    """
    if mode == SubmitMode.UPDATE and exclude_id is None:
        raise ValueError("exclude_id is required when updating a goal")

    field_error = validate_goal_fields(candidate)
    if field_error:
        return _reject(user_id, field_error)

    try:
        if mode == SubmitMode.UPDATE and repository.get_goal(exclude_id, user_id) is None:
            return _reject(user_id, NotFoundError("Goal not found"))
    except PersistenceError as exc:
        return Failure(exc)

    order_error = validate_date_order(candidate.start_date, candidate.end_date)
    if order_error:
        return _reject(user_id, order_error)

    if has_overlap(existing_goals, candidate.start_date, candidate.end_date, exclude_id):
        return _reject(user_id, OverlapError())

    try:
        if mode == SubmitMode.CREATE:
            goal = repository.create_goal(user_id, candidate)
        else:
            goal = repository.update_goal(exclude_id, user_id, candidate)
    except (NotFoundError, PersistenceError) as exc:
        return Failure(exc)
    return Success(goal)


def delete_goal(repository: GoalRepository, user_id: UUID, goal_id: UUID) -> Result[None]:
    try:
        repository.delete_goal(goal_id, user_id)
    except (NotFoundError, PersistenceError) as exc:
        return Failure(exc)
    return Success(None)


def goal_status(goal: GoalRecord, today: Optional[date] = None) -> str:
    """Where a goal sits relative to today: upcoming, active or completed."""
    today = today or date.today()
    if today < goal.start_date:
        return "upcoming"
    if today > goal.end_date:
        return "completed"
    return "active"


def goals_active_on(goals: Sequence[GoalRecord], day: DateLike) -> List[GoalRecord]:
    target = as_calendar_day(day)
    return [goal for goal in goals if goal.start_date <= target <= goal.end_date]


def day_color(goals: Sequence[GoalRecord]) -> Optional[str]:
    """Background color for a calendar day: the first active goal wins."""
    if not goals:
        return None
    return goals[0].color


def _reject(user_id: UUID, error) -> Failure:
    logger.info("Goal rejected for user %s: %s", user_id, error.code)
    return Failure(error)
