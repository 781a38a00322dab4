"""Schemas for task endpoints."""
from __future__ import annotations

import datetime as dt
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from yearpeer.services.entities import TaskDraft, TaskRecord


class TaskPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str
    description: Optional[str] = None
    date: dt.date
    goal_id: Optional[UUID] = None
    completed: bool = False

    @field_validator("title")
    @classmethod
    def trim_title(cls, value: str) -> str:
        return value.strip()

    def to_draft(self) -> TaskDraft:
        return TaskDraft(
            title=self.title,
            description=self.description,
            date=self.date,
            goal_id=self.goal_id,
            completed=self.completed,
        )


class TaskPatch(BaseModel):
    """Partial update; only the fields present in the body change."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[dt.date] = None
    goal_id: Optional[UUID] = None
    completed: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def trim_title(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else None

    @field_validator("date", "completed")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    def apply_to(self, draft: TaskDraft) -> TaskDraft:
        changes = self.model_dump(exclude_unset=True)
        return TaskDraft(
            title=changes.get("title", draft.title),
            description=changes.get("description", draft.description),
            date=changes.get("date", draft.date),
            goal_id=changes.get("goal_id", draft.goal_id),
            completed=changes.get("completed", draft.completed),
        )


class TaskCompletionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    completed: bool


class TaskGoalSummary(BaseModel):
    id: UUID
    title: str
    color: str


class TaskResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    date: dt.date
    goal_id: Optional[UUID]
    goal: Optional[TaskGoalSummary]
    completed: bool
    completed_at: Optional[dt.datetime]

    @classmethod
    def from_record(cls, record: TaskRecord) -> "TaskResponse":
        goal = record.goal
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            date=record.date,
            goal_id=record.goal_id,
            goal=TaskGoalSummary(id=goal.id, title=goal.title, color=goal.color) if goal else None,
            completed=record.completed,
            completed_at=record.completed_at,
        )


class TaskListResponse(BaseModel):
    date: dt.date
    tasks: List[TaskResponse]
    request_id: str


class TaskRangeResponse(BaseModel):
    start: dt.date
    end: dt.date
    days: Dict[str, List[TaskResponse]]
    request_id: str


class TaskEnvelope(BaseModel):
    task: TaskResponse
    request_id: str
