"""Schemas for goal endpoints."""
from __future__ import annotations

import datetime as dt
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from yearpeer.services.entities import GoalDraft, GoalRecord
from yearpeer.services.goal_rules import goal_status


class GoalPayload(BaseModel):
    """Body for creating or replacing a goal; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    title: str
    description: Optional[str] = None
    color: str
    impact: int
    start_date: dt.date
    end_date: dt.date

    @field_validator("title")
    @classmethod
    def trim_title(cls, value: str) -> str:
        return value.strip()

    @field_validator("description")
    @classmethod
    def blank_description_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    def to_draft(self) -> GoalDraft:
        return GoalDraft(
            title=self.title,
            description=self.description,
            color=self.color,
            impact=self.impact,
            start_date=self.start_date,
            end_date=self.end_date,
        )


class GoalTaskSummary(BaseModel):
    id: UUID
    title: str
    date: dt.date
    completed: bool


class GoalResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    color: str
    impact: int
    start_date: dt.date
    end_date: dt.date
    status: Literal["upcoming", "active", "completed"]
    tasks: List[GoalTaskSummary]

    @classmethod
    def from_record(cls, record: GoalRecord, today: Optional[dt.date] = None) -> "GoalResponse":
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            color=record.color,
            impact=record.impact,
            start_date=record.start_date,
            end_date=record.end_date,
            status=goal_status(record, today),
            tasks=[
                GoalTaskSummary(id=task.id, title=task.title, date=task.date, completed=task.completed)
                for task in record.tasks
            ],
        )


class GoalListResponse(BaseModel):
    year: int
    goals: List[GoalResponse]
    request_id: str


class GoalEnvelope(BaseModel):
    goal: GoalResponse
    request_id: str
