"""Plain data carriers passed between the HTTP shell, the rules and the repositories."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple
from uuid import UUID


class SubmitMode(str, Enum):
    CREATE = "create"
    UPDATE = "update"


@dataclass(frozen=True)
class GoalDraft:
    """Goal fields as submitted by a user, before validation."""

    title: str
    color: str
    impact: int
    start_date: date
    end_date: date
    description: Optional[str] = None


@dataclass(frozen=True)
class GoalTaskBrief:
    id: UUID
    title: str
    date: date
    completed: bool


@dataclass(frozen=True)
class GoalRecord:
    """A stored goal together with the tasks linked to it."""

    id: UUID
    user_id: UUID
    title: str
    color: str
    impact: int
    start_date: date
    end_date: date
    description: Optional[str] = None
    tasks: Tuple[GoalTaskBrief, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TaskDraft:
    """Task fields as submitted by a user, before validation."""

    title: str
    date: date
    description: Optional[str] = None
    goal_id: Optional[UUID] = None
    completed: bool = False


@dataclass(frozen=True)
class TaskGoalBrief:
    id: UUID
    title: str
    color: str


@dataclass(frozen=True)
class TaskRecord:
    """A stored task together with a summary of its goal, if linked."""

    id: UUID
    user_id: UUID
    title: str
    date: date
    completed: bool
    description: Optional[str] = None
    goal_id: Optional[UUID] = None
    completed_at: Optional[datetime] = None
    goal: Optional[TaskGoalBrief] = None

    def to_draft(self) -> TaskDraft:
        return TaskDraft(
            title=self.title,
            date=self.date,
            description=self.description,
            goal_id=self.goal_id,
            completed=self.completed,
        )
