"""SQLAlchemy-backed goal and task repositories.

Every query is scoped by ``user_id``; a row owned by someone else behaves
exactly like a missing row. Storage failures are rolled back, logged and
re-raised as ``PersistenceError`` so nothing driver-specific leaks upward.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Iterator, List, Optional, Protocol
from uuid import UUID

from sqlalchemy import asc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from yearpeer.db.models.goal import Goal
from yearpeer.db.models.task import Task
from yearpeer.services.entities import (
    GoalDraft,
    GoalRecord,
    GoalTaskBrief,
    TaskDraft,
    TaskGoalBrief,
    TaskRecord,
)
from yearpeer.services.results import NotFoundError, PersistenceError
from yearpeer.services.user_service import get_or_create_user

logger = logging.getLogger(__name__)


class GoalRepository(Protocol):
    def list_goals_for_user(
        self, user_id: UUID, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[GoalRecord]: ...

    def get_goal(self, goal_id: UUID, user_id: UUID) -> Optional[GoalRecord]: ...

    def create_goal(self, user_id: UUID, data: GoalDraft) -> GoalRecord: ...

    def update_goal(self, goal_id: UUID, user_id: UUID, data: GoalDraft) -> GoalRecord: ...

    def delete_goal(self, goal_id: UUID, user_id: UUID) -> None: ...


class TaskRepository(Protocol):
    def list_tasks_for_user_on_date(self, user_id: UUID, day: date) -> List[TaskRecord]: ...

    def list_tasks_for_user_in_range(self, user_id: UUID, start: date, end: date) -> List[TaskRecord]: ...

    def get_task(self, task_id: UUID, user_id: UUID) -> Optional[TaskRecord]: ...

    def create_task(self, user_id: UUID, data: TaskDraft) -> TaskRecord: ...

    def update_task(self, task_id: UUID, user_id: UUID, data: TaskDraft) -> TaskRecord: ...

    def set_task_completed(self, task_id: UUID, user_id: UUID, completed: bool) -> TaskRecord: ...

    def delete_task(self, task_id: UUID, user_id: UUID) -> None: ...


@contextmanager
def _storage_guard(db: Session, message: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Storage failure: %s", message)
        raise PersistenceError(message) from exc


def goal_to_record(goal: Goal) -> GoalRecord:
    return GoalRecord(
        id=goal.id,
        user_id=goal.user_id,
        title=goal.title,
        description=goal.description,
        color=goal.color,
        impact=goal.impact,
        start_date=goal.start_date,
        end_date=goal.end_date,
        tasks=tuple(
            GoalTaskBrief(id=task.id, title=task.title, date=task.date, completed=bool(task.completed))
            for task in goal.tasks
        ),
    )


def task_to_record(task: Task) -> TaskRecord:
    goal = task.goal
    return TaskRecord(
        id=task.id,
        user_id=task.user_id,
        title=task.title,
        description=task.description,
        date=task.date,
        goal_id=task.goal_id,
        completed=bool(task.completed),
        completed_at=task.completed_at,
        goal=TaskGoalBrief(id=goal.id, title=goal.title, color=goal.color) if goal else None,
    )


class SqlGoalRepository:
    def __init__(self, db: Session):
        self.db = db

    def _find(self, goal_id: UUID, user_id: UUID) -> Optional[Goal]:
        return (
            self.db.query(Goal)
            .options(selectinload(Goal.tasks))
            .filter(Goal.id == goal_id, Goal.user_id == user_id)
            .one_or_none()
        )

    def list_goals_for_user(
        self, user_id: UUID, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[GoalRecord]:
        """Goals whose closed interval intersects ``[start, end]``; either bound may be open."""
        with _storage_guard(self.db, "Failed to load goals"):
            query = self.db.query(Goal).options(selectinload(Goal.tasks)).filter(Goal.user_id == user_id)
            if end is not None:
                query = query.filter(Goal.start_date <= end)
            if start is not None:
                query = query.filter(Goal.end_date >= start)
            goals = query.order_by(asc(Goal.start_date)).all()
        return [goal_to_record(goal) for goal in goals]

    def get_goal(self, goal_id: UUID, user_id: UUID) -> Optional[GoalRecord]:
        with _storage_guard(self.db, "Failed to load goal"):
            goal = self._find(goal_id, user_id)
        return goal_to_record(goal) if goal else None

    def create_goal(self, user_id: UUID, data: GoalDraft) -> GoalRecord:
        with _storage_guard(self.db, "Failed to create goal"):
            get_or_create_user(self.db, user_id)
            goal = Goal(
                user_id=user_id,
                title=data.title,
                description=data.description,
                color=data.color,
                impact=data.impact,
                start_date=data.start_date,
                end_date=data.end_date,
            )
            self.db.add(goal)
            self.db.commit()
            stored = self._find(goal.id, user_id)
        logger.info("Goal %s created", goal.id)
        return goal_to_record(stored)

    def update_goal(self, goal_id: UUID, user_id: UUID, data: GoalDraft) -> GoalRecord:
        with _storage_guard(self.db, "Failed to update goal"):
            goal = self._find(goal_id, user_id)
            if not goal:
                raise NotFoundError("Goal not found")
            goal.title = data.title
            goal.description = data.description
            goal.color = data.color
            goal.impact = data.impact
            goal.start_date = data.start_date
            goal.end_date = data.end_date
            self.db.commit()
            stored = self._find(goal_id, user_id)
        logger.info("Goal %s updated", goal_id)
        return goal_to_record(stored)

    def delete_goal(self, goal_id: UUID, user_id: UUID) -> None:
        with _storage_guard(self.db, "Failed to delete goal"):
            goal = self._find(goal_id, user_id)
            if not goal:
                raise NotFoundError("Goal not found")
            for task in goal.tasks:
                task.goal_id = None
            self.db.delete(goal)
            self.db.commit()
        logger.info("Goal %s deleted", goal_id)


class SqlTaskRepository:
    def __init__(self, db: Session):
        self.db = db

    def _find(self, task_id: UUID, user_id: UUID) -> Optional[Task]:
        return (
            self.db.query(Task)
            .options(selectinload(Task.goal))
            .filter(Task.id == task_id, Task.user_id == user_id)
            .one_or_none()
        )

    def _check_goal_owner(self, goal_id: Optional[UUID], user_id: UUID) -> None:
        if goal_id is None:
            return
        owned = self.db.query(Goal.id).filter(Goal.id == goal_id, Goal.user_id == user_id).first()
        if not owned:
            raise NotFoundError("Goal not found")

    def list_tasks_for_user_on_date(self, user_id: UUID, day: date) -> List[TaskRecord]:
        return self.list_tasks_for_user_in_range(user_id, day, day)

    def list_tasks_for_user_in_range(self, user_id: UUID, start: date, end: date) -> List[TaskRecord]:
        with _storage_guard(self.db, "Failed to load tasks"):
            tasks = (
                self.db.query(Task)
                .options(selectinload(Task.goal))
                .filter(Task.user_id == user_id, Task.date >= start, Task.date <= end)
                .order_by(asc(Task.date), asc(Task.created_at))
                .all()
            )
        return [task_to_record(task) for task in tasks]

    def get_task(self, task_id: UUID, user_id: UUID) -> Optional[TaskRecord]:
        with _storage_guard(self.db, "Failed to load task"):
            task = self._find(task_id, user_id)
        return task_to_record(task) if task else None

    def create_task(self, user_id: UUID, data: TaskDraft) -> TaskRecord:
        with _storage_guard(self.db, "Failed to create task"):
            self._check_goal_owner(data.goal_id, user_id)
            get_or_create_user(self.db, user_id)
            task = Task(
                user_id=user_id,
                goal_id=data.goal_id,
                title=data.title,
                description=data.description,
                date=data.date,
                completed=data.completed,
                completed_at=datetime.now(timezone.utc) if data.completed else None,
            )
            self.db.add(task)
            self.db.commit()
            stored = self._find(task.id, user_id)
        logger.info("Task %s created for %s", task.id, data.date.isoformat())
        return task_to_record(stored)

    def update_task(self, task_id: UUID, user_id: UUID, data: TaskDraft) -> TaskRecord:
        with _storage_guard(self.db, "Failed to update task"):
            task = self._find(task_id, user_id)
            if not task:
                raise NotFoundError("Task not found")
            self._check_goal_owner(data.goal_id, user_id)
            task.title = data.title
            task.description = data.description
            task.date = data.date
            task.goal_id = data.goal_id
            _apply_completion(task, data.completed)
            self.db.commit()
            stored = self._find(task_id, user_id)
        logger.info("Task %s updated", task_id)
        return task_to_record(stored)

    def set_task_completed(self, task_id: UUID, user_id: UUID, completed: bool) -> TaskRecord:
        with _storage_guard(self.db, "Failed to update task"):
            task = self._find(task_id, user_id)
            if not task:
                raise NotFoundError("Task not found")
            _apply_completion(task, completed)
            self.db.commit()
            stored = self._find(task_id, user_id)
        return task_to_record(stored)

    def delete_task(self, task_id: UUID, user_id: UUID) -> None:
        with _storage_guard(self.db, "Failed to delete task"):
            task = self._find(task_id, user_id)
            if not task:
                raise NotFoundError("Task not found")
            self.db.delete(task)
            self.db.commit()
        logger.info("Task %s deleted", task_id)


def _apply_completion(task: Task, completed: bool) -> None:
    if bool(task.completed) == completed:
        return
    task.completed = completed
    task.completed_at = datetime.now(timezone.utc) if completed else None
