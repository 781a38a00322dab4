from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from yearpeer.db.base import Base
from yearpeer.db import models  # noqa: F401  ensure models are loaded
from yearpeer.db.deps import get_db
from yearpeer.main import app
from yearpeer.services.entities import GoalDraft, GoalRecord, TaskDraft, TaskRecord
from yearpeer.services.results import NotFoundError, PersistenceError


class FakeGoalRepository:
    """In-memory stand-in for the SQL goal repository."""

    def __init__(self):
        self.goals: Dict[UUID, GoalRecord] = {}

    def list_goals_for_user(self, user_id, start=None, end=None) -> List[GoalRecord]:
        return sorted(
            (
                goal
                for goal in self.goals.values()
                if goal.user_id == user_id
                and (end is None or goal.start_date <= end)
                and (start is None or goal.end_date >= start)
            ),
            key=lambda goal: goal.start_date,
        )

    def get_goal(self, goal_id, user_id) -> Optional[GoalRecord]:
        goal = self.goals.get(goal_id)
        return goal if goal and goal.user_id == user_id else None

    def create_goal(self, user_id, data: GoalDraft) -> GoalRecord:
        record = GoalRecord(
            id=uuid4(),
            user_id=user_id,
            title=data.title,
            description=data.description,
            color=data.color,
            impact=data.impact,
            start_date=data.start_date,
            end_date=data.end_date,
        )
        self.goals[record.id] = record
        return record

    def update_goal(self, goal_id, user_id, data: GoalDraft) -> GoalRecord:
        current = self.get_goal(goal_id, user_id)
        if current is None:
            raise NotFoundError("Goal not found")
        record = replace(
            current,
            title=data.title,
            description=data.description,
            color=data.color,
            impact=data.impact,
            start_date=data.start_date,
            end_date=data.end_date,
        )
        self.goals[goal_id] = record
        return record

    def delete_goal(self, goal_id, user_id) -> None:
        if self.get_goal(goal_id, user_id) is None:
            raise NotFoundError("Goal not found")
        del self.goals[goal_id]


class FakeTaskRepository:
    """In-memory stand-in for the SQL task repository."""

    def __init__(self):
        self.tasks: Dict[UUID, TaskRecord] = {}

    def list_tasks_for_user_on_date(self, user_id, day: date) -> List[TaskRecord]:
        return self.list_tasks_for_user_in_range(user_id, day, day)

    def list_tasks_for_user_in_range(self, user_id, start: date, end: date) -> List[TaskRecord]:
        return [
            task for task in self.tasks.values() if task.user_id == user_id and start <= task.date <= end
        ]

    def get_task(self, task_id, user_id) -> Optional[TaskRecord]:
        task = self.tasks.get(task_id)
        return task if task and task.user_id == user_id else None

    def create_task(self, user_id, data: TaskDraft) -> TaskRecord:
        record = TaskRecord(
            id=uuid4(),
            user_id=user_id,
            title=data.title,
            description=data.description,
            date=data.date,
            goal_id=data.goal_id,
            completed=data.completed,
        )
        self.tasks[record.id] = record
        return record

    def update_task(self, task_id, user_id, data: TaskDraft) -> TaskRecord:
        current = self.get_task(task_id, user_id)
        if current is None:
            raise NotFoundError("Task not found")
        record = replace(
            current,
            title=data.title,
            description=data.description,
            date=data.date,
            goal_id=data.goal_id,
            completed=data.completed,
        )
        self.tasks[task_id] = record
        return record

    def set_task_completed(self, task_id, user_id, completed: bool) -> TaskRecord:
        current = self.get_task(task_id, user_id)
        if current is None:
            raise NotFoundError("Task not found")
        record = replace(current, completed=completed)
        self.tasks[task_id] = record
        return record

    def delete_task(self, task_id, user_id) -> None:
        if self.get_task(task_id, user_id) is None:
            raise NotFoundError("Task not found")
        del self.tasks[task_id]


class BrokenGoalRepository(FakeGoalRepository):
    def create_goal(self, user_id, data):
        raise PersistenceError("Failed to create goal")


class BrokenTaskRepository(FakeTaskRepository):
    def create_task(self, user_id, data):
        raise PersistenceError("Failed to create task")


@pytest.fixture()
def goal_repo() -> FakeGoalRepository:
    return FakeGoalRepository()


@pytest.fixture()
def task_repo() -> FakeTaskRepository:
    return FakeTaskRepository()


@pytest.fixture()
def broken_goal_repo() -> BrokenGoalRepository:
    return BrokenGoalRepository()


@pytest.fixture()
def broken_task_repo() -> BrokenTaskRepository:
    return BrokenTaskRepository()


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()
    engine.dispose()
