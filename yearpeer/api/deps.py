"""Repository dependencies for route handlers."""
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from yearpeer.db.deps import get_db
from yearpeer.services.repositories import SqlGoalRepository, SqlTaskRepository


def get_goal_repository(db: Session = Depends(get_db)) -> SqlGoalRepository:
    return SqlGoalRepository(db)


def get_task_repository(db: Session = Depends(get_db)) -> SqlTaskRepository:
    return SqlTaskRepository(db)
