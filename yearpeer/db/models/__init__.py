"""ORM models exposed for metadata discovery."""
from yearpeer.db.models.goal import Goal
from yearpeer.db.models.task import Task
from yearpeer.db.models.user import User

__all__ = [
    "Goal",
    "Task",
    "User",
]
