from yearpeer.db.base import Base
from yearpeer.db import models  # noqa: F401  ensure models are loaded


def test_metadata_contains_core_tables() -> None:
    table_names = set(Base.metadata.tables.keys())

    assert {"users", "goals", "tasks"}.issubset(table_names)


def test_task_goal_link_is_nullable_and_detaches_on_delete() -> None:
    goal_id = Base.metadata.tables["tasks"].c.goal_id
    (foreign_key,) = goal_id.foreign_keys

    assert goal_id.nullable
    assert foreign_key.ondelete == "SET NULL"
