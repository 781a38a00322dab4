"""Assemble the data behind the year and month calendar grids."""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from yearpeer.services.dates import generate_month_grid, is_today
from yearpeer.services.entities import GoalRecord, TaskRecord
from yearpeer.services.goal_rules import day_color, goals_active_on

MONTH_NAMES: Tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
WEEKDAY_NAMES: Tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass(frozen=True)
class DayCell:
    date: date
    is_today: bool
    goal_ids: Tuple[UUID, ...]
    color: Optional[str]
    task_count: int
    completed_count: int


@dataclass(frozen=True)
class MonthView:
    year: int
    month: int
    name: str
    cells: Tuple[Optional[DayCell], ...]


def group_tasks_by_day(tasks: Sequence[TaskRecord]) -> Dict[str, List[TaskRecord]]:
    """Bucket tasks under their ``YYYY-MM-DD`` key, keeping input order."""
    grouped: Dict[str, List[TaskRecord]] = defaultdict(list)
    for task in tasks:
        grouped[task.date.isoformat()].append(task)
    return dict(grouped)


def build_month_view(
    month: int,
    year: int,
    goals: Sequence[GoalRecord],
    tasks: Sequence[TaskRecord],
    today: Optional[date] = None,
) -> MonthView:
    today = today or date.today()
    by_day = group_tasks_by_day(tasks)

    cells: List[Optional[DayCell]] = []
    for day_number in generate_month_grid(month, year):
        if day_number is None:
            cells.append(None)
            continue
        current = date(year, month, day_number)
        active = goals_active_on(goals, current)
        day_tasks = by_day.get(current.isoformat(), [])
        cells.append(
            DayCell(
                date=current,
                is_today=is_today(current, today),
                goal_ids=tuple(goal.id for goal in active),
                color=day_color(active),
                task_count=len(day_tasks),
                completed_count=sum(1 for task in day_tasks if task.completed),
            )
        )

    return MonthView(year=year, month=month, name=MONTH_NAMES[month - 1], cells=tuple(cells))


def build_year_view(
    year: int,
    goals: Sequence[GoalRecord],
    tasks: Sequence[TaskRecord],
    today: Optional[date] = None,
) -> List[MonthView]:
    return [build_month_view(month, year, goals, tasks, today) for month in range(1, 13)]
