"""Schemas for calendar views."""
from __future__ import annotations

import datetime as dt
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from yearpeer.services.calendar_view import WEEKDAY_NAMES, MonthView


class DayCellResponse(BaseModel):
    date: dt.date
    is_today: bool
    goal_ids: List[UUID]
    color: Optional[str]
    task_count: int
    completed_count: int


class MonthViewResponse(BaseModel):
    year: int
    month: int
    name: str
    weekdays: List[str]
    cells: List[Optional[DayCellResponse]]

    @classmethod
    def from_view(cls, view: MonthView) -> "MonthViewResponse":
        return cls(
            year=view.year,
            month=view.month,
            name=view.name,
            weekdays=list(WEEKDAY_NAMES),
            cells=[
                DayCellResponse(
                    date=cell.date,
                    is_today=cell.is_today,
                    goal_ids=list(cell.goal_ids),
                    color=cell.color,
                    task_count=cell.task_count,
                    completed_count=cell.completed_count,
                )
                if cell
                else None
                for cell in view.cells
            ],
        )


class MonthCalendarResponse(BaseModel):
    month: MonthViewResponse
    request_id: str


class YearCalendarResponse(BaseModel):
    year: int
    months: List[MonthViewResponse]
    request_id: str
