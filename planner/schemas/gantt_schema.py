# planner/schemas/gantt_schema.py
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel

from planner.schemas.task_schema import TaskRead


class MonthGroupRead(BaseModel):
    label: str
    day_count: int
    start_day_index: int


class DayHeaderRead(BaseModel):
    index: int
    date: date
    day_of_month: int
    weekday: str
    is_weekend: bool
    is_today: bool


class GanttRow(BaseModel):
    task: TaskRead
    level: int
    offset_px: float
    width_px: float
    duration_days: int
    has_subtasks: bool
    expanded: bool
    assignee: Optional[str] = None
    predecessor_ids: List[int] = []


class GanttRead(BaseModel):
    project_id: int
    window_start: date
    window_end: date
    day_width: float
    total_days: int
    total_width_px: float
    today_scroll_px: Optional[float] = None
    months: List[MonthGroupRead]
    days: List[DayHeaderRead]
    weekend_indexes: List[int]
    rows: List[GanttRow]


class ReportRow(BaseModel):
    task_id: int
    title: str
    indented_title: str
    level: int
    start_date: date
    end_date: date
    status: str
    status_label: str
    progress: int
    assignee: Optional[str] = None
    description: Optional[str] = None


class ReportStatistics(BaseModel):
    total: int
    completed: int
    in_progress: int
    todo: int
    blocked: int
    average_progress: float
    completion_rate: float
    distribution: dict[str, float]


class ReportProject(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date


class ReportRead(BaseModel):
    project: ReportProject
    generated_at: datetime
    window_start: Optional[date] = None
    window_end: Optional[date] = None
    statistics: ReportStatistics
    rows: List[ReportRow]
    critical: List[ReportRow]
