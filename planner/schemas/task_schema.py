# planner/schemas/task_schema.py

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from planner.models.task import TaskStatus
from planner.schemas.dependency_schema import DependencyRead
from planner.schemas.profile_schema import ProfileRead
from planner.scheduling.drag import DragMode


# --------- Base schema (common fields) ----------
class TaskBase(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    start_date: date
    end_date: date
    progress: int = Field(default=0, ge=0, le=100)
    status: TaskStatus = TaskStatus.TODO
    assignee_id: Optional[int] = None
    color: Optional[str] = None


# --------- For CREATE ----------
class TaskCreate(TaskBase):
    parent_id: Optional[int] = None
    # next index among siblings when left out
    order_index: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


# --------- For UPDATE (PATCH) ----------
class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    status: Optional[TaskStatus] = None
    assignee_id: Optional[int] = None
    parent_id: Optional[int] = None
    order_index: Optional[int] = Field(default=None, ge=0)
    color: Optional[str] = None


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskOrderUpdate(BaseModel):
    order_index: int = Field(ge=0)


# --------- For READ (responses) ----------
class TaskRead(TaskBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    parent_id: Optional[int] = None
    order_index: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class TaskTreeRead(TaskRead):
    subtasks: List["TaskTreeRead"] = []
    dependencies: List[DependencyRead] = []
    assignee: Optional[ProfileRead] = None
    orphaned: bool = False


TaskTreeRead.model_rebuild()


# --------- Drag ----------
class DragRequest(BaseModel):
    mode: DragMode
    delta_px: float
    day_width: float = Field(gt=0)
    window_start: date
    # intermediate pointer moves preview only; release sends commit=true
    commit: bool = False


class DragResult(BaseModel):
    task_id: int
    accepted: bool
    committed: bool
    start_date: date
    end_date: date
