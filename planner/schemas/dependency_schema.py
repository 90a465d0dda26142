# planner/schemas/dependency_schema.py
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from planner.models.task_dependency import DependencyType


class DependencyCreate(BaseModel):
    predecessor_id: int
    type: DependencyType = DependencyType.FINISH_TO_START


class DependencyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    predecessor_id: int
    successor_id: int
    type: DependencyType
    created_at: datetime
