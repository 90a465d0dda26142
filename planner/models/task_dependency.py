# planner/models/task_dependency.py
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from planner.database import Base


class DependencyType(str, enum.Enum):
    FINISH_TO_START = "finish_to_start"
    START_TO_START = "start_to_start"
    FINISH_TO_FINISH = "finish_to_finish"
    START_TO_FINISH = "start_to_finish"


class TaskDependency(Base):
    __tablename__ = "task_dependencies"
    __table_args__ = (
        CheckConstraint("predecessor_id != successor_id", name="no_self_dependency"),
        # one edge per ordered pair, whatever its type
        UniqueConstraint("predecessor_id", "successor_id", name="uq_dependency_pair"),
    )

    id = Column(Integer, primary_key=True, index=True)

    predecessor_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    successor_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(String, nullable=False, default=DependencyType.FINISH_TO_START.value)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
