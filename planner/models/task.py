# planner/models/task.py

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from planner.database import Base


class TaskStatus(str, enum.Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    BLOCKED = "blocked"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint("progress >= 0 AND progress <= 100", name="task_progress_range"),
        CheckConstraint("end_date >= start_date", name="task_dates_ordered"),
        CheckConstraint(
            "status IN ('todo', 'in_progress', 'done', 'blocked')",
            name="task_status_values",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    # null = root task
    parent_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True, index=True)

    title = Column(String, nullable=False)
    description = Column(String, nullable=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    progress = Column(Integer, default=0, nullable=False)
    status = Column(String, default=TaskStatus.TODO.value, nullable=False)

    assignee_id = Column(Integer, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    order_index = Column(Integer, default=0, nullable=False)
    color = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="tasks")
    assignee = relationship("Profile", lazy="joined")
