"""Data handed to the chart/report exporters: flattened rows and statistics.

Only the data is produced here; turning it into PDF or images is the
exporter's job.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from planner.models.task import TaskStatus
from planner.scheduling.hierarchy import TaskNode, iter_nodes

CRITICAL_PROGRESS_THRESHOLD = 50


@dataclass
class ExportRow:
    task_id: int
    title: str
    level: int
    start_date: date
    end_date: date
    status: str
    progress: int
    assignee: Optional[str] = None
    description: Optional[str] = None

    @property
    def indented_title(self) -> str:
        return "  " * self.level + self.title

    @property
    def status_label(self) -> str:
        return self.status.replace("_", " ")


@dataclass
class TaskStatistics:
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    todo: int = 0
    blocked: int = 0
    average_progress: float = 0.0
    completion_rate: float = 0.0
    distribution: Dict[str, float] = field(default_factory=dict)


def flatten_for_export(forest: Iterable[TaskNode]) -> List[ExportRow]:
    rows = []
    for node, level in iter_nodes(forest):
        assignee = node.assignee.display_name if node.assignee is not None else None
        rows.append(
            ExportRow(
                task_id=node.id,
                title=node.title,
                level=level,
                start_date=node.start_date,
                end_date=node.end_date,
                status=node.status,
                progress=node.progress or 0,
                assignee=assignee,
                description=node.description,
            )
        )
    return rows


def compute_statistics(rows: List[ExportRow]) -> TaskStatistics:
    total = len(rows)
    counts = {status.value: 0 for status in TaskStatus}
    for row in rows:
        counts[row.status] = counts.get(row.status, 0) + 1

    if total == 0:
        return TaskStatistics(distribution={status: 0.0 for status in counts})

    return TaskStatistics(
        total=total,
        completed=counts[TaskStatus.DONE.value],
        in_progress=counts[TaskStatus.IN_PROGRESS.value],
        todo=counts[TaskStatus.TODO.value],
        blocked=counts[TaskStatus.BLOCKED.value],
        average_progress=round(sum(row.progress for row in rows) / total, 1),
        completion_rate=round(counts[TaskStatus.DONE.value] / total * 100, 1),
        distribution={status: round(count / total * 100, 1) for status, count in counts.items()},
    )


def critical_rows(rows: List[ExportRow]) -> List[ExportRow]:
    """Tasks needing attention: blocked, or less than half done."""
    return [
        row
        for row in rows
        if row.status == TaskStatus.BLOCKED.value or row.progress < CRITICAL_PROGRESS_THRESHOLD
    ]


def build_report(
    project: Any,
    forest: Iterable[TaskNode],
    window_start: Optional[date] = None,
    window_end: Optional[date] = None,
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    rows = flatten_for_export(forest)
    return {
        "project": {
            "id": project.id,
            "name": project.name,
            "description": project.description,
            "start_date": project.start_date,
            "end_date": project.end_date,
        },
        "generated_at": generated_at or datetime.utcnow(),
        "window_start": window_start,
        "window_end": window_end,
        "statistics": asdict(compute_statistics(rows)),
        "rows": [_row_dict(row) for row in rows],
        "critical": [_row_dict(row) for row in critical_rows(rows)],
    }


def _row_dict(row: ExportRow) -> Dict[str, Any]:
    data = asdict(row)
    data["indented_title"] = row.indented_title
    data["status_label"] = row.status_label
    return data
