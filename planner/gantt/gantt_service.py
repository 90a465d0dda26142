"""Chart layout for a project: timeline window, headers and one row per visible task."""

from __future__ import annotations

from datetime import date
from typing import Any, Collection, Dict, Iterable, Iterator, List, Optional, Tuple

from planner import config
from planner.scheduling.hierarchy import TaskNode, collect_parent_ids, date_extent
from planner.scheduling.timeline import Timeline, clamp_day_width
from planner.schemas.task_schema import TaskRead


def project_timeline(project: Any, forest: List[TaskNode], day_width: float = config.DEFAULT_DAY_WIDTH) -> Timeline:
    return Timeline.for_project(
        project.start_date,
        project.end_date,
        extent=date_extent(forest),
        day_width=clamp_day_width(day_width),
    )


def visible_nodes(forest: Iterable[TaskNode], expanded: Collection[Any]) -> Iterator[Tuple[TaskNode, int]]:
    """Pre-order walk that does not descend into collapsed tasks."""
    stack = [(node, 0) for node in reversed(list(forest))]
    while stack:
        node, level = stack.pop()
        yield node, level
        if node.subtasks and node.id in expanded:
            stack.extend((child, level + 1) for child in reversed(node.subtasks))


def build_gantt(
    project: Any,
    forest: List[TaskNode],
    day_width: float = config.DEFAULT_DAY_WIDTH,
    collapsed: Optional[Collection[int]] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    today = today or date.today()
    timeline = project_timeline(project, forest, day_width)
    # every task with subtasks starts expanded
    expanded = collect_parent_ids(forest) - set(collapsed or ())

    rows = []
    for node, level in visible_nodes(forest, expanded):
        bar = timeline.bar(node.start_date, node.end_date)
        rows.append(
            {
                "task": TaskRead.model_validate(node.task),
                "level": level,
                "offset_px": bar.offset_px,
                "width_px": bar.width_px,
                "duration_days": bar.duration_days,
                "has_subtasks": node.has_subtasks,
                "expanded": node.id in expanded,
                "assignee": node.assignee.display_name if node.assignee is not None else None,
                "predecessor_ids": [dep.predecessor_id for dep in node.dependencies],
            }
        )

    return {
        "project_id": project.id,
        "window_start": timeline.window_start,
        "window_end": timeline.window_end,
        "day_width": timeline.day_width,
        "total_days": timeline.total_days,
        "total_width_px": timeline.total_width_px,
        "today_scroll_px": timeline.today_scroll_offset(today),
        "months": [group._asdict() for group in timeline.month_header_groups()],
        "days": [header._asdict() for header in timeline.day_headers(today)],
        "weekend_indexes": timeline.weekend_indexes(),
        "rows": rows,
    }
