import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from planner import config
from planner.database import get_db
from planner.errors import PlannerError, as_http_error
from planner.export.report import build_report
from planner.gantt.gantt_service import build_gantt, project_timeline
from planner.models.profile import Profile
from planner.profile.profile_router import get_current_profile
from planner.schemas.gantt_schema import GanttRead, ReportRead
from planner.task import task_service

logger = logging.getLogger("planner.gantt")

router = APIRouter(prefix="/projects", tags=["gantt"])


@router.get("/{project_id}/gantt", response_model=GanttRead)
def get_gantt(
    project_id: int,
    day_width: float = Query(config.DEFAULT_DAY_WIDTH, gt=0),
    collapsed: Optional[List[int]] = Query(None),
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        project = task_service.owned_project(db, profile, project_id)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "gantt_failed", project_id=project_id)

    forest = task_service.fetch_task_tree(db, project.id)
    return build_gantt(project, forest, day_width=day_width, collapsed=collapsed)


@router.get("/{project_id}/report", response_model=ReportRead)
def get_report(
    project_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """Statistics and flattened rows for the analysis report exporter."""
    try:
        project = task_service.owned_project(db, profile, project_id)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "report_failed", project_id=project_id)

    forest = task_service.fetch_task_tree(db, project.id)
    timeline = project_timeline(project, forest)
    report = build_report(project, forest, timeline.window_start, timeline.window_end)
    logger.info("report_built", extra={"project_id": project.id, "tasks": report["statistics"]["total"]})
    return report
