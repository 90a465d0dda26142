import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from planner.database import get_db
from planner.errors import PlannerError, as_http_error
from planner.models.profile import Profile
from planner.profile.profile_router import get_current_profile
from planner.schemas.dependency_schema import DependencyCreate, DependencyRead
from planner.task import task_service

logger = logging.getLogger("planner.task")

router = APIRouter(tags=["dependencies"])


@router.get("/projects/{project_id}/dependencies", response_model=list[DependencyRead])
def list_dependencies(
    project_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        task_service.owned_project(db, profile, project_id)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "dependency_list_failed", project_id=project_id)
    return task_service.list_dependencies(db, project_id)


@router.post("/tasks/{task_id}/dependencies", response_model=DependencyRead, status_code=201)
def add_dependency(
    task_id: int,
    data: DependencyCreate,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        return task_service.add_dependency(db, profile, task_id, data)
    except PlannerError as exc:
        raise as_http_error(
            exc,
            logger,
            "dependency_add_failed",
            db=db,
            successor_id=task_id,
            predecessor_id=data.predecessor_id,
        )


@router.delete("/tasks/{task_id}/dependencies/{predecessor_id}", status_code=204)
def remove_dependency(
    task_id: int,
    predecessor_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        task_service.remove_dependency(db, profile, task_id, predecessor_id)
    except PlannerError as exc:
        raise as_http_error(
            exc, logger, "dependency_remove_failed", db=db, successor_id=task_id, predecessor_id=predecessor_id
        )
    return
