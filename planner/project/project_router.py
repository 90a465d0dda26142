# planner/project/project_router.py

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from planner.database import get_db
from planner.errors import PlannerError, as_http_error
from planner.models.profile import Profile
from planner.profile.profile_router import get_current_profile
from planner.project import project_service
from planner.schemas.project_schema import ProjectCreate, ProjectUpdate, ProjectRead

logger = logging.getLogger("planner.project")

router = APIRouter(prefix="/projects", tags=["projects"])


# ==========================
#  LIST PROJECTS (newest first)
# ==========================
@router.get("/", response_model=list[ProjectRead])
def get_all_projects(
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    return project_service.list_projects(db, profile)


# ==========================
#  CURRENT PROJECT
# ==========================
@router.get("/current", response_model=ProjectRead)
def get_current_project(
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    return project_service.current_project(db, profile)


# ==========================
#  CREATE PROJECT
# ==========================
@router.post("/", response_model=ProjectRead, status_code=201)
def create_project(
    data: ProjectCreate,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    return project_service.create_project(db, profile, data)


# ==========================
#  GET PROJECT BY ID
# ==========================
@router.get("/{project_id}", response_model=ProjectRead)
def get_project(
    project_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        return project_service.get_project(db, profile, project_id)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "project_get_failed", project_id=project_id)


# ==========================
#  UPDATE PROJECT (PATCH)
# ==========================
@router.patch("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    data: ProjectUpdate,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        return project_service.update_project(db, profile, project_id, data)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "project_update_failed", db=db, project_id=project_id)


# ==========================
#  DELETE PROJECT
# ==========================
@router.delete("/{project_id}", status_code=204)
def delete_project(
    project_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        project_service.delete_project(db, profile, project_id)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "project_delete_failed", db=db, project_id=project_id)
    return
