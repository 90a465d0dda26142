from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from planner import config
from planner.errors import NotFoundError, ValidationError
from planner.models.profile import Profile
from planner.models.project import Project
from planner.scheduling.hierarchy import flatten_tree
from planner.schemas.project_schema import ProjectCreate, ProjectUpdate
from planner.task import task_service

logger = logging.getLogger("planner.project")

FIRST_PROJECT_NAME = "My First Project"
FIRST_PROJECT_DESCRIPTION = "Welcome to your first project!"


def list_projects(db: Session, owner: Profile) -> List[Project]:
    return (
        db.query(Project)
        .filter(Project.owner_id == owner.id)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )


def get_project(db: Session, owner: Profile, project_id: int) -> Project:
    project = db.get(Project, project_id)
    # rows of other owners are invisible, same as missing ones
    if not project or project.owner_id != owner.id:
        raise NotFoundError("Project not found")
    return project


def create_project(db: Session, owner: Profile, data: ProjectCreate) -> Project:
    project = Project(
        owner_id=owner.id,
        name=data.name,
        description=data.description,
        start_date=data.start_date,
        end_date=data.end_date,
        color=data.color or config.DEFAULT_PROJECT_COLOR,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("project_created", extra={"project_id": project.id, "owner_id": owner.id})
    return project


def current_project(db: Session, owner: Profile, today: Optional[date] = None) -> Project:
    """Newest project of the owner; the first one is created when none exist."""
    projects = list_projects(db, owner)
    if projects:
        return projects[0]

    today = today or date.today()
    return create_project(
        db,
        owner,
        ProjectCreate(
            name=FIRST_PROJECT_NAME,
            description=FIRST_PROJECT_DESCRIPTION,
            start_date=today,
            end_date=today + timedelta(days=config.DEFAULT_PROJECT_DAYS),
            color=config.DEFAULT_PROJECT_COLOR,
        ),
    )


def update_project(db: Session, owner: Profile, project_id: int, data: ProjectUpdate) -> Project:
    project = get_project(db, owner, project_id)

    start = data.start_date if data.start_date is not None else project.start_date
    end = data.end_date if data.end_date is not None else project.end_date
    if end < start:
        raise ValidationError("end_date must be on or after start_date")

    # "is not None" so empty strings can still be saved
    if data.name is not None:
        project.name = data.name
    if data.description is not None:
        project.description = data.description
    if data.color is not None:
        project.color = data.color
    project.start_date = start
    project.end_date = end

    db.commit()
    db.refresh(project)
    return project


def delete_project(db: Session, owner: Profile, project_id: int) -> None:
    project = get_project(db, owner, project_id)
    # tasks go first, one by one, so subscribers hear about each of them
    forest = task_service.fetch_task_tree(db, project.id)
    task_service.delete_task_rows(db, [node.id for node, _ in flatten_tree(forest)])
    db.delete(project)
    db.commit()
    logger.info("project_deleted", extra={"project_id": project_id, "owner_id": owner.id})
