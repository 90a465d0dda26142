import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from planner.database import get_db
from planner.errors import PlannerError, as_http_error
from planner.models.profile import Profile
from planner.profile.profile_router import get_current_profile
from planner.schemas.task_schema import (
    DragRequest,
    DragResult,
    TaskCreate,
    TaskOrderUpdate,
    TaskRead,
    TaskStatusUpdate,
    TaskTreeRead,
    TaskUpdate,
)
from planner.task import task_service

logger = logging.getLogger("planner.task")


# ==========================
#  ROUTER
# ==========================
router = APIRouter(tags=["tasks"])


@router.get("/projects/{project_id}/tasks", response_model=list[TaskRead])
def get_tasks_by_project(
    project_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        task_service.owned_project(db, profile, project_id)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "task_list_failed", db=db, project_id=project_id)
    return task_service.list_tasks(db, project_id)


@router.get(
    "/projects/{project_id}/tasks/tree",
    response_model=None,
    responses={200: {"model": list[TaskTreeRead]}},
)
def get_task_tree(
    project_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        task_service.owned_project(db, profile, project_id)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "task_tree_failed", db=db, project_id=project_id)
    forest = task_service.fetch_task_tree(db, project_id)
    # nodes are validated one by one; recursive validation caps nesting depth
    return JSONResponse(task_service.serialize_forest(forest))


@router.post("/projects/{project_id}/tasks", response_model=TaskRead, status_code=201)
def create_task(
    project_id: int,
    data: TaskCreate,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        return task_service.create_task(db, profile, project_id, data)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "task_create_failed", db=db, project_id=project_id)


@router.get("/tasks/{task_id}", response_model=TaskRead)
def get_task(
    task_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        return task_service.get_task(db, profile, task_id)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "task_get_failed", db=db, task_id=task_id)


@router.patch("/tasks/{task_id}", response_model=TaskRead)
def update_task(
    task_id: int,
    data: TaskUpdate,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        return task_service.update_task(db, profile, task_id, data)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "task_update_failed", db=db, task_id=task_id)


@router.delete("/tasks/{task_id}", status_code=204)
def delete_task(
    task_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        task_service.delete_task(db, profile, task_id)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "task_delete_failed", db=db, task_id=task_id)
    return


@router.patch("/tasks/{task_id}/status", response_model=TaskRead)
def update_status(
    task_id: int,
    data: TaskStatusUpdate,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        return task_service.update_status(db, profile, task_id, data.status)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "task_status_failed", db=db, task_id=task_id)


@router.patch("/tasks/{task_id}/order", response_model=TaskRead)
def update_order(
    task_id: int,
    data: TaskOrderUpdate,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        return task_service.update_order(db, profile, task_id, data.order_index)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "task_order_failed", db=db, task_id=task_id)


@router.post("/tasks/{task_id}/drag", response_model=DragResult)
def drag_task(
    task_id: int,
    data: DragRequest,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """Preview (commit=false) or persist (commit=true) a drag of the task bar."""
    try:
        task, change, committed = task_service.apply_drag(db, profile, task_id, data)
    except PlannerError as exc:
        raise as_http_error(exc, logger, "task_drag_failed", db=db, task_id=task_id)

    if change is None:
        return DragResult(
            task_id=task.id,
            accepted=False,
            committed=False,
            start_date=task.start_date,
            end_date=task.end_date,
        )
    return DragResult(
        task_id=task.id,
        accepted=True,
        committed=committed,
        start_date=change.start_date,
        end_date=change.end_date,
    )
