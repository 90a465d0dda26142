"""Task and dependency operations, scoped to the projects a profile owns."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from planner.errors import ConflictError, NotFoundError, ValidationError
from planner.models.profile import Profile
from planner.models.project import Project
from planner.models.task import Task, TaskStatus
from planner.models.task_dependency import TaskDependency
from planner.scheduling.drag import DateChange, translate_drag
from planner.scheduling.hierarchy import TaskNode, build_task_tree, flatten_tree
from planner.scheduling.timeline import Timeline
from planner.schemas.dependency_schema import DependencyCreate, DependencyRead
from planner.schemas.profile_schema import ProfileRead
from planner.schemas.task_schema import DragRequest, TaskCreate, TaskRead, TaskUpdate

logger = logging.getLogger("planner.task")


# ==========================
#  QUERIES
# ==========================
def owned_project(db: Session, owner: Profile, project_id: int) -> Project:
    project = db.get(Project, project_id)
    if not project or project.owner_id != owner.id:
        raise NotFoundError("Project not found")
    return project


def list_tasks(db: Session, project_id: int) -> List[Task]:
    return (
        db.query(Task)
        .filter(Task.project_id == project_id)
        .order_by(Task.order_index.asc(), Task.id.asc())
        .all()
    )


def list_dependencies(db: Session, project_id: int) -> List[TaskDependency]:
    task_ids = db.query(Task.id).filter(Task.project_id == project_id)
    return (
        db.query(TaskDependency)
        .filter(TaskDependency.successor_id.in_(task_ids))
        .order_by(TaskDependency.id)
        .all()
    )


def fetch_task_tree(db: Session, project_id: int) -> List[TaskNode]:
    """Fresh forest for the project, rebuilt from the stored rows."""
    return build_task_tree(list_tasks(db, project_id), list_dependencies(db, project_id))


def serialize_forest(forest: List[TaskNode]) -> List[dict]:
    """JSON-ready nested dicts for the forest, shaped like ``TaskTreeRead``.

    Each node is validated on its own and children are attached bottom-up,
    so nesting depth is not limited by recursive model validation.
    """
    payloads = {}
    # reversed pre-order visits every child before its parent
    for node, _ in reversed(flatten_tree(forest)):
        data = TaskRead.model_validate(node.task).model_dump(mode="json")
        data["dependencies"] = [DependencyRead.model_validate(dep).model_dump(mode="json") for dep in node.dependencies]
        data["assignee"] = (
            ProfileRead.model_validate(node.assignee).model_dump(mode="json") if node.assignee is not None else None
        )
        data["orphaned"] = node.orphaned
        data["subtasks"] = [payloads[id(child)] for child in node.subtasks]
        payloads[id(node)] = data
    return [payloads[id(node)] for node in forest]


def get_task(db: Session, owner: Profile, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if not task:
        raise NotFoundError("Task not found")
    project = db.get(Project, task.project_id)
    if not project or project.owner_id != owner.id:
        raise NotFoundError("Task not found")
    return task


def _next_order_index(db: Session, project_id: int, parent_id: Optional[int]) -> int:
    query = db.query(func.max(Task.order_index)).filter(Task.project_id == project_id)
    if parent_id is None:
        query = query.filter(Task.parent_id.is_(None))
    else:
        query = query.filter(Task.parent_id == parent_id)
    current = query.scalar()
    return 0 if current is None else current + 1


def _check_parent(db: Session, task: Optional[Task], project_id: int, parent_id: int) -> Task:
    parent = db.get(Task, parent_id)
    if not parent or parent.project_id != project_id:
        raise ValidationError("Parent task must belong to the same project")
    if task is None:
        return parent

    # walk up from the new parent; meeting the task itself means a cycle
    seen = set()
    current: Optional[Task] = parent
    while current is not None and current.id not in seen:
        if current.id == task.id:
            raise ValidationError("A task cannot be moved under itself or its subtasks")
        seen.add(current.id)
        current = db.get(Task, current.parent_id) if current.parent_id is not None else None
    return parent


def _check_assignee(db: Session, assignee_id: Optional[int]) -> None:
    if assignee_id is not None and db.get(Profile, assignee_id) is None:
        raise ValidationError("Assignee not found")


# ==========================
#  TASK MUTATIONS
# ==========================
def create_task(db: Session, owner: Profile, project_id: int, data: TaskCreate) -> Task:
    project = owned_project(db, owner, project_id)
    if data.parent_id is not None:
        _check_parent(db, None, project.id, data.parent_id)
    _check_assignee(db, data.assignee_id)

    order_index = data.order_index
    if order_index is None:
        order_index = _next_order_index(db, project.id, data.parent_id)

    task = Task(
        project_id=project.id,
        parent_id=data.parent_id,
        title=data.title,
        description=data.description,
        start_date=data.start_date,
        end_date=data.end_date,
        progress=data.progress,
        status=data.status.value,
        assignee_id=data.assignee_id,
        order_index=order_index,
        color=data.color or project.color,
    )
    db.add(task)
    db.commit()
    db.refresh(task)

    logger.info("task_created", extra={"task_id": task.id, "project_id": project.id})
    return task


def update_task(db: Session, owner: Profile, task_id: int, data: TaskUpdate) -> Task:
    task = get_task(db, owner, task_id)
    fields = data.model_dump(exclude_unset=True)

    start = fields.get("start_date") or task.start_date
    end = fields.get("end_date") or task.end_date
    if end < start:
        raise ValidationError("end_date must be on or after start_date")

    if "parent_id" in fields and fields["parent_id"] is not None:
        _check_parent(db, task, task.project_id, fields["parent_id"])
    if "assignee_id" in fields:
        _check_assignee(db, fields["assignee_id"])

    if data.title is not None:
        task.title = data.title
    if "description" in fields:
        task.description = data.description
    task.start_date = start
    task.end_date = end
    if data.progress is not None:
        task.progress = data.progress
    if data.status is not None:
        task.status = data.status.value
    if "assignee_id" in fields:
        task.assignee_id = data.assignee_id
    if "parent_id" in fields and data.parent_id != task.parent_id:
        # a moved task goes after its new siblings unless placed explicitly
        if data.order_index is None:
            task.order_index = _next_order_index(db, task.project_id, data.parent_id)
        task.parent_id = data.parent_id
    if data.order_index is not None:
        task.order_index = data.order_index
    if "color" in fields:
        task.color = data.color

    db.commit()
    db.refresh(task)
    logger.info("task_updated", extra={"task_id": task.id, "fields": sorted(fields)})
    return task


def update_status(db: Session, owner: Profile, task_id: int, status: TaskStatus) -> Task:
    task = get_task(db, owner, task_id)
    task.status = TaskStatus(status).value
    db.commit()
    db.refresh(task)
    return task


def update_order(db: Session, owner: Profile, task_id: int, order_index: int) -> Task:
    task = get_task(db, owner, task_id)
    task.order_index = order_index
    db.commit()
    db.refresh(task)
    return task


def _subtree_ids(db: Session, root_id: int) -> List[int]:
    """Ids of root_id and all its descendants, parents before children."""
    ordered: List[int] = []
    seen = set()
    frontier = [root_id]
    while frontier:
        ordered.extend(frontier)
        seen.update(frontier)
        rows = db.query(Task.id).filter(Task.parent_id.in_(frontier)).all()
        frontier = [row.id for row in rows if row.id not in seen]
    return ordered


def delete_task(db: Session, owner: Profile, task_id: int) -> List[int]:
    """Delete the task with its whole subtree; returns the removed ids."""
    task = get_task(db, owner, task_id)
    doomed = _subtree_ids(db, task.id)
    delete_task_rows(db, doomed)
    db.commit()
    logger.info("task_deleted", extra={"task_id": task_id, "removed": len(doomed)})
    return doomed


def delete_task_rows(db: Session, ordered_ids: List[int]) -> None:
    """Delete tasks and their edges row by row, without committing.

    ``ordered_ids`` lists parents before children. Going through the ORM
    instead of ON DELETE CASCADE lets every removed row reach the change feed.
    """
    if not ordered_ids:
        return
    edges = (
        db.query(TaskDependency)
        .filter(
            or_(TaskDependency.predecessor_id.in_(ordered_ids), TaskDependency.successor_id.in_(ordered_ids))
        )
        .all()
    )
    for edge in edges:
        db.delete(edge)

    tasks = {row.id: row for row in db.query(Task).filter(Task.id.in_(ordered_ids)).all()}
    # children first so the self-referencing FK never dangles
    for task_id in reversed(ordered_ids):
        db.delete(tasks[task_id])
        db.flush()


# ==========================
#  DEPENDENCIES
# ==========================
def add_dependency(db: Session, owner: Profile, successor_id: int, data: DependencyCreate) -> TaskDependency:
    successor = get_task(db, owner, successor_id)
    if data.predecessor_id == successor.id:
        raise ValidationError("A task cannot depend on itself")

    predecessor = db.get(Task, data.predecessor_id)
    if not predecessor or predecessor.project_id != successor.project_id:
        raise ValidationError("Predecessor must belong to the same project")

    exists = (
        db.query(TaskDependency)
        .filter(
            TaskDependency.predecessor_id == predecessor.id,
            TaskDependency.successor_id == successor.id,
        )
        .first()
    )
    if exists:
        raise ConflictError("Dependency already exists")

    dependency = TaskDependency(
        predecessor_id=predecessor.id,
        successor_id=successor.id,
        type=data.type.value,
    )
    db.add(dependency)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Dependency already exists") from exc
    db.refresh(dependency)

    logger.info(
        "dependency_added",
        extra={"predecessor_id": predecessor.id, "successor_id": successor.id, "type": dependency.type},
    )
    return dependency


def remove_dependency(db: Session, owner: Profile, successor_id: int, predecessor_id: int) -> None:
    successor = get_task(db, owner, successor_id)
    dependency = (
        db.query(TaskDependency)
        .filter(
            TaskDependency.predecessor_id == predecessor_id,
            TaskDependency.successor_id == successor.id,
        )
        .first()
    )
    if not dependency:
        raise NotFoundError("Dependency not found")

    db.delete(dependency)
    db.commit()


# ==========================
#  DRAG
# ==========================
def apply_drag(db: Session, owner: Profile, task_id: int, request: DragRequest) -> tuple:
    """Translate a drag step; returns (task, change or None, committed)."""
    task = get_task(db, owner, task_id)
    window_end = max(request.window_start, task.end_date) + timedelta(days=1)
    timeline = Timeline(request.window_start, window_end, request.day_width)

    change: Optional[DateChange] = translate_drag(
        timeline, task.start_date, task.end_date, request.mode, request.delta_px
    )
    if change is None or not request.commit:
        return task, change, False

    task.start_date = change.start_date
    task.end_date = change.end_date
    db.commit()
    db.refresh(task)
    logger.info(
        "task_dragged",
        extra={"task_id": task.id, "mode": request.mode.value, "start_date": str(task.start_date)},
    )
    return task, change, True
