"""Assemble the flat task/dependency rows of a project into a task forest.

Tasks live in an arena keyed by id and children are kept as id lists, so the
build and every walk over the result are iterative. Two kinds of malformed
parent data are repaired instead of silently losing tasks:

- a parent id that is not part of the fetched set turns the task into an
  orphan root;
- a parent chain that loops back on itself is cut at the first task of the
  loop (in input order), which becomes an orphan root.

Either way every input task shows up exactly once in the forest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

logger = logging.getLogger("planner.hierarchy")


@dataclass
class TaskNode:
    """A task decorated with its children, incoming edges and assignee."""

    task: Any
    subtasks: List["TaskNode"] = field(default_factory=list)
    dependencies: List[Any] = field(default_factory=list)
    assignee: Optional[Any] = None
    orphaned: bool = False

    def __getattr__(self, name: str) -> Any:
        # expose the wrapped task's columns (id, title, start_date, ...)
        if name == "task":
            raise AttributeError(name)
        return getattr(self.task, name)

    @property
    def has_subtasks(self) -> bool:
        return bool(self.subtasks)


def build_task_tree(
    tasks: Iterable[Any],
    dependencies: Iterable[Any] = (),
    profiles: Optional[Mapping[Any, Any]] = None,
) -> List[TaskNode]:
    """Return the root nodes of the forest, siblings in order_index order."""
    ordered = sorted(tasks, key=lambda t: t.order_index or 0)
    if not ordered:
        return []

    # incoming edges per successor; edges pointing at unknown tasks never match
    deps_by_successor: Dict[Any, List[Any]] = {}
    for dep in dependencies:
        deps_by_successor.setdefault(dep.successor_id, []).append(dep)

    arena: Dict[Any, TaskNode] = {}
    for task in ordered:
        assignee = getattr(task, "assignee", None)
        if profiles is not None and task.assignee_id is not None:
            assignee = profiles.get(task.assignee_id, assignee)
        arena[task.id] = TaskNode(
            task=task,
            dependencies=list(deps_by_successor.get(task.id, [])),
            assignee=assignee,
        )

    children: Dict[Any, List[Any]] = {task_id: [] for task_id in arena}
    parent_of: Dict[Any, Any] = {}
    root_ids: List[Any] = []

    for task in ordered:
        parent_id = task.parent_id
        if parent_id is None:
            root_ids.append(task.id)
        elif parent_id in arena and parent_id != task.id:
            children[parent_id].append(task.id)
            parent_of[task.id] = parent_id
        else:
            logger.warning(
                "hierarchy_orphan_task",
                extra={"task_id": task.id, "parent_id": parent_id},
            )
            arena[task.id].orphaned = True
            root_ids.append(task.id)

    visited: set = set()
    _mark_reachable(root_ids, children, visited)

    # whatever is still unvisited hangs off a parent cycle
    position = {task.id: index for index, task in enumerate(ordered)}
    for task in ordered:
        if task.id in visited:
            continue
        cut_id = min(_parent_cycle(task.id, parent_of), key=position.__getitem__)
        logger.warning(
            "hierarchy_parent_cycle",
            extra={"task_id": cut_id, "parent_id": parent_of.get(cut_id)},
        )
        parent_id = parent_of.pop(cut_id)
        children[parent_id].remove(cut_id)
        arena[cut_id].orphaned = True
        root_ids.append(cut_id)
        _mark_reachable([cut_id], children, visited)

    for task_id, node in arena.items():
        node.subtasks = [arena[child_id] for child_id in children[task_id]]

    return [arena[task_id] for task_id in root_ids]


def _mark_reachable(start_ids: List[Any], children: Mapping[Any, List[Any]], visited: set) -> None:
    stack = list(start_ids)
    while stack:
        task_id = stack.pop()
        if task_id in visited:
            continue
        visited.add(task_id)
        stack.extend(children[task_id])


def _parent_cycle(task_id: Any, parent_of: Mapping[Any, Any]) -> List[Any]:
    """Members of the loop reached by following parent links from task_id."""
    seen: set = set()
    current = task_id
    while current not in seen:
        seen.add(current)
        current = parent_of[current]
    cycle = [current]
    member = parent_of[current]
    while member != current:
        cycle.append(member)
        member = parent_of[member]
    return cycle


def iter_nodes(forest: Iterable[TaskNode]) -> Iterator[Tuple[TaskNode, int]]:
    """Pre-order walk yielding (node, depth level), without recursion."""
    stack: List[Tuple[TaskNode, int]] = [(node, 0) for node in reversed(list(forest))]
    seen: set = set()
    while stack:
        node, level = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node, level
        stack.extend((child, level + 1) for child in reversed(node.subtasks))


def flatten_tree(forest: Iterable[TaskNode]) -> List[Tuple[TaskNode, int]]:
    return list(iter_nodes(forest))


def find_node(forest: Iterable[TaskNode], task_id: Any) -> Optional[TaskNode]:
    for node, _ in iter_nodes(forest):
        if node.id == task_id:
            return node
    return None


def collect_parent_ids(forest: Iterable[TaskNode]) -> set:
    """Ids of every task that has subtasks (expanded by default in the chart)."""
    return {node.id for node, _ in iter_nodes(forest) if node.subtasks}


def date_extent(forest: Iterable[TaskNode]) -> Optional[Tuple[date, date]]:
    """Earliest start and latest end over the whole forest, None when empty."""
    earliest: Optional[date] = None
    latest: Optional[date] = None
    for node, _ in iter_nodes(forest):
        if earliest is None or node.start_date < earliest:
            earliest = node.start_date
        if latest is None or node.end_date > latest:
            latest = node.end_date
    if earliest is None or latest is None:
        return None
    return earliest, latest
