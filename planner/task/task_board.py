"""Latest task forest of one project, guarded against out-of-order fetches."""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from planner.scheduling.hierarchy import TaskNode

logger = logging.getLogger("planner.task")


class TaskBoard:
    """Holds the forest shown for a project.

    Every fetch takes a token from ``begin_fetch``; a result is only applied
    when its token is still the newest one handed out, so a slow response can
    never overwrite a newer one. Results always replace the whole forest.
    """

    def __init__(self, project_id: int):
        self.project_id = project_id
        self._forest: List[TaskNode] = []
        self._latest_token = 0
        self._applied_token = 0
        self._lock = threading.Lock()

    @property
    def forest(self) -> List[TaskNode]:
        return self._forest

    @property
    def applied_token(self) -> int:
        return self._applied_token

    def begin_fetch(self) -> int:
        with self._lock:
            self._latest_token += 1
            return self._latest_token

    def is_current(self, token: int) -> bool:
        return token == self._latest_token

    def apply(self, token: int, forest: List[TaskNode]) -> bool:
        with self._lock:
            if token != self._latest_token:
                logger.info(
                    "stale_fetch_discarded",
                    extra={"project_id": self.project_id, "token": token, "latest_token": self._latest_token},
                )
                return False
            self._forest = list(forest)
            self._applied_token = token
            return True

    def refresh(self, fetch: Callable[[], List[TaskNode]]) -> Optional[List[TaskNode]]:
        """Run ``fetch`` under a new token; returns the forest if it was applied."""
        token = self.begin_fetch()
        forest = fetch()
        if self.apply(token, forest):
            return self._forest
        return None
