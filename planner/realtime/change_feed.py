"""In-process change notifications for table rows.

Subscribers register for a table plus an equality filter on row columns and
are called with a ``ChangeEvent`` for every committed insert, update or
delete that matches. The event only says that something changed; listeners
are expected to re-fetch.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

logger = logging.getLogger("planner.realtime")

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"

_PENDING_KEY = "planner_pending_changes"
_installed: set = set()


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    action: str
    row: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Subscription:
    id: int
    table: str
    row_filter: Dict[str, Any]
    callback: Callable[[ChangeEvent], None]

    def matches(self, change: ChangeEvent) -> bool:
        if change.table != self.table:
            return False
        return all(change.row.get(column) == value for column, value in self.row_filter.items())


class ChangeFeed:
    def __init__(self):
        self._subscriptions: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(
        self,
        table: str,
        row_filter: Optional[Dict[str, Any]],
        callback: Callable[[ChangeEvent], None],
    ) -> Subscription:
        with self._lock:
            subscription = Subscription(next(self._ids), table, dict(row_filter or {}), callback)
            self._subscriptions[subscription.id] = subscription
        logger.debug("feed_subscribed", extra={"table": table, "subscription_id": subscription.id})
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        with self._lock:
            removed = self._subscriptions.pop(subscription.id, None)
        return removed is not None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def publish(self, change: ChangeEvent) -> int:
        """Deliver ``change`` to every matching subscriber; returns how many."""
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.matches(change)]
        for subscription in targets:
            try:
                subscription.callback(change)
            except Exception:
                logger.exception(
                    "feed_callback_failed",
                    extra={"table": change.table, "subscription_id": subscription.id},
                )
        return len(targets)


def _row_snapshot(instance, deleted: bool = False) -> Dict[str, Any]:
    state = inspect(instance)
    row = {}
    for column in state.mapper.column_attrs:
        if column.key in state.dict or deleted:
            # deleted rows must not trigger loads
            row[column.key] = state.dict.get(column.key)
        else:
            row[column.key] = getattr(instance, column.key, None)
    return row


def install_session_hooks(feed: ChangeFeed, session_factory=Session) -> None:
    """Publish ORM row changes to ``feed`` once their transaction commits."""
    if (id(feed), session_factory) in _installed:
        return
    _installed.add((id(feed), session_factory))
    # one pending list per feed; several feeds may watch the same sessions
    pending_key = (_PENDING_KEY, id(feed))

    @event.listens_for(session_factory, "after_flush")
    def _collect(session, flush_context):
        pending: List[ChangeEvent] = session.info.setdefault(pending_key, [])
        for action, instances in ((INSERT, session.new), (UPDATE, session.dirty), (DELETE, session.deleted)):
            for instance in instances:
                table = getattr(instance, "__tablename__", None)
                if table is None:
                    continue
                if action == UPDATE and not session.is_modified(instance):
                    continue
                pending.append(ChangeEvent(table, action, _row_snapshot(instance, deleted=action == DELETE)))

    @event.listens_for(session_factory, "after_commit")
    def _publish(session):
        pending = session.info.pop(pending_key, [])
        for change in pending:
            feed.publish(change)

    @event.listens_for(session_factory, "after_soft_rollback")
    def _discard(session, previous_transaction):
        session.info.pop(pending_key, None)


feed = ChangeFeed()
