"""Translate pointer drags on a task bar into new task dates."""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Optional

from planner.scheduling.timeline import Timeline, duration_days

logger = logging.getLogger("planner.gantt")


class DragMode(str, enum.Enum):
    MOVE = "move"
    RESIZE_LEFT = "resize_left"
    RESIZE_RIGHT = "resize_right"


@dataclass(frozen=True)
class DateChange:
    start_date: date
    end_date: date

    @property
    def duration_days(self) -> int:
        return duration_days(self.start_date, self.end_date)


def round_half_up(value: float) -> int:
    # pointer maths rounds .5 towards +inf, unlike Python's round()
    return math.floor(value + 0.5)


def translate_drag(
    timeline: Timeline,
    start: date,
    end: date,
    mode: DragMode,
    delta_px: float,
) -> Optional[DateChange]:
    """New dates for a bar dragged by ``delta_px``, or None when rejected.

    ``start``/``end`` are the task dates when the drag began; the delta is
    always measured from that reference, not from the previous step.
    """
    mode = DragMode(mode)
    bar = timeline.bar(start, end)

    if mode is DragMode.MOVE:
        new_offset = round_half_up((bar.offset_px + delta_px) / timeline.day_width)
        if new_offset < 0:
            return None
        new_start = timeline.date_at(new_offset)
        return DateChange(new_start, new_start + timedelta(days=bar.duration_days - 1))

    if mode is DragMode.RESIZE_LEFT:
        new_offset = round_half_up((bar.offset_px + delta_px) / timeline.day_width)
        if new_offset < 0 or new_offset >= bar.offset_days + bar.duration_days:
            return None
        return DateChange(timeline.date_at(new_offset), end)

    new_duration = round_half_up((bar.width_px + delta_px) / timeline.day_width)
    if new_duration <= 0:
        return None
    return DateChange(start, start + timedelta(days=new_duration - 1))


class DragGesture:
    """One drag of one bar, from pointer-down to release.

    Accepted steps are handed to ``on_update``; rejected ones emit nothing.
    Leaving the ``with`` block releases the gesture and drops the callback,
    even when the block raised.
    """

    def __init__(
        self,
        timeline: Timeline,
        start: date,
        end: date,
        mode: DragMode,
        on_update: Optional[Callable[[DateChange], None]] = None,
    ):
        self.timeline = timeline
        self.start = start
        self.end = end
        self.mode = DragMode(mode)
        self._on_update = on_update
        self._last: Optional[DateChange] = None
        self._active = True

    def __enter__(self) -> "DragGesture":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    @property
    def active(self) -> bool:
        return self._active

    @property
    def last_change(self) -> Optional[DateChange]:
        return self._last

    def move_to(self, delta_px: float) -> Optional[DateChange]:
        if not self._active:
            raise RuntimeError("drag gesture already released")
        change = translate_drag(self.timeline, self.start, self.end, self.mode, delta_px)
        if change is None:
            logger.debug("drag_step_rejected", extra={"mode": self.mode.value, "delta_px": delta_px})
            return None
        self._last = change
        if self._on_update is not None:
            self._on_update(change)
        return change

    def release(self) -> Optional[DateChange]:
        """End the gesture; returns the last accepted change, if any."""
        self._active = False
        self._on_update = None
        return self._last
