"""Day-indexed timeline geometry for the Gantt chart."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, Iterator, NamedTuple, Optional

from planner import config


class MonthGroup(NamedTuple):
    label: str
    day_count: int
    start_day_index: int


class DayHeader(NamedTuple):
    index: int
    date: date
    day_of_month: int
    weekday: str
    is_weekend: bool
    is_today: bool


class BarGeometry(NamedTuple):
    offset_px: float
    width_px: float
    offset_days: int
    duration_days: int


def days_between(start: date, end: date) -> int:
    return (end - start).days


def duration_days(start: date, end: date) -> int:
    """Inclusive length of a date range in days."""
    return days_between(start, end) + 1


def clamp_day_width(day_width: float) -> float:
    return max(config.MIN_DAY_WIDTH, min(config.MAX_DAY_WIDTH, day_width))


def zoom_in(day_width: float, step: int = 10) -> float:
    return clamp_day_width(day_width + step)


def zoom_out(day_width: float, step: int = 10) -> float:
    return clamp_day_width(day_width - step)


class Timeline:
    """A visible window of days, each rendered ``day_width`` pixels wide.

    Both window ends are inclusive. Offsets of dates outside the window are
    still computed (negative or past the right edge); clamping is up to the
    renderer.
    """

    def __init__(self, window_start: date, window_end: date, day_width: float):
        if day_width <= 0:
            raise ValueError("day_width must be positive")
        if window_end < window_start:
            raise ValueError("window_end must not be before window_start")
        self.window_start = window_start
        self.window_end = window_end
        self.day_width = day_width

    def __repr__(self) -> str:
        return (
            f"Timeline({self.window_start.isoformat()}..{self.window_end.isoformat()}, "
            f"day_width={self.day_width})"
        )

    @classmethod
    def for_project(
        cls,
        project_start: date,
        project_end: date,
        extent: Optional[tuple] = None,
        day_width: float = config.DEFAULT_DAY_WIDTH,
        buffer_days: int = config.TIMELINE_BUFFER_DAYS,
    ) -> "Timeline":
        """Window covering the project and every task, padded on both sides.

        ``extent`` is the (earliest start, latest end) pair of the task forest.
        """
        start, end = project_start, project_end
        if extent is not None:
            start = min(start, extent[0])
            end = max(end, extent[1])
        padding = timedelta(days=buffer_days)
        return cls(start - padding, end + padding, day_width)

    @property
    def total_days(self) -> int:
        return duration_days(self.window_start, self.window_end)

    @property
    def total_width_px(self) -> float:
        return self.total_days * self.day_width

    def day_offset(self, day: date) -> int:
        return days_between(self.window_start, day)

    def offset_px(self, day: date) -> float:
        return self.day_offset(day) * self.day_width

    def width_px(self, start: date, end: date) -> float:
        return duration_days(start, end) * self.day_width

    def date_at(self, offset_days: int) -> date:
        return self.window_start + timedelta(days=offset_days)

    def bar(self, start: date, end: date) -> BarGeometry:
        return BarGeometry(
            offset_px=self.offset_px(start),
            width_px=self.width_px(start, end),
            offset_days=self.day_offset(start),
            duration_days=duration_days(start, end),
        )

    def days(self) -> Iterator[date]:
        for index in range(self.total_days):
            yield self.date_at(index)

    def month_header_groups(self) -> Iterator[MonthGroup]:
        """Group consecutive window days by (month, year).

        Each call returns a new generator, so the sequence can be replayed.
        """
        return _month_groups(self.days())

    def day_headers(self, today: Optional[date] = None) -> Iterator[DayHeader]:
        today = today or date.today()
        for index, day in enumerate(self.days()):
            yield DayHeader(
                index=index,
                date=day,
                day_of_month=day.day,
                weekday=day.strftime("%a")[:2],
                is_weekend=day.weekday() >= 5,
                is_today=day == today,
            )

    def weekend_indexes(self) -> list:
        return [index for index, day in enumerate(self.days()) if day.weekday() >= 5]

    def today_scroll_offset(self, today: Optional[date] = None, lead_px: float = 200) -> Optional[float]:
        """Scroll position that brings today into view, None outside the window."""
        today = today or date.today()
        offset = self.day_offset(today)
        if offset < 0 or offset > self.total_days:
            return None
        return offset * self.day_width - lead_px


def _month_groups(days: Iterable[date]) -> Iterator[MonthGroup]:
    current = None
    label = ""
    count = 0
    start_index = 0
    for index, day in enumerate(days):
        key = (day.month, day.year)
        if key != current:
            if current is not None:
                yield MonthGroup(label, count, start_index)
            current = key
            label = day.strftime("%b %Y")
            count = 0
            start_index = index
        count += 1
    if current is not None:
        yield MonthGroup(label, count, start_index)
