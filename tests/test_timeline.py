"""
Tests for timeline geometry and header grouping.
"""
from datetime import date

import pytest

from planner.scheduling.timeline import (
    MonthGroup,
    Timeline,
    clamp_day_width,
    duration_days,
    zoom_in,
    zoom_out,
)


class TestBarGeometry:
    """Pixel offsets and widths."""

    def setup_method(self):
        self.timeline = Timeline(date(2024, 1, 1), date(2024, 1, 31), 40)

    def test_single_day_task_is_one_day_wide(self):
        assert self.timeline.width_px(date(2024, 1, 10), date(2024, 1, 10)) == 40

    def test_offset_counts_days_from_window_start(self):
        assert self.timeline.offset_px(date(2024, 1, 1)) == 0
        assert self.timeline.offset_px(date(2024, 1, 10)) == 360

    def test_bar_for_three_day_task(self):
        bar = self.timeline.bar(date(2024, 1, 10), date(2024, 1, 12))
        assert bar.offset_px == 360
        assert bar.width_px == 120
        assert bar.offset_days == 9
        assert bar.duration_days == 3

    def test_dates_before_window_have_negative_offset(self):
        assert self.timeline.offset_px(date(2023, 12, 31)) == -40

    def test_total_days_are_inclusive(self):
        assert self.timeline.total_days == 31
        assert self.timeline.total_width_px == 31 * 40

    def test_duration_days_inclusive(self):
        assert duration_days(date(2024, 2, 28), date(2024, 3, 1)) == 3

    def test_rejects_non_positive_width(self):
        with pytest.raises(ValueError):
            Timeline(date(2024, 1, 1), date(2024, 1, 2), 0)

    def test_rejects_reversed_window(self):
        with pytest.raises(ValueError):
            Timeline(date(2024, 1, 2), date(2024, 1, 1), 40)


class TestHeaders:
    """Month groups and day headers."""

    def test_month_groups_across_boundary(self):
        timeline = Timeline(date(2024, 1, 29), date(2024, 2, 3), 40)
        assert list(timeline.month_header_groups()) == [
            MonthGroup("Jan 2024", 3, 0),
            MonthGroup("Feb 2024", 3, 3),
        ]

    def test_month_groups_can_be_replayed(self):
        timeline = Timeline(date(2024, 1, 29), date(2024, 2, 3), 40)
        first = list(timeline.month_header_groups())
        assert list(timeline.month_header_groups()) == first

    def test_same_month_in_different_years_is_split(self):
        timeline = Timeline(date(2023, 12, 31), date(2024, 1, 1), 40)
        labels = [group.label for group in timeline.month_header_groups()]
        assert labels == ["Dec 2023", "Jan 2024"]

    def test_day_headers_mark_weekends_and_today(self):
        # 2024-01-06 is a Saturday
        timeline = Timeline(date(2024, 1, 5), date(2024, 1, 8), 40)
        headers = list(timeline.day_headers(today=date(2024, 1, 8)))

        assert [h.day_of_month for h in headers] == [5, 6, 7, 8]
        assert [h.is_weekend for h in headers] == [False, True, True, False]
        assert [h.is_today for h in headers] == [False, False, False, True]
        assert headers[0].weekday == "Fr"
        assert timeline.weekend_indexes() == [1, 2]


class TestWindowAndZoom:
    """Project window and zoom limits."""

    def test_for_project_pads_and_covers_task_extent(self):
        timeline = Timeline.for_project(
            date(2024, 1, 10),
            date(2024, 1, 20),
            extent=(date(2024, 1, 5), date(2024, 1, 25)),
            day_width=40,
            buffer_days=7,
        )
        assert timeline.window_start == date(2023, 12, 29)
        assert timeline.window_end == date(2024, 2, 1)

    def test_today_scroll_offset(self):
        timeline = Timeline(date(2024, 1, 1), date(2024, 1, 31), 40)
        assert timeline.today_scroll_offset(date(2024, 1, 11)) == 10 * 40 - 200
        assert timeline.today_scroll_offset(date(2024, 3, 1)) is None

    def test_zoom_is_clamped(self):
        assert zoom_in(95) == 100
        assert zoom_out(25) == 20
        assert zoom_in(40) == 50
        assert clamp_day_width(5) == 20
