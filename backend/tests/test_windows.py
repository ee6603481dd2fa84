"""
Tests for window resolution (healthtrack.analysis.windows).

Covers:
  - Named windows anchored to a reference instant
  - Month arithmetic clamped to the target month's length
  - Custom single-day and multi-day windows
  - Fallbacks and the InvalidWindowError cases
"""

from datetime import date, datetime, timezone

import pytest

from healthtrack.analysis.analyzer import filter_by_window
from healthtrack.analysis.windows import InvalidWindowError, resolve, resolve_window
from healthtrack.config import settings
from healthtrack.models import Record, TimeWindow, WindowKind


# ======================================================================
# Named windows
# ======================================================================

class TestNamedWindows:
    def test_today(self, now):
        w = resolve_window(WindowKind.TODAY, now)
        assert w.start == datetime(2025, 3, 15, 0, 0, 0)
        assert w.end == now
        assert w.is_sub_day

    def test_yesterday_covers_whole_calendar_day(self, now):
        w = resolve_window("yesterday", now)
        assert w.start == datetime(2025, 3, 14, 0, 0, 0)
        assert w.end == datetime(2025, 3, 14, 23, 59, 59, 999999)
        assert w.is_sub_day

    def test_yesterday_across_month_boundary(self):
        w = resolve_window("yesterday", datetime(2025, 3, 1, 6, 0))
        assert w.start == datetime(2025, 2, 28, 0, 0)

    def test_week_is_exact_seven_days(self, now):
        w = resolve_window("week", now)
        assert w.start == datetime(2025, 3, 8, 14, 30, 0)
        assert w.end == now
        assert not w.is_sub_day

    def test_month(self, now):
        w = resolve_window("month", now)
        assert w.start == datetime(2025, 2, 15, 14, 30, 0)
        assert w.end == now

    def test_month_clamps_day(self):
        w = resolve_window("month", datetime(2025, 3, 31, 10, 0))
        assert w.start == datetime(2025, 2, 28, 10, 0)

    def test_month_clamps_to_leap_day(self):
        w = resolve_window("month", datetime(2024, 3, 31, 10, 0))
        assert w.start == datetime(2024, 2, 29, 10, 0)

    def test_month_across_year(self):
        w = resolve_window("month", datetime(2025, 1, 10, 8, 0))
        assert w.start == datetime(2024, 12, 10, 8, 0)

    def test_all_starts_at_beginning_of_time(self, now):
        w = resolve_window("all", now)
        assert w.start == datetime.min
        assert w.end == now

    def test_kind_names_are_case_insensitive(self, now):
        assert resolve_window(" Week ", now) == resolve_window(WindowKind.WEEK, now)

    def test_aware_now_is_made_local(self, monkeypatch):
        monkeypatch.setattr(settings, "TIMEZONE", "UTC")
        w = resolve_window("today", datetime(2025, 3, 15, 12, tzinfo=timezone.utc))
        assert w.start == datetime(2025, 3, 15)
        assert w.end == datetime(2025, 3, 15, 12)
        assert w.end.tzinfo is None

    def test_aware_now_window_filters_records(self, monkeypatch):
        monkeypatch.setattr(settings, "TIMEZONE", "UTC")
        w = resolve_window("week", datetime(2025, 3, 15, 12, tzinfo=timezone.utc))
        records = [Record(1, datetime(2025, 3, 15, 8), {"v": 1})]
        assert filter_by_window(records, w) == records

    def test_defaults_to_current_time(self):
        w = resolve_window("today")
        assert w.start.time() == datetime.min.time()
        assert w.end >= w.start


# ======================================================================
# Custom windows
# ======================================================================

class TestCustomWindow:
    def test_single_date(self, now):
        w = resolve_window("custom", now, date(2025, 1, 1))
        assert w.start == datetime(2025, 1, 1, 0, 0, 0)
        assert w.end == datetime(2025, 1, 1, 23, 59, 59, 999999)
        assert w.is_sub_day

    def test_single_date_without_now(self):
        w = resolve_window("custom", custom_range=date(2025, 1, 1))
        assert w.start == datetime(2025, 1, 1)

    def test_date_range(self, now):
        w = resolve_window("custom", now, (date(2025, 1, 1), date(2025, 1, 7)))
        assert w.start == datetime(2025, 1, 1)
        assert w.end == datetime(2025, 1, 7, 23, 59, 59, 999999)
        assert not w.is_sub_day

    def test_reversed_range_is_swapped(self, now):
        w = resolve_window("custom", now, (date(2025, 1, 7), date(2025, 1, 1)))
        assert w.start == datetime(2025, 1, 1)
        assert w.end.date() == date(2025, 1, 7)

    def test_range_with_open_end_is_single_day(self, now):
        w = resolve_window("custom", now, (date(2025, 1, 3), None))
        assert w.start.date() == w.end.date() == date(2025, 1, 3)

    def test_range_with_only_end_is_single_day(self, now):
        w = resolve_window("custom", now, (None, date(2025, 1, 9)))
        assert w.start == datetime(2025, 1, 9)
        assert w.end == datetime(2025, 1, 9, 23, 59, 59, 999999)

    def test_resolve_time_window_with_only_end(self, now):
        w = resolve(TimeWindow(WindowKind.CUSTOM, end=date(2025, 1, 9)), now)
        assert w.start == datetime(2025, 1, 9)

    def test_iso_string_date(self, now):
        w = resolve_window("custom", now, "2025-01-01")
        assert w.start == datetime(2025, 1, 1)

    def test_datetime_drops_time_of_day(self, now):
        w = resolve_window("custom", now, datetime(2025, 1, 1, 17, 45))
        assert w.start == datetime(2025, 1, 1)

    def test_missing_date_falls_back_to_today(self, now):
        w = resolve_window("custom", now)
        assert w.kind == WindowKind.CUSTOM
        assert w.start == datetime(2025, 3, 15)
        assert w.end == now

    def test_resolve_time_window(self, now):
        w = resolve(TimeWindow(WindowKind.CUSTOM, start=date(2025, 1, 1)), now)
        assert w.start == datetime(2025, 1, 1)
        assert w.end == datetime(2025, 1, 1, 23, 59, 59, 999999)

    def test_resolve_named_time_window(self, now):
        assert resolve(TimeWindow(WindowKind.WEEK), now) == resolve_window("week", now)


# ======================================================================
# Failures
# ======================================================================

class TestInvalidWindow:
    def test_custom_without_any_date_context(self):
        with pytest.raises(InvalidWindowError):
            resolve_window("custom")

    def test_unknown_kind(self, now):
        with pytest.raises(InvalidWindowError, match="Unknown window"):
            resolve_window("fortnight", now)

    def test_invalid_custom_date(self, now):
        with pytest.raises(InvalidWindowError):
            resolve_window("custom", now, "not-a-date")

    def test_is_a_value_error(self):
        assert issubclass(InvalidWindowError, ValueError)
