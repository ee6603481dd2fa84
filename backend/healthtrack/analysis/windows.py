"""
Resolution of window selections (today, yesterday, week, month, custom)
into concrete inclusive datetime ranges.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from healthtrack.models import ResolvedWindow, TimeWindow, WindowKind
from healthtrack.parsers.record_parser import local_now, to_local_naive

CustomRange = Union[date, Tuple[date, Optional[date]], None]

END_OF_DAY = time(23, 59, 59, 999999)


class InvalidWindowError(ValueError):
    """Raised when a window cannot be resolved to a date range."""
    pass


def _as_kind(kind) -> WindowKind:
    if isinstance(kind, WindowKind):
        return kind
    try:
        return WindowKind(str(kind).strip().lower())
    except ValueError:
        choices = ", ".join(k.value for k in WindowKind)
        raise InvalidWindowError(f"Unknown window {kind!r}. Available: {choices}")


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise InvalidWindowError(f"Invalid custom date: {value!r}")
    raise InvalidWindowError(f"Invalid custom date: {value!r}")


def _custom_bounds(custom_range: CustomRange) -> Optional[Tuple[date, date]]:
    if custom_range is None:
        return None
    if isinstance(custom_range, (tuple, list)):
        first = custom_range[0] if len(custom_range) > 0 else None
        last = custom_range[1] if len(custom_range) > 1 else None
        if not first and not last:
            return None
        # A lone bound of either side selects that single day
        start = _as_date(first or last)
        end = _as_date(last) if last else start
    else:
        start = end = _as_date(custom_range)
    if end < start:
        start, end = end, start
    return start, end


def _midnight(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min)


def resolve_window(
    kind,
    now: Optional[datetime] = None,
    custom_range: CustomRange = None,
) -> ResolvedWindow:
    """Anchor a window selection to ``now`` and return its inclusive range.

    Args:
        kind: A :class:`WindowKind` or its name ("today", "week", ...).
        now: The reference instant; the current local time when omitted.
            Aware values are converted to naive local time first.
        custom_range: For ``custom``, one date or a ``(start, end)`` pair.

    Returns:
        ResolvedWindow with naive local ``start`` and ``end``.

    Raises:
        InvalidWindowError: If ``kind`` is unknown, or ``custom`` is asked
            for with neither a custom date nor a reference instant.
    """
    kind = _as_kind(kind)
    bounds = _custom_bounds(custom_range) if kind == WindowKind.CUSTOM else None

    if kind == WindowKind.CUSTOM and bounds is None and now is None:
        raise InvalidWindowError("Custom window requires a date")

    now = local_now() if now is None else to_local_naive(now)

    if kind == WindowKind.TODAY:
        return ResolvedWindow(kind, _midnight(now), now)

    if kind == WindowKind.YESTERDAY:
        day = now.date() - timedelta(days=1)
        return ResolvedWindow(
            kind, datetime.combine(day, time.min), datetime.combine(day, END_OF_DAY)
        )

    if kind == WindowKind.WEEK:
        return ResolvedWindow(kind, now - timedelta(days=7), now)

    if kind == WindowKind.MONTH:
        # relativedelta clamps the day, so Mar 31 becomes Feb 28/29
        return ResolvedWindow(kind, now - relativedelta(months=1), now)

    if kind == WindowKind.ALL:
        return ResolvedWindow(kind, datetime.min, now)

    # Custom without a date behaves like today
    if bounds is None:
        return ResolvedWindow(kind, _midnight(now), now)

    start, end = bounds
    return ResolvedWindow(
        kind, datetime.combine(start, time.min), datetime.combine(end, END_OF_DAY)
    )


def resolve(window: TimeWindow, now: Optional[datetime] = None) -> ResolvedWindow:
    """Resolve a :class:`TimeWindow` selection."""
    custom = (window.start, window.end) if window.start or window.end else None
    return resolve_window(window.kind, now, custom)
