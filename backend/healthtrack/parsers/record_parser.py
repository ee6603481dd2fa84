"""
Parser for the record payloads returned by the tracker REST API.

The API is inconsistent across screens:
  - BMI:        {"data": [...]}
  - Ear / Eye:  {"data": {"data": [...]}} or {"data": [...]}
  - Fluid:      {"data": [...]} or a bare list
Timestamps arrive as "YYYY-MM-DD HH:MM:SS", ISO-8601 (with or without a
"Z" suffix) or plain dates, under "timestamp", "datetime" or "created_at".

Entries whose timestamp cannot be parsed are skipped with a debug log;
metric fields are kept raw and parsed leniently when used.
"""

import logging
import math
import re
from datetime import datetime, date
from typing import Any, Callable, Iterable, Optional, Union
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

from healthtrack.config import settings
from healthtrack.models import Record

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("timestamp", "datetime", "created_at")

# Defaults differing in year, month and day; a string missing any of them
# parses differently against each
_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))

# Leading numeric prefix, so "120 mg/dL" reads as 120
_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

TimestampAccessor = Union[str, Callable[[dict], Any], None]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def safe_float(value: Any) -> Optional[float]:
    """Parse a metric value leniently, returning ``None`` when it has no number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        match = _NUMBER_PREFIX.match(value)
        if not match:
            return None
        result = float(match.group(0))
    else:
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def _local_zone():
    if settings.TIMEZONE:
        return ZoneInfo(settings.TIMEZONE)
    return None


def to_local_naive(moment: datetime) -> datetime:
    """Convert an aware datetime into naive local time; naive values pass through."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(_local_zone()).replace(tzinfo=None)


def local_now() -> datetime:
    return to_local_naive(datetime.now().astimezone())


def parse_timestamp(raw: Any) -> datetime:
    """Parse the timestamp formats the tracker API produces.

    Handles:
      2025-01-01 08:00:00
      2025-01-01T08:00:00.000Z
      2025-01-01T08:00:00+05:30
      2025-01-01
      epoch seconds or milliseconds
    """
    if isinstance(raw, datetime):
        return to_local_naive(raw)
    if isinstance(raw, date):
        return datetime.combine(raw, datetime.min.time())
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        seconds = raw / 1000.0 if raw > 10_000_000_000 else raw
        return to_local_naive(datetime.fromtimestamp(seconds).astimezone())
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError(f"Unable to parse timestamp: {raw!r}")

    text = raw.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = _parse_full_date(text, raw)
    return to_local_naive(parsed)


def _parse_full_date(text: str, raw: Any) -> datetime:
    try:
        first, second = (date_parser.parse(text, default=d) for d in _DEFAULTS)
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"Unable to parse timestamp: {raw!r}") from exc
    if first != second:
        raise ValueError(f"Timestamp has no full date: {raw!r}")
    return first


def _raw_timestamp(entry: dict, timestamp_field: TimestampAccessor) -> Any:
    if callable(timestamp_field):
        return timestamp_field(entry)
    if timestamp_field:
        return entry.get(timestamp_field)
    for key in TIMESTAMP_FIELDS:
        if entry.get(key) not in (None, ""):
            return entry[key]
    return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_record_list(payload: Any) -> list:
    """Unwrap ``{"data": {"data": [...]}}``, ``{"data": [...]}`` or a bare list."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, dict):
            return extract_record_list(data)
        if isinstance(data, list):
            return data
    return []


def parse_record(entry: dict, timestamp_field: TimestampAccessor = None) -> Record:
    """Build a :class:`Record` from one API entry.

    ``timestamp_field`` names the field holding the timestamp, or is a
    callable returning it; when omitted the usual field names are tried.
    Raises ``ValueError`` if no usable timestamp is found.
    """
    raw = _raw_timestamp(entry, timestamp_field)
    if raw is None:
        raise ValueError("Entry has no timestamp field")
    timestamp = parse_timestamp(raw)
    return Record(id=entry.get("id"), timestamp=timestamp, fields=entry)


def parse_records(
    entries: Iterable[Any],
    timestamp_field: TimestampAccessor = None,
) -> list[Record]:
    """Parse a list of API entries, skipping the ones without a valid timestamp."""
    records = []
    skipped = 0
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            skipped += 1
            logger.debug("Record %d is not an object: %r", idx, entry)
            continue
        try:
            records.append(parse_record(entry, timestamp_field))
        except ValueError as exc:
            skipped += 1
            logger.debug("Record %d skipped: %s", idx, exc)

    if skipped:
        logger.warning("Skipped %d record(s) without a usable timestamp", skipped)
    return records


def parse_payload(payload: Any, timestamp_field: TimestampAccessor = None) -> list[Record]:
    return parse_records(extract_record_list(payload), timestamp_field)
