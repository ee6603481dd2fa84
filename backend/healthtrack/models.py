from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Record:
    """One timestamped health measurement, immutable once fetched."""
    id: Any
    timestamp: datetime
    fields: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def with_fields(self, **extra: Any) -> "Record":
        """Return a copy carrying additional (or replaced) fields."""
        merged = dict(self.fields)
        merged.update(extra)
        return Record(self.id, self.timestamp, merged)


class WindowKind(str, Enum):
    """Named date ranges offered by the tracker screens."""
    TODAY = "today"
    YESTERDAY = "yesterday"
    WEEK = "week"
    MONTH = "month"
    CUSTOM = "custom"
    ALL = "all"


@dataclass(frozen=True)
class TimeWindow:
    """A window selection as made in the UI, before it is anchored to 'now'."""
    kind: WindowKind
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class ResolvedWindow:
    """Concrete inclusive [start, end] range in naive local time."""
    kind: WindowKind
    start: datetime
    end: datetime

    @property
    def is_sub_day(self) -> bool:
        return self.start.date() == self.end.date()

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class AggregatedPoint:
    """One chart point: a day (or a single record) and its metric sums."""
    label: str
    sums: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Classification:
    category: str
    color_tag: str


@dataclass(frozen=True)
class SummaryStats:
    """Summary of one metric; ``None`` stands for "N/A" on empty input."""
    count: int = 0
    average: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    latest_value: Optional[float] = None
    latest_classification: Optional[Classification] = None

    @property
    def latest_category(self) -> Optional[str]:
        if self.latest_classification is None:
            return None
        return self.latest_classification.category


@dataclass(frozen=True)
class Analysis:
    """Everything a tracker screen renders for one window selection."""
    window: ResolvedWindow
    records: list
    points: list
    totals: dict
    summaries: dict
