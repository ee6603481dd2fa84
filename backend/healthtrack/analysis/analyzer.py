# ============================================================================
# TIME-SERIES ANALYZER
# ============================================================================
#
# Pure functions over already-fetched records. Nothing here performs I/O,
# logs, or keeps state between calls; the input collections are never
# mutated.
#
# Unparsable metric values:
#   - day sums and totals count them as 0
#   - averages, min and max leave them out of numerator and denominator


from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from healthtrack.models import (
    AggregatedPoint,
    Analysis,
    Classification,
    Record,
    ResolvedWindow,
    SummaryStats,
)
from healthtrack.parsers.record_parser import safe_float

Classifier = Callable[[float], Classification]


def _chronological(records: Iterable[Record]) -> List[Record]:
    return sorted(records, key=lambda r: r.timestamp)


def _value_or_zero(record: Record, metric: str) -> float:
    value = safe_float(record.get(metric))
    return 0.0 if value is None else value


def filter_by_window(records: Iterable[Record], window: ResolvedWindow) -> List[Record]:
    """Records whose timestamp lies in ``[window.start, window.end]``, oldest first."""
    return _chronological(r for r in records if window.contains(r.timestamp))


def aggregate_by_day(
    records: Iterable[Record],
    metric_names: Sequence[str],
) -> List[AggregatedPoint]:
    """Sum each metric per calendar day.

    Days without records are omitted rather than zero-filled.
    """
    buckets: Dict[str, Dict[str, float]] = defaultdict(
        lambda: {name: 0.0 for name in metric_names}
    )
    for record in records:
        sums = buckets[record.timestamp.date().isoformat()]
        for name in metric_names:
            sums[name] += _value_or_zero(record, name)

    return [AggregatedPoint(label=day, sums=buckets[day]) for day in sorted(buckets)]


def aggregate_per_record(
    records: Iterable[Record],
    metric_names: Sequence[str],
    label_format: str = "%H:%M:%S",
) -> List[AggregatedPoint]:
    """One point per record, labelled by time of day, for sub-day windows."""
    return [
        AggregatedPoint(
            label=record.timestamp.strftime(label_format),
            sums={name: _value_or_zero(record, name) for name in metric_names},
        )
        for record in _chronological(records)
    ]


def totals(records: Iterable[Record], metric_names: Sequence[str]) -> Dict[str, float]:
    """Sum each metric over every record (unparsable values count as 0)."""
    result = {name: 0.0 for name in metric_names}
    for record in records:
        for name in metric_names:
            result[name] += _value_or_zero(record, name)
    return result


def summarize(
    records: Iterable[Record],
    metric_name: str,
    classifier: Optional[Classifier] = None,
) -> SummaryStats:
    """Count, average, range and latest value (with its band) for one metric."""
    ordered = _chronological(records)
    if not ordered:
        return SummaryStats()

    values = [v for v in (safe_float(r.get(metric_name)) for r in ordered) if v is not None]
    latest = safe_float(ordered[-1].get(metric_name))

    classification = None
    if latest is not None and classifier is not None:
        classification = classifier(latest)

    return SummaryStats(
        count=len(ordered),
        average=sum(values) / len(values) if values else None,
        minimum=min(values) if values else None,
        maximum=max(values) if values else None,
        latest_value=latest,
        latest_classification=classification,
    )


def chart_series(points: Sequence[AggregatedPoint], metric_names: Sequence[str]) -> dict:
    """Split points into the parallel label/value arrays chart widgets take."""
    return {
        "labels": [p.label for p in points],
        "series": {name: [p.sums.get(name, 0.0) for p in points] for name in metric_names},
    }


def analyze(
    records: Iterable[Record],
    window: ResolvedWindow,
    metric_names: Sequence[str],
    classifiers: Optional[Dict[str, Classifier]] = None,
    per_record: bool = False,
) -> Analysis:
    """Filter, aggregate and summarize in one pass for a tracker screen.

    ``per_record`` selects one chart point per record instead of per day;
    callers typically set it for sub-day windows (``window.is_sub_day``).
    """
    classifiers = classifiers or {}
    selected = filter_by_window(records, window)

    if per_record:
        points = aggregate_per_record(selected, metric_names)
    else:
        points = aggregate_by_day(selected, metric_names)

    summaries = {
        name: summarize(selected, name, classifiers.get(name))
        for name in metric_names
    }

    return Analysis(
        window=window,
        records=selected,
        points=points,
        totals=totals(selected, metric_names),
        summaries=summaries,
    )
