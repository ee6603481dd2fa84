from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from healthtrack.analysis.analyzer import analyze, chart_series
from healthtrack.analysis.windows import InvalidWindowError, resolve_window
from healthtrack.models import Analysis, SummaryStats
from healthtrack.parsers.record_parser import local_now, parse_records, to_local_naive
from healthtrack.schemas import AnalysisRequest
from healthtrack.services.records_client import RecordsClient, RecordsClientError
from healthtrack.trackers import TRACKERS, TrackerConfig, UnknownTrackerError, get_tracker

router = APIRouter(tags=["analysis"])


def get_records_client() -> RecordsClient:
    return RecordsClient()


# ─── Helpers ──────────────────────────────────────────────────

def _tracker_or_404(name: str) -> TrackerConfig:
    try:
        return get_tracker(name)
    except UnknownTrackerError:
        available = sorted(TRACKERS)
        raise HTTPException(status_code=404, detail=f"Unknown tracker. Available: {available}")


def _window_or_422(kind: str, now: Optional[datetime], start: Optional[date], end: Optional[date]):
    custom = (start, end) if start or end else None
    # A dateless custom window resolves against the server clock
    now = local_now() if now is None else to_local_naive(now)
    try:
        return resolve_window(kind, now, custom)
    except InvalidWindowError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _serialize_summary(stats: SummaryStats) -> dict:
    classification = stats.latest_classification
    return {
        "count": stats.count,
        "average": stats.average,
        "min": stats.minimum,
        "max": stats.maximum,
        "latestValue": stats.latest_value,
        "latestCategory": classification.category if classification else None,
        "latestColor": classification.color_tag if classification else None,
    }


def _serialize(tracker: TrackerConfig, result: Analysis, metrics) -> dict:
    window = result.window
    return {
        "tracker": tracker.name,
        "window": {
            "kind": window.kind.value,
            "start": window.start.isoformat(),
            "end": window.end.isoformat(),
            "isSubDay": window.is_sub_day,
        },
        "records": [
            {**dict(r.fields), "id": r.id, "timestamp": r.timestamp.isoformat()}
            for r in result.records
        ],
        "points": [{"label": p.label, "sums": p.sums} for p in result.points],
        "chart": chart_series(result.points, metrics),
        "totals": result.totals,
        "summaries": {name: _serialize_summary(s) for name, s in result.summaries.items()},
    }


def _run(tracker: TrackerConfig, records, window, metrics, per_record: bool) -> dict:
    metrics = metrics or tracker.all_metrics
    result = analyze(
        tracker.prepare(records),
        window,
        metrics,
        classifiers=tracker.classifiers,
        per_record=per_record,
    )
    return _serialize(tracker, result, metrics)


# ─── Trackers ─────────────────────────────────────────────────

@router.get("/trackers")
def list_trackers():
    """List configured trackers with their metrics."""
    return {
        "trackers": [
            {
                "name": t.name,
                "label": t.label,
                "unit": t.unit,
                "timestampField": t.timestamp_field,
                "metrics": t.all_metrics,
                "classified": sorted(t.classifiers),
                "remote": t.endpoint is not None,
            }
            for t in TRACKERS.values()
        ]
    }


# ─── Analysis ─────────────────────────────────────────────────

@router.post("/analysis/{tracker_name}")
def analyze_records(tracker_name: str, request: AnalysisRequest):
    """Filter, aggregate and summarize records supplied in the request body."""
    tracker = _tracker_or_404(tracker_name)
    window = _window_or_422(
        request.window.kind, request.window.now, request.window.start, request.window.end
    )
    records = parse_records(request.records, request.timestamp_field or tracker.timestamp_field)
    return _run(tracker, records, window, request.metrics, request.per_record)


@router.get("/trackers/{tracker_name}/analysis")
async def analyze_user_records(
    tracker_name: str,
    user_id: str = Query(...),
    window: str = Query("today"),
    start: Optional[date] = None,
    end: Optional[date] = None,
    now: Optional[datetime] = None,
    per_record: bool = False,
    client: RecordsClient = Depends(get_records_client),
):
    """Fetch a user's records from the tracker API, then analyze them."""
    tracker = _tracker_or_404(tracker_name)
    if not tracker.endpoint:
        raise HTTPException(status_code=404, detail=f"Tracker {tracker.name!r} has no remote records")
    resolved = _window_or_422(window, now, start, end)

    try:
        records = await client.fetch(tracker, user_id)
    except RecordsClientError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return _run(tracker, records, resolved, None, per_record)
