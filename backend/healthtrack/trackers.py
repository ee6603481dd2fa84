"""
Tracker screens expressed as configuration over the shared analyzer.

Each tracker names the API resource it reads, the field carrying the
timestamp, the metrics it charts, and which metrics get a band
classification. Derived metrics (per-ear and per-eye averages, fluid
balance) are computed onto the records before analysis.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from healthtrack.analysis.classifiers import (
    bmi_classifier,
    cholesterol_classifier,
    fasting_sugar_classifier,
    hearing_classifier,
    vision_classifier,
)
from healthtrack.models import Record
from healthtrack.parsers.record_parser import safe_float


class UnknownTrackerError(KeyError):
    """Raised when a tracker name is not registered."""
    pass


def mean_of(*names: str) -> Callable[[Record], float]:
    """Average of several readings, counting unparsable ones as 0."""
    def derive(record: Record) -> float:
        values = [safe_float(record.get(n)) for n in names]
        return sum(v or 0.0 for v in values) / len(names)
    return derive


def difference(minuend: str, subtrahend: str) -> Callable[[Record], float]:
    def derive(record: Record) -> float:
        return (safe_float(record.get(minuend)) or 0.0) - (safe_float(record.get(subtrahend)) or 0.0)
    return derive


@dataclass(frozen=True)
class TrackerConfig:
    name: str
    label: str
    endpoint: Optional[str]
    timestamp_field: str
    metrics: Tuple[str, ...]
    classifiers: Dict[str, Callable] = field(default_factory=dict)
    derived: Dict[str, Callable[[Record], float]] = field(default_factory=dict)
    unit: str = ""

    @property
    def all_metrics(self) -> List[str]:
        return list(self.metrics) + [m for m in self.derived if m not in self.metrics]

    def prepare(self, records: Sequence[Record]) -> List[Record]:
        """Return records carrying this tracker's derived metrics."""
        if not self.derived:
            return list(records)
        return [
            r.with_fields(**{name: fn(r) for name, fn in self.derived.items()})
            for r in records
        ]


_EYE_LEFT = tuple(f"L{i}" for i in range(1, 7))
_EYE_RIGHT = tuple(f"R{i}" for i in range(1, 7))

TRACKERS: Dict[str, TrackerConfig] = {
    t.name: t
    for t in [
        TrackerConfig(
            name="bmi",
            label="BMI",
            endpoint="/api/v1/bmi/{user_id}",
            timestamp_field="timestamp",
            metrics=("bmi", "weight", "height"),
            classifiers={"bmi": bmi_classifier},
        ),
        TrackerConfig(
            name="sugar_cholesterol",
            label="Sugar & Cholesterol",
            endpoint=None,
            timestamp_field="datetime",
            metrics=("fasting_sugar", "post_meal_sugar", "cholesterol", "hdl", "ldl", "triglycerides"),
            classifiers={
                "fasting_sugar": fasting_sugar_classifier,
                "cholesterol": cholesterol_classifier,
            },
            unit="mg/dL",
        ),
        TrackerConfig(
            name="lab",
            label="Lab Reports",
            endpoint="/api/v1/report/{user_id}",
            timestamp_field="created_at",
            metrics=("fasting_sugar", "random_sugar", "cholesterol"),
            classifiers={
                "fasting_sugar": fasting_sugar_classifier,
                "cholesterol": cholesterol_classifier,
            },
            unit="mg/dL",
        ),
        TrackerConfig(
            name="ear",
            label="Ear Health",
            endpoint="/api/v1/ear/{user_id}",
            timestamp_field="datetime",
            metrics=("LHigh", "LMedium", "LLow", "RHigh", "RMedium", "RLow"),
            classifiers={
                "LHigh": hearing_classifier,
                "RHigh": hearing_classifier,
                "left_average": hearing_classifier,
                "right_average": hearing_classifier,
            },
            derived={
                "left_average": mean_of("LHigh", "LMedium", "LLow"),
                "right_average": mean_of("RHigh", "RMedium", "RLow"),
            },
            unit="dB",
        ),
        TrackerConfig(
            name="eye",
            label="Eye Health",
            endpoint="/api/v1/eye/{user_id}",
            timestamp_field="datetime",
            metrics=_EYE_LEFT + _EYE_RIGHT,
            classifiers={
                "left_average": vision_classifier,
                "right_average": vision_classifier,
            },
            derived={
                "left_average": mean_of(*_EYE_LEFT),
                "right_average": mean_of(*_EYE_RIGHT),
            },
        ),
        TrackerConfig(
            name="dietary",
            label="Dietary Intake",
            endpoint="/api/v1/food/{user_id}",
            timestamp_field="created_at",
            metrics=("carbohydrates", "protein", "fat"),
            unit="g",
        ),
        TrackerConfig(
            name="fluid",
            label="Fluid Balance",
            endpoint="/api/v1/data/user/{user_id}",
            timestamp_field="timestamp",
            metrics=("water_in", "water_out"),
            derived={"balance": difference("water_in", "water_out")},
            unit="mL",
        ),
    ]
}


def get_tracker(name: str) -> TrackerConfig:
    try:
        return TRACKERS[name]
    except KeyError:
        raise UnknownTrackerError(name)
