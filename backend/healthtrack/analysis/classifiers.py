"""
Band-table classifiers for the tracker screens.

Each classifier maps a metric value to a ``Classification`` (category name
plus the color tag the screen paints it with). Bands are checked in order
and the first match wins; the fallback band catches everything else.
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from healthtrack.models import Classification
from healthtrack.parsers.record_parser import safe_float


@dataclass(frozen=True)
class Band:
    category: str
    color_tag: str
    below: Optional[float] = None      # value < below
    at_most: Optional[float] = None    # value <= at_most
    at_least: Optional[float] = None   # value >= at_least

    def matches(self, value: float) -> bool:
        if self.below is not None and not value < self.below:
            return False
        if self.at_most is not None and not value <= self.at_most:
            return False
        if self.at_least is not None and not value >= self.at_least:
            return False
        return True


class BandClassifier:
    """Callable classifier over an ordered band table."""

    def __init__(self, bands: Sequence[Band], fallback: Band):
        self.bands = tuple(bands)
        self.fallback = fallback

    def __call__(self, value: float) -> Classification:
        for band in self.bands:
            if band.matches(value):
                return Classification(band.category, band.color_tag)
        return Classification(self.fallback.category, self.fallback.color_tag)

    @property
    def categories(self) -> list[str]:
        return [b.category for b in self.bands] + [self.fallback.category]


# ─── Band tables ──────────────────────────────────────────────

bmi_classifier = BandClassifier(
    [
        Band("Underweight", "#3B82F6", below=18.5),
        Band("Normal", "#10B981", below=25),
        Band("Overweight", "#F59E0B", below=30),
    ],
    fallback=Band("Obese", "#EF4444"),
)

# Hearing threshold in dB; lower is better
hearing_classifier = BandClassifier(
    [
        Band("Excellent", "#4ECDC4", at_most=10),
        Band("Good", "#34A853", at_most=20),
        Band("Normal", "#4285F4", at_most=25),
        Band("Fair", "#FBBC05", at_most=40),
    ],
    fallback=Band("Poor", "#FF6B6B"),
)

# Decimal visual acuity; higher is better
vision_classifier = BandClassifier(
    [
        Band("Excellent", "#4ECDC4", at_least=1.0),
        Band("Good", "#34A853", at_least=0.8),
        Band("Normal", "#4285F4", at_least=0.6),
        Band("Fair", "#FBBC05", at_least=0.4),
    ],
    fallback=Band("Poor", "#FF6B6B"),
)

# mg/dL
fasting_sugar_classifier = BandClassifier(
    [
        Band("Normal", "#10B981", below=100),
        Band("Prediabetes", "#F59E0B", below=126),
    ],
    fallback=Band("Diabetes", "#EF4444"),
)

# mg/dL
cholesterol_classifier = BandClassifier(
    [
        Band("Desirable", "#10B981", below=200),
        Band("Borderline High", "#F59E0B", below=240),
    ],
    fallback=Band("High", "#EF4444"),
)


def calculate_bmi(weight_kg: Any, height_m: Any) -> Optional[float]:
    """BMI from weight (kg) and height (m); ``None`` when either is unusable."""
    weight = safe_float(weight_kg)
    height = safe_float(height_m)
    if weight is None or height is None or height <= 0:
        return None
    return weight / (height * height)
