from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class WindowSelection(BaseModel):
    """Window picked in the UI: a named range or a custom date span."""
    kind: str = "today"
    start: Optional[date] = None
    end: Optional[date] = None
    now: Optional[datetime] = None  # reference instant, defaults to server time


class AnalysisRequest(BaseModel):
    """Request body for the analysis endpoint."""
    records: List[Dict[str, Any]] = []
    window: WindowSelection = WindowSelection()
    metrics: Optional[List[str]] = None
    per_record: bool = False
    timestamp_field: Optional[str] = None
