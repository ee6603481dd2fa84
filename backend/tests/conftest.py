"""
Shared pytest fixtures for the health tracker analytics test suite.

Provides:
  - make_records:   Factory turning (timestamp, fields) pairs into Records.
  - scenario:       The three-record water scenario used across tests.
  - api_payloads:   Per-path JSON bodies served by the fake tracker API.
  - client:         A FastAPI TestClient whose records client talks to an
                    httpx.MockTransport instead of the network.
"""

from datetime import datetime

import httpx
import pytest
from fastapi.testclient import TestClient

from healthtrack.main import app
from healthtrack.models import Record
from healthtrack.parsers.record_parser import parse_timestamp
from healthtrack.routers.analysis import get_records_client
from healthtrack.services.records_client import RecordsClient


# ---------------------------------------------------------------------------
# Record fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def make_records():
    """Return a factory: ``make_records([("2025-01-01 08:00", {"v": 20}), ...])``."""

    def _make(rows):
        return [
            Record(id=idx, timestamp=parse_timestamp(ts), fields=fields)
            for idx, (ts, fields) in enumerate(rows, start=1)
        ]

    return _make


@pytest.fixture()
def scenario(make_records):
    """Two readings on 2025-01-01 and one on 2025-01-02, newest first."""
    return make_records([
        ("2025-01-02T08:00:00", {"v": 10}),
        ("2025-01-01T20:00:00", {"v": 30}),
        ("2025-01-01T08:00:00", {"v": 20}),
    ])


NOW = datetime(2025, 3, 15, 14, 30, 0)


@pytest.fixture()
def now():
    return NOW


# ---------------------------------------------------------------------------
# Fake tracker API
# ---------------------------------------------------------------------------

@pytest.fixture()
def api_payloads():
    """Map of request path -> (status, JSON body). Tests may add entries."""
    return {
        "/api/v1/bmi/42": (200, {"data": [
            {"id": 1, "timestamp": "2025-03-10 09:00:00", "height": "1.75", "weight": "70", "bmi": "22.9"},
            {"id": 2, "timestamp": "2025-03-14 09:00:00", "height": "1.75", "weight": "84", "bmi": "27.4"},
            {"id": 3, "timestamp": "2025-03-15 09:00:00", "height": "1.75", "weight": "83", "bmi": "27.1"},
        ]}),
        "/api/v1/ear/42": (200, {"data": {"data": [
            {"id": 7, "datetime": "2025-03-15 08:00:00",
             "LHigh": "10", "LMedium": "20", "LLow": "30",
             "RHigh": "45", "RMedium": "", "RLow": "15"},
        ]}}),
        "/api/v1/food/42": (404, {"detail": "Not found"}),
        "/api/v1/eye/42": (500, {"detail": "boom"}),
    }


@pytest.fixture()
def records_client(api_payloads):
    """A RecordsClient backed by ``api_payloads``."""

    def _handler(request: httpx.Request) -> httpx.Response:
        status, body = api_payloads.get(request.url.path, (404, {"detail": "Not found"}))
        return httpx.Response(status, json=body)

    return RecordsClient(base_url="https://tracker.test", transport=httpx.MockTransport(_handler))


# ---------------------------------------------------------------------------
# FastAPI TestClient fixture
# ---------------------------------------------------------------------------

@pytest.fixture()
def client(records_client):
    """Return a TestClient whose ``get_records_client`` dependency is
    overridden to use the fake tracker API.
    """
    app.dependency_overrides[get_records_client] = lambda: records_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
