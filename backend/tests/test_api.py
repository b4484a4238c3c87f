"""
Integration tests for API endpoints.
"""
import uuid
import pytest
from fastapi.testclient import TestClient
from app.core.config import reload_settings
from app.core.limiter import limiter
from app.core.performance import PerformanceMonitor
from main import app


@pytest.fixture
def client():
    """Create a test client with fresh rate limit counters."""
    limiter.reset()
    return TestClient(app)


@pytest.fixture
def records():
    return [
        {"date_start": "2024-01-01T08:00:00", "county": "Polk", "event_type": "CRASH"},
        {"date_start": "2024-01-02T08:00:00", "county": "Polk", "event_type": "CRASH"},
        {"date_start": "2024-01-01T10:00:00", "county": "Story", "event_type": "STALL"},
    ]


@pytest.mark.integration
def test_health_check(client):
    """Test the health check endpoint."""
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.integration
def test_root_endpoint(client):
    """Test the root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert "message" in response.json()


@pytest.mark.integration
def test_dimension_catalog(client):
    response = client.get("/api/dimensions")
    assert response.status_code == 200
    data = response.json()
    assert {"field": "date_start", "label": "Date Start"} in data["time"]
    assert {"field": "county", "label": "County"} in data["location"]
    assert {"field": "event_type", "label": "Event Type"} in data["category"]


@pytest.mark.integration
def test_validate_dimensions(client):
    response = client.post("/api/dimensions/validate", json={
        "time": {"field": "date_start"},
        "location": "county",
    })
    assert response.status_code == 200
    assert response.json() == {"valid": True, "suggested_chart_types": ["Line", "Heatmap"]}

    response = client.post("/api/dimensions/validate", json={"location": "county"})
    assert response.json() == {"valid": False, "suggested_chart_types": []}


@pytest.mark.integration
def test_create_line_chart(client, records):
    response = client.post("/api/charts", json={
        "records": records,
        "selection": {"time": {"field": "date_start", "granularity": "day"}, "categories": ["event_type"]},
        "chart_type": "Line",
    })

    assert response.status_code == 200
    spec = response.json()
    assert spec["placeholder"] is False
    assert spec["x_axis"][0]["data"] == ["1/1/2024", "1/2/2024"]
    assert [s["name"] for s in spec["series"]] == ["CRASH", "STALL"]
    assert spec["series"][0]["data"] == [1, 1]
    assert spec["series"][0]["type"] == "line"
    assert "visual_map" not in spec


@pytest.mark.integration
def test_create_chart_with_date_range(client, records):
    response = client.post("/api/charts", json={
        "records": records,
        "selection": {
            "location": "county",
            "categories": ["event_type"],
            "date_range": {"start": "2024-01-02T00:00:00Z", "end": "2024-01-02T23:59:59Z"},
        },
        "chart_type": "Pie",
    })

    spec = response.json()
    slices = spec["series"][0]["data"]
    assert [(s["name"], s["value"]) for s in slices] == [("Polk", 1)]


@pytest.mark.integration
def test_placeholder_is_not_an_error(client, records):
    response = client.post("/api/charts", json={
        "records": records,
        "selection": {"location": "county"},
        "chart_type": "Bar",
    })

    assert response.status_code == 200
    spec = response.json()
    assert spec["placeholder"] is True
    assert spec["title"] == "Please select a valid combination of dimensions"
    assert spec["series"] == []


@pytest.mark.integration
def test_missing_chart_type(client, records):
    response = client.post("/api/charts", json={"records": records})
    assert response.json()["title"] == "No chart type selected"


@pytest.mark.integration
def test_unknown_chart_type_is_rejected(client, records):
    response = client.post("/api/charts", json={"records": records, "chart_type": "Radar"})
    assert response.status_code == 422


@pytest.mark.integration
def test_bad_field_name_is_rejected(client, records):
    response = client.post("/api/charts", json={
        "records": records,
        "selection": {"categories": ["event\ntype"]},
        "chart_type": "Bar",
    })
    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_REQUEST"
    assert response.json()["errors"]


@pytest.mark.integration
def test_too_many_records(client, records, monkeypatch):
    monkeypatch.setenv("MAX_RECORDS_PER_REQUEST", "2")
    reload_settings()
    try:
        response = client.post("/api/charts", json={"records": records, "chart_type": "Bar"})
    finally:
        monkeypatch.undo()
        reload_settings()

    assert response.status_code == 413
    detail = response.json()["detail"]
    assert detail["code"] == "TOO_MANY_RECORDS"
    assert "correlation_id" in detail


@pytest.mark.integration
def test_overview(client, records):
    response = client.post("/api/charts/overview", json={"records": records})

    assert response.status_code == 200
    data = response.json()
    assert data["trend"]["title"] == "Recent Event Trends by Type"
    assert data["locations"]["series"][0]["data"][0]["name"] == "Polk"
    assert data["locations"]["series"][0]["data"][0]["percent"] == 67


@pytest.mark.integration
def test_metrics_track_chart_generation(client, records):
    PerformanceMonitor.clear_metrics()
    client.post("/api/charts", json={"records": records, "chart_type": "Bar",
                                     "selection": {"categories": ["event_type"]}})

    response = client.get("/api/metrics")
    assert response.status_code == 200
    performance = response.json()["performance"]
    assert performance["generate_chart"]["count"] == 1
    assert "request_duration" in performance


@pytest.mark.integration
def test_correlation_id_header(client):
    """Test that correlation ID is returned in response headers."""
    correlation_id = str(uuid.uuid4())
    response = client.get("/api/health", headers={"X-Correlation-ID": correlation_id})

    assert response.headers["X-Correlation-ID"] == correlation_id
    assert "X-Response-Time" in response.headers


@pytest.mark.integration
def test_correlation_id_generated(client):
    """Test that correlation ID is generated if not provided."""
    response = client.get("/api/health")
    uuid.UUID(response.headers["X-Correlation-ID"])  # Will raise if invalid


@pytest.mark.integration
def test_rate_limit_exceeded(client, monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "2")
    reload_settings()
    try:
        statuses = [
            client.post("/api/dimensions/validate", json={"categories": ["event_type"]}).status_code
            for _ in range(3)
        ]
        last = client.post("/api/dimensions/validate", json={"categories": ["event_type"]})
    finally:
        monkeypatch.undo()
        reload_settings()
        limiter.reset()

    assert statuses[:2] == [200, 200]
    assert last.status_code == 429
    assert last.json()["code"] == "RATE_LIMIT_EXCEEDED"
    assert "Retry-After" in last.headers
