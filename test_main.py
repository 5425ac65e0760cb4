"""
Stargate Duty Service — API Tests
=================================
Run:  pytest test_main.py -v --cov=main --cov=stargate --cov-report=term-missing
"""
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from main import app
from stargate.core.database import engine
from stargate.core.schema import clear_all, init_schema
from stargate.repositories import PersonRepository
from stargate.services.person_service import PersonService

client = TestClient(app)


@pytest.fixture(autouse=True)
def reset_db():
    """Empty the shared in-memory store before each test."""
    init_schema(engine)
    clear_all(engine)
    yield


# ── Helpers ──────────────────────────────────────────────────────────────
def _create_person(name="Jane Doe"):
    r = client.post("/api/v1/people", json={"name": name})
    assert r.status_code == 201, r.text
    return r.json()


def _create_duty(name="Jane Doe", rank="1LT", title="Commander",
                 start="2020-01-01T00:00:00Z"):
    return client.post("/api/v1/duties", json={
        "name": name, "rank": rank, "duty_title": title, "duty_start_date": start,
    })


# ═══════════════════════════════════════════════════════════════════════════
# HEALTH & METRICS
# ═══════════════════════════════════════════════════════════════════════════
class TestHealth:
    def test_health_ok(self):
        r = client.get("/health")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "ok"
        assert body["service"] == "stargate-duty-service"

    def test_liveness(self):
        assert client.get("/health/live").json() == {"status": "alive"}

    def test_readiness_ok(self):
        r = client.get("/health/ready")
        assert r.status_code == 200
        assert r.json()["database"] == "connected"

    def test_readiness_fails_when_db_down(self):
        with patch.object(PersonRepository, "verify_connection", side_effect=Exception("boom")):
            r = client.get("/health/ready")
        assert r.status_code == 503
        assert "boom" in r.json()["detail"]

    def test_metrics_endpoint(self):
        _create_person()
        _create_duty()
        r = client.get("/metrics")
        assert r.status_code == 200
        assert "stargate_duties_created_total" in r.text

    def test_request_id_propagated(self):
        r = client.get("/api/v1/people", headers={"X-Request-ID": "my-req-42"})
        assert r.headers["X-Request-ID"] == "my-req-42"

    def test_request_id_generated(self):
        r = client.get("/api/v1/people")
        assert r.headers.get("X-Request-ID")

    def test_unhandled_error_counted_as_500(self):
        labels = {"method": "GET", "endpoint": "/api/v1/people", "status": "500"}
        before = REGISTRY.get_sample_value("stargate_http_errors_total", labels) or 0
        crashing = TestClient(app, raise_server_exceptions=False)
        with patch.object(PersonService, "list_people", side_effect=RuntimeError("kaboom")):
            r = crashing.get("/api/v1/people")
        assert r.status_code == 500
        assert r.json()["error"] == "internal_server_error"
        assert REGISTRY.get_sample_value("stargate_http_errors_total", labels) == before + 1

    def test_shutdown_disposes_pool(self):
        with patch.object(PersonRepository, "dispose") as dispose:
            with TestClient(app):
                dispose.assert_not_called()
        dispose.assert_called_once()


# ═══════════════════════════════════════════════════════════════════════════
# PEOPLE
# ═══════════════════════════════════════════════════════════════════════════
class TestPeople:
    def test_create_person(self):
        d = _create_person("John Doe")
        assert d["name"] == "John Doe"
        assert d["current_rank"] == ""
        assert d["is_retired"] is False

    def test_create_person_strips_whitespace(self):
        assert _create_person("  John Doe  ")["name"] == "John Doe"

    def test_duplicate_person_409(self):
        _create_person("John Doe")
        r = client.post("/api/v1/people", json={"name": "John Doe"})
        assert r.status_code == 409
        assert r.json()["error"] == "person_already_exists"

    def test_blank_person_422(self):
        assert client.post("/api/v1/people", json={"name": "   "}).status_code == 422

    def test_missing_name_422(self):
        assert client.post("/api/v1/people", json={}).status_code == 422

    def test_list_people(self):
        _create_person("Zed")
        _create_person("Amy")
        _create_duty(name="Amy", rank="CPT", title="Pilot")
        r = client.get("/api/v1/people")
        assert r.status_code == 200
        d = r.json()
        assert d["total"] == 2
        assert [p["name"] for p in d["people"]] == ["Amy", "Zed"]
        assert d["people"][0]["current_duty_title"] == "Pilot"
        assert d["people"][0]["career_start_date"] == "2020-01-01"

    def test_get_person_by_name_with_space(self):
        _create_person("Jane Doe")
        r = client.get("/api/v1/people/Jane%20Doe")
        assert r.status_code == 200
        assert r.json()["name"] == "Jane Doe"

    def test_get_unknown_person_404(self):
        r = client.get("/api/v1/people/Nobody")
        assert r.status_code == 404
        assert r.json()["error"] == "person_not_found"


# ═══════════════════════════════════════════════════════════════════════════
# POST /api/v1/duties
# ═══════════════════════════════════════════════════════════════════════════
class TestCreateDuty:
    def test_create_first_duty(self):
        _create_person()
        r = _create_duty()
        assert r.status_code == 201
        d = r.json()
        assert d["id"]
        assert d["duty_start_date"] == "2020-01-01"

    def test_supersede_open_duty(self):
        _create_person()
        _create_duty()
        r = _create_duty(rank="Major", title="Pilot", start="2026-03-01T00:00:00Z")
        assert r.status_code == 201

        history = client.get("/api/v1/duties/Jane Doe").json()
        assert history["person"]["current_rank"] == "Major"
        assert history["person"]["current_duty_title"] == "Pilot"
        assert history["person"]["career_start_date"] == "2020-01-01"
        assert history["person"]["career_end_date"] is None
        pilot, commander = history["duties"]
        assert pilot["duty_end_date"] is None
        assert commander["duty_end_date"] == "2026-02-28"

    def test_retirement(self):
        _create_person()
        _create_duty()
        r = _create_duty(rank="Major", title="RETIRED", start="2026-03-01T00:00:00Z")
        assert r.status_code == 201
        person = client.get("/api/v1/people/Jane Doe").json()
        assert person["career_end_date"] == "2026-02-28"
        assert person["is_retired"] is True

    def test_offset_start_is_normalised(self):
        _create_person()
        r = _create_duty(start="2026-03-01T23:00:00-05:00")
        assert r.status_code == 201
        assert r.json()["duty_start_date"] == "2026-03-02"
        dup = _create_duty(start="2026-03-02T00:00:00Z")
        assert dup.status_code == 409
        assert dup.json()["error"] == "duplicate_duty"

    def test_unknown_person_404(self):
        r = _create_duty(name="Nobody")
        assert r.status_code == 404
        assert r.json()["error"] == "person_not_found"

    def test_non_positive_duration_409(self):
        _create_person()
        _create_duty()
        r = _create_duty(title="Pilot", start="2019-06-01T00:00:00Z")
        assert r.status_code == 409
        assert r.json()["error"] == "non_positive_duty_duration"
        duties = client.get("/api/v1/duties/Jane Doe").json()["duties"]
        assert len(duties) == 1

    def test_error_envelope_carries_request_id(self):
        r = client.post("/api/v1/duties", headers={"X-Request-ID": "req-7"}, json={
            "name": "Nobody", "rank": "CPT", "duty_title": "Pilot",
            "duty_start_date": "2026-01-01T00:00:00Z",
        })
        assert r.json()["request_id"] == "req-7"

    @pytest.mark.parametrize("missing", ["name", "rank", "duty_title", "duty_start_date"])
    def test_missing_field_422(self, missing):
        body = {"name": "Jane Doe", "rank": "CPT", "duty_title": "Pilot",
                "duty_start_date": "2026-01-01T00:00:00Z"}
        body.pop(missing)
        assert client.post("/api/v1/duties", json=body).status_code == 422

    def test_bad_date_422(self):
        _create_person()
        assert _create_duty(start="not-a-date").status_code == 422

    def test_store_unavailable_503(self):
        _create_person()
        from sqlalchemy.exc import OperationalError
        from stargate.repositories import DutyRepository
        boom = OperationalError("SELECT", {}, Exception("connection refused"))
        with patch.object(DutyRepository, "begin_transaction", side_effect=boom):
            r = _create_duty()
        assert r.status_code == 503
        assert r.json()["error"] == "store_unavailable"


# ═══════════════════════════════════════════════════════════════════════════
# GET /api/v1/duties/{name}
# ═══════════════════════════════════════════════════════════════════════════
class TestDutyHistory:
    def test_history_newest_first(self):
        _create_person()
        _create_duty()
        _create_duty(rank="CPT", title="Pilot", start="2022-01-01T00:00:00Z")
        _create_duty(rank="MAJ", title="Lead", start="2024-01-01T00:00:00Z")
        duties = client.get("/api/v1/duties/Jane Doe").json()["duties"]
        assert [d["duty_title"] for d in duties] == ["Lead", "Pilot", "Commander"]
        assert sum(1 for d in duties if d["duty_end_date"] is None) == 1

    def test_unknown_person_404(self):
        r = client.get("/api/v1/duties/Nobody")
        assert r.status_code == 404
        body = r.json()
        assert body["error"] == "person_not_found"
        assert "duties" not in body

    def test_person_without_duties(self):
        _create_person("Rookie")
        d = client.get("/api/v1/duties/Rookie").json()
        assert d["duties"] == []
        assert d["person"]["name"] == "Rookie"
