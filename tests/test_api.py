"""Tests for the intake HTTP API."""

import pytest
from fastapi.testclient import TestClient

from src.core import InsecureRandomSourceError, SubmissionFailedError
from src.intake.application import ISubmissionTransport, SubmissionService
from src.intake.interfaces.controllers import get_submission_service
from src.main import app


class StubTransport(ISubmissionTransport):

    def __init__(self, fail_with=None):
        self.fail_with = fail_with
        self.calls = []

    async def send(self, payload, headers):
        self.calls.append((payload, headers))
        if self.fail_with:
            raise self.fail_with
        return {"success": True}


@pytest.fixture
def transport():
    return StubTransport()


@pytest.fixture
def client(transport):
    app.dependency_overrides[get_submission_service] = lambda: SubmissionService(transport)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert "timestamp" in body


def test_correlation_id_echoed(client):
    response = client.get("/health", headers={"X-Correlation-ID": "abc-123"})
    assert response.headers["X-Correlation-ID"] == "abc-123"


def test_catalog(client):
    body = client.get("/intake/catalog").json()

    assert [c["key"] for c in body["concerns"]][:3] == ["employment", "relationships", "emotional"]
    assert len(body["concerns"]) == 10
    assert len(body["supportPreferences"]) == 6


def test_validate_step_reports_field_errors(client):
    response = client.post(
        "/intake/validate/1",
        json={"firstName": "", "lastName": "Smith", "email": "not-an-email"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is False
    assert set(body["errors"]) == {"firstName", "email"}


def test_validate_step_out_of_range(client):
    assert client.post("/intake/validate/6", json={}).status_code == 422


def test_unknown_concern_rejected(client):
    response = client.post("/intake/triage", json={"concerns": ["astrology"]})
    assert response.status_code == 422


def test_triage_preview(client):
    response = client.post("/intake/triage", json={
        "severity": "low",
        "riskFlags": {"selfHarm": True, "domesticAbuse": True},
        "housing": "homeless",
        "employmentStatus": "unemployed",
        "concerns": ["abuse"],
    })

    assert response.status_code == 200
    assert response.json() == {
        "riskScore": 17,
        "buckets": ["Safety/Crisis"],
        "priority": "Immediate",
    }


def test_submit_success(client, transport, payload_json):
    payload_json["triage"] = {"riskScore": 0, "buckets": [], "priority": "Low"}

    response = client.post(
        "/intake/submit",
        json=payload_json,
        headers={"X-CSRF-Token": "csrf-abc"},
    )

    assert response.status_code == 202
    body = response.json()
    assert body["status"] == "received"
    assert body["triage"]["riskScore"] == 2

    sent, headers = transport.calls[0]
    assert headers["X-Idempotency-Key"] == body["submissionId"]
    assert headers["X-CSRF-Token"] == "csrf-abc"
    assert sent["triage"]["buckets"] == ["Mental Health & Addiction", "Money/Debt Advice"]
    assert sent["concernDetails"] == "Struggling with bills since &lt;March&gt;."
    assert sent["schemaVersion"] == 1


def test_submit_csrf_from_cookie(client, transport, payload_json):
    client.cookies.set("XSRF-TOKEN", "from-cookie")

    client.post("/intake/submit", json=payload_json)

    assert transport.calls[0][1]["X-CSRF-Token"] == "from-cookie"


def test_submit_invalid_record(client, transport):
    response = client.post("/intake/submit", json={"firstName": "Sam"})

    assert response.status_code == 422
    assert "privacy" in response.json()["errors"]
    assert transport.calls == []


def test_submit_crisis_needs_acknowledgement(client, payload_json):
    payload_json["severity"] = "crisis"

    response = client.post("/intake/submit", json=payload_json)

    assert response.status_code == 422
    assert set(response.json()["errors"]) == {"crisis"}


def test_submit_transport_failure(client, transport, payload_json):
    transport.fail_with = SubmissionFailedError("Server returned 500", status_code=500)

    response = client.post("/intake/submit", json=payload_json)

    assert response.status_code == 502
    assert response.json()["message"] == "Server returned 500"


def test_submit_without_secure_random(client, transport, payload_json, monkeypatch):
    from src.intake.application import services

    def no_entropy():
        raise InsecureRandomSourceError()

    monkeypatch.setattr(services, "generate_idempotency_key", no_entropy)

    response = client.post("/intake/submit", json=payload_json)

    assert response.status_code == 503
    assert transport.calls == []
