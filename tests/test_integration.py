from datetime import datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.fieldroute.main import create_app
from src.fieldroute.models.domain import AppointmentKind, Coordinate, Job, Worker


def _job(jid: str, lng: float, assigned: tuple[str, ...] = (), workers_needed: int = 1) -> Job:
    start = datetime(2026, 10, 19, 9)
    return Job(
        id=jid,
        service_type="Lawn Mowing",
        start_time=start,
        end_time=start + timedelta(hours=1),
        appointment_kind=AppointmentKind.ANYTIME,
        duration_hours=1,
        location=Coordinate(30.0, lng),
        assigned_worker_ids=list(assigned),
        required_worker_count=workers_needed,
        customer_name=f"Customer {jid}",
    )


@pytest.fixture
def api_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    app = create_app()
    client = TestClient(app)

    # keep run outputs in the tmpdir
    from src.fieldroute.persistence.filesystem import FileStorage
    from src.fieldroute.services.dispatch import service as dispatch_service

    monkeypatch.setattr(dispatch_service, "FileStorage", lambda: FileStorage(root=tmp_path))

    return client


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> list:
    from src.fieldroute.services.dispatch import service as dispatch_service

    updates: list = []
    workers = [Worker(id="W1", first_name="Ana", last_name="Ruiz", home=Coordinate(30.0, -97.0))]
    jobs = [
        _job("A", -97.01, assigned=("W1",)),
        _job("B", -97.02),
        _job("CREW", -97.03, workers_needed=2),
    ]

    monkeypatch.setattr(dispatch_service, "get_provider_office", lambda provider_id: None)
    monkeypatch.setattr(dispatch_service, "get_field_workers", lambda provider_id, worker_ids=None: workers)
    monkeypatch.setattr(dispatch_service, "get_jobs_for_day", lambda provider_id, day: list(jobs))
    monkeypatch.setattr(dispatch_service, "get_skill_names", lambda provider_id: {})
    monkeypatch.setattr(dispatch_service, "update_job", lambda job_id, fields: updates.append((job_id, fields)))
    return updates


def test_optimize_all_requires_provider(api_client: TestClient):
    response = api_client.post("/api/dispatch/optimize-all", json={"date": "2026-10-19"})

    assert response.status_code == 400
    assert response.json() == {"error": "Provider ID required"}


def test_optimize_all_returns_camel_case_routes(api_client: TestClient, store: list):
    response = api_client.post(
        "/api/dispatch/optimize-all",
        json={"date": "2026-10-19", "providerId": "P1", "autoAssign": True},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    worker = payload["workers"][0]
    assert worker["name"] == "Ana Ruiz"
    assert worker["jobCount"] == 2
    assert [job["id"] for job in worker["jobs"]] == ["A", "B"]
    assert worker["jobs"][0]["etaEnd"] == "9:02 AM"
    assert worker["jobs"][0]["isLate"] is False
    assert payload["summary"]["lateCount"] == 0
    assert payload["needsReview"][0]["reason"] == "MULTI_WORKER_REQUIRED"
    assert payload["summary"]["totalWorkers"] == 1
    assert payload["summary"]["needsReviewCount"] == 1
    assert payload["unassignableJobs"] == []
    assert payload["persistenceErrors"] == []
    assert {job_id for job_id, _ in store} == {"A", "B"}


def test_optimize_all_hides_internal_errors(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    from src.fieldroute.services.dispatch import service as dispatch_service

    def broken(provider_id):
        raise RuntimeError("database unreachable")

    monkeypatch.setattr(dispatch_service, "get_provider_office", broken)

    response = api_client.post("/api/dispatch/optimize-all", json={"day": "2026-10-19", "providerId": "P1"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to optimize routes"}


def test_malformed_job_row_is_a_server_error(api_client: TestClient, store: list, monkeypatch: pytest.MonkeyPatch):
    from src.fieldroute.data.dispatch_repository import job_from_row
    from src.fieldroute.services.dispatch import service as dispatch_service

    row = {"id": "J1", "service_type": "Lawn Mowing", "start_time": "not-a-date", "end_time": "not-a-date"}
    monkeypatch.setattr(dispatch_service, "get_jobs_for_day", lambda provider_id, day: [job_from_row(row)])

    response = api_client.post("/api/dispatch/optimize-all", json={"day": "2026-10-19", "providerId": "P1"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to optimize routes"}
    assert store == []


def test_optimize_all_rejects_missing_day(api_client: TestClient):
    response = api_client.post("/api/dispatch/optimize-all", json={"providerId": "P1"})

    assert response.status_code == 422


def test_health_endpoints(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    from src.fieldroute.api.routes import health

    monkeypatch.setattr(health, "_get_supabase_client", lambda: None)

    assert api_client.get("/api/health").json() == {"status": "ok"}
    assert api_client.get("/api/health/database").json() == {
        "service": "supabase",
        "configured": False,
        "healthy": False,
    }
