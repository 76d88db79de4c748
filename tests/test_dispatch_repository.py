from datetime import date, datetime
from types import SimpleNamespace

import pytest

from src.fieldroute.data import dispatch_repository
from src.fieldroute.data.dispatch_repository import job_from_row, parse_timestamp, worker_from_row
from src.fieldroute.models.domain import AppointmentKind, Coordinate


class FakeQuery:
    def __init__(self, client: "FakeClient", table: str):
        self.client = client
        self.calls: list[tuple] = [("table", table)]
        client.queries.append(self)

    def __getattr__(self, name):
        def record(*args):
            self.calls.append((name, *args))
            return self

        return record

    def execute(self):
        table = self.calls[0][1]
        return SimpleNamespace(data=self.client.rows.get(table, []))


class FakeClient:
    def __init__(self, rows: dict | None = None):
        self.rows = rows or {}
        self.queries: list[FakeQuery] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def fake_client(monkeypatch: pytest.MonkeyPatch) -> FakeClient:
    client = FakeClient()
    monkeypatch.setattr(dispatch_repository, "require_supabase_client", lambda: client)
    monkeypatch.setattr(dispatch_repository.settings, "timezone", "America/Chicago")
    return client


def _job_row(**overrides) -> dict:
    row = {
        "id": 7,
        "service_type": " Tree Trimming ",
        "start_time": "2026-10-19T14:00:00Z",
        "end_time": "2026-10-19T15:30:00Z",
        "appointment_type": "fixed",
        "status": "scheduled",
        "duration_hours": "1.5",
        "latitude": None,
        "longitude": None,
        "assigned_user_ids": ["W1"],
        "required_skill_ids": ["S1", "S2"],
        "required_worker_count": 2,
        "customers": {"name": "Acme HOA", "latitude": 30.27, "longitude": -97.74},
    }
    row.update(overrides)
    return row


def test_job_from_row_falls_back_to_customer_location(fake_client):
    job = job_from_row(_job_row())

    assert job.id == "7"
    assert job.service_type == "Tree Trimming"
    assert job.location == Coordinate(30.27, -97.74)
    assert job.appointment_kind is AppointmentKind.FIXED
    assert job.duration_minutes == 90
    assert job.is_multi_worker
    assert job.customer_name == "Acme HOA"
    assert job.title == "Tree Trimming - Acme HOA"


def test_job_timestamps_are_converted_to_local_time(fake_client):
    job = job_from_row(_job_row())

    # 14:00 UTC is 09:00 in Chicago during daylight time
    assert job.start_time == datetime(2026, 10, 19, 9, 0)
    assert job.start_time.tzinfo is None


def test_job_with_zero_coordinates_has_no_location(fake_client):
    job = job_from_row(_job_row(latitude=0, longitude=0, customers=None))

    assert job.location is None
    assert job.customer_name is None


def test_unknown_appointment_type_is_anytime(fake_client):
    assert job_from_row(_job_row(appointment_type="sometime")).appointment_kind is AppointmentKind.ANYTIME
    assert job_from_row(_job_row(appointment_type=None)).appointment_kind is AppointmentKind.ANYTIME
    assert job_from_row(_job_row(appointment_type="WINDOW")).is_anchor


def test_malformed_row_raises(fake_client):
    with pytest.raises(ValueError):
        job_from_row(_job_row(start_time="tomorrow-ish"))
    with pytest.raises(ValueError):
        job_from_row(_job_row(latitude="north"))


def test_parse_timestamp_keeps_naive_values():
    assert parse_timestamp("2026-10-19T08:30:00") == datetime(2026, 10, 19, 8, 30)


def test_worker_from_row_collects_skills():
    worker = worker_from_row(
        {
            "id": "W1",
            "first_name": "Ana",
            "last_name": "Ruiz",
            "home_latitude": "30.1",
            "home_longitude": "-97.2",
            "worker_skills": [
                {"skill_id": "S1", "skills": {"name": "Chainsaw Operation"}},
                {"skill_id": "S2", "skills": None},
                {"skill_id": None},
            ],
        }
    )

    assert worker.name == "Ana Ruiz"
    assert worker.home == Coordinate(30.1, -97.2)
    assert worker.skill_ids == ["S1", "S2"]
    assert worker.skills == ["Chainsaw Operation"]


def test_requested_workers_bypass_role_filter(fake_client):
    fake_client.rows["provider_users"] = [{"id": "W9", "first_name": "Lee", "last_name": ""}]

    workers = dispatch_repository.get_field_workers("P1", ["W9"])

    assert [worker.id for worker in workers] == ["W9"]
    calls = fake_client.queries[0].calls
    assert ("in_", "id", ["W9"]) in calls
    assert ("eq", "role", "field") not in calls


def test_active_field_workers_by_default(fake_client):
    dispatch_repository.get_field_workers("P1")

    calls = fake_client.queries[0].calls
    assert ("eq", "role", "field") in calls
    assert ("eq", "status", "active") in calls


def test_jobs_for_day_excludes_cancelled(fake_client):
    fake_client.rows["jobs"] = [_job_row()]

    jobs = dispatch_repository.get_jobs_for_day("P1", date(2026, 10, 19))

    assert [job.id for job in jobs] == ["7"]
    calls = fake_client.queries[0].calls
    assert ("neq", "status", "cancelled") in calls
    assert ("gte", "start_time", "2026-10-19T00:00:00-05:00") in calls
    assert ("lt", "start_time", "2026-10-20T00:00:00-05:00") in calls


def test_missing_provider_has_no_office(fake_client):
    assert dispatch_repository.get_provider_office("nope") is None

    fake_client.rows["providers"] = [{"id": "P1", "office_latitude": 30.0, "office_longitude": -97.0}]
    assert dispatch_repository.get_provider_office("P1") == Coordinate(30.0, -97.0)


def test_update_job_serializes_times(fake_client):
    dispatch_repository.update_job(
        "J1",
        {"route_order": 2, "start_time": datetime(2026, 10, 19, 8, 2), "assigned_user_ids": ["W1"]},
    )

    calls = fake_client.queries[0].calls
    assert calls[0] == ("table", "jobs")
    assert (
        "update",
        {"route_order": 2, "start_time": "2026-10-19T08:02:00-05:00", "assigned_user_ids": ["W1"]},
    ) in calls
    assert ("eq", "id", "J1") in calls


def test_skill_names_lookup(fake_client):
    fake_client.rows["skills"] = [{"id": 1, "name": "Irrigation Repair"}]

    assert dispatch_repository.get_skill_names("P1") == {"1": "Irrigation Repair"}
