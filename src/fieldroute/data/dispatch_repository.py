"""Data access for the dispatch optimizer: providers, workers, skills and jobs."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Mapping, Optional
from zoneinfo import ZoneInfo

from ..config import settings
from ..db.supabase import require_supabase_client
from ..models.domain import AppointmentKind, Coordinate, Job, Provider, Skill, Worker, coordinate_or_none

WORKER_COLUMNS = (
    "id, first_name, last_name, home_latitude, home_longitude, "
    "worker_skills(skill_id, skills(name))"
)
JOB_COLUMNS = "*, customers(name, latitude, longitude)"


def _zone() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def parse_timestamp(value: Any) -> datetime:
    """Parse a stored timestamp into a naive datetime in the configured zone."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unable to parse timestamp from value '{value}'")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(_zone()).replace(tzinfo=None)
    return parsed


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=_zone())
    return value.isoformat()


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc


def _str_list(value: Any) -> list[str]:
    if not value:
        return []
    return [str(item) for item in value]


def job_from_row(row: Mapping[str, Any]) -> Job:
    customer = row.get("customers") or {}
    latitude = _coerce_float(row.get("latitude")) or _coerce_float(customer.get("latitude"))
    longitude = _coerce_float(row.get("longitude")) or _coerce_float(customer.get("longitude"))

    return Job(
        id=str(row["id"]),
        service_type=(row.get("service_type") or "").strip(),
        start_time=parse_timestamp(row["start_time"]),
        end_time=parse_timestamp(row["end_time"]),
        appointment_kind=AppointmentKind.parse(row.get("appointment_type")),
        status=(row.get("status") or "scheduled").strip(),
        duration_hours=_coerce_float(row.get("duration_hours")),
        location=coordinate_or_none(latitude, longitude),
        assigned_worker_ids=_str_list(row.get("assigned_user_ids")),
        required_skill_ids=_str_list(row.get("required_skill_ids")),
        preferred_skill_ids=_str_list(row.get("preferred_skill_ids")),
        required_worker_count=int(row.get("required_worker_count") or 1),
        buffer_minutes=int(row.get("buffer_minutes") or 15),
        allow_unqualified=bool(row.get("allow_unqualified") or False),
        estimated_value=_coerce_float(row.get("estimated_value")),
        customer_name=customer.get("name"),
    )


def worker_from_row(row: Mapping[str, Any]) -> Worker:
    skills: list[str] = []
    skill_ids: list[str] = []
    for link in row.get("worker_skills") or []:
        skill_id = link.get("skill_id")
        if skill_id is None:
            continue
        skill_ids.append(str(skill_id))
        skill = link.get("skills") or {}
        if skill.get("name"):
            skills.append(skill["name"])

    return Worker(
        id=str(row["id"]),
        first_name=(row.get("first_name") or "").strip(),
        last_name=(row.get("last_name") or "").strip(),
        home=coordinate_or_none(
            _coerce_float(row.get("home_latitude")),
            _coerce_float(row.get("home_longitude")),
        ),
        skills=skills,
        skill_ids=skill_ids,
    )


def provider_from_row(row: Mapping[str, Any]) -> Provider:
    return Provider(
        id=str(row["id"]),
        office=coordinate_or_none(
            _coerce_float(row.get("office_latitude")),
            _coerce_float(row.get("office_longitude")),
        ),
    )


def get_provider_office(provider_id: str) -> Optional[Coordinate]:
    supabase = require_supabase_client()
    response = (
        supabase.table("providers")
        .select("id, office_latitude, office_longitude")
        .eq("id", provider_id)
        .limit(1)
        .execute()
    )
    if not response.data:
        logging.warning(f"Provider '{provider_id}' not found; workers without a home have no start point")
        return None
    return provider_from_row(response.data[0]).office


def get_field_workers(provider_id: str, worker_ids: Iterable[str] | None = None) -> list[Worker]:
    """Explicitly requested workers, else every active field worker of the provider."""

    supabase = require_supabase_client()
    query = supabase.table("provider_users").select(WORKER_COLUMNS).eq("provider_id", provider_id)
    requested = [worker_id for worker_id in (worker_ids or []) if worker_id]
    if requested:
        query = query.in_("id", requested)
    else:
        query = query.eq("role", "field").eq("status", "active")

    response = query.execute()
    return [worker_from_row(row) for row in response.data or []]


def get_jobs_for_day(provider_id: str, day: date) -> list[Job]:
    """All non-cancelled jobs whose start time falls on ``day``, earliest first."""

    supabase = require_supabase_client()
    start = datetime.combine(day, time.min)
    end = start + timedelta(days=1)
    response = (
        supabase.table("jobs")
        .select(JOB_COLUMNS)
        .eq("provider_id", provider_id)
        .gte("start_time", format_timestamp(start))
        .lt("start_time", format_timestamp(end))
        .neq("status", "cancelled")
        .order("start_time")
        .execute()
    )
    return [job_from_row(row) for row in response.data or []]


def get_skills(provider_id: str) -> list[Skill]:
    supabase = require_supabase_client()
    response = supabase.table("skills").select("id, name").eq("provider_id", provider_id).execute()
    return [Skill(id=str(row["id"]), name=row["name"]) for row in response.data or []]


def get_skill_names(provider_id: str) -> dict[str, str]:
    """Skill id to display name, used to label diagnostics."""

    return {skill.id: skill.name for skill in get_skills(provider_id)}


def update_job(job_id: str, fields: Mapping[str, Any]) -> None:
    """Write route order, assignment and time fields back onto a job row."""

    payload = {
        key: format_timestamp(value) if isinstance(value, datetime) else value
        for key, value in fields.items()
    }
    supabase = require_supabase_client()
    supabase.table("jobs").update(payload).eq("id", job_id).execute()
