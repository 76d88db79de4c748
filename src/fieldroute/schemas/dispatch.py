"""Dispatch optimization request/response schemas."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def _camel(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.title() for part in tail)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=_camel, populate_by_name=True)


class DispatchRequest(CamelModel):
    day: date = Field(
        ...,
        validation_alias=AliasChoices("day", "date"),
        description="Calendar day to optimize (YYYY-MM-DD).",
    )
    worker_ids: Optional[List[str]] = Field(
        default=None,
        description="Restrict the run to these workers. Defaults to every active field worker.",
    )
    provider_id: Optional[str] = None
    auto_assign: bool = Field(default=True, description="Assign unassigned jobs to the cheapest qualified worker.")


class ScheduledJobModel(CamelModel):
    id: str
    service: str
    customer: str
    eta: str
    eta_end: str
    travel_minutes: int
    is_late: bool = False
    late_by_minutes: int = 0


class WorkerRouteModel(CamelModel):
    id: str
    name: str
    color: str
    job_count: int
    jobs: List[ScheduledJobModel]
    before_miles: float
    after_miles: float
    saved_miles: float
    saved_minutes: int
    total_miles: float
    total_minutes: int


class UnassignableJobModel(CamelModel):
    id: str
    service: str
    customer: Optional[str]
    reason: str


class SkillMismatchModel(CamelModel):
    job_id: str
    job_title: str
    service_type: str
    assigned_worker_id: str
    assigned_worker_name: str
    worker_skills: List[str]
    worker_skill_ids: List[str]
    required_skills: List[str]
    required_skill_ids: List[str]
    missing_skill_ids: List[str]
    missing_skill_names: List[str]


class ReviewItemModel(CamelModel):
    job_id: str
    job_title: str
    service_type: str
    reason: str
    message: str
    required_worker_count: Optional[int] = None
    required_skill_ids: Optional[List[str]] = None
    required_skill_names: Optional[List[str]] = None


class PersistenceErrorModel(CamelModel):
    job_id: str
    worker_id: str
    message: str


class DispatchSummary(CamelModel):
    total_workers: int = 0
    total_jobs: int = 0
    unassigned_count: int = 0
    skill_mismatch_count: int = 0
    needs_review_count: int = 0
    late_count: int = 0
    avg_jobs_per_worker: float = 0.0


class DispatchResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    workers: List[WorkerRouteModel] = Field(default_factory=list)
    unassignable_jobs: List[UnassignableJobModel] = Field(default_factory=list)
    skill_mismatches: List[SkillMismatchModel] = Field(default_factory=list)
    needs_review: List[ReviewItemModel] = Field(default_factory=list)
    persistence_errors: List[PersistenceErrorModel] = Field(default_factory=list)
    total_saved_miles: float = 0.0
    total_saved_minutes: int = 0
    summary: DispatchSummary = Field(default_factory=DispatchSummary)


class ErrorResponse(BaseModel):
    error: str
