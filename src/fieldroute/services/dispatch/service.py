"""Dispatch orchestration: assign the day's open jobs and re-sequence every route."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from typing import List, Mapping, Optional, Sequence

from ...config import settings
from ...data.dispatch_repository import (
    get_field_workers,
    get_jobs_for_day,
    get_provider_office,
    get_skill_names,
    update_job,
)
from ...models.domain import AppointmentKind, Coordinate, Job
from ...persistence.filesystem import FileStorage
from ...schemas.dispatch import (
    DispatchRequest,
    DispatchResponse,
    DispatchSummary,
    PersistenceErrorModel,
    ReviewItemModel,
    ScheduledJobModel,
    SkillMismatchModel,
    UnassignableJobModel,
    WorkerRouteModel,
)
from ..outputs.dispatch_formatter import dispatch_result_to_csv, dispatch_result_to_json
from ..routing.eta import project_etas
from ..routing.models import WorkerPlan, WorkerRoute
from ..routing.sequencer import route_distance_miles, sequence_route
from ..skills.qualification import is_qualified, missing_skills, required_skill_names, skill_names
from .cost import assignment_cost
from .models import (
    MULTI_WORKER_REQUIRED,
    NO_QUALIFIED_WORKERS,
    DispatchResult,
    PersistenceError,
    ReviewItem,
    SkillMismatch,
    UnassignableJob,
    WorkingSet,
)

NO_WORKERS_MESSAGE = "No active workers found"
CAPACITY_REASON = "All eligible workers at maximum capacity"
AUTO_ASSIGN_DISABLED_REASON = "Auto-assign disabled"


class MissingProviderError(ValueError):
    """The request did not say which provider to optimize."""


@dataclass(slots=True)
class _Classification:
    pool: List[Job] = field(default_factory=list)
    skill_mismatches: List[SkillMismatch] = field(default_factory=list)
    needs_review: List[ReviewItem] = field(default_factory=list)


def _skill_mismatch(route: WorkerRoute, job: Job, skill_lookup: Mapping[str, str]) -> SkillMismatch:
    worker = route.worker
    absent = missing_skills(worker, job)
    missing_ids = [skill_id for skill_id in job.required_skill_ids if skill_id in absent]
    return SkillMismatch(
        job_id=job.id,
        job_title=job.title,
        service_type=job.service_type,
        assigned_worker_id=worker.id,
        assigned_worker_name=worker.name,
        worker_skills=list(worker.skills),
        worker_skill_ids=list(worker.skill_ids),
        required_skills=required_skill_names(job, skill_lookup),
        required_skill_ids=list(job.required_skill_ids),
        missing_skill_ids=missing_ids,
        missing_skill_names=skill_names(missing_ids, skill_lookup),
    )


def _classify_jobs(
    working_set: WorkingSet,
    jobs: Sequence[Job],
    skill_lookup: Mapping[str, str],
) -> _Classification:
    """Attach already-assigned jobs to their workers and pool the rest."""

    outcome = _Classification()

    for job in jobs:
        if job.is_multi_worker:
            outcome.needs_review.append(
                ReviewItem(
                    job_id=job.id,
                    job_title=job.title,
                    service_type=job.service_type,
                    reason=MULTI_WORKER_REQUIRED,
                    message=f"Requires {job.required_worker_count} workers",
                    required_worker_count=job.required_worker_count,
                )
            )
            if job.assigned_worker_ids:
                for worker_id in job.assigned_worker_ids:
                    working_set.attach(job, worker_id)
            else:
                outcome.pool.append(job)
            continue

        if not job.assigned_worker_ids:
            outcome.pool.append(job)
            continue

        for worker_id in job.assigned_worker_ids:
            if not working_set.attach(job, worker_id):
                continue
            route = working_set.routes[worker_id]
            if not is_qualified(route.worker, job):
                mismatch = _skill_mismatch(route, job, skill_lookup)
                logging.info(
                    f"Job {job.id} assigned to {route.worker.name} without required skills "
                    f"{mismatch.missing_skill_names or mismatch.required_skills}"
                )
                outcome.skill_mismatches.append(mismatch)

    return outcome


def _assignment_order(job: Job) -> tuple:
    return (job.is_multi_worker, job.appointment_kind != AppointmentKind.FIXED, job.start_time)


def _assign_unassigned(
    working_set: WorkingSet,
    pool: Sequence[Job],
    jobs_today: Sequence[Job],
    office: Optional[Coordinate],
    skill_lookup: Mapping[str, str],
    needs_review: List[ReviewItem],
) -> List[UnassignableJob]:
    """Greedy single pass; each accepted job raises the cost of its worker for later jobs."""

    unassignable: List[UnassignableJob] = []
    avg_jobs_per_worker = len(jobs_today) / len(working_set.routes)

    for job in sorted(pool, key=_assignment_order):
        if job.is_multi_worker:
            continue

        eligible = [route for route in working_set.routes.values() if is_qualified(route.worker, job)]
        if not eligible:
            names = required_skill_names(job, skill_lookup)
            logging.info(f"No qualified workers for job {job.id} ({job.service_type})")
            needs_review.append(
                ReviewItem(
                    job_id=job.id,
                    job_title=job.title,
                    service_type=job.service_type,
                    reason=NO_QUALIFIED_WORKERS,
                    message="No workers have all required skills",
                    required_skill_ids=list(job.required_skill_ids),
                    required_skill_names=names,
                )
            )
            unassignable.append(
                UnassignableJob(
                    id=job.id,
                    service=job.service_type,
                    customer=job.customer_name,
                    reason=f"No workers have required skills: {', '.join(names)}",
                )
            )
            continue

        best_route: Optional[WorkerRoute] = None
        best_cost = math.inf
        for route in eligible:
            cost = assignment_cost(route, job, avg_jobs_per_worker, jobs_today, office)
            if cost < best_cost:
                best_route, best_cost = route, cost

        if best_route is None:
            logging.warning(f"Job {job.id} left unassigned: all eligible workers at capacity")
            unassignable.append(
                UnassignableJob(
                    id=job.id,
                    service=job.service_type,
                    customer=job.customer_name,
                    reason=CAPACITY_REASON,
                )
            )
            continue

        working_set.assign(job, best_route.worker_id)

    return unassignable


def _worker_color(index: int) -> str:
    palette = settings.worker_colors or ("#10b981",)
    return palette[index % len(palette)]


def _persist_route(
    worker_id: str,
    plan: WorkerPlan,
    working_set: WorkingSet,
) -> List[PersistenceError]:
    errors: List[PersistenceError] = []
    for order, scheduled in enumerate(plan.scheduled, start=1):
        job = scheduled.job
        fields: dict = {"route_order": order}
        if working_set.is_new_assignment(job.id):
            fields["assigned_user_ids"] = [worker_id]
        if not job.is_anchor:
            fields["start_time"] = scheduled.eta
            fields["end_time"] = scheduled.eta_end
        try:
            update_job(job.id, fields)
        except Exception as exc:
            logging.warning(f"Failed to update job {job.id} for worker {worker_id}: {exc}")
            errors.append(PersistenceError(job_id=job.id, worker_id=worker_id, message=str(exc)))
    return errors


def _plan_routes(working_set: WorkingSet, day: date) -> tuple[List[WorkerPlan], List[PersistenceError]]:
    plans: List[WorkerPlan] = []
    errors: List[PersistenceError] = []

    for index, (worker_id, route) in enumerate(working_set.routes.items()):
        before_miles = route_distance_miles(route.start_point, route.assigned_jobs)
        ordered = sequence_route(route, day)
        after_miles = route_distance_miles(route.start_point, ordered)
        scheduled = project_etas(ordered, route.start_point, day)

        saved_miles = max(0.0, before_miles - after_miles)
        plan = WorkerPlan(
            worker=route.worker,
            color=_worker_color(index),
            scheduled=scheduled,
            before_miles=before_miles,
            after_miles=after_miles,
            saved_miles=saved_miles,
            saved_minutes=round(saved_miles / settings.average_speed_mph * 60),
            total_minutes=sum(item.travel_minutes + item.job.duration_minutes for item in scheduled),
        )
        logging.info(
            f"Route for {route.worker.name}: {len(ordered)} jobs, "
            f"{before_miles:.1f} mi -> {after_miles:.1f} mi"
        )
        for item in scheduled:
            if item.is_late:
                logging.warning(
                    f"{route.worker.name} projected {item.late_by_minutes} min late for "
                    f"{item.job.appointment_kind.value} job {item.job.id}"
                )
        errors.extend(_persist_route(worker_id, plan, working_set))
        plans.append(plan)

    return plans, errors


def run_dispatch(
    provider_id: str,
    day: date,
    *,
    worker_ids: Sequence[str] | None = None,
    auto_assign: bool = True,
) -> DispatchResult:
    """Assign, sequence, time and persist one provider's routes for one day."""

    office = get_provider_office(provider_id)
    workers = get_field_workers(provider_id, worker_ids)
    metadata = {
        "provider_id": provider_id,
        "day": day.isoformat(),
        "auto_assign": auto_assign,
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }

    if not workers:
        logging.info(f"No active workers for provider '{provider_id}' on {day}")
        return DispatchResult(
            plans=[],
            unassignable_jobs=[],
            skill_mismatches=[],
            needs_review=[],
            persistence_errors=[],
            message=NO_WORKERS_MESSAGE,
            metadata=metadata,
        )

    loaded_jobs = get_jobs_for_day(provider_id, day)
    jobs = [job for job in loaded_jobs if job.location is not None]
    if len(jobs) != len(loaded_jobs):
        logging.info(f"Ignoring {len(loaded_jobs) - len(jobs)} jobs without a known location")
    skill_lookup = get_skill_names(provider_id)

    logging.info(
        f"Optimizing {len(jobs)} jobs across {len(workers)} workers "
        f"for provider '{provider_id}' on {day} (auto_assign={auto_assign})"
    )

    working_set = WorkingSet.for_workers(workers, office)
    classification = _classify_jobs(working_set, jobs, skill_lookup)
    needs_review = classification.needs_review
    unassignable: List[UnassignableJob] = []

    if auto_assign and classification.pool:
        unassignable = _assign_unassigned(
            working_set, classification.pool, jobs, office, skill_lookup, needs_review
        )
    elif not auto_assign:
        unassignable = [
            UnassignableJob(
                id=job.id,
                service=job.service_type,
                customer=job.customer_name,
                reason=AUTO_ASSIGN_DISABLED_REASON,
            )
            for job in classification.pool
        ]

    plans, persistence_errors = _plan_routes(working_set, day)
    metadata.update({"worker_count": len(workers), "job_count": len(jobs)})

    return DispatchResult(
        plans=plans,
        unassignable_jobs=unassignable,
        skill_mismatches=classification.skill_mismatches,
        needs_review=needs_review,
        persistence_errors=persistence_errors,
        metadata=metadata,
    )


def format_clock(value: datetime) -> str:
    """12-hour clock without a leading zero, e.g. ``8:05 AM``."""

    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def _one_decimal(value: float) -> float:
    return round(value, 1)


def dispatch_result_to_response(result: DispatchResult) -> DispatchResponse:
    workers = [
        WorkerRouteModel(
            id=plan.worker.id,
            name=plan.worker.name,
            color=plan.color,
            job_count=plan.job_count,
            jobs=[
                ScheduledJobModel(
                    id=item.job.id,
                    service=item.job.service_type,
                    customer=item.job.customer_name or "Unknown",
                    eta=format_clock(item.eta),
                    eta_end=format_clock(item.eta_end),
                    travel_minutes=item.travel_minutes,
                    is_late=item.is_late,
                    late_by_minutes=item.late_by_minutes,
                )
                for item in plan.scheduled
            ],
            before_miles=_one_decimal(plan.before_miles),
            after_miles=_one_decimal(plan.after_miles),
            saved_miles=_one_decimal(plan.saved_miles),
            saved_minutes=plan.saved_minutes,
            total_miles=_one_decimal(plan.after_miles),
            total_minutes=plan.total_minutes,
        )
        for plan in result.plans
    ]

    return DispatchResponse(
        success=True,
        message=result.message,
        workers=workers,
        unassignable_jobs=[UnassignableJobModel(**asdict(item)) for item in result.unassignable_jobs],
        skill_mismatches=[SkillMismatchModel(**asdict(item)) for item in result.skill_mismatches],
        needs_review=[ReviewItemModel(**asdict(item)) for item in result.needs_review],
        persistence_errors=[
            PersistenceErrorModel(**asdict(item)) for item in result.persistence_errors
        ],
        total_saved_miles=_one_decimal(result.total_saved_miles),
        total_saved_minutes=result.total_saved_minutes,
        summary=DispatchSummary(
            total_workers=len(result.plans),
            total_jobs=result.total_jobs,
            unassigned_count=len(result.unassignable_jobs),
            skill_mismatch_count=len(result.skill_mismatches),
            needs_review_count=len(result.needs_review),
            late_count=result.late_count,
            avg_jobs_per_worker=result.avg_jobs_per_worker,
        ),
    )


def _save_run_outputs(result: DispatchResult) -> None:
    try:
        label = f"{result.metadata.get('provider_id', '')}_{result.metadata.get('day', '')}"
        run_dir = FileStorage().save_run(
            label, dispatch_result_to_json(result), dispatch_result_to_csv(result)
        )
        logging.info(f"Dispatch run outputs written to {run_dir}")
    except OSError as exc:
        logging.warning(f"Could not write dispatch run outputs: {exc}")


def optimize_day(payload: DispatchRequest) -> DispatchResponse:
    if not payload.provider_id:
        raise MissingProviderError("Provider ID required")

    result = run_dispatch(
        payload.provider_id,
        payload.day,
        worker_ids=payload.worker_ids,
        auto_assign=payload.auto_assign,
    )
    if settings.save_run_outputs:
        _save_run_outputs(result)
    return dispatch_result_to_response(result)
