"""Resolve where a worker is when a new job is being priced."""

from __future__ import annotations

from typing import Optional, Sequence

from ...models.domain import Coordinate, Job
from ..routing.models import WorkerRoute

ACTIVE_STATUSES = frozenset({"in_progress", "on_the_way"})
COMPLETED_STATUS = "completed"


def _status(job: Job) -> str:
    return (job.status or "").lower()


def current_location(
    route: WorkerRoute,
    jobs_today: Sequence[Job],
    office: Optional[Coordinate],
) -> Optional[Coordinate]:
    """Best known position for a worker at optimization time.

    Priority: an active job, the last completed job today, the last job on the
    route being built, then the route start point (home or office).
    """

    own_jobs = [job for job in jobs_today if route.worker_id in job.assigned_worker_ids]

    for job in own_jobs:
        if _status(job) in ACTIVE_STATUSES and job.location is not None:
            return job.location

    completed = [job for job in own_jobs if _status(job) == COMPLETED_STATUS]
    if completed and completed[-1].location is not None:
        return completed[-1].location

    return last_route_location(route) or office


def last_route_location(route: WorkerRoute) -> Optional[Coordinate]:
    """Last stop on the route being built, else the start point."""

    if route.assigned_jobs:
        return route.assigned_jobs[-1].location
    return route.start_point
