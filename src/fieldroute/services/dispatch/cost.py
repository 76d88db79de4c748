"""Greedy assignment cost model."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ...config import settings
from ...models.domain import Coordinate, Job
from ..geospatial import calculate_distance
from ..routing.models import WorkerRoute
from .location import current_location


def assignment_cost(
    route: WorkerRoute,
    job: Job,
    avg_jobs_per_worker: float,
    jobs_today: Sequence[Job],
    office: Optional[Coordinate],
    *,
    max_jobs_per_worker: int | None = None,
    workload_penalty: float | None = None,
) -> float:
    """Cost in miles-equivalent of adding ``job`` to ``route``.

    Distance from the worker's current position plus a penalty for every job
    held above the run average. Workers at capacity cost ``math.inf``.
    """

    capacity = max_jobs_per_worker or settings.max_jobs_per_worker
    penalty = settings.workload_penalty_per_job if workload_penalty is None else workload_penalty

    current_jobs = len(route.assigned_jobs)
    if current_jobs >= capacity:
        return math.inf

    distance_cost = 0.0
    worker_location = current_location(route, jobs_today, office)
    if worker_location is not None and job.location is not None:
        distance_cost = calculate_distance(worker_location, job.location).miles

    workload_cost = max(0.0, current_jobs - avg_jobs_per_worker) * penalty
    return distance_cost + workload_cost
