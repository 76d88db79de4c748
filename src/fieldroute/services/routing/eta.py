"""Arrival/departure projection for a sequenced route."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from ...config import settings
from ...models.domain import Coordinate, Job
from ..geospatial import travel_minutes
from .models import ScheduledJob
from .sequencer import day_start


def minutes_late(job: Job, eta: datetime, tolerance_minutes: int | None = None) -> int:
    """Minutes an anchored appointment would be missed by, 0 when on time or flexible."""

    if not job.is_anchor:
        return 0
    tolerance = settings.late_arrival_tolerance_minutes if tolerance_minutes is None else tolerance_minutes
    late_by = round((eta - job.start_time).total_seconds() / 60)
    return late_by if late_by > tolerance else 0


def project_etas(
    jobs: Sequence[Job],
    start_point: Optional[Coordinate],
    day: date,
    *,
    speed_mph: float | None = None,
) -> List[ScheduledJob]:
    """Walk the route from the day's start hour, stamping each stop in order.

    Anchored appointments get sequential ETAs like any other stop; whether
    those times are written back is the caller's decision. An anchor whose ETA
    trails its stored start by more than the tolerance is marked late.
    """

    scheduled: List[ScheduledJob] = []
    clock = day_start(day)
    location = start_point

    for job in jobs:
        minutes = 0
        if location is not None and job.location is not None:
            minutes = travel_minutes(location, job.location, speed_mph)

        eta = clock + timedelta(minutes=minutes)
        eta_end = eta + timedelta(minutes=job.duration_minutes)
        late_by = minutes_late(job, eta)
        scheduled.append(
            ScheduledJob(
                job=job,
                eta=eta,
                eta_end=eta_end,
                travel_minutes=minutes,
                is_late=late_by > 0,
                late_by_minutes=late_by,
            )
        )

        clock = eta_end
        location = job.location

    return scheduled
