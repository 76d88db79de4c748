"""Single-worker route sequencing.

Nearest-neighbour construction around time-anchored appointments. Fixed and
window jobs keep their relative order by start time; flexible jobs are slotted
in front of an anchor only when they finish with enough headroom, otherwise
they trail the last anchor.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import List, Optional, Sequence

from ...config import settings
from ...models.domain import Coordinate, Job
from ..geospatial import calculate_distance, minutes_for_miles, route_distance
from .models import WorkerRoute


def day_start(day: date, start_hour: int | None = None) -> datetime:
    hour = settings.default_start_hour if start_hour is None else start_hour
    return datetime.combine(day, time(hour=hour))


def _nearest_index(origin: Coordinate, candidates: Sequence[Job]) -> tuple[int, float]:
    nearest_idx = 0
    nearest_miles = float("inf")
    for idx, job in enumerate(candidates):
        miles = calculate_distance(origin, job.location).miles
        if miles < nearest_miles:
            nearest_idx, nearest_miles = idx, miles
    return nearest_idx, nearest_miles


def _append_nearest_neighbour(
    ordered: List[Job],
    remaining: List[Job],
    location: Optional[Coordinate],
) -> None:
    while remaining and location is not None:
        idx, _ = _nearest_index(location, remaining)
        job = remaining.pop(idx)
        ordered.append(job)
        location = job.location


def sequence_route(
    route: WorkerRoute,
    day: date,
    *,
    speed_mph: float | None = None,
    buffer_minutes: int | None = None,
) -> List[Job]:
    """Order a worker's jobs for the day."""

    jobs = list(route.assigned_jobs)
    if len(jobs) <= 1:
        return jobs

    speed = speed_mph or settings.average_speed_mph
    buffer = timedelta(
        minutes=settings.anchor_buffer_minutes if buffer_minutes is None else buffer_minutes
    )

    anchors = sorted((job for job in jobs if job.is_anchor), key=lambda job: job.start_time)
    flexible = [job for job in jobs if not job.is_anchor]

    if not anchors:
        ordered: List[Job] = []
        start = route.start_point or jobs[0].location
        _append_nearest_neighbour(ordered, flexible, start)
        return ordered

    ordered = []
    remaining = list(flexible)
    location = route.start_point
    clock: Optional[datetime] = None

    for anchor in anchors:
        while remaining and location is not None:
            idx, miles = _nearest_index(location, remaining)
            candidate = remaining[idx]
            if clock is None:
                clock = day_start(day)
            travel = minutes_for_miles(miles, speed)
            finish = clock + timedelta(minutes=travel + candidate.duration_minutes)
            if finish > anchor.start_time - buffer:
                break
            ordered.append(remaining.pop(idx))
            location = candidate.location
            clock = finish

        ordered.append(anchor)
        location = anchor.location
        clock = anchor.end_time

    _append_nearest_neighbour(ordered, remaining, location)
    return ordered


def route_distance_miles(start_point: Optional[Coordinate], jobs: Sequence[Job]) -> float:
    """Start point to the first stop plus every consecutive leg."""

    points = [start_point] if start_point is not None else []
    points.extend(job.location for job in jobs if job.location is not None)
    return route_distance(points).miles
