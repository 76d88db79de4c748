"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ...models.domain import Coordinate, Job, Worker


@dataclass(slots=True)
class WorkerRoute:
    """A worker's start point and the jobs accumulated for them during one run."""

    worker: Worker
    start_point: Optional[Coordinate]
    assigned_jobs: List[Job] = field(default_factory=list)

    @property
    def worker_id(self) -> str:
        return self.worker.id


@dataclass(slots=True)
class ScheduledJob:
    job: Job
    eta: datetime
    eta_end: datetime
    travel_minutes: int
    is_late: bool = False
    late_by_minutes: int = 0


@dataclass(slots=True)
class WorkerPlan:
    worker: Worker
    color: str
    scheduled: List[ScheduledJob]
    before_miles: float
    after_miles: float
    saved_miles: float
    saved_minutes: int
    total_minutes: int

    @property
    def job_count(self) -> int:
        return len(self.scheduled)
