"""Per-run dispatch state and diagnostics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ...models.domain import Coordinate, Job, Worker
from ..routing.models import WorkerPlan, WorkerRoute

MULTI_WORKER_REQUIRED = "MULTI_WORKER_REQUIRED"
NO_QUALIFIED_WORKERS = "NO_QUALIFIED_WORKERS"


@dataclass(slots=True)
class WorkingSet:
    """Worker routes built up over one optimization run.

    Exactly one run owns a working set. Assignment cost is computed against it
    and every accepted assignment is appended through ``assign`` so that later
    jobs in the same pass see the updated workloads.
    """

    routes: Dict[str, WorkerRoute] = field(default_factory=dict)
    preassigned_job_ids: Set[str] = field(default_factory=set)
    new_assignments: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def for_workers(cls, workers: List[Worker], office: Optional[Coordinate]) -> "WorkingSet":
        routes = {
            worker.id: WorkerRoute(worker=worker, start_point=worker.home or office)
            for worker in workers
        }
        return cls(routes=routes)

    def attach(self, job: Job, worker_id: str) -> bool:
        """Attach a job already assigned in the store. Unknown workers are ignored."""

        self.preassigned_job_ids.add(job.id)
        route = self.routes.get(worker_id)
        if route is None:
            return False
        route.assigned_jobs.append(job)
        return True

    def assign(self, job: Job, worker_id: str) -> None:
        self.routes[worker_id].assigned_jobs.append(job)
        self.new_assignments[job.id] = worker_id

    def is_new_assignment(self, job_id: str) -> bool:
        return job_id in self.new_assignments and job_id not in self.preassigned_job_ids


@dataclass(slots=True)
class UnassignableJob:
    id: str
    service: str
    customer: Optional[str]
    reason: str


@dataclass(slots=True)
class SkillMismatch:
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


@dataclass(slots=True)
class ReviewItem:
    job_id: str
    job_title: str
    service_type: str
    reason: str
    message: str
    required_worker_count: Optional[int] = None
    required_skill_ids: Optional[List[str]] = None
    required_skill_names: Optional[List[str]] = None


@dataclass(slots=True)
class PersistenceError:
    job_id: str
    worker_id: str
    message: str


@dataclass(slots=True)
class DispatchResult:
    plans: List[WorkerPlan]
    unassignable_jobs: List[UnassignableJob]
    skill_mismatches: List[SkillMismatch]
    needs_review: List[ReviewItem]
    persistence_errors: List[PersistenceError]
    message: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    @property
    def total_saved_miles(self) -> float:
        return sum(plan.saved_miles for plan in self.plans)

    @property
    def total_saved_minutes(self) -> int:
        return sum(plan.saved_minutes for plan in self.plans)

    @property
    def total_jobs(self) -> int:
        return sum(plan.job_count for plan in self.plans)

    @property
    def late_count(self) -> int:
        return sum(1 for plan in self.plans for item in plan.scheduled if item.is_late)

    @property
    def avg_jobs_per_worker(self) -> float:
        if not self.plans:
            return 0.0
        return round(self.total_jobs / len(self.plans), 1)
