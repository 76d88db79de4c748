import math
from datetime import datetime

import pytest

from src.fieldroute.models.domain import Coordinate, Job, Worker
from src.fieldroute.services.dispatch.cost import assignment_cost
from src.fieldroute.services.dispatch.location import current_location, last_route_location
from src.fieldroute.services.routing.models import WorkerRoute

HOME = Coordinate(0.0, 0.0)
OFFICE = Coordinate(0.0, -1.0)


def _job(jid: str, lng: float, status: str = "scheduled", assigned: tuple[str, ...] = ()) -> Job:
    return Job(
        id=jid,
        service_type="Lawn Mowing",
        start_time=datetime(2026, 10, 19, 9),
        end_time=datetime(2026, 10, 19, 10),
        status=status,
        location=Coordinate(0.0, lng),
        assigned_worker_ids=list(assigned),
    )


def _route(start: Coordinate | None = HOME, jobs: list[Job] | None = None) -> WorkerRoute:
    worker = Worker(id="W1", first_name="Ana", last_name="Ruiz")
    return WorkerRoute(worker=worker, start_point=start, assigned_jobs=list(jobs or []))


def test_active_job_wins_over_everything():
    today = [
        _job("done", 0.3, status="completed", assigned=("W1",)),
        _job("driving", 0.2, status="ON_THE_WAY", assigned=("W1",)),
        _job("other", 0.9, status="in_progress", assigned=("W2",)),
    ]
    route = _route(jobs=[_job("later", 0.5)])

    assert current_location(route, today, OFFICE) == Coordinate(0.0, 0.2)


def test_last_completed_job_used_when_nothing_active():
    today = [
        _job("first", 0.1, status="completed", assigned=("W1",)),
        _job("second", 0.4, status="Completed", assigned=("W1",)),
    ]

    assert current_location(_route(jobs=[_job("later", 0.5)]), today, OFFICE) == Coordinate(0.0, 0.4)


def test_route_tail_then_start_point_then_office():
    assert current_location(_route(jobs=[_job("a", 0.1), _job("b", 0.6)]), [], OFFICE) == Coordinate(0.0, 0.6)
    assert current_location(_route(), [], OFFICE) == HOME
    assert current_location(_route(start=None), [], OFFICE) == OFFICE
    assert current_location(_route(start=None), [], None) is None


def test_last_route_location_ignores_live_status():
    today = [_job("driving", 0.2, status="in_progress", assigned=("W1",))]
    route = _route(jobs=[_job("a", 0.7)])

    assert current_location(route, today, None) == Coordinate(0.0, 0.2)
    assert last_route_location(route) == Coordinate(0.0, 0.7)
    assert last_route_location(_route()) == HOME


def test_cost_is_distance_from_current_location():
    cost = assignment_cost(_route(), _job("new", 1.0), avg_jobs_per_worker=0, jobs_today=[], office=None)

    assert cost == pytest.approx(69.1)


def test_cost_adds_workload_penalty_above_average():
    route = _route(jobs=[_job(f"j{i}", 1.0) for i in range(3)])

    cost = assignment_cost(route, _job("new", 1.0), avg_jobs_per_worker=1, jobs_today=[], office=None)

    # sitting on the job already, two jobs over average at 5 miles each
    assert cost == pytest.approx(10.0)


def test_cost_without_any_location_is_workload_only():
    cost = assignment_cost(_route(start=None), _job("new", 1.0), avg_jobs_per_worker=0, jobs_today=[], office=None)

    assert cost == 0.0


def test_worker_at_capacity_costs_infinity():
    route = _route(jobs=[_job(f"j{i}", 0.0001) for i in range(12)])

    cost = assignment_cost(route, _job("new", 0.0001), avg_jobs_per_worker=20, jobs_today=[], office=None)

    assert math.isinf(cost)
    assert math.isinf(
        assignment_cost(_route(jobs=[_job("a", 1.0)]), _job("b", 1.0), 0, [], None, max_jobs_per_worker=1)
    )
