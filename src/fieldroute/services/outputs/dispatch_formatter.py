"""Serializers for dispatch run outputs."""

from __future__ import annotations

import csv
import io
from dataclasses import asdict

from ..dispatch.models import DispatchResult


def dispatch_result_to_json(result: DispatchResult) -> dict:
    return {
        "metadata": result.metadata,
        "message": result.message,
        "plans": [
            {
                "worker_id": plan.worker.id,
                "worker_name": plan.worker.name,
                "color": plan.color,
                "job_count": plan.job_count,
                "before_miles": plan.before_miles,
                "after_miles": plan.after_miles,
                "saved_miles": plan.saved_miles,
                "saved_minutes": plan.saved_minutes,
                "total_minutes": plan.total_minutes,
                "stops": [
                    {
                        "sequence": index,
                        "job_id": scheduled.job.id,
                        "service_type": scheduled.job.service_type,
                        "appointment_kind": scheduled.job.appointment_kind.value,
                        "eta": scheduled.eta.isoformat(),
                        "eta_end": scheduled.eta_end.isoformat(),
                        "travel_minutes": scheduled.travel_minutes,
                        "is_late": scheduled.is_late,
                        "late_by_minutes": scheduled.late_by_minutes,
                    }
                    for index, scheduled in enumerate(plan.scheduled, start=1)
                ],
            }
            for plan in result.plans
        ],
        "unassignable_jobs": [asdict(item) for item in result.unassignable_jobs],
        "skill_mismatches": [asdict(item) for item in result.skill_mismatches],
        "needs_review": [asdict(item) for item in result.needs_review],
        "persistence_errors": [asdict(item) for item in result.persistence_errors],
    }


def dispatch_result_to_csv(result: DispatchResult) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "worker_id",
        "worker_name",
        "sequence",
        "job_id",
        "service_type",
        "appointment_kind",
        "eta",
        "eta_end",
        "travel_minutes",
        "before_miles",
        "after_miles",
        "late_by_minutes",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for plan in result.plans:
        for index, scheduled in enumerate(plan.scheduled, start=1):
            writer.writerow(
                {
                    "worker_id": plan.worker.id,
                    "worker_name": plan.worker.name,
                    "sequence": index,
                    "job_id": scheduled.job.id,
                    "service_type": scheduled.job.service_type,
                    "appointment_kind": scheduled.job.appointment_kind.value,
                    "eta": scheduled.eta.isoformat(),
                    "eta_end": scheduled.eta_end.isoformat(),
                    "travel_minutes": scheduled.travel_minutes,
                    "before_miles": plan.before_miles,
                    "after_miles": plan.after_miles,
                    "late_by_minutes": scheduled.late_by_minutes,
                }
            )
    return buffer.getvalue()
