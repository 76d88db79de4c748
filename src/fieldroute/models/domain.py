"""Domain models for jobs, workers, providers and skills."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True, slots=True)
class Coordinate:
    latitude: float
    longitude: float


def coordinate_or_none(latitude: Optional[float], longitude: Optional[float]) -> Optional[Coordinate]:
    """Build a coordinate, treating missing values and the (0, 0) pair as unknown."""

    if latitude is None or longitude is None:
        return None
    lat, lng = float(latitude), float(longitude)
    if lat == 0.0 and lng == 0.0:
        return None
    return Coordinate(latitude=lat, longitude=lng)


class AppointmentKind(str, Enum):
    FIXED = "fixed"
    WINDOW = "window"
    ANYTIME = "anytime"

    @classmethod
    def parse(cls, value: Optional[str]) -> "AppointmentKind":
        if not value:
            return cls.ANYTIME
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.ANYTIME

    @property
    def is_anchor(self) -> bool:
        return self in (AppointmentKind.FIXED, AppointmentKind.WINDOW)


@dataclass(frozen=True, slots=True)
class ExplicitSkills:
    """Job lists the exact skill ids a worker must hold (all of them)."""

    skill_ids: frozenset[str]


@dataclass(frozen=True, slots=True)
class ServiceCategorySkills:
    """Legacy job without skill ids; matched by service category keywords (any of them)."""

    service_type: str


SkillRequirement = Union[ExplicitSkills, ServiceCategorySkills]


@dataclass(slots=True)
class Job:
    """A unit of field work scheduled for one calendar day."""

    id: str
    service_type: str
    start_time: datetime
    end_time: datetime
    appointment_kind: AppointmentKind = AppointmentKind.ANYTIME
    status: str = "scheduled"
    duration_hours: Optional[float] = None
    location: Optional[Coordinate] = None
    assigned_worker_ids: list[str] = field(default_factory=list)
    required_skill_ids: list[str] = field(default_factory=list)
    preferred_skill_ids: list[str] = field(default_factory=list)
    required_worker_count: int = 1
    buffer_minutes: int = 15
    allow_unqualified: bool = False
    estimated_value: Optional[float] = None
    customer_name: Optional[str] = None

    @property
    def duration_minutes(self) -> int:
        # Unset or zero durations fall back to one hour.
        return int(round((self.duration_hours or 1) * 60))

    @property
    def is_anchor(self) -> bool:
        return self.appointment_kind.is_anchor

    @property
    def is_multi_worker(self) -> bool:
        return self.required_worker_count > 1

    @property
    def title(self) -> str:
        return f"{self.service_type} - {self.customer_name or 'Unknown'}"

    @property
    def skill_requirement(self) -> SkillRequirement:
        if self.required_skill_ids:
            return ExplicitSkills(skill_ids=frozenset(self.required_skill_ids))
        return ServiceCategorySkills(service_type=self.service_type)


@dataclass(slots=True)
class Worker:
    """A field operative as read from the worker store."""

    id: str
    first_name: str
    last_name: str
    home: Optional[Coordinate] = None
    skills: list[str] = field(default_factory=list)
    skill_ids: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(slots=True)
class Provider:
    id: str
    office: Optional[Coordinate] = None


@dataclass(frozen=True, slots=True)
class Skill:
    id: str
    name: str
