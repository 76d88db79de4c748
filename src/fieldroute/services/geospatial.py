"""Geospatial helper functions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Sequence

from ..config import settings
from ..models.domain import Coordinate

EARTH_RADIUS_MILES = 3959.0
KM_PER_MILE = 1.60934


@dataclass(frozen=True, slots=True)
class DistanceResult:
    miles: float
    kilometers: float
    method: Literal["haversine"] = "haversine"


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance in miles between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def calculate_distance(point1: Coordinate, point2: Coordinate) -> DistanceResult:
    """Straight-line distance between two points, rounded to one decimal.

    Callers must drop unknown (0, 0) locations before calling.
    """

    miles = haversine_miles(point1.latitude, point1.longitude, point2.latitude, point2.longitude)
    return DistanceResult(
        miles=round(miles, 1),
        kilometers=round(miles * KM_PER_MILE, 1),
    )


def minutes_for_miles(miles: float, speed_mph: float | None = None) -> int:
    speed = speed_mph or settings.average_speed_mph
    return math.ceil(miles / speed * 60)


def travel_minutes(point1: Coordinate, point2: Coordinate, speed_mph: float | None = None) -> int:
    """Driving time estimate at a constant average speed, rounded up to whole minutes."""

    return minutes_for_miles(calculate_distance(point1, point2).miles, speed_mph)


def route_distance(points: Sequence[Coordinate]) -> DistanceResult:
    """Total distance of consecutive segments through the given points."""

    if len(points) < 2:
        return DistanceResult(miles=0.0, kilometers=0.0)

    total_miles = 0.0
    for current, following in zip(points, points[1:]):
        total_miles += calculate_distance(current, following).miles

    return DistanceResult(
        miles=round(total_miles, 1),
        kilometers=round(total_miles * KM_PER_MILE, 1),
    )
