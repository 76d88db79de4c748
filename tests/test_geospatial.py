import pytest

from src.fieldroute.models.domain import Coordinate
from src.fieldroute.services.geospatial import (
    calculate_distance,
    haversine_miles,
    minutes_for_miles,
    route_distance,
    travel_minutes,
)


def test_one_degree_of_longitude_at_equator():
    result = calculate_distance(Coordinate(0.0, 0.0), Coordinate(0.0, 1.0))

    assert result.miles == pytest.approx(69.1)
    assert result.kilometers == pytest.approx(111.2)
    assert result.method == "haversine"


def test_haversine_is_symmetric_and_zero_for_same_point():
    there = haversine_miles(30.27, -97.74, 29.76, -95.37)
    back = haversine_miles(29.76, -95.37, 30.27, -97.74)

    assert there == pytest.approx(back)
    assert haversine_miles(30.27, -97.74, 30.27, -97.74) == 0.0


def test_travel_minutes_rounds_up_at_thirty_mph():
    # 69.1 miles at 30 mph is 138.2 minutes
    assert travel_minutes(Coordinate(0.0, 0.0), Coordinate(0.0, 1.0)) == 139
    assert minutes_for_miles(0.0) == 0
    assert minutes_for_miles(15.0) == 30
    assert minutes_for_miles(15.0, speed_mph=60) == 15


def test_route_distance_sums_segments():
    points = [Coordinate(0.0, 0.0), Coordinate(0.0, 1.0), Coordinate(0.0, 2.0)]

    assert route_distance(points).miles == pytest.approx(138.2)
    assert route_distance(points).kilometers == pytest.approx(222.4)
    assert route_distance(points[:1]).miles == 0.0
