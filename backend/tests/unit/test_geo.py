"""Unit tests for the distance engine."""

import pytest

from app.models import Bounds, Coordinates
from app.utils.geo import (
    calculate_bounds,
    calculate_center,
    distance_between,
    estimate_driving_time,
    estimate_walking_time,
    format_distance,
    format_duration,
    haversine_distance,
    route_distance,
)

# One degree of longitude along the equator, in km
EQUATOR_DEGREE_KM = 111.19


class TestHaversine:
    """Tests for haversine_distance / distance_between."""

    def test_same_point_is_zero(self) -> None:
        assert haversine_distance(48.8584, 2.2945, 48.8584, 2.2945) == 0.0

    def test_known_distance(self) -> None:
        # Eiffel Tower -> Notre-Dame, ~4.1 km
        d = haversine_distance(48.8584, 2.2945, 48.8530, 2.3499)
        assert 3.9 < d < 4.3

    def test_one_degree_on_equator(self) -> None:
        d = haversine_distance(0.0, 0.0, 0.0, 1.0)
        assert d == pytest.approx(EQUATOR_DEGREE_KM, abs=0.01)

    def test_symmetric(self) -> None:
        d1 = haversine_distance(19.0, 72.0, 20.0, 73.0)
        d2 = haversine_distance(20.0, 73.0, 19.0, 72.0)
        assert d1 == d2

    def test_antipodal_points(self) -> None:
        d = haversine_distance(0.0, 0.0, 0.0, 180.0)
        assert d == pytest.approx(3.141592653589793 * 6371.0, rel=1e-9)

    def test_distance_between_coordinates(self) -> None:
        a = Coordinates(lat=48.8584, lng=2.2945)
        b = Coordinates(lat=48.8530, lng=2.3499)
        assert distance_between(a, b) == haversine_distance(48.8584, 2.2945, 48.8530, 2.3499)
        assert distance_between(a, a) == 0.0


class TestRouteDistance:
    """Tests for route_distance."""

    def test_empty_and_single(self) -> None:
        assert route_distance([]) == 0.0
        assert route_distance([Coordinates(lat=1.0, lng=1.0)]) == 0.0

    def test_sums_consecutive_legs(self) -> None:
        points = [Coordinates(lat=0.0, lng=float(x)) for x in (0, 1, 2)]
        expected = distance_between(points[0], points[1]) + distance_between(points[1], points[2])
        assert route_distance(points) == pytest.approx(expected)

    def test_no_return_leg(self) -> None:
        a = Coordinates(lat=0.0, lng=0.0)
        b = Coordinates(lat=0.0, lng=1.0)
        assert route_distance([a, b]) == distance_between(a, b)


class TestTimeEstimates:
    """Tests for walking and driving estimates."""

    def test_walking_five_km_is_an_hour(self) -> None:
        assert estimate_walking_time(5.0) == pytest.approx(60.0)

    def test_walking_one_km(self) -> None:
        assert estimate_walking_time(1.0) == pytest.approx(12.0)

    def test_walking_zero(self) -> None:
        assert estimate_walking_time(0.0) == 0.0

    def test_driving_thirty_km_is_an_hour(self) -> None:
        assert estimate_driving_time(30.0) == pytest.approx(60.0)


class TestFormatDistance:
    """Tests for format_distance."""

    def test_below_one_km_shows_meters(self) -> None:
        assert format_distance(0.85) == "850 m"
        assert format_distance(0.0) == "0 m"

    def test_kilometers_one_decimal(self) -> None:
        assert format_distance(2.3) == "2.3 km"
        assert format_distance(1.0) == "1.0 km"
        assert format_distance(12.04) == "12.0 km"

    def test_miles(self) -> None:
        assert format_distance(10.0, unit="mi") == "6.2 mi"

    def test_short_miles_show_feet(self) -> None:
        assert format_distance(0.1, unit="mi") == "328 ft"

    def test_unknown_unit(self) -> None:
        with pytest.raises(ValueError, match="Unsupported distance unit"):
            format_distance(1.0, unit="furlong")


class TestFormatDuration:
    """Tests for format_duration."""

    def test_minutes_only(self) -> None:
        assert format_duration(45) == "45 min"
        assert format_duration(0) == "0 min"

    def test_hours_and_minutes(self) -> None:
        assert format_duration(75) == "1h 15m"

    def test_whole_hours(self) -> None:
        assert format_duration(120) == "2h"

    def test_rounds_before_formatting(self) -> None:
        assert format_duration(44.6) == "45 min"
        assert format_duration(59.6) == "1h"


class TestCenterAndBounds:
    """Tests for calculate_center and calculate_bounds."""

    def test_center(self) -> None:
        center = calculate_center([Coordinates(lat=0.0, lng=0.0), Coordinates(lat=2.0, lng=4.0)])
        assert center == Coordinates(lat=1.0, lng=2.0)

    def test_center_empty(self) -> None:
        assert calculate_center([]) is None

    def test_bounds(self) -> None:
        bounds = calculate_bounds([
            Coordinates(lat=1.0, lng=-3.0),
            Coordinates(lat=-2.0, lng=5.0),
            Coordinates(lat=0.5, lng=0.0),
        ])
        assert bounds == Bounds(min_lat=-2.0, max_lat=1.0, min_lng=-3.0, max_lng=5.0)

    def test_bounds_empty(self) -> None:
        assert calculate_bounds([]) is None
