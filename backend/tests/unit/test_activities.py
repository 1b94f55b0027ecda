"""Unit tests for converting itinerary activities into stops."""

import logging

from app.models import Coordinates, TimeBlock
from app.services.route_optimizer import Activity, activities_to_stops, activity_to_stop


class TestActivityToStop:
    """Tests for activity_to_stop."""

    def test_without_coordinates(self) -> None:
        assert activity_to_stop(Activity(id="a1", name="Somewhere")) is None

    def test_carries_identity(self) -> None:
        activity = Activity(id="a1", name="Louvre", coordinates=Coordinates(lat=48.8606, lng=2.3376))
        stop = activity_to_stop(activity)
        assert stop is not None
        assert stop.id == "a1"
        assert stop.name == "Louvre"
        assert stop.coordinates == activity.coordinates
        assert stop.time_block is None

    def test_time_block_from_start_time(self) -> None:
        activity = Activity(
            id="a1",
            coordinates={"lat": 48.8606, "lng": 2.3376},
            start_time="14:30",
        )
        assert activity_to_stop(activity).time_block is TimeBlock.AFTERNOON

    def test_unparseable_start_time_is_unconstrained(self) -> None:
        activity = Activity(id="a1", coordinates={"lat": 0, "lng": 0}, start_time="after lunch")
        assert activity_to_stop(activity).time_block is None


class TestActivitiesToStops:
    """Tests for activities_to_stops."""

    def test_drops_unlocatable_and_keeps_order(self, caplog) -> None:
        activities = [
            Activity(id="a", coordinates={"lat": 0, "lng": 0}, start_time="18:00"),
            Activity(id="b"),
            Activity(id="c", coordinates={"lat": 0, "lng": 1}, start_time="08:00"),
        ]
        with caplog.at_level(logging.INFO):
            stops = activities_to_stops(activities)

        assert [s.id for s in stops] == ["a", "c"]
        assert [s.time_block for s in stops] == [TimeBlock.EVENING, TimeBlock.MORNING]
        assert "Skipped 1 activities" in caplog.text

    def test_empty(self) -> None:
        assert activities_to_stops([]) == []
