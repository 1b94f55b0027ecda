"""Distance engine.

Great-circle (haversine) distances between coordinates, one-way route
distances, distance -> duration estimates and display formatting.
Straight-line distance only; no road network or traffic is modeled.
"""

import math
from typing import Iterable, Sequence

from app.models import Bounds, Coordinates

EARTH_RADIUS_KM = 6371.0

# Average pedestrian pace, used for every "time saved" figure
WALKING_SPEED_KMH = 5.0
# Average city driving pace
DRIVING_SPEED_KMH = 30.0

KM_TO_MILES = 0.621371
FEET_PER_MILE = 5280


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Return the great-circle distance in km between two points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push a a hair past 1 for antipodal points
    a = min(1.0, a)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_between(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance in km between two Coordinates."""
    return haversine_distance(a.lat, a.lng, b.lat, b.lng)


def route_distance(coordinates: Sequence[Coordinates]) -> float:
    """Sum of consecutive distances along an ordered list, in km.

    One-way: there is no return leg to the first point.
    """
    if len(coordinates) < 2:
        return 0.0
    return sum(
        distance_between(coordinates[i], coordinates[i + 1])
        for i in range(len(coordinates) - 1)
    )


def estimate_walking_time(distance_km: float) -> float:
    """Minutes needed to walk ``distance_km`` at WALKING_SPEED_KMH."""
    return distance_km / WALKING_SPEED_KMH * 60


def estimate_driving_time(distance_km: float) -> float:
    """Minutes needed to drive ``distance_km`` at DRIVING_SPEED_KMH."""
    return distance_km / DRIVING_SPEED_KMH * 60


def format_distance(distance_km: float, unit: str = "km") -> str:
    """Format a distance for display.

    Examples: ``"850 m"``, ``"2.3 km"``, ``"1.4 mi"``, ``"300 ft"``.
    """
    if unit == "mi":
        miles = distance_km * KM_TO_MILES
        if miles < 0.1:
            return f"{round(miles * FEET_PER_MILE)} ft"
        return f"{miles:.1f} mi"
    if unit != "km":
        raise ValueError(f"Unsupported distance unit: {unit!r}")

    if distance_km < 1:
        return f"{round(distance_km * 1000)} m"
    return f"{distance_km:.1f} km"


def format_duration(minutes: float) -> str:
    """Format a duration for display: ``"45 min"``, ``"1h 15m"``, ``"2h"``."""
    total = round(minutes)
    if total < 60:
        return f"{total} min"

    hours, mins = divmod(total, 60)
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def calculate_center(coordinates: Iterable[Coordinates]) -> Coordinates | None:
    """Arithmetic center of a set of coordinates, None when empty."""
    points = list(coordinates)
    if not points:
        return None
    return Coordinates(
        lat=sum(p.lat for p in points) / len(points),
        lng=sum(p.lng for p in points) / len(points),
    )


def calculate_bounds(coordinates: Iterable[Coordinates]) -> Bounds | None:
    """Bounding box of a set of coordinates, None when empty."""
    points = list(coordinates)
    if not points:
        return None
    return Bounds(
        min_lat=min(p.lat for p in points),
        max_lat=max(p.lat for p in points),
        min_lng=min(p.lng for p in points),
        max_lng=max(p.lng for p in points),
    )
