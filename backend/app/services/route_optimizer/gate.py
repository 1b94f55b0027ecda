"""Optimizability gate.

Cheap checks the UI runs before offering route optimization: whether a
day's order looks worth optimizing at all, and a ballpark of the savings.
Neither function runs the full optimizer.

Thresholds are tuning defaults, not a contract:
- a stop "backtracks" when going through it costs more than
  BACKTRACK_FACTOR times the direct hop between its neighbours
- confidence is high above HIGH_CONFIDENCE_PERCENT savings with at least
  HIGH_CONFIDENCE_MIN_STOPS stops, medium above MEDIUM_CONFIDENCE_PERCENT
"""

import logging
from typing import Any, Mapping, Sequence

from app.models import Confidence, SavingsEstimate, Stop
from app.utils.geo import distance_between, route_distance

from .service import DistanceMatrix, nearest_neighbor_order, validate_stops

logger = logging.getLogger(__name__)

MIN_STOPS_TO_OPTIMIZE = 3
BACKTRACK_FACTOR = 1.5

HIGH_CONFIDENCE_MIN_STOPS = 5
HIGH_CONFIDENCE_PERCENT = 20.0
MEDIUM_CONFIDENCE_PERCENT = 5.0


def should_optimize(stops: Sequence[Stop | Mapping[str, Any]]) -> bool:
    """Return True when the given order shows backtracking worth removing.

    Single O(n) scan over consecutive triples.
    """
    stops = validate_stops(stops)
    if len(stops) < MIN_STOPS_TO_OPTIMIZE:
        return False

    for i in range(len(stops) - 2):
        first, middle, last = (s.coordinates for s in stops[i:i + 3])
        through_middle = distance_between(first, middle) + distance_between(middle, last)
        direct = distance_between(first, last)
        if through_middle > direct * BACKTRACK_FACTOR:
            logger.debug(f"[ROUTE] Backtracking at stop {stops[i + 1].id!r}")
            return True

    return False


def estimate_optimization_savings(stops: Sequence[Stop | Mapping[str, Any]]) -> SavingsEstimate:
    """Ballpark savings from one nearest-neighbor pass (no 2-opt).

    The reordering is only measured, never returned.
    """
    stops = validate_stops(stops)
    if len(stops) < MIN_STOPS_TO_OPTIMIZE:
        return SavingsEstimate(potential_savings=0.0, percent_savings=0.0, confidence=Confidence.LOW)

    current = route_distance([stop.coordinates for stop in stops])
    matrix = DistanceMatrix.from_stops(stops)
    greedy = nearest_neighbor_order(matrix, range(len(stops)), 0)
    potential_savings = max(0.0, current - matrix.path_length(greedy))
    percent = min(100.0, potential_savings / current * 100) if current > 0 else 0.0

    if percent > HIGH_CONFIDENCE_PERCENT and len(stops) >= HIGH_CONFIDENCE_MIN_STOPS:
        confidence = Confidence.HIGH
    elif percent >= MEDIUM_CONFIDENCE_PERCENT:
        confidence = Confidence.MEDIUM
    else:
        confidence = Confidence.LOW

    return SavingsEstimate(
        potential_savings=potential_savings,
        percent_savings=percent,
        confidence=confidence,
    )
