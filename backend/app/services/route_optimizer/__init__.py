"""Route Optimizer service module.

Nearest-neighbor + 2-opt ordering of a single itinerary day, plus the
cheap gate the UI uses before offering optimization.
"""

from .activities import Activity, activities_to_stops, activity_to_stop
from .gate import estimate_optimization_savings, should_optimize
from .service import (
    MAX_TWO_OPT_PASSES,
    DistanceMatrix,
    HeuristicRouteOptimizerService,
    RouteInputError,
    RouteOptimizerService,
    optimize_route,
    respects_block_order,
    validate_stops,
)

__all__ = [
    "Activity",
    "activities_to_stops",
    "activity_to_stop",
    "estimate_optimization_savings",
    "should_optimize",
    "MAX_TWO_OPT_PASSES",
    "DistanceMatrix",
    "HeuristicRouteOptimizerService",
    "RouteInputError",
    "RouteOptimizerService",
    "optimize_route",
    "respects_block_order",
    "validate_stops",
]
