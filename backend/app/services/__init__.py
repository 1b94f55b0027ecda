"""Day Route Optimizer Services.

Service layer components:
- Route Optimizer: nearest-neighbor + 2-opt day ordering over haversine distances
- Optimizability gate: cheap should-we-bother checks for the UI
- Activity conversion: itinerary cards -> validated stops
"""

from .route_optimizer import (
    Activity,
    DistanceMatrix,
    HeuristicRouteOptimizerService,
    RouteInputError,
    RouteOptimizerService,
    activities_to_stops,
    estimate_optimization_savings,
    optimize_route,
    should_optimize,
)

__all__ = [
    # Route optimizer
    "RouteOptimizerService",
    "HeuristicRouteOptimizerService",
    "RouteInputError",
    "DistanceMatrix",
    "optimize_route",
    # Gate
    "should_optimize",
    "estimate_optimization_savings",
    # Activities
    "Activity",
    "activities_to_stops",
]
