"""Route optimizer for a single itinerary day.

Orders a day's stops to minimize straight-line travel distance:

1. Nearest-neighbor construction, optionally split into
   morning -> afternoon -> evening -> unconstrained buckets.
2. 2-opt refinement. A reversal may only span stops of one time block
   (plus unconstrained stops), so the time-block order survives.

The input order is refined the same way and kept whenever the construction
does not beat it, so the optimized route is never longer than the order the
caller handed in. Everything is deterministic: ties always go to the lowest
input index.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from app.models import (
    MAX_TWO_OPT_PASSES,
    TIME_BLOCK_ORDER,
    Coordinates,
    Improvement,
    OptimizationResult,
    OptimizeOptions,
    Route,
    Stop,
    TimeBlock,
)
from app.utils.geo import distance_between, estimate_walking_time, route_distance

logger = logging.getLogger(__name__)

# Reversals must shorten the route by more than this (km) to be applied
MIN_GAIN_KM = 1e-9


class RouteInputError(ValueError):
    """Raised when the stops handed to the optimizer break its preconditions."""


@dataclass
class DistanceMatrix:
    """Symmetric haversine distance matrix (km) for a list of stops."""
    stops: list[Stop]
    distances: NDArray[np.float64]

    @classmethod
    def from_stops(cls, stops: Sequence[Stop]) -> "DistanceMatrix":
        n = len(stops)
        distances = np.zeros((n, n), dtype=np.float64)
        for i in range(n):
            for j in range(i + 1, n):
                dist = distance_between(stops[i].coordinates, stops[j].coordinates)
                distances[i][j] = dist
                distances[j][i] = dist
        return cls(stops=list(stops), distances=distances)

    def path_length(self, order: Sequence[int], start: Coordinates | None = None) -> float:
        """One-way length of the path visiting ``order`` (stop indices).

        With ``start``, the leg from there to the first stop is included.
        """
        if start is not None and order:
            legs = [distance_between(start, self.stops[order[0]].coordinates)]
        else:
            legs = []
        legs.extend(
            self.distances[order[k]][order[k + 1]]
            for k in range(len(order) - 1)
        )
        return float(sum(legs))


def validate_stops(stops: Sequence[Stop | Mapping[str, Any]] | None) -> list[Stop]:
    """Coerce input into validated Stop objects or fail fast.

    Mappings are validated into Stop (raising pydantic's ValidationError on bad
    coordinates or ids). Duplicate ids raise RouteInputError.
    """
    if stops is None:
        raise RouteInputError("stops must be a sequence of stops, got None")

    validated: list[Stop] = []
    for index, stop in enumerate(stops):
        if isinstance(stop, Stop):
            validated.append(stop)
        elif isinstance(stop, Mapping):
            validated.append(Stop.model_validate(stop))
        else:
            raise RouteInputError(
                f"Stop at position {index} is a {type(stop).__name__}, expected Stop or mapping"
            )

    counts = Counter(stop.id for stop in validated)
    duplicates = sorted(stop_id for stop_id, count in counts.items() if count > 1)
    if duplicates:
        raise RouteInputError(f"Duplicate stop ids: {', '.join(duplicates)}")

    return validated


def nearest_neighbor_order(matrix: DistanceMatrix, candidates: Sequence[int], seed: int) -> list[int]:
    """Greedy path over ``candidates`` starting at ``seed``.

    Always moves to the closest unvisited stop; equal distances go to the
    lowest input index.
    """
    tour = [seed]
    remaining = sorted(i for i in candidates if i != seed)
    current = seed

    while remaining:
        row = matrix.distances[current]
        nearest = min(remaining, key=lambda i: (row[i], i))
        tour.append(nearest)
        remaining.remove(nearest)
        current = nearest

    return tour


def build_route(stops: Sequence[Stop], start: Coordinates | None = None) -> Route:
    """Route for ``stops`` visited in the given order.

    With ``start``, the distance includes the leg from there to the first stop.
    """
    points = [stop.coordinates for stop in stops]
    if start is not None and points:
        points.insert(0, start)
    return Route(
        order=[stop.id for stop in stops],
        stops=list(stops),
        total_distance=route_distance(points),
    )


def respects_block_order(stops: Sequence[Stop]) -> bool:
    """True when the tagged stops already run morning -> afternoon -> evening.

    Unconstrained stops may sit anywhere.
    """
    ranks = [TIME_BLOCK_ORDER.index(stop.time_block) for stop in stops if stop.time_block is not None]
    return all(earlier <= later for earlier, later in zip(ranks, ranks[1:]))


class RouteOptimizerService(ABC):
    """Abstract base class for day route optimization."""

    @abstractmethod
    def optimize(
        self,
        stops: Sequence[Stop | Mapping[str, Any]],
        options: OptimizeOptions | None = None,
    ) -> OptimizationResult:
        pass

    async def optimize_async(
        self,
        stops: Sequence[Stop | Mapping[str, Any]],
        options: OptimizeOptions | None = None,
        timeout: float | None = None,
    ) -> OptimizationResult:
        """Run ``optimize`` on a worker thread, giving up after ``timeout`` seconds.

        On timeout the computation is abandoned and asyncio.TimeoutError raised;
        nothing is shared, so there is nothing to roll back.
        """
        return await asyncio.wait_for(
            asyncio.to_thread(self.optimize, stops, options),
            timeout=timeout,
        )


class HeuristicRouteOptimizerService(RouteOptimizerService):
    """Nearest neighbor + bounded 2-opt over haversine distances."""

    def optimize(
        self,
        stops: Sequence[Stop | Mapping[str, Any]],
        options: OptimizeOptions | None = None,
    ) -> OptimizationResult:
        options = options or OptimizeOptions()
        stops = validate_stops(stops)
        start = options.start_location
        original_route = build_route(stops, start)

        if len(stops) <= 1:
            return OptimizationResult(
                original_route=original_route,
                optimized_route=original_route.model_copy(),
                improvement=Improvement(),
            )

        logger.info(
            f"[ROUTE] Optimizing {len(stops)} stops "
            f"(time_blocks={options.respect_time_blocks}, 2opt={options.use_2opt})"
        )
        matrix = DistanceMatrix.from_stops(stops)
        buckets = self._bucket_indices(stops, options.respect_time_blocks)
        if options.respect_time_blocks:
            blocks = [stop.time_block for stop in stops]
        else:
            blocks = [None] * len(stops)

        if respects_block_order(stops):
            baseline = list(range(len(stops)))
        else:
            baseline = [i for bucket in buckets for i in bucket]
        constructed = self._construct(matrix, buckets, start)

        if options.use_2opt:
            baseline = self._two_opt(matrix, baseline, blocks, options.max_passes)
            constructed = self._two_opt(matrix, constructed, blocks, options.max_passes)

        if matrix.path_length(constructed, start) < matrix.path_length(baseline, start):
            best = constructed
        else:
            best = baseline

        optimized_route = build_route([stops[i] for i in best], start)
        improvement = self._improvement(original_route, optimized_route)
        logger.info(
            f"[ROUTE] {original_route.total_distance:.3f} km -> "
            f"{optimized_route.total_distance:.3f} km "
            f"({improvement.percent_improvement:.1f}% saved)"
        )

        return OptimizationResult(
            original_route=original_route,
            optimized_route=optimized_route,
            improvement=improvement,
        )

    def _bucket_indices(self, stops: list[Stop], respect_time_blocks: bool) -> list[list[int]]:
        """Split stop indices into ordered, non-empty buckets.

        Without active time blocks everything is one bucket. Otherwise
        morning, afternoon, evening, then unconstrained, each in input order.
        """
        if not respect_time_blocks or all(stop.time_block is None for stop in stops):
            return [list(range(len(stops)))]

        buckets: list[list[int]] = []
        for block in TIME_BLOCK_ORDER:
            buckets.append([i for i, stop in enumerate(stops) if stop.time_block == block])
        buckets.append([i for i, stop in enumerate(stops) if stop.time_block is None])
        return [bucket for bucket in buckets if bucket]

    def _construct(
        self,
        matrix: DistanceMatrix,
        buckets: list[list[int]],
        start_location: Coordinates | None,
    ) -> list[int]:
        """Nearest-neighbor route through each bucket, concatenated."""
        order: list[int] = []
        for position, bucket in enumerate(buckets):
            seed = bucket[0]
            if position == 0 and start_location is not None:
                seed = min(
                    bucket,
                    key=lambda i: (distance_between(start_location, matrix.stops[i].coordinates), i),
                )
            order.extend(nearest_neighbor_order(matrix, bucket, seed))
        return order

    def _two_opt(
        self,
        matrix: DistanceMatrix,
        order: list[int],
        blocks: Sequence[TimeBlock | None],
        max_passes: int = MAX_TWO_OPT_PASSES,
    ) -> list[int]:
        """Reverse sub-paths while that shortens the route.

        ``blocks`` holds the time block of each stop index (None for
        unconstrained). Position 0 stays anchored; the route end is open. A
        reversed sub-path holds stops of at most one time block, so block
        order is preserved.
        """
        route = list(order)
        n = len(route)
        passes = 0
        improved = True

        while improved and passes < max_passes:
            improved = False
            passes += 1
            for a in range(1, n - 1):
                block = blocks[route[a]]
                for b in range(a + 1, n):
                    current = blocks[route[b]]
                    if current is not None:
                        if block is None:
                            block = current
                        elif current != block:
                            break
                    if self._two_opt_gain(route, matrix.distances, a, b) > MIN_GAIN_KM:
                        route[a:b + 1] = route[a:b + 1][::-1]
                        improved = True

        if improved:
            logger.debug(f"[ROUTE] 2-opt stopped at the {max_passes}-pass cap")
        else:
            logger.debug(f"[ROUTE] 2-opt converged after {passes} passes")
        return route

    def _two_opt_gain(self, route: list[int], distances: NDArray, a: int, b: int) -> float:
        """Distance saved by reversing route[a..b] (positive means shorter)."""
        before = route[a - 1]
        current = distances[before][route[a]]
        new = distances[before][route[b]]
        if b + 1 < len(route):
            after = route[b + 1]
            current += distances[route[b]][after]
            new += distances[route[a]][after]
        return current - new

    def _improvement(self, original: Route, optimized: Route) -> Improvement:
        distance_saved = max(0.0, original.total_distance - optimized.total_distance)
        if original.total_distance > 0:
            percent = min(100.0, distance_saved / original.total_distance * 100)
        else:
            percent = 0.0
        return Improvement(
            distance_saved=distance_saved,
            time_saved=estimate_walking_time(distance_saved),
            percent_improvement=percent,
        )


_default_service = HeuristicRouteOptimizerService()


def optimize_route(
    stops: Sequence[Stop | Mapping[str, Any]],
    options: OptimizeOptions | None = None,
    **overrides: Any,
) -> OptimizationResult:
    """Optimize one day's stops.

    Options may be passed as an OptimizeOptions or as keyword overrides, e.g.
    ``optimize_route(stops, respect_time_blocks=True)``.
    """
    if overrides:
        base = options.model_dump() if options else {}
        options = OptimizeOptions.model_validate({**base, **overrides})
    return _default_service.optimize(stops, options)
