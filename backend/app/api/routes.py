"""API routes for the day route optimizer.

The UI posts the current day's itinerary cards; cards without coordinates
are dropped before the optimizer sees them. Applying the optimized order
back onto the cards (and persisting it) stays with the trip API.
"""

import asyncio
import logging
import os
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field, ValidationError

from app.models import (
    AppError,
    Coordinates,
    ErrorCode,
    OptimizationResult,
    OptimizeOptions,
    RecoveryOption,
    SavingsEstimate,
    Warning,
)
from app.services import (
    Activity,
    HeuristicRouteOptimizerService,
    RouteInputError,
    RouteOptimizerService,
    activities_to_stops,
    estimate_optimization_savings,
    should_optimize,
)
from app.utils.geo import format_distance, format_duration

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_OPTIMIZE_TIMEOUT_SECONDS = 5.0


def get_optimize_timeout() -> float:
    """Seconds an optimize request may run before it is abandoned."""
    raw = os.getenv("ROUTE_OPTIMIZE_TIMEOUT_SECONDS")
    if not raw:
        return DEFAULT_OPTIMIZE_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[ROUTE] Ignoring invalid ROUTE_OPTIMIZE_TIMEOUT_SECONDS={raw!r}")
        return DEFAULT_OPTIMIZE_TIMEOUT_SECONDS


# Service instances
_route_service: RouteOptimizerService | None = None


def get_route_service() -> RouteOptimizerService:
    global _route_service
    if _route_service is None:
        _route_service = HeuristicRouteOptimizerService()
    return _route_service


def _skipped_warning(activities: list[Activity], stop_ids: set[str]) -> list[Warning]:
    missing = [a.id for a in activities if a.id not in stop_ids]
    if not missing:
        return []
    return [Warning(
        code="MISSING_COORDINATES",
        message=f"{len(missing)} activities have no location and were left out of the route.",
        affected_stops=missing,
    )]


class AnalyzeDayRequest(BaseModel):
    """Request model for checking whether a day is worth optimizing."""
    activities: list[Activity] = Field(default_factory=list)


class AnalyzeDayResponse(BaseModel):
    """Response model for the optimizability check."""
    success: bool
    should_optimize: bool = False
    estimate: Optional[SavingsEstimate] = None
    stop_count: int = 0
    skipped: int = 0
    warnings: Optional[list[Warning]] = None
    error: Optional[AppError] = None


class OptimizeDayRequest(BaseModel):
    """Request model for optimizing a day's visiting order."""
    activities: list[Activity] = Field(default_factory=list)
    respect_time_blocks: bool = True
    use_2opt: bool = True
    start_location: Optional[Coordinates] = None


class FormattedImprovement(BaseModel):
    """Human-readable savings for display."""
    original_distance: str
    optimized_distance: str
    distance_saved: str
    time_saved: str


class OptimizeDayResponse(BaseModel):
    """Response model for route optimization."""
    success: bool
    result: Optional[OptimizationResult] = None
    formatted: Optional[FormattedImprovement] = None
    warnings: Optional[list[Warning]] = None
    error: Optional[AppError] = None


def _invalid_input(message: str) -> AppError:
    return AppError(
        code=ErrorCode.INVALID_INPUT,
        message=message,
        user_message="Some stops could not be routed. Please check the day's places.",
    )


@router.post("/route/analyze", response_model=AnalyzeDayResponse)
async def analyze_day(request: AnalyzeDayRequest) -> AnalyzeDayResponse:
    """Tell the UI whether offering optimization makes sense for a day."""
    try:
        stops = activities_to_stops(request.activities)
        warnings = _skipped_warning(request.activities, {s.id for s in stops})
        return AnalyzeDayResponse(
            success=True,
            should_optimize=should_optimize(stops),
            estimate=estimate_optimization_savings(stops),
            stop_count=len(stops),
            skipped=len(request.activities) - len(stops),
            warnings=warnings or None,
        )
    except (RouteInputError, ValidationError) as e:
        return AnalyzeDayResponse(success=False, error=_invalid_input(str(e)))


@router.post("/route/optimize", response_model=OptimizeDayResponse)
async def optimize_day(request: OptimizeDayRequest) -> OptimizeDayResponse:
    """Compute an optimized visiting order for one day.

    The response carries both routes so the UI can show a comparison and
    apply ``optimized_route.order`` on confirmation.
    """
    logger.info(f"[ROUTE] Optimize request with {len(request.activities)} activities")

    try:
        stops = activities_to_stops(request.activities)
        warnings = _skipped_warning(request.activities, {s.id for s in stops})
        options = OptimizeOptions(
            respect_time_blocks=request.respect_time_blocks,
            use_2opt=request.use_2opt,
            start_location=request.start_location,
        )

        result = await get_route_service().optimize_async(
            stops, options, timeout=get_optimize_timeout()
        )

        formatted = FormattedImprovement(
            original_distance=format_distance(result.original_route.total_distance),
            optimized_distance=format_distance(result.optimized_route.total_distance),
            distance_saved=format_distance(result.improvement.distance_saved),
            time_saved=format_duration(result.improvement.time_saved),
        )
        return OptimizeDayResponse(
            success=True,
            result=result,
            formatted=formatted,
            warnings=warnings or None,
        )

    except (RouteInputError, ValidationError) as e:
        return OptimizeDayResponse(success=False, error=_invalid_input(str(e)))

    except asyncio.TimeoutError:
        logger.warning("[ROUTE] Optimization timed out")
        return OptimizeDayResponse(
            success=False,
            error=AppError(
                code=ErrorCode.ROUTE_TIMEOUT,
                message="Route optimization exceeded its time budget",
                user_message="Optimizing this day took too long. Please try again.",
                recovery_options=[
                    RecoveryOption(label="Retry", action="retry"),
                ],
            ),
        )

    except Exception as e:
        logger.exception("Unhandled error")
        return OptimizeDayResponse(
            success=False,
            error=AppError(
                code=ErrorCode.API_ERROR,
                message=str(e),
                user_message="Something went wrong. Please try again later.",
                recovery_options=[
                    RecoveryOption(label="Retry", action="retry"),
                ],
            ),
        )
