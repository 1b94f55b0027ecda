"""Core data models for the day route optimizer.

This module contains the Pydantic models used throughout the application
for representing coordinates, itinerary stops, routes, and optimization
results. Stops are validated once, at construction, so the optimizer can
rely on every stop carrying usable coordinates.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TimeBlock(str, Enum):
    """Coarse part-of-day tag constraining the relative order of stops.

    Blocks are always visited morning -> afternoon -> evening.
    """

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    @classmethod
    def from_start_time(cls, start_time: str | None) -> Optional["TimeBlock"]:
        """Derive a block from an ``HH:MM`` start time.

        Before 12:00 is morning, before 17:00 afternoon, anything later evening.
        Returns None for a missing or unparseable time.
        """
        if not start_time:
            return None
        hour_part = start_time.strip().split(":")[0]
        try:
            hour = int(hour_part)
        except ValueError:
            return None
        if not 0 <= hour <= 23:
            return None
        if hour < 12:
            return cls.MORNING
        if hour < 17:
            return cls.AFTERNOON
        return cls.EVENING


# Bucket order used by the optimizer; unconstrained stops trail the blocks.
TIME_BLOCK_ORDER: tuple[TimeBlock, ...] = (
    TimeBlock.MORNING,
    TimeBlock.AFTERNOON,
    TimeBlock.EVENING,
)

# A 2-opt pass scans every allowed reversal once. Day itineraries stay well
# under 20 stops and converge in a handful of passes; the cap bounds latency
# on pathological inputs at the cost of optimality there.
MAX_TWO_OPT_PASSES = 100


class Coordinates(BaseModel):
    """Geographic coordinates with validation.

    Latitude must be between -90 and 90 degrees.
    Longitude must be between -180 and 180 degrees.
    NaN and infinite values are rejected.
    """

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False, description="Latitude in degrees")
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False, description="Longitude in degrees")


class Stop(BaseModel):
    """One visitable point of a single itinerary day.

    ``time_block`` is None for stops that can be placed anywhere.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable unique identifier")
    name: str = Field(default="", description="Display label, carried through untouched")
    coordinates: Coordinates = Field(..., description="Geographic location")
    time_block: Optional[TimeBlock] = Field(
        None, description="Part of day the stop is scheduled in"
    )


class Route(BaseModel):
    """An ordered visit of stops plus its one-way distance."""

    order: list[str] = Field(default_factory=list, description="Stop ids in visit order")
    stops: list[Stop] = Field(default_factory=list, description="Stops in visit order")
    total_distance: float = Field(default=0.0, ge=0, description="Total distance in km")


class Improvement(BaseModel):
    """What the optimized route saves over the original order."""

    distance_saved: float = Field(default=0.0, ge=0, description="Distance saved in km")
    time_saved: float = Field(default=0.0, ge=0, description="Walking time saved in minutes")
    percent_improvement: float = Field(default=0.0, ge=0, le=100)


class OptimizationResult(BaseModel):
    """Output of one optimizer invocation."""

    original_route: Route
    optimized_route: Route
    improvement: Improvement = Field(default_factory=Improvement)

    @property
    def changed(self) -> bool:
        return self.original_route.order != self.optimized_route.order


class Confidence(str, Enum):
    """How likely it is that optimizing pays off."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SavingsEstimate(BaseModel):
    """Cheap ballpark of what optimization could save, for UI gating."""

    potential_savings: float = Field(default=0.0, ge=0, description="Rough savings in km")
    percent_savings: float = Field(default=0.0, ge=0, le=100)
    confidence: Confidence = Confidence.LOW


class OptimizeOptions(BaseModel):
    """Call-site switches for the optimizer."""

    respect_time_blocks: bool = False
    use_2opt: bool = True
    start_location: Optional[Coordinates] = Field(
        None, description="Where the day starts; the nearest stop is visited first"
    )
    max_passes: int = Field(default=MAX_TWO_OPT_PASSES, ge=1, description="Upper bound on 2-opt passes")


class Bounds(BaseModel):
    """Bounding box of a set of coordinates."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float
