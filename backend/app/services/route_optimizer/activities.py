"""Conversion of itinerary activities into optimizer stops.

Itinerary cards arrive loosely typed: coordinates may be missing and the
part of day is only implied by the scheduled start time.
"""

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from app.models import Coordinates, Stop, TimeBlock

logger = logging.getLogger(__name__)


class Activity(BaseModel):
    """An itinerary card as stored by the trip API."""

    id: str = Field(..., min_length=1)
    name: str = ""
    coordinates: Optional[Coordinates] = None
    start_time: Optional[str] = Field(None, description="Scheduled start, HH:MM")
    day: Optional[int] = Field(None, ge=1)


def activity_to_stop(activity: Activity) -> Stop | None:
    """Stop for ``activity``, or None when it has no coordinates."""
    if activity.coordinates is None:
        return None
    return Stop(
        id=activity.id,
        name=activity.name,
        coordinates=activity.coordinates,
        time_block=TimeBlock.from_start_time(activity.start_time),
    )


def activities_to_stops(activities: Iterable[Activity]) -> list[Stop]:
    """Stops for every locatable activity, in the given order."""
    stops = []
    skipped = 0
    for activity in activities:
        stop = activity_to_stop(activity)
        if stop is None:
            skipped += 1
            continue
        stops.append(stop)

    if skipped:
        logger.info(f"[ROUTE] Skipped {skipped} activities without coordinates")
    return stops
