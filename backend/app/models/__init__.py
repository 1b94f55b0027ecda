"""Data models for the day route optimizer."""

from .core import (
    MAX_TWO_OPT_PASSES,
    TIME_BLOCK_ORDER,
    Bounds,
    Confidence,
    Coordinates,
    Improvement,
    OptimizationResult,
    OptimizeOptions,
    Route,
    SavingsEstimate,
    Stop,
    TimeBlock,
)
from .errors import AppError, ErrorCode, RecoveryOption, Warning

__all__ = [
    # Core
    "MAX_TWO_OPT_PASSES",
    "TIME_BLOCK_ORDER",
    "Bounds",
    "Confidence",
    "Coordinates",
    "Improvement",
    "OptimizationResult",
    "OptimizeOptions",
    "Route",
    "SavingsEstimate",
    "Stop",
    "TimeBlock",
    # Errors
    "AppError",
    "ErrorCode",
    "RecoveryOption",
    "Warning",
]
