"""Error and warning models returned to API clients."""

from enum import Enum

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    INVALID_INPUT = "INVALID_INPUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    ROUTE_TIMEOUT = "ROUTE_TIMEOUT"
    API_ERROR = "API_ERROR"


class RecoveryOption(BaseModel):
    """An action the client can offer the user after an error."""

    label: str
    action: str
    params: dict = Field(default_factory=dict)


class AppError(BaseModel):
    """Structured error payload.

    ``message`` is for developers, ``user_message`` is safe to show in the UI.
    """

    code: ErrorCode
    message: str
    user_message: str
    recovery_options: list[RecoveryOption] = Field(default_factory=list)


class Warning(BaseModel):
    """Non-fatal issue attached to a successful response."""

    code: str
    message: str
    affected_stops: list[str] = Field(default_factory=list)
