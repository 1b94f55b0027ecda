"""HTTP API for the day route optimizer."""

from .routes import router

__all__ = ["router"]
