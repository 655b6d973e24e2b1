"""Pydantic models for the API layer.

Defines response bodies for the ask and health endpoints.
"""

from typing import Literal

from pydantic import BaseModel, Field


class AskResponse(BaseModel):
    """Answer returned for a successful ask request."""
    answer: str


class ErrorResponse(BaseModel):
    """Error body for 400, 405 and 500 responses."""
    error: str


class HealthResponse(BaseModel):
    """Component health and the selectable model ids."""
    status: Literal["healthy", "unhealthy"]
    components: dict[str, Literal["ok", "error"]]
    models: list[str] = Field(default_factory=list)
