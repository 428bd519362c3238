"""
PIM Backend — Shared Schema Pieces
===================================

What:  Base model for the camelCase wire format, the error envelope and the
       health check response.

Wire format:
    Python attributes are snake_case; JSON keys are camelCase
    (user_id ↔ userId). Input accepts either spelling. FastAPI serialises
    response models by alias, so responses are always camelCase.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base for every request/response model of the resource endpoints."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


def reject_null(value: Any, field: str) -> Any:
    """
    Used by update schemas: a required field may be omitted from a partial
    update, but it may not be set to null.
    """
    if value is None:
        raise ValueError(f"{field} may not be null")
    return value


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "note with ID '...' was not found",
            "details": null,
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for container and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
