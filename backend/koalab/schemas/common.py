"""
Koalab Backend: Shared Response Schemas
========================================

What:  Error envelope used by every failing endpoint, and the health report.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body.

    Example:
        {
            "error": "authentication_error",
            "message": "Authentication required",
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since the module was loaded")
