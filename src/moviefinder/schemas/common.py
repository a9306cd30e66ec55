"""Common Pydantic schemas used across the API.

This module provides shared schemas for:
- Error responses (consistent error format)
- Catalog proxy error bodies
- Health checks
"""

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Base Configuration
# =============================================================================


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,  # Allow dataclass DTO conversion
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorDetail(BaseModel):
    """Details of an error response.

    Attributes:
        code: Machine-readable error code (e.g., "ANALYTICS_UNAVAILABLE")
        message: Human-readable error description
        request_id: Correlation ID for tracing (optional)
        details: Additional error context (optional)
    """

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    request_id: str | None = Field(
        None, description="Request correlation ID for tracing"
    )
    details: dict[str, str | int | bool | None] | None = Field(
        None, description="Additional error context"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": "ANALYTICS_UNAVAILABLE",
                "message": "Search analytics are temporarily unavailable",
                "request_id": "abc-123-def-456",
            }
        }
    )


class ErrorResponse(BaseModel):
    """Standard error response wrapper."""

    error: ErrorDetail


class ProxyErrorResponse(BaseModel):
    """Flat error body returned by the catalog proxy.

    Kept flat (``{"error": "..."}``) so browser clients written against the
    serverless proxy keep working.
    """

    error: str = Field(..., description="Error message")
    details: str | None = Field(None, description="Underlying failure, if any")

    model_config = ConfigDict(
        json_schema_extra={"example": {"error": "API key not configured"}}
    )


# =============================================================================
# Health Check Schemas
# =============================================================================


class HealthCheckResponse(BaseModel):
    """Health check endpoint response.

    Attributes:
        status: Overall health status
        checks: Individual service health checks
    """

    status: str = Field(..., pattern="^(ok|degraded|error)$")
    checks: dict[str, str] = Field(
        default_factory=dict, description="Individual service checks"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "ok",
                "checks": {
                    "redis": "ok",
                    "tmdb_token": "ok",
                },
            }
        }
    )
