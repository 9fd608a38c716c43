"""Common Pydantic schemas used across the gateway.

This module provides shared schemas for:
- Error responses (consistent error format)
- Collection envelopes (items plus upstream pagination)
- Health and message responses
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


# =============================================================================
# Base Configuration
# =============================================================================


class BaseSchema(BaseModel):
    """Base schema with common configuration.

    Upstream CMS fields are declared with aliases (``Name``, ``documentId``);
    gateway responses serialize by field name.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorDetail(BaseModel):
    """Details of an error response.

    Attributes:
        code: Machine-readable error code (e.g., "BRAND_NOT_FOUND")
        message: Human-readable error description
        request_id: Correlation ID for tracing (optional)
        details: Additional error context (optional)
    """

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    request_id: str | None = Field(
        None, description="Request correlation ID for tracing"
    )
    details: dict[str, Any] | None = Field(
        None, description="Additional error context"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": "CAR_MODEL_NOT_FOUND",
                "message": "Car model not found (x7k2m9)",
                "request_id": "abc-123-def-456",
            }
        }
    )


class ErrorResponse(BaseModel):
    """Standard error response wrapper."""

    error: ErrorDetail


# =============================================================================
# Collection Schemas
# =============================================================================


class PaginationMeta(BaseSchema):
    """Pagination block reported by the CMS (``meta.pagination``)."""

    page: int = Field(1, ge=0)
    page_size: int = Field(0, ge=0, validation_alias="pageSize")
    page_count: int = Field(0, ge=0, validation_alias="pageCount")
    total: int = Field(0, ge=0)


class CollectionResult(BaseModel, Generic[T]):
    """A mapped collection plus the upstream pagination, when reported.

    Attributes:
        items: Mapped entities in upstream order
        pagination: Upstream pagination (None for unpaginated responses)
    """

    items: list[T] = Field(default_factory=list)
    pagination: PaginationMeta | None = None

    def __len__(self) -> int:
        return len(self.items)


# =============================================================================
# Health Check Schemas
# =============================================================================


class HealthCheckResponse(BaseModel):
    """Health check endpoint response."""

    status: str = Field(..., pattern="^(ok|degraded|error)$")
    checks: dict[str, str] = Field(
        default_factory=dict, description="Individual dependency checks"
    )


# =============================================================================
# Message Response Schemas
# =============================================================================


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str = Field(..., description="Response message")


class CacheInvalidationResponse(BaseModel):
    """Result of a cache invalidation request."""

    success: bool = True
    message: str = "Cache invalidated successfully"
    pattern: str
    deleted: int = Field(0, ge=0, description="Number of keys removed")
