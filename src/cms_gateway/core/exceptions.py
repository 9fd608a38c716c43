"""Custom exception hierarchy for the CMS gateway.

This module defines a consistent exception hierarchy that enables:
- Structured error responses with error codes
- Consistent HTTP status code mapping
- A clear split between "missing resource" and upstream failures

Usage:
    from cms_gateway.core.exceptions import BrandNotFoundError

    raise BrandNotFoundError(resource_id="abc123")
"""

from typing import Any


class GatewayError(Exception):
    """Base exception for all gateway errors.

    Attributes:
        code: Machine-readable error code (e.g., "BRAND_NOT_FOUND")
        message: Human-readable error message
        status_code: HTTP status code to return
        details: Additional error details (optional)
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Override default message
            code: Override default error code
            details: Additional error details
        """
        if message:
            self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        """Convert exception to API error response format.

        Args:
            request_id: Request correlation ID

        Returns:
            Error response dictionary
        """
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if request_id:
            error["request_id"] = request_id
        if self.details:
            error["details"] = self.details
        return {"error": error}


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class NotFoundError(GatewayError):
    """Base class for resource not found errors."""

    status_code: int = 404


class ResourceNotFoundError(NotFoundError):
    """Raised when the CMS has no entity for the requested identifier."""

    code: str = "RESOURCE_NOT_FOUND"
    message: str = "Resource not found"
    resource: str = "resource"

    def __init__(
        self, resource_id: str | None = None, message: str | None = None
    ) -> None:
        """Initialize with the missing identifier.

        Args:
            resource_id: Identifier that was looked up
            message: Override default message
        """
        details: dict[str, Any] = {"resource": self.resource}
        if resource_id:
            details["id"] = resource_id
            if not message:
                message = f"{self.message} ({resource_id})"
        self.resource_id = resource_id
        super().__init__(message=message, details=details)


class BrandNotFoundError(ResourceNotFoundError):
    code: str = "BRAND_NOT_FOUND"
    message: str = "Brand not found"
    resource: str = "brands"


class CarModelNotFoundError(ResourceNotFoundError):
    code: str = "CAR_MODEL_NOT_FOUND"
    message: str = "Car model not found"
    resource: str = "car-models"


class CarVariantNotFoundError(ResourceNotFoundError):
    code: str = "CAR_VARIANT_NOT_FOUND"
    message: str = "Variant not found"
    resource: str = "car-variants"


class ShowroomNotFoundError(ResourceNotFoundError):
    code: str = "SHOWROOM_NOT_FOUND"
    message: str = "Showroom not found"
    resource: str = "showrooms"


class AdvertisementNotFoundError(ResourceNotFoundError):
    code: str = "ADVERTISEMENT_NOT_FOUND"
    message: str = "Advertisement not found"
    resource: str = "advertisements"


class GovernorateNotFoundError(ResourceNotFoundError):
    code: str = "GOVERNORATE_NOT_FOUND"
    message: str = "Governorate not found"
    resource: str = "governorates"


class CityNotFoundError(ResourceNotFoundError):
    code: str = "CITY_NOT_FOUND"
    message: str = "City not found"
    resource: str = "cities"


class AppVersionNotFoundError(ResourceNotFoundError):
    code: str = "APP_VERSION_NOT_FOUND"
    message: str = "Application version not found"
    resource: str = "application-version"


# =============================================================================
# Authentication Errors (401)
# =============================================================================


class AuthenticationError(GatewayError):
    """Raised when authentication fails."""

    code: str = "AUTHENTICATION_FAILED"
    message: str = "Authentication failed"
    status_code: int = 401


class InvalidCacheSecretError(AuthenticationError):
    """Raised when the cache invalidation secret is missing or wrong."""

    code: str = "INVALID_CACHE_SECRET"
    message: str = "Unauthorized: Invalid or missing secret key"


# =============================================================================
# External Service Errors (502, 503)
# =============================================================================


class ExternalServiceError(GatewayError):
    """Base class for external service errors."""

    code: str = "EXTERNAL_SERVICE_ERROR"
    message: str = "External service error"
    status_code: int = 502


class CMSTransportError(ExternalServiceError):
    """Raised when a CMS request fails.

    Covers network failures, non-2xx responses and upstream error
    envelopes (REST ``error`` objects or GraphQL ``errors`` lists).

    Attributes:
        upstream_status: HTTP status returned by the CMS, if a response arrived
        upstream_error: Parsed upstream error payload, if any
    """

    code: str = "CMS_TRANSPORT_ERROR"
    message: str = "Failed to communicate with the CMS"

    def __init__(
        self,
        message: str | None = None,
        upstream_status: int | None = None,
        upstream_error: dict[str, Any] | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        if upstream_error:
            details["upstream_error"] = upstream_error
        self.upstream_status = upstream_status
        self.upstream_error = upstream_error
        super().__init__(message=message, details=details if details else None)


class CMSDeserializationError(ExternalServiceError):
    """Raised when a CMS payload does not match the expected shape."""

    code: str = "CMS_DESERIALIZATION_ERROR"
    message: str = "Unexpected response shape from the CMS"

    def __init__(
        self,
        resource: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        message: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
            if not message:
                message = f"Failed to decode {resource} from the CMS"
        if errors:
            details["errors"] = errors
        self.resource = resource
        self.errors = errors or []
        super().__init__(message=message, details=details if details else None)


class CacheError(GatewayError):
    """Raised when the cache backend fails."""

    code: str = "CACHE_ERROR"
    message: str = "Cache backend error"
    status_code: int = 503
