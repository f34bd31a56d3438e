"""
Custom exceptions and error handling for the application.
"""

from typing import Any, Dict, Optional


class APIException(Exception):
    """Base exception for all API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize API exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code
            error_code: Machine-readable error code
            details: Additional error details
        """
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(APIException):
    """Raised when request validation fails."""

    def __init__(self, message: str = "Validation error", errors: Optional[list] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details={"errors": errors} if errors else {},
        )


class ResourceNotFoundError(APIException):
    """Raised when requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        message = f"{resource_type} not found"
        if resource_id:
            message += f": {resource_id}"
        super().__init__(
            message=message,
            status_code=404,
            error_code="RESOURCE_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class DuplicateResourceError(APIException):
    """Raised when attempting to create a duplicate resource."""

    def __init__(self, resource_type: str, identifier: Optional[str] = None):
        message = f"Duplicate {resource_type}"
        if identifier:
            message += f": {identifier}"
        super().__init__(
            message=message,
            status_code=409,
            error_code="DUPLICATE_RESOURCE",
            details={"resource_type": resource_type, "identifier": identifier},
        )


class DatabaseError(APIException):
    """Raised when database operation fails."""

    def __init__(self, message: str = "Database operation failed", original_error: Optional[Exception] = None):
        details = {"original_error": str(original_error)} if original_error else {}
        super().__init__(
            message=message,
            status_code=500,
            error_code="DATABASE_ERROR",
            details=details,
        )


class InngestError(APIException):
    """Raised when Inngest operation fails."""

    def __init__(self, message: str = "Background task operation failed", function_name: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="INNGEST_ERROR",
            details={"function_name": function_name} if function_name else {},
        )


class ExternalServiceError(APIException):
    """Raised when external service call fails."""

    def __init__(
        self,
        message: str = "External service unavailable",
        service_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if service_name:
            details["service_name"] = service_name
        if original_error:
            details["original_error"] = str(original_error)
        super().__init__(
            message=message,
            status_code=503,
            error_code="EXTERNAL_SERVICE_ERROR",
            details=details,
        )


class InvalidFeedError(ExternalServiceError):
    """Raised when the product feed body cannot be decoded."""

    def __init__(self, message: str = "Product feed returned an invalid document", feed_url: Optional[str] = None):
        super().__init__(message=message, service_name="product_feed")
        self.status_code = 502
        self.error_code = "INVALID_FEED"
        if feed_url:
            self.details["feed_url"] = feed_url
