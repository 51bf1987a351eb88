"""
Custom exception classes and error handlers
Provides consistent error responses across the application
"""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from typing import Any, Dict, Iterable, Optional
import uuid

class BackshopException(HTTPException):
    """Base exception class for Backshop application"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

class BadRequestException(BackshopException):
    """400 Bad Request"""

    def __init__(self, detail: str, error_code: str = "BAD_REQUEST"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )

class NotFoundException(BackshopException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code
        )

class ConflictException(BackshopException):
    """409 Conflict"""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )

class InternalServerException(BackshopException):
    """500 Internal Server Error"""

    def __init__(
        self,
        detail: str = "Internal server error",
        error_code: str = "INTERNAL_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code
        )

class ServiceUnavailableException(BackshopException):
    """503 Service Unavailable"""

    def __init__(
        self,
        detail: str = "Service temporarily unavailable",
        error_code: str = "SERVICE_UNAVAILABLE"
    ):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            error_code=error_code
        )

# Business logic exceptions
class InvalidKeyException(BadRequestException):
    """Cart key missing, ambiguous or malformed"""

    def __init__(self, detail: str = "Exactly one of session_id or user_id is required"):
        super().__init__(
            detail=detail,
            error_code="INVALID_KEY"
        )

class PartialProductMismatchException(BadRequestException):
    """Some requested products do not exist"""

    def __init__(self, missing_ids: Iterable[Any]):
        self.missing_ids = [str(product_id) for product_id in missing_ids]
        super().__init__(
            detail=f"Some products were not found: {', '.join(self.missing_ids)}",
            error_code="PRODUCTS_NOT_FOUND"
        )

class HasChildrenException(BadRequestException):
    """Menu item still has children"""

    def __init__(self, detail: str = "Cannot delete menu item with children. Delete children first."):
        super().__init__(
            detail=detail,
            error_code="HAS_CHILDREN"
        )

class CyclicReferenceException(BadRequestException):
    """Parent change would create a cycle"""

    def __init__(self, detail: str = "Cannot set parent: this would create a circular reference"):
        super().__init__(
            detail=detail,
            error_code="CYCLIC_REFERENCE"
        )

class SelfParentException(ConflictException):
    """Item cannot be its own parent"""

    def __init__(self, detail: str = "Menu item cannot be its own parent"):
        super().__init__(
            detail=detail,
            error_code="SELF_PARENT"
        )

class IntegrationConfigurationException(InternalServerException):
    """Integrations are configured ambiguously"""

    def __init__(self, detail: str):
        super().__init__(
            detail=detail,
            error_code="INTEGRATION_CONFIGURATION"
        )

class NotificationDeliveryException(ServiceUnavailableException):
    """Messaging transport rejected or failed to deliver a message"""

    def __init__(self, detail: str):
        super().__init__(
            detail=detail,
            error_code="NOTIFICATION_DELIVERY_FAILED"
        )

def parse_uuid(value: Any, name: str = "id") -> uuid.UUID:
    """
    Parse a UUID from user input

    Raises:
        BadRequestException: If the value is not a valid UUID
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise BadRequestException(f"Invalid {name}: {value}", error_code="INVALID_ID")

async def backshop_exception_handler(request: Request, exc: BackshopException) -> JSONResponse:
    """Render application exceptions as a JSON error envelope"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.error_code,
                "message": exc.detail
            }
        },
        headers=exc.headers
    )
