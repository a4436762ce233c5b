"""
Shared exception classes and error handling utilities for the clinic service.

This module provides:
- Custom exception hierarchy for domain-specific errors
- Consistent error response formatting
- Exception handlers for FastAPI integration

Usage:
    from core.exceptions import PatientNotFoundError

    # In service layer - raise domain exceptions
    raise PatientNotFoundError(patient_id="abc123")

    # In FastAPI - register handlers via setup_exception_handlers(app)
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASS
# =============================================================================

class ClinicServiceError(Exception):
    """
    Base exception for all clinic service domain errors.

    Provides consistent error structure with status code and detail message.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ):
        """
        Initialize the exception.

        Args:
            detail: Human-readable error message. Uses class default if not provided.
            status_code: HTTP status code. Uses class default if not provided.
            **kwargs: Additional context to include in error response.
        """
        self.detail = detail or self.__class__.detail
        self.status_code = status_code or self.__class__.status_code
        self.context = kwargs
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result = {"detail": self.detail}
        if self.context:
            result["context"] = self.context
        return result


# =============================================================================
# DOCUMENT EXCEPTIONS
# =============================================================================

class DocumentNotFoundError(ClinicServiceError):
    """Raised when a document is missing from its collection."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Document not found"

    def __init__(self, collection: Optional[str] = None, document_id: Optional[str] = None, **kwargs: Any):
        if collection and document_id:
            detail = f"No document '{document_id}' in {collection}"
        else:
            detail = self.detail
        super().__init__(detail=detail, collection=collection, document_id=document_id, **kwargs)


class PatientNotFoundError(ClinicServiceError):
    """Raised when an ANC record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "No such patient document."

    def __init__(self, patient_id: Optional[str] = None, **kwargs: Any):
        super().__init__(patient_id=patient_id, **kwargs)


class InvalidDocumentError(ClinicServiceError):
    """Raised when document data fails validation."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid document data"


# =============================================================================
# NOTIFICATION EXCEPTIONS
# =============================================================================

class BroadcastDisabledError(ClinicServiceError):
    """Raised when a broadcast is sent while broadcasts are switched off."""

    status_code = status.HTTP_409_CONFLICT
    detail = "Broadcast messages are disabled in notification settings"


class RemindersDisabledError(ClinicServiceError):
    """Raised when a reminder is created while reminders are switched off."""

    status_code = status.HTTP_409_CONFLICT
    detail = "Appointment reminders are disabled in notification settings"


class InactiveTipError(ClinicServiceError):
    """Raised when sending a health tip that has been deactivated."""

    status_code = status.HTTP_409_CONFLICT
    detail = "Health tip is not active"


# =============================================================================
# DATABASE EXCEPTIONS
# =============================================================================

class DatabaseError(ClinicServiceError):
    """Raised when a database operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Database operation failed"

    def __init__(self, operation: Optional[str] = None, **kwargs: Any):
        detail = f"Database error during {operation}" if operation else self.detail
        super().__init__(detail=detail, operation=operation, **kwargs)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def clinic_service_exception_handler(
    request: Request,
    exc: ClinicServiceError
) -> JSONResponse:
    """
    Handle ClinicServiceError exceptions and return consistent JSON responses.
    """
    logger.warning(
        f"ClinicServiceError: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions with a generic error response.

    Logs the full exception for debugging but returns a safe error message.
    """
    logger.exception(
        f"Unhandled exception: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An internal server error occurred"}
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(ClinicServiceError, clinic_service_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
