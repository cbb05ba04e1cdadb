"""
Custom Exceptions for the Destinations service

Domain exceptions with client-facing messages and proper error codes.
Each exception knows the HTTP status it maps to; the API layer renders
them uniformly through ``to_dict``.
"""

from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
from enum import Enum

from fastapi import status


class ErrorSeverity(Enum):
    """Error severity levels for monitoring and alerting."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification and handling."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PRECONDITION = "precondition"
    DATABASE = "database"
    SYSTEM = "system"


class BaseApplicationException(Exception):
    """
    Base exception for all application-specific errors.

    Provides structured error information for consistent error handling
    and client-facing error responses.
    """

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        error_code: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        suggested_action: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.category = category
        self.severity = severity
        self.http_status = http_status
        self.details = details or {}
        self.suggested_action = suggested_action
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error_code": self.error_code,
            "message": self.user_message,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
            "suggested_action": self.suggested_action,
        }


# Validation Exceptions
class ValidationException(BaseApplicationException):
    """Exception for input validation errors."""

    def __init__(
        self,
        message: str,
        field_errors: Optional[List[Dict[str, str]]] = None,
        **kwargs
    ):
        kwargs.setdefault("error_code", "VALIDATION_ERROR")
        kwargs.setdefault("suggested_action", "Correct the listed fields and retry")
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            http_status=status.HTTP_400_BAD_REQUEST,
            **kwargs
        )
        self.field_errors = field_errors or []
        self.details.update({"field_errors": self.field_errors})


class InvalidCityReferenceException(ValidationException):
    """Exception for seasons pointing at a city that does not exist."""

    def __init__(self, city_id: str, **kwargs):
        super().__init__(
            message="city_id does not reference a valid city",
            field_errors=[{"field": "city_id", "message": f"City {city_id} does not exist"}],
            error_code="INVALID_CITY_REFERENCE",
            **kwargs
        )


# Resource Exceptions
class ResourceNotFoundException(BaseApplicationException):
    """Exception for resource not found errors."""

    def __init__(self, resource_type: str, resource_id: Optional[str] = None, **kwargs):
        super().__init__(
            message=f"{resource_type} not found",
            error_code="RESOURCE_NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.LOW,
            http_status=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
            **kwargs
        )


class CityNotFoundException(ResourceNotFoundException):
    """Exception for city not found errors."""

    def __init__(self, city_id: str, **kwargs):
        super().__init__(resource_type="City", resource_id=city_id, **kwargs)


class SeasonNotFoundException(ResourceNotFoundException):
    """Exception for season not found errors."""

    def __init__(self, season_id: str, **kwargs):
        super().__init__(resource_type="Season", resource_id=season_id, **kwargs)


class JobNotFoundException(ResourceNotFoundException):
    """Exception for unknown background job ids."""

    def __init__(self, job_id: str, **kwargs):
        super().__init__(resource_type="Job", resource_id=job_id, **kwargs)


# Write conflicts
class ConflictException(BaseApplicationException):
    """Exception for uniqueness violations."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "CONFLICT")
        super().__init__(
            message=message,
            category=ErrorCategory.CONFLICT,
            severity=ErrorSeverity.LOW,
            http_status=status.HTTP_409_CONFLICT,
            **kwargs
        )


class DuplicateIdentifierException(ConflictException):
    """Exception for a client supplied id that is already taken."""

    def __init__(self, resource_type: str, resource_id: Optional[str] = None, **kwargs):
        super().__init__(
            message=f"{resource_type} id already exists",
            details={"resource_type": resource_type, "resource_id": resource_id},
            **kwargs
        )


class DuplicateCityException(ConflictException):
    """Exception for a second city with the same name in one country."""

    def __init__(self, name: Optional[str] = None, country_code: Optional[str] = None, **kwargs):
        super().__init__(
            message="City already exists for this country",
            details={"name": name, "country_code": country_code},
            **kwargs
        )


class DuplicateSeasonException(ConflictException):
    """Exception for a second season entry with the same label on one city."""

    def __init__(self, city_id: Optional[str] = None, season_name: Optional[str] = None, **kwargs):
        super().__init__(
            message="Season already defined for this city",
            details={"city_id": city_id, "season_name": season_name},
            **kwargs
        )


class PreconditionFailedException(BaseApplicationException):
    """Exception for writes made against a stale resource version."""

    def __init__(self, resource_type: str, resource_id: str, current_etag: Optional[str] = None, **kwargs):
        super().__init__(
            message="Precondition Failed: Resource has been modified",
            error_code="PRECONDITION_FAILED",
            category=ErrorCategory.PRECONDITION,
            severity=ErrorSeverity.LOW,
            http_status=status.HTTP_412_PRECONDITION_FAILED,
            details={
                "resource_type": resource_type,
                "resource_id": resource_id,
                "current_etag": current_etag,
            },
            suggested_action="Fetch the resource again and retry with its current ETag",
            **kwargs
        )


# Database Exceptions
class DatabaseException(BaseApplicationException):
    """Exception for unexpected database errors."""

    def __init__(self, message: str = "Database operation failed", **kwargs):
        super().__init__(
            message=message,
            user_message="Internal server error",
            error_code="DATABASE_ERROR",
            category=ErrorCategory.DATABASE,
            severity=ErrorSeverity.HIGH,
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            suggested_action="Retry later",
            **kwargs
        )
