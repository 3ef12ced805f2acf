"""Custom exceptions with error classification for the Site Watch application."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Error codes for classification and handling."""
    # Business logic errors
    SOURCE_NOT_FOUND = "SOURCE_NOT_FOUND"
    SOURCE_VALIDATION_FAILED = "SOURCE_VALIDATION_FAILED"
    DUPLICATE_SOURCE_URL = "DUPLICATE_SOURCE_URL"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"

    # External service errors
    FEED_FETCH_FAILED = "FEED_FETCH_FAILED"
    FEED_PARSE_FAILED = "FEED_PARSE_FAILED"
    PAGE_FETCH_FAILED = "PAGE_FETCH_FAILED"
    PAGE_PARSE_FAILED = "PAGE_PARSE_FAILED"

    # Infrastructure errors
    DATABASE_CONNECTION_ERROR = "DATABASE_CONNECTION_ERROR"

    # Generic errors
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class BaseAppException(Exception):
    """Base exception with error classification and retry information."""

    status_code: int = 500

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        retryable: bool = False,
        retry_after: Optional[int] = None
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable
        self.retry_after = retry_after
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging and serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
            "retry_after": self.retry_after,
            "type": self.__class__.__name__
        }


# Business Logic Errors
class BusinessLogicError(BaseAppException):
    """Base class for business logic errors."""
    status_code = 400


class SourceValidationError(BusinessLogicError):
    """Raised when source validation fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.SOURCE_VALIDATION_FAILED,
            message=message,
            details=details,
            retryable=False
        )


class SourceNotFoundError(BusinessLogicError):
    """Raised when a source is not found."""

    status_code = 404

    def __init__(self, source_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"Source not found: {source_id}"
        super().__init__(
            code=ErrorCode.SOURCE_NOT_FOUND,
            message=message,
            details=details or {"source_id": str(source_id)},
            retryable=False
        )


class DuplicateSourceUrlError(SourceValidationError):
    """Raised when attempting to create a source with a URL that is already monitored."""

    status_code = 409

    def __init__(self, url: str, details: Optional[Dict[str, Any]] = None):
        message = f"Source with URL already exists: {url}"
        super().__init__(
            message=message,
            details=details or {"url": url}
        )
        self.code = ErrorCode.DUPLICATE_SOURCE_URL


class ItemNotFoundError(BusinessLogicError):
    """Raised when an item is not found."""

    status_code = 404

    def __init__(self, item_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.ITEM_NOT_FOUND,
            message=f"Item not found: {item_id}",
            details=details or {"item_id": str(item_id)},
            retryable=False
        )


# External Service Errors
class ExternalServiceError(BaseAppException):
    """Base class for failures talking to monitored sites."""
    status_code = 502


class FeedFetchError(ExternalServiceError):
    """Raised when a feed cannot be downloaded (network error or non-2xx status)."""

    def __init__(self, url: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        message = f"Failed to fetch feed {url}"
        if status_code:
            message += f" (status: {status_code})"
        super().__init__(
            code=ErrorCode.FEED_FETCH_FAILED,
            message=message,
            details=details or {"url": url, "status_code": status_code},
            retryable=True,
            retry_after=60
        )


class FeedParseError(ExternalServiceError):
    """Raised when a downloaded body is not a readable RSS or Atom document."""

    def __init__(self, url: str, reason: str = "", details: Optional[Dict[str, Any]] = None):
        message = f"Failed to parse feed {url}"
        if reason:
            message += f": {reason}"
        super().__init__(
            code=ErrorCode.FEED_PARSE_FAILED,
            message=message,
            details=details or {"url": url, "reason": reason},
            retryable=False
        )


class PageFetchError(ExternalServiceError):
    """Raised when an HTML page cannot be downloaded."""

    def __init__(self, url: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        message = f"Failed to fetch page {url}"
        if status_code:
            message += f" (status: {status_code})"
        super().__init__(
            code=ErrorCode.PAGE_FETCH_FAILED,
            message=message,
            details=details or {"url": url, "status_code": status_code},
            retryable=True,
            retry_after=60
        )


class PageParseError(ExternalServiceError):
    """Raised when a downloaded page cannot be processed."""

    def __init__(self, url: str, reason: str = "", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.PAGE_PARSE_FAILED,
            message=f"Failed to parse page {url}: {reason}" if reason else f"Failed to parse page {url}",
            details=details or {"url": url, "reason": reason},
            retryable=False
        )


# Infrastructure Errors
class InfrastructureError(BaseAppException):
    """Base class for infrastructure errors."""
    status_code = 503


class DatabaseConnectionError(InfrastructureError):
    """Raised when database connection fails."""

    def __init__(self, message: str = "Database connection failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.DATABASE_CONNECTION_ERROR,
            message=message,
            details=details,
            retryable=True,
            retry_after=30
        )
