# screenshooter/domain/common/errors.py
"""
Domain-specific error types for standardized error handling.

Every failure that crosses a service boundary is expressed as one of these
objects inside a failed Result, so the presentation layer can decide what to
show (and what to silently ignore, such as cancellations).
"""
from enum import Enum
from typing import Optional, Dict, Any


class ErrorCategory(Enum):
    """Categories of errors in the application."""
    VALIDATION = "Validation"
    CONFIGURATION = "Configuration"
    PLATFORM = "Platform"
    NETWORK = "Network"
    RESOURCE = "Resource"
    IO = "IO"
    CANCELLED = "Cancelled"
    UI = "UI"
    UNKNOWN = "Unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"
    CRITICAL = "Critical"


class DomainError:
    """
    Base class for domain-specific errors.

    Carries structured error information used for logging and user feedback.
    """

    def __init__(self,
                 message: str,
                 category: ErrorCategory = ErrorCategory.UNKNOWN,
                 severity: ErrorSeverity = ErrorSeverity.ERROR,
                 code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None,
                 inner_error: Optional[Exception] = None):
        """
        Initialize a domain error.

        Args:
            message: Human-readable error message
            category: Error category
            severity: Error severity
            code: Optional error code for programmatic handling
            details: Optional additional error details
            inner_error: Optional original exception
        """
        self.message = message
        self.category = category
        self.severity = severity
        self.code = code
        self.details = details or {}
        self.inner_error = inner_error

    @staticmethod
    def from_exception(ex: Exception,
                       category: ErrorCategory = ErrorCategory.UNKNOWN,
                       severity: ErrorSeverity = ErrorSeverity.ERROR) -> 'DomainError':
        """Create a domain error wrapping an unexpected exception."""
        return DomainError(
            message=str(ex),
            category=category,
            severity=severity,
            inner_error=ex
        )

    @property
    def is_cancellation(self) -> bool:
        """Cancellations are expected outcomes and are never shown to the user."""
        return self.category == ErrorCategory.CANCELLED

    def __str__(self) -> str:
        return f"{self.category.value} Error: {self.message}"


class ValidationError(DomainError):
    """Error for validation failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.WARNING,
            details=details,
            inner_error=inner_error
        )


class ConfigurationError(DomainError):
    """Error for configuration issues."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.ERROR,
            details=details,
            inner_error=inner_error
        )


class PlatformError(DomainError):
    """Error for launching external programs or other OS interaction."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.PLATFORM,
            severity=ErrorSeverity.ERROR,
            details=details,
            inner_error=inner_error
        )


class SourceUnreadableError(DomainError):
    """The image to upload is missing or cannot be mapped into memory."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.RESOURCE,
            severity=ErrorSeverity.ERROR,
            code="source_unreadable",
            details=details,
            inner_error=inner_error
        )


class HttpError(DomainError):
    """
    The upload endpoint answered with a non-2xx status.

    The message is the server's reason phrase, shown verbatim to the user.
    """

    def __init__(self, status_code: int, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=reason,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.ERROR,
            code="http",
            details=details
        )
        self.status_code = status_code
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.category.value} Error: {self.status_code} {self.reason}"


class NetworkError(DomainError):
    """The HTTP exchange could not be completed (connection, proxy, timeout)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.ERROR,
            code="network",
            details=details,
            inner_error=inner_error
        )


class MalformedResponseError(DomainError):
    """The upload response body was not the expected JSON object. Logged only."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.WARNING,
            code="malformed_response",
            details=details,
            inner_error=inner_error
        )


class JobCancelledError(DomainError):
    """A background job was cancelled before it reached the network."""

    def __init__(self, message: str = "Job was cancelled", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.CANCELLED,
            severity=ErrorSeverity.INFO,
            code="cancelled",
            details=details
        )


class UserCancelledError(DomainError):
    """The user dismissed a prompt. Never surfaced as an error."""

    def __init__(self, message: str = "Cancelled by user", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.CANCELLED,
            severity=ErrorSeverity.INFO,
            code="user_cancelled",
            details=details
        )


class SaveError(DomainError):
    """Writing the screenshot to disk failed (disk full, permission, bad path)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.IO,
            severity=ErrorSeverity.ERROR,
            code="io",
            details=details,
            inner_error=inner_error
        )


class UIError(DomainError):
    """Error for UI-related issues."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, inner_error: Optional[Exception] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.UI,
            severity=ErrorSeverity.WARNING,
            details=details,
            inner_error=inner_error
        )
