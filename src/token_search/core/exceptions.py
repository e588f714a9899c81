"""
Unified Exception Hierarchy for Token Search.

Exception Hierarchy:
    TokenSearchError (base)
    ├── APIError
    │   ├── RateLimitError
    │   ├── UpstreamUnavailableError
    │   └── UpstreamRejectedError
    ├── ValidationError
    │   └── InvalidQueryError
    ├── DataError
    │   └── ParseError
    └── ConfigurationError

Upstream errors never leave an adapter: they are converted into an
AdapterStatus at the adapter boundary (see status_for_error).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = auto()      # Recoverable, can continue
    ERROR = auto()        # Failed but can retry
    CRITICAL = auto()     # Cannot continue
    TRANSIENT = auto()    # Temporary, should retry automatically


class ErrorCategory(Enum):
    """Categories for error classification."""
    API = "api"
    VALIDATION = "validation"
    DATA = "data"
    CONFIGURATION = "config"


class AdapterStatus(Enum):
    """Outcome of one adapter call, as reported to the caller."""
    SUCCEEDED = "succeeded"
    TIMEOUT = "timeout"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_REJECTED = "upstream_rejected"
    PARSE_ERROR = "parse_error"
    SKIPPED = "skipped"

    @property
    def is_failure(self) -> bool:
        return self not in (AdapterStatus.SUCCEEDED, AdapterStatus.SKIPPED)


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context for error messages."""
    source: str | None = None
    operation: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    retry_after: float | None = None
    status_code: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class TokenSearchError(Exception):
    """
    Base exception for all Token Search errors.

    Provides:
    - Structured error context
    - Severity classification
    - Retry guidance
    """

    __slots__ = ('context', 'severity', 'category', 'retryable')

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.API,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
            "retryable": self.retryable,
        }
        if self.context.source:
            result["source"] = self.context.source
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        if self.context.retry_after:
            result["retry_after_seconds"] = self.context.retry_after
        return result


# =============================================================================
# API Errors
# =============================================================================

class APIError(TokenSearchError):
    """Base class for upstream API errors."""

    status: AdapterStatus = AdapterStatus.UPSTREAM_UNAVAILABLE

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        retryable: bool = True,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.API,
            retryable=retryable,
        )


class RateLimitError(APIError):
    """Raised when an upstream rate limit is exceeded (or a breaker is open)."""

    def __init__(
        self,
        message: str = "API rate limit exceeded",
        *,
        retry_after: float = 1.0,
        source: str | None = None,
        status_code: int | None = None,
    ) -> None:
        ctx = ErrorContext(
            source=source,
            suggestion="Wait and retry the request",
            retry_after=retry_after,
            status_code=status_code,
        )
        super().__init__(message, context=ctx, retryable=True)
        self.severity = ErrorSeverity.TRANSIENT


class UpstreamUnavailableError(APIError):
    """Connection failure or HTTP 5xx from an upstream."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        *,
        source: str = "upstream",
        status_code: int | None = None,
    ) -> None:
        ctx = ErrorContext(source=source, status_code=status_code)
        super().__init__(f"{source}: {message}", context=ctx, retryable=True)
        self.severity = ErrorSeverity.TRANSIENT


class UpstreamRejectedError(APIError):
    """HTTP 4xx from an upstream, or a request it cannot serve."""

    status = AdapterStatus.UPSTREAM_REJECTED

    def __init__(
        self,
        message: str,
        *,
        source: str = "upstream",
        status_code: int | None = None,
    ) -> None:
        ctx = ErrorContext(source=source, status_code=status_code)
        super().__init__(f"{source}: {message}", context=ctx, retryable=False)


# =============================================================================
# Validation Errors
# =============================================================================

class ValidationError(TokenSearchError):
    """Base class for validation errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )


class InvalidQueryError(ValidationError):
    """Raised when the search query is missing or too short."""

    def __init__(
        self,
        query: str | None,
        reason: str = "Query parameter 'q' is required",
    ) -> None:
        ctx = ErrorContext(
            operation="search",
            input_value=query,
            suggestion="Provide at least 2 characters, e.g. q=usdc",
        )
        super().__init__(reason, context=ctx)


# =============================================================================
# Data Errors
# =============================================================================

class DataError(TokenSearchError):
    """Base class for data-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.DATA,
            retryable=False,
        )


class ParseError(DataError):
    """Raised when an upstream response does not have the expected shape."""

    status = AdapterStatus.PARSE_ERROR

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
    ) -> None:
        full_msg = f"Parse error: {message}"
        if source:
            full_msg = f"Parse error ({source}): {message}"
        super().__init__(full_msg, context=ErrorContext(source=source))


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(TokenSearchError):
    """Raised for configuration-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
        )


# =============================================================================
# Utilities
# =============================================================================

def status_for_error(error: BaseException) -> AdapterStatus:
    """Map an exception raised inside an adapter to its reported status."""
    if isinstance(error, TimeoutError):
        return AdapterStatus.TIMEOUT
    status = getattr(error, "status", None)
    if isinstance(error, TokenSearchError) and isinstance(status, AdapterStatus):
        return status
    return AdapterStatus.UPSTREAM_UNAVAILABLE


def get_retry_delay(error: Exception, attempt: int) -> float:
    """
    Calculate retry delay with exponential backoff.

    Args:
        error: The exception that occurred
        attempt: Current attempt number (0-based)

    Returns:
        Delay in seconds before next retry
    """
    import random

    base_delay = 0.25
    if isinstance(error, TokenSearchError) and error.context.retry_after:
        base_delay = error.context.retry_after

    delay = base_delay * (2 ** attempt)
    jitter = random.uniform(0, 0.1 * delay)

    # Cap at 5 seconds, a search request never waits longer than that
    return min(delay + jitter, 5.0)
