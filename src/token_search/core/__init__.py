"""
Core module for Token Search.

Provides:
- Unified exception hierarchy
- Adapter status taxonomy
- Async utilities (deadlines, circuit breaker)
"""

from .exceptions import (
    # Base
    TokenSearchError,
    ErrorContext,
    ErrorSeverity,
    ErrorCategory,
    AdapterStatus,
    # API errors
    APIError,
    RateLimitError,
    UpstreamUnavailableError,
    UpstreamRejectedError,
    # Validation errors
    ValidationError,
    InvalidQueryError,
    # Data errors
    DataError,
    ParseError,
    # Configuration errors
    ConfigurationError,
    # Utilities
    status_for_error,
    get_retry_delay,
)

from .async_utils import (
    CircuitBreaker,
    deadline_after,
    loop_time,
    time_left,
)

__all__ = [
    # Exceptions
    "TokenSearchError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "AdapterStatus",
    "APIError",
    "RateLimitError",
    "UpstreamUnavailableError",
    "UpstreamRejectedError",
    "ValidationError",
    "InvalidQueryError",
    "DataError",
    "ParseError",
    "ConfigurationError",
    "status_for_error",
    "get_retry_delay",
    # Async utilities
    "CircuitBreaker",
    "deadline_after",
    "loop_time",
    "time_left",
]
