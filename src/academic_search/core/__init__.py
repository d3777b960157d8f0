"""
Core module for Academic Search.

Provides:
- Unified exception hierarchy
- Sliding-window rate limiting
- Async helpers for time-bounded provider calls
"""

from .exceptions import (
    # Base
    AcademicSearchError,
    ErrorContext,
    ErrorSeverity,
    ErrorCategory,
    # Provider errors
    ProviderError,
    ProviderErrorKind,
    # Validation errors
    ValidationError,
    InvalidQueryError,
    InvalidParameterError,
    # Cache / configuration errors
    CacheError,
    ConfigurationError,
)

from .async_utils import (
    RateLimit,
    RateLimiter,
    ProviderRateLimiter,
    timeout_with_fallback,
)

__all__ = [
    # Exceptions
    "AcademicSearchError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "ProviderError",
    "ProviderErrorKind",
    "ValidationError",
    "InvalidQueryError",
    "InvalidParameterError",
    "CacheError",
    "ConfigurationError",
    # Async utilities
    "RateLimit",
    "RateLimiter",
    "ProviderRateLimiter",
    "timeout_with_fallback",
]
