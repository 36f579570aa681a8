"""
Core Exception Hierarchy for tiercache

Provides error classification with error codes and context information so
that cache failures can be reported and debugged consistently across stores
and tiers.
"""

import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Standard error codes for different error categories."""

    # Cacheability errors (1000-1999)
    VALUE_NOT_CACHEABLE = 1001

    # Configuration errors (2000-2999)
    CONFIG_INVALID_FORMAT = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2003
    CONFIG_UNKNOWN_STORE = 2004

    # Store errors (3000-3999)
    STORE_SNAPSHOT_INVALID = 3001
    STORE_FACTORY_FAILED = 3002

    # Generic/unknown errors (9000-9999)
    UNKNOWN_ERROR = 9000


@dataclass
class ErrorContext:
    """Contextual information about an error occurrence."""

    operation: str = ""
    key: Optional[str] = None
    store: Optional[str] = None
    tier: Optional[int] = None
    timestamp: float = field(default_factory=time.time)
    user_context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for serialization."""
        return {
            'operation': self.operation,
            'key': self.key,
            'store': self.store,
            'tier': self.tier,
            'timestamp': self.timestamp,
            'user_context': self.user_context
        }


class CacheError(Exception):
    """
    Base exception for all tiercache errors.

    Carries a standardized error code, context about the failing operation
    and the original exception, if any.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = True
    ):
        """
        Initialize cache error.

        Args:
            message: Human-readable error description
            error_code: Standardized error code
            context: Contextual information about the error
            cause: Original exception that caused this error
            recoverable: Whether retrying the operation could succeed
        """
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self.recoverable = recoverable
        self.stack_trace = traceback.format_exc() if cause else None

    def get_debug_info(self) -> Dict[str, Any]:
        """Get comprehensive debug information."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'error_code': self.error_code.value,
            'recoverable': self.recoverable,
            'context': self.context.to_dict(),
            'cause': {
                'type': type(self.cause).__name__ if self.cause else None,
                'message': str(self.cause) if self.cause else None
            },
            'stack_trace': self.stack_trace
        }


class NotCacheableError(CacheError):
    """Raised by set/mset when a value is rejected by the cacheability predicate."""

    def __init__(self, value: Any, key: Optional[str] = None, **kwargs):
        context = kwargs.get('context') or ErrorContext(operation="set")
        if key is not None:
            context.key = key

        kwargs['context'] = context
        kwargs.setdefault('error_code', ErrorCode.VALUE_NOT_CACHEABLE)
        kwargs.setdefault('recoverable', False)

        super().__init__(f"no cacheable value {value!r}", **kwargs)
        self.value = value


class ConfigurationError(CacheError):
    """Exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIG_INVALID_VALUE,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs
    ):
        context = kwargs.get('context') or ErrorContext(operation="configure")
        if config_key:
            context.user_context['config_key'] = config_key
            context.user_context['config_value'] = config_value

        kwargs['context'] = context
        kwargs['error_code'] = error_code

        super().__init__(message, **kwargs)


class SnapshotError(CacheError):
    """Exception for snapshots that cannot be loaded into a store."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('context', ErrorContext(operation="load"))
        kwargs.setdefault('error_code', ErrorCode.STORE_SNAPSHOT_INVALID)
        super().__init__(message, **kwargs)


def config_error(message: str, key: Optional[str] = None, **kwargs) -> ConfigurationError:
    """Create a configuration error with key context."""
    return ConfigurationError(message, config_key=key, **kwargs)
