"""
Error hierarchy for the device client.

Error Code Ranges:
- 1000-1999: Connection errors
- 2000-2999: Protocol errors
- 6000-6999: Configuration errors
- 9000-9999: Unknown/System errors

Socket failures never escape DeviceClient.connect() or the background
reader; these types describe them in logs and carry them inside the
library. ConfigurationError is raised to callers that load or pass an
invalid configuration.
"""

from typing import Optional, Dict, Any
from datetime import datetime


class DeviceClientError(Exception):
    """
    Base exception for all device client errors.

    Provides structured error information with context tracking.
    """

    DEFAULT_CODE = 9000

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize a device client error.

        Args:
            message: Human-readable error description
            error_code: Numeric error code for categorization
            context: Additional context information
            cause: Original exception if this wraps another error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.DEFAULT_CODE
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now()

        if cause:
            self.context['original_error'] = str(cause)
            self.context['original_type'] = type(cause).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'code': self.error_code,
            'context': self.context,
            'timestamp': self.timestamp.isoformat(),
            'cause': str(self.cause) if self.cause else None,
        }

    def format_log_message(self) -> str:
        """Format error for logging (with all details)."""
        parts = [
            f"[{self.error_code}] {self.__class__.__name__}: {self.message}"
        ]

        if self.context:
            parts.append(f"Context: {self.context}")

        if self.cause:
            parts.append(f"Caused by: {self.cause}")

        return " | ".join(parts)


class DeviceConnectionError(DeviceClientError):
    """Errors related to opening or using the server socket."""
    DEFAULT_CODE = 1001

    def __init__(self, message: str, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'CONNECTION'
        super().__init__(message, **kwargs)


class ConnectionClosedError(DeviceConnectionError):
    """The server closed the stream, possibly in the middle of a frame."""
    DEFAULT_CODE = 1003

    def __init__(self, message: str, received: int = 0, expected: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.received = received
        self.expected = expected
        self.context['received'] = received
        self.context['expected'] = expected


class ProtocolError(DeviceClientError):
    """Frame data that cannot be decoded."""
    DEFAULT_CODE = 2003

    def __init__(self, message: str, tag: Optional[int] = None, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'PROTOCOL'
        if tag is not None:
            kwargs['context']['tag'] = tag
        super().__init__(message, **kwargs)


class ConfigurationError(DeviceClientError):
    """Errors related to connection configuration."""
    DEFAULT_CODE = 6001

    def __init__(self, message: str, setting_name: Optional[str] = None, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'CONFIGURATION'
        if setting_name:
            kwargs['context']['setting'] = setting_name
        super().__init__(message, **kwargs)


class ErrorCodes:
    """Standard error codes for common error scenarios."""

    # Connection errors (1000-1999)
    CONNECTION_REFUSED = 1001
    CONNECTION_TIMEOUT = 1002
    CONNECTION_LOST = 1003
    SOCKET_ERROR = 1004
    HOST_NOT_FOUND = 1005
    HANDSHAKE_FAILED = 1006

    # Protocol errors (2000-2999)
    TRUNCATED_FRAME = 2001
    UNKNOWN_TAG = 2002
    PROTOCOL_ERROR = 2003

    # Configuration errors (6000-6999)
    CONFIG_NOT_FOUND = 6001
    CONFIG_INVALID = 6002
    MISSING_SETTING = 6004

    # System errors (9000-9999)
    UNKNOWN_ERROR = 9000


def wrap_external_error(e: Exception, message: str,
                        error_class=DeviceClientError,
                        error_code: Optional[int] = None, **context) -> DeviceClientError:
    """
    Wrap an external exception in a DeviceClientError.

    Args:
        e: The original exception
        message: Context-specific error message
        error_class: The DeviceClientError subclass to use
        error_code: Code from ErrorCodes, defaults to the class code
        **context: Additional context information

    Returns:
        A DeviceClientError instance wrapping the original exception
    """
    return error_class(
        message=message,
        error_code=error_code,
        cause=e,
        context=context
    )
