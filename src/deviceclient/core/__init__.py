"""
Core layer for device server communication.

This package contains the wire protocol, the background socket reader,
listener dispatch and the DeviceClient that ties them together.
"""

from .device_protocol import ProtocolEncoder, ProtocolDecoder, EventTag, payload_size
from .device_client import DeviceClient
from .event_dispatcher import EventDispatcher
from .socket_reader import SocketReader
from .errors import (
    DeviceClientError,
    DeviceConnectionError,
    ConnectionClosedError,
    ProtocolError,
    ConfigurationError,
    ErrorCodes,
)

__all__ = [
    'ProtocolEncoder',
    'ProtocolDecoder',
    'EventTag',
    'payload_size',
    'DeviceClient',
    'EventDispatcher',
    'SocketReader',
    'DeviceClientError',
    'DeviceConnectionError',
    'ConnectionClosedError',
    'ProtocolError',
    'ConfigurationError',
    'ErrorCodes',
]
