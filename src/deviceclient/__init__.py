"""
deviceclient - client for remote device servers.

Connects to a device server over TCP, sends a one-byte handshake naming
the device to observe, and delivers decoded button and sensor events to
registered listeners.

Example usage:
    from deviceclient import DeviceClient, DeviceAdapter

    class PrintPresses(DeviceAdapter):
        def device_pressed(self, event):
            print(f"button {event.button_id} at {event.time}")

    client = DeviceClient()
    client.add_listener(PrintPresses())
    client.connect("127.0.0.1", 5000, device_id=3)
"""

from .core import (
    DeviceClient,
    EventDispatcher,
    SocketReader,
    ProtocolEncoder,
    ProtocolDecoder,
    EventTag,
    DeviceClientError,
    DeviceConnectionError,
    ConnectionClosedError,
    ProtocolError,
    ConfigurationError,
)
from .models import (
    DeviceEvent,
    DeviceEventType,
    DeviceListener,
    DeviceAdapter,
    CallbackDeviceListener,
    ConnectionConfig,
    create_pressed_event,
    create_released_event,
    create_moved_event,
    create_swayed_event,
)
from .services import load_connection_config

__version__ = "0.1.0"

__all__ = [
    'DeviceClient',
    'EventDispatcher',
    'SocketReader',
    'ProtocolEncoder',
    'ProtocolDecoder',
    'EventTag',
    'DeviceClientError',
    'DeviceConnectionError',
    'ConnectionClosedError',
    'ProtocolError',
    'ConfigurationError',
    'DeviceEvent',
    'DeviceEventType',
    'DeviceListener',
    'DeviceAdapter',
    'CallbackDeviceListener',
    'ConnectionConfig',
    'create_pressed_event',
    'create_released_event',
    'create_moved_event',
    'create_swayed_event',
    'load_connection_config',
]
