"""
Domain models for the device client.

Events decoded from the device server, the listener interface that
receives them, and connection configuration.
"""

from .device_event import (
    DeviceEvent,
    DeviceEventType,
    NO_BUTTON,
    create_pressed_event,
    create_released_event,
    create_moved_event,
    create_swayed_event,
)
from .listener import DeviceListener, DeviceAdapter, CallbackDeviceListener
from .connection import ConnectionConfig, MAX_DEVICE_ID

__all__ = [
    'DeviceEvent',
    'DeviceEventType',
    'NO_BUTTON',
    'create_pressed_event',
    'create_released_event',
    'create_moved_event',
    'create_swayed_event',
    'DeviceListener',
    'DeviceAdapter',
    'CallbackDeviceListener',
    'ConnectionConfig',
    'MAX_DEVICE_ID',
]
