"""
Listener interfaces for receiving device events.

Listeners are invoked on the background reader thread, one method per
event kind. A slow listener delays decoding of the following frames.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from .device_event import DeviceEvent


EventCallback = Callable[[DeviceEvent], None]


class DeviceListener(ABC):
    """Receives decoded device events."""

    @abstractmethod
    def device_pressed(self, event: DeviceEvent) -> None:
        """Called when a device button is pressed."""

    @abstractmethod
    def device_released(self, event: DeviceEvent) -> None:
        """Called when a device button is released."""

    @abstractmethod
    def device_moved(self, event: DeviceEvent) -> None:
        """Called when the sensor position changes."""

    @abstractmethod
    def device_swayed(self, event: DeviceEvent) -> None:
        """Called when the sensor posture changes."""


class DeviceAdapter(DeviceListener):
    """
    DeviceListener with empty handlers.

    Subclass and override only the handlers you need.
    """

    def device_pressed(self, event: DeviceEvent) -> None:
        pass

    def device_released(self, event: DeviceEvent) -> None:
        pass

    def device_moved(self, event: DeviceEvent) -> None:
        pass

    def device_swayed(self, event: DeviceEvent) -> None:
        pass


class CallbackDeviceListener(DeviceListener):
    """
    DeviceListener that forwards events to plain callables.

    Example:
        >>> listener = CallbackDeviceListener(on_pressed=lambda e: print(e.button_id))
        >>> client.add_listener(listener)
    """

    def __init__(
        self,
        on_pressed: Optional[EventCallback] = None,
        on_released: Optional[EventCallback] = None,
        on_moved: Optional[EventCallback] = None,
        on_swayed: Optional[EventCallback] = None
    ):
        self.on_pressed = on_pressed
        self.on_released = on_released
        self.on_moved = on_moved
        self.on_swayed = on_swayed

    def device_pressed(self, event: DeviceEvent) -> None:
        if self.on_pressed:
            self.on_pressed(event)

    def device_released(self, event: DeviceEvent) -> None:
        if self.on_released:
            self.on_released(event)

    def device_moved(self, event: DeviceEvent) -> None:
        if self.on_moved:
            self.on_moved(event)

    def device_swayed(self, event: DeviceEvent) -> None:
        if self.on_swayed:
            self.on_swayed(event)
