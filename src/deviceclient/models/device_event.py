"""
Device event models.

A DeviceEvent describes one change of state reported by the device server:
a button pressed or released, the sensor moved to a new position, or the
sensor swayed to a new posture. Events are immutable and are only ever
built through the four factory functions below.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np


Vector3 = Tuple[float, float, float]


class DeviceEventType(Enum):
    """Kind of a device event."""
    BUTTON_PRESSED = "button_pressed"
    BUTTON_RELEASED = "button_released"
    SENSOR_MOVED = "sensor_moved"
    SENSOR_SWAYED = "sensor_swayed"


# Button id carried by sensor events
NO_BUTTON = -1


@dataclass(frozen=True)
class DeviceEvent:
    """
    Immutable event decoded from the device server stream.

    Exactly one of button_id, position and posture is meaningful, and which
    one is decided by event_type.

    Attributes:
        event_type: Kind of event
        button_id: Button number for BUTTON_* events, NO_BUTTON otherwise
        position: (x, y, z) for SENSOR_MOVED, None otherwise
        posture: Rotation about (x, y, z) for SENSOR_SWAYED, None otherwise
        time: Event time as supplied by the server (opaque)
    """

    event_type: DeviceEventType
    button_id: int
    position: Optional[Vector3]
    posture: Optional[Vector3]
    time: int

    @property
    def is_button_event(self) -> bool:
        return self.event_type in (DeviceEventType.BUTTON_PRESSED,
                                   DeviceEventType.BUTTON_RELEASED)

    @property
    def timestamp(self) -> int:
        """Alias of time."""
        return self.time

    @property
    def x(self) -> float:
        return self.position[0] if self.position is not None else 0.0

    @property
    def y(self) -> float:
        return self.position[1] if self.position is not None else 0.0

    @property
    def z(self) -> float:
        return self.position[2] if self.position is not None else 0.0

    @property
    def px(self) -> float:
        return self.posture[0] if self.posture is not None else 0.0

    @property
    def py(self) -> float:
        return self.posture[1] if self.posture is not None else 0.0

    @property
    def pz(self) -> float:
        return self.posture[2] if self.posture is not None else 0.0

    @property
    def vector(self) -> Optional[np.ndarray]:
        """
        Get the meaningful 3-vector of this event as a numpy array.

        Returns:
            Position for SENSOR_MOVED, posture for SENSOR_SWAYED,
            None for button events. The array is a fresh copy.
        """
        values = self.position if self.position is not None else self.posture
        if values is None:
            return None
        return np.array(values, dtype=np.float64)

    def __str__(self) -> str:
        if self.is_button_event:
            detail = f"button={self.button_id}"
        elif self.event_type == DeviceEventType.SENSOR_MOVED:
            detail = f"x={self.x:.3f}, y={self.y:.3f}, z={self.z:.3f}"
        else:
            detail = f"px={self.px:.3f}, py={self.py:.3f}, pz={self.pz:.3f}"
        return f"{self.event_type.name}({detail}, time={self.time})"


def _as_vector(values: Sequence[float], name: str) -> Vector3:
    """Copy a 3-component sequence into an immutable float tuple."""
    components = tuple(float(v) for v in values)
    if len(components) != 3:
        raise ValueError(f"{name} must have exactly 3 components, got {len(components)}")
    return components


def create_pressed_event(button_id: int, time: int) -> DeviceEvent:
    """Create a BUTTON_PRESSED event."""
    return DeviceEvent(DeviceEventType.BUTTON_PRESSED, int(button_id), None, None, int(time))


def create_released_event(button_id: int, time: int) -> DeviceEvent:
    """Create a BUTTON_RELEASED event."""
    return DeviceEvent(DeviceEventType.BUTTON_RELEASED, int(button_id), None, None, int(time))


def create_moved_event(position: Sequence[float], time: int) -> DeviceEvent:
    """
    Create a SENSOR_MOVED event.

    Args:
        position: (x, y, z) coordinates of the sensor
        time: Server event time

    Raises:
        ValueError: If position does not have 3 components
    """
    return DeviceEvent(DeviceEventType.SENSOR_MOVED, NO_BUTTON,
                       _as_vector(position, "position"), None, int(time))


def create_swayed_event(posture: Sequence[float], time: int) -> DeviceEvent:
    """
    Create a SENSOR_SWAYED event.

    Args:
        posture: Rotation about the x, y and z axes
        time: Server event time

    Raises:
        ValueError: If posture does not have 3 components
    """
    return DeviceEvent(DeviceEventType.SENSOR_SWAYED, NO_BUTTON,
                       None, _as_vector(posture, "posture"), int(time))
