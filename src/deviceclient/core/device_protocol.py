"""
Binary protocol encoding and decoding for the device server stream.

After the client sends its one-byte handshake (the device id), the server
sends a sequence of frames with no length prefix and no delimiters. Each
frame is a one-byte tag followed by a fixed payload determined by the tag.
All multi-byte fields are big-endian.

Frame Structure:
    - Tag: (1 byte, uint8)
    - Tag 0 BUTTON_PRESSED / 1 BUTTON_RELEASED (9 bytes):
        - Button id: (1 byte, uint8)
        - Time: (8 bytes, int64)
    - Tag 2 SENSOR_MOVED / 3 SENSOR_SWAYED (32 bytes):
        - X, Y, Z or rotation about X, Y, Z: (3 x 8 bytes, double)
        - Time: (8 bytes, int64)
    - Any other tag: no payload. The tag is skipped and the next byte is
      read as a new tag.
"""

import struct
from enum import IntEnum
from typing import Callable, Dict, List, Optional, Tuple

from deviceclient.models.device_event import (
    DeviceEvent,
    DeviceEventType,
    create_pressed_event,
    create_released_event,
    create_moved_event,
    create_swayed_event,
)
from .errors import ConnectionClosedError, ErrorCodes, ProtocolError


class EventTag(IntEnum):
    """Tag byte values that start each frame."""
    BUTTON_PRESSED = 0
    BUTTON_RELEASED = 1
    SENSOR_MOVED = 2
    SENSOR_SWAYED = 3


TAG_STRUCT = struct.Struct(">B")
HANDSHAKE_STRUCT = struct.Struct(">B")
BUTTON_STRUCT = struct.Struct(">Bq")
VECTOR_STRUCT = struct.Struct(">dddq")

_PAYLOAD_STRUCTS: Dict[int, struct.Struct] = {
    EventTag.BUTTON_PRESSED: BUTTON_STRUCT,
    EventTag.BUTTON_RELEASED: BUTTON_STRUCT,
    EventTag.SENSOR_MOVED: VECTOR_STRUCT,
    EventTag.SENSOR_SWAYED: VECTOR_STRUCT,
}

_TAG_FOR_TYPE: Dict[DeviceEventType, EventTag] = {
    DeviceEventType.BUTTON_PRESSED: EventTag.BUTTON_PRESSED,
    DeviceEventType.BUTTON_RELEASED: EventTag.BUTTON_RELEASED,
    DeviceEventType.SENSOR_MOVED: EventTag.SENSOR_MOVED,
    DeviceEventType.SENSOR_SWAYED: EventTag.SENSOR_SWAYED,
}


def payload_size(tag: int) -> Optional[int]:
    """
    Get the payload size that follows a tag.

    Returns:
        Number of payload bytes, or None for an unrecognized tag
    """
    payload_struct = _PAYLOAD_STRUCTS.get(tag)
    return payload_struct.size if payload_struct else None


class ProtocolDecoder:
    """
    Decodes frames from the device server stream into DeviceEvents.

    Example:
        >>> decoder = ProtocolDecoder()
        >>> decoder.decode_payload(0, bytes([7]) + (1000).to_bytes(8, 'big')).button_id
        7
    """

    def decode_payload(self, tag: int, payload: bytes) -> DeviceEvent:
        """
        Decode the payload of a recognized tag.

        Args:
            tag: Frame tag (0-3)
            payload: Exactly payload_size(tag) bytes

        Returns:
            The decoded DeviceEvent

        Raises:
            ProtocolError: If the tag is unrecognized or payload has the wrong size
        """
        payload_struct = _PAYLOAD_STRUCTS.get(tag)
        if payload_struct is None:
            raise ProtocolError(f"Unrecognized tag: {tag}", tag=tag,
                                error_code=ErrorCodes.UNKNOWN_TAG)

        if len(payload) != payload_struct.size:
            raise ProtocolError(
                f"Invalid payload size for tag {tag}: "
                f"expected {payload_struct.size}, got {len(payload)}",
                tag=tag
            )

        if tag == EventTag.BUTTON_PRESSED:
            button_id, time = payload_struct.unpack(payload)
            return create_pressed_event(button_id, time)
        if tag == EventTag.BUTTON_RELEASED:
            button_id, time = payload_struct.unpack(payload)
            return create_released_event(button_id, time)

        x, y, z, time = payload_struct.unpack(payload)
        if tag == EventTag.SENSOR_MOVED:
            return create_moved_event((x, y, z), time)
        return create_swayed_event((x, y, z), time)

    def decode_frame(self, read_exact: Callable[[int], bytes]) -> Tuple[int, Optional[DeviceEvent]]:
        """
        Read and decode one frame.

        Args:
            read_exact: Callable returning exactly n bytes, raising
                ConnectionClosedError (or OSError) if the stream ends first

        Returns:
            Tuple of (tag, event). event is None for an unrecognized tag,
            in which case only the tag byte was consumed.
        """
        (tag,) = TAG_STRUCT.unpack(read_exact(TAG_STRUCT.size))

        size = payload_size(tag)
        if size is None:
            return tag, None

        return tag, self.decode_payload(tag, read_exact(size))

    def decode_bytes(self, data: bytes) -> List[DeviceEvent]:
        """
        Decode a complete buffer of frames.

        Args:
            data: Concatenated frames

        Returns:
            Decoded events in stream order (unrecognized tags are skipped)

        Raises:
            ProtocolError: If the buffer ends inside a frame
        """
        view = memoryview(data)
        offset = 0

        def read_exact(n: int) -> bytes:
            nonlocal offset
            if offset + n > len(view):
                raise ConnectionClosedError(
                    f"Buffer ended after {len(view) - offset}/{n} bytes",
                    received=len(view) - offset,
                    expected=n
                )
            chunk = bytes(view[offset:offset + n])
            offset += n
            return chunk

        events = []
        while offset < len(view):
            try:
                _, event = self.decode_frame(read_exact)
            except ConnectionClosedError as e:
                raise ProtocolError(f"Truncated frame at end of buffer: {e.message}",
                                    error_code=ErrorCodes.TRUNCATED_FRAME, cause=e)
            if event is not None:
                events.append(event)
        return events


class ProtocolEncoder:
    """
    Encodes the handshake and event frames.

    The client only ever sends the handshake; frame encoding serves device
    server simulators and tests.

    Example:
        >>> encoder = ProtocolEncoder()
        >>> encoder.encode_handshake(3)
        b'\\x03'
    """

    def encode_handshake(self, device_id: int) -> bytes:
        """
        Encode the handshake byte.

        Raises:
            ValueError: If device_id is not in 0-255
        """
        if not isinstance(device_id, int) or not (0 <= device_id <= 255):
            raise ValueError(f"Device id must be 0-255, got {device_id}")
        return HANDSHAKE_STRUCT.pack(device_id)

    def encode_frame(self, tag: int, payload: bytes = b'') -> bytes:
        """
        Encode a raw frame.

        Args:
            tag: Tag byte (0-255), recognized or not
            payload: Payload bytes appended as-is

        Raises:
            ValueError: If tag is not in 0-255
        """
        if not isinstance(tag, int) or not (0 <= tag <= 255):
            raise ValueError(f"Tag must be 0-255, got {tag}")
        return TAG_STRUCT.pack(tag) + bytes(payload)

    def encode_event(self, event: DeviceEvent) -> bytes:
        """
        Encode a DeviceEvent as a frame.

        Raises:
            ValueError: If a field does not fit its wire type
        """
        tag = _TAG_FOR_TYPE[event.event_type]
        try:
            if event.is_button_event:
                payload = BUTTON_STRUCT.pack(event.button_id, event.time)
            else:
                values = event.position if event.position is not None else event.posture
                payload = VECTOR_STRUCT.pack(values[0], values[1], values[2], event.time)
        except struct.error as e:
            raise ValueError(f"Failed to pack {event.event_type.name} frame: {e}")

        return self.encode_frame(tag, payload)
