"""
Background Socket Reader for the device server stream.

One SocketReader is created per connection. Its thread sends the handshake
byte, then reads frames until the socket fails or is closed, dispatching
each decoded event before reading the next tag.

Architecture:
    SocketReader (background thread)
        └── Sends the device id handshake
        └── Reads tag + fixed payload, decodes with ProtocolDecoder
        └── Hands each DeviceEvent to EventDispatcher (same thread)
"""

import logging
import socket
import threading
from typing import Callable, Dict, Optional

from .device_protocol import ProtocolDecoder, ProtocolEncoder
from .errors import (
    ConnectionClosedError,
    DeviceConnectionError,
    ErrorCodes,
    wrap_external_error,
)
from .event_dispatcher import EventDispatcher

logger = logging.getLogger(__name__)


class SocketReader:
    """
    Background thread that decodes the device server stream.

    Reads block without timeout. The loop ends only when a read or the
    handshake fails, which includes the socket being closed through stop().
    The socket is always closed when the loop ends.
    """

    def __init__(
        self,
        device_socket: socket.socket,
        device_id: int,
        dispatcher: EventDispatcher,
        on_exit: Optional[Callable[["SocketReader"], None]] = None
    ):
        """
        Initialize the socket reader.

        Args:
            device_socket: Connected socket; the reader takes ownership
            device_id: Device id sent as the handshake byte (0-255)
            dispatcher: EventDispatcher receiving decoded events
            on_exit: Called from the reader thread once the loop has ended
        """
        self._socket = device_socket
        self._device_id = device_id
        self._dispatcher = dispatcher
        self._on_exit = on_exit
        self._decoder = ProtocolDecoder()
        self._handshake = ProtocolEncoder().encode_handshake(device_id)

        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._stopping = False
        self._closed = False
        self._lock = threading.Lock()

        # Statistics
        self._stats = {
            'frames_read': 0,
            'unknown_tags': 0,
            'bytes_read': 0,
            'socket_errors': 0,
        }

    def start(self):
        """Start the background reader thread."""
        with self._lock:
            if self._running or self._thread is not None:
                logger.warning("SocketReader already started")
                return

            thread = threading.Thread(
                target=self._read_loop,
                name=f"SocketReader-{self._device_id}",
                daemon=True
            )
            self._running = True
            try:
                thread.start()
            except RuntimeError:
                self._running = False
                raise
            self._thread = thread
            logger.info("SocketReader background thread started")

    def stop(self):
        """
        Ask the reader to stop by closing its socket.

        A blocked read wakes up with an error and the loop ends. An event
        that is already being dispatched finishes first. Does not wait for
        the thread; use join() for that.
        """
        self._stopping = True
        self._close_socket()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the reader thread to end.

        Args:
            timeout: Seconds to wait, None to wait indefinitely

        Returns:
            True if the thread has ended (or was never started)
        """
        thread = self._thread
        if thread is None:
            return True
        if thread is not threading.current_thread():
            thread.join(timeout=timeout)
        return not thread.is_alive()

    def is_running(self) -> bool:
        """Check if the read loop is active."""
        return self._running

    def _read_loop(self):
        """Main read loop - runs in background thread."""
        logger.info(f"SocketReader read loop starting (device {self._device_id})")

        try:
            self._send_handshake()

            while True:
                tag, event = self._decoder.decode_frame(self._receive_exact)

                if event is None:
                    self._stats['unknown_tags'] += 1
                    logger.debug(f"Skipping unrecognized tag {tag}")
                    continue

                self._stats['frames_read'] += 1
                self._dispatcher.dispatch(event)

        except ConnectionClosedError as e:
            if self._stopping:
                logger.debug(f"Reader woke on local close: {e.message}")
            else:
                logger.warning(f"Device server closed the connection: {e.message}")

        except DeviceConnectionError as e:
            if self._stopping:
                logger.debug(f"Handshake interrupted by local close: {e.message}")
            else:
                self._stats['socket_errors'] += 1
                logger.error(e.format_log_message())

        except OSError as e:
            if self._stopping:
                logger.debug(f"Reader socket closed locally: {e}")
            else:
                self._stats['socket_errors'] += 1
                error = wrap_external_error(
                    e, "Socket error in reader", DeviceConnectionError,
                    error_code=ErrorCodes.SOCKET_ERROR, device_id=self._device_id
                )
                logger.error(error.format_log_message())

        except Exception as e:
            logger.error(f"Unexpected error in reader: {e}", exc_info=True)

        finally:
            self._close_socket()
            self._running = False
            logger.info(f"SocketReader read loop exiting. Stats: {self._stats}")
            if self._on_exit is not None:
                self._on_exit(self)

    def _send_handshake(self):
        """
        Send the device id byte.

        Raises:
            DeviceConnectionError: With HANDSHAKE_FAILED if the write fails
        """
        try:
            self._socket.sendall(self._handshake)
        except OSError as e:
            raise wrap_external_error(
                e, f"Handshake failed for device {self._device_id}",
                DeviceConnectionError, error_code=ErrorCodes.HANDSHAKE_FAILED,
                device_id=self._device_id
            ) from e
        logger.debug(f"Sent handshake for device {self._device_id}")

    def _receive_exact(self, size: int) -> bytes:
        """
        Receive exactly size bytes from the socket.

        Raises:
            ConnectionClosedError: If the stream ends before size bytes arrive
            OSError: If the receive fails
        """
        data = bytearray()
        while len(data) < size:
            chunk = self._socket.recv(size - len(data))

            if not chunk:
                raise ConnectionClosedError(
                    f"Connection closed after receiving {len(data)}/{size} bytes",
                    received=len(data),
                    expected=size
                )

            data += chunk
            self._stats['bytes_read'] += len(chunk)

        return bytes(data)

    def _close_socket(self):
        """Shut down and close the socket once, from any thread."""
        with self._lock:
            if self._closed:
                return
            self._closed = True

        # shutdown() wakes a recv() blocked in another thread; close() alone does not
        try:
            self._socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass

        try:
            self._socket.close()
            logger.debug("Closed device socket")
        except OSError as e:
            logger.error(f"Error closing device socket: {e}")

    def get_stats(self) -> Dict[str, int]:
        """Get reader statistics."""
        return self._stats.copy()
