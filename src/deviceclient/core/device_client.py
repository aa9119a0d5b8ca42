"""
Device server client.

DeviceClient owns the socket to the device server, starts a SocketReader
for each connection and keeps the listener registry, which survives across
connections.

Connection state policy: the client drops its socket handle as soon as the
reader ends, whether through disconnect(), a closed stream or an I/O error.
is_connected() therefore reports whether a live reader owns a socket.
"""

import socket
import logging
import threading
from typing import Optional, Tuple, Dict, Any

from deviceclient.models.connection import ConnectionConfig, MAX_DEVICE_ID
from deviceclient.models.listener import DeviceListener
from .errors import ConfigurationError, DeviceConnectionError, ErrorCodes, wrap_external_error
from .event_dispatcher import EventDispatcher
from .socket_reader import SocketReader


class DeviceClient:
    """
    Connects to a device server and delivers its events to listeners.

    Example:
        >>> client = DeviceClient()
        >>> client.add_listener(my_listener)
        >>> if client.connect("127.0.0.1", 5000, device_id=3):
        ...     print("Receiving events")
        >>> client.disconnect()
    """

    def __init__(self):
        """Initialize a disconnected client with no listeners."""
        self._lock = threading.Lock()
        self._socket: Optional[socket.socket] = None
        self._reader: Optional[SocketReader] = None
        self._last_reader: Optional[SocketReader] = None
        self._dispatcher = EventDispatcher()
        self._generation = 0
        self.logger = logging.getLogger(__name__)

        # Connection info
        self._host: Optional[str] = None
        self._port: Optional[int] = None
        self._device_id: Optional[int] = None

    def connect(
        self,
        host: str,
        port: int,
        device_id: int,
        timeout: Optional[float] = None
    ) -> bool:
        """
        Connect to the device server and start receiving events.

        Any existing connection is closed first. The handshake byte is sent
        by the reader thread, so a True result does not mean the handshake
        reached the server.

        Args:
            host: Device server host name or IP address
            port: Device server port
            device_id: Device to observe (0-255)
            timeout: Connect timeout in seconds, None for a blocking connect

        Returns:
            True if the socket was opened and the reader started,
            False if the connection could not be opened

        Raises:
            ValueError: If device_id is not in 0-255
        """
        self._validate_device_id(device_id)

        with self._lock:
            if self._socket is not None:
                self.logger.warning("Already connected. Disconnecting first.")
            self._disconnect_unsafe()
            generation = self._generation

        # Lock released while the socket opens
        try:
            self.logger.info(f"Connecting to {host}:{port} (device {device_id})")
            device_socket = socket.create_connection((host, port), timeout=timeout)
            device_socket.settimeout(None)
        except (OSError, OverflowError) as e:
            error = wrap_external_error(
                e, f"Failed to connect to {host}:{port}",
                DeviceConnectionError, error_code=_connect_error_code(e),
                host=host, port=port
            )
            self.logger.error(error.format_log_message())
            return False

        with self._lock:
            if generation != self._generation:
                self.logger.warning(
                    f"Connection to {host}:{port} superseded by another connect or disconnect"
                )
                self._close_socket(device_socket)
                return False

            reader = SocketReader(
                device_socket, device_id, self._dispatcher,
                on_exit=self._on_reader_exit
            )
            try:
                reader.start()
            except RuntimeError as e:
                self.logger.error(f"Failed to start socket reader: {e}")
                reader.stop()
                return False

            # Reader exit blocks on the lock until this state is installed
            self._socket = device_socket
            self._reader = reader
            self._last_reader = reader
            self._host = host
            self._port = port
            self._device_id = device_id

            self.logger.info(f"Connected to {host}:{port}")
            return True

    def connect_config(self, config: ConnectionConfig) -> bool:
        """
        Connect using a ConnectionConfig.

        Raises:
            ConfigurationError: If the configuration does not validate
        """
        valid, errors = config.validate()
        if not valid:
            raise ConfigurationError(
                f"Invalid connection configuration: {'; '.join(errors)}",
                context={'errors': errors}
            )
        return self.connect(config.host, config.port, config.device_id, config.timeout)

    def disconnect(self) -> None:
        """
        Close the connection.

        Safe to call when not connected, repeatedly, and from any thread,
        including from inside a listener callback.
        """
        with self._lock:
            self._disconnect_unsafe()

    def _disconnect_unsafe(self) -> None:
        """
        Internal disconnect without locking (called when lock is already held).
        """
        # Invalidates any connect() still opening its socket
        self._generation += 1

        if self._reader is not None:
            self._reader.stop()
            self.logger.info("Stopped socket reader")
        elif self._socket is not None:
            self._close_socket(self._socket)

        self._clear_connection_unsafe()

    def _close_socket(self, device_socket: socket.socket) -> None:
        try:
            device_socket.close()
        except OSError as e:
            self.logger.error(f"Error closing socket: {e}")

    def _clear_connection_unsafe(self) -> None:
        self._socket = None
        self._reader = None
        self._host = None
        self._port = None
        self._device_id = None

    def _on_reader_exit(self, reader: SocketReader) -> None:
        """Called on the reader thread when its loop ends."""
        with self._lock:
            # A reader from an earlier connection must not clear a newer one
            if self._reader is not reader:
                return
            self.logger.warning(
                f"Connection to {self._host}:{self._port} lost; client is now disconnected"
            )
            self._clear_connection_unsafe()

    def is_connected(self) -> bool:
        """
        Check whether a connection is held.

        Returns:
            True between a successful connect() and either disconnect()
            or the end of the reader loop
        """
        with self._lock:
            return self._socket is not None

    def get_connection_info(self) -> Tuple[Optional[str], Optional[int], Optional[int]]:
        """
        Get current connection information.

        Returns:
            Tuple of (host, port, device_id) or (None, None, None) if not connected
        """
        with self._lock:
            return self._host, self._port, self._device_id

    def wait_for_reader(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the most recent reader thread to end.

        Args:
            timeout: Seconds to wait, None to wait indefinitely

        Returns:
            True if no reader thread is running afterwards
        """
        with self._lock:
            reader = self._last_reader
        if reader is None:
            return True
        return reader.join(timeout)

    def add_listener(self, listener: DeviceListener) -> None:
        """Register a listener; already registered listeners are ignored."""
        self._dispatcher.add_listener(listener)

    def remove_listener(self, listener: DeviceListener) -> None:
        """Remove a listener if registered."""
        self._dispatcher.remove_listener(listener)

    @property
    def dispatcher(self) -> EventDispatcher:
        """Access the event dispatcher."""
        return self._dispatcher

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics from the current or most recent reader and the dispatcher.
        """
        with self._lock:
            reader = self._last_reader
        return {
            'reader': reader.get_stats() if reader else None,
            'dispatcher': self._dispatcher.get_stats(),
        }

    def __enter__(self) -> "DeviceClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    @staticmethod
    def _validate_device_id(device_id: int) -> None:
        """
        Validate the device id.

        Raises:
            ValueError: If device_id is not an integer in 0-255
        """
        if isinstance(device_id, bool) or not isinstance(device_id, int):
            raise ValueError(f"Device id must be an integer, got {type(device_id)}")

        if device_id < 0 or device_id > MAX_DEVICE_ID:
            raise ValueError(f"Device id must be 0-{MAX_DEVICE_ID}, got {device_id}")


def _connect_error_code(error: BaseException) -> int:
    """Pick the ErrorCodes value for a failed connect."""
    if isinstance(error, socket.gaierror):
        return ErrorCodes.HOST_NOT_FOUND
    if isinstance(error, socket.timeout):
        return ErrorCodes.CONNECTION_TIMEOUT
    if isinstance(error, ConnectionRefusedError):
        return ErrorCodes.CONNECTION_REFUSED
    return ErrorCodes.SOCKET_ERROR
