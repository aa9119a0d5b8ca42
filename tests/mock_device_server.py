# Mock device server for testing
import queue
import socket
import threading
import time
import logging
from typing import Iterable, Optional

from deviceclient.core.device_protocol import ProtocolEncoder
from deviceclient.models.device_event import DeviceEvent

logger = logging.getLogger(__name__)


class MockClientConnection:
    """Server side of one accepted client connection."""

    def __init__(self, conn: socket.socket, addr):
        self.conn = conn
        self.addr = addr
        self.encoder = ProtocolEncoder()
        self.conn.settimeout(2.0)

    def read_handshake(self) -> Optional[int]:
        """Read the one-byte handshake, None if the client closed first."""
        data = self.conn.recv(1)
        return data[0] if data else None

    def send(self, data: bytes):
        self.conn.sendall(data)

    def send_events(self, events: Iterable[DeviceEvent]):
        self.send(b''.join(self.encoder.encode_event(e) for e in events))

    def wait_for_close(self, timeout: float = 2.0) -> bool:
        """Return True once the client has closed its end."""
        deadline = time.time() + timeout
        while time.time() < deadline:
            try:
                if not self.conn.recv(1024):
                    return True
            except socket.timeout:
                continue
            except OSError:
                return True
        return False

    def close(self):
        try:
            self.conn.close()
        except OSError:
            pass


class MockDeviceServer:
    """Mock device server listening on an ephemeral localhost port."""

    def __init__(self, host='127.0.0.1'):
        self.host = host
        self.port = None
        self.running = False
        self.server = None
        self._connections: "queue.Queue[MockClientConnection]" = queue.Queue()
        self._accepted = []

    def start(self) -> int:
        """Start the mock server and return its port."""
        self.server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.server.bind((self.host, 0))
        self.server.listen(5)
        self.port = self.server.getsockname()[1]
        self.running = True

        self.accept_thread = threading.Thread(target=self._accept_loop)
        self.accept_thread.daemon = True
        self.accept_thread.start()

        logger.info(f"Mock device server started on {self.host}:{self.port}")
        return self.port

    def _accept_loop(self):
        while self.running:
            try:
                conn, addr = self.server.accept()
            except OSError:
                break
            logger.info(f"Device client connection from {addr}")
            connection = MockClientConnection(conn, addr)
            self._accepted.append(connection)
            self._connections.put(connection)

    def wait_for_client(self, timeout: float = 2.0) -> MockClientConnection:
        """Wait for the next accepted connection."""
        return self._connections.get(timeout=timeout)

    def stop(self):
        """Stop the mock server and close all connections."""
        self.running = False
        if self.server:
            self.server.close()
        for connection in self._accepted:
            connection.close()
        logger.info("Mock server stopped")


def unused_port(host='127.0.0.1') -> int:
    """Return a port that nothing is listening on."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind((host, 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    server = MockDeviceServer()
    server.start()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        server.stop()
