"""
Connection models for the device client.

Classes:
    ConnectionConfig: Immutable configuration for a device server connection
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple


MAX_DEVICE_ID = 255


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Immutable configuration for a device server connection.

    Attributes:
        host: Host name or IP address of the device server
        port: TCP port of the device server (1-65535)
        device_id: Device to observe, sent as the handshake byte (0-255)
        timeout: Connect timeout in seconds, None for a blocking connect

    Example:
        >>> config = ConnectionConfig("127.0.0.1", 5000, device_id=3)
        >>> valid, errors = config.validate()
        >>> if not valid:
        ...     print(f"Validation errors: {errors}")
    """

    host: str
    port: int
    device_id: int = 0
    timeout: Optional[float] = None

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate the connection configuration.

        Returns:
            Tuple of (is_valid, list_of_error_messages)

        Example:
            >>> config = ConnectionConfig("", 99999, 300, -1.0)
            >>> valid, errors = config.validate()
            >>> print(errors)
            ['Host must not be empty',
             'Port out of range (1-65535): 99999',
             'Device id out of range (0-255): 300',
             'Timeout must be positive: -1.0']
        """
        errors = []

        if not isinstance(self.host, str) or not self.host.strip():
            errors.append("Host must not be empty")

        if not isinstance(self.port, int) or not (1 <= self.port <= 65535):
            errors.append(f"Port out of range (1-65535): {self.port}")

        if not isinstance(self.device_id, int) or not (0 <= self.device_id <= MAX_DEVICE_ID):
            errors.append(f"Device id out of range (0-{MAX_DEVICE_ID}): {self.device_id}")

        if self.timeout is not None and self.timeout <= 0:
            errors.append(f"Timeout must be positive: {self.timeout}")

        return (len(errors) == 0, errors)
