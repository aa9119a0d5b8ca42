"""
Command-Line Interface - Device Event Monitor

Connects to a device server and logs every event it sends until the
connection ends or the user presses Ctrl+C.

Usage:
    python -m deviceclient --host 127.0.0.1 --port 5000 --device-id 3
    python -m deviceclient --config device_client.yaml
    python -m deviceclient --help
"""

import sys
import argparse
import logging
from typing import List, Optional

from deviceclient.core.device_client import DeviceClient
from deviceclient.core.errors import ConfigurationError
from deviceclient.models.connection import ConnectionConfig
from deviceclient.models.device_event import DeviceEvent
from deviceclient.models.listener import DeviceListener
from deviceclient.services.configuration_service import (
    build_connection_config,
    load_connection_config,
)

logger = logging.getLogger(__name__)


class LoggingDeviceListener(DeviceListener):
    """Logs every received event at INFO level."""

    def __init__(self, event_logger: Optional[logging.Logger] = None):
        self.logger = event_logger or logging.getLogger("deviceclient.events")
        self.count = 0

    def _log(self, event: DeviceEvent) -> None:
        self.count += 1
        self.logger.info(str(event))

    def device_pressed(self, event: DeviceEvent) -> None:
        self._log(event)

    def device_released(self, event: DeviceEvent) -> None:
        self._log(event)

    def device_moved(self, event: DeviceEvent) -> None:
        self._log(event)

    def device_swayed(self, event: DeviceEvent) -> None:
        self._log(event)


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: List of arguments to parse. If None, uses sys.argv[1:]

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Device server event monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --host 127.0.0.1 --port 5000 --device-id 3
  %(prog)s --config device_client.yaml --device-id 1
        """
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML file with a 'device_client' section"
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Device server host (overrides config file)"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Device server port (overrides config file)"
    )

    parser.add_argument(
        "--device-id",
        type=int,
        default=None,
        help="Device to observe, 0-255 (overrides config file, default: 0)"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Connect timeout in seconds (overrides config file)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: INFO)"
    )

    return parser.parse_args(args)


def setup_logging(level: str):
    """Configure application logging.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    numeric_level = getattr(logging, level.upper(), None)

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def resolve_config(args: argparse.Namespace) -> ConnectionConfig:
    """Build the connection configuration from the config file and flags.

    Raises:
        ConfigurationError: If the resulting configuration is incomplete or invalid
    """
    overrides = {
        'host': args.host,
        'port': args.port,
        'device_id': args.device_id,
        'timeout': args.timeout,
    }

    if args.config:
        return load_connection_config(args.config, overrides)
    return build_connection_config({}, overrides)


def run_monitor(client: DeviceClient, config: ConnectionConfig,
                poll_interval: float = 0.5) -> int:
    """Connect and block until the connection ends.

    Returns:
        Exit code (0 = connection ended, 1 = could not connect)
    """
    listener = LoggingDeviceListener()
    client.add_listener(listener)

    if not client.connect_config(config):
        print(f"Error: could not connect to {config.host}:{config.port}")
        return 1

    logger.info(f"Monitoring device {config.device_id} on {config.host}:{config.port}")

    try:
        while not client.wait_for_reader(timeout=poll_interval):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        client.disconnect()
        client.remove_listener(listener)

    logger.info(f"Monitor finished after {listener.count} events")
    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the monitor.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:]

    Returns:
        Exit code (0 = success, 1 = error)
    """
    parsed_args = parse_args(args)

    setup_logging(parsed_args.log_level)

    try:
        config = resolve_config(parsed_args)
    except ConfigurationError as e:
        logger.debug(e.format_log_message())
        print(f"Error: {e.message}")
        return 1

    return run_monitor(DeviceClient(), config)


if __name__ == "__main__":
    sys.exit(main())
