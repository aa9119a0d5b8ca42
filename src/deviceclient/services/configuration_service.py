"""
Configuration service for loading device server connection settings.

Settings live in a YAML file under the top-level key ``device_client``:

    device_client:
      host: 127.0.0.1
      port: 5000
      device_id: 3
      timeout: 2.0
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from deviceclient.core.errors import ConfigurationError, ErrorCodes
from deviceclient.models.connection import ConnectionConfig

logger = logging.getLogger(__name__)

CONFIG_SECTION = 'device_client'
REQUIRED_KEYS = ('host', 'port')


def load_config_dict(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read the ``device_client`` section of a YAML configuration file.

    Args:
        config_path: Path to the YAML file

    Returns:
        The settings dictionary

    Raises:
        ConfigurationError: If the file is missing, unreadable, not valid
            YAML or has no ``device_client`` mapping
    """
    config_path = Path(config_path)

    if not config_path.is_file():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}",
            error_code=ErrorCodes.CONFIG_NOT_FOUND
        )

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            document = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Failed to read configuration file {config_path}: {e}",
            error_code=ErrorCodes.CONFIG_INVALID,
            cause=e
        )

    section = document.get(CONFIG_SECTION) if isinstance(document, dict) else None
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"Configuration file {config_path} has no '{CONFIG_SECTION}' section",
            setting_name=CONFIG_SECTION,
            error_code=ErrorCodes.MISSING_SETTING
        )

    logger.info(f"Loaded device client configuration from {config_path}")
    return section


def build_connection_config(
    settings: Dict[str, Any],
    overrides: Optional[Dict[str, Any]] = None
) -> ConnectionConfig:
    """
    Build a validated ConnectionConfig from a settings dictionary.

    Args:
        settings: Values for host, port, device_id and timeout
        overrides: Values that replace settings; None entries are ignored

    Raises:
        ConfigurationError: If a required setting is missing or a value is invalid
    """
    merged = dict(settings)
    if overrides:
        merged.update({key: value for key, value in overrides.items() if value is not None})

    for key in REQUIRED_KEYS:
        if merged.get(key) is None:
            raise ConfigurationError(
                f"Missing required setting: {key}",
                setting_name=key,
                error_code=ErrorCodes.MISSING_SETTING
            )

    timeout = merged.get('timeout')
    try:
        config = ConnectionConfig(
            host=str(merged['host']),
            port=int(merged['port']),
            device_id=int(merged.get('device_id', 0)),
            timeout=float(timeout) if timeout is not None else None
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid configuration value: {e}",
            error_code=ErrorCodes.CONFIG_INVALID,
            cause=e
        )

    valid, errors = config.validate()
    if not valid:
        raise ConfigurationError(
            f"Invalid connection configuration: {'; '.join(errors)}",
            error_code=ErrorCodes.CONFIG_INVALID,
            context={'errors': errors}
        )

    return config


def load_connection_config(
    config_path: Union[str, Path],
    overrides: Optional[Dict[str, Any]] = None
) -> ConnectionConfig:
    """
    Load and validate a ConnectionConfig from a YAML file.

    Example:
        >>> config = load_connection_config("device_client.yaml", {"port": 5001})
        >>> client.connect_config(config)
    """
    return build_connection_config(load_config_dict(config_path), overrides)
