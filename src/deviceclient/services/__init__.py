"""
Services for the device client.

This package contains supporting services such as configuration loading.
"""

from .configuration_service import (
    load_connection_config,
    load_config_dict,
    build_connection_config,
)

__all__ = [
    'load_connection_config',
    'load_config_dict',
    'build_connection_config',
]
