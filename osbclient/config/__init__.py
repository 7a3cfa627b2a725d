"""
Configuration management for osbclient.

Handles loading and validation of configuration files.
"""

from osbclient.config.settings import (
    AuthConfig,
    BasicAuthConfig,
    BearerConfig,
    ClientConfiguration,
    LoggingConfig,
    PollingConfig,
    TLSConfig,
    get_default_config,
    get_default_config_path,
    load_config,
    validate_config,
)

__all__ = [
    "AuthConfig",
    "BasicAuthConfig",
    "BearerConfig",
    "ClientConfiguration",
    "LoggingConfig",
    "PollingConfig",
    "TLSConfig",
    "get_default_config",
    "get_default_config_path",
    "load_config",
    "validate_config",
]
