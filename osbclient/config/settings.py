"""
Configuration management for osbclient.

Loads YAML configuration from file with sensible defaults and validation.
Supports environment variable substitution using ${ENV_VAR} syntax.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from osbclient.core.version import APIVersion, latest, parse
from osbclient.exceptions import ConfigurationError, InvalidConfigurationError
from osbclient.logging_config import get_logger

logger = get_logger(__name__)


def _expand_env_vars(value: Any) -> Any:
    """
    Recursively expand environment variables in configuration values.

    Supports ${ENV_VAR} syntax with optional default values: ${ENV_VAR:default}

    Args:
        value: Configuration value (string, dict, list, or other)

    Returns:
        Value with environment variables expanded

    Examples:
        "${BROKER_URL}" -> value of BROKER_URL env var
        "${BROKER_URL:http://localhost:8080}" -> value of BROKER_URL or the default
    """
    if isinstance(value, str):
        # Pattern matches ${VAR} or ${VAR:default}
        pattern = r'\$\{([^}:]+)(?::([^}]*))?\}'

        def replace_env_var(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replace_env_var, value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    else:
        return value


@dataclass
class BasicAuthConfig:
    """HTTP basic auth credentials."""

    username: str
    password: str


@dataclass
class BearerConfig:
    """Bearer token credentials."""

    token: str


@dataclass
class AuthConfig:
    """Broker credentials. Exactly one of basic or bearer must be set."""

    basic: Optional[BasicAuthConfig] = None
    bearer: Optional[BearerConfig] = None


@dataclass
class TLSConfig:
    """TLS trust configuration for the HTTP adapter."""

    insecure: bool = False  # Skip certificate verification
    ca_file: str = ""  # Path to a PEM CA bundle
    client_cert_file: str = ""
    client_key_file: str = ""


@dataclass
class PollingConfig:
    """Defaults for LastOperationPoller."""

    default_delay_seconds: float = 5.0
    max_delay_seconds: Optional[float] = None  # Ceiling on broker Retry-After hints
    max_retries: int = 3
    deadline_seconds: Optional[float] = None


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""
    format: str = "console"  # "console" or "json"


@dataclass
class ClientConfiguration:
    """Main osbclient configuration."""

    url: str
    name: str = "broker"
    api_version: APIVersion = field(default_factory=latest)
    enable_alpha_features: bool = False
    verbose: bool = False
    timeout_seconds: int = 60
    connect_retries: int = 2
    auth: Optional[AuthConfig] = None
    tls: TLSConfig = field(default_factory=TLSConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_default_config_path() -> str:
    """Get the default configuration file path."""
    return os.path.expanduser("~/.osbclient/config.yaml")


def get_default_config() -> ClientConfiguration:
    """
    Get default configuration with sensible defaults.

    Returns:
        ClientConfiguration: Default configuration object
    """
    return ClientConfiguration(url="http://localhost:8080")


def load_config(config_path: Optional[str] = None) -> ClientConfiguration:
    """
    Load configuration from YAML file with validation.

    If config file is not found, returns default configuration.
    If config file is malformed or invalid, raises InvalidConfigurationError.

    Args:
        config_path: Path to configuration file. If None, uses default path.

    Returns:
        ClientConfiguration: Loaded and validated configuration

    Raises:
        InvalidConfigurationError: If configuration is invalid or malformed
    """
    if config_path is None:
        config_path = get_default_config_path()

    config_path = os.path.expanduser(config_path)

    if not os.path.exists(config_path):
        logger.info(f"Configuration file not found at {config_path}, using defaults")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f)
        logger.debug(f"Loaded configuration from {config_path}")
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration file '{config_path}': {e}", exc_info=True)
        raise InvalidConfigurationError(
            f"Failed to parse YAML configuration file '{config_path}': {e}"
        ) from e
    except OSError as e:
        logger.error(f"Failed to read configuration file '{config_path}': {e}", exc_info=True)
        raise InvalidConfigurationError(
            f"Failed to read configuration file '{config_path}': {e}"
        ) from e

    if config_data is None:
        logger.info(f"Configuration file {config_path} is empty, using defaults")
        return get_default_config()

    config_data = _expand_env_vars(config_data)
    logger.debug("Expanded environment variables in configuration")

    try:
        config = _build_config_from_dict(config_data)
        validate_config(config)
        logger.info(f"Successfully loaded and validated configuration from {config_path}")
        return config
    except ConfigurationError as e:
        logger.error(f"Invalid configuration in '{config_path}': {e}")
        raise InvalidConfigurationError(
            f"Invalid configuration in '{config_path}': {e}"
        ) from e
    except (TypeError, ValueError, AttributeError) as e:
        logger.error(f"Invalid configuration in '{config_path}': {e}", exc_info=True)
        raise InvalidConfigurationError(
            f"Invalid configuration in '{config_path}': {e}"
        ) from e


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _as_bool(value: Any) -> bool:
    # Values substituted from the environment arrive as strings
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _build_auth(auth_data: Optional[Dict[str, Any]]) -> Optional[AuthConfig]:
    if auth_data is None:
        return None
    if not isinstance(auth_data, dict):
        raise InvalidConfigurationError("'auth' section must be a mapping")

    basic = None
    bearer = None
    if auth_data.get('basic') is not None:
        basic_data = auth_data['basic']
        basic = BasicAuthConfig(
            username=str(basic_data.get('username', '')),
            password=str(basic_data.get('password', '')),
        )
    if auth_data.get('bearer') is not None:
        bearer = BearerConfig(token=str(auth_data['bearer'].get('token', '')))
    return AuthConfig(basic=basic, bearer=bearer)


def _build_config_from_dict(config_data: Dict[str, Any]) -> ClientConfiguration:
    """
    Build ClientConfiguration from dictionary loaded from YAML.

    Merges user configuration with defaults.

    Args:
        config_data: Dictionary loaded from YAML file

    Returns:
        ClientConfiguration: Configuration object

    Raises:
        InvalidConfigurationError: If required fields are missing
    """
    default_config = get_default_config()

    if 'broker' not in config_data:
        logger.error("Missing required 'broker' section in configuration")
        raise InvalidConfigurationError("Missing required 'broker' section in configuration")

    broker_data = config_data['broker'] or {}

    api_version = default_config.api_version
    if broker_data.get('api_version') is not None:
        api_version = parse(str(broker_data['api_version']))

    tls_data = config_data.get('tls') or {}
    tls = TLSConfig(
        insecure=_as_bool(tls_data.get('insecure', default_config.tls.insecure)),
        ca_file=os.path.expanduser(tls_data.get('ca_file', default_config.tls.ca_file)),
        client_cert_file=os.path.expanduser(
            tls_data.get('client_cert_file', default_config.tls.client_cert_file)
        ),
        client_key_file=os.path.expanduser(
            tls_data.get('client_key_file', default_config.tls.client_key_file)
        ),
    )

    polling_data = config_data.get('polling') or {}
    polling = PollingConfig(
        default_delay_seconds=float(
            polling_data.get('default_delay_seconds', default_config.polling.default_delay_seconds)
        ),
        max_delay_seconds=_optional_float(polling_data.get('max_delay_seconds')),
        max_retries=int(polling_data.get('max_retries', default_config.polling.max_retries)),
        deadline_seconds=_optional_float(polling_data.get('deadline_seconds')),
    )

    logging_data = config_data.get('logging') or {}
    logging_config = LoggingConfig(
        level=logging_data.get('level', default_config.logging.level),
        file=logging_data.get('file', default_config.logging.file),
        format=logging_data.get('format', default_config.logging.format),
    )

    return ClientConfiguration(
        url=broker_data.get('url', default_config.url),
        name=broker_data.get('name', default_config.name),
        api_version=api_version,
        enable_alpha_features=_as_bool(
            broker_data.get('enable_alpha_features', default_config.enable_alpha_features)
        ),
        verbose=_as_bool(broker_data.get('verbose', default_config.verbose)),
        timeout_seconds=int(broker_data.get('timeout_seconds', default_config.timeout_seconds)),
        connect_retries=int(broker_data.get('connect_retries', default_config.connect_retries)),
        auth=_build_auth(config_data.get('auth')),
        tls=tls,
        polling=polling,
        logging=logging_config,
    )


def validate_config(config: ClientConfiguration) -> None:
    """
    Validate configuration values.

    Called when loading configuration and again when a client is constructed.

    Args:
        config: Configuration to validate

    Raises:
        InvalidConfigurationError: If configuration is invalid
    """
    if not config.url:
        logger.error("Configuration validation failed: broker url cannot be empty")
        raise InvalidConfigurationError("broker url cannot be empty")

    if not isinstance(config.api_version, APIVersion):
        raise InvalidConfigurationError(
            f"api_version must be an APIVersion, got {config.api_version!r}"
        )

    if config.timeout_seconds <= 0:
        raise InvalidConfigurationError(
            f"timeout_seconds must be positive, got {config.timeout_seconds}"
        )

    if config.connect_retries < 0:
        raise InvalidConfigurationError(
            f"connect_retries cannot be negative, got {config.connect_retries}"
        )

    if config.auth is not None:
        if config.auth.basic is None and config.auth.bearer is None:
            raise InvalidConfigurationError("Non-nil auth config cannot be empty")
        if config.auth.basic is not None and config.auth.bearer is not None:
            raise InvalidConfigurationError(
                "Only one auth config implementation must be set at a time"
            )

    if config.tls.insecure and config.tls.ca_file:
        raise InvalidConfigurationError(
            "Cannot specify root CAs and to skip TLS verification"
        )

    if config.polling.default_delay_seconds <= 0:
        raise InvalidConfigurationError(
            f"default_delay_seconds must be positive, got {config.polling.default_delay_seconds}"
        )
    if config.polling.max_delay_seconds is not None and config.polling.max_delay_seconds <= 0:
        raise InvalidConfigurationError(
            f"max_delay_seconds must be positive, got {config.polling.max_delay_seconds}"
        )
    if config.polling.max_retries < 0:
        raise InvalidConfigurationError(
            f"max_retries cannot be negative, got {config.polling.max_retries}"
        )

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.logging.level.upper() not in valid_log_levels:
        raise InvalidConfigurationError(
            f"logging level must be one of {valid_log_levels}, "
            f"got '{config.logging.level}'"
        )
    valid_formats = ["console", "json"]
    if config.logging.format not in valid_formats:
        raise InvalidConfigurationError(
            f"logging format must be one of {valid_formats}, got '{config.logging.format}'"
        )
