"""Configuration manager for loading and managing configuration.

This module provides the main configuration loading and management functionality,
including support for JSON configuration files, environment variable overrides,
and configuration validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from spnego_soap.config.defaults import DEFAULT_CONFIG, DEFAULT_CONFIG_PATH
from spnego_soap.config.schema import (
    Config,
    LoggingConfig,
    LoginModuleConfig,
    SoapConfig,
    TransportConfig,
)
from spnego_soap.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable prefix for all configuration overrides
ENV_PREFIX = "SPNEGO_SOAP_"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file and environment variables.

    Configuration is loaded with the following precedence (highest to lowest):
    1. Environment variables (SPNEGO_SOAP_* prefix)
    2. Configuration file (JSON)
    3. Default values

    Args:
        config_path: Path to configuration file. If None, uses ./config/config.json

    Returns:
        Validated Config instance

    Raises:
        ConfigurationError: If configuration is invalid or malformed

    Example:
        >>> config = load_config(Path("custom/config.json"))
        >>> config.transport.timeout_read
        30
    """
    # Load .env file if present in project root
    load_dotenv()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)

    config_dict = _load_config_file(config_path)
    config_dict = _apply_env_overrides(config_dict)
    _check_sensitive_values(config_dict)

    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed:\n{e}\n\n"
            f"Fix: Check your configuration file at {config_path} and ensure all "
            f"values match the expected format."
        ) from e


def _load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration file or return defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If JSON is malformed or the file cannot be read
    """
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_dict = json.load(f)
            logger.info(f"Loaded configuration from {config_path}")
            return config_dict
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read config file: {config_path}\n"
                f"Error: {e}\n"
                f"Fix: Check file permissions and path"
            ) from e

    logger.info(
        f"Config file not found: {config_path}. Using default configuration."
    )
    # Deep copy so callers never mutate the defaults
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides with SPNEGO_SOAP_ prefix.

    Environment variables follow the pattern: SPNEGO_SOAP_<FIELD>
    For example: SPNEGO_SOAP_TIMEOUT_READ, SPNEGO_SOAP_LOG_LEVEL

    Args:
        config_dict: Configuration dictionary to update

    Returns:
        Updated configuration dictionary with environment overrides applied

    Raises:
        ConfigurationError: If a numeric override is not a number
    """
    # Transport section
    if verify_tls := os.getenv(f"{ENV_PREFIX}VERIFY_TLS"):
        config_dict.setdefault("transport", {})["verify_tls"] = _parse_bool(verify_tls)
        logger.debug("Override: verify_tls from environment")

    if timeout_connect := os.getenv(f"{ENV_PREFIX}TIMEOUT_CONNECT"):
        config_dict.setdefault("transport", {})["timeout_connect"] = _parse_int(
            "TIMEOUT_CONNECT", timeout_connect
        )
        logger.debug("Override: timeout_connect from environment")

    if timeout_read := os.getenv(f"{ENV_PREFIX}TIMEOUT_READ"):
        config_dict.setdefault("transport", {})["timeout_read"] = _parse_int(
            "TIMEOUT_READ", timeout_read
        )
        logger.debug("Override: timeout_read from environment")

    if confidential := os.getenv(f"{ENV_PREFIX}CONFIDENTIAL"):
        config_dict.setdefault("transport", {})["confidential"] = _parse_bool(confidential)
        logger.debug("Override: confidential from environment")

    if integrity := os.getenv(f"{ENV_PREFIX}INTEGRITY"):
        config_dict.setdefault("transport", {})["integrity"] = _parse_bool(integrity)
        logger.debug("Override: integrity from environment")

    # SOAP section
    if soap_protocol := os.getenv(f"{ENV_PREFIX}SOAP_PROTOCOL"):
        config_dict.setdefault("soap", {})["protocol"] = soap_protocol
        logger.debug("Override: soap protocol from environment")

    if audit_exchanges := os.getenv(f"{ENV_PREFIX}AUDIT_EXCHANGES"):
        config_dict.setdefault("soap", {})["audit_exchanges"] = _parse_bool(audit_exchanges)
        logger.debug("Override: audit_exchanges from environment")

    # Logging section
    if log_level := os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config_dict.setdefault("logging", {})["level"] = log_level
        logger.debug("Override: log_level from environment")

    if log_file := os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config_dict.setdefault("logging", {})["log_file"] = log_file
        logger.debug("Override: log_file from environment")

    if redact := os.getenv(f"{ENV_PREFIX}REDACT_CREDENTIALS"):
        config_dict.setdefault("logging", {})["redact_credentials"] = _parse_bool(redact)
        logger.debug("Override: redact_credentials from environment")

    return config_dict


def _parse_bool(value: str) -> bool:
    """Parse boolean value from string.

    Args:
        value: String value to parse (case-insensitive)

    Returns:
        Boolean value
    """
    return value.lower() in ("true", "1", "yes", "on")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid value for {ENV_PREFIX}{name}: {value!r}. Must be an integer."
        ) from e


def _check_sensitive_values(config_dict: dict[str, Any]) -> None:
    """Warn about passwords stored directly in the configuration.

    Args:
        config_dict: Configuration dictionary to check
    """
    for name, module in config_dict.get("login_modules", {}).items():
        if isinstance(module, dict) and "password" in module:
            logger.warning(
                f"WARNING: password found in configuration for login module '{name}'! "
                "Passwords are not read from config files and the key fails validation. "
                "Set password_env_var on the login module instead."
            )


def get_transport_config(config: Config) -> TransportConfig:
    """Get transport configuration.

    Args:
        config: Configuration instance

    Returns:
        TransportConfig instance
    """
    return config.transport


def get_login_module(config: Config, name: str) -> LoginModuleConfig:
    """Get a login module by name.

    Args:
        config: Configuration instance
        name: Login module name

    Returns:
        LoginModuleConfig instance

    Raises:
        ConfigurationError: If no login module has that name

    Example:
        >>> config = load_config()
        >>> module = get_login_module(config, "spnego-client")
    """
    try:
        return config.login_modules[name]
    except KeyError:
        known = ", ".join(sorted(config.login_modules)) or "none"
        raise ConfigurationError(
            f"Unknown login module: {name}. Configured login modules: {known}"
        ) from None


def get_soap_config(config: Config) -> SoapConfig:
    return config.soap


def get_logging_config(config: Config) -> LoggingConfig:
    """Get logging configuration.

    Args:
        config: Configuration instance

    Returns:
        LoggingConfig instance
    """
    return config.logging
