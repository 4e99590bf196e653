"""Config module.

This module provides configuration management functionality.
"""

from spnego_soap.config.manager import (
    get_logging_config,
    get_login_module,
    get_soap_config,
    get_transport_config,
    load_config,
)
from spnego_soap.config.schema import (
    Config,
    LoggingConfig,
    LoginModuleConfig,
    SoapConfig,
    TransportConfig,
)

__all__ = [
    # Main configuration loading
    "load_config",
    # Helper functions
    "get_login_module",
    "get_logging_config",
    "get_soap_config",
    "get_transport_config",
    # Configuration models
    "Config",
    "LoggingConfig",
    "LoginModuleConfig",
    "SoapConfig",
    "TransportConfig",
]
