"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

# Default configuration dictionary
# This is used as a fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "transport": {
        # Verify TLS certificates by default for security
        "verify_tls": True,
        "timeout_connect": 10,
        "timeout_read": 30,
        # Protection options requested from the security context
        "confidential": True,
        "integrity": True,
        "mutual_authentication": True,
    },
    "login_modules": {
        # Uses the default Kerberos credential cache (kinit)
        "spnego-client": {
            "principal": None,
            "password_env_var": None,
            "service": "HTTP",
            "protocol": "negotiate",
            "delegate": False,
        },
    },
    "soap": {
        "protocol": "1.1",
        "audit_exchanges": False,
    },
    "logging": {
        "level": "INFO",
        "log_file": "logs/spnego-soap.log",
        "redact_credentials": True,
    },
}

# Default configuration file path
DEFAULT_CONFIG_PATH = "config/config.json"

# Login module used when none is named
DEFAULT_LOGIN_MODULE = "spnego-client"
