"""Configuration schema models using pydantic.

This module defines the configuration structure and validation rules using pydantic.
All configuration values are validated according to the schema defined here.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TransportConfig(BaseModel):
    """Configuration for the authenticated HTTP transport.

    Attributes:
        verify_tls: Whether to verify TLS certificates
        timeout_connect: Connection timeout in seconds
        timeout_read: Read timeout in seconds
        confidential: Request confidentiality (wrap) protection from the security context
        integrity: Request message integrity protection from the security context
        mutual_authentication: Require the server to authenticate back
    """

    verify_tls: bool = True
    timeout_connect: int = Field(
        default=10,
        ge=1,
        description="Connection timeout in seconds"
    )
    timeout_read: int = Field(
        default=30,
        ge=1,
        description="Read timeout in seconds"
    )
    confidential: bool = Field(
        default=True,
        description="Request confidentiality protection"
    )
    integrity: bool = Field(
        default=True,
        description="Request message integrity protection"
    )
    mutual_authentication: bool = Field(
        default=True,
        description="Require mutual authentication"
    )


class LoginModuleConfig(BaseModel):
    """A named login module: how to obtain the client security context.

    Passwords are never stored in the configuration file; a login module
    names the environment variable holding the password instead. Unknown
    keys, a plaintext password among them, fail validation.

    Attributes:
        principal: Client principal (user@REALM). None uses the default credential cache.
        password_env_var: Environment variable holding the principal's password
        service: Service class of the target principal (HTTP/<host>)
        protocol: Negotiation protocol: negotiate, kerberos, or ntlm
        delegate: Whether to delegate credentials to the server

    Example:
        >>> module = LoginModuleConfig(principal="svc-soap@EXAMPLE.COM")
        >>> module.service
        'HTTP'
    """

    model_config = ConfigDict(extra="forbid")

    principal: Optional[str] = None
    password_env_var: Optional[str] = None
    service: str = Field(
        default="HTTP",
        min_length=1,
        description="Service class of the target principal"
    )
    protocol: str = Field(
        default="negotiate",
        description="Negotiation protocol: negotiate, kerberos, or ntlm"
    )
    delegate: bool = False

    @field_validator("protocol")
    @classmethod
    def validate_protocol(cls, v: str) -> str:
        """Validate negotiation protocol.

        Args:
            v: Protocol name

        Returns:
            Validated protocol name (lowercase)

        Raises:
            ValueError: If protocol is not one of: negotiate, kerberos, ntlm
        """
        valid_protocols = ["negotiate", "kerberos", "ntlm"]
        v_lower = v.lower()
        if v_lower not in valid_protocols:
            raise ValueError(
                f"Invalid protocol: {v}. Must be one of: {', '.join(valid_protocols)}"
            )
        return v_lower


class SoapConfig(BaseModel):
    """Configuration for SOAP message handling.

    Attributes:
        protocol: SOAP version used for response messages ("1.1" or "1.2")
        audit_exchanges: Log complete request/response envelopes to the audit trail
    """

    protocol: str = Field(
        default="1.1",
        description="SOAP version for response messages"
    )
    audit_exchanges: bool = Field(
        default=False,
        description="Log complete request and response envelopes"
    )

    @field_validator("protocol")
    @classmethod
    def validate_protocol(cls, v: str) -> str:
        valid_versions = ["1.1", "1.2"]
        if v not in valid_versions:
            raise ValueError(
                f"Invalid SOAP protocol: {v}. Must be one of: {', '.join(valid_versions)}"
            )
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file
        redact_credentials: Whether to mask Negotiate tokens and passwords in logs
    """

    level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Path = Field(
        default=Path("logs/spnego-soap.log"),
        description="Log file path"
    )
    redact_credentials: bool = Field(
        default=True,
        description="Redact credentials from logs"
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level.

        Args:
            v: Log level string

        Returns:
            Validated log level (uppercase)

        Raises:
            ValueError: If log level is not valid
        """
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return v_upper


class Config(BaseModel):
    """Root configuration model.

    Attributes:
        transport: Authenticated transport configuration
        login_modules: Named login modules
        soap: SOAP message handling configuration
        logging: Logging configuration

    Example:
        >>> config = Config(
        ...     login_modules={"spnego-client": LoginModuleConfig()},
        ...     transport=TransportConfig(timeout_read=60),
        ... )
        >>> config.login_modules["spnego-client"].protocol
        'negotiate'
    """

    transport: TransportConfig = TransportConfig()
    login_modules: dict[str, LoginModuleConfig] = Field(default_factory=dict)
    soap: SoapConfig = SoapConfig()
    logging: LoggingConfig = LoggingConfig()
