"""Custom log formatters for the SPNEGO SOAP client.

This module provides specialized formatters for logging, including credential redaction.
"""

import logging
import re
from typing import List, Tuple


class CredentialRedactingFormatter(logging.Formatter):
    """Formatter that redacts authentication material from log messages.

    Negotiate/NTLM tokens, Authorization header values and password
    assignments are replaced before the record is written.

    Attributes:
        redact_credentials: Whether to enable redaction
        patterns: List of (regex_pattern, replacement_text) tuples for redaction

    Example:
        >>> formatter = CredentialRedactingFormatter(
        ...     fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        ...     redact_credentials=True
        ... )
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(formatter)
    """

    def __init__(
        self,
        fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt: str | None = None,
        redact_credentials: bool = True,
    ) -> None:
        """Initialize the CredentialRedactingFormatter.

        Args:
            fmt: Log message format string
            datefmt: Date format string (optional)
            redact_credentials: Whether to enable redaction
        """
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.redact_credentials = redact_credentials

        self.patterns: List[Tuple[re.Pattern[str], str]] = [
            # Authorization: Negotiate YIIC... / Authorization: Basic dXNlcjpwYXNz
            (re.compile(r'(Authorization["\']?\s*[:=]\s*["\']?)[^"\'\r\n,]+', re.IGNORECASE),
             r'\1[REDACTED]'),

            # Bare scheme tokens, e.g. in WWW-Authenticate values
            (re.compile(r'\b(Negotiate|NTLM|Kerberos)\s+[A-Za-z0-9+/=]{8,}'),
             r'\1 [TOKEN-REDACTED]'),

            # password=secret, "password": "secret"
            (re.compile(r'(password["\']?\s*[:=]\s*["\']?)[^"\'\s,}]+', re.IGNORECASE),
             r'\1[REDACTED]'),
        ]

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with optional credential redaction.

        Args:
            record: Log record to format

        Returns:
            Formatted log message with credentials redacted if enabled
        """
        original = super().format(record)

        if self.redact_credentials:
            for pattern, replacement in self.patterns:
                original = pattern.sub(replacement, original)

        return original
