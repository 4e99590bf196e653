"""Custom exception classes for the SPNEGO SOAP client.

All exceptions inherit from SpnegoSoapError to allow catching all custom exceptions.
A call made through the connection facade fails with a single SoapCallError whose
``kind`` tells which layer the original failure came from.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SpnegoSoapError(Exception):
    """Base exception for all SPNEGO SOAP client custom exceptions."""

    pass


class ConfigurationError(SpnegoSoapError):
    """Raised when a request or the client configuration is invalid.

    Examples:
        - Content-Type or SOAPAction MIME header defined more than once
        - Unknown login module name
        - Invalid configuration file format
    """

    pass


class TransportFailure(Enum):
    """Reason a transport operation failed.

    Attributes:
        MALFORMED_ENDPOINT: Endpoint address could not be used as a URL
        IO: Network or HTTP level failure, including non-success statuses
        NEGOTIATION: SPNEGO token exchange or mutual authentication failed
        PRIVILEGED_OPERATION: Credential acquisition or security context setup failed
    """

    MALFORMED_ENDPOINT = "MALFORMED_ENDPOINT"
    IO = "IO"
    NEGOTIATION = "NEGOTIATION"
    PRIVILEGED_OPERATION = "PRIVILEGED_OPERATION"


class TransportError(SpnegoSoapError):
    """Raised when the authenticated transport fails.

    Examples:
        - Malformed endpoint URL
        - Connection refused or HTTP error response
        - Kerberos ticket could not be obtained
    """

    def __init__(self, message: str, failure: TransportFailure = TransportFailure.IO) -> None:
        super().__init__(message)
        self.failure = failure


class MalformedResponseError(SpnegoSoapError):
    """Raised when the response cannot be turned into a SOAP message.

    Examples:
        - Response is not well-formed XML
        - Root element is not an Envelope
        - Envelope has no Body
        - A body element fails to serialize or re-parse
    """

    pass


class ErrorKind(Enum):
    """Layer a call-level failure originated from.

    Attributes:
        CONFIGURATION: Request headers or configuration invalid, no I/O attempted
        TRANSPORT: Endpoint, network, or negotiation failure
        MALFORMED_RESPONSE: Response envelope could not be extracted or rebuilt

    Example:
        >>> kind = categorize_error(MalformedResponseError("missing Body"))
        >>> kind == ErrorKind.MALFORMED_RESPONSE
        True
    """

    CONFIGURATION = "CONFIGURATION"
    TRANSPORT = "TRANSPORT"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"


class SoapCallError(SpnegoSoapError):
    """Uniform failure raised by SpnegoSoapConnection.call().

    Attributes:
        kind: ErrorKind of the original failure
        cause: The original exception (also chained as ``__cause__``)
    """

    def __init__(self, message: str, kind: ErrorKind, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.cause = cause


@dataclass
class ErrorInfo:
    """Structured error information for actionable error handling.

    Attributes:
        kind: Error kind (CONFIGURATION, TRANSPORT, MALFORMED_RESPONSE)
        error_type: Exception class name (e.g., "TransportError")
        message: User-friendly error message
        remediation: Actionable guidance for resolving the error
        technical_details: Optional technical details for debugging

    Example:
        >>> error_info = ErrorInfo(
        ...     kind=ErrorKind.TRANSPORT,
        ...     error_type="TransportError",
        ...     message="Cannot reach endpoint",
        ...     remediation="Check network connectivity and endpoint URL",
        ... )
    """

    kind: ErrorKind
    error_type: str
    message: str
    remediation: str
    technical_details: Optional[str] = None


def categorize_error(exception: BaseException) -> ErrorKind:
    """Categorize an exception by the layer it belongs to.

    SoapCallError keeps its own kind. Anything not recognized as a
    configuration or response problem is treated as a transport failure.

    Args:
        exception: The exception to categorize

    Returns:
        ErrorKind for the exception

    Example:
        >>> categorize_error(ConfigurationError("SOAPAction defined more than once."))
        ErrorKind.CONFIGURATION
        >>> categorize_error(OSError("connection reset"))
        ErrorKind.TRANSPORT
    """
    if isinstance(exception, SoapCallError):
        return exception.kind

    if isinstance(exception, ConfigurationError):
        return ErrorKind.CONFIGURATION

    if isinstance(exception, MalformedResponseError):
        return ErrorKind.MALFORMED_RESPONSE

    return ErrorKind.TRANSPORT


def create_error_info(exception: BaseException) -> ErrorInfo:
    """Create structured error information from exception.

    For a SoapCallError the original cause is described, since that is what
    the caller has to fix.

    Args:
        exception: Exception that occurred

    Returns:
        ErrorInfo with categorization and remediation guidance

    Example:
        >>> info = create_error_info(TransportError("refused", TransportFailure.IO))
        >>> info.kind
        ErrorKind.TRANSPORT
    """
    kind = categorize_error(exception)

    original = exception
    if isinstance(exception, SoapCallError) and exception.cause is not None:
        original = exception.cause

    technical_details = None
    if original.__cause__ is not None:
        technical_details = f"Caused by: {type(original.__cause__).__name__}: {original.__cause__}"

    return ErrorInfo(
        kind=kind,
        error_type=type(original).__name__,
        message=str(original),
        remediation=_generate_remediation(original, kind),
        technical_details=technical_details,
    )


def _generate_remediation(exception: BaseException, kind: ErrorKind) -> str:
    """Generate actionable remediation message for an error.

    Args:
        exception: Exception that occurred
        kind: Error kind

    Returns:
        Actionable remediation message
    """
    if kind == ErrorKind.CONFIGURATION:
        return (
            "Request or configuration is invalid. Make sure Content-Type and SOAPAction "
            "are set at most once on the message MIME headers, and that the login module "
            "exists in config.json."
        )

    if kind == ErrorKind.MALFORMED_RESPONSE:
        return (
            "The endpoint did not return a usable SOAP envelope. Enable audit_exchanges "
            "in config.json to log the raw response and check that the endpoint URL "
            "points at a SOAP service."
        )

    failure = getattr(exception, "failure", None)

    if failure == TransportFailure.MALFORMED_ENDPOINT:
        return "Endpoint URL is malformed. Use an absolute http:// or https:// URL."

    if failure == TransportFailure.NEGOTIATION:
        return (
            "SPNEGO negotiation failed. Check that the service principal (HTTP/<host>) "
            "exists in the KDC and that the client clock is in sync."
        )

    if failure == TransportFailure.PRIVILEGED_OPERATION:
        return (
            "Kerberos credentials could not be acquired. Run kinit or check the keytab, "
            "principal and password environment variable of the login module."
        )

    return (
        "Cannot complete the HTTP exchange. Check: 1) Network connectivity, "
        "2) Endpoint URL, 3) Server logs for the HTTP status returned."
    )
