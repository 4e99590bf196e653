"""SPNEGO-secured SOAP client.

Sends SOAP messages over a Kerberos/SPNEGO authenticated HTTP transport and
rebuilds each response body as independent documents.
"""

from spnego_soap.models import MessageFactory, MimeHeaders, SoapBody, SoapMessage
from spnego_soap.soap import CallOutcome, SpnegoSoapConnection
from spnego_soap.utils.exceptions import (
    ConfigurationError,
    ErrorKind,
    MalformedResponseError,
    SoapCallError,
    SpnegoSoapError,
    TransportError,
    TransportFailure,
)

__version__ = "0.1.0"

__all__ = [
    "CallOutcome",
    "ConfigurationError",
    "ErrorKind",
    "MalformedResponseError",
    "MessageFactory",
    "MimeHeaders",
    "SoapBody",
    "SoapCallError",
    "SoapMessage",
    "SpnegoSoapConnection",
    "SpnegoSoapError",
    "TransportError",
    "TransportFailure",
]
