"""Models module.

This module provides the SOAP message data models.
"""

from spnego_soap.models.message import (
    SOAP_11_NS,
    SOAP_12_NS,
    MessageFactory,
    SoapBody,
    SoapMessage,
)
from spnego_soap.models.mime_headers import MimeHeaders

__all__ = [
    "MessageFactory",
    "MimeHeaders",
    "SOAP_11_NS",
    "SOAP_12_NS",
    "SoapBody",
    "SoapMessage",
]
