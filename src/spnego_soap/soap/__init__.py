"""SOAP module.

This module provides request header resolution, envelope extraction, body
reconstitution and the SPNEGO SOAP connection facade.
"""

from spnego_soap.soap.connection import CallOutcome, CallState, SpnegoSoapConnection
from spnego_soap.soap.envelope import (
    detach_body,
    extract_body,
    parse_response,
    validate_envelope,
)
from spnego_soap.soap.headers import ResolvedHeaders, resolve_request_headers
from spnego_soap.soap.reconstitution import isolate_element, reconstitute_body

__all__ = [
    "CallOutcome",
    "CallState",
    "ResolvedHeaders",
    "SpnegoSoapConnection",
    "detach_body",
    "extract_body",
    "isolate_element",
    "parse_response",
    "reconstitute_body",
    "resolve_request_headers",
    "validate_envelope",
]
