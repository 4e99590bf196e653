"""Transport module.

This module provides the authenticated transport contract and its
SPNEGO/requests implementation.
"""

from spnego_soap.transport.auth import SpnegoAuth, build_context_req
from spnego_soap.transport.base import AuthenticatedTransport
from spnego_soap.transport.spnego_http import SpnegoHttpTransport

__all__ = [
    "AuthenticatedTransport",
    "SpnegoAuth",
    "SpnegoHttpTransport",
    "build_context_req",
]
