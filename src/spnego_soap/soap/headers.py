"""Request header resolution.

Maps the MIME header metadata of an outgoing SOAP message onto the headers of
the transport request. The method is always POST.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from spnego_soap.models.mime_headers import MimeHeaders
from spnego_soap.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONTENT_TYPE = "Content-Type"
SOAP_ACTION = "SOAPAction"

REQUEST_METHOD = "POST"

# Used when the message carries no Content-Type of its own
SOAP_XML_CONTENT_TYPE = "application/soap+xml; charset=UTF-8;"
TEXT_XML_CONTENT_TYPE = "text/xml; charset=UTF-8;"


@dataclass
class ResolvedHeaders:
    """Transport directives derived from a message's MIME headers.

    Attributes:
        method: HTTP method, always POST
        headers: (name, value) pairs in the order they are sent
    """

    method: str = REQUEST_METHOD
    headers: List[Tuple[str, str]] = field(default_factory=list)

    def get(self, name: str) -> Optional[str]:
        for header_name, value in self.headers:
            if header_name == name:
                return value
        return None


def resolve_request_headers(mime_headers: MimeHeaders) -> ResolvedHeaders:
    """Resolve Content-Type and SOAPAction for the transport request.

    Without a Content-Type, ``application/soap+xml; charset=UTF-8;`` is used
    when the message has no SOAPAction and ``text/xml; charset=UTF-8;`` when it
    has one. A supplied Content-Type or SOAPAction is forwarded unchanged.

    Args:
        mime_headers: MIME headers of the outgoing message

    Returns:
        ResolvedHeaders with method POST

    Raises:
        ConfigurationError: If Content-Type or SOAPAction has more than one value

    Example:
        >>> resolved = resolve_request_headers(MimeHeaders([("SOAPAction", "urn:Echo")]))
        >>> resolved.headers
        [('Content-Type', 'text/xml; charset=UTF-8;'), ('SOAPAction', 'urn:Echo')]
    """
    content_type = mime_headers.get_header(CONTENT_TYPE)
    soap_action = mime_headers.get_header(SOAP_ACTION)

    if content_type is not None and len(content_type) > 1:
        raise ConfigurationError("Content-Type defined more than once.")

    if soap_action is not None and len(soap_action) > 1:
        raise ConfigurationError("SOAPAction defined more than once.")

    resolved = ResolvedHeaders()

    if content_type is None:
        if soap_action is None:
            resolved.headers.append((CONTENT_TYPE, SOAP_XML_CONTENT_TYPE))
        else:
            resolved.headers.append((CONTENT_TYPE, TEXT_XML_CONTENT_TYPE))
    else:
        resolved.headers.append((CONTENT_TYPE, content_type[0]))

    if soap_action is not None:
        resolved.headers.append((SOAP_ACTION, soap_action[0]))

    logger.debug(f"Resolved request headers: {resolved.headers}")
    return resolved
