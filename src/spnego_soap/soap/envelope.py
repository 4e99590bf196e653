"""SOAP envelope extraction from raw response bytes."""

import logging

from lxml import etree

from spnego_soap.utils.exceptions import MalformedResponseError
from spnego_soap.utils.xml import create_parser, local_name

logger = logging.getLogger(__name__)


def parse_response(data: bytes) -> etree._Element:
    """Parse response bytes into a namespace-aware element tree.

    Args:
        data: Raw response payload

    Returns:
        Root element of the parsed document

    Raises:
        MalformedResponseError: If the payload is empty or not well-formed XML
    """
    if not data or not data.strip():
        raise MalformedResponseError("Response was empty; expected a SOAP envelope.")

    try:
        return etree.fromstring(data, create_parser())
    except etree.XMLSyntaxError as e:
        raise MalformedResponseError(
            f"Malformed XML in response at line {e.lineno}: {e.msg}"
        ) from e


def validate_envelope(data: bytes) -> etree._Element:
    """Parse the response and check that its root is a SOAP Envelope.

    The root is matched on its local name, ignoring case and namespace.

    Raises:
        MalformedResponseError: If the XML is malformed or the root is not an
            Envelope
    """
    envelope = parse_response(data)

    if local_name(envelope).lower() != "envelope":
        raise MalformedResponseError("Response did not contain a SOAP 'Envelope'.")
    return envelope


def detach_body(envelope: etree._Element) -> etree._Element:
    """Remove the first Body child from a validated envelope and return it.

    Only immediate children are considered. The Body keeps its children in
    document order.

    Raises:
        MalformedResponseError: If the Envelope has no Body
    """
    for child in envelope:
        if local_name(child).lower() == "body":
            envelope.remove(child)
            logger.debug(f"Extracted SOAP body {child.tag} with {len(child)} child nodes")
            return child

    raise MalformedResponseError("Response did not contain a SOAP 'Body'.")


def extract_body(data: bytes) -> etree._Element:
    """Validate the envelope and detach its Body.

    Envelope and Body are matched on their local names, ignoring case and
    namespace. The first matching immediate child of the envelope is removed
    from it and returned with its children in document order.

    Args:
        data: Raw response payload

    Returns:
        The detached Body element

    Raises:
        MalformedResponseError: If the XML is malformed, the root is not an
            Envelope, or the Envelope has no Body

    Example:
        >>> body = extract_body(b"<Envelope><Body><a/><b/></Body></Envelope>")
        >>> [child.tag for child in body]
        ['a', 'b']
    """
    return detach_body(validate_envelope(data))
