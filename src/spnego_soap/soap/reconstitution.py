"""Rebuild a SOAP response message from an extracted Body.

Every top-level body element is serialized on its own and re-parsed into a
standalone document, which is then added to the new message's Body. The new
message never shares nodes with the parsed response.
"""

import logging
from typing import Optional

from lxml import etree

from spnego_soap.models.message import MessageFactory, SoapMessage
from spnego_soap.utils.exceptions import MalformedResponseError
from spnego_soap.utils.xml import create_parser, is_element

logger = logging.getLogger(__name__)


def isolate_element(element: etree._Element) -> etree._ElementTree:
    """Copy one element subtree into a new standalone document.

    Siblings and the element's tail text are excluded. Namespace
    declarations inherited from ancestors are carried onto the new root.

    Args:
        element: Element to isolate

    Returns:
        Freshly parsed document holding a copy of the element

    Raises:
        MalformedResponseError: If the element cannot be serialized or re-parsed
    """
    try:
        data = etree.tostring(element, encoding="UTF-8", with_tail=False)
    except (etree.SerialisationError, ValueError) as e:
        raise MalformedResponseError(
            f"Could not serialize body element {element.tag}: {e}"
        ) from e

    try:
        return etree.ElementTree(etree.fromstring(data, create_parser()))
    except etree.XMLSyntaxError as e:
        raise MalformedResponseError(
            f"Could not re-parse body element {element.tag}: {e.msg}"
        ) from e


def reconstitute_body(
    body: etree._Element,
    factory: Optional[MessageFactory] = None,
) -> SoapMessage:
    """Create a response message holding one document per body element.

    Comments, processing instructions and whitespace between elements are
    not body content and are skipped. Any failure aborts the whole
    reconstitution; a partially filled message is never returned.

    Args:
        body: Body element detached from the response envelope
        factory: Factory for the new message (SOAP 1.1 when omitted)

    Returns:
        New SoapMessage; its Body is empty when the source body was

    Raises:
        MalformedResponseError: If any body element fails to serialize or re-parse

    Example:
        >>> body = extract_body(b"<Envelope><Body><a/><b/></Body></Envelope>")
        >>> message = reconstitute_body(body)
        >>> [el.tag for el in message.body.child_elements()]
        ['a', 'b']
    """
    factory = factory or MessageFactory()

    children = [child for child in body if is_element(child)]
    logger.debug(f"number of children={len(children)}")

    # Isolate everything first so a failure leaves no half-built message behind
    documents = []
    for index, child in enumerate(children):
        logger.debug(f"child[{index}]={etree.QName(child).localname}")
        documents.append(isolate_element(child))

    message = factory.create_message()
    for document in documents:
        message.body.add_document(document)

    return message
