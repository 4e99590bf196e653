"""SOAP message data models.

This module defines SoapMessage (MIME headers plus an Envelope), SoapBody and
MessageFactory. Messages are backed by lxml elements; a SoapBody accepts whole
standalone documents rather than subtrees of other documents.
"""

import logging
from typing import BinaryIO, List, Optional, Union

from lxml import etree

from spnego_soap.models.mime_headers import MimeHeaders
from spnego_soap.utils.xml import create_parser, is_element, local_name

logger = logging.getLogger(__name__)

# SOAP namespaces
SOAP_11_NS = "http://schemas.xmlsoap.org/soap/envelope/"
SOAP_12_NS = "http://www.w3.org/2003/05/soap-envelope"

SOAP_NAMESPACES = {
    "1.1": SOAP_11_NS,
    "1.2": SOAP_12_NS,
}

SOAP_PREFIXES = {
    "1.1": "SOAP-ENV",
    "1.2": "env",
}


class SoapBody:
    """Body of a SOAP message.

    Wraps the Body element of an envelope. Content is added one standalone
    document at a time with add_document().

    Example:
        >>> message = MessageFactory().create_message()
        >>> doc = etree.ElementTree(etree.fromstring(b"<a/>"))
        >>> message.body.add_document(doc)
        >>> [el.tag for el in message.body.child_elements()]
        ['a']
    """

    def __init__(self, element: etree._Element) -> None:
        self._element = element

    @property
    def element(self) -> etree._Element:
        return self._element

    def add_document(self, document: Union[etree._ElementTree, etree._Element]) -> etree._Element:
        """Append a whole document as one unit of body content.

        The document root is moved into the body, so the document should not
        be used by the caller afterwards.

        Args:
            document: Standalone document, or the root element of one

        Returns:
            The appended element

        Raises:
            ValueError: If an element that still has a parent is given
        """
        if isinstance(document, etree._ElementTree):
            root = document.getroot()
        else:
            root = document

        if root is None:
            raise ValueError("Cannot add an empty document to a SOAP Body")
        if root.getparent() is not None:
            raise ValueError(
                f"Element {root.tag!r} belongs to another tree. "
                "Only whole documents can be added to a SOAP Body."
            )

        self._element.append(root)
        return root

    def child_elements(self) -> List[etree._Element]:
        """Return the element children of the body in document order."""
        return [child for child in self._element if is_element(child)]

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    def __len__(self) -> int:
        return len(self.child_elements())

    def __iter__(self):
        return iter(self.child_elements())


class SoapMessage:
    """SOAP message: MIME header metadata and an Envelope element.

    Attributes:
        mime_headers: Header metadata mapped onto transport headers when sent
        envelope: Root Envelope element

    Example:
        >>> message = SoapMessage.from_bytes(
        ...     b'<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/">'
        ...     b'<s:Body><ping/></s:Body></s:Envelope>'
        ... )
        >>> message.protocol
        '1.1'
        >>> len(message.body)
        1
    """

    def __init__(self, envelope: etree._Element, mime_headers: Optional[MimeHeaders] = None) -> None:
        if local_name(envelope).lower() != "envelope":
            raise ValueError(
                f"SOAP message root must be an Envelope element, got {envelope.tag!r}"
            )
        self.envelope = envelope
        self.mime_headers = mime_headers if mime_headers is not None else MimeHeaders()

    @classmethod
    def from_bytes(cls, data: bytes, mime_headers: Optional[MimeHeaders] = None) -> "SoapMessage":
        """Parse a serialized envelope into a message.

        The root must be an Envelope, matched on its local name ignoring case
        and namespace, the same rule applied to SOAP responses. Header and
        Body children are found the same way.

        Args:
            data: XML bytes of a SOAP envelope
            mime_headers: Optional MIME headers to attach

        Returns:
            Parsed SoapMessage

        Raises:
            ValueError: If data is not well-formed XML or not an Envelope
        """
        try:
            root = etree.fromstring(data, create_parser())
        except etree.XMLSyntaxError as e:
            raise ValueError(f"Malformed SOAP message XML: {e}") from e
        return cls(root, mime_headers)

    @property
    def protocol(self) -> Optional[str]:
        """SOAP protocol version ("1.1" or "1.2"), or None for other namespaces."""
        namespace = etree.QName(self.envelope).namespace
        for version, uri in SOAP_NAMESPACES.items():
            if namespace == uri:
                return version
        return None

    @property
    def header(self) -> Optional[etree._Element]:
        return self._find_child("Header")

    @property
    def body(self) -> SoapBody:
        element = self._find_child("Body")
        if element is None:
            raise ValueError("SOAP message has no Body element")
        return SoapBody(element)

    def _find_child(self, name: str) -> Optional[etree._Element]:
        for child in self.envelope:
            if local_name(child).lower() == name.lower():
                return child
        return None

    def to_bytes(self) -> bytes:
        """Serialize the envelope as UTF-8 with an XML declaration."""
        return etree.tostring(self.envelope, xml_declaration=True, encoding="UTF-8")

    def write_to(self, stream: BinaryIO) -> None:
        stream.write(self.to_bytes())


class MessageFactory:
    """Creates empty SOAP messages for one protocol version.

    Attributes:
        protocol: "1.1" (default) or "1.2"

    Example:
        >>> message = MessageFactory("1.2").create_message()
        >>> message.protocol
        '1.2'
    """

    def __init__(self, protocol: str = "1.1") -> None:
        if protocol not in SOAP_NAMESPACES:
            raise ValueError(
                f"Invalid SOAP protocol: {protocol}. Must be one of: "
                f"{', '.join(SOAP_NAMESPACES)}"
            )
        self.protocol = protocol

    def create_message(self) -> SoapMessage:
        """Create a message with an empty Header and Body and no MIME headers."""
        namespace = SOAP_NAMESPACES[self.protocol]
        prefix = SOAP_PREFIXES[self.protocol]

        envelope = etree.Element(f"{{{namespace}}}Envelope", nsmap={prefix: namespace})
        etree.SubElement(envelope, f"{{{namespace}}}Header")
        etree.SubElement(envelope, f"{{{namespace}}}Body")

        logger.debug("Created empty SOAP %s message", self.protocol)
        return SoapMessage(envelope)
