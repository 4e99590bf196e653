"""Shared lxml helpers for parsing SOAP payloads."""

from lxml import etree


def create_parser() -> etree.XMLParser:
    """Create a namespace-aware parser that never fetches external content.

    Entity resolution and network access are disabled and whitespace text is
    kept, so parsed documents round-trip byte-for-byte where possible.

    Returns:
        Configured lxml XMLParser
    """
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_blank_text=False,
        huge_tree=False,
    )


def local_name(node: etree._Element) -> str:
    """Return the local name of an element, or "" for comments and PIs.

    Example:
        >>> el = etree.fromstring(b'<s:Body xmlns:s="urn:x"/>')
        >>> local_name(el)
        'Body'
    """
    if not isinstance(node.tag, str):
        return ""
    return etree.QName(node).localname


def is_element(node: etree._Element) -> bool:
    return isinstance(node.tag, str)
