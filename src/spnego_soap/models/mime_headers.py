"""MIME header metadata attached to a SOAP message.

MimeHeaders is an ordered multimap: each header name maps to an ordered list
of string values. Names are matched exactly as presented.
"""

from typing import Iterable, Iterator, List, Optional, Tuple


class MimeHeaders:
    """Ordered multimap of MIME header names to values.

    Header order is the order in which names were first added; values keep
    the order in which they were added under their name.

    Example:
        >>> headers = MimeHeaders()
        >>> headers.add_header("SOAPAction", "urn:example:Echo")
        >>> headers.get_header("SOAPAction")
        ['urn:example:Echo']
        >>> headers.get_header("Content-Type") is None
        True
    """

    def __init__(self, items: Optional[Iterable[Tuple[str, str]]] = None) -> None:
        self._headers: dict[str, List[str]] = {}
        if items:
            for name, value in items:
                self.add_header(name, value)

    def add_header(self, name: str, value: str) -> None:
        """Append a value under ``name``.

        Raises:
            ValueError: If name is empty
        """
        if not name:
            raise ValueError("Header name must not be empty")
        self._headers.setdefault(name, []).append(value)

    def set_header(self, name: str, value: str) -> None:
        """Replace every value of ``name`` with a single value."""
        if not name:
            raise ValueError("Header name must not be empty")
        self._headers[name] = [value]

    def get_header(self, name: str) -> Optional[List[str]]:
        """Return a copy of the values for ``name``, or None when absent."""
        values = self._headers.get(name)
        if values is None:
            return None
        return list(values)

    def remove_header(self, name: str) -> None:
        self._headers.pop(name, None)

    def remove_all_headers(self) -> None:
        self._headers.clear()

    def names(self) -> List[str]:
        return list(self._headers)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        for name, values in self._headers.items():
            for value in values:
                yield name, value

    def __contains__(self, name: object) -> bool:
        return name in self._headers

    def __len__(self) -> int:
        return len(self._headers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MimeHeaders):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"MimeHeaders({list(self)!r})"
