"""Contract for the authenticated transport used by the SOAP connection.

A transport performs the security handshake and the byte-level HTTP exchange.
The SOAP layer only sets the method and headers, connects with a request body,
reads the response stream and disconnects.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO


class AuthenticatedTransport(ABC):
    """Authenticated request/response transport.

    Implementations raise spnego_soap.utils.exceptions.TransportError from
    connect() and get_response_stream(), with a TransportFailure reason of
    MALFORMED_ENDPOINT, IO, NEGOTIATION or PRIVILEGED_OPERATION.

    Example:
        >>> transport.set_request_method("POST")
        >>> transport.add_request_header("SOAPAction", "urn:example:Echo")
        >>> transport.connect("https://soap.example.com/service", body)
        >>> data = transport.get_response_stream().read()
        >>> transport.disconnect()
    """

    @abstractmethod
    def set_request_method(self, method: str) -> None:
        """Set the HTTP method of the next request."""

    @abstractmethod
    def add_request_header(self, name: str, value: str) -> None:
        """Add a request header to the next request."""

    @abstractmethod
    def connect(self, endpoint: str, body: bytes) -> None:
        """Perform the security handshake and send the request.

        Args:
            endpoint: Destination URL
            body: Request body bytes

        Raises:
            TransportError: If the endpoint is malformed, I/O fails, or
                negotiation or credential acquisition fails
        """

    @abstractmethod
    def get_response_stream(self) -> BinaryIO:
        """Return the response payload of the last successful connect()."""

    @abstractmethod
    def disconnect(self) -> None:
        """Release the connection. Safe to call when already disconnected."""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether connect() succeeded and disconnect() has not been called since."""
