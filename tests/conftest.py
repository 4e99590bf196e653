"""
Shared pytest configuration and fixtures.

This module provides fixtures used across unit and integration tests,
including a recording in-memory transport for driving the SOAP connection.
"""

import io
from typing import BinaryIO, List, Optional, Tuple

import pytest

from spnego_soap.models import MimeHeaders, SoapMessage
from spnego_soap.transport.base import AuthenticatedTransport
from spnego_soap.utils.exceptions import TransportError, TransportFailure


SOAP_11_REQUEST = b"""<?xml version="1.0" encoding="UTF-8"?>
<SOAP-ENV:Envelope xmlns:SOAP-ENV="http://schemas.xmlsoap.org/soap/envelope/">
  <SOAP-ENV:Header/>
  <SOAP-ENV:Body>
    <ns:GetStatus xmlns:ns="urn:example:status">
      <ns:id>42</ns:id>
    </ns:GetStatus>
  </SOAP-ENV:Body>
</SOAP-ENV:Envelope>"""


class FailingCloseStream(io.BytesIO):
    """Response stream whose close() raises."""

    def close(self) -> None:
        super().close()
        raise OSError("stream already reset by peer")


class RecordingTransport(AuthenticatedTransport):
    """In-memory transport that records every call made on it.

    Attributes:
        response: Bytes returned by get_response_stream()
        connect_error: Exception raised by connect(), if any
        calls: Ordered list of method names invoked
    """

    def __init__(
        self,
        response: bytes = b"",
        connect_error: Optional[Exception] = None,
        close_error: bool = False,
    ) -> None:
        self.response = response
        self.connect_error = connect_error
        self.close_error = close_error
        self.calls: List[str] = []
        self.method: Optional[str] = None
        self.headers: List[Tuple[str, str]] = []
        self.endpoint: Optional[str] = None
        self.body: Optional[bytes] = None
        self.connect_count = 0
        self.disconnect_count = 0
        self._connected = False

    def set_request_method(self, method: str) -> None:
        self.calls.append("set_request_method")
        self.method = method

    def add_request_header(self, name: str, value: str) -> None:
        self.calls.append("add_request_header")
        self.headers.append((name, value))

    def connect(self, endpoint: str, body: bytes) -> None:
        self.calls.append("connect")
        self.connect_count += 1
        self.endpoint = endpoint
        self.body = body
        if self.connect_error is not None:
            raise self.connect_error
        self._connected = True

    def get_response_stream(self) -> BinaryIO:
        self.calls.append("get_response_stream")
        if not self._connected:
            raise TransportError("not connected", TransportFailure.IO)
        if self.close_error:
            return FailingCloseStream(self.response)
        return io.BytesIO(self.response)

    def disconnect(self) -> None:
        self.calls.append("disconnect")
        self.disconnect_count += 1
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected


@pytest.fixture
def request_message() -> SoapMessage:
    """SOAP 1.1 request without MIME headers."""
    return SoapMessage.from_bytes(SOAP_11_REQUEST)


@pytest.fixture
def request_with_action() -> SoapMessage:
    """SOAP 1.1 request carrying a single SOAPAction."""
    headers = MimeHeaders([("SOAPAction", '"urn:example:status/GetStatus"')])
    return SoapMessage.from_bytes(SOAP_11_REQUEST, headers)


@pytest.fixture
def make_transport():
    """Factory fixture creating RecordingTransport instances."""

    def _make(response: bytes = b"", **kwargs) -> RecordingTransport:
        return RecordingTransport(response=response, **kwargs)

    return _make
