"""SPNEGO-secured SOAP connection.

SpnegoSoapConnection sends a SOAP message over an authenticated transport and
rebuilds the response as a new message whose Body holds one standalone
document per top-level response element. Every call connects the transport
once and always disconnects it before returning or raising.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional

from spnego_soap.config.manager import load_config
from spnego_soap.config.schema import Config, SoapConfig
from spnego_soap.logging_audit.audit import log_audit_event, log_exchange
from spnego_soap.models.message import MessageFactory, SoapMessage
from spnego_soap.soap.envelope import detach_body, validate_envelope
from spnego_soap.soap.headers import SOAP_ACTION, resolve_request_headers
from spnego_soap.soap.reconstitution import reconstitute_body
from spnego_soap.transport.base import AuthenticatedTransport
from spnego_soap.transport.spnego_http import SpnegoHttpTransport
from spnego_soap.utils.exceptions import (
    ErrorInfo,
    SoapCallError,
    categorize_error,
    create_error_info,
)

logger = logging.getLogger(__name__)


class CallState(Enum):
    """Progress of a single call()."""

    IDLE = "Idle"
    HEADERS_RESOLVED = "HeadersResolved"
    CONNECTED = "Connected"
    RESPONSE_RECEIVED = "ResponseReceived"
    ENVELOPE_VALIDATED = "EnvelopeValidated"
    BODY_EXTRACTED = "BodyExtracted"
    RECONSTITUTED = "Reconstituted"
    CLOSED_SUCCESS = "Closed(Success)"
    CLOSED_FAILURE = "Closed(Failure)"


@dataclass
class CallOutcome:
    """Result of try_call(): either a response message or error information.

    Attributes:
        message: Response message on success
        error: Structured error on failure
    """

    message: Optional[SoapMessage] = None
    error: Optional[ErrorInfo] = None

    @property
    def is_success(self) -> bool:
        return self.error is None


class SpnegoSoapConnection:
    """SOAP connection over an SPNEGO-authenticated transport.

    The connection owns one transport for its lifetime. A call is not
    thread-safe; use one connection per concurrent caller.

    Attributes:
        message_factory: Factory for response messages
        audit_exchanges: Log complete request/response envelopes

    Example:
        >>> with SpnegoSoapConnection.from_login_module("spnego-client") as conn:
        ...     response = conn.call(request, "https://soap.example.com/service")
        >>> for element in response.body:
        ...     print(element.tag)
    """

    def __init__(
        self,
        transport: AuthenticatedTransport,
        message_factory: Optional[MessageFactory] = None,
        audit_exchanges: bool = False,
    ) -> None:
        if transport is None:
            raise ValueError("transport is required")
        self._transport = transport
        self.message_factory = message_factory or MessageFactory()
        self.audit_exchanges = audit_exchanges

    @classmethod
    def from_login_module(
        cls,
        name: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        config: Optional[Config] = None,
    ) -> "SpnegoSoapConnection":
        """Create a connection whose transport logs in with a login module.

        Args:
            name: Login module name in the configuration
            username: Optional principal overriding the login module's
            password: Password for username
            config: Loaded configuration (load_config() when omitted)

        Raises:
            ConfigurationError: If the login module is unknown or the
                configuration is invalid
        """
        config = config or load_config()

        transport = SpnegoHttpTransport.from_login_module(
            name, username=username, password=password, config=config
        )
        return cls._with_config(transport, config.soap)

    @classmethod
    def from_credentials(
        cls,
        credentials: Any,
        dispose: bool = True,
        confidential: Optional[bool] = None,
        integrity: Optional[bool] = None,
        config: Optional[Config] = None,
    ) -> "SpnegoSoapConnection":
        """Create a connection whose transport uses an existing credential handle.

        Args:
            credentials: pyspnego credential (or list of them)
            dispose: Drop the credential after the first call
            confidential: Request confidentiality protection
            integrity: Request message integrity protection
            config: Optional configuration for transport and SOAP settings
        """
        transport = SpnegoHttpTransport.from_credentials(
            credentials,
            dispose=dispose,
            confidential=confidential,
            integrity=integrity,
            config=config,
        )
        soap_config = config.soap if config is not None else SoapConfig()
        return cls._with_config(transport, soap_config)

    @classmethod
    def _with_config(cls, transport: AuthenticatedTransport, soap_config: SoapConfig) -> "SpnegoSoapConnection":
        return cls(
            transport,
            message_factory=MessageFactory(soap_config.protocol),
            audit_exchanges=soap_config.audit_exchanges,
        )

    @property
    def transport(self) -> AuthenticatedTransport:
        return self._transport

    def call(self, request: SoapMessage, endpoint: Any) -> SoapMessage:
        """Send a request and return the reconstructed response message.

        Args:
            request: Outgoing SOAP message
            endpoint: Destination URL

        Returns:
            New SoapMessage with one body document per top-level response element

        Raises:
            SoapCallError: For every failure, including unexpected ones from
                lower layers; ``kind`` and ``cause`` describe the original error
        """
        logger.debug(f"endpoint={endpoint}")

        start_time = time.time()
        correlation_id = str(uuid.uuid4())
        request_bytes = b""
        response_bytes: Optional[bytes] = None
        soap_action: Optional[str] = None
        state = CallState.IDLE

        try:
            with self._connected_transport() as transport:
                resolved = resolve_request_headers(request.mime_headers)
                soap_action = resolved.get(SOAP_ACTION)
                state = _advance(CallState.HEADERS_RESOLVED)

                transport.set_request_method(resolved.method)
                for name, value in resolved.headers:
                    transport.add_request_header(name, value)

                request_bytes = request.to_bytes()
                transport.connect(str(endpoint), request_bytes)
                state = _advance(CallState.CONNECTED)

                response_bytes = self._read_response(transport)
                state = _advance(CallState.RESPONSE_RECEIVED)

                envelope = validate_envelope(response_bytes)
                state = _advance(CallState.ENVELOPE_VALIDATED)

                body = detach_body(envelope)
                state = _advance(CallState.BODY_EXTRACTED)

                message = reconstitute_body(body, self.message_factory)
                state = _advance(CallState.RECONSTITUTED)
        except Exception as e:
            _advance(CallState.CLOSED_FAILURE)
            kind = categorize_error(e)
            error = SoapCallError(f"SOAP call to {endpoint} failed: {e}", kind, e)

            if self.audit_exchanges:
                log_exchange(str(endpoint), request_bytes, response_bytes, "failure", correlation_id)
            log_audit_event("SOAP_CALL_FAILED", {
                "status": "failure",
                "endpoint": endpoint,
                "soap_action": soap_action,
                "duration": time.time() - start_time,
                "error_kind": kind.value,
                "error_message": str(e),
                "failed_after": state.value,
                "correlation_id": correlation_id,
            })
            raise error from e

        _advance(CallState.CLOSED_SUCCESS)

        if self.audit_exchanges:
            log_exchange(str(endpoint), request_bytes, response_bytes, "success", correlation_id)
        log_audit_event("SOAP_CALL_COMPLETED", {
            "status": "success",
            "endpoint": endpoint,
            "soap_action": soap_action,
            "duration": time.time() - start_time,
            "body_elements": len(message.body),
            "correlation_id": correlation_id,
        })
        return message

    def try_call(self, request: SoapMessage, endpoint: Any) -> CallOutcome:
        """Like call(), but return failures as a CallOutcome instead of raising.

        Example:
            >>> outcome = conn.try_call(request, url)
            >>> if not outcome.is_success:
            ...     print(outcome.error.kind, outcome.error.remediation)
        """
        try:
            return CallOutcome(message=self.call(request, endpoint))
        except SoapCallError as e:
            return CallOutcome(error=create_error_info(e))

    def close(self) -> None:
        """Disconnect the transport. Safe to call repeatedly."""
        if self._transport.is_connected:
            self._transport.disconnect()

    @contextmanager
    def _connected_transport(self) -> Iterator[AuthenticatedTransport]:
        # The transport is released on every exit path, exactly once per call
        try:
            yield self._transport
        finally:
            self._transport.disconnect()

    @staticmethod
    def _read_response(transport: AuthenticatedTransport) -> bytes:
        stream = transport.get_response_stream()
        try:
            return stream.read()
        finally:
            try:
                stream.close()
            except OSError as e:
                logger.debug(f"Ignoring error while closing response stream: {e}")

    def __enter__(self) -> "SpnegoSoapConnection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _advance(state: CallState) -> CallState:
    logger.debug(f"call state -> {state.value}")
    return state
