"""Unit tests for SpnegoHttpTransport."""

import pytest
import requests
import spnego

from spnego_soap.config.schema import Config, LoginModuleConfig, TransportConfig
from spnego_soap.transport.auth import SpnegoAuth
from spnego_soap.transport.spnego_http import SpnegoHttpTransport
from spnego_soap.utils.exceptions import (
    ConfigurationError,
    TransportError,
    TransportFailure,
)


ENDPOINT = "https://soap.example.com/service"


@pytest.fixture
def mock_session(mocker):
    """Mock requests session returning a 200 response."""
    session = mocker.Mock(spec=requests.Session)
    response = mocker.Mock(spec=requests.Response)
    response.status_code = 200
    response.content = b"<Envelope><Body/></Envelope>"
    response.raise_for_status.return_value = None
    session.request.return_value = response
    return session


@pytest.fixture
def transport(mock_session):
    return SpnegoHttpTransport(session_factory=lambda: mock_session)


class TestConstruction:
    """Test the construction variants."""

    def test_defaults(self):
        transport = SpnegoHttpTransport()

        assert transport.request_method == "GET"
        assert transport.request_headers == []
        assert transport.confidential is True
        assert transport.integrity is True
        assert not transport.is_connected

    def test_explicit_protection_overrides_config(self):
        transport = SpnegoHttpTransport(
            transport_config=TransportConfig(confidential=True, integrity=True),
            confidential=False,
            integrity=False,
        )

        assert transport.confidential is False
        assert transport.integrity is False

    def test_from_login_module(self):
        config = Config(login_modules={
            "svc": LoginModuleConfig(principal="svc@EXAMPLE.COM", service="HOST"),
        })

        transport = SpnegoHttpTransport.from_login_module("svc", config=config)

        assert transport.login_module.principal == "svc@EXAMPLE.COM"
        assert transport.login_module.service == "HOST"

    def test_from_login_module_unknown(self):
        with pytest.raises(ConfigurationError, match="Unknown login module: nope"):
            SpnegoHttpTransport.from_login_module("nope", config=Config())

    def test_from_login_module_username_without_password(self):
        with pytest.raises(ConfigurationError, match="must be given together"):
            SpnegoHttpTransport.from_login_module("svc", username="alice", config=Config())

    def test_from_credentials_requires_handle(self):
        with pytest.raises(ConfigurationError, match="credential handle is required"):
            SpnegoHttpTransport.from_credentials(None)

    def test_from_credentials_disposes_by_default(self, mocker):
        transport = SpnegoHttpTransport.from_credentials(mocker.Mock())

        assert transport.dispose is True


class TestRequestSetup:
    """Test method and header configuration."""

    def test_set_request_method_uppercases(self, transport):
        transport.set_request_method("post")

        assert transport.request_method == "POST"

    def test_headers_kept_in_order(self, transport):
        transport.add_request_header("Content-Type", "text/xml")
        transport.add_request_header("SOAPAction", "urn:a")

        assert transport.request_headers == [("Content-Type", "text/xml"), ("SOAPAction", "urn:a")]

    def test_cannot_change_after_connect(self, transport):
        transport.connect(ENDPOINT, b"<x/>")

        with pytest.raises(TransportError, match="already connected"):
            transport.set_request_method("PUT")
        with pytest.raises(TransportError, match="already connected"):
            transport.add_request_header("X-A", "1")


class TestConnect:
    """Test sending the request."""

    def test_request_sent_with_auth_and_timeouts(self, transport, mock_session):
        # Arrange
        transport.set_request_method("POST")
        transport.add_request_header("Content-Type", "text/xml; charset=UTF-8;")

        # Act
        transport.connect(ENDPOINT, b"<x/>")

        # Assert
        args, kwargs = mock_session.request.call_args
        assert args == ("POST", ENDPOINT)
        assert kwargs["data"] == b"<x/>"
        assert kwargs["headers"] == {"Content-Type": "text/xml; charset=UTF-8;"}
        assert kwargs["timeout"] == (10, 30)
        assert isinstance(kwargs["auth"], SpnegoAuth)
        assert transport.is_connected

    def test_verify_tls_applied_to_session(self, mock_session):
        transport = SpnegoHttpTransport(
            transport_config=TransportConfig(verify_tls=False),
            session_factory=lambda: mock_session,
        )

        transport.connect(ENDPOINT, b"")

        assert mock_session.verify is False

    def test_repeated_headers_are_folded(self, transport, mock_session):
        transport.add_request_header("Accept", "text/xml")
        transport.add_request_header("Accept", "application/soap+xml")

        transport.connect(ENDPOINT, b"")

        headers = mock_session.request.call_args.kwargs["headers"]
        assert headers == {"Accept": "text/xml, application/soap+xml"}

    @pytest.mark.parametrize(
        "endpoint",
        ["", "not a url", "ftp://soap.example.com/x", "https://", "http://[::1"],
    )
    def test_malformed_endpoint(self, transport, mock_session, endpoint):
        with pytest.raises(TransportError) as exc_info:
            transport.connect(endpoint, b"")

        assert exc_info.value.failure == TransportFailure.MALFORMED_ENDPOINT
        mock_session.request.assert_not_called()

    def test_invalid_url_from_requests(self, transport, mock_session):
        mock_session.request.side_effect = requests.exceptions.InvalidURL("bad label")

        with pytest.raises(TransportError) as exc_info:
            transport.connect(ENDPOINT, b"")

        assert exc_info.value.failure == TransportFailure.MALFORMED_ENDPOINT

    def test_connection_error_is_io(self, transport, mock_session):
        mock_session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(TransportError, match="refused") as exc_info:
            transport.connect(ENDPOINT, b"")

        assert exc_info.value.failure == TransportFailure.IO
        assert not transport.is_connected

    def test_timeout_is_io(self, transport, mock_session):
        mock_session.request.side_effect = requests.Timeout("read timed out")

        with pytest.raises(TransportError) as exc_info:
            transport.connect(ENDPOINT, b"")

        assert exc_info.value.failure == TransportFailure.IO

    def test_http_error_status_is_io(self, transport, mock_session, mocker):
        response = mocker.Mock(spec=requests.Response)
        response.status_code = 500
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
        mock_session.request.return_value = response

        with pytest.raises(TransportError, match="HTTP 500") as exc_info:
            transport.connect(ENDPOINT, b"")

        assert exc_info.value.failure == TransportFailure.IO

    def test_non_latin1_header_is_io(self, transport, mock_session):
        error = UnicodeEncodeError("latin-1", '"urn:€"', 5, 6, "ordinal not in range(256)")
        mock_session.request.side_effect = error
        transport.add_request_header("SOAPAction", '"urn:€"')

        with pytest.raises(TransportError, match="latin-1") as exc_info:
            transport.connect(ENDPOINT, b"")

        assert exc_info.value.failure == TransportFailure.IO
        assert exc_info.value.__cause__ is error
        assert not transport.is_connected

    def test_negotiation_error_propagates(self, transport, mock_session):
        error = TransportError("rejected", TransportFailure.NEGOTIATION)
        mock_session.request.side_effect = error

        with pytest.raises(TransportError) as exc_info:
            transport.connect(ENDPOINT, b"")

        assert exc_info.value is error

    def test_double_connect_rejected(self, transport):
        transport.connect(ENDPOINT, b"")

        with pytest.raises(TransportError, match="Already connected"):
            transport.connect(ENDPOINT, b"")


class TestResponseAndDisconnect:
    """Test reading the response and releasing the transport."""

    def test_response_stream(self, transport):
        transport.connect(ENDPOINT, b"")

        assert transport.get_response_stream().read() == b"<Envelope><Body/></Envelope>"

    def test_response_stream_requires_connect(self, transport):
        with pytest.raises(TransportError, match="No response available"):
            transport.get_response_stream()

    def test_disconnect_resets_state(self, transport, mock_session):
        transport.set_request_method("POST")
        transport.add_request_header("SOAPAction", "urn:a")
        transport.connect(ENDPOINT, b"")

        transport.disconnect()

        mock_session.close.assert_called_once()
        assert not transport.is_connected
        assert transport.request_method == "GET"
        assert transport.request_headers == []

    def test_disconnect_is_idempotent(self, transport, mock_session):
        transport.connect(ENDPOINT, b"")

        transport.disconnect()
        transport.disconnect()

        mock_session.close.assert_called_once()

    def test_disposed_credentials_prevent_reconnect(self, mock_session, mocker):
        transport = SpnegoHttpTransport(
            credentials=mocker.Mock(),
            dispose=True,
            session_factory=lambda: mock_session,
        )
        transport.connect(ENDPOINT, b"")
        transport.disconnect()

        with pytest.raises(TransportError) as exc_info:
            transport.connect(ENDPOINT, b"")

        assert exc_info.value.failure == TransportFailure.PRIVILEGED_OPERATION

    def test_kept_credentials_allow_reconnect(self, mock_session, mocker):
        transport = SpnegoHttpTransport(
            credentials=mocker.Mock(),
            dispose=False,
            session_factory=lambda: mock_session,
        )
        transport.connect(ENDPOINT, b"")
        transport.disconnect()

        transport.connect(ENDPOINT, b"")

        assert transport.is_connected


class TestAuthCreation:
    """Test how the auth hook is derived from the transport settings."""

    def _auth(self, transport, mock_session):
        transport.connect(ENDPOINT, b"")
        return mock_session.request.call_args.kwargs["auth"]

    def test_login_module_principal_and_env_password(self, mock_session, monkeypatch):
        monkeypatch.setenv("SVC_PASSWORD", "s3cret")
        transport = SpnegoHttpTransport(
            login_module=LoginModuleConfig(
                principal="svc@EXAMPLE.COM",
                password_env_var="SVC_PASSWORD",
                protocol="kerberos",
            ),
            session_factory=lambda: mock_session,
        )

        auth = self._auth(transport, mock_session)

        assert auth.username == "svc@EXAMPLE.COM"
        assert auth.password == "s3cret"
        assert auth.protocol == "kerberos"

    def test_explicit_username_overrides_principal(self, mock_session):
        transport = SpnegoHttpTransport(
            login_module=LoginModuleConfig(principal="svc@EXAMPLE.COM"),
            username="alice@EXAMPLE.COM",
            password="pw",
            session_factory=lambda: mock_session,
        )

        auth = self._auth(transport, mock_session)

        assert auth.username == "alice@EXAMPLE.COM"
        assert auth.password == "pw"

    def test_credential_handle_used_as_username(self, mock_session, mocker):
        credential = mocker.Mock()
        transport = SpnegoHttpTransport(credentials=credential, session_factory=lambda: mock_session)

        auth = self._auth(transport, mock_session)

        assert auth.username is credential
        assert auth.password is None

    def test_protection_flags(self, mock_session):
        transport = SpnegoHttpTransport(
            confidential=False,
            integrity=True,
            session_factory=lambda: mock_session,
        )

        auth = self._auth(transport, mock_session)

        assert not auth.context_req & spnego.ContextReq.confidentiality
        assert auth.context_req & spnego.ContextReq.integrity
        assert auth.context_req & spnego.ContextReq.mutual_auth
