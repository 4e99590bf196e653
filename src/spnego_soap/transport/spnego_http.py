"""SPNEGO-authenticated HTTP transport built on requests.

Each connect() opens one requests.Session, posts the request with a Negotiate
token and keeps the response until disconnect() closes the session. There is
no pooling and no retry: one transport acquisition per logical call.
"""

import io
import logging
import os
from typing import Any, BinaryIO, Callable, List, Optional, Tuple
from urllib.parse import urlparse

import requests

from spnego_soap.config.manager import get_login_module, load_config
from spnego_soap.config.schema import Config, LoginModuleConfig, TransportConfig
from spnego_soap.transport.auth import SpnegoAuth, build_context_req
from spnego_soap.transport.base import AuthenticatedTransport
from spnego_soap.utils.exceptions import (
    ConfigurationError,
    TransportError,
    TransportFailure,
)

logger = logging.getLogger(__name__)

DEFAULT_METHOD = "GET"


class SpnegoHttpTransport(AuthenticatedTransport):
    """HTTP transport authenticating with SPNEGO (Kerberos) tokens.

    Use the classmethods for the usual construction variants:
    from_login_module() for a configured login module (optionally with an
    explicit username and password) and from_credentials() for an already
    acquired credential handle.

    Attributes:
        login_module: Login module settings (service, protocol, principal)
        transport_config: TLS verification, timeouts and protection options
        confidential: Confidentiality requested from the security context
        integrity: Message integrity requested from the security context
        dispose: Whether the credential handle is dropped on disconnect

    Example:
        >>> transport = SpnegoHttpTransport.from_login_module("spnego-client")
        >>> transport.set_request_method("POST")
        >>> transport.connect("https://soap.example.com/service", body)
        >>> data = transport.get_response_stream().read()
        >>> transport.disconnect()
    """

    def __init__(
        self,
        login_module: Optional[LoginModuleConfig] = None,
        transport_config: Optional[TransportConfig] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        credentials: Any = None,
        dispose: bool = False,
        confidential: Optional[bool] = None,
        integrity: Optional[bool] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self.login_module = login_module or LoginModuleConfig()
        self.transport_config = transport_config or TransportConfig()
        self.confidential = (
            self.transport_config.confidential if confidential is None else confidential
        )
        self.integrity = self.transport_config.integrity if integrity is None else integrity
        self.dispose = dispose

        self._username = username
        self._password = password
        self._credentials = credentials
        self._disposed = False
        self._session_factory = session_factory

        self._method = DEFAULT_METHOD
        self._headers: List[Tuple[str, str]] = []
        self._session: Optional[requests.Session] = None
        self._response: Optional[requests.Response] = None
        self._connected = False

    @classmethod
    def from_login_module(
        cls,
        name: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        config: Optional[Config] = None,
    ) -> "SpnegoHttpTransport":
        """Create a transport for a configured login module.

        Without username and password the principal and password of the login
        module are used, or the default credential cache when it names none.

        Args:
            name: Login module name in the configuration
            username: Principal overriding the login module's principal
            password: Password for username
            config: Loaded configuration (load_config() when omitted)

        Returns:
            Configured SpnegoHttpTransport

        Raises:
            ConfigurationError: If the login module is unknown or only one of
                username and password is given
        """
        if (username is None) != (password is None):
            raise ConfigurationError(
                "username and password must be given together for login module "
                f"'{name}'"
            )

        config = config or load_config()
        login_module = get_login_module(config, name)

        logger.info(f"Using login module '{name}' ({login_module.protocol})")
        return cls(
            login_module=login_module,
            transport_config=config.transport,
            username=username,
            password=password,
        )

    @classmethod
    def from_credentials(
        cls,
        credentials: Any,
        dispose: bool = True,
        confidential: Optional[bool] = None,
        integrity: Optional[bool] = None,
        config: Optional[Config] = None,
    ) -> "SpnegoHttpTransport":
        """Create a transport for an existing credential handle.

        Args:
            credentials: pyspnego credential (or list of them) used to
                initiate the security context
            dispose: Drop the credential on disconnect; the transport cannot
                negotiate again afterwards
            confidential: Request confidentiality (transport config default when None)
            integrity: Request message integrity (transport config default when None)
            config: Optional configuration for transport settings

        Returns:
            Configured SpnegoHttpTransport

        Raises:
            ConfigurationError: If credentials is None
        """
        if credentials is None:
            raise ConfigurationError("A credential handle is required")

        transport_config = config.transport if config is not None else None
        return cls(
            transport_config=transport_config,
            credentials=credentials,
            dispose=dispose,
            confidential=confidential,
            integrity=integrity,
        )

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def request_method(self) -> str:
        return self._method

    @property
    def request_headers(self) -> List[Tuple[str, str]]:
        return list(self._headers)

    def set_request_method(self, method: str) -> None:
        if self._connected:
            raise TransportError("Cannot change request method: already connected")
        self._method = method.upper()

    def add_request_header(self, name: str, value: str) -> None:
        if self._connected:
            raise TransportError("Cannot add request header: already connected")
        self._headers.append((name, value))

    def connect(self, endpoint: str, body: bytes) -> None:
        """Negotiate and send the request; keep the response for reading.

        Args:
            endpoint: Destination URL (http or https)
            body: Request body bytes

        Raises:
            TransportError: MALFORMED_ENDPOINT, IO, NEGOTIATION or PRIVILEGED_OPERATION
        """
        if self._connected:
            raise TransportError("Already connected", TransportFailure.IO)

        if self._disposed:
            raise TransportError(
                "Credential handle has been disposed; create a new transport",
                TransportFailure.PRIVILEGED_OPERATION,
            )

        url = _validate_endpoint(endpoint)
        auth = self._create_auth()

        session = self._session_factory()
        session.verify = self.transport_config.verify_tls
        self._session = session

        logger.debug(f"{self._method} {url} ({len(body)} bytes)")

        try:
            response = session.request(
                self._method,
                url,
                data=body,
                headers=self._merged_headers(),
                auth=auth,
                timeout=(self.transport_config.timeout_connect, self.transport_config.timeout_read),
            )
            response.raise_for_status()
        except TransportError:
            raise
        except (
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            requests.exceptions.InvalidURL,
        ) as e:
            raise TransportError(
                f"Malformed endpoint URL: {url}: {e}",
                TransportFailure.MALFORMED_ENDPOINT,
            ) from e
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise TransportError(
                f"HTTP {status} from {url}",
                TransportFailure.IO,
            ) from e
        except requests.RequestException as e:
            raise TransportError(
                f"Request to {url} failed: {e}",
                TransportFailure.IO,
            ) from e
        except (UnicodeError, ValueError) as e:
            # http.client only accepts Latin-1 header values
            raise TransportError(
                f"Could not send request to {url}: {e}",
                TransportFailure.IO,
            ) from e

        self._response = response
        self._connected = True
        logger.debug(f"Connected to {url}: HTTP {response.status_code}")

    def get_response_stream(self) -> BinaryIO:
        if self._response is None:
            raise TransportError("No response available: not connected", TransportFailure.IO)
        return io.BytesIO(self._response.content)

    def disconnect(self) -> None:
        """Close the session and reset request state. Idempotent."""
        if self._session is not None:
            self._session.close()
            self._session = None

        if self.dispose and self._credentials is not None:
            self._credentials = None
            self._disposed = True
            logger.debug("Credential handle disposed")

        self._response = None
        self._headers.clear()
        self._method = DEFAULT_METHOD
        self._connected = False

    def _create_auth(self) -> SpnegoAuth:
        username: Any = self._credentials
        password = None

        if username is None:
            username = self._username or self.login_module.principal
            password = self._password
            if password is None and self.login_module.password_env_var:
                password = os.getenv(self.login_module.password_env_var)

        context_req = build_context_req(
            confidential=self.confidential,
            integrity=self.integrity,
            mutual_authentication=self.transport_config.mutual_authentication,
            delegate=self.login_module.delegate,
        )
        return SpnegoAuth(
            username=username,
            password=password,
            service=self.login_module.service,
            protocol=self.login_module.protocol,
            context_req=context_req,
        )

    def _merged_headers(self) -> dict[str, str]:
        # Repeated header names are folded into one comma-separated value
        merged: dict[str, str] = {}
        for name, value in self._headers:
            if name in merged:
                merged[name] = f"{merged[name]}, {value}"
            else:
                merged[name] = value
        return merged


def _validate_endpoint(endpoint: Any) -> str:
    """Return the endpoint as a URL string.

    Raises:
        TransportError: MALFORMED_ENDPOINT if it is not an absolute http(s) URL
    """
    url = str(endpoint) if endpoint is not None else ""
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as e:
        raise TransportError(
            f"Malformed endpoint URL: {url!r}: {e}",
            TransportFailure.MALFORMED_ENDPOINT,
        ) from e

    if parsed.scheme not in ("http", "https") or not hostname:
        raise TransportError(
            f"Malformed endpoint URL: {url!r}. Must be an absolute http:// or https:// URL",
            TransportFailure.MALFORMED_ENDPOINT,
        )
    return url
