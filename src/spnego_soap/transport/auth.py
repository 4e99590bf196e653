"""SPNEGO authentication hook for requests.

SpnegoAuth attaches a Negotiate token to the outgoing request and, when the
server answers with its own token, completes mutual authentication. Security
contexts come from pyspnego, which drives Kerberos (GSSAPI/SSPI) or NTLM.
"""

import base64
import logging
from typing import Any, Optional
from urllib.parse import urlparse

import requests
import spnego
from requests.auth import AuthBase
from spnego.exceptions import SpnegoError

from spnego_soap.utils.exceptions import TransportError, TransportFailure

logger = logging.getLogger(__name__)


def build_context_req(
    confidential: bool = True,
    integrity: bool = True,
    mutual_authentication: bool = True,
    delegate: bool = False,
) -> spnego.ContextReq:
    """Map protection options onto pyspnego context requirement flags.

    Replay and sequence detection are always requested.

    Args:
        confidential: Request confidentiality (wrap/encrypt) support
        integrity: Request message integrity (sign) support
        mutual_authentication: Require the server to authenticate back
        delegate: Delegate the client credential to the server

    Returns:
        Combined ContextReq flags

    Example:
        >>> flags = build_context_req(confidential=False)
        >>> bool(flags & spnego.ContextReq.confidentiality)
        False
    """
    flags = spnego.ContextReq.replay_detect | spnego.ContextReq.sequence_detect
    if confidential:
        flags |= spnego.ContextReq.confidentiality
    if integrity:
        flags |= spnego.ContextReq.integrity
    if mutual_authentication:
        flags |= spnego.ContextReq.mutual_auth
    if delegate:
        flags |= spnego.ContextReq.delegate
    return flags


def _extract_token(header: Optional[str], scheme: str) -> Optional[bytes]:
    """Return the decoded token of ``scheme`` in a WWW-Authenticate header."""
    if not header:
        return None
    for challenge in header.split(","):
        parts = challenge.strip().split(None, 1)
        if len(parts) == 2 and parts[0].lower() == scheme.lower():
            try:
                return base64.b64decode(parts[1].strip())
            except ValueError as e:
                raise TransportError(
                    f"Server sent an invalid {scheme} token: {e}",
                    TransportFailure.NEGOTIATION,
                ) from e
    return None


class SpnegoAuth(AuthBase):
    """Negotiate authentication for a single request.

    The initial token is sent preemptively, so a SOAP request is posted once.
    A 401 answer means the server refused the token; there is no second round.

    Attributes:
        username: Principal name or pyspnego credential object (None uses the cache)
        password: Password for username, if any
        service: Service class of the target principal
        protocol: negotiate, kerberos, or ntlm
        context_req: Requested context flags

    Example:
        >>> auth = SpnegoAuth(context_req=build_context_req())
        >>> session.post(url, data=body, auth=auth)
    """

    def __init__(
        self,
        username: Any = None,
        password: Optional[str] = None,
        service: str = "HTTP",
        protocol: str = "negotiate",
        context_req: Optional[spnego.ContextReq] = None,
    ) -> None:
        self.username = username
        self.password = password
        self.service = service
        self.protocol = protocol
        self.context_req = context_req if context_req is not None else build_context_req()
        self.scheme = "NTLM" if protocol == "ntlm" else "Negotiate"
        self._context = None

    @property
    def mutual_authentication(self) -> bool:
        return bool(self.context_req & spnego.ContextReq.mutual_auth)

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        hostname = urlparse(request.url).hostname or "unspecified"

        try:
            self._context = spnego.client(
                self.username,
                self.password,
                hostname=hostname,
                service=self.service,
                context_req=self.context_req,
                protocol=self.protocol,
            )
        except (SpnegoError, ImportError, ValueError) as e:
            raise TransportError(
                f"Could not acquire credentials for {self.service}/{hostname}: {e}",
                TransportFailure.PRIVILEGED_OPERATION,
            ) from e

        try:
            token = self._context.step()
        except SpnegoError as e:
            raise TransportError(
                f"Could not create {self.scheme} token for {self.service}/{hostname}: {e}",
                TransportFailure.NEGOTIATION,
            ) from e
        except (ImportError, ValueError) as e:
            raise TransportError(
                f"No usable {self.protocol} provider for {self.service}/{hostname}: {e}",
                TransportFailure.PRIVILEGED_OPERATION,
            ) from e

        request.headers["Authorization"] = (
            f"{self.scheme} {base64.b64encode(token or b'').decode('ascii')}"
        )
        request.register_hook("response", self._handle_response)
        logger.debug("Attached %s token for %s/%s", self.scheme, self.service, hostname)
        return request

    def _handle_response(self, response: requests.Response, **kwargs: Any) -> requests.Response:
        if response.status_code == 401:
            raise TransportError(
                f"Server at {response.url} rejected the {self.scheme} token (HTTP 401)",
                TransportFailure.NEGOTIATION,
            )

        # Error statuses are reported by the transport, not as auth failures
        if not response.ok:
            return response

        server_token = _extract_token(response.headers.get("WWW-Authenticate"), self.scheme)

        if server_token is None:
            if self.mutual_authentication and not self._context.complete:
                raise TransportError(
                    f"Server at {response.url} did not return a {self.scheme} token; "
                    "mutual authentication failed",
                    TransportFailure.NEGOTIATION,
                )
            return response

        try:
            self._context.step(server_token)
        except SpnegoError as e:
            raise TransportError(
                f"Mutual authentication with {response.url} failed: {e}",
                TransportFailure.NEGOTIATION,
            ) from e

        if self.mutual_authentication and not self._context.complete:
            raise TransportError(
                f"Security context with {response.url} is incomplete after the server token",
                TransportFailure.NEGOTIATION,
            )

        logger.debug("%s mutual authentication completed", self.scheme)
        return response
