"""Integration test fixtures and configuration.

This module provides fixtures for integration tests, including:
- A mock Negotiate-protected SOAP endpoint served over real HTTP
- A stand-in pyspnego security context, since no KDC is available

The mock server fixture starts the Flask app once per session in a
background thread and shuts it down when the session ends.
"""

import logging
import socket
import threading
import time
from typing import Generator

import pytest
import requests
from werkzeug.serving import make_server

from mock_soap_server import SERVER_TOKEN, app, received


logger = logging.getLogger(__name__)


# =============================================================================
# Utility Functions
# =============================================================================


def find_free_port() -> int:
    """Find an available port on localhost.

    Returns:
        int: An available port number.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        s.listen(1)
        port = s.getsockname()[1]
    return port


def wait_for_server(url: str, timeout: float = 10.0, interval: float = 0.1) -> bool:
    """Wait for server to become available.

    Args:
        url: URL to check (e.g., health endpoint).
        timeout: Maximum time to wait in seconds.
        interval: Time between checks in seconds.

    Returns:
        bool: True if server became available, False if timeout.
    """
    start_time = time.time()
    while time.time() - start_time < timeout:
        try:
            response = requests.get(url, timeout=1)
            if response.status_code == 200:
                return True
        except requests.exceptions.RequestException:
            pass
        time.sleep(interval)
    return False


class FakeSecurityContext:
    """Security context that produces a fixed token and accepts the mock server's."""

    def __init__(self, *args, **kwargs):
        self.args = args
        self.kwargs = kwargs
        self.complete = False
        self.server_tokens = []

    def step(self, in_token=None):
        if in_token is None:
            return b"mock-client-token"
        self.server_tokens.append(in_token)
        self.complete = in_token == SERVER_TOKEN
        return None


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def mock_server_url() -> Generator[str, None, None]:
    """Session-scoped mock SOAP server.

    Yields:
        str: Base URL (e.g., "http://127.0.0.1:8080").
    """
    host = "127.0.0.1"
    port = find_free_port()
    server = make_server(host, port, app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    base_url = f"http://{host}:{port}"
    if not wait_for_server(f"{base_url}/health"):
        server.shutdown()
        pytest.fail(f"Mock SOAP server failed to start at {base_url}")

    logger.info(f"Mock SOAP server started at {base_url}")

    yield base_url

    server.shutdown()
    thread.join(timeout=5)
    logger.info("Mock SOAP server stopped")


@pytest.fixture
def security_contexts(mocker):
    """Patch pyspnego so every transport gets a FakeSecurityContext.

    Returns:
        list: Contexts created during the test, in order.
    """
    contexts = []

    def _client(*args, **kwargs):
        context = FakeSecurityContext(*args, **kwargs)
        contexts.append(context)
        return context

    mocker.patch("spnego_soap.transport.auth.spnego.client", side_effect=_client)
    return contexts


@pytest.fixture
def received_request():
    """Headers and body of the last request the mock server accepted."""
    received.clear()
    return received
