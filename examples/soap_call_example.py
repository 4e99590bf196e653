"""SPNEGO SOAP call examples.

This module shows how to call a Kerberos-protected SOAP service with a
configured login module, and how to inspect failures either as exceptions
or as CallOutcome values.

Run `kinit` first (or configure a principal and password_env_var in
config/config.json) and set SOAP_ENDPOINT to the service URL.
"""

import logging
import os

from lxml import etree

from spnego_soap import MimeHeaders, SoapCallError, SoapMessage, SpnegoSoapConnection
from spnego_soap.config import load_config
from spnego_soap.logging_audit import configure_logging_from_config

logger = logging.getLogger(__name__)

ENDPOINT = os.getenv("SOAP_ENDPOINT", "https://soap.example.com/service")

REQUEST = b"""<?xml version="1.0" encoding="UTF-8"?>
<SOAP-ENV:Envelope xmlns:SOAP-ENV="http://schemas.xmlsoap.org/soap/envelope/">
  <SOAP-ENV:Body>
    <ns:GetStatus xmlns:ns="urn:example:status"><ns:id>42</ns:id></ns:GetStatus>
  </SOAP-ENV:Body>
</SOAP-ENV:Envelope>"""


def example_1_call_with_login_module(config):
    """Example 1: Call with the default credential cache.

    The request carries a SOAPAction, so it is sent as text/xml.
    """
    print("=" * 80)
    print("EXAMPLE 1: Call with login module 'spnego-client'")
    print("=" * 80)

    request = SoapMessage.from_bytes(
        REQUEST, MimeHeaders([("SOAPAction", '"urn:example:status/GetStatus"')])
    )

    with SpnegoSoapConnection.from_login_module("spnego-client", config=config) as conn:
        try:
            response = conn.call(request, ENDPOINT)
        except SoapCallError as e:
            print(f"Call failed ({e.kind.value}): {e.cause}")
            return

    for element in response.body:
        print(etree.tostring(element, pretty_print=True).decode("utf-8"))


def example_2_inspect_outcome(config):
    """Example 2: Use try_call() and print remediation guidance on failure."""
    print("=" * 80)
    print("EXAMPLE 2: try_call() with structured error information")
    print("=" * 80)

    request = SoapMessage.from_bytes(REQUEST)

    with SpnegoSoapConnection.from_login_module("spnego-client", config=config) as conn:
        outcome = conn.try_call(request, ENDPOINT)

    if outcome.is_success:
        print(f"Response body holds {len(outcome.message.body)} document(s)")
    else:
        print(f"Error kind:   {outcome.error.kind.value}")
        print(f"Error type:   {outcome.error.error_type}")
        print(f"Message:      {outcome.error.message}")
        print(f"Remediation:  {outcome.error.remediation}")


if __name__ == "__main__":
    config = load_config()
    configure_logging_from_config(config.logging)

    example_1_call_with_login_module(config)
    print()
    example_2_inspect_outcome(config)
