"""Audit trail functionality for the SPNEGO SOAP client.

This module provides structured audit logging for SOAP calls and, when
enabled, the complete request/response envelopes of each exchange.
"""

import time
import uuid
from typing import Any, Dict, Optional

from .logger import get_logger

logger = get_logger(__name__)


def log_audit_event(event_type: str, details: Dict[str, Any]) -> None:
    """Log an audit trail event.

    Creates a structured audit log entry with standard fields. Audit events are
    logged at INFO level for successful operations and ERROR level for failures.

    Args:
        event_type: Type of operation (e.g., "SOAP_CALL_COMPLETED", "SOAP_CALL_FAILED")
        details: Dictionary with event details. Common fields include:
                - status: "success" or "failure"
                - endpoint: Destination URL
                - soap_action: SOAPAction sent, if any
                - duration: Operation duration in seconds
                - body_elements: Number of documents in the response body
                - error_kind: ErrorKind of a failure
                - error_message: Error details (if status is failure)
                - correlation_id: Optional correlation ID for tracking related events

    Example:
        >>> log_audit_event("SOAP_CALL_COMPLETED", {
        ...     "endpoint": "https://soap.example.com/service",
        ...     "status": "success",
        ...     "duration": 0.42,
        ...     "body_elements": 1,
        ... })
    """
    if "timestamp" not in details:
        details["timestamp"] = time.time()

    if "correlation_id" not in details:
        details["correlation_id"] = str(uuid.uuid4())

    message_parts = [f"AUDIT [{event_type}]"]

    field_order = [
        "status",
        "endpoint",
        "soap_action",
        "duration",
        "body_elements",
        "error_kind",
        "error_message",
        "correlation_id",
    ]

    for field in field_order:
        if field in details:
            value = details[field]
            if field == "duration" and isinstance(value, (int, float)):
                message_parts.append(f"{field}={value:.2f}s")
            else:
                message_parts.append(f"{field}={value}")

    for key, value in details.items():
        if key not in field_order and key != "timestamp":
            message_parts.append(f"{key}={value}")

    audit_message = " | ".join(message_parts)

    status = details.get("status", "unknown")
    if status == "failure":
        logger.error(audit_message)
    else:
        logger.info(audit_message)


def log_exchange(
    endpoint: str,
    request: bytes,
    response: Optional[bytes],
    status: str = "success",
    correlation_id: Optional[str] = None,
) -> None:
    """Log a complete SOAP exchange with request and response envelopes.

    The summary line is logged at INFO level; the envelopes themselves at
    DEBUG level to avoid cluttering INFO logs.

    Args:
        endpoint: Destination URL
        request: Serialized request envelope
        response: Raw response payload (None if no response was received)
        status: Exchange status ("success" or "failure")
        correlation_id: ID shared with the matching audit event

    Example:
        >>> log_exchange("https://soap.example.com/service", request_xml, response_xml)
    """
    correlation_id = correlation_id or str(uuid.uuid4())
    response_size = len(response) if response is not None else 0

    logger.info(
        f"EXCHANGE | endpoint={endpoint} | "
        f"status={status} | "
        f"correlation_id={correlation_id} | "
        f"request_size={len(request)} bytes | "
        f"response_size={response_size} bytes"
    )

    logger.debug(
        f"EXCHANGE REQUEST | correlation_id={correlation_id}\n"
        f"{request.decode('utf-8', errors='replace')}"
    )

    if response is not None:
        logger.debug(
            f"EXCHANGE RESPONSE | correlation_id={correlation_id}\n"
            f"{response.decode('utf-8', errors='replace')}"
        )
