"""
secevent.transmitter — Push delivery of a signed SET to a receiver endpoint.

Outcome mapping:
    2xx                   -> TransmissionResult(status=success)
    429, 502, 503, 504    -> raise TransmissionError (retryable)
    any other status      -> TransmissionResult(status=failed)

Transport exceptions raised by requests (connection refused, DNS, TLS,
timeout) propagate unchanged and are terminal.
"""

from __future__ import annotations

import requests
from aws_lambda_powertools import Logger

from secevent.exceptions import RETRYABLE_STATUS_CODES, TransmissionError
from secevent.models import (
    SECEVENT_CONTENT_TYPE,
    DeliveryTarget,
    SetDefaults,
    TransmissionResult,
    TransmissionStatus,
)

logger = Logger(service="secevent-lib")


def build_url(address: str, suffix: str | None = None) -> str:
    """Join address and suffix with exactly one slash at the boundary."""
    if not suffix:
        return address
    base = address[:-1] if address.endswith("/") else address
    tail = suffix[1:] if suffix.startswith("/") else suffix
    return f"{base}/{tail}"


def _authorization(auth_token: str) -> str:
    if auth_token.lower().startswith("bearer "):
        return auth_token
    return f"Bearer {auth_token}"


def build_headers(target: DeliveryTarget, defaults: SetDefaults | None = None) -> dict[str, str]:
    defaults = defaults or SetDefaults()
    headers = {
        "Content-Type": SECEVENT_CONTENT_TYPE,
        "Accept": "application/json",
        "User-Agent": target.user_agent or defaults.user_agent,
    }
    if target.auth_token:
        headers["Authorization"] = _authorization(target.auth_token)
    return headers


def transmit_set(
    token: str,
    target: DeliveryTarget,
    defaults: SetDefaults | None = None,
) -> TransmissionResult:
    """POST a compact SET to the receiver and classify the response."""
    defaults = defaults or SetDefaults()
    url = build_url(target.address, target.suffix)

    response = requests.post(
        url,
        data=token,
        headers=build_headers(target, defaults),
        timeout=defaults.timeout_seconds,
    )
    body = response.text
    status_code = response.status_code

    if 200 <= status_code < 300:
        logger.info("SET delivered", extra={"url": url, "status_code": status_code})
        return TransmissionResult(
            status=TransmissionStatus.SUCCESS, status_code=status_code, body=body
        )

    if status_code in RETRYABLE_STATUS_CODES:
        logger.warning(
            "SET delivery hit a transient status",
            extra={"url": url, "status_code": status_code, "reason": response.reason},
        )
        raise TransmissionError(
            status_code=status_code,
            status_text=response.reason or "",
            body=body,
            retryable=True,
        )

    logger.error(
        "SET delivery rejected",
        extra={"url": url, "status_code": status_code, "reason": response.reason},
    )
    return TransmissionResult(status=TransmissionStatus.FAILED, status_code=status_code, body=body)
