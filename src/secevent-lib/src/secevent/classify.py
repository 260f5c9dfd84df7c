"""
secevent.classify — Post-failure retry decision.

The classifier only looks at the exception produced by a prior attempt.
TransmissionError carries its own `retryable` flag; everything else is
terminal and is re-raised unchanged.
"""

from __future__ import annotations

import json
import re
from typing import Any

from aws_lambda_powertools import Logger

from secevent.exceptions import SecEventError, TransmissionError

logger = Logger(service="secevent-lib")

RETRY_REQUESTED = {"status": "retry_requested"}

_TRANSMISSION_MESSAGE = re.compile(r"^SET transmission failed: (?P<code>\d{3}) ?(?P<text>.*)$")


def is_retryable(error: BaseException) -> bool:
    return isinstance(error, TransmissionError) and error.retryable


def classify_error(error: BaseException) -> dict[str, str]:
    """Return a retry request for transient failures, otherwise re-raise `error`."""
    if is_retryable(error):
        logger.info(
            "Retry requested",
            extra={"status_code": getattr(error, "status_code", None)},
        )
        return dict(RETRY_REQUESTED)
    logger.warning("Non-retryable failure", extra={"error_type": type(error).__name__})
    raise error


def _decode_cause(payload: dict[str, Any]) -> dict[str, Any]:
    """Unwrap the Step Functions `{"Error", "Cause"}` catch shape."""
    cause = payload.get("Cause")
    if isinstance(cause, str):
        try:
            decoded = json.loads(cause)
        except json.JSONDecodeError:
            return {"errorType": payload.get("Error"), "errorMessage": cause}
        if isinstance(decoded, dict):
            return decoded
    return {"errorType": payload.get("Error"), "errorMessage": str(cause or "")}


def _from_message(message: str) -> TransmissionError | None:
    match = _TRANSMISSION_MESSAGE.match(message)
    if not match:
        return None
    return TransmissionError(status_code=int(match.group("code")), status_text=match.group("text"))


def _status_code(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    return None


def error_from_payload(payload: Any) -> BaseException:
    """Rebuild an exception from what the host hands back to the error entry point.

    Accepted shapes:
      - an exception instance (returned as-is)
      - TransmissionError.to_dict() output
      - a Lambda error `{"errorType", "errorMessage"}`
      - a Step Functions catch `{"Error", "Cause"}`
      - a bare message string

    Malformed structured fields never raise; they fall back to the message.
    """
    if isinstance(payload, BaseException):
        return payload
    if isinstance(payload, str):
        return _from_message(payload) or SecEventError(payload)
    if not isinstance(payload, dict):
        return SecEventError(repr(payload))

    if "Cause" in payload or "Error" in payload:
        payload = _decode_cause(payload)

    error_type = payload.get("errorType")
    message = str(payload.get("errorMessage") or "")

    if error_type == TransmissionError.__name__:
        status_code = _status_code(payload.get("statusCode"))
        if status_code is not None:
            retryable = payload.get("retryable")
            return TransmissionError(
                status_code=status_code,
                status_text=str(payload.get("statusText") or ""),
                retryable=retryable if isinstance(retryable, bool) else None,
            )
        # Native Lambda error payloads only carry the message.
        rebuilt = _from_message(message)
        if rebuilt is not None:
            return rebuilt

    return SecEventError(message or json.dumps(payload, default=str))
