"""
secevent.exceptions — Error taxonomy for SET construction and delivery.

Only TransmissionError may be retryable. Every other error is fatal to
the invocation and must surface to the host unchanged.
"""

from __future__ import annotations

from typing import Any

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 502, 503, 504})


class SecEventError(Exception):
    """Base error for secevent operations."""


class ParameterError(SecEventError):
    """A required parameter is missing or holds a value outside its vocabulary."""


class SubjectParseError(SecEventError):
    """The subject identifier could not be decoded as JSON."""


class CredentialError(SecEventError):
    """A required secret (signing key or key id) is unavailable."""


class SigningError(SecEventError):
    """Key material could not be loaded or the token could not be signed."""


class TransmissionError(SecEventError):
    """
    Raised when the receiver answers with a transient HTTP status.

    The retry decision is carried in ``retryable`` and set where the
    response is first observed, so classification never needs to parse
    the message text.

    Attributes:
        status_code: HTTP status returned by the receiver.
        status_text: HTTP reason phrase returned by the receiver.
        body:        Raw response body.
        retryable:   True when the host should schedule another attempt.
    """

    def __init__(
        self,
        *,
        status_code: int,
        status_text: str,
        body: str = "",
        retryable: bool | None = None,
    ) -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        self.retryable = (
            status_code in RETRYABLE_STATUS_CODES if retryable is None else retryable
        )
        super().__init__(f"SET transmission failed: {status_code} {status_text}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "errorType": type(self).__name__,
            "errorMessage": str(self),
            "statusCode": self.status_code,
            "statusText": self.status_text,
            "retryable": self.retryable,
        }
