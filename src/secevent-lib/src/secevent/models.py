"""
secevent.models — Value types for a CAEP device compliance change SET.

Everything here is immutable and built fresh per invocation:
    SetDefaults            — named fallbacks for issuer, algorithm, user agent
    DeviceComplianceChange — the event payload carried under `events`
    SigningKey             — private key material, algorithm and key id
    DeliveryTarget         — receiver address, suffix and request credentials
    TransmissionResult     — outcome of a delivery that did not raise
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

DEVICE_COMPLIANCE_CHANGE_EVENT = (
    "https://schemas.openid.net/secevent/caep/event-type/device-compliance-change"
)

SECEVENT_CONTENT_TYPE = "application/secevent+jwt"
SECEVENT_TOKEN_TYPE = "secevent+jwt"

DEFAULT_ISSUER = "https://sgnl.ai/"
DEFAULT_SIGNING_ALGORITHM = "RS256"
DEFAULT_USER_AGENT = "SGNL-Action-Framework/1.0"


# ---------------------------------------------------------------------------
# Enums — constrained vocabulary
# ---------------------------------------------------------------------------


class ComplianceStatus(StrEnum):
    COMPLIANT = "compliant"
    NOT_COMPLIANT = "not-compliant"


class TransmissionStatus(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SetDefaults:
    """Fallback values applied when the caller leaves a parameter unset.

    Caller-supplied values always win; environment overrides only replace
    these baked-in defaults.
    """

    issuer: str = DEFAULT_ISSUER
    signing_algorithm: str = DEFAULT_SIGNING_ALGORITHM
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float | None = None  # None = transport default (no timeout)

    @classmethod
    def from_env(cls) -> SetDefaults:
        timeout = os.environ.get("SET_TRANSMIT_TIMEOUT_SECONDS")
        return cls(
            issuer=os.environ.get("SET_DEFAULT_ISSUER") or DEFAULT_ISSUER,
            signing_algorithm=(
                os.environ.get("SET_DEFAULT_SIGNING_ALGORITHM") or DEFAULT_SIGNING_ALGORITHM
            ),
            user_agent=os.environ.get("SET_DEFAULT_USER_AGENT") or DEFAULT_USER_AGENT,
            timeout_seconds=float(timeout) if timeout else None,
        )


# ---------------------------------------------------------------------------
# Reasons — plain text or localized mapping
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlainReason:
    text: str

    def to_claim(self) -> str:
        return self.text


@dataclass(frozen=True)
class LocalizedReason:
    """Reason decoded from JSON into a composite value.

    Usually a ``{locale: text}`` mapping, but any JSON object or array is
    accepted as-is; no schema is enforced on the locale keys.
    """

    values: dict[str, Any] | list[Any]

    def to_claim(self) -> dict[str, Any] | list[Any]:
        return self.values


Reason = PlainReason | LocalizedReason


# ---------------------------------------------------------------------------
# Event payload
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DeviceComplianceChange:
    """CAEP device-compliance-change event payload."""

    event_timestamp: int  # Unix seconds
    previous_status: ComplianceStatus
    current_status: ComplianceStatus
    initiating_entity: str | None = None
    reason_admin: Reason | None = None
    reason_user: Reason | None = None

    def to_claims(self) -> dict[str, Any]:
        claims: dict[str, Any] = {
            "event_timestamp": self.event_timestamp,
            "previous_status": str(self.previous_status),
            "current_status": str(self.current_status),
        }
        if self.initiating_entity:
            claims["initiating_entity"] = self.initiating_entity
        if self.reason_admin is not None:
            claims["reason_admin"] = self.reason_admin.to_claim()
        if self.reason_user is not None:
            claims["reason_user"] = self.reason_user.to_claim()
        return claims


# ---------------------------------------------------------------------------
# Signing and delivery
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SigningKey:
    key: str = field(repr=False)  # PEM-encoded private key
    key_id: str
    algorithm: str = DEFAULT_SIGNING_ALGORITHM


@dataclass(frozen=True)
class DeliveryTarget:
    address: str
    suffix: str | None = None
    auth_token: str | None = field(default=None, repr=False)
    user_agent: str | None = None


@dataclass(frozen=True)
class TransmissionResult:
    status: TransmissionStatus
    status_code: int
    body: str
    retryable: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": str(self.status),
            "statusCode": self.status_code,
            "body": self.body,
            "retryable": self.retryable,
        }
