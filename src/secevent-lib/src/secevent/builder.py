"""
secevent.builder — Security Event Token (RFC 8417) construction and signing.

Claims produced for every SET:
    iss     issuer URI
    aud     receiver audience
    iat     issue time, always the moment the builder is populated
    jti     unique token identifier
    sub_id  subject identifier (CAEP 3.0 format, passed through unvalidated)
    events  {event-type URI: event payload}

The JWS header carries `alg`, `kid` and `typ: secevent+jwt`.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import jwt
from aws_lambda_powertools import Logger
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from secevent.exceptions import SigningError
from secevent.models import (
    DEVICE_COMPLIANCE_CHANGE_EVENT,
    SECEVENT_TOKEN_TYPE,
    DeviceComplianceChange,
    SetDefaults,
    SigningKey,
)

logger = Logger(service="secevent-lib")


def now_seconds() -> int:
    return int(time.time())


def load_private_key(pem: str | bytes) -> PrivateKeyTypes:
    """Materialise an unencrypted PEM private key.

    Raises SigningError for malformed, encrypted or unsupported key material.
    """
    data = pem.encode() if isinstance(pem, str) else pem
    try:
        return serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningError(f"Invalid signing key: {exc}") from exc


class SecurityEventTokenBuilder:
    """Fluent builder for a single SET.

    Usage:
        token = (
            SecurityEventTokenBuilder()
            .with_issuer("https://issuer.example/")
            .with_audience("https://receiver.example/")
            .with_iat()
            .with_claim("sub_id", {"format": "email", "email": "a@example.com"})
            .with_event(DEVICE_COMPLIANCE_CHANGE_EVENT, payload)
            .sign(signing_key)
        )
    """

    def __init__(self) -> None:
        self._claims: dict[str, Any] = {}
        self._events: dict[str, dict[str, Any]] = {}

    def with_issuer(self, issuer: str) -> SecurityEventTokenBuilder:
        self._claims["iss"] = issuer
        return self

    def with_audience(self, audience: str) -> SecurityEventTokenBuilder:
        self._claims["aud"] = audience
        return self

    def with_iat(self, iat: int | None = None) -> SecurityEventTokenBuilder:
        self._claims["iat"] = now_seconds() if iat is None else iat
        return self

    def with_jti(self, jti: str | None = None) -> SecurityEventTokenBuilder:
        self._claims["jti"] = jti or uuid.uuid4().hex
        return self

    def with_claim(self, name: str, value: Any) -> SecurityEventTokenBuilder:
        self._claims[name] = value
        return self

    def with_event(self, event_type: str, payload: dict[str, Any]) -> SecurityEventTokenBuilder:
        self._events[event_type] = payload
        return self

    def claims(self) -> dict[str, Any]:
        claims = dict(self._claims)
        claims.setdefault("jti", uuid.uuid4().hex)
        claims["events"] = dict(self._events)
        return claims

    def sign(self, signing_key: SigningKey) -> str:
        """Return the compact JWS serialisation of the claims set."""
        private_key = load_private_key(signing_key.key)
        claims = self.claims()
        try:
            token = jwt.encode(
                claims,
                private_key,
                algorithm=signing_key.algorithm,
                headers={"kid": signing_key.key_id, "typ": SECEVENT_TOKEN_TYPE},
            )
        except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as exc:
            raise SigningError(
                f"Failed to sign SET with algorithm {signing_key.algorithm}: {exc}"
            ) from exc

        logger.debug(
            "SET signed",
            extra={
                "kid": signing_key.key_id,
                "alg": signing_key.algorithm,
                "jti": claims["jti"],
                "events": list(claims["events"]),
            },
        )
        return token


def build_device_compliance_set(
    *,
    audience: str,
    subject: Any,
    event: DeviceComplianceChange,
    issuer: str | None = None,
    defaults: SetDefaults | None = None,
) -> SecurityEventTokenBuilder:
    """Populate a builder for a CAEP device-compliance-change event."""
    defaults = defaults or SetDefaults()
    return (
        SecurityEventTokenBuilder()
        .with_issuer(issuer or defaults.issuer)
        .with_audience(audience)
        .with_iat()
        .with_jti()
        .with_claim("sub_id", subject)
        .with_event(DEVICE_COMPLIANCE_CHANGE_EVENT, event.to_claims())
    )
