"""
caep_transmitter.handler — CAEP device compliance change action.

Builds one signed Security Event Token per invocation and POSTs it to the
receiver. Three entry points are exposed to the action host:

  invoke — validate parameters, sign and transmit the SET
  error  — decide whether a failed invoke should be retried
  halt   — acknowledge cancellation (nothing to release)

Parameter bag (invoke):
  {
    "audience":         str  (required)
    "subject":          str  JSON subject identifier (required)
    "previousStatus":   str  "compliant" | "not-compliant" (required)
    "currentStatus":    str  "compliant" | "not-compliant" (required)
    "address":          str  receiver base URL (required)
    "issuer":           str
    "signingMethod":    str  JWS algorithm, e.g. "RS256"
    "eventTimestamp":   int  Unix seconds
    "initiatingEntity": str
    "reasonAdmin":      str  plain text or JSON {locale: text}
    "reasonUser":       str  plain text or JSON {locale: text}
    "addressSuffix":    str
    "userAgent":        str
  }
"""

from __future__ import annotations

import os
from typing import Any

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from secevent import (
    DEVICE_COMPLIANCE_CHANGE_EVENT,
    ComplianceStatus,
    CredentialProvider,
    DeliveryTarget,
    DeviceComplianceChange,
    EnvironmentCredentialProvider,
    ParameterError,
    SecretsManagerCredentialProvider,
    SetDefaults,
    SigningKey,
    StaticCredentialProvider,
    build_device_compliance_set,
    classify_error,
    error_from_payload,
    load_credentials,
    parse_reason,
    parse_subject,
    transmit_set,
)
from secevent.builder import now_seconds

logger = Logger(service="caep-transmitter")
tracer = Tracer()

_SECRET_ID_ENV = "SSF_SECRET_ID"  # pragma: allowlist secret

REQUIRED_PARAMS = ("audience", "subject", "previousStatus", "currentStatus", "address")
_STATUS_PARAMS = ("previousStatus", "currentStatus")
_VALID_STATUSES = tuple(str(s) for s in ComplianceStatus)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_params(params: dict[str, Any]) -> None:
    """Fail fast on the first missing or out-of-vocabulary parameter."""
    for name in REQUIRED_PARAMS:
        if not params.get(name):
            raise ParameterError(f"{name} is required")

    for name in _STATUS_PARAMS:
        if params[name] not in _VALID_STATUSES:
            raise ParameterError(f"{name} must be one of: {', '.join(_VALID_STATUSES)}")

    timestamp = params.get("eventTimestamp")
    if timestamp and _as_int(timestamp) is None:
        raise ParameterError("eventTimestamp must be an integer")


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _event_from_params(params: dict[str, Any]) -> DeviceComplianceChange:
    timestamp = _as_int(params.get("eventTimestamp")) or now_seconds()
    return DeviceComplianceChange(
        event_timestamp=timestamp,
        previous_status=ComplianceStatus(params["previousStatus"]),
        current_status=ComplianceStatus(params["currentStatus"]),
        initiating_entity=params.get("initiatingEntity") or None,
        reason_admin=parse_reason(params.get("reasonAdmin")),
        reason_user=parse_reason(params.get("reasonUser")),
    )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def invoke(
    params: dict[str, Any],
    credentials: CredentialProvider,
    defaults: SetDefaults | None = None,
) -> dict[str, Any]:
    """Sign and transmit a device compliance change SET.

    Returns the transmission result for 2xx and non-retryable statuses.
    Raises TransmissionError for 429/502/503/504 so the host can route the
    failure through `error`.
    """
    validate_params(params)
    creds = load_credentials(credentials)
    defaults = defaults or SetDefaults.from_env()

    subject = parse_subject(params["subject"])
    event = _event_from_params(params)

    logger.info(
        "Transmitting device compliance change",
        extra={
            "event_type": DEVICE_COMPLIANCE_CHANGE_EVENT,
            "audience": params["audience"],
            "previous_status": str(event.previous_status),
            "current_status": str(event.current_status),
            "kid": creds.ssf_key_id,
        },
    )

    builder = build_device_compliance_set(
        audience=params["audience"],
        subject=subject,
        event=event,
        issuer=params.get("issuer"),
        defaults=defaults,
    )
    token = builder.sign(
        SigningKey(
            key=creds.ssf_key,
            key_id=creds.ssf_key_id,
            algorithm=params.get("signingMethod") or defaults.signing_algorithm,
        )
    )

    target = DeliveryTarget(
        address=params["address"],
        suffix=params.get("addressSuffix"),
        auth_token=creds.auth_token,
        user_agent=params.get("userAgent"),
    )
    result = transmit_set(token, target, defaults)
    return result.to_dict()


def error(params: dict[str, Any]) -> dict[str, str]:
    """Request a retry for transient delivery failures; re-raise anything else."""
    return classify_error(error_from_payload(params.get("error")))


def halt(params: dict[str, Any] | None = None) -> dict[str, str]:
    logger.info("Halt acknowledged")
    return {"status": "halted"}


# ---------------------------------------------------------------------------
# Lambda dispatch
# ---------------------------------------------------------------------------


def credential_provider(event: dict[str, Any]) -> CredentialProvider:
    """Pick the secret source: host-supplied secrets, Secrets Manager, then env."""
    secrets = event.get("secrets")
    if isinstance(secrets, dict):
        return StaticCredentialProvider(secrets)
    secret_id = os.environ.get(_SECRET_ID_ENV)
    if secret_id:
        return SecretsManagerCredentialProvider(secret_id)
    return EnvironmentCredentialProvider()


@logger.inject_lambda_context(clear_state=True)
@tracer.capture_lambda_handler
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Lambda entry point. `event["action"]` selects invoke (default), error or halt."""
    action = event.get("action", "invoke")
    params = event.get("params") or {}

    if action == "invoke":
        return invoke(params, credential_provider(event))
    if action == "error":
        return error(params)
    if action == "halt":
        return halt(params)

    logger.error("Unknown action", extra={"action": action})
    raise ParameterError(f"Unknown action: {action}")
