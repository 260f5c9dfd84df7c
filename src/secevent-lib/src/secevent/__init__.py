"""
secevent — CAEP Security Event Token construction and push delivery.

Builds RFC 8417 SETs, signs them with an asymmetric key and POSTs them to
a receiver as application/secevent+jwt.
"""

from secevent.builder import SecurityEventTokenBuilder, build_device_compliance_set
from secevent.classify import classify_error, error_from_payload, is_retryable
from secevent.credentials import (
    CredentialProvider,
    EnvironmentCredentialProvider,
    SecretsManagerCredentialProvider,
    StaticCredentialProvider,
    TransmitterCredentials,
    load_credentials,
)
from secevent.exceptions import (
    CredentialError,
    ParameterError,
    SecEventError,
    SigningError,
    SubjectParseError,
    TransmissionError,
)
from secevent.models import (
    DEVICE_COMPLIANCE_CHANGE_EVENT,
    ComplianceStatus,
    DeliveryTarget,
    DeviceComplianceChange,
    LocalizedReason,
    PlainReason,
    SetDefaults,
    SigningKey,
    TransmissionResult,
    TransmissionStatus,
)
from secevent.parsing import parse_reason, parse_subject
from secevent.transmitter import build_url, transmit_set

__all__ = [
    "DEVICE_COMPLIANCE_CHANGE_EVENT",
    "ComplianceStatus",
    "CredentialError",
    "CredentialProvider",
    "DeliveryTarget",
    "DeviceComplianceChange",
    "EnvironmentCredentialProvider",
    "LocalizedReason",
    "ParameterError",
    "PlainReason",
    "SecEventError",
    "SecretsManagerCredentialProvider",
    "SecurityEventTokenBuilder",
    "SetDefaults",
    "SigningError",
    "SigningKey",
    "StaticCredentialProvider",
    "SubjectParseError",
    "TransmissionError",
    "TransmissionResult",
    "TransmissionStatus",
    "TransmitterCredentials",
    "build_device_compliance_set",
    "build_url",
    "classify_error",
    "error_from_payload",
    "is_retryable",
    "load_credentials",
    "parse_reason",
    "parse_subject",
    "transmit_set",
]
