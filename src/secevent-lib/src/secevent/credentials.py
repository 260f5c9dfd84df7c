"""
secevent.credentials — Injected secret lookup for the transmitter.

Secrets consumed:
    SSF_KEY     PEM private key used to sign the SET (required)
    SSF_KEY_ID  key identifier published in the JWS `kid` header (required)
    AUTH_TOKEN  bearer credential for the receiver (optional)
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import boto3
from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from secevent.exceptions import CredentialError

logger = Logger(service="secevent-lib")

SSF_KEY = "SSF_KEY"
SSF_KEY_ID = "SSF_KEY_ID"
AUTH_TOKEN = "AUTH_TOKEN"  # pragma: allowlist secret


class CredentialProvider(Protocol):
    def get(self, name: str) -> str | None: ...


class StaticCredentialProvider:
    """Serves secrets from an in-memory mapping (host-supplied context secrets)."""

    def __init__(self, secrets: Mapping[str, Any] | None = None) -> None:
        self._secrets = dict(secrets or {})

    def get(self, name: str) -> str | None:
        value = self._secrets.get(name)
        return str(value) if value else None


class EnvironmentCredentialProvider:
    def get(self, name: str) -> str | None:
        return os.environ.get(name) or None


class SecretsManagerCredentialProvider:
    """Reads a JSON secret string from AWS Secrets Manager.

    The secret is fetched lazily on first lookup and held for the lifetime
    of the provider only (one invocation).
    """

    def __init__(self, secret_id: str, client: Any = None) -> None:
        self._secret_id = secret_id
        self._client = client
        self._values: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._values is None:
            client = self._client or boto3.client(
                "secretsmanager", region_name=os.environ.get("AWS_REGION", "eu-west-2")
            )
            try:
                response = client.get_secret_value(SecretId=self._secret_id)
            except ClientError as exc:
                logger.exception("Failed to fetch secret", extra={"secret_id": self._secret_id})
                raise CredentialError(f"Unable to read secret {self._secret_id!r}") from exc
            try:
                values = json.loads(response.get("SecretString") or "{}")
            except json.JSONDecodeError as exc:
                raise CredentialError(f"Secret {self._secret_id!r} is not a JSON object") from exc
            if not isinstance(values, dict):
                raise CredentialError(f"Secret {self._secret_id!r} is not a JSON object")
            self._values = values
        return self._values

    def get(self, name: str) -> str | None:
        value = self._load().get(name)
        return str(value) if value else None


@dataclass(frozen=True)
class TransmitterCredentials:
    ssf_key: str = field(repr=False)
    ssf_key_id: str
    auth_token: str | None = field(default=None, repr=False)


def load_credentials(provider: CredentialProvider) -> TransmitterCredentials:
    """Resolve the signing key, key id and optional bearer token in one step."""
    ssf_key = provider.get(SSF_KEY)
    ssf_key_id = provider.get(SSF_KEY_ID)
    auth_token = provider.get(AUTH_TOKEN)

    if not ssf_key:
        raise CredentialError(f"{SSF_KEY} secret is required")
    if not ssf_key_id:
        raise CredentialError(f"{SSF_KEY_ID} secret is required")

    return TransmitterCredentials(ssf_key=ssf_key, ssf_key_id=ssf_key_id, auth_token=auth_token)
