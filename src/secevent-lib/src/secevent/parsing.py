"""
secevent.parsing — Decode caller-supplied JSON strings into claim values.
"""

from __future__ import annotations

import json
from typing import Any

from secevent.exceptions import SubjectParseError
from secevent.models import LocalizedReason, PlainReason, Reason


def parse_subject(subject: str) -> Any:
    """Decode the `sub_id` subject identifier.

    The structure is not validated beyond being well-formed JSON.
    """
    try:
        return json.loads(subject)
    except (json.JSONDecodeError, TypeError) as exc:
        raise SubjectParseError(f"Invalid subject JSON: {exc}") from exc


def parse_reason(reason: str | None) -> Reason | None:
    """Interpret a reason as localized data when it decodes to a JSON object or array.

    Anything else (undecodable text, or a JSON scalar such as ``"42"``) is
    kept verbatim as plain text. A composite value that is not actually a
    locale map is still treated as localized.
    """
    if not reason:
        return None
    try:
        parsed = json.loads(reason)
    except json.JSONDecodeError:
        return PlainReason(reason)
    if isinstance(parsed, (dict, list)):
        return LocalizedReason(parsed)
    return PlainReason(reason)
