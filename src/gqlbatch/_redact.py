"""Helpers for safe debug logging.

Request headers routinely carry bearer tokens and cookies, and GraphQL
variables may carry credentials. Batched variables are renamed to
``<query>_<arg>`` (``login_password``, ``getUser_access_token``), so a key is
sensitive when it names a credential outright or ends in ``_<credential>``.
Everything logged at DEBUG level goes through :func:`redact_for_log` first.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

REDACTED = "<redacted>"
MAX_DEPTH = 20

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
        "api_key",
        "apikey",
        "password",
        "secret",
        "token",
        "accesstoken",
        "access_token",
        "refreshtoken",
        "refresh_token",
    }
)


def is_sensitive_key(key: str) -> bool:
    """True for credential keys, including batch-renamed variables."""
    lowered = key.lower()
    if lowered in _SENSITIVE_VALUE_KEYS:
        return True
    return any(lowered.endswith(f"_{name}") for name in _SENSITIVE_VALUE_KEYS)


def _truncate(value: str, max_string: int) -> str:
    if len(value) <= max_string:
        return value
    return f"{value[:max_string]}...<truncated {len(value) - max_string} chars>"


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* with credentials masked and long strings cut.

    Mappings keep their keys; values under sensitive keys become
    ``"<redacted>"``. Bytes are summarized by length and anything that is not
    plain JSON-like data is logged through its ``repr``.
    """
    if _depth > MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _truncate(value, max_string)
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    nested = {"max_string": max_string, "_depth": _depth + 1}
    if isinstance(value, Mapping):
        return {
            str(key): REDACTED if is_sensitive_key(str(key)) else redact_for_log(item, **nested)
            for key, item in value.items()
        }
    if isinstance(value, Sequence):
        return [redact_for_log(item, **nested) for item in value]
    return repr(value)
