"""Client configuration for gqlbatch."""

from __future__ import annotations

import dataclasses
import json
import os
from typing import Any

from gqlbatch.exceptions import GqlConfigError, GqlNotConfiguredError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_headers(value: str) -> dict[str, str]:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        raise GqlConfigError(f"GQL_HEADERS is not valid JSON: {value[:64]}") from exc
    if not isinstance(parsed, dict):
        raise GqlConfigError("GQL_HEADERS must be a JSON object")
    return {str(k): str(v) for k, v in parsed.items()}


@dataclasses.dataclass(frozen=True)
class GqlConfig:
    """Client configuration.

    One instance is created at startup and handed to every registry, store
    and client that needs it. Nothing is shared implicitly between
    instances.

    Parameters
    ----------
    url : str or None
        GraphQL endpoint. Executing anything without it raises
        :class:`~gqlbatch.exceptions.GqlNotConfiguredError`.
    headers : dict
        Headers sent with every request. Registry-level and per-call
        headers are merged on top of these.
    timeout : float
        Total request timeout in seconds.
    log_payloads : bool
        Emit (redacted) request and response bodies at DEBUG level.
    """

    url: str | None = None
    headers: dict[str, str] = dataclasses.field(default_factory=dict)
    timeout: float = 30.0
    log_payloads: bool = False

    def require_url(self) -> str:
        """Return the endpoint URL or raise if it is not configured."""
        if not self.url:
            raise GqlNotConfiguredError("GraphQL endpoint is not configured (set GqlConfig.url)")
        return self.url

    @classmethod
    def from_env(cls, **overrides: Any) -> GqlConfig:
        """Create configuration from environment variables.

        Reads ``GQL_URL``, ``GQL_HEADERS`` (a JSON object), ``GQL_TIMEOUT``
        and ``GQL_LOG_PAYLOADS``. Explicit keyword arguments override
        environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        url = env.get("GQL_URL")
        if url:
            config_kwargs["url"] = url

        headers_env = env.get("GQL_HEADERS")
        if headers_env and "headers" not in overrides:
            config_kwargs["headers"] = _env_headers(headers_env)

        timeout_env = env.get("GQL_TIMEOUT")
        if timeout_env is not None and "timeout" not in overrides:
            config_kwargs["timeout"] = float(timeout_env)

        if "log_payloads" not in overrides:
            config_kwargs["log_payloads"] = _env_bool(env.get("GQL_LOG_PAYLOADS"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
