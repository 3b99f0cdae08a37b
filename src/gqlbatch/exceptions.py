"""Custom exception hierarchy for gqlbatch."""

from __future__ import annotations

from typing import Any


class GqlError(Exception):
    """Base exception for all gqlbatch errors."""


class GqlConfigError(GqlError):
    """Invalid or missing configuration."""


class GqlNotConfiguredError(GqlConfigError):
    """No GraphQL endpoint URL configured.

    Raised before any network call is attempted.
    """


class GqlValidationError(GqlError, ValueError):
    """A query entry is missing its name or query text, or has malformed arguments."""


class GqlStateError(GqlError, TypeError):
    """A query state snapshot is not a mapping after ``prepare_state``."""


class GqlTransportError(GqlError):
    """HTTP-level failure (network, non-200 without JSON body, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class GqlResponseError(GqlError):
    """Error reported by the server in a response body.

    These are never raised by ``exec``; they are resolved through the error
    map. :meth:`gqlbatch.models.ExecResult.raise_for_errors` raises them on
    demand.
    """

    def __init__(self, message: str, *, key: str = "", payload: Any = None) -> None:
        self.key = key
        self.payload = payload
        super().__init__(message)


class GqlServerError(GqlResponseError):
    """Transport failure or top-level ``errors`` list (the ``serverError`` channel)."""


class GqlFieldError(GqlResponseError):
    """Per-query error found under the response's ``error`` object."""
