"""Pydantic models and result types for query registration and execution.

Registration goes through a "validate → normalize → store" flow: the
registry builds a :class:`QueryEntry` from caller input, so a missing name or
query text is rejected before it can reach a composed document.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterator
from typing import IO, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gqlbatch._constants import SERVER_ERROR_KEY
from gqlbatch.exceptions import GqlFieldError, GqlServerError

#: ``(payload, registry)`` callback invoked on per-name dispatch.
Callback = Callable[[Any, Any], Any]


class ArgumentSpec(BaseModel):
    """Declared GraphQL argument of a query entry.

    ``value`` is either a static default or a zero-argument callable
    evaluated each time the entry is composed.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    type: str
    value: Any = None

    @field_validator("type")
    @classmethod
    def _type_non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("argument type must be non-empty")
        return value

    def default(self) -> Any:
        """Static value, or the result of calling the computed one."""
        if callable(self.value):
            return self.value()
        return self.value


class QueryEntry(BaseModel):
    """A named query (or mutation) fragment held by a registry."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
    )

    name: str
    query_text: str
    args: dict[str, ArgumentSpec] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _name_non_empty(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("Missing query name!")
        return name

    @field_validator("query_text")
    @classmethod
    def _query_non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Missing query definition!")
        return value


@dataclasses.dataclass(frozen=True, slots=True)
class ComposedRequest:
    """One merged request document and its variables.

    ``variables`` is ``None`` when no entry declares arguments, so bare
    queries skip variable negotiation entirely.
    """

    document: str
    variables: dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        return {"query": self.document, "variables": self.variables}


@dataclasses.dataclass(frozen=True, slots=True)
class UploadFile:
    """A file attached to a multipart upload."""

    filename: str
    content: bytes | IO[bytes]
    content_type: str | None = None


@dataclasses.dataclass(frozen=True)
class ExecResult:
    """Outcome of one ``exec`` call.

    Unpacks as ``errors, data = result``. ``sent`` is false when the
    registry was empty and no request was issued.
    """

    errors: dict[str, Any] = dataclasses.field(default_factory=dict)
    data: dict[str, Any] = dataclasses.field(default_factory=dict)
    sent: bool = True

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter((self.errors, self.data))

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def server_error(self) -> dict[str, Any] | None:
        return self.errors.get(SERVER_ERROR_KEY)

    def raise_for_errors(self) -> None:
        """Raise the first reported error, server errors taking precedence."""
        server_error = self.server_error
        if server_error is not None:
            raise GqlServerError(
                str(server_error.get("message", "")),
                key=SERVER_ERROR_KEY,
                payload=server_error,
            )
        if self.errors:
            key, payload = next(iter(self.errors.items()))
            message = payload.get("message") if isinstance(payload, dict) else payload
            raise GqlFieldError(f"{key}: {message}", key=key, payload=payload)
