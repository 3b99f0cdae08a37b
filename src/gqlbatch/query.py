"""Batched GraphQL ``query`` registry.

A :class:`GqlQuery` holds named query fragments. ``exec`` merges them into a
single document, sends it once, and fans the response back out to the
callbacks registered under each name::

    registry = GqlQuery(config, transport)
    registry.set(
        "getUser",
        "getUser(id: $id) { name }",
        args={"id": {"type": "Int", "value": 1}},
        on_success=lambda user, _registry: print(user["name"]),
    )
    errors, data = await registry.exec({"id": 7})

Arguments are renamed to ``<name>_<arg>`` before merging, so two entries may
both declare ``$id`` without colliding.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from gqlbatch._compose import compose_entries, deep_merge
from gqlbatch._constants import BATCH_OPERATION_NAME, DEFAULT_SERVER_ERROR_MESSAGE, SERVER_ERROR_KEY
from gqlbatch._transport import Transport
from gqlbatch.config import GqlConfig
from gqlbatch.exceptions import GqlTransportError, GqlValidationError
from gqlbatch.models import ArgumentSpec, Callback, ComposedRequest, ExecResult, QueryEntry

_logger = logging.getLogger(__name__)


def _error_message(item: Any) -> str:
    if isinstance(item, Mapping):
        return str(item.get("message", DEFAULT_SERVER_ERROR_MESSAGE))
    if isinstance(item, BaseException):
        return str(item) or DEFAULT_SERVER_ERROR_MESSAGE
    return str(item)


class GqlQuery:
    """Registry of named queries sent together as one request."""

    keyword: str = "query"
    operation_name: str = BATCH_OPERATION_NAME

    def __init__(
        self,
        config: GqlConfig,
        transport: Transport,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._headers: dict[str, str] = dict(headers or {})
        self.reset()

    def reset(self) -> None:
        """Remove every entry, callback and directive."""
        self._entries: dict[str, QueryEntry] = {}
        self._directives: list[str] = []
        self.success_callbacks: dict[str, Callback] = {}
        self.error_callbacks: dict[str, Callback] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def has_queries(self) -> bool:
        return bool(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    @property
    def entries(self) -> list[QueryEntry]:
        return list(self._entries.values())

    def get(self, name: str) -> QueryEntry | None:
        return self._entries.get(name)

    def set(
        self,
        name: str,
        query_text: str,
        args: Mapping[str, ArgumentSpec | Mapping[str, Any]] | None = None,
        on_success: Callback | None = None,
        on_error: Callback | None = None,
    ) -> QueryEntry:
        """Register a query, replacing any entry with the same name in place.

        Callbacks are only overwritten when supplied; omitting them keeps
        the ones from an earlier registration.

        Raises
        ------
        GqlValidationError
            If ``name`` or ``query_text`` is empty, or an argument spec is
            malformed.
        """
        try:
            entry = QueryEntry(name=name or "", query_text=query_text or "", args=dict(args or {}))
        except ValidationError as exc:
            messages = "; ".join(str(err["msg"]) for err in exc.errors())
            raise GqlValidationError(messages) from exc

        if on_success is not None:
            self.success_callbacks[entry.name] = on_success
        if on_error is not None:
            self.error_callbacks[entry.name] = on_error

        # Reassigning an existing key keeps its insertion position.
        self._entries[entry.name] = entry
        return entry

    def unset(self, name: str) -> None:
        """Remove a query and its callbacks; unknown names are ignored."""
        if self._entries.pop(name, None) is None:
            return
        self.success_callbacks.pop(name, None)
        self.error_callbacks.pop(name, None)

    def add_directive(self, directive: str) -> None:
        """Prepend raw text (e.g. a fragment definition) to every composed document."""
        if directive.strip():
            self._directives.append(directive.strip())

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def compose(self, variables: Mapping[str, Any] | None = None) -> ComposedRequest | None:
        """Build the request ``exec`` would send, without sending it."""
        return compose_entries(
            self._entries.values(),
            variables or {},
            keyword=self.keyword,
            directives=self._directives,
            operation_name=self.operation_name,
        )

    async def exec(
        self,
        variables: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ExecResult:
        """Send every registered query as one request and dispatch the response.

        Server-reported problems never raise; they come back in
        ``ExecResult.errors`` under the query name or ``serverError``.

        Raises
        ------
        GqlNotConfiguredError
            If the config has no endpoint URL and there is something to send.
        """
        request = self.compose(variables)
        if request is None:
            return ExecResult(sent=False)

        url = self._config.require_url()

        merged_headers = deep_merge(self._config.headers, self._headers, headers)
        _logger.debug("Sending %s batch of %d entries", self.keyword, len(self._entries))

        try:
            response = await self._send(url, request, merged_headers)
        except GqlTransportError as exc:
            _logger.warning("%s request failed: %s", self.keyword, exc)
            return self._server_error([exc])

        return self._handle_response(response)

    async def _send(self, url: str, request: ComposedRequest, headers: dict[str, Any]) -> Any:
        return await self._transport.get(url, request.to_payload(), headers=headers)

    # ------------------------------------------------------------------
    # Response dispatch
    # ------------------------------------------------------------------

    def _server_error(self, errors: Sequence[Any]) -> ExecResult:
        message = _error_message(errors[-1]) if errors else DEFAULT_SERVER_ERROR_MESSAGE
        _logger.warning("GraphQL server error: %s", message)
        return ExecResult(errors={SERVER_ERROR_KEY: {"message": message, "code": SERVER_ERROR_KEY}})

    def _handle_response(self, response: Any) -> ExecResult:
        if not response:
            return self._server_error([])

        if isinstance(response, list):
            return self._server_error(response)

        if not isinstance(response, Mapping):
            return self._server_error([f"Unexpected GraphQL response type: {type(response).__name__}"])

        data = response.get("data") or {}
        field_errors = response.get("error") or {}
        errors = response.get("errors")

        if errors:
            return self._server_error(errors if isinstance(errors, list) else [errors])

        if not isinstance(data, Mapping) or not isinstance(field_errors, Mapping):
            return self._server_error([])

        accumulated: dict[str, Any] = {}
        for key, value in field_errors.items():
            if key not in self._entries:
                continue
            accumulated[key] = value
            callback = self.error_callbacks.get(key)
            if callback is not None:
                callback(value, self)

        for key, value in data.items():
            callback = self.success_callbacks.get(key)
            if callback is not None:
                callback(value, self)

        return ExecResult(errors=accumulated, data=dict(data))


async def run_query(
    spec: Mapping[str, Any],
    variables: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    *,
    config: GqlConfig,
    transport: Transport,
) -> ExecResult:
    """Run exactly one query and route its failure to ``spec["on_error"]``.

    ``spec`` takes the same keys as :meth:`GqlQuery.set`. A ``serverError``
    takes precedence over an error reported under the query's own name.
    """
    return await run_single(GqlQuery(config, transport), spec, variables, headers)


async def run_single(
    registry: GqlQuery,
    spec: Mapping[str, Any],
    variables: Mapping[str, Any] | None,
    headers: Mapping[str, str] | None,
) -> ExecResult:
    on_error: Callback | None = spec.get("on_error")
    entry = registry.set(
        spec.get("name", ""),
        spec.get("query_text", ""),
        args=spec.get("args"),
        on_success=spec.get("on_success"),
    )

    result = await registry.exec(variables, headers)

    error = result.server_error
    if error is None:
        error = result.errors.get(entry.name)
    if error is not None and on_error is not None:
        on_error(error, registry)
    return result
