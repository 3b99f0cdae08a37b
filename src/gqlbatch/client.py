"""High-level async client wiring config, HTTP session and registries."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import aiohttp

from gqlbatch._transport import HttpTransport, Transport
from gqlbatch.config import GqlConfig
from gqlbatch.exceptions import GqlError
from gqlbatch.models import ArgumentSpec, ExecResult, UploadFile
from gqlbatch.mutation import GqlMutation, GqlUpload, run_mutation
from gqlbatch.query import GqlQuery, run_query
from gqlbatch.state import GqlQueryState, Subscriber

_logger = logging.getLogger(__name__)


class GqlClient:
    """Async factory for registries and stores sharing one configuration.

    Usage::

        async with GqlClient(GqlConfig(url="https://api.example.com/graphql")) as client:
            users = client.query()
            users.set("getUser", "getUser(id: $id) { name }", args={"id": {"type": "Int"}})
            errors, data = await users.exec({"id": 7})
    """

    def __init__(
        self,
        config: GqlConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None

    @property
    def config(self) -> GqlConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> GqlClient:
        if self._external_transport:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        _logger.debug("GqlClient opened for %s", self._config.url)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise GqlError("Client not initialized. Use 'async with GqlClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    def query(self, *, headers: Mapping[str, str] | None = None) -> GqlQuery:
        return GqlQuery(self._config, self._require_transport(), headers=headers)

    def mutation(self, *, headers: Mapping[str, str] | None = None) -> GqlMutation:
        return GqlMutation(self._config, self._require_transport(), headers=headers)

    def upload(
        self,
        field_name: str,
        files: Iterable[UploadFile] = (),
        *,
        headers: Mapping[str, str] | None = None,
    ) -> GqlUpload:
        return GqlUpload(self._config, self._require_transport(), field_name, files, headers=headers)

    def query_state(
        self,
        name: str,
        query_text: str,
        *,
        args: Mapping[str, ArgumentSpec | Mapping[str, Any]] | None = None,
        defaults: Mapping[str, Any] | None = None,
        subscribers: Iterable[Subscriber] = (),
    ) -> GqlQueryState:
        return GqlQueryState(
            name,
            query_text,
            args=args,
            defaults=defaults,
            subscribers=subscribers,
            config=self._config,
            transport=self._require_transport(),
        )

    # ------------------------------------------------------------------
    # Single-shot runners
    # ------------------------------------------------------------------

    async def run_query(
        self,
        spec: Mapping[str, Any],
        variables: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ExecResult:
        return await run_query(
            spec,
            variables,
            headers,
            config=self._config,
            transport=self._require_transport(),
        )

    async def run_mutation(
        self,
        spec: Mapping[str, Any],
        variables: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ExecResult:
        return await run_mutation(
            spec,
            variables,
            headers,
            config=self._config,
            transport=self._require_transport(),
        )
