"""Batched GraphQL ``mutation`` registries.

Composition, renaming and dispatch are inherited from
:class:`gqlbatch.query.GqlQuery`; only the operation keyword and the way the
request travels differ.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from gqlbatch._constants import UPLOAD_HEADER
from gqlbatch._transport import Transport
from gqlbatch.config import GqlConfig
from gqlbatch.models import ComposedRequest, ExecResult, UploadFile
from gqlbatch.query import GqlQuery, run_single


class GqlMutation(GqlQuery):
    """Registry of named mutations, POSTed as a JSON body."""

    keyword = "mutation"

    async def _send(self, url: str, request: ComposedRequest, headers: dict[str, Any]) -> Any:
        return await self._transport.post(url, request.to_payload(), headers=headers)


class GqlUpload(GqlMutation):
    """Mutation sent as a multipart form carrying files under ``field_name``.

    The composed ``{query, variables}`` travels as URL parameters and the
    request is marked with the ``X-GQL-Upload`` header.
    """

    def __init__(
        self,
        config: GqlConfig,
        transport: Transport,
        field_name: str,
        files: Iterable[UploadFile] = (),
        *,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(config, transport, headers=headers)
        self.field_name = field_name
        self.files: list[UploadFile] = list(files)

    def attach(self, file: UploadFile) -> None:
        self.files.append(file)

    async def _send(self, url: str, request: ComposedRequest, headers: dict[str, Any]) -> Any:
        headers = {**headers, UPLOAD_HEADER: "true"}
        return await self._transport.upload(
            url,
            request.to_payload(),
            (self.field_name, tuple(self.files)),
            headers=headers,
        )


async def run_mutation(
    spec: Mapping[str, Any],
    variables: Mapping[str, Any] | None = None,
    headers: Mapping[str, str] | None = None,
    *,
    config: GqlConfig,
    transport: Transport,
) -> ExecResult:
    """Run exactly one mutation and route its failure to ``spec["on_error"]``."""
    return await run_single(GqlMutation(config, transport), spec, variables, headers)
