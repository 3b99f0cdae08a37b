"""HTTP transport for GraphQL requests."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import aiohttp

from gqlbatch._constants import USER_AGENT
from gqlbatch._redact import redact_for_log
from gqlbatch.config import GqlConfig
from gqlbatch.exceptions import GqlTransportError
from gqlbatch.models import UploadFile

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the registries.

    Each method returns the decoded JSON body (a mapping, a list, or
    ``None`` for an empty body) and raises
    :class:`~gqlbatch.exceptions.GqlTransportError` on failure.
    Test doubles only need to implement the methods they exercise.
    """

    async def get(self, url: str, body: Mapping[str, Any], *, headers: Mapping[str, str]) -> Any:
        ...

    async def post(self, url: str, body: Mapping[str, Any], *, headers: Mapping[str, str]) -> Any:
        ...

    async def upload(
        self,
        url: str,
        body: Mapping[str, Any],
        files: tuple[str, Sequence[UploadFile]],
        *,
        headers: Mapping[str, str],
    ) -> Any:
        ...


def _query_params(body: Mapping[str, Any]) -> dict[str, str]:
    """GraphQL-over-GET parameters: the document as-is, variables JSON-encoded."""
    params = {"query": str(body.get("query", ""))}
    variables = body.get("variables")
    if variables is not None:
        params["variables"] = json.dumps(variables, separators=(",", ":"))
    return params


class HttpTransport:
    """aiohttp-backed transport.

    JSON bodies are returned whatever the HTTP status, since GraphQL servers
    commonly report ``errors`` with a 4xx status. Non-JSON bodies on a
    non-200 status raise.
    """

    def __init__(self, config: GqlConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.timeout)

    def _headers(self, headers: Mapping[str, str]) -> dict[str, str]:
        merged = {"accept": "application/json", "user-agent": USER_AGENT}
        merged.update({str(k): str(v) for k, v in headers.items()})
        return merged

    async def get(self, url: str, body: Mapping[str, Any], *, headers: Mapping[str, str]) -> Any:
        return await self._request(
            "GET",
            url,
            params=_query_params(body),
            headers=self._headers(headers),
            trace=body,
        )

    async def post(self, url: str, body: Mapping[str, Any], *, headers: Mapping[str, str]) -> Any:
        request_headers = self._headers(headers)
        request_headers.setdefault("content-type", "application/json; charset=UTF-8")
        return await self._request(
            "POST",
            url,
            data=json.dumps(body),
            headers=request_headers,
            trace=body,
        )

    async def upload(
        self,
        url: str,
        body: Mapping[str, Any],
        files: tuple[str, Sequence[UploadFile]],
        *,
        headers: Mapping[str, str],
    ) -> Any:
        field_name, attachments = files
        form = aiohttp.FormData()
        for attachment in attachments:
            form.add_field(
                field_name,
                attachment.content,
                filename=attachment.filename,
                content_type=attachment.content_type,
            )
        return await self._request(
            "POST",
            url,
            params=_query_params(body),
            data=form,
            headers=self._headers(headers),
            trace=body,
        )

    async def _request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        trace: Mapping[str, Any],
        params: Mapping[str, str] | None = None,
        data: Any = None,
    ) -> Any:
        _logger.debug("%s %s headers=%s", method, url, redact_for_log(headers))
        if self._config.log_payloads:
            _logger.debug("request body: %s", redact_for_log(trace))

        try:
            async with self._http.request(
                method,
                url,
                params=params,
                data=data,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                raw = await resp.read()
                charset = resp.charset or "utf-8"
        except aiohttp.ClientError as exc:
            raise GqlTransportError(f"Request to {url} failed: {exc}", url=url) from exc
        except TimeoutError as exc:
            raise GqlTransportError(f"Request to {url} timed out", url=url) from exc

        try:
            text = raw.decode(charset)
        except (UnicodeDecodeError, LookupError) as exc:
            raise GqlTransportError(
                f"HTTP {status} from {url}: body is not valid {charset}",
                status_code=status,
                url=url,
            ) from exc

        if not text.strip():
            if status != 200:
                raise GqlTransportError(f"HTTP {status} from {url} with empty body", status_code=status, url=url)
            return None

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            if status != 200:
                raise GqlTransportError(
                    f"HTTP {status} from {url}: {text[:200]}",
                    status_code=status,
                    url=url,
                ) from exc
            raise GqlTransportError(
                f"Invalid JSON from {url}: {text[:200]}",
                status_code=status,
                url=url,
            ) from exc

        _logger.debug("HTTP %s from %s", status, url)
        if self._config.log_payloads:
            _logger.debug("response body: %s", redact_for_log(result))
        return result
