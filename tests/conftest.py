from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import pytest

from gqlbatch.config import GqlConfig
from gqlbatch.models import UploadFile


@dataclass
class FakeTransport:
    """Records every call and answers with a canned response (or raises it)."""

    response: Any = None
    calls: list[dict[str, Any]] = field(default_factory=list)

    def _answer(self, method: str, url: str, body: Mapping[str, Any], headers: Mapping[str, str], **extra: Any) -> Any:
        self.calls.append({"method": method, "url": url, "body": dict(body), "headers": dict(headers), **extra})
        if isinstance(self.response, BaseException):
            raise self.response
        return self.response

    async def get(self, url: str, body: Mapping[str, Any], *, headers: Mapping[str, str]) -> Any:
        return self._answer("GET", url, body, headers)

    async def post(self, url: str, body: Mapping[str, Any], *, headers: Mapping[str, str]) -> Any:
        return self._answer("POST", url, body, headers)

    async def upload(
        self,
        url: str,
        body: Mapping[str, Any],
        files: tuple[str, Sequence[UploadFile]],
        *,
        headers: Mapping[str, str],
    ) -> Any:
        return self._answer("UPLOAD", url, body, headers, files=files)


@pytest.fixture
def config() -> GqlConfig:
    return GqlConfig(url="https://api.example.com/graphql", headers={"Authorization": "Bearer abc"})


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport(response={"data": {}, "error": {}})
