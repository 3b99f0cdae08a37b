from __future__ import annotations

import pytest

from gqlbatch._compose import compose_entries
from gqlbatch._redact import is_sensitive_key, redact_for_log
from gqlbatch.models import QueryEntry


def test_headers_with_credentials_are_masked() -> None:
    headers = {"Authorization": "Bearer secret", "Cookie": "session=abc", "Accept": "application/json"}

    assert redact_for_log(headers) == {
        "Authorization": "<redacted>",
        "Cookie": "<redacted>",
        "Accept": "application/json",
    }


@pytest.mark.parametrize(
    ("key", "sensitive"),
    [
        ("password", True),
        ("login_password", True),
        ("getUser_token", True),
        ("session_access_token", True),
        ("connect_api_key", True),
        ("getUser_id", False),
        ("getUser_tokenCount", False),
        ("passwordHint", False),
    ],
)
def test_is_sensitive_key_understands_renamed_variables(key: str, sensitive: bool) -> None:
    assert is_sensitive_key(key) is sensitive


def test_composed_login_variables_are_masked_in_logs() -> None:
    entry = QueryEntry.model_validate(
        {
            "name": "login",
            "query_text": "login(user: $user, password: $password) { ok }",
            "args": {"user": {"type": "String!"}, "password": {"type": "String!"}},
        }
    )
    request = compose_entries([entry], {"user": "ada", "password": "hunter2"}, keyword="mutation")
    assert request is not None

    logged = redact_for_log(request.to_payload())

    assert logged["variables"] == {"login_user": "ada", "login_password": "<redacted>"}
    assert "hunter2" not in str(logged)


def test_long_strings_are_truncated_with_remaining_length() -> None:
    logged = redact_for_log({"query": "x" * 30}, max_string=10)

    assert logged["query"] == "x" * 10 + "...<truncated 20 chars>"


def test_bytes_and_nested_lists_are_summarized() -> None:
    assert redact_for_log([{"apiKey": "k"}, b"\x00\x01", ("a", 1)]) == [
        {"apiKey": "<redacted>"},
        "<bytes:2b>",
        ["a", 1],
    ]
