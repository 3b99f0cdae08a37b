from __future__ import annotations

import pytest

from gqlbatch._compose import coerce_int, deep_merge, rename_variables
from gqlbatch.config import GqlConfig
from gqlbatch.exceptions import GqlValidationError
from gqlbatch.mutation import GqlMutation
from gqlbatch.query import GqlQuery


def _registry() -> GqlQuery:
    return GqlQuery(GqlConfig(url="https://api.example.com/graphql"), transport=None)  # type: ignore[arg-type]


def test_get_user_scenario_renames_and_coerces() -> None:
    registry = _registry()
    registry.set("getUser", "getUser(id:$id){name}", args={"id": {"type": "Int", "value": 1}})

    request = registry.compose({"id": "7"})

    assert request is not None
    assert "$getUser_id: Int" in request.document
    assert "getUser(id:$getUser_id){name}" in request.document
    assert request.variables == {"getUser_id": 7}
    assert request.document.startswith("query WRAPPER(")


def test_shared_argument_names_do_not_collide() -> None:
    registry = _registry()
    registry.set("getUser", "getUser(id: $id) { name }", args={"id": {"type": "Int", "value": 1}})
    registry.set("getPost", "getPost(id: $id) { title }", args={"id": {"type": "ID", "value": "p-1"}})

    request = registry.compose()

    assert request is not None
    assert request.document == (
        "query WRAPPER($getUser_id: Int, $getPost_id: ID) "
        "{ getUser(id: $getUser_id) { name } getPost(id: $getPost_id) { title } }"
    )
    assert request.variables == {"getUser_id": 1, "getPost_id": "p-1"}


def test_entries_without_arguments_send_null_variables() -> None:
    registry = _registry()
    registry.set("me", "me { id }")
    registry.set("version", "version")

    request = registry.compose({"unused": 1})

    assert request is not None
    assert request.document == "query {me { id } version}"
    assert request.variables is None


def test_runtime_variable_overrides_default_and_callable_default_is_fresh() -> None:
    counter = iter(range(100, 200))
    registry = _registry()
    registry.set(
        "feed",
        "feed(limit: $limit, cursor: $cursor) { id }",
        args={
            "limit": {"type": "Int!", "value": 10},
            "cursor": {"type": "String", "value": lambda: f"c{next(counter)}"},
        },
    )

    first = registry.compose({"limit": 25.9})
    second = registry.compose()

    assert first is not None and second is not None
    assert first.variables == {"feed_limit": 25, "feed_cursor": "c100"}
    assert second.variables == {"feed_limit": 10, "feed_cursor": "c101"}


def test_every_occurrence_is_renamed_but_longer_names_are_left_alone() -> None:
    registry = _registry()
    registry.set(
        "search",
        "search(id: $id, idx: $idx, again: $id) { id }",
        args={"id": {"type": "ID"}, "idx": {"type": "Int", "value": "3"}},
    )

    request = registry.compose()

    assert request is not None
    assert "search(id: $search_id, idx: $search_idx, again: $search_id)" in request.document
    assert request.variables == {"search_id": None, "search_idx": 3}


def test_rename_is_single_pass() -> None:
    text = rename_variables("f(x: $b, y: $a_b)", {"b": "a_b", "a_b": "a_a_b"})
    assert text == "f(x: $a_b, y: $a_a_b)"


def test_set_replaces_in_place() -> None:
    registry = _registry()
    registry.set("a", "a")
    registry.set("b", "b")
    registry.set("a", "a2")

    assert [entry.name for entry in registry.entries] == ["a", "b"]
    request = registry.compose()
    assert request is not None
    assert request.document == "query {a2 b}"


def test_first_entry_is_found_and_removable() -> None:
    registry = _registry()
    registry.set("first", "first")
    registry.set("second", "second")

    assert registry.get("first") is not None
    registry.unset("first")
    registry.unset("missing")

    assert registry.get("first") is None
    assert [entry.name for entry in registry.entries] == ["second"]
    assert registry.has_queries()


def test_unset_last_entry_leaves_registry_empty() -> None:
    registry = _registry()
    registry.set("only", "only")
    registry.unset("only")

    assert not registry.has_queries()
    assert registry.compose() is None


@pytest.mark.parametrize(
    ("name", "query_text"),
    [("", "me { id }"), ("me", ""), (None, "me { id }"), ("me", "   ")],
)
def test_set_rejects_missing_name_or_query(name: str, query_text: str) -> None:
    registry = _registry()
    with pytest.raises(GqlValidationError):
        registry.set(name, query_text)
    assert not registry.has_queries()


def test_set_rejects_argument_without_type() -> None:
    registry = _registry()
    with pytest.raises(GqlValidationError):
        registry.set("me", "me(id: $id)", args={"id": {"value": 1}})


def test_directives_are_prepended_in_order() -> None:
    registry = GqlMutation(GqlConfig(url="https://x"), transport=None)  # type: ignore[arg-type]
    registry.add_directive("fragment A on User { id }")
    registry.add_directive("fragment B on User { name }")
    registry.set("touch", "touch { ...A ...B }")

    request = registry.compose()

    assert request is not None
    assert request.document == "mutation fragment A on User { id } fragment B on User { name } {touch { ...A ...B }}"


@pytest.mark.parametrize(
    ("value", "expected"),
    [("42", 42), (" -7 ", -7), ("12abc", 12), (3.9, 3), (True, 1), ("abc", None), (None, None), (["1", 2.5], [1, 2])],
)
def test_coerce_int(value: object, expected: object) -> None:
    assert coerce_int(value) == expected


def test_deep_merge_later_layers_win_and_inputs_are_untouched() -> None:
    base = {"Authorization": "Bearer a", "X-Meta": {"a": 1, "b": 2}}
    override = {"Authorization": "Bearer b", "X-Meta": {"b": 3}}

    merged = deep_merge(base, None, override)

    assert merged == {"Authorization": "Bearer b", "X-Meta": {"a": 1, "b": 3}}
    assert base["X-Meta"] == {"a": 1, "b": 2}
