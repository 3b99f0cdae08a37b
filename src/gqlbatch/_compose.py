"""Shared helpers for building batched GraphQL requests.

This module centralizes:
- resolving one declared argument to its wire value
- renaming arguments so several entries can share a short name
- merging entries into one document
- deep-merging header mappings

It is internal to gqlbatch and may change at any time.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable, Mapping
from typing import Any

from gqlbatch._constants import BATCH_OPERATION_NAME, INT_TYPE_PATTERN, variable_pattern
from gqlbatch.models import ArgumentSpec, ComposedRequest, QueryEntry

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def coerce_int(value: Any) -> Any:
    """Coerce *value* to ``int`` the way a lenient integer parser would.

    ``"42"`` and ``"42px"`` become ``42``, floats are truncated, lists are
    coerced element-wise and anything without a leading integer becomes
    ``None``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    if isinstance(value, (list, tuple)):
        return [coerce_int(item) for item in value]
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def resolve_argument(spec: ArgumentSpec, runtime_value: Any = None) -> Any:
    """Concrete value of one argument at send time.

    A runtime value wins over the declared default; a computed default is
    only evaluated when it is actually needed.
    """
    value = runtime_value if runtime_value is not None else spec.default()
    if INT_TYPE_PATTERN.search(spec.type):
        value = coerce_int(value)
    return value


def renamed_argument(entry_name: str, arg_name: str) -> str:
    return f"{entry_name}_{arg_name}"


def rename_variables(query_text: str, renames: Mapping[str, str]) -> str:
    """Rewrite every ``$old`` token in *query_text* to ``$new`` in one pass."""
    if not renames:
        return query_text
    return variable_pattern(renames).sub(lambda m: f"${renames[m.group(1)]}", query_text)


def compose_entries(
    entries: Iterable[QueryEntry],
    variables: Mapping[str, Any],
    *,
    keyword: str,
    directives: Iterable[str] = (),
    operation_name: str = BATCH_OPERATION_NAME,
) -> ComposedRequest | None:
    """Merge *entries* into one document.

    Returns ``None`` when there is nothing to send.
    """
    bodies: list[str] = []
    var_types: dict[str, str] = {}
    var_values: dict[str, Any] = {}

    for entry in entries:
        renames: dict[str, str] = {}
        for arg_name, spec in entry.args.items():
            renamed = renamed_argument(entry.name, arg_name)
            var_values[renamed] = resolve_argument(spec, variables.get(arg_name))
            var_types[renamed] = spec.type
            renames[arg_name] = renamed
        bodies.append(rename_variables(entry.query_text, renames))

    if not bodies:
        return None

    body = " ".join(bodies)
    composed_vars: dict[str, Any] | None
    if var_types:
        signature = ", ".join(f"${name}: {type_}" for name, type_ in var_types.items())
        document = f"{operation_name}({signature}) {{ {body} }}"
        composed_vars = var_values
    else:
        document = f"{{{body}}}"
        composed_vars = None

    prefix = " ".join(directives)
    if prefix:
        document = f"{prefix} {document}"

    return ComposedRequest(document=f"{keyword} {document}", variables=composed_vars)


def deep_merge(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge mappings left to right; later layers win, nested mappings merge."""
    merged: dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        _merge_into(merged, layer)
    return merged


def _merge_into(target: dict[str, Any], incoming: Mapping[str, Any]) -> None:
    for key, value in incoming.items():
        existing = target.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            _merge_into(existing, value)
        elif isinstance(value, Mapping):
            target[key] = deep_merge(value)
        else:
            target[key] = copy.deepcopy(value)
