#!/usr/bin/env python3
"""Run a single GraphQL query (or mutation) through the batching registry.

Useful for checking what document gqlbatch composes and how a server
answers it.

Usage
-----
Set environment variables and run::

    export GQL_URL="https://api.example.com/graphql"
    export GQL_HEADERS='{"Authorization": "Bearer ..."}'
    python scripts/run_query.py getUser 'getUser(id: $id) { name }' --arg id:Int=7

Options::

    --arg NAME:TYPE=VALUE   Declare an argument (repeatable)
    --mutation              Send as a mutation (POST) instead of a query (GET)
    --dry-run               Print the composed document without sending it
    --output FILE           Write the JSON result to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from gqlbatch import GqlClient, GqlConfig, GqlQuery


def _parse_arg(raw: str) -> tuple[str, dict[str, Any]]:
    """``name:Type=value`` → ``("name", {"type": "Type", "value": "value"})``."""
    declaration, _, value = raw.partition("=")
    name, sep, type_ = declaration.partition(":")
    if not sep or not name or not type_:
        raise argparse.ArgumentTypeError(f"expected NAME:TYPE[=VALUE], got {raw!r}")
    return name, {"type": type_, "value": value or None}


def _register(registry: GqlQuery, args: argparse.Namespace) -> None:
    registry.set(args.name, args.query_text, args=dict(args.arg or []))


async def main() -> None:
    parser = argparse.ArgumentParser(description="Run a batched GraphQL request with gqlbatch.")
    parser.add_argument("name", help="Query name (also the response data key)")
    parser.add_argument("query_text", help="Query fragment, e.g. 'getUser(id: $id) { name }'")
    parser.add_argument("--arg", action="append", type=_parse_arg, help="Argument as NAME:TYPE=VALUE")
    parser.add_argument("--mutation", action="store_true", help="Send as a mutation")
    parser.add_argument("--dry-run", action="store_true", help="Print the composed request only")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = GqlConfig.from_env(log_payloads=args.verbose)

    async with GqlClient(config) as client:
        registry = client.mutation() if args.mutation else client.query()
        _register(registry, args)

        if args.dry_run:
            request = registry.compose()
            result: dict[str, Any] = request.to_payload() if request is not None else {}
        else:
            outcome = await registry.exec()
            result = {"errors": outcome.errors, "data": outcome.data}

    payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"JSON written to {args.output}", file=sys.stderr)
    else:
        print(payload)


if __name__ == "__main__":
    asyncio.run(main())
