"""gqlbatch - Batched async GraphQL queries with an observable state store."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gqlbatch")
except PackageNotFoundError:
    __version__ = "0+local"
from gqlbatch._transport import HttpTransport, Transport
from gqlbatch.client import GqlClient
from gqlbatch.config import GqlConfig
from gqlbatch.exceptions import (
    GqlConfigError,
    GqlError,
    GqlFieldError,
    GqlNotConfiguredError,
    GqlResponseError,
    GqlServerError,
    GqlStateError,
    GqlTransportError,
    GqlValidationError,
)
from gqlbatch.models import ArgumentSpec, ComposedRequest, ExecResult, QueryEntry, UploadFile
from gqlbatch.mutation import GqlMutation, GqlUpload, run_mutation
from gqlbatch.query import GqlQuery, run_query
from gqlbatch.state import GqlQueryState, Subscription

__all__ = [
    "__version__",
    "ArgumentSpec",
    "ComposedRequest",
    "ExecResult",
    "GqlClient",
    "GqlConfig",
    "GqlConfigError",
    "GqlError",
    "GqlFieldError",
    "GqlMutation",
    "GqlNotConfiguredError",
    "GqlQuery",
    "GqlQueryState",
    "GqlResponseError",
    "GqlServerError",
    "GqlStateError",
    "GqlTransportError",
    "GqlUpload",
    "GqlValidationError",
    "HttpTransport",
    "QueryEntry",
    "Subscription",
    "Transport",
    "UploadFile",
    "run_mutation",
    "run_query",
]
