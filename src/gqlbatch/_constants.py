"""Internal constants shared across the library."""

import re
from collections.abc import Iterable

USER_AGENT = "gqlbatch/1"

#: Reserved error-map key for transport-level and top-level failures.
SERVER_ERROR_KEY = "serverError"
DEFAULT_SERVER_ERROR_MESSAGE = "Something went wrong. Unable to process request!"

#: Error code for a query result the state store could not take as its snapshot.
STATE_ERROR_CODE = "stateError"

#: Name of the operation wrapping a batch that declares variables.
BATCH_OPERATION_NAME = "WRAPPER"

#: Header marking a multipart upload request.
UPLOAD_HEADER = "X-GQL-Upload"

# Any declared type mentioning Int ("Int", "Int!", "[Int!]") is coerced.
INT_TYPE_PATTERN = re.compile(r"Int")

# ------------------------------------------------------------------
# GraphQL name tokens
# ------------------------------------------------------------------

_NAME_TAIL = r"(?![_0-9A-Za-z])"


def variable_pattern(arg_names: Iterable[str]) -> re.Pattern[str]:
    """Match any ``$name`` of *arg_names* as a whole token (``$id`` but not ``$idx``)."""
    alternatives = "|".join(re.escape(name) for name in arg_names)
    return re.compile(r"\$(" + alternatives + ")" + _NAME_TAIL)
