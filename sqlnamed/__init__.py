"""Named placeholders over positional prepared statements."""

from sqlnamed import adapters, exceptions, parameters
from sqlnamed.exceptions import (
    BatchExecutionError,
    IndexOutOfRangeError,
    StatementClosedError,
    UnderlyingExecutionError,
    UnknownFieldError,
    UnreferencedFieldError,
)
from sqlnamed.parameters import (
    NamedStatementConfig,
    PlaceholderResolver,
    PositionalStyle,
    ResolvedStatement,
    resolve_named_placeholders,
)
from sqlnamed.sql_types import SQLType
from sqlnamed.statement import NamedStatement, prepare_statement

__all__ = (
    "BatchExecutionError",
    "IndexOutOfRangeError",
    "NamedStatement",
    "NamedStatementConfig",
    "PlaceholderResolver",
    "PositionalStyle",
    "ResolvedStatement",
    "SQLType",
    "StatementClosedError",
    "UnderlyingExecutionError",
    "UnknownFieldError",
    "UnreferencedFieldError",
    "adapters",
    "exceptions",
    "parameters",
    "prepare_statement",
    "resolve_named_placeholders",
)
