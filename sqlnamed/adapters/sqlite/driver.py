"""SQLite connection that prepares positional statements for named-statement use.

Built on the stdlib ``sqlite3`` driver with ``?`` markers. Booleans, decimals,
date/time values and JSON-like containers are coerced to types SQLite stores
natively before they are bound.
"""

import datetime
import sqlite3
from decimal import Decimal
from typing import Any, Optional, TypedDict

from typing_extensions import NotRequired, Self, Unpack

from sqlnamed._serialization import encode_json
from sqlnamed.adapters.dbapi import DBAPIConnection
from sqlnamed.parameters.config import NamedStatementConfig
from sqlnamed.parameters.types import PositionalStyle
from sqlnamed.utils.logging import get_logger

__all__ = ("SqliteConnection", "SqliteConnectionParams", "connect", "sqlite_statement_config")

logger = get_logger("adapters.sqlite")


class SqliteConnectionParams(TypedDict, total=False):
    """SQLite connection parameters."""

    timeout: NotRequired[float]
    detect_types: NotRequired[int]
    isolation_level: "NotRequired[Optional[str]]"
    check_same_thread: NotRequired[bool]
    cached_statements: NotRequired[int]
    uri: NotRequired[bool]


sqlite_statement_config = NamedStatementConfig(
    positional_style=PositionalStyle.QMARK,
    type_coercion_map={
        bool: int,
        Decimal: str,
        datetime.datetime: lambda v: v.isoformat(),
        datetime.date: lambda v: v.isoformat(),
        datetime.time: lambda v: v.isoformat(),
        dict: encode_json,
        list: encode_json,
        tuple: lambda v: encode_json(list(v)),
    },
)


class SqliteConnection(DBAPIConnection):
    """``sqlite3`` connection preparing ``?`` statements."""

    __slots__ = ()

    def __init__(
        self, connection: sqlite3.Connection, statement_config: Optional[NamedStatementConfig] = None
    ) -> None:
        super().__init__(connection, statement_config or sqlite_statement_config)

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def connect(database: str = ":memory:", **kwargs: Unpack[SqliteConnectionParams]) -> SqliteConnection:
    """Open a ``sqlite3`` database and wrap it for named statements."""
    logger.debug("Opening SQLite database %s", database)
    return SqliteConnection(sqlite3.connect(database, **kwargs))
