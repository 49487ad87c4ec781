"""Positional statement executor over any PEP 249 (DB-API 2.0) connection."""

import datetime
import logging
from collections.abc import Generator
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Callable, Optional

from sqlnamed.exceptions import BatchExecutionError, StatementClosedError, UnderlyingExecutionError
from sqlnamed.parameters.config import NamedStatementConfig
from sqlnamed.parameters.resolver import count_positional_markers
from sqlnamed.utils.logging import get_logger, log_with_context

__all__ = ("DBAPIConnection", "DBAPIPositionalStatement")

logger = get_logger("adapters.dbapi")

_INTEGER_BITS = {"set_byte": 8, "set_short": 16, "set_int": 32, "set_long": 64}


def _type_name(value: Any) -> str:
    return type(value).__name__


def _driver_error_types(connection: Any) -> "tuple[type[Exception], ...]":
    # PEP 249 optional extension: connections expose the module's Error class
    error_type = getattr(connection, "Error", None)
    if isinstance(error_type, type) and issubclass(error_type, Exception):
        return (error_type,)
    return (Exception,)


class DBAPIPositionalStatement:
    """Positional statement emulated on a DB-API cursor.

    DB-API has no prepared statement object, so bound values are kept per
    1-based slot and handed to ``cursor.execute`` on execution.
    """

    __slots__ = ("_batch", "_bindings", "_closed", "_connection", "_error_types", "_parameter_count", "_sql", "config")

    def __init__(self, connection: Any, sql: str, config: NamedStatementConfig) -> None:
        self._connection = connection
        self._sql = sql
        self.config = config
        self._parameter_count = count_positional_markers(sql, config.positional_style, config.backslash_escapes)
        self._bindings: dict[int, Any] = {}
        self._batch: list[tuple[Any, ...]] = []
        self._closed = False
        self._error_types = _driver_error_types(connection)

    @property
    def sql(self) -> str:
        return self._sql

    @property
    def parameter_count(self) -> int:
        return self._parameter_count

    @property
    def bindings(self) -> "dict[int, Any]":
        """Copy of the values currently bound, keyed by slot."""
        return dict(self._bindings)

    def _check_open(self) -> None:
        if self._closed:
            raise StatementClosedError

    def _coerce(self, value: Any) -> Any:
        if value is None:
            return None
        coercion_map = self.config.type_coercion_map
        converter: Optional[Callable[[Any], Any]] = coercion_map.get(type(value))
        if converter is None:
            for value_type, candidate in coercion_map.items():
                if isinstance(value, value_type):
                    converter = candidate
                    break
        return converter(value) if converter is not None else value

    def _bind(self, position: int, value: Any) -> None:
        self._check_open()
        if isinstance(position, bool) or not isinstance(position, int) or not 1 <= position <= self._parameter_count:
            msg = f"Parameter position {position!r} is out of range (1..{self._parameter_count})"
            raise UnderlyingExecutionError(msg)
        self._bindings[position] = self._coerce(value)

    def _expect(self, method: str, value: Any, *types: type) -> None:
        if isinstance(value, bool) and bool not in types:
            ok = False
        else:
            ok = isinstance(value, types)
        if not ok:
            expected = " or ".join(t.__name__ for t in types)
            msg = f"{method} expects {expected}, got {_type_name(value)}"
            raise UnderlyingExecutionError(msg)

    def _bind_integer(self, method: str, position: int, value: int) -> None:
        self._expect(method, value, int)
        bits = _INTEGER_BITS[method]
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        if not low <= value <= high:
            msg = f"{method} value {value} is outside the {bits}-bit range [{low}, {high}]"
            raise UnderlyingExecutionError(msg)
        self._bind(position, value)

    def set_null(self, position: int, sql_type: int) -> None:
        self._expect("set_null", sql_type, int)
        self._bind(position, None)

    def set_boolean(self, position: int, value: bool) -> None:
        self._expect("set_boolean", value, bool)
        self._bind(position, value)

    def set_byte(self, position: int, value: int) -> None:
        self._bind_integer("set_byte", position, value)

    def set_short(self, position: int, value: int) -> None:
        self._bind_integer("set_short", position, value)

    def set_int(self, position: int, value: int) -> None:
        self._bind_integer("set_int", position, value)

    def set_long(self, position: int, value: int) -> None:
        self._bind_integer("set_long", position, value)

    def set_float(self, position: int, value: float) -> None:
        self._expect("set_float", value, float, int)
        self._bind(position, float(value))

    def set_double(self, position: int, value: float) -> None:
        self._expect("set_double", value, float, int)
        self._bind(position, float(value))

    def set_decimal(self, position: int, value: Decimal) -> None:
        if value is None:
            self._bind(position, None)
            return
        self._expect("set_decimal", value, Decimal)
        self._bind(position, value)

    def set_string(self, position: int, value: str) -> None:
        if value is None:
            self._bind(position, None)
            return
        self._expect("set_string", value, str)
        self._bind(position, value)

    def set_bytes(self, position: int, value: bytes) -> None:
        if value is None:
            self._bind(position, None)
            return
        self._expect("set_bytes", value, bytes, bytearray, memoryview)
        self._bind(position, bytes(value))

    def set_date(self, position: int, value: datetime.date) -> None:
        if value is None:
            self._bind(position, None)
            return
        if isinstance(value, datetime.datetime):
            msg = "set_date expects date, got datetime"
            raise UnderlyingExecutionError(msg)
        self._expect("set_date", value, datetime.date)
        self._bind(position, value)

    def set_time(self, position: int, value: datetime.time) -> None:
        if value is None:
            self._bind(position, None)
            return
        self._expect("set_time", value, datetime.time)
        self._bind(position, value)

    def set_timestamp(self, position: int, value: datetime.datetime) -> None:
        if value is None:
            self._bind(position, None)
            return
        self._expect("set_timestamp", value, datetime.datetime)
        self._bind(position, value)

    def set_object(self, position: int, value: Any) -> None:
        self._bind(position, value)

    def clear_parameters(self) -> None:
        self._check_open()
        self._bindings.clear()

    def _parameters(self) -> "tuple[Any, ...]":
        missing = [slot for slot in range(1, self._parameter_count + 1) if slot not in self._bindings]
        if missing:
            msg = f"No value bound for parameter position(s) {', '.join(map(str, missing))}"
            raise UnderlyingExecutionError(msg)
        return tuple(self._bindings[slot] for slot in range(1, self._parameter_count + 1))

    @contextmanager
    def _handle_database_exceptions(self, action: str) -> Generator[None, None, None]:
        try:
            yield
        except self._error_types as e:
            msg = f"{action} failed: {e}"
            raise UnderlyingExecutionError(msg) from e

    def execute_query(self) -> Any:
        """Execute the bound query and return the live cursor; the caller closes it."""
        self._check_open()
        parameters = self._parameters()
        cursor = self._connection.cursor()
        try:
            with self._handle_database_exceptions("Query execution"):
                cursor.execute(self._sql, parameters)
        except BaseException:
            cursor.close()
            raise
        return cursor

    def execute_update(self) -> int:
        self._check_open()
        parameters = self._parameters()
        cursor = self._connection.cursor()
        try:
            with self._handle_database_exceptions("Update execution"):
                cursor.execute(self._sql, parameters)
            return int(cursor.rowcount)
        finally:
            cursor.close()

    def add_batch(self) -> None:
        self._check_open()
        self._batch.append(self._parameters())

    def execute_batch(self) -> "list[int]":
        """Run pending rows in order; the first failing row stops the batch."""
        self._check_open()
        rows, self._batch = self._batch, []
        update_counts: list[int] = []
        if not rows:
            return update_counts
        cursor = self._connection.cursor()
        try:
            for row_number, row in enumerate(rows):
                try:
                    cursor.execute(self._sql, row)
                except self._error_types as e:
                    msg = f"Batch row {row_number} of {len(rows)} failed: {e}"
                    raise BatchExecutionError(msg, update_counts) from e
                update_counts.append(int(cursor.rowcount))
        finally:
            cursor.close()
        log_with_context(
            logger, logging.DEBUG, "Executed batch", rows=len(update_counts), rows_affected=sum(update_counts)
        )
        return update_counts

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._bindings.clear()
        self._batch.clear()


class DBAPIConnection:
    """Prepares positional statements on a DB-API connection.

    The wrapped connection stays owned by the caller; transactions are left
    to it.
    """

    __slots__ = ("connection", "statement_config")

    def __init__(self, connection: Any, statement_config: Optional[NamedStatementConfig] = None) -> None:
        self.connection = connection
        self.statement_config = statement_config or NamedStatementConfig()

    def prepare_statement(self, sql: str) -> DBAPIPositionalStatement:
        return DBAPIPositionalStatement(self.connection, sql, self.statement_config)
