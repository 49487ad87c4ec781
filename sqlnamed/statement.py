"""Named statement: field-index binding over a positional prepared statement."""

import datetime
import logging
from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from typing_extensions import Self

from sqlnamed.exceptions import IndexOutOfRangeError, StatementClosedError
from sqlnamed.parameters.config import NamedStatementConfig
from sqlnamed.parameters.resolver import PlaceholderResolver
from sqlnamed.protocols import HasStatementConfigProtocol
from sqlnamed.utils.logging import get_logger, log_with_context

if TYPE_CHECKING:
    from types import TracebackType

    from sqlnamed.parameters.types import IndexMap, ResolvedStatement
    from sqlnamed.protocols import PositionalConnectionProtocol, PositionalStatementProtocol, RowStreamProtocol
    from sqlnamed.sql_types import SQLTypeCode

__all__ = ("NamedStatement", "prepare_statement")

logger = get_logger("statement")


def _resolve_config(
    connection: "PositionalConnectionProtocol", config: Optional[NamedStatementConfig]
) -> NamedStatementConfig:
    if config is not None:
        return config
    if isinstance(connection, HasStatementConfigProtocol) and isinstance(
        connection.statement_config, NamedStatementConfig
    ):
        return connection.statement_config
    return NamedStatementConfig()


class NamedStatement:
    """Binds values by field index and fans each one out to its positional slots.

    The statement owns the underlying positional statement and closes it in
    :meth:`close`. Instances are not safe for concurrent use.
    """

    __slots__ = ("_closed", "_resolved", "_statement")

    def __init__(self, statement: "PositionalStatementProtocol", resolved: "ResolvedStatement") -> None:
        self._statement = statement
        self._resolved = resolved
        self._closed = False

    @classmethod
    def prepare(
        cls,
        connection: "PositionalConnectionProtocol",
        sql: str,
        field_names: "Sequence[str]",
        config: Optional[NamedStatementConfig] = None,
    ) -> Self:
        """Resolve ``sql`` and prepare its positional form on ``connection``.

        Resolution happens before anything is prepared, so a failing
        resolution never leaves an underlying statement behind.

        Args:
            connection: Connection-like object with ``prepare_statement(sql)``
            sql: SQL text using ``:name`` placeholders
            field_names: Ordered field names; list position is the field index
            config: Resolution settings. Defaults to the connection's ``statement_config``.

        Raises:
            UnknownFieldError: ``sql`` references a name missing from ``field_names``

        Returns:
            The named statement
        """
        resolved = PlaceholderResolver(_resolve_config(connection, config)).resolve(sql, field_names)
        statement = connection.prepare_statement(resolved.sql)
        log_with_context(
            logger,
            logging.DEBUG,
            "Prepared named statement",
            parameter_count=resolved.parameter_count,
            field_names=list(resolved.field_names),
        )
        return cls(statement, resolved)

    @property
    def sql(self) -> str:
        """The rewritten SQL handed to the underlying statement."""
        return self._resolved.sql

    @property
    def original_sql(self) -> str:
        return self._resolved.original_sql

    @property
    def field_names(self) -> "tuple[str, ...]":
        return self._resolved.field_names

    @property
    def index_map(self) -> "IndexMap":
        return self._resolved.index_map

    @property
    def resolved(self) -> "ResolvedStatement":
        return self._resolved

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise StatementClosedError

    def _slots(self, field_index: int) -> "tuple[int, ...]":
        self._check_open()
        field_count = self._resolved.field_count
        if isinstance(field_index, bool) or not isinstance(field_index, int) or not 0 <= field_index < field_count:
            raise IndexOutOfRangeError(field_index, field_count)
        slots = self._resolved.index_map[field_index]
        if not slots:
            logger.debug(
                "Field %r (index %d) is not referenced by the statement; binding ignored",
                self._resolved.field_names[field_index],
                field_index,
            )
        return slots

    def clear_parameters(self) -> None:
        """Release every value currently bound on the underlying statement."""
        self._check_open()
        self._statement.clear_parameters()

    def execute_query(self) -> "RowStreamProtocol":
        """Execute the current bindings as a query.

        Returns:
            The underlying row stream. The caller owns it and must close it.
        """
        self._check_open()
        return self._statement.execute_query()

    def execute_update(self) -> int:
        """Execute the current bindings as a data-modifying statement and return its update count."""
        self._check_open()
        return self._statement.execute_update()

    def add_batch(self) -> None:
        """Snapshot the current bindings as one pending batch row."""
        self._check_open()
        self._statement.add_batch()

    def execute_batch(self) -> "Sequence[int]":
        """Execute pending batch rows; one update count per row, in insertion order."""
        self._check_open()
        return self._statement.execute_batch()

    def set_null(self, field_index: int, sql_type: "SQLTypeCode") -> None:
        for position in self._slots(field_index):
            self._statement.set_null(position, int(sql_type))

    def set_boolean(self, field_index: int, value: bool) -> None:
        for position in self._slots(field_index):
            self._statement.set_boolean(position, value)

    def set_byte(self, field_index: int, value: int) -> None:
        for position in self._slots(field_index):
            self._statement.set_byte(position, value)

    def set_short(self, field_index: int, value: int) -> None:
        for position in self._slots(field_index):
            self._statement.set_short(position, value)

    def set_int(self, field_index: int, value: int) -> None:
        for position in self._slots(field_index):
            self._statement.set_int(position, value)

    def set_long(self, field_index: int, value: int) -> None:
        for position in self._slots(field_index):
            self._statement.set_long(position, value)

    def set_float(self, field_index: int, value: float) -> None:
        for position in self._slots(field_index):
            self._statement.set_float(position, value)

    def set_double(self, field_index: int, value: float) -> None:
        for position in self._slots(field_index):
            self._statement.set_double(position, value)

    def set_decimal(self, field_index: int, value: Decimal) -> None:
        for position in self._slots(field_index):
            self._statement.set_decimal(position, value)

    def set_string(self, field_index: int, value: str) -> None:
        for position in self._slots(field_index):
            self._statement.set_string(position, value)

    def set_bytes(self, field_index: int, value: bytes) -> None:
        for position in self._slots(field_index):
            self._statement.set_bytes(position, value)

    def set_date(self, field_index: int, value: datetime.date) -> None:
        for position in self._slots(field_index):
            self._statement.set_date(position, value)

    def set_time(self, field_index: int, value: datetime.time) -> None:
        for position in self._slots(field_index):
            self._statement.set_time(position, value)

    def set_timestamp(self, field_index: int, value: datetime.datetime) -> None:
        for position in self._slots(field_index):
            self._statement.set_timestamp(position, value)

    def set_object(self, field_index: int, value: Any) -> None:
        for position in self._slots(field_index):
            self._statement.set_object(position, value)

    def close(self) -> None:
        """Close the underlying statement. Calling this again does nothing."""
        if self._closed:
            return
        self._closed = True
        self._statement.close()
        logger.debug("Closed named statement")

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: "Optional[type[BaseException]]",
        exc_val: Optional[BaseException],
        exc_tb: "Optional[TracebackType]",
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"{type(self).__name__}(sql={self._resolved.sql!r}, field_names={self._resolved.field_names!r}, {state})"


def prepare_statement(
    connection: "PositionalConnectionProtocol",
    sql: str,
    field_names: "Sequence[str]",
    config: Optional[NamedStatementConfig] = None,
) -> NamedStatement:
    """Create a :class:`NamedStatement` for ``sql`` on ``connection``."""
    return NamedStatement.prepare(connection, sql, field_names, config)
