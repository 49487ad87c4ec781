"""Runtime-checkable protocols describing the positional statement executor.

A named statement only needs something that can prepare SQL written with
positional markers and bind values by 1-based position. Any object with the
methods below qualifies, which keeps the named layer testable against
in-memory fakes.
"""

import datetime
from collections.abc import Iterator, Sequence
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqlnamed.parameters.config import NamedStatementConfig

__all__ = (
    "HasStatementConfigProtocol",
    "PositionalConnectionProtocol",
    "PositionalStatementProtocol",
    "RowStreamProtocol",
)


@runtime_checkable
class RowStreamProtocol(Protocol):
    """Forward-only, single-pass stream of result rows."""

    def __iter__(self) -> Iterator[Any]: ...

    def fetchone(self) -> Any: ...

    def close(self) -> None: ...


@runtime_checkable
class PositionalStatementProtocol(Protocol):
    """Prepared statement addressed by 1-based positional slots."""

    def set_null(self, position: int, sql_type: int) -> None: ...

    def set_boolean(self, position: int, value: bool) -> None: ...

    def set_byte(self, position: int, value: int) -> None: ...

    def set_short(self, position: int, value: int) -> None: ...

    def set_int(self, position: int, value: int) -> None: ...

    def set_long(self, position: int, value: int) -> None: ...

    def set_float(self, position: int, value: float) -> None: ...

    def set_double(self, position: int, value: float) -> None: ...

    def set_decimal(self, position: int, value: Decimal) -> None: ...

    def set_string(self, position: int, value: str) -> None: ...

    def set_bytes(self, position: int, value: bytes) -> None: ...

    def set_date(self, position: int, value: datetime.date) -> None: ...

    def set_time(self, position: int, value: datetime.time) -> None: ...

    def set_timestamp(self, position: int, value: datetime.datetime) -> None: ...

    def set_object(self, position: int, value: Any) -> None: ...

    def clear_parameters(self) -> None: ...

    def execute_query(self) -> RowStreamProtocol: ...

    def execute_update(self) -> int: ...

    def add_batch(self) -> None: ...

    def execute_batch(self) -> Sequence[int]: ...

    def close(self) -> None: ...


@runtime_checkable
class PositionalConnectionProtocol(Protocol):
    """Connection-like object able to prepare positional statements."""

    def prepare_statement(self, sql: str) -> PositionalStatementProtocol: ...


@runtime_checkable
class HasStatementConfigProtocol(Protocol):
    """Connection carrying the statement configuration its driver expects."""

    statement_config: "Optional[NamedStatementConfig]"
