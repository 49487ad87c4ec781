from __future__ import annotations

from typing import Any

import pytest

from sqlnamed.exceptions import BatchExecutionError, UnderlyingExecutionError
from sqlnamed.parameters import PlaceholderResolver

SET_METHODS = (
    "set_null",
    "set_boolean",
    "set_byte",
    "set_short",
    "set_int",
    "set_long",
    "set_float",
    "set_double",
    "set_decimal",
    "set_string",
    "set_bytes",
    "set_date",
    "set_time",
    "set_timestamp",
    "set_object",
)


class RecordingStatement:
    """In-memory positional statement that records every call it receives."""

    def __init__(self, sql: str) -> None:
        self.sql = sql
        self.calls: list[tuple[str, int, Any]] = []
        self.bound: dict[int, Any] = {}
        self.batch: list[dict[int, Any]] = []
        self.close_count = 0
        self.clear_count = 0
        self.fail_on: dict[str, Exception] = {}
        self.failing_batch_row: int | None = None
        self.rows: list[tuple[Any, ...]] = []

    def _record(self, method: str, position: int, value: Any) -> None:
        if method in self.fail_on:
            raise self.fail_on[method]
        self.calls.append((method, position, value))
        self.bound[position] = value

    def __getattr__(self, name: str) -> Any:
        if name in SET_METHODS:
            return lambda position, value: self._record(name, position, value)
        raise AttributeError(name)

    def clear_parameters(self) -> None:
        self.clear_count += 1
        self.bound.clear()

    def execute_query(self) -> Any:
        if "execute_query" in self.fail_on:
            raise self.fail_on["execute_query"]
        return iter(list(self.rows))

    def execute_update(self) -> int:
        return len(self.bound)

    def add_batch(self) -> None:
        self.batch.append(dict(self.bound))

    def execute_batch(self) -> list[int]:
        rows, self.batch = self.batch, []
        counts: list[int] = []
        for number, _row in enumerate(rows):
            if number == self.failing_batch_row:
                raise BatchExecutionError(f"row {number} failed", counts)
            counts.append(1)
        return counts

    def close(self) -> None:
        self.close_count += 1


class RecordingConnection:
    def __init__(self) -> None:
        self.prepared: list[RecordingStatement] = []
        self.prepare_error: Exception | None = None

    def prepare_statement(self, sql: str) -> RecordingStatement:
        if self.prepare_error is not None:
            raise self.prepare_error
        statement = RecordingStatement(sql)
        self.prepared.append(statement)
        return statement


@pytest.fixture(autouse=True)
def clear_resolver_cache() -> None:
    PlaceholderResolver.clear_cache()


@pytest.fixture
def recording_connection() -> RecordingConnection:
    return RecordingConnection()


@pytest.fixture
def underlying_error() -> UnderlyingExecutionError:
    return UnderlyingExecutionError("type mismatch")
