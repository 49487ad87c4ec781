from typing import Any, Optional

__all__ = (
    "BatchExecutionError",
    "ImproperConfigurationError",
    "IndexOutOfRangeError",
    "ParameterError",
    "ParameterStyleMismatchError",
    "SQLNamedError",
    "StatementClosedError",
    "UnderlyingExecutionError",
    "UnknownFieldError",
    "UnreferencedFieldError",
)


class SQLNamedError(Exception):
    """Base exception class from which all sqlnamed exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLNamedError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(SQLNamedError):
    """Improper Configuration error."""


class StatementClosedError(SQLNamedError):
    """Raised when an operation is attempted on a closed statement."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Statement is closed."
        super().__init__(message)


# -- SQL Parameter Errors --
class ParameterError(SQLNamedError):
    """Base class for parameter-related errors."""

    sql: Optional[str]

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        """Initialize with optional SQL context."""
        detail_message = message
        if sql:
            detail_message = f"{message}\nSQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql


class UnknownFieldError(ParameterError):
    """Raised when SQL references a placeholder that is not a declared field name."""

    name: str
    position: int

    def __init__(self, name: str, position: int, sql: Optional[str] = None) -> None:
        super().__init__(f"Unknown field {name!r} referenced at position {position}", sql)
        self.name = name
        self.position = position


class UnreferencedFieldError(ParameterError):
    """Raised in strict mode when a declared field name never appears in the SQL."""

    name: str
    field_index: int

    def __init__(self, name: str, field_index: int, sql: Optional[str] = None) -> None:
        super().__init__(f"Field {name!r} (index {field_index}) is not referenced by the statement", sql)
        self.name = name
        self.field_index = field_index


class IndexOutOfRangeError(ParameterError, IndexError):
    """Raised when a binding call supplies a field index outside the declared fields."""

    field_index: Any
    field_count: int

    def __init__(self, field_index: Any, field_count: int) -> None:
        super().__init__(f"Field index {field_index!r} is out of range for {field_count} declared fields")
        self.field_index = field_index
        self.field_count = field_count


class ParameterStyleMismatchError(ParameterError):
    """Error when the SQL already contains markers of the target positional style.

    Existing ``?``, ``:1`` or ``$1`` markers of the output style would collide
    with the slots generated for named placeholders.
    """

    def __init__(self, message: Optional[str] = None, sql: Optional[str] = None) -> None:
        if message is None:
            message = "Parameter style mismatch: SQL mixes named placeholders with positional markers."
        super().__init__(message, sql)


# -- Executor Errors --
class UnderlyingExecutionError(SQLNamedError):
    """Failure surfaced by a positional statement executor.

    The named statement never raises this itself. Executors shipped in
    :mod:`sqlnamed.adapters` raise it for bind mismatches and chain the
    driver exception for execution failures.
    """


class BatchExecutionError(UnderlyingExecutionError):
    """A batch row failed; ``update_counts`` holds the counts of the rows that completed."""

    update_counts: "list[int]"

    def __init__(self, message: str, update_counts: "Optional[list[int]]" = None) -> None:
        super().__init__(message)
        self.update_counts = list(update_counts or [])
