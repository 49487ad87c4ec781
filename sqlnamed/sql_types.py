"""SQL type codes used as the type discriminator of ``set_null``."""

from enum import IntEnum
from typing import Union

from typing_extensions import TypeAlias

__all__ = ("SQLType", "SQLTypeCode")


class SQLType(IntEnum):
    """Generic SQL type codes, numerically identical to JDBC ``java.sql.Types``."""

    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    BINARY = -2
    VARBINARY = -3
    LONGVARBINARY = -4
    NULL = 0
    OTHER = 1111
    JAVA_OBJECT = 2000
    BLOB = 2004
    CLOB = 2005
    BOOLEAN = 16

    def __str__(self) -> str:
        return self.name.lower()


SQLTypeCode: TypeAlias = Union[SQLType, int]
