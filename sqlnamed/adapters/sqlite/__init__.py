"""SQLite adapter for sqlnamed."""

from sqlnamed.adapters.sqlite.driver import (
    SqliteConnection,
    SqliteConnectionParams,
    connect,
    sqlite_statement_config,
)

__all__ = ("SqliteConnection", "SqliteConnectionParams", "connect", "sqlite_statement_config")
