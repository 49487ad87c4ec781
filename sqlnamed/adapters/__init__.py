"""Positional statement executors for sqlnamed."""

from sqlnamed.adapters.dbapi import DBAPIConnection, DBAPIPositionalStatement

__all__ = ("DBAPIConnection", "DBAPIPositionalStatement")
