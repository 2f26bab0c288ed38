"""SQLite adapter for sqlrepo."""

from sqlrepo.adapters.sqlite._types import SqliteConnection
from sqlrepo.adapters.sqlite.config import SqliteConfig, SqliteConnectionParams
from sqlrepo.adapters.sqlite.driver import SqliteCursor, SqliteDriver

__all__ = ("SqliteConfig", "SqliteConnection", "SqliteConnectionParams", "SqliteCursor", "SqliteDriver")
