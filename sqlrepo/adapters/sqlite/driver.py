import contextlib
import datetime
import sqlite3
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Optional

from sqlrepo.driver import GeneratedKeys, SyncDriverAdapterBase
from sqlrepo.exceptions import DatabaseError, IntegrityError
from sqlrepo.utils.serializers import to_json

if TYPE_CHECKING:
    from sqlrepo.adapters.sqlite._types import SqliteConnection

__all__ = ("SqliteCursor", "SqliteDriver", "sqlite_type_coercion_map")

sqlite_type_coercion_map: "dict[type, Callable[[Any], Any]]" = {
    bool: int,
    datetime.datetime: lambda v: v.isoformat(),
    datetime.date: lambda v: v.isoformat(),
    datetime.time: lambda v: v.isoformat(),
    Decimal: str,
    uuid.UUID: str,
    dict: to_json,
    list: to_json,
    tuple: lambda v: to_json(list(v)),
}


class SqliteCursor:
    """Context manager for SQLite cursor management."""

    def __init__(self, connection: "SqliteConnection") -> None:
        self.connection = connection
        self.cursor: Optional[sqlite3.Cursor] = None

    def __enter__(self) -> "sqlite3.Cursor":
        self.cursor = self.connection.cursor()
        return self.cursor

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.cursor is not None:
            with contextlib.suppress(Exception):
                self.cursor.close()


class SqliteDriver(SyncDriverAdapterBase):
    """Reference execution primitive over the standard library ``sqlite3`` module.

    Named ``:name`` placeholders are handed to ``sqlite3`` unchanged. Generated
    keys come from a ``RETURNING`` clause when the statement has one, otherwise
    from ``cursor.lastrowid`` reported as the ``rowid`` key.
    """

    __slots__ = ()

    dialect: ClassVar[str] = "sqlite"
    type_coercion_map: ClassVar["dict[type, Callable[[Any], Any]]"] = sqlite_type_coercion_map

    def with_cursor(self, connection: "SqliteConnection") -> "SqliteCursor":
        return SqliteCursor(connection)

    @contextmanager
    def handle_database_exceptions(self) -> "Generator[None, None, None]":
        """Wrap SQLite errors; sqlrepo errors raised inside the block pass through."""
        try:
            yield
        except sqlite3.IntegrityError as e:
            msg = f"SQLite integrity constraint violation: {e}"
            raise IntegrityError(msg) from e
        except sqlite3.Error as e:
            msg = f"SQLite database error: {e}"
            raise DatabaseError(msg) from e

    def _execute_statement(self, cursor: "sqlite3.Cursor", sql: str, prepared_parameters: "dict[str, Any]") -> None:
        cursor.execute(sql, prepared_parameters)

    def _get_selected_data(self, cursor: "sqlite3.Cursor") -> "tuple[list[str], list[tuple[Any, ...]]]":
        column_names = [col[0] for col in cursor.description or []]
        return column_names, cursor.fetchall()

    def _get_row_count(self, cursor: "sqlite3.Cursor") -> int:
        return max(cursor.rowcount, 0)

    def _get_generated_keys(self, cursor: "sqlite3.Cursor") -> GeneratedKeys:
        if cursor.description:
            column_names, rows = self._get_selected_data(cursor)
            keys = dict(zip(column_names, rows[0])) if rows else {}
            return GeneratedKeys(affected_rows=len(rows), keys=keys)
        keys = {"rowid": cursor.lastrowid} if cursor.lastrowid else {}
        return GeneratedKeys(affected_rows=self._get_row_count(cursor), keys=keys)
