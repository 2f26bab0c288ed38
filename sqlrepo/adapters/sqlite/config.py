"""SQLite database configuration."""

import sqlite3
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, ClassVar, Optional, TypedDict, Union

from typing_extensions import NotRequired

from sqlrepo.adapters.sqlite._types import SqliteConnection
from sqlrepo.adapters.sqlite.driver import SqliteDriver
from sqlrepo.exceptions import ImproperConfigurationError
from sqlrepo.utils.logging import get_logger

logger = get_logger("adapters.sqlite")

__all__ = ("SqliteConfig", "SqliteConnectionParams")


class SqliteConnectionParams(TypedDict, total=False):
    """SQLite connection parameters."""

    database: NotRequired[str]
    timeout: NotRequired[float]
    detect_types: NotRequired[int]
    isolation_level: "NotRequired[Optional[str]]"
    check_same_thread: NotRequired[bool]
    factory: "NotRequired[Optional[type[SqliteConnection]]]"
    cached_statements: NotRequired[int]
    uri: NotRequired[bool]


class SqliteConfig:
    """SQLite configuration without a pool; every connection is created on demand."""

    __slots__ = ("connection_config",)

    driver_type: "ClassVar[type[SqliteDriver]]" = SqliteDriver
    connection_type: "ClassVar[type[SqliteConnection]]" = SqliteConnection

    def __init__(
        self,
        *,
        connection_config: "Optional[Union[SqliteConnectionParams, dict[str, Any]]]" = None,
    ) -> None:
        """Initialize SQLite configuration.

        Args:
            connection_config: Parameters passed to ``sqlite3.connect``.
        """
        config: dict[str, Any] = dict(connection_config or {})
        if "database" not in config or config["database"] == ":memory:":
            config["database"] = f"file:memory_{uuid.uuid4().hex}?mode=memory&cache=shared"
            config["uri"] = True
        elif str(config["database"]).startswith("file:") and not config.get("uri"):
            logger.debug("Database URI detected (%s) but uri=True not set; enabling URI mode", config["database"])
            config["uri"] = True
        self.connection_config = config

    def __repr__(self) -> str:
        return f"{type(self).__name__}(connection_config={self.connection_config!r})"

    def create_connection(self) -> SqliteConnection:
        """Create a new SQLite connection.

        Raises:
            ImproperConfigurationError: If the connection cannot be opened.
        """
        try:
            return sqlite3.connect(**self.connection_config)
        except sqlite3.Error as e:
            msg = f"Could not configure the SQLite connection. Error: {e}"
            raise ImproperConfigurationError(msg) from e

    @contextmanager
    def provide_connection(self) -> "Generator[SqliteConnection, None, None]":
        """Provide a SQLite connection, committed on success and closed afterwards."""
        connection = self.create_connection()
        try:
            yield connection
            connection.commit()
        except Exception:
            connection.rollback()
            raise
        finally:
            connection.close()

    @contextmanager
    def provide_session(self) -> "Generator[SqliteDriver, None, None]":
        """Provide a SQLite driver session.

        Yields:
            SqliteDriver: A driver bound to a fresh connection.
        """
        with self.provide_connection() as connection:
            yield self.driver_type(connection=connection)
