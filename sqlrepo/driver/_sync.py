"""Synchronous execution primitive base class."""

from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import AbstractContextManager, contextmanager
from typing import TYPE_CHECKING, Any, Callable, ClassVar

from sqlrepo.driver._common import GeneratedKeys, ResultColumns, ResultRow
from sqlrepo.exceptions import MultipleResultsFoundError, NotFoundError
from sqlrepo.mapping._base import SingleColumnRowMapper
from sqlrepo.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlrepo.mapping._base import RowMapper

__all__ = ("SyncDriverAdapterBase",)

logger = get_logger("driver")


class SyncDriverAdapterBase(ABC):
    """Blocking query and execute primitives over a single connection.

    Every public method performs one round trip using the template method
    pattern: parameters are coerced with :attr:`type_coercion_map`, a cursor
    is acquired with :meth:`with_cursor`, the statement runs through
    :meth:`_execute_statement` and the database specific extraction methods
    read the outcome, all inside :meth:`handle_database_exceptions`.
    """

    __slots__ = ("connection",)

    dialect: ClassVar[str] = ""
    """Backend identifier, used as the default active variant id."""
    type_coercion_map: ClassVar["dict[type, Callable[[Any], Any]]"] = {}

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    @abstractmethod
    def with_cursor(self, connection: Any) -> "AbstractContextManager[Any]":
        """Return a context manager yielding a cursor and closing it afterwards."""

    @abstractmethod
    def handle_database_exceptions(self) -> "AbstractContextManager[None]":
        """Return a context manager translating driver exceptions into sqlrepo exceptions."""

    @abstractmethod
    def _execute_statement(self, cursor: Any, sql: str, prepared_parameters: "dict[str, Any]") -> None:
        """Execute a single statement with named parameters."""

    @abstractmethod
    def _get_selected_data(self, cursor: Any) -> "tuple[list[str], list[tuple[Any, ...]]]":
        """Extract column names and all rows from the cursor."""

    @abstractmethod
    def _get_row_count(self, cursor: Any) -> int:
        """Extract the affected row count from the cursor."""

    @abstractmethod
    def _get_generated_keys(self, cursor: Any) -> GeneratedKeys:
        """Extract the generated keys of the last insert from the cursor."""

    def prepare_driver_parameters(self, parameters: "dict[str, Any]") -> "dict[str, Any]":
        """Apply the type coercion map to bind values the driver cannot store natively."""
        if not self.type_coercion_map:
            return parameters
        prepared: dict[str, Any] = {}
        for name, value in parameters.items():
            prepared[name] = value
            if value is None:
                continue
            for klass in type(value).__mro__:
                converter = self.type_coercion_map.get(klass)
                if converter is not None:
                    prepared[name] = converter(value)
                    break
        return prepared

    def _fetch(self, sql: str, parameters: "dict[str, Any]") -> "tuple[ResultColumns, list[tuple[Any, ...]]]":
        logger.debug("Query: %s", sql)
        prepared = self.prepare_driver_parameters(parameters)
        with self.handle_database_exceptions(), self.with_cursor(self.connection) as cursor:
            self._execute_statement(cursor, sql, prepared)
            column_names, rows = self._get_selected_data(cursor)
        return ResultColumns(column_names), rows

    def select(self, sql: str, parameters: "dict[str, Any]", row_mapper: "RowMapper[Any]") -> "list[Any]":
        """Run a query and map every row.

        Returns:
            The mapped rows in result order, empty when nothing matched.
        """
        columns, rows = self._fetch(sql, parameters)
        return [row_mapper.map_row(ResultRow(columns, values), index) for index, values in enumerate(rows)]

    def select_one(self, sql: str, parameters: "dict[str, Any]", row_mapper: "RowMapper[Any]") -> Any:
        """Run a query that must return exactly one row.

        Raises:
            NotFoundError: If no row matched.
            MultipleResultsFoundError: If more than one row matched.

        Returns:
            The mapped row.
        """
        columns, rows = self._fetch(sql, parameters)
        if not rows:
            raise NotFoundError
        if len(rows) > 1:
            raise MultipleResultsFoundError(len(rows))
        return row_mapper.map_row(ResultRow(columns, rows[0]), 0)

    def execute(self, sql: str, parameters: "dict[str, Any]") -> int:
        """Run a mutation.

        Returns:
            The number of affected rows.
        """
        logger.debug("Update: %s", sql)
        prepared = self.prepare_driver_parameters(parameters)
        with self.handle_database_exceptions(), self.with_cursor(self.connection) as cursor:
            self._execute_statement(cursor, sql, prepared)
            return self._get_row_count(cursor)

    def execute_with_keys(self, sql: str, parameters: "dict[str, Any]") -> GeneratedKeys:
        """Run a mutation and report the keys generated by the database."""
        logger.debug("Insert with generated keys: %s", sql)
        prepared = self.prepare_driver_parameters(parameters)
        with self.handle_database_exceptions(), self.with_cursor(self.connection) as cursor:
            self._execute_statement(cursor, sql, prepared)
            return self._get_generated_keys(cursor)

    def single_column_mapper(self, target_type: Any) -> "RowMapper[Any]":
        """Generic extraction of the only column of a row as ``target_type``."""
        return SingleColumnRowMapper(target_type)

    @contextmanager
    def provide_connection(self) -> "Generator[Any, None, None]":
        """Provide the connection for the duration of the block."""
        yield self.connection
