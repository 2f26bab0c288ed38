"""Fixtures shared by the unit tests: an in-memory execution primitive."""

from __future__ import annotations

from contextlib import AbstractContextManager, nullcontext
from typing import Any, Callable

import pytest

from sqlrepo.driver import GeneratedKeys, SyncDriverAdapterBase


class FakeDriver(SyncDriverAdapterBase):
    """Records statements and returns canned rows, row counts and keys."""

    dialect = "fake"

    def __init__(
        self,
        columns: list[str] | None = None,
        rows: list[tuple[Any, ...]] | None = None,
        rowcount: int = 0,
        keys: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(connection=object())
        self.columns = list(columns or [])
        self.rows = list(rows or [])
        self.rowcount = rowcount
        self.keys = dict(keys or {})
        self.statements: list[tuple[str, dict[str, Any]]] = []
        self.connections_opened = 0
        self.connections_closed = 0

    def with_cursor(self, connection: Any) -> AbstractContextManager[Any]:
        return nullcontext(connection)

    def handle_database_exceptions(self) -> AbstractContextManager[None]:
        return nullcontext()

    def _execute_statement(self, cursor: Any, sql: str, prepared_parameters: dict[str, Any]) -> None:
        self.statements.append((sql, dict(prepared_parameters)))

    def _get_selected_data(self, cursor: Any) -> tuple[list[str], list[tuple[Any, ...]]]:
        return list(self.columns), list(self.rows)

    def _get_row_count(self, cursor: Any) -> int:
        return self.rowcount

    def _get_generated_keys(self, cursor: Any) -> GeneratedKeys:
        return GeneratedKeys(affected_rows=self.rowcount, keys=dict(self.keys))

    def provide_connection(self) -> Any:
        driver = self

        class _Scope:
            def __enter__(self) -> Any:
                driver.connections_opened += 1
                return driver.connection

            def __exit__(self, *exc_info: Any) -> None:
                driver.connections_closed += 1

        return _Scope()

    @property
    def last_statement(self) -> tuple[str, dict[str, Any]]:
        return self.statements[-1]


@pytest.fixture
def make_driver() -> Callable[..., FakeDriver]:
    """Factory building a :class:`FakeDriver` with canned results."""
    return FakeDriver


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()
