"""Fixtures for repositories backed by an in-memory SQLite database."""

from collections.abc import Generator

import pytest

from sqlrepo import QueryFactory
from sqlrepo.adapters.sqlite import SqliteConfig, SqliteDriver


@pytest.fixture
def sqlite_session() -> Generator[SqliteDriver, None, None]:
    with SqliteConfig().provide_session() as session:
        yield session


@pytest.fixture
def query_factory(sqlite_session: SqliteDriver) -> QueryFactory:
    return QueryFactory(sqlite_session)
