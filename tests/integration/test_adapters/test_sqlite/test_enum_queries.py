"""Enum arguments bound by name and read back from text."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Optional

from sqlrepo import Bind, Column, QueryFactory, query


class SampleEnum(Enum):
    TEST = "t1"
    TEST2 = "t2"


class EnumConf:
    def __init__(
        self,
        key: Annotated[SampleEnum, Column("CONF_KEY")],
        value: Annotated[Optional[SampleEnum], Column("CONF_VALUE")],
    ) -> None:
        self.key = key
        self.value = value


class EnumQueries:
    @query("CREATE TABLE LA_ENUM (CONF_KEY VARCHAR(64) PRIMARY KEY NOT NULL, CONF_VALUE VARCHAR(64))")
    def create_table(self) -> None: ...

    @query("INSERT INTO LA_ENUM(CONF_KEY, CONF_VALUE) VALUES(:key, :value)")
    def insert(
        self, key: Annotated[SampleEnum, Bind("key")], value: Annotated[Optional[SampleEnum], Bind("value")]
    ) -> int: ...

    @query("SELECT CONF_KEY FROM LA_ENUM WHERE CONF_KEY = :key")
    def find_key(self, key: Annotated[SampleEnum, Bind("key")]) -> SampleEnum: ...

    @query("SELECT * FROM LA_ENUM ORDER BY CONF_KEY")
    def find_all(self) -> list[EnumConf]: ...

    @query("SELECT CONF_VALUE FROM LA_ENUM WHERE CONF_KEY = :key")
    def raw_value(self, key: Annotated[SampleEnum, Bind("key")]) -> Optional[str]: ...

    @query("SELECT CONF_VALUE FROM LA_ENUM ORDER BY CONF_KEY")
    def find_all_values(self) -> list[Optional[SampleEnum]]: ...

    @query("SELECT * FROM LA_ENUM ORDER BY CONF_KEY")
    def find_all_nullable(self) -> list[Optional[EnumConf]]: ...


def test_enum_queries(query_factory: QueryFactory) -> None:
    queries = query_factory.create(EnumQueries)
    queries.create_table()

    assert queries.insert(SampleEnum.TEST, SampleEnum.TEST2) == 1
    assert queries.insert(SampleEnum.TEST2, None) == 1

    assert queries.find_key(SampleEnum.TEST) is SampleEnum.TEST
    assert queries.raw_value(SampleEnum.TEST) == "TEST2"
    first, second = queries.find_all()
    assert (first.key, first.value) == (SampleEnum.TEST, SampleEnum.TEST2)
    assert (second.key, second.value) == (SampleEnum.TEST2, None)


def test_nullable_list_elements_are_mapped(query_factory: QueryFactory) -> None:
    queries = query_factory.create(EnumQueries)
    queries.create_table()
    queries.insert(SampleEnum.TEST, SampleEnum.TEST2)
    queries.insert(SampleEnum.TEST2, None)

    assert queries.find_all_values() == [SampleEnum.TEST2, None]
    first, second = queries.find_all_nullable()
    assert isinstance(first, EnumConf)
    assert (first.key, first.value) == (SampleEnum.TEST, SampleEnum.TEST2)
    assert (second.key, second.value) == (SampleEnum.TEST2, None)
