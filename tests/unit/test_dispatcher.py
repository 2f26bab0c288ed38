"""Tests for the per invocation dispatch of query methods."""

from __future__ import annotations

from typing import Annotated, Any, Optional

import pytest

from sqlrepo import Bind, Column, GeneratedKeyResult, QueryMode, RepositoryConfig, auto_generated_key, query
from sqlrepo.core.descriptor import describe_contract
from sqlrepo.dispatcher import QueryDispatcher
from sqlrepo.driver import ResultRow
from sqlrepo.exceptions import ImproperConfigurationError, MultipleResultsFoundError, NotFoundError


class Conf:
    def __init__(self, key: Annotated[str, Column("CONF_KEY")], value: Annotated[str, Column("CONF_VALUE")]) -> None:
        self.key = key
        self.value = value


class UpperRowMapper:
    def map_row(self, row: ResultRow, row_number: int) -> str:
        return str(row[0]).upper()


class ConfQueries:
    @query("SELECT * FROM LA_CONF", overrides={"mysql": "SELECT * FROM `LA_CONF`"})
    def find_all(self) -> list[Conf]: ...

    @query("SELECT CONF_VALUE FROM LA_CONF WHERE CONF_KEY = :key")
    def find_value(self, key: Annotated[str, Bind("key")]) -> str: ...

    @query("SELECT CONF_VALUE FROM LA_CONF WHERE CONF_KEY = :key")
    def find_optional(self, key: Annotated[str, Bind()]) -> Optional[str]: ...

    @query("SELECT CONF_KEY FROM LA_CONF", mapper=UpperRowMapper)
    def find_keys_upper(self) -> list[str]: ...

    @query("SELECT CONF_KEY FROM LA_CONF WHERE CONF_KEY = :key", mode=QueryMode.TEMPLATE)
    def key_query(self) -> str: ...

    @query("UPDATE LA_CONF SET CONF_VALUE = :value WHERE CONF_KEY = :key")
    def update(self, key: Annotated[str, Bind("key")], value: Annotated[str, Bind("value")]) -> int: ...

    @query("DELETE FROM LA_CONF")
    def delete_all(self) -> None: ...

    @query("SELECT COUNT(*) FROM LA_CONF", mode=QueryMode.MODIFYING)
    def forced_update(self) -> int: ...

    @query("INSERT INTO LA_CONF(CONF_KEY, CONF_VALUE) VALUES(:key, 'v')")
    def insert(self, key: Annotated[str, Bind("key")]) -> GeneratedKeyResult[int]: ...

    @auto_generated_key("ID")
    @query("INSERT INTO LA_CONF(CONF_KEY, CONF_VALUE) VALUES(:key, 'v')")
    def insert_named(self, key: Annotated[str, Bind("key")]) -> GeneratedKeyResult[int]: ...

    @query("INSERT INTO LA_MEMO(DATA) VALUES(:data) RETURNING ID", mode=QueryMode.MODIFYING_WITH_RETURN)
    def insert_returning(self, data: Annotated[str, Bind("data")]) -> int: ...


DESCRIPTORS = describe_contract(ConfQueries)


def invoke(dispatcher: QueryDispatcher, name: str, *arguments: Any) -> Any:
    return dispatcher.invoke(DESCRIPTORS[name], arguments)


def test_template_returns_text_without_executing(fake_driver: Any) -> None:
    dispatcher = QueryDispatcher(fake_driver)

    assert invoke(dispatcher, "key_query") == "SELECT CONF_KEY FROM LA_CONF WHERE CONF_KEY = :key"
    assert fake_driver.statements == []


def test_active_db_selects_the_override(make_driver: Any) -> None:
    driver = make_driver(columns=["CONF_KEY", "CONF_VALUE"])
    dispatcher = QueryDispatcher(driver, RepositoryConfig(active_db="mysql"))

    invoke(dispatcher, "find_all")

    assert driver.last_statement == ("SELECT * FROM `LA_CONF`", {})


def test_active_db_defaults_to_executor_dialect(make_driver: Any) -> None:
    driver = make_driver(columns=["CONF_KEY", "CONF_VALUE"])
    dispatcher = QueryDispatcher(driver)

    invoke(dispatcher, "find_all")

    assert dispatcher.active_db == "fake"
    assert driver.last_statement == ("SELECT * FROM LA_CONF", {})


def test_list_maps_every_row_with_constructor(make_driver: Any) -> None:
    driver = make_driver(columns=["CONF_KEY", "CONF_VALUE"], rows=[("a", "1"), ("b", "2")])

    confs = invoke(QueryDispatcher(driver), "find_all")

    assert [(c.key, c.value) for c in confs] == [("a", "1"), ("b", "2")]


def test_list_of_nothing_is_empty(make_driver: Any) -> None:
    driver = make_driver(columns=["CONF_KEY", "CONF_VALUE"])
    assert invoke(QueryDispatcher(driver), "find_all") == []


def test_single_binds_and_maps(make_driver: Any) -> None:
    driver = make_driver(columns=["CONF_VALUE"], rows=[("MY_VALUE",)])

    assert invoke(QueryDispatcher(driver), "find_value", "MY_KEY") == "MY_VALUE"
    assert driver.last_statement[1] == {"key": "MY_KEY"}


def test_single_requires_exactly_one_row(make_driver: Any) -> None:
    with pytest.raises(NotFoundError):
        invoke(QueryDispatcher(make_driver(columns=["CONF_VALUE"])), "find_value", "x")
    with pytest.raises(MultipleResultsFoundError):
        invoke(QueryDispatcher(make_driver(columns=["CONF_VALUE"], rows=[("a",), ("b",)])), "find_value", "x")


@pytest.mark.parametrize(("rows", "expected"), [([], None), ([("a",)], "a")])
def test_optional(make_driver: Any, rows: list[tuple[Any, ...]], expected: Optional[str]) -> None:
    driver = make_driver(columns=["CONF_VALUE"], rows=rows)

    assert invoke(QueryDispatcher(driver), "find_optional", "x") == expected
    assert driver.last_statement[1] == {"key": "x"}


def test_optional_with_several_rows(make_driver: Any) -> None:
    driver = make_driver(columns=["CONF_VALUE"], rows=[("a",), ("b",)])

    with pytest.raises(MultipleResultsFoundError) as exc_info:
        invoke(QueryDispatcher(driver), "find_optional", "x")
    assert exc_info.value.actual == 2


def test_explicit_row_mapper(make_driver: Any) -> None:
    driver = make_driver(columns=["CONF_KEY"], rows=[("a",), ("b",)])
    assert invoke(QueryDispatcher(driver), "find_keys_upper") == ["A", "B"]


def test_update_returns_row_count(make_driver: Any) -> None:
    driver = make_driver(rowcount=3)

    assert invoke(QueryDispatcher(driver), "update", "k", "v") == 3
    assert driver.last_statement[1] == {"key": "k", "value": "v"}


def test_none_return_executes(make_driver: Any) -> None:
    driver = make_driver(rowcount=3)

    assert invoke(QueryDispatcher(driver), "delete_all") is None
    assert driver.last_statement[0] == "DELETE FROM LA_CONF"


def test_modifying_mode_forces_update(make_driver: Any) -> None:
    driver = make_driver(columns=["COUNT"], rows=[(5,)], rowcount=0)
    assert invoke(QueryDispatcher(driver), "forced_update") == 0


def test_modifying_with_return_is_mapped_like_a_query(make_driver: Any) -> None:
    driver = make_driver(columns=["ID"], rows=[(42,)])
    assert invoke(QueryDispatcher(driver), "insert_returning", "memo") == 42


def test_generated_key(make_driver: Any) -> None:
    driver = make_driver(rowcount=1, keys={"rowid": 7})

    result = invoke(QueryDispatcher(driver), "insert", "k")

    assert result == GeneratedKeyResult(affected_rows=1, key=7)


def test_several_generated_keys_need_a_name(make_driver: Any) -> None:
    driver = make_driver(rowcount=1, keys={"ID": 7, "VERSION": 1})

    assert invoke(QueryDispatcher(driver), "insert_named", "k").key == 7
    with pytest.raises(ImproperConfigurationError, match="auto_generated_key"):
        invoke(QueryDispatcher(driver), "insert", "k")


def test_validate_rejects_unconvertible_arguments(fake_driver: Any) -> None:
    config = RepositoryConfig(use_default_parameter_converters=False)
    dispatcher = QueryDispatcher(fake_driver, config)

    dispatcher.validate(DESCRIPTORS["find_all"])
    with pytest.raises(ImproperConfigurationError):
        dispatcher.validate(DESCRIPTORS["find_value"])
