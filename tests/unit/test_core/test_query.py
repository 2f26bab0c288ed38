"""Tests for query declarations and query variant resolution."""

from types import MappingProxyType

import pytest

from sqlrepo.core.query import (
    QueryMetadata,
    QueryMode,
    auto_generated_key,
    get_generated_key_name,
    get_query_metadata,
    query,
    query_override,
    resolve_query_text,
)
from sqlrepo.exceptions import ImproperConfigurationError
from sqlrepo.typing import Empty


class WrapperMapper:
    def map_row(self, row: object, row_number: int) -> object:
        return row


def test_query_attaches_immutable_metadata() -> None:
    @query("SELECT 1", mode=QueryMode.SELECT, mapper=WrapperMapper)
    def find() -> int: ...

    metadata = get_query_metadata(find)
    assert metadata is not None
    assert metadata.default_text == "SELECT 1"
    assert metadata.mode is QueryMode.SELECT
    assert metadata.explicit_row_mapper is WrapperMapper
    assert metadata.has_explicit_row_mapper
    assert isinstance(metadata.variant_overrides, MappingProxyType)
    with pytest.raises(AttributeError):
        metadata.default_text = "SELECT 2"  # type: ignore[misc]


def test_query_defaults() -> None:
    @query("SELECT 1")
    def find() -> int: ...

    metadata = get_query_metadata(find)
    assert metadata is not None
    assert metadata.mode is QueryMode.EXECUTE
    assert metadata.explicit_row_mapper is Empty
    assert not metadata.has_explicit_row_mapper
    assert dict(metadata.variant_overrides) == {}


def test_function_without_query_has_no_metadata() -> None:
    def plain() -> None: ...

    assert get_query_metadata(plain) is None
    assert get_generated_key_name(plain) is None


@pytest.mark.parametrize("override_first", [True, False], ids=["override_below", "override_above"])
def test_query_override_in_any_decorator_order(override_first: bool) -> None:
    if override_first:

        @query("SELECT a FROM t")
        @query_override("mysql", "SELECT `a` FROM t")
        def find() -> str: ...

    else:

        @query_override("mysql", "SELECT `a` FROM t")
        @query("SELECT a FROM t")
        def find() -> str: ...

    metadata = get_query_metadata(find)
    assert metadata is not None
    assert dict(metadata.variant_overrides) == {"mysql": "SELECT `a` FROM t"}


def test_duplicate_override_is_a_configuration_error() -> None:
    with pytest.raises(ImproperConfigurationError, match="Duplicate query override"):

        @query_override("mysql", "B")
        @query_override("mysql", "A")
        @query("SELECT 1")
        def find() -> int: ...


def test_overrides_keyword() -> None:
    @query("SELECT 1", overrides={"pgsql": "SELECT 2", "mysql": "SELECT 3"})
    @query_override("hsqldb", "SELECT 4")
    def find() -> int: ...

    metadata = get_query_metadata(find)
    assert metadata is not None
    assert dict(metadata.variant_overrides) == {"pgsql": "SELECT 2", "mysql": "SELECT 3", "hsqldb": "SELECT 4"}


def test_resolve_query_text_template_variants() -> None:
    """The override of the active backend wins; any other backend gets the default."""
    metadata = QueryMetadata(default_text="D", mode=QueryMode.TEMPLATE, variant_overrides={"V": "O"})

    assert resolve_query_text("V", metadata) == "O"
    assert resolve_query_text("other", metadata) == "D"
    assert resolve_query_text(None, metadata) == "D"


def test_with_override_returns_new_metadata() -> None:
    metadata = QueryMetadata(default_text="D")
    updated = metadata.with_override("V", "O")

    assert dict(metadata.variant_overrides) == {}
    assert dict(updated.variant_overrides) == {"V": "O"}
    assert isinstance(updated.variant_overrides, MappingProxyType)


def test_auto_generated_key() -> None:
    @auto_generated_key("ID")
    @query("INSERT INTO t(a) VALUES (:a)")
    def insert() -> None: ...

    assert get_generated_key_name(insert) == "ID"
