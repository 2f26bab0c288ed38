"""Tests for the built-in column mappers and their factories."""

import datetime
import uuid
from decimal import Decimal
from enum import Enum
from typing import Any

import pytest

from sqlrepo.core.markers import AsJson
from sqlrepo.driver import ResultColumns, ResultRow
from sqlrepo.exceptions import MappingError, MappingErrorReason
from sqlrepo.mapping._base import ColumnRowMapper, SingleColumnRowMapper
from sqlrepo.mapping.columns import (
    BooleanColumnMapperFactory,
    DateColumnMapperFactory,
    DateTimeColumnMapperFactory,
    DefaultColumnMapperFactory,
    EnumColumnMapperFactory,
    JsonColumnMapperFactory,
    to_boolean,
    to_date,
    to_datetime,
    to_enum,
)


class Status(Enum):
    TEST = "test"
    TEST2 = "test2"


def row(**values: Any) -> ResultRow:
    return ResultRow(ResultColumns(list(values)), list(values.values()))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        (True, True),
        (False, False),
        (1, True),
        (0, False),
        (2, False),
        (1.0, True),
        (Decimal(1), True),
        (1.5, True),
        (1.99, True),
        (Decimal("1.7"), True),
        (0.9, False),
        (-1, False),
        ("true", True),
        (" TRUE ", True),
        ("false", False),
        ("yes", False),
    ],
)
def test_to_boolean(value: Any, expected: Any) -> None:
    assert to_boolean(value) is expected


def test_to_boolean_rejects_other_values() -> None:
    with pytest.raises(MappingError) as exc_info:
        to_boolean(b"\x01", "PARAM")
    assert exc_info.value.reason is MappingErrorReason.INVALID_VALUE
    with pytest.raises(MappingError):
        to_boolean(float("nan"), "PARAM")


def test_boolean_column_mapper() -> None:
    mapper = BooleanColumnMapperFactory().build("PARAM", bool)
    assert mapper.get_value(row(PARAM=1)) is True
    assert mapper.get_value(row(PARAM="false")) is False
    assert mapper.get_value(row(PARAM=None)) is None


def test_to_enum() -> None:
    assert to_enum("TEST", Status) is Status.TEST
    assert to_enum(" TEST2 ", Status) is Status.TEST2
    assert to_enum(b"TEST", Status) is Status.TEST
    assert to_enum(None, Status) is None
    assert to_enum(Status.TEST, Status) is Status.TEST
    with pytest.raises(MappingError):
        to_enum("test", Status)


def test_enum_column_mapper_factory() -> None:
    factory = EnumColumnMapperFactory()
    assert factory.accept(Status)
    assert not factory.accept(str)
    assert factory.build("PARAM", Status).get_value(row(PARAM="TEST")) is Status.TEST


def test_to_datetime() -> None:
    aware = datetime.datetime(2015, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)
    assert to_datetime(aware) is aware
    assert to_datetime("2015-01-02T03:04:05+00:00") == aware
    assert to_datetime("2015-01-02 03:04:05") == datetime.datetime(2015, 1, 2, 3, 4, 5)
    assert to_datetime(aware.timestamp()) == aware
    assert to_datetime(datetime.date(2015, 1, 2)) == datetime.datetime(2015, 1, 2)
    assert to_datetime(None) is None
    with pytest.raises(MappingError):
        to_datetime("not a date")


def test_to_date() -> None:
    assert to_date("2015-01-02") == datetime.date(2015, 1, 2)
    assert to_date("2015-01-02 03:04:05") == datetime.date(2015, 1, 2)
    assert to_date(datetime.datetime(2015, 1, 2, 3, 4)) == datetime.date(2015, 1, 2)
    assert to_date(None) is None
    with pytest.raises(MappingError):
        to_date(20150102)


def test_date_factories_accept() -> None:
    assert DateTimeColumnMapperFactory().accept(datetime.datetime)
    assert not DateTimeColumnMapperFactory().accept(datetime.date)
    assert DateColumnMapperFactory().accept(datetime.date)
    assert not DateColumnMapperFactory().accept(datetime.datetime)


def test_default_column_mapper_coerces() -> None:
    factory = DefaultColumnMapperFactory()
    assert factory.accept(object)
    assert factory.catch_all
    assert factory.build("ID", int).get_value(row(ID=5.0)) == 5
    assert factory.build("DATA", bytes).get_value(row(DATA=memoryview(b"x"))) == b"x"
    assert factory.build("NAME", str).get_value(row(NAME="a")) == "a"


def test_default_single_column_mapper() -> None:
    mapper = DefaultColumnMapperFactory().single_column_mapper(int)
    assert isinstance(mapper, SingleColumnRowMapper)
    assert mapper.map_row(row(COUNT=3.0), 0) == 3
    with pytest.raises(MappingError) as exc_info:
        mapper.map_row(row(A=1, B=2), 0)
    assert exc_info.value.reason is MappingErrorReason.COLUMN_COUNT


@pytest.mark.parametrize(
    ("target", "value", "reason"),
    [
        (int, "abc", MappingErrorReason.INCOMPATIBLE_NUMERIC),
        (int, 1.5, MappingErrorReason.INCOMPATIBLE_NUMERIC),
        (Decimal, "ten", MappingErrorReason.INCOMPATIBLE_NUMERIC),
        (str, ["a"], MappingErrorReason.INVALID_VALUE),
        (uuid.UUID, "not-a-uuid", MappingErrorReason.INVALID_VALUE),
    ],
)
def test_single_column_mapper_rejects_unconvertible_values(target: Any, value: Any, reason: Any) -> None:
    mapper = SingleColumnRowMapper(target)

    with pytest.raises(MappingError) as exc_info:
        mapper.map_row(row(VALUE=value), 3)

    assert exc_info.value.reason is reason
    assert "Row 3" in str(exc_info.value)


def test_single_column_mapper_passes_nulls_and_untyped_values() -> None:
    assert SingleColumnRowMapper(int).map_row(row(VALUE=None), 0) is None
    assert SingleColumnRowMapper().map_row(row(VALUE=["a"]), 0) == ["a"]
    assert SingleColumnRowMapper(Any).map_row(row(VALUE=1.5), 0) == 1.5


def test_single_column_mapper_of_specific_factory() -> None:
    mapper = BooleanColumnMapperFactory().single_column_mapper(bool)
    assert isinstance(mapper, ColumnRowMapper)
    assert mapper.map_row(row(ANY_NAME="true"), 0) is True


def test_json_column_mapper() -> None:
    factory = JsonColumnMapperFactory()
    assert factory.accept(dict, (AsJson(),))
    assert not factory.accept(dict)

    mapper = factory.build("CONF", dict[str, str], (AsJson(),))
    assert mapper.get_value(row(CONF='{"MY_KEY": "MY_VALUE"}')) == {"MY_KEY": "MY_VALUE"}
    assert mapper.get_value(row(CONF=b'{"a": "b"}')) == {"a": "b"}
    assert mapper.get_value(row(CONF=None)) is None
    with pytest.raises(MappingError):
        mapper.get_value(row(CONF="{not json"))
    with pytest.raises(MappingError):
        mapper.get_value(row(CONF='{"a": 1}'))


def test_missing_column() -> None:
    mapper = DefaultColumnMapperFactory().build("MISSING", str)
    with pytest.raises(MappingError) as exc_info:
        mapper.get_value(row(PRESENT="x"))
    assert exc_info.value.reason is MappingErrorReason.MISSING_COLUMN
