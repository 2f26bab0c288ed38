"""Built-in column mappers and their factories."""

import datetime
from collections.abc import Sequence
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Union

from sqlrepo.core.chain import LOWEST_PRIORITY
from sqlrepo.core.markers import AsJson
from sqlrepo.core.type_conversion import coerce_value
from sqlrepo.exceptions import MappingError, MappingErrorReason, SerializationError
from sqlrepo.mapping._base import ColumnMapper, ColumnMapperFactory, RowMapper, SingleColumnRowMapper
from sqlrepo.utils.serializers import convert_to, from_json
from sqlrepo.utils.type_guards import find_marker, is_enum_type, is_subclass_of

__all__ = (
    "BooleanColumnMapper",
    "BooleanColumnMapperFactory",
    "DateColumnMapper",
    "DateColumnMapperFactory",
    "DateTimeColumnMapper",
    "DateTimeColumnMapperFactory",
    "DefaultColumnMapper",
    "DefaultColumnMapperFactory",
    "EnumColumnMapper",
    "EnumColumnMapperFactory",
    "JsonColumnMapper",
    "JsonColumnMapperFactory",
    "default_column_mapper_factories",
    "to_boolean",
    "to_date",
    "to_datetime",
    "to_enum",
)


def _invalid(value: Any, target: str, column: "Union[str, int]") -> MappingError:
    msg = f"Was not able to extract a {target} value from column {column!r}: {value!r}"
    return MappingError(msg, reason=MappingErrorReason.INVALID_VALUE)


# -- Default --
class DefaultColumnMapper(ColumnMapper):
    """Returns the raw column value, converted to the declared type when lossless."""

    __slots__ = ()

    def get_value(self, row: Any) -> Any:
        value = self.raw_value(row)
        if isinstance(value, memoryview):
            value = bytes(value)
        return coerce_value(value, self.target_type)


class DefaultColumnMapperFactory(ColumnMapperFactory):
    priority: ClassVar[int] = LOWEST_PRIORITY
    catch_all: ClassVar[bool] = True

    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool:
        return True

    def build(self, column: "Union[str, int]", target_type: Any, annotations: "Sequence[Any]" = ()) -> ColumnMapper:
        return DefaultColumnMapper(column, target_type)

    def single_column_mapper(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> "RowMapper[Any]":
        return SingleColumnRowMapper(target_type)


# -- Boolean --
def to_boolean(value: Any, column: "Union[str, int]" = 0) -> "Union[bool, None]":
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        try:
            return int(value) == 1
        except (ValueError, OverflowError):
            raise _invalid(value, "boolean", column) from None
    if isinstance(value, str):
        return value.strip().lower() == "true"
    raise _invalid(value, "boolean", column)


class BooleanColumnMapper(ColumnMapper):
    __slots__ = ()

    def get_value(self, row: Any) -> "Union[bool, None]":
        return to_boolean(self.raw_value(row), self.column)


class BooleanColumnMapperFactory(ColumnMapperFactory):
    priority: ClassVar[int] = LOWEST_PRIORITY - 1

    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool:
        return target_type is bool

    def build(self, column: "Union[str, int]", target_type: Any, annotations: "Sequence[Any]" = ()) -> ColumnMapper:
        return BooleanColumnMapper(column, target_type)


# -- Enum --
def to_enum(value: Any, enum_type: "type[Enum]", column: "Union[str, int]" = 0) -> "Union[Enum, None]":
    """Look an enum member up by name; the stored text is trimmed first."""
    if value is None or isinstance(value, enum_type):
        return value
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    try:
        return enum_type[str(value).strip()]
    except KeyError:
        raise _invalid(value, enum_type.__name__, column) from None


class EnumColumnMapper(ColumnMapper):
    __slots__ = ()

    def get_value(self, row: Any) -> "Union[Enum, None]":
        return to_enum(self.raw_value(row), self.target_type, self.column)


class EnumColumnMapperFactory(ColumnMapperFactory):
    priority: ClassVar[int] = LOWEST_PRIORITY - 2

    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool:
        return is_enum_type(target_type)

    def build(self, column: "Union[str, int]", target_type: Any, annotations: "Sequence[Any]" = ()) -> ColumnMapper:
        return EnumColumnMapper(column, target_type)


# -- Date and time --
def to_datetime(value: Any, column: "Union[str, int]" = 0) -> "Union[datetime.datetime, None]":
    """Read a timestamp stored as a datetime, ISO-8601 text or epoch seconds (UTC)."""
    if value is None or isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.datetime.fromtimestamp(value, tz=datetime.timezone.utc)
    if isinstance(value, str):
        try:
            return datetime.datetime.fromisoformat(value.strip())
        except ValueError:
            raise _invalid(value, "datetime", column) from None
    raise _invalid(value, "datetime", column)


def to_date(value: Any, column: "Union[str, int]" = 0) -> "Union[datetime.date, None]":
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        try:
            return datetime.date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise _invalid(value, "date", column) from None
    raise _invalid(value, "date", column)


class DateTimeColumnMapper(ColumnMapper):
    __slots__ = ()

    def get_value(self, row: Any) -> "Union[datetime.datetime, None]":
        return to_datetime(self.raw_value(row), self.column)


class DateTimeColumnMapperFactory(ColumnMapperFactory):
    priority: ClassVar[int] = LOWEST_PRIORITY - 3

    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool:
        return is_subclass_of(target_type, datetime.datetime)

    def build(self, column: "Union[str, int]", target_type: Any, annotations: "Sequence[Any]" = ()) -> ColumnMapper:
        return DateTimeColumnMapper(column, target_type)


class DateColumnMapper(ColumnMapper):
    __slots__ = ()

    def get_value(self, row: Any) -> "Union[datetime.date, None]":
        return to_date(self.raw_value(row), self.column)


class DateColumnMapperFactory(ColumnMapperFactory):
    priority: ClassVar[int] = LOWEST_PRIORITY - 4

    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool:
        return target_type is datetime.date

    def build(self, column: "Union[str, int]", target_type: Any, annotations: "Sequence[Any]" = ()) -> ColumnMapper:
        return DateColumnMapper(column, target_type)


# -- JSON payloads --
class JsonColumnMapper(ColumnMapper):
    """Decodes a JSON payload column into the declared type."""

    __slots__ = ()

    def get_value(self, row: Any) -> Any:
        value = self.raw_value(row)
        if value is None:
            return None
        target = self.target_type if self.target_type is not None else Any
        try:
            if isinstance(value, (str, bytes, bytearray, memoryview)):
                return from_json(bytes(value) if isinstance(value, memoryview) else value, target_type=target)
            return convert_to(value, target)
        except SerializationError as exc:
            msg = f"Column {self.column!r} does not hold a valid JSON payload for {target!r}: {exc.detail}"
            raise MappingError(msg, reason=MappingErrorReason.INVALID_VALUE) from exc


class JsonColumnMapperFactory(ColumnMapperFactory):
    priority: ClassVar[int] = LOWEST_PRIORITY - 10

    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool:
        return find_marker(annotations, AsJson) is not None

    def build(self, column: "Union[str, int]", target_type: Any, annotations: "Sequence[Any]" = ()) -> ColumnMapper:
        return JsonColumnMapper(column, target_type)


def default_column_mapper_factories() -> "list[ColumnMapperFactory]":
    """Fresh instances of the built-in factories, in registration order."""
    return [
        DefaultColumnMapperFactory(),
        BooleanColumnMapperFactory(),
        EnumColumnMapperFactory(),
        DateTimeColumnMapperFactory(),
        DateColumnMapperFactory(),
        JsonColumnMapperFactory(),
    ]
