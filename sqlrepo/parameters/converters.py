"""Built-in parameter converters."""

import datetime
from collections.abc import Sequence
from typing import Any, ClassVar

from sqlrepo.core.chain import LOWEST_PRIORITY
from sqlrepo.core.markers import AsJson
from sqlrepo.parameters._base import ParameterConverter
from sqlrepo.utils.serializers import to_json
from sqlrepo.utils.type_guards import find_marker, is_enum_type, is_subclass_of

__all__ = (
    "DateTimeParameterConverter",
    "DefaultParameterConverter",
    "EnumParameterConverter",
    "JsonParameterConverter",
    "default_parameter_converters",
    "to_utc_millis",
)


class DefaultParameterConverter(ParameterConverter):
    """Binds the argument unchanged."""

    priority: ClassVar[int] = LOWEST_PRIORITY
    catch_all: ClassVar[bool] = True

    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool:
        return True

    def bind(
        self, name: str, value: Any, target_type: Any, annotations: "Sequence[Any]", parameters: "dict[str, Any]"
    ) -> None:
        parameters[name] = value


class EnumParameterConverter(ParameterConverter):
    """Binds enum members by name."""

    priority: ClassVar[int] = LOWEST_PRIORITY - 1

    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool:
        return is_enum_type(target_type)

    def bind(
        self, name: str, value: Any, target_type: Any, annotations: "Sequence[Any]", parameters: "dict[str, Any]"
    ) -> None:
        parameters[name] = value.name if value is not None else None


def to_utc_millis(value: datetime.datetime) -> datetime.datetime:
    """Convert an aware datetime to UTC, truncated to whole milliseconds.

    Naive datetimes are returned untouched.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        return value
    utc = value.astimezone(datetime.timezone.utc)
    return utc.replace(microsecond=utc.microsecond - utc.microsecond % 1000)


class DateTimeParameterConverter(ParameterConverter):
    priority: ClassVar[int] = LOWEST_PRIORITY - 2

    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool:
        return is_subclass_of(target_type, datetime.datetime)

    def bind(
        self, name: str, value: Any, target_type: Any, annotations: "Sequence[Any]", parameters: "dict[str, Any]"
    ) -> None:
        parameters[name] = to_utc_millis(value) if value is not None else None


class JsonParameterConverter(ParameterConverter):
    """Binds arguments marked with ``AsJson`` as JSON text."""

    priority: ClassVar[int] = LOWEST_PRIORITY - 10

    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool:
        return find_marker(annotations, AsJson) is not None

    def bind(
        self, name: str, value: Any, target_type: Any, annotations: "Sequence[Any]", parameters: "dict[str, Any]"
    ) -> None:
        parameters[name] = to_json(value) if value is not None else None


def default_parameter_converters() -> "list[ParameterConverter]":
    """Fresh instances of the built-in converters, in registration order."""
    return [
        DefaultParameterConverter(),
        EnumParameterConverter(),
        DateTimeParameterConverter(),
        JsonParameterConverter(),
    ]
