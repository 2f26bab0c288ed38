"""Column mapper and row mapper abstractions."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, TypeVar, Union, runtime_checkable

from sqlrepo.core.chain import LOWEST_PRIORITY
from sqlrepo.core.type_conversion import coerce_value, is_compatible, is_numeric_type
from sqlrepo.exceptions import MappingError, MappingErrorReason

if TYPE_CHECKING:
    from sqlrepo.driver._common import ResultRow

__all__ = (
    "ColumnMapper",
    "ColumnMapperFactory",
    "ColumnRowMapper",
    "RowMapper",
    "SingleColumnRowMapper",
)

RowT_co = TypeVar("RowT_co", covariant=True)


@runtime_checkable
class RowMapper(Protocol[RowT_co]):
    """Maps one result row to a value."""

    def map_row(self, row: "ResultRow", row_number: int) -> RowT_co: ...


class ColumnMapper(ABC):
    """Extracts one column, by name or position, as ``target_type``."""

    __slots__ = ("column", "target_type")

    def __init__(self, column: "Union[str, int]", target_type: Any) -> None:
        self.column = column
        self.target_type = target_type

    def __repr__(self) -> str:
        return f"{type(self).__name__}(column={self.column!r}, target_type={self.target_type!r})"

    def raw_value(self, row: "ResultRow") -> Any:
        return row[self.column]

    @abstractmethod
    def get_value(self, row: "ResultRow") -> Any:
        """Return the converted column value of ``row``."""


class ColumnMapperFactory(ABC):
    """Decides which types it handles and builds column mappers for them."""

    priority: ClassVar[int] = LOWEST_PRIORITY
    catch_all: ClassVar[bool] = False
    """Whether :meth:`accept` is true for every type."""

    @abstractmethod
    def accept(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> bool:
        """Return True when this factory maps ``target_type``."""

    @abstractmethod
    def build(self, column: "Union[str, int]", target_type: Any, annotations: "Sequence[Any]" = ()) -> ColumnMapper:
        """Build a column mapper reading ``column`` as ``target_type``."""

    def single_column_mapper(self, target_type: Any, annotations: "Sequence[Any]" = ()) -> "RowMapper[Any]":
        """Build a row mapper returning the first column of each row as ``target_type``."""
        return ColumnRowMapper(self.build(0, target_type, annotations))


class ColumnRowMapper:
    """Row mapper delegating to a single column mapper."""

    __slots__ = ("column_mapper",)

    def __init__(self, column_mapper: ColumnMapper) -> None:
        self.column_mapper = column_mapper

    def map_row(self, row: "ResultRow", row_number: int) -> Any:
        return self.column_mapper.get_value(row)


class SingleColumnRowMapper:
    """Generic single column extraction: exactly one column, converted to ``target_type``."""

    __slots__ = ("target_type",)

    def __init__(self, target_type: Any = object) -> None:
        self.target_type = target_type

    def map_row(self, row: "ResultRow", row_number: int) -> Any:
        if len(row) != 1:
            msg = f"Incorrect column count: expected 1, actual {len(row)}"
            raise MappingError(msg, reason=MappingErrorReason.COLUMN_COUNT)
        value = coerce_value(row[0], self.target_type)
        if is_compatible(value, self.target_type):
            return value
        if is_numeric_type(self.target_type):
            reason = MappingErrorReason.INCOMPATIBLE_NUMERIC
        else:
            reason = MappingErrorReason.INVALID_VALUE
        msg = (
            f"Row {row_number}: value {row[0]!r} ({type(row[0]).__name__}) cannot be converted to "
            f"{self.target_type.__name__}"
        )
        raise MappingError(msg, reason=reason)
