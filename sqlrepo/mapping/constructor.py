"""Constructor based mapping of result rows to composite objects.

A result type binds its constructor parameters to result columns with the
:class:`~sqlrepo.core.markers.Column` marker::

    class Conf:
        def __init__(
            self,
            key: Annotated[str, Column("CONF_KEY")],
            value: Annotated[str, Column("CONF_VALUE")],
        ) -> None: ...

Types with alternate constructors mark the one to use with
:func:`row_constructor`. The binding between columns and constructor slots is
captured once per type in a :class:`RowBinding`.
"""

import inspect
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Generic, Optional, TypeVar, Union, get_type_hints

from sqlrepo.core.markers import Column
from sqlrepo.core.type_conversion import PRIMITIVE_TYPES, is_compatible, is_numeric_type
from sqlrepo.exceptions import ImproperConfigurationError, MappingError, MappingErrorReason
from sqlrepo.utils.logging import get_logger
from sqlrepo.utils.type_guards import find_marker, split_annotated, unwrap_optional

if TYPE_CHECKING:
    from sqlrepo.core.chain import PluginChain
    from sqlrepo.driver._common import ResultRow
    from sqlrepo.mapping._base import ColumnMapper, ColumnMapperFactory

__all__ = (
    "ColumnBinding",
    "ConstructorRowMapper",
    "RowBinding",
    "has_row_constructor",
    "row_constructor",
)

logger = get_logger("mapping.constructor")

ModelT = TypeVar("ModelT")
FuncT = TypeVar("FuncT", bound=Callable[..., Any])

_ROW_CONSTRUCTOR_ATTR = "__sqlrepo_row_constructor__"
_UNSUPPORTED_KINDS = frozenset({inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD})


def row_constructor(func: FuncT) -> FuncT:
    """Mark a classmethod as a public constructor used to build result objects.

    Example:
        >>> class Person:
        ...     @classmethod
        ...     @row_constructor
        ...     def from_row(cls, name: Annotated[str, Column("NAME")]) -> "Person": ...
    """
    target = func.__func__ if isinstance(func, classmethod) else func
    setattr(target, _ROW_CONSTRUCTOR_ATTR, True)
    return func


def _type_name(target: Any) -> str:
    return getattr(target, "__qualname__", None) or repr(target)


def _constructors(target: "type[Any]") -> "list[Callable[..., Any]]":
    seen: set[str] = set()
    marked: list[Callable[..., Any]] = []
    for klass in target.__mro__:
        for name, attribute in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(attribute, classmethod) and getattr(attribute.__func__, _ROW_CONSTRUCTOR_ATTR, False):
                marked.append(getattr(target, name))
    return marked or [target]


def _constructor_parameters(constructor: "Callable[..., Any]") -> "list[tuple[inspect.Parameter, Any]]":
    """Parameters of a constructor with their resolved annotations (``self``/``cls`` excluded)."""
    if isinstance(constructor, type):
        init = constructor.__init__
        if init is object.__init__:
            return []
        hints = get_type_hints(init, include_extras=True)
        parameters = list(inspect.signature(init).parameters.values())[1:]
    else:
        hints = get_type_hints(getattr(constructor, "__func__", constructor), include_extras=True)
        parameters = list(inspect.signature(constructor).parameters.values())
    return [(parameter, hints.get(parameter.name, Any)) for parameter in parameters]


@dataclass(frozen=True)
class ColumnBinding:
    """One constructor slot bound to one result column."""

    slot: int
    parameter: str
    column: str
    target_type: Any
    annotations: "tuple[Any, ...]"
    nullable: bool
    keyword_only: bool = False


@dataclass(frozen=True)
class RowBinding(Generic[ModelT]):
    """Declarative description of how a row builds a ``target``."""

    target: "type[ModelT]"
    factory: "Callable[..., ModelT]"
    columns: "tuple[ColumnBinding, ...]"

    @classmethod
    def from_type(cls, target: "type[ModelT]") -> "RowBinding[ModelT]":
        """Derive the binding of ``target`` from its annotated constructor.

        Raises:
            ImproperConfigurationError: If ``target`` has zero or several public constructors,
                a constructor without parameters, or a parameter without a ``Column`` marker.

        Returns:
            The row binding.
        """
        if not isinstance(target, type):
            msg = f"{target!r} is not a class and cannot be built from a row"
            raise ImproperConfigurationError(msg)
        constructors = _constructors(target)
        if len(constructors) != 1:
            msg = (
                f"The class {_type_name(target)} must have exactly one public constructor, "
                f"{len(constructors)} are present"
            )
            raise ImproperConfigurationError(msg)
        constructor = constructors[0]
        try:
            parameters = _constructor_parameters(constructor)
        except (TypeError, ValueError, NameError) as exc:
            msg = f"Unable to inspect the constructor of {_type_name(target)}: {exc}"
            raise ImproperConfigurationError(msg) from exc
        if not parameters:
            msg = f"The constructor of {_type_name(target)} must have at least one parameter"
            raise ImproperConfigurationError(msg)

        columns: list[ColumnBinding] = []
        for position, (parameter, annotation) in enumerate(parameters):
            bare, metadata = split_annotated(annotation)
            bare, nullable = unwrap_optional(bare)
            bare, extra = split_annotated(bare)
            annotations = (*metadata, *extra)
            marker = find_marker(annotations, Column)
            if parameter.kind in _UNSUPPORTED_KINDS or marker is None:
                msg = f"No Column annotation found for class {_type_name(target)} in constructor at position {position}"
                raise ImproperConfigurationError(msg)
            columns.append(
                ColumnBinding(
                    slot=position,
                    parameter=parameter.name,
                    column=marker.name,
                    target_type=bare,
                    annotations=annotations,
                    nullable=nullable or parameter.default is None,
                    keyword_only=parameter.kind is inspect.Parameter.KEYWORD_ONLY,
                )
            )
        return cls(target=target, factory=constructor, columns=tuple(columns))

    def instantiate(self, values: "Sequence[Any]") -> ModelT:
        args = [value for binding, value in zip(self.columns, values) if not binding.keyword_only]
        kwargs = {binding.parameter: value for binding, value in zip(self.columns, values) if binding.keyword_only}
        return self.factory(*args, **kwargs)


def has_row_constructor(target: Any) -> bool:
    """Check whether ``target`` can be built by a :class:`ConstructorRowMapper`.

    The type must expose exactly one public constructor with at least one
    parameter, every parameter carrying a ``Column`` marker.
    """
    if not isinstance(target, type) or target.__module__ == "builtins":
        return False
    try:
        RowBinding.from_type(target)
    except ImproperConfigurationError:
        return False
    return True


class ConstructorRowMapper(Generic[ModelT]):
    """Builds one ``target`` per row by calling its bound constructor positionally.

    Column mappers are resolved against the factory chain when the mapper is
    built, so an unusable type fails before any row is read.
    """

    __slots__ = ("binding", "column_mappers")

    def __init__(
        self, target: "Union[type[ModelT], RowBinding[ModelT]]", factories: "PluginChain[ColumnMapperFactory]"
    ) -> None:
        binding = target if isinstance(target, RowBinding) else RowBinding.from_type(target)
        self.binding: RowBinding[ModelT] = binding
        self.column_mappers: tuple[ColumnMapper, ...] = tuple(
            self._column_mapper(column, factories) for column in binding.columns
        )
        logger.debug("Built constructor row mapper for %s", _type_name(binding.target))

    def _column_mapper(self, column: ColumnBinding, factories: "PluginChain[ColumnMapperFactory]") -> "ColumnMapper":
        factory: Optional[ColumnMapperFactory] = factories.find(column.target_type, column.annotations)
        if factory is None:
            msg = (
                f"Did not find any matching ColumnMapperFactory for class: {_type_name(self.binding.target)} "
                f"in constructor at position {column.slot} ({_type_name(column.target_type)})"
            )
            raise ImproperConfigurationError(msg)
        return factory.build(column.column, column.target_type, column.annotations)

    def _check(self, column: ColumnBinding, value: Any) -> None:
        target = _type_name(self.binding.target)
        if value is None:
            if not column.nullable and column.target_type in PRIMITIVE_TYPES:
                msg = (
                    f"Column {column.column!r} is NULL but parameter {column.parameter!r} is a non-nullable "
                    f"{_type_name(column.target_type)}; declare it Optional or fix the data"
                )
                raise MappingError(msg, reason=MappingErrorReason.NULL_INTO_NON_NULLABLE, target=target)
            return
        if is_numeric_type(column.target_type) and not is_compatible(value, column.target_type):
            msg = (
                f"Column {column.column!r} value {value!r} ({type(value).__name__}) is incompatible with the "
                f"numeric type {_type_name(column.target_type)} of parameter {column.parameter!r}"
            )
            raise MappingError(msg, reason=MappingErrorReason.INCOMPATIBLE_NUMERIC, target=target)

    def map_row(self, row: "ResultRow", row_number: int) -> ModelT:
        values = [mapper.get_value(row) for mapper in self.column_mappers]
        for column, value in zip(self.binding.columns, values):
            self._check(column, value)
        try:
            return self.binding.instantiate(values)
        except (TypeError, ValueError) as exc:
            msg = (
                "Type mismatch between the constructor parameters and the row values; check that "
                f"1) no NULL is passed to a non-nullable parameter, 2) numeric types are compatible: {exc}"
            )
            raise MappingError(
                msg, reason=MappingErrorReason.CONSTRUCTION_FAILED, target=_type_name(self.binding.target)
            ) from exc
