"""Type inspection helpers used when describing contracts and result types.

These helpers work on annotations (``typing.Annotated``, ``Optional``,
parametrized generics) rather than on values, so they are only called while
descriptors and row bindings are built, never per row.
"""

import types
from collections.abc import Sequence
from enum import Enum
from typing import Annotated, Any, Union, get_args, get_origin

from typing_extensions import TypeGuard

__all__ = (
    "find_marker",
    "is_enum_type",
    "is_optional_annotation",
    "is_sequence_annotation",
    "is_subclass_of",
    "split_annotated",
    "unwrap_optional",
)

_NONE_TYPE = type(None)
_UNION_TYPES: "tuple[Any, ...]" = (Union, types.UnionType)
_SEQUENCE_ORIGINS: "frozenset[Any]" = frozenset({list, tuple, Sequence})


def split_annotated(annotation: Any) -> "tuple[Any, tuple[Any, ...]]":
    """Strip ``Annotated`` wrappers from an annotation.

    Args:
        annotation: The annotation to inspect.

    Returns:
        The bare type and the collected ``Annotated`` metadata, outermost first.
    """
    metadata: "list[Any]" = []
    while get_origin(annotation) is Annotated:
        annotation, *extra = get_args(annotation)
        metadata.extend(extra)
    return annotation, tuple(metadata)


def is_optional_annotation(annotation: Any) -> bool:
    """Check whether an annotation is ``Optional[X]`` / ``X | None`` with exactly one non-None member."""
    if get_origin(annotation) not in _UNION_TYPES:
        return False
    args = get_args(annotation)
    return _NONE_TYPE in args and len(args) == 2  # noqa: PLR2004


def unwrap_optional(annotation: Any) -> "tuple[Any, bool]":
    """Remove ``None`` from a union annotation.

    Returns:
        The remaining annotation and whether ``None`` was part of it.
    """
    if get_origin(annotation) not in _UNION_TYPES:
        return annotation, annotation is None or annotation is _NONE_TYPE or annotation is Any
    args = get_args(annotation)
    if _NONE_TYPE not in args:
        return annotation, False
    remaining = tuple(arg for arg in args if arg is not _NONE_TYPE)
    if len(remaining) == 1:
        return remaining[0], True
    return Union[remaining], True  # type: ignore[return-value]


def is_sequence_annotation(annotation: Any) -> bool:
    """Check whether an annotation declares a list-like result (``list[E]``, ``Sequence[E]``, ``tuple[E, ...]``)."""
    origin = get_origin(annotation)
    if origin is None:
        return annotation in _SEQUENCE_ORIGINS
    if origin is tuple:
        args = get_args(annotation)
        return len(args) == 2 and args[1] is Ellipsis  # noqa: PLR2004
    return origin in _SEQUENCE_ORIGINS


def is_subclass_of(candidate: Any, parent: "type[Any]") -> bool:
    """``issubclass`` that returns False instead of raising for non-class annotations."""
    return isinstance(candidate, type) and issubclass(candidate, parent)


def is_enum_type(candidate: Any) -> "TypeGuard[type[Enum]]":
    return is_subclass_of(candidate, Enum)


def find_marker(annotations: "Sequence[Any]", marker_type: "type[Any]") -> Any:
    """Return the first annotation that is an instance of ``marker_type``, or None."""
    for annotation in annotations:
        if isinstance(annotation, marker_type):
            return annotation
    return None
