"""Per method call descriptors, derived once when a contract is registered.

A :class:`MethodDescriptor` captures everything the dispatcher needs to run a
contract method: the query declaration, the bind specification of its
arguments, the shape of its return annotation and the generated key
directive. Descriptors are immutable and built by :func:`describe_contract`.
"""

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional, get_args, get_origin, get_type_hints

from sqlrepo.core.keys import GeneratedKeyResult
from sqlrepo.core.markers import Bind
from sqlrepo.core.query import get_generated_key_name, get_query_metadata
from sqlrepo.exceptions import ImproperConfigurationError
from sqlrepo.utils.logging import get_logger
from sqlrepo.utils.type_guards import (
    find_marker,
    is_optional_annotation,
    is_sequence_annotation,
    split_annotated,
    unwrap_optional,
)

if TYPE_CHECKING:
    from sqlrepo.core.query import QueryMetadata

__all__ = (
    "BindParameter",
    "MethodDescriptor",
    "ReturnShape",
    "ReturnType",
    "contract_members",
    "describe_contract",
    "describe_method",
    "describe_return",
)

logger = get_logger("core.descriptor")

_NONE_TYPE = type(None)


class ReturnShape(Enum):
    SINGLE = "single"
    LIST = "list"
    OPTIONAL = "optional"
    GENERATED_KEY = "generated_key"
    NONE = "none"


@dataclass(frozen=True)
class BindParameter:
    """One entry of a method's bind specification."""

    argument_position: int
    bind_name: Optional[str]
    declared_type: Any
    annotations: "tuple[Any, ...]" = ()
    nullable: bool = False


@dataclass(frozen=True)
class ReturnType:
    """Declared return of a method, split into shape and element type."""

    annotation: Any
    shape: ReturnShape
    element_type: Any
    markers: "tuple[Any, ...]" = ()

    @property
    def returns_generated_key(self) -> bool:
        return self.shape is ReturnShape.GENERATED_KEY


@dataclass(frozen=True)
class MethodDescriptor:
    """Immutable call descriptor of one query method."""

    name: str
    metadata: "QueryMetadata"
    binds: "tuple[BindParameter, ...]"
    return_type: ReturnType
    signature: inspect.Signature
    generated_key_name: Optional[str] = None

    def bind_arguments(self, instance: Any, args: "tuple[Any, ...]", kwargs: "dict[str, Any]") -> "tuple[Any, ...]":
        """Bind call arguments to the signature and return them positionally, ``self`` excluded.

        Raises:
            TypeError: If the arguments do not match the method signature.
        """
        bound = self.signature.bind(instance, *args, **kwargs)
        bound.apply_defaults()
        return tuple(bound.arguments.values())[1:]


def describe_return(annotation: Any) -> ReturnType:
    """Classify a return annotation into a :class:`ReturnShape` and element type."""
    bare, markers = split_annotated(annotation)
    if bare is None or bare is _NONE_TYPE:
        return ReturnType(annotation, ReturnShape.NONE, _NONE_TYPE, markers)

    if bare is GeneratedKeyResult or get_origin(bare) is GeneratedKeyResult:
        args = get_args(bare)
        key_type = args[0] if args else int
        return ReturnType(annotation, ReturnShape.GENERATED_KEY, key_type, markers)

    if is_sequence_annotation(bare):
        args = get_args(bare)
        element, extra = split_annotated(args[0] if args else Any)
        element, _ = unwrap_optional(element)
        element, nested = split_annotated(element)
        return ReturnType(annotation, ReturnShape.LIST, element, (*markers, *extra, *nested))

    if is_optional_annotation(bare):
        element, _ = unwrap_optional(bare)
        element, extra = split_annotated(element)
        return ReturnType(annotation, ReturnShape.OPTIONAL, element, (*markers, *extra))

    return ReturnType(annotation, ReturnShape.SINGLE, bare, markers)


def _describe_bind(position: int, parameter: inspect.Parameter, annotation: Any) -> BindParameter:
    bare, metadata = split_annotated(annotation)
    bare, nullable = unwrap_optional(bare)
    bare, extra = split_annotated(bare)
    annotations = (*metadata, *extra)
    marker: Optional[Bind] = find_marker(annotations, Bind)
    bind_name = None
    if marker is not None:
        bind_name = marker.name or parameter.name
    return BindParameter(
        argument_position=position,
        bind_name=bind_name,
        declared_type=bare,
        annotations=annotations,
        nullable=nullable or parameter.default is None,
    )


def describe_method(name: str, func: "Callable[..., Any]") -> Optional[MethodDescriptor]:
    """Build the descriptor of a contract method.

    Args:
        name: Attribute name of the method on the contract.
        func: The undecorated function.

    Raises:
        ImproperConfigurationError: If the annotations of ``func`` cannot be resolved.

    Returns:
        The descriptor, or None when ``func`` carries no query declaration.
    """
    metadata = get_query_metadata(func)
    if metadata is None:
        return None
    try:
        hints = get_type_hints(func, include_extras=True)
        signature = inspect.signature(func)
    except (NameError, TypeError, ValueError) as exc:
        msg = f"Unable to inspect the query method {name!r}: {exc}"
        raise ImproperConfigurationError(msg) from exc

    parameters = list(signature.parameters.values())[1:]
    binds = tuple(
        _describe_bind(position, parameter, hints.get(parameter.name, Any))
        for position, parameter in enumerate(parameters)
    )
    descriptor = MethodDescriptor(
        name=name,
        metadata=metadata,
        binds=binds,
        return_type=describe_return(hints.get("return", Any)),
        signature=signature,
        generated_key_name=get_generated_key_name(func),
    )
    logger.debug(
        "Described %s: mode=%s shape=%s binds=%s",
        name,
        metadata.mode.value,
        descriptor.return_type.shape.value,
        [bind.bind_name for bind in binds],
    )
    return descriptor


def contract_members(contract: "type[Any]") -> "dict[str, Any]":
    """Public attributes of a contract class, nearest definition first."""
    members: dict[str, Any] = {}
    for klass in contract.__mro__:
        if klass is object:
            continue
        for name, attribute in vars(klass).items():
            if name.startswith("_") or name in members:
                continue
            members[name] = attribute
    return members


def describe_contract(contract: "type[Any]") -> "dict[str, MethodDescriptor]":
    """Build the descriptors of every query method of ``contract``.

    Returns:
        Descriptors keyed by method name.
    """
    descriptors: dict[str, MethodDescriptor] = {}
    for name, attribute in contract_members(contract).items():
        if not inspect.isfunction(attribute):
            continue
        descriptor = describe_method(name, attribute)
        if descriptor is not None:
            descriptors[name] = descriptor
    return descriptors
