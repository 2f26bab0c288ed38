"""Query metadata attached to repository contract methods.

A contract method is declared with :func:`query`, optionally combined with
:func:`query_override` (alternate text for a given backend) and
:func:`auto_generated_key` (which generated column to return when the database
reports more than one)::

    class ConfQueries:
        @query("SELECT CONF_VALUE FROM LA_CONF WHERE CONF_KEY = :key")
        @query_override("mysql", "SELECT `CONF_VALUE` FROM LA_CONF WHERE CONF_KEY = :key")
        def find_value(self, key: Annotated[str, Bind("key")]) -> str: ...
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar, Union

from sqlrepo.exceptions import ImproperConfigurationError
from sqlrepo.typing import Empty, EmptyType

if TYPE_CHECKING:
    from sqlrepo.mapping._base import RowMapper

__all__ = (
    "QueryMetadata",
    "QueryMode",
    "auto_generated_key",
    "get_generated_key_name",
    "get_query_metadata",
    "query",
    "query_override",
    "resolve_query_text",
)

FuncT = TypeVar("FuncT", bound=Callable[..., Any])

_QUERY_ATTR = "__sqlrepo_query__"
_PENDING_OVERRIDES_ATTR = "__sqlrepo_query_overrides__"
_GENERATED_KEY_ATTR = "__sqlrepo_generated_key__"


class QueryMode(Enum):
    """Declared execution intent of a contract method."""

    TEMPLATE = "template"
    """Return the resolved query text without executing it."""
    EXECUTE = "execute"
    """Execute; decide between query and mutation from the text."""
    SELECT = "select"
    """Execute, always as a query."""
    MODIFYING = "modifying"
    """Execute, always as a mutation returning the affected row count."""
    MODIFYING_WITH_RETURN = "modifying_with_return"
    """Execute a mutation that returns rows (e.g. ``RETURNING``); mapped like a query."""


@dataclass(frozen=True)
class QueryMetadata:
    """Immutable query declaration of one contract method."""

    default_text: str
    mode: QueryMode = QueryMode.EXECUTE
    variant_overrides: "Mapping[str, str]" = field(default_factory=lambda: MappingProxyType({}))
    explicit_row_mapper: "Union[type[RowMapper[Any]], EmptyType]" = Empty

    def __post_init__(self) -> None:
        if not isinstance(self.variant_overrides, MappingProxyType):
            object.__setattr__(self, "variant_overrides", MappingProxyType(dict(self.variant_overrides)))

    def with_override(self, variant_id: str, text: str) -> "QueryMetadata":
        """Return a copy with one more variant override.

        Raises:
            ImproperConfigurationError: If ``variant_id`` already has an override.
        """
        if variant_id in self.variant_overrides:
            msg = f"Duplicate query override for database {variant_id!r}"
            raise ImproperConfigurationError(msg)
        return replace(self, variant_overrides={**self.variant_overrides, variant_id: text})

    @property
    def has_explicit_row_mapper(self) -> bool:
        return self.explicit_row_mapper is not Empty


def resolve_query_text(active_db: Optional[str], metadata: QueryMetadata) -> str:
    """Pick the query text for the active backend.

    Args:
        active_db: Identifier of the backend in use.
        metadata: Query declaration holding the default text and overrides.

    Returns:
        The override registered for ``active_db`` if any, else the default text.
    """
    if active_db is not None:
        override = metadata.variant_overrides.get(active_db)
        if override is not None:
            return override
    return metadata.default_text


def query(
    text: str,
    *,
    mode: QueryMode = QueryMode.EXECUTE,
    mapper: "Union[type[RowMapper[Any]], EmptyType]" = Empty,
    overrides: "Optional[Mapping[str, str]]" = None,
) -> "Callable[[FuncT], FuncT]":
    """Declare the query executed by a contract method.

    Args:
        text: Default query text, with ``:name`` placeholders.
        mode: Execution intent.
        mapper: Row mapper class (zero-argument constructor) used instead of the derived one.
        overrides: Alternate texts keyed by backend identifier.

    Returns:
        A decorator attaching a :class:`QueryMetadata` to the function.
    """

    def decorator(func: FuncT) -> FuncT:
        metadata = QueryMetadata(default_text=text, mode=mode, explicit_row_mapper=mapper)
        for variant_id, override in (overrides or {}).items():
            metadata = metadata.with_override(variant_id, override)
        for variant_id, override in getattr(func, _PENDING_OVERRIDES_ATTR, ()):
            metadata = metadata.with_override(variant_id, override)
        setattr(func, _QUERY_ATTR, metadata)
        return func

    return decorator


def query_override(db: str, text: str) -> "Callable[[FuncT], FuncT]":
    """Declare an alternate query text used when ``db`` is the active backend."""

    def decorator(func: FuncT) -> FuncT:
        metadata: Optional[QueryMetadata] = getattr(func, _QUERY_ATTR, None)
        if metadata is not None:
            setattr(func, _QUERY_ATTR, metadata.with_override(db, text))
        else:
            pending = getattr(func, _PENDING_OVERRIDES_ATTR, ())
            setattr(func, _PENDING_OVERRIDES_ATTR, (*pending, (db, text)))
        return func

    return decorator


def auto_generated_key(name: str) -> "Callable[[FuncT], FuncT]":
    """Name the generated key column to return when the database reports several."""

    def decorator(func: FuncT) -> FuncT:
        setattr(func, _GENERATED_KEY_ATTR, name)
        return func

    return decorator


def get_query_metadata(func: Any) -> Optional[QueryMetadata]:
    return getattr(func, _QUERY_ATTR, None)


def get_generated_key_name(func: Any) -> Optional[str]:
    return getattr(func, _GENERATED_KEY_ATTR, None)
