"""Row mapper resolution and the per-type mapper cache."""

import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Final, Optional, Union

from sqlrepo.exceptions import ImproperConfigurationError
from sqlrepo.mapping._base import RowMapper, SingleColumnRowMapper
from sqlrepo.mapping.constructor import ConstructorRowMapper, has_row_constructor
from sqlrepo.typing import Empty, EmptyType
from sqlrepo.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlrepo.core.chain import PluginChain
    from sqlrepo.mapping._base import ColumnMapperFactory

__all__ = ("NOT_APPLICABLE", "CachedMapper", "Found", "MapperCache", "NotApplicable", "RowMapperResolver")

logger = get_logger("mapping.resolver")


@dataclass(frozen=True)
class Found:
    """A constructor row mapper was derived for the type."""

    mapper: "RowMapper[Any]"


class NotApplicable:
    """The type cannot be built from a row; single column extraction is used instead."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NOT_APPLICABLE"


NOT_APPLICABLE: Final = NotApplicable()

CachedMapper = Union[Found, NotApplicable]


class MapperCache:
    """Per element type cache of derived row mappers.

    Reads are lock free. Concurrent misses on the same type may build twice;
    builders are deterministic, so whichever entry is stored last is equivalent.
    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._entries: dict[Any, CachedMapper] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Any) -> bool:
        return key in self._entries

    def get(self, key: Any) -> Optional[CachedMapper]:
        return self._entries.get(key)

    def get_or_build(self, key: Any, builder: "Callable[[Any], CachedMapper]") -> CachedMapper:
        entry = self._entries.get(key)
        if entry is not None:
            return entry
        entry = builder(key)
        with self._lock:
            self._entries[key] = entry
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class RowMapperResolver:
    """Chooses the row mapper for a query's element type.

    Order: explicit mapper class, cached constructor mapper, the first column
    mapper factory accepting the type as a single column, then the execution
    primitive's generic single column extraction.
    """

    __slots__ = ("_fallback", "cache", "factories")

    def __init__(
        self,
        factories: "PluginChain[ColumnMapperFactory]",
        fallback: "Optional[Callable[[Any], RowMapper[Any]]]" = None,
        cache: Optional[MapperCache] = None,
    ) -> None:
        self.factories = factories
        self.cache = cache if cache is not None else MapperCache()
        self._fallback = fallback or SingleColumnRowMapper

    def _derive(self, element_type: Any) -> CachedMapper:
        if has_row_constructor(element_type):
            logger.debug("Caching constructor row mapper for %r", element_type)
            return Found(ConstructorRowMapper(element_type, self.factories))
        logger.debug("No row constructor for %r, using single column mapping", element_type)
        return NOT_APPLICABLE

    def resolve(
        self,
        element_type: Any,
        explicit_mapper: "Union[type[RowMapper[Any]], EmptyType]" = Empty,
        annotations: "Sequence[Any]" = (),
    ) -> "RowMapper[Any]":
        """Return the row mapper for ``element_type``.

        Args:
            element_type: Type of one result element.
            explicit_mapper: Row mapper class declared on the method, or ``Empty``.
            annotations: Method level markers considered for single column mapping.

        Raises:
            ImproperConfigurationError: If ``explicit_mapper`` cannot be instantiated without arguments.

        Returns:
            The row mapper.
        """
        if explicit_mapper is not Empty:
            return self._instantiate(explicit_mapper)

        try:
            entry = self.cache.get_or_build(element_type, self._derive)
        except TypeError:
            # unhashable element types are resolved on every call
            entry = self._derive(element_type)
        if isinstance(entry, Found):
            return entry.mapper

        factory = self.factories.find(element_type, annotations)
        if factory is not None:
            return factory.single_column_mapper(element_type, annotations)
        return self._fallback(element_type)

    @staticmethod
    def _instantiate(mapper_type: "type[RowMapper[Any]]") -> "RowMapper[Any]":
        try:
            return mapper_type()
        except TypeError as exc:
            msg = f"Was not able to create a new instance of {mapper_type!r}. It requires a zero-argument constructor."
            raise ImproperConfigurationError(msg) from exc
