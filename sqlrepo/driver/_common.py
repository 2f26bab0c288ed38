"""Result rows and execution results shared by all drivers."""

from collections.abc import Iterator, Sequence
from typing import Any, NamedTuple, Optional, Union

from sqlrepo.exceptions import MappingError, MappingErrorReason

__all__ = ("GeneratedKeys", "ResultColumns", "ResultRow")


class ResultColumns:
    """Column names of one result set with a case-insensitive lookup table.

    Built once per result set and shared by all of its rows.
    """

    __slots__ = ("_lookup", "names")

    def __init__(self, names: "Sequence[str]") -> None:
        self.names: tuple[str, ...] = tuple(names)
        lookup: dict[str, int] = {}
        for index, name in enumerate(self.names):
            lookup.setdefault(name, index)
            lookup.setdefault(name.lower(), index)
        self._lookup = lookup

    def __len__(self) -> int:
        return len(self.names)

    def index_of(self, name: str) -> int:
        """Return the position of column ``name``.

        Exact matches win over case-insensitive ones.

        Raises:
            MappingError: If the result set has no such column.
        """
        index = self._lookup.get(name)
        if index is None:
            index = self._lookup.get(name.lower())
        if index is None:
            msg = f"Column {name!r} not found in result columns {list(self.names)}"
            raise MappingError(msg, reason=MappingErrorReason.MISSING_COLUMN)
        return index


class ResultRow:
    """One result row, accessible by position or by column name."""

    __slots__ = ("_columns", "_values")

    def __init__(self, columns: ResultColumns, values: "Sequence[Any]") -> None:
        self._columns = columns
        self._values = tuple(values)

    def __getitem__(self, key: "Union[int, str]") -> Any:
        if isinstance(key, str):
            return self._values[self._columns.index_of(key)]
        try:
            return self._values[key]
        except IndexError:
            msg = f"Column index {key} out of range for {len(self._values)} columns"
            raise MappingError(msg, reason=MappingErrorReason.MISSING_COLUMN) from None

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> "Iterator[Any]":
        return iter(self._values)

    def __repr__(self) -> str:
        return f"ResultRow({self.as_dict()!r})"

    def keys(self) -> "tuple[str, ...]":
        return self._columns.names

    def as_dict(self) -> "dict[str, Any]":
        return dict(zip(self._columns.names, self._values))


class GeneratedKeys(NamedTuple):
    """Outcome of a mutation executed with generated key retrieval."""

    affected_rows: int
    keys: "dict[str, Any]"

    def get(self, name: str) -> Optional[Any]:
        """Look a key up by column name, falling back to a case-insensitive match."""
        if name in self.keys:
            return self.keys[name]
        lowered = name.lower()
        for key_name, value in self.keys.items():
            if key_name.lower() == lowered:
                return value
        return None
