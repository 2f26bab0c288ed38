"""``typing.Annotated`` markers understood by the engine.

Example:
    >>> from typing import Annotated
    >>> def find(key: Annotated[str, Bind("key")]) -> str: ...
    >>> class Conf:
    ...     def __init__(self, key: Annotated[str, Column("CONF_KEY")]) -> None: ...
"""

from dataclasses import dataclass
from typing import Optional

__all__ = ("AsJson", "Bind", "Column")


@dataclass(frozen=True)
class Bind:
    """Bind a method argument to the named placeholder ``:name``.

    Without a name the argument binds to the placeholder named like the parameter.
    """

    name: Optional[str] = None


@dataclass(frozen=True)
class Column:
    """Bind a constructor parameter to the result column ``name``."""

    name: str


@dataclass(frozen=True)
class AsJson:
    """Treat the value as a JSON encoded payload, both when binding and when reading."""
