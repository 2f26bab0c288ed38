from enum import Enum
from typing import Final, Literal

from typing_extensions import TypeAlias, TypeVar

__all__ = ("Empty", "EmptyEnum", "EmptyType", "KeyT", "ModelT")


class EmptyEnum(Enum):
    """A sentinel enum used as placeholder."""

    EMPTY = 0


EmptyType: TypeAlias = Literal[EmptyEnum.EMPTY]
Empty: Final = EmptyEnum.EMPTY

ModelT = TypeVar("ModelT")
"""Type of a composite result object."""
KeyT = TypeVar("KeyT", default=int)
"""Type of a generated key."""
