from enum import Enum, auto
from typing import Any, Optional

__all__ = (
    "DataError",
    "DatabaseError",
    "GeneratedKeyError",
    "ImproperConfigurationError",
    "IncorrectResultSizeError",
    "IntegrityError",
    "MappingError",
    "MappingErrorReason",
    "MultipleResultsFoundError",
    "NotFoundError",
    "SQLRepoError",
    "SerializationError",
)


class SQLRepoError(Exception):
    """Base exception class from which all sqlrepo exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLRepoError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(SQLRepoError):
    """Improper Configuration error.

    Raised for setup defects: no converter or column mapper factory accepting a type,
    a result type without a usable constructor, a row mapper without a zero-argument
    constructor, or ambiguous generated keys. Never retried.
    """


class SerializationError(SQLRepoError):
    """Encoding or decoding of an object failed."""


# -- Per call data errors --
class DataError(SQLRepoError):
    """Base class for errors caused by the data returned by a single call."""


class MappingErrorReason(Enum):
    """Why a column value could not be turned into the declared type."""

    NULL_INTO_NON_NULLABLE = auto()
    INCOMPATIBLE_NUMERIC = auto()
    CONSTRUCTION_FAILED = auto()
    INVALID_VALUE = auto()
    MISSING_COLUMN = auto()
    COLUMN_COUNT = auto()

    def __str__(self) -> str:
        return self.name.lower()


class MappingError(DataError):
    """A row could not be mapped to the requested result type."""

    reason: MappingErrorReason
    target: Optional[str]

    def __init__(
        self, message: str, reason: MappingErrorReason = MappingErrorReason.INVALID_VALUE, target: Optional[str] = None
    ) -> None:
        detail_message = message
        if target:
            detail_message = f"{message} (target: {target})"
        super().__init__(detail=detail_message)
        self.reason = reason
        self.target = target


class IncorrectResultSizeError(DataError):
    """The number of rows returned does not match the declared cardinality."""

    expected: int
    actual: int

    def __init__(self, expected: int, actual: int, message: Optional[str] = None) -> None:
        if message is None:
            message = f"Incorrect result size: expected {expected}, actual {actual}"
        super().__init__(detail=message)
        self.expected = expected
        self.actual = actual


class NotFoundError(IncorrectResultSizeError):
    """A single row was required but none was found."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(1, 0, message or "Expected exactly one row, found none")


class MultipleResultsFoundError(IncorrectResultSizeError):
    """At most one row was required but more than one were found."""

    def __init__(self, actual: int, message: Optional[str] = None) -> None:
        super().__init__(1, actual, message or f"Expected at most one row, found {actual}")


class GeneratedKeyError(DataError):
    """The database did not return a usable generated key."""


# -- Driver errors --
class DatabaseError(SQLRepoError):
    """Error raised by the underlying database driver."""


class IntegrityError(DatabaseError):
    """Data integrity error."""

