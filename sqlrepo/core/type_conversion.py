"""Conversion of raw driver values into declared Python types.

Conversions are best effort and never lossy: when a value cannot be converted
without losing information it is returned unchanged, and callers that need a
strict answer check the result with :func:`is_compatible`.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Final
from uuid import UUID

from sqlrepo.exceptions import MappingError, MappingErrorReason

__all__ = ("NUMERIC_TYPES", "PRIMITIVE_TYPES", "coerce_key", "coerce_value", "is_compatible", "is_numeric_type")

NUMERIC_TYPES: Final[tuple[type, ...]] = (int, float, Decimal)
PRIMITIVE_TYPES: Final[frozenset[type]] = frozenset({bool, int, float})
"""Types that cannot hold NULL unless declared ``Optional``."""
UUID_BYTES_LENGTH: Final = 16


def is_numeric_type(target_type: Any) -> bool:
    return isinstance(target_type, type) and target_type is not bool and issubclass(target_type, NUMERIC_TYPES)


def _is_concrete_type(target_type: Any) -> bool:
    return isinstance(target_type, type) and target_type is not object and target_type is not Any


def _is_number(value: Any) -> bool:
    return isinstance(value, NUMERIC_TYPES) and not isinstance(value, bool)


def _to_int(value: Any) -> Any:
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return value
    return value


def _to_float(value: Any) -> Any:
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return value
    return value


def _to_decimal(value: Any) -> Any:
    if isinstance(value, (int, str)) and not isinstance(value, bool):
        try:
            return Decimal(value.strip() if isinstance(value, str) else value)
        except InvalidOperation:
            return value
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def coerce_value(value: Any, target_type: Any) -> Any:
    """Convert ``value`` to ``target_type`` when it can be done without loss.

    Args:
        value: Raw value returned by the driver.
        target_type: Declared type, or anything else (``Any``, generics) to skip conversion.

    Returns:
        The converted value, or ``value`` unchanged.
    """
    if value is None or not _is_concrete_type(target_type):
        return value
    if isinstance(value, target_type) and not (isinstance(value, bool) and target_type is not bool):
        return value
    if target_type is bool:
        return value
    if issubclass(target_type, int):
        return _to_int(value)
    if issubclass(target_type, float):
        return _to_float(value)
    if issubclass(target_type, Decimal):
        return _to_decimal(value)
    if target_type is str:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value).decode("utf-8")
        if _is_number(value):
            return str(value)
        return value
    if target_type is bytes:
        if isinstance(value, (bytearray, memoryview)):
            return bytes(value)
        if isinstance(value, str):
            return value.encode("utf-8")
        return value
    if target_type is UUID:
        if isinstance(value, str):
            try:
                return UUID(value)
            except ValueError:
                return value
        if isinstance(value, bytes) and len(value) == UUID_BYTES_LENGTH:
            return UUID(bytes=value)
    return value


def is_compatible(value: Any, target_type: Any) -> bool:
    """Check whether an already coerced value can be passed where ``target_type`` is declared."""
    if value is None or not _is_concrete_type(target_type):
        return True
    return isinstance(value, target_type)


def coerce_key(value: Any, key_type: Any) -> Any:
    """Convert a generated key to the declared key type.

    Raises:
        MappingError: If the key cannot be represented as ``key_type``.

    Returns:
        The converted key.
    """
    converted = coerce_value(value, key_type)
    if is_compatible(converted, key_type):
        return converted
    reason = MappingErrorReason.INCOMPATIBLE_NUMERIC if is_numeric_type(key_type) else MappingErrorReason.INVALID_VALUE
    msg = f"Generated key {value!r} of type {type(value).__name__} cannot be converted to {key_type.__name__}"
    raise MappingError(msg, reason=reason)
