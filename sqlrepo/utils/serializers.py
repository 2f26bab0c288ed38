"""JSON serialization utilities for sqlrepo.

Thin wrappers around ``msgspec.json`` used by the structured log formatter,
the JSON payload column mapper and parameter converter, and the SQLite type
coercion map.
"""

from typing import Any, Literal, Optional, overload

import msgspec

from sqlrepo.exceptions import SerializationError

__all__ = ("convert_to", "from_json", "to_json")

_encoder = msgspec.json.Encoder()
_decoder = msgspec.json.Decoder()


@overload
def to_json(data: Any, *, as_bytes: Literal[False] = ...) -> str: ...


@overload
def to_json(data: Any, *, as_bytes: Literal[True]) -> bytes: ...


def to_json(data: Any, *, as_bytes: bool = False) -> "str | bytes":
    """Encode data to JSON string or bytes.

    Args:
        data: Data to encode.
        as_bytes: Whether to return bytes instead of string.

    Raises:
        SerializationError: If the data cannot be encoded.

    Returns:
        JSON string or bytes representation based on as_bytes parameter.
    """
    try:
        encoded = _encoder.encode(data)
    except (TypeError, msgspec.EncodeError) as exc:
        msg = f"Unable to encode {type(data).__name__} as JSON: {exc}"
        raise SerializationError(msg) from exc
    if as_bytes:
        return encoded
    return encoded.decode("utf-8")


def from_json(data: "str | bytes", *, target_type: Optional[Any] = None) -> Any:
    """Decode JSON string or bytes to a Python object.

    Args:
        data: JSON string or bytes to decode.
        target_type: Optional type the payload is validated and converted into.

    Raises:
        SerializationError: If the payload is not valid JSON for ``target_type``.

    Returns:
        Decoded Python object.
    """
    try:
        if target_type is None:
            return _decoder.decode(data)
        return msgspec.json.decode(data, type=target_type)
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        msg = f"Unable to decode JSON payload: {exc}"
        raise SerializationError(msg) from exc


def convert_to(value: Any, target_type: Any) -> Any:
    """Convert already decoded data (dicts, lists) into ``target_type``.

    Raises:
        SerializationError: If the value does not match ``target_type``.

    Returns:
        The converted value.
    """
    try:
        return msgspec.convert(value, type=target_type, strict=False)
    except msgspec.ValidationError as exc:
        msg = f"Unable to convert {type(value).__name__} to {target_type!r}: {exc}"
        raise SerializationError(msg) from exc
