"""
Value Codec - typed values <-> (payload, type tag) pairs.

Primitives are stored as their canonical text. Collections and any other
object go through pydantic's JSON encoder and come back through a
TypeAdapter for the requested target type.

Decoding never raises: a value that cannot be rebuilt into the requested
type is logged and resolved to None, so one bad field never sinks a
whole read.
"""

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter
from pydantic_core import to_json

from hoard.core.config import get_logger
from hoard.core.errors import DecodeError
from hoard.core.types import ValueType

logger = get_logger("core.codec")

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

# Targets meaning "whatever the tag naturally decodes to"
_NATURAL_TARGETS = (None, object, Any)


@dataclass
class Decoded:
    """Result of a decode attempt."""

    ok: bool
    value: Any = None
    error: str | None = None


# ============================================
# Encoding
# ============================================

def value_type_of(value: Any) -> ValueType:
    """Classify a runtime value into its stored type tag."""
    if value is None:
        return ValueType.NULL
    if isinstance(value, str):
        return ValueType.STRING
    # bool is an int subclass
    if isinstance(value, bool):
        return ValueType.BOOLEAN
    if isinstance(value, int):
        if INT32_MIN <= value <= INT32_MAX:
            return ValueType.INTEGER
        return ValueType.LONG
    if isinstance(value, float):
        return ValueType.DOUBLE
    if isinstance(value, (list, tuple, set, frozenset)):
        return ValueType.LIST
    if isinstance(value, Mapping):
        return ValueType.MAP
    return ValueType.OBJECT


def to_structured_text(value: Any) -> str:
    """Serialize any value to JSON text."""
    return to_json(value, fallback=str).decode("utf-8")


def encode(value: Any) -> tuple[str | None, ValueType]:
    """
    Encode a value for storage.

    Returns:
        (payload, type tag); payload is None only for None.
    """
    value_type = value_type_of(value)

    if value_type is ValueType.NULL:
        return None, value_type
    if value_type is ValueType.STRING:
        return value, value_type
    if value_type is ValueType.BOOLEAN:
        return "true" if value else "false", value_type
    if value_type in (ValueType.INTEGER, ValueType.LONG):
        return str(value), value_type
    if value_type is ValueType.DOUBLE:
        return repr(value), value_type

    return to_structured_text(value), value_type


# ============================================
# Decoding
# ============================================

@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _get_adapter(target: Any) -> TypeAdapter:
    try:
        return _adapter(target)
    except TypeError:
        # Unhashable generic aliases skip the cache
        return TypeAdapter(target)


def from_structured_text(payload: str, target: Any = None) -> Any:
    """Deserialize JSON text, optionally validating into ``target``."""
    if target in _NATURAL_TARGETS:
        return json.loads(payload)
    return _get_adapter(target).validate_json(payload)


def _parse_bool(payload: str) -> bool:
    text = payload.strip().lower()
    if text in ("true", "1", "yes"):
        return True
    if text in ("false", "0", "no"):
        return False
    raise DecodeError(f"Not a boolean: {payload!r}")


def _decode_string(payload: str, target: Any) -> Any:
    if target in _NATURAL_TARGETS or target is str:
        return payload
    return _structured(payload, target)


def _decode_integer(payload: str, target: Any) -> Any:
    if target in _NATURAL_TARGETS or target is int:
        return int(payload)
    if target is float:
        return float(payload)
    return _structured(payload, target)


def _decode_double(payload: str, target: Any) -> Any:
    if target in _NATURAL_TARGETS or target is float:
        return float(payload)
    return _structured(payload, target)


def _decode_boolean(payload: str, target: Any) -> Any:
    if target in _NATURAL_TARGETS or target is bool:
        return _parse_bool(payload)
    return _structured(payload, target)


def _structured(payload: str, target: Any) -> Any:
    """JSON parse into the target; str targets get the raw text."""
    if target is str:
        return payload
    return from_structured_text(payload, target)


_DECODERS: dict[ValueType, Callable[[str, Any], Any]] = {
    ValueType.STRING: _decode_string,
    ValueType.INTEGER: _decode_integer,
    ValueType.LONG: _decode_integer,
    ValueType.DOUBLE: _decode_double,
    ValueType.BOOLEAN: _decode_boolean,
    ValueType.LIST: _structured,
    ValueType.MAP: _structured,
    ValueType.OBJECT: _structured,
}


def try_decode(
    payload: str | None,
    value_type: ValueType | str | None,
    target: Any = None,
) -> Decoded:
    """
    Decode a stored payload into ``target``.

    Args:
        payload: Stored text, None for NULL
        value_type: Stored type tag (enum or its string value)
        target: Requested Python type; None/object/Any for the tag's natural type

    Returns:
        Decoded result; ``ok`` is False when the value couldn't be rebuilt
    """
    if payload is None:
        return Decoded(ok=True, value=None)

    try:
        tag = ValueType(value_type) if value_type is not None else ValueType.STRING
    except ValueError:
        logger.warning(f"Unknown value type {value_type!r}, treating as STRING")
        tag = ValueType.STRING

    if tag is ValueType.NULL:
        return Decoded(ok=True, value=None)

    try:
        return Decoded(ok=True, value=_DECODERS[tag](payload, target))
    except Exception as e:
        target_name = getattr(target, "__name__", repr(target))
        logger.warning(f"Failed to decode {tag.value} value {payload!r} as {target_name}: {e}")
        return Decoded(ok=False, error=str(e))


def decode(
    payload: str | None,
    value_type: ValueType | str | None,
    target: Any = None,
) -> Any:
    """Decode a stored payload, returning None if it can't be rebuilt."""
    return try_decode(payload, value_type, target).value
