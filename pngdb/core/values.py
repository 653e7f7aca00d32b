"""JSON value model used for row payloads and query literals.

Values are the plain Python objects produced by the ``json`` module. This
module adds the type tag needed for typed comparisons, since ``bool`` is a
subclass of ``int`` and must not be treated as a number.
"""

import json
from enum import Enum
from typing import Any


class ValueKind(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"


# Sentinel for "field not present", distinct from a stored JSON null
MISSING = object()


def kind_of(value: Any) -> ValueKind:
    """Return the JSON type tag of a value."""
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, dict):
        return ValueKind.OBJECT
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def _reject_constant(name: str):
    raise ValueError(f"Non-finite number {name} is not valid JSON")


def parse_value(text: str) -> Any:
    """Parse JSON text into a value. Raises ValueError on malformed input."""
    return json.loads(text, parse_constant=_reject_constant)


def dump_value(value: Any) -> str:
    """Serialize a value to compact, ASCII-only JSON text."""
    return json.dumps(value, separators=(",", ":"), allow_nan=False)


def get_field(value: Any, name: str) -> Any:
    """Look up a key on an object value, returning MISSING if absent."""
    if not isinstance(value, dict):
        return MISSING
    return value.get(name, MISSING)
