"""Filter-expression parsing and row matching.

The query language is a single ``WHERE`` clause made of comparisons joined by
`` AND ``::

    WHERE age >= 21 AND name = "Alice" AND x < 128

Known limitations of the grammar:

- Conditions are split on the literal text `` AND `` before anything else, so
  a quoted string containing `` AND `` is cut in two.
- The operator is the first match found when trying ``>=``, ``<=``, ``!=``,
  ``=``, ``>``, ``<`` in that order, so field names or values containing an
  operator character misparse.
- There is no OR, no parentheses and no escaping inside quoted strings.
"""

import logging
import operator
import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from ..errors import QueryParseError, TypeMismatchError, UnsupportedOperatorError
from .models import Row
from .values import MISSING, ValueKind, get_field, kind_of

logger = logging.getLogger(__name__)

# Tolerance for numeric equality
NUMBER_EPSILON = sys.float_info.epsilon

COORDINATE_FIELDS = ("x", "y")

_UNSIGNED_RE = re.compile(r"^\+?[0-9]+$")
_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")
_FLOAT_RE = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")


class ComparisonOp(Enum):
    GREATER_EQUAL = ">="
    LESS_EQUAL = "<="
    NOT_EQUAL = "!="
    EQUAL = "="
    GREATER = ">"
    LESS = "<"

    @property
    def is_equality(self) -> bool:
        return self in (ComparisonOp.EQUAL, ComparisonOp.NOT_EQUAL)

    def apply(self, left, right) -> bool:
        return _OPERATOR_FUNCS[self](left, right)


_OPERATOR_FUNCS = {
    ComparisonOp.GREATER_EQUAL: operator.ge,
    ComparisonOp.LESS_EQUAL: operator.le,
    ComparisonOp.NOT_EQUAL: operator.ne,
    ComparisonOp.EQUAL: operator.eq,
    ComparisonOp.GREATER: operator.gt,
    ComparisonOp.LESS: operator.lt,
}

# Two-character operators first so ">=" is never read as ">"
OPERATOR_PRECEDENCE = tuple(ComparisonOp)


@dataclass(frozen=True)
class CoordinateCondition:
    """Comparison against a row's x or y coordinate."""

    field: str
    op: ComparisonOp
    value: int


@dataclass(frozen=True)
class FieldCondition:
    """Comparison against a key of the row's JSON payload."""

    field: str
    op: ComparisonOp
    value: Any


Condition = Union[CoordinateCondition, FieldCondition]


@dataclass
class Query:
    """Conditions combined with AND. An empty query matches every row."""

    conditions: list[Condition] = field(default_factory=list)

    def matches(self, row: Row) -> bool:
        return matches_query(row, self)


def parse_query(text: str) -> Query:
    """Parse ``WHERE <clause> [AND <clause>]*`` into a Query."""
    stripped = text.strip()
    if not stripped.lower().startswith("where"):
        raise QueryParseError(text, "Query must start with WHERE")

    body = stripped[5:].strip()
    conditions = [parse_condition(part.strip()) for part in body.split(" AND ")]
    logger.debug("Parsed %d condition(s) from %r", len(conditions), text)
    return Query(conditions=conditions)


def parse_condition(clause: str) -> Condition:
    """Parse one ``<field><op><value>`` clause."""
    for op in OPERATOR_PRECEDENCE:
        pos = clause.find(op.value)
        if pos == -1:
            continue

        name = clause[:pos].strip()
        raw = clause[pos + len(op.value):].strip()
        if not name:
            raise QueryParseError(clause, "Missing field name")

        if name in COORDINATE_FIELDS:
            if not _UNSIGNED_RE.match(raw):
                raise QueryParseError(clause, f"Invalid coordinate value {raw!r}")
            return CoordinateCondition(field=name, op=op, value=int(raw))

        return FieldCondition(field=name, op=op, value=parse_literal(raw))

    raise QueryParseError(clause, "Invalid condition")


def parse_literal(raw: str) -> Any:
    """Classify the value text of a field condition.

    Order: quoted string, integer, float, true/false, then the bare text.
    """
    if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
        return raw[1:-1]
    if _INTEGER_RE.match(raw):
        return int(raw)
    if _FLOAT_RE.match(raw):
        return float(raw)
    if raw == "true":
        return True
    if raw == "false":
        return False
    return raw


def matches_query(row: Row, query: Query) -> bool:
    for condition in query.conditions:
        if not matches_condition(row, condition):
            return False
    return True


def matches_condition(row: Row, condition: Condition) -> bool:
    if isinstance(condition, CoordinateCondition):
        coord = row.x if condition.field == "x" else row.y
        return condition.op.apply(coord, condition.value)

    current = get_field(row.data, condition.field)
    if current is MISSING:
        return False
    return compare_values(condition.field, current, condition.value, condition.op)


def compare_values(name: str, left: Any, right: Any, op: ComparisonOp) -> bool:
    """Compare a stored value against a literal using typed rules.

    Raises:
        TypeMismatchError: the two values have different JSON types, or a
            type that has no comparison (object, array, null).
        UnsupportedOperatorError: an ordering operator on strings or booleans.
    """
    left_kind = kind_of(left)
    right_kind = kind_of(right)

    if left_kind is ValueKind.NUMBER and right_kind is ValueKind.NUMBER:
        return _compare_numbers(left, right, op)

    if left_kind is right_kind and left_kind in (ValueKind.STRING, ValueKind.BOOLEAN):
        if not op.is_equality:
            raise UnsupportedOperatorError(name, left_kind, op)
        return op.apply(left, right)

    raise TypeMismatchError(name, left_kind, right_kind)


def _compare_numbers(left, right, op: ComparisonOp) -> bool:
    if isinstance(left, int) and isinstance(right, int):
        return op.apply(left, right)
    if not op.is_equality:
        # Mixed int/float ordering is exact
        return op.apply(left, right)

    try:
        close = abs(float(left) - float(right)) < NUMBER_EPSILON
    except OverflowError:
        # An int beyond float range is never within epsilon of a float
        close = False
    return close if op is ComparisonOp.EQUAL else not close
