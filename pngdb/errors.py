"""Exception hierarchy for the PNG database.

Every error carries the context that produced it as attributes so callers
can inspect what failed without parsing the message.
"""

from typing import Optional


class PngDbError(Exception):
    """Base class for all database errors."""
    pass


class ContainerFormatError(PngDbError):
    """Raised when a PNG container cannot be read or written."""

    def __init__(self, message: str, source: Optional[BaseException] = None):
        self.source = source
        if source is not None:
            message = f"{message}: {source}"
        super().__init__(message)


class SchemaParseError(PngDbError):
    """Raised when the stored schema is not a JSON object of strings."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid schema JSON: {reason}")


class RowParseError(PngDbError):
    """Raised when a row payload is not valid JSON."""

    def __init__(self, keyword: Optional[str], text: str, reason: str):
        self.keyword = keyword
        self.text = text
        self.reason = reason
        where = f" in chunk '{keyword}'" if keyword else ""
        super().__init__(f"Invalid row JSON{where}: {reason}")


class BoundsError(PngDbError):
    """Raised when coordinates fall outside the image."""

    def __init__(self, x: int, y: int, width: int, height: int, message: Optional[str] = None):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        if message is None:
            message = f"Coordinates ({x}, {y}) out of bounds for {width}x{height} database"
        super().__init__(message)


class QueryError(PngDbError):
    """Base class for errors raised while parsing or running a query."""
    pass


class QueryParseError(QueryError):
    """Raised when filter text does not follow the WHERE grammar."""

    def __init__(self, clause: str, reason: str):
        self.clause = clause
        self.reason = reason
        super().__init__(f"{reason}: {clause!r}")


class TypeMismatchError(QueryError):
    """Raised when a field and a literal have different value types."""

    def __init__(self, field: str, left_kind, right_kind):
        self.field = field
        self.left_kind = left_kind
        self.right_kind = right_kind
        super().__init__(
            f"Cannot compare different value types for '{field}': "
            f"{left_kind.value} vs {right_kind.value}"
        )


class UnsupportedOperatorError(QueryError):
    """Raised when an ordering operator is applied to strings or booleans."""

    def __init__(self, field: str, kind, op):
        self.field = field
        self.kind = kind
        self.op = op
        super().__init__(
            f"{kind.value.capitalize()} comparison on '{field}' only supports = and != "
            f"(got {op.value})"
        )
