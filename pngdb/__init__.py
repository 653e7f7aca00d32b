"""PNG Database - store and query JSON rows inside PNG text chunks.

Package structure:
    pngdb/
    ├── cli.py              # Command-line interface
    ├── config.py           # Environment settings and YAML imports
    ├── errors.py           # Exception hierarchy
    ├── log.py              # Logging setup
    ├── core/               # Core logic
    │   ├── values.py       # JSON value model
    │   ├── models.py       # Data models (Row, Schema)
    │   └── query.py        # WHERE filter parsing and matching
    └── storage/            # Data persistence
        ├── codec.py        # PNG zTXt encoding
        └── database.py     # PngDatabase record store
"""

from .core.models import Row, Schema
from .core.query import Query, parse_query
from .core.values import ValueKind
from .errors import (
    BoundsError,
    ContainerFormatError,
    PngDbError,
    QueryError,
    QueryParseError,
    RowParseError,
    SchemaParseError,
    TypeMismatchError,
    UnsupportedOperatorError,
)
from .storage.database import PngDatabase

__all__ = [
    # Core
    "Row",
    "Schema",
    "Query",
    "parse_query",
    "ValueKind",
    # Storage
    "PngDatabase",
    # Errors
    "PngDbError",
    "ContainerFormatError",
    "SchemaParseError",
    "RowParseError",
    "BoundsError",
    "QueryError",
    "QueryParseError",
    "TypeMismatchError",
    "UnsupportedOperatorError",
]
