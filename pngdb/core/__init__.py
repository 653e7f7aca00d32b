"""Core logic - value model, row models and the query engine."""

from .models import Row, Schema
from .query import Query, parse_query
from .values import MISSING, ValueKind, kind_of

__all__ = ["Row", "Schema", "Query", "parse_query", "MISSING", "ValueKind", "kind_of"]
