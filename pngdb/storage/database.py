"""In-memory record store persisted to a PNG file."""

import json
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any, Optional

from ..core.models import Row, Schema
from ..core.query import parse_query
from ..core.values import dump_value, parse_value
from ..errors import BoundsError, RowParseError
from . import codec

logger = logging.getLogger(__name__)


class PngDatabase:
    """Coordinate-addressed JSON rows stored in a PNG image's text chunks.

    Rows are kept in insertion order. Several rows may share the same
    coordinates. Not thread-safe: callers sharing an instance across
    threads must synchronize themselves.
    """

    def __init__(self, width: int, height: int, schema: Optional[Schema] = None):
        if width < 1 or height < 1:
            raise BoundsError(
                0, 0, width, height,
                message=f"Database dimensions must be positive, got {width}x{height}",
            )
        self.width = width
        self.height = height
        self.schema = schema if schema is not None else Schema()
        self.rows: list[Row] = []

    def __len__(self) -> int:
        return len(self.rows)

    def __repr__(self) -> str:
        return f"PngDatabase({self.width}x{self.height}, {len(self.rows)} rows)"

    @property
    def dimensions(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def row_count(self) -> int:
        return len(self.rows)

    # -- construction -------------------------------------------------------

    @classmethod
    def create_empty(
        cls,
        width: int,
        height: int,
        schema: Schema,
        path: str | Path,
    ) -> "PngDatabase":
        """Create a new database and write it to disk."""
        db = cls(width, height, schema)
        db.save(path)
        return db

    @classmethod
    def from_bytes(cls, data: bytes) -> "PngDatabase":
        """Rebuild a database from PNG bytes."""
        contents = codec.decode(data)
        db = cls(contents.width, contents.height, contents.schema)
        db.rows = contents.rows
        return db

    @classmethod
    def load(cls, path: str | Path) -> "PngDatabase":
        """Load a database from a PNG file."""
        path = Path(path)
        db = cls.from_bytes(path.read_bytes())
        logger.info("Loaded %s (%dx%d, %d rows)", path, db.width, db.height, len(db.rows))
        return db

    # -- persistence --------------------------------------------------------

    def to_bytes(self) -> bytes:
        return codec.encode(self.width, self.height, self.schema, self.rows)

    def save(self, path: str | Path) -> None:
        """Write the database to ``path``, replacing it atomically."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.to_bytes()

        with tempfile.NamedTemporaryFile(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp.write(data)
            tmp_path = tmp.name
        shutil.move(tmp_path, path)
        logger.info("Saved %s (%d rows, %d bytes)", path, len(self.rows), len(data))

    # -- rows ---------------------------------------------------------------

    def insert(self, x: int, y: int, data: Any) -> Row:
        """Append a row. Raises BoundsError if (x, y) is outside the image."""
        if not _is_coordinate(x) or not _is_coordinate(y):
            raise BoundsError(
                x, y, self.width, self.height,
                message=f"Coordinates must be integers, got ({x!r}, {y!r})",
            )
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            raise BoundsError(x, y, self.width, self.height)
        row = Row(x=x, y=y, data=data)
        self.rows.append(row)
        logger.debug("Inserted row at (%d, %d)", x, y)
        return row

    def insert_json(self, x: int, y: int, text: str) -> Row:
        """Insert a row whose payload is given as JSON text."""
        try:
            data = parse_value(text)
        except ValueError as e:
            raise RowParseError(None, text, str(e)) from e
        return self.insert(x, y, data)

    def query(self, filter_text: str) -> list[Row]:
        """Return rows matching a ``WHERE`` filter, in insertion order."""
        query = parse_query(filter_text)
        results = [row for row in self.rows if query.matches(row)]
        logger.debug("Query %r matched %d of %d rows", filter_text, len(results), len(self.rows))
        return results

    def list_all(self) -> list[Row]:
        return list(self.rows)

    def schema_json(self) -> str:
        return dump_value(self.schema.to_dict())

    def rows_json(self, rows: Optional[list[Row]] = None) -> str:
        """Serialize rows as a JSON list of ``{"x", "y", "data"}`` objects."""
        if rows is None:
            rows = self.rows
        return json.dumps([row.to_dict() for row in rows])


def _is_coordinate(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
