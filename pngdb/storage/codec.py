"""PNG container encoding for the database.

The pixels of the image are a black RGB placeholder. The data lives in
compressed text (zTXt) chunks:

    schema      JSON object mapping field name -> type label
    row_<x>_<y> JSON payload of one row (one chunk per row, duplicates allowed)
"""

import io
import logging
import re
import struct
import zlib
from dataclasses import dataclass, field
from typing import Iterable

from PIL import Image, PngImagePlugin

from ..core.models import Row, Schema
from ..core.values import dump_value, parse_value
from ..errors import ContainerFormatError, RowParseError, SchemaParseError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
SCHEMA_KEYWORD = "schema"
ROW_PREFIX = "row_"

_COORDINATE_RE = re.compile(r"^\+?[0-9]+$")

# Errors Pillow raises for truncated or corrupt PNG data
_PNG_ERRORS = (OSError, SyntaxError, ValueError, EOFError, struct.error, zlib.error)


@dataclass
class ContainerContents:
    """Everything recovered from a database PNG."""

    width: int
    height: int
    schema: Schema = field(default_factory=Schema)
    rows: list[Row] = field(default_factory=list)


class _TextChunkStream(PngImagePlugin.PngStream):
    """PngStream that keeps every text chunk in file order.

    Pillow stores text chunks in a dict, which drops repeated keywords, and
    caps text at MAX_TEXT_CHUNK per chunk and MAX_TEXT_MEMORY in total.
    Rows may share coordinates and may be any size ``encode`` can write, so
    text chunks are read here with no limit and recorded in a list.
    """

    def __init__(self, fp):
        super().__init__(fp)
        self.entries: list[tuple[str, str]] = []

    def _read_chunk(self, length: int) -> bytes:
        s = self.fp.read(length)
        if len(s) < length:
            raise OSError("Truncated text chunk")
        return s

    def _record(self, keyword: bytes, text: bytes) -> None:
        if keyword:
            self.entries.append((keyword.decode("latin-1"), text.decode("latin-1")))

    def chunk_tEXt(self, pos, length):
        s = self._read_chunk(length)
        keyword, _, text = s.partition(b"\0")
        self._record(keyword, text)
        return s

    def chunk_zTXt(self, pos, length):
        s = self._read_chunk(length)
        keyword, _, rest = s.partition(b"\0")
        if rest[:1] != b"\0":
            raise SyntaxError(f"Unknown compression method in zTXt chunk {keyword!r}")
        self._record(keyword, zlib.decompress(rest[1:]))
        return s


def _read_container(data: bytes) -> tuple[tuple[int, int], list[tuple[str, str]]]:
    """Walk the PNG chunks once, returning the IHDR size and text entries."""
    fp = io.BytesIO(data)
    if fp.read(8) != PNG_SIGNATURE:
        raise ContainerFormatError("Not a PNG file")

    stream = _TextChunkStream(fp)
    try:
        cid, pos, length = stream.read()
        if cid != b"IHDR":
            raise ContainerFormatError(f"Expected IHDR as first chunk, got {cid!r}")
        stream.crc(cid, stream.call(cid, pos, length))
        size = stream.im_size

        while True:
            cid, pos, length = stream.read()
            if cid == b"IEND":
                break
            if cid == b"IDAT":
                # Pixel data is a placeholder, only its checksum is verified
                chunk = fp.read(length)
            else:
                try:
                    chunk = stream.call(cid, pos, length)
                except AttributeError:
                    chunk = fp.read(length)
            stream.crc(cid, chunk)
    except _PNG_ERRORS as e:
        raise ContainerFormatError("Corrupt PNG data", e) from e
    finally:
        stream.close()

    return size, stream.entries


def read_text_entries(data: bytes) -> list[tuple[str, str]]:
    """Return every (keyword, text) pair stored in tEXt/zTXt chunks.

    Raises:
        ContainerFormatError: if the data is not a readable PNG.
    """
    return _read_container(data)[1]


def encode_entries(schema: Schema, rows: Iterable[Row]) -> list[tuple[str, str]]:
    """Map a schema and rows to named text blobs."""
    entries = [(SCHEMA_KEYWORD, dump_value(schema.to_dict()))]
    for row in rows:
        entries.append((row.keyword, dump_value(row.data)))
    return entries


def encode(width: int, height: int, schema: Schema, rows: Iterable[Row]) -> bytes:
    """Render the database as PNG bytes.

    Raises:
        ContainerFormatError: if a payload is not JSON serializable or
            Pillow cannot write the image.
    """
    try:
        entries = encode_entries(schema, rows)
    except (TypeError, ValueError) as e:
        raise ContainerFormatError("Row payload is not valid JSON", e) from e

    info = PngImagePlugin.PngInfo()
    for keyword, text in entries:
        info.add_text(keyword, text, zip=True)

    buffer = io.BytesIO()
    try:
        image = Image.new("RGB", (width, height))
        image.save(buffer, format="PNG", pnginfo=info)
    except (OSError, ValueError, SystemError) as e:
        raise ContainerFormatError("Could not write PNG", e) from e

    logger.debug("Encoded %d text chunk(s) into %dx%d PNG", len(entries), width, height)
    return buffer.getvalue()


def decode(data: bytes) -> ContainerContents:
    """Rebuild the database contents from PNG bytes.

    Row chunks whose name does not split into exactly ``row``, x, y are
    skipped. Coordinates that are not unsigned integers are read as 0.

    Raises:
        ContainerFormatError: if the data is not a readable PNG.
        SchemaParseError: if the schema chunk is malformed.
        RowParseError: if a row chunk does not hold valid JSON.
    """
    (width, height), entries = _read_container(data)
    contents = ContainerContents(width=width, height=height)

    for keyword, text in entries:
        if keyword == SCHEMA_KEYWORD:
            contents.schema = parse_schema(text)
        elif keyword.startswith(ROW_PREFIX):
            try:
                payload = parse_value(text)
            except ValueError as e:
                raise RowParseError(keyword, text, str(e)) from e

            parts = keyword.split("_")
            if len(parts) != 3:
                logger.debug("Skipping chunk with malformed row name %r", keyword)
                continue
            x = _parse_coordinate(parts[1])
            y = _parse_coordinate(parts[2])
            contents.rows.append(Row(x=x, y=y, data=payload))
        else:
            logger.debug("Ignoring unrelated text chunk %r", keyword)

    return contents


def parse_schema(text: str) -> Schema:
    """Parse the schema chunk.

    Accepts a flat ``{"field": "type"}`` object, or the older
    ``{"fields": {"field": "type"}}`` wrapper.
    """
    try:
        data = parse_value(text)
    except ValueError as e:
        raise SchemaParseError(text, str(e)) from e

    if not isinstance(data, dict):
        raise SchemaParseError(text, "expected a JSON object")
    if isinstance(data.get("fields"), dict):
        data = data["fields"]

    for name, label in data.items():
        if not isinstance(label, str):
            raise SchemaParseError(text, f"type label for '{name}' must be a string")
    return Schema(fields=dict(data))


def _parse_coordinate(text: str) -> int:
    if _COORDINATE_RE.match(text):
        return int(text)
    return 0
