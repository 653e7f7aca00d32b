"""Shared test fixtures for pngdb.

Provides a small populated database, an on-disk copy of it, and a helper
for building PNGs with hand-written text chunks.
"""

from __future__ import annotations

import io

import pytest
from PIL import Image, PngImagePlugin

from pngdb import PngDatabase, Schema


def make_png(entries: list[tuple[str, str]], size: tuple[int, int] = (4, 4)) -> bytes:
    """Build an RGB PNG carrying the given (keyword, text) zTXt chunks."""
    info = PngImagePlugin.PngInfo()
    for keyword, text in entries:
        info.add_text(keyword, text, zip=True)
    buffer = io.BytesIO()
    Image.new("RGB", size).save(buffer, format="PNG", pnginfo=info)
    return buffer.getvalue()


@pytest.fixture()
def png_factory():
    return make_png


@pytest.fixture()
def db() -> PngDatabase:
    """10x10 database with two scored rows."""
    database = PngDatabase(10, 10, Schema(fields={"name": "string", "score": "number"}))
    database.insert(1, 2, {"name": "a", "score": 5})
    database.insert(3, 4, {"name": "b", "score": 9})
    return database


@pytest.fixture()
def db_file(db, tmp_path):
    """The `db` fixture saved to a PNG file."""
    path = tmp_path / "db.png"
    db.save(path)
    return path
