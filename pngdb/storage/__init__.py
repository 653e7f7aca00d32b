"""Storage layers - PNG container codec and the record store."""

from .codec import ContainerContents, decode, encode
from .database import PngDatabase

__all__ = ["ContainerContents", "decode", "encode", "PngDatabase"]
