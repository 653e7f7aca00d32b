"""Data models for database rows and schema."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Schema:
    """Descriptive field name -> type label map. Not enforced on payloads."""

    fields: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return dict(self.fields)

    @classmethod
    def from_dict(cls, data: dict) -> "Schema":
        return cls(fields={str(k): str(v) for k, v in data.items()})

    @classmethod
    def from_spec(cls, spec: str) -> "Schema":
        """Parse a ``name:type,other:type`` field list.

        Entries that are not exactly one ``name:type`` pair are skipped.
        """
        fields = {}
        for field_def in spec.split(","):
            parts = field_def.strip().split(":")
            if len(parts) == 2:
                fields[parts[0].strip()] = parts[1].strip()
        return cls(fields=fields)


@dataclass
class Row:
    """A JSON payload stored at an (x, y) cell of the image."""

    x: int
    y: int
    data: Any

    @property
    def keyword(self) -> str:
        """Name of the text chunk this row is stored under."""
        return f"row_{self.x}_{self.y}"

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "data": self.data}
