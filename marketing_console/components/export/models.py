"""
Export component models.
"""

from __future__ import annotations

from dataclasses import dataclass

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


@dataclass(frozen=True)
class CsvExport:
    """A ready-to-download CSV file."""

    filename: str
    content: str
    row_count: int = 0
    media_type: str = CSV_MEDIA_TYPE

    def encode(self) -> bytes:
        return self.content.encode("utf-8")
