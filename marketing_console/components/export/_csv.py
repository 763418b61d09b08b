"""
CSV text formatting.

One escaping rule for every export: a field is wrapped in double quotes, with
inner quotes doubled, if and only if its text contains a comma, a double
quote or a newline. Rows are joined with "\\n" and there is no trailing
newline.

csv.writer is not used because QUOTE_MINIMAL also quotes carriage returns
and lone empty fields, which would change the output bytes.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import Any

QUOTE_TRIGGERS = (",", '"', "\n")


def to_text(value: Any) -> str:
    """Stringify a primitive cell value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def escape_field(value: Any) -> str:
    """Render one cell, quoting only when the text needs it."""
    text = to_text(value)
    if any(ch in text for ch in QUOTE_TRIGGERS):
        return '"' + text.replace('"', '""') + '"'
    return text


def format_row(values: Iterable[Any]) -> str:
    return ",".join(escape_field(v) for v in values)


def format_csv(headers: Sequence[Any], rows: Iterable[Sequence[Any]]) -> str:
    """Header line then one line per row, "\\n"-separated."""
    lines = [format_row(headers)]
    lines.extend(format_row(r) for r in rows)
    return "\n".join(lines)


def export_filename(subject: str, qualifier: str | None = None) -> str:
    """<subject>-<qualifier>.csv, or <subject>.csv without a qualifier."""
    if qualifier:
        return f"{subject}-{qualifier}.csv"
    return f"{subject}.csv"
