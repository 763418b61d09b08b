"""
Profile CSV import - the inverse direction of the profile exports.

Key behaviors:
- Blank and whitespace-only lines are skipped; "\\r\\n" and "\\n" both end a row
- Quoted fields may contain commas and doubled quotes
- Headers are trimmed and lowercased; values are trimmed; short rows pad with ""
- Unknown columns are ignored; each profile field accepts a few header aliases
- A "name" column is split into first/last name when first_name is absent
"""

from __future__ import annotations

import csv
from collections.abc import Mapping
from typing import Any

# profile field -> accepted headers, first non-empty wins
PROFILE_HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "email": ("email",),
    "phone": ("phone", "phone_number"),
    "device_id": ("device_id", "device"),
    "address_street": ("address_street", "street"),
    "address_city": ("address_city", "city"),
    "address_state": ("address_state", "state"),
    "address_zip": ("address_zip", "zip"),
    "address_country": ("address_country", "country"),
}


def parse_csv(text: str) -> list[dict[str, str]]:
    """Parse CSV text into one dict per data row, keyed by lowercased header."""
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []

    reader = csv.reader(lines)
    header = [h.strip().lower() for h in next(reader)]
    rows: list[dict[str, str]] = []
    for values in reader:
        rows.append(
            {h: (values[i].strip() if i < len(values) else "") for i, h in enumerate(header)}
        )
    return rows


def _first(row: Mapping[str, str], headers: tuple[str, ...]) -> str | None:
    for h in headers:
        if row.get(h):
            return row[h]
    return None


def profile_values(row: Mapping[str, str], account_id: str) -> dict[str, Any]:
    """Map one parsed row to Profile insert values; empty fields become None."""
    first_name = _first(row, ("first_name", "firstname"))
    last_name = _first(row, ("last_name", "lastname"))
    name = row.get("name", "")
    if not first_name and name:
        first, _, rest = name.partition(" ")
        first_name = first or None
        last_name = rest or None

    values: dict[str, Any] = {
        "account_id": account_id,
        "first_name": first_name,
        "last_name": last_name,
        "attributes": {},
    }
    for field_name, headers in PROFILE_HEADER_ALIASES.items():
        values[field_name] = _first(row, headers)
    return values


def profile_rows_from_csv(text: str, account_id: str) -> list[dict[str, Any]]:
    return [profile_values(row, account_id) for row in parse_csv(text)]
