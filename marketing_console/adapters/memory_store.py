"""
In-memory entity store.

Implements EntityStorePort over plain dicts, one table per domain model.
Used by tests, the CLI (loaded from a JSON snapshot) and the dev API.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from marketing_console.core.ports.store import EntityNotFoundError, RecordT
from marketing_console.core.ports.time import TimePort
from marketing_console.domain.entities import (
    Agent,
    AgentDecision,
    ChannelSubscription,
    Event,
    Message,
    MessageCategory,
    MessageVariant,
    OutcomeMapping,
    Profile,
    Segment,
    SegmentProfile,
    StoreRecord,
)

logger = logging.getLogger(__name__)

# Snapshot key -> entity type
SNAPSHOT_TABLES: dict[str, type[StoreRecord]] = {
    "events": Event,
    "agents": Agent,
    "agent_decisions": AgentDecision,
    "outcome_mappings": OutcomeMapping,
    "message_categories": MessageCategory,
    "messages": Message,
    "message_variants": MessageVariant,
    "profiles": Profile,
    "segments": Segment,
    "segment_profiles": SegmentProfile,
    "channel_subscriptions": ChannelSubscription,
}


def _order_key(field: str):
    def key(record: StoreRecord) -> tuple[bool, Any]:
        value = getattr(record, field, None)
        if isinstance(value, datetime):
            value = value.isoformat()
        return (value is None, value if value is not None else "")

    return key


class InMemoryEntityStore:
    """In-memory entity store for testing/dev."""

    def __init__(self, time_port: TimePort | None = None) -> None:
        self._tables: dict[type[StoreRecord], dict[str, StoreRecord]] = {}
        self._time_port = time_port

    def _table(self, entity_type: type[StoreRecord]) -> dict[str, StoreRecord]:
        return self._tables.setdefault(entity_type, {})

    def _now_iso(self) -> str:
        if self._time_port:
            return self._time_port.now_utc().isoformat()
        return datetime.now(UTC).isoformat()

    def select_matches(
        self,
        entity_type: type[RecordT],
        match: dict[str, Any] | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[RecordT]:
        """Select records whose fields equal every value in match."""
        results = []
        for record in self._table(entity_type).values():
            if match and any(getattr(record, k, None) != v for k, v in match.items()):
                continue
            results.append(record)

        if order_by:
            results.sort(key=_order_key(order_by), reverse=descending)

        if limit is not None:
            results = results[:limit]
        return results  # type: ignore[return-value]

    def get(self, entity_type: type[RecordT], record_id: str) -> RecordT:
        table = self._table(entity_type)
        if record_id not in table:
            raise EntityNotFoundError(entity_type, record_id)
        return table[record_id]  # type: ignore[return-value]

    def insert(self, entity_type: type[RecordT], values: dict[str, Any]) -> RecordT:
        data = dict(values)
        data.setdefault("id", str(uuid4()))
        if "created_at" in entity_type.model_fields:
            data.setdefault("created_at", self._now_iso())

        record = entity_type.model_validate(data)
        self._table(entity_type)[record.id] = record  # type: ignore[attr-defined]
        logger.debug("Inserted %s %s", entity_type.__name__, record.id)  # type: ignore[attr-defined]
        return record

    def update(
        self, entity_type: type[RecordT], record_id: str, changes: dict[str, Any]
    ) -> RecordT:
        current = self.get(entity_type, record_id)
        # Frozen models: validate a new version rather than mutating
        updated = entity_type.model_validate({**current.model_dump(), **changes, "id": record_id})
        self._table(entity_type)[record_id] = updated
        return updated

    def delete(self, entity_type: type[RecordT], record_id: str) -> None:
        table = self._table(entity_type)
        if record_id not in table:
            raise EntityNotFoundError(entity_type, record_id)
        del table[record_id]

    def load(self, entity_type: type[StoreRecord], rows: list[dict[str, Any]]) -> int:
        """Bulk-load raw rows for one entity type. Returns rows loaded."""
        table = self._table(entity_type)
        for row in rows:
            record = entity_type.model_validate(row)
            table[record.id] = record  # type: ignore[attr-defined]
        return len(rows)

    def clear(self) -> None:
        """Clear all tables."""
        self._tables.clear()


def load_snapshot(path: Path, time_port: TimePort | None = None) -> InMemoryEntityStore:
    """
    Build a store from a JSON snapshot file.

    The file holds one list per table, keyed as in SNAPSHOT_TABLES
    (e.g. ``{"events": [...], "agents": [...]}``). Unknown keys are ignored.

    Raises:
        FileNotFoundError: if the snapshot is missing.
        ValueError: if the file is not valid JSON or not an object.
    """
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found at: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in snapshot {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Snapshot {path} must contain a JSON object")

    store = InMemoryEntityStore(time_port=time_port)
    for key, rows in data.items():
        entity_type = SNAPSHOT_TABLES.get(key)
        if entity_type is None:
            logger.warning("Ignoring unknown snapshot table %r", key)
            continue
        count = store.load(entity_type, rows or [])
        logger.info("Loaded %d %s from %s", count, key, path)
    return store
