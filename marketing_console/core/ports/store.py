"""
Entity store interface.

The store is an external collaborator: a generic typed CRUD + query service
keyed by entity type. Every read is already scoped by account by the caller;
the console trusts what it receives.

Key requirements:
- select_matches returns fully materialized lists (no cursors)
- Records come back as frozen domain models
- Unknown ids raise EntityNotFoundError
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar

from marketing_console.domain.entities import StoreRecord

RecordT = TypeVar("RecordT", bound=StoreRecord)


class EntityNotFoundError(KeyError):
    """Raised when a record id does not exist for the entity type."""

    def __init__(self, entity_type: type[StoreRecord], record_id: str) -> None:
        super().__init__(f"{entity_type.__name__} not found: {record_id}")
        self.entity_type = entity_type
        self.record_id = record_id


class EntityStorePort(Protocol):
    """Generic CRUD + query interface keyed by entity type."""

    def select_matches(
        self,
        entity_type: type[RecordT],
        match: dict[str, Any] | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[RecordT]:
        """
        Select records whose fields equal every value in ``match``.

        Args:
            entity_type: Domain model class identifying the table.
            match: Field/value equality filter (None or {} matches all).
            order_by: Optional field to order by.
            descending: Order direction.
            limit: Optional maximum number of records.

        Returns:
            Matching records.
        """
        ...

    def get(self, entity_type: type[RecordT], record_id: str) -> RecordT:
        """Get a record by id. Raises EntityNotFoundError."""
        ...

    def insert(self, entity_type: type[RecordT], values: dict[str, Any]) -> RecordT:
        """Insert a record; id and created_at are filled when absent."""
        ...

    def update(
        self, entity_type: type[RecordT], record_id: str, changes: dict[str, Any]
    ) -> RecordT:
        """Apply field changes to a record and return the new version."""
        ...

    def delete(self, entity_type: type[RecordT], record_id: str) -> None:
        """Delete a record by id. Raises EntityNotFoundError."""
        ...
