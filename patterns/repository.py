"""Async repository pattern over the document store.

Provides a base repository with CRUD, equality filtering, pagination and
audit timestamps. Services subclass this per collection to add
domain-specific queries.

Example: TransactionRepository extending BaseRepository.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from core.store.base import DocumentStore, OrderBy, where
from patterns.pagination import Page, PageRequest, fetch_page

_IMMUTABLE_FIELDS = ("id", "created_at")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Base repository
# ---------------------------------------------------------------------------

class BaseRepository:
    """Collection-scoped CRUD + pagination.

    Subclass and set ``collection``::

        class CommentRepository(BaseRepository):
            collection = "comments"

            async def for_book(self, book_id: str, request: PageRequest) -> Page:
                return await self.list({"book_id": book_id}, request, OrderBy.asc("created_at"))
    """

    collection: str
    default_order: OrderBy = OrderBy.desc("created_at")

    def __init__(self, store: DocumentStore):
        self.store = store

    # -- List with pagination --

    async def list(
        self,
        filters: dict[str, Any] | None,
        request: PageRequest,
        order_by: OrderBy | None = None,
    ) -> Page:
        """One page of records matching every non-None filter."""
        return await fetch_page(
            self.store,
            self.collection,
            where(**(filters or {})),
            order_by or self.default_order,
            request,
        )

    async def find(
        self,
        filters: dict[str, Any] | None = None,
        order_by: OrderBy | None = None,
    ) -> list[dict]:
        """All records matching the filters, unpaginated."""
        return await self.store.query(
            self.collection,
            where(**(filters or {})),
            order_by=order_by or self.default_order,
        )

    async def exists(self, filters: dict[str, Any]) -> bool:
        found = await self.store.query(self.collection, where(**filters), limit=1)
        return bool(found)

    # -- Get by ID --

    async def get(self, item_id: str) -> dict | None:
        return await self.store.get(self.collection, item_id)

    # -- Create --

    async def create(self, data: dict[str, Any], item_id: str | None = None) -> dict:
        """Insert a record, stamping created_at/updated_at unless supplied."""
        now = utcnow()
        record = {"created_at": now, "updated_at": now, **data}
        return await self.store.create(self.collection, record, doc_id=item_id)

    # -- Update --

    async def update(self, item_id: str, data: dict[str, Any]) -> dict | None:
        """Apply a partial update. Returns None if not found."""
        fields = {k: v for k, v in data.items() if k not in _IMMUTABLE_FIELDS}
        fields.setdefault("updated_at", utcnow())
        return await self.store.update(self.collection, item_id, fields)

    # -- Delete --

    async def delete(self, item_id: str) -> bool:
        """Delete a record. Returns True if deleted, False if not found."""
        return await self.store.delete(self.collection, item_id)
