"""Document store contract.

A collection store with the capabilities of a typical hosted document
database and nothing more:

- per-field equality predicates, always ANDed (no OR across fields)
- ordering on a single field
- limit/offset windows and count-of-matches
- get/create/update/delete by document id

Documents travel as plain dicts carrying their ``id``. Timestamps stay as
``datetime`` objects inside the store; serialization happens at the API edge.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence


class DocumentExistsError(Exception):
    """Raised by ``create`` when the requested id is already taken."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"Document {doc_id!r} already exists in {collection!r}")
        self.collection = collection
        self.doc_id = doc_id


# ---------------------------------------------------------------------------
# Query terms
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Predicate:
    """Equality term: ``field == value``."""

    field: str
    value: Any


@dataclass(frozen=True)
class OrderBy:
    """Single-field ordering."""

    field: str
    descending: bool = False

    @classmethod
    def desc(cls, field: str) -> "OrderBy":
        return cls(field, descending=True)

    @classmethod
    def asc(cls, field: str) -> "OrderBy":
        return cls(field, descending=False)


def where(**terms: Any) -> list[Predicate]:
    """Build a predicate list from keyword terms, skipping ``None`` values.

    Example::

        where(department="CS", status=None)  # -> [Predicate("department", "CS")]
    """
    return [Predicate(name, value) for name, value in terms.items() if value is not None]


# ---------------------------------------------------------------------------
# Store interface
# ---------------------------------------------------------------------------

class DocumentStore(ABC):
    """Async collection store. Implementations must be safe to share."""

    def new_id(self) -> str:
        """Reserve a fresh document id without writing anything."""
        return uuid.uuid4().hex

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> dict | None:
        """Return the document or None."""

    @abstractmethod
    async def query(
        self,
        collection: str,
        predicates: Sequence[Predicate] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict]:
        """Return matching documents in order, windowed by limit/offset."""

    @abstractmethod
    async def count(self, collection: str, predicates: Sequence[Predicate] = ()) -> int:
        """Count all documents matching the predicates."""

    @abstractmethod
    async def create(
        self, collection: str, data: dict[str, Any], doc_id: str | None = None
    ) -> dict:
        """Insert a document. Raises DocumentExistsError if ``doc_id`` is taken."""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict | None:
        """Merge ``fields`` into the document atomically. None if absent."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. False if it did not exist."""

    async def close(self) -> None:
        """Release backend resources."""
