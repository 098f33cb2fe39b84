"""In-memory document store.

Used by tests and the ``STORE_BACKEND=memory`` dev mode. Insertion order is
kept per collection and sorting is stable, so ties on the ordering field come
back in creation order. Replace with the SQL backend for production.
"""

from __future__ import annotations

import copy
from typing import Any, Sequence

from core.store.base import DocumentExistsError, DocumentStore, OrderBy, Predicate


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store. Each method runs without awaiting, so it is atomic."""

    def __init__(self):
        self._collections: dict[str, dict[str, dict]] = {}

    def _docs(self, collection: str) -> dict[str, dict]:
        return self._collections.setdefault(collection, {})

    @staticmethod
    def _matches(doc: dict, predicates: Sequence[Predicate]) -> bool:
        return all(doc.get(p.field) == p.value for p in predicates)

    async def get(self, collection: str, doc_id: str) -> dict | None:
        doc = self._docs(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def query(
        self,
        collection: str,
        predicates: Sequence[Predicate] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict]:
        matched = [d for d in self._docs(collection).values() if self._matches(d, predicates)]

        if order_by is not None:
            field = order_by.field
            matched = sorted(
                matched,
                key=lambda d: (d.get(field) is not None, d.get(field)),
                reverse=order_by.descending,
            )

        end = None if limit is None else offset + limit
        return [copy.deepcopy(d) for d in matched[offset:end]]

    async def count(self, collection: str, predicates: Sequence[Predicate] = ()) -> int:
        return sum(1 for d in self._docs(collection).values() if self._matches(d, predicates))

    async def create(
        self, collection: str, data: dict[str, Any], doc_id: str | None = None
    ) -> dict:
        docs = self._docs(collection)
        doc_id = doc_id or self.new_id()
        if doc_id in docs:
            raise DocumentExistsError(collection, doc_id)

        doc = {**copy.deepcopy(data), "id": doc_id}
        docs[doc_id] = doc
        return copy.deepcopy(doc)

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict | None:
        doc = self._docs(collection).get(doc_id)
        if doc is None:
            return None
        doc.update({k: copy.deepcopy(v) for k, v in fields.items() if k != "id"})
        return copy.deepcopy(doc)

    async def delete(self, collection: str, doc_id: str) -> bool:
        return self._docs(collection).pop(doc_id, None) is not None
