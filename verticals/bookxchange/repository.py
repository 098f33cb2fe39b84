"""Book exchange repositories — collection access over the document store.

Extends BaseRepository with the queries the services need: owner and book
scoped listings, email lookup, and the buyer/seller transaction views.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from core.store.base import OrderBy, where
from patterns.pagination import Page, PageRequest, fetch_merged_page
from patterns.repository import BaseRepository

USERS = "users"
BOOKS = "books"
COMMENTS = "comments"
TRANSACTIONS = "transactions"


def composite_key(namespace: str, **parts: Any) -> str:
    """Deterministic document id from a namespace plus identifying fields.

    Same inputs always produce the same key, so inserting under it lets the
    store's single-document atomicity enforce uniqueness of the combination.
    """
    data = json.dumps({"ns": namespace, **parts}, sort_keys=True, default=str)
    return hashlib.sha256(data.encode()).hexdigest()[:32]


# ---------------------------------------------------------------------------
# User repository
# ---------------------------------------------------------------------------

class UserRepository(BaseRepository):
    collection = USERS

    async def find_by_email(self, email: str) -> dict | None:
        found = await self.store.query(self.collection, where(email=email), limit=1)
        return found[0] if found else None


# ---------------------------------------------------------------------------
# Book repository
# ---------------------------------------------------------------------------

class BookRepository(BaseRepository):
    """Listings, newest first."""

    collection = BOOKS


# ---------------------------------------------------------------------------
# Comment repository
# ---------------------------------------------------------------------------

class CommentRepository(BaseRepository):
    """Comments read oldest first, like a thread."""

    collection = COMMENTS
    default_order = OrderBy.asc("created_at")

    async def for_book(self, book_id: str, request: PageRequest) -> Page:
        return await self.list({"book_id": book_id}, request)


# ---------------------------------------------------------------------------
# Transaction repository
# ---------------------------------------------------------------------------

class TransactionRepository(BaseRepository):
    """Transactions, newest first."""

    collection = TRANSACTIONS

    @staticmethod
    def key_for(book_id: str, buyer_id: str) -> str:
        """The id a (book, buyer) transaction is stored under."""
        return composite_key(TRANSACTIONS, book_id=book_id, buyer_id=buyer_id)

    async def for_book(self, book_id: str) -> list[dict]:
        return await self.find({"book_id": book_id})

    async def exists_for(self, book_id: str, buyer_id: str) -> bool:
        return await self.exists({"book_id": book_id, "buyer_id": buyer_id})

    async def as_buyer(self, user_id: str, status: str | None, request: PageRequest) -> Page:
        return await self.list({"buyer_id": user_id, "status": status}, request)

    async def as_seller(self, user_id: str, status: str | None, request: PageRequest) -> Page:
        return await self.list({"seller_id": user_id, "status": status}, request)

    async def as_either_party(
        self, user_id: str, status: str | None, request: PageRequest
    ) -> Page:
        """buyer_id == user OR seller_id == user, merged client-side.

        The status filter is applied after the merge so ``total`` counts the
        filtered union.
        """
        return await fetch_merged_page(
            self.store,
            self.collection,
            alternatives=[where(buyer_id=user_id), where(seller_id=user_id)],
            order_by=self.default_order,
            request=request,
            predicates=where(status=status),
        )
