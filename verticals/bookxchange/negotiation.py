"""Negotiation engine — transactions between a listing's owner and a buyer.

Lifecycle: negotiating -> confirmed -> completed (see patterns.workflow_states).

Rules enforced here:
- a buyer cannot open a transaction on their own listing
- one transaction per (book, buyer); the id is derived from the pair, so the
  store's insert-if-absent settles races between concurrent creates
- seller_id is copied from the listing at creation and never rewritten
- only the buyer or the seller may read or change a transaction
- agreed_price and exchange_details are free-form in every state
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from core.errors import ConflictError, ForbiddenError, InvalidRequestError, NotFoundError
from core.store.base import DocumentExistsError, DocumentStore
from patterns.pagination import Page, PageRequest, enrich_all, enrich_page
from patterns.repository import utcnow
from patterns.workflow_states import TransactionStatus, plan_transition
from verticals.bookxchange.catalog import ListingCatalog
from verticals.bookxchange.identity import IdentityDirectory
from verticals.bookxchange.models.schemas import TransactionRole
from verticals.bookxchange.repository import TransactionRepository

logger = logging.getLogger(__name__)

NEGOTIABLE_FIELDS = ("agreed_price", "exchange_details")


class NegotiationEngine:
    """Owns transaction records and their status lifecycle."""

    def __init__(
        self,
        store: DocumentStore,
        identity: IdentityDirectory,
        catalog: ListingCatalog,
    ):
        self.transactions = TransactionRepository(store)
        self.identity = identity
        self.catalog = catalog

    # -- Hydration --

    async def _hydrate(self, txn: dict, book: dict | None = None) -> dict:
        """Embed the book summary and both parties' public profiles."""
        if book is not None:
            summary = {"id": book["id"], "title": book["title"], "images": book.get("images") or []}
            seller, buyer = await asyncio.gather(
                self.identity.get_public_profile(txn["seller_id"]),
                self.identity.get_public_profile(txn["buyer_id"]),
            )
        else:
            summary, seller, buyer = await asyncio.gather(
                self.catalog.get_summary(txn["book_id"]),
                self.identity.get_public_profile(txn["seller_id"]),
                self.identity.get_public_profile(txn["buyer_id"]),
            )
        return {**txn, "book": summary, "seller": seller, "buyer": buyer}

    # -- Access checks --

    async def _require(self, transaction_id: str) -> dict:
        txn = await self.transactions.get(transaction_id)
        if txn is None:
            raise NotFoundError("Transaction not found")
        return txn

    async def _require_party(self, transaction_id: str, caller_id: str) -> dict:
        txn = await self._require(transaction_id)
        if caller_id not in (txn["buyer_id"], txn["seller_id"]):
            raise ForbiddenError("You are not part of this transaction")
        return txn

    # -- Operations --

    async def create(
        self,
        buyer_id: str,
        book_id: str,
        transaction_type: str,
        message: str | None = None,
    ) -> dict:
        """Open a negotiation on a listing.

        ``message`` is accepted for client compatibility; messaging is not
        part of this service, so it is not stored.
        """
        book = await self.catalog.require(book_id)
        seller_id = book["owner_id"]

        if seller_id == buyer_id:
            raise InvalidRequestError("You cannot create a transaction for your own book")

        if await self.transactions.exists_for(book_id, buyer_id):
            raise ConflictError("Transaction already exists for this book")

        now = utcnow()
        try:
            txn = await self.transactions.create(
                {
                    "book_id": book_id,
                    "seller_id": seller_id,
                    "buyer_id": buyer_id,
                    "status": TransactionStatus.NEGOTIATING.value,
                    "transaction_type": transaction_type,
                    "agreed_price": None,
                    "exchange_details": None,
                    "created_at": now,
                    "updated_at": now,
                    "completed_at": None,
                },
                item_id=self.transactions.key_for(book_id, buyer_id),
            )
        except DocumentExistsError as exc:
            raise ConflictError("Transaction already exists for this book") from exc

        logger.info("Transaction %s opened on book %s by %s", txn["id"], book_id, buyer_id)
        return await self._hydrate(txn, book)

    async def get(self, transaction_id: str, caller_id: str) -> dict:
        txn = await self._require_party(transaction_id, caller_id)
        return await self._hydrate(txn)

    async def update(self, transaction_id: str, caller_id: str, patch: dict[str, Any]) -> dict:
        """Advance status and/or set negotiation fields.

        The whole patch is validated before anything is written. Requesting
        the current status is a no-op; entering completed stamps completed_at.
        """
        txn = await self._require_party(transaction_id, caller_id)

        changes: dict[str, Any] = {"updated_at": utcnow()}

        requested = patch.get("status")
        if requested is not None:
            change = plan_transition(txn["status"], requested, now=changes["updated_at"])
            changes["status"] = change.to_state.value
            if change.completes:
                changes["completed_at"] = change.timestamp
            if not change.is_noop:
                logger.info(
                    "Transaction %s: %s -> %s by %s",
                    transaction_id,
                    change.from_state.value,
                    change.to_state.value,
                    caller_id,
                )

        for key in NEGOTIABLE_FIELDS:
            if key in patch:
                changes[key] = patch[key]

        updated = await self.transactions.update(transaction_id, changes)
        if updated is None:
            raise NotFoundError("Transaction not found")
        return await self._hydrate(updated)

    async def list_for_book(self, book_id: str, caller_id: str) -> list[dict]:
        """Every transaction on a listing, newest first. Owner only."""
        book = await self.catalog.require(book_id)
        if book["owner_id"] != caller_id:
            raise ForbiddenError("You do not own this book")

        txns = await self.transactions.for_book(book_id)
        return await enrich_all(txns, lambda txn: self._hydrate(txn, book))

    async def list_for_user(
        self,
        caller_id: str,
        request: PageRequest,
        role: str = TransactionRole.ALL.value,
        status: str | None = None,
    ) -> Page:
        """The caller's transactions as buyer, seller, or either."""
        if role == TransactionRole.BUYER:
            page = await self.transactions.as_buyer(caller_id, status, request)
        elif role == TransactionRole.SELLER:
            page = await self.transactions.as_seller(caller_id, status, request)
        else:
            page = await self.transactions.as_either_party(caller_id, status, request)
        return await enrich_page(page, self._hydrate)
