"""Comment board — threaded comments under a listing."""

from __future__ import annotations

import logging

from core.errors import ForbiddenError, NotFoundError
from core.store.base import DocumentStore
from patterns.pagination import Page, PageRequest, enrich_page
from verticals.bookxchange.catalog import ListingCatalog
from verticals.bookxchange.identity import IdentityDirectory
from verticals.bookxchange.repository import CommentRepository

logger = logging.getLogger(__name__)


class CommentBoard:
    """Comments on listings; only the author may edit or delete."""

    def __init__(self, store: DocumentStore, identity: IdentityDirectory, catalog: ListingCatalog):
        self.comments = CommentRepository(store)
        self.identity = identity
        self.catalog = catalog

    async def _with_author(self, comment: dict) -> dict:
        return {**comment, "author": await self.identity.get_public_profile(comment["author_id"])}

    async def _require_authored(self, comment_id: str, caller_id: str) -> dict:
        comment = await self.comments.get(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        if comment["author_id"] != caller_id:
            raise ForbiddenError("You do not own this comment")
        return comment

    async def create(self, book_id: str, author_id: str, content: str) -> dict:
        await self.catalog.require(book_id)
        comment = await self.comments.create(
            {"book_id": book_id, "author_id": author_id, "content": content}
        )
        return await self._with_author(comment)

    async def list_for_book(self, book_id: str, request: PageRequest) -> Page:
        """Oldest first."""
        await self.catalog.require(book_id)
        page = await self.comments.for_book(book_id, request)
        return await enrich_page(page, self._with_author)

    async def update(self, comment_id: str, caller_id: str, content: str) -> dict:
        await self._require_authored(comment_id, caller_id)
        updated = await self.comments.update(comment_id, {"content": content})
        if updated is None:
            raise NotFoundError("Comment not found")
        return await self._with_author(updated)

    async def delete(self, comment_id: str, caller_id: str) -> None:
        await self._require_authored(comment_id, caller_id)
        await self.comments.delete(comment_id)
        logger.info("Comment %s deleted by %s", comment_id, caller_id)
