"""Listing catalog — book listings and their images.

Enforces the type-dependent field rules (sell/both need a price,
exchange/both need a wishlist), the image count and size bounds, and
owner-only mutation. Image blob deletion is best-effort: a failed delete is
logged and never fails the listing write.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
import uuid
from dataclasses import dataclass
from typing import Any, Sequence

from core.blobs import BlobStore
from core.errors import ForbiddenError, NotFoundError, ValidationError
from core.store.base import DocumentStore
from patterns.domain_config import MarketplaceConfig
from patterns.pagination import Page, PageRequest, enrich_page
from patterns.rules_engine import (
    EXCHANGE_TYPES,
    PRICED_TYPES,
    RuleResult,
    check_condition_range,
    check_image_count,
    check_image_sizes,
    check_price_requirement,
    check_wishlist_requirement,
    evaluate_rules,
)
from verticals.bookxchange.identity import IdentityDirectory
from verticals.bookxchange.repository import BookRepository

logger = logging.getLogger(__name__)

LISTING_FIELDS = (
    "title",
    "description",
    "department",
    "course",
    "condition",
    "type",
    "price",
    "exchange_wishlist",
)
EDITABLE_FIELDS = LISTING_FIELDS + ("status",)
DEFAULT_PUBLIC_STATUS = "available"


@dataclass(frozen=True)
class ImageUpload:
    """One uploaded image file."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def _safe_name(filename: str) -> str:
    base = filename.rsplit("/", 1)[-1] or "image"
    return re.sub(r"[^A-Za-z0-9._-]", "_", base)


def normalize_listing(listing: dict[str, Any]) -> dict[str, Any]:
    """Null out the type-dependent fields the listing type does not allow."""
    listing_type = listing.get("type")
    if listing_type not in PRICED_TYPES:
        listing["price"] = None
    if listing_type not in EXCHANGE_TYPES:
        listing["exchange_wishlist"] = None
    return listing


class ListingCatalog:
    """Owns book listings."""

    def __init__(
        self,
        store: DocumentStore,
        identity: IdentityDirectory,
        blobs: BlobStore,
        config: MarketplaceConfig | None = None,
    ):
        self.books = BookRepository(store)
        self.identity = identity
        self.blobs = blobs
        self.config = config or MarketplaceConfig.default()

    # -- Validation --

    def _field_rules(self, listing: dict) -> list[RuleResult]:
        cfg = self.config.listings
        return [
            check_price_requirement(listing),
            check_wishlist_requirement(listing),
            check_condition_range(listing, cfg.min_condition, cfg.max_condition),
        ]

    def _image_rules(self, images: Sequence[ImageUpload]) -> list[RuleResult]:
        cfg = self.config.listings
        return [
            check_image_count(len(images), cfg.min_images, cfg.max_images),
            check_image_sizes([img.size for img in images], cfg.max_image_bytes),
        ]

    def _validate(self, listing: dict, images: Sequence[ImageUpload] | None) -> None:
        rules = self._field_rules(listing)
        if images is not None:
            rules += self._image_rules(images)

        result = evaluate_rules(*rules)
        if not result.all_passed:
            raise ValidationError(result.messages[0], result.messages)

    # -- Images --

    async def _upload(self, owner_id: str, book_id: str, images: Sequence[ImageUpload]) -> list[str]:
        stamp = int(time.time() * 1000)

        async def _put(img: ImageUpload) -> str:
            path = f"books/{owner_id}/{book_id}/{stamp}_{uuid.uuid4().hex}_{_safe_name(img.filename)}"
            return await self.blobs.store(img.data, img.content_type, path)

        results = await asyncio.gather(*(_put(img) for img in images), return_exceptions=True)
        stored = [r for r in results if isinstance(r, str)]
        failure = next((r for r in results if isinstance(r, BaseException)), None)
        if failure is not None:
            await self.release_images(stored)
            raise failure
        return stored

    async def release_images(self, uris: Sequence[str]) -> None:
        """Delete image blobs, logging and swallowing failures."""
        for uri in uris:
            try:
                await self.blobs.delete(uri)
            except Exception:
                logger.warning("Failed to delete image %s", uri, exc_info=True)

    # -- Lookups --

    async def require(self, book_id: str) -> dict:
        """Raw listing record. Raises NotFoundError."""
        book = await self.books.get(book_id)
        if book is None:
            raise NotFoundError("Book not found")
        return book

    async def _require_owned(self, book_id: str, caller_id: str) -> dict:
        book = await self.require(book_id)
        if book["owner_id"] != caller_id:
            raise ForbiddenError("You do not own this book")
        return book

    async def _with_owner(self, book: dict) -> dict:
        return {**book, "owner": await self.identity.get_public_profile(book["owner_id"])}

    async def get(self, book_id: str) -> dict:
        """Listing with the owner's public profile embedded."""
        return await self._with_owner(await self.require(book_id))

    async def get_summary(self, book_id: str) -> dict:
        """Abbreviated {id, title, images}; empty title/images if the listing is gone."""
        book = await self.books.get(book_id)
        if book is None:
            return {"id": book_id, "title": "", "images": []}
        return {"id": book["id"], "title": book["title"], "images": book.get("images") or []}

    async def list(self, filters: dict[str, Any], request: PageRequest) -> Page:
        """Public browse: equality filters, available-only unless a status is given."""
        criteria = {k: filters.get(k) for k in ("department", "course", "type", "status")}
        if criteria["status"] is None:
            criteria["status"] = DEFAULT_PUBLIC_STATUS

        page = await self.books.list(criteria, request)
        return await enrich_page(page, self._with_owner)

    async def list_by_owner(
        self, owner_id: str, request: PageRequest, status: str | None = None
    ) -> Page:
        """The owner's own listings, any status unless one is given."""
        return await self.books.list({"owner_id": owner_id, "status": status}, request)

    # -- Mutations --

    async def create(
        self, owner_id: str, fields: dict[str, Any], images: Sequence[ImageUpload]
    ) -> dict:
        listing = normalize_listing({k: fields.get(k) for k in LISTING_FIELDS})
        self._validate(listing, images)

        book_id = self.books.store.new_id()
        uris = await self._upload(owner_id, book_id, images)

        book = await self.books.create(
            {**listing, "owner_id": owner_id, "images": uris, "status": DEFAULT_PUBLIC_STATUS},
            item_id=book_id,
        )
        logger.info("Listing %s created by %s", book_id, owner_id)
        return await self._with_owner(book)

    async def update(
        self,
        book_id: str,
        caller_id: str,
        patch: dict[str, Any],
        images: Sequence[ImageUpload] | None = None,
    ) -> dict:
        """Partial update. Keys present in ``patch`` are applied, even falsy ones."""
        book = await self._require_owned(book_id, caller_id)

        changes = {k: v for k, v in patch.items() if k in EDITABLE_FIELDS}
        merged = normalize_listing({**book, **changes})
        for key in ("price", "exchange_wishlist"):
            if merged[key] != book.get(key):
                changes[key] = merged[key]

        replace_images = bool(images)
        self._validate(merged, images if replace_images else None)

        if replace_images:
            changes["images"] = await self._upload(caller_id, book_id, images)

        updated = await self.books.update(book_id, changes)
        if updated is None:
            if replace_images:
                await self.release_images(changes["images"])
            raise NotFoundError("Book not found")

        if replace_images:
            await self.release_images(book.get("images") or [])
        return await self._with_owner(updated)

    async def delete(self, book_id: str, caller_id: str) -> None:
        book = await self._require_owned(book_id, caller_id)
        await self.release_images(book.get("images") or [])
        await self.books.delete(book_id)
        logger.info("Listing %s deleted by %s", book_id, caller_id)
