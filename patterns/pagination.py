"""Query + paginate helpers shared by the catalog and negotiation services.

Two strategies produce the same page shape:

1. Single query: the store filters, orders, counts and windows.
2. Merged query: the logical predicate is an OR across two fields, which the
   store cannot express. Each side is fetched separately, then
   ``merge_page`` concatenates, filters, sorts and windows in memory.

Callers cannot tell which strategy produced a page.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Sequence

from core.store.base import DocumentStore, OrderBy, Predicate


# ---------------------------------------------------------------------------
# Page types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PageRequest:
    """1-based page number and page size."""

    page: int = 1
    limit: int = 20

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.limit < 1:
            raise ValueError("limit must be >= 1")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    """A window of records plus pagination metadata."""

    data: list[dict]
    page: int
    limit: int
    total: int
    total_pages: int = field(init=False)

    def __post_init__(self):
        self.total_pages = (self.total + self.limit - 1) // self.limit

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "total_pages": self.total_pages,
            },
        }


# ---------------------------------------------------------------------------
# Pure merge (no store access)
# ---------------------------------------------------------------------------

def merge_page(
    result_sets: Iterable[Sequence[dict]],
    request: PageRequest,
    order_by: OrderBy,
    predicates: Sequence[Predicate] = (),
) -> Page:
    """Merge already-fetched result sets into one ordered page.

    Steps: concatenate, keep records matching every predicate, stable sort
    on ``order_by``, then slice ``[offset, offset + limit)``. ``total`` is the
    filtered count before slicing. Result sets are assumed disjoint.

    Example::

        page = merge_page(
            [as_buyer, as_seller],
            PageRequest(page=1, limit=10),
            OrderBy.desc("created_at"),
            [Predicate("status", "confirmed")],
        )
    """
    combined = [record for records in result_sets for record in records]
    filtered = [r for r in combined if all(r.get(p.field) == p.value for p in predicates)]
    filtered.sort(
        key=lambda r: (r.get(order_by.field) is not None, r.get(order_by.field)),
        reverse=order_by.descending,
    )

    window = filtered[request.offset:request.offset + request.limit]
    return Page(data=window, page=request.page, limit=request.limit, total=len(filtered))


# ---------------------------------------------------------------------------
# Store-backed strategies
# ---------------------------------------------------------------------------

async def fetch_page(
    store: DocumentStore,
    collection: str,
    predicates: Sequence[Predicate],
    order_by: OrderBy,
    request: PageRequest,
) -> Page:
    """Single-query path: count all matches, then fetch the window."""
    total = await store.count(collection, predicates)
    if total == 0 or request.offset >= total:
        return Page(data=[], page=request.page, limit=request.limit, total=total)

    records = await store.query(
        collection,
        predicates,
        order_by=order_by,
        limit=request.limit,
        offset=request.offset,
    )
    return Page(data=records, page=request.page, limit=request.limit, total=total)


async def fetch_merged_page(
    store: DocumentStore,
    collection: str,
    alternatives: Sequence[Sequence[Predicate]],
    order_by: OrderBy,
    request: PageRequest,
    predicates: Sequence[Predicate] = (),
) -> Page:
    """OR-emulation path: run one query per alternative concurrently, merge.

    ``alternatives`` are the disjuncts (e.g. buyer_id == u, seller_id == u);
    ``predicates`` are ANDed onto the merged set in memory.
    """
    result_sets = await asyncio.gather(
        *(store.query(collection, alt, order_by=order_by) for alt in alternatives)
    )
    return merge_page(result_sets, request, order_by, predicates)


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------

async def enrich_all(
    records: Sequence[dict],
    enrich: Callable[[dict], Awaitable[dict]],
) -> list[dict]:
    """Hydrate every record concurrently, preserving order.

    Returns only after every lookup has finished; any failure propagates.
    """
    return list(await asyncio.gather(*(enrich(r) for r in records)))


async def enrich_page(page: Page, enrich: Callable[[dict], Awaitable[dict]]) -> Page:
    page.data = await enrich_all(page.data, enrich)
    return page
