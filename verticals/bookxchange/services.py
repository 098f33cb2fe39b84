"""Service wiring and FastAPI dependency factories.

The store and blob store are created once per process and passed into every
service by constructor. Routers reach the services through ``app.state``.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request

from core.blobs import BlobStore
from core.store.base import DocumentStore
from patterns.domain_config import MarketplaceConfig
from verticals.bookxchange.catalog import ListingCatalog
from verticals.bookxchange.comments import CommentBoard
from verticals.bookxchange.identity import IdentityDirectory
from verticals.bookxchange.negotiation import NegotiationEngine


@dataclass
class BookXchangeServices:
    """All services sharing one store and blob store."""

    store: DocumentStore
    blobs: BlobStore
    config: MarketplaceConfig
    identity: IdentityDirectory
    catalog: ListingCatalog
    comments: CommentBoard
    negotiation: NegotiationEngine

    @classmethod
    def build(
        cls,
        store: DocumentStore,
        blobs: BlobStore,
        config: MarketplaceConfig | None = None,
    ) -> "BookXchangeServices":
        config = config or MarketplaceConfig.default()
        identity = IdentityDirectory(store)
        catalog = ListingCatalog(store, identity, blobs, config)
        return cls(
            store=store,
            blobs=blobs,
            config=config,
            identity=identity,
            catalog=catalog,
            comments=CommentBoard(store, identity, catalog),
            negotiation=NegotiationEngine(store, identity, catalog),
        )


# ---------------------------------------------------------------------------
# FastAPI dependency factories
# ---------------------------------------------------------------------------

def get_services(request: Request) -> BookXchangeServices:
    """FastAPI dependency for the process-wide services."""
    return request.app.state.services


def get_identity(services: BookXchangeServices = Depends(get_services)) -> IdentityDirectory:
    return services.identity


def get_catalog(services: BookXchangeServices = Depends(get_services)) -> ListingCatalog:
    return services.catalog


def get_comments(services: BookXchangeServices = Depends(get_services)) -> CommentBoard:
    return services.comments


def get_negotiation(services: BookXchangeServices = Depends(get_services)) -> NegotiationEngine:
    return services.negotiation
