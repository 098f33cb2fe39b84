"""BookXchange API — FastAPI entry point.

Registers middleware, routers, error handlers, and lifecycle hooks. The
vertical router is mounted under /api.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.middleware import CurrentUserMiddleware
from core.blobs import LocalBlobStore
from core.errors import MarketplaceError
from core.store import InMemoryDocumentStore, SqlDocumentStore
from verticals.bookxchange.config import config
from verticals.bookxchange.services import BookXchangeServices

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:3001"
).split(",")
STORE_BACKEND = os.getenv("STORE_BACKEND", "sql").lower()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VERSION = "0.1.0"

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store and services at startup unless already injected."""
    db = None
    if getattr(app.state, "services", None) is None:
        if STORE_BACKEND == "memory":
            store = InMemoryDocumentStore()
        else:
            from core.database import Database
            from verticals.bookxchange.models.db_models import COLLECTIONS

            db = Database()
            await db.create_all()
            store = SqlDocumentStore(db.session_factory, COLLECTIONS)
        app.state.services = BookXchangeServices.build(store, LocalBlobStore(), config)
        logger.info("BookXchange API started (store=%s)", STORE_BACKEND)

    yield

    logger.info("BookXchange API shutting down")
    await app.state.services.store.close()
    if db is not None:
        await db.dispose()


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------

async def marketplace_error_handler(request: Request, exc: MarketplaceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

def create_app(services: Optional[BookXchangeServices] = None) -> FastAPI:
    """Build the application. Tests pass prebuilt services."""
    app = FastAPI(
        title="BookXchange",
        description="Campus textbook exchange marketplace",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.services = services

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Caller identity
    app.add_middleware(CurrentUserMiddleware)

    app.add_exception_handler(MarketplaceError, marketplace_error_handler)

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------

    from verticals.bookxchange.router import router as bookxchange_router

    app.include_router(bookxchange_router, prefix="/api", tags=["BookXchange"])

    # -----------------------------------------------------------------------
    # Health & root
    # -----------------------------------------------------------------------

    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": VERSION}

    @app.get("/")
    async def root():
        return {
            "name": "BookXchange",
            "version": VERSION,
            "docs": "/docs",
            "description": "Campus textbook exchange marketplace",
        }

    return app


app = create_app()
