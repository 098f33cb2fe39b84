"""Book exchange API router.

- Listings: multipart create/update with images, browse, my-listings
- Comments under a listing
- Transactions: open, read, advance status, per-book and per-user views
- User profiles
- Caller identity via middleware, services via FastAPI Depends
"""

from typing import Any, Optional, TypeVar

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from api.middleware import require_current_user
from patterns.pagination import PageRequest
from patterns.workflow_states import TransactionStatus
from verticals.bookxchange.catalog import ImageUpload, ListingCatalog
from verticals.bookxchange.comments import CommentBoard
from verticals.bookxchange.config import config
from verticals.bookxchange.identity import IdentityDirectory
from verticals.bookxchange.models.schemas import (
    BookStatus,
    BookType,
    CommentCreate,
    CommentPage,
    CommentResponse,
    CommentUpdate,
    ListingCreate,
    ListingFilter,
    ListingPage,
    ListingResponse,
    ListingUpdate,
    ProfileUpdate,
    PublicProfile,
    TransactionCreate,
    TransactionFilter,
    TransactionList,
    TransactionPage,
    TransactionResponse,
    TransactionRole,
    TransactionUpdate,
    UserCreate,
    UserProfile,
)
from verticals.bookxchange.negotiation import NegotiationEngine
from verticals.bookxchange.services import (
    get_catalog,
    get_comments,
    get_identity,
    get_negotiation,
)

router = APIRouter()

DEFAULT_LIMIT = config.pagination.default_limit
COMMENT_LIMIT = config.pagination.comment_limit
MAX_LIMIT = config.pagination.max_limit

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validated(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate multipart form values with the same schema a JSON body would use."""
    try:
        return model.model_validate(data)
    except SchemaValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc


async def _read_images(files: Optional[list[UploadFile]]) -> list[ImageUpload]:
    return [
        ImageUpload(
            filename=f.filename or "image",
            content_type=f.content_type or "application/octet-stream",
            data=await f.read(),
        )
        for f in files or []
    ]


# ============================================================================
# Listing Endpoints
# ============================================================================

@router.post("/books", status_code=201, response_model=ListingResponse)
async def create_listing(
    title: str = Form(...),
    description: str = Form(...),
    department: str = Form(...),
    course: str = Form(...),
    condition: int = Form(...),
    type: BookType = Form(...),
    price: Optional[float] = Form(None),
    exchange_wishlist: Optional[str] = Form(None, alias="exchangeWishlist"),
    images: list[UploadFile] = File(...),
    user_id: str = Depends(require_current_user),
    catalog: ListingCatalog = Depends(get_catalog),
):
    """List a book for sale, exchange, or both (1-5 images)."""
    listing = _validated(ListingCreate, {
        "title": title,
        "description": description,
        "department": department,
        "course": course,
        "condition": condition,
        "type": type,
        "price": price,
        "exchange_wishlist": exchange_wishlist,
    })
    return await catalog.create(user_id, listing.model_dump(), await _read_images(images))


@router.get("/books", response_model=ListingPage)
async def list_listings(
    department: Optional[str] = None,
    course: Optional[str] = None,
    type: Optional[BookType] = None,
    status: Optional[BookStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    catalog: ListingCatalog = Depends(get_catalog),
):
    """Browse listings. Only available books unless a status is given."""
    filters = ListingFilter(department=department, course=course, type=type, status=status)
    result = await catalog.list(filters.model_dump(), PageRequest(page=page, limit=limit))
    return result.to_dict()


@router.get("/books/my-listings", response_model=ListingPage)
async def my_listings(
    status: Optional[BookStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    user_id: str = Depends(require_current_user),
    catalog: ListingCatalog = Depends(get_catalog),
):
    """The caller's own listings, in any status."""
    result = await catalog.list_by_owner(
        user_id,
        PageRequest(page=page, limit=limit),
        status=status.value if status else None,
    )
    return result.to_dict()


@router.get("/books/{book_id}", response_model=ListingResponse)
async def get_listing(
    book_id: str,
    catalog: ListingCatalog = Depends(get_catalog),
):
    """A single listing with its owner's public profile."""
    return await catalog.get(book_id)


@router.patch("/books/{book_id}", response_model=ListingResponse)
async def update_listing(
    book_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    course: Optional[str] = Form(None),
    condition: Optional[int] = Form(None),
    type: Optional[BookType] = Form(None),
    price: Optional[float] = Form(None),
    exchange_wishlist: Optional[str] = Form(None, alias="exchangeWishlist"),
    status: Optional[BookStatus] = Form(None),
    images: Optional[list[UploadFile]] = File(None),
    user_id: str = Depends(require_current_user),
    catalog: ListingCatalog = Depends(get_catalog),
):
    """Owner-only partial update; new images replace the old set."""
    submitted = {
        "title": title,
        "description": description,
        "department": department,
        "course": course,
        "condition": condition,
        "type": type,
        "price": price,
        "exchange_wishlist": exchange_wishlist,
        "status": status,
    }
    patch = _validated(ListingUpdate, {k: v for k, v in submitted.items() if v is not None})
    return await catalog.update(
        book_id,
        user_id,
        patch.model_dump(exclude_unset=True),
        await _read_images(images) or None,
    )


@router.delete("/books/{book_id}", status_code=204)
async def delete_listing(
    book_id: str,
    user_id: str = Depends(require_current_user),
    catalog: ListingCatalog = Depends(get_catalog),
):
    """Owner-only delete; images are released best-effort."""
    await catalog.delete(book_id, user_id)


# ============================================================================
# Comment Endpoints
# ============================================================================

@router.post("/books/{book_id}/comments", status_code=201, response_model=CommentResponse)
async def create_comment(
    book_id: str,
    request: CommentCreate,
    user_id: str = Depends(require_current_user),
    comments: CommentBoard = Depends(get_comments),
):
    return await comments.create(book_id, user_id, request.content)


@router.get("/books/{book_id}/comments", response_model=CommentPage)
async def list_comments(
    book_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(COMMENT_LIMIT, ge=1, le=MAX_LIMIT),
    comments: CommentBoard = Depends(get_comments),
):
    """Comments on a listing, oldest first."""
    result = await comments.list_for_book(book_id, PageRequest(page=page, limit=limit))
    return result.to_dict()


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: str,
    request: CommentUpdate,
    user_id: str = Depends(require_current_user),
    comments: CommentBoard = Depends(get_comments),
):
    return await comments.update(comment_id, user_id, request.content)


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: str,
    user_id: str = Depends(require_current_user),
    comments: CommentBoard = Depends(get_comments),
):
    await comments.delete(comment_id, user_id)


# ============================================================================
# Transaction Endpoints
# ============================================================================

@router.post("/transactions", status_code=201, response_model=TransactionResponse)
async def create_transaction(
    request: TransactionCreate,
    user_id: str = Depends(require_current_user),
    negotiation: NegotiationEngine = Depends(get_negotiation),
):
    """Open a negotiation on someone else's listing."""
    return await negotiation.create(
        user_id, request.book_id, request.transaction_type, request.message
    )


@router.get("/transactions", response_model=TransactionPage)
async def list_transactions(
    role: TransactionRole = TransactionRole.ALL,
    status: Optional[TransactionStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    user_id: str = Depends(require_current_user),
    negotiation: NegotiationEngine = Depends(get_negotiation),
):
    """The caller's transactions as buyer, seller, or both (newest first)."""
    filters = TransactionFilter(role=role, status=status)
    result = await negotiation.list_for_user(
        user_id,
        PageRequest(page=page, limit=limit),
        role=filters.role,
        status=filters.status,
    )
    return result.to_dict()


@router.get("/transactions/book/{book_id}", response_model=TransactionList)
async def list_book_transactions(
    book_id: str,
    user_id: str = Depends(require_current_user),
    negotiation: NegotiationEngine = Depends(get_negotiation),
):
    """Every transaction on one of the caller's listings."""
    return {"data": await negotiation.list_for_book(book_id, user_id)}


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: str,
    user_id: str = Depends(require_current_user),
    negotiation: NegotiationEngine = Depends(get_negotiation),
):
    return await negotiation.get(transaction_id, user_id)


@router.patch("/transactions/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: str,
    request: TransactionUpdate,
    user_id: str = Depends(require_current_user),
    negotiation: NegotiationEngine = Depends(get_negotiation),
):
    """Advance status and/or record the agreed price or exchange details."""
    return await negotiation.update(
        transaction_id, user_id, request.model_dump(exclude_unset=True)
    )


# ============================================================================
# User Endpoints
# ============================================================================

@router.post("/users", status_code=201, response_model=UserProfile)
async def register_user(
    request: UserCreate,
    user_id: str = Depends(require_current_user),
    identity: IdentityDirectory = Depends(get_identity),
):
    """Provision the caller's profile under the id the authenticator forwarded."""
    return await identity.create_user(
        email=request.email,
        name=request.name,
        department=request.department,
        student_id=request.student_id,
        user_id=user_id,
    )


@router.get("/users/me", response_model=UserProfile)
async def get_me(
    user_id: str = Depends(require_current_user),
    identity: IdentityDirectory = Depends(get_identity),
):
    return await identity.get_profile(user_id)


@router.patch("/users/me", response_model=UserProfile)
async def update_me(
    request: ProfileUpdate,
    user_id: str = Depends(require_current_user),
    identity: IdentityDirectory = Depends(get_identity),
):
    return await identity.update_profile(user_id, request.model_dump(exclude_unset=True))


@router.get("/users/{user_id}", response_model=PublicProfile)
async def get_user(
    user_id: str,
    identity: IdentityDirectory = Depends(get_identity),
):
    return await identity.get_public_profile(user_id)
