"""Pydantic schemas for API request/response validation.

Field names are snake_case in Python and camelCase on the wire
(``ownerId``, ``totalPages``); both spellings are accepted on input.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from patterns.workflow_states import TransactionStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class BookType(str, Enum):
    SELL = "sell"
    EXCHANGE = "exchange"
    BOTH = "both"


class BookStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"


class TransactionType(str, Enum):
    SELL = "sell"
    EXCHANGE = "exchange"


class TransactionRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ALL = "all"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class ListingCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    department: str = Field(..., min_length=1)
    course: str = Field(..., min_length=1)
    condition: int = Field(..., ge=1, le=5)
    type: BookType
    price: Optional[float] = Field(None, ge=0)
    exchange_wishlist: Optional[str] = None


class ListingUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    department: Optional[str] = Field(None, min_length=1)
    course: Optional[str] = Field(None, min_length=1)
    condition: Optional[int] = Field(None, ge=1, le=5)
    type: Optional[BookType] = None
    price: Optional[float] = Field(None, ge=0)
    exchange_wishlist: Optional[str] = None
    status: Optional[BookStatus] = None


class ListingFilter(CamelModel):
    department: Optional[str] = None
    course: Optional[str] = None
    type: Optional[BookType] = None
    status: Optional[BookStatus] = None


class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=500)


class CommentUpdate(CamelModel):
    content: str = Field(..., min_length=1, max_length=500)


class TransactionCreate(CamelModel):
    book_id: str = Field(..., min_length=1)
    transaction_type: TransactionType
    message: Optional[str] = None


class TransactionUpdate(CamelModel):
    status: Optional[TransactionStatus] = None
    agreed_price: Optional[float] = Field(None, ge=0)
    exchange_details: Optional[str] = None


class TransactionFilter(CamelModel):
    role: TransactionRole = TransactionRole.ALL
    status: Optional[TransactionStatus] = None


class UserCreate(CamelModel):
    email: str = Field(..., min_length=3, max_length=320)
    name: str = Field(..., min_length=1, max_length=200)
    department: str = Field(..., min_length=1)
    student_id: str = Field(..., min_length=1)


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    department: Optional[str] = Field(None, min_length=1)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class PublicProfile(CamelModel):
    id: str
    name: str
    department: str


class UserProfile(CamelModel):
    id: str
    email: str
    name: str
    department: str
    student_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ListingSummary(CamelModel):
    id: str
    title: str
    images: list[str] = []


class ListingResponse(CamelModel):
    id: str
    owner_id: str
    owner: Optional[PublicProfile] = None
    title: str
    description: str
    department: str
    course: str
    condition: int
    type: str
    price: Optional[float] = None
    exchange_wishlist: Optional[str] = None
    images: list[str]
    status: str
    created_at: datetime
    updated_at: datetime


class CommentResponse(CamelModel):
    id: str
    book_id: str
    author_id: str
    author: PublicProfile
    content: str
    created_at: datetime
    updated_at: datetime


class TransactionResponse(CamelModel):
    id: str
    book_id: str
    book: ListingSummary
    seller_id: str
    seller: PublicProfile
    buyer_id: str
    buyer: PublicProfile
    status: str
    transaction_type: str
    agreed_price: Optional[float] = None
    exchange_details: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None


class PaginationMeta(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ListingPage(CamelModel):
    data: list[ListingResponse]
    pagination: PaginationMeta


class CommentPage(CamelModel):
    data: list[CommentResponse]
    pagination: PaginationMeta


class TransactionPage(CamelModel):
    data: list[TransactionResponse]
    pagination: PaginationMeta


class TransactionList(CamelModel):
    data: list[TransactionResponse]
