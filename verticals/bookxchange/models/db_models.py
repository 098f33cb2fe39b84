"""SQLAlchemy models for the book exchange.

Each model is a flat document table: DocumentMixin supplies the id and
timestamps. There are no foreign keys; references such as
``transactions.book_id`` are checked by the services at write time, the same
way they would be on a schemaless document store.
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from core.models.base import Base, DocumentMixin


class User(DocumentMixin, Base):
    """A registered student."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    department: Mapped[str] = mapped_column(String(200), nullable=False)
    student_id: Mapped[str] = mapped_column(String(64), nullable=False)


class Book(DocumentMixin, Base):
    """A book listing."""

    __tablename__ = "books"

    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    department: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    course: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    condition: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    exchange_wishlist: Mapped[str | None] = mapped_column(Text, nullable=True)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)


class Comment(DocumentMixin, Base):
    """A comment on a listing."""

    __tablename__ = "comments"

    book_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    author_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)


class Transaction(DocumentMixin, Base):
    """A negotiation between a listing's owner and an interested buyer."""

    __tablename__ = "transactions"

    book_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    buyer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    transaction_type: Mapped[str] = mapped_column(String(16), nullable=False)
    agreed_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    exchange_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# Collection name -> model, consumed by SqlDocumentStore
COLLECTIONS = {
    "users": User,
    "books": Book,
    "comments": Comment,
    "transactions": Transaction,
}
