"""Base model and mixins for all SQLAlchemy models.

Provides:
- Base: Declarative base class for all models
- DocumentMixin: Adds a string document id and timestamps

Models are stored as flat documents keyed by a generated id. The
to_dict() method returns the row as the plain dict the document store
hands back to services.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all BookXchange models."""
    pass


class DocumentMixin:
    """Mixin providing the document id and standard audit columns.

    Adds:
    - id: String primary key, assigned by the document store
    - created_at: Timestamp set by the service on insert
    - updated_at: Timestamp set by the service on every change
    """

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def to_dict(self) -> dict:
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            # SQLite drops tzinfo; everything is written as UTC
            if isinstance(value, datetime) and value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            data[column.name] = value
        return data
