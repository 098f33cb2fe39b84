"""SQLAlchemy-backed document store.

Each collection maps to one declarative model. Predicates and ordering are
restricted to the same capabilities as the abstract store (equality, single
ordering field, limit/offset) so the services behave identically on either
backend.

Every call opens its own short-lived session, which keeps the store safe to
share between concurrently running coroutines.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.models.base import Base
from core.store.base import DocumentExistsError, DocumentStore, OrderBy, Predicate


class SqlDocumentStore(DocumentStore):
    """Document store over an async SQLAlchemy session factory.

    Usage::

        db = Database(DATABASE_URL)
        store = SqlDocumentStore(db.session_factory, {"books": Book})
        page = await store.query("books", where(status="available"), OrderBy.desc("created_at"))
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        models: dict[str, type[Base]],
    ):
        self._session_factory = session_factory
        self._models = dict(models)

    # -- Helpers --

    def _model(self, collection: str) -> type[Base]:
        try:
            return self._models[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    @staticmethod
    def _column(model: type[Base], field: str):
        if field not in model.__table__.columns:
            raise ValueError(f"{model.__tablename__} has no field {field!r}")
        return getattr(model, field)

    def _filtered(self, stmt, model: type[Base], predicates: Sequence[Predicate]):
        for p in predicates:
            stmt = stmt.where(self._column(model, p.field) == p.value)
        return stmt

    # -- Reads --

    async def get(self, collection: str, doc_id: str) -> dict | None:
        model = self._model(collection)
        async with self._session_factory() as session:
            row = await session.get(model, doc_id)
            return row.to_dict() if row else None

    async def query(
        self,
        collection: str,
        predicates: Sequence[Predicate] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict]:
        model = self._model(collection)
        stmt = self._filtered(select(model), model, predicates)

        if order_by is not None:
            column = self._column(model, order_by.field)
            tiebreak = model.id.desc() if order_by.descending else model.id.asc()
            # id breaks ties so equal timestamps keep stable windows
            stmt = stmt.order_by(column.desc() if order_by.descending else column.asc(), tiebreak)

        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [row.to_dict() for row in result.scalars().all()]

    async def count(self, collection: str, predicates: Sequence[Predicate] = ()) -> int:
        model = self._model(collection)
        stmt = self._filtered(select(func.count()).select_from(model), model, predicates)

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar() or 0

    # -- Writes --

    async def create(
        self, collection: str, data: dict[str, Any], doc_id: str | None = None
    ) -> dict:
        model = self._model(collection)
        doc_id = doc_id or self.new_id()

        async with self._session_factory() as session:
            if await session.get(model, doc_id) is not None:
                raise DocumentExistsError(collection, doc_id)

            row = model(id=doc_id, **{k: v for k, v in data.items() if k != "id"})
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DocumentExistsError(collection, doc_id) from exc
            return row.to_dict()

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> dict | None:
        model = self._model(collection)

        async with self._session_factory() as session:
            row = await session.get(model, doc_id)
            if row is None:
                return None

            for key, value in fields.items():
                if key == "id":
                    continue
                self._column(model, key)
                setattr(row, key, value)

            await session.commit()
            return row.to_dict()

    async def delete(self, collection: str, doc_id: str) -> bool:
        model = self._model(collection)

        async with self._session_factory() as session:
            row = await session.get(model, doc_id)
            if row is None:
                return False
            await session.delete(row)
            await session.commit()
            return True
