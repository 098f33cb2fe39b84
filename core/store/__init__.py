"""
BookXchange Document Store — collection CRUD with equality queries.

- DocumentStore: abstract async contract (equality AND, single ordering,
  limit/offset, count)
- InMemoryDocumentStore: dict-backed implementation for tests and dev
- SqlDocumentStore: SQLAlchemy-backed implementation
"""
from core.store.base import (
    DocumentExistsError,
    DocumentStore,
    OrderBy,
    Predicate,
    where,
)
from core.store.memory import InMemoryDocumentStore
from core.store.sql import SqlDocumentStore

__all__ = [
    "DocumentExistsError",
    "DocumentStore",
    "InMemoryDocumentStore",
    "OrderBy",
    "Predicate",
    "SqlDocumentStore",
    "where",
]
