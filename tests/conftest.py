"""Shared fixtures: in-memory store, blob store, services, seeded users."""
import pytest
import pytest_asyncio

from core.blobs import InMemoryBlobStore
from core.store import InMemoryDocumentStore
from verticals.bookxchange.catalog import ImageUpload
from verticals.bookxchange.services import BookXchangeServices


def image(name: str = "cover.jpg", size: int = 1024) -> ImageUpload:
    return ImageUpload(filename=name, content_type="image/jpeg", data=b"\xff" * size)


def listing_fields(**overrides) -> dict:
    fields = {
        "title": "Linear Algebra Done Right",
        "description": "Light pencil notes in chapter 3",
        "department": "Mathematics",
        "course": "MATH 221",
        "condition": 4,
        "type": "sell",
        "price": 25.0,
        "exchange_wishlist": None,
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def blobs():
    return InMemoryBlobStore()


@pytest.fixture
def services(store, blobs):
    return BookXchangeServices.build(store, blobs)


@pytest_asyncio.fixture
async def users(services):
    """Three students keyed by short name."""
    created = {}
    for name, dept in (("alice", "Mathematics"), ("bob", "Physics"), ("carol", "History")):
        created[name] = await services.identity.create_user(
            email=f"{name}@campus.edu",
            name=name.title(),
            department=dept,
            student_id=f"S-{name}",
        )
    return {name: user["id"] for name, user in created.items()}


@pytest.fixture
def make_listing(services):
    """Factory: create a listing owned by ``owner_id`` with one image."""

    async def _make(owner_id: str, **overrides) -> dict:
        return await services.catalog.create(owner_id, listing_fields(**overrides), [image()])

    return _make
