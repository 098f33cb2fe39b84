"""Test comment board."""
import pytest

from core.errors import ForbiddenError, NotFoundError
from patterns.pagination import PageRequest


@pytest.mark.asyncio
async def test_comment_thread_oldest_first(services, users, make_listing):
    book = await make_listing(users["alice"])
    first = await services.comments.create(book["id"], users["bob"], "Is the cover torn?")
    second = await services.comments.create(book["id"], users["alice"], "No, it's clean.")

    page = await services.comments.list_for_book(book["id"], PageRequest(limit=50))
    assert [c["id"] for c in page.data] == [first["id"], second["id"]]
    assert page.data[0]["author"] == {"id": users["bob"], "name": "Bob", "department": "Physics"}


@pytest.mark.asyncio
async def test_comment_on_missing_book(services, users):
    with pytest.raises(NotFoundError):
        await services.comments.create("missing", users["bob"], "hello")
    with pytest.raises(NotFoundError):
        await services.comments.list_for_book("missing", PageRequest())


@pytest.mark.asyncio
async def test_only_author_edits(services, users, make_listing):
    book = await make_listing(users["alice"])
    comment = await services.comments.create(book["id"], users["bob"], "Interested")

    edited = await services.comments.update(comment["id"], users["bob"], "Very interested")
    assert edited["content"] == "Very interested"

    with pytest.raises(ForbiddenError):
        await services.comments.update(comment["id"], users["alice"], "Spam")
    with pytest.raises(ForbiddenError):
        await services.comments.delete(comment["id"], users["carol"])

    await services.comments.delete(comment["id"], users["bob"])
    with pytest.raises(NotFoundError):
        await services.comments.update(comment["id"], users["bob"], "again")
