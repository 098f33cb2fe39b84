"""Test the HTTP surface over ASGI with httpx."""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api.main import create_app


@pytest_asyncio.fixture
async def client(services):
    app = create_app(services)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def as_user(user_id: str) -> dict:
    return {"X-User-ID": user_id}


def cover(name: str = "cover.jpg"):
    return ("images", (name, b"\xff\xd8\xff" + b"0" * 64, "image/jpeg"))


LISTING_FORM = {
    "title": "Classical Mechanics",
    "description": "Taylor, 1st edition",
    "department": "Physics",
    "course": "PHYS 201",
    "condition": "3",
    "type": "sell",
    "price": "35",
}


async def _post_listing(client, user_id, **overrides):
    form = {**LISTING_FORM, **overrides}
    return await client.post("/api/books", data=form, files=[cover()], headers=as_user(user_id))


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_requires_caller(client):
    resp = await client.get("/api/users/me")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_create_listing_camel_case(client, users):
    resp = await _post_listing(client, users["alice"])
    assert resp.status_code == 201
    body = resp.json()
    assert body["ownerId"] == users["alice"]
    assert body["owner"]["name"] == "Alice"
    assert body["status"] == "available"
    assert body["exchangeWishlist"] is None
    assert len(body["images"]) == 1
    assert "createdAt" in body


@pytest.mark.asyncio
async def test_create_listing_rule_violation(client, users):
    resp = await _post_listing(client, users["alice"], type="exchange")
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_create_listing_schema_violation(client, users):
    resp = await _post_listing(client, users["alice"], condition="9")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_browse_and_my_listings(client, users):
    await _post_listing(client, users["alice"])
    await _post_listing(client, users["bob"], department="Mathematics")

    resp = await client.get("/api/books", params={"department": "Physics", "limit": 5})
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"] == {"page": 1, "limit": 5, "total": 1, "totalPages": 1}

    mine = await client.get("/api/books/my-listings", headers=as_user(users["bob"]))
    assert [b["department"] for b in mine.json()["data"]] == ["Mathematics"]


@pytest.mark.asyncio
async def test_patch_and_delete_listing(client, users, blobs):
    book = (await _post_listing(client, users["alice"])).json()

    resp = await client.patch(
        f"/api/books/{book['id']}", data={"price": "0"}, headers=as_user(users["alice"])
    )
    assert resp.status_code == 200
    assert resp.json()["price"] == 0

    forbidden = await client.delete(f"/api/books/{book['id']}", headers=as_user(users["bob"]))
    assert forbidden.status_code == 403

    resp = await client.delete(f"/api/books/{book['id']}", headers=as_user(users["alice"]))
    assert resp.status_code == 204
    assert (await client.get(f"/api/books/{book['id']}")).status_code == 404
    assert blobs.objects == {}


@pytest.mark.asyncio
async def test_comment_routes(client, users):
    book = (await _post_listing(client, users["alice"])).json()
    created = await client.post(
        f"/api/books/{book['id']}/comments",
        json={"content": "Any highlighting?"},
        headers=as_user(users["bob"]),
    )
    assert created.status_code == 201
    assert created.json()["authorId"] == users["bob"]

    listing = await client.get(f"/api/books/{book['id']}/comments")
    assert listing.json()["pagination"]["limit"] == 50
    assert listing.json()["data"][0]["author"]["name"] == "Bob"

    comment_id = created.json()["id"]
    resp = await client.delete(f"/api/comments/{comment_id}", headers=as_user(users["bob"]))
    assert resp.status_code == 204


@pytest.mark.asyncio
async def test_transaction_flow(client, users):
    alice, bob, carol = users["alice"], users["bob"], users["carol"]
    book = (await _post_listing(client, alice)).json()
    payload = {"bookId": book["id"], "transactionType": "sell", "message": "Can we meet today?"}

    resp = await client.post("/api/transactions", json=payload, headers=as_user(bob))
    assert resp.status_code == 201
    txn = resp.json()
    assert txn["sellerId"] == alice
    assert txn["status"] == "negotiating"
    assert txn["book"]["title"] == "Classical Mechanics"

    dup = await client.post("/api/transactions", json=payload, headers=as_user(bob))
    assert dup.status_code == 409

    own = await client.post("/api/transactions", json=payload, headers=as_user(alice))
    assert own.status_code == 400

    skip = await client.patch(
        f"/api/transactions/{txn['id']}", json={"status": "completed"}, headers=as_user(alice)
    )
    assert skip.status_code == 400
    assert skip.json()["error"] == "invalid_request"

    confirm = await client.patch(
        f"/api/transactions/{txn['id']}",
        json={"status": "confirmed", "agreedPrice": 30},
        headers=as_user(alice),
    )
    assert confirm.status_code == 200
    assert confirm.json()["agreedPrice"] == 30

    outsider = await client.get(f"/api/transactions/{txn['id']}", headers=as_user(carol))
    assert outsider.status_code == 403

    mine = await client.get(
        "/api/transactions", params={"role": "buyer"}, headers=as_user(bob)
    )
    assert mine.json()["pagination"]["total"] == 1

    per_book = await client.get(f"/api/transactions/book/{book['id']}", headers=as_user(alice))
    assert [t["id"] for t in per_book.json()["data"]] == [txn["id"]]

    not_owner = await client.get(f"/api/transactions/book/{book['id']}", headers=as_user(bob))
    assert not_owner.status_code == 403


@pytest.mark.asyncio
async def test_user_routes(client, users):
    me = await client.get("/api/users/me", headers=as_user(users["carol"]))
    assert me.json()["studentId"] == "S-carol"

    resp = await client.patch(
        "/api/users/me", json={"department": "Archaeology"}, headers=as_user(users["carol"])
    )
    assert resp.json()["department"] == "Archaeology"

    public = await client.get(f"/api/users/{users['carol']}")
    assert public.json() == {"id": users["carol"], "name": "Carol", "department": "Archaeology"}

    missing = await client.get("/api/users/nobody")
    assert missing.status_code == 404
    assert missing.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_register_caller_profile(client):
    payload = {
        "email": "dana@campus.edu",
        "name": "Dana",
        "department": "Biology",
        "studentId": "S-dana",
    }
    anonymous = await client.post("/api/users", json=payload)
    assert anonymous.status_code == 401

    resp = await client.post("/api/users", json=payload, headers=as_user("auth-dana"))
    assert resp.status_code == 201
    assert resp.json()["id"] == "auth-dana"

    me = await client.get("/api/users/me", headers=as_user("auth-dana"))
    assert me.json()["email"] == "dana@campus.edu"

    again = await client.post(
        "/api/users",
        json={**payload, "email": "dana2@campus.edu"},
        headers=as_user("auth-dana"),
    )
    assert again.status_code == 409

    taken = await client.post("/api/users", json=payload, headers=as_user("someone-else"))
    assert taken.status_code == 409

    # a provisioned caller can list and is hydrated as owner
    book = await _post_listing(client, "auth-dana")
    assert book.json()["owner"]["name"] == "Dana"
