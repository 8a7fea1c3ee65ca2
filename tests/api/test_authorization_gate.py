"""Authorization Gate - route groups enforce their capability before handlers run.

Invariants:
    - /orders requires a logged-in principal
    - /admin requires the admin role: 401 anonymous, 403 customer
    - Ungated groups (/books, /reviews GET) are open
"""


async def test_orders_require_login(client):
    res = await client.get("/orders")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "UNAUTHORIZED"


async def test_orders_gate_runs_before_body_validation(client):
    res = await client.post("/orders", json={"items": []})
    assert res.status_code == 401


async def test_admin_is_401_for_anonymous(client):
    assert (await client.get("/admin/users")).status_code == 401


async def test_admin_is_403_for_customer(customer_client):
    res = await customer_client.get("/admin/users")
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "FORBIDDEN"


async def test_admin_can_list_users(admin_client, admin_user):
    res = await admin_client.get("/admin/users")
    assert res.status_code == 200
    assert [u["email"] for u in res.json()] == [admin_user.email]


async def test_admin_can_create_book(admin_client):
    res = await admin_client.post(
        "/admin/books", json={"title": "Emma", "author": "Jane Austen", "price_cents": 899},
    )
    assert res.status_code == 201
    listed = await admin_client.get("/books")
    assert [b["title"] for b in listed.json()] == ["Emma"]


async def test_catalog_is_public(client, seed_book):
    res = await client.get(f"/books/{seed_book.id}")
    assert res.status_code == 200
    assert res.json()["title"] == "Dune"
    assert (await client.get("/reviews")).status_code == 200


async def test_posting_review_requires_login(client, seed_book):
    res = await client.post("/reviews", json={"book_id": str(seed_book.id), "rating": 5})
    assert res.status_code == 401


async def test_customer_can_review(customer_client, seed_book):
    res = await customer_client.post(
        "/reviews", json={"book_id": str(seed_book.id), "rating": 4, "comment": "Spice"},
    )
    assert res.status_code == 201
    assert res.json()["rating"] == 4
