"""Order Routes - placement publishes orderPlaced after commit.

Invariants:
    - A placed order is persisted and then announced on the bus exactly once
    - The announcement payload is the serialized order
    - Unknown books are 404 and announce nothing
"""

import logging
import uuid

from tests.api.conftest import PASSWORD


def _order_body(book_id, quantity=2):
    return {
        "items": [{"book_id": str(book_id), "quantity": quantity}],
        "shipping_address": "12 Arrakis Way, Dune City",
    }


async def test_place_order_publishes_order_placed(customer_client, seed_book, event_bus, caplog):
    with caplog.at_level(logging.INFO, logger="bookstore.services.order_events"):
        res = await customer_client.post("/orders", json=_order_body(seed_book.id))

    assert res.status_code == 201
    order = res.json()
    assert order["total_cents"] == 2 * 1299
    assert order["status"] == "placed"

    assert len(event_bus.published) == 1
    name, payload = event_bus.published[0]
    assert name == "orderPlaced"
    assert payload["id"] == order["id"]
    assert payload["items"][0]["title"] == "Dune"
    assert f"Order placed event received: {order['id']}" in caplog.text


async def test_unknown_book_is_404_and_not_published(customer_client, event_bus):
    res = await customer_client.post("/orders", json=_order_body(uuid.uuid4()))
    assert res.status_code == 404
    assert event_bus.published == []


async def test_duplicate_books_rejected(customer_client, seed_book):
    body = _order_body(seed_book.id)
    body["items"] *= 2
    res = await customer_client.post("/orders", json=body)
    assert res.status_code == 400


async def test_customer_sees_own_orders(customer_client, seed_book):
    placed = (await customer_client.post("/orders", json=_order_body(seed_book.id))).json()

    listed = await customer_client.get("/orders")
    fetched = await customer_client.get(f"/orders/{placed['id']}")

    assert [o["id"] for o in listed.json()] == [placed["id"]]
    assert fetched.status_code == 200


async def test_admin_updates_order_status(customer_client, seed_book, admin_user):
    placed = (await customer_client.post("/orders", json=_order_body(seed_book.id))).json()
    await customer_client.post("/auth/logout")
    await customer_client.post(
        "/auth/login", json={"email": admin_user.email, "password": PASSWORD},
    )

    res = await customer_client.patch(
        f"/admin/orders/{placed['id']}/status", json={"status": "shipped"},
    )
    assert res.status_code == 200
    assert res.json()["status"] == "shipped"
    shipped = await customer_client.get("/admin/orders", params={"status": "shipped"})
    assert [o["id"] for o in shipped.json()] == [placed["id"]]
