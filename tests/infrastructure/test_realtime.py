"""Realtime Channel - WebSocket endpoint and broadcast fan-out.

Invariants:
    - A connecting socket receives {"event": "connected"} first
    - ping is answered with pong; other events with an error event
    - broadcast() reaches every open socket and drops broken ones
    - orderPlaced on the bus reaches sockets without the publisher knowing,
      as a public view without customer fields
    - A foreign Origin is refused before the socket is accepted
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from bookstore.config import Settings
from bookstore.core.domain_types import EventName
from bookstore.infrastructure.database import DatabaseSessionManager
from bookstore.infrastructure.realtime import RealtimeChannel
from bookstore.main import create_app
from bookstore.services.event_bus import EventBus
from tests.fakes.memory_session_store import InMemorySessionStore

FRONTEND = "http://frontend.test"


class _FakeSocket:
    def __init__(self, broken: bool = False):
        self.sent = []
        self.broken = broken

    async def accept(self):
        return None

    async def send_json(self, message):
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(message)


@pytest.fixture
def socket_app():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    return create_app(
        Settings(_env_file=None, session_secret="s", frontend_url=FRONTEND),
        db=DatabaseSessionManager.from_engine(engine),
        session_store=InMemorySessionStore(),
    )


def test_socket_connect_and_ping(socket_app):
    with TestClient(socket_app).websocket_connect("/socket") as ws:
        assert ws.receive_json() == {"event": "connected", "data": None}
        ws.send_json({"event": "ping"})
        assert ws.receive_json() == {"event": "pong", "data": None}
        ws.send_json({"event": "subscribe"})
        assert ws.receive_json()["event"] == "error"
    assert socket_app.state.realtime.connection_count == 0


async def test_broadcast_drops_broken_sockets():
    channel = RealtimeChannel()
    healthy, broken = _FakeSocket(), _FakeSocket(broken=True)
    await channel.connect(healthy)
    channel._connections.add(broken)

    delivered = await channel.broadcast("orderPlaced", {"id": "o1"})

    assert delivered == 1
    assert healthy.sent[-1] == {"event": "orderPlaced", "data": {"id": "o1"}}
    assert channel.connection_count == 1


def test_socket_from_frontend_origin_is_accepted(socket_app):
    client = TestClient(socket_app)
    with client.websocket_connect("/socket", headers={"Origin": FRONTEND}) as ws:
        assert ws.receive_json()["event"] == "connected"


def test_socket_from_foreign_origin_is_refused(socket_app):
    client = TestClient(socket_app)
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/socket", headers={"Origin": "http://evil.test"}):
            pass
    assert exc_info.value.code == 1008
    assert socket_app.state.realtime.connection_count == 0


async def test_order_placed_on_bus_reaches_sockets_without_customer_fields():
    bus = EventBus()
    channel = RealtimeChannel()
    channel.subscribe_to(bus)
    socket = _FakeSocket()
    await channel.connect(socket)

    bus.publish(EventName.ORDER_PLACED, {
        "id": "o1",
        "user_id": "u1",
        "shipping_address": "12 Secret St",
        "items": [],
        "total_cents": 100,
        "status": "placed",
        "created_at": "2026-01-01T00:00:00+00:00",
    })
    await bus.drain()

    assert socket.sent[-1] == {
        "event": "orderPlaced",
        "data": {"id": "o1", "status": "placed", "created_at": "2026-01-01T00:00:00+00:00"},
    }
