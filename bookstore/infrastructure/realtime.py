"""Realtime Channel - WebSocket fan-out sharing the HTTP listener's transport.

Invariants:
    - One channel per app, constructed before the listener binds, kept on app.state
    - broadcast() never raises; a connection that fails to receive is dropped
    - Message shape is {"event": <name>, "data": <payload>}
    - Sockets are unauthenticated: orderPlaced goes out as a public view
      (id, status, created_at), never customer or address fields

Design Decisions:
    - FastAPI/Starlette WebSockets on the same ASGI app instead of a second
      server: same port, same process, independent of request/response
    - Subscribes to orderPlaced through the event bus; the order route has no
      reference to the channel
"""

import logging
from typing import Any

from fastapi import WebSocket

from bookstore.core.domain_types import EventName
from bookstore.services.event_bus import EventBus

logger = logging.getLogger(__name__)

PUBLIC_ORDER_FIELDS = ("id", "status", "created_at")


def public_order_view(order: dict) -> dict:
    return {key: order.get(key) for key in PUBLIC_ORDER_FIELDS}


class RealtimeChannel:
    """Tracks open sockets and broadcasts events to all of them."""

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)
        logger.info(f"Socket connected ({self.connection_count} open)")
        await websocket.send_json({"event": "connected", "data": None})

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)
        logger.info(f"Socket disconnected ({self.connection_count} open)")

    async def handle_message(self, websocket: WebSocket, message: Any) -> None:
        if isinstance(message, dict) and message.get("event") == "ping":
            await websocket.send_json({"event": "pong", "data": None})
        else:
            await websocket.send_json({
                "event": "error", "data": {"message": "unsupported event"},
            })

    async def broadcast(self, event: str, data: Any) -> int:
        """Send to every open socket; returns how many received it."""
        delivered = 0
        for websocket in list(self._connections):
            try:
                await websocket.send_json({"event": event, "data": data})
                delivered += 1
            except Exception as exc:
                logger.warning(f"Dropping socket after send failure: {exc}")
                self._connections.discard(websocket)
        return delivered

    def subscribe_to(self, bus: EventBus) -> None:
        async def broadcast_order_placed(order: dict) -> None:
            await self.broadcast(
                EventName.ORDER_PLACED.value, public_order_view(order),
            )

        bus.subscribe(EventName.ORDER_PLACED, broadcast_order_placed)
