"""Order Event Subscribers - built-in consumers of orderPlaced.

Invariants:
    - Subscribers only read the payload; they never mutate it
    - register_order_subscribers() is called once per EventBus
"""

import logging

from bookstore.core.domain_types import EventName
from bookstore.services.event_bus import EventBus

logger = logging.getLogger(__name__)


def log_order_placed(order: dict) -> None:
    logger.info(
        f"Order placed event received: {order.get('id')}",
        extra={
            "event_name": EventName.ORDER_PLACED.value,
            "order_id": order.get("id"),
        },
    )


def register_order_subscribers(bus: EventBus) -> None:
    bus.subscribe(EventName.ORDER_PLACED, log_order_placed)
