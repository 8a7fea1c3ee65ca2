"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - SessionId wraps the opaque cookie-borne identifier, never a bare str in core logic
    - All valid states encoded as Enums, no raw string matching
    - EventName values are the wire names published on the event bus

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

SessionId = NewType("SessionId", str)
UserId = NewType("UserId", UUID)
OrderId = NewType("OrderId", UUID)
BookId = NewType("BookId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class LifecycleState(str, Enum):
    """Server lifecycle states."""
    UNINITIALIZED = "uninitialized"
    BOOTSTRAPPING = "bootstrapping"
    READY = "ready"
    LISTENING = "listening"
    FAILED = "failed"
    TERMINATED = "terminated"


class UserRole(str, Enum):
    """Principal roles carried on the session."""
    CUSTOMER = "customer"
    ADMIN = "admin"


class OrderStatus(str, Enum):
    """Order status column values."""
    PLACED = "placed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class EventName(str, Enum):
    """Event bus topics."""
    ORDER_PLACED = "orderPlaced"
