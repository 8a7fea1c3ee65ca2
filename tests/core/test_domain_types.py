"""Domain Types - verifies identifier wrappers and enum values.

Tests:
    - NewType wrappers are transparent at runtime
    - Enums serialize to the wire strings clients and stores rely on
    - Lifecycle has exactly six states
"""

from bookstore.core.domain_types import (
    BookId, EventName, LifecycleState, OrderId, OrderStatus, SessionId,
    UserId, UserRole,
)


def test_identity_types_wrap_values():
    assert SessionId("abc") == "abc"
    assert UserId("u1") == "u1"
    assert OrderId("o1") == "o1"
    assert BookId("b1") == "b1"


def test_order_placed_wire_name():
    assert EventName.ORDER_PLACED.value == "orderPlaced"
    assert EventName.ORDER_PLACED == "orderPlaced"


def test_roles_serialize_to_strings():
    assert UserRole("admin") is UserRole.ADMIN
    assert UserRole.CUSTOMER.value == "customer"


def test_order_status_values():
    assert {s.value for s in OrderStatus} == {"placed", "shipped", "delivered", "cancelled"}


def test_lifecycle_has_six_states():
    assert len(LifecycleState) == 6
    assert LifecycleState.LISTENING.value == "listening"
