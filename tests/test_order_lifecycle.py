import pytest
import requests

from core.errors import NetworkError, RequestInProgress, ServerError, ValidationError
from core.order_lifecycle import (
    Order,
    OrderAction,
    OrderLifecycle,
    OrderStatus,
    available_actions,
    is_terminal,
    next_status,
)
from core.resource_sync import ResourceSynchronizer
from core.resources import ORDERS


@pytest.fixture()
def lifecycle(api, http, audit_log):
    orders = ResourceSynchronizer(api, ORDERS, audit=audit_log)
    http.queue(200, {"success": True, "data": [
        {"id": 1, "order_number": "ORD-1", "order_status": "pending", "created_at": "2024-05-01T10:00:00Z"},
        {"id": 2, "order_number": "ORD-2", "order_status": "ready", "created_at": "2024-05-02T10:00:00Z"},
        {"id": 3, "order_number": "ORD-3", "order_status": "on_hold", "created_at": "2024-05-03T10:00:00Z"},
    ]})
    orders.fetch_all()
    return OrderLifecycle(orders)


@pytest.mark.parametrize("status, actions", [
    ("pending", (OrderAction.ACCEPT, OrderAction.REJECT)),
    ("confirmed", (OrderAction.START_PREPARING,)),
    ("preparing", (OrderAction.MARK_READY,)),
    ("ready", (OrderAction.MARK_DELIVERED,)),
    ("delivered", ()),
    ("cancelled", ()),
    ("on_hold", ()),
    ("PENDING", (OrderAction.ACCEPT, OrderAction.REJECT)),
])
def test_available_actions(status, actions):
    assert available_actions(status) == actions


def test_happy_path_reaches_delivered():
    status = OrderStatus.PENDING
    for action in ("accept", "start_preparing", "mark_ready", "mark_delivered"):
        status = next_status(status, action)

    assert status == OrderStatus.DELIVERED
    assert is_terminal(status)


@pytest.mark.parametrize("status, action", [
    ("confirmed", "reject"),
    ("delivered", "accept"),
    ("cancelled", "accept"),
    ("pending", "mark_delivered"),
])
def test_illegal_transitions_are_rejected(status, action):
    with pytest.raises(ValidationError, match="Cannot"):
        next_status(status, action)


def test_unknown_action_is_rejected():
    with pytest.raises(ValidationError, match="Unknown order action"):
        next_status("pending", "teleport")


def test_order_from_payload_reads_status_field():
    order = Order.from_payload({"id": 5, "order_status": "preparing", "status": "stale"})

    assert order.status == "preparing"
    assert order.available_actions == (OrderAction.MARK_READY,)
    assert not order.is_terminal


def test_reject_pending_order(lifecycle, http, audit_log):
    http.queue(200, {"success": True, "data": {"id": 1, "order_status": "cancelled"}})

    order = lifecycle.apply_transition(1, OrderAction.REJECT)

    assert order.status == "cancelled"
    assert order.available_actions == ()
    assert lifecycle.orders.get(1)["order_status"] == "cancelled"
    assert http.last["method"] == "PUT"
    assert http.last["url"].endswith("/api/orders/1/status")
    assert http.last["json"] == {"status": "cancelled"}
    assert audit_log.entries == [("admin@example.com", "orders", "status cancelled", 1)]


def test_success_response_without_data_still_applies(lifecycle, http):
    http.queue(200, {"success": True, "message": "Order status updated"})

    order = lifecycle.apply_transition(2, "mark_delivered")

    assert order.status == "delivered"
    assert order.is_terminal


def test_illegal_transition_sends_nothing(lifecycle, http):
    calls = len(http.calls)

    with pytest.raises(ValidationError):
        lifecycle.apply_transition(2, "accept")
    with pytest.raises(ValidationError):
        lifecycle.apply_transition(3, "accept")

    assert len(http.calls) == calls


def test_unknown_order_is_rejected(lifecycle):
    with pytest.raises(ValidationError, match="Order not found"):
        lifecycle.apply_transition(404, "accept")


@pytest.mark.parametrize("failure", [
    lambda http: http.queue(500, {"success": False, "message": "DB down"}),
    lambda http: http.fail(requests.Timeout("slow")),
])
def test_failed_transition_keeps_old_status(lifecycle, http, audit_log, failure):
    before = dict(lifecycle.orders.get(1))
    failure(http)

    with pytest.raises((ServerError, NetworkError)):
        lifecycle.apply_transition(1, "accept")

    assert lifecycle.orders.get(1) == before
    assert lifecycle.order(1).status == "pending"
    assert audit_log.entries == []


def test_concurrent_transition_is_refused(lifecycle, http):
    with lifecycle.orders.pending(1):
        with pytest.raises(RequestInProgress):
            lifecycle.apply_transition(1, "accept")

    assert lifecycle.order(1).status == "pending"


def test_transition_does_not_mutate_previous_snapshot(lifecycle, http):
    held = lifecycle.orders.get(1)
    http.queue(200, {"success": True})

    lifecycle.apply_transition(1, "accept")

    assert held["order_status"] == "pending"
    assert lifecycle.order(1).status == "confirmed"
