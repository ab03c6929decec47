"""
Order lifecycle: pending -> confirmed -> preparing -> ready -> delivered,
with cancelled reachable only from pending.

Status changes are confirmed-only. The local order keeps its old status until
the backend has accepted the new one.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from core.errors import ValidationError
from core.resource_sync import ResourceSynchronizer

logger = logging.getLogger(__name__)


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    START_PREPARING = "start_preparing"
    MARK_READY = "mark_ready"
    MARK_DELIVERED = "mark_delivered"


# current status -> ((action, next status), ...)
TRANSITIONS = {
    OrderStatus.PENDING: (
        (OrderAction.ACCEPT, OrderStatus.CONFIRMED),
        (OrderAction.REJECT, OrderStatus.CANCELLED),
    ),
    OrderStatus.CONFIRMED: ((OrderAction.START_PREPARING, OrderStatus.PREPARING),),
    OrderStatus.PREPARING: ((OrderAction.MARK_READY, OrderStatus.READY),),
    OrderStatus.READY: ((OrderAction.MARK_DELIVERED, OrderStatus.DELIVERED),),
    OrderStatus.DELIVERED: (),
    OrderStatus.CANCELLED: (),
}

ACTION_LABELS = {
    OrderAction.ACCEPT: "Accept",
    OrderAction.REJECT: "Reject",
    OrderAction.START_PREPARING: "Preparing",
    OrderAction.MARK_READY: "Mark as Ready",
    OrderAction.MARK_DELIVERED: "Mark as Delivered",
}


def parse_status(status) -> Optional[OrderStatus]:
    """OrderStatus for a raw value, or None if the backend sent something unknown."""
    if isinstance(status, OrderStatus):
        return status
    try:
        return OrderStatus(str(status).lower())
    except ValueError:
        return None


def available_actions(status: Union[OrderStatus, str]) -> Tuple[OrderAction, ...]:
    """Actions an operator may take from ``status`` (empty when terminal)."""
    parsed = parse_status(status)
    if parsed is None:
        return ()
    return tuple(action for action, _ in TRANSITIONS[parsed])


def is_terminal(status: Union[OrderStatus, str]) -> bool:
    return not available_actions(status)


def next_status(status: Union[OrderStatus, str], action: Union[OrderAction, str]) -> OrderStatus:
    """Target of ``action`` from ``status``; ValidationError if it isn't legal."""
    parsed = parse_status(status)
    try:
        action = OrderAction(action)
    except ValueError:
        raise ValidationError(f"Unknown order action: {action}")
    for legal, target in TRANSITIONS.get(parsed, ()):
        if legal == action:
            return target
    shown = parsed.value if parsed else status
    raise ValidationError(f"Cannot {action.value.replace('_', ' ')} an order that is {shown}")


@dataclass(frozen=True)
class Order:
    id: object
    status: str
    data: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: dict, id_field: str = "id", status_field: str = "order_status"):
        status = payload.get(status_field, payload.get("status", ""))
        return cls(id=payload.get(id_field), status=status, data=payload)

    @property
    def available_actions(self) -> Tuple[OrderAction, ...]:
        return available_actions(self.status)

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)


class OrderLifecycle:
    """Applies status transitions to orders held by a synchronizer."""

    def __init__(self, orders: ResourceSynchronizer):
        self.orders = orders
        self.api = orders.api
        self.spec = orders.spec

    def order(self, order_id) -> Optional[Order]:
        payload = self.orders.get(order_id)
        if payload is None:
            return None
        return Order.from_payload(payload, self.spec.id_field, self.spec.status_field)

    def apply_transition(self, order_id, action: Union[OrderAction, str]) -> Optional[Order]:
        """
        Validate, send ``PUT /api/orders/{id}/status`` and, on success only,
        swap in a copy of the order carrying the new status.
        """
        current = self.order(order_id)
        if current is None:
            raise ValidationError("Order not found")
        target = next_status(current.status, action)

        with self.orders.pending(order_id):
            self.api.put(self.spec.item_path(order_id, "status"), json={"status": target.value})
            if self.orders.closed:
                return None
            # Re-read: the entry may have been replaced by a fetch meanwhile
            payload = self.orders.get(order_id) or current.data
            self.orders.reconcile(order_id, {**payload, self.spec.status_field: target.value})

        logger.info("Order %s: %s -> %s", order_id, current.status, target.value)
        self.orders.record(f"status {target.value}", order_id)
        return self.order(order_id)
