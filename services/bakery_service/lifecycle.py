"""Order lifecycle rules.

Status moves forward one step at a time::

    pending -> confirmed -> baking -> ready -> completed

and any non-terminal order may be cancelled. ``completed`` and
``cancelled`` are terminal. Payment status is a separate field with no
ordering rules; the admin may set any value and the Stripe webhook forces
paid/failed.
"""

from typing import Optional

from libs.common.errors import InvalidTransition
from services.bakery_service.models import OrderStatus, PaymentStatus

_FORWARD: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.BAKING,
    OrderStatus.BAKING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.COMPLETED,
}

TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

# Statuses the Stripe webhook writes regardless of the current state
WEBHOOK_PAID = (OrderStatus.CONFIRMED, PaymentStatus.PAID)
WEBHOOK_FAILED = PaymentStatus.FAILED


def next_status(status: OrderStatus) -> Optional[OrderStatus]:
    """The single forward step from ``status``, or None once terminal."""
    return _FORWARD.get(OrderStatus(status))


def is_terminal(status: OrderStatus) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


def can_cancel(status: OrderStatus) -> bool:
    return not is_terminal(status)


def available_actions(status: OrderStatus) -> list[OrderStatus]:
    """Statuses an admin may move the order to, forward step first."""
    actions = []
    forward = next_status(status)
    if forward is not None:
        actions.append(forward)
    if can_cancel(status):
        actions.append(OrderStatus.CANCELLED)
    return actions


def validate_transition(current: OrderStatus, requested: OrderStatus) -> None:
    """
    Raise InvalidTransition unless ``requested`` is reachable from ``current``.

    Re-sending the current status is accepted as a no-op.
    """
    current, requested = OrderStatus(current), OrderStatus(requested)
    if requested == current:
        return
    if requested in available_actions(current):
        return
    raise InvalidTransition(
        f"Cannot change order status from {current.value} to {requested.value}"
    )
