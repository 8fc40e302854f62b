"""Unit tests for the order status state machine."""

import pytest
from libs.common.errors import InvalidTransition
from services.bakery_service.lifecycle import (
    available_actions,
    can_cancel,
    is_terminal,
    next_status,
    validate_transition,
)
from services.bakery_service.models import OrderStatus

FORWARD_CHAIN = [
    (OrderStatus.PENDING, OrderStatus.CONFIRMED),
    (OrderStatus.CONFIRMED, OrderStatus.BAKING),
    (OrderStatus.BAKING, OrderStatus.READY),
    (OrderStatus.READY, OrderStatus.COMPLETED),
]


class TestNextStatus:
    @pytest.mark.parametrize("current,expected", FORWARD_CHAIN)
    def test_forward_step(self, current, expected):
        assert next_status(current) == expected

    @pytest.mark.parametrize("status", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    def test_terminal_has_no_next(self, status):
        assert next_status(status) is None
        assert is_terminal(status)
        assert available_actions(status) == []

    def test_accepts_plain_strings(self):
        assert next_status("baking") == OrderStatus.READY


class TestCancellation:
    @pytest.mark.parametrize(
        "status",
        [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.BAKING, OrderStatus.READY],
    )
    def test_non_terminal_can_cancel(self, status):
        assert can_cancel(status)
        assert available_actions(status)[-1] == OrderStatus.CANCELLED

    def test_forward_action_listed_first(self):
        assert available_actions(OrderStatus.PENDING) == [
            OrderStatus.CONFIRMED,
            OrderStatus.CANCELLED,
        ]


class TestValidateTransition:
    @pytest.mark.parametrize("current,requested", FORWARD_CHAIN)
    def test_forward_step_allowed(self, current, requested):
        validate_transition(current, requested)

    def test_same_status_is_noop(self):
        validate_transition(OrderStatus.BAKING, OrderStatus.BAKING)
        validate_transition(OrderStatus.COMPLETED, OrderStatus.COMPLETED)

    def test_cancel_from_ready(self):
        validate_transition(OrderStatus.READY, OrderStatus.CANCELLED)

    def test_skipping_a_step_rejected(self):
        with pytest.raises(InvalidTransition) as exc_info:
            validate_transition(OrderStatus.PENDING, OrderStatus.READY)
        assert exc_info.value.status_code == 409
        assert "pending to ready" in exc_info.value.message

    def test_moving_backwards_rejected(self):
        with pytest.raises(InvalidTransition):
            validate_transition(OrderStatus.READY, OrderStatus.BAKING)

    @pytest.mark.parametrize(
        "current,requested",
        [
            (OrderStatus.COMPLETED, OrderStatus.CANCELLED),
            (OrderStatus.CANCELLED, OrderStatus.PENDING),
            (OrderStatus.CANCELLED, OrderStatus.CONFIRMED),
        ],
    )
    def test_terminal_states_are_final(self, current, requested):
        with pytest.raises(InvalidTransition):
            validate_transition(current, requested)
