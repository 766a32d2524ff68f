from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OrderStatus(str, Enum):
    RECEIVED = "Received"
    ONGOING = "Ongoing"
    FINISHING = "Finishing"
    ON_THE_WAY = "On the Way"
    SERVED = "Served"
    CANCELED = "Canceled"


class OrderPhase(str, Enum):
    ACTIVE = "active"
    PAST = "past"


class TransitionMode(str, Enum):
    STRICT = "strict"
    PERMISSIVE = "permissive"


TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset({OrderStatus.SERVED, OrderStatus.CANCELED})

PROGRESS_TOTAL_STEPS = 5


@dataclass(frozen=True)
class StatusDisplay:
    step: int
    label: str
    icon: str
    message: str


_STATUS_DISPLAY: dict[OrderStatus, StatusDisplay] = {
    OrderStatus.RECEIVED: StatusDisplay(1, "Order Received", "utensils", "We're working on it!"),
    OrderStatus.ONGOING: StatusDisplay(2, "In the Kitchen", "cooking-pot", "We're working on it!"),
    OrderStatus.FINISHING: StatusDisplay(
        3, "Finishing Touches", "chef-hat", "We're working on it!"
    ),
    OrderStatus.ON_THE_WAY: StatusDisplay(4, "On the Way", "car", "We're working on it!"),
    OrderStatus.SERVED: StatusDisplay(5, "Order Served!", "check-circle", "Enjoy your meal!"),
    OrderStatus.CANCELED: StatusDisplay(
        0, "Order Canceled", "x-circle", "Please contact staff for assistance."
    ),
}


class OrderTransitionError(Exception):
    pass


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def classify(status: OrderStatus) -> OrderPhase:
    return OrderPhase.PAST if is_terminal(status) else OrderPhase.ACTIVE


def can_transition(
    current: OrderStatus,
    target: OrderStatus,
    mode: TransitionMode = TransitionMode.STRICT,
) -> bool:
    """Return whether an order may move from ``current`` to ``target``.

    Strict mode lets a non-terminal order move to any other status, forwards or
    backwards, and freezes terminal orders. Permissive mode accepts everything.
    """
    if mode == TransitionMode.PERMISSIVE:
        return True
    if current == target:
        return False
    return not is_terminal(current)


def ensure_transition(
    current: OrderStatus,
    target: OrderStatus,
    mode: TransitionMode = TransitionMode.STRICT,
) -> None:
    if not can_transition(current, target, mode):
        raise OrderTransitionError(
            f"cannot move order from status={current.value} to status={target.value}"
        )


def status_display(status: OrderStatus) -> StatusDisplay:
    return _STATUS_DISPLAY[status]


def progress_step(status: OrderStatus) -> int:
    return _STATUS_DISPLAY[status].step


def progress_percentage(status: OrderStatus) -> float | None:
    """Share of the progress bar filled for ``status``; canceled orders have none."""
    if status == OrderStatus.CANCELED:
        return None
    return progress_step(status) / PROGRESS_TOTAL_STEPS * 100
