from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from qrmenu.application.use_cases.context import TraceContext
from qrmenu.application.use_cases.get_order import OrderNotFoundError
from qrmenu.application.use_cases.update_order_status import (
    InvalidOrderStatusError,
    InvalidOrderTransitionError,
    OrderConflictError,
    UpdateOrderStatus,
    parse_status,
)
from qrmenu.domain.common.ids import OrderId, RestaurantId
from qrmenu.domain.order.lifecycle import OrderStatus, TransitionMode

RESTAURANT_ID = RestaurantId("demo-bistro")


def _seed(order_repository, order_factory, **kwargs):
    order = order_factory(**kwargs)
    order_repository.orders[str(order.order_id)] = order
    return order


def test_status_update_bumps_version_and_publishes(
    order_repository, publisher, order_factory
) -> None:
    _seed(order_repository, order_factory)
    use_case = UpdateOrderStatus(order_repository=order_repository, publisher=publisher)

    response = use_case.execute(
        restaurant_id=RESTAURANT_ID,
        order_id=OrderId("ord_001"),
        new_status="Ongoing",
        trace_ctx=TraceContext.empty(),
    )

    assert response.status == "Ongoing"
    assert response.version == 2
    assert order_repository.get("ord_001").status == OrderStatus.ONGOING

    channel, message = publisher.messages[0]
    envelope = json.loads(message)
    assert channel == "events:demo-bistro"
    assert envelope["event_type"] == "order.status_changed"
    assert envelope["payload"]["status"] == "Ongoing"
    assert envelope["payload"]["fromStatus"] == "Received"


def test_full_pipeline_to_served(order_repository, publisher, order_factory) -> None:
    _seed(order_repository, order_factory)
    use_case = UpdateOrderStatus(order_repository=order_repository, publisher=publisher)

    for status in ("Ongoing", "Finishing", "On the Way", "Served"):
        response = use_case.execute(RESTAURANT_ID, OrderId("ord_001"), status, TraceContext.empty())

    assert response.status == "Served"
    assert response.phase == "past"
    assert response.total.amountCents == 899
    assert len(publisher.messages) == 4


def test_same_status_is_a_no_op(order_repository, publisher, order_factory) -> None:
    _seed(order_repository, order_factory, status=OrderStatus.SERVED)
    use_case = UpdateOrderStatus(order_repository=order_repository, publisher=publisher)

    response = use_case.execute(RESTAURANT_ID, OrderId("ord_001"), "Served", TraceContext.empty())

    assert response.version == 1
    assert publisher.messages == []


def test_terminal_order_cannot_move_in_strict_mode(
    order_repository, publisher, order_factory
) -> None:
    _seed(order_repository, order_factory, status=OrderStatus.CANCELED)
    use_case = UpdateOrderStatus(order_repository=order_repository, publisher=publisher)

    with pytest.raises(InvalidOrderTransitionError):
        use_case.execute(RESTAURANT_ID, OrderId("ord_001"), "Ongoing", TraceContext.empty())

    assert order_repository.get("ord_001").status == OrderStatus.CANCELED


def test_permissive_mode_reopens_terminal_orders(
    order_repository, publisher, order_factory
) -> None:
    _seed(order_repository, order_factory, status=OrderStatus.SERVED)
    use_case = UpdateOrderStatus(
        order_repository=order_repository,
        publisher=publisher,
        transition_mode=TransitionMode.PERMISSIVE,
    )

    response = use_case.execute(RESTAURANT_ID, OrderId("ord_001"), "Received", TraceContext.empty())

    assert response.status == "Received"
    assert response.phase == "active"


def test_other_restaurant_cannot_see_the_order(
    order_repository, publisher, order_factory
) -> None:
    _seed(order_repository, order_factory)
    use_case = UpdateOrderStatus(order_repository=order_repository, publisher=publisher)

    with pytest.raises(OrderNotFoundError):
        use_case.execute(
            RestaurantId("other-place"), OrderId("ord_001"), "Ongoing", TraceContext.empty()
        )
    with pytest.raises(OrderNotFoundError):
        use_case.execute(RESTAURANT_ID, OrderId("ord_missing"), "Ongoing", TraceContext.empty())


def test_version_conflict_surfaces_when_target_differs(
    order_repository, publisher, order_factory
) -> None:
    _seed(order_repository, order_factory)
    order_repository.stale_writes = 1
    use_case = UpdateOrderStatus(order_repository=order_repository, publisher=publisher)

    with pytest.raises(OrderConflictError):
        use_case.execute(RESTAURANT_ID, OrderId("ord_001"), "Ongoing", TraceContext.empty())

    assert publisher.messages == []


def test_publish_failure_does_not_fail_update(
    order_repository, publisher_factory, order_factory
) -> None:
    _seed(order_repository, order_factory)
    use_case = UpdateOrderStatus(
        order_repository=order_repository,
        publisher=publisher_factory(fail=True),
    )

    response = use_case.execute(RESTAURANT_ID, OrderId("ord_001"), "Canceled", TraceContext.empty())

    assert response.status == "Canceled"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Served", OrderStatus.SERVED),
        ("on the way", OrderStatus.ON_THE_WAY),
        ("ON_THE_WAY", OrderStatus.ON_THE_WAY),
        (" canceled ", OrderStatus.CANCELED),
    ],
)
def test_parse_status_accepts_values_and_names(raw: str, expected: OrderStatus) -> None:
    assert parse_status(raw) == expected


def test_parse_status_rejects_unknown_values() -> None:
    with pytest.raises(InvalidOrderStatusError):
        parse_status("Delivered")
