from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable

from qrmenu.domain.order.entities import Order
from qrmenu.domain.order.lifecycle import OrderStatus

_MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class MixedCurrencyError(ValueError):
    def __init__(self, currencies: list[str]) -> None:
        super().__init__(f"orders span several currencies: {', '.join(currencies)}")
        self.currencies = currencies


class StatsWindow(str, Enum):
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class RevenueBucket:
    label: str
    revenue_cents: int


@dataclass(frozen=True)
class RevenueSummary:
    window: StatsWindow
    start: datetime
    end: datetime
    currency: str
    total_revenue_cents: int
    total_orders: int
    average_order_value_cents: int
    buckets: tuple[RevenueBucket, ...]


def window_start(window: StatsWindow, now: datetime) -> datetime:
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if window == StatsWindow.DAY:
        return midnight
    if window == StatsWindow.MONTH:
        return midnight.replace(day=1)
    return midnight.replace(month=1, day=1)


def bucket_labels(window: StatsWindow, now: datetime) -> list[str]:
    if window == StatsWindow.DAY:
        return [f"{hour}:00" for hour in range(24)]
    if window == StatsWindow.MONTH:
        days_in_month = calendar.monthrange(now.year, now.month)[1]
        return [str(day) for day in range(1, days_in_month + 1)]
    return list(_MONTH_LABELS)


def bucket_index(window: StatsWindow, moment: datetime) -> int:
    if window == StatsWindow.DAY:
        return moment.hour
    if window == StatsWindow.MONTH:
        return moment.day - 1
    return moment.month - 1


def average_cents(total_cents: int, count: int) -> int:
    if count <= 0:
        return 0
    average = (Decimal(total_cents) / Decimal(count)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(average)


def summarize_revenue(
    orders: Iterable[Order],
    window: StatsWindow,
    now: datetime,
    default_currency: str,
) -> RevenueSummary:
    """Aggregate served orders whose creation time falls in ``window``.

    ``now`` must be timezone-aware: it anchors the window and its timezone is
    the one buckets are computed in. The summary is labelled with the currency
    the orders were placed in; ``default_currency`` is used only when no order
    falls in the window. Orders in more than one currency are not summed.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    start = window_start(window, now)
    labels = bucket_labels(window, now)
    bucket_totals = [0] * len(labels)
    total_cents = 0
    count = 0
    currencies: set[str] = set()

    for order in orders:
        if order.status != OrderStatus.SERVED:
            continue
        created_at = order.created_at.astimezone(now.tzinfo)
        if created_at < start or created_at > now:
            continue
        currencies.add(order.total.currency)
        total_cents += order.total.amount_cents
        count += 1
        bucket_totals[bucket_index(window, created_at)] += order.total.amount_cents

    if len(currencies) > 1:
        raise MixedCurrencyError(sorted(currencies))

    return RevenueSummary(
        window=window,
        start=start,
        end=now,
        currency=currencies.pop() if currencies else default_currency,
        total_revenue_cents=total_cents,
        total_orders=count,
        average_order_value_cents=average_cents(total_cents, count),
        buckets=tuple(
            RevenueBucket(label=label, revenue_cents=revenue)
            for label, revenue in zip(labels, bucket_totals)
        ),
    )


def most_recent_served(orders: Iterable[Order], limit: int = 5) -> list[Order]:
    served = [order for order in orders if order.status == OrderStatus.SERVED]
    served.sort(key=lambda order: order.created_at, reverse=True)
    return served[:limit]
