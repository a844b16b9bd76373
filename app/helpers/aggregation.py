from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import NamedTuple, Protocol
from uuid import UUID

from .months import month_span, normalize_month


class SubscriptionLike(Protocol):
    user_id: UUID
    service_name: str
    price: int
    start_month: date
    end_month: date | None


class QueryPeriod(NamedTuple):
    start_month: date | None = None
    end_month: date | None = None


@dataclass(frozen=True)
class SubscriptionFilter:
    user_id: UUID | None = None
    service_name: str | None = None

    def __post_init__(self) -> None:
        if self.service_name is not None:
            name = self.service_name.strip()
            object.__setattr__(self, "service_name", name or None)


def matches_filter(sub: SubscriptionLike, flt: SubscriptionFilter) -> bool:
    if flt.user_id is not None and sub.user_id != flt.user_id:
        return False

    if flt.service_name is not None:
        if sub.service_name.lower() != flt.service_name.lower():
            return False

    return True


def clamp_range(
    sub_start: date,
    sub_end: date | None,
    period_start: date | None,
    period_end: date | None,
    *,
    now_month: date,
) -> tuple[date, date] | None:
    """
    Intersection of a subscription lifetime with the query period.

    A missing upper bound on either side falls back to the other side and
    then to the current month, so open subscriptions are billed through
    now_month and never to infinity. Returns None when nothing overlaps.
    """
    start = normalize_month(sub_start)
    if period_start is not None:
        start = max(start, normalize_month(period_start))

    now_month = normalize_month(now_month)
    sub_end_m = normalize_month(sub_end) if sub_end is not None else None
    period_end_m = normalize_month(period_end) if period_end is not None else None

    sub_bound = sub_end_m or period_end_m or now_month
    period_bound = period_end_m or sub_end_m or now_month
    end = min(sub_bound, period_bound)

    if end < start:
        return None
    return start, end


def subscription_cost(
    sub: SubscriptionLike,
    period: QueryPeriod,
    *,
    now_month: date,
) -> int:
    clamped = clamp_range(
        sub.start_month,
        sub.end_month,
        period.start_month,
        period.end_month,
        now_month=now_month,
    )
    if clamped is None:
        return 0

    start, end = clamped
    return sub.price * month_span(start, end)


def sum_by_period(
    subscriptions: Iterable[SubscriptionLike],
    flt: SubscriptionFilter,
    period: QueryPeriod,
    *,
    now_month: date,
) -> int:
    """
    Total cost of the matching subscriptions over the period.

    Pure function of its arguments: inputs are never mutated and an empty or
    inverted period simply yields 0.
    """
    total = 0
    for sub in subscriptions:
        if not matches_filter(sub, flt):
            continue
        total += subscription_cost(sub, period, now_month=now_month)
    return total
