from __future__ import annotations

from datetime import date

from sqlalchemy import Date, Integer, and_, case, cast, extract, func, literal
from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import col

from ..domain.enums import SummaryStrategy
from ..models import Subscription
from .aggregation import QueryPeriod, SubscriptionFilter, sum_by_period


def _month_param(value: date) -> ColumnElement[date]:
    return literal(value, Date)


def _filter_conditions(flt: SubscriptionFilter) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []
    if flt.user_id is not None:
        conditions.append(col(Subscription.user_id) == flt.user_id)
    if flt.service_name is not None:
        conditions.append(
            func.lower(col(Subscription.service_name)) == func.lower(flt.service_name)
        )
    return conditions


def effective_range_columns(
    period: QueryPeriod,
    *,
    now_month: date,
) -> tuple[ColumnElement[date], ColumnElement[date]]:
    """
    SQL counterpart of clamp_range: (eff_start, eff_end) per row.

    Bounds that are absent from the period are resolved here rather than
    with COALESCE on NULL parameters, so the expressions stay typed on
    every backend.
    """
    start_col = col(Subscription.start_month)
    end_col = col(Subscription.end_month)

    if period.start_month is not None:
        ps = _month_param(period.start_month)
        eff_start = case((start_col < ps, ps), else_=start_col)
    else:
        eff_start = start_col

    if period.end_month is not None:
        pe = _month_param(period.end_month)
        eff_end = case(
            (and_(end_col.is_not(None), end_col < pe), end_col),
            else_=pe,
        )
    else:
        eff_end = func.coalesce(end_col, _month_param(now_month))

    return eff_start, eff_end


def month_span_column(
    eff_start: ColumnElement[date],
    eff_end: ColumnElement[date],
) -> ColumnElement[int]:
    years = cast(extract("year", eff_end), Integer) - cast(
        extract("year", eff_start), Integer
    )
    months = cast(extract("month", eff_end), Integer) - cast(
        extract("month", eff_start), Integer
    )
    return years * 12 + months + 1


def subscriptions_q(db: Session, *, flt: SubscriptionFilter) -> Query[Subscription]:
    return db.query(Subscription).filter(*_filter_conditions(flt))


def subscription_total_q(
    db: Session,
    *,
    flt: SubscriptionFilter,
    period: QueryPeriod,
    now_month: date,
) -> int:
    eff_start, eff_end = effective_range_columns(period, now_month=now_month)
    cost = col(Subscription.price) * month_span_column(eff_start, eff_end)

    total = (
        db.query(func.coalesce(func.sum(cost), 0))
        .filter(*_filter_conditions(flt), eff_end >= eff_start)
        .scalar()
    )
    return int(total or 0)


def subscription_total_in_memory(
    db: Session,
    *,
    flt: SubscriptionFilter,
    period: QueryPeriod,
    now_month: date,
) -> int:
    snapshot = subscriptions_q(db, flt=flt).all()
    return sum_by_period(snapshot, flt, period, now_month=now_month)


def resolve_subscription_total(
    db: Session,
    *,
    flt: SubscriptionFilter,
    period: QueryPeriod,
    now_month: date,
    strategy: SummaryStrategy,
) -> int:
    match strategy:
        case SummaryStrategy.SQL:
            return subscription_total_q(
                db, flt=flt, period=period, now_month=now_month
            )
        case SummaryStrategy.MEMORY:
            return subscription_total_in_memory(
                db, flt=flt, period=period, now_month=now_month
            )
