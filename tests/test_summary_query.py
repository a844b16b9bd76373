"""Tests for the SQL aggregate query and its agreement with the in-memory path."""
import random
import uuid
from datetime import date

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.database import Base
from app.domain.enums import SummaryStrategy
from app.helpers.aggregation import QueryPeriod, SubscriptionFilter, sum_by_period
from app.helpers.summary import (
    resolve_subscription_total,
    subscription_total_in_memory,
    subscription_total_q,
)
from app.models import Subscription

NOW = date(2025, 6, 1)
ALICE = uuid.UUID("11111111-1111-1111-1111-111111111111")
BOB = uuid.UUID("22222222-2222-2222-2222-222222222222")
CAROL = uuid.UUID("33333333-3333-3333-3333-333333333333")

SERVICE_NAMES = [
    "Netflix",
    "netflix",
    "Spotify",
    "YouTube Premium",
    "Kinopoisk",
    "Кинопоиск",
    "ЯНДЕКС ПЛЮС",
]


def _add(db_session, **kwargs) -> Subscription:
    kwargs.setdefault("user_id", ALICE)
    kwargs.setdefault("service_name", "Netflix")
    sub = Subscription(**kwargs)
    db_session.add(sub)
    db_session.flush()
    return sub


def _total(db_session, period, flt=SubscriptionFilter(), now_month=NOW):
    return subscription_total_q(db_session, flt=flt, period=period, now_month=now_month)


def test_empty_table_is_zero(db_session):
    assert _total(db_session, QueryPeriod()) == 0


def test_open_subscription_closed_period(db_session):
    _add(db_session, price=499, start_month=date(2025, 1, 1))
    period = QueryPeriod(date(2025, 1, 1), date(2025, 3, 1))
    assert _total(db_session, period) == 1497


def test_no_overlap_contributes_zero(db_session):
    _add(
        db_session,
        price=300,
        start_month=date(2025, 5, 1),
        end_month=date(2025, 5, 1),
    )
    period = QueryPeriod(date(2025, 1, 1), date(2025, 3, 1))
    assert _total(db_session, period) == 0


def test_open_everything_bills_through_injected_now(db_session):
    _add(db_session, price=100, start_month=date(2024, 12, 1))
    assert _total(db_session, QueryPeriod()) == 700
    assert _total(db_session, QueryPeriod(), now_month=date(2025, 1, 1)) == 200


def test_start_equal_to_period_end_counts_one_month(db_session):
    _add(db_session, price=250, start_month=date(2025, 3, 1))
    period = QueryPeriod(date(2025, 1, 1), date(2025, 3, 1))
    assert _total(db_session, period) == 250


def test_span_across_year_boundary(db_session):
    _add(
        db_session,
        price=10,
        start_month=date(2024, 11, 1),
        end_month=date(2025, 2, 1),
    )
    assert _total(db_session, QueryPeriod()) == 40


def test_inverted_period_is_zero(db_session):
    _add(db_session, price=100, start_month=date(2024, 1, 1))
    period = QueryPeriod(date(2025, 5, 1), date(2025, 1, 1))
    assert _total(db_session, period) == 0


def test_filters(db_session):
    _add(
        db_session,
        user_id=ALICE,
        service_name="Netflix",
        price=100,
        start_month=date(2025, 1, 1),
        end_month=date(2025, 1, 1),
    )
    _add(
        db_session,
        user_id=BOB,
        service_name="NETFLIX",
        price=10,
        start_month=date(2025, 1, 1),
        end_month=date(2025, 1, 1),
    )
    _add(
        db_session,
        user_id=BOB,
        service_name="Spotify",
        price=1,
        start_month=date(2025, 1, 1),
        end_month=date(2025, 1, 1),
    )

    assert _total(db_session, QueryPeriod(), SubscriptionFilter(user_id=BOB)) == 11
    assert (
        _total(db_session, QueryPeriod(), SubscriptionFilter(service_name="netflix"))
        == 110
    )
    assert (
        _total(
            db_session,
            QueryPeriod(),
            SubscriptionFilter(user_id=ALICE, service_name=" Netflix "),
        )
        == 100
    )
    assert _total(db_session, QueryPeriod(), SubscriptionFilter(user_id=CAROL)) == 0


@pytest.mark.parametrize("strategy", list(SummaryStrategy))
def test_cyrillic_service_name_is_case_insensitive(db_session, strategy):
    _add(
        db_session,
        service_name="Кинопоиск",
        price=100,
        start_month=date(2025, 1, 1),
        end_month=date(2025, 1, 1),
    )
    total = resolve_subscription_total(
        db_session,
        flt=SubscriptionFilter(service_name="кинопоиск"),
        period=QueryPeriod(),
        now_month=NOW,
        strategy=strategy,
    )
    assert total == 100


@pytest.mark.parametrize("strategy", list(SummaryStrategy))
def test_storage_error_propagates(db_engine, db_session, strategy):
    _add(db_session, price=100, start_month=date(2025, 1, 1))
    db_session.commit()
    Base.metadata.drop_all(db_engine)

    with pytest.raises(SQLAlchemyError):
        resolve_subscription_total(
            db_session,
            flt=SubscriptionFilter(),
            period=QueryPeriod(),
            now_month=NOW,
            strategy=strategy,
        )


@pytest.mark.parametrize("strategy", list(SummaryStrategy))
def test_resolve_dispatches_to_strategy(db_session, strategy):
    _add(db_session, price=499, start_month=date(2025, 1, 1))
    total = resolve_subscription_total(
        db_session,
        flt=SubscriptionFilter(),
        period=QueryPeriod(date(2025, 1, 1), date(2025, 3, 1)),
        now_month=NOW,
        strategy=strategy,
    )
    assert total == 1497


def _random_month(rng: random.Random) -> date:
    return date(rng.randint(2023, 2026), rng.randint(1, 12), 1)


def _shift(month: date, months: int) -> date:
    m = month.month - 1 + months
    return date(month.year + m // 12, m % 12 + 1, 1)


def _random_period(rng: random.Random) -> QueryPeriod:
    start = _random_month(rng) if rng.random() < 0.7 else None
    end = _random_month(rng) if rng.random() < 0.7 else None
    return QueryPeriod(start, end)


def _random_filter(rng: random.Random) -> SubscriptionFilter:
    user_id = rng.choice([None, None, ALICE, BOB, CAROL])
    service_name = rng.choice(
        [None, None, "netflix", "SPOTIFY", "Kinopoisk", "кинопоиск", "Яндекс Плюс", " "]
    )
    return SubscriptionFilter(user_id=user_id, service_name=service_name)


@pytest.mark.parametrize("seed", range(25))
def test_sql_and_in_memory_totals_agree(db_session, seed):
    rng = random.Random(seed)
    now_month = _random_month(rng)

    for _ in range(rng.randint(0, 30)):
        start = _random_month(rng)
        end = None if rng.random() < 0.4 else _shift(start, rng.randint(0, 30))
        _add(
            db_session,
            user_id=rng.choice([ALICE, BOB, CAROL]),
            service_name=rng.choice(SERVICE_NAMES),
            price=rng.randint(0, 5000),
            start_month=start,
            end_month=end,
        )

    rows = db_session.query(Subscription).all()

    for _ in range(10):
        period = _random_period(rng)
        flt = _random_filter(rng)

        expected = sum_by_period(rows, flt, period, now_month=now_month)
        sql_total = subscription_total_q(
            db_session, flt=flt, period=period, now_month=now_month
        )
        memory_total = subscription_total_in_memory(
            db_session, flt=flt, period=period, now_month=now_month
        )

        assert sql_total == expected
        assert memory_total == expected
