from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlmodel import col

from ..config import settings
from ..domain.enums import SummaryStrategy
from ..helpers.aggregation import QueryPeriod, SubscriptionFilter
from ..helpers.months import current_month
from ..helpers.subscriptions import (
    ensure_end_not_before_start,
    get_subscription_or_404,
    parse_month_or_400,
    parse_optional_month_or_400,
    parse_uuid_or_400,
    resolve_page_limit,
    utcnow,
    validate_price,
    validate_service_name,
)
from ..helpers.summary import resolve_subscription_total
from ..models import Subscription
from ..schemas.subscription import (
    SubscriptionCreate,
    SubscriptionListRead,
    SubscriptionRead,
    SubscriptionSummaryRead,
    SubscriptionUpdate,
)


def create_subscription(
    *,
    body: SubscriptionCreate,
    db: Session,
) -> SubscriptionRead:
    start_month = parse_month_or_400(body.start_date)
    end_month = parse_optional_month_or_400(body.end_date)
    ensure_end_not_before_start(start_month, end_month)

    sub = Subscription(
        service_name=validate_service_name(body.service_name),
        price=validate_price(body.price),
        user_id=body.user_id,
        start_month=start_month,
        end_month=end_month,
    )

    db.add(sub)
    db.commit()
    db.refresh(sub)

    return SubscriptionRead.model_validate(sub)


def list_subscriptions(
    *,
    db: Session,
    page: int = 1,
    limit: int | None = None,
) -> SubscriptionListRead:
    page, limit = resolve_page_limit(
        page=page,
        limit=limit,
        default_limit=settings.DEFAULT_PAGE_LIMIT,
        max_limit=settings.MAX_PAGE_LIMIT,
        max_page=settings.MAX_PAGE,
    )

    subs = (
        db.query(Subscription)
        .order_by(col(Subscription.created_at).desc())
        .limit(limit)
        .offset((page - 1) * limit)
        .all()
    )
    total = db.query(func.count(col(Subscription.id))).scalar() or 0

    return SubscriptionListRead(
        items=[SubscriptionRead.model_validate(s) for s in subs],
        page=page,
        limit=limit,
        total=total,
    )


def get_subscription(*, subscription_id: UUID, db: Session) -> SubscriptionRead:
    sub = get_subscription_or_404(db, subscription_id=subscription_id)
    return SubscriptionRead.model_validate(sub)


def update_subscription(
    *,
    subscription_id: UUID,
    body: SubscriptionUpdate,
    db: Session,
) -> SubscriptionRead:
    sub = get_subscription_or_404(db, subscription_id=subscription_id)
    # null only means something for end_date, where it reopens the subscription
    updates = {
        k: v
        for k, v in body.model_dump(exclude_unset=True).items()
        if v is not None or k == "end_date"
    }

    if not updates:
        return SubscriptionRead.model_validate(sub)

    if body.service_name is not None:
        sub.service_name = validate_service_name(body.service_name)

    if body.price is not None:
        sub.price = validate_price(body.price)

    start_month = sub.start_month
    if body.start_date is not None:
        start_month = parse_month_or_400(body.start_date)

    end_month = sub.end_month
    if "end_date" in updates:
        # explicit null or blank reopens the subscription
        end_month = parse_optional_month_or_400(body.end_date)

    ensure_end_not_before_start(start_month, end_month)
    sub.start_month = start_month
    sub.end_month = end_month
    sub.updated_at = utcnow()

    db.commit()
    db.refresh(sub)

    return SubscriptionRead.model_validate(sub)


def delete_subscription(*, subscription_id: UUID, db: Session) -> None:
    sub = get_subscription_or_404(db, subscription_id=subscription_id)
    db.delete(sub)
    db.commit()


def summarize_subscriptions(
    *,
    db: Session,
    start: str | None = None,
    end: str | None = None,
    user_id: str | None = None,
    service_name: str | None = None,
    now_utc: datetime | None = None,
    strategy: SummaryStrategy | None = None,
) -> SubscriptionSummaryRead:
    start_month = parse_optional_month_or_400(start)
    end_month = parse_optional_month_or_400(end)

    if start_month is not None and end_month is not None and end_month < start_month:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end must be after start",
        )

    owner_id = None
    if user_id is not None and user_id != "":
        owner_id = parse_uuid_or_400(user_id, detail="invalid user_id")

    total = resolve_subscription_total(
        db,
        flt=SubscriptionFilter(user_id=owner_id, service_name=service_name),
        period=QueryPeriod(start_month=start_month, end_month=end_month),
        now_month=current_month(now_utc),
        strategy=strategy or settings.SUMMARY_STRATEGY,
    )

    return SubscriptionSummaryRead(total_price=total)
