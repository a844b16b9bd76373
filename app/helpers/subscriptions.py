from datetime import date, datetime, timezone
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlmodel import col

from ..models import Subscription
from .months import parse_month


def get_subscription(db: Session, *, subscription_id: UUID) -> Subscription | None:
    return (
        db.query(Subscription)
        .filter(col(Subscription.id) == subscription_id)
        .first()
    )


def get_subscription_or_404(db: Session, *, subscription_id: UUID) -> Subscription:
    sub = get_subscription(db, subscription_id=subscription_id)
    if sub is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="subscription not found",
        )
    return sub


def parse_uuid_or_400(value: str, *, detail: str) -> UUID:
    try:
        return UUID(value.strip())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


def parse_month_or_400(value: str) -> date:
    try:
        return parse_month(value)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        )


def parse_optional_month_or_400(value: str | None) -> date | None:
    """
    None or blank means "no bound"; anything else must be a valid month.
    """
    if value is None or not value.strip():
        return None
    return parse_month_or_400(value)


def validate_service_name(value: str) -> str:
    v = value.strip()
    if not v:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="service_name cannot be empty",
        )
    return v


def validate_price(value: int) -> int:
    if value < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="price cannot be negative",
        )
    return value


def ensure_end_not_before_start(start_month: date, end_month: date | None) -> None:
    if end_month is not None and end_month < start_month:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date cannot be before start_date",
        )


def resolve_page_limit(
    *,
    page: int,
    limit: int | None,
    default_limit: int,
    max_limit: int,
    max_page: int,
) -> tuple[int, int]:
    if page <= 0:
        page = 1
    if page > max_page:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="page is out of range",
        )
    if limit is None or limit <= 0:
        limit = default_limit
    return page, min(limit, max_limit)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
