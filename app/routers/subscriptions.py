from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ..deps import get_db
from ..handlers import subscriptions as subscriptions_handler
from ..helpers.subscriptions import parse_uuid_or_400
from ..logging_setup import setup_logger
from ..schemas.subscription import (
    SubscriptionCreate,
    SubscriptionListRead,
    SubscriptionRead,
    SubscriptionSummaryRead,
    SubscriptionUpdate,
)

router = APIRouter(
    prefix="/subscriptions",
    tags=["subscriptions"],
)

logger = setup_logger()

DB = Annotated[Session, Depends(get_db)]


def _parse_subscription_id(value: str) -> UUID:
    return parse_uuid_or_400(value, detail="invalid id")


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post("", response_model=SubscriptionRead, status_code=201)
def create_subscription(
    body: SubscriptionCreate,
    db: DB,
    request: Request,
):
    sub = subscriptions_handler.create_subscription(body=body, db=db)

    logger.info(
        "subscription created",
        extra={
            "event_type": "subscription_created",
            "user_id": str(sub.user_id),
            "src_ip": _client_ip(request),
            "subscription_id": str(sub.id),
            "data": {
                "service_name": sub.service_name,
                "price": sub.price,
            },
        },
    )
    return sub


@router.get("", response_model=SubscriptionListRead, status_code=200)
def list_subscriptions(
    db: DB,
    page: int = 1,
    limit: int | None = None,
):
    return subscriptions_handler.list_subscriptions(db=db, page=page, limit=limit)


@router.get("/summary", response_model=SubscriptionSummaryRead, status_code=200)
def summarize_subscriptions(
    db: DB,
    start: str | None = None,
    end: str | None = None,
    user_id: str | None = None,
    service_name: str | None = None,
):
    summary = subscriptions_handler.summarize_subscriptions(
        db=db,
        start=start,
        end=end,
        user_id=user_id,
        service_name=service_name,
    )

    logger.info(
        "subscriptions summarized",
        extra={
            "event_type": "subscription_summary",
            "data": {
                "start": start,
                "end": end,
                "user_id": user_id,
                "service_name": service_name,
                "total_price": summary.total_price,
            },
        },
    )
    return summary


@router.get("/{subscription_id}", response_model=SubscriptionRead, status_code=200)
def get_subscription(
    subscription_id: str,
    db: DB,
):
    sub_id = _parse_subscription_id(subscription_id)
    return subscriptions_handler.get_subscription(subscription_id=sub_id, db=db)


@router.patch("/{subscription_id}", response_model=SubscriptionRead, status_code=200)
def update_subscription(
    subscription_id: str,
    body: SubscriptionUpdate,
    db: DB,
    request: Request,
):
    sub_id = _parse_subscription_id(subscription_id)
    sub = subscriptions_handler.update_subscription(
        subscription_id=sub_id, body=body, db=db
    )

    logger.info(
        "subscription updated",
        extra={
            "event_type": "subscription_updated",
            "user_id": str(sub.user_id),
            "src_ip": _client_ip(request),
            "subscription_id": str(sub.id),
            "data": {
                "changed_fields": list(body.model_dump(exclude_unset=True).keys()),
            },
        },
    )
    return sub


@router.delete("/{subscription_id}", status_code=204)
def delete_subscription(
    subscription_id: str,
    db: DB,
    request: Request,
):
    sub_id = _parse_subscription_id(subscription_id)
    subscriptions_handler.delete_subscription(subscription_id=sub_id, db=db)

    logger.info(
        "subscription deleted",
        extra={
            "event_type": "subscription_deleted",
            "src_ip": _client_ip(request),
            "subscription_id": str(sub_id),
        },
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
