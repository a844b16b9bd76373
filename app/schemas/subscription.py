from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class SubscriptionCreate(BaseModel):
    service_name: str
    price: int
    user_id: UUID
    start_date: str
    end_date: str | None = None


class SubscriptionUpdate(BaseModel):
    service_name: str | None = None
    price: int | None = None
    start_date: str | None = None
    end_date: str | None = None


class SubscriptionRead(BaseModel):
    id: UUID
    service_name: str
    price: int
    user_id: UUID
    start_month: date
    end_month: date | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SubscriptionListRead(BaseModel):
    items: list[SubscriptionRead]
    page: int
    limit: int
    total: int


class SubscriptionSummaryRead(BaseModel):
    total_price: int
