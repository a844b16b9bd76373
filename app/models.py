# pyright: reportUnannotatedClassAttribute=false
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import CheckConstraint, Date, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class Subscription(Base):
    __tablename__ = "subscriptions"
    __table_args__ = (
        CheckConstraint(
            "length(trim(service_name)) > 0",
            name="ck_subscriptions_service_name_not_blank",
        ),
        CheckConstraint(
            "price >= 0",
            name="ck_subscriptions_price_non_negative",
        ),
        CheckConstraint(
            "end_month IS NULL OR end_month >= start_month",
            name="ck_subscriptions_end_after_start",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    service_name: Mapped[str] = mapped_column(
        String,
        nullable=False,
    )

    price: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        index=True,
        nullable=False,
    )

    start_month: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    end_month: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
