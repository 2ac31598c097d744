from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from landscape.domain.quotes.statuses import default_quote_status
from landscape.infra.db import Base


class QuoteRequest(Base):
    __tablename__ = "quote_requests"

    quote_request_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_email: Mapped[str] = mapped_column(String(255), nullable=False)
    client_phone: Mapped[str | None] = mapped_column(String(64))
    service_name: Mapped[str] = mapped_column(String(255), nullable=False)
    project_type: Mapped[str] = mapped_column(String(32), nullable=False)
    zone: Mapped[str] = mapped_column(String(32), nullable=False)
    hours: Mapped[float] = mapped_column(Float, nullable=False)
    sqft: Mapped[float] = mapped_column(Float, nullable=False)
    visits: Mapped[int] = mapped_column(Integer, nullable=False)
    extras: Mapped[str | None] = mapped_column(String(512))
    min_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    max_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    breakdown_metadata: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=default_quote_status, index=True)
    message_to_client: Mapped[str | None] = mapped_column(Text)
    approved_min_cents: Mapped[int | None] = mapped_column(BigInteger)
    approved_max_cents: Mapped[int | None] = mapped_column(BigInteger)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    notifications: Mapped[list["AdminNotification"]] = relationship(
        "AdminNotification",
        back_populates="quote_request",
        cascade="all, delete-orphan",
    )


class AdminNotification(Base):
    __tablename__ = "admin_notifications"

    notification_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    quote_request_id: Mapped[str | None] = mapped_column(
        ForeignKey("quote_requests.quote_request_id", ondelete="CASCADE"),
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    quote_request: Mapped[QuoteRequest | None] = relationship("QuoteRequest", back_populates="notifications")
