from __future__ import annotations

import datetime as dt

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base_class import Base


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class TenantGreetingCounter(Base):
    """Per-tenant counter driving the rotating order confirmation greeting."""

    __tablename__ = "tenant_greeting_counter"

    tenant_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    message_counter: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow
    )
