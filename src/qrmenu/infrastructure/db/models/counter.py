from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from qrmenu.infrastructure.db.models.base import Base


class OrderCounterModel(Base):
    """One row per (restaurant, UTC day); ``count`` is the last issued order number."""

    __tablename__ = "order_counters"

    id: Mapped[str] = mapped_column(String(150), primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    day: Mapped[str] = mapped_column(String(10), nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
