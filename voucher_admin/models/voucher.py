from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Float, Index, String, UniqueConstraint, Uuid, true
from sqlalchemy.orm import Mapped, mapped_column

from voucher_admin.models.base import Base, TimestampMixin
from voucher_admin.models.enums import DiscountType


class Voucher(Base, TimestampMixin):
    __tablename__ = "vouchers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    discount_amount: Mapped[float] = mapped_column(Float, nullable=False)
    discount_type: Mapped[DiscountType] = mapped_column(
        Enum(DiscountType, name="discount_type", values_callable=lambda enum: [item.value for item in enum]),
        nullable=False,
    )
    expiry_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    __table_args__ = (
        UniqueConstraint("code", name="uq_vouchers_code"),
        Index("ix_vouchers_created_at", "created_at"),
    )
